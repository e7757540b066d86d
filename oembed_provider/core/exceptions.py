"""Custom exceptions for the oEmbed provider core library."""

from oembed_provider.core.constants import ErrorCode


class OembedError(Exception):
    """Base exception for all provider errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(OembedError):
    """Raised when there is a configuration problem."""

    pass


class MissingRequiredFieldError(OembedError):
    """Raised when backend metadata lacks a field its content type requires."""

    code = ErrorCode.MISSING_REQUIRED_FIELD

    def __init__(self, content_type: str, field: str):
        self.content_type = content_type
        self.field = field
        super().__init__(f"{content_type.capitalize()} type requires {field} field")


class ContentNotFoundError(OembedError):
    """Raised when the backend has no content for the requested URL."""

    code = ErrorCode.CONTENT_NOT_FOUND

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class BackendError(OembedError):
    """Base class for metadata backend failures."""

    code = ErrorCode.BACKEND_ERROR

    def __init__(self, message: str, backend: str | None = None):
        self.backend = backend
        super().__init__(message)


class BackendUnreachableError(BackendError):
    """Raised when the metadata backend is unreachable."""

    pass


class BackendTimeoutError(BackendError):
    """Raised when a request to the metadata backend times out."""

    pass
