"""oEmbed Provider - oEmbed 1.0 response library.

Validates oEmbed requests, authorizes content URLs against a provider
domain, resolves metadata through a pluggable backend, and renders
oEmbed 1.0 JSON or XML responses.

Usage:
    >>> from oembed_provider import PatternMetadataBackend, ProviderConfig, handle_oembed_request
    >>>
    >>> config = ProviderConfig(provider_name="My Site", provider_url="https://mysite.com",
    ...                         provider_domain="mysite.com")
    >>> response = await handle_oembed_request(
    ...     {"url": "https://mysite.com/video/42", "maxwidth": "640"},
    ...     config,
    ...     PatternMetadataBackend(),
    ... )
    >>> print(response.status_code, response.body)
"""

__version__ = "1.0.0"

# Public library API exports
from oembed_provider.core.authorizer import AuthorizationResult, authorize_url
from oembed_provider.core.backend import HttpMetadataBackend, MetadataBackend, PatternMetadataBackend
from oembed_provider.core.builder import build_response, constrain_dimension
from oembed_provider.core.config import ProviderConfig
from oembed_provider.core.constants import ErrorCode
from oembed_provider.core.formatter import FormattedResponse, format_error, format_response
from oembed_provider.core.handler import handle_oembed_request
from oembed_provider.core.html import (
    generate_gallery_html,
    generate_responsive_wrapper,
    generate_rich_html,
    generate_video_html,
    generate_widget_html,
)
from oembed_provider.core.metadata import ContentMetadata, GalleryImage
from oembed_provider.core.schemas import (
    ErrorResponse,
    LinkResponse,
    OembedResponse,
    PhotoResponse,
    RichResponse,
    VideoResponse,
)
from oembed_provider.core.validator import sanitize_params, validate_params

# Export exceptions for library users
from oembed_provider.core.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
    ConfigurationError,
    ContentNotFoundError,
    MissingRequiredFieldError,
    OembedError,
)

__all__ = [
    "__version__",
    # Configuration
    "ProviderConfig",
    # Pipeline
    "handle_oembed_request",
    "validate_params",
    "sanitize_params",
    "authorize_url",
    "AuthorizationResult",
    "build_response",
    "constrain_dimension",
    "format_response",
    "format_error",
    "FormattedResponse",
    # HTML generation
    "generate_video_html",
    "generate_rich_html",
    "generate_widget_html",
    "generate_gallery_html",
    "generate_responsive_wrapper",
    # Models
    "ContentMetadata",
    "GalleryImage",
    "OembedResponse",
    "PhotoResponse",
    "VideoResponse",
    "RichResponse",
    "LinkResponse",
    "ErrorResponse",
    "ErrorCode",
    # Backends
    "MetadataBackend",
    "PatternMetadataBackend",
    "HttpMetadataBackend",
    # Exceptions
    "OembedError",
    "ConfigurationError",
    "MissingRequiredFieldError",
    "ContentNotFoundError",
    "BackendError",
    "BackendUnreachableError",
    "BackendTimeoutError",
]
