"""Content URL authorization against the configured provider domain."""

import logging
from dataclasses import dataclass

from oembed_provider.core.config import ProviderConfig
from oembed_provider.core.constants import ERROR_MESSAGES, ErrorCode
from oembed_provider.core.urls import UrlError, parse_http_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of :func:`authorize_url`.

    On success ``url`` is the canonical content URL. On failure ``code`` and
    ``error`` describe the rejection and ``details`` may add context.
    """

    is_valid: bool
    url: str | None = None
    hostname: str | None = None
    pathname: str | None = None
    error: str | None = None
    code: ErrorCode | None = None
    details: str | None = None


def _reject(code: ErrorCode, details: str | None = None) -> AuthorizationResult:
    return AuthorizationResult(is_valid=False, error=ERROR_MESSAGES[code], code=code, details=details)


def authorize_url(url: str, config: ProviderConfig) -> AuthorizationResult:
    """
    Check that a content URL is well formed and belongs to the provider domain.

    The hostname must end with the configured domain, so subdomains are
    accepted. Checks short-circuit on the first failure.

    Args:
        url: Decoded content URL from the request
        config: Provider configuration holding the allowed domain

    Returns:
        AuthorizationResult; ``code`` is MALFORMED_URL, MISSING_PROVIDER_DOMAIN
        or UNAUTHORIZED_DOMAIN on failure
    """
    try:
        parsed = parse_http_url(url)
    except UrlError as e:
        return _reject(ErrorCode.MALFORMED_URL, details=str(e))

    provider_domain = (config.provider_domain or "").strip().lower()
    if not provider_domain:
        logger.error("Provider domain is not configured")
        return _reject(ErrorCode.MISSING_PROVIDER_DOMAIN)

    if not parsed.hostname.endswith(provider_domain):
        return _reject(
            ErrorCode.UNAUTHORIZED_DOMAIN,
            details=f"URL hostname {parsed.hostname} does not match provider domain {provider_domain}",
        )

    return AuthorizationResult(
        is_valid=True,
        url=parsed.canonical,
        hostname=parsed.hostname,
        pathname=parsed.pathname,
    )
