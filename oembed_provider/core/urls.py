"""Parsing and canonicalization of http(s) URLs."""

from dataclasses import dataclass
from urllib.parse import urlsplit

from oembed_provider.core.constants import ALLOWED_SCHEMES, MAX_URL_LENGTH


@dataclass(frozen=True)
class ParsedUrl:
    """An http(s) URL split into the parts the provider cares about."""

    scheme: str
    hostname: str
    port: int | None
    pathname: str
    query: str
    fragment: str

    @property
    def host(self) -> str:
        """Hostname plus explicit port, IPv6 literals bracketed."""
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        if self.port is not None:
            host = f"{host}:{self.port}"
        return host

    @property
    def canonical(self) -> str:
        """Re-serialized URL without credentials."""
        url = f"{self.scheme}://{self.host}{self.pathname}"
        if self.query:
            url = f"{url}?{self.query}"
        if self.fragment:
            url = f"{url}#{self.fragment}"
        return url


class UrlError(ValueError):
    """Raised when a string is not an acceptable http(s) URL."""

    pass


def parse_http_url(url: object) -> ParsedUrl:
    """
    Parse an http or https URL.

    Args:
        url: Candidate URL string

    Returns:
        ParsedUrl with a lower-cased scheme and hostname

    Raises:
        UrlError: If the value is not a string, is too long, cannot be parsed,
            uses a scheme other than http/https, or has no hostname
    """
    if not isinstance(url, str) or not url:
        raise UrlError("URL must be a non-empty string")
    if len(url) > MAX_URL_LENGTH:
        raise UrlError("URL exceeds maximum length")

    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as e:
        raise UrlError("Invalid URL format") from e

    if not parts.scheme or not parts.netloc:
        raise UrlError("Invalid URL format")
    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise UrlError("Only HTTP and HTTPS protocols are allowed")
    if not parts.hostname:
        raise UrlError("URL must have a valid hostname")

    return ParsedUrl(
        scheme=scheme,
        hostname=parts.hostname.lower(),
        port=port,
        pathname=parts.path or "/",
        query=parts.query,
        fragment=parts.fragment,
    )


def sanitize_url(url: object) -> str:
    """Return the canonical form of an http(s) URL, or ``""`` if it is unusable."""
    try:
        return parse_http_url(url).canonical
    except UrlError:
        return ""
