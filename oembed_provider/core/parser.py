"""Content URL parsing: content ID extraction and content type inference."""

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl

from oembed_provider.core.urls import UrlError, parse_http_url

_ID_QUERY_KEYS = ("id", "v", "video", "content")
_ID_PREFIX_SEGMENTS = ("video", "content", "post", "article", "media", "embed")
_SLUG_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)

_VIDEO_MARKERS = ("/video/", "/watch/", "/embed/")
_PHOTO_MARKERS = ("/photo/", "/image/", "/gallery/")
_RICH_MARKERS = ("/widget/", "/interactive/", "/app/", "/content/")


@dataclass(frozen=True)
class ParsedContentUrl:
    """A content URL broken down for metadata lookup."""

    url: str
    scheme: str
    host: str
    pathname: str
    path_segments: list[str] = field(default_factory=list)
    query: dict[str, str] = field(default_factory=dict)
    content_id: str | None = None
    content_type: str = "link"

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.host}"


def extract_content_id(pathname: str, query: dict[str, str]) -> str | None:
    """Find the content identifier in the query string or path."""
    for key in _ID_QUERY_KEYS:
        if query.get(key):
            return query[key]

    segments = [segment for segment in pathname.split("/") if segment]
    for segment, following in zip(segments, segments[1:]):
        if segment in _ID_PREFIX_SEGMENTS:
            return following

    if segments and _SLUG_RE.match(segments[-1]):
        return segments[-1]
    return None


def infer_content_type(pathname: str, query: dict[str, str]) -> str:
    """Guess the oEmbed content type from URL path markers."""
    path = pathname.lower()
    if any(marker in path for marker in _VIDEO_MARKERS) or query.get("v") or query.get("video"):
        return "video"
    if any(marker in path for marker in _PHOTO_MARKERS) or _IMAGE_EXTENSION_RE.search(path):
        return "photo"
    if any(marker in path for marker in _RICH_MARKERS):
        return "rich"
    return "link"


def parse_content_url(url: str) -> ParsedContentUrl | None:
    """
    Parse a content URL into its lookup parts.

    Args:
        url: Authorized content URL

    Returns:
        ParsedContentUrl, or None if the URL is not a usable http(s) URL
    """
    try:
        parsed = parse_http_url(url)
    except UrlError:
        return None

    query = dict(parse_qsl(parsed.query))
    return ParsedContentUrl(
        url=url,
        scheme=parsed.scheme,
        host=parsed.host,
        pathname=parsed.pathname,
        path_segments=[segment for segment in parsed.pathname.split("/") if segment],
        query=query,
        content_id=extract_content_id(parsed.pathname, query),
        content_type=infer_content_type(parsed.pathname, query),
    )
