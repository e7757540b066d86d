"""oEmbed response construction from backend content metadata."""

import logging
from typing import Any

from oembed_provider.core.config import ProviderConfig
from oembed_provider.core.constants import (
    CONTENT_TYPES,
    DEFAULT_CACHE_AGE,
    DEFAULT_CACHE_AGES,
    DEFAULT_DIMENSIONS,
    FALLBACK_CONTENT_TYPE,
)
from oembed_provider.core.exceptions import MissingRequiredFieldError
from oembed_provider.core.html import generate_rich_html, generate_video_html
from oembed_provider.core.metadata import ContentMetadata
from oembed_provider.core.schemas import (
    BaseOembedResponse,
    LinkResponse,
    PhotoResponse,
    RichResponse,
    VideoResponse,
)

logger = logging.getLogger(__name__)


def constrain_dimension(original: int | None, limit: int | None) -> int | None:
    """
    Cap a dimension at a caller-supplied maximum.

    Width and height are capped independently; the aspect ratio is not
    recomputed.

    Returns:
        ``limit`` when there is no original (None if neither exists),
        ``original`` when there is no limit, else the smaller of the two
    """
    if not original:
        return limit or None
    if not limit:
        return original
    return min(original, limit)


def _resolve_type(metadata: ContentMetadata) -> str:
    if metadata.type in CONTENT_TYPES:
        return metadata.type
    if metadata.type:
        logger.debug("Unrecognized content type %r, treating as rich", metadata.type)
    return FALLBACK_CONTENT_TYPE


def _common_fields(metadata: ContentMetadata, content_type: str, config: ProviderConfig) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "provider_name": config.provider_name,
        "provider_url": config.provider_url,
        "cache_age": (
            metadata.cache_age
            if metadata.cache_age is not None
            else DEFAULT_CACHE_AGES.get(content_type, DEFAULT_CACHE_AGE)
        ),
        "title": metadata.title,
        "author_name": metadata.author_name,
        "author_url": metadata.author_url,
    }
    # Thumbnail dimensions only travel with a thumbnail URL
    if metadata.thumbnail_url:
        fields["thumbnail_url"] = metadata.thumbnail_url
        fields["thumbnail_width"] = metadata.thumbnail_width
        fields["thumbnail_height"] = metadata.thumbnail_height
    return fields


def _dimensions(
    metadata: ContentMetadata, content_type: str, maxwidth: int | None, maxheight: int | None
) -> tuple[int, int]:
    default_width, default_height = DEFAULT_DIMENSIONS[content_type]
    width = constrain_dimension(metadata.width, maxwidth) or default_width
    height = constrain_dimension(metadata.height, maxheight) or default_height
    return width, height


def build_response(
    metadata: ContentMetadata,
    config: ProviderConfig,
    maxwidth: int | None = None,
    maxheight: int | None = None,
) -> BaseOembedResponse:
    """
    Build a type-specific oEmbed response from content metadata.

    Unknown or missing content types are built as ``rich``. Identical input
    always yields an identical response.

    Args:
        metadata: Normalized metadata from the backend
        config: Provider configuration (name and URL)
        maxwidth: Optional caller width limit
        maxheight: Optional caller height limit

    Returns:
        PhotoResponse, VideoResponse, RichResponse or LinkResponse

    Raises:
        MissingRequiredFieldError: If a photo has no ``url`` or a video has
            neither ``html`` nor ``embed_url``
    """
    content_type = _resolve_type(metadata)
    common = _common_fields(metadata, content_type, config)

    if content_type == "link":
        return LinkResponse(**common)

    if content_type == "photo":
        if not metadata.url:
            raise MissingRequiredFieldError("photo", "url")
        width, height = _dimensions(metadata, "photo", maxwidth, maxheight)
        return PhotoResponse(**common, url=metadata.url, width=width, height=height)

    if content_type == "video":
        if not metadata.html and not metadata.embed_url:
            raise MissingRequiredFieldError("video", "embedUrl or html")
        width, height = _dimensions(metadata, "video", maxwidth, maxheight)
        html = metadata.html or generate_video_html(metadata, width, height)
        return VideoResponse(**common, html=html, width=width, height=height)

    width, height = _dimensions(metadata, "rich", maxwidth, maxheight)
    html = metadata.html or generate_rich_html(metadata, width, height)
    return RichResponse(**common, html=html, width=width, height=height)
