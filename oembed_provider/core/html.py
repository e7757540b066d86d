"""Embed markup generation for video, rich, widget and gallery content.

Generators never raise: unusable input falls back to a fixed placeholder.
"""

from oembed_provider.core.constants import DEFAULT_DIMENSIONS, IFRAME_ALLOW, IFRAME_SANDBOX
from oembed_provider.core.escaping import escape_attribute, escape_html
from oembed_provider.core.metadata import ContentMetadata
from oembed_provider.core.urls import sanitize_url

VIDEO_NOT_AVAILABLE = '<div class="video-error">Video content not available</div>'
WIDGET_NOT_AVAILABLE = '<div class="widget-error">Widget content not available</div>'
GALLERY_NOT_AVAILABLE = '<div class="gallery-error">No images available</div>'

DEFAULT_ASPECT_RATIO = 56.25


def _size(metadata: ContentMetadata, width: int | None, height: int | None, kind: str) -> tuple[int, int]:
    default_width, default_height = DEFAULT_DIMENSIONS[kind]
    return (width or metadata.width or default_width, height or metadata.height or default_height)


def _iframe(src: str, width: int, height: int, allow_fullscreen: bool) -> str:
    attrs = [
        f'src="{escape_attribute(src)}"',
        f'width="{width}"',
        f'height="{height}"',
        'frameborder="0"',
    ]
    if allow_fullscreen:
        attrs.extend(["allowfullscreen", f'allow="{IFRAME_ALLOW}"'])
    attrs.append(f'sandbox="{IFRAME_SANDBOX}"')
    return f"<iframe {' '.join(attrs)}></iframe>"


def generate_video_html(metadata: ContentMetadata, width: int | None = None, height: int | None = None) -> str:
    """Sandboxed video iframe for ``embed_url`` (or ``url``)."""
    safe_width, safe_height = _size(metadata, width, height, "video")
    src = sanitize_url(metadata.embed_url or metadata.url)
    if not src:
        return VIDEO_NOT_AVAILABLE
    return _iframe(src, safe_width, safe_height, allow_fullscreen=True)


def generate_rich_html(metadata: ContentMetadata, width: int | None = None, height: int | None = None) -> str:
    """
    Markup for rich content.

    Backend-supplied ``html`` is returned verbatim; otherwise the escaped
    ``content`` is wrapped in a bordered, scrollable container.
    """
    if metadata.html:
        return metadata.html
    safe_width, safe_height = _size(metadata, width, height, "rich")
    content = escape_html(metadata.content or "Rich content")
    return (
        f'<div class="rich-content" style="width:{safe_width}px;height:{safe_height}px;'
        f'border:1px solid #ddd;padding:10px;overflow:auto;">{content}</div>'
    )


def generate_widget_html(metadata: ContentMetadata, width: int | None = None, height: int | None = None) -> str:
    """Sandboxed widget iframe, or a styled container around supplied markup."""
    safe_width, safe_height = _size(metadata, width, height, "widget")
    widget_url = metadata.widget_url or metadata.embed_url
    if widget_url:
        src = sanitize_url(widget_url)
        if not src:
            return WIDGET_NOT_AVAILABLE
        return _iframe(src, safe_width, safe_height, allow_fullscreen=False)

    content = escape_html(metadata.html or metadata.content or "Interactive widget")
    return (
        f'<div class="widget-container" style="width:{safe_width}px;height:{safe_height}px;'
        f'border:1px solid #ccc;border-radius:4px;overflow:hidden;">{content}</div>'
    )


def generate_gallery_html(metadata: ContentMetadata, width: int | None = None, height: int | None = None) -> str:
    """Scrollable image gallery; images whose URL fails sanitization are skipped."""
    safe_width, safe_height = _size(metadata, width, height, "gallery")

    elements = []
    for index, image in enumerate(metadata.images, start=1):
        src = sanitize_url(image.url)
        if not src:
            continue
        alt = escape_html(image.alt or f"Image {index}")
        elements.append(
            f'<img src="{escape_attribute(src)}" alt="{alt}" style="max-width:100%;height:auto;margin:2px;">'
        )

    if not elements:
        return GALLERY_NOT_AVAILABLE
    return (
        f'<div class="photo-gallery" style="width:{safe_width}px;max-height:{safe_height}px;'
        f'overflow:auto;border:1px solid #ddd;padding:5px;">{"".join(elements)}</div>'
    )


def generate_responsive_wrapper(embed_html: str, width: int | None = None, height: int | None = None) -> str:
    """Wrap embed markup in a padding-bottom aspect-ratio box (16:9 when unknown)."""
    ratio = height / width * 100 if width and height else DEFAULT_ASPECT_RATIO
    return (
        f'<div class="responsive-embed" style="position:relative;padding-bottom:{ratio:g}%;'
        f'height:0;overflow:hidden;"><div style="position:absolute;top:0;left:0;'
        f'width:100%;height:100%;">{embed_html}</div></div>'
    )
