"""Canonical content metadata as supplied by a metadata backend.

Backends describe content with loosely named fields (``author`` vs
``author_name``, ``embedUrl`` vs ``embed_url``, ...). All aliases are
resolved here, once, so the rest of the core reads a single shape.
Backend markup, display text and URLs are sanitized at the same point.
"""

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from oembed_provider.core.constants import MAX_CACHE_AGE
from oembed_provider.core.sanitizer import sanitize_html, sanitize_text
from oembed_provider.core.urls import UrlError, parse_http_url

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = _CONTROL_CHARS_RE.sub("", str(value)).strip()
    return text or None


def _positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer() or number <= 0:
        return None
    return int(number)


class GalleryImage(BaseModel):
    """One image of a photo gallery."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    url: str | None = Field(default=None, validation_alias=AliasChoices("url", "src"))
    alt: str | None = Field(default=None, validation_alias=AliasChoices("alt", "title"))

    @field_validator("url", "alt", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> str | None:
        return _clean_text(v)


class ContentMetadata(BaseModel):
    """Description of a piece of content, owned by the metadata backend."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str | None = None
    title: str | None = None
    author_name: str | None = Field(default=None, validation_alias=AliasChoices("author_name", "author"))
    author_url: str | None = Field(default=None, validation_alias=AliasChoices("author_url", "authorUrl"))
    width: int | None = None
    height: int | None = None
    url: str | None = None
    html: str | None = None
    embed_url: str | None = Field(default=None, validation_alias=AliasChoices("embed_url", "embedUrl"))
    widget_url: str | None = Field(default=None, validation_alias=AliasChoices("widget_url", "widgetUrl"))
    content: str | None = None
    thumbnail_url: str | None = Field(default=None, validation_alias=AliasChoices("thumbnail_url", "thumbnail"))
    thumbnail_width: int | None = None
    thumbnail_height: int | None = None
    cache_age: int | None = None
    images: list[GalleryImage] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def flatten_thumbnail(cls, data: Any) -> Any:
        """Accept ``thumbnail`` given as an object with url/src, width and height."""
        if not isinstance(data, dict) or not isinstance(data.get("thumbnail"), dict):
            return data
        data = dict(data)
        thumb = data.pop("thumbnail")
        data.setdefault("thumbnail_url", thumb.get("url") or thumb.get("src"))
        data.setdefault("thumbnail_width", thumb.get("width"))
        data.setdefault("thumbnail_height", thumb.get("height"))
        return data

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> str | None:
        text = _clean_text(v)
        return text.lower() if text else None

    @field_validator("embed_url", "widget_url", "content", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> str | None:
        return _clean_text(v)

    @field_validator("title", "author_name", mode="before")
    @classmethod
    def display_text(cls, v: Any) -> str | None:
        """Markup is stripped from display text."""
        text = _clean_text(v)
        if text is None:
            return None
        return sanitize_text(text) or None

    @field_validator("url", "author_url", "thumbnail_url", mode="before")
    @classmethod
    def http_url(cls, v: Any) -> str | None:
        """Kept only when it is an http(s) URL."""
        text = _clean_text(v)
        if not text:
            return None
        try:
            parse_http_url(text)
        except UrlError:
            return None
        return text

    @field_validator("html", mode="before")
    @classmethod
    def safe_html(cls, v: Any) -> str | None:
        """Pre-built markup is kept with active content removed."""
        if v is None or not str(v).strip():
            return None
        return sanitize_html(str(v)) or None

    @field_validator("width", "height", "thumbnail_width", "thumbnail_height", mode="before")
    @classmethod
    def positive_dimension(cls, v: Any) -> int | None:
        return _positive_int(v)

    @field_validator("cache_age", mode="before")
    @classmethod
    def bounded_cache_age(cls, v: Any) -> int | None:
        age = _positive_int(v)
        return min(age, MAX_CACHE_AGE) if age is not None else None

    @field_validator("images", mode="before")
    @classmethod
    def image_list(cls, v: Any) -> list:
        if not isinstance(v, (list, tuple)):
            return []
        return [image for image in v if isinstance(image, (dict, GalleryImage))]
