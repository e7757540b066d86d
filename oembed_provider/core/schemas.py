"""oEmbed response and error schemas.

Responses form a closed union over the four oEmbed content types; each
variant declares the fields its type requires, so a response missing one
cannot be constructed.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from oembed_provider.core.constants import OEMBED_VERSION


class BaseOembedResponse(BaseModel):
    """Fields shared by every oEmbed content type, in serialization order."""

    model_config = ConfigDict(frozen=True)

    version: Literal["1.0"] = OEMBED_VERSION
    type: str
    title: str | None = None
    author_name: str | None = None
    author_url: str | None = None
    provider_name: str
    provider_url: str
    cache_age: int
    thumbnail_url: str | None = None
    thumbnail_width: int | None = None
    thumbnail_height: int | None = None

    @model_validator(mode="after")
    def thumbnail_all_or_none(self) -> "BaseOembedResponse":
        """Thumbnail dimensions are only allowed alongside a thumbnail URL."""
        if self.thumbnail_url is None and (
            self.thumbnail_width is not None or self.thumbnail_height is not None
        ):
            raise ValueError("thumbnail_width/thumbnail_height require thumbnail_url")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict, leaving out absent optional fields."""
        return self.model_dump(exclude_none=True)


class PhotoResponse(BaseOembedResponse):
    type: Literal["photo"] = "photo"
    url: str = Field(min_length=1)
    width: int = Field(ge=1)
    height: int = Field(ge=1)


class VideoResponse(BaseOembedResponse):
    type: Literal["video"] = "video"
    html: str = Field(min_length=1)
    width: int = Field(ge=1)
    height: int = Field(ge=1)


class RichResponse(BaseOembedResponse):
    type: Literal["rich"] = "rich"
    html: str = Field(min_length=1)
    width: int = Field(ge=1)
    height: int = Field(ge=1)


class LinkResponse(BaseOembedResponse):
    type: Literal["link"] = "link"


OembedResponse = Annotated[
    Union[PhotoResponse, VideoResponse, RichResponse, LinkResponse],
    Field(discriminator="type"),
]


class ErrorDetail(BaseModel):
    """Error detail structure returned to oEmbed consumers."""

    code: str = Field(description="Error code identifier")
    message: str = Field(description="Human-readable error message")
    timestamp: str = Field(description="ISO-8601 time the error was produced")
    request_id: str = Field(serialization_alias="requestId", description="Identifier for support requests")
    details: str | None = Field(default=None, description="Optional extra context")


class ErrorResponse(BaseModel):
    """Structured error response format."""

    error: ErrorDetail = Field(description="Error details")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
