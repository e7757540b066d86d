"""Content metadata backends.

A backend answers one question: what is the content behind this URL. The
request handler only depends on the :class:`MetadataBackend` protocol.
"""

import asyncio
import json
import logging
import random
from typing import Protocol

import httpx
from pydantic import ValidationError

from oembed_provider.core.escaping import escape_html
from oembed_provider.core.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
    ContentNotFoundError,
)
from oembed_provider.core.metadata import ContentMetadata
from oembed_provider.core.parser import ParsedContentUrl, parse_content_url

logger = logging.getLogger(__name__)


class MetadataBackend(Protocol):
    """Source of content metadata for authorized URLs."""

    async def get_content_metadata(
        self, url: str, maxwidth: int | None = None, maxheight: int | None = None
    ) -> ContentMetadata: ...


class PatternMetadataBackend:
    """Derive metadata from the content URL itself.

    The content type and ID are inferred from the URL path, and every
    asset URL is built on the content URL's origin. Useful as a default
    and for local development; real deployments plug in their own backend.
    """

    async def get_content_metadata(
        self, url: str, maxwidth: int | None = None, maxheight: int | None = None
    ) -> ContentMetadata:
        parsed = parse_content_url(url)
        if parsed is None:
            logger.warning("Could not parse content URL %s", url)
            return ContentMetadata(type="link", title="Content Not Available", cache_age=300)

        logger.debug("Resolved %s to %s content %s", url, parsed.content_type, parsed.content_id)
        builders = {
            "video": self._video,
            "photo": self._photo,
            "rich": self._rich,
        }
        build = builders.get(parsed.content_type, self._link)
        return build(parsed, maxwidth, maxheight)

    @staticmethod
    def _video(parsed: ParsedContentUrl, maxwidth: int | None, maxheight: int | None) -> ContentMetadata:
        return ContentMetadata(
            type="video",
            title=f"Video Content {parsed.content_id}",
            author_name="Content Creator",
            author_url=f"{parsed.origin}/creator",
            width=min(maxwidth or 1920, 1920),
            height=min(maxheight or 1080, 1080),
            embed_url=f"{parsed.origin}/embed/{parsed.content_id}",
            thumbnail_url=f"{parsed.origin}/thumb/{parsed.content_id}.jpg",
            thumbnail_width=320,
            thumbnail_height=180,
            cache_age=3600,
        )

    @staticmethod
    def _photo(parsed: ParsedContentUrl, maxwidth: int | None, maxheight: int | None) -> ContentMetadata:
        return ContentMetadata(
            type="photo",
            title=f"Photo {parsed.content_id}",
            author_name="Photographer",
            author_url=f"{parsed.origin}/photographer",
            url=f"{parsed.origin}/images/{parsed.content_id}.jpg",
            width=min(maxwidth or 1200, 1200),
            height=min(maxheight or 800, 800),
            cache_age=7200,
        )

    @staticmethod
    def _rich(parsed: ParsedContentUrl, maxwidth: int | None, maxheight: int | None) -> ContentMetadata:
        return ContentMetadata(
            type="rich",
            title=f"Rich Content {parsed.content_id}",
            author_name="Content Author",
            author_url=f"{parsed.origin}/author",
            width=min(maxwidth or 500, 500),
            height=min(maxheight or 300, 300),
            html=f'<div class="rich-content">Rich interactive content for {escape_html(parsed.content_id)}</div>',
            cache_age=1800,
        )

    @staticmethod
    def _link(parsed: ParsedContentUrl, maxwidth: int | None, maxheight: int | None) -> ContentMetadata:
        return ContentMetadata(
            type="link",
            title=f"Link Content {parsed.content_id}",
            author_name="Content Publisher",
            author_url=f"{parsed.origin}/publisher",
            cache_age=3600,
        )


class HttpMetadataBackend:
    """Fetch metadata as JSON from an HTTP content service.

    Issues ``GET {base_url}/content?url=...&maxwidth=...&maxheight=...``.
    Unreachable and timed-out attempts are retried with exponential backoff
    and jitter; HTTP error statuses are not retried.

    Args:
        base_url: Base URL of the content service
        timeout_s: Total timeout per attempt in seconds
        connect_timeout_s: Connection timeout per attempt in seconds
        max_retries: Retries after the first attempt
        base_delay_s: Delay before the first retry
        max_delay_s: Upper bound for any single delay
        backoff_factor: Multiplier applied per retry
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 5.0,
        connect_timeout_s: float = 2.0,
        max_retries: int = 2,
        base_delay_s: float = 0.1,
        max_delay_s: float = 1.0,
        backoff_factor: float = 2.0,
    ):
        self.base_url = base_url
        self.timeout = httpx.Timeout(timeout_s, connect=connect_timeout_s)
        self.max_retries = max_retries
        self.base_delay_s = base_delay_s
        self.max_delay_s = max_delay_s
        self.backoff_factor = backoff_factor

    def _retry_delay(self, attempt: int) -> float:
        delay = min(self.base_delay_s * self.backoff_factor**attempt, self.max_delay_s)
        return delay * (0.5 + random.random() * 0.5)

    async def _fetch(self, params: dict[str, str | int]) -> httpx.Response:
        url = f"{self.base_url.rstrip('/')}/content"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                logger.debug(f"Fetching content metadata from {url}")
                return await client.get(url, params=params, headers={"Accept": "application/json"})

        except (httpx.ConnectError, httpx.NetworkError) as e:
            logger.error(f"Connection error to backend {url}: {e}")
            raise BackendUnreachableError(
                f"Connection to backend failed: {str(e)}",
                backend=self.base_url,
            ) from e

        except httpx.TimeoutException as e:
            logger.error(f"Timeout error to backend {url}: {e}")
            raise BackendTimeoutError(
                "Metadata backend did not respond in time",
                backend=self.base_url,
            ) from e

    async def _fetch_with_retry(self, params: dict[str, str | int]) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return await self._fetch(params)
            except (BackendUnreachableError, BackendTimeoutError):
                if attempt >= self.max_retries:
                    raise
                delay = self._retry_delay(attempt)
                attempt += 1
                logger.warning("Retrying metadata fetch (attempt %d) in %.3fs", attempt + 1, delay)
                await asyncio.sleep(delay)

    async def get_content_metadata(
        self, url: str, maxwidth: int | None = None, maxheight: int | None = None
    ) -> ContentMetadata:
        """
        Fetch and normalize metadata for a content URL.

        Raises:
            ContentNotFoundError: If the backend answers 404
            BackendUnreachableError: If every attempt failed to connect
            BackendTimeoutError: If every attempt timed out
            BackendError: On other error statuses or an unusable body
        """
        params: dict[str, str | int] = {"url": url}
        if maxwidth is not None:
            params["maxwidth"] = maxwidth
        if maxheight is not None:
            params["maxheight"] = maxheight

        response = await self._fetch_with_retry(params)

        if response.status_code == 404:
            raise ContentNotFoundError("Backend has no content for URL", url=url)
        if response.status_code >= 400:
            raise BackendError(
                f"Backend returned HTTP {response.status_code}",
                backend=self.base_url,
            )

        try:
            return ContentMetadata.model_validate(response.json())
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.error(f"Failed to parse backend response: {e}")
            raise BackendError("Backend returned an unexpected response structure", backend=self.base_url) from e
