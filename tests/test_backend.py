"""Tests for content metadata backends."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from oembed_provider import HttpMetadataBackend, PatternMetadataBackend
from oembed_provider.core.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
    ContentNotFoundError,
)

BASE_URL = "http://127.0.0.1:9000"


@pytest.fixture
def backend():
    return HttpMetadataBackend(BASE_URL, max_retries=2)


# ---------------------------------------------------------------------------
# Pattern backend
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pattern_video():
    metadata = await PatternMetadataBackend().get_content_metadata("https://mybusiness.com/video/123", 800, 600)

    assert metadata.type == "video"
    assert metadata.title == "Video Content 123"
    assert metadata.embed_url == "https://mybusiness.com/embed/123"
    assert metadata.thumbnail_url == "https://mybusiness.com/thumb/123.jpg"
    assert (metadata.width, metadata.height) == (800, 600)


@pytest.mark.asyncio
async def test_pattern_photo_capped():
    metadata = await PatternMetadataBackend().get_content_metadata("https://mybusiness.com/photo/sunset", 2000)

    assert metadata.type == "photo"
    assert metadata.url == "https://mybusiness.com/images/sunset.jpg"
    assert metadata.width == 1200


@pytest.mark.asyncio
async def test_pattern_rich_and_link():
    rich = await PatternMetadataBackend().get_content_metadata("https://mybusiness.com/widget/poll")
    assert rich.type == "rich"
    assert rich.html == '<div class="rich-content">Rich interactive content for poll</div>'
    assert rich.content is None

    link = await PatternMetadataBackend().get_content_metadata("https://mybusiness.com/about")
    assert link.type == "link"
    assert link.author_url == "https://mybusiness.com/publisher"


@pytest.mark.asyncio
async def test_pattern_unparseable_url():
    metadata = await PatternMetadataBackend().get_content_metadata("not a url")
    assert metadata.type == "link"
    assert metadata.title == "Content Not Available"
    assert metadata.cache_age == 300


# ---------------------------------------------------------------------------
# HTTP backend
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_http_success(backend):
    mock_response = httpx.Response(
        200,
        json={"type": "video", "title": "Clip", "embedUrl": "https://mybusiness.com/embed/1", "author": "Jane"},
    )

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response) as mock_get:
        metadata = await backend.get_content_metadata("https://mybusiness.com/video/1", maxwidth=640)

    assert metadata.type == "video"
    assert metadata.embed_url == "https://mybusiness.com/embed/1"
    assert metadata.author_name == "Jane"

    assert mock_get.call_args.args[0] == f"{BASE_URL}/content"
    assert mock_get.call_args.kwargs["params"] == {"url": "https://mybusiness.com/video/1", "maxwidth": 640}


@pytest.mark.asyncio
async def test_http_not_found(backend):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=httpx.Response(404)):
        with pytest.raises(ContentNotFoundError) as exc_info:
            await backend.get_content_metadata("https://mybusiness.com/video/404")

    assert exc_info.value.url == "https://mybusiness.com/video/404"


@pytest.mark.asyncio
async def test_http_error_status_not_retried(backend):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=httpx.Response(503)) as mock_get:
        with pytest.raises(BackendError) as exc_info:
            await backend.get_content_metadata("https://mybusiness.com/video/1")

    assert "503" in exc_info.value.message
    assert exc_info.value.backend == BASE_URL
    assert mock_get.call_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"not json", b"[1, 2, 3]"])
async def test_http_unusable_body(backend, body):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=httpx.Response(200, content=body)):
        with pytest.raises(BackendError, match="unexpected response structure"):
            await backend.get_content_metadata("https://mybusiness.com/video/1")


@pytest.mark.asyncio
async def test_http_connection_error_retried(backend):
    """Connection failures are retried, then surfaced as BackendUnreachableError."""
    with patch(
        "httpx.AsyncClient.get", new_callable=AsyncMock, side_effect=httpx.ConnectError("Connection failed")
    ) as mock_get, patch("oembed_provider.core.backend.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        with pytest.raises(BackendUnreachableError) as exc_info:
            await backend.get_content_metadata("https://mybusiness.com/video/1")

    assert "Connection to backend failed" in exc_info.value.message
    assert mock_get.call_count == 3
    assert mock_sleep.call_count == 2


@pytest.mark.asyncio
async def test_http_timeout(backend):
    with patch(
        "httpx.AsyncClient.get", new_callable=AsyncMock, side_effect=httpx.TimeoutException("Timeout")
    ), patch("oembed_provider.core.backend.asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(BackendTimeoutError) as exc_info:
            await backend.get_content_metadata("https://mybusiness.com/video/1")

    assert "did not respond in time" in exc_info.value.message


@pytest.mark.asyncio
async def test_http_recovers_after_retry(backend):
    responses = [httpx.ConnectError("Connection failed"), httpx.Response(200, json={"type": "link"})]

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, side_effect=responses) as mock_get, patch(
        "oembed_provider.core.backend.asyncio.sleep", new_callable=AsyncMock
    ):
        metadata = await backend.get_content_metadata("https://mybusiness.com/about")

    assert metadata.type == "link"
    assert mock_get.call_count == 2


def test_retry_delay_bounds():
    """Backoff grows by the factor, is capped, and jitter keeps it within half to full delay."""
    backend = HttpMetadataBackend(BASE_URL, base_delay_s=0.1, max_delay_s=1.0, backoff_factor=2.0)

    for _ in range(20):
        assert 0.05 <= backend._retry_delay(0) <= 0.1
        assert 0.1 <= backend._retry_delay(1) <= 0.2
        assert 0.5 <= backend._retry_delay(10) <= 1.0
