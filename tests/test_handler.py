"""Tests for end-to-end oEmbed request handling."""

import json
import logging
from unittest.mock import patch

import pytest

from oembed_provider import ContentMetadata, ProviderConfig, handle_oembed_request
from oembed_provider.core.exceptions import BackendUnreachableError, ContentNotFoundError
from oembed_provider.core.formatter import XML_DECLARATION
from oembed_provider.core.logging import event_logger, request_id_var

VIDEO = {
    "type": "video",
    "title": "Test Video & Special Characters",
    "embedUrl": "https://mybusiness.com/embed/123",
    "thumbnail_url": "https://mybusiness.com/thumb/123.jpg",
    "thumbnail_width": 320,
    "thumbnail_height": 180,
}


class FakeBackend:
    """Backend returning fixed metadata (or raising) and recording its calls."""

    def __init__(self, metadata=None, error=None):
        self.metadata = metadata
        self.error = error
        self.calls = []

    async def get_content_metadata(self, url, maxwidth=None, maxheight=None):
        self.calls.append((url, maxwidth, maxheight))
        if self.error:
            raise self.error
        return ContentMetadata.model_validate(self.metadata or {})


@pytest.fixture
def config():
    return ProviderConfig(
        provider_name="My Business",
        provider_url="https://mybusiness.com",
        provider_domain="mybusiness.com",
    )


def _error_body(response):
    return json.loads(response.body)["error"]


@pytest.mark.asyncio
async def test_video_success(config):
    backend = FakeBackend(VIDEO)
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/123", "maxwidth": "800", "maxheight": "600"}, config, backend
    )

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "max-age=3600"
    data = json.loads(response.body)
    assert data["type"] == "video"
    assert data["width"] == 800
    assert data["height"] == 600
    assert 'width="800" height="600"' in data["html"]
    assert 'sandbox="allow-scripts allow-same-origin allow-presentation"' in data["html"]
    assert data["title"] == "Test Video & Special Characters"
    assert data["provider_name"] == "My Business"
    assert data["thumbnail_width"] == 320


@pytest.mark.asyncio
async def test_video_success_xml(config):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/123", "format": "xml"}, config, FakeBackend(VIDEO)
    )

    assert response.status_code == 200
    assert response.media_type == "text/xml"
    assert response.body.startswith(XML_DECLARATION)
    assert "<title>Test Video &amp; Special Characters</title>" in response.body
    assert "<type>video</type>" in response.body


@pytest.mark.asyncio
async def test_backend_receives_decoded_params(config):
    backend = FakeBackend({"type": "link"})
    await handle_oembed_request(
        {"url": "https%3A%2F%2FMyBusiness.com%2Fvideo%2F1", "maxwidth": "640"}, config, backend
    )

    assert backend.calls == [("https://mybusiness.com/video/1", 640, None)]


@pytest.mark.asyncio
async def test_photo_missing_url_is_internal_error(config):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/photo/1"}, config, FakeBackend({"type": "photo"})
    )

    assert response.status_code == 500
    error = _error_body(response)
    assert error["code"] == "INTERNAL_ERROR"
    assert error["message"] == "Internal server error"
    assert "Photo type requires" not in response.body


@pytest.mark.asyncio
async def test_missing_url_xml():
    response = await handle_oembed_request({"format": "xml"}, ProviderConfig(), FakeBackend())

    assert response.status_code == 400
    assert response.body.startswith(XML_DECLARATION)
    assert "<error>" in response.body
    assert "<code>MISSING_URL</code>" in response.body
    assert "<message>URL parameter is required</message>" in response.body


@pytest.mark.asyncio
async def test_missing_url_json(config):
    response = await handle_oembed_request({}, config, FakeBackend())

    assert response.status_code == 400
    error = _error_body(response)
    assert error["code"] == "MISSING_URL"
    assert set(error) >= {"code", "message", "timestamp", "requestId"}


@pytest.mark.asyncio
async def test_unauthorized_domain(config):
    backend = FakeBackend(VIDEO)
    response = await handle_oembed_request({"url": "https://other-domain.com/video"}, config, backend)

    assert response.status_code == 404
    assert _error_body(response)["code"] == "UNAUTHORIZED_DOMAIN"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_malformed_url(config):
    response = await handle_oembed_request({"url": "ftp://mybusiness.com/x"}, config, FakeBackend())

    assert response.status_code == 400
    assert _error_body(response)["code"] == "MALFORMED_URL"


@pytest.mark.asyncio
async def test_invalid_format(config):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/1", "format": "yaml"}, config, FakeBackend(VIDEO)
    )

    assert response.status_code == 501
    assert response.media_type == "application/json"
    assert _error_body(response)["code"] == "INVALID_FORMAT"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, code",
    [
        ({"maxwidth": "abc"}, "INVALID_MAXWIDTH"),
        ({"maxwidth": "1.5"}, "INVALID_MAXWIDTH"),
        ({"maxwidth": "0"}, "INVALID_MAXWIDTH"),
        ({"maxheight": "2049"}, "INVALID_MAXHEIGHT"),
    ],
)
async def test_invalid_dimensions(config, params, code):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/1", **params}, config, FakeBackend(VIDEO)
    )

    assert response.status_code == 400
    assert _error_body(response)["code"] == code


@pytest.mark.asyncio
async def test_missing_provider_domain():
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/1"}, ProviderConfig(), FakeBackend(VIDEO)
    )

    assert response.status_code == 500
    assert _error_body(response)["code"] == "MISSING_PROVIDER_DOMAIN"


@pytest.mark.asyncio
async def test_content_not_found(config):
    backend = FakeBackend(error=ContentNotFoundError("gone", url="https://mybusiness.com/video/9"))
    response = await handle_oembed_request({"url": "https://mybusiness.com/video/9"}, config, backend)

    assert response.status_code == 404
    assert _error_body(response)["code"] == "CONTENT_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        BackendUnreachableError("Connection to backend failed: 10.0.0.5 refused", backend="http://10.0.0.5"),
        RuntimeError("secret stack detail"),
    ],
)
async def test_backend_failure_does_not_leak(config, error):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/1", "format": "xml"}, config, FakeBackend(error=error)
    )

    assert response.status_code == 500
    assert "<code>INTERNAL_ERROR</code>" in response.body
    assert "10.0.0.5" not in response.body
    assert "secret" not in response.body


@pytest.mark.asyncio
async def test_link_response(config):
    response = await handle_oembed_request(
        {"url": "https://mybusiness.com/about"}, config, FakeBackend({"type": "link", "title": "About us"})
    )

    data = json.loads(response.body)
    assert data["type"] == "link"
    assert data["title"] == "About us"
    assert "html" not in data
    assert "width" not in data


@pytest.mark.asyncio
async def test_telemetry_failure_ignored(config):
    """A failing event logger never changes the response."""
    with patch.object(event_logger, "info", side_effect=RuntimeError("sink down")):
        response = await handle_oembed_request(
            {"url": "https://mybusiness.com/video/123"}, config, FakeBackend(VIDEO)
        )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_identical_requests_identical_bodies(config):
    params = {"url": "https://mybusiness.com/video/123", "maxwidth": "800"}
    first = await handle_oembed_request(params, config, FakeBackend(VIDEO))
    second = await handle_oembed_request(params, config, FakeBackend(VIDEO))

    assert first.body == second.body


@pytest.mark.asyncio
async def test_backend_markup_sanitized(config):
    backend = FakeBackend({"type": "rich", "html": '<div onmouseover="steal()">Poll<script>alert(1)</script></div>'})
    response = await handle_oembed_request({"url": "https://mybusiness.com/widget/poll"}, config, backend)

    data = json.loads(response.body)
    assert data["html"] == "<div>Poll</div>"
    assert "script" not in response.body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, backend",
    [
        ({}, FakeBackend()),
        ({"url": "https://other-domain.com/video"}, FakeBackend(VIDEO)),
        ({"url": "https://mybusiness.com/video/9"}, FakeBackend(error=ContentNotFoundError("gone"))),
        ({"url": "https://mybusiness.com/video/1"}, FakeBackend(error=RuntimeError("boom"))),
    ],
)
async def test_error_request_id_matches_logs(config, caplog, params, backend):
    """The requestId callers see is the one tagged on the server log line."""
    caplog.set_level(logging.INFO, logger="oembed_provider.core.handler")
    response = await handle_oembed_request(params, config, backend)

    request_id = _error_body(response)["requestId"]
    assert request_id.startswith("req_")
    assert any(request_id in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_bound_request_id_reused(config):
    token = request_id_var.set("req_1_abc")
    try:
        response = await handle_oembed_request({}, config, FakeBackend())
    finally:
        request_id_var.reset(token)

    assert _error_body(response)["requestId"] == "req_1_abc"
    assert request_id_var.get() == "-"
