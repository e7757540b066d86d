"""Tests for the oEmbed HTTP endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from oembed_provider import ContentNotFoundError


@pytest.fixture
def settings():
    return Settings(
        provider_name="My Business",
        provider_url="https://mybusiness.com",
        provider_domain="mybusiness.com",
        backend_base_url=None,
        log_level="WARNING",
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings=settings))


def test_oembed_json(client):
    resp = client.get("/oembed", params={"url": "https://mybusiness.com/video/123", "maxwidth": "800"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["cache-control"] == "max-age=3600"
    assert "x-request-id" in resp.headers
    data = resp.json()
    assert data["version"] == "1.0"
    assert data["type"] == "video"
    assert data["width"] == 800
    assert data["provider_name"] == "My Business"
    assert 'src="https://mybusiness.com/embed/123"' in data["html"]


def test_oembed_xml(client):
    resp = client.get("/oembed", params={"url": "https://mybusiness.com/photo/sunset", "format": "xml"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/xml")
    assert resp.headers["cache-control"] == "max-age=7200"
    assert "<type>photo</type>" in resp.text
    assert "<url>https://mybusiness.com/images/sunset.jpg</url>" in resp.text


def test_oembed_missing_url(client):
    resp = client.get("/oembed")

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_URL"
    assert "cache-control" not in resp.headers
    assert resp.headers["x-request-id"] == resp.json()["error"]["requestId"]


def test_oembed_invalid_format(client):
    resp = client.get("/oembed", params={"url": "https://mybusiness.com/video/1", "format": "yaml"})

    assert resp.status_code == 501
    assert resp.json()["error"]["code"] == "INVALID_FORMAT"


def test_oembed_unauthorized_domain(client):
    resp = client.get("/oembed", params={"url": "https://other-domain.com/video"})

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "UNAUTHORIZED_DOMAIN"


def test_oembed_injected_backend(settings):
    backend = AsyncMock()
    backend.get_content_metadata.side_effect = ContentNotFoundError("missing")
    client = TestClient(create_app(settings=settings, backend=backend))

    resp = client.get("/oembed", params={"url": "https://mybusiness.com/video/1", "maxheight": "300"})

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "CONTENT_NOT_FOUND"
    backend.get_content_metadata.assert_awaited_once_with("https://mybusiness.com/video/1", None, 300)


def test_oembed_without_provider_domain():
    client = TestClient(create_app(settings=Settings(provider_domain=None)))

    resp = client.get("/oembed", params={"url": "https://mybusiness.com/video/1"})

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "MISSING_PROVIDER_DOMAIN"


def test_oembed_unexpected_failure(client):
    with patch("app.main.handle_oembed_request", new_callable=AsyncMock, side_effect=RuntimeError("boom")):
        resp = client.get("/oembed", params={"url": "https://mybusiness.com/video/1", "format": "xml"})

    assert resp.status_code == 500
    assert "<code>INTERNAL_ERROR</code>" in resp.text
    assert "boom" not in resp.text


def test_oembed_preflight(client):
    resp = client.options("/oembed")

    assert resp.status_code == 204
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert resp.headers["access-control-allow-headers"] == "Content-Type, Authorization"
    assert resp.headers["access-control-max-age"] == "86400"


def test_oembed_post_not_allowed(client):
    assert client.post("/oembed").status_code == 405
