"""JSON and XML serialization of oEmbed success and error responses."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from oembed_provider.core.constants import (
    CORS_ALLOW_ORIGIN,
    DEFAULT_CACHE_AGE,
    STATUS_ERROR_CODES,
    ErrorCode,
)
from oembed_provider.core.escaping import escape_xml
from oembed_provider.core.logging import current_request_id, generate_request_id
from oembed_provider.core.schemas import BaseOembedResponse, ErrorDetail, ErrorResponse

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8" standalone="yes"?>'

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "text/xml"


@dataclass(frozen=True)
class FormattedResponse:
    """Transport-neutral response: status code, headers and body text."""

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    request_id: str | None = None

    @property
    def media_type(self) -> str:
        return self.headers.get("Content-Type", JSON_CONTENT_TYPE)


def _base_headers(output_format: str) -> dict[str, str]:
    return {
        "Content-Type": XML_CONTENT_TYPE if output_format == "xml" else JSON_CONTENT_TYPE,
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
    }


def _to_json(data: Mapping[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_xml_body(data: Mapping[str, Any]) -> str:
    """
    Render a flat response mapping as an ``<oembed>`` document.

    One child element per non-null field, in key order. Values are
    string-coerced and escaped; nested values are not expanded.
    """
    elements = "\n".join(
        f"  <{key}>{escape_xml(value)}</{key}>" for key, value in data.items() if value is not None
    )
    return f"{XML_DECLARATION}\n<oembed>\n{elements}\n</oembed>"


def format_response(response: BaseOembedResponse | Mapping[str, Any], output_format: str = "json") -> FormattedResponse:
    """
    Serialize a successful oEmbed response.

    Args:
        response: Built response model, or an equivalent flat mapping
        output_format: ``xml`` for XML, anything else for JSON

    Returns:
        FormattedResponse with status 200 and a Cache-Control hint taken from
        ``cache_age`` (3600 seconds when absent or zero)
    """
    data = response.to_dict() if isinstance(response, BaseOembedResponse) else dict(response)
    data = {key: value for key, value in data.items() if value is not None}

    headers = _base_headers(output_format)
    headers["Cache-Control"] = f"max-age={data.get('cache_age') or DEFAULT_CACHE_AGE}"

    body = generate_xml_body(data) if output_format == "xml" else _to_json(data)
    return FormattedResponse(status_code=200, body=body, headers=headers)


def _xml_error_body(error: ErrorDetail) -> str:
    lines = [
        XML_DECLARATION,
        "<oembed>",
        "  <error>",
        f"    <code>{escape_xml(error.code)}</code>",
        f"    <message>{escape_xml(error.message)}</message>",
        f"    <timestamp>{escape_xml(error.timestamp)}</timestamp>",
        f"    <requestId>{escape_xml(error.request_id)}</requestId>",
    ]
    if error.details:
        lines.append(f"    <details>{escape_xml(error.details)}</details>")
    lines.extend(["  </error>", "</oembed>"])
    return "\n".join(lines)


def format_error(
    status_code: int,
    message: str,
    output_format: str = "json",
    code: ErrorCode | str | None = None,
    details: str | None = None,
) -> FormattedResponse:
    """
    Serialize an error response.

    A fresh timestamp is generated on every call. The request ID is the one
    bound to the current request, or a fresh one outside a request. When no
    code is given one is derived from the status (400 -> BAD_REQUEST, ...).

    Args:
        status_code: HTTP status to return
        message: Caller-safe message
        output_format: ``xml`` for XML, anything else for JSON
        code: Explicit error code
        details: Optional extra context, included only when non-empty

    Returns:
        FormattedResponse carrying the error body
    """
    if isinstance(code, ErrorCode):
        code = code.value
    error = ErrorDetail(
        code=code or STATUS_ERROR_CODES.get(status_code, "UNKNOWN_ERROR"),
        message=message,
        timestamp=_timestamp(),
        request_id=current_request_id() or generate_request_id(),
        details=details or None,
    )

    if output_format == "xml":
        body = _xml_error_body(error)
    else:
        body = _to_json(ErrorResponse(error=error).to_dict())
    return FormattedResponse(
        status_code=status_code,
        body=body,
        headers=_base_headers(output_format),
        request_id=error.request_id,
    )
