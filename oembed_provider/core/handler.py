"""oEmbed request handling: validation, authorization, lookup, build, format."""

import logging
import time
from collections.abc import Mapping

from oembed_provider.core.authorizer import authorize_url
from oembed_provider.core.backend import MetadataBackend
from oembed_provider.core.builder import build_response
from oembed_provider.core.config import ProviderConfig
from oembed_provider.core.constants import ERROR_MESSAGES, ERROR_STATUS, ErrorCode
from oembed_provider.core.exceptions import ContentNotFoundError
from oembed_provider.core.formatter import FormattedResponse, format_error, format_response
from oembed_provider.core.logging import current_request_id, emit_event, generate_request_id, request_id_var
from oembed_provider.core.validator import sanitize_params, validate_params

logger = logging.getLogger(__name__)


def _error(code: ErrorCode, output_format: str, message: str | None = None, details: str | None = None) -> FormattedResponse:
    return format_error(
        ERROR_STATUS.get(code, 500),
        message or ERROR_MESSAGES[code],
        output_format,
        code=code,
        details=details,
    )


def _finish(response: FormattedResponse, started: float, url: str | None) -> FormattedResponse:
    emit_event(
        "oembed_request_end",
        url=url,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


async def handle_oembed_request(
    query_params: Mapping[str, str] | None,
    config: ProviderConfig,
    backend: MetadataBackend,
) -> FormattedResponse:
    """
    Serve one oEmbed request.

    Validation and authorization failures return immediately with their own
    codes. A missing backend record becomes 404 CONTENT_NOT_FOUND; any other
    failure past authorization becomes a generic 500 INTERNAL_ERROR whose
    cause is logged but never returned.

    Every log line for the request and the ``requestId`` of an error body
    share one request ID: the one already bound (e.g. by the HTTP
    middleware) or a fresh one bound for the duration of the call.

    Args:
        query_params: Raw query parameters (``url``, ``format``,
            ``maxwidth``, ``maxheight``; others are ignored)
        config: Provider configuration
        backend: Metadata source for authorized URLs

    Returns:
        FormattedResponse ready for the transport layer
    """
    if current_request_id() is not None:
        return await _serve(query_params or {}, config, backend)

    token = request_id_var.set(generate_request_id())
    try:
        return await _serve(query_params or {}, config, backend)
    finally:
        request_id_var.reset(token)


async def _serve(params: Mapping[str, str], config: ProviderConfig, backend: MetadataBackend) -> FormattedResponse:
    started = time.perf_counter()
    emit_event("oembed_request_start", url=params.get("url"), format=params.get("format"))

    validation = validate_params(params)
    if not validation.is_valid:
        first = validation.first_error
        response = _error(first.code, validation.format, first.message)
        logger.warning(
            "Rejected oEmbed request (requestId=%s): %s",
            response.request_id,
            ", ".join(f"{error.field}={error.code.value}" for error in validation.errors),
        )
        emit_event("oembed_validation_failed", codes=[error.code.value for error in validation.errors])
        return _finish(response, started, params.get("url"))

    sanitized = sanitize_params(params)

    authorization = authorize_url(sanitized.url, config)
    if not authorization.is_valid:
        response = _error(authorization.code, sanitized.format, authorization.error, authorization.details)
        logger.warning(
            "Rejected content URL %s (requestId=%s): %s",
            sanitized.url,
            response.request_id,
            authorization.code.value,
        )
        return _finish(response, started, sanitized.url)

    try:
        backend_started = time.perf_counter()
        metadata = await backend.get_content_metadata(authorization.url, sanitized.maxwidth, sanitized.maxheight)
        emit_event(
            "oembed_backend_lookup",
            url=authorization.url,
            duration_ms=round((time.perf_counter() - backend_started) * 1000, 1),
        )

        oembed = build_response(metadata, config, sanitized.maxwidth, sanitized.maxheight)
        response = format_response(oembed, sanitized.format)
        emit_event(
            "oembed_response",
            type=oembed.type,
            format=sanitized.format,
            has_thumbnail=oembed.thumbnail_url is not None,
            size=len(response.body),
        )
        return _finish(response, started, authorization.url)

    except ContentNotFoundError as e:
        response = _error(ErrorCode.CONTENT_NOT_FOUND, sanitized.format)
        logger.info("No content for %s (requestId=%s): %s", authorization.url, response.request_id, e.message)
        return _finish(response, started, authorization.url)

    except Exception as e:
        response = _error(ErrorCode.INTERNAL_ERROR, sanitized.format)
        logger.exception(f"Failed to serve oEmbed for {authorization.url} (requestId={response.request_id}): {e}")
        return _finish(response, started, authorization.url)
