"""Request ID middleware correlating log lines, error bodies and response headers."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from oembed_provider.core.logging import generate_request_id, request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by load balancers; logged at DEBUG only
QUIET_PATHS = frozenset({"/health"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind one request ID per HTTP request.

    The ID tags every log record emitted while the request is served, is
    reused as ``requestId`` in oEmbed error bodies, and is returned in the
    ``X-Request-ID`` header, so a caller quoting any of them can be matched
    to the server logs.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = generate_request_id()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.log(
                logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO,
                "%s %s url=%s format=%s -> %s (%.0f ms)",
                request.method,
                request.url.path,
                request.query_params.get("url", "-"),
                request.query_params.get("format", "json"),
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
