"""FastAPI application entry point for the oEmbed provider."""

import logging

from fastapi import FastAPI, Request, Response

from app import __version__
from app.config import Settings, get_settings
from app.schemas import HealthResponse
from app.security import RequestIDMiddleware
from oembed_provider import (
    ErrorCode,
    MetadataBackend,
    PatternMetadataBackend,
    ProviderConfig,
    format_error,
    handle_oembed_request,
)
from oembed_provider.core.constants import (
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    CORS_ALLOW_ORIGIN,
    CORS_MAX_AGE,
    ERROR_MESSAGES,
)
from oembed_provider.core.logging import setup_logging

logger = logging.getLogger(__name__)


def _load_settings_safe() -> Settings | None:
    """Load settings, returning None when configuration is unavailable or invalid."""
    try:
        return get_settings()
    except ValueError as e:
        logger.error(f"Configuration could not be loaded, using defaults: {e}")
        return None


def create_app(settings: Settings | None = None, backend: MetadataBackend | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-loaded singleton
        backend: Metadata backend to use instead of the one selected by settings
    """
    if settings is None:
        settings = _load_settings_safe()

    if settings is not None:
        setup_logging(settings.log_level)

    application = FastAPI(
        title="oEmbed Provider",
        description="oEmbed 1.0 provider returning JSON or XML embed descriptions for provider-domain content",
        version=__version__,
    )

    application.state.provider_config = settings.to_provider_config() if settings else ProviderConfig()
    application.state.backend = backend or (settings.build_backend() if settings else PatternMetadataBackend())

    application.add_middleware(RequestIDMiddleware)

    application.add_api_route("/health", health, methods=["GET"], response_model=HealthResponse)
    application.add_api_route("/oembed", oembed, methods=["GET"])
    application.add_api_route("/oembed", oembed_preflight, methods=["OPTIONS"])

    return application


async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)


async def oembed(request: Request) -> Response:
    """
    oEmbed endpoint.

    Accepts ``url``, ``format``, ``maxwidth`` and ``maxheight`` query
    parameters and returns the formatted oEmbed (or error) document with
    its own status code and headers.
    """
    params = dict(request.query_params)
    try:
        result = await handle_oembed_request(
            params,
            request.app.state.provider_config,
            request.app.state.backend,
        )
    except Exception as e:
        logger.exception(f"Unexpected error in oembed: {e}")
        result = format_error(
            500,
            ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR],
            "xml" if params.get("format") == "xml" else "json",
            code=ErrorCode.INTERNAL_ERROR,
        )

    return Response(content=result.body, status_code=result.status_code, headers=result.headers)


async def oembed_preflight() -> Response:
    """CORS preflight for the oEmbed endpoint."""
    return Response(
        status_code=204,
        headers={
            "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
            "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
            "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
            "Access-Control-Max-Age": str(CORS_MAX_AGE),
        },
    )


app = create_app()
