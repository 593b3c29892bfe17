"""
PDF Gateway - FastAPI application.

Renders a URL in headless Chromium and returns the page as a PDF.
Each generation request gets its own browser process, which is closed
before the response goes out.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .auth import API_KEY_HEADER, API_KEY_QUERY, Authenticator, require_api_key
from .config import GatewaySettings, get_settings
from .engine import PlaywrightEngine, RenderingEngine
from .errors import GatewayError, InvalidField
from .generator import DocumentGenerator
from .models import (
    POST_VIEWPORT_WIDTH,
    DebugResponse,
    ErrorResponse,
    GenerationRequest,
    HealthResponse,
)
from .pdf_helpers import PDF_MEDIA_TYPE, pdf_response_headers
from .validation import parse_body, parse_query

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

router = APIRouter()

_PDF_RESPONSES: dict = {
    200: {"content": {PDF_MEDIA_TYPE: {}}, "description": "Generated PDF"},
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging; later calls only adjust the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logging.getLogger().setLevel(level)


def get_generator(request: Request) -> DocumentGenerator:
    """Dependency injection for the document generator."""
    return request.app.state.generator


async def _read_json_body(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        raise InvalidField("body", "request body is not valid JSON") from e


async def _render(generator: DocumentGenerator, generation_request: GenerationRequest) -> Response:
    document = await generator.generate(generation_request)
    return Response(
        content=document.content,
        media_type=PDF_MEDIA_TYPE,
        headers=pdf_response_headers(document),
    )


# ============================================================================
# Health / Debug
# ============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. Never authenticated, always 200."""
    return HealthResponse()


@router.get("/debug", response_model=DebugResponse)
async def debug_info(request: Request) -> DebugResponse:
    """
    Diagnostic snapshot of the auth configuration.

    Reports whether a shared secret is configured and its length, and
    whether the current request carried a credential. Can be switched off
    with DEBUG_ENDPOINT_ENABLED=false.
    """
    settings: GatewaySettings = request.app.state.settings
    if not settings.debug_endpoint_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    authenticator: Authenticator = request.app.state.authenticator
    return DebugResponse(
        has_api_key=authenticator.secret_length > 0,
        api_key_length=authenticator.secret_length,
        header="header present" if request.headers.get(API_KEY_HEADER) else "no header",
        query="query present" if request.query_params.get(API_KEY_QUERY) else "no query",
        viewport_width=POST_VIEWPORT_WIDTH,
        environment=settings.environment,
    )


# ============================================================================
# PDF Generation Endpoints
# ============================================================================

@router.post(
    "/generate-pdf",
    dependencies=[Depends(require_api_key)],
    response_class=Response,
    responses=_PDF_RESPONSES,
)
async def generate_pdf(
    request: Request,
    generator: DocumentGenerator = Depends(get_generator),
) -> Response:
    """
    Full-fidelity generation from a JSON body.

    Body fields: url (required), format, landscape, margin, waitUntil,
    timeout, viewportWidth, viewportHeight, printBackground, layout,
    filename.
    """
    payload = await _read_json_body(request)
    return await _render(generator, parse_body(payload))


@router.get(
    "/generate-pdf",
    dependencies=[Depends(require_api_key)],
    response_class=Response,
    responses=_PDF_RESPONSES,
)
async def generate_pdf_from_query(
    request: Request,
    generator: DocumentGenerator = Depends(get_generator),
) -> Response:
    """
    Convenience generation from query parameters.

    Query fields: url (required), format, landscape, viewport_width,
    viewport_height, wait_until, timeout, layout, print_background, filename.
    """
    return await _render(generator, parse_query(request.query_params))


# ============================================================================
# Application factory
# ============================================================================

def create_app(
    settings: Optional[GatewaySettings] = None,
    engine: Optional[RenderingEngine] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (defaults to the cached env settings)
        engine: Optional rendering engine override (defaults to Playwright/Chromium)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="PDF Gateway",
        version=__version__,
        description="Renders web pages to PDF using Playwright/Chromium",
    )

    app.state.settings = settings
    app.state.authenticator = Authenticator(settings.api_key)
    app.state.generator = DocumentGenerator(engine or PlaywrightEngine.from_settings(settings))

    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        """Render every gateway failure as a JSON error body."""
        logger.info(f"{request.method} {request.url.path} -> {exc.http_status} ({exc.code})")
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_dict(include_stack=settings.include_stack_traces),
        )

    app.include_router(router)
    return app
