"""
Document generator - drives one browser session per request.

Lifecycle: launch -> page + viewport -> navigate -> export -> close.
The session is acquired through RenderingEngine.session(), so the browser
process is torn down on success and on every failure path before the
error reaches the HTTP layer.
"""

import asyncio
import logging
import uuid
from enum import Enum

from .engine import EnginePage, RenderingEngine
from .errors import (
    EngineLaunchError,
    ExportError,
    NavigationError,
    NavigationTimeout,
    RenderError,
)
from .models import DEFAULT_FILENAME, GenerationRequest, RenderedDocument
from .pdf_helpers import build_pdf_filename

logger = logging.getLogger(__name__)

# Extra time the driver gets beyond the navigation timeout before we give up on it
NAVIGATION_GRACE_SECONDS = 5.0


class GenerationState(str, Enum):
    """Document generation lifecycle states."""
    IDLE = "idle"
    ENGINE_LAUNCHING = "engine_launching"
    PAGE_CREATED = "page_created"
    NAVIGATING = "navigating"
    EXPORTING = "exporting"
    DONE = "done"
    ERROR = "error"


# Which RenderError an unexpected exception becomes, by the state it escaped from
_FAILURE_FOR_STATE = {
    GenerationState.IDLE: EngineLaunchError,
    GenerationState.ENGINE_LAUNCHING: EngineLaunchError,
    GenerationState.PAGE_CREATED: EngineLaunchError,
    GenerationState.NAVIGATING: NavigationError,
    GenerationState.EXPORTING: ExportError,
}


class DocumentGenerator:
    """Orchestrates one rendering engine lifecycle per generate() call."""

    def __init__(
        self,
        engine: RenderingEngine,
        navigation_grace_seconds: float = NAVIGATION_GRACE_SECONDS,
    ):
        self.engine = engine
        self.navigation_grace_seconds = navigation_grace_seconds

    async def generate(self, request: GenerationRequest) -> RenderedDocument:
        """
        Render request.url to a PDF.

        Args:
            request: Validated generation request

        Returns:
            RenderedDocument with the PDF bytes and suggested filename

        Raises:
            RenderError: one of EngineLaunchError, NavigationTimeout,
                NavigationError, ExportError
        """
        run_id = uuid.uuid4().hex[:8]
        state = GenerationState.IDLE

        def transition(new_state: GenerationState) -> GenerationState:
            logger.debug(f"[{run_id}] {state.value} -> {new_state.value}")
            return new_state

        try:
            state = transition(GenerationState.ENGINE_LAUNCHING)
            async with self.engine.session() as session:
                page = await session.new_page()
                await page.set_viewport(request.viewport_width, request.viewport_height)
                state = transition(GenerationState.PAGE_CREATED)
                logger.info(
                    f"[{run_id}] Page ready, viewport "
                    f"{request.viewport_width}x{request.viewport_height}"
                )

                state = transition(GenerationState.NAVIGATING)
                logger.info(f"[{run_id}] Navigating to: {request.url}")
                await self._navigate(page, request)
                logger.info(f"[{run_id}] Page loaded successfully")

                state = transition(GenerationState.EXPORTING)
                options = request.export_options()
                logger.info(f"[{run_id}] Generating PDF (layout={request.layout.value})")
                content = await page.export_document(options)

            state = transition(GenerationState.DONE)
        except RenderError as e:
            state = transition(GenerationState.ERROR)
            logger.error(f"[{run_id}] PDF generation failed ({e.code}): {e.message}")
            raise
        except Exception as e:
            failure = _FAILURE_FOR_STATE.get(state, RenderError)
            state = transition(GenerationState.ERROR)
            logger.exception(f"[{run_id}] PDF generation failed")
            raise failure(str(e) or type(e).__name__) from e

        logger.info(f"[{run_id}] PDF generated, size: {len(content)} bytes")
        filename = build_pdf_filename(request.filename) if request.filename else DEFAULT_FILENAME
        return RenderedDocument(content=content, filename=filename)

    async def _navigate(self, page: EnginePage, request: GenerationRequest) -> None:
        """Navigate with a hard backstop so a stuck driver cannot hang the request."""
        deadline = request.timeout / 1000 + self.navigation_grace_seconds
        try:
            await asyncio.wait_for(
                page.navigate(request.url, request.wait_until, request.timeout),
                timeout=deadline,
            )
        except asyncio.TimeoutError as e:
            raise NavigationTimeout(
                f"Navigation to {request.url} timed out after {request.timeout}ms"
            ) from e
