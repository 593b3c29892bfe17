"""
Rendering engine adapter.

Defines the browser contract the document generator drives, plus the
Playwright/Chromium implementation used in production. A session is one
browser process; it is launched per request and always closed by the
session() context manager.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import GatewaySettings
from .errors import EngineLaunchError, ExportError, NavigationError, NavigationTimeout
from .models import ExportOptions, WaitCondition

logger = logging.getLogger(__name__)


class EnginePage(ABC):
    """A single page/tab inside an engine session."""

    @abstractmethod
    async def set_viewport(self, width: int, height: int) -> None:
        ...

    @abstractmethod
    async def navigate(self, url: str, wait_until: WaitCondition, timeout_ms: int) -> None:
        """
        Load url and wait for the given condition.

        Raises:
            NavigationTimeout: the wait condition was not met within timeout_ms
            NavigationError: the address was unreachable or rejected
        """

    @abstractmethod
    async def export_document(self, options: ExportOptions) -> bytes:
        """
        Export the loaded page as PDF bytes.

        Raises:
            ExportError: the engine failed to produce the document
        """


class EngineSession(ABC):
    """One browser process, exclusively owned by one request."""

    @abstractmethod
    async def new_page(self) -> EnginePage:
        ...

    @abstractmethod
    async def close(self) -> None:
        """Terminate the browser process. Must not raise."""


class RenderingEngine(ABC):
    """Factory for per-request browser sessions."""

    @abstractmethod
    async def launch(self) -> EngineSession:
        """
        Start a new isolated browser process.

        Raises:
            EngineLaunchError: the browser could not be started
        """

    @asynccontextmanager
    async def session(self) -> AsyncIterator[EngineSession]:
        """Launch a session and close it on every exit path."""
        session = await self.launch()
        try:
            yield session
        finally:
            await session.close()


# ============================================================================
# Playwright implementation
# ============================================================================

class PlaywrightPage(EnginePage):

    def __init__(self, page: Page):
        self._page = page

    async def set_viewport(self, width: int, height: int) -> None:
        await self._page.set_viewport_size({"width": width, "height": height})

    async def navigate(self, url: str, wait_until: WaitCondition, timeout_ms: int) -> None:
        try:
            response = await self._page.goto(url, wait_until=wait_until.value, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Navigation to {url} timed out after {timeout_ms}ms"
            ) from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

        # Error pages still render; the caller gets whatever the site served
        if response is not None and not response.ok:
            logger.warning(f"Navigation to {url} returned HTTP {response.status}")

    async def export_document(self, options: ExportOptions) -> bytes:
        try:
            return await self._page.pdf(**options.to_pdf_kwargs())
        except PlaywrightError as e:
            raise ExportError(f"PDF export failed: {e}") from e


class PlaywrightSession(EngineSession):

    def __init__(self, playwright: Playwright, browser: Browser):
        self._playwright = playwright
        self._browser = browser

    async def new_page(self) -> EnginePage:
        page = await self._browser.new_page()
        return PlaywrightPage(page)

    async def close(self) -> None:
        try:
            await self._browser.close()
            logger.info("Browser closed")
        except Exception:
            logger.warning("Browser close failed", exc_info=True)
        finally:
            await _stop_driver(self._playwright)


async def _stop_driver(playwright: Playwright) -> None:
    try:
        await playwright.stop()
    except Exception:
        logger.warning("Playwright driver stop failed", exc_info=True)


class PlaywrightEngine(RenderingEngine):
    """Launches a fresh headless Chromium per session."""

    def __init__(
        self,
        executable_path: Optional[str] = None,
        args: Optional[List[str]] = None,
        headless: bool = True,
    ):
        self.executable_path = executable_path
        self.args = list(args or [])
        self.headless = headless

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> "PlaywrightEngine":
        return cls(
            executable_path=settings.chromium_executable_path,
            args=settings.chromium_args_list,
            headless=settings.browser_headless,
        )

    async def launch(self) -> EngineSession:
        logger.info("Attempting to launch browser...")
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise EngineLaunchError(f"Failed to start Playwright driver: {e}") from e

        try:
            browser = await playwright.chromium.launch(
                headless=self.headless,
                executable_path=self.executable_path,
                args=self.args,
            )
        except Exception as e:
            await _stop_driver(playwright)
            raise EngineLaunchError(f"Failed to launch Chromium: {e}") from e
        except BaseException:
            # Cancelled mid-launch: the driver must not outlive the request
            await _stop_driver(playwright)
            raise

        logger.info("Browser launched successfully")
        return PlaywrightSession(playwright, browser)
