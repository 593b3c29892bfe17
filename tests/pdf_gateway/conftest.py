"""
Pytest fixtures for PDF gateway tests.
"""

import asyncio
import os
from typing import List, Optional, Tuple

# IMPORTANT: Set environment variables BEFORE any imports from pdf_gateway
# so cached settings never see a missing API key.
os.environ["API_KEY"] = "test-api-key-1234"

import pytest
from fastapi.testclient import TestClient

from pdf_gateway.app import create_app
from pdf_gateway.config import GatewaySettings, get_settings
from pdf_gateway.engine import EnginePage, EngineSession, RenderingEngine
from pdf_gateway.models import ExportOptions, WaitCondition

TEST_API_KEY = "test-api-key-1234"
FAKE_PDF = b"%PDF-1.4 fake pdf content"


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: needs a real Chromium (set RUN_BROWSER_TESTS=1)"
    )


class FakePage(EnginePage):

    def __init__(self, engine: "FakeEngine"):
        self.engine = engine

    async def set_viewport(self, width: int, height: int) -> None:
        self.engine.viewports.append((width, height))
        if self.engine.viewport_error:
            raise self.engine.viewport_error

    async def navigate(self, url: str, wait_until: WaitCondition, timeout_ms: int) -> None:
        self.engine.navigations.append((url, wait_until, timeout_ms))
        if self.engine.navigate_error:
            raise self.engine.navigate_error
        if self.engine.hang_navigation:
            await asyncio.sleep(3600)

    async def export_document(self, options: ExportOptions) -> bytes:
        self.engine.exports.append(options)
        if self.engine.export_error:
            raise self.engine.export_error
        return self.engine.pdf_bytes


class FakeSession(EngineSession):

    def __init__(self, engine: "FakeEngine"):
        self.engine = engine

    async def new_page(self) -> EnginePage:
        return FakePage(self.engine)

    async def close(self) -> None:
        self.engine.closed += 1


class FakeEngine(RenderingEngine):
    """Counts launches and closes; failure points are set per test."""

    def __init__(self, pdf_bytes: bytes = FAKE_PDF):
        self.pdf_bytes = pdf_bytes
        self.launched = 0
        self.closed = 0
        self.viewports: List[Tuple[int, int]] = []
        self.navigations: List[Tuple[str, WaitCondition, int]] = []
        self.exports: List[ExportOptions] = []
        self.launch_error: Optional[Exception] = None
        self.viewport_error: Optional[Exception] = None
        self.navigate_error: Optional[Exception] = None
        self.export_error: Optional[Exception] = None
        self.hang_navigation = False

    async def launch(self) -> EngineSession:
        if self.launch_error:
            raise self.launch_error
        self.launched += 1
        return FakeSession(self)


@pytest.fixture
def fake_engine():
    """Rendering engine double that never starts a browser."""
    return FakeEngine()


@pytest.fixture
def settings():
    """Production-mode settings with the test API key."""
    return GatewaySettings(api_key=TEST_API_KEY, environment="production", _env_file=None)


@pytest.fixture
def client(settings, fake_engine):
    """FastAPI test client wired to the fake engine."""
    return TestClient(create_app(settings, engine=fake_engine))


@pytest.fixture
def dev_client(fake_engine):
    """Test client running in development mode (stack traces exposed)."""
    dev_settings = GatewaySettings(api_key=TEST_API_KEY, environment="development", _env_file=None)
    return TestClient(create_app(dev_settings, engine=fake_engine))


@pytest.fixture
def auth_headers():
    """Authentication headers for test requests."""
    return {"x-api-key": TEST_API_KEY}


@pytest.fixture
def invalid_auth_headers():
    """Invalid authentication headers for testing auth failures."""
    return {"x-api-key": "wrong-key"}


@pytest.fixture
def clear_settings_cache():
    """Reset cached settings around tests that change the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
