"""
Round-trip tests against a real headless Chromium.

Opt-in: these launch a browser, so they only run with RUN_BROWSER_TESTS=1
(and `playwright install chromium` done beforehand).
"""

import os
import threading
import time
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

import pytest
from fastapi.testclient import TestClient

from pdf_gateway.app import create_app
from pdf_gateway.config import GatewaySettings

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.getenv("RUN_BROWSER_TESTS") != "1",
        reason="Set RUN_BROWSER_TESTS=1 to run real-browser tests",
    ),
]

API_KEY = "integration-key-1234"


class FixtureHandler(SimpleHTTPRequestHandler):
    """Serves files from the fixture dir; /stall never answers in time."""

    def do_GET(self):
        if self.path.startswith("/stall"):
            time.sleep(5)
        return super().do_GET()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def fixture_server(tmp_path):
    (tmp_path / "index.html").write_text(
        "<html><body style='background:#eef'><h1>Quarterly Report</h1>"
        "<p>Fixture page for PDF round-trip tests.</p></body></html>",
        encoding="utf-8",
    )
    server = ThreadingHTTPServer(
        ("127.0.0.1", 0), partial(FixtureHandler, directory=str(tmp_path))
    )
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def browser_client():
    settings = GatewaySettings(
        api_key=API_KEY,
        chromium_args="--no-sandbox,--disable-dev-shm-usage,--disable-gpu",
        chromium_executable_path=os.getenv("CHROMIUM_EXECUTABLE_PATH"),
        _env_file=None,
    )
    return TestClient(create_app(settings))


def test_round_trip_local_page(browser_client, fixture_server):
    response = browser_client.post(
        "/generate-pdf",
        json={"url": f"{fixture_server}/index.html"},
        headers={"x-api-key": API_KEY},
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert int(response.headers["content-length"]) == len(response.content)
    assert response.content.startswith(b"%PDF")


def test_round_trip_get_dynamic_layout(browser_client, fixture_server):
    response = browser_client.get(
        "/generate-pdf",
        params={"url": f"{fixture_server}/index.html", "layout": "dynamic", "api_key": API_KEY},
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_stalled_page_times_out(browser_client, fixture_server):
    started = time.monotonic()
    response = browser_client.post(
        "/generate-pdf",
        json={"url": f"{fixture_server}/stall", "timeout": 500},
        headers={"x-api-key": API_KEY},
    )

    assert response.status_code == 500
    assert response.json()["code"] == "navigation_timeout"
    assert time.monotonic() - started < 30


def test_unreachable_address_is_navigation_error(browser_client):
    response = browser_client.post(
        "/generate-pdf",
        json={"url": "http://127.0.0.1:9/", "timeout": 5000},
        headers={"x-api-key": API_KEY},
    )

    assert response.status_code == 500
    assert response.json()["code"] == "navigation_error"
