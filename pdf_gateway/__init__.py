"""
PDF Gateway - HTTP service that renders web pages to PDF.

Each request launches its own headless Chromium via Playwright, loads
the target URL, exports it as a PDF and shuts the browser down.
"""

__version__ = "0.1.0"
