"""
PDF Gateway entrypoint - validates configuration and runs uvicorn.

Usage:
    API_KEY=... python -m pdf_gateway
"""

import logging
import sys

import uvicorn

from .app import configure_logging, create_app
from .config import validate_config_on_startup

logger = logging.getLogger("pdf_gateway")


def main() -> None:
    """Run the PDF gateway server."""
    configure_logging()

    try:
        settings = validate_config_on_startup()
    except ValueError as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)

    app = create_app(settings)
    logger.info(f"PDF gateway running on port {settings.port}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
