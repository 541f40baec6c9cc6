"""Entry point for running the Figma chat server."""

import logging

import uvicorn

from .config import get_settings

logger = logging.getLogger(__name__)


def main():
    """Run the Figma chat server."""
    settings = get_settings()

    logger.info("Starting Figma chat server on %s:%s", settings.app_host, settings.app_port)

    uvicorn.run(
        "figma_chat.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
