from __future__ import annotations

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import Settings, get_settings

# Configure logging for the entire figma_chat package
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# Set our package to INFO level
logging.getLogger("figma_chat").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    resolved_settings = settings or get_settings()
    app = FastAPI(
        title="Figma Chat Server",
        description="Chat with a Figma file through the Figma MCP server",
        version="0.1.0",
        debug=resolved_settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    app.include_router(router)
    logger.info("Figma chat server configured (MCP endpoint %s)", resolved_settings.figma_mcp_url)
    return app


app = create_app()
