# backend/soundcomm/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from soundcomm.api import websocket as websocket_module
from soundcomm.api.routes import health, instruments, root
from soundcomm.core.config import Settings, settings as default_settings
from soundcomm.core.logging import get_logger, setup_logging
from soundcomm.core.state import build_state

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the relay application.

    Each call gets its own room store and connection registry, so separate
    apps (one per test, or one per worker) never share level state.
    """
    settings = settings or default_settings

    # Configure logging first
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="SoundComm Relay")
    app.state.relay = build_state(settings)

    # Wildcard by default; set CORS_ORIGINS to restrict
    allow_all = "*" in settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.CORS_ORIGINS,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(instruments.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    logger.info("🚀 Relay ready (default room: %s)", settings.DEFAULT_ROOM)
    return app


def run() -> None:
    """Long-running listener entry point."""
    import uvicorn

    uvicorn.run(
        "soundcomm.asgi:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
