"""Web entry point — FastAPI app factory and lifespan wiring."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from portal_admin.config import load_settings
from portal_admin.logging import configure_logging
from portal_admin.routes import collections_router, dashboard_router, status_router, uploads_router
from portal_admin.routes.errors import install_error_handlers
from portal_admin.startup import init_editors, init_publishing, init_snapshots, init_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the store, drafts and editors on startup; close the store on shutdown."""
    settings = load_settings()
    configure_logging(settings.app.log_level)
    logger.info("Portal admin starting — env=%s", settings.app.env)

    store = init_store(settings)
    snapshots = init_snapshots(settings)
    editors = await init_editors(settings, store, snapshots)
    orchestrator, uploader = init_publishing(settings, store)

    app.state.settings = settings
    app.state.store = store
    app.state.snapshots = snapshots
    app.state.editors = editors
    app.state.orchestrator = orchestrator
    app.state.uploader = uploader
    app.state.start_time = time.monotonic()

    yield

    logger.info("Portal admin shutting down")
    await store.close()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(title="Portal Admin", lifespan=lifespan)
    app.state.templates = Jinja2Templates(directory=_TEMPLATES_DIR)
    install_error_handlers(app)

    # Fixed /api paths before the /api/{collection} routes
    app.include_router(status_router)
    app.include_router(uploads_router)
    app.include_router(collections_router)
    app.include_router(dashboard_router)
    return app


def main() -> None:
    """Serve the admin API with uvicorn."""
    settings = load_settings()
    uvicorn.run(
        "portal_admin.app:create_app",
        factory=True,
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.app.is_development,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    main()
