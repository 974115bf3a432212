"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared_visions.api.routes import router
from shared_visions.app_logging import configure_logging
from shared_visions.containers import AppContainer
from shared_visions.services.events import ServiceEvent


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    def log_event(event: ServiceEvent) -> None:
        if event.kind == "error":
            logger.info("Service error reported: %s", event.payload)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        unsubscribe = app.state.container.events.subscribe(log_event)
        yield
        unsubscribe()
        await app.state.container.close_resources()

    app = FastAPI(title="SharedVisions", lifespan=lifespan)
    app.state.container = container
    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
