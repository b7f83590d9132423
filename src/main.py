"""taskboard - Kanban task tracking API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.core.config import Settings, settings
from src.core.db_client import TaskStore
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.task_router import register_error_handlers, router as task_router


logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application bound to the given settings."""
    current = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the task store for the lifetime of the application."""
        # Configure logging first so startup logs are captured
        configure_logfire(current)

        app.state.store = await TaskStore.open(current.sqlite_db_path, timeout=current.store_timeout_seconds)
        logger.info("Database initialized", extra={"db_path": app.state.store.db_path})
        try:
            yield
        finally:
            await app.state.store.close()

    app = FastAPI(
        title="taskboard",
        description="Kanban task tracking API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=current.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Instrument FastAPI with Logfire
    instrument_fastapi(app)

    register_error_handlers(app)
    app.include_router(task_router)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(content={"status": "healthy"}, status_code=200)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    uvicorn.run("src.main:app", host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    run()
