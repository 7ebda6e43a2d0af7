"""Project Brain FastAPI application."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import logfire
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from project_brain.api.dependencies import ServiceContainer, connect_services
from project_brain.api.endpoints import ask, core, memory
from project_brain.core.config import Settings, settings
from project_brain.core.handlers import install_error_handlers
from project_brain.core.logging import (
    clear_log_context,
    configure_observability,
    get_logger,
    set_log_context,
    setup_logging,
)

logger = get_logger(__name__)


def _lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Connect to Neo4j and the model providers for the app's lifetime."""
        if getattr(app.state, "container", None) is not None:
            # Services were injected by the caller
            yield
            return

        logger.info("🧠 Starting Project Brain...")
        async with connect_services(config) as container:
            app.state.container = container
            logger.info("✅ Project Brain started")
            try:
                yield
            finally:
                logger.info("🛑 Shutting down Project Brain...")
                app.state.container = None

    return lifespan


def create_app(container: ServiceContainer | None = None, config: Settings | None = None) -> FastAPI:
    """Build the API app.

    With ``container`` the given services are used as-is and nothing is
    connected at startup.
    """
    config = config or (container.config if container else settings)

    app = FastAPI(
        title="Project Brain API",
        description="Personal retrieval-augmented memory assistant",
        version="0.1.0",
        lifespan=_lifespan(config),
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_log_context(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid4().hex[:12]
        set_log_context({"request_id": request_id, "path": request.url.path})
        try:
            return await call_next(request)
        finally:
            clear_log_context()

    install_error_handlers(app)

    app.include_router(core.router)
    app.include_router(memory.router, prefix="/tools", tags=["tools"])
    app.include_router(ask.router, prefix="/api", tags=["answers"])
    return app


def main() -> None:
    """Development server entry point."""
    setup_logging()
    configure_observability()
    app = create_app()
    logfire.instrument_fastapi(app)
    logger.info("🚀 Starting Project Brain server...")
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3001")), log_level="info")


if __name__ == "__main__":
    main()
