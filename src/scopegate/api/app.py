"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scopegate import __version__
from scopegate.api.deps import set_gateway
from scopegate.api.errors import register_exception_handlers
from scopegate.api.v1.router import router as v1_router
from scopegate.config.settings import Settings
from scopegate.core.gateway import ScopeGateway
from scopegate.observability.logging import setup_logging

DEFAULT_CONFIG_FILE = "scopegate-config.yaml"

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # Auto-detect scopegate-config.yaml if present
        yaml_path = Path(DEFAULT_CONFIG_FILE)
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings.observability)
        logger.info("Starting scopegate v%s", __version__)

        gateway = ScopeGateway(settings)
        set_gateway(gateway)

        app.state.settings = settings
        app.state.gateway = gateway

        logger.info(
            "scopegate is ready on port %d with %d configured server(s)",
            settings.server.port,
            len(gateway.catalog),
        )
        yield

        logger.info("Shutting down scopegate...")
        await gateway.shutdown()
        set_gateway(None)
        logger.info("scopegate shutdown complete")

    app = FastAPI(
        title="scopegate",
        description=(
            "Version-adaptive gateway for Elasticsearch 7, 8 and 9 clusters — "
            "search, field mappings, and value suggestions through one interface."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix="/v1")

    return app
