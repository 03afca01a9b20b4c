"""Mapping of gateway exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scopegate.clients.base.exceptions import (
    ClusterError,
    ConnectionError,
    QueryError,
    UnknownServerError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers translating gateway errors into JSON error responses."""

    @app.exception_handler(QueryError)
    async def _query_error(request: Request, exc: QueryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(UnknownServerError)
    async def _unknown_server(request: Request, exc: UnknownServerError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(ConnectionError)
    async def _connection_error(request: Request, exc: ConnectionError) -> JSONResponse:
        logger.error("Connection failed for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=502, content={"error": str(exc), "url": exc.url})

    @app.exception_handler(ClusterError)
    async def _cluster_error(request: Request, exc: ClusterError) -> JSONResponse:
        logger.error("Cluster error for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=502,
            content={"error": str(exc), "status_code": exc.status_code},
        )
