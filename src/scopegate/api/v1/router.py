"""API v1 Router — Search, metadata, verification, server, and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from scopegate.api.v1.endpoints.health import router as health_router
from scopegate.api.v1.endpoints.metadata import router as metadata_router
from scopegate.api.v1.endpoints.search import router as search_router
from scopegate.api.v1.endpoints.servers import router as servers_router

router = APIRouter(tags=["v1"])
router.include_router(search_router)
router.include_router(metadata_router)
router.include_router(servers_router)
router.include_router(health_router)
