"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from scopegate import __version__
from scopegate.api.deps import get_gateway
from scopegate.core.gateway import ScopeGateway

router = APIRouter()


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="scopegate server version")
    service: str = Field(description="Service name ('scopegate')")
    configured_servers: int = Field(description="Number of servers in the catalog")
    resolved_servers: int = Field(description="Number of servers with a cached client")
    supported_versions: list[int] = Field(description="Elasticsearch major versions the gateway can talk to")


@router.get("/health", response_model=HealthResponse, summary="System Health Check")
async def health_check(gateway: ScopeGateway = Depends(get_gateway)) -> HealthResponse:
    """Basic health check endpoint with gateway info."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="scopegate",
        configured_servers=len(gateway.catalog),
        resolved_servers=len(gateway.cache),
        supported_versions=gateway.resolver.registry.supported_generations,
    )
