"""Server endpoints — catalog management and connection verification."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from scopegate.api.deps import get_gateway, get_server_id
from scopegate.clients.base.exceptions import ConnectionError
from scopegate.core.gateway import ScopeGateway
from scopegate.models.server import ServerIdentity, ServerSummary, VerifyResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/verify-server",
    response_model=VerifyResult,
    summary="Verify Server",
    description=(
        "Discard any cached client for the server, detect its version from "
        "scratch, and report version, cluster name and node name."
    ),
    responses={500: {"description": "Verification failed — `{success: false, error}`"}},
)
async def verify_server(
    server_id: str | None = Depends(get_server_id),
    gateway: ScopeGateway = Depends(get_gateway),
) -> VerifyResult | JSONResponse:
    try:
        return await gateway.verify(server_id)
    except ConnectionError as e:
        logger.warning("Verification failed for server %s: %s", server_id, e)
        failure = VerifyResult(success=False, error=str(e))
        return JSONResponse(status_code=500, content=failure.model_dump(exclude_none=True))


@router.get("/servers", response_model=list[ServerSummary], summary="List Servers")
async def list_servers(gateway: ScopeGateway = Depends(get_gateway)) -> list[ServerSummary]:
    return [ServerSummary.from_identity(s) for s in gateway.catalog.list()]


@router.put(
    "/servers/{server_id}",
    response_model=ServerSummary,
    summary="Add or Update Server",
    description="Register a server in memory. Changed connection settings replace its cached client on next use.",
)
async def upsert_server(
    server_id: str,
    server: ServerIdentity,
    gateway: ScopeGateway = Depends(get_gateway),
) -> ServerSummary:
    if server.id != server_id:
        raise HTTPException(status_code=400, detail="Server id in path and body differ")
    await gateway.upsert_server(server)
    return ServerSummary.from_identity(server)


@router.delete("/servers/{server_id}", status_code=204, summary="Remove Server")
async def remove_server(server_id: str, gateway: ScopeGateway = Depends(get_gateway)) -> None:
    await gateway.remove_server(server_id)
