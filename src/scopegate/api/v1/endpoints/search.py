"""Search endpoint — Query DSL translation and execution against one cluster."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from scopegate.api.deps import get_gateway, get_server_id
from scopegate.core.gateway import ScopeGateway
from scopegate.models.search import SearchRequest, SearchResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/search",
    response_model=SearchResult,
    summary="Search",
    description=(
        "Search an index on the server named by the `X-Scope-Server-Id` header.\n\n"
        "The request is translated into a `bool` query: a `range` filter on "
        "`timestamp_field` when `from`/`to` are given, then a `query_string` for "
        "`query`. Set `include_histogram` to receive per-interval document counts."
    ),
    responses={
        400: {"description": "Invalid request — e.g. missing index"},
        404: {"description": "Unknown server id"},
        502: {"description": "The cluster could not be reached or rejected the query"},
    },
)
async def search(
    request: SearchRequest,
    server_id: str | None = Depends(get_server_id),
    gateway: ScopeGateway = Depends(get_gateway),
) -> SearchResult:
    """Execute a search; failures propagate to the caller."""
    return await gateway.search(server_id, request)
