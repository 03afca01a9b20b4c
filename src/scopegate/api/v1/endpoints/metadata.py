"""Metadata endpoints — index listing, field mappings, and value suggestions.

Field and value lookups back autocomplete in the UI, so they answer ``[]``
when the cluster cannot be reached instead of failing.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from scopegate.api.deps import get_gateway, get_server_id
from scopegate.core.gateway import ScopeGateway
from scopegate.models.mapping import FieldInfo

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/indices",
    summary="List Indices",
    description="List the non-hidden indices of the server with their stats.",
)
async def list_indices(
    server_id: str | None = Depends(get_server_id),
    gateway: ScopeGateway = Depends(get_gateway),
) -> list[dict[str, Any]]:
    return await gateway.list_indices(server_id)


@router.get(
    "/fields",
    response_model=list[FieldInfo],
    summary="List Fields",
    description="Flattened leaf fields of an index mapping, sorted by name.",
)
async def list_fields(
    index: str | None = Query(default=None, description="Index name or pattern"),
    server_id: str | None = Depends(get_server_id),
    gateway: ScopeGateway = Depends(get_gateway),
) -> list[FieldInfo]:
    fields = await gateway.get_fields(server_id, index)
    return [FieldInfo.from_mapping_field(f) for f in fields]


@router.get(
    "/values",
    summary="Suggest Values",
    description=(
        "Up to 20 values of `field` starting with `query`. Numeric fields "
        "(`type` integer, long, float, ...) are sorted numerically, others alphabetically."
    ),
)
async def suggest_values(
    index: str | None = Query(default=None, description="Index name or pattern"),
    field: str | None = Query(default=None, description="Field to suggest values for"),
    query: str = Query(default="", description="Value prefix typed so far"),
    type: str = Query(default="", description="Mapping type of the field"),
    server_id: str | None = Depends(get_server_id),
    gateway: ScopeGateway = Depends(get_gateway),
) -> list[str | int | float]:
    return await gateway.get_values(server_id, index, field, prefix=query, field_type=type or None)
