"""Search request and result models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# Epoch milliseconds or a date string understood by the cluster.
TimeBound = int | float | str


class SearchRequest(BaseModel):
    """Declarative search request translated into query DSL."""

    model_config = {"populate_by_name": True}

    index: str | None = Field(default=None, description="Index name or pattern to search")
    query: str | None = Field(default=None, description="Free-text query (field:value and boolean syntax allowed)")
    from_: TimeBound | None = Field(default=None, alias="from", description="Lower time bound (inclusive)")
    to: TimeBound | None = Field(default=None, description="Upper time bound (inclusive)")
    timestamp_field: str | None = Field(default=None, description="Field holding the document timestamp")
    offset: int = Field(default=0, ge=0, description="Pagination offset")
    size: int = Field(default=50, ge=0, description="Page size")
    sort_field: str | None = Field(default=None, description="Field to sort by")
    sort_order: Literal["asc", "desc"] | None = Field(default=None, description="Sort direction")
    include_histogram: bool = Field(default=False, description="Request a time histogram aggregation")


class SearchHit(BaseModel):
    """A single matching document."""

    id: str = Field(description="Document id")
    source: dict[str, Any] = Field(default_factory=dict, description="Document source")


class SearchHits(BaseModel):
    total: int = Field(default=0, description="Total number of matching documents")
    hits: list[SearchHit] = Field(default_factory=list)


class HistogramBucket(BaseModel):
    """One time-histogram slot."""

    bucket_start: int | float | str = Field(description="Bucket start (epoch ms as returned by the cluster)")
    count: int = Field(default=0, description="Number of documents in the bucket")


class SearchResult(BaseModel):
    """Normalized search result."""

    hits: SearchHits = Field(default_factory=SearchHits)
    histogram: list[HistogramBucket] | None = Field(default=None, description="Present when a histogram was requested")
