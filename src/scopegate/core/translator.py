"""Query translation — SearchRequest to query DSL, and search responses back.

The generated body is a ``bool`` query with an ordered ``must`` list:

  1. a ``range`` filter on the timestamp field, when a time bound is given
  2. a ``query_string`` over all fields, when free text is given

With neither, the query degrades to ``match_all``. A ``histogram``
aggregation is added on request: a fixed-interval ``date_histogram`` with
explicit bounds when the time range is closed, otherwise an
``auto_date_histogram``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from scopegate.core.intervals import DEFAULT_TARGET_BUCKETS, choose_interval
from scopegate.models.search import HistogramBucket, SearchHit, SearchHits, SearchRequest, SearchResult

logger = logging.getLogger(__name__)

HISTOGRAM_AGGREGATION = "histogram"
AUTO_HISTOGRAM_BUCKETS = 60


def build_search_body(request: SearchRequest) -> dict[str, Any]:
    """Assemble the complete search request body for ``request``."""
    must: list[dict[str, Any]] = []

    time_field = request.timestamp_field
    has_bound = request.from_ is not None or request.to is not None
    if time_field and has_bound:
        bounds: dict[str, Any] = {}
        if request.from_ is not None:
            bounds["gte"] = request.from_
        if request.to is not None:
            bounds["lte"] = request.to
        must.append({"range": {time_field: bounds}})

    if request.query and request.query.strip():
        # passed through unescaped so field:value and AND/OR syntax work
        must.append({"query_string": {"query": request.query, "default_field": "*"}})

    body: dict[str, Any] = {
        "query": {"bool": {"must": must or [{"match_all": {}}]}},
        "from": request.offset,
        "size": request.size,
    }

    sort = _build_sort(request)
    if sort:
        body["sort"] = sort

    if request.include_histogram and time_field:
        body["aggs"] = {HISTOGRAM_AGGREGATION: _build_histogram(request, time_field)}

    return body


def _build_sort(request: SearchRequest) -> list[dict[str, Any]]:
    if request.sort_field:
        return [{request.sort_field: {"order": request.sort_order or "desc"}}]
    if request.timestamp_field:
        return [{request.timestamp_field: {"order": "desc"}}]
    return []


def _build_histogram(request: SearchRequest, time_field: str) -> dict[str, Any]:
    if request.from_ is not None and request.to is not None:
        try:
            interval = choose_interval(request.from_, request.to, DEFAULT_TARGET_BUCKETS)
        except ValueError:
            logger.debug(
                "Time range %r..%r is not absolute, using auto-sized histogram",
                request.from_,
                request.to,
            )
        else:
            return {
                "date_histogram": {
                    "field": time_field,
                    "fixed_interval": interval,
                    "extended_bounds": {"min": request.from_, "max": request.to},
                    "min_doc_count": 0,
                }
            }

    return {"auto_date_histogram": {"field": time_field, "buckets": AUTO_HISTOGRAM_BUCKETS}}


def parse_search_response(payload: Mapping[str, Any]) -> SearchResult:
    """Convert a normalized search response into a ``SearchResult``."""
    hits_section = payload.get("hits") or {}

    total = hits_section.get("total", 0)
    if isinstance(total, Mapping):
        total = total.get("value", 0)

    hits = [
        SearchHit(id=str(hit.get("_id", "")), source=hit.get("_source") or {})
        for hit in hits_section.get("hits") or []
    ]

    histogram = None
    aggregation = (payload.get("aggregations") or {}).get(HISTOGRAM_AGGREGATION)
    if aggregation is not None:
        histogram = [
            HistogramBucket(bucket_start=bucket.get("key"), count=bucket.get("doc_count", 0))
            for bucket in aggregation.get("buckets") or []
        ]

    return SearchResult(hits=SearchHits(total=int(total or 0), hits=hits), histogram=histogram)
