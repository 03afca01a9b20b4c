"""Integration test fixtures — a real Elasticsearch with seeded log documents.

Expects a cluster (any of 7.x, 8.x or 9.x, security disabled) at
``localhost:9200``, e.g.:
    docker run -p 9200:9200 -e discovery.type=single-node \
        -e xpack.security.enabled=false docker.elastic.co/elasticsearch/elasticsearch:8.11.2

Seed data is loaded on first use; tests are skipped when no cluster answers.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

ES_HOST = "http://localhost:9200"
INDEX = "scopegate-test-logs"

MOCK_DOCUMENTS: list[dict[str, Any]] = [
    {
        "id": "log-001",
        "@timestamp": "2024-05-01T00:05:00Z",
        "level": "info",
        "service": "checkout",
        "message": "Order placed",
        "http": {"status": 200, "method": "POST"},
    },
    {
        "id": "log-002",
        "@timestamp": "2024-05-01T00:15:00Z",
        "level": "error",
        "service": "checkout",
        "message": "Payment provider timeout",
        "http": {"status": 504, "method": "POST"},
    },
    {
        "id": "log-003",
        "@timestamp": "2024-05-01T00:35:00Z",
        "level": "warn",
        "service": "cart",
        "message": "Slow response from inventory",
        "http": {"status": 200, "method": "GET"},
    },
    {
        "id": "log-004",
        "@timestamp": "2024-05-01T00:50:00Z",
        "level": "error",
        "service": "catalog",
        "message": "Upstream returned server error",
        "http": {"status": 500, "method": "GET"},
    },
]


def _wait_for_service(url: str, timeout: float = 10.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


async def _seed_elasticsearch(host: str = ES_HOST, index: str = INDEX) -> None:
    async with httpx.AsyncClient(base_url=host, timeout=30) as client:
        await client.delete(f"/{index}", params={"ignore_unavailable": "true"})

        mapping = {
            "mappings": {
                "properties": {
                    "@timestamp": {"type": "date"},
                    "level": {"type": "keyword"},
                    "service": {"type": "keyword"},
                    "message": {"type": "text"},
                    "http": {
                        "properties": {
                            "status": {"type": "integer"},
                            "method": {"type": "keyword"},
                        }
                    },
                }
            }
        }
        resp = await client.put(f"/{index}", json=mapping)
        resp.raise_for_status()

        for doc in MOCK_DOCUMENTS:
            resp = await client.put(f"/{index}/_doc/{doc['id']}", json=doc)
            resp.raise_for_status()

        await client.post(f"/{index}/_refresh")


@pytest.fixture(scope="session")
def elasticsearch_ready() -> str:
    """Ensure Elasticsearch is running and seeded."""
    if not _wait_for_service(ES_HOST):
        pytest.skip(f"Elasticsearch not available at {ES_HOST}")
    asyncio.run(_seed_elasticsearch(ES_HOST))
    return ES_HOST
