"""scopegate Gateway — Core orchestrator for every cluster operation.

The gateway owns the server catalog, the connection cache and the resolver,
and runs each operation through the same pipeline:

  server id → [Catalog] → ServerIdentity
            → [Resolver] → working client (cached or probed)
            → cluster call → [normalize_response]
            → [translator / mapping / suggest] post-processing

Failure policy:
  - search, verify and list_indices raise (the user asked for them),
    including when the cluster answers with an unexpected payload shape
  - get_fields and get_values log and return ``[]`` on connection or cluster
    failures (they back optional autocomplete affordances)
  - request defects raise ``QueryError`` before any network call
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from scopegate.clients.base.exceptions import ClusterError, GatewayError, QueryError
from scopegate.core.catalog import ServerCatalog
from scopegate.core.mapping import flatten_mapping
from scopegate.core.normalizer import normalize_response
from scopegate.core.resolver import ConnectionCache, ConnectionResolver
from scopegate.core.suggest import build_values_body, extract_values
from scopegate.core.translator import build_search_body, parse_search_response
from scopegate.models.mapping import MappingField
from scopegate.models.search import SearchRequest, SearchResult
from scopegate.models.server import ServerIdentity, VerifyResult

if TYPE_CHECKING:
    from scopegate.clients.base.registry import ClientRegistry
    from scopegate.config.settings import Settings

logger = logging.getLogger(__name__)

ServerRef = str | ServerIdentity


class ScopeGateway:
    """Uniform access to every configured cluster, whatever its version.

    Attributes:
        settings: Application configuration.
        catalog: Configured servers.
        cache: Resolved clients per server id.
        resolver: Client resolution and version probing.
    """

    def __init__(self, settings: Settings, registry: ClientRegistry | None = None) -> None:
        self.settings = settings
        self.catalog = ServerCatalog(settings.servers)
        self.cache = ConnectionCache(grace_period=settings.gateway.retire_grace_period)
        self.resolver = ConnectionResolver(
            self.cache,
            registry=registry,
            probe_order=settings.gateway.probe_order,
            timeout=settings.gateway.request_timeout,
        )

    async def shutdown(self) -> None:
        """Close every cached client."""
        await self.cache.close_all()
        logger.info("scopegate gateway shut down")

    # ──────────────────────────────────────────────────────────────────────
    # Server management
    # ──────────────────────────────────────────────────────────────────────

    def identity(self, server: ServerRef) -> ServerIdentity:
        """Look up a server by id, or pass an identity through.

        Raises:
            UnknownServerError: If the id is not configured.
        """
        if isinstance(server, ServerIdentity):
            return server
        return self.catalog.get(server)

    async def upsert_server(self, server: ServerIdentity) -> None:
        """Add or replace a server.

        The cached client is kept; the next resolution compares config
        hashes and replaces it if the connection settings changed.
        """
        self.catalog.upsert(server)

    async def remove_server(self, server_id: str) -> ServerIdentity:
        """Remove a server and retire its cached client."""
        removed = self.catalog.remove(server_id)
        await self.resolver.evict(server_id)
        return removed

    # ──────────────────────────────────────────────────────────────────────
    # Fail-loud operations
    # ──────────────────────────────────────────────────────────────────────

    async def verify(self, server: ServerRef) -> VerifyResult:
        """Re-detect the server's version from scratch.

        Raises:
            ConnectionError: If no client generation could connect.
        """
        identity = self.identity(server)
        result = await self.resolver.verify(identity)
        logger.info(
            "Verified server %s: cluster=%s version=%s",
            identity.id,
            result.cluster_name,
            result.version,
        )
        return result

    async def search(self, server: ServerRef, request: SearchRequest) -> SearchResult:
        """Run a search.

        Raises:
            QueryError: If the request has no index.
            ConnectionError: If the server cannot be reached.
            ClusterError: If the cluster rejects the query.
        """
        if not request.index:
            raise QueryError("Index is required")

        identity = self.identity(server)
        body = build_search_body(request)
        client = await self.resolver.resolve(identity)

        start = time.monotonic()
        payload = normalize_response(await client.search(request.index, body))
        took_ms = int((time.monotonic() - start) * 1000)

        if not isinstance(payload, Mapping):
            raise ClusterError(f"Unexpected search response of type {type(payload).__name__}")

        result = parse_search_response(payload)
        logger.debug(
            "Search on %s/%s: %d hits in %d ms",
            identity.id,
            request.index,
            result.hits.total,
            took_ms,
        )
        return result

    async def list_indices(self, server: ServerRef) -> list[dict[str, Any]]:
        """List the server's indices, hidden (dot-prefixed) ones excluded.

        Raises:
            ConnectionError: If the server cannot be reached.
            ClusterError: If the cluster fails the call or does not answer with a list.
        """
        identity = self.identity(server)
        client = await self.resolver.resolve(identity)
        rows = normalize_response(await client.cat_indices())

        if not isinstance(rows, list):
            raise ClusterError(f"Unexpected index listing of type {type(rows).__name__}")

        return [row for row in rows if not str(row.get("index") or "").startswith(".")]

    # ──────────────────────────────────────────────────────────────────────
    # Fail-soft operations
    # ──────────────────────────────────────────────────────────────────────

    async def get_fields(self, server: ServerRef, index: str | None) -> list[MappingField]:
        """Return the flattened leaf fields of ``index``, or ``[]`` on failure.

        Raises:
            QueryError: If no index is given.
        """
        if not index:
            raise QueryError("Index is required")

        try:
            identity = self.identity(server)
            client = await self.resolver.resolve(identity)
            payload = normalize_response(await client.get_mapping(index))
        except GatewayError as e:
            logger.warning("Failed to fetch mapping for %s/%s: %s", _server_id(server), index, e)
            return []

        if not isinstance(payload, Mapping):
            logger.warning("Unexpected mapping response for %s/%s", identity.id, index)
            return []
        return flatten_mapping(payload)

    async def get_values(
        self,
        server: ServerRef,
        index: str | None,
        field: str | None,
        prefix: str = "",
        field_type: str | None = None,
    ) -> list[str | int | float]:
        """Suggest up to 20 values of ``field`` starting with ``prefix``.

        Returns ``[]`` on connection or cluster failures.

        Raises:
            QueryError: If index or field is missing.
        """
        if not index:
            raise QueryError("Index is required")
        if not field:
            raise QueryError("Field is required")

        body = build_values_body(field, prefix, field_type)
        try:
            identity = self.identity(server)
            client = await self.resolver.resolve(identity)
            payload = normalize_response(await client.search(index, body))
        except GatewayError as e:
            logger.warning("Failed to fetch values for %s/%s.%s: %s", _server_id(server), index, field, e)
            return []

        if not isinstance(payload, Mapping):
            logger.warning("Unexpected terms response for %s/%s.%s", identity.id, index, field)
            return []
        return extract_values(payload, prefix, field_type)


def _server_id(server: ServerRef) -> str:
    return server.id if isinstance(server, ServerIdentity) else server
