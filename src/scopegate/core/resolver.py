"""Connection Resolver — Finds, probes, and caches a working client per server.

A server's protocol generation is not known up front. Resolution goes:

  1. Return the cached client when the server's config hash still matches
     (and the version hint, if any, is the cached major version or the hint
     the entry was resolved under).
  2. Otherwise evict the stale entry and probe: the hinted generation first,
     then every registered generation in the configured order.
  3. Cache the first client whose info call succeeds.

Resolutions for the same server may run concurrently. Both may probe; each
publishes a fully built entry and the last one wins. A failed resolution
never leaves an entry behind.

Clients leaving the cache for any reason are retired rather than closed.
Calls already running on a retired client complete normally, and a caller
that obtained it just before it was replaced can still use it. The cache
closes it once it is idle and its grace period has passed. Shutdown closes
everything.
"""

from __future__ import annotations

import hashlib
import json
import logging

from pydantic import BaseModel

from scopegate.clients.base.client import ClientConfig, ClusterClient
from scopegate.clients.base.exceptions import ConnectionError
from scopegate.clients.base.registry import ClientRegistry, ProbeHandler, ProbeResult, default_registry
from scopegate.models.server import ServerIdentity, VerifyResult

logger = logging.getLogger(__name__)

_HASHED_FIELDS = ("url", "username", "password", "cert_path", "key_path", "allow_insecure_ssl")


def compute_config_hash(identity: ServerIdentity) -> str:
    """Digest the connection-relevant fields of ``identity``.

    The version hint and display name are not part of the hash.
    """
    payload = json.dumps({name: getattr(identity, name) for name in _HASHED_FIELDS}, sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ConnectionCacheEntry(BaseModel):
    """A resolved client and what it was resolved against."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    client: ClusterClient
    config_hash: str
    reported_version: str
    major_version: int
    resolved_hint: int | None = None


class ConnectionCache:
    """Resolved clients keyed by server id.

    Entries are only ever replaced whole; there is at most one per id. Clients
    taken out of the cache are retired here. A retired client is closed by
    ``sweep`` once it has no call running and ``grace_period`` seconds have
    passed, or by ``close_all`` at shutdown.

    Args:
        grace_period: Seconds a retired client stays open after retirement.
    """

    def __init__(self, grace_period: float = 60.0) -> None:
        self.grace_period = grace_period
        self._entries: dict[str, ConnectionCacheEntry] = {}
        self._retired: list[ClusterClient] = []

    def get(self, server_id: str) -> ConnectionCacheEntry | None:
        return self._entries.get(server_id)

    def put(self, server_id: str, entry: ConnectionCacheEntry) -> ConnectionCacheEntry | None:
        """Store ``entry`` and return the entry it displaced, if any."""
        displaced = self._entries.get(server_id)
        self._entries[server_id] = entry
        return displaced

    def evict(self, server_id: str) -> ConnectionCacheEntry | None:
        """Remove and return the entry for ``server_id``, if any."""
        return self._entries.pop(server_id, None)

    async def retire(self, client: ClusterClient) -> None:
        """Take ``client`` out of service; it is closed by a later sweep."""
        client.retire()
        if client not in self._retired:
            self._retired.append(client)
        await self.sweep()

    async def sweep(self) -> None:
        """Close retired clients that are idle and past their grace period."""
        keep: list[ClusterClient] = []
        expired: list[ClusterClient] = []
        for client in self._retired:
            if client.closed:
                continue
            age = client.retired_for() or 0.0
            if client.in_flight == 0 and age >= self.grace_period:
                expired.append(client)
            else:
                keep.append(client)
        self._retired = keep
        for client in expired:
            try:
                await client.close()
            except Exception:
                logger.warning("Error closing retired client for %s", client.url, exc_info=True)

    @property
    def retired(self) -> list[ClusterClient]:
        """Retired clients that are still open."""
        return [c for c in self._retired if not c.closed]

    def __contains__(self, server_id: object) -> bool:
        return server_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def close_all(self) -> None:
        """Close every cached and retired client and empty the cache."""
        clients = [(server_id, entry.client) for server_id, entry in self._entries.items()]
        clients += [("retired", client) for client in self._retired]
        self._entries.clear()
        self._retired.clear()
        for server_id, client in clients:
            try:
                await client.close()
            except Exception:
                logger.warning("Error closing client for server %s", server_id, exc_info=True)


class ConnectionResolver:
    """Resolves a working ``ClusterClient`` for a ``ServerIdentity``.

    Args:
        cache: The cache shared by every resolution in this process.
        registry: Probe handlers per generation. Defaults to 7, 8 and 9.
        probe_order: Generations to try when auto-detecting.
        timeout: Per-request timeout given to every client, in seconds.
    """

    def __init__(
        self,
        cache: ConnectionCache,
        registry: ClientRegistry | None = None,
        probe_order: list[int] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.cache = cache
        self.registry = registry or default_registry()
        self._handlers = self.registry.ordered(probe_order or [8, 7, 9])
        self._timeout = timeout

    async def resolve(self, identity: ServerIdentity) -> ClusterClient:
        """Return a working client for ``identity``.

        Raises:
            ConnectionError: If every probe failed.
        """
        entry, _ = await self._resolve(identity, force=False)
        return entry.client

    async def resolve_entry(self, identity: ServerIdentity) -> ConnectionCacheEntry:
        """Like ``resolve`` but returns the full cache entry."""
        entry, _ = await self._resolve(identity, force=False)
        return entry

    async def verify(self, identity: ServerIdentity) -> VerifyResult:
        """Drop any cached client, resolve from scratch, and report what was found.

        Raises:
            ConnectionError: If every probe failed.
        """
        entry, probe = await self._resolve(identity, force=True)
        info = probe.info if probe else {}
        return VerifyResult(
            success=True,
            version=entry.reported_version,
            major_version=entry.major_version,
            cluster_name=info.get("cluster_name"),
            name=info.get("name"),
        )

    async def evict(self, server_id: str) -> None:
        """Forget the cached client for ``server_id`` and retire it."""
        stale = self.cache.evict(server_id)
        if stale is not None:
            await self.cache.retire(stale.client)

    # ── Internals ────────────────────────────────────────────────────────

    async def _resolve(
        self, identity: ServerIdentity, force: bool
    ) -> tuple[ConnectionCacheEntry, ProbeResult | None]:
        await self.cache.sweep()
        config_hash = compute_config_hash(identity)
        hint = identity.major_version_hint

        cached = self.cache.get(identity.id)
        if cached is not None and not force:
            # a hint that already failed once and fell back to detection still matches
            hint_matches = not hint or hint in (cached.major_version, cached.resolved_hint)
            if cached.config_hash == config_hash and hint_matches:
                return cached, None
            logger.info("Cached client for server %s is stale, re-resolving", identity.id)

        await self.evict(identity.id)

        config = ClientConfig.from_identity(identity, timeout=self._timeout)
        failures: list[tuple[int, Exception]] = []
        tried: set[int] = set()

        if hint:
            handler = self.registry.get(hint)
            if handler is None:
                logger.warning("No client for hinted version %d, auto-detecting", hint)
            else:
                tried.add(hint)
                probe = await self._try(handler, config, identity, failures)
                if probe is not None:
                    entry = await self._publish(identity, config_hash, probe, major_version=hint)
                    return entry, probe
                logger.warning("Hinted client v%d failed for %s, auto-detecting...", hint, identity.url)

        for handler in self._handlers:
            if handler.generation in tried:
                continue
            probe = await self._try(handler, config, identity, failures)
            if probe is not None:
                entry = await self._publish(identity, config_hash, probe, major_version=probe.major_version)
                return entry, probe

        raise ConnectionError(
            f"Failed to connect to Elasticsearch at {identity.url}",
            url=identity.url,
            failures=failures,
        )

    async def _try(
        self,
        handler: ProbeHandler,
        config: ClientConfig,
        identity: ServerIdentity,
        failures: list[tuple[int, Exception]],
    ) -> ProbeResult | None:
        try:
            return await handler.probe(config)
        except Exception as e:
            logger.warning("Version detection: v%d failed for %s: %s", handler.generation, identity.url, e)
            failures.append((handler.generation, e))
            return None

    async def _publish(
        self, identity: ServerIdentity, config_hash: str, probe: ProbeResult, major_version: int
    ) -> ConnectionCacheEntry:
        entry = ConnectionCacheEntry(
            client=probe.client,
            config_hash=config_hash,
            reported_version=probe.reported_version,
            major_version=major_version,
            resolved_hint=identity.major_version_hint,
        )
        displaced = self.cache.put(identity.id, entry)
        logger.info(
            "Resolved server %s: Elasticsearch %s via v%d client",
            identity.id,
            probe.reported_version,
            probe.client.generation,
        )
        if displaced is not None and displaced.client is not entry.client:
            # a concurrent resolution published first
            await self.cache.retire(displaced.client)
        return entry
