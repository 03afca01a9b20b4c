"""Base cluster client — Abstract interface for one protocol generation.

Each supported Elasticsearch generation gets a client class wrapping the
official async client library published for that generation:

  - 7: ``elasticsearch7`` (plain JSON requests)
  - 8: ``elasticsearch8`` (``compatible-with=8`` media type, product check)
  - 9: ``elasticsearch`` 9.x (``compatible-with=9`` media type, product check)

Subclasses build the library client and map the library's exceptions onto
``TransportError`` and ``ClusterError``. Responses are returned exactly as the
library produces them; callers pass them through
``scopegate.core.normalizer.normalize_response``.

A client that has been replaced in the connection cache is *retired*: it
stays usable, and counts its in-flight calls so the cache can tell when it
is safe to close.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from scopegate.clients.base.exceptions import GatewayError
from scopegate.models.server import ServerIdentity


class ClientConfig(BaseModel):
    """Connection settings for one client instance."""

    url: str = Field(description="Cluster base URL")
    username: str | None = None
    password: str | None = None
    cert_path: str | None = None
    key_path: str | None = None
    verify_certs: bool = True
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    @classmethod
    def from_identity(cls, identity: ServerIdentity, timeout: float = 30.0) -> ClientConfig:
        return cls(
            url=identity.url,
            username=identity.username,
            password=identity.password,
            cert_path=identity.cert_path,
            key_path=identity.key_path,
            verify_certs=not identity.allow_insecure_ssl,
            timeout=timeout,
        )

    @property
    def credentials(self) -> tuple[str, str] | None:
        if self.username and self.password:
            return (self.username, self.password)
        return None


class ClusterClient(ABC):
    """Abstract client for a single protocol generation.

    Args:
        config: Connection settings.
        es: An already built library client. Built from ``config`` when None.
    """

    def __init__(self, config: ClientConfig, es: Any | None = None) -> None:
        self._config = config
        self._es = es if es is not None else self.create_client(config)
        self._in_flight = 0
        self._retired_at: float | None = None
        self._closed = False

    @property
    @abstractmethod
    def generation(self) -> int:
        """Major version of the protocol this client speaks."""

    @abstractmethod
    def create_client(self, config: ClientConfig) -> Any:
        """Build the official async client for this generation."""

    @abstractmethod
    def translate_error(self, error: Exception, operation: str) -> GatewayError | None:
        """Map a library exception to a gateway error, or None to let it through."""

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Number of cluster calls currently running on this client."""
        return self._in_flight

    # ── Cluster API ──────────────────────────────────────────────────────

    async def info(self) -> Any:
        """Call the root info endpoint."""
        return await self._call("GET /", self._es.info)

    async def search(self, index: str, body: dict[str, Any]) -> Any:
        """Run a search against ``index`` with a query-DSL body."""
        return await self._call(f"POST /{index}/_search", self._es.search, index=index, body=body)

    async def get_mapping(self, index: str) -> Any:
        """Fetch the field mappings of ``index``."""
        return await self._call(f"GET /{index}/_mapping", self._es.indices.get_mapping, index=index)

    async def cat_indices(self) -> Any:
        """List indices with their stats."""
        return await self._call("GET /_cat/indices", self._es.cat.indices, format="json")

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close the library client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._es.close()

    def retire(self) -> None:
        """Mark the client as replaced, starting its grace period.

        Nothing is closed here: callers may still hold the client, with or
        without a call already running. ``ConnectionCache`` closes it once it
        is idle and the grace period is over.
        """
        if self._retired_at is None:
            self._retired_at = time.monotonic()

    def retired_for(self) -> float | None:
        """Seconds since ``retire``, or None while the client is in service."""
        if self._retired_at is None:
            return None
        return time.monotonic() - self._retired_at

    async def _call(self, operation: str, method: Callable[..., Awaitable[Any]], **kwargs: Any) -> Any:
        self._in_flight += 1
        try:
            return await method(**kwargs)
        except Exception as e:
            error = self.translate_error(e, operation)
            if error is None:
                raise
            raise error from e
        finally:
            self._in_flight -= 1


def error_reason(body: Any, fallback: str) -> str:
    """Extract the cluster's error reason from an error response body."""
    error = body.get("error") if isinstance(body, Mapping) else None
    if isinstance(error, Mapping):
        return str(error.get("reason") or error.get("type") or fallback)
    if error:
        return str(error)
    return fallback
