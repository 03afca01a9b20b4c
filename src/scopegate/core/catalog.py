"""Server catalog — in-memory lookup of server identities by id."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from scopegate.clients.base.exceptions import UnknownServerError
from scopegate.models.server import ServerIdentity

logger = logging.getLogger(__name__)


class ServerCatalog:
    """Holds the currently configured servers.

    Nothing is persisted; the catalog is seeded from settings and changed at
    runtime through ``upsert`` and ``remove``.
    """

    def __init__(self, servers: Iterable[ServerIdentity] = ()) -> None:
        self._servers: dict[str, ServerIdentity] = {}
        for server in servers:
            self.upsert(server)

    def get(self, server_id: str | None) -> ServerIdentity:
        """Return the identity registered under ``server_id``.

        Raises:
            UnknownServerError: If no such server is configured.
        """
        if not server_id or server_id not in self._servers:
            raise UnknownServerError(f"Server config not found for ID: {server_id}")
        return self._servers[server_id]

    def upsert(self, server: ServerIdentity) -> None:
        if server.id in self._servers:
            logger.info("Updating server %s", server.id)
        self._servers[server.id] = server

    def remove(self, server_id: str) -> ServerIdentity:
        """Remove and return a server.

        Raises:
            UnknownServerError: If no such server is configured.
        """
        server = self.get(server_id)
        del self._servers[server_id]
        return server

    def list(self) -> list[ServerIdentity]:
        return list(self._servers.values())

    def __len__(self) -> int:
        return len(self._servers)
