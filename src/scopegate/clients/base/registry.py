"""Client Registry — The closed set of protocol generations the gateway can probe.

Each supported generation is registered once as a ``ProbeHandler``. A handler
knows how to build a client for its generation and confirm, through the
cluster's info endpoint, that the client actually works.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from scopegate.clients.base.client import ClientConfig, ClusterClient
from scopegate.clients.base.exceptions import ClusterError, ConfigurationError
from scopegate.core.normalizer import normalize_response

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*(\d+)")

# Builds the library client for (generation, config); replaces the default one.
ClientFactory = Callable[[int, ClientConfig], Any]


def parse_major_version(version: str) -> int:
    """Return the leading integer of a version string (``8`` from ``8.11.2``).

    Raises:
        ValueError: If the string does not start with a number.
    """
    match = _LEADING_INT.match(version)
    if not match:
        raise ValueError(f"Unparseable version string: {version!r}")
    return int(match.group(1))


class ProbeResult(BaseModel):
    """A client that answered its info call, with what it reported."""

    model_config = {"arbitrary_types_allowed": True}

    client: ClusterClient
    info: dict[str, Any]
    reported_version: str

    @property
    def major_version(self) -> int:
        return parse_major_version(self.reported_version)


class ProbeHandler:
    """Builds and checks a client for one generation.

    Args:
        generation: Major version handled.
        client_class: ``ClusterClient`` subclass for that generation.
        client_factory: Optional builder for the underlying library client.
    """

    def __init__(
        self,
        generation: int,
        client_class: type[ClusterClient],
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.generation = generation
        self.client_class = client_class
        self._client_factory = client_factory

    async def probe(self, config: ClientConfig) -> ProbeResult:
        """Create a client and call its info endpoint.

        The client is closed again when the probe fails.

        Raises:
            GatewayError: On transport or cluster failures.
            OSError: If TLS material cannot be loaded.
        """
        es = self._client_factory(self.generation, config) if self._client_factory else None
        client = self.client_class(config, es=es)
        try:
            info = normalize_response(await client.info())
            if not isinstance(info, dict):
                raise ClusterError("Info endpoint returned an unexpected payload", url=config.url)
            version = info.get("version", {}).get("number")
            if not version:
                raise ClusterError("Info endpoint did not report a version number", url=config.url)
            parse_major_version(version)
        except Exception:
            await client.close()
            raise
        return ProbeResult(client=client, info=info, reported_version=version)

    def __repr__(self) -> str:
        return f"ProbeHandler(generation={self.generation}, client_class={self.client_class.__name__})"


class ClientRegistry:
    """Registry of probe handlers keyed by generation.

    Example:
        >>> registry = ClientRegistry()
        >>> registry.register(8, Elasticsearch8Client)
        >>> registry.get(8)
        ProbeHandler(generation=8, client_class=Elasticsearch8Client)
    """

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._handlers: dict[int, ProbeHandler] = {}
        self._client_factory = client_factory

    def register(self, generation: int, client_class: type[ClusterClient]) -> None:
        """Register the client class for a generation.

        Args:
            generation: Major version handled by the class.
            client_class: The client class to register.
        """
        if generation in self._handlers:
            logger.warning("Overwriting existing client registration for generation %d", generation)
        self._handlers[generation] = ProbeHandler(generation, client_class, client_factory=self._client_factory)
        logger.debug("Registered client generation %d: %s", generation, client_class.__name__)

    def get(self, generation: int) -> ProbeHandler | None:
        """Return the handler for ``generation``, or None if unsupported."""
        return self._handlers.get(generation)

    def ordered(self, order: list[int]) -> list[ProbeHandler]:
        """Return handlers in probe order.

        Raises:
            ConfigurationError: If the order names an unregistered generation.
        """
        unknown = [g for g in order if g not in self._handlers]
        if unknown:
            raise ConfigurationError(
                f"Probe order names unsupported generations {unknown}. "
                f"Supported: {self.supported_generations}"
            )
        return [self._handlers[g] for g in order]

    @property
    def supported_generations(self) -> list[int]:
        """List all registered generations."""
        return sorted(self._handlers)


def default_registry(client_factory: ClientFactory | None = None) -> ClientRegistry:
    """Registry with the built-in 7.x, 8.x and 9.x clients."""
    from scopegate.clients.v7.client import Elasticsearch7Client
    from scopegate.clients.v8.client import Elasticsearch8Client
    from scopegate.clients.v9.client import Elasticsearch9Client

    registry = ClientRegistry(client_factory=client_factory)
    registry.register(7, Elasticsearch7Client)
    registry.register(8, Elasticsearch8Client)
    registry.register(9, Elasticsearch9Client)
    return registry
