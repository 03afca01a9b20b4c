"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import elasticsearch
import elasticsearch7
import elasticsearch8
import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, ListApiResponse, NodeConfig, ObjectApiResponse
from elastic_transport import ConnectionError as ElasticTransportConnectionError

from scopegate.clients.base.client import ClientConfig
from scopegate.clients.base.registry import ClientRegistry, default_registry
from scopegate.config.settings import Settings
from scopegate.models.search import SearchRequest
from scopegate.models.server import ServerIdentity

_LIBRARIES = {8: elasticsearch8, 9: elasticsearch}


def response_meta(status: int = 200) -> ApiResponseMeta:
    return ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders({"x-elastic-product": "Elasticsearch"}),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )


def library_error(generation: int, status: int, error_type: str, reason: str) -> Exception:
    """The exception the generation's library raises for an HTTP error."""
    body = {"error": {"type": error_type, "reason": reason}, "status": status}
    if generation == 7:
        error_class = elasticsearch7.exceptions.HTTP_EXCEPTIONS.get(status, elasticsearch7.TransportError)
        return error_class(status, error_type, body)
    library = _LIBRARIES[generation]
    error_class = {400: library.BadRequestError, 404: library.NotFoundError}.get(status, library.ApiError)
    return error_class(error_type, meta=response_meta(status), body=body)


def connection_error(generation: int) -> Exception:
    """The exception the generation's library raises when nothing answers."""
    if generation == 7:
        return elasticsearch7.ConnectionError("N/A", "Connection refused", OSError("Connection refused"))
    return ElasticTransportConnectionError("Connection refused")


class FakeLibraryClient:
    """Stands in for one generation's ``AsyncElasticsearch``."""

    def __init__(self, cluster: FakeCluster, generation: int, config: ClientConfig) -> None:
        self.cluster = cluster
        self.generation = generation
        self.config = config
        self.closed = False
        self.indices = SimpleNamespace(get_mapping=self._api("get_mapping"))
        self.cat = SimpleNamespace(indices=self._api("cat_indices"))
        self.info = self._api("info")
        self.search = self._api("search")

    def _api(self, name: str):
        async def call(**kwargs: Any) -> Any:
            return await self.cluster.answer(self, name, kwargs)

        return call

    async def close(self) -> None:
        self.closed = True


class FakeCluster:
    """In-process stand-in for an Elasticsearch cluster of a given version.

    Behaves like the real thing where version detection depends on it:
      - generation 8 and 9 clients are only accepted by a cluster of that
        major version or the next one up; generation 7 clients always are
      - generation 8 and 9 clients refuse a cluster that does not identify
        as Elasticsearch (``product=None``)

    Canned payloads go in ``responses`` under "info", "indices", "search" or
    "mapping". ``fail`` makes an API raise the library's HTTP error and
    ``hold`` makes it wait for an event.

    Every call is recorded in ``calls`` as ``(generation, api, kwargs)``.
    """

    def __init__(
        self,
        version: str = "8.11.2",
        *,
        cluster_name: str = "test-cluster",
        node_name: str = "node-1",
        product: str | None = "Elasticsearch",
        down: bool = False,
        responses: dict[str, Any] | None = None,
    ) -> None:
        self.version = version
        self.major = int(version.split(".")[0])
        self.cluster_name = cluster_name
        self.node_name = node_name
        self.product = product
        self.down = down
        self.responses = responses or {}
        self.calls: list[tuple[int, str, dict[str, Any]]] = []
        self.clients: list[FakeLibraryClient] = []
        self._failures: dict[str, tuple[int, str, str]] = {}
        self._holds: dict[str, asyncio.Event] = {}

    def connect(self, generation: int, config: ClientConfig) -> FakeLibraryClient:
        client = FakeLibraryClient(self, generation, config)
        self.clients.append(client)
        return client

    def registry(self) -> ClientRegistry:
        return default_registry(client_factory=self.connect)

    def fail(self, api: str, status: int, error_type: str, reason: str) -> None:
        self._failures[api] = (status, error_type, reason)

    def hold(self, api: str) -> asyncio.Event:
        """Block calls to ``api`` until the returned event is set."""
        event = asyncio.Event()
        self._holds[api] = event
        return event

    async def answer(self, client: FakeLibraryClient, api: str, kwargs: dict[str, Any]) -> Any:
        generation = client.generation
        self.calls.append((generation, api, kwargs))
        if client.closed or self.down:
            raise connection_error(generation)

        if generation != 7 and generation not in (self.major, self.major - 1):
            raise library_error(
                generation, 400, "media_type_header_exception", "Invalid media-type value on headers [Accept]"
            )
        if generation != 7 and self.product is None:
            library = _LIBRARIES[generation]
            raise library.UnsupportedProductError(
                "The client noticed that the server is not Elasticsearch and we do not support this unknown product",
                meta=response_meta(),
                body={},
            )

        if api in self._holds:
            await self._holds[api].wait()
            if client.closed:
                raise connection_error(generation)
        if api in self._failures:
            raise library_error(generation, *self._failures[api])

        payload = self._payload(api)
        if generation == 7:
            return payload
        if isinstance(payload, list):
            return ListApiResponse(body=payload, meta=response_meta())
        return ObjectApiResponse(body=payload, meta=response_meta())

    def _payload(self, api: str) -> Any:
        if api == "info":
            return self.responses.get(
                "info",
                {
                    "name": self.node_name,
                    "cluster_name": self.cluster_name,
                    "version": {"number": self.version},
                    "tagline": "You Know, for Search",
                },
            )
        if api == "cat_indices":
            return self.responses.get("indices", [])
        if api == "search":
            return self.responses.get("search", {"hits": {"total": {"value": 0}, "hits": []}})
        return self.responses.get("mapping", {})

    def generations_probed(self) -> list[int]:
        """Client generation behind each info call, in order."""
        return [generation for generation, api, _ in self.calls if api == "info"]

    def requests_for(self, api: str) -> list[dict[str, Any]]:
        """Keyword arguments of every call to ``api``."""
        return [kwargs for _, name, kwargs in self.calls if name == api]

    def search_bodies(self) -> list[dict[str, Any]]:
        return [kwargs["body"] for kwargs in self.requests_for("search")]


@pytest.fixture
def fake_cluster() -> type[FakeCluster]:
    """The ``FakeCluster`` class, for tests that build their own clusters."""
    return FakeCluster


@pytest.fixture
def identity() -> ServerIdentity:
    return ServerIdentity(id="local", url="http://localhost:9200", name="Local")


@pytest.fixture
def settings(identity: ServerIdentity) -> Settings:
    """Create a test Settings instance with one configured server."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        servers=[identity],
    )


@pytest.fixture
def search_request() -> SearchRequest:
    return SearchRequest(
        index="logs-*",
        query="level:error AND service:api",
        **{"from": "2024-05-01T00:00:00Z", "to": "2024-05-01T01:00:00Z"},
        timestamp_field="@timestamp",
        include_histogram=True,
    )


@pytest.fixture
def make_library_error():
    """``library_error``, for tests that raise library exceptions themselves."""
    return library_error
