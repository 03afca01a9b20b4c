"""Tests for the per-generation cluster clients."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import elasticsearch
import elasticsearch7
import elasticsearch8
import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elastic_transport import ConnectionError as ElasticTransportConnectionError

from scopegate.clients.base.client import ClientConfig
from scopegate.clients.base.exceptions import ClusterError, ConnectionError, TransportError
from scopegate.clients.v7.client import Elasticsearch7Client
from scopegate.clients.v8.client import Elasticsearch8Client
from scopegate.clients.v9.client import Elasticsearch9Client

INFO = {"name": "node-1", "cluster_name": "c", "version": {"number": "8.11.2"}}


def _config(**overrides) -> ClientConfig:
    return ClientConfig(url="http://localhost:9200", **overrides)


@pytest.fixture
def es() -> AsyncMock:
    mock = AsyncMock()
    mock.info.return_value = INFO
    return mock


# ── Library construction ─────────────────────────────────────────────────────


class TestCreateClient:
    def test_v7_options(self) -> None:
        with patch("scopegate.clients.v7.client.AsyncElasticsearch") as factory:
            Elasticsearch7Client(
                _config(
                    username="elastic",
                    password="changeme",
                    cert_path="/certs/client.pem",
                    key_path="/certs/client.key",
                    verify_certs=False,
                    timeout=5,
                )
            )

        factory.assert_called_once_with(
            hosts=["http://localhost:9200"],
            verify_certs=False,
            ssl_show_warn=False,
            timeout=5.0,
            http_auth=("elastic", "changeme"),
            client_cert="/certs/client.pem",
            client_key="/certs/client.key",
        )

    def test_v7_no_auth_without_password(self) -> None:
        with patch("scopegate.clients.v7.client.AsyncElasticsearch") as factory:
            Elasticsearch7Client(_config(username="elastic"))

        assert "http_auth" not in factory.call_args.kwargs

    @pytest.mark.parametrize("client_class", [Elasticsearch8Client, Elasticsearch9Client])
    def test_v8_v9_options(self, client_class) -> None:
        with patch.object(client_class, "async_client_class") as factory:
            client_class(_config(username="elastic", password="changeme", timeout=12))

        kwargs = factory.call_args.kwargs
        assert kwargs["hosts"] == ["http://localhost:9200"]
        assert kwargs["basic_auth"] == ("elastic", "changeme")
        assert kwargs["request_timeout"] == 12.0
        assert kwargs["verify_certs"] is True
        assert "client_cert" not in kwargs

    @pytest.mark.parametrize(
        ("client_class", "library_class"),
        [
            (Elasticsearch7Client, elasticsearch7.AsyncElasticsearch),
            (Elasticsearch8Client, elasticsearch8.AsyncElasticsearch),
            (Elasticsearch9Client, elasticsearch.AsyncElasticsearch),
        ],
    )
    async def test_builds_official_client(self, client_class, library_class) -> None:
        client = client_class(_config())

        assert isinstance(client._es, library_class)
        await client.close()
        assert client.closed


# ── Cluster calls ────────────────────────────────────────────────────────────


class TestCalls:
    async def test_info(self, es: AsyncMock) -> None:
        client = Elasticsearch8Client(_config(), es=es)

        assert await client.info() == INFO
        es.info.assert_awaited_once_with()

    async def test_search_keeps_index_pattern(self, es: AsyncMock) -> None:
        client = Elasticsearch7Client(_config(), es=es)

        await client.search("logs-*,metrics", {"query": {"match_all": {}}})

        es.search.assert_awaited_once_with(index="logs-*,metrics", body={"query": {"match_all": {}}})

    async def test_get_mapping(self, es: AsyncMock) -> None:
        client = Elasticsearch9Client(_config(), es=es)

        await client.get_mapping("logs")

        es.indices.get_mapping.assert_awaited_once_with(index="logs")

    async def test_cat_indices_asks_for_json(self, es: AsyncMock) -> None:
        client = Elasticsearch7Client(_config(), es=es)

        await client.cat_indices()

        es.cat.indices.assert_awaited_once_with(format="json")

    async def test_close_is_idempotent(self, es: AsyncMock) -> None:
        client = Elasticsearch8Client(_config(), es=es)

        await client.close()
        await client.close()

        es.close.assert_awaited_once()

    async def test_in_flight_counted(self, es: AsyncMock) -> None:
        release = asyncio.Event()

        async def slow_search(**kwargs):
            await release.wait()
            return {"hits": {"hits": []}}

        es.search.side_effect = slow_search
        client = Elasticsearch8Client(_config(), es=es)

        call = asyncio.create_task(client.search("logs", {}))
        await asyncio.sleep(0)
        assert client.in_flight == 1

        client.retire()
        assert not client.closed
        release.set()
        await call

        assert client.in_flight == 0
        assert client.retired_for() is not None
        es.close.assert_not_awaited()


# ── Error mapping ────────────────────────────────────────────────────────────


class TestErrors:
    @pytest.mark.parametrize(
        ("client_class", "generation"),
        [(Elasticsearch7Client, 7), (Elasticsearch8Client, 8), (Elasticsearch9Client, 9)],
    )
    async def test_http_error(self, es: AsyncMock, make_library_error, client_class, generation: int) -> None:
        es.indices.get_mapping.side_effect = make_library_error(
            generation, 404, "index_not_found_exception", "no such index [nope]"
        )
        client = client_class(_config(), es=es)

        with pytest.raises(ClusterError, match=r"no such index \[nope\]") as exc_info:
            await client.get_mapping("nope")

        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, ConnectionError)
        assert client.in_flight == 0

    async def test_v7_network_failure(self, es: AsyncMock) -> None:
        es.info.side_effect = elasticsearch7.ConnectionError("N/A", "Connection refused", OSError("refused"))
        client = Elasticsearch7Client(_config(), es=es)

        with pytest.raises(TransportError, match="Connection refused") as exc_info:
            await client.info()

        assert isinstance(exc_info.value, ConnectionError)
        assert exc_info.value.url == "http://localhost:9200"

    @pytest.mark.parametrize("client_class", [Elasticsearch8Client, Elasticsearch9Client])
    async def test_v8_v9_network_failure(self, es: AsyncMock, client_class) -> None:
        es.info.side_effect = ElasticTransportConnectionError("Connection refused")
        client = client_class(_config(), es=es)

        with pytest.raises(TransportError, match="Connection refused"):
            await client.info()

    async def test_unsupported_product(self, es: AsyncMock) -> None:
        meta = ApiResponseMeta(
            status=200,
            http_version="1.1",
            headers=HttpHeaders(),
            duration=0.0,
            node=NodeConfig("http", "localhost", 9200),
        )
        es.info.side_effect = elasticsearch8.UnsupportedProductError(
            "The client noticed that the server is not Elasticsearch", meta=meta, body={}
        )
        client = Elasticsearch8Client(_config(), es=es)

        with pytest.raises(ClusterError, match="not Elasticsearch"):
            await client.info()

    async def test_unrelated_errors_pass_through(self, es: AsyncMock) -> None:
        es.search.side_effect = ValueError("bad argument")
        client = Elasticsearch8Client(_config(), es=es)

        with pytest.raises(ValueError, match="bad argument"):
            await client.search("logs", {})
