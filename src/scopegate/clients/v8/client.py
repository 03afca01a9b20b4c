"""Generation 8 client — ``elasticsearch8`` over the httpx node.

The library negotiates ``compatible-with=8`` media types and refuses to talk
to anything that does not identify itself as Elasticsearch through the
``X-Elastic-Product`` response header (``UnsupportedProductError``). HTTP
failures arrive as ``ApiError`` with the response ``meta``; network, TLS and
timeout failures as ``elastic_transport.TransportError``.
"""

from __future__ import annotations

from typing import Any, ClassVar

import elasticsearch8
from elastic_transport import HttpxAsyncHttpNode
from elastic_transport import TransportError as ElasticTransportError

from scopegate.clients.base.client import ClientConfig, ClusterClient, error_reason
from scopegate.clients.base.exceptions import ClusterError, GatewayError, TransportError


class Elasticsearch8Client(ClusterClient):
    """Client for Elasticsearch 8.x clusters."""

    async_client_class: ClassVar[type] = elasticsearch8.AsyncElasticsearch
    api_error_class: ClassVar[type[Exception]] = elasticsearch8.ApiError

    @property
    def generation(self) -> int:
        return 8

    def create_client(self, config: ClientConfig) -> Any:
        options: dict[str, Any] = {
            "hosts": [config.url],
            "node_class": HttpxAsyncHttpNode,
            "verify_certs": config.verify_certs,
            "ssl_show_warn": config.verify_certs,
            "request_timeout": config.timeout,
        }
        if config.credentials:
            options["basic_auth"] = config.credentials
        if config.cert_path:
            options["client_cert"] = config.cert_path
        if config.key_path:
            options["client_key"] = config.key_path
        return self.async_client_class(**options)

    def translate_error(self, error: Exception, operation: str) -> GatewayError | None:
        if isinstance(error, self.api_error_class):
            status = error.meta.status
            reason = error_reason(error.body, str(error.message))
            return ClusterError(f"{operation} returned HTTP {status}: {reason}", status_code=status, url=self.url)
        if isinstance(error, ElasticTransportError):
            return TransportError(f"{operation} on {self.url} failed: {error}", url=self.url)
        return None
