"""Generation 7 client — ``elasticsearch7`` over aiohttp.

7.x clusters predate the versioned media types, so this client sends plain
``application/json``. The library reports HTTP failures as ``TransportError``
subclasses carrying ``status_code``, ``error`` and ``info``; connection
failures as ``ConnectionError`` with a ``"N/A"`` status.
"""

from __future__ import annotations

from typing import Any

from elasticsearch7 import AsyncElasticsearch
from elasticsearch7 import exceptions as es_exceptions

from scopegate.clients.base.client import ClientConfig, ClusterClient, error_reason
from scopegate.clients.base.exceptions import ClusterError, GatewayError, TransportError


class Elasticsearch7Client(ClusterClient):
    """Client for Elasticsearch 7.x clusters."""

    @property
    def generation(self) -> int:
        return 7

    def create_client(self, config: ClientConfig) -> Any:
        options: dict[str, Any] = {
            "hosts": [config.url],
            "verify_certs": config.verify_certs,
            "ssl_show_warn": config.verify_certs,
            "timeout": config.timeout,
        }
        if config.credentials:
            options["http_auth"] = config.credentials
        if config.cert_path:
            options["client_cert"] = config.cert_path
        if config.key_path:
            options["client_key"] = config.key_path
        return AsyncElasticsearch(**options)

    def translate_error(self, error: Exception, operation: str) -> GatewayError | None:
        if isinstance(error, es_exceptions.ConnectionError):
            return TransportError(f"{operation} on {self.url} failed: {error}", url=self.url)
        if isinstance(error, es_exceptions.TransportError):
            status = error.status_code if isinstance(error.status_code, int) else None
            reason = error_reason(error.info, str(error.error))
            return ClusterError(f"{operation} returned HTTP {status}: {reason}", status_code=status, url=self.url)
        if isinstance(error, es_exceptions.ElasticsearchException):
            return ClusterError(f"{operation} failed: {error}", url=self.url)
        return None
