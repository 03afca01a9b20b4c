"""Gateway exceptions."""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for gateway errors."""


class ConnectionError(GatewayError):
    """Raised when no working client can be obtained for a server.

    Attributes:
        url: The last URL a connection was attempted against.
        failures: ``(generation, error)`` pairs collected while probing.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        failures: list[tuple[int, Exception]] | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.failures = failures or []


class UnknownServerError(ConnectionError):
    """Raised when no server identity is registered under the given id."""


class TransportError(ConnectionError):
    """Raised on network, TLS, or timeout failures of a single cluster call."""


class ClusterError(GatewayError):
    """Raised when the cluster answers with an HTTP error status."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class QueryError(GatewayError):
    """Raised when a request is malformed. No network call has been made."""


class ConfigurationError(GatewayError):
    """Raised when gateway configuration is invalid."""
