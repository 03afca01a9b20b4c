"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from fastapi import Header

from scopegate.core.gateway import ScopeGateway

SERVER_ID_HEADER = "X-Scope-Server-Id"

# Global gateway instance (set during application lifespan)
_gateway: ScopeGateway | None = None


def set_gateway(gateway: ScopeGateway | None) -> None:
    """Set the global gateway instance (called during app lifespan)."""
    global _gateway
    _gateway = gateway


def get_gateway() -> ScopeGateway:
    """Get the global gateway instance.

    Raises:
        RuntimeError: If the gateway is not initialized.
    """
    if _gateway is None:
        raise RuntimeError("scopegate gateway not initialized. Is the server running?")
    return _gateway


def get_server_id(x_scope_server_id: str | None = Header(default=None)) -> str | None:
    """Server id sent by the UI in the ``X-Scope-Server-Id`` header."""
    return x_scope_server_id
