"""Base client interface — Abstract cluster client and probe registry."""

from scopegate.clients.base.client import ClientConfig, ClusterClient
from scopegate.clients.base.registry import ClientRegistry, ProbeHandler, ProbeResult

__all__ = ["ClientConfig", "ClientRegistry", "ClusterClient", "ProbeHandler", "ProbeResult"]
