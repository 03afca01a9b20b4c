"""Server identity and verification models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

# Major versions a client generation exists for.
SUPPORTED_GENERATIONS = (7, 8, 9)


class ServerIdentity(BaseModel):
    """One logical cluster connection.

    Identities are immutable. Changing any connection field produces a new
    identity with a different config hash, which invalidates the cached client.
    """

    model_config = {"frozen": True}

    id: str = Field(min_length=1, description="Unique server id")
    url: str = Field(min_length=1, description="Cluster base URL, e.g. https://localhost:9200")
    name: str | None = Field(default=None, description="Display name")
    username: str | None = Field(default=None, description="HTTP basic-auth username")
    password: str | None = Field(default=None, description="HTTP basic-auth password")
    cert_path: str | None = Field(default=None, description="Client certificate (PEM) path")
    key_path: str | None = Field(default=None, description="Client private key (PEM) path")
    allow_insecure_ssl: bool = Field(default=False, description="Skip TLS certificate verification")
    major_version_hint: int | None = Field(
        default=None,
        description="Expected major version; probed first when set",
    )

    @field_validator("major_version_hint")
    @classmethod
    def _check_hint(cls, v: int | None) -> int | None:
        if v is not None and v not in SUPPORTED_GENERATIONS:
            raise ValueError(f"major_version_hint must be one of {list(SUPPORTED_GENERATIONS)}, got {v}")
        return v


class ServerSummary(BaseModel):
    """Public view of a configured server (no secrets)."""

    id: str
    name: str | None = None
    url: str
    major_version_hint: int | None = None
    has_credentials: bool = False

    @classmethod
    def from_identity(cls, identity: ServerIdentity) -> ServerSummary:
        return cls(
            id=identity.id,
            name=identity.name,
            url=identity.url,
            major_version_hint=identity.major_version_hint,
            has_credentials=bool(identity.username and identity.password),
        )


class VerifyResult(BaseModel):
    """Outcome of an explicit server verification."""

    success: bool = Field(description="Whether a working client was obtained")
    version: str | None = Field(default=None, description="Version string reported by the cluster")
    major_version: int | None = Field(default=None, description="Major version the client is cached under")
    cluster_name: str | None = Field(default=None, description="Cluster name from the info endpoint")
    name: str | None = Field(default=None, description="Node name from the info endpoint")
    error: str | None = Field(default=None, description="Failure message when success is false")
