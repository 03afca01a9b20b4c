"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (SCOPEGATE_ prefix) and .env
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from scopegate.models.server import ServerIdentity


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=3001, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class GatewaySettings(BaseModel):
    """Connection gateway behavior."""

    request_timeout: float = Field(default=30.0, gt=0, description="Timeout for each cluster call in seconds")
    retire_grace_period: float = Field(
        default=60.0,
        ge=0,
        description="Seconds a replaced client stays open for callers still holding it",
    )
    probe_order: list[int] = Field(
        default=[8, 7, 9],
        min_length=1,
        description="Order in which client generations are probed when auto-detecting",
    )

    @field_validator("probe_order", mode="before")
    @classmethod
    def _parse_probe_order(cls, v: Any) -> list[int]:
        """Accept ``"8,7,9"`` as well as a list."""
        if isinstance(v, str):
            return [int(part) for part in v.split(",") if part.strip()]
        return list(v)


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the SCOPEGATE_ prefix.
    Nested settings use double underscores: SCOPEGATE_SERVER__PORT=9090

    Example:
        SCOPEGATE_SERVER__PORT=9090
        SCOPEGATE_GATEWAY__REQUEST_TIMEOUT=10
        SCOPEGATE_GATEWAY__PROBE_ORDER=[9,8,7]
    """

    model_config = {
        "env_prefix": "SCOPEGATE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    server: ServerSettings = Field(default_factory=ServerSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    servers: list[ServerIdentity] = Field(default_factory=list, description="Initially configured clusters")
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Sections present in the YAML file win over environment variables;
        sections it leaves out are still read from the environment.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
