"""Configuration — pydantic-settings with YAML and env var support."""

from scopegate.config.settings import Settings

__all__ = ["Settings"]
