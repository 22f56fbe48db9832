"""Settings for the service logger and the storage connection.

Values come from environment variables (``SERVICE__NAME``, ``STORAGE__HOST``,
...) and, optionally, from a YAML file whose layout mirrors the models::

    service:
      name: my-service
      log_level: DEBUG
    storage:
      host: redis
      port: 6379
      key_prefix: "app:"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logger import Level


__all__ = ["ServiceSettings", "Settings", "StorageSettings", "load_settings"]


class ServiceSettings(BaseModel):
    name: str = "kv-storage"
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def check_log_level(cls, value: Any) -> str:
        # YAML 1.1 reads a bare OFF as false
        if value is False:
            return Level.OFF.name
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            msg = f"log level must be a name or a number, got {value!r}"
            raise ValueError(msg)  # noqa: TRY004
        return Level.parse(value).name


class StorageSettings(BaseModel):
    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    key_prefix: str = ""


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_nested_delimiter="__", extra="ignore")

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


def load_settings(path: str | Path | None = None) -> Settings:
    """Build settings from the environment, overridden by a YAML file when given."""
    if path is None:
        return Settings()

    with Path(path).open(encoding="utf-8") as handle:
        raw: Any = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        msg = f"settings file must contain a mapping: {path}"
        raise ValueError(msg)
    return Settings(**raw)
