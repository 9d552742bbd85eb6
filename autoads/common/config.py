"""
Configuration management using Pydantic Settings.

Values come from AUTOADS_* environment variables; a YAML file named by
AUTOADS_CONFIG_FILE, when present, is layered on top.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection and pool."""

    # Full SQLAlchemy URL; takes precedence over the discrete fields below
    url: str | None = None
    host: str = "localhost"
    port: int = 5432
    name: str = "autoads"
    user: str = "autoads"
    password: str = ""
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def async_url(self) -> str:
        """SQLAlchemy URL with an async driver."""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"

    @property
    def is_sqlite(self) -> bool:
        return self.async_url.startswith("sqlite")


class ServerSettings(BaseModel):
    """HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False
    api_prefix: str = "/api/v1"


class AdServingSettings(BaseModel):
    # Roles allowed on the administrative endpoints
    admin_roles: list[str] = Field(default_factory=lambda: ["ADMIN", "SUPPORT"])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "json"
    # One line per handled request
    access_log: bool = True


class Settings(BaseSettings):
    """AutoAds settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOADS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "AutoAds"
    app_version: str = "0.1.0"
    debug: bool = False
    env: Literal["dev", "prod", "test"] = "dev"

    server: ServerSettings = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ad_serving: AdServingSettings = Field(default_factory=AdServingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def load_yaml_config(config_path: str | Path) -> dict[str, Any]:
    """Read a YAML settings file; a missing file yields no overrides."""
    path = Path(config_path)
    if not path.is_file():
        return {}

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``override`` on ``base``; nested sections merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings.

    Nested sections use the __ delimiter, e.g. AUTOADS_DATABASE__URL.
    """
    settings = Settings()
    config_file = os.getenv("AUTOADS_CONFIG_FILE")
    if not config_file:
        return settings

    overrides = load_yaml_config(config_file)
    if not overrides:
        return settings
    return Settings.model_validate(merge_configs(settings.model_dump(), overrides))
