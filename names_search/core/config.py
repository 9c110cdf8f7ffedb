"""
Configuration loading.

Settings are resolved in priority order (highest first):
  1. Constructor arguments   (CLI flags passed through load_settings())
  2. Environment variables   (NAMES_SEARCH_STORE_ADDRESS=redis://redis:6379/0)
  3. A YAML file named by NAMES_SEARCH_CONFIG
  4. Hardcoded defaults
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from names_search.domain.errors import ConfigurationError

ENV_PREFIX = "NAMES_SEARCH_"
CONFIG_FILE_ENV_VAR = "NAMES_SEARCH_CONFIG"

DEFAULT_CATALOG_URL = "https://replicate.npmjs.com/_all_docs"


def _config_file() -> Optional[Path]:
    """Return the YAML file named by NAMES_SEARCH_CONFIG, or None."""
    path = os.environ.get(CONFIG_FILE_ENV_VAR)
    return Path(path).expanduser() if path else None


class Settings(BaseSettings):
    """
    Process-wide configuration, built once at startup and handed to every
    component at construction time.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="forbid",
        yaml_file_encoding="utf-8",
    )

    # Store
    store_backend: Literal["redis", "memory"] = Field(
        default="redis",
        description="Sorted-set store implementation: 'redis' for production, 'memory' for local runs.",
    )
    store_address: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL.",
    )
    store_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Socket timeout applied to every store call.",
    )

    # Catalog
    catalog_url: str = Field(
        default=DEFAULT_CATALOG_URL,
        description="Catalog snapshot location: an http(s) URL or a local file path.",
    )
    fetch_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for connecting to and reading from the catalog.",
    )

    # Index builder
    rebuild_interval_seconds: float = Field(
        default=12 * 60 * 60,
        gt=0,
        description="Period between full index rebuilds.",
    )
    batch_size: int = Field(
        default=1000,
        ge=1,
        description="Pending store additions that trigger a batch flush.",
    )
    readiness_poll_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Delay between store readiness probes at startup.",
    )
    run_indexer: bool = Field(
        default=True,
        description="Run the periodic index builder inside the API process.",
    )

    # Query service
    cache_max_age_seconds: int = Field(
        default=5 * 60,
        ge=0,
        description="max-age advertised in the Cache-Control header of suggestions.",
    )
    query_limit: int = Field(
        default=11,
        ge=1,
        description="Maximum number of suggestions returned per query.",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to.")
    port: int = Field(default=8080, description="Port the HTTP server listens on.")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources = [
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
        ]
        config_file = _config_file()
        if config_file is not None:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=config_file))
        # dotenv and file secrets intentionally excluded
        return tuple(sources)


def load_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings from the config file, the environment and explicit overrides.

    Args:
        overrides: Values that win over every other source (e.g. CLI flags).
            Keys set to None are left to the other sources.

    Raises:
        ConfigurationError: If the config file is missing or unreadable, or a value is invalid.
    """
    config_file = _config_file()
    if config_file is not None and not config_file.is_file():
        raise ConfigurationError(f"Config file {config_file} does not exist")

    init_values = {k: v for k, v in (overrides or {}).items() if v is not None}
    try:
        return Settings(**init_values)
    except (ValidationError, yaml.YAMLError, OSError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
