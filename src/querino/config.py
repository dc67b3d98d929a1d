"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_bool(key: str, default: str) -> bool:
    return _env(key, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class CosmosConfig:
    endpoint: str = field(default_factory=lambda: _env("COSMOS_ENDPOINT"))
    key: str = field(default_factory=lambda: _env("COSMOS_KEY"))
    database: str = field(default_factory=lambda: _env("COSMOS_DATABASE", "querino"))
    create_containers: bool = field(
        default_factory=lambda: _env_bool("COSMOS_CREATE_CONTAINERS", "false")
    )


@dataclass(frozen=True)
class AutosaveConfig:
    delay_ms: int = field(default_factory=lambda: int(_env("AUTOSAVE_DELAY_MS", "2000")))
    enabled: bool = field(default_factory=lambda: _env_bool("AUTOSAVE_ENABLED", "true"))

    @property
    def delay(self) -> float:
        """Debounce quiet period in seconds."""
        return self.delay_ms / 1000


@dataclass(frozen=True)
class VersionConfig:
    max_conflict_retries: int = field(
        default_factory=lambda: int(_env("VERSION_CONFLICT_RETRIES", "3"))
    )


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.env == "development"


@dataclass(frozen=True)
class Settings:
    cosmos: CosmosConfig = field(default_factory=CosmosConfig)
    autosave: AutosaveConfig = field(default_factory=AutosaveConfig)
    versions: VersionConfig = field(default_factory=VersionConfig)
    app: AppConfig = field(default_factory=AppConfig)


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
