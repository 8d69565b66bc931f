"""
Centralized settings for rowspine.

Manifesto:
    Connection URLs and logging choices come from the environment, are
    validated once at startup, and are cached. Code that needs a database
    asks for a :class:`~rowspine.connections.ConnectionRegistry` built from
    these settings instead of parsing environment variables itself.

Features:
    - **RowSpineSettings:** ``ROWSPINE_*`` environment variables and ``.env``
    - **get_settings():** cached instance, ``_force_reload`` to refresh
    - **build_registry():** settings → connected, named connections

Examples:
    ROWSPINE_DATABASE_URL=mysql://app:secret@db/shop
    ROWSPINE_CONNECTIONS='{"reporting": "sqlite:///data/reports.db"}'

    >>> registry = build_registry(get_settings())
    >>> registry.names()
    ['default', 'reporting']

Tags:
    rowspine, configuration, settings, pydantic, caching
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rowspine.adapters.registry import connect_url
from rowspine.adapters.types import DatabaseConfig, DatabaseType
from rowspine.connections import DEFAULT_CONNECTION, ConnectionRegistry


class RowSpineSettings(BaseSettings):
    """rowspine configuration.

    Every field can be set through a ``ROWSPINE_*`` environment variable
    (``ROWSPINE_LOG_LEVEL=DEBUG``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROWSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///data/rowspine.db", description="URL of the default connection")
    connections: dict[str, str] = Field(default_factory=dict, description="Additional connections, name → URL")
    connect_timeout: int = Field(default=10, description="Seconds to wait when opening a server connection")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    def connection_urls(self) -> dict[str, str]:
        """Every configured connection, the default one first."""
        return {DEFAULT_CONNECTION: self.database_url, **self.connections}


_settings_cache: dict[str, RowSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RowSpineSettings:
    """Load, validate, and cache a :class:`RowSpineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = RowSpineSettings()
    _settings_cache["default"] = settings
    return settings


def build_registry(settings: RowSpineSettings | None = None) -> ConnectionRegistry:
    """Open every configured connection and register it under its name."""
    settings = settings or get_settings()
    registry = ConnectionRegistry()
    try:
        for name, url in settings.connection_urls().items():
            overrides = {}
            if DatabaseConfig.from_url(url).db_type is DatabaseType.MYSQL:
                overrides["connect_timeout"] = settings.connect_timeout
            registry.add(name, connect_url(url, **overrides))
    except Exception:
        registry.disconnect_all()
        raise
    return registry


__all__ = [
    "RowSpineSettings",
    "build_registry",
    "get_settings",
]
