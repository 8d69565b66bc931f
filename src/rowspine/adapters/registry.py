"""Connection adapter registry and factories.

Manifesto:
    Consumers should never hard-code adapter class names. The registry
    maps driver tags to connection classes, ``get_adapter()`` builds an
    unconnected instance from keyword arguments, and ``connect_url()``
    builds and connects one from a database URL.

Features:
    - ``AdapterRegistry`` with pre-registered defaults
    - ``register()`` for custom / third-party adapters
    - ``get_adapter()`` factory: type + kwargs → connection
    - ``connect_url()`` factory: URL → connected connection

Tags:
    rowspine, database, registry, factory
"""

from __future__ import annotations

from typing import Any

from rowspine.errors import ConfigError

from .base import DatabaseConnection
from .mysql import MySQLConnection
from .sqlite import SQLiteConnection
from .types import DatabaseConfig, DatabaseType


class AdapterRegistry:
    """
    Registry of connection classes keyed by driver tag.

    Pre-registered adapters:
    - ``sqlite``: :class:`SQLiteConnection`
    - ``mysql`` / ``mariadb``: :class:`MySQLConnection`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseConnection]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteConnection
        self._factories["mysql"] = MySQLConnection
        self._factories["mariadb"] = MySQLConnection  # Alias

    def register(self, name: str, adapter_class: type[DatabaseConnection]) -> None:
        """Register an adapter class."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DatabaseConnection:
        """Create an (unconnected) adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name](**kwargs)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


adapter_registry = AdapterRegistry()


def get_adapter(db_type: DatabaseType | str, **kwargs: Any) -> DatabaseConnection:
    """
    Get an unconnected connection by type.

    Usage:
        conn = get_adapter(DatabaseType.SQLITE, path="data.db")
        conn = get_adapter("mysql", host="localhost", database="shop")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


def _adapter_kwargs(config: DatabaseConfig) -> dict[str, Any]:
    match config.db_type:
        case DatabaseType.SQLITE:
            return {"path": config.path or ":memory:", "readonly": config.readonly, **config.options}
        case DatabaseType.MYSQL:
            return {
                "host": config.host,
                "port": config.port,
                "database": config.database,
                "username": config.username,
                "password": config.password,
                "socket": config.socket,
                "charset": config.charset,
                "connect_timeout": config.connect_timeout,
                **config.options,
            }
        case _:
            raise ConfigError(f"No adapter arguments for: {config.db_type}")


def connect_url(url: str, *, connect: bool = True, **overrides: Any) -> DatabaseConnection:
    """
    Build a connection from a database URL and (by default) open it.

    Usage:
        conn = connect_url("sqlite:///data/app.db")
        conn = connect_url("mysql://app:secret@db:3306/shop")
    """
    config = DatabaseConfig.from_url(url, **overrides)
    conn = get_adapter(config.db_type, **_adapter_kwargs(config))
    if connect:
        conn.connect()
    return conn


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "connect_url",
    "get_adapter",
]
