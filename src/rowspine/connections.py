"""
Named connection registry.

A :class:`ConnectionRegistry` maps names to open connections. One of them is
registered as ``"default"`` and is what every lookup without a name returns.
The registry is an ordinary object: build one at startup (for example with
:func:`rowspine.settings.build_registry`) and hand it to whatever needs
database access.

Examples:
    >>> from rowspine.adapters import connect_url
    >>> registry = ConnectionRegistry()
    >>> registry.add("default", connect_url("sqlite:///:memory:"))
    >>> registry.get().syntax()
    'sqlite'
    >>> registry.exists("reporting")
    False
"""

from __future__ import annotations

from collections.abc import Iterator

from rowspine.adapters.base import DatabaseConnection
from rowspine.errors import ConnectionNotFoundError
from rowspine.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONNECTION = "default"


class ConnectionRegistry:
    """Name → connection mapping.

    Registering a name that is already in use replaces the earlier entry;
    callers who need uniqueness check :meth:`exists` first.
    """

    def __init__(self) -> None:
        self._conns: dict[str, DatabaseConnection] = {}

    def add(self, name: str, conn: DatabaseConnection) -> None:
        """Register ``conn`` under ``name`` and name the connection."""
        conn.set_name(name)
        if name in self._conns and self._conns[name] is not conn:
            logger.debug("connection_replaced", connection=name)
        self._conns[name] = conn
        logger.debug("connection_registered", connection=name, syntax=conn.syntax())

    def get(self, name: str = DEFAULT_CONNECTION) -> DatabaseConnection:
        """Return the connection registered as ``name``."""
        if name not in self._conns:
            raise ConnectionNotFoundError(name)
        return self._conns[name]

    def remove(self, name: str) -> None:
        """Forget ``name``; a no-op when it is not registered."""
        if self._conns.pop(name, None) is not None:
            logger.debug("connection_removed", connection=name)

    def exists(self, name: str) -> bool:
        return name in self._conns

    def names(self) -> list[str]:
        return list(self._conns)

    def disconnect_all(self) -> None:
        """Close every registered connection (entries stay registered)."""
        for conn in self._conns.values():
            conn.disconnect()

    def __contains__(self, name: object) -> bool:
        return name in self._conns

    def __getitem__(self, name: str) -> DatabaseConnection:
        return self.get(name)

    def __len__(self) -> int:
        return len(self._conns)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._conns))


__all__ = [
    "DEFAULT_CONNECTION",
    "ConnectionRegistry",
]
