"""Database connection base class.

Manifesto:
    Records and application code talk to one interface regardless of vendor.
    A connection executes raw SQL text, escapes literal values for that SQL,
    reports its dialect, and answers schema questions (tables, columns,
    primary key, autoincrement column) from a per-table cache so the
    active-record layer can validate writes without a metadata round trip
    on every call.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``query()``, ``escape()``
    - Template-method schema introspection with a shared memo cache
    - ``use_cache=False`` refresh and ``clear_schema_cache()``
    - Naming contract used by ``ConnectionRegistry``
    - Context-manager protocol for connection lifecycle

Tags:
    rowspine, database, abstract-base, adapter-pattern, schema-cache
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from rowspine.dialect import Dialect, get_dialect
from rowspine.errors import ConfigError, ConnectionHandleUnavailableError, QueryError
from rowspine.logging import get_logger
from rowspine.result import QueryResult

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

QueryOutcome = QueryResult | int | bool


class DatabaseConnection(ABC):
    """
    Abstract base class for vendor connections.

    Subclasses implement the driver calls; this class owns naming, the
    handle lifecycle and the schema cache. The cache is shared by every
    record built on the connection and is never expired automatically.
    """

    def __init__(self, config: DatabaseConfig, handle: Any = None):
        self._config = config
        self._handle = handle
        self._name: str | None = None
        self._dialect: Dialect = get_dialect(config.db_type.value)

        self._last_error: str | None = None
        self._last_errno: int | None = None

        self._tables: list[str] | None = None
        self._fields: dict[str, list[str]] = {}
        self._primary_keys: dict[str, list[str]] = {}
        self._autoincrement_keys: dict[str, str | None] = {}

    # -- Identity ----------------------------------------------------------

    @property
    def name(self) -> str:
        """Registry name. Raises ``ConfigError`` until the connection is named."""
        if not self._name:
            raise ConfigError("Database connection not named")
        return self._name

    @property
    def is_named(self) -> bool:
        return bool(self._name)

    def set_name(self, name: str) -> None:
        """Assign the registry name. A connection is named once."""
        if self._name and self._name != name:
            raise ConfigError(f'Database connection already named "{self._name}", cannot rename to "{name}"')
        self._name = name

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def database(self) -> str:
        """Name of the database this connection addresses."""
        if not self._config.database:
            raise ConfigError("Database name unknown for connection")
        return self._config.database

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this connection's database type."""
        return self._dialect

    def syntax(self) -> str:
        """Short dialect tag, e.g. ``'mysql'``."""
        return self._dialect.name

    # -- Handle lifecycle --------------------------------------------------

    @property
    def handle(self) -> Any:
        """Underlying driver connection.

        Use with caution; prefer the methods on this class.
        """
        if self._handle is None:
            label = self._name or "<unnamed>"
            raise ConnectionHandleUnavailableError(
                f'Connection handle not defined for "{label}" of type {self.db_type.value}'
            )
        return self._handle

    @property
    def is_connected(self) -> bool:
        """Whether a driver handle is open."""
        return self._handle is not None

    @abstractmethod
    def connect(self) -> None:
        """Establish the driver connection."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close the driver connection."""
        ...

    # -- Statements --------------------------------------------------------

    @abstractmethod
    def query(self, sql: str) -> QueryOutcome:
        """Execute one statement.

        Returns a :class:`QueryResult` for row-producing statements, the new
        row id (``int``) when the driver reports a positive one, else ``True``.

        Raises:
            QueryError: The driver rejected the statement.
        """
        ...

    @abstractmethod
    def escape(self, value: Any) -> str:
        """Escape a literal value body. The caller supplies the quotes."""
        ...

    @property
    def last_error(self) -> str | None:
        """Error text of the most recent failed query, or None."""
        return self._last_error

    @property
    def last_errno(self) -> int | None:
        """Error code of the most recent failed query, or None."""
        return self._last_errno

    def _query_succeeded(self, sql: str) -> None:
        self._last_error = None
        self._last_errno = None
        logger.debug("query_executed", connection=self._name, sql=sql)

    def _query_failed(self, sql: str, message: str, code: int | None, cause: Exception) -> QueryError:
        self._last_error = message
        self._last_errno = code
        logger.warning("query_failed", connection=self._name, sql=sql, error=message, code=code)
        return QueryError(
            f"{self.db_type.value} query failed: {message} [{code}]",
            code=code,
            query=sql,
            cause=cause,
        ).with_context(connection=self._name)

    def _select(self, sql: str) -> QueryResult:
        result = self.query(sql)
        if not isinstance(result, QueryResult):
            raise QueryError(f"Metadata query returned no result set: {sql}", query=sql)
        return result

    # -- Schema introspection ---------------------------------------------

    def tables(self, use_cache: bool = True) -> list[str]:
        """Table names in the database."""
        if self._tables is None or not use_cache:
            self._tables = self._load_tables()
            logger.debug("schema_cache_refreshed", connection=self._name, entry="tables")
        return list(self._tables)

    def fields(self, table: str, use_cache: bool = True) -> list[str]:
        """Ordered column names of ``table``."""
        if table not in self._fields or not use_cache:
            self._fields[table] = self._load_fields(table)
            logger.debug("schema_cache_refreshed", connection=self._name, entry="fields", table=table)
        return list(self._fields[table])

    def primary_key(self, table: str, use_cache: bool = True) -> list[str]:
        """Ordered primary-key columns of ``table`` (empty when there is none)."""
        if table not in self._primary_keys or not use_cache:
            self._primary_keys[table] = self._load_primary_key(table)
            logger.debug("schema_cache_refreshed", connection=self._name, entry="primary_key", table=table)
        return list(self._primary_keys[table])

    def autoincrement_key(self, table: str, use_cache: bool = True) -> str | None:
        """The autoincrement column of ``table``, or None."""
        if table not in self._autoincrement_keys or not use_cache:
            self._autoincrement_keys[table] = self._load_autoincrement_key(table)
            logger.debug("schema_cache_refreshed", connection=self._name, entry="autoincrement_key", table=table)
        return self._autoincrement_keys[table]

    def clear_schema_cache(self, table: str | None = None) -> None:
        """Forget cached metadata for ``table``, or for everything."""
        if table is None:
            self._tables = None
            self._fields.clear()
            self._primary_keys.clear()
            self._autoincrement_keys.clear()
            return
        self._fields.pop(table, None)
        self._primary_keys.pop(table, None)
        self._autoincrement_keys.pop(table, None)

    @abstractmethod
    def _load_tables(self) -> list[str]: ...

    @abstractmethod
    def _load_fields(self, table: str) -> list[str]: ...

    @abstractmethod
    def _load_primary_key(self, table: str) -> list[str]: ...

    @abstractmethod
    def _load_autoincrement_key(self, table: str) -> str | None: ...

    # -- Context manager ---------------------------------------------------

    def __enter__(self) -> DatabaseConnection:
        """Context manager entry."""
        if not self.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, target={self._config.to_connection_string()!r})"


__all__ = [
    "DatabaseConnection",
    "QueryOutcome",
]
