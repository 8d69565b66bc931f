"""SQL dialect conventions for generated statements.

Every connection exposes a ``Dialect``. The active-record layer emits
backtick-quoted identifiers and quoted literals for every backend; the dialect
decides which quote character wraps a string literal (after the connection
has escaped its body) and how a row with no explicit values is inserted.

The dialect ``name`` is the syntax tag returned by
``DatabaseConnection.syntax()``. Callers that need vendor-specific SQL of
their own branch on it; rowspine does not unify dialects beyond that.

Examples:
    >>> from rowspine.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.quote_literal("Ada")
    '"Ada"'
    >>> get_dialect("sqlite").insert_defaults("users")
    'INSERT INTO `users` DEFAULT VALUES;'
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rowspine.errors import ConfigError


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Syntax tag (e.g. ``'mysql'``)."""
        ...

    def quote_identifier(self, identifier: str) -> str:
        """Wrap a table or column name. Identifiers are never escaped."""
        ...

    def quote_literal(self, escaped: str) -> str:
        """Wrap an already-escaped literal body in string quotes."""
        ...

    def insert_defaults(self, table: str) -> str:
        """INSERT statement for a row where every column takes its default."""
        ...


class MySQLDialect:
    """MySQL / MariaDB: backtick identifiers, double-quoted literals."""

    @property
    def name(self) -> str:
        return "mysql"

    def quote_identifier(self, identifier: str) -> str:
        return f"`{identifier}`"

    def quote_literal(self, escaped: str) -> str:
        return f'"{escaped}"'

    def insert_defaults(self, table: str) -> str:
        return f"INSERT INTO {self.quote_identifier(table)} () VALUES ();"


class SQLiteDialect:
    """SQLite: backtick identifiers (MySQL compatible), single-quoted literals.

    Double-quoted strings are identifiers in SQLite and only fall back to
    literals when no such column exists, so literals use single quotes.
    """

    @property
    def name(self) -> str:
        return "sqlite"

    def quote_identifier(self, identifier: str) -> str:
        return f"`{identifier}`"

    def quote_literal(self, escaped: str) -> str:
        return f"'{escaped}'"

    def insert_defaults(self, table: str) -> str:
        return f"INSERT INTO {self.quote_identifier(table)} DEFAULT VALUES;"


_DIALECTS: dict[str, Dialect] = {
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),
    "sqlite": SQLiteDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ConfigError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ConfigError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "MySQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "register_dialect",
]
