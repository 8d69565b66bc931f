"""SQLite connection and result."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path
from typing import Any

from rowspine.errors import DatabaseConnectionError
from rowspine.result import QueryResult, Row

from .base import DatabaseConnection, QueryOutcome
from .types import DatabaseConfig, DatabaseType

_INSERT_PREFIXES = re.compile(r"\s*(INSERT|REPLACE)\b", re.IGNORECASE)


class SQLiteResult(QueryResult):
    """
    Result over a ``sqlite3`` cursor.

    sqlite3 cursors only move forward, so the rows are buffered when the
    result is created. There is no bulk-fetch call to prefer over row-wise
    reads, so ``all_rows()`` walks the cursor.
    """

    def __init__(self, connection: DatabaseConnection, cursor: sqlite3.Cursor, query: str | None = None):
        super().__init__(connection, cursor, query)
        self._columns = [desc[0] for desc in cursor.description or ()]
        self._rows: list[tuple] = [tuple(row) for row in cursor.fetchall()]

    def _count(self, handle: sqlite3.Cursor) -> int:
        return len(self._rows)

    def _fields(self, handle: sqlite3.Cursor) -> list[str]:
        return list(self._columns)

    def _fetch_row(self, handle: sqlite3.Cursor, index: int) -> Row:
        return dict(zip(self._columns, self._rows[index], strict=True))

    def _release(self, handle: sqlite3.Cursor) -> None:
        handle.close()
        self._rows = []


class SQLiteConnection(DatabaseConnection):
    """
    SQLite database connection.

    Uses the built-in sqlite3 module in autocommit mode: every statement is
    its own transaction. Suitable for:
    - Development and testing
    - Single-process applications
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        handle: sqlite3.Connection | None = None,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            database=Path(path).stem if path != ":memory:" else "main",
            readonly=readonly,
            options=kwargs,
        )
        super().__init__(config, handle)
        self._timeout = timeout

    def connect(self) -> None:
        """Connect to SQLite database."""
        path = self._config.path or ":memory:"
        uri = path.startswith("file:") or "?" in path

        if path != ":memory:" and not uri:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=uri,
            )
            conn.execute("PRAGMA foreign_keys = ON")
            if self._config.readonly:
                conn.execute("PRAGMA query_only = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"Failed to connect to SQLite: {e}", cause=e) from e

        self._handle = conn

    def disconnect(self) -> None:
        """Close SQLite connection."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def query(self, sql: str) -> QueryOutcome:
        """Execute one statement.

        SELECT-like statements (anything with a result description) yield a
        :class:`SQLiteResult`. INSERTs yield the new rowid when positive;
        everything else yields ``True``.
        """
        try:
            cursor = self.handle.execute(sql)
        except sqlite3.Error as e:
            raise self._query_failed(sql, str(e), getattr(e, "sqlite_errorcode", None), e) from e

        self._query_succeeded(sql)

        if cursor.description is not None:
            return SQLiteResult(self, cursor, sql)

        # lastrowid tracks the connection's last insert, so only trust it for inserts.
        row_id = cursor.lastrowid if _INSERT_PREFIXES.match(sql) else None
        cursor.close()
        if isinstance(row_id, int) and row_id > 0:
            return row_id
        return True

    def escape(self, value: Any) -> str:
        """Double embedded single quotes."""
        return str(value).replace("'", "''")

    # -- Schema ------------------------------------------------------------

    def _load_tables(self) -> list[str]:
        result = self._select(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name;"
        )
        tables = [row["name"] for row in result.all_rows()]
        result.free()
        return tables

    def _table_info(self, table: str) -> list[Row]:
        result = self._select(f'PRAGMA table_info("{table}");')
        rows = result.all_rows()
        result.free()
        return rows

    def _load_fields(self, table: str) -> list[str]:
        return [row["name"] for row in self._table_info(table)]

    def _load_primary_key(self, table: str) -> list[str]:
        key_rows = sorted((row for row in self._table_info(table) if row["pk"]), key=lambda row: row["pk"])
        return [row["name"] for row in key_rows]

    def _load_autoincrement_key(self, table: str) -> str | None:
        # Only a sole INTEGER primary key aliases the rowid.
        key_rows = [row for row in self._table_info(table) if row["pk"]]
        if len(key_rows) == 1 and (key_rows[0]["type"] or "").upper() == "INTEGER":
            return key_rows[0]["name"]
        return None


__all__ = [
    "SQLiteConnection",
    "SQLiteResult",
]
