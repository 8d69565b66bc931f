"""MySQL connection and result.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install rowspine[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~rowspine.errors.ConfigError` is raised at ``connect()``
(or first ``escape()``) time, not at import time.
"""

from __future__ import annotations

from typing import Any

from rowspine.errors import ConfigError, DatabaseConnectionError
from rowspine.result import QueryResult, Row

from .base import DatabaseConnection, QueryOutcome
from .types import DatabaseConfig, DatabaseType


def _driver() -> Any:
    try:
        import mysql.connector
    except ImportError:
        raise ConfigError(
            "mysql-connector-python is required for MySQL. Install with: pip install mysql-connector-python"
        ) from None
    return mysql.connector


class MySQLResult(QueryResult):
    """
    Result over a buffered ``mysql.connector`` cursor.

    A buffered cursor holds the whole result set client-side, so
    ``all_rows()`` takes it in one call instead of walking row by row.
    """

    supports_bulk_fetch = True

    def __init__(self, connection: DatabaseConnection, cursor: Any, query: str | None = None):
        super().__init__(connection, cursor, query)
        self._columns = list(cursor.column_names or ())
        self._rows: list[tuple] = [tuple(row) for row in cursor.fetchall()]

    def _count(self, handle: Any) -> int:
        return len(self._rows)

    def _fields(self, handle: Any) -> list[str]:
        return list(self._columns)

    def _fetch_row(self, handle: Any, index: int) -> Row:
        return dict(zip(self._columns, self._rows[index], strict=True))

    def _fetch_all(self, handle: Any) -> list[Row]:
        return [dict(zip(self._columns, row, strict=True)) for row in self._rows]

    def _release(self, handle: Any) -> None:
        handle.close()
        self._rows = []


class MySQLConnection(DatabaseConnection):
    """MySQL / MariaDB connection.

    One ``mysql.connector`` connection in autocommit mode; there is no
    pooling and no transaction handling.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        socket: str | None = None,
        charset: str = "utf8mb4",
        connect_timeout: int = 10,
        handle: Any = None,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            socket=socket,
            charset=charset,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config, handle)
        self._converter: Any = None

    def connect(self) -> None:
        """Connect to MySQL database."""
        connector = _driver()

        params: dict[str, Any] = {
            "host": self._config.host,
            "port": self._config.port,
            "database": self._config.database or None,
            "user": self._config.username,
            "password": self._config.password,
            "charset": self._config.charset,
            "connection_timeout": self._config.connect_timeout,
            "autocommit": True,
            **self._config.options,
        }
        if self._config.socket:
            params["unix_socket"] = self._config.socket

        try:
            self._handle = connector.connect(**{k: v for k, v in params.items() if v is not None})
        except connector.Error as e:
            raise DatabaseConnectionError(f"Failed to connect to MySQL: {e}", cause=e) from e

    def disconnect(self) -> None:
        """Close MySQL connection."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def query(self, sql: str) -> QueryOutcome:
        """Execute one statement.

        Statements returning rows yield a :class:`MySQLResult`; an INSERT
        into a table with an AUTO_INCREMENT column yields the new id;
        everything else yields ``True``.
        """
        connector = _driver()
        cursor = self.handle.cursor(buffered=True)
        try:
            cursor.execute(sql)
        except connector.Error as e:
            cursor.close()
            raise self._query_failed(sql, getattr(e, "msg", None) or str(e), getattr(e, "errno", None), e) from e

        self._query_succeeded(sql)

        if cursor.with_rows:
            return MySQLResult(self, cursor, sql)

        insert_id = cursor.lastrowid
        cursor.close()
        if isinstance(insert_id, int) and insert_id > 0:
            return insert_id
        return True

    def escape(self, value: Any) -> str:
        """Backslash-escape a literal body the way ``mysql_real_escape_string`` does."""
        if self._converter is None:
            _driver()
            from mysql.connector.conversion import MySQLConverter

            self._converter = MySQLConverter(self._config.charset)
        escaped = self._converter.escape(str(value))
        return escaped.decode() if isinstance(escaped, bytes) else escaped

    # -- Schema ------------------------------------------------------------

    def _load_tables(self) -> list[str]:
        result = self._select("SHOW TABLES;")
        tables = [next(iter(row.values())) for row in result.all_rows()]
        result.free()
        return tables

    def _load_fields(self, table: str) -> list[str]:
        result = self._select(f"SHOW COLUMNS IN `{table}`;")
        fields = [row["Field"] for row in result.all_rows()]
        result.free()
        return fields

    def _load_primary_key(self, table: str) -> list[str]:
        result = self._select(f'SHOW INDEX FROM `{table}` WHERE `Key_name` = "PRIMARY";')
        rows = sorted(result.all_rows(), key=lambda row: row.get("Seq_in_index", 0))
        result.free()
        return [row["Column_name"] for row in rows]

    def _load_autoincrement_key(self, table: str) -> str | None:
        result = self._select(
            "SELECT column_name AS column_name FROM information_schema.columns "
            f'WHERE `table_name` = "{self.escape(table)}" '
            f'AND `table_schema` = "{self.escape(self.database)}" '
            'AND `extra` = "auto_increment";'
        )
        row = result.row(0)
        result.free()
        if row is None or not row["column_name"]:
            return None
        return row["column_name"]


__all__ = [
    "MySQLConnection",
    "MySQLResult",
]
