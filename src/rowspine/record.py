"""
Active record: one object bound to one table row.

An :class:`ActiveRecord` names a table and, optionally, a key tuple paired
with key columns (the primary key unless other columns are given). Reads are
lazy: the row is fetched the first time a stored value or the existence
status is needed, and cached until :meth:`ActiveRecord.reset_cache`. Writes
are buffered with :meth:`ActiveRecord.set` and only reach the database on
:meth:`~ActiveRecord.create` (unbound record) or
:meth:`~ActiveRecord.update` (bound, existing record).

States::

    UNBOUND ──create()──────────────────────────────► BOUND_EXISTS
       ▲                                                 │    ▲
       │                                          delete()    │ exists()/get()
       └─────────────────────────────────────────────────┘    │
    BOUND_UNKNOWN ──exists()/get()──► BOUND_EXISTS | BOUND_ABSENT
         ▲                                    │
         └──────────── reset_cache() ─────────┘

Examples:
    >>> user = ActiveRecord.build_new(registry, "users")
    >>> user.set("name", "Ada")
    >>> user.create()
    >>> user.key
    (1,)
    >>> user.set("name", "Grace")
    >>> user.get("name")        # buffered value wins over the stored row
    'Grace'
    >>> user.update()

    Bulk load without one query per row:

    >>> admins = ActiveRecord.build_where_equals(registry, "users", {"role": "admin"}, limit=10)

Tags:
    active-record, orm, crud, lazy-loading, write-buffer, rowspine
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from rowspine.adapters.base import DatabaseConnection
from rowspine.connections import DEFAULT_CONNECTION, ConnectionRegistry
from rowspine.errors import (
    CardinalityMismatchError,
    DuplicateKeyViolationError,
    FieldNotAllowedError,
    InvalidStateError,
    MissingFieldsError,
    QueryError,
    UndefinedFieldError,
)
from rowspine.logging import get_logger
from rowspine.result import QueryResult, Row
from rowspine.sql import (
    delete_statement,
    insert_statement,
    select_one_statement,
    select_where_statement,
    update_statement,
    where_equals,
)

logger = get_logger(__name__)

ColumnSpec = str | Sequence[str] | None


class ExistenceStatus(str, Enum):
    """Cached answer to "does the bound row exist?"."""

    UNKNOWN = "unknown"
    EXISTS = "exists"
    ABSENT = "absent"


class RecordState(str, Enum):
    """Lifecycle state of a record."""

    UNBOUND = "unbound"
    BOUND_UNKNOWN = "bound_unknown"
    BOUND_EXISTS = "bound_exists"
    BOUND_ABSENT = "bound_absent"


def _normalize_columns(column: ColumnSpec) -> tuple[str, ...] | None:
    if column is None:
        return None
    if isinstance(column, str):
        return (column,)
    return tuple(column)


def _normalize_key(key: Any) -> tuple[Any, ...] | None:
    if key is None:
        return None
    if isinstance(key, (list, tuple)):
        return tuple(key) or None
    return (key,)


class ActiveRecord:
    """
    A row of ``table`` addressed by a key tuple.

    Args:
        connection: Connection with access to ``table``.
        table: Table name.
        key: Key value, tuple of key values, or None for a new (unbound)
            record. A ``False`` element leaves that column unconstrained.
        column: Key column or columns paired with ``key``. Defaults to the
            table's primary key.

    Raises:
        CardinalityMismatchError: ``key`` and ``column`` differ in length,
            ``column`` is empty, or a key was given for a table without a
            primary key and no ``column``.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        table: str,
        key: Any = None,
        column: ColumnSpec = None,
    ):
        self._db = connection
        self._table = table

        columns = _normalize_columns(column)
        key_tuple = _normalize_key(key)

        if columns is not None and not columns:
            raise CardinalityMismatchError("Cannot bind to zero columns specified").with_context(table=table)

        if columns is None and key_tuple is not None:
            columns = tuple(connection.primary_key(table))
            if not columns:
                raise CardinalityMismatchError(
                    f'Table "{table}" has no primary key; name the key columns to bind'
                ).with_context(table=table)

        if key_tuple is not None and len(key_tuple) != len(columns):
            raise CardinalityMismatchError(
                f"Mismatching number of keys ({len(key_tuple)}) for key columns {list(columns)}"
            ).with_context(table=table)

        self._key: tuple[Any, ...] | None = key_tuple
        self._columns: tuple[str, ...] | None = columns

        self._status = ExistenceStatus.UNKNOWN
        self._current: Row | None = None
        # Set after create(): the cached row only holds what was written.
        self._row_partial = False
        self._buffer: dict[str, Any] = {}
        self._fields: list[str] | None = None

    # -- Factories -----------------------------------------------------------

    @classmethod
    def build(
        cls,
        registry: ConnectionRegistry,
        table: str,
        key: Any = None,
        column: ColumnSpec = None,
        connection_name: str = DEFAULT_CONNECTION,
    ) -> ActiveRecord:
        """Build a record on the named connection."""
        return cls(registry.get(connection_name), table, key, column)

    @classmethod
    def build_new(
        cls,
        registry: ConnectionRegistry,
        table: str,
        connection_name: str = DEFAULT_CONNECTION,
    ) -> ActiveRecord:
        """Build an unbound record, ready for :meth:`create`."""
        return cls(registry.get(connection_name), table)

    @classmethod
    def build_from_result(
        cls,
        table: str,
        result: QueryResult,
        column: ColumnSpec = None,
    ) -> list[ActiveRecord]:
        """Build one loaded record per row of ``result`` without further queries.

        The result must hold exactly the table's columns (``SELECT t.* ...``);
        any extra or missing column raises.
        """
        conn = result.connection
        fields = conn.fields(table)

        columns = _normalize_columns(column) or tuple(conn.primary_key(table))
        if not columns:
            raise CardinalityMismatchError(
                f'Table "{table}" has no primary key; name the key columns to bind'
            ).with_context(table=table)

        records = []
        for row in result.all_rows():
            missing = [name for name in columns if name not in row]
            if missing:
                raise CardinalityMismatchError(f"Result rows lack key columns {missing}").with_context(table=table)
            record = cls(conn, table, tuple(row[name] for name in columns), columns)
            record.load(row, fields, fields)
            records.append(record)
        return records

    @classmethod
    def build_where_equals(
        cls,
        registry: ConnectionRegistry,
        table: str,
        conditions: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
        column: ColumnSpec = None,
        connection_name: str = DEFAULT_CONNECTION,
    ) -> list[ActiveRecord]:
        """Select rows matching equality ``conditions`` and build loaded records.

        Conditions follow the filter encoding: ``None``/``"NULL"`` match
        NULL, ``"NOT NULL"`` matches non-NULL, ``False`` is ignored.
        """
        conn = registry.get(connection_name)
        sql = select_where_statement(table, conditions or {}, conn, limit, offset)
        result = conn.query(sql)
        if not isinstance(result, QueryResult):
            raise QueryError(f"Query returned no result set: {sql}", query=sql)
        try:
            return cls.build_from_result(table, result, column)
        finally:
            result.free()

    # -- Identity ------------------------------------------------------------

    @property
    def table(self) -> str:
        return self._table

    @property
    def connection(self) -> DatabaseConnection:
        return self._db

    @property
    def key(self) -> tuple[Any, ...] | None:
        return self._key

    @property
    def columns(self) -> tuple[str, ...] | None:
        return self._columns

    @property
    def status(self) -> ExistenceStatus:
        return self._status

    @property
    def state(self) -> RecordState:
        if self._key is None:
            return RecordState.UNBOUND
        match self._status:
            case ExistenceStatus.EXISTS:
                return RecordState.BOUND_EXISTS
            case ExistenceStatus.ABSENT:
                return RecordState.BOUND_ABSENT
            case _:
                return RecordState.BOUND_UNKNOWN

    def key_columns(self) -> dict[str, Any]:
        """Key column → key value."""
        if self._key is None or self._columns is None:
            raise InvalidStateError("Active record is not bound to a key").with_context(table=self._table)
        if len(self._key) != len(self._columns):
            raise CardinalityMismatchError("Key and key columns differ in length").with_context(table=self._table)
        return dict(zip(self._columns, self._key, strict=True))

    def _key_is_known(self) -> bool:
        # A create() that never saw a key column leaves False in its place.
        return self._key is not None and all(value is not False for value in self._key)

    def key_predicate(self) -> str:
        """WHERE clause text identifying the bound row."""
        predicate = where_equals(self.key_columns(), self._db)
        if not predicate:
            raise InvalidStateError("Active record binding constrains no columns").with_context(table=self._table)
        return predicate

    # -- Reads ---------------------------------------------------------------

    def exists(self) -> bool:
        """Whether the bound row exists (fetched once, then cached)."""
        return self._load_current()

    def reload(self) -> bool:
        """Re-fetch the bound row, ignoring the cache."""
        return self._load_current(use_cache=False)

    def get(self, field: str) -> Any:
        """Buffered value, else stored value, else key value for ``field``."""
        if field in self._buffer:
            return self._buffer[field]

        if self.exists():
            if self._row_partial and field not in self._current and self._key_is_known():
                self.reload()
            if self._current is not None and field in self._current:
                return self._current[field]

        if self._key is not None and self._columns and field in self._columns:
            value = self._key[self._columns.index(field)]
            if value is not False and value is not None:
                return value

        raise UndefinedFieldError(field).with_context(table=self._table)

    def is_set(self, field: str) -> bool:
        """Whether :meth:`get` would return a value for ``field``."""
        try:
            self.get(field)
        except UndefinedFieldError:
            return False
        return True

    def fields(self) -> list[str]:
        """Columns of the table."""
        if self._fields is None:
            self._fields = self._db.fields(self._table)
        return list(self._fields)

    def has_field(self, field: str) -> bool:
        return field in self.fields()

    def current_data(self) -> Row | None:
        """Stored row, or None when unbound or absent."""
        if self._key is None:
            return None
        self._load_current()
        return dict(self._current) if self._current is not None else None

    def buffered_data(self) -> dict[str, Any]:
        return dict(self._buffer)

    def get_data(self) -> dict[str, Any]:
        """What the row will hold after the next write: stored values overlaid with the buffer."""
        return {**(self.current_data() or {}), **self._buffer}

    # -- Writes --------------------------------------------------------------

    def set(self, field: str, value: Any) -> None:
        """Stage ``value`` for ``field``; nothing is written until create/update."""
        self._buffer[field] = value

    def load(
        self,
        row: Mapping[str, Any],
        allowed_fields: Iterable[str] | None = None,
        required_fields: Iterable[str] | None = None,
    ) -> None:
        """Use ``row`` as the stored row instead of fetching it.

        Raises:
            FieldNotAllowedError: ``row`` has a field outside ``allowed_fields``.
            MissingFieldsError: ``row`` lacks one of ``required_fields``.
        """
        if allowed_fields is not None:
            allowed = set(allowed_fields)
            disallowed = [name for name in row if name not in allowed]
            if disallowed:
                raise FieldNotAllowedError(
                    "Active record load includes non-allowed fields.", fields=disallowed
                ).with_context(table=self._table)

        if required_fields is not None:
            missing = [name for name in required_fields if name not in row]
            if missing:
                raise MissingFieldsError(
                    "Active record load missing required fields.", fields=missing
                ).with_context(table=self._table)

        self._current = dict(row)
        self._row_partial = False
        if self._key is not None:
            self._status = ExistenceStatus.EXISTS

    def create(self) -> None:
        """INSERT the buffer as a new row and bind to it.

        Raises:
            InvalidStateError: The record is already bound.
            FieldNotAllowedError: The buffer has fields the table lacks.
            CardinalityMismatchError: No key columns are configured and the
                table has no primary key.
        """
        if self._key is not None:
            raise InvalidStateError("Cannot add existing active record to database.").with_context(table=self._table)

        self._check_buffer("Cannot add active record with fields not in database table.")

        columns = self._columns or tuple(self._db.primary_key(self._table))
        if not columns:
            raise CardinalityMismatchError(
                f'Table "{self._table}" has no primary key; name the key columns to bind'
            ).with_context(table=self._table)

        outcome = self._db.query(insert_statement(self._table, self._buffer, self._db))
        if isinstance(outcome, QueryResult):
            outcome.free()

        current = dict(self._buffer)
        autoincrement = self._db.autoincrement_key(self._table)
        if autoincrement is not None and isinstance(outcome, int) and not isinstance(outcome, bool):
            current[autoincrement] = outcome

        self._buffer = {}
        self._current = current
        self._row_partial = True
        self._status = ExistenceStatus.EXISTS
        self._columns = columns
        self._key = tuple(current.get(name, False) for name in columns)

        logger.info("record_created", **self._log_fields())

    def update(self) -> None:
        """UPDATE the bound row with the buffer. An empty buffer writes nothing.

        Raises:
            InvalidStateError: The record is unbound or its row does not exist.
            FieldNotAllowedError: The buffer has fields the table lacks.
        """
        if self._key is None or not self.exists():
            raise InvalidStateError("Cannot update non-existent active record in the database.").with_context(
                table=self._table
            )

        if not self._buffer:
            return

        self._check_buffer("Cannot update active record with fields not in database table.")

        self._db.query(update_statement(self._table, self._buffer, self.key_predicate(), self._db))

        if self._current is None:
            self._current = {}
        self._current.update(self._buffer)

        if any(name in self._buffer for name in self._columns):
            self._key = tuple(
                self._buffer.get(name, value) for name, value in zip(self._columns, self._key, strict=True)
            )

        logger.info("record_updated", fields=sorted(self._buffer), **self._log_fields())
        self._buffer = {}

    def delete(self) -> None:
        """DELETE the bound row and return to an unbound, reusable record.

        Raises:
            InvalidStateError: The row does not exist.
        """
        if not self.exists():
            raise InvalidStateError("Cannot delete active record that does not exist in the database.").with_context(
                table=self._table
            )

        self._db.query(delete_statement(self._table, self.key_predicate(), self._db))
        logger.info("record_deleted", **self._log_fields())

        self._key = None
        self.reset()

    # -- Cache / buffer --------------------------------------------------------

    def reset(self) -> None:
        """Drop both the buffer and the cached row."""
        self.reset_buffer()
        self.reset_cache()

    def reset_buffer(self) -> None:
        """Discard staged values without writing them."""
        self._buffer = {}

    def reset_cache(self) -> None:
        """Forget the cached row so the next read fetches it again."""
        self._current = None
        self._row_partial = False
        self._status = ExistenceStatus.UNKNOWN

    # -- Internals -------------------------------------------------------------

    def _check_buffer(self, message: str) -> None:
        known = set(self.fields())
        unknown = [name for name in self._buffer if name not in known]
        if unknown:
            raise FieldNotAllowedError(message, fields=unknown).with_context(table=self._table)

    def _load_current(self, use_cache: bool = True) -> bool:
        if self._key is None:
            return False

        if use_cache and self._status is not ExistenceStatus.UNKNOWN:
            return self._status is ExistenceStatus.EXISTS

        sql = select_one_statement(self._table, self.key_predicate(), self._db)
        result = self._db.query(sql)
        if not isinstance(result, QueryResult):
            raise QueryError(f"Query returned no result set: {sql}", query=sql)

        try:
            total = result.count()
            if total > 1:
                logger.error("duplicate_key_violation", **self._log_fields())
                raise DuplicateKeyViolationError("Multiple records match active record binding").with_context(
                    table=self._table, query=sql, key=list(self._key)
                )
            if total == 1:
                self._current = result.row(0)
                self._status = ExistenceStatus.EXISTS
            else:
                self._current = None
                self._status = ExistenceStatus.ABSENT
            self._row_partial = False
        finally:
            result.free()

        return self._status is ExistenceStatus.EXISTS

    def _log_fields(self) -> dict[str, Any]:
        return {
            "connection": self._db.name if self._db.is_named else None,
            "table": self._table,
            "key": list(self._key) if self._key is not None else None,
        }

    def __repr__(self) -> str:
        return f"ActiveRecord(table={self._table!r}, key={self._key!r}, state={self.state.value})"


__all__ = [
    "ActiveRecord",
    "ExistenceStatus",
    "RecordState",
]
