"""
Query result sets with cursor semantics.

A :class:`QueryResult` wraps the driver's result handle for one query and
exposes a cursor over its rows. The cursor starts "before first" (position
-1) and always stays within ``[-1, count]``. Moving off either end is an
expected condition, so the cursor methods return ``None`` instead of raising.

Adapters subclass :class:`QueryResult` and supply four primitives:
``count()``, ``fields()``, ``_fetch_row(index)`` and, when the driver can
return every row in one round trip, ``_fetch_all()`` together with
``supports_bulk_fetch = True``. The cursor logic itself lives here so every
backend moves identically.

Examples:
    >>> result = conn.query("SELECT id, name FROM users ORDER BY id")
    >>> result.next_row()
    {'id': 1, 'name': 'Ada'}
    >>> result.all_rows()
    [{'id': 1, 'name': 'Ada'}, {'id': 2, 'name': 'Grace'}]
    >>> result.free()
    >>> result.count()
    Traceback (most recent call last):
    ...
    ResultExpiredError: DB result is not available (either null or freed).

Tags:
    result-set, cursor, database, rowspine
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from rowspine.errors import ResultExpiredError

if TYPE_CHECKING:
    from rowspine.adapters.base import DatabaseConnection

Row = dict[str, Any]

BEFORE_FIRST = -1


class QueryResult(ABC):
    """
    Abstract cursor over the rows produced by one query.

    The owning connection is a shared reference; freeing the result never
    touches the connection.
    """

    #: Whether ``_fetch_all()`` returns every row in a single driver call.
    supports_bulk_fetch: bool = False

    def __init__(self, connection: DatabaseConnection, handle: Any, query: str | None = None):
        self._connection = connection
        self._handle = handle
        self._query = query
        self._cur = BEFORE_FIRST

    @property
    def connection(self) -> DatabaseConnection:
        """Connection that produced this result."""
        return self._connection

    @property
    def query(self) -> str | None:
        """SQL text that produced this result, if known."""
        return self._query

    @property
    def handle(self) -> Any:
        """Driver result handle. Raises once the result has been freed."""
        return self._require_handle()

    def _require_handle(self) -> Any:
        if self._handle is None:
            raise ResultExpiredError("DB result is not available (either null or freed).")
        return self._handle

    @property
    def position(self) -> int:
        """Current cursor position (-1 before the first row, ``count()`` past the last)."""
        return self._cur

    @property
    def is_freed(self) -> bool:
        return self._handle is None

    def free(self) -> None:
        """Release the driver handle. Later access raises ``ResultExpiredError``."""
        self._release(self.handle)
        self._handle = None

    def count(self) -> int:
        """Total number of rows in the result."""
        return self._count(self._require_handle())

    def fields(self) -> list[str]:
        """Column names, in result order."""
        return self._fields(self._require_handle())

    # -- Driver primitives -------------------------------------------------

    @abstractmethod
    def _count(self, handle: Any) -> int: ...

    @abstractmethod
    def _fields(self, handle: Any) -> list[str]: ...

    @abstractmethod
    def _fetch_row(self, handle: Any, index: int) -> Row:
        """Return the row at ``index`` (already bounds-checked)."""
        ...

    def _fetch_all(self, handle: Any) -> list[Row]:
        """Return every row in one driver call (only when ``supports_bulk_fetch``)."""
        raise NotImplementedError(f"{type(self).__name__} has no bulk fetch")

    def _release(self, handle: Any) -> None:
        """Free driver resources held by ``handle``."""

    # -- Cursor ------------------------------------------------------------

    def next_row(self) -> Row | None:
        """Advance one row and return it, or ``None`` past the last row."""
        total = self.count()
        if self._cur < total:
            self._cur += 1
        if self._cur >= total:
            return None
        return self._fetch_row(self._require_handle(), self._cur)

    def prev_row(self) -> Row | None:
        """Retreat one row and return it, or ``None`` before the first row.

        From one past the last row the cursor lands back on the last row.
        """
        total = self.count()
        if self._cur >= total:
            self._cur = total - 1
        else:
            self._cur -= 1
        if self._cur < 0:
            self._cur = BEFORE_FIRST
            return None
        return self._fetch_row(self._require_handle(), self._cur)

    def row(self, i: int | None = None) -> Row | None:
        """Move to row ``i`` and return it.

        With no ``i`` this behaves like :meth:`next_row`. An ``i`` outside
        ``[0, count)`` returns ``None`` and leaves the cursor where it was.
        """
        if i is None:
            return self.next_row()
        if i < 0 or i >= self.count():
            return None
        self._cur = i
        return self._fetch_row(self._require_handle(), i)

    def all_rows(self) -> list[Row]:
        """Materialize every row in order, leaving the cursor past the end."""
        if self.supports_bulk_fetch:
            rows = self._fetch_all(self._require_handle())
            self._cur = self.count()
            return rows

        self._cur = BEFORE_FIRST
        rows = []
        while (row := self.next_row()) is not None:
            rows.append(row)
        return rows

    def rewind(self) -> None:
        """Put the cursor back before the first row."""
        self._require_handle()
        self._cur = BEFORE_FIRST

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Row]:
        self.rewind()
        while (row := self.next_row()) is not None:
            yield row

    def __repr__(self) -> str:
        state = "freed" if self.is_freed else f"position={self._cur}"
        return f"{type(self).__name__}(query={self._query!r}, {state})"


__all__ = [
    "BEFORE_FIRST",
    "QueryResult",
    "Row",
]
