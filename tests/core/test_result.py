"""Tests for ``rowspine.result``: cursor semantics over a result set."""

from __future__ import annotations

from typing import Any

import pytest

from rowspine.errors import ResultExpiredError
from rowspine.result import BEFORE_FIRST, QueryResult

ROWS = [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}, {"id": 3, "name": "c"}]


class ListResult(QueryResult):
    """Result over an in-memory list; the handle is the list itself."""

    def __init__(self, rows: list[dict[str, Any]]):
        super().__init__(connection=None, handle=list(rows), query="SELECT * FROM t")
        self.released = False

    def _count(self, handle):
        return len(handle)

    def _fields(self, handle):
        return list(handle[0]) if handle else []

    def _fetch_row(self, handle, index):
        return dict(handle[index])

    def _release(self, handle):
        self.released = True


class BulkListResult(ListResult):
    supports_bulk_fetch = True

    def __init__(self, rows):
        super().__init__(rows)
        self.bulk_calls = 0

    def _fetch_all(self, handle):
        self.bulk_calls += 1
        return [dict(row) for row in handle]


@pytest.fixture
def result():
    return ListResult(ROWS)


class TestForward:
    def test_starts_before_first(self, result):
        assert result.position == BEFORE_FIRST
        assert result.count() == 3
        assert len(result) == 3
        assert result.fields() == ["id", "name"]

    def test_next_row_walks_then_none(self, result):
        assert [result.next_row() for _ in range(3)] == ROWS
        assert result.next_row() is None
        assert result.position == 3

    def test_next_row_stays_past_end(self, result):
        for _ in range(5):
            result.next_row()
        assert result.position == 3
        assert result.next_row() is None

    def test_empty_result(self):
        empty = ListResult([])
        assert empty.next_row() is None
        assert empty.prev_row() is None
        assert empty.all_rows() == []


class TestBackward:
    def test_prev_row_after_exhaustion_returns_last(self, result):
        result.all_rows()
        assert result.prev_row() == ROWS[2]
        assert result.prev_row() == ROWS[1]
        assert result.prev_row() == ROWS[0]
        assert result.prev_row() is None
        assert result.position == BEFORE_FIRST

    def test_prev_row_before_first(self, result):
        assert result.prev_row() is None
        assert result.position == BEFORE_FIRST
        assert result.next_row() == ROWS[0]


class TestRandomAccess:
    def test_row_index(self, result):
        assert result.row(1) == ROWS[1]
        assert result.position == 1
        assert result.next_row() == ROWS[2]

    def test_row_out_of_range_keeps_position(self, result):
        result.row(1)
        assert result.row(3) is None
        assert result.row(-1) is None
        assert result.position == 1

    def test_row_without_index_is_next(self, result):
        assert result.row() == ROWS[0]
        assert result.row() == ROWS[1]


class TestAllRows:
    def test_iterative(self, result):
        result.row(2)
        assert result.all_rows() == ROWS
        assert result.position == 3

    def test_bulk_matches_iterative(self):
        bulk = BulkListResult(ROWS)
        assert bulk.all_rows() == ListResult(ROWS).all_rows()
        assert bulk.bulk_calls == 1
        assert bulk.position == 3

    def test_iteration_rewinds(self, result):
        result.all_rows()
        assert list(result) == ROWS


class TestFree:
    def test_free_releases_handle(self, result):
        result.free()
        assert result.released is True
        assert result.is_freed is True

    def test_access_after_free_raises(self, result):
        result.free()
        with pytest.raises(ResultExpiredError):
            result.count()
        with pytest.raises(ResultExpiredError):
            result.next_row()
        with pytest.raises(ResultExpiredError):
            result.all_rows()
        with pytest.raises(ResultExpiredError):
            _ = result.handle

    def test_double_free_raises(self, result):
        result.free()
        with pytest.raises(ResultExpiredError):
            result.free()

    def test_repr(self, result):
        assert "position=-1" in repr(result)
        result.free()
        assert "freed" in repr(result)
