"""Tests for ``rowspine.connections``: the named connection registry."""

from __future__ import annotations

import pytest

from rowspine.adapters.sqlite import SQLiteConnection
from rowspine.connections import DEFAULT_CONNECTION, ConnectionRegistry
from rowspine.errors import ConnectionNotFoundError


@pytest.fixture
def reg():
    return ConnectionRegistry()


class TestConnectionRegistry:
    def test_add_and_get(self, reg):
        conn = SQLiteConnection()
        reg.add("default", conn)
        assert reg.get("default") is conn
        assert reg.get() is conn
        assert reg["default"] is conn

    def test_add_names_connection(self, reg):
        conn = SQLiteConnection()
        reg.add("reports", conn)
        assert conn.name == "reports"

    def test_get_missing_raises(self, reg):
        with pytest.raises(ConnectionNotFoundError) as exc_info:
            reg.get("nope")
        assert exc_info.value.message == 'DB connection "nope" does not exist.'

    def test_default_name(self):
        assert DEFAULT_CONNECTION == "default"

    def test_exists(self, reg):
        assert reg.exists("default") is False
        reg.add("default", SQLiteConnection())
        assert reg.exists("default") is True
        assert "default" in reg

    def test_replace(self, reg):
        first, second = SQLiteConnection(), SQLiteConnection()
        reg.add("default", first)
        reg.add("default", second)
        assert reg.get() is second
        assert len(reg) == 1

    def test_remove_is_idempotent(self, reg):
        reg.add("default", SQLiteConnection())
        reg.remove("default")
        reg.remove("default")
        assert reg.exists("default") is False
        assert len(reg) == 0

    def test_names_and_iteration(self, reg):
        reg.add("default", SQLiteConnection())
        reg.add("reports", SQLiteConnection())
        assert reg.names() == ["default", "reports"]
        assert list(reg) == ["default", "reports"]

    def test_disconnect_all(self, reg):
        conns = [SQLiteConnection(), SQLiteConnection()]
        for i, conn in enumerate(conns):
            conn.connect()
            reg.add(f"c{i}", conn)
        reg.disconnect_all()
        assert all(not conn.is_connected for conn in conns)
        assert len(reg) == 2
