"""Shared fixtures for rowspine tests."""

from __future__ import annotations

from typing import Any

import pytest

from rowspine.adapters.sqlite import SQLiteConnection
from rowspine.connections import ConnectionRegistry
from rowspine.dialect import MySQLDialect

SCHEMA = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT, role TEXT DEFAULT 'member')",
    "CREATE TABLE memberships ("
    " user_id INTEGER NOT NULL, group_id INTEGER NOT NULL, level TEXT,"
    " PRIMARY KEY (user_id, group_id))",
    "CREATE TABLE events (code TEXT, note TEXT)",
    "CREATE TABLE tags (id INTEGER PRIMARY KEY, label TEXT DEFAULT 'untitled')",
]


def create_schema(conn: SQLiteConnection) -> None:
    for statement in SCHEMA:
        conn.query(statement)


class BackslashEscaper:
    """Escapes like ``mysql_real_escape_string`` and quotes like MySQL."""

    dialect = MySQLDialect()

    def escape(self, value: Any) -> str:
        return str(value).replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')


@pytest.fixture
def sqlite_conn():
    """Connected in-memory SQLite database with the test schema."""
    conn = SQLiteConnection(":memory:")
    conn.connect()
    create_schema(conn)
    yield conn
    conn.disconnect()


@pytest.fixture
def registry(sqlite_conn):
    """Registry with the in-memory database as ``default``."""
    reg = ConnectionRegistry()
    reg.add("default", sqlite_conn)
    return reg


@pytest.fixture
def mysql_escaper():
    return BackslashEscaper()


@pytest.fixture
def sqlite_file(tmp_path):
    """SQLite file with the test schema and a few rows; yields its URL."""
    path = tmp_path / "app.db"
    conn = SQLiteConnection(str(path))
    conn.connect()
    create_schema(conn)
    conn.query("INSERT INTO users (name, email, role) VALUES ('Ada', 'ada@example.com', 'admin')")
    conn.query("INSERT INTO users (name, email, role) VALUES ('Grace', NULL, 'admin')")
    conn.query("INSERT INTO users (name, email) VALUES ('Linus', 'linus@example.com')")
    conn.query("INSERT INTO memberships (user_id, group_id, level) VALUES (1, 2, 'owner')")
    conn.disconnect()
    return f"sqlite:///{path}"
