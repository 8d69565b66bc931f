"""Tests for rowspine.dialect."""

from __future__ import annotations

import pytest

from rowspine.adapters.types import DatabaseType
from rowspine.dialect import Dialect, MySQLDialect, SQLiteDialect, get_dialect, register_dialect
from rowspine.errors import ConfigError


class TestGetDialect:
    def test_mysql(self):
        assert get_dialect("mysql").name == "mysql"

    def test_mariadb_is_mysql_syntax(self):
        assert get_dialect("mariadb").name == "mysql"

    def test_case_insensitive(self):
        assert get_dialect("SQLite").name == "sqlite"

    def test_accepts_database_type(self):
        assert isinstance(get_dialect(DatabaseType.MYSQL), MySQLDialect)

    def test_unknown_raises(self):
        with pytest.raises(ConfigError, match="Unknown dialect"):
            get_dialect("oracle")

    def test_register_custom(self):
        class Custom(SQLiteDialect):
            @property
            def name(self) -> str:
                return "custom-test"

        register_dialect("Custom-Test", Custom())
        assert get_dialect("custom-test").name == "custom-test"


class TestMySQLDialect:
    def test_protocol(self):
        assert isinstance(MySQLDialect(), Dialect)

    def test_quoting(self):
        d = MySQLDialect()
        assert d.quote_identifier("users") == "`users`"
        assert d.quote_literal("O\\'Brien") == '"O\\\'Brien"'

    def test_insert_defaults(self):
        assert MySQLDialect().insert_defaults("t") == "INSERT INTO `t` () VALUES ();"


class TestSQLiteDialect:
    def test_quoting(self):
        d = SQLiteDialect()
        assert d.quote_identifier("users") == "`users`"
        assert d.quote_literal("O''Brien") == "'O''Brien'"

    def test_insert_defaults(self):
        assert SQLiteDialect().insert_defaults("t") == "INSERT INTO `t` DEFAULT VALUES;"
