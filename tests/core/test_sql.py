"""Tests for ``rowspine.sql``: literal encoding and statement text."""

from __future__ import annotations

from decimal import Decimal

import pytest

from rowspine.dialect import MySQLDialect
from rowspine.sql import (
    delete_statement,
    encode_value,
    equality_clause,
    insert_statement,
    is_numeric,
    quote_string,
    select_one_statement,
    select_where_statement,
    update_statement,
    where_equals,
)


class TestIsNumeric:
    @pytest.mark.parametrize("value", [0, 42, -7, 2.5, Decimal("1.50"), "12", "-3.5", "1e5", ".5"])
    def test_numeric(self, value):
        assert is_numeric(value) is True

    @pytest.mark.parametrize("value", [True, False, None, "abc", "", "12abc", float("nan"), float("inf"), b"1"])
    def test_not_numeric(self, value):
        assert is_numeric(value) is False


class TestEncodeValue:
    def test_numbers_unquoted(self, mysql_escaper):
        assert encode_value(5, mysql_escaper) == "5"
        assert encode_value("5", mysql_escaper) == "5"
        assert encode_value(2.5, mysql_escaper) == "2.5"

    def test_bool(self, mysql_escaper):
        assert encode_value(True, mysql_escaper) == "1"
        assert encode_value(False, mysql_escaper) == "0"

    def test_null(self, mysql_escaper):
        assert encode_value(None, mysql_escaper) == "NULL"
        assert encode_value("NULL", mysql_escaper) == "NULL"

    def test_strings_escaped_and_quoted(self, mysql_escaper):
        assert encode_value("O'Brien", mysql_escaper) == '"O\\\'Brien"'
        assert encode_value('say "hi"', mysql_escaper) == '"say \\"hi\\""'

    def test_bytes_decoded(self, mysql_escaper):
        assert quote_string(b"abc", mysql_escaper) == '"abc"'

    def test_undecodable_bytes_become_hex_literal(self, mysql_escaper, sqlite_conn):
        assert quote_string(b"\xff\xfe", mysql_escaper) == "X'fffe'"
        assert encode_value(b"\xff\x00", sqlite_conn) == "X'ff00'"

    def test_sqlite_quoting(self, sqlite_conn):
        assert encode_value("O'Brien", sqlite_conn) == "'O''Brien'"


class TestWhereEquals:
    def test_null(self, mysql_escaper):
        assert where_equals({"x": None}, mysql_escaper) == "`x` IS NULL"
        assert where_equals({"x": "NULL"}, mysql_escaper) == "`x` IS NULL"

    def test_not_null(self, mysql_escaper):
        assert where_equals({"x": "NOT NULL"}, mysql_escaper) == "`x` IS NOT NULL"

    def test_numeric(self, mysql_escaper):
        assert where_equals({"x": 5}, mysql_escaper) == "`x` = 5"
        assert where_equals({"x": "5"}, mysql_escaper) == "`x` = 5"

    def test_string(self, mysql_escaper):
        assert where_equals({"x": "O'Brien"}, mysql_escaper) == '`x` = "O\\\'Brien"'

    def test_true(self, mysql_escaper):
        assert where_equals({"flag": True}, mysql_escaper) == "`flag` = 1"

    def test_false_is_skipped(self, mysql_escaper):
        assert equality_clause("x", False, mysql_escaper) is None
        assert where_equals({"x": False, "y": 2}, mysql_escaper) == "`y` = 2"
        assert where_equals({"x": False}, mysql_escaper) == ""

    def test_joined_with_and(self, mysql_escaper):
        assert where_equals({"a": 1, "b": "z"}, mysql_escaper) == '`a` = 1 AND `b` = "z"'


class TestStatements:
    def test_insert(self, mysql_escaper):
        assert insert_statement("t", {"a": 1, "b": "x"}, mysql_escaper) == 'INSERT INTO `t` (`a`,`b`) VALUES (1,"x");'

    def test_insert_null(self, mysql_escaper):
        assert insert_statement("t", {"a": None}, mysql_escaper) == "INSERT INTO `t` (`a`) VALUES (NULL);"

    def test_insert_empty_uses_dialect(self, mysql_escaper, sqlite_conn):
        assert insert_statement("t", {}, mysql_escaper) == "INSERT INTO `t` () VALUES ();"
        assert insert_statement("t", {}, sqlite_conn) == "INSERT INTO `t` DEFAULT VALUES;"

    def test_update(self, mysql_escaper):
        sql = update_statement("t", {"a": 1, "b": "x"}, "`id` = 3", mysql_escaper)
        assert sql == 'UPDATE `t` SET `a` = 1,`b` = "x" WHERE `id` = 3;'

    def test_delete(self, mysql_escaper):
        assert delete_statement("t", "`id` = 3", mysql_escaper) == "DELETE FROM `t` WHERE `id` = 3"

    def test_select_one(self, mysql_escaper):
        assert select_one_statement("t", "`id` = 3", mysql_escaper) == "SELECT * FROM `t` WHERE `id` = 3 LIMIT 2;"

    def test_select_where_without_conditions(self, mysql_escaper):
        assert select_where_statement("t", {}, mysql_escaper) == "SELECT * FROM `t`"

    def test_select_where_limit(self, mysql_escaper):
        sql = select_where_statement("t", {"a": 1}, mysql_escaper, limit=10)
        assert sql == "SELECT * FROM `t` WHERE `a` = 1 LIMIT 10"

    def test_select_where_limit_offset(self, mysql_escaper):
        sql = select_where_statement("t", {"a": 1}, mysql_escaper, limit=10, offset=20)
        assert sql == "SELECT * FROM `t` WHERE `a` = 1 LIMIT 20,10"

    def test_offset_ignored_without_limit(self, mysql_escaper):
        assert select_where_statement("t", {}, mysql_escaper, offset=5) == "SELECT * FROM `t`"


class BracketDialect(MySQLDialect):
    def quote_identifier(self, identifier: str) -> str:
        return f"[{identifier}]"


class TestIdentifierQuoting:
    @pytest.fixture
    def bracket_escaper(self, mysql_escaper):
        mysql_escaper.dialect = BracketDialect()
        return mysql_escaper

    def test_statements_use_dialect_quoting(self, bracket_escaper):
        assert insert_statement("t", {"a": 1}, bracket_escaper) == "INSERT INTO [t] ([a]) VALUES (1);"
        assert update_statement("t", {"a": 1}, "[id] = 3", bracket_escaper) == "UPDATE [t] SET [a] = 1 WHERE [id] = 3;"
        assert delete_statement("t", "[id] = 3", bracket_escaper) == "DELETE FROM [t] WHERE [id] = 3"
        assert select_one_statement("t", "[id] = 3", bracket_escaper) == "SELECT * FROM [t] WHERE [id] = 3 LIMIT 2;"

    def test_filters_use_dialect_quoting(self, bracket_escaper):
        assert where_equals({"a": None, "b": 2}, bracket_escaper) == "[a] IS NULL AND [b] = 2"
        assert select_where_statement("t", {"a": 1}, bracket_escaper) == "SELECT * FROM [t] WHERE [a] = 1"
