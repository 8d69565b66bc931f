"""
Literal encoding and statement text for generated SQL.

Everything the active-record layer sends to a database is built here. The
functions are pure: given the same values and the same escaping connection
they always produce the same text, which is what logging, tests and any
compatible driver rely on.

Value encoding, in order:

1. numeric values are emitted unquoted (``bool`` becomes ``1``/``0``)
2. ``None`` or the text ``"NULL"`` becomes ``NULL``
3. in filters only, the text ``"NOT NULL"`` becomes ``IS NOT NULL``
4. anything else is escaped by the connection and wrapped in the
   dialect's literal quotes

Equality filters skip any column whose value is ``False``; that is how a
partially bound composite key says "no constraint on this column".

Identifiers are quoted by the connection's dialect and never escaped.
Bytes that are not valid UTF-8 are written as hex literals (``X'..'``).

Examples:
    >>> where_equals({"x": None}, conn)
    '`x` IS NULL'
    >>> where_equals({"x": 5, "y": False, "z": "NOT NULL"}, conn)
    '`x` = 5 AND `z` IS NOT NULL'
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol

from rowspine.dialect import Dialect

NULL = "NULL"
NOT_NULL = "NOT NULL"

_NUMERIC_TEXT = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class Escaper(Protocol):
    """Anything that can escape a literal and knows its dialect (a connection)."""

    @property
    def dialect(self) -> Dialect: ...

    def escape(self, value: Any) -> str: ...


def is_numeric(value: Any) -> bool:
    """True for values that are emitted unquoted.

    Numbers and strings that spell a decimal or exponent number count;
    booleans, NaN and infinities do not.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, str):
        return bool(_NUMERIC_TEXT.match(value))
    return False


def is_null(value: Any) -> bool:
    return value is None or value == NULL


def quote_identifier(name: str, escaper: Escaper) -> str:
    return escaper.dialect.quote_identifier(name)


def quote_string(value: Any, escaper: Escaper) -> str:
    """Escape ``value`` and wrap it in the dialect's literal quotes."""
    if isinstance(value, bytes):
        try:
            value = value.decode()
        except UnicodeDecodeError:
            return f"X'{value.hex()}'"
    return escaper.dialect.quote_literal(escaper.escape(str(value)))


def encode_value(value: Any, escaper: Escaper) -> str:
    """Encode a value for an INSERT list or an UPDATE assignment."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if is_numeric(value):
        return str(value)
    if is_null(value):
        return NULL
    return quote_string(value, escaper)


def equality_clause(column: str, value: Any, escaper: Escaper) -> str | None:
    """One filter clause for ``column``, or None when ``value`` is ``False``."""
    if value is False:
        return None

    clause = quote_identifier(column, escaper) + " "
    if value is True:
        return clause + "= 1"
    if is_numeric(value):
        return clause + f"= {value}"
    if is_null(value):
        return clause + "IS NULL"
    if value == NOT_NULL:
        return clause + "IS NOT NULL"
    return clause + "= " + quote_string(value, escaper)


def where_equals(conditions: Mapping[str, Any], escaper: Escaper) -> str:
    """AND-joined equality filter; empty string when every condition is skipped."""
    clauses = [equality_clause(column, value, escaper) for column, value in conditions.items()]
    return " AND ".join(clause for clause in clauses if clause is not None)


def assignments(values: Mapping[str, Any], escaper: Escaper) -> str:
    return ",".join(
        f"{quote_identifier(field, escaper)} = {encode_value(value, escaper)}" for field, value in values.items()
    )


# -- Statements ----------------------------------------------------------------


def insert_statement(table: str, values: Mapping[str, Any], escaper: Escaper) -> str:
    """``INSERT INTO `t` (`a`,`b`) VALUES (1,"x");``"""
    if not values:
        return escaper.dialect.insert_defaults(table)
    fields = ",".join(quote_identifier(field, escaper) for field in values)
    encoded = ",".join(encode_value(value, escaper) for value in values.values())
    return f"INSERT INTO {quote_identifier(table, escaper)} ({fields}) VALUES ({encoded});"


def update_statement(table: str, values: Mapping[str, Any], predicate: str, escaper: Escaper) -> str:
    """``UPDATE `t` SET `a` = 1,`b` = "x" WHERE <predicate>;``"""
    return f"UPDATE {quote_identifier(table, escaper)} SET {assignments(values, escaper)} WHERE {predicate};"


def delete_statement(table: str, predicate: str, escaper: Escaper) -> str:
    """``DELETE FROM `t` WHERE <predicate>``"""
    return f"DELETE FROM {quote_identifier(table, escaper)} WHERE {predicate}"


def select_one_statement(table: str, predicate: str, escaper: Escaper) -> str:
    """Fetch at most two rows for a binding, enough to detect duplicates."""
    return f"SELECT * FROM {quote_identifier(table, escaper)} WHERE {predicate} LIMIT 2;"


def select_where_statement(
    table: str,
    conditions: Mapping[str, Any],
    escaper: Escaper,
    limit: int | None = None,
    offset: int = 0,
) -> str:
    """``SELECT * FROM `t` WHERE ... [LIMIT [offset,]limit]``"""
    query = f"SELECT * FROM {quote_identifier(table, escaper)}"
    predicate = where_equals(conditions, escaper)
    if predicate:
        query += f" WHERE {predicate}"
    if limit:
        query += " LIMIT "
        if offset > 0:
            query += f"{int(offset)},"
        query += str(int(limit))
    return query


__all__ = [
    "NULL",
    "NOT_NULL",
    "Escaper",
    "assignments",
    "delete_statement",
    "encode_value",
    "equality_clause",
    "insert_statement",
    "is_null",
    "is_numeric",
    "quote_identifier",
    "quote_string",
    "select_one_statement",
    "select_where_statement",
    "update_statement",
    "where_equals",
]
