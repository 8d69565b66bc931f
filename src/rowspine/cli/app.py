"""
Root Typer application for the rowspine CLI.

Inspect a database and its rows through the same connection and active
record layer applications use.
"""

from __future__ import annotations

import typer
from typer import Typer

from rowspine.cli.utils import fail, open_registry, output_dict, output_rows, parse_conditions
from rowspine.connections import DEFAULT_CONNECTION
from rowspine.record import ActiveRecord
from rowspine.result import QueryResult

app = Typer(
    name="rowspine",
    help="rowspine: active-record access to SQLite and MySQL databases.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from rowspine import __version__

        try:
            v = pkg_version("rowspine")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"rowspine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """rowspine CLI: list tables, inspect columns, read and query rows."""


# ── Schema ───────────────────────────────────────────────────────────────


@app.command()
def tables(
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL"),
    connection: str = typer.Option(DEFAULT_CONNECTION, "--connection", help="Configured connection name"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List the tables of a database."""
    with open_registry(database) as registry:
        names = registry.get(connection).tables()
        output_rows([{"table": name} for name in names], as_json=json_out, title="Tables")


@app.command()
def columns(
    table: str = typer.Argument(..., help="Table name"),
    database: str | None = typer.Option(None, "--database", "-d"),
    connection: str = typer.Option(DEFAULT_CONNECTION, "--connection"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show a table's columns with their key roles."""
    with open_registry(database) as registry:
        conn = registry.get(connection)
        primary = conn.primary_key(table)
        autoincrement = conn.autoincrement_key(table)
        rows = [
            {"column": name, "primary_key": name in primary, "autoincrement": name == autoincrement}
            for name in conn.fields(table)
        ]
        output_rows(rows, as_json=json_out, title=f"Columns of {table}")


# ── Rows ─────────────────────────────────────────────────────────────────


@app.command()
def show(
    table: str = typer.Argument(..., help="Table name"),
    key: list[str] = typer.Argument(..., help="Key value(s), in key column order"),
    column: list[str] | None = typer.Option(None, "--column", "-c", help="Key column (repeat for composite keys)"),  # noqa: UP007
    database: str | None = typer.Option(None, "--database", "-d"),
    connection: str = typer.Option(DEFAULT_CONNECTION, "--connection"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the row bound to KEY (primary key unless --column is given)."""
    with open_registry(database) as registry:
        record = ActiveRecord.build(registry, table, tuple(key), column or None, connection_name=connection)
        data = record.current_data()
        if data is None:
            fail(f"No row in {table} for {dict(zip(record.columns, key, strict=True))}")
        output_dict(data, as_json=json_out, title=f"{table} {list(key)}")


@app.command()
def find(
    table: str = typer.Argument(..., help="Table name"),
    conditions: list[str] | None = typer.Argument(None, help="FIELD=VALUE filters (NULL / NOT NULL allowed)"),  # noqa: UP007
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum rows"),  # noqa: UP007
    offset: int = typer.Option(0, "--offset", help="Rows to skip (with --limit)"),
    database: str | None = typer.Option(None, "--database", "-d"),
    connection: str = typer.Option(DEFAULT_CONNECTION, "--connection"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Find rows matching equality filters."""
    filters = parse_conditions(conditions or [])
    with open_registry(database) as registry:
        records = ActiveRecord.build_where_equals(
            registry, table, filters, limit=limit, offset=offset, connection_name=connection
        )
        output_rows([record.current_data() for record in records], as_json=json_out, title=table)


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL statement"),
    database: str | None = typer.Option(None, "--database", "-d"),
    connection: str = typer.Option(DEFAULT_CONNECTION, "--connection"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run one SQL statement and print its rows or outcome."""
    with open_registry(database) as registry:
        outcome = registry.get(connection).query(sql)
        if isinstance(outcome, QueryResult):
            try:
                rows = outcome.all_rows()
            finally:
                outcome.free()
            output_rows(rows, as_json=json_out, title="Result")
        elif outcome is True:
            output_dict({"status": "ok"}, as_json=json_out)
        else:
            output_dict({"status": "ok", "last_insert_id": outcome}, as_json=json_out)
