"""
CLI utility helpers: output formatting and connection management.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from rowspine.adapters import connect_url
from rowspine.connections import DEFAULT_CONNECTION, ConnectionRegistry
from rowspine.errors import RowSpineError
from rowspine.logging import configure_logging
from rowspine.settings import build_registry, get_settings

console = Console()
err_console = Console(stderr=True)


# ── Connection helper ────────────────────────────────────────────────────


@contextmanager
def open_registry(database: str | None = None) -> Iterator[ConnectionRegistry]:
    """Yield a registry for one CLI command and close its connections afterwards.

    With ``database`` the registry holds that URL as the default connection;
    otherwise it is built from ``ROWSPINE_*`` settings.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    with cli_errors():
        if database:
            registry = ConnectionRegistry()
            registry.add(DEFAULT_CONNECTION, connect_url(database))
        else:
            registry = build_registry(settings)

    try:
        with cli_errors():
            yield registry
    finally:
        registry.disconnect_all()


@contextmanager
def cli_errors() -> Iterator[None]:
    """Print library errors in red and exit with status 1."""
    try:
        yield
    except RowSpineError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e


def fail(message: str) -> None:
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render rows as a Rich table or a JSON array."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return

    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    _print_table(rows, title=title)


def output_dict(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a single row as key-value pairs or a JSON object."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")


def parse_conditions(pairs: list[str]) -> dict[str, Any]:
    """``["role=admin", "deleted_at=NULL"]`` → ``{"role": "admin", "deleted_at": "NULL"}``."""
    conditions: dict[str, Any] = {}
    for pair in pairs:
        field, sep, value = pair.partition("=")
        if not sep or not field:
            raise typer.BadParameter(f"Expected FIELD=VALUE, got {pair!r}")
        conditions[field.strip()] = value
    return conditions


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("NULL" if v is None else str(v) for v in row.values()))
    console.print(table)
