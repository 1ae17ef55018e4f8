"""Output helpers shared by CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

import rich_click as click


def print_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Print rows under a header line, each column as wide as its widest cell.

    The last column is not padded so long diagnostics wrap naturally.
    """
    widths = [
        max([len(header)] + [len(row[i]) for row in rows if i < len(row)])
        for i, header in enumerate(headers)
    ]

    def render(cells: Sequence[str]) -> str:
        cells = list(cells) + [""] * (len(headers) - len(cells))
        padded = [cell.ljust(width) for cell, width in zip(cells[:-1], widths[:-1])]
        return " ".join([*padded, cells[len(headers) - 1]])

    click.echo(render(headers))
    click.echo("-" * (sum(widths) + len(widths) - 1))
    for row in rows:
        click.echo(render(row))


def output_json(data: Any) -> None:
    """Print data as indented JSON, keeping non-ASCII text readable."""
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def error_exit(message: str, code: int = 1) -> NoReturn:
    """Report an error on stderr and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)
