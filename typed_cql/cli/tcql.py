"""Command line tool for inspecting queries and table columns."""

from __future__ import annotations

import json
from typing import Callable, List, Optional

import click
from sqlglot import errors as sqlglot_errors

from ..catalog import ColumnInTable, query_columns
from ..config import (
    Config,
    ConfigurationMissingError,
    load_config,
    set_active_config,
)
from ..datasources import CatalogUnavailableError, DataSource, DuckDBDataSource
from ..query import extract_annotations, find_limit
from ..query.placeholders import count_placeholders
from ..utils.logging import get_contextual_logger, setup_logging

COLUMN_HEADERS = ["column_name", "kind", "position", "data_type"]


class TablePrinter:
    """Formats rows as a bordered text table."""

    def __init__(self, emit: Callable[[str], None]):
        self.emit = emit

    def display(self, headers: List[str], rows: List[List[object]], label: str) -> None:
        lines = self._format_table(headers, rows)
        for line in lines:
            self.emit(line)
        self.emit(f"{len(rows)} {label}")

    def _format_table(self, headers: List[str], rows: List[List[object]]) -> List[str]:
        string_rows = [self._stringify_row(row) for row in rows]
        widths = self._compute_widths(headers, string_rows)
        border = self._build_border(widths)
        lines: List[str] = []
        lines.append(border)
        lines.append(self._format_row(headers, widths))
        lines.append(border)
        for row in string_rows:
            lines.append(self._format_row(row, widths))
        lines.append(border)
        return lines

    def _compute_widths(self, headers: List[str], rows: List[List[str]]) -> List[int]:
        widths = [len(header) for header in headers]
        for row in rows:
            for index, text in enumerate(row):
                if len(text) > widths[index]:
                    widths[index] = len(text)
        return widths

    def _build_border(self, widths: List[int]) -> str:
        parts = ["+"]
        for width in widths:
            parts.append("-" * (width + 2))
            parts.append("+")
        return "".join(parts)

    def _format_row(self, values: List[str], widths: List[int]) -> str:
        parts = ["|"]
        for value, width in zip(values, widths):
            parts.append(f" {value.ljust(width)} ")
            parts.append("|")
        return "".join(parts)

    def _stringify_row(self, row: List[object]) -> List[str]:
        return ["NULL" if value is None else str(value) for value in row]


def _column_row(column: ColumnInTable) -> List[object]:
    return [column.column_name, column.kind.value, column.position, column.data_type]


def _create_datasource(config: Config) -> DataSource:
    if config.datasource is None:
        raise ConfigurationMissingError("No datasource configured")
    if config.datasource.type == "duckdb":
        return DuckDBDataSource("catalog", config.datasource.config)
    raise ValueError(f"Unsupported data source type: {config.datasource.type}")


def _fail(ctx: click.Context, exc: Exception) -> None:
    click.echo(f"error: {exc}", err=True)
    ctx.exit(1)


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]) -> None:
    """Inspect CQL queries and the columns of their tables."""
    if config_path:
        config = load_config(config_path)
    else:
        config = Config()
    set_active_config(config)
    setup_logging(config.logging.level, config.logging.structured, config.logging.file)
    ctx.obj = config


@cli.command()
@click.argument("table")
@click.option("--json", "as_json", is_flag=True, help="Print columns as JSON.")
@click.pass_context
def columns(ctx: click.Context, table: str, as_json: bool) -> None:
    """Print the columns of TABLE in key order."""
    logger = get_contextual_logger(__name__, {"table": table})
    try:
        with _create_datasource(ctx.obj) as datasource:
            result = query_columns(table, datasource)
    except (ConfigurationMissingError, CatalogUnavailableError, ValueError) as exc:
        _fail(ctx, exc)
        return
    logger.info(f"Found {len(result)} columns")

    if as_json:
        rows = [dict(zip(COLUMN_HEADERS, _column_row(column))) for column in result]
        click.echo(json.dumps(rows, indent=2))
        return
    TablePrinter(click.echo).display(
        COLUMN_HEADERS, [_column_row(column) for column in result], "columns"
    )


@cli.command()
@click.argument("query")
@click.pass_context
def inspect(ctx: click.Context, query: str) -> None:
    """Print the annotations, limit and placeholder count of QUERY."""
    try:
        annotations = extract_annotations(query)
        limit = find_limit(query)
        placeholders = count_placeholders(query)
    except (ValueError, sqlglot_errors.TokenError) as exc:
        _fail(ctx, exc)
        return

    rows = [
        ["ttl", annotations.ttl],
        ["timestamp", annotations.timestamp],
        ["timeout", annotations.timeout],
        ["limit", limit],
        ["placeholders", placeholders],
    ]
    TablePrinter(click.echo).display(["property", "value"], rows, "properties")
