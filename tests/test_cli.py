"""Tests for the tcql CLI."""

import json
import logging

import pytest
from click.testing import CliRunner

from typed_cql.cli.tcql import TablePrinter, cli
from typed_cql.datasources.duckdb import DuckDBDataSource

from tests.conftest import KEYSPACE, ORDERS_COLUMNS


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo it after each test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


@pytest.fixture
def config_path(tmp_path):
    """Config file pointing at a DuckDB snapshot holding the orders table."""
    db_path = tmp_path / "schema.duckdb"
    writer = DuckDBDataSource("writer", {"path": str(db_path), "read_only": False})
    with writer:
        writer.load_table(KEYSPACE, "orders", ORDERS_COLUMNS)

    path = tmp_path / "config.yaml"
    path.write_text(
        f"keyspace: {KEYSPACE}\n"
        "datasource:\n"
        "  type: duckdb\n"
        f"  path: {db_path}\n"
        "logging:\n"
        "  level: WARNING\n"
    )
    return str(path)


def test_columns_table_output(config_path):
    runner = CliRunner()

    result = runner.invoke(cli, ["-c", config_path, "columns", "Orders"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("+-")
    assert "column_name" in lines[1]
    assert "customer_id" in lines[3]
    assert "partition_key" in lines[3]
    assert lines[-1] == "7 columns"


def test_columns_json_output(config_path):
    runner = CliRunner()

    result = runner.invoke(cli, ["-c", config_path, "columns", "orders", "--json"])

    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [row["column_name"] for row in rows[:4]] == [
        "customer_id",
        "region",
        "created_at",
        "order_id",
    ]
    assert rows[0] == {
        "column_name": "customer_id",
        "kind": "partition_key",
        "position": 0,
        "data_type": "uuid",
    }


def test_columns_without_config_fails():
    runner = CliRunner()

    result = runner.invoke(cli, ["columns", "orders"])

    assert result.exit_code == 1
    assert "error:" in result.output


def test_columns_with_missing_snapshot(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "keyspace: shop\n"
        "datasource:\n"
        "  type: duckdb\n"
        f"  path: {tmp_path / 'missing.duckdb'}\n"
        "logging:\n"
        "  level: WARNING\n"
    )
    runner = CliRunner()

    result = runner.invoke(cli, ["-c", str(path), "columns", "orders"])

    assert result.exit_code == 1
    assert "error:" in result.output


def test_inspect_query():
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["inspect", "update t using ttl ? and timeout 5ms set a = ? where b = ?"],
    )

    assert result.exit_code == 0, result.output
    assert "| ttl          | ?     |" in result.output
    assert "| timeout      | 5ms   |" in result.output
    assert "| timestamp    | NULL  |" in result.output
    assert "| placeholders | 3     |" in result.output


def test_inspect_invalid_ttl():
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", "insert into t (a) values (?) using ttl abc"])

    assert result.exit_code == 1
    assert "Invalid TTL literal: 'abc'" in result.output


def test_table_printer():
    lines = []
    printer = TablePrinter(lines.append)

    printer.display(["a", "bb"], [[1, None], ["long", "x"]], "rows")

    assert lines == [
        "+------+------+",
        "| a    | bb   |",
        "+------+------+",
        "| 1    | NULL |",
        "| long | x    |",
        "+------+------+",
        "2 rows",
    ]
