"""Tests for data source connectors."""

import pytest

from typed_cql.catalog import ColumnInTable, ColumnKind
from typed_cql.datasources import CatalogUnavailableError
from typed_cql.datasources.duckdb import DuckDBDataSource

from tests.conftest import KEYSPACE, USERS_COLUMNS


def test_duckdb_connection(snapshot):
    """Test DuckDB connection."""
    assert snapshot.is_connected()
    assert snapshot.connection is not None


def test_duckdb_disconnect():
    ds = DuckDBDataSource("mem", {"path": ":memory:", "read_only": False})
    ds.connect()

    ds.disconnect()

    assert not ds.is_connected()
    assert ds.connection is None


def test_context_manager_connects_and_disconnects():
    ds = DuckDBDataSource("mem", {"path": ":memory:", "read_only": False})

    with ds as connected:
        assert connected is ds
        assert ds.is_connected()

    assert not ds.is_connected()


def test_fetch_rows_returns_dicts(snapshot):
    rows = snapshot.fetch_rows(
        "select column_name, kind, position, type as data_type from system_schema.columns "
        "where keyspace_name = ? and table_name = ? order by column_name",
        [KEYSPACE, "users"],
    )

    assert rows == [
        {"column_name": "email", "kind": "regular", "position": -1, "data_type": "text"},
        {"column_name": "id", "kind": "partition_key", "position": 0, "data_type": "uuid"},
        {"column_name": "name", "kind": "regular", "position": -1, "data_type": "text"},
    ]


def test_execute_query_yields_batches(snapshot):
    batches = list(snapshot.execute_query("select count(*) as n from system_schema.columns"))

    assert len(batches) == 1
    assert batches[0].to_pydict() == {"n": [10]}


def test_load_table_replaces_rows(snapshot):
    snapshot.load_table(
        KEYSPACE, "Users", [ColumnInTable("id", ColumnKind.PARTITION_KEY, 0, "bigint")]
    )

    rows = snapshot.fetch_rows(
        "select column_name, type from system_schema.columns where table_name = 'users'"
    )

    assert rows == [{"column_name": "id", "type": "bigint"}]


def test_load_table_lowercases_table_name():
    ds = DuckDBDataSource("mem", {"path": ":memory:", "read_only": False})
    with ds:
        ds.load_table(KEYSPACE, "MixedCase", USERS_COLUMNS)
        rows = ds.fetch_rows("select distinct table_name from system_schema.columns")

    assert rows == [{"table_name": "mixedcase"}]


def test_failed_query_raises_catalog_unavailable():
    ds = DuckDBDataSource("mem", {"path": ":memory:", "read_only": False})
    with ds:
        with pytest.raises(CatalogUnavailableError) as exc_info:
            ds.fetch_rows("select * from system_schema.columns")

    assert exc_info.value.__cause__ is not None


def test_missing_snapshot_file(tmp_path):
    ds = DuckDBDataSource("missing", {"path": str(tmp_path / "none.duckdb"), "read_only": True})

    with pytest.raises(CatalogUnavailableError):
        ds.connect()


def test_fetch_rows_connects_on_demand(tmp_path):
    path = str(tmp_path / "schema.duckdb")
    writer = DuckDBDataSource("writer", {"path": path, "read_only": False})
    with writer:
        writer.load_table(KEYSPACE, "users", USERS_COLUMNS)

    reader = DuckDBDataSource("reader", {"path": path})
    rows = reader.fetch_rows("select count(*) as n from system_schema.columns")
    reader.disconnect()

    assert rows == [{"n": 3}]


def test_repr():
    ds = DuckDBDataSource("snap", {})
    assert repr(ds) == "DuckDBDataSource(name=snap)"
