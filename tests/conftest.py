"""Shared fixtures: schema snapshots and the active keyspace."""

from typing import Any, Dict, Iterator, List, Optional, Sequence

import pyarrow as pa
import pytest

from typed_cql.catalog import ColumnInTable, ColumnKind
from typed_cql.config import KEYSPACE_ENV_VAR, Config, set_active_config
from typed_cql.datasources import DataSource
from typed_cql.datasources.duckdb import DuckDBDataSource

KEYSPACE = "shop"

USERS_COLUMNS = [
    ColumnInTable("name", ColumnKind.REGULAR, -1, "text"),
    ColumnInTable("id", ColumnKind.PARTITION_KEY, 0, "uuid"),
    ColumnInTable("email", ColumnKind.REGULAR, -1, "text"),
]

ORDERS_COLUMNS = [
    ColumnInTable("amount", ColumnKind.REGULAR, -1, "decimal"),
    ColumnInTable("order_id", ColumnKind.CLUSTERING, 1, "timeuuid"),
    ColumnInTable("region", ColumnKind.PARTITION_KEY, 1, "text"),
    ColumnInTable("customer_name", ColumnKind.STATIC, -1, "text"),
    ColumnInTable("created_at", ColumnKind.CLUSTERING, 0, "timestamp"),
    ColumnInTable("customer_id", ColumnKind.PARTITION_KEY, 0, "uuid"),
    ColumnInTable("items", ColumnKind.REGULAR, -1, "map<text, int>"),
]


class RecordingDataSource(DataSource):
    """In-memory data source that records queries and returns fixed rows."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        super().__init__("recording", {})
        self.rows = rows or []
        self.queries: List[str] = []
        self.params: List[Optional[Sequence[Any]]] = []

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def execute_query(
        self, query: str, params: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        self.queries.append(query)
        self.params.append(params)
        if self.rows:
            yield pa.RecordBatch.from_pylist(self.rows)


def column_rows(columns: List[ColumnInTable]) -> List[Dict[str, Any]]:
    """Rows as the catalog query returns them."""
    rows = []
    for column in columns:
        rows.append(
            {
                "column_name": column.column_name,
                "kind": column.kind.value,
                "position": column.position,
                "data_type": column.data_type,
            }
        )
    return rows


@pytest.fixture(autouse=True)
def reset_configuration(monkeypatch):
    """Start every test without an active config or keyspace variable."""
    monkeypatch.delenv(KEYSPACE_ENV_VAR, raising=False)
    set_active_config(None)
    yield
    set_active_config(None)


@pytest.fixture
def active_keyspace():
    """Activate a config with the test keyspace."""
    set_active_config(Config(keyspace=KEYSPACE))
    return KEYSPACE


@pytest.fixture
def snapshot():
    """In-memory DuckDB snapshot holding the users and orders tables."""
    ds = DuckDBDataSource("snapshot", {"path": ":memory:", "read_only": False})
    ds.connect()
    ds.load_table(KEYSPACE, "users", USERS_COLUMNS)
    ds.load_table(KEYSPACE, "orders", ORDERS_COLUMNS)

    yield ds

    ds.disconnect()
