#!/usr/bin/env python3
"""Initialize a DuckDB schema snapshot with sample tables for testing."""

from pathlib import Path

from typed_cql.catalog import ColumnInTable, ColumnKind
from typed_cql.datasources import DuckDBDataSource

SAMPLE_TABLES = {
    "users": [
        ColumnInTable("id", ColumnKind.PARTITION_KEY, 0, "uuid"),
        ColumnInTable("name", ColumnKind.REGULAR, -1, "text"),
        ColumnInTable("email", ColumnKind.REGULAR, -1, "text"),
        ColumnInTable("tags", ColumnKind.REGULAR, -1, "set<text>"),
    ],
    "orders": [
        ColumnInTable("customer_id", ColumnKind.PARTITION_KEY, 0, "uuid"),
        ColumnInTable("region", ColumnKind.PARTITION_KEY, 1, "text"),
        ColumnInTable("created_at", ColumnKind.CLUSTERING, 0, "timestamp"),
        ColumnInTable("order_id", ColumnKind.CLUSTERING, 1, "timeuuid"),
        ColumnInTable("customer_name", ColumnKind.STATIC, -1, "text"),
        ColumnInTable("amount", ColumnKind.REGULAR, -1, "decimal"),
        ColumnInTable("items", ColumnKind.REGULAR, -1, "map<text, int>"),
    ],
}


def init_duckdb(db_path: str = "data/schema.duckdb", keyspace: str = "shop"):
    """Initialize DuckDB schema snapshot with sample tables.

    Args:
        db_path: Path to DuckDB database file
        keyspace: Keyspace the sample tables belong to
    """
    db_file = Path(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)

    print(f"Initializing schema snapshot at {db_path}...")

    datasource = DuckDBDataSource("snapshot", {"path": str(db_file), "read_only": False})
    with datasource:
        for table, columns in SAMPLE_TABLES.items():
            datasource.load_table(keyspace, table, columns)
            print(f"  {keyspace}.{table}: {len(columns)} columns")

    print("Done.")


if __name__ == "__main__":
    init_duckdb()
