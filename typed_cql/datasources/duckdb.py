"""DuckDB data source holding a snapshot of the schema catalog."""

from typing import Any, Dict, Iterator, List, Optional, Sequence
import pyarrow as pa
import duckdb
import logging

from ..catalog.schema import ColumnInTable
from .base import CatalogUnavailableError, DataSource

logger = logging.getLogger(__name__)


class DuckDBDataSource(DataSource):
    """DuckDB data source mirroring `system_schema.columns`.

    A snapshot exported from a cluster can be queried with the exact
    introspection statements sent to the cluster itself.
    """

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize DuckDB data source.

        Config should include:
            - path: Path to DuckDB database file (or :memory: for in-memory)
            - read_only: Whether to open in read-only mode (default: True)
        """
        super().__init__(name, config)
        self.connection = None
        self.db_path = config.get("path", ":memory:")
        self.read_only = config.get("read_only", True)

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        try:
            self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        except duckdb.Error as exc:
            raise CatalogUnavailableError(
                f"Cannot open schema snapshot '{self.db_path}': {exc}"
            ) from exc
        self._connected = True
        logger.info(f"Successfully connected to DuckDB: {self.name}")

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def execute_query(
        self, query: str, params: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        """Execute query and yield Arrow record batches."""
        logger.debug(f"Executing query on {self.name}: {query[:100]}...")
        try:
            if params:
                result = self.connection.execute(query, list(params))
            else:
                result = self.connection.execute(query)
            arrow_table = result.fetch_arrow_table()
        except duckdb.Error as exc:
            raise CatalogUnavailableError(
                f"Catalog query failed on {self.name}: {exc}"
            ) from exc

        batch_size = 10000
        for batch in arrow_table.to_batches(max_chunksize=batch_size):
            yield batch

    def create_catalog_tables(self) -> None:
        """Create the `system_schema.columns` mirror if it does not exist."""
        self.connection.execute("CREATE SCHEMA IF NOT EXISTS system_schema")
        self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS system_schema.columns (
                keyspace_name VARCHAR NOT NULL,
                table_name VARCHAR NOT NULL,
                column_name VARCHAR NOT NULL,
                clustering_order VARCHAR DEFAULT 'none',
                kind VARCHAR NOT NULL,
                position INTEGER NOT NULL,
                type VARCHAR NOT NULL
            )
            """
        )

    def load_table(
        self, keyspace: str, table: str, columns: List[ColumnInTable]
    ) -> None:
        """Store the column definitions of one table in the snapshot.

        Existing rows for the table are replaced.

        Args:
            keyspace: Keyspace name
            table: Table name, stored lower-cased like the catalog does
            columns: Column definitions
        """
        self.create_catalog_tables()
        table_name = table.lower()
        self.connection.execute(
            "DELETE FROM system_schema.columns WHERE keyspace_name = ? AND table_name = ?",
            [keyspace, table_name],
        )
        for column in columns:
            self.connection.execute(
                """
                INSERT INTO system_schema.columns
                    (keyspace_name, table_name, column_name, kind, position, type)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    keyspace,
                    table_name,
                    column.column_name,
                    column.kind.value,
                    column.position,
                    column.data_type,
                ],
            )
        logger.info(f"Loaded {len(columns)} columns for {keyspace}.{table_name}")
