"""Column retrieval from the schema catalog."""

from typing import List, Optional

from .. import config
from ..datasources.base import DataSource
from ..utils.logging import get_contextual_logger
from .schema import ColumnInTable
from .sort import sort_columns


def build_columns_query(keyspace: str, table: str) -> str:
    """Build the introspection query listing the columns of a table.

    Keyspace and table are interpolated into the text rather than bound;
    both come from static schema configuration. The table name is
    lower-cased because the catalog stores names lower-cased.

    Args:
        keyspace: Keyspace name
        table: Table name in any case

    Returns:
        Query text
    """
    return (
        "select column_name, kind, position, type as data_type "
        "from system_schema.columns "
        f"where keyspace_name = '{keyspace}' and table_name = '{table.lower()}'"
    )


def query_columns(table: str, datasource: DataSource) -> List[ColumnInTable]:
    """Query the columns of a table in the active keyspace.

    Args:
        table: Table name
        datasource: Data source executing the catalog query

    Returns:
        Columns in key order (see sort_columns)

    Raises:
        ConfigurationMissingError: If no keyspace is configured
        CatalogUnavailableError: If the catalog query fails
    """
    keyspace = config.keyspace()
    query = build_columns_query(keyspace, table)
    logger = get_contextual_logger(__name__, {"keyspace": keyspace, "table": table.lower()})
    logger.debug("Querying columns", extra={"query": query})

    rows = datasource.fetch_rows(query, [])
    columns = [ColumnInTable.from_row(row) for row in rows]

    sort_columns(columns)
    logger.debug(f"Found {len(columns)} columns")

    return columns


class Catalog:
    """Column lookups against one data source."""

    def __init__(self, datasource: DataSource):
        """Initialize catalog.

        Args:
            datasource: Data source executing catalog queries
        """
        self.datasource = datasource

    def columns(self, table: str) -> List[ColumnInTable]:
        """Get the ordered columns of a table."""
        return query_columns(table, self.datasource)

    def primary_key(self, table: str) -> List[ColumnInTable]:
        """Get the partition key and clustering columns of a table, in key order."""
        return [column for column in self.columns(table) if column.is_primary_key]

    def get_column(self, table: str, name: str) -> Optional[ColumnInTable]:
        """Get column by name (case-insensitive)."""
        for column in self.columns(table):
            if column.column_name.lower() == name.lower():
                return column
        return None

    def __repr__(self) -> str:
        return f"Catalog(datasource={self.datasource.name})"
