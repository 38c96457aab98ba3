"""Data source connectors."""

from .base import CatalogUnavailableError, DataSource
from .duckdb import DuckDBDataSource

__all__ = [
    "CatalogUnavailableError",
    "DataSource",
    "DuckDBDataSource",
]
