"""Catalog system for reading table metadata."""

from .catalog import Catalog, build_columns_query, query_columns
from .schema import ColumnInTable, ColumnKind, ColumnType
from .sort import sort_columns

__all__ = [
    "Catalog",
    "ColumnInTable",
    "ColumnKind",
    "ColumnType",
    "build_columns_query",
    "query_columns",
    "sort_columns",
]
