"""Deterministic ordering of catalog columns."""

from typing import List, Tuple

from .schema import ColumnInTable, ColumnKind

_KIND_ORDER = {
    ColumnKind.PARTITION_KEY: 0,
    ColumnKind.CLUSTERING: 1,
    ColumnKind.STATIC: 2,
    ColumnKind.REGULAR: 3,
}


def _sort_key(column: ColumnInTable) -> Tuple[int, int, str]:
    return (_KIND_ORDER[column.kind], column.position, column.column_name)


def sort_columns(columns: List[ColumnInTable]) -> None:
    """Sort columns in place: partition key, clustering, static, regular.

    Key columns keep their key order. Non-key columns all carry position -1
    in the catalog and fall back to name order, so generated code sees the
    same field order on every run.
    """
    columns.sort(key=_sort_key)
