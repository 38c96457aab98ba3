"""Schema metadata classes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class ColumnKind(Enum):
    """Role of a column in its table, as stored in system_schema.columns."""

    PARTITION_KEY = "partition_key"
    CLUSTERING = "clustering"
    STATIC = "static"
    REGULAR = "regular"

    @property
    def is_primary_key(self) -> bool:
        return self in (ColumnKind.PARTITION_KEY, ColumnKind.CLUSTERING)


# CQL native types and the Python types a binding generator emits for them
_NATIVE_TYPES: Dict[str, str] = {
    "ascii": "str",
    "text": "str",
    "varchar": "str",
    "tinyint": "int",
    "smallint": "int",
    "int": "int",
    "bigint": "int",
    "varint": "int",
    "counter": "int",
    "float": "float",
    "double": "float",
    "decimal": "Decimal",
    "boolean": "bool",
    "blob": "bytes",
    "date": "date",
    "time": "time",
    "timestamp": "datetime",
    "duration": "Duration",
    "uuid": "UUID",
    "timeuuid": "UUID",
    "inet": "str",
}

_COLLECTION_TYPES: Dict[str, str] = {
    "list": "List",
    "set": "Set",
    "map": "Dict",
    "tuple": "Tuple",
}


@dataclass(frozen=True)
class ColumnType:
    """CQL type of a column, kept as the catalog writes it."""

    name: str

    @property
    def base_name(self) -> str:
        """Type name without its generic arguments (`map` for `map<text, int>`)."""
        bracket = self.name.find("<")
        if bracket == -1:
            return self.name.strip().lower()
        return self.name[:bracket].strip().lower()

    @property
    def arguments(self) -> List["ColumnType"]:
        """Generic arguments of a collection, tuple or frozen type."""
        bracket = self.name.find("<")
        if bracket == -1:
            return []
        inner = self.name[bracket + 1 : self.name.rindex(">")]
        return [ColumnType(part) for part in _split_arguments(inner)]

    @property
    def is_collection(self) -> bool:
        base = self.base_name
        if base == "frozen":
            return self.arguments[0].is_collection
        return base in ("list", "set", "map")

    def python_type(self) -> str:
        """Python annotation text for values of this type.

        User defined types are returned under their own name.
        """
        base = self.base_name
        if base == "frozen":
            return self.arguments[0].python_type()
        if base in _COLLECTION_TYPES:
            args = ", ".join(arg.python_type() for arg in self.arguments)
            return f"{_COLLECTION_TYPES[base]}[{args}]"
        return _NATIVE_TYPES.get(base, self.name.strip())

    @classmethod
    def list_of(cls, element: "ColumnType") -> "ColumnType":
        return cls(f"list<{element.name}>")

    def __str__(self) -> str:
        return self.name


def _split_arguments(text: str) -> List[str]:
    """Split generic arguments on top level commas."""
    parts: List[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    if current.strip():
        parts.append(current.strip())
    return parts


@dataclass(frozen=True)
class ColumnInTable:
    """A column definition read from the schema catalog."""

    column_name: str
    kind: ColumnKind
    position: int
    data_type: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ColumnInTable":
        """Build a column from a `system_schema.columns` row.

        Args:
            row: Mapping with column_name, kind, position and data_type

        Returns:
            Column definition
        """
        return cls(
            column_name=row["column_name"],
            kind=ColumnKind(row["kind"]),
            position=int(row["position"]),
            data_type=row["data_type"],
        )

    @property
    def column_type(self) -> ColumnType:
        return ColumnType(self.data_type)

    @property
    def is_primary_key(self) -> bool:
        return self.kind.is_primary_key

    def __repr__(self) -> str:
        return f"ColumnInTable({self.column_name}, {self.kind.value}, {self.data_type})"
