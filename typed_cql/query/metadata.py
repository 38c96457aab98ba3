"""Metadata of a single query."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlglot.errors import TokenError

from ..catalog.schema import ColumnType
from .annotations import Timeout, Timestamp, Ttl
from .placeholders import count_placeholders


class QueryMetadataError(ValueError):
    """Raised when query metadata violates its invariants."""

    pass


class QueryType(Enum):
    """The different types of a query."""

    # Select multiple rows
    SELECT_MULTIPLE = "select_multiple"
    # Select a single row because the query ends with limit 1
    SELECT_UNIQUE_BY_LIMIT = "select_unique_by_limit"
    # Select a single row by its full primary key
    SELECT_UNIQUE = "select_unique"
    SELECT_COUNT = "select_count"
    # Always on the full primary key
    UPDATE_UNIQUE = "update_unique"
    DELETE_MULTIPLE = "delete_multiple"
    DELETE_UNIQUE = "delete_unique"
    INSERT_UNIQUE = "insert_unique"
    TRUNCATE = "truncate"

    @property
    def is_select(self) -> bool:
        return self.value.startswith("select")

    @property
    def is_unique(self) -> bool:
        return self.value.endswith("unique") or self is QueryType.SELECT_UNIQUE_BY_LIMIT


@dataclass(frozen=True)
class ColumnInQuery:
    """A column used in a query.

    parameterized is True when the column is bound to `?` (`where a = ?`)
    and False when it has a fixed value (`where a = 1`). uses_in_value is
    only True for `where a in ?`. is_part_of_where_clause is False for
    columns in the select list or in an insert/update assignment.
    """

    column_name: str
    parameterized: bool = False
    uses_in_value: bool = False
    is_part_of_where_clause: bool = False

    def __post_init__(self):
        if self.uses_in_value and not (
            self.parameterized and self.is_part_of_where_clause
        ):
            raise QueryMetadataError(
                f"Column '{self.column_name}' uses an IN value but is not a "
                "parameterized where clause column"
            )


class ParameterSource(Enum):
    """Where the run-time value of a placeholder comes from."""

    EXTRACTED_COLUMN = "extracted_column"
    USING_TTL = "using_ttl"
    LIMIT = "limit"


@dataclass(frozen=True)
class ParameterizedValue:
    """Source of one placeholder value; column is set for extracted columns only."""

    source: ParameterSource
    column: Optional[ColumnInQuery] = None

    def __post_init__(self):
        has_column = self.column is not None
        if has_column != (self.source is ParameterSource.EXTRACTED_COLUMN):
            raise QueryMetadataError(
                f"Parameter source {self.source.name} does not match column {self.column!r}"
            )

    @classmethod
    def extracted_column(cls, column: ColumnInQuery) -> "ParameterizedValue":
        return cls(ParameterSource.EXTRACTED_COLUMN, column)

    @classmethod
    def using_ttl(cls) -> "ParameterizedValue":
        return cls(ParameterSource.USING_TTL)

    @classmethod
    def limit(cls) -> "ParameterizedValue":
        return cls(ParameterSource.LIMIT)


@dataclass(frozen=True)
class ParameterizedColumnType:
    """Type of a placeholder value paired with its source."""

    column_type: ColumnType
    value: ParameterizedValue


@dataclass
class QueryMetadata:
    """Meta data of a query.

    Attributes:
        query: The query that will be sent to the server
        extracted_columns: The columns used in this query, in order of appearance
        parameterized_columns_types: Placeholder types in placeholder order
        query_type: Classification of the query
        struct_name: Name of the generated binding type
        table_name: Table the query targets
        limited: Only True if the query has a limit clause
        ttl: TTL of the query if provided
        timestamp: Timestamp of the query if provided (milliseconds since UNIX epoch)
        timeout: Timeout of the query if provided (CQL duration, e.g. 5ms or 1h)
    """

    query: str
    extracted_columns: List[ColumnInQuery]
    parameterized_columns_types: List[ParameterizedColumnType]
    query_type: QueryType
    struct_name: str
    table_name: str
    limited: bool = False
    ttl: Optional[Ttl] = None
    timestamp: Optional[Timestamp] = None
    timeout: Optional[Timeout] = None

    def validate(self) -> "QueryMetadata":
        """Check the invariants and return self.

        Raises:
            QueryMetadataError: If an invariant does not hold
        """
        validate_query_metadata(self)
        return self


def validate_query_metadata(metadata: QueryMetadata) -> None:
    """Check the invariants of query metadata.

    Args:
        metadata: Metadata to check

    Raises:
        QueryMetadataError: If an invariant does not hold
    """
    if metadata.query_type is QueryType.TRUNCATE:
        if metadata.extracted_columns:
            raise QueryMetadataError("Truncate queries cannot use columns")
        if metadata.ttl is not None or metadata.timestamp is not None:
            raise QueryMetadataError("Truncate queries cannot have a TTL or timestamp")

    sources = [t.value.source for t in metadata.parameterized_columns_types]

    ttl_sources = sources.count(ParameterSource.USING_TTL)
    ttl_parameterized = metadata.ttl is not None and metadata.ttl.is_parameterized
    if ttl_sources > 1:
        raise QueryMetadataError("A query binds at most one TTL")
    if bool(ttl_sources) != ttl_parameterized:
        raise QueryMetadataError(
            "A TTL parameter is bound if and only if the TTL is parameterized"
        )

    limit_sources = sources.count(ParameterSource.LIMIT)
    if limit_sources > 1:
        raise QueryMetadataError("A query binds at most one limit")
    if limit_sources and not metadata.limited:
        raise QueryMetadataError("A limit parameter requires a limited query")

    # Parameterized timestamp and timeout are bound positionally as well
    expected = len(sources)
    for annotation in (metadata.timestamp, metadata.timeout):
        if annotation is not None and annotation.is_parameterized:
            expected += 1

    try:
        actual = count_placeholders(metadata.query)
    except TokenError as exc:
        raise QueryMetadataError(f"Cannot tokenize query: {exc}") from exc
    if actual != expected:
        raise QueryMetadataError(
            f"Query has {actual} placeholders but {expected} parameter sources"
        )
