"""Query analysis: annotations, limits, placeholders and classification."""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

from ..catalog.schema import ColumnInTable, ColumnType
from ..utils.logging import get_contextual_logger
from .annotations import (
    Timeout,
    Timestamp,
    Ttl,
    parse_timeout,
    parse_timestamp,
    parse_ttl,
)
from .metadata import (
    ColumnInQuery,
    ParameterizedColumnType,
    ParameterizedValue,
    QueryMetadata,
    QueryType,
)
from .placeholders import Placeholder, find_placeholders, read_value, token_word, tokenize

if TYPE_CHECKING:
    from ..catalog.catalog import Catalog

_ANNOTATION_KINDS = ("TTL", "TIMESTAMP", "TIMEOUT")
# Clauses that may follow the where clause
_WHERE_END = {"IF", "LIMIT", "PER", "ORDER", "GROUP", "ALLOW"}
_SELECT_COUNT = re.compile(r"^\s*select\s+count\s*\(", re.IGNORECASE)

# TTL and limit placeholders are always bound as int
_INT_TYPE = ColumnType("int")


class QueryAnalysisError(ValueError):
    """Raised when a query cannot be analyzed."""

    pass


@dataclass
class QueryAnnotations:
    """Annotations found in the USING clause of a query."""

    ttl: Optional[Ttl] = None
    timestamp: Optional[Timestamp] = None
    timeout: Optional[Timeout] = None


def _tokens(query: str) -> List[Token]:
    try:
        return tokenize(query)
    except TokenError as exc:
        raise QueryAnalysisError(f"Cannot tokenize query: {exc}") from exc


def extract_annotations(query: str) -> QueryAnnotations:
    """Extract TTL, timestamp and timeout from the USING clause.

    Only keywords outside string literals count, so a value like
    `'using ttl abc'` is left alone.

    Args:
        query: Query text

    Returns:
        Parsed annotations, None for the ones not present

    Raises:
        QueryAnalysisError: If an annotation is given twice or has no value
        InvalidLiteralError: If a TTL or timestamp literal is malformed
    """
    tokens = _tokens(query)
    literals: Dict[str, str] = {}
    index = 0
    while index < len(tokens):
        if token_word(tokens[index]) != "USING":
            index += 1
            continue
        index += 1
        while index < len(tokens) and token_word(tokens[index]) in _ANNOTATION_KINDS:
            kind = token_word(tokens[index])
            literal, index = read_value(query, tokens, index + 1)
            if literal is None:
                raise QueryAnalysisError(f"Missing {kind} value in query: {query}")
            if kind in literals:
                raise QueryAnalysisError(f"Duplicate {kind} in query: {query}")
            literals[kind] = literal
            # "and" only continues the clause when another annotation follows
            if (
                index + 1 < len(tokens)
                and token_word(tokens[index]) == "AND"
                and token_word(tokens[index + 1]) in _ANNOTATION_KINDS
            ):
                index += 1
            else:
                break

    annotations = QueryAnnotations()
    if "TTL" in literals:
        annotations.ttl = parse_ttl(literals["TTL"])
    if "TIMESTAMP" in literals:
        annotations.timestamp = parse_timestamp(literals["TIMESTAMP"])
    if "TIMEOUT" in literals:
        annotations.timeout = parse_timeout(literals["TIMEOUT"])
    return annotations


def find_limit(query: str) -> Optional[str]:
    """Return the row limit literal (`?` or a number), or None.

    `per partition limit` does not limit the number of rows returned, and
    `limit` inside a string literal is not a clause.
    """
    tokens = _tokens(query)
    for index, token in enumerate(tokens):
        if token_word(token) != "LIMIT":
            continue
        before = [token_word(t) for t in tokens[max(0, index - 2) : index]]
        if before == ["PER", "PARTITION"]:
            continue
        literal, _ = read_value(query, tokens, index + 1)
        if literal is not None:
            return literal
    return None


def equality_columns(query: str) -> Set[str]:
    """Lower-cased names of columns compared with `=` in the where clause.

    Range and other operators (`>`, `<=`, `!=`, `contains`) are not
    included.
    """
    tokens = _tokens(query)
    columns: Set[str] = set()
    in_where = False
    for index, token in enumerate(tokens):
        word = token_word(token)
        if word == "WHERE":
            in_where = True
            continue
        if not in_where:
            continue
        if word in _WHERE_END:
            break
        if token.token_type == TokenType.EQ and index > 0:
            columns.add(tokens[index - 1].text.lower())
    return columns


def statement_verb(query: str) -> str:
    """Lower-cased first keyword of a query."""
    words = query.split()
    if not words:
        raise QueryAnalysisError("Empty query")
    return words[0].lower()


def _primary_key_names(table_columns: List[ColumnInTable]) -> Set[str]:
    return {c.column_name.lower() for c in table_columns if c.is_primary_key}


def covers_primary_key(
    query: str,
    extracted_columns: List[ColumnInQuery],
    table_columns: List[ColumnInTable],
) -> bool:
    """Check whether the where clause pins every primary key column to one value.

    Args:
        query: Query text
        extracted_columns: Columns used by the query
        table_columns: Columns of the target table

    Returns:
        True if all partition key and clustering columns are compared with
        `=` in the where clause, without an IN value
    """
    primary_key = _primary_key_names(table_columns)
    if not primary_key:
        raise QueryAnalysisError("Table has no primary key columns")
    equalities = equality_columns(query)
    pinned = set()
    for column in extracted_columns:
        name = column.column_name.lower()
        if column.is_part_of_where_clause and not column.uses_in_value and name in equalities:
            pinned.add(name)
    return primary_key.issubset(pinned)


def classify_query(
    query: str,
    extracted_columns: List[ColumnInQuery],
    table_columns: List[ColumnInTable],
) -> QueryType:
    """Classify a query from its verb, selection, key coverage and limit.

    Args:
        query: Query text
        extracted_columns: Columns used by the query
        table_columns: Columns of the target table

    Returns:
        Query type

    Raises:
        QueryAnalysisError: For unsupported statements and updates that do
            not cover the full primary key
    """
    verb = statement_verb(query)

    if verb == "truncate":
        return QueryType.TRUNCATE
    if verb == "insert":
        return QueryType.INSERT_UNIQUE
    if verb == "update":
        if not covers_primary_key(query, extracted_columns, table_columns):
            raise QueryAnalysisError(
                f"Update must filter on the full primary key: {query}"
            )
        return QueryType.UPDATE_UNIQUE
    if verb == "delete":
        if covers_primary_key(query, extracted_columns, table_columns):
            return QueryType.DELETE_UNIQUE
        return QueryType.DELETE_MULTIPLE
    if verb == "select":
        if _SELECT_COUNT.match(query):
            return QueryType.SELECT_COUNT
        if covers_primary_key(query, extracted_columns, table_columns):
            return QueryType.SELECT_UNIQUE
        if find_limit(query) == "1":
            return QueryType.SELECT_UNIQUE_BY_LIMIT
        return QueryType.SELECT_MULTIPLE

    raise QueryAnalysisError(f"Unsupported statement '{verb}': {query}")


class QueryAnalyzer:
    """Builds QueryMetadata for queries against tables of a catalog."""

    def __init__(self, catalog: "Catalog"):
        """Initialize analyzer.

        Args:
            catalog: Catalog providing table columns
        """
        self.catalog = catalog

    def analyze(
        self,
        query: str,
        struct_name: str,
        table_name: str,
        extracted_columns: List[ColumnInQuery],
    ) -> QueryMetadata:
        """Analyze a query.

        Args:
            query: Query text, sent verbatim
            struct_name: Name of the generated binding type
            table_name: Table the query targets
            extracted_columns: Columns used by the query, in order of appearance

        Returns:
            Validated query metadata

        Raises:
            QueryAnalysisError: If the query cannot be analyzed
            QueryMetadataError: If the result violates metadata invariants
        """
        logger = get_contextual_logger(
            __name__,
            {"table": table_name.lower(), "struct_name": struct_name, "query": query},
        )
        table_columns = self.catalog.columns(table_name)
        if not table_columns:
            raise QueryAnalysisError(f"Table '{table_name}' not found in catalog")

        annotations = extract_annotations(query)
        query_type = classify_query(query, extracted_columns, table_columns)
        parameterized = self.parameterized_columns_types(
            query, extracted_columns, table_columns
        )

        metadata = QueryMetadata(
            query=query,
            extracted_columns=list(extracted_columns),
            parameterized_columns_types=parameterized,
            query_type=query_type,
            struct_name=struct_name,
            table_name=table_name,
            limited=find_limit(query) is not None,
            ttl=annotations.ttl,
            timestamp=annotations.timestamp,
            timeout=annotations.timeout,
        )
        logger.debug(
            f"Analyzed as {query_type.name}, "
            f"{len(parameterized)} parameterized values"
        )
        return metadata.validate()

    def parameterized_columns_types(
        self,
        query: str,
        extracted_columns: List[ColumnInQuery],
        table_columns: List[ColumnInTable],
    ) -> List[ParameterizedColumnType]:
        """Pair each placeholder with its type and source, in placeholder order.

        Placeholders after TTL and LIMIT bind the TTL and the row limit;
        placeholders after TIMESTAMP and TIMEOUT are bound separately and
        are skipped. Every other placeholder binds the next parameterized
        extracted column.
        """
        try:
            placeholders = find_placeholders(query)
        except TokenError as exc:
            raise QueryAnalysisError(f"Cannot tokenize query: {exc}") from exc

        pending = [c for c in extracted_columns if c.parameterized]
        result: List[ParameterizedColumnType] = []
        for placeholder in placeholders:
            entry = self._resolve_placeholder(placeholder, pending, table_columns, query)
            if entry is not None:
                result.append(entry)

        if pending:
            names = ", ".join(c.column_name for c in pending)
            raise QueryAnalysisError(f"Parameterized columns without placeholder: {names}")
        return result

    def _resolve_placeholder(
        self,
        placeholder: Placeholder,
        pending: List[ColumnInQuery],
        table_columns: List[ColumnInTable],
        query: str,
    ) -> Optional[ParameterizedColumnType]:
        keyword = placeholder.keyword
        if keyword == "TTL":
            return ParameterizedColumnType(_INT_TYPE, ParameterizedValue.using_ttl())
        if keyword in ("TIMESTAMP", "TIMEOUT"):
            return None
        if keyword == "LIMIT":
            if placeholder.preceding[:1] == ("PARTITION",):
                raise QueryAnalysisError(
                    f"Parameterized per partition limit is not supported: {query}"
                )
            return ParameterizedColumnType(_INT_TYPE, ParameterizedValue.limit())

        if not pending:
            raise QueryAnalysisError(
                f"Placeholder at offset {placeholder.position} has no parameterized column"
            )
        column = pending.pop(0)
        column_type = self._column_type(column, table_columns)
        return ParameterizedColumnType(
            column_type, ParameterizedValue.extracted_column(column)
        )

    def _column_type(
        self, column: ColumnInQuery, table_columns: List[ColumnInTable]
    ) -> ColumnType:
        for table_column in table_columns:
            if table_column.column_name.lower() == column.column_name.lower():
                if column.uses_in_value:
                    return ColumnType.list_of(table_column.column_type)
                return table_column.column_type
        raise QueryAnalysisError(f"Column '{column.column_name}' not found in table")
