"""Query metadata: annotations, column usage and analysis."""

from .annotations import (
    InvalidLiteralError,
    Timeout,
    Timestamp,
    Ttl,
    parse_timeout,
    parse_timestamp,
    parse_ttl,
)
from .metadata import (
    ColumnInQuery,
    ParameterSource,
    ParameterizedColumnType,
    ParameterizedValue,
    QueryMetadata,
    QueryMetadataError,
    QueryType,
    validate_query_metadata,
)
from .analyzer import (
    QueryAnalysisError,
    QueryAnalyzer,
    QueryAnnotations,
    classify_query,
    equality_columns,
    extract_annotations,
    find_limit,
)

__all__ = [
    "ColumnInQuery",
    "InvalidLiteralError",
    "ParameterSource",
    "ParameterizedColumnType",
    "ParameterizedValue",
    "QueryAnalysisError",
    "QueryAnalyzer",
    "QueryAnnotations",
    "QueryMetadata",
    "QueryMetadataError",
    "QueryType",
    "Timeout",
    "Timestamp",
    "Ttl",
    "classify_query",
    "equality_columns",
    "extract_annotations",
    "find_limit",
    "parse_timeout",
    "parse_timestamp",
    "parse_ttl",
    "validate_query_metadata",
]
