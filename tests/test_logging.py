"""Tests for logging setup and context fields."""

import json
import logging

import pytest

from typed_cql.catalog import Catalog, build_columns_query, query_columns
from typed_cql.query import ColumnInQuery, QueryAnalyzer
from typed_cql.utils.logging import (
    StandardFormatter,
    StructuredFormatter,
    get_contextual_logger,
    setup_logging,
)

from tests.conftest import USERS_COLUMNS, RecordingDataSource, column_rows


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(logging.WARNING)


def _records(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_structured_file_logging_of_column_queries(tmp_path, active_keyspace):
    log_file = tmp_path / "tcql.log"
    setup_logging(level="DEBUG", structured=True, log_file=str(log_file))

    query_columns("Users", RecordingDataSource(column_rows(USERS_COLUMNS)))

    records = [r for r in _records(log_file) if r["logger"] == "typed_cql.catalog.catalog"]
    assert [r["message"] for r in records] == ["Querying columns", "Found 3 columns"]
    first, second = records
    assert first["level"] == "DEBUG"
    assert first["keyspace"] == "shop"
    assert first["table"] == "users"
    assert first["query"] == build_columns_query("shop", "users")
    assert second["table"] == "users"
    assert "query" not in second
    assert "timestamp" in first


def test_structured_logging_of_query_analysis(tmp_path, snapshot, active_keyspace):
    log_file = tmp_path / "tcql.log"
    setup_logging(level="DEBUG", structured=True, log_file=str(log_file))
    query = "select name from users where id = ?"
    columns = [
        ColumnInQuery("name"),
        ColumnInQuery("id", parameterized=True, is_part_of_where_clause=True),
    ]

    QueryAnalyzer(Catalog(snapshot)).analyze(query, "UserName", "Users", columns)

    records = [r for r in _records(log_file) if r["logger"] == "typed_cql.query.analyzer"]
    assert len(records) == 1
    assert records[0]["message"] == "Analyzed as SELECT_UNIQUE, 1 parameterized values"
    assert records[0]["table"] == "users"
    assert records[0]["struct_name"] == "UserName"
    assert records[0]["query"] == query


def test_level_filters_file_output(tmp_path, active_keyspace):
    log_file = tmp_path / "tcql.log"
    setup_logging(level="INFO", structured=True, log_file=str(log_file))

    query_columns("users", RecordingDataSource())

    assert log_file.read_text() == ""


def _record(**context):
    record = logging.LogRecord("typed_cql.test", logging.INFO, __file__, 1, "hello", None, None)
    for name, value in context.items():
        setattr(record, name, value)
    return record


def test_structured_formatter_without_context():
    data = json.loads(StructuredFormatter().format(_record()))

    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert "table" not in data


def test_standard_formatter_appends_context():
    line = StandardFormatter().format(_record(keyspace="shop", table="orders", query="select 1"))

    assert line.endswith("hello [keyspace=shop table=orders]")
    assert "select 1" not in line
    assert StandardFormatter().format(_record()).endswith("hello")


def test_contextual_logger_merges_call_extra(caplog):
    logger = get_contextual_logger("typed_cql.test", {"table": "users"})

    with caplog.at_level(logging.INFO, logger="typed_cql.test"):
        logger.info("loaded", extra={"query": "select 1"})

    record = caplog.records[-1]
    assert record.table == "users"
    assert record.query == "select 1"


def test_contextual_logger_rejects_unknown_fields():
    with pytest.raises(ValueError):
        get_contextual_logger("typed_cql.test", {"tabel": "users"})
