"""Tests for batched multi-row INSERT against pooled SQLite databases."""

import sqlite3
from unittest.mock import patch

import pytest

from conftest import log_events
from fortune_store.io.database import (
    ArityMismatchError,
    ChunkExecutionError,
    DeadlineExceededError,
    QueryCancelledError,
    QueryContext,
    QueryError,
    TooManyColumnsError,
    UnsupportedValueError,
)
from fortune_store.io.database.bulk_insert import MAX_PARAMETERS, bulk_insert, chunk_stride

CONFLICT_DO_NOTHING = "ON CONFLICT DO NOTHING"


def _count(db, table="fortune_cookies"):
    return db.query_row(f"SELECT COUNT(*) FROM {table}").scalar()


@pytest.fixture
def tags_db(pooled_db):
    """Pooled handle with a table carrying a uniqueness constraint."""
    pooled_db.execute("CREATE TABLE IF NOT EXISTS fortune_tags (name TEXT PRIMARY KEY)")
    return pooled_db


@pytest.mark.unit
class TestChunkStride:
    @pytest.mark.parametrize("columns, stride", [(1, 1000), (2, 1000), (3, 999), (7, 994), (1000, 1000)])
    def test_largest_multiple_under_ceiling(self, columns, stride):
        assert chunk_stride(columns) == stride

    def test_too_many_columns(self):
        with pytest.raises(TooManyColumnsError):
            chunk_stride(MAX_PARAMETERS + 1)


@pytest.mark.unit
class TestValidation:
    def test_arity_mismatch_sends_no_statement(self, pooled_db):
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            with pytest.raises(ArityMismatchError, match="must be 0: got 1"):
                pooled_db.bulk_insert("fortune_cookies", ["id", "value"], [1, "a", 2])
        prepare.assert_not_called()
        assert _count(pooled_db) == 0

    def test_no_columns_rejected(self, pooled_db):
        with pytest.raises(ArityMismatchError):
            pooled_db.bulk_insert("fortune_cookies", [], ["a"])

    def test_too_many_columns_sends_no_statement(self, pooled_db):
        columns = [f"c{i}" for i in range(MAX_PARAMETERS + 1)]
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            with pytest.raises(TooManyColumnsError):
                pooled_db.bulk_insert("wide", columns, list(range(len(columns))))
        prepare.assert_not_called()

    def test_too_many_columns_rejected_without_values(self, pooled_db):
        columns = [f"c{i}" for i in range(MAX_PARAMETERS + 1)]
        with pytest.raises(TooManyColumnsError):
            pooled_db.bulk_insert("wide", columns, [])

    def test_unsupported_value_rejected_before_sending(self, pooled_db):
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            with pytest.raises(UnsupportedValueError, match=r"values\[1\]"):
                pooled_db.bulk_insert("fortune_cookies", ["value"], ["ok", {"not": "scalar"}])
        prepare.assert_not_called()

    def test_empty_values_is_a_no_op(self, pooled_db):
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            pooled_db.bulk_insert("fortune_cookies", ["value"], [])
        prepare.assert_not_called()


@pytest.mark.unit
class TestInsert:
    def test_count_grows_by_row_count(self, pooled_db):
        values = [f"fortune {i}" for i in range(25)]
        pooled_db.bulk_insert("fortune_cookies", ["value"], values)
        assert _count(pooled_db) == 25

    def test_multi_column_rows_keep_order(self, pooled_db):
        pooled_db.bulk_insert("fortune_cookies", ["id", "value"], [10, "ten", 20, "twenty"])
        row = pooled_db.query_row("SELECT value FROM fortune_cookies WHERE id = ?", 20)
        assert row.scalar() == "twenty"

    def test_1500_single_column_rows_use_two_statements(self, pooled_db):
        values = [f"fortune {i}" for i in range(1500)]
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            pooled_db.bulk_insert("fortune_cookies", ["value"], values)

        assert prepare.call_count == 2
        first_query = prepare.call_args_list[0].args[0]
        second_query = prepare.call_args_list[1].args[0]
        assert first_query.count("(?)") == 1000
        assert second_query.count("(?)") == 500
        assert _count(pooled_db) == 1500

    def test_every_chunk_respects_parameter_ceiling(self, pooled_db):
        values = []
        for i in range(700):
            values.extend([i + 1, f"fortune {i}"])
        with patch.object(pooled_db, "prepare", wraps=pooled_db.prepare) as prepare:
            pooled_db.bulk_insert("fortune_cookies", ["id", "value"], values)

        groups = [call.args[0].count("(?,?)") for call in prepare.call_args_list]
        assert groups == [500, 200]
        assert _count(pooled_db) == 700

    def test_schema_qualified_table(self, pooled_db):
        pooled_db.bulk_insert("main.fortune_cookies", ["value"], ["qualified"])
        assert _count(pooled_db) == 1

    def test_values_are_bound_not_interpolated(self, pooled_db):
        hostile = "'); DROP TABLE fortune_cookies; --"
        pooled_db.bulk_insert("fortune_cookies", ["value"], [hostile])
        assert pooled_db.query_row("SELECT value FROM fortune_cookies").scalar() == hostile


@pytest.mark.unit
class TestConflicts:
    def test_do_nothing_clause_skips_duplicates(self, tags_db):
        tags_db.bulk_insert("fortune_tags", ["name"], ["lucky", "lucky"], CONFLICT_DO_NOTHING)
        assert _count(tags_db, "fortune_tags") == 1

    def test_conflict_clause_appended_to_every_chunk(self, tags_db):
        with patch.object(tags_db, "prepare", wraps=tags_db.prepare) as prepare:
            bulk_insert(
                tags_db,
                "fortune_tags",
                ["name"],
                ["a", "b", "a", "c"],
                CONFLICT_DO_NOTHING,
                max_parameters=2,
            )
        assert all(call.args[0].endswith(CONFLICT_DO_NOTHING) for call in prepare.call_args_list)
        assert _count(tags_db, "fortune_tags") == 3

    def test_unique_violation_is_surfaced(self, tags_db):
        with pytest.raises(ChunkExecutionError) as exc_info:
            tags_db.bulk_insert("fortune_tags", ["name"], ["lucky", "lucky"])

        error = exc_info.value
        assert (error.table, error.start, error.end) == ("fortune_tags", 0, 2)
        assert "values[0:2]" in str(error)
        assert isinstance(error.__cause__, QueryError)
        assert _count(tags_db, "fortune_tags") == 0

    def test_earlier_chunks_stay_committed(self, tags_db):
        with pytest.raises(ChunkExecutionError) as exc_info:
            bulk_insert(tags_db, "fortune_tags", ["name"], ["a", "b", "a"], max_parameters=2)

        assert (exc_info.value.start, exc_info.value.end) == (2, 3)
        assert _count(tags_db, "fortune_tags") == 2


@pytest.mark.unit
@pytest.mark.skipif(sqlite3.sqlite_version_info < (3, 35), reason="RETURNING needs SQLite 3.35")
class TestReturning:
    def test_consumer_sees_every_inserted_row(self, pooled_db):
        ids = pooled_db.bulk_insert_returning(
            "fortune_cookies",
            ["value"],
            ["id", "value"],
            ["a", "b", "c"],
            consumer=lambda row: (row[0], row[1]),
        )
        assert [value for _, value in ids] == ["a", "b", "c"]
        assert len({row_id for row_id, _ in ids}) == 3

    def test_returning_across_chunks(self, pooled_db):
        ids = bulk_insert(
            pooled_db,
            "fortune_cookies",
            ["value"],
            [str(i) for i in range(5)],
            returning=["id"],
            consumer=lambda row: row[0],
            max_parameters=2,
        )
        assert len(ids) == 5

    def test_returning_requires_consumer(self, pooled_db):
        with pytest.raises(ValueError, match="consumer"):
            bulk_insert(pooled_db, "fortune_cookies", ["value"], ["a"], returning=["id"])


@pytest.mark.unit
class TestCancellation:
    def test_cancelled_context_propagates_unwrapped(self, pooled_db, debug_logs):
        ctx = QueryContext.background()
        ctx.cancel()
        with pytest.raises(QueryCancelledError) as exc_info:
            pooled_db.bulk_insert("fortune_cookies", ["value"], ["a"], ctx=ctx)

        assert not isinstance(exc_info.value, ChunkExecutionError)
        events = [e.get("event") for e in log_events(debug_logs)]
        assert "bulk_insert.chunk_failed" not in events
        assert "bulk_insert.cancelled" in events
        assert _count(pooled_db) == 0

    def test_expired_deadline_propagates_unwrapped(self, pooled_db):
        ctx = QueryContext.with_timeout(0)
        with pytest.raises(DeadlineExceededError):
            bulk_insert(pooled_db, "fortune_cookies", ["value"], ["a", "b"], ctx=ctx)
