"""MySQL-backed checks; skipped unless FORTUNE_TEST_MYSQL_URL is set."""

import pytest

from fortune_store.io.database import ChunkExecutionError
from fortune_store.io.schema import admin
from fortune_store.testing import TestDatabasePool

MYSQL_DO_NOTHING = "ON DUPLICATE KEY UPDATE name = name"


@pytest.fixture
def mysql_pool(mysql_source):
    pool = TestDatabasePool.setup(mysql_source, "fortune_mysql_test", 2)
    yield pool
    pool.close()


@pytest.mark.integration
def test_databases_use_utf8mb4(mysql_pool):
    with mysql_pool.lease() as db:
        charset = db.query_row(
            "SELECT DEFAULT_CHARACTER_SET_NAME FROM INFORMATION_SCHEMA.SCHEMATA "
            "WHERE SCHEMA_NAME = DATABASE()"
        ).scalar()
    assert charset == "utf8mb4"


@pytest.mark.integration
def test_bulk_insert_and_duplicate_handling(mysql_pool):
    with mysql_pool.lease() as db:
        db.execute(
            "CREATE TABLE IF NOT EXISTS fortune_tags (name VARCHAR(64) PRIMARY KEY)"
        )
        db.bulk_insert("fortune_tags", ["name"], ["lucky", "lucky"], MYSQL_DO_NOTHING)
        assert db.query_row("SELECT COUNT(*) FROM fortune_tags").scalar() == 1

        with pytest.raises(ChunkExecutionError):
            db.bulk_insert("fortune_tags", ["name"], ["lucky"])

        db.bulk_insert("fortune_cookies", ["value"], [f"fortune {i}" for i in range(1500)])
        assert db.query_row("SELECT COUNT(*) FROM fortune_cookies").scalar() == 1500


@pytest.mark.integration
def test_release_truncates_across_foreign_keys(mysql_pool):
    db, release = mysql_pool.acquire()
    db.execute(
        "CREATE TABLE IF NOT EXISTS fortune_ratings ("
        " id BIGINT AUTO_INCREMENT PRIMARY KEY,"
        " fortune_id BIGINT NOT NULL,"
        " FOREIGN KEY (fortune_id) REFERENCES fortune_cookies (id))"
    )
    db.bulk_insert("fortune_cookies", ["id", "value"], [1, "a"])
    db.bulk_insert("fortune_ratings", ["fortune_id"], [1])

    release()

    assert {"fortune_cookies", "fortune_ratings"} <= set(admin.mutable_tables(db))
    assert db.query_row("SELECT COUNT(*) FROM fortune_cookies").scalar() == 0
    assert db.query_row("SELECT COUNT(*) FROM fortune_ratings").scalar() == 0
