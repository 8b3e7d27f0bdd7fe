"""Tests for the SQLite + counter-file storage."""

import json
import threading
from datetime import datetime

import pytest

from allocation_system import (
    CounterCorruptError,
    CounterState,
    InventorySynchronizer,
    SessionContext,
    SqliteAllocationStorage,
    StorageError,
    SubfolderRotationCounter,
)

from conftest import SURVEY_ID


@pytest.fixture
def sqlite_storage(config, paths, logger) -> SqliteAllocationStorage:
    return SqliteAllocationStorage(config.database_path, paths, logger)


def test_catalog_insert_is_idempotent(sqlite_storage):
    sqlite_storage.catalog_insert("/pool/01/01.mp3")
    sqlite_storage.catalog_insert("/pool/01/01.mp3")

    assert sqlite_storage.catalog_paths() == {"/pool/01/01.mp3"}
    assert sqlite_storage.catalog_contains("/pool/01/01.mp3")
    assert not sqlite_storage.catalog_contains("/pool/01/02.mp3")


def test_concurrent_inserts_do_not_duplicate(sqlite_storage):
    paths = [f"/pool/01/{n:02d}.mp3" for n in range(1, 6)]

    def insert_all():
        for path in paths:
            sqlite_storage.catalog_insert(path)

    workers = [threading.Thread(target=insert_all) for _ in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert sqlite_storage.catalog_paths() == set(paths)


def test_usage_log_is_append_only(sqlite_storage):
    used_at = datetime(2024, 5, 1, 12, 30)
    sqlite_storage.log_usage("S1", "/pool/01/01.mp3", used_at)
    sqlite_storage.log_usage("S2", "/pool/02/01.mp3", used_at)
    sqlite_storage.log_usage("S1", "/pool/01/01.mp3", used_at)

    assert [entry.path for entry in sqlite_storage.usage_log("S1")] == ["/pool/01/01.mp3"] * 2
    assert len(sqlite_storage.usage_log()) == 3
    assert sqlite_storage.usage_log("S2")[0].timestamp == used_at


def test_schema_survives_reopening(config, paths, logger):
    SqliteAllocationStorage(config.database_path, paths, logger).catalog_insert("/pool/a.mp3")

    reopened = SqliteAllocationStorage(config.database_path, paths, logger)

    assert reopened.catalog_paths() == {"/pool/a.mp3"}


def test_unusable_database_raises_storage_error(tmp_path, paths, logger):
    with pytest.raises(StorageError):
        SqliteAllocationStorage(str(tmp_path / "missing" / "db.sqlite"), paths, logger)


def test_counter_file_layout(sqlite_storage, standard_pool):
    sqlite_storage.save_counter(SURVEY_ID, CounterState(1, 2, [1, 1]))

    with open(standard_pool / "counterSubfolderSession.json", encoding="utf-8") as f:
        assert json.load(f) == {"lastUsedIndex": 1, "totalSubfolders": 2, "SubfolderTimesUsed": [1, 1]}
    assert sqlite_storage.load_counter(SURVEY_ID) == CounterState(1, 2, [1, 1])


def test_missing_counter_file_loads_as_none(sqlite_storage, standard_pool):
    assert sqlite_storage.load_counter(SURVEY_ID) is None


def test_unreadable_counter_file(sqlite_storage, standard_pool):
    (standard_pool / "counterSubfolderSession.json").write_text("{not json")

    with pytest.raises(CounterCorruptError):
        sqlite_storage.load_counter(SURVEY_ID)


def test_counter_file_does_not_count_as_subfolder(sqlite_storage, paths, logger, standard_pool):
    counter = SubfolderRotationCounter(sqlite_storage, paths, logger)

    for n in range(3):
        counter.advance(SURVEY_ID, SessionContext(f"S{n}"))

    assert sqlite_storage.load_counter(SURVEY_ID) == CounterState(0, 2, [2, 1])


def test_concurrent_sessions_each_advance_once(sqlite_storage, paths, logger, standard_pool):
    counter = SubfolderRotationCounter(sqlite_storage, paths, logger)
    sessions = [SessionContext(f"S{n}") for n in range(8)]

    workers = [threading.Thread(target=counter.advance, args=(SURVEY_ID, s)) for s in sessions]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    state = sqlite_storage.load_counter(SURVEY_ID)
    assert sum(state.usage_counts) == 8
    assert state.usage_counts == [4, 4]


def test_sync_against_sqlite(sqlite_storage, logger, standard_pool):
    synchronizer = InventorySynchronizer(sqlite_storage, logger)

    synchronizer.sync(str(standard_pool))
    synchronizer.sync(str(standard_pool))

    assert len(sqlite_storage.catalog_paths()) == 10
