"""Tests for the filesystem -> catalog synchronizer."""

from allocation_system import InventorySynchronizer


def test_sync_catalogs_every_audio_file(storage, logger, standard_pool):
    report = InventorySynchronizer(storage, logger).sync(str(standard_pool))

    assert report.scanned == 10
    assert report.inserted == 10
    assert report.failed == 0
    assert f"{standard_pool.as_posix()}/02/05.mp3" in storage.catalog


def test_sync_is_idempotent(storage, logger, standard_pool):
    synchronizer = InventorySynchronizer(storage, logger)

    synchronizer.sync(str(standard_pool))
    size_after_first = len(storage.catalog)
    report = synchronizer.sync(str(standard_pool))

    assert len(storage.catalog) == size_after_first
    assert report.inserted == 0


def test_sync_adds_new_files_only(storage, logger, standard_pool):
    synchronizer = InventorySynchronizer(storage, logger)
    synchronizer.sync(str(standard_pool))

    (standard_pool / "02" / "06.mp3").write_bytes(b"ID3")
    report = synchronizer.sync(str(standard_pool))

    assert report.inserted == 1
    assert len(storage.catalog) == 11


def test_sync_is_one_level_deep(storage, logger, make_pool):
    pool_root = make_pool({"01": ["01.mp3"]})
    (pool_root / "stray.mp3").write_bytes(b"ID3")
    nested = pool_root / "01" / "nested"
    nested.mkdir()
    (nested / "02.mp3").write_bytes(b"ID3")

    InventorySynchronizer(storage, logger).sync(str(pool_root))

    assert storage.catalog == {f"{pool_root.as_posix()}/01/01.mp3"}


def test_removed_files_stay_catalogued(storage, logger, standard_pool):
    synchronizer = InventorySynchronizer(storage, logger)
    synchronizer.sync(str(standard_pool))

    (standard_pool / "01" / "01.mp3").unlink()
    synchronizer.sync(str(standard_pool))

    assert f"{standard_pool.as_posix()}/01/01.mp3" in storage.catalog


def test_failed_insert_does_not_stop_scan(logger, standard_pool, failing_storage_cls):
    bad_path = f"{standard_pool.as_posix()}/01/03.mp3"
    storage = failing_storage_cls(fail_paths={bad_path})

    report = InventorySynchronizer(storage, logger).sync(str(standard_pool))

    assert report.failed == 1
    assert report.inserted == 9
    assert bad_path not in storage.catalog


def test_missing_pool_is_a_no_op(storage, logger, tmp_path):
    report = InventorySynchronizer(storage, logger).sync(str(tmp_path / "missing"))

    assert report.scanned == 0
    assert storage.catalog == set()
