"""Shared pytest configuration and fixtures for the allocation test suite."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

import pytest

# Ensure src/ is importable when pytest is run without the project installed
SRC_ROOT = Path(__file__).parent.parent
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from hybridLogger import HybridLogger
from allocation_system import (
    AllocationConfig,
    AudioFileSelector,
    InMemoryAllocationStorage,
    PathResolver,
    SessionContext,
    StorageError,
    SubfolderRotationCounter,
    SurveyPaths,
)


SURVEY_ID = "42"


# =============================================================================
# Test doubles
# =============================================================================

class FailingStorage(InMemoryAllocationStorage):
    """In-memory storage whose usage log or selected catalog inserts fail"""

    def __init__(self, fail_log: bool = False, fail_paths: Optional[Set[str]] = None):
        super().__init__()
        self.fail_log = fail_log
        self.fail_paths = fail_paths or set()

    def catalog_insert(self, path: str) -> None:
        if path in self.fail_paths:
            raise StorageError(f"Refusing to insert {path}")
        super().catalog_insert(path)

    def log_usage(self, session_id: str, path: str, timestamp: datetime) -> None:
        if self.fail_log:
            raise StorageError("usage log unavailable")
        super().log_usage(session_id, path, timestamp)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def hybrid_logger():
    """Console-only logger factory"""
    factory = HybridLogger("AllocatorTests", log_dir=None)
    yield factory
    factory.cleanup()


@pytest.fixture
def logger(hybrid_logger):
    return hybrid_logger.get_class_logger("Test", logging.DEBUG)


@pytest.fixture
def config(tmp_path) -> AllocationConfig:
    return AllocationConfig(
        surveys_base_dir=str(tmp_path / "surveys"),
        public_url_base="/audioSurvey/upload/surveys",
        database_path=str(tmp_path / "allocation.db"),
        log_dir=None,
        log_level=logging.DEBUG
    )


@pytest.fixture
def paths(config) -> SurveyPaths:
    return SurveyPaths(config)


@pytest.fixture
def make_pool(paths):
    """
    Build a survey pool: make_pool({"01": ["01.mp3", "02.mp3"], "02": [...]}).

    Returns the pool root as a Path.
    """
    def _make_pool(layout: Dict[str, Iterable[str]], survey_id: str = SURVEY_ID) -> Path:
        pool_root = Path(paths.pool_root(survey_id))
        pool_root.mkdir(parents=True, exist_ok=True)
        for subfolder, files in layout.items():
            folder = pool_root / subfolder
            folder.mkdir(exist_ok=True)
            for name in files:
                (folder / name).write_bytes(b"ID3")
        return pool_root

    return _make_pool


@pytest.fixture
def standard_pool(make_pool) -> Path:
    """Subfolders 01 and 02, each with 01.mp3 .. 05.mp3"""
    files = [f"{n:02d}.mp3" for n in range(1, 6)]
    return make_pool({"01": files, "02": files})


@pytest.fixture
def storage() -> InMemoryAllocationStorage:
    return InMemoryAllocationStorage()


@pytest.fixture
def counter(storage, paths, logger) -> SubfolderRotationCounter:
    return SubfolderRotationCounter(storage, paths, logger)


@pytest.fixture
def resolver(paths, logger) -> PathResolver:
    return PathResolver(paths, logger)


@pytest.fixture
def selector(storage, counter, paths, resolver, logger) -> AudioFileSelector:
    return AudioFileSelector(storage, counter, paths, resolver, logger)


@pytest.fixture
def session() -> SessionContext:
    return SessionContext("S1")


@pytest.fixture
def failing_storage_cls():
    return FailingStorage
