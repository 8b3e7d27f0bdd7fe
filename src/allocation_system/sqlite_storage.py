"""
SQLite-backed allocation storage

Catalog and usage log live in a SQLite database; each survey's subfolder
counter is a JSON file next to its audio pool, as deployed surveys expect.
"""

import json
import os
import sqlite3
import tempfile
from contextlib import closing, suppress
from datetime import datetime
from typing import List, Optional, Set

from .errors import CounterCorruptError, StorageError
from .path_resolver import SurveyPaths
from .storage import AllocationStorage, CounterState, UsedAudioLogEntry


SCHEMA = [
    "CREATE TABLE IF NOT EXISTS audio_uploads (audio_url TEXT PRIMARY KEY)",
    """CREATE TABLE IF NOT EXISTS used_audio_files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id TEXT NOT NULL,
        audio_url TEXT NOT NULL,
        used_at TEXT NOT NULL
    )""",
]


class SqliteAllocationStorage(AllocationStorage):
    """
    Storage for a deployed allocator.

    A connection is opened per operation so that every page load works on
    its own handle; uniqueness of catalog paths is enforced by the primary
    key, so concurrent inserts of the same file cannot duplicate it.
    """

    def __init__(self, database_path: str, paths: SurveyPaths, logger):
        super().__init__()
        self.database_path = database_path
        self.paths = paths
        self.logger = logger
        self._create_schema()

    # ============================================================================
    # CATALOG AND USAGE LOG
    # ============================================================================

    def catalog_contains(self, path: str) -> bool:
        row = self._fetch_one("SELECT 1 FROM audio_uploads WHERE audio_url = ?", (path,))
        return row is not None

    def catalog_insert(self, path: str) -> None:
        self._execute("INSERT OR IGNORE INTO audio_uploads (audio_url) VALUES (?)", (path,))

    def catalog_paths(self) -> Set[str]:
        rows = self._fetch_all("SELECT audio_url FROM audio_uploads")
        return {row[0] for row in rows}

    def log_usage(self, session_id: str, path: str, timestamp: datetime) -> None:
        self._execute(
            "INSERT INTO used_audio_files (session_id, audio_url, used_at) VALUES (?, ?, ?)",
            (session_id, path, timestamp.isoformat())
        )

    def usage_log(self, session_id: Optional[str] = None) -> List[UsedAudioLogEntry]:
        if session_id is None:
            rows = self._fetch_all(
                "SELECT session_id, audio_url, used_at FROM used_audio_files ORDER BY id"
            )
        else:
            rows = self._fetch_all(
                "SELECT session_id, audio_url, used_at FROM used_audio_files "
                "WHERE session_id = ? ORDER BY id",
                (session_id,)
            )
        return [
            UsedAudioLogEntry(row[0], row[1], datetime.fromisoformat(row[2]))
            for row in rows
        ]

    # ============================================================================
    # COUNTER FILES
    # ============================================================================

    def load_counter(self, survey_id) -> Optional[CounterState]:
        counter_file = self.paths.counter_file(survey_id)
        if not os.path.exists(counter_file):
            return None

        try:
            with open(counter_file, "r", encoding="utf-8") as f:
                record = json.load(f)
        except (OSError, ValueError) as e:
            raise CounterCorruptError(counter_file, f"unreadable ({e})") from e

        return CounterState.from_record(record, source=counter_file)

    def save_counter(self, survey_id, state: CounterState) -> None:
        """Write the counter file atomically (temp file + replace)"""
        counter_file = self.paths.counter_file(survey_id)
        directory = os.path.dirname(counter_file)

        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".counter-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state.to_record(), f)
                os.replace(tmp_path, counter_file)
            except BaseException:
                with suppress(OSError):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write counter data to '{counter_file}': {e}") from e

        self.logger.debug(f"Saved counter for survey {survey_id}: {state.to_record()}")

    # ============================================================================
    # PRIVATE METHODS
    # ============================================================================

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.database_path, timeout=10)

    def _create_schema(self) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                for statement in SCHEMA:
                    conn.execute(statement)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize database '{self.database_path}': {e}") from e

    def _execute(self, query: str, params: tuple = ()) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(query, params)
        except sqlite3.Error as e:
            raise StorageError(f"Database write failed: {e}") from e

    def _fetch_one(self, query: str, params: tuple = ()):
        try:
            with closing(self._connect()) as conn:
                return conn.execute(query, params).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Database read failed: {e}") from e

    def _fetch_all(self, query: str, params: tuple = ()) -> list:
        try:
            with closing(self._connect()) as conn:
                return conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Database read failed: {e}") from e

