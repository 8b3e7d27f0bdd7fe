"""
Allocation Storage - Durable state behind one injectable interface

Three kinds of state are kept per survey:
- the catalog of known audio file paths (unique, insert-only)
- the usage log of (session, path, time) records (append-only)
- the subfolder counter record (the only state that is read-modify-written)
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Set

from .errors import CounterCorruptError


# Field names of the persisted counter record
LAST_USED_INDEX = "lastUsedIndex"
TOTAL_SUBFOLDERS = "totalSubfolders"
SUBFOLDER_TIMES_USED = "SubfolderTimesUsed"


@dataclass
class CounterState:
    """Rotation state of one survey's subfolder pool"""
    last_used_index: int
    total_subfolders: int
    usage_counts: List[int] = field(default_factory=list)

    @classmethod
    def initial(cls, total_subfolders: int) -> "CounterState":
        """State before any session has advanced the counter"""
        return cls(
            last_used_index=-1,
            total_subfolders=total_subfolders,
            usage_counts=[0] * total_subfolders
        )

    @classmethod
    def from_record(cls, record, source: str) -> "CounterState":
        """
        Build state from a persisted record.

        Raises:
            CounterCorruptError: If fields are missing, mistyped or inconsistent
        """
        if not isinstance(record, dict):
            raise CounterCorruptError(source, "record is not an object")

        missing = [key for key in (LAST_USED_INDEX, TOTAL_SUBFOLDERS) if key not in record]
        if missing:
            raise CounterCorruptError(source, f"missing fields {missing}")

        last_used_index = record[LAST_USED_INDEX]
        total_subfolders = record[TOTAL_SUBFOLDERS]
        if not _is_int(last_used_index) or not _is_int(total_subfolders):
            raise CounterCorruptError(source, "index and total must be integers")
        if total_subfolders <= 0:
            raise CounterCorruptError(source, f"totalSubfolders is {total_subfolders}")

        usage_counts = record.get(SUBFOLDER_TIMES_USED)
        if usage_counts is None:
            usage_counts = [0] * total_subfolders
        if not isinstance(usage_counts, list) or not all(_is_int(count) for count in usage_counts):
            raise CounterCorruptError(source, "SubfolderTimesUsed must be a list of integers")
        if len(usage_counts) != total_subfolders:
            raise CounterCorruptError(
                source,
                f"SubfolderTimesUsed has {len(usage_counts)} entries for {total_subfolders} subfolders"
            )

        return cls(last_used_index, total_subfolders, list(usage_counts))

    def to_record(self) -> dict:
        return {
            LAST_USED_INDEX: self.last_used_index,
            TOTAL_SUBFOLDERS: self.total_subfolders,
            SUBFOLDER_TIMES_USED: list(self.usage_counts)
        }

    @property
    def normalized_index(self) -> int:
        return self.last_used_index % self.total_subfolders


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class UsedAudioLogEntry:
    session_id: str
    path: str
    timestamp: datetime


class AllocationStorage(ABC):
    """
    Persistence contract used by the allocator components.

    Catalog inserts and log appends are safe to call concurrently.
    Counter updates must happen inside `counter_lock(survey_id)`, which
    serializes the read-modify-write per survey.
    """

    def __init__(self):
        self._locks_guard = threading.Lock()
        self._counter_locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def counter_lock(self, survey_id) -> Iterator[None]:
        """Hold the per-survey counter lock for the duration of the block"""
        with self._locks_guard:
            lock = self._counter_locks.setdefault(str(survey_id), threading.Lock())
        with lock:
            yield

    @abstractmethod
    def catalog_contains(self, path: str) -> bool:
        pass

    @abstractmethod
    def catalog_insert(self, path: str) -> None:
        """Add `path` to the catalog; inserting a known path is a no-op"""
        pass

    @abstractmethod
    def catalog_paths(self) -> Set[str]:
        """All catalogued paths"""
        pass

    @abstractmethod
    def log_usage(self, session_id: str, path: str, timestamp: datetime) -> None:
        pass

    @abstractmethod
    def usage_log(self, session_id: Optional[str] = None) -> List[UsedAudioLogEntry]:
        """Usage records in insertion order, optionally for one session"""
        pass

    @abstractmethod
    def load_counter(self, survey_id) -> Optional[CounterState]:
        """
        Load the counter state of a survey.

        Returns:
            The stored state, or None if the survey has no counter yet

        Raises:
            CounterCorruptError: If the stored record cannot be read
        """
        pass

    @abstractmethod
    def save_counter(self, survey_id, state: CounterState) -> None:
        pass


class InMemoryAllocationStorage(AllocationStorage):
    """Process-local storage, used in tests and for dry runs"""

    def __init__(self):
        super().__init__()
        self.catalog: Set[str] = set()
        self.usage_entries: List[UsedAudioLogEntry] = []
        self.counter_records: Dict[str, dict] = {}

    def catalog_contains(self, path: str) -> bool:
        return path in self.catalog

    def catalog_insert(self, path: str) -> None:
        self.catalog.add(path)

    def catalog_paths(self) -> Set[str]:
        return set(self.catalog)

    def log_usage(self, session_id: str, path: str, timestamp: datetime) -> None:
        self.usage_entries.append(UsedAudioLogEntry(session_id, path, timestamp))

    def usage_log(self, session_id: Optional[str] = None) -> List[UsedAudioLogEntry]:
        return [
            entry for entry in self.usage_entries
            if session_id is None or entry.session_id == session_id
        ]

    def load_counter(self, survey_id) -> Optional[CounterState]:
        record = self.counter_records.get(str(survey_id))
        if record is None:
            return None
        return CounterState.from_record(record, source=f"memory:{survey_id}")

    def save_counter(self, survey_id, state: CounterState) -> None:
        self.counter_records[str(survey_id)] = state.to_record()

