"""
Allocation System Module

Assigns audio stimuli to survey questions: keeps the audio catalog in sync
with the filesystem, rotates sessions over pool subfolders and picks a
not-yet-shown file for each question of a session.
"""

from .errors import (
    AllocationError, InvalidCodeError, NoSubfoldersError, CounterCorruptError,
    IndexOutOfRangeError, MalformedSubfolderError, EmptyPoolError,
    NoMatchingAudioError, PathResolutionError, PersistenceError, StorageError
)
from .config import AllocationConfig
from .code_parser import QuestionKind, ParsedCode, parse_code
from .session_context import SessionContext
from .storage import AllocationStorage, InMemoryAllocationStorage, CounterState, UsedAudioLogEntry
from .sqlite_storage import SqliteAllocationStorage
from .path_resolver import SurveyPaths, PathResolver
from .subfolder_counter import SubfolderRotationCounter
from .inventory_sync import InventorySynchronizer, SyncReport
from .file_selector import AudioFileSelector
from .allocator import AudioAllocator, QuestionRenderRequest, create_allocator

__all__ = [
    # Errors
    'AllocationError',
    'InvalidCodeError',
    'NoSubfoldersError',
    'CounterCorruptError',
    'IndexOutOfRangeError',
    'MalformedSubfolderError',
    'EmptyPoolError',
    'NoMatchingAudioError',
    'PathResolutionError',
    'PersistenceError',
    'StorageError',
    # Configuration
    'AllocationConfig',
    # Components
    'QuestionKind',
    'ParsedCode',
    'parse_code',
    'SessionContext',
    'AllocationStorage',
    'InMemoryAllocationStorage',
    'SqliteAllocationStorage',
    'CounterState',
    'UsedAudioLogEntry',
    'SurveyPaths',
    'PathResolver',
    'SubfolderRotationCounter',
    'InventorySynchronizer',
    'SyncReport',
    'AudioFileSelector',
    # Entry points
    'AudioAllocator',
    'QuestionRenderRequest',
    'create_allocator'
]
