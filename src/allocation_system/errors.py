"""
Allocation errors

Every error raised while allocating audio to a question derives from
AllocationError. They are recoverable at the allocator boundary, where the
message is logged and shown to the survey author as help text.
"""

from typing import Optional


class AllocationError(Exception):
    """Base class for all audio allocation failures"""


class InvalidCodeError(AllocationError):
    def __init__(self, code):
        self.code = code
        super().__init__(
            f"Invalid code format: {code}. Unable to extract AudioNumberValue and QuestionType."
        )


class NoSubfoldersError(AllocationError):
    def __init__(self, pool_root: str):
        self.pool_root = pool_root
        super().__init__(f"No subfolders found in audio pool '{pool_root}'.")


class CounterCorruptError(AllocationError):
    def __init__(self, counter_file: str, reason: str):
        self.counter_file = counter_file
        super().__init__(f"Invalid or incomplete counter data in '{counter_file}': {reason}")


class IndexOutOfRangeError(AllocationError):
    def __init__(self, index: int, subfolder_count: int):
        self.index = index
        self.subfolder_count = subfolder_count
        super().__init__(
            f"Last used index '{index}' does not correspond to a valid subfolder "
            f"({subfolder_count} subfolders available)."
        )


class MalformedSubfolderError(AllocationError):
    def __init__(self, subfolder: str):
        self.subfolder = subfolder
        super().__init__(
            f"Subfolder format is incorrect: {subfolder}. "
            f"Subfolder must be two digits (e.g., '01', '02', ..., '99')."
        )


class EmptyPoolError(AllocationError):
    def __init__(self, subfolder: str, session_id: str):
        self.subfolder = subfolder
        self.session_id = session_id
        super().__init__(
            f"No audio files found in subfolder: {subfolder} for session ID {session_id}. "
            f"Please check the subfolder name and audio filenames."
        )


class NoMatchingAudioError(AllocationError):
    def __init__(self, audio_number: str):
        self.audio_number = audio_number
        super().__init__(
            f"No audio file matching AudioNumberValue: {audio_number} found. "
            f"Check the subfolder and filenames."
        )


class PathResolutionError(AllocationError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not resolve '{path}': {reason}")


class PersistenceError(AllocationError):
    """The usage log write failed after a file had already been selected"""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to record usage of '{path}': {cause}")


class StorageError(Exception):
    """Low-level failure reported by an AllocationStorage implementation"""
