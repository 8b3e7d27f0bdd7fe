"""
Stable filesystem listings for the audio pool
"""

import os
from typing import List


def normalize_path(path: str) -> str:
    """Return `path` with forward slashes, the form stored in the catalog"""
    return str(path).replace('\\', '/')


def list_subfolders(directory: str) -> List[str]:
    """
    List the names of the immediate subdirectories of `directory`.

    Names are sorted so that an index into the result maps to the same
    folder for as long as the set of folders does not change. The counter
    file and other regular files are skipped.

    Args:
        directory: Directory to list

    Returns:
        Sorted subdirectory names, empty if `directory` does not exist
    """
    if not os.path.isdir(directory):
        return []
    return sorted(
        name for name in os.listdir(directory)
        if os.path.isdir(os.path.join(directory, name))
    )


def list_audio_files(directory: str, extension: str = ".mp3") -> List[str]:
    """
    List audio files directly under `directory` (no recursion).

    The extension match is case-sensitive, like a `*.mp3` glob on a
    POSIX filesystem.

    Returns:
        Sorted, normalized absolute paths
    """
    if not os.path.isdir(directory):
        return []
    files = []
    for name in os.listdir(directory):
        full_path = os.path.join(directory, name)
        if name.endswith(extension) and os.path.isfile(full_path):
            files.append(normalize_path(os.path.abspath(full_path)))
    return sorted(files)
