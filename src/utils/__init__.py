"""
Utilities package - Filesystem helpers shared by the allocation system
"""

from .fs_listing import list_subfolders, list_audio_files, normalize_path

__all__ = [
    'list_subfolders',
    'list_audio_files',
    'normalize_path'
]
