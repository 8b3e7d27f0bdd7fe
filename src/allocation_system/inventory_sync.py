"""
Inventory Synchronizer - Keeps the audio catalog in step with the pool
"""

import os
from dataclasses import dataclass

from utils import list_audio_files, list_subfolders, normalize_path
from .errors import StorageError
from .storage import AllocationStorage


@dataclass
class SyncReport:
    scanned: int = 0
    inserted: int = 0
    failed: int = 0


class InventorySynchronizer:
    """
    Registers every audio file of a survey pool in the catalog.

    Scans exactly two levels: pool root -> subfolders -> audio files.
    Catalog entries are never removed, even when their file disappears.
    """

    def __init__(self, storage: AllocationStorage, logger, audio_extension: str = ".mp3"):
        self.storage = storage
        self.logger = logger
        self.audio_extension = audio_extension

    def sync(self, pool_root: str) -> SyncReport:
        """
        Insert every not-yet-catalogued audio file under `pool_root`.

        Safe to run repeatedly and from concurrent page loads: inserts are
        idempotent upserts, and a failed insert is logged without stopping
        the scan.

        Args:
            pool_root: Survey audio pool directory

        Returns:
            SyncReport with the number of files scanned, inserted and failed
        """
        report = SyncReport()
        pool_root = normalize_path(os.path.abspath(pool_root))

        if not os.path.isdir(pool_root):
            self.logger.warning(f"Audio pool '{pool_root}' does not exist, nothing to sync")
            return report

        known_paths = self.storage.catalog_paths()

        for subfolder in list_subfolders(pool_root):
            for path in list_audio_files(f"{pool_root}/{subfolder}", self.audio_extension):
                report.scanned += 1
                if path in known_paths:
                    continue

                try:
                    self.storage.catalog_insert(path)
                except StorageError as e:
                    report.failed += 1
                    self.logger.error(f"Failed to catalog {path}", e)
                    continue

                known_paths.add(path)
                report.inserted += 1
                self.logger.debug(f"Catalogued {path}")

        self.logger.info(
            f"Audio files updated for '{pool_root}': {report.scanned} scanned, "
            f"{report.inserted} new, {report.failed} failed"
        )
        return report
