"""
Catalog Exporter - CSV report of the audio catalog with ID3 details
"""

import csv
import os
from dataclasses import dataclass
from typing import List, Optional

import eyed3

from .storage import AllocationStorage

# Suppress eyed3 logging noise
eyed3.log.setLevel("ERROR")


CSV_HEADER = ["Path", "Subfolder", "Audio Number", "Exists", "Duration (s)", "Title"]


@dataclass
class CatalogRow:
    path: str
    subfolder: str
    audio_number: str
    exists: bool
    duration_seconds: Optional[float] = None
    title: Optional[str] = None

    def as_csv(self) -> list:
        return [
            self.path,
            self.subfolder,
            self.audio_number,
            "yes" if self.exists else "no",
            "" if self.duration_seconds is None else f"{self.duration_seconds:.2f}",
            self.title or ""
        ]


class CatalogExporter:
    """
    Builds a CSV database of every catalogued audio file.

    Stale entries (files deleted after they were catalogued) stay in the
    catalog; the report marks them with Exists = no instead of dropping them.
    """

    def __init__(self, storage: AllocationStorage, logger):
        self.storage = storage
        self.logger = logger

    def collect_rows(self) -> List[CatalogRow]:
        rows = [self._describe(path) for path in sorted(self.storage.catalog_paths())]
        stale = sum(1 for row in rows if not row.exists)
        if stale:
            self.logger.warning(f"{stale} catalogued files no longer exist on disk")
        return rows

    def export_csv(self, csv_output_path: str) -> int:
        """
        Write the catalog report, overwriting `csv_output_path`.

        Returns:
            Number of catalog entries written
        """
        rows = self.collect_rows()
        with open(csv_output_path, 'w', newline='', encoding='utf-8') as csv_file:
            writer = csv.writer(csv_file)
            writer.writerow(CSV_HEADER)
            for row in rows:
                writer.writerow(row.as_csv())

        self.logger.info(f"Exported {len(rows)} catalog entries to {csv_output_path}")
        return len(rows)

    def _describe(self, path: str) -> CatalogRow:
        parts = path.rsplit("/", 2)
        subfolder = parts[-2] if len(parts) >= 2 else ""
        audio_number = os.path.splitext(parts[-1])[0]

        row = CatalogRow(path, subfolder, audio_number, exists=os.path.isfile(path))
        if not row.exists:
            return row

        try:
            audio_file = eyed3.load(path)
        except Exception as e:
            self.logger.warning(f"Failed to read ID3 data of {path}: {e}")
            return row

        if audio_file is None:
            return row
        if audio_file.info is not None:
            row.duration_seconds = audio_file.info.time_secs
        if audio_file.tag is not None and audio_file.tag.title:
            row.title = str(audio_file.tag.title)
        return row
