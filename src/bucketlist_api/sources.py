from __future__ import annotations

import copy
import csv
import logging
import os
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional, Sequence

from .models import SheetValues
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = (
    "id",
    "category",
    "target_age",
    "title",
    "note",
    "image_url",
    "completed",
    "completed_at",
)


# PUBLIC_INTERFACE
class SheetSource(ABC):
    """Abstract contract for stores that hold sheets of tabular values."""

    name: str = "abstract"

    @abstractmethod
    def get_values(self, sheet_name: str) -> Optional[SheetValues]:
        """
        Return the sheet as a 2D list (header row first), [] for an empty sheet,
        or None if the sheet does not exist.
        """


class InMemorySheetSource(SheetSource):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self, sheets: Optional[Dict[str, Sequence[Sequence[Any]]]] = None) -> None:
        self._lock = RLock()
        self._sheets: Dict[str, SheetValues] = {}
        for sheet_name, values in (sheets or {}).items():
            self.put(sheet_name, values)

    def put(self, sheet_name: str, values: Sequence[Sequence[Any]]) -> None:
        with self._lock:
            self._sheets[sheet_name] = [list(row) for row in values]

    def get_values(self, sheet_name: str) -> Optional[SheetValues]:
        with self._lock:
            values = self._sheets.get(sheet_name)
            # Return copies to avoid external mutation
            return None if values is None else copy.deepcopy(values)


class CsvSheetSource(SheetSource):
    """
    Reads sheets from a directory of CSV files, one '<sheet_name>.csv' per sheet.
    All cells come back as strings.
    """

    name = "csv"

    def __init__(self, directory: str) -> None:
        self._directory = directory

    def _path(self, sheet_name: str) -> str:
        return os.path.join(self._directory, f"{os.path.basename(sheet_name)}.csv")

    def get_values(self, sheet_name: str) -> Optional[SheetValues]:
        path = self._path(sheet_name)
        if not os.path.isfile(path):
            return None
        with open(path, newline="", encoding="utf-8-sig") as f:
            rows: List[List[Any]] = [row for row in csv.reader(f)]
        logger.debug("Read %d rows from %s", len(rows), path)
        return rows


# PUBLIC_INTERFACE
def get_sheet_source(settings: Optional[Settings] = None) -> SheetSource:
    """
    Factory to return the configured sheet source based on settings.
    - memory: InMemorySheetSource seeded with a header-only sheet
    - csv: CsvSheetSource over settings.csv_dir
    - sqlite: SQLiteSheetSource over settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.sheet_backend == "sqlite":
        from .db import SQLiteSheetSource

        return SQLiteSheetSource(settings.sqlite_db_path)
    if settings.sheet_backend == "csv":
        return CsvSheetSource(settings.csv_dir)
    return InMemorySheetSource({settings.sheet_name: [list(DEFAULT_HEADERS)]})
