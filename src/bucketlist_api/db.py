from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Generator, List, Optional

from .models import SheetValues
from .sources import SheetSource

logger = logging.getLogger(__name__)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteSheetSource(SheetSource):
    """
    SQLite-backed sheet source: each table is a sheet, its column names are the
    header row and its rows (in rowid order) the data rows.
    """

    name = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _table_exists(self, conn: sqlite3.Connection, table: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone()
        return row is not None

    def put(self, sheet_name: str, values: List[List[Any]]) -> None:
        """Replace a sheet with the given header row and data rows."""
        header, *rows = values
        table = _quote_identifier(sheet_name)
        columns = ", ".join(_quote_identifier(str(h)) for h in header)
        placeholders = ", ".join("?" for _ in header)
        with self._conn() as conn:
            conn.execute(f"DROP TABLE IF EXISTS {table}")
            conn.execute(f"CREATE TABLE {table} ({columns})")
            conn.executemany(
                f"INSERT INTO {table} VALUES ({placeholders})",
                [list(row)[: len(header)] + [None] * (len(header) - len(row)) for row in rows],
            )

    def get_values(self, sheet_name: str) -> Optional[SheetValues]:
        with self._conn() as conn:
            if not self._table_exists(conn, sheet_name):
                return None
            cur = conn.execute(f"SELECT * FROM {_quote_identifier(sheet_name)} ORDER BY rowid")
            header = [col[0] for col in cur.description]
            rows = [list(r) for r in cur.fetchall()]
        logger.debug("Read %d rows from sqlite table %s", len(rows), sheet_name)
        return [header, *rows]
