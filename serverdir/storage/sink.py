"""Result sink: the flat record stream plus per-page snapshots.

Records are appended to ``records`` in arrival order.  Each processed page
also gets one row in ``snapshots`` holding its full record list as JSON,
keyed by :func:`~serverdir.scraper.models.snapshot_key`; processing the same
page again overwrites that row.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from time import time
from typing import Any, Iterator, Optional, TextIO

from serverdir.scraper.models import DirectoryRecord, PageSnapshot, snapshot_key

_JSON_CONTENT_TYPE = "application/json"


class ResultSink:
    """Thread-safe writer/reader over an initialised result database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def push_record(self, record: DirectoryRecord) -> None:
        """Append one record to the flat output stream."""
        data = json.dumps(record.to_dict(), ensure_ascii=False)
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO records (source_page, data) VALUES (?, ?)",
                (record.source_page, data),
            )

    def set_snapshot(self, snapshot: PageSnapshot) -> None:
        """Store (or replace) the record list of one page."""
        value = json.dumps(snapshot.to_list(), ensure_ascii=False)
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO snapshots (key, page_url, content_type, value, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    content_type = excluded.content_type,
                    updated_at = excluded.updated_at
                """,
                (snapshot.key, snapshot.page_url, _JSON_CONTENT_TYPE, value, int(time())),
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def iter_records(self, source_page: Optional[str] = None) -> Iterator[dict[str, Any]]:
        """Yield stored records in the order they were pushed."""
        if source_page is None:
            rows = self._conn.execute("SELECT data FROM records ORDER BY id").fetchall()
        else:
            rows = self._conn.execute(
                "SELECT data FROM records WHERE source_page = ? ORDER BY id",
                (source_page,),
            ).fetchall()
        for row in rows:
            yield json.loads(row["data"])

    def count_records(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM records").fetchone()
        return row[0] if row else 0

    def get_snapshot(self, page_url: str) -> Optional[list[dict[str, Any]]]:
        """Return the stored record list for *page_url*, or ``None``."""
        row = self._conn.execute(
            "SELECT value FROM snapshots WHERE key = ?", (snapshot_key(page_url),)
        ).fetchone()
        return json.loads(row["value"]) if row else None

    def list_snapshot_keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM snapshots ORDER BY key").fetchall()
        return [row["key"] for row in rows]

    def export_jsonl(self, out: TextIO) -> int:
        """Write every record as one JSON line to *out*; return the count."""
        count = 0
        for record in self.iter_records():
            out.write(json.dumps(record, ensure_ascii=False))
            out.write("\n")
            count += 1
        return count
