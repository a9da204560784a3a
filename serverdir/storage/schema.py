"""Database initialisation for the result store.

``init_db(conn)`` is idempotent - safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

_SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    source_page TEXT NOT NULL,
    data        TEXT NOT NULL,
    created_at  INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
);

CREATE INDEX IF NOT EXISTS idx_records_source_page ON records (source_page);

CREATE TABLE IF NOT EXISTS snapshots (
    key          TEXT PRIMARY KEY,
    page_url     TEXT NOT NULL,
    content_type TEXT NOT NULL DEFAULT 'application/json',
    value        TEXT NOT NULL,
    updated_at   INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER))
);
"""


def init_db(conn: sqlite3.Connection) -> None:
    """Create the record stream and snapshot tables if they are missing.

    Every DDL statement uses ``IF NOT EXISTS`` so calling this repeatedly on
    the same database is safe.
    """
    conn.executescript(_SCHEMA)
