"""SQLite connection factory for the result store.

Usage::

    from serverdir.storage.connection import get_connection

    conn = get_connection()
    conn.execute("SELECT COUNT(*) FROM records")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from serverdir.config import settings


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    The connection is shared by the crawl's worker threads, so it is opened
    with ``check_same_thread=False``; :class:`~serverdir.storage.sink.ResultSink`
    serialises writes.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.
            ``":memory:"`` is accepted for tests.

    Returns:
        A configured :class:`sqlite3.Connection` with ``row_factory`` set to
        :class:`sqlite3.Row` so columns can be accessed by name.
    """
    path = db_path or settings.db_path

    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn
