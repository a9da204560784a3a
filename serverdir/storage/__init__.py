"""Result storage package.

Public re-exports so callers can write::

    from serverdir.storage import ResultSink, get_connection, init_db
"""

from serverdir.storage.connection import get_connection
from serverdir.storage.schema import init_db
from serverdir.storage.sink import ResultSink

__all__ = ["get_connection", "init_db", "ResultSink"]
