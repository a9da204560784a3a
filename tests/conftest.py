"""Shared fixtures.

Playwright is never launched in the test suite.  The rendered substrate is
exercised through ``FakePage`` / ``FakeElementHandle``, which expose the
subset of the Playwright sync API that ``RenderedDocument`` calls, backed by
a BeautifulSoup tree.
"""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest
from bs4 import BeautifulSoup

from serverdir.storage import ResultSink, get_connection, init_db


class FakeElementHandle:
    def __init__(self, tag) -> None:
        self._tag = tag

    def query_selector_all(self, selector: str) -> list["FakeElementHandle"]:
        return [FakeElementHandle(t) for t in self._tag.select(selector)]

    def query_selector(self, selector: str):
        found = self._tag.select_one(selector)
        return FakeElementHandle(found) if found is not None else None

    def text_content(self):
        return self._tag.get_text()

    def evaluate(self, expression: str):
        # the only script RenderedDocument evaluates collects stripped text nodes
        return list(self._tag.stripped_strings)

    def get_attribute(self, name: str):
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value


class FakePage:
    def __init__(self, html: str, url: str) -> None:
        self._soup = BeautifulSoup(html, "html.parser")
        self.url = url

    def query_selector(self, selector: str):
        if selector == ":root":
            return FakeElementHandle(self._soup)
        found = self._soup.select_one(selector)
        return FakeElementHandle(found) if found is not None else None


@pytest.fixture()
def make_fake_page():
    return FakePage


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the result schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def sink(conn: sqlite3.Connection) -> ResultSink:
    return ResultSink(conn)
