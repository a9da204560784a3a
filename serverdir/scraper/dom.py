"""Document-access capability shared by the static and rendered substrates.

Card location, field extraction and link discovery only ever talk to a
:class:`DocumentAccess`.  Two implementations exist:

* :class:`SoupDocument` wraps a BeautifulSoup parse tree (static pipeline).
* :class:`RenderedDocument` wraps a live Playwright page; every query is
  evaluated in the page through its element handles (rendered pipeline).

Both expose text as the node's full text content and attributes as raw
strings, so the same selectors give the same answers on either substrate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup


def resolve_url(base: str, href: Optional[str]) -> str:
    """Resolve *href* against *base* and return an absolute http(s) URL.

    Returns ``""`` for empty, malformed, or non-web (``javascript:``,
    ``mailto:`` …) references so callers never store a relative URL.
    """
    href = (href or "").strip()
    if not href:
        return ""
    try:
        url = urljoin(base, href)
        parsed = urlparse(url)
    except ValueError:
        return ""
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ""
    return url


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class DocumentAccess(ABC):
    """Narrow element-query interface over one loaded document."""

    @property
    @abstractmethod
    def root(self) -> Any:
        """The node that queries over the whole document start from."""

    @abstractmethod
    def query_all(self, node: Any, selector: str) -> List[Any]:
        """Return descendants of *node* matching *selector*, in document order."""

    @abstractmethod
    def text(self, node: Any) -> str:
        """Return the full text content of *node* (``""`` when it has none)."""

    @abstractmethod
    def strings(self, node: Any) -> List[str]:
        """Return the non-blank text nodes under *node*, stripped, in document order."""

    @abstractmethod
    def attr(self, node: Any, name: str) -> Optional[str]:
        """Return attribute *name* of *node*, or ``None`` if absent."""

    def query_first(self, node: Any, selector: str) -> Any:
        """Return the first descendant of *node* matching *selector*, or ``None``."""
        found = self.query_all(node, selector)
        return found[0] if found else None

    def resolve_url(self, base: str, href: Optional[str]) -> str:
        return resolve_url(base, href)


# ---------------------------------------------------------------------------
# Static parse tree
# ---------------------------------------------------------------------------

class SoupDocument(DocumentAccess):
    """BeautifulSoup-backed document for statically fetched HTML."""

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html or "", "html.parser")

    @property
    def root(self) -> BeautifulSoup:
        return self._soup

    def query_all(self, node: Any, selector: str) -> List[Any]:
        return list(node.select(selector))

    def query_first(self, node: Any, selector: str) -> Any:
        return node.select_one(selector)

    def text(self, node: Any) -> str:
        return node.get_text()

    def strings(self, node: Any) -> List[str]:
        return list(node.stripped_strings)

    def attr(self, node: Any, name: str) -> Optional[str]:
        value = node.get(name)
        if isinstance(value, list):
            # multi-valued attributes (class, rel) come back as lists
            return " ".join(value)
        return value


# ---------------------------------------------------------------------------
# Live rendered DOM
# ---------------------------------------------------------------------------

_TEXT_NODES_JS = """
node => {
    const out = [];
    const walker = document.createTreeWalker(node, NodeFilter.SHOW_TEXT);
    while (walker.nextNode()) {
        const text = walker.currentNode.nodeValue.trim();
        if (text) out.push(text);
    }
    return out;
}
"""


class RenderedDocument(DocumentAccess):
    """Playwright-backed document evaluated against the live page DOM.

    Works with the sync API: *page* is a ``playwright.sync_api.Page`` and
    nodes are ``ElementHandle`` objects.
    """

    def __init__(self, page: Any) -> None:
        self._page = page
        self._root: Any = None

    @property
    def root(self) -> Any:
        if self._root is None:
            self._root = self._page.query_selector(":root")
        return self._root

    def query_all(self, node: Any, selector: str) -> List[Any]:
        if node is None:
            return []
        return list(node.query_selector_all(selector))

    def query_first(self, node: Any, selector: str) -> Any:
        if node is None:
            return None
        return node.query_selector(selector)

    def text(self, node: Any) -> str:
        return node.text_content() or ""

    def strings(self, node: Any) -> List[str]:
        return list(node.evaluate(_TEXT_NODES_JS) or [])

    def attr(self, node: Any, name: str) -> Optional[str]:
        return node.get_attribute(name)
