"""Page access for the two crawl substrates.

``fetch_url`` downloads HTML with ``httpx`` for the static pipeline.
``rendered_page`` opens the URL in headless Chromium for the rendered
pipeline and yields the live page while the browser is still running.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator

import httpx

from serverdir.config import settings
from serverdir.scraper.models import RawPage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SPA / JS-rendered page detection heuristics
# ---------------------------------------------------------------------------
_SPA_PATTERNS = [
    re.compile(r'<div[^>]+id=["\'](?:root|app|__next)["\']', re.IGNORECASE),
    re.compile(r"window\.__NEXT_DATA__", re.IGNORECASE),
    re.compile(r"window\.__NUXT__", re.IGNORECASE),
    re.compile(r"ng-version=", re.IGNORECASE),
    re.compile(r"data-reactroot", re.IGNORECASE),
]

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; ServerDir-Bot/1.0; +https://github.com/serverdir)"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def is_spa(html: str) -> bool:
    """Return ``True`` if *html* looks like a JavaScript SPA that needs rendering."""
    for pattern in _SPA_PATTERNS:
        if pattern.search(html):
            return True
    # Very little visible text relative to total HTML size.  Script and style
    # bodies are removed first so their source doesn't count as visible text.
    no_scripts = re.sub(
        r"<(script|style)[^>]*>.*?</(script|style)>", "", html, flags=re.IGNORECASE | re.DOTALL
    )
    stripped = re.sub(r"<[^>]+>", "", no_scripts).strip()
    return len(html) > 2000 and len(stripped) < 200


def is_html(content_type: str) -> bool:
    ctype = (content_type or "").lower()
    # servers that omit the header usually still send HTML
    return not ctype or "text/html" in ctype or "application/xhtml" in ctype


def fetch_url(url: str, timeout: float | None = None) -> RawPage:
    """Fetch *url* and return a :class:`RawPage` for the final (post-redirect) URL.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.RequestError: On network failure.
    """
    with httpx.Client(
        headers=_DEFAULT_HEADERS,
        timeout=timeout if timeout is not None else settings.request_timeout,
        follow_redirects=True,
    ) as client:
        response = client.get(url)
        response.raise_for_status()

    return RawPage(
        url=str(response.url),
        html=response.text,
        status_code=response.status_code,
        content_type=response.headers.get("content-type", ""),
    )


@contextmanager
def rendered_page(
    url: str,
    timeout: float | None = None,
    idle_timeout: float | None = None,
) -> Iterator[Any]:
    """Load *url* in headless Chromium and yield the live ``Page``.

    After navigation the page gets up to *idle_timeout* seconds to reach
    network quiescence; a page that never settles is used as it is.

    Playwright is imported lazily so the static pipeline and the test suite
    don't need a browser installed.
    """
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    nav_timeout = timeout if timeout is not None else settings.request_timeout
    idle = idle_timeout if idle_timeout is not None else settings.network_idle_timeout

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=True)
        try:
            page = browser.new_page(user_agent=_DEFAULT_HEADERS["User-Agent"])
            page.goto(url, timeout=int(nav_timeout * 1000), wait_until="domcontentloaded")
            try:
                page.wait_for_load_state("networkidle", timeout=int(idle * 1000))
            except PlaywrightTimeoutError:
                logger.debug("Network did not go idle within %.1fs: %s", idle, url)
            yield page
        finally:
            browser.close()
