"""Tests for page access: SPA / content-type heuristics and the browser loader.

Playwright is replaced by ``MagicMock`` objects, so no browser is launched.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from serverdir.scraper.fetcher import is_html, is_spa, rendered_page

_URL = "https://top.gg/servers"

_SIMPLE_HTML = """\
<html><body>
  <h1>Top servers</h1>
  <p>Browse the most popular communities, sorted by members and activity.</p>
</body></html>
"""


def _fake_playwright(page: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Return ``(sync_playwright replacement, browser)`` serving *page*."""
    browser = MagicMock()
    browser.new_page.return_value = page
    pw = MagicMock()
    pw.chromium.launch.return_value = browser
    factory = MagicMock()
    factory.return_value.__enter__.return_value = pw
    factory.return_value.__exit__.return_value = False
    return factory, browser


class TestIsSpa:
    @pytest.mark.parametrize(
        "html",
        [
            '<html><body><div id="root"></div></body></html>',
            '<html><body><div id="__next"></div></body></html>',
            "<html><body><script>window.__NUXT__ = {}</script></body></html>",
            '<html ng-version="17.0.0"><body>content</body></html>',
            '<html><body><div data-reactroot=""></div></body></html>',
        ],
    )
    def test_framework_markers(self, html: str) -> None:
        assert is_spa(html) is True

    def test_normal_page_not_spa(self) -> None:
        assert is_spa(_SIMPLE_HTML) is False

    def test_large_page_with_no_visible_text(self) -> None:
        html = "<html><body><script>" + "x" * 2500 + "</script><p> </p></body></html>"
        assert is_spa(html) is True


class TestIsHtml:
    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("text/html; charset=utf-8", True),
            ("application/xhtml+xml", True),
            ("TEXT/HTML", True),
            ("", True),
            ("application/json", False),
            ("image/png", False),
        ],
    )
    def test_content_types(self, content_type: str, expected: bool) -> None:
        assert is_html(content_type) is expected


class TestRenderedPage:
    def test_yields_page_and_closes_browser(self) -> None:
        page = MagicMock()
        factory, browser = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with rendered_page(_URL, timeout=2.0, idle_timeout=0.5) as loaded:
                assert loaded is page

        page.goto.assert_called_once_with(_URL, timeout=2000, wait_until="domcontentloaded")
        page.wait_for_load_state.assert_called_once_with("networkidle", timeout=500)
        browser.close.assert_called_once()

    def test_network_idle_timeout_is_ignored(self) -> None:
        page = MagicMock()
        page.wait_for_load_state.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded.")
        factory, browser = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with rendered_page(_URL, timeout=2.0, idle_timeout=0.5) as loaded:
                assert loaded is page

        browser.close.assert_called_once()

    def test_browser_closed_when_body_raises(self) -> None:
        page = MagicMock()
        factory, browser = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(RuntimeError):
                with rendered_page(_URL, timeout=2.0, idle_timeout=0.5):
                    raise RuntimeError("selector blew up")

        browser.close.assert_called_once()

    def test_navigation_error_propagates(self) -> None:
        page = MagicMock()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 2000ms exceeded.")
        factory, browser = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(PlaywrightTimeoutError):
                with rendered_page(_URL, timeout=2.0, idle_timeout=0.5):
                    pass

        browser.close.assert_called_once()
