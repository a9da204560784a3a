"""Tests for the document-access substrates and URL resolution."""

from __future__ import annotations

import pytest

from serverdir.scraper.cards import extract_records, locate_cards
from serverdir.scraper.dom import RenderedDocument, SoupDocument, resolve_url
from serverdir.scraper.links import discover_links
from serverdir.scraper.models import CrawlTarget

_PAGE_URL = "https://disboard.org/servers/tag/gaming"

_HTML = """\
<html><body>
  <a href="/servers/tag/gaming?page=2">Next page</a>
  <div class="server">
    <div class="server-card__name">Pixel Lounge</div>
    <a href="/server/123">Open</a>
    <a href="https://discord.com/invite/pixel">Join</a>
    <span class="server-online-count">89 Online</span>
    <ul class="tags"><a>retro</a><a>art</a></ul>
  </div>
  <div class="media">
    <h4 class="media-heading">Study Room</h4>
    <p class="server-description">Quiet discord for students</p>
    <div class="server-count">2 345</div>
  </div>
</body></html>
"""


class TestResolveUrl:
    def test_relative_href(self) -> None:
        assert resolve_url("https://top.gg/servers", "/server/1") == "https://top.gg/server/1"

    def test_absolute_href_unchanged(self) -> None:
        assert resolve_url("https://top.gg/", "https://discord.gg/x") == "https://discord.gg/x"

    @pytest.mark.parametrize("href", ["", "   ", None, "mailto:a@b.c", "javascript:void(0)"])
    def test_unusable_href_is_empty(self, href) -> None:
        assert resolve_url("https://top.gg/", href) == ""

    def test_malformed_href_is_empty(self) -> None:
        assert resolve_url("https://top.gg/", "http://[::1") == ""


class TestSoupDocument:
    def test_attr_joins_multi_valued_attributes(self) -> None:
        doc = SoupDocument('<div class="a b"></div>')
        node = doc.query_first(doc.root, "div")
        assert doc.attr(node, "class") == "a b"

    def test_missing_attribute_is_none(self) -> None:
        doc = SoupDocument("<a>x</a>")
        assert doc.attr(doc.query_first(doc.root, "a"), "href") is None

    def test_query_first_without_match_is_none(self) -> None:
        doc = SoupDocument("<p>x</p>")
        assert doc.query_first(doc.root, "article") is None


class TestSubstrateParity:
    """The rendered substrate must give exactly the static substrate's answers."""

    def test_same_cards(self, make_fake_page) -> None:
        static = SoupDocument(_HTML)
        rendered = RenderedDocument(make_fake_page(_HTML, _PAGE_URL))
        assert [static.text(c) for c in locate_cards(static)] == [
            rendered.text(c) for c in locate_cards(rendered)
        ]

    def test_same_records(self, make_fake_page) -> None:
        static = [r.to_dict() for r in extract_records(SoupDocument(_HTML), _PAGE_URL)]
        rendered = [
            r.to_dict()
            for r in extract_records(RenderedDocument(make_fake_page(_HTML, _PAGE_URL)), _PAGE_URL)
        ]
        assert static == rendered
        assert [r["server_name"] for r in static] == ["Pixel Lounge", "Study Room"]
        assert static[0]["invite"] == "https://discord.com/invite/pixel"
        assert static[0]["online_count"] == "89"
        assert static[0]["tags"] == ["retro", "art"]
        assert static[1]["members_count"] == "2345"

    def test_same_links(self, make_fake_page) -> None:
        target = CrawlTarget.seed(_PAGE_URL)
        static = discover_links(SoupDocument(_HTML), _PAGE_URL, target, True)
        rendered = discover_links(
            RenderedDocument(make_fake_page(_HTML, _PAGE_URL)), _PAGE_URL, target, True
        )
        assert static == rendered
        assert "https://disboard.org/servers/tag/gaming?page=2" in [t.url for t in static]

    def test_same_text_nodes(self, make_fake_page) -> None:
        html = "<div><span>Top 10</span><span> 1,234 members </span><b>  </b></div>"
        static = SoupDocument(html)
        rendered = RenderedDocument(make_fake_page(html, _PAGE_URL))
        assert static.strings(static.query_first(static.root, "div")) == ["Top 10", "1,234 members"]
        assert rendered.strings(rendered.query_first(rendered.root, "div")) == [
            "Top 10",
            "1,234 members",
        ]

    def test_rendered_query_on_missing_node(self, make_fake_page) -> None:
        doc = RenderedDocument(make_fake_page("<p>x</p>", _PAGE_URL))
        assert doc.query_all(None, "a") == []
        assert doc.query_first(None, "a") is None
