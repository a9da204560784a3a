"""Tests for listing-link discovery and origin scoping."""

from __future__ import annotations

from serverdir.scraper.dom import SoupDocument
from serverdir.scraper.links import discover_links, in_scope, matches_listing_pattern
from serverdir.scraper.models import CrawlTarget

_HTML = """\
<html><body>
  <a href="https://b.example/servers/1">Other host</a>
  <a href="https://a.example/servers/2">Same host</a>
  <a href="/list/3#top">Relative list</a>
  <a href="https://a.example/about">About</a>
  <a href="http://[::1">Broken</a>
  <a href="mailto:team@a.example">Mail</a>
  <a>No href</a>
</body></html>
"""


def _urls(targets) -> list[str]:
    return [t.url for t in targets]


class TestMatchesListingPattern:
    def test_listing_paths_match(self) -> None:
        assert matches_listing_pattern("https://top.gg/servers")
        assert matches_listing_pattern("https://top.gg/servers?page=2")
        assert matches_listing_pattern("https://top.gg/servers/tag/music")
        assert matches_listing_pattern("https://disboard.org/server/123")
        assert matches_listing_pattern("https://example.com/guilds/9")
        assert matches_listing_pattern("https://example.com/list/top")

    def test_other_paths_do_not_match(self) -> None:
        assert not matches_listing_pattern("https://top.gg/bot/123")
        assert not matches_listing_pattern("https://top.gg/")
        assert not matches_listing_pattern("https://top.gg/server")

    def test_custom_globs(self) -> None:
        assert matches_listing_pattern("https://x.io/dir/a", globs=["**/dir/*"])
        assert not matches_listing_pattern("https://x.io/dir/a/b", globs=["**/dir/*"])


class TestInScope:
    def test_exact_host_only(self) -> None:
        assert in_scope("https://a.example/x", "a.example")
        assert not in_scope("https://sub.a.example/x", "a.example")
        assert not in_scope("https://b.example/x", "a.example")

    def test_host_comparison_ignores_case(self) -> None:
        assert in_scope("https://A.Example/x", "a.example")

    def test_unknown_root_host_rejects(self) -> None:
        assert not in_scope("https://a.example/x", "")


class TestDiscoverLinks:
    def test_internal_only_excludes_other_hosts(self) -> None:
        target = CrawlTarget.seed("https://a.example/servers")
        found = discover_links(SoupDocument(_HTML), target.url, target, True)
        assert _urls(found) == [
            "https://a.example/servers/2",
            "https://a.example/list/3",
        ]

    def test_root_host_is_inherited(self) -> None:
        target = CrawlTarget.seed("https://a.example/servers")
        found = discover_links(SoupDocument(_HTML), target.url, target, True)
        assert all(t.root_host == "a.example" for t in found)

    def test_external_allowed_when_not_restricted(self) -> None:
        target = CrawlTarget.seed("https://a.example/servers")
        found = discover_links(SoupDocument(_HTML), target.url, target, False)
        assert "https://b.example/servers/1" in _urls(found)
        assert "https://a.example/about" not in _urls(found)

    def test_redirected_page_does_not_widen_scope(self) -> None:
        """A page that redirected to another host still scopes to the seed host."""
        target = CrawlTarget(url="https://a.example/servers", root_host="a.example")
        html = (
            '<a href="/servers/next">Next</a>'
            '<a href="https://a.example/servers/home">Home</a>'
        )
        found = discover_links(SoupDocument(html), "https://c.example/servers", target, True)
        assert _urls(found) == ["https://a.example/servers/home"]

    def test_seed_without_root_host_falls_back_to_its_url(self) -> None:
        target = CrawlTarget(url="https://a.example/servers")
        found = discover_links(SoupDocument(_HTML), target.url, target, True)
        assert "https://a.example/servers/2" in _urls(found)
        assert all(t.root_host == "a.example" for t in found)

    def test_duplicates_are_kept_for_the_frontier(self) -> None:
        html = '<a href="/servers/1">a</a><a href="/servers/1">b</a>'
        target = CrawlTarget.seed("https://a.example/")
        found = discover_links(SoupDocument(html), target.url, target, True)
        assert _urls(found) == ["https://a.example/servers/1"] * 2
