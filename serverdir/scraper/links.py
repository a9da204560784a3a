"""Link discovery and origin scoping for directory listing pages."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Sequence
from urllib.parse import urlparse, urlunparse

from serverdir.scraper.dom import DocumentAccess
from serverdir.scraper.models import CrawlTarget

# Listing pages on the directories we know about live under these paths.
LISTING_GLOBS: tuple[str, ...] = (
    "**/servers/**",
    "**/servers*",
    "**/server/**",
    "**/guilds/**",
    "**/list/**",
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

@lru_cache(maxsize=64)
def _glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """Translate a URL glob: ``**`` spans slashes, ``*`` and ``?`` do not."""
    parts: List[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**", i):
            parts.append(".*")
            i += 2
            continue
        char = pattern[i]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("^" + "".join(parts) + "$")


def _host(url: str) -> str:
    try:
        return urlparse(url).netloc.lower()
    except ValueError:
        return ""


def _strip_fragment(url: str) -> str:
    u = urlparse(url)
    return urlunparse((u.scheme, u.netloc, u.path, u.params, u.query, ""))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def matches_listing_pattern(url: str, globs: Sequence[str] = LISTING_GLOBS) -> bool:
    """Return ``True`` if *url* matches any of *globs*."""
    return any(_glob_to_regex(glob).match(url) for glob in globs)


def in_scope(url: str, root_host: str) -> bool:
    """Return ``True`` if *url* is on exactly *root_host*.

    Malformed URLs and an unknown root host are treated as out of scope.
    """
    if not root_host:
        return False
    return _host(url) == root_host.lower()


def discover_links(
    doc: DocumentAccess,
    page_url: str,
    target: CrawlTarget,
    follow_internal_only: bool,
    globs: Sequence[str] = LISTING_GLOBS,
) -> List[CrawlTarget]:
    """Return follow-up targets for the listing links found on *doc*.

    Candidates are resolved against *page_url* and must match one of
    *globs*.  With *follow_internal_only* they must also sit on the root host
    inherited from *target*, so a redirect to another host cannot widen the
    crawl.  Duplicates are left for the frontier to drop.
    """
    root_host = target.root_host or _host(target.url)
    found: List[CrawlTarget] = []
    for anchor in doc.query_all(doc.root, "a[href]"):
        url = doc.resolve_url(page_url, doc.attr(anchor, "href"))
        if not url:
            continue
        try:
            url = _strip_fragment(url)
        except ValueError:
            continue
        if not matches_listing_pattern(url, globs):
            continue
        if follow_internal_only and not in_scope(url, root_host):
            continue
        found.append(CrawlTarget(url=url, root_host=root_host))
    return found
