"""Card location and field extraction for server-directory pages.

Directory sites mark up their listings very differently, so both halves of
this module are heuristics:

* :func:`locate_cards` picks the elements that most likely hold one listing
  each.  A generic pass over common container markers is tried first; a
  narrower selector for known directory card markup only runs when the
  generic pass finds nothing at all.
* :func:`extract_record` maps one card to a :class:`DirectoryRecord`.  Every
  field has an ordered list of rules; the first rule producing a non-empty
  value wins and a field with no match simply stays empty.

All queries go through :class:`~serverdir.scraper.dom.DocumentAccess`, so the
results are the same for a static parse tree and a live rendered page.
"""

from __future__ import annotations

import re
from typing import Any, Callable, List, Sequence

from serverdir.scraper.dom import DocumentAccess
from serverdir.scraper.models import DirectoryRecord

# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------
GENERIC_CARD_SELECTOR = "article, .card, .server-card, .server, .list-item, .media"
FALLBACK_CARD_SELECTOR = ".serverCard, .server-card"

_CARD_KEYWORDS = ("discord", "invite")
_DISCORD_ANCHOR_SELECTOR = 'a[href*="discord"]'
_TAG_LIST_MARKER_SELECTOR = ".server-tags"

NAME_SELECTOR = "h3, .card__title, .server-card__name, .media-heading, .title"
INVITE_ANCHOR_SELECTOR = 'a[href*="discord.gg"], a[href*="discord.com/invite"]'
INVITE_DOMAINS = ("discord.gg", "discord.com/invite", "discordapp.com/invite")
MEMBERS_SELECTOR = ".members, .server-count, .server-member-count"
ONLINE_SELECTOR = ".online, .server-online-count"
TAG_SELECTOR = ".tag, .tags a, .server-tags a"
DESCRIPTION_SELECTOR = ".desc, .server-description, .card__content p"
LINK_SELECTOR = "a[href]"

_NON_DIGITS = re.compile(r"[^0-9]")
_COUNT_NUMBER = r"(\d[\d,.'\u00a0\u202f]*)"
_MEMBERS_TEXT = re.compile(_COUNT_NUMBER + r"\s*members?\b", re.IGNORECASE)
_ONLINE_TEXT = re.compile(_COUNT_NUMBER + r"\s*online\b", re.IGNORECASE)

# (doc, card, base_url) -> value; "" means "no match, try the next rule"
Rule = Callable[[DocumentAccess, Any, str], str]


# ---------------------------------------------------------------------------
# Card locator
# ---------------------------------------------------------------------------

def _looks_like_listing(doc: DocumentAccess, node: Any) -> bool:
    text = doc.text(node).lower()
    if any(keyword in text for keyword in _CARD_KEYWORDS):
        return True
    if doc.query_first(node, _DISCORD_ANCHOR_SELECTOR) is not None:
        return True
    return doc.query_first(node, _TAG_LIST_MARKER_SELECTOR) is not None


def locate_cards(doc: DocumentAccess) -> List[Any]:
    """Return candidate listing cards of *doc* in document order.

    The fallback selector is consulted only when the filtered generic pass
    is empty; it never tops up a partial generic result.  An empty list is a
    valid answer for a page without listings.
    """
    generic = [
        node
        for node in doc.query_all(doc.root, GENERIC_CARD_SELECTOR)
        if _looks_like_listing(doc, node)
    ]
    if generic:
        return generic
    return doc.query_all(doc.root, FALLBACK_CARD_SELECTOR)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _first_text(doc: DocumentAccess, card: Any, selector: str) -> str:
    node = doc.query_first(card, selector)
    if node is None:
        return ""
    return doc.text(node).strip()


def _digits(text: str) -> str:
    return _NON_DIGITS.sub("", text)


def _first_of(rules: Sequence[Rule], doc: DocumentAccess, card: Any, base_url: str) -> str:
    for rule in rules:
        value = rule(doc, card, base_url)
        if value:
            return value
    return ""


# ---------------------------------------------------------------------------
# Per-field rules
# ---------------------------------------------------------------------------

def _name_from_heading(doc: DocumentAccess, card: Any, base_url: str) -> str:
    return _first_text(doc, card, NAME_SELECTOR)


def _invite_from_invite_anchor(doc: DocumentAccess, card: Any, base_url: str) -> str:
    anchor = doc.query_first(card, INVITE_ANCHOR_SELECTOR)
    if anchor is None:
        return ""
    return doc.resolve_url(base_url, doc.attr(anchor, "href"))


def _invite_from_data_attribute(doc: DocumentAccess, card: Any, base_url: str) -> str:
    raw = doc.attr(card, "data-invite")
    if not raw:
        holder = doc.query_first(card, "[data-invite]")
        raw = doc.attr(holder, "data-invite") if holder is not None else None
    return doc.resolve_url(base_url, raw)


def _invite_from_any_anchor(doc: DocumentAccess, card: Any, base_url: str) -> str:
    for anchor in doc.query_all(card, LINK_SELECTOR):
        href = doc.attr(anchor, "href") or ""
        if any(domain in href for domain in INVITE_DOMAINS):
            resolved = doc.resolve_url(base_url, href)
            if resolved:
                return resolved
    return ""


def _count_rules(selector: str, pattern: "re.Pattern[str]") -> List[Rule]:
    def from_element(doc: DocumentAccess, card: Any, base_url: str) -> str:
        return _digits(_first_text(doc, card, selector))

    def from_text(doc: DocumentAccess, card: Any, base_url: str) -> str:
        # text nodes are joined with a space so adjacent elements never merge digits
        match = pattern.search(" ".join(doc.strings(card)))
        return _digits(match.group(1)) if match else ""

    return [from_element, from_text]


def _description_from_element(doc: DocumentAccess, card: Any, base_url: str) -> str:
    return _first_text(doc, card, DESCRIPTION_SELECTOR)


def _source_from_first_link(doc: DocumentAccess, card: Any, base_url: str) -> str:
    anchor = doc.query_first(card, LINK_SELECTOR)
    if anchor is None:
        return ""
    return doc.resolve_url(base_url, doc.attr(anchor, "href"))


NAME_RULES: List[Rule] = [_name_from_heading]
INVITE_RULES: List[Rule] = [
    _invite_from_invite_anchor,
    _invite_from_data_attribute,
    _invite_from_any_anchor,
]
MEMBERS_RULES: List[Rule] = _count_rules(MEMBERS_SELECTOR, _MEMBERS_TEXT)
ONLINE_RULES: List[Rule] = _count_rules(ONLINE_SELECTOR, _ONLINE_TEXT)
DESCRIPTION_RULES: List[Rule] = [_description_from_element]
SOURCE_RULES: List[Rule] = [_source_from_first_link]


def _tags(doc: DocumentAccess, card: Any) -> List[str]:
    tags: List[str] = []
    for node in doc.query_all(card, TAG_SELECTOR):
        text = doc.text(node).strip()
        if text:
            tags.append(text)
    return tags


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_record(doc: DocumentAccess, card: Any, base_url: str) -> DirectoryRecord:
    """Map one *card* to a record; missing markup leaves fields empty."""
    return DirectoryRecord(
        server_name=_first_of(NAME_RULES, doc, card, base_url),
        invite=_first_of(INVITE_RULES, doc, card, base_url),
        members_count=_first_of(MEMBERS_RULES, doc, card, base_url),
        online_count=_first_of(ONLINE_RULES, doc, card, base_url),
        tags=_tags(doc, card),
        short_description=_first_of(DESCRIPTION_RULES, doc, card, base_url),
        source_url=_first_of(SOURCE_RULES, doc, card, base_url),
    )


def extract_records(doc: DocumentAccess, base_url: str) -> List[DirectoryRecord]:
    """Locate every card on *doc* and keep the ones that name a server or invite."""
    records: List[DirectoryRecord] = []
    for card in locate_cards(doc):
        record = extract_record(doc, card, base_url)
        if record.is_listing():
            records.append(record)
    return records
