"""Scraper package - page access, card extraction, link discovery, invite checks."""

from serverdir.scraper.cards import extract_record, extract_records, locate_cards
from serverdir.scraper.dom import DocumentAccess, RenderedDocument, SoupDocument
from serverdir.scraper.fetcher import fetch_url, rendered_page
from serverdir.scraper.invites import check_invite
from serverdir.scraper.links import discover_links
from serverdir.scraper.models import CrawlTarget, DirectoryRecord, InviteCheck, PageSnapshot, RawPage

__all__ = [
    "fetch_url",
    "rendered_page",
    "locate_cards",
    "extract_record",
    "extract_records",
    "discover_links",
    "check_invite",
    "DocumentAccess",
    "SoupDocument",
    "RenderedDocument",
    "CrawlTarget",
    "DirectoryRecord",
    "InviteCheck",
    "PageSnapshot",
    "RawPage",
]
