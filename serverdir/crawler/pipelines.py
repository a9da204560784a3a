"""Crawl strategy selection: the static and rendered page pipelines.

Both pipelines load a page their own way and then hand the resulting
:class:`~serverdir.scraper.dom.DocumentAccess` to the same
:class:`PageProcessor`, which does link discovery, card extraction, optional
invite validation and persistence.  The pipeline is picked once per run by
:func:`select_pipeline`; there is no per-page switching.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from serverdir.config import Settings
from serverdir.scraper.cards import extract_records
from serverdir.scraper.dom import DocumentAccess, RenderedDocument, SoupDocument
from serverdir.scraper.fetcher import fetch_url, is_html, is_spa, rendered_page
from serverdir.scraper.invites import check_invite
from serverdir.scraper.links import discover_links
from serverdir.scraper.models import CrawlTarget, DirectoryRecord, InviteCheck, PageSnapshot
from serverdir.storage.sink import ResultSink

logger = logging.getLogger(__name__)


@dataclass
class PageResult:
    """What one page produced: its records and the follow-up targets."""

    page_url: str
    records: List[DirectoryRecord] = field(default_factory=list)
    links: List[CrawlTarget] = field(default_factory=list)
    error: Optional[str] = None


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Shared per-page processing
# ---------------------------------------------------------------------------

class PageProcessor:
    """Turn one loaded document into stored records and follow-up targets.

    Args:
        sink: Where records and snapshots go.  ``None`` skips persistence
            (used by one-off extraction).
        follow_internal_only: Restrict discovered links to the root host.
        check_invites: Probe every non-empty invite before storing it.
        invite_timeout: Per-request timeout for invite probes, in seconds.
    """

    def __init__(
        self,
        sink: Optional[ResultSink],
        follow_internal_only: bool = True,
        check_invites: bool = False,
        invite_timeout: Optional[float] = None,
    ) -> None:
        self.sink = sink
        self.follow_internal_only = follow_internal_only
        self.check_invites = check_invites
        self.invite_timeout = invite_timeout

    def process(
        self,
        doc: DocumentAccess,
        page_url: str,
        target: CrawlTarget,
        pipeline: str = "static",
    ) -> PageResult:
        """Process one page.  Never raises; failures become warnings."""
        result = PageResult(page_url=page_url)
        try:
            result.links = discover_links(doc, page_url, target, self.follow_internal_only)
            result.records = extract_records(doc, page_url)
            for record in result.records:
                if self.check_invites and record.invite:
                    self._validate(record)
                record.source_page = page_url
                record.extracted_at = _utc_now()
                if self.sink is not None:
                    self.sink.push_record(record)
            self._save_snapshot(page_url, result.records)
        except Exception as exc:  # one bad page must not stop the crawl
            result.error = str(exc) or type(exc).__name__
            logger.warning("Failed to process page %s: %s", page_url, result.error)
            return result

        logger.info(
            "Processed page (%s) %s: %d record(s), %d link(s)",
            pipeline, page_url, len(result.records), len(result.links),
        )
        return result

    def _validate(self, record: DirectoryRecord) -> None:
        """Annotate *record* with its invite check.  Never raises."""
        try:
            record.invite_check = check_invite(record.invite, timeout=self.invite_timeout)
        except Exception as exc:
            record.invite_check = InviteCheck(
                url=record.invite, error=str(exc) or type(exc).__name__
            )
        if record.invite_check.error:
            logger.warning(
                "Invite check failed for %s: %s", record.invite, record.invite_check.error
            )

    def _save_snapshot(self, page_url: str, records: List[DirectoryRecord]) -> None:
        if self.sink is None:
            return
        try:
            self.sink.set_snapshot(PageSnapshot(page_url=page_url, records=records))
        except Exception as exc:
            logger.warning("Failed to save page snapshot for %s: %s", page_url, exc)


# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------

class Pipeline(ABC):
    """Loads a page for a :class:`CrawlTarget` and runs the processor on it."""

    def __init__(self, processor: PageProcessor, settings: Settings) -> None:
        self.processor = processor
        self.settings = settings

    @property
    @abstractmethod
    def name(self) -> str:
        """Short pipeline name used in log lines."""

    @abstractmethod
    def handle(self, target: CrawlTarget) -> PageResult:
        """Load and process *target*.

        Fetch and navigation errors propagate to the crawl runtime.
        """


class StaticPipeline(Pipeline):
    """Fetch HTML with httpx and query it through BeautifulSoup."""

    @property
    def name(self) -> str:
        return "static"

    def handle(self, target: CrawlTarget) -> PageResult:
        raw = fetch_url(target.url, timeout=self.settings.request_timeout)
        if not is_html(raw.content_type):
            logger.debug("Skipping non-HTML response (%s): %s", raw.content_type, raw.url)
            return PageResult(page_url=raw.url)
        if is_spa(raw.html):
            logger.info(
                "Page looks client-rendered, the browser pipeline may find more: %s", raw.url
            )
        return self.processor.process(SoupDocument(raw.html), raw.url, target, self.name)


class RenderedPipeline(Pipeline):
    """Render the page in headless Chromium and query the live DOM."""

    @property
    def name(self) -> str:
        return "browser"

    def handle(self, target: CrawlTarget) -> PageResult:
        with rendered_page(
            target.url,
            timeout=self.settings.request_timeout,
            idle_timeout=self.settings.network_idle_timeout,
        ) as page:
            page_url = page.url or target.url
            return self.processor.process(RenderedDocument(page), page_url, target, self.name)


def select_pipeline(settings: Settings, sink: Optional[ResultSink]) -> Pipeline:
    """Build the pipeline chosen by ``settings.use_browser`` for the whole run."""
    processor = PageProcessor(
        sink,
        follow_internal_only=settings.follow_internal_only,
        check_invites=settings.check_invites,
        invite_timeout=settings.invite_timeout,
    )
    if settings.use_browser:
        return RenderedPipeline(processor, settings)
    return StaticPipeline(processor, settings)
