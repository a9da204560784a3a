"""High-level entry points for a crawl.

``run_crawl`` wires together the result store, the pipeline selected by the
settings and the crawl runtime.  ``extract_page`` processes a single URL
without following links or storing anything.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from serverdir.config import Settings, settings as default_settings
from serverdir.crawler.pipelines import PageResult, select_pipeline
from serverdir.crawler.runtime import CrawlRuntime, CrawlStats
from serverdir.scraper.models import CrawlTarget
from serverdir.storage import ResultSink, get_connection, init_db

logger = logging.getLogger(__name__)


def seed_targets(start_urls: List[str]) -> List[CrawlTarget]:
    """Build seed targets, each scoped to its own host."""
    return [CrawlTarget.seed(url) for url in start_urls]


def run_crawl(
    config: Optional[Settings] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> CrawlStats:
    """Crawl the configured start URLs and store every extracted record.

    Opens its own DB connection when *conn* is not given and closes it on
    exit (success or error).

    Args:
        config: Settings for this run.  Defaults to the module-level
            ``settings``.
        conn: An already open result database connection.

    Raises:
        ConfigError: If *config* fails validation.
    """
    cfg = config or default_settings
    cfg.validate()

    own_conn = conn is None
    if own_conn:
        cfg.ensure_workspace()
        conn = get_connection(cfg.db_path)
    init_db(conn)

    try:
        sink = ResultSink(conn)
        pipeline = select_pipeline(cfg, sink)
        runtime = CrawlRuntime(
            pipeline.handle,
            max_requests=cfg.max_requests_per_crawl,
            concurrency=cfg.concurrency,
        )
        logger.info(
            "Starting %s crawl of %d start URL(s), budget %d request(s), concurrency %d",
            pipeline.name, len(cfg.start_urls), cfg.max_requests_per_crawl, cfg.concurrency,
        )
        stats = runtime.run(seed_targets(cfg.start_urls))
        logger.info(
            "Crawl finished: %d processed, %d failed, %d record(s)",
            stats.pages_processed, stats.pages_failed, stats.records,
        )
        return stats
    finally:
        if own_conn:
            conn.close()


def extract_page(url: str, config: Optional[Settings] = None) -> PageResult:
    """Load and process one page without persisting or following links.

    Fetch and navigation errors propagate to the caller.
    """
    cfg = config or default_settings
    pipeline = select_pipeline(cfg, sink=None)
    return pipeline.handle(CrawlTarget.seed(url))
