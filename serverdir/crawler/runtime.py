"""Host crawl runtime: frontier, request budget and page concurrency.

The runtime owns the queue of :class:`CrawlTarget` objects.  It drops
duplicate URLs, stops dequeuing once ``max_requests`` pages have been
started, and runs up to ``concurrency`` page handlers at once in a
``ThreadPoolExecutor``.  Pages already in flight when the budget runs out
are allowed to finish.  A handler that raises is logged and counted as a
failed request; the crawl carries on.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, Set
from urllib.parse import urldefrag

from serverdir.crawler.pipelines import PageResult
from serverdir.scraper.models import CrawlTarget

logger = logging.getLogger(__name__)

PageHandler = Callable[[CrawlTarget], PageResult]


@dataclass
class CrawlStats:
    requests: int = 0
    pages_processed: int = 0
    pages_failed: int = 0
    records: int = 0


def _unique_key(url: str) -> str:
    return urldefrag(url.strip())[0]


class CrawlRuntime:
    """Breadth-first frontier with a request budget and a worker pool."""

    def __init__(self, handler: PageHandler, max_requests: int, concurrency: int) -> None:
        self._handler = handler
        self._max_requests = max_requests
        self._concurrency = max(1, concurrency)
        self._queue: Deque[CrawlTarget] = deque()
        self._seen: Set[str] = set()
        self.stats = CrawlStats()

    def enqueue(self, targets: Iterable[CrawlTarget]) -> int:
        """Queue *targets* not seen before; return how many were added."""
        added = 0
        for target in targets:
            key = _unique_key(target.url)
            if not key or key in self._seen:
                continue
            self._seen.add(key)
            self._queue.append(target)
            added += 1
        return added

    def _budget_left(self) -> bool:
        return self.stats.requests < self._max_requests

    def run(self, seeds: Iterable[CrawlTarget]) -> CrawlStats:
        """Crawl from *seeds* until the frontier is empty or the budget is spent."""
        self.enqueue(seeds)
        in_flight: Dict[Future, CrawlTarget] = {}

        with ThreadPoolExecutor(max_workers=self._concurrency) as pool:
            while True:
                while self._queue and len(in_flight) < self._concurrency and self._budget_left():
                    target = self._queue.popleft()
                    self.stats.requests += 1
                    in_flight[pool.submit(self._handler, target)] = target

                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    target = in_flight.pop(future)
                    self._collect(target, future)

        if self._queue:
            logger.info(
                "Request budget of %d reached, %d queued page(s) left unvisited",
                self._max_requests, len(self._queue),
            )
        return self.stats

    def _collect(self, target: CrawlTarget, future: Future) -> None:
        try:
            result: PageResult = future.result()
        except Exception as exc:
            self.stats.pages_failed += 1
            logger.warning("Request failed for %s: %s", target.url, exc)
            return

        if result.error:
            self.stats.pages_failed += 1
        else:
            self.stats.pages_processed += 1
        self.stats.records += len(result.records)
        self.enqueue(result.links)
