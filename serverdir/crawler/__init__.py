"""Crawl orchestration - pipeline selection, frontier and run entry points."""

from serverdir.crawler.pipelines import (
    PageProcessor,
    PageResult,
    RenderedPipeline,
    StaticPipeline,
    select_pipeline,
)
from serverdir.crawler.runner import extract_page, run_crawl
from serverdir.crawler.runtime import CrawlRuntime, CrawlStats

__all__ = [
    "PageProcessor",
    "PageResult",
    "StaticPipeline",
    "RenderedPipeline",
    "select_pipeline",
    "CrawlRuntime",
    "CrawlStats",
    "run_crawl",
    "extract_page",
]
