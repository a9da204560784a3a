"""Server-directory CLI - entry-point for crawling and inspecting results.

Usage:
    python cli/main.py --help

Commands:
    crawl     → crawl directory sites and store every listing found
    extract   → process a single page and print its listings
    results   → export the record stream / inspect page snapshots
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from serverdir.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
import logging
from dataclasses import replace
from typing import List, Optional

import typer

from serverdir.config import ConfigError, Settings, settings
from cli.commands.results import results_app
from cli.rendering import render_records

app = typer.Typer(
    name="serverdir",
    help="Crawl server directory sites and extract their listings.",
    no_args_is_help=True,
)
app.add_typer(results_app, name="results")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def _load_input(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"[crawl] Cannot read input {str(path)!r}: {exc}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        typer.echo(f"[crawl] Input {str(path)!r} must be a JSON object.")
        raise typer.Exit(1)
    return data


def _build_settings(
    input_path: Optional[Path],
    start_urls: Optional[List[str]],
    max_requests: Optional[int],
    use_browser: Optional[bool],
    follow_internal_only: Optional[bool],
    check_invites: Optional[bool],
    concurrency: Optional[int],
    workspace: Optional[Path],
) -> Settings:
    """Layer: environment → input file → command-line options."""
    cfg = settings
    if input_path is not None:
        cfg = cfg.from_input(_load_input(input_path))

    overrides = {}
    if start_urls:
        overrides["start_urls"] = list(start_urls)
    if max_requests is not None:
        overrides["max_requests_per_crawl"] = max_requests
    if use_browser is not None:
        overrides["use_browser"] = use_browser
    if follow_internal_only is not None:
        overrides["follow_internal_only"] = follow_internal_only
    if check_invites is not None:
        overrides["check_invites"] = check_invites
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    if workspace is not None:
        overrides["workspace_dir"] = workspace
    return replace(cfg, **overrides)


# ---------------------------------------------------------------------------
# crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    start_url: Optional[List[str]] = typer.Option(None, "--start-url", "-u", help="Seed URL (repeatable)."),
    input_path: Optional[Path] = typer.Option(None, "--input", help="JSON crawl input file."),
    max_requests: Optional[int] = typer.Option(None, "--max-requests", help="Maximum pages to request."),
    use_browser: Optional[bool] = typer.Option(None, "--use-browser/--no-use-browser", help="Render pages in Chromium."),
    follow_internal_only: Optional[bool] = typer.Option(
        None, "--follow-internal-only/--follow-external", help="Only follow links on the seed's host."
    ),
    check_invites: Optional[bool] = typer.Option(None, "--check-invites/--no-check-invites", help="Probe every invite link."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Pages processed at once."),
    workspace: Optional[Path] = typer.Option(None, "--workspace", help="Directory holding results.db."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Crawl directory sites and store every listing found."""
    from serverdir.crawler import run_crawl

    _configure_logging(verbose)
    cfg = _build_settings(
        input_path, start_url, max_requests, use_browser,
        follow_internal_only, check_invites, concurrency, workspace,
    )
    try:
        cfg.validate()
    except ConfigError as exc:
        typer.echo(f"[crawl] Invalid configuration: {exc}")
        raise typer.Exit(1)

    typer.echo(f"[crawl] Crawling {len(cfg.start_urls)} start URL(s) …")
    stats = run_crawl(cfg)
    typer.echo(
        f"[crawl] Done: {stats.pages_processed} page(s) processed, "
        f"{stats.pages_failed} failed, {stats.records} record(s) stored in {cfg.db_path}"
    )


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------
@app.command("extract")
def extract(
    url: str = typer.Option(..., help="Page URL to process."),
    use_browser: bool = typer.Option(False, "--use-browser/--no-use-browser", help="Render the page in Chromium."),
    check_invites: bool = typer.Option(False, "--check-invites/--no-check-invites", help="Probe every invite link."),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Process one page without following links or storing anything."""
    import httpx
    from playwright.sync_api import Error as PlaywrightError

    from serverdir.crawler import extract_page

    _configure_logging(verbose)
    cfg = replace(settings, use_browser=use_browser, check_invites=check_invites)
    try:
        result = extract_page(url, cfg)
    except (httpx.HTTPError, PlaywrightError) as exc:
        typer.echo(f"[extract] Fetch failed: {exc}")
        raise typer.Exit(1)

    records = [r.to_dict() for r in result.records]
    if as_json:
        typer.echo(json.dumps(records, indent=2, ensure_ascii=False))
        return
    typer.echo(f"[extract] {len(records)} record(s), {len(result.links)} listing link(s) on {result.page_url}")
    if records:
        typer.echo(render_records(records))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
