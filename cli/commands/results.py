"""Commands for reading back stored crawl results."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from serverdir.config import settings
from serverdir.storage import ResultSink, get_connection, init_db

from cli.rendering import render_records

results_app = typer.Typer(help="Inspect and export stored results.", no_args_is_help=True)


def _open_sink(db: Optional[Path]) -> tuple:
    conn = get_connection(db or settings.db_path)
    init_db(conn)
    return conn, ResultSink(conn)


@results_app.command("export")
def results_export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="JSON-lines file (stdout when omitted)."),
    db: Optional[Path] = typer.Option(None, "--db", help="Result database path."),
) -> None:
    """Write the flat record stream as JSON lines."""
    conn, sink = _open_sink(db)
    try:
        if output is None:
            sink.export_jsonl(sys.stdout)
            return
        with output.open("w", encoding="utf-8") as fh:
            count = sink.export_jsonl(fh)
    finally:
        conn.close()
    typer.echo(f"[export] Wrote {count} record(s) to {output}", err=True)


@results_app.command("snapshot")
def results_snapshot(
    url: str = typer.Argument(..., help="Page URL whose snapshot to show."),
    db: Optional[Path] = typer.Option(None, "--db", help="Result database path."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Show the records stored for one page."""
    conn, sink = _open_sink(db)
    try:
        records = sink.get_snapshot(url)
    finally:
        conn.close()

    if records is None:
        typer.echo(f"[snapshot] No snapshot stored for {url!r}.")
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(json.dumps(records, indent=2, ensure_ascii=False))
        return
    typer.echo(f"[snapshot] {len(records)} record(s) from {url}")
    if records:
        typer.echo(render_records(records))


@results_app.command("pages")
def results_pages(
    db: Optional[Path] = typer.Option(None, "--db", help="Result database path."),
) -> None:
    """List the snapshot keys of every processed page."""
    conn, sink = _open_sink(db)
    try:
        keys = sink.list_snapshot_keys()
    finally:
        conn.close()
    if not keys:
        typer.echo("[pages] No snapshots stored.")
        return
    for key in keys:
        typer.echo(f"  {key}")
