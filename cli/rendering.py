"""Utilities for rendering directory records in the CLI."""

from __future__ import annotations

from typing import Any, Dict, List


def render_record(record: Dict[str, Any]) -> str:
    """Render one record as a single summary line.

    Example::

        Chat Hub  https://discord.gg/abc123  members=1234 online=56  [gaming, chill]
    """
    name = record.get("server_name") or "(unnamed)"
    parts = [name, record.get("invite") or "-"]

    counts = []
    if record.get("members_count"):
        counts.append(f"members={record['members_count']}")
    if record.get("online_count"):
        counts.append(f"online={record['online_count']}")
    if counts:
        parts.append(" ".join(counts))

    tags = record.get("tags") or []
    if tags:
        parts.append("[" + ", ".join(tags) + "]")

    if "invite_status" in record:
        status = record.get("invite_status")
        if record.get("invite_error"):
            parts.append(f"invite: error ({record['invite_error']})")
        else:
            parts.append(f"invite: HTTP {status}")

    return "  ".join(parts)


def render_records(records: List[Dict[str, Any]]) -> str:
    """Render *records* one per line, indented under a command prefix."""
    return "\n".join(f"  {render_record(r)}" for r in records)
