"""Data models for the directory scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote, urlparse


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    content_type: str = "text/html"


@dataclass
class CrawlTarget:
    """A URL queued for crawling plus the host that scopes its follow-ups.

    ``root_host`` is inherited unchanged from the seed the target descends
    from; it is never recomputed from the target's own URL.
    """

    url: str
    root_host: str = ""

    @classmethod
    def seed(cls, url: str) -> "CrawlTarget":
        """Build a seed target whose root host is its own host."""
        try:
            host = urlparse(url).netloc.lower()
        except ValueError:
            host = ""
        return cls(url=url, root_host=host)


@dataclass
class InviteCheck:
    """Outcome of probing one invite URL."""

    url: str
    status: Optional[int] = None
    final_url: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DirectoryRecord:
    """One directory listing entry, normalised to the canonical schema."""

    server_name: str = ""
    invite: str = ""
    members_count: str = ""
    online_count: str = ""
    tags: List[str] = field(default_factory=list)
    short_description: str = ""
    source_url: str = ""
    source_page: str = ""
    extracted_at: str = ""
    invite_check: Optional[InviteCheck] = None

    def is_listing(self) -> bool:
        """Return ``True`` unless the card carried neither a name nor an invite."""
        return bool(self.server_name or self.invite)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to the output schema.

        The ``invite_*`` keys are only present when validation ran.
        """
        out: dict[str, Any] = {
            "server_name": self.server_name,
            "invite": self.invite,
            "members_count": self.members_count,
            "online_count": self.online_count,
            "tags": list(self.tags),
            "short_description": self.short_description,
            "source_url": self.source_url,
            "source_page": self.source_page,
            "extracted_at": self.extracted_at,
        }
        if self.invite_check is not None:
            out["invite_status"] = self.invite_check.status
            out["invite_final_url"] = self.invite_check.final_url
            out["invite_error"] = self.invite_check.error
        return out


@dataclass
class PageSnapshot:
    """Every record extracted from one page, keyed by that page's URL."""

    page_url: str
    records: List[DirectoryRecord] = field(default_factory=list)

    @property
    def key(self) -> str:
        return snapshot_key(self.page_url)

    def to_list(self) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self.records]


def snapshot_key(page_url: str) -> str:
    """Return the storage key for the snapshot of *page_url*."""
    return f"servers/{quote(page_url, safe='')}"
