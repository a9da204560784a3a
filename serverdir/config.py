"""Centralised settings for the server-directory crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported), and a crawl input
object can be overlaid on top with :meth:`Settings.from_input`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

DEFAULT_START_URLS = ["https://top.gg/servers", "https://disboard.org/servers"]

_TRUE_VALUES = ("1", "true", "yes", "y", "on")


class ConfigError(ValueError):
    """Raised when the crawl configuration is unusable."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _coerce_start_urls(value: Any) -> list[str]:
    """Accept plain strings or ``{"url": ...}`` request objects."""
    if isinstance(value, (str, dict)):
        value = [value]
    urls: list[str] = []
    for item in value or []:
        if isinstance(item, dict):
            item = item.get("url", "")
        if isinstance(item, str) and item.strip():
            urls.append(item.strip())
    return urls


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Crawl input
    # ------------------------------------------------------------------
    start_urls: list[str] = field(
        default_factory=lambda: _env_list("START_URLS", DEFAULT_START_URLS)
    )
    max_requests_per_crawl: int = field(
        default_factory=lambda: int(os.environ.get("MAX_REQUESTS_PER_CRAWL", "500"))
    )
    use_browser: bool = field(
        default_factory=lambda: _env_bool("USE_BROWSER", False)
    )
    follow_internal_only: bool = field(
        default_factory=lambda: _env_bool("FOLLOW_INTERNAL_ONLY", True)
    )
    check_invites: bool = field(
        default_factory=lambda: _env_bool("CHECK_INVITES", False)
    )
    concurrency: int = field(
        default_factory=lambda: int(os.environ.get("CONCURRENCY", "10"))
    )

    # ------------------------------------------------------------------
    # Timeouts (seconds)
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    invite_timeout: float = field(
        default_factory=lambda: float(os.environ.get("INVITE_TIMEOUT", "15.0"))
    )
    network_idle_timeout: float = field(
        default_factory=lambda: float(os.environ.get("NETWORK_IDLE_TIMEOUT", "5.0"))
    )

    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SERVERDIR_WORKSPACE", Path.home() / ".serverdir_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite result database."""
        return self.workspace_dir / "results.db"

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Crawl input overlay
    # ------------------------------------------------------------------
    def from_input(self, data: Mapping[str, Any]) -> "Settings":
        """Return a copy of these settings overlaid with a crawl input object.

        Only the camelCase keys of the crawl input are recognised; unknown
        keys are ignored.  ``self`` is left untouched.
        """
        overrides: dict[str, Any] = {}
        if "startUrls" in data:
            overrides["start_urls"] = _coerce_start_urls(data["startUrls"])
        if "maxRequestsPerCrawl" in data:
            overrides["max_requests_per_crawl"] = int(data["maxRequestsPerCrawl"])
        if "useBrowser" in data:
            overrides["use_browser"] = _coerce_bool(data["useBrowser"])
        if "followInternalOnly" in data:
            overrides["follow_internal_only"] = _coerce_bool(data["followInternalOnly"])
        if "checkInvites" in data:
            overrides["check_invites"] = _coerce_bool(data["checkInvites"])
        if "concurrency" in data:
            overrides["concurrency"] = int(data["concurrency"])
        return replace(self, **overrides)

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the crawl cannot start with these values."""
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.max_requests_per_crawl < 0:
            raise ConfigError(
                f"maxRequestsPerCrawl must be >= 0, got {self.max_requests_per_crawl}"
            )
        if not self.start_urls:
            raise ConfigError("at least one start URL is required")


# Module-level singleton - import this everywhere:
#   from serverdir.config import settings
settings = Settings()
