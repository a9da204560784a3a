"""Invite liveness checks.

A HEAD probe is cheap but many servers answer it wrongly, so a HEAD status
of 400 or above is treated as inconclusive and the URL is fetched again with
GET.  Network failures never raise; they end up in :attr:`InviteCheck.error`.
"""

from __future__ import annotations

import logging

import httpx

from serverdir.config import settings
from serverdir.scraper.models import InviteCheck

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; ServerDir-Bot/1.0; +https://github.com/serverdir)"
    )
}


def check_invite(url: str, timeout: float | None = None) -> InviteCheck:
    """Probe *url* and return its status and post-redirect URL.

    Args:
        url: Absolute invite URL.
        timeout: Per-request timeout in seconds.  Defaults to
            ``settings.invite_timeout``.
    """
    result = InviteCheck(url=url)
    try:
        with httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=timeout if timeout is not None else settings.invite_timeout,
            follow_redirects=True,
        ) as client:
            response = client.head(url)
            result.status = response.status_code
            result.final_url = str(response.url) or url
            if response.status_code >= 400:
                logger.debug("HEAD %s -> %s, retrying with GET", url, response.status_code)
                response = client.get(url)
                result.status = response.status_code
                result.final_url = str(response.url) or result.final_url
    # malformed hosts surface from the idna codec as UnicodeError (a ValueError)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        result.error = str(exc) or type(exc).__name__
    return result
