from __future__ import annotations

from typing import Optional

import requests

from .errors import FetchError
from .logging_utils import get_logger

log = get_logger("fetcher")


def fetch_ratings_page(
    url: str,
    user_agent: str = "Mozilla/5.0",
    *,
    timeout: float = 20,
    session: Optional[requests.Session] = None,
) -> str:
    """
    GET the ratings page once and return its HTML.

    There is no retry here: a network error, timeout or non-2xx status raises
    :class:`FetchError` and the run stops before anything is processed.
    """
    log.info("fetch_start url=%s", url)
    headers = {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml",
    }
    try:
        resp = (session or requests).get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        log.error("fetch_failed url=%s err=%s", url, e.__class__.__name__)
        raise FetchError(f"GET {url} failed: {e}") from e

    status = getattr(resp, "status_code", None)
    if status is None or not (200 <= status < 300):
        reason = getattr(resp, "reason", None)
        log.error("fetch_failed url=%s status=%s reason=%s", url, status, reason)
        raise FetchError(f"GET {url} returned HTTP {status}", status=status, reason=reason)

    html = resp.text or ""
    log.info("fetch_ok status=%s bytes=%d", status, len(html))
    return html
