from __future__ import annotations

import math
import time
from typing import Any, Optional

import requests  # runtime dep

from .errors import DeliveryError, RetriesExhaustedError
from .logging_utils import get_logger

log = get_logger("discord_transport")

MAX_ATTEMPTS = 5
MIN_RETRY_MS = 1000
# Used when a 429 body does not say how long to wait
DEFAULT_RETRY_AFTER_S = 2.0


def mask_webhook(url: Optional[str]) -> str:
    """Return a scrubbed identifier for a Discord webhook (avoid leaking secrets)."""
    if not url:
        return "<unset>"
    tail = str(url).rstrip("/").rsplit("/", 1)[-1]
    return f"...{tail[-8:]}"


def retry_after_ms(resp: Any) -> int:
    """
    Milliseconds to wait after a 429, from the JSON body's ``retry_after``
    (seconds), never less than one second.
    """
    retry_after = DEFAULT_RETRY_AFTER_S
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("retry_after") is not None:
        try:
            retry_after = float(body["retry_after"])
        except (TypeError, ValueError):
            retry_after = DEFAULT_RETRY_AFTER_S
    if not math.isfinite(retry_after):
        retry_after = DEFAULT_RETRY_AFTER_S
    return max(MIN_RETRY_MS, int(math.ceil(retry_after * 1000)))


def post_webhook(
    url: str,
    payload: dict,
    session=None,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    timeout: float = 15,
) -> int:
    """
    POST ``payload`` to the webhook, waiting out 429s.

    A throttled attempt sleeps for the server's ``retry_after`` and resends the
    same payload, up to ``max_attempts`` in total.  Any other non-2xx response
    or a network error raises :class:`DeliveryError` at once.  Returns the
    status code of the successful response.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            resp = (session or requests).post(url, json=payload, timeout=timeout)
        except requests.RequestException as e:
            log.error(
                "webhook_post_failed webhook=%s err=%s",
                mask_webhook(url),
                e.__class__.__name__,
            )
            raise DeliveryError(str(e)) from e

        status = getattr(resp, "status_code", None)
        if status is not None and 200 <= status < 300:
            return status

        if status == 429:
            wait_ms = retry_after_ms(resp)
            log.warning(
                "rate_limited status=429 wait_ms=%d attempt=%d/%d",
                wait_ms,
                attempt,
                max_attempts,
            )
            time.sleep(wait_ms / 1000.0)
            continue

        reason = getattr(resp, "reason", None)
        text = (getattr(resp, "text", "") or "")[:500]
        log.error(
            "webhook_rejected webhook=%s status=%s reason=%s body=%s",
            mask_webhook(url),
            status,
            reason,
            text,
        )
        raise DeliveryError(text or f"HTTP {status}", status=status, reason=reason)

    log.error("webhook_retries_exhausted attempts=%d", max_attempts)
    raise RetriesExhaustedError(max_attempts)
