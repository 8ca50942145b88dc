# -*- coding: utf-8 -*-
"""Ratings bot runner.

One invocation is one pass over the ratings page::

    fetch -> extract -> filter -> dedupe -> cap/batch -> deliver

Fingerprints are appended to the sent log right after the delivery that
carried them succeeds, so a crash mid-run never re-sends what already went
out and never loses what did not.
"""

from __future__ import annotations

# stdlib
import argparse
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

# Load .env early so config is available to subsequent imports.
from dotenv import load_dotenv

# If DOTENV_FILE is set, load that; otherwise default to .env
_env_file = os.getenv("DOTENV_FILE")
if _env_file:
    load_dotenv(_env_file)
else:
    load_dotenv()

import requests  # noqa: E402

from .batching import cap, chunked  # noqa: E402
from .config import Settings, get_settings  # noqa: E402
from .dedupe import SentStore, fingerprint  # noqa: E402
from .discord_transport import mask_webhook, post_webhook  # noqa: E402
from .embeds import (  # noqa: E402
    build_embed_payload,
    build_text_payload,
    mention_for_batch,
)
from .errors import RatingsBotError  # noqa: E402
from .extractor import extract_rows  # noqa: E402
from .fetcher import fetch_ratings_page  # noqa: E402
from .filters import is_eligible  # noqa: E402
from .logging_utils import get_logger, setup_logging  # noqa: E402
from .models import RatingRecord  # noqa: E402

log = get_logger("runner")

Candidate = Tuple[str, RatingRecord]


@dataclass
class RunResult:
    checked: int
    eligible: int
    attempted: int
    sent: int


def select_candidates(
    records: List[RatingRecord],
    store: SentStore,
    settings: Settings,
    now: Optional[datetime] = None,
) -> List[Candidate]:
    """Records that pass both filters and were never sent, in page order."""
    out: List[Candidate] = []
    seen_this_page = set()
    for rec in records:
        if not is_eligible(rec, settings.max_days, settings.min_price, now):
            continue
        key = fingerprint(rec)
        if store.contains(key) or key in seen_this_page:
            continue
        seen_this_page.add(key)
        out.append((key, rec))
    return out


def _throttle(settings: Settings) -> None:
    if settings.rate_limit_ms > 0:
        time.sleep(settings.rate_limit_ms / 1000.0)


def deliver(
    candidates: List[Candidate],
    store: SentStore,
    settings: Settings,
    session=None,
) -> int:
    """Post every candidate and mark it sent. Returns the number delivered."""
    sent = 0
    if settings.embed_mode:
        for batch in chunked(candidates, settings.embeds_per_req):
            records = [rec for _, rec in batch]
            mention = mention_for_batch(
                records, settings.big_rate_threshold, settings.alert_role_id
            )
            payload = build_embed_payload(records, mention)
            post_webhook(
                settings.webhook_url,
                payload,
                session,
                timeout=settings.webhook_timeout_s,
            )
            for key, _ in batch:
                store.record_sent(key)
                sent += 1
            log.info(
                "batch_sent size=%d mention=%s total=%d",
                len(batch),
                bool(mention),
                sent,
            )
            _throttle(settings)
    else:
        for key, rec in candidates:
            post_webhook(
                settings.webhook_url,
                build_text_payload(rec),
                session,
                timeout=settings.webhook_timeout_s,
            )
            store.record_sent(key)
            sent += 1
            log.info("message_sent ticker=%s total=%d", rec.ticker, sent)
            _throttle(settings)
    return sent


def run_once(
    settings: Optional[Settings] = None,
    *,
    session=None,
    now: Optional[datetime] = None,
) -> RunResult:
    """Run the whole pipeline once. Raises :class:`RatingsBotError` on failure."""
    settings = (settings or get_settings()).validate()
    log.info(
        "run_start webhook=%s embed_mode=%s max_days=%s min_price=%s",
        mask_webhook(settings.webhook_url),
        settings.embed_mode,
        settings.max_days,
        settings.min_price,
    )

    html = fetch_ratings_page(
        settings.source_url,
        settings.user_agent,
        timeout=settings.fetch_timeout_s,
        session=session,
    )
    records = extract_rows(html)

    store = SentStore(settings.log_file)
    store.load()

    candidates = select_candidates(records, store, settings, now)
    limited = cap(candidates, settings.max_per_run)
    if len(limited) < len(candidates):
        log.info(
            "run_capped eligible=%d attempted=%d deferred=%d",
            len(candidates),
            len(limited),
            len(candidates) - len(limited),
        )

    sent = deliver(limited, store, settings, session)
    return RunResult(
        checked=len(records),
        eligible=len(candidates),
        attempted=len(limited),
        sent=sent,
    )


def _describe_error(err: RatingsBotError) -> str:
    parts = [
        str(getattr(err, "status", "") or ""),
        str(getattr(err, "reason", "") or ""),
        str(getattr(err, "message", "") or err),
    ]
    return " ".join(p for p in parts if p)


def main(argv: List[str] | None = None) -> int:
    """
    Entry point for the ratings bot.

    Returns 0 when the run completes (even with nothing to send) and 1 on
    missing configuration or any unrecovered pipeline error.
    """
    ap = argparse.ArgumentParser(
        description="Relay fresh analyst rating changes to a Discord webhook"
    )
    ap.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    ap.add_argument(
        "--plain-logs",
        action="store_true",
        help="Human-readable console logs (same as LOG_PLAIN=1)",
    )
    args = ap.parse_args(argv)

    settings = get_settings()
    setup_logging(
        level=args.log_level,
        plain=True if args.plain_logs else None,
        settings=settings,
    )

    with requests.Session() as session:
        try:
            result = run_once(settings, session=session)
        except RatingsBotError as e:
            log.error("run_failed err=%s detail=%s", e.__class__.__name__, _describe_error(e))
            print(f"ERROR: {_describe_error(e)}", file=sys.stderr)
            return 1
        except Exception as e:
            log.error("run_crashed err=%s", e, exc_info=True)
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    print(
        f"[done] checked {result.checked} rows; sent={result.sent}; "
        f"minPrice={settings.min_price:g}, maxDays={settings.max_days:g}"
    )
    log.info(
        "run_end checked=%d eligible=%d sent=%d",
        result.checked,
        result.eligible,
        result.sent,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
