"""Recency and price-floor predicates.

Both are pure functions of the record and a reference time; nothing here
touches the network or the sent-set.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dtparse

from .models import RatingRecord

SECONDS_PER_DAY = 86400.0


def parse_published(date_str: Optional[str]) -> Optional[datetime]:
    """Parse a publication stamp into an aware UTC datetime.

    A bare date (``2024-05-01``) means midnight UTC, and naive datetimes are
    taken as UTC.  Returns None when the text cannot be parsed.
    """
    text = (date_str or "").strip()
    if not text:
        return None
    try:
        dt = dtparse.parse(text)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_ago(date_str: Optional[str], now: Optional[datetime] = None) -> float:
    """Age of ``date_str`` in (fractional) days; ``inf`` when unparseable."""
    published = parse_published(date_str)
    if published is None:
        return math.inf
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - published).total_seconds() / SECONDS_PER_DAY


def is_recent(
    record: RatingRecord, max_days: float, now: Optional[datetime] = None
) -> bool:
    return days_ago(record.date_iso, now) <= max_days


def meets_price_floor(record: RatingRecord, min_price: float) -> bool:
    return record.has_price and record.current_price >= min_price


def is_eligible(
    record: RatingRecord,
    max_days: float,
    min_price: float,
    now: Optional[datetime] = None,
) -> bool:
    """Both predicates must hold for the record to be considered for delivery."""
    return is_recent(record, max_days, now) and meets_price_floor(record, min_price)
