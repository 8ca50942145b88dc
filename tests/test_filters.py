import math
from datetime import timedelta

from ratings_bot.filters import days_ago, is_eligible, is_recent, meets_price_floor
from ratings_bot.models import RatingRecord
from tests.fixtures.ratings_html import NOW


def _rec(date_iso="2025-01-15", price=12.5):
    return RatingRecord(date_iso=date_iso, ticker="ABC", current_price=price)


def test_days_ago_bare_date_is_midnight_utc():
    assert days_ago("2025-01-15", NOW) == 0.5


def test_days_ago_unparseable_is_infinite():
    assert math.isinf(days_ago("garbage!!", NOW))
    assert math.isinf(days_ago("", NOW))
    assert math.isinf(days_ago(None, NOW))


def test_days_ago_respects_timezone_offset():
    # 07:00 in New York (UTC-5) is 12:00 UTC
    assert days_ago("2025-01-15T07:00:00-05:00", NOW) == 0


def test_recency_boundary_exact_max_days_included():
    exactly = (NOW - timedelta(days=3)).isoformat()
    one_second_over = (NOW - timedelta(days=3, seconds=1)).isoformat()
    a_day_older = (NOW - timedelta(days=4)).isoformat()
    assert is_recent(_rec(date_iso=exactly), 3, NOW)
    assert not is_recent(_rec(date_iso=one_second_over), 3, NOW)
    assert not is_recent(_rec(date_iso=a_day_older), 3, NOW)


def test_price_floor_boundary():
    assert meets_price_floor(_rec(price=5.0), 5)
    assert not meets_price_floor(_rec(price=4.99), 5)
    assert not meets_price_floor(_rec(price=None), 5)
    assert not meets_price_floor(_rec(price=float("nan")), 5)


def test_is_eligible_requires_both():
    assert is_eligible(_rec(), 3, 5, NOW)
    assert not is_eligible(_rec(price=1.0), 3, 5, NOW)
    assert not is_eligible(_rec(date_iso="2024-12-01"), 3, 5, NOW)
    assert not is_eligible(_rec(date_iso="garbage!!"), 3, 5, NOW)
