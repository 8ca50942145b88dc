"""HTML extraction for the analyst ratings table.

The page renders one ``tr.benzinga-core-table-row`` per analyst action, with
a ``td.table-cell-<field>`` per column.  Layout varies from row to row (some
rows lack a price column, some have no analyst name), so every row is parsed
on its own: a row without a date or ticker is dropped, any other missing cell
just yields an empty string, and nothing in one row can stop the scan of the
rest of the document.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .logging_utils import get_logger
from .models import RatingRecord

log = get_logger("extractor")

ROW_SELECTOR = "tbody.benzinga-core-table-tbody tr.benzinga-core-table-row"

# Looks like a price: optional dollar sign, optional space, then a digit
_PRICE_LIKE = re.compile(r"^\$?\s?\d")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_ARROW = "→"


def parse_money(text: Optional[str]) -> Optional[float]:
    """Return the numeric value of a noisy currency string, or None.

    Every character other than digits, ``.`` and ``-`` is dropped before
    conversion, so ``"$1,234.50"`` becomes ``1234.5``.
    """
    cleaned = _NON_NUMERIC.sub("", str(text or ""))
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _clean(el: Tag) -> str:
    """Cell text with inner whitespace collapsed to single spaces.

    Newlines inside a cell would otherwise split a fingerprint across two
    lines of the sent log.
    """
    return " ".join(el.get_text(" ").split())


def _text(row: Tag, selector: str) -> str:
    el = row.select_one(selector)
    if el is None:
        return ""
    return _clean(el)


def _date_text(row: Tag) -> str:
    cell = row.select_one("td.table-cell-date")
    if cell is None:
        return ""
    title = " ".join((cell.get("title") or "").split())
    return title or _clean(cell)


def _price_text(row: Tag) -> str:
    price = _text(row, "td.table-cell-current_price")
    if price:
        return price
    # No dedicated price cell: take the first cell that looks like a price,
    # skipping rating transitions such as "$10 → $12".  The date cell also
    # starts with a digit and is never a price.
    for td in row.find_all("td"):
        if "table-cell-date" in (td.get("class") or []):
            continue
        txt = _clean(td)
        if _PRICE_LIKE.match(txt) and _ARROW not in txt:
            return txt
    return ""


def parse_row(row: Tag) -> Optional[RatingRecord]:
    """Build a record from one table row, or None when date/ticker are missing."""
    date_iso = _date_text(row)
    ticker = _text(row, "td.table-cell-ticker")
    if not date_iso or not ticker:
        return None

    raw_price = _price_text(row)
    return RatingRecord(
        date_iso=date_iso,
        ticker=ticker,
        company=_text(row, "td.table-cell-name"),
        current_price=parse_money(raw_price),
        upside_downside=_text(row, "td.table-cell-upside_downside"),
        analyst_firm=_text(row, "td.table-cell-analyst"),
        analyst_name=_text(
            row, "td.table-cell-analyst_name .bz-ag-table__analyst-name"
        ),
        analyst_score=_text(
            row, "td.table-cell-analyst_name .bz-ag-table__analyst-smart-score"
        ),
        price_target_change=_text(row, "td.table-cell-pt_prior"),
        rating_change=_text(row, "td.table-cell-action_company"),
        previous_current_rating=_text(row, "td.table-cell-rating_current"),
        raw_price_text=raw_price,
    )


def extract_rows(html: str) -> List[RatingRecord]:
    """Parse the ratings page into records, in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    rows = soup.select(ROW_SELECTOR)
    out: List[RatingRecord] = []
    skipped = 0
    for idx, tr in enumerate(rows):
        try:
            rec = parse_row(tr)
        except (AttributeError, TypeError, ValueError) as e:
            log.debug("row_parse_failed index=%d err=%s", idx, e)
            rec = None
        if rec is None:
            skipped += 1
            continue
        out.append(rec)
    log.info("extract_done rows=%d records=%d skipped=%d", len(rows), len(out), skipped)
    return out
