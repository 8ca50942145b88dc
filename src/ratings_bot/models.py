from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

_SIGNED_NUMBER = re.compile(r"[-+−]?\d+(?:[.,]\d+)?")


@dataclass(frozen=True)
class RatingRecord:
    """
    One analyst action scraped from a row of the ratings table.

    ``date_iso`` and ``ticker`` are always non-empty; the extractor drops rows
    without them.  ``current_price`` is ``None`` when the price text could not
    be parsed, and ``raw_price_text`` keeps what the page showed so the alert
    can echo it verbatim.  The remaining text fields are whatever the cell
    contained, possibly empty.
    """

    date_iso: str
    ticker: str
    company: str = ""
    current_price: Optional[float] = None
    upside_downside: str = ""
    analyst_firm: str = ""
    analyst_name: str = ""
    analyst_score: str = ""
    price_target_change: str = ""
    rating_change: str = ""
    previous_current_rating: str = ""
    raw_price_text: str = ""

    @property
    def has_price(self) -> bool:
        return self.current_price is not None and math.isfinite(self.current_price)

    @property
    def upside_magnitude(self) -> Optional[float]:
        """
        First signed number in ``upside_downside`` (``"25.32%"`` -> 25.32).

        Returns None when the cell holds no number.
        """
        m = _SIGNED_NUMBER.search(self.upside_downside or "")
        if not m:
            return None
        token = m.group(0).replace("−", "-").replace(",", ".")
        try:
            value = float(token)
        except ValueError:
            return None
        return value if math.isfinite(value) else None
