"""Discord message formatting for rating records.

Rich mode posts up to ten embeds per message, each a short description
coloured by the direction of the analyst action.  Plain mode posts the same
text as message content with mentions disabled.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .models import RatingRecord

COLOR_POSITIVE = 0x2ECC71  # green
COLOR_NEGATIVE = 0xE74C3C  # red
COLOR_NEUTRAL = 0x95A5A6  # grey

POSITIVE_RATINGS = ("buy", "overweight", "outperform", "overperform", "sector outperform")
NEGATIVE_RATINGS = ("sell", "underweight", "underperform")
NEUTRAL_RATINGS = ("hold", "neutral", "market perform", "equal weight", "sector perform")


def pick_color(record: RatingRecord) -> int:
    """Embed colour for a record.

    The action text is checked first (downgrade, upgrade, maintains or
    reiterates).  The current rating, i.e. the end of ``"Hold → Buy"``, is
    checked after and overrides it when it matches a known rating.
    """
    color = COLOR_NEUTRAL

    action = (record.rating_change or "").lower()
    if "downgrade" in action:
        color = COLOR_NEGATIVE
    if "upgrade" in action:
        color = COLOR_POSITIVE
    if "maintains" in action or "reiterates" in action:
        color = COLOR_NEUTRAL

    rating = (record.previous_current_rating or "").lower().strip()
    if rating.endswith(POSITIVE_RATINGS):
        color = COLOR_POSITIVE
    if rating.endswith(NEGATIVE_RATINGS):
        color = COLOR_NEGATIVE
    if rating.endswith(NEUTRAL_RATINGS):
        color = COLOR_NEUTRAL

    return color


def _price_display(record: RatingRecord) -> str:
    if record.raw_price_text:
        return record.raw_price_text
    if record.has_price:
        return f"{record.current_price:g}"
    return "—"


def format_line(record: RatingRecord) -> str:
    return (
        f"{record.date_iso}\n"
        f"**${record.ticker}** - {record.company}:  {_price_display(record)}\n"
        f"{record.price_target_change}  {record.rating_change} "
        f"({record.upside_downside}) {record.previous_current_rating}\n"
        f"{record.analyst_name} ({record.analyst_firm}) "
        f"accuracy: {record.analyst_score}\n"
    )


def build_embed(record: RatingRecord) -> Dict[str, Any]:
    return {"description": format_line(record), "color": pick_color(record)}


def mention_for_batch(
    batch: Sequence[RatingRecord], threshold: float, role_id: str
) -> str:
    """Role to mention for a rich batch, or ``""``.

    Only the first record of the batch is looked at.
    """
    if not batch or not role_id:
        return ""
    magnitude = batch[0].upside_magnitude
    if magnitude is None or abs(magnitude) <= threshold:
        return ""
    return role_id


def build_embed_payload(batch: Sequence[RatingRecord], mention: str = "") -> Dict[str, Any]:
    embeds: List[Dict[str, Any]] = [build_embed(r) for r in batch]
    return {"embeds": embeds, "content": f"<@&{mention}>" if mention else ""}


def build_text_payload(record: RatingRecord) -> Dict[str, Any]:
    return {"content": format_line(record), "allowed_mentions": {"parse": []}}
