"""
Sent Store (flat file)

Purpose
-------
Remember which rating events were already delivered so a later run, or a
retry after a crash, never posts them twice.

Design
------
- One fingerprint per line, append-only, no header, never rewritten.
- Loaded once per run; a missing file is an empty set.
- ``record_sent`` is called only after the delivery carrying the record
  succeeded, and the line is flushed to disk before it returns.  Once a
  fingerprint is on disk the record is never reprocessed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Set, Union

from .logging_utils import get_logger
from .models import RatingRecord

log = get_logger("dedupe")

FINGERPRINT_SEP = "|"


def fingerprint(record: RatingRecord) -> str:
    """Return the dedup key of a rating event.

    Built from the seven fields that identify one analyst action; identical
    fields in two different runs yield the same key.
    """
    return FINGERPRINT_SEP.join(
        [
            record.date_iso,
            record.ticker,
            record.analyst_firm,
            record.analyst_name,
            record.previous_current_rating,
            record.rating_change,
            record.price_target_change,
        ]
    )


class SentStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._sent: Set[str] = set()
        self._loaded = False

    def load(self) -> Set[str]:
        """Seed the in-memory set from disk and return a copy of it."""
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                self._sent = {line.strip() for line in fh if line.strip()}
        except FileNotFoundError:
            self._sent = set()
        self._loaded = True
        log.info("sent_store_loaded path=%s entries=%d", self.path, len(self._sent))
        return set(self._sent)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def contains(self, key: str) -> bool:
        self._ensure_loaded()
        return key in self._sent

    def is_new(self, record: RatingRecord) -> bool:
        return not self.contains(fingerprint(record))

    def record_sent(self, key: str) -> None:
        """Append ``key`` to the log and the in-memory set."""
        self._ensure_loaded()
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as fh:
            fh.write(key + "\n")
            fh.flush()
            os.fsync(fh.fileno())
        self._sent.add(key)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._sent)
