"""Exception types raised by the ratings pipeline.

Everything fatal for a run derives from :class:`RatingsBotError` so the
runner can turn it into a diagnostic and a non-zero exit code.
"""

from __future__ import annotations

from typing import Optional


class RatingsBotError(Exception):
    """Base class for unrecovered pipeline errors."""


class ConfigError(RatingsBotError):
    """Required configuration is missing or unusable."""


class FetchError(RatingsBotError):
    """The ratings page could not be retrieved."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.message = message


class DeliveryError(RatingsBotError):
    """The webhook rejected a payload with a non-throttling response."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.message = message


class RetriesExhaustedError(DeliveryError):
    """Every attempt was throttled."""

    def __init__(self, attempts: int, status: Optional[int] = 429) -> None:
        super().__init__(
            f"gave up after {attempts} attempts", status=status, reason="Too Many Requests"
        )
        self.attempts = attempts
