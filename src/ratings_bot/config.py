import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigError

DEFAULT_SOURCE_URL = "https://www.benzinga.com/analyst-stock-ratings"


def _env_first(*names: str) -> str:
    for n in names:
        v = os.getenv(n)
        if v and v.strip():
            return v.strip()
    return ""


def _b(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in {
        "1",
        "true",
        "yes",
        "y",
        "on",
    }


def _env_float(name: str, default: float) -> float:
    """
    Read a float from env. Falls back to ``default`` if unset, blank, or
    non-numeric.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip()
    if raw == "" or raw.startswith("#"):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


@dataclass
class Settings:
    # Filtering
    max_days: float = field(default_factory=lambda: _env_float("MAX_DAYS", 3))
    min_price: float = field(default_factory=lambda: _env_float("MIN_PRICE", 5))

    # Sent-set persistence. One fingerprint per line, append-only.
    log_file: Path = field(
        default_factory=lambda: Path(os.getenv("LOG_FILE") or "./sent.log").resolve()
    )

    # Delivery pacing and batching
    rate_limit_ms: int = field(default_factory=lambda: _env_int("RATE_LIMIT_MS", 750))
    max_per_run: int = field(default_factory=lambda: _env_int("MAX_PER_RUN", 200))
    embed_mode: bool = field(default_factory=lambda: _b("EMBED_MODE", True))
    embeds_per_req: int = field(
        default_factory=lambda: _env_int("EMBEDS_PER_REQ", 10)
    )

    # Role mention on big upside/downside moves
    big_rate_threshold: float = field(
        default_factory=lambda: _env_float("BIG_RATE_THRESHOLD", 20)
    )
    alert_role_id: str = field(
        default_factory=lambda: (os.getenv("ALERT_ROLE_ID") or "").strip()
    )

    # Primary Discord webhook; DISCORD_WEBHOOK_URL is accepted as an alias
    webhook_url: str = field(
        default_factory=lambda: _env_first("WEBHOOK_URL", "DISCORD_WEBHOOK_URL")
    )
    webhook_timeout_s: float = field(
        default_factory=lambda: _env_float("WEBHOOK_TIMEOUT_S", 15)
    )

    # Source page
    source_url: str = field(
        default_factory=lambda: _env_first("SOURCE_URL") or DEFAULT_SOURCE_URL
    )
    user_agent: str = field(
        default_factory=lambda: _env_first("USER_AGENT") or "Mozilla/5.0"
    )
    fetch_timeout_s: float = field(
        default_factory=lambda: _env_float("FETCH_TIMEOUT_S", 20)
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_plain: bool = field(default_factory=lambda: _b("LOG_PLAIN", False))
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("DATA_DIR", "data")).resolve()
    )

    def __post_init__(self) -> None:
        # Discord accepts at most 10 embeds per message
        self.embeds_per_req = max(1, min(int(self.embeds_per_req), 10))
        self.max_per_run = max(0, int(self.max_per_run))
        self.rate_limit_ms = max(0, int(self.rate_limit_ms))

    def validate(self) -> "Settings":
        """Raise :class:`ConfigError` when a required value is missing."""
        if not self.webhook_url:
            raise ConfigError("Missing WEBHOOK_URL (or DISCORD_WEBHOOK_URL) in environment")
        return self


SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first use."""
    global SETTINGS
    if SETTINGS is None:
        SETTINGS = Settings()
    return SETTINGS


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global SETTINGS
    SETTINGS = None
