"""Log formatting and handler setup for the ratings bot.

Call sites pass context through ``extra=``; both formatters render those
attributes after the message, as JSON fields or as ``key=value`` pairs.
"""

import json
import logging
import logging.handlers
import sys
import time
from typing import Any, Dict, Iterator, Optional, Tuple

from .config import Settings, get_settings

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def _safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


def _extras(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in vars(record).items():
        if key in _RESERVED or key.startswith("_"):
            continue
        yield key, _safe(value)


def _utc_stamp(record: logging.LogRecord) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created))


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, name, msg, then any extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utc_stamp(record),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        for key, value in _extras(record):
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class PlainFormatter(logging.Formatter):
    """``ts LEVEL name: msg key=value ...`` for reading logs in a terminal."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            _utc_stamp(record),
            f"{record.levelname:<8}",
            f"{record.name}: {record.getMessage()}",
        ]
        parts.extend(f"{key}={value}" for key, value in _extras(record))
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: Optional[str] = None,
    plain: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure logging for the ratings bot.

    Console output goes to stdout, as JSON by default or as a plain
    single line when LOG_PLAIN=1 (or ``plain=True``).  A JSON log is also
    written to a rotating file in ``DATA_DIR/logs`` with a separate
    ``errors.log`` for warnings and above.  If the log directory cannot be
    created the file handlers are skipped and console logging still works.
    """
    settings = settings or get_settings()
    level_upper = (level or settings.log_level or "INFO").upper()
    use_plain = settings.log_plain if plain is None else plain

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level_upper)

    try:
        log_dir = settings.data_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        max_bytes = 10 * 1024 * 1024  # 10MB per file
        backup_count = 7

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "bot.jsonl",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            log_dir / "errors.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.WARNING)
        error_handler.setFormatter(JsonFormatter())
        root.addHandler(error_handler)
    except OSError:
        # Unwritable data dir: keep console logging only
        pass

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(PlainFormatter() if use_plain else JsonFormatter())
    root.addHandler(stream_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
