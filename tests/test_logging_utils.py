import json
import logging

import pytest

from ratings_bot.logging_utils import JsonFormatter, PlainFormatter, setup_logging


def _record(msg="fetch_ok status=%s", args=(200,), **extra):
    rec = logging.LogRecord("fetcher", logging.INFO, __file__, 1, msg, args, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_json_formatter_includes_extras():
    line = JsonFormatter().format(_record(url="https://x.test", obj=object()))
    data = json.loads(line)
    assert data["level"] == "INFO"
    assert data["name"] == "fetcher"
    assert data["msg"] == "fetch_ok status=200"
    assert data["url"] == "https://x.test"
    # non-serialisable extras are stringified
    assert isinstance(data["obj"], str)


def test_plain_formatter_single_line():
    line = PlainFormatter().format(_record(batch=3))
    assert "fetcher: fetch_ok status=200" in line
    assert "batch=3" in line
    assert "\n" not in line


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers:
        h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_rotating_files(settings, restore_root_logger):
    setup_logging(level="debug", plain=True, settings=settings)
    root = restore_root_logger
    assert root.level == logging.DEBUG
    logging.getLogger("runner").warning("run_failed err=%s", "X")
    for h in root.handlers:
        h.flush()
    log_dir = settings.data_dir / "logs"
    bot_lines = (log_dir / "bot.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(bot_lines[-1])["msg"] == "run_failed err=X"
    assert "run_failed" in (log_dir / "errors.log").read_text(encoding="utf-8")


def test_standard_record_attributes_are_not_echoed():
    data = json.loads(JsonFormatter().format(_record(ticker="ABC")))
    assert data["ticker"] == "ABC"
    for key in ("args", "lineno", "pathname", "levelno", "process", "thread"):
        assert key not in data
    line = PlainFormatter().format(_record())
    assert "lineno=" not in line
    assert "args=" not in line
