import pytest

from ratings_bot.config import Settings, reset_settings
from tests.fixtures.ratings_html import WEBHOOK


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sleeps(monkeypatch):
    """Record every time.sleep() call instead of sleeping."""
    calls = []
    monkeypatch.setattr("ratings_bot.discord_transport.time.sleep", calls.append)
    return calls


@pytest.fixture
def settings(tmp_path):
    return Settings(
        max_days=3,
        min_price=5,
        log_file=tmp_path / "sent.log",
        rate_limit_ms=750,
        max_per_run=200,
        embed_mode=True,
        embeds_per_req=10,
        big_rate_threshold=20,
        alert_role_id="",
        webhook_url=WEBHOOK,
        data_dir=tmp_path / "data",
    )
