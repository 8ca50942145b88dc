"""Tests for webhook delivery and 429 handling."""

import pytest
import requests

from ratings_bot import discord_transport
from ratings_bot.discord_transport import mask_webhook, post_webhook, retry_after_ms
from ratings_bot.errors import DeliveryError, RetriesExhaustedError
from tests.fixtures.ratings_html import WEBHOOK, FakeResponse, FakeSession

PAYLOAD = {"content": "hello", "allowed_mentions": {"parse": []}}


def _throttled(retry_after=None):
    body = {"message": "You are being rate limited."}
    if retry_after is not None:
        body["retry_after"] = retry_after
    return FakeResponse(429, body=body, reason="Too Many Requests")


def test_success_first_try(sleeps):
    session = FakeSession()
    assert post_webhook(WEBHOOK, PAYLOAD, session) == 204
    assert len(session.posts) == 1
    assert session.posts[0]["json"] == PAYLOAD
    assert session.posts[0]["timeout"] == 15
    assert sleeps == []


def test_two_throttles_then_success_honours_each_wait(sleeps):
    session = FakeSession(
        post_responses=[_throttled(2.5), _throttled(1.5), FakeResponse(200)]
    )
    assert post_webhook(WEBHOOK, PAYLOAD, session) == 200
    assert len(session.posts) == 3
    # the same payload is resent every time
    assert all(p["json"] == PAYLOAD for p in session.posts)
    assert sleeps == [2.5, 1.5]


def test_throttle_wait_has_one_second_floor(sleeps):
    session = FakeSession(post_responses=[_throttled(0.05)])
    post_webhook(WEBHOOK, PAYLOAD, session)
    assert sleeps == [1.0]


def test_exhausting_attempts_raises(sleeps):
    session = FakeSession(post_responses=[_throttled(1) for _ in range(5)])
    with pytest.raises(RetriesExhaustedError) as exc:
        post_webhook(WEBHOOK, PAYLOAD, session)
    assert exc.value.attempts == 5
    assert "gave up after 5 attempts" in str(exc.value)
    assert len(session.posts) == 5
    assert len(sleeps) == 5


def test_non_throttle_failure_is_not_retried(sleeps):
    session = FakeSession(
        post_responses=[
            FakeResponse(400, text='{"message": "Invalid Form Body"}', reason="Bad Request")
        ]
    )
    with pytest.raises(DeliveryError) as exc:
        post_webhook(WEBHOOK, PAYLOAD, session)
    assert not isinstance(exc.value, RetriesExhaustedError)
    assert exc.value.status == 400
    assert exc.value.reason == "Bad Request"
    assert "Invalid Form Body" in exc.value.message
    assert len(session.posts) == 1
    assert sleeps == []


def test_network_error_becomes_delivery_error(sleeps):
    class Boom(FakeSession):
        def post(self, url, json=None, timeout=None):
            raise requests.ConnectTimeout("timed out")

    with pytest.raises(DeliveryError) as exc:
        post_webhook(WEBHOOK, PAYLOAD, Boom())
    assert exc.value.status is None


def test_falls_back_to_requests_module(monkeypatch, sleeps):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append(url)
        return FakeResponse(204)

    monkeypatch.setattr(discord_transport.requests, "post", fake_post)
    post_webhook(WEBHOOK, PAYLOAD)
    assert calls == [WEBHOOK]


@pytest.mark.parametrize(
    "resp,expected",
    [
        (_throttled(3), 3000),
        (_throttled(0.3456), 1000),
        (_throttled(1.0001), 1001),
        (_throttled(), 2000),
        (FakeResponse(429, body=None), 2000),
        (FakeResponse(429, body={"retry_after": "soon"}), 2000),
    ],
)
def test_retry_after_ms(resp, expected):
    assert retry_after_ms(resp) == expected


def test_mask_webhook_hides_token():
    masked = mask_webhook(WEBHOOK)
    assert "secret" not in masked
    assert masked.endswith("abcdef")
    assert mask_webhook("") == "<unset>"
