import datetime as dt
from types import SimpleNamespace

import pytest

from airdropwatch.config import TelegramConfig
from airdropwatch.models import Airdrop, Category, CategoryChanges, ChangeSet
from airdropwatch.notifications import (
    TelegramNotifier,
    deliver_changes,
    format_airdrop,
    format_category_summary,
    send_batch,
)

CONFIG = TelegramConfig(
    bot_token="123:abc",
    chat_id="-1001",
    topics={Category.HOTTEST: 11, Category.LATEST: 22, Category.UPDATED: 33},
)


class DummyResponse:

    def __init__(self, body=None):
        self.body = body if body is not None else {"ok": True, "result": {}}

    def raise_for_status(self):
        pass

    def json(self):
        return self.body


class RecordingNotifier:

    def __init__(self, fail_on=(), topics=None):
        self.sent = []
        self.fail_on = set(fail_on)
        self.topics = topics or {}

    def topic_for(self, category):
        return self.topics.get(category)

    def send(self, message, topic_id=None):
        if any(marker in message for marker in self.fail_on):
            raise RuntimeError("boom")
        self.sent.append((topic_id, message))


def make_airdrop(airdrop_id: str, **overrides) -> Airdrop:
    fields = dict(
        id=airdrop_id,
        title=f"Airdrop {airdrop_id}",
        url=f"https://airdrops.io/{airdrop_id}/",
        temperature=60,
        actions="2",
        categories=("DeFi", "NFT"),
        requirements={"twitter": True, "kyc": True, "email": False},
    )
    fields.update(overrides)
    return Airdrop(**fields)


def test_telegram_notifier_posts(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append(SimpleNamespace(url=url, json=json, timeout=timeout))
        return DummyResponse()

    monkeypatch.setattr("airdropwatch.notifications.requests.post", fake_post)

    TelegramNotifier(CONFIG).send("hello", topic_id=11)

    assert len(calls) == 1
    assert calls[0].url == "https://api.telegram.org/bot123:abc/sendMessage"
    assert calls[0].json["chat_id"] == "-1001"
    assert calls[0].json["text"] == "hello"
    assert calls[0].json["parse_mode"] == "Markdown"
    assert calls[0].json["message_thread_id"] == 11
    assert calls[0].timeout == 10


def test_telegram_notifier_raises_on_api_error(monkeypatch):
    monkeypatch.setattr(
        "airdropwatch.notifications.requests.post",
        lambda url, json=None, timeout=None: DummyResponse(
            {"ok": False, "description": "chat not found"}),
    )

    with pytest.raises(RuntimeError, match="chat not found"):
        TelegramNotifier(CONFIG).send("hello")


def test_check_connection(monkeypatch, caplog):
    monkeypatch.setattr(
        "airdropwatch.notifications.requests.post",
        lambda url, json=None, timeout=None: DummyResponse(
            {"ok": True, "result": {"username": "airdrop_bot"}}),
    )
    assert TelegramNotifier(CONFIG).check_connection() is True

    def failing_post(url, json=None, timeout=None):
        raise ConnectionError("offline")

    monkeypatch.setattr("airdropwatch.notifications.requests.post", failing_post)
    with caplog.at_level("ERROR"):
        assert TelegramNotifier(CONFIG).check_connection() is False
    assert "connection failed" in caplog.text


def test_format_airdrop_new_confirmed():
    airdrop = make_airdrop("a",
                           temperature=150,
                           is_confirmed=True,
                           claim_url="https://claim.example.com")

    message = format_airdrop(airdrop, is_new=True)

    assert message.startswith("✅ 🆕 NEW AIRDROP")
    assert "**Airdrop a**" in message
    assert "🔥 Temperature: 150°" in message
    assert "⚡ Actions: 2" in message
    assert "#DeFi #NFT" in message
    assert "📋 Requirements: Twitter, ⚠️ KYC" in message
    assert "[View Details](https://airdrops.io/a/)" in message
    assert "[Claim Airdrop](https://claim.example.com)" in message


def test_format_airdrop_updated_minimal():
    airdrop = make_airdrop("b",
                           temperature=10,
                           actions="",
                           categories=(),
                           requirements={},
                           claim_url="https://airdrops.io/b/")

    message = format_airdrop(airdrop, is_new=False)

    assert message.startswith("🔔 🔄 UPDATED AIRDROP")
    assert "❄️ Temperature: 10°" in message
    assert "Actions" not in message
    assert "Categories" not in message
    assert "Requirements" not in message
    assert "Claim Airdrop" not in message


def test_format_category_summary():
    checked_at = dt.datetime(2025, 3, 1, 9, 0, 0)

    assert "🆕 New airdrops: 2" in format_category_summary(Category.HOTTEST, 2, 0, checked_at)
    quiet = format_category_summary(Category.LATEST, 0, 0, checked_at)
    assert "LATEST AIRDROPS UPDATE" in quiet
    assert "✅ No new updates" in quiet
    assert "2025-03-01 09:00:00" in quiet


def test_send_batch_counts_failures_and_sleeps_between(caplog):
    notifier = RecordingNotifier(fail_on={"second"})
    sleeps = []

    with caplog.at_level("ERROR"):
        result = send_batch(notifier, ["first", "second", "third"], topic_id=5,
                            delay=1.5, sleep=sleeps.append)

    assert result.sent == 2
    assert result.failed == 1
    assert sleeps == [1.5, 1.5]
    assert "Failed to deliver notification" in caplog.text


def test_deliver_changes_routes_to_topics():
    change_set = ChangeSet(
        is_first_run=False,
        categories={
            Category.HOTTEST: CategoryChanges(new=[make_airdrop("h1")],
                                              updated=[make_airdrop("h2")]),
            Category.LATEST: CategoryChanges(),
            Category.UPDATED: CategoryChanges(new=[make_airdrop("u1")],
                                              updated=[make_airdrop("u2")]),
        },
    )
    notifier = RecordingNotifier(topics=CONFIG.topics)

    results = deliver_changes(notifier, change_set,
                              message_delay=0, sleep=lambda _: None,
                              now=lambda: dt.datetime(2025, 1, 1))

    assert results[Category.HOTTEST].sent == 2
    assert results[Category.LATEST].sent == 0
    assert results[Category.UPDATED].sent == 2

    hot_messages = [message for topic, message in notifier.sent if topic == 11]
    assert "NEW AIRDROP" in hot_messages[0]
    assert "UPDATED AIRDROP" in hot_messages[1]
    assert "HOT AIRDROPS UPDATE" in hot_messages[2]

    updated_messages = [message for topic, message in notifier.sent if topic == 33]
    assert all("UPDATED AIRDROP" in message for message in updated_messages[:2])

    latest_messages = [message for topic, message in notifier.sent if topic == 22]
    assert len(latest_messages) == 1
    assert "No new updates" in latest_messages[0]


def test_telegram_notifier_resolves_topics_from_its_config():
    notifier = TelegramNotifier(CONFIG)

    assert notifier.topic_for(Category.HOTTEST) == 11
    assert notifier.topic_for(Category.UPDATED) == 33
