"""Notification helpers for delivering detected changes to Telegram."""

from __future__ import annotations

import datetime as dt
import logging
import time
from typing import Callable, Dict, Iterable, Optional, Protocol

import requests

from .config import TelegramConfig
from .models import Airdrop, BatchResult, Category, ChangePolicy, ChangeSet

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"

REQUIREMENT_LABELS = (
    ("twitter", "Twitter"),
    ("telegram", "Telegram"),
    ("email", "Email"),
    ("kyc", "⚠️ KYC"),
)


class Notifier(Protocol):
    """Protocol defining the notifier contract."""

    def send(self, message: str, topic_id: Optional[int] = None) -> None:
        ...

    def topic_for(self, category: Category) -> Optional[int]:
        ...


class TelegramNotifier:
    """Send Markdown messages to a Telegram chat via the Bot API."""

    def __init__(self, config: TelegramConfig, timeout: int = 10):
        self.config = config
        self.timeout = timeout

    def topic_for(self, category: Category) -> Optional[int]:
        return self.config.topic_for(category)

    def _endpoint(self, method: str) -> str:
        return f"{TELEGRAM_API_BASE}/bot{self.config.bot_token}/{method}"

    def _call(self, method: str, payload: dict | None = None) -> dict:
        response = requests.post(
            self._endpoint(method),
            json=payload or {},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if not body.get("ok", False):
            raise RuntimeError(
                f"Telegram {method} failed: {body.get('description', 'unknown error')}"
            )
        return body.get("result") or {}

    def send(self, message: str, topic_id: Optional[int] = None) -> None:
        payload = {
            "chat_id": self.config.chat_id,
            "text": message,
            "parse_mode": "Markdown",
            "disable_web_page_preview": False,
        }
        if topic_id is not None:
            payload["message_thread_id"] = topic_id
        self._call("sendMessage", payload)

    def get_me(self) -> dict:
        return self._call("getMe")

    def check_connection(self) -> bool:
        try:
            me = self.get_me()
        except Exception:  # noqa: BLE001
            logger.exception("Telegram bot connection failed")
            return False
        logger.info("Bot connected: @%s", me.get("username", "unknown"))
        return True


def format_airdrop(airdrop: Airdrop, is_new: bool = True) -> str:
    """Render an airdrop as a Telegram Markdown message."""
    emoji = "✅" if airdrop.is_confirmed else "🔔"
    status = "🆕 NEW" if is_new else "🔄 UPDATED"
    if airdrop.temperature > 100:
        temp_emoji = "🔥"
    elif airdrop.temperature > 50:
        temp_emoji = "🌡️"
    else:
        temp_emoji = "❄️"

    lines = [
        f"{emoji} {status} AIRDROP",
        "",
        f"📌 **{airdrop.title}**",
        f"{temp_emoji} Temperature: {airdrop.temperature}°",
    ]
    if airdrop.actions:
        lines.append(f"⚡ Actions: {airdrop.actions}")
    if airdrop.categories:
        tags = " ".join(f"#{tag}" for tag in airdrop.categories)
        lines.append(f"🏷️ Categories: {tags}")

    required = [
        label for name, label in REQUIREMENT_LABELS
        if airdrop.requirements.get(name)
    ]
    if required:
        lines.append(f"📋 Requirements: {', '.join(required)}")

    lines.extend(["", f"🔗 [View Details]({airdrop.url})"])
    if airdrop.claim_url and airdrop.claim_url != airdrop.url:
        lines.append(f"🎁 [Claim Airdrop]({airdrop.claim_url})")
    return "\n".join(lines)


def format_category_summary(
    category: Category,
    new_count: int,
    updated_count: int,
    checked_at: dt.datetime,
) -> str:
    lines = [f"📊 **{category.label.upper()} AIRDROPS UPDATE**", ""]
    if new_count > 0:
        lines.append(f"🆕 New airdrops: {new_count}")
    if updated_count > 0:
        lines.append(f"🔄 Updated airdrops: {updated_count}")
    if new_count == 0 and updated_count == 0:
        lines.append("✅ No new updates")
    lines.extend(["", f"⏰ Checked at: {checked_at:%Y-%m-%d %H:%M:%S}"])
    return "\n".join(lines)


def send_batch(
    notifier: Notifier,
    messages: Iterable[str],
    topic_id: Optional[int],
    delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult:
    """Send messages one by one, pausing between them."""
    result = BatchResult()
    pending = list(messages)
    for idx, message in enumerate(pending):
        try:
            notifier.send(message, topic_id=topic_id)
            result.sent += 1
        except Exception:  # noqa: BLE001
            logger.exception("Failed to deliver notification to topic %s", topic_id)
            result.failed += 1
        if idx < len(pending) - 1:
            sleep(delay)
    return result


def deliver_changes(
    notifier: Notifier,
    change_set: ChangeSet,
    message_delay: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    now: Callable[[], dt.datetime] = dt.datetime.now,
) -> Dict[Category, BatchResult]:
    """Post every new and updated airdrop to its category topic."""
    results: Dict[Category, BatchResult] = {}
    for category in Category:
        changes = change_set[category]
        topic_id = notifier.topic_for(category)
        always_forward = category.policy is ChangePolicy.ALWAYS_FORWARD

        messages = [
            format_airdrop(airdrop, is_new=not always_forward)
            for airdrop in changes.new
        ]
        messages.extend(
            format_airdrop(airdrop, is_new=False) for airdrop in changes.updated
        )
        if messages:
            logger.info("Sending %d %s airdrop notification(s)",
                        len(messages), category.value)
        result = send_batch(notifier, messages, topic_id,
                            delay=message_delay, sleep=sleep)
        logger.info("%s: sent %d, failed %d", category.label, result.sent, result.failed)
        results[category] = result

    for category in Category:
        changes = change_set[category]
        summary = format_category_summary(
            category, len(changes.new), len(changes.updated), now()
        )
        try:
            notifier.send(summary, topic_id=notifier.topic_for(category))
        except Exception:  # noqa: BLE001
            logger.exception("Failed to deliver %s summary", category.value)
    return results


__all__ = [
    "Notifier",
    "TelegramNotifier",
    "deliver_changes",
    "format_airdrop",
    "format_category_summary",
    "send_batch",
]
