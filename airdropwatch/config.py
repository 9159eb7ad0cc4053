"""Runtime configuration loaded once at process start."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .models import Category

TELEGRAM_TOPIC_VARIABLES = {
    Category.HOTTEST: "TELEGRAM_TOPIC_HOT",
    Category.LATEST: "TELEGRAM_TOPIC_LATEST",
    Category.UPDATED: "TELEGRAM_TOPIC_UPDATED",
}


@dataclass(frozen=True)
class TelegramConfig:
    """Credentials and forum topics for the Telegram notifier."""

    bot_token: str
    chat_id: str
    topics: Mapping[Category, int]

    def topic_for(self, category: Category) -> int:
        return self.topics[category]


@dataclass(frozen=True)
class Settings:
    """Settings derived from environment variables."""

    snapshot_path: Path = Path("airdrops.json")
    export_dir: Path = Path("data")
    request_delay: float = 0.5
    message_delay: float = 2.0
    pages_to_fetch: int = 16
    telegram: Optional[TelegramConfig] = None


def load_settings(
    env_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    with_telegram: bool = True,
) -> Settings:
    """Read configuration from .env (if present) and the environment.

    Telegram settings are skipped when ``with_telegram`` is False.
    """
    if environ is None:
        load_dotenv(env_path or Path(".env"))
        environ = os.environ

    defaults = Settings()
    return Settings(
        snapshot_path=Path(_get(environ, "SNAPSHOT_PATH") or defaults.snapshot_path),
        export_dir=Path(_get(environ, "EXPORT_DIR") or defaults.export_dir),
        request_delay=_parse_float(environ, "REQUEST_DELAY", defaults.request_delay),
        message_delay=_parse_float(environ, "MESSAGE_DELAY", defaults.message_delay),
        pages_to_fetch=_parse_int(environ, "PAGES_TO_FETCH", defaults.pages_to_fetch),
        telegram=load_telegram_config(environ) if with_telegram else None,
    )


def load_telegram_config(environ: Mapping[str, str]) -> Optional[TelegramConfig]:
    """Return Telegram settings, or None when no bot token is configured."""
    bot_token = _get(environ, "TELEGRAM_BOT_TOKEN")
    if not bot_token:
        return None

    required = ["TELEGRAM_CHAT_ID", *TELEGRAM_TOPIC_VARIABLES.values()]
    missing = [key for key in required if not _get(environ, key)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    topics: Dict[Category, int] = {}
    for category, key in TELEGRAM_TOPIC_VARIABLES.items():
        topics[category] = _parse_int(environ, key, 0)

    return TelegramConfig(
        bot_token=bot_token,
        chat_id=_get(environ, "TELEGRAM_CHAT_ID") or "",
        topics=topics,
    )


def _get(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = (environ.get(key) or "").strip()
    return value or None


def _parse_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _get(environ, key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc


def _parse_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(environ, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
