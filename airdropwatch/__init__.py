"""AirdropWatch package initialization."""

from .config import Settings, TelegramConfig, load_settings
from .diff import detect_changes, generate_report, record_changed
from .models import (
    Airdrop,
    BatchResult,
    Category,
    CategoryChanges,
    CategoryReport,
    ChangePolicy,
    ChangeSet,
    Report,
    RunSummary,
    Snapshot,
)
from .runner import AirdropWatchRunner
from .scraper import scrape_snapshot
from .storage import SnapshotStore

__all__ = [
    "Airdrop",
    "AirdropWatchRunner",
    "BatchResult",
    "Category",
    "CategoryChanges",
    "CategoryReport",
    "ChangePolicy",
    "ChangeSet",
    "Report",
    "RunSummary",
    "Settings",
    "Snapshot",
    "SnapshotStore",
    "TelegramConfig",
    "detect_changes",
    "generate_report",
    "load_settings",
    "record_changed",
    "scrape_snapshot",
]
