"""Core execution workflow for AirdropWatch."""

from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .diff import detect_changes, generate_report
from .models import RunSummary, Snapshot
from .notifications import Notifier, deliver_changes
from .scraper import scrape_snapshot
from .storage import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class AirdropWatchRunner:
    """Coordinates scrape, diff, persistence and delivery steps."""

    store: SnapshotStore
    scraper: Callable[[], Snapshot] = field(default_factory=lambda: scrape_snapshot)
    notifier: Optional[Notifier] = None
    message_delay: float = 2.0
    sleep: Callable[[float], None] = time.sleep

    def run(self, dry_run: bool = False) -> RunSummary:
        """Execute a single monitoring cycle."""
        executed_at = dt.datetime.now(dt.timezone.utc).isoformat()
        logger.info("Starting monitor cycle at %s", executed_at)

        previous = self.store.load()

        try:
            current = self.scraper()
        except Exception as exc:
            logger.exception("Scraping failed: %s", exc)
            raise
        logger.info("Scraped %d airdrops", current.total_count)

        change_set = detect_changes(previous, current)
        report = generate_report(change_set)
        summary = RunSummary(
            executed_at=executed_at,
            snapshot=current,
            change_set=change_set,
            report=report,
        )

        if dry_run:
            logger.info(
                "Dry run detected %d new and %d updated airdrops; nothing persisted",
                report.total_new,
                report.total_updated,
            )
            return summary

        self.store.save(current)

        if report.grand_total == 0:
            logger.info("No changes detected; skipping notifications")
            return summary

        if self.notifier is None:
            logger.info("No notifier configured; %d change(s) not delivered",
                        report.grand_total)
            return summary

        if change_set.is_first_run:
            logger.info("First run; sending all %d airdrops", report.grand_total)
        else:
            logger.info("Changes detected; sending %d notification(s)", report.grand_total)
        summary.deliveries = deliver_changes(
            self.notifier,
            change_set,
            message_delay=self.message_delay,
            sleep=self.sleep,
        )
        return summary
