"""CLI entrypoint for the AirdropWatch agent."""

from __future__ import annotations

import argparse
import functools
import logging
import sys
from pathlib import Path

from airdropwatch.config import load_settings
from airdropwatch.notifications import TelegramNotifier
from airdropwatch.report import format_report, format_snapshot_summary
from airdropwatch.runner import AirdropWatchRunner
from airdropwatch.scraper import AirdropsClient, scrape_snapshot
from airdropwatch.storage import SnapshotStore, export_snapshot_to_xlsx

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AirdropWatch monitoring agent")
    parser.add_argument(
        "--run",
        action="store_true",
        help="execute one monitoring cycle",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="scrape and diff without saving the snapshot or sending notifications",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="print statistics for the stored snapshot and exit",
    )
    parser.add_argument(
        "--check-telegram",
        action="store_true",
        help="verify the Telegram bot credentials and exit",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="write an .xlsx copy of the scraped snapshot after a run",
    )
    parser.add_argument("--env-file", type=Path, default=None, help="path to a .env file")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = load_settings(env_path=args.env_file, with_telegram=not args.summary)
    except ValueError:
        logger.exception("Invalid configuration")
        return 2

    store = SnapshotStore(path=settings.snapshot_path)
    notifier = TelegramNotifier(settings.telegram) if settings.telegram else None

    if args.summary:
        snapshot = store.load()
        if snapshot is None:
            logger.error("%s not found. Please run the scraper first.", settings.snapshot_path)
            return 1
        print(format_snapshot_summary(snapshot))
        return 0

    if args.check_telegram:
        if notifier is None:
            logger.error("TELEGRAM_BOT_TOKEN is not configured")
            return 1
        return 0 if notifier.check_connection() else 1

    if not (args.run or args.dry_run):
        parser.print_help()
        return 1

    client = AirdropsClient(
        request_delay=settings.request_delay,
        pages=settings.pages_to_fetch,
    )
    runner = AirdropWatchRunner(
        store=store,
        scraper=functools.partial(scrape_snapshot, client),
        notifier=notifier,
        message_delay=settings.message_delay,
    )

    if notifier is not None and not args.dry_run and not notifier.check_connection():
        return 1

    try:
        summary = runner.run(dry_run=args.dry_run)
    except Exception:  # noqa: BLE001
        logger.exception("Monitoring cycle failed")
        return 1

    print(format_report(summary.report))

    for category, result in summary.deliveries.items():
        if result.failed:
            logger.warning("%d %s notification(s) failed", result.failed, category.value)

    if args.export:
        try:
            timestamp = (
                summary.executed_at.replace(":", "-").replace(".", "-").replace("T", "_")
            )
            export_path = settings.export_dir / f"airdrops_{timestamp}.xlsx"
            export_snapshot_to_xlsx(summary.snapshot, export_path)
            logger.info("Exported snapshot to %s", export_path)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to export snapshot")
    return 0


if __name__ == "__main__":
    sys.exit(main())
