"""Console rendering for change reports and snapshot statistics."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .models import Airdrop, Category, Report, Snapshot

RULE = "=" * 50
TOP_N = 5
COMMON_REQUIREMENTS = ("telegram", "twitter", "kyc", "email")

CATEGORY_HEADINGS = {
    Category.HOTTEST: "🔥 HOT AIRDROPS",
    Category.LATEST: "⚡ LATEST AIRDROPS",
    Category.UPDATED: "🔄 UPDATED AIRDROPS",
}


def format_report(report: Report) -> str:
    """Render a change report as a multi-line string."""
    lines = ["", RULE, "📊 CHANGE DETECTION REPORT", RULE]
    for category in Category:
        counts = report[category]
        lines.extend([
            "",
            f"{CATEGORY_HEADINGS[category]}:",
            f"   🆕 New: {counts.new}",
            f"   🔄 Updated: {counts.updated}",
            f"   📊 Total changes: {counts.total}",
        ])
    lines.extend([
        "",
        "📈 OVERALL:",
        f"   🆕 Total new: {report.total_new}",
        f"   🔄 Total updated: {report.total_updated}",
        f"   📊 Grand total: {report.grand_total}",
        RULE,
    ])
    return "\n".join(lines)


@dataclass
class SnapshotStats:
    """Aggregate statistics over every airdrop in a snapshot."""

    section_counts: Dict[Category, int]
    total: int
    confirmed: int
    average_temperature: float
    max_temperature: int
    min_temperature: int
    top_tags: List[Tuple[str, int]]
    requirement_counts: Dict[str, int]

    @property
    def unconfirmed(self) -> int:
        return self.total - self.confirmed


def summarize_snapshot(snapshot: Snapshot) -> SnapshotStats:
    airdrops = snapshot.all_records()
    temperatures = [airdrop.temperature for airdrop in airdrops]
    tags = Counter(tag for airdrop in airdrops for tag in airdrop.categories)
    requirement_counts = {
        name: sum(1 for airdrop in airdrops if airdrop.requirements.get(name))
        for name in COMMON_REQUIREMENTS
    }
    return SnapshotStats(
        section_counts={
            category: len(snapshot.records(category)) for category in Category
        },
        total=len(airdrops),
        confirmed=sum(1 for airdrop in airdrops if airdrop.is_confirmed),
        average_temperature=(
            sum(temperatures) / len(temperatures) if temperatures else 0.0
        ),
        max_temperature=max(temperatures, default=0),
        min_temperature=min(temperatures, default=0),
        top_tags=tags.most_common(TOP_N),
        requirement_counts=requirement_counts,
    )


def hottest_records(airdrops: List[Airdrop], limit: int = TOP_N) -> List[Airdrop]:
    """Return the highest-temperature airdrops, keeping listing order on ties."""
    return sorted(airdrops, key=lambda airdrop: -airdrop.temperature)[:limit]


def format_snapshot_summary(snapshot: Snapshot) -> str:
    """Render statistics for a stored snapshot."""
    stats = summarize_snapshot(snapshot)
    lines = [
        "",
        "📊 Airdrop Scraping Summary",
        "",
        RULE,
        f"Scraped at: {_format_timestamp(snapshot.scraped_at)}",
        f"Total airdrops: {stats.total}",
        RULE,
        "",
        "📑 Sections:",
    ]
    for category in Category:
        lines.append(f"   {category.label}: {stats.section_counts[category]}")

    lines.extend([
        "",
        f"✅ Confirmed: {stats.confirmed}",
        f"⏳ Unconfirmed: {stats.unconfirmed}",
        "",
        "🌡️  Temperature Stats:",
        f"   Average: {stats.average_temperature:.1f}°",
        f"   Highest: {stats.max_temperature}°",
        f"   Lowest: {stats.min_temperature}°",
        "",
        "📑 Top Categories:",
    ])
    lines.extend(f"   {tag}: {count}" for tag, count in stats.top_tags)

    lines.extend(["", "📋 Common Requirements:"])
    for name in COMMON_REQUIREMENTS:
        display = "KYC" if name == "kyc" else name.capitalize()
        lines.append(f"   {display}: {stats.requirement_counts[name]}")

    for category in Category:
        lines.extend(["", f"🔥 Top {TOP_N} from {category.label} Airdrops:", ""])
        top = hottest_records(list(snapshot.records(category)))
        for idx, airdrop in enumerate(top, start=1):
            lines.append(f"{idx}. {airdrop.title} ({airdrop.temperature}°)")
            lines.append(f"   {airdrop.url}")

    return "\n".join(lines)


def _format_timestamp(value: str) -> str:
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")
