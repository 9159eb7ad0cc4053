from airdropwatch.diff import detect_changes, generate_report
from airdropwatch.models import Airdrop, Category, Snapshot
from airdropwatch.report import format_report, format_snapshot_summary, summarize_snapshot


def make_airdrop(airdrop_id: str, temperature: int, **overrides) -> Airdrop:
    fields = dict(
        id=airdrop_id,
        title=f"Airdrop {airdrop_id}",
        url=f"https://airdrops.io/{airdrop_id}/",
        temperature=temperature,
        categories=("DeFi",),
        requirements={"telegram": True, "kyc": False},
    )
    fields.update(overrides)
    return Airdrop(**fields)


def build_snapshot() -> Snapshot:
    return Snapshot(
        scraped_at="2025-03-01T12:30:00+00:00",
        sections={
            Category.HOTTEST: (
                make_airdrop("h1", 120, is_confirmed=True, categories=("NFT", "DeFi")),
                make_airdrop("h2", 80),
            ),
            Category.LATEST: (make_airdrop("l1", 10, requirements={"kyc": True}),),
            Category.UPDATED: (),
        },
    )


def test_format_report_lists_every_category():
    report = generate_report(detect_changes(None, build_snapshot()))

    text = format_report(report)

    assert "CHANGE DETECTION REPORT" in text
    assert "HOT AIRDROPS" in text
    assert "LATEST AIRDROPS" in text
    assert "UPDATED AIRDROPS" in text
    assert "Grand total: 3" in text
    assert text == format_report(report)


def test_summarize_snapshot_counts():
    stats = summarize_snapshot(build_snapshot())

    assert stats.total == 3
    assert stats.confirmed == 1
    assert stats.unconfirmed == 2
    assert stats.section_counts[Category.HOTTEST] == 2
    assert stats.max_temperature == 120
    assert stats.min_temperature == 10
    assert round(stats.average_temperature, 1) == 70.0
    assert stats.top_tags[0] == ("DeFi", 3)
    assert stats.requirement_counts["telegram"] == 2
    assert stats.requirement_counts["kyc"] == 1


def test_summarize_empty_snapshot():
    empty = Snapshot(scraped_at="", sections={category: () for category in Category})

    stats = summarize_snapshot(empty)

    assert stats.total == 0
    assert stats.average_temperature == 0.0
    assert stats.max_temperature == 0
    assert "Total airdrops: 0" in format_snapshot_summary(empty)


def test_format_snapshot_summary_orders_by_temperature():
    text = format_snapshot_summary(build_snapshot())

    assert "Scraped at: 2025-03-01 12:30:00" in text
    assert "Hottest: 2" not in text
    assert "Hot: 2" in text
    assert text.index("1. Airdrop h1 (120°)") < text.index("2. Airdrop h2 (80°)")
