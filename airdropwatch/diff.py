"""Change detection between two airdrop snapshots."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, Optional

from .models import (
    Airdrop,
    Category,
    CategoryChanges,
    CategoryReport,
    ChangePolicy,
    ChangeSet,
    Report,
    Snapshot,
)

TRACKED_FIELDS = ("temperature", "actions", "is_confirmed", "claim_url")


def _differs(old: Any, new: Any) -> bool:
    # 1 == True and 1 == 1.0 in Python; a type change counts as a change.
    return type(old) is not type(new) or old != new


def record_changed(old: Airdrop, new: Airdrop) -> bool:
    """Return True when two versions of the same airdrop differ materially.

    Only temperature, actions, confirmation, claim url, requirements and
    category tags are compared. Title, url, thumbnail and publication date
    are ignored. The caller is responsible for matching ids.
    """
    for name in TRACKED_FIELDS:
        if _differs(getattr(old, name), getattr(new, name)):
            return True

    if set(old.requirements) != set(new.requirements):
        return True
    for key, value in old.requirements.items():
        if _differs(value, new.requirements[key]):
            return True

    return Counter(old.categories) != Counter(new.categories)


def _index_by_id(airdrops: Iterable[Airdrop]) -> Dict[str, Airdrop]:
    return {airdrop.id: airdrop for airdrop in airdrops}


def _diff_category(
    category: Category,
    previous: Snapshot,
    current: Snapshot,
) -> CategoryChanges:
    previous_items = _index_by_id(previous.records(category))
    always_forward = category.policy is ChangePolicy.ALWAYS_FORWARD

    changes = CategoryChanges()
    for airdrop in current.records(category):
        old = previous_items.get(airdrop.id)
        if old is None:
            changes.new.append(airdrop)
        elif always_forward or record_changed(old, airdrop):
            changes.updated.append(airdrop)
    return changes


def detect_changes(
    previous: Optional[Snapshot],
    current: Snapshot,
) -> ChangeSet:
    """Compute new and updated airdrops per category.

    Without a previous snapshot every current airdrop is new. Airdrops that
    disappeared since the previous snapshot are not reported.
    """
    if previous is None:
        return ChangeSet(
            is_first_run=True,
            categories={
                category: CategoryChanges(new=list(current.records(category)))
                for category in Category
            },
        )

    return ChangeSet(
        is_first_run=False,
        categories={
            category: _diff_category(category, previous, current)
            for category in Category
        },
    )


def generate_report(change_set: ChangeSet) -> Report:
    """Summarize a ChangeSet into per-category and overall counts."""
    categories = {}
    for category in Category:
        changes = change_set[category]
        categories[category] = CategoryReport(
            new=len(changes.new),
            updated=len(changes.updated),
            total=len(changes.new) + len(changes.updated),
        )

    total_new = sum(item.new for item in categories.values())
    total_updated = sum(item.updated for item in categories.values())
    return Report(
        categories=categories,
        total_new=total_new,
        total_updated=total_updated,
        grand_total=total_new + total_updated,
    )
