"""Core data models for AirdropWatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Tuple, Union


class ChangePolicy(str, Enum):
    """How previously seen records of a category are classified."""

    STANDARD = "standard"
    ALWAYS_FORWARD = "always-forward"


class Category(str, Enum):
    """Named sections of the airdrops.io listing."""

    HOTTEST = "hottest"
    LATEST = "latest"
    UPDATED = "updated"

    @property
    def policy(self) -> ChangePolicy:
        return CATEGORY_POLICIES[self]

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_POLICIES: Dict[Category, ChangePolicy] = {
    Category.HOTTEST: ChangePolicy.STANDARD,
    Category.LATEST: ChangePolicy.STANDARD,
    # The upstream "updated" widget only lists recently changed airdrops.
    Category.UPDATED: ChangePolicy.ALWAYS_FORWARD,
}

CATEGORY_LABELS: Dict[Category, str] = {
    Category.HOTTEST: "Hot",
    Category.LATEST: "Latest",
    Category.UPDATED: "Updated",
}


@dataclass(frozen=True)
class Airdrop:
    """Represents an airdrop listing scraped from airdrops.io."""

    id: str
    title: str
    url: str
    temperature: int = 0
    actions: Union[str, int] = ""
    categories: Tuple[str, ...] = ()
    is_confirmed: bool = False
    claim_url: str = ""
    requirements: Mapping[str, bool] = field(default_factory=dict)
    thumbnail: str = ""
    published: str = ""


@dataclass(frozen=True)
class Snapshot:
    """All airdrops captured by one scrape, grouped by category."""

    scraped_at: str
    sections: Mapping[Category, Tuple[Airdrop, ...]]

    def records(self, category: Category) -> Tuple[Airdrop, ...]:
        return tuple(self.sections.get(category, ()))

    @property
    def total_count(self) -> int:
        return sum(len(self.records(category)) for category in Category)

    def all_records(self) -> List[Airdrop]:
        return [
            airdrop
            for category in Category
            for airdrop in self.records(category)
        ]


@dataclass
class CategoryChanges:
    """New and updated airdrops detected for one category."""

    new: List[Airdrop] = field(default_factory=list)
    updated: List[Airdrop] = field(default_factory=list)


@dataclass
class ChangeSet:
    """Holds the result of comparing two snapshots."""

    is_first_run: bool
    categories: Dict[Category, CategoryChanges]

    def __getitem__(self, category: Category) -> CategoryChanges:
        return self.categories[category]


@dataclass(frozen=True)
class CategoryReport:
    new: int
    updated: int
    total: int


@dataclass(frozen=True)
class Report:
    """Counts derived from a ChangeSet."""

    categories: Mapping[Category, CategoryReport]
    total_new: int
    total_updated: int
    grand_total: int

    def __getitem__(self, category: Category) -> CategoryReport:
        return self.categories[category]


@dataclass
class BatchResult:
    """Outcome of delivering a batch of notifications."""

    sent: int = 0
    failed: int = 0


@dataclass
class RunSummary:
    """Aggregated result returned by a monitoring cycle."""

    executed_at: str
    snapshot: Snapshot
    change_set: ChangeSet
    report: Report
    deliveries: Dict[Category, BatchResult] = field(default_factory=dict)
