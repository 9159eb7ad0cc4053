"""JSON snapshot persistence and spreadsheet export."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from openpyxl import Workbook

from .models import Airdrop, Category, Snapshot
from .scraper import BASE_URL

logger = logging.getLogger(__name__)

# Section order of the persisted file.
SECTION_ORDER = (Category.LATEST, Category.HOTTEST, Category.UPDATED)

EXPORT_HEADERS = [
    "section",
    "id",
    "title",
    "temperature",
    "actions",
    "confirmed",
    "categories",
    "requirements",
    "url",
    "claim_url",
]


def airdrop_to_dict(airdrop: Airdrop) -> Dict[str, Any]:
    return {
        "id": airdrop.id,
        "title": airdrop.title,
        "url": airdrop.url,
        "thumbnail": airdrop.thumbnail,
        "temperature": airdrop.temperature,
        "published": airdrop.published,
        "actions": airdrop.actions,
        "categories": list(airdrop.categories),
        "isConfirmed": airdrop.is_confirmed,
        "claimUrl": airdrop.claim_url,
        "requirements": dict(airdrop.requirements),
    }


def airdrop_from_dict(payload: Dict[str, Any]) -> Airdrop:
    """Build an Airdrop from its persisted form.

    Missing ``categories`` or ``requirements`` are read as empty so that
    snapshots written by older scrapers still compare cleanly.
    """
    return Airdrop(
        id=str(payload["id"]),
        title=payload.get("title") or "",
        url=_stored_url(payload.get("url")),
        thumbnail=payload.get("thumbnail") or "",
        temperature=payload.get("temperature", 0),
        published=payload.get("published") or "",
        actions=payload.get("actions", ""),
        categories=tuple(payload.get("categories") or ()),
        is_confirmed=payload.get("isConfirmed", False),
        claim_url=_stored_url(payload.get("claimUrl")),
        requirements=dict(payload.get("requirements") or {}),
    )


def _stored_url(value: Optional[str]) -> str:
    # Older snapshots stored the bare site root for a missing link.
    if not value or value.rstrip("/") == BASE_URL:
        return ""
    return value


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    sections = {}
    for category in SECTION_ORDER:
        records = snapshot.records(category)
        sections[category.value] = {
            "count": len(records),
            "airdrops": [airdrop_to_dict(airdrop) for airdrop in records],
        }
    return {
        "scrapedAt": snapshot.scraped_at,
        "totalCount": snapshot.total_count,
        "sections": sections,
    }


def snapshot_from_dict(payload: Dict[str, Any]) -> Snapshot:
    raw_sections = payload.get("sections") or {}
    sections = {}
    for category in Category:
        block = raw_sections.get(category.value) or {}
        sections[category] = tuple(
            airdrop_from_dict(item) for item in block.get("airdrops") or []
        )
    return Snapshot(scraped_at=payload.get("scrapedAt") or "", sections=sections)


@dataclass
class SnapshotStore:
    """Reads and writes the latest snapshot as a JSON file."""

    path: Path

    def load(self) -> Optional[Snapshot]:
        if not self.path.exists():
            logger.info("No previous data found at %s; this is the first run", self.path)
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Snapshot file {self.path} is not valid JSON: {exc}") from exc
        snapshot = snapshot_from_dict(payload)
        logger.info(
            "Loaded previous snapshot from %s (%d airdrops, scraped at %s)",
            self.path,
            snapshot.total_count,
            snapshot.scraped_at,
        )
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(snapshot_to_dict(snapshot), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("Saved %d airdrops to %s", snapshot.total_count, self.path)


def export_snapshot_to_xlsx(snapshot: Snapshot, path: Path) -> None:
    """Write every airdrop of a snapshot to a single worksheet."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "airdrops"
    worksheet.append(EXPORT_HEADERS)

    for category in SECTION_ORDER:
        for airdrop in snapshot.records(category):
            required = [name for name, flag in airdrop.requirements.items() if flag]
            worksheet.append([
                category.value,
                airdrop.id,
                airdrop.title,
                airdrop.temperature,
                str(airdrop.actions),
                airdrop.is_confirmed,
                ", ".join(airdrop.categories),
                ", ".join(required),
                airdrop.url,
                airdrop.claim_url,
            ])

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
