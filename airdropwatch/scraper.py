"""Scraper for the hot, latest and updated airdrop listings on airdrops.io."""

from __future__ import annotations

import datetime as dt
import logging
import re
import time
from typing import Callable, List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import Airdrop, Category, Snapshot

logger = logging.getLogger(__name__)

BASE_URL = "https://airdrops.io"
API_URL = f"{BASE_URL}/wp-admin/admin-ajax.php"
HOT_PID = "329"
LATEST_PID = "529"
DEFAULT_PAGES = 16

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)

# Requirement name -> data attribute on the <article> element.
REQUIREMENT_ATTRIBUTES = {
    "telegram": "data-telegram-required",
    "twitter": "data-twitter-required",
    "bitcointalk": "data-bitcointalk-required",
    "facebook": "data-facebook-required",
    "email": "data-email-address-required",
    "linkedin": "data-linkedin-required",
    "medium": "data-medium-required",
    "reddit": "data-reddit-required",
    "kyc": "data-kyc-required",
    "phone": "data-phone-required",
    "instagram": "data-instagram-required",
    "youtube": "data-youtube-required",
}

CATEGORY_CLASS_PREFIX = "categories-"
UPDATED_WIDGET_SELECTOR = '[class*="homepage-widget"][class*="updated"] article.project'


class AirdropsClient:
    """Lightweight wrapper around the airdrops.io listing endpoints."""

    def __init__(self,
                 session: requests.Session | None = None,
                 request_delay: float = 0.5,
                 timeout: int = 20,
                 pages: int = DEFAULT_PAGES,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "DNT": "1",
        })
        self.request_delay = request_delay
        self.timeout = timeout
        self.pages = pages
        self.sleep = sleep

    def fetch_homepage(self) -> str:
        logger.info("Fetching homepage for updated airdrops")
        response = self.session.get(
            BASE_URL,
            headers={
                "Accept":
                "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.text

    def fetch_api_page(self, pid: str, page: int) -> Optional[dict]:
        """Fetch one page of listings; failures are logged and yield None."""
        referer = f"{BASE_URL}/{'hot' if pid == HOT_PID else 'latest'}/"
        try:
            response = self.session.get(
                API_URL,
                params=[
                    ("loadairdrops", ""),
                    ("action", "loaddrops"),
                    ("pid", pid),
                    ("filter_type", "platforms"),
                    ("paged", str(page)),
                ],
                headers={
                    "Accept": "application/json, text/javascript, */*; q=0.01",
                    "Accept-Language": "en-GB,en;q=0.9",
                    "Referer": referer,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Failed to fetch page %d for pid %s: %s", page, pid, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Unexpected payload for pid %s page %d: %r", pid, page, payload)
            return None
        return payload

    def fetch_category(self, pid: str) -> List[Airdrop]:
        airdrops: List[Airdrop] = []
        for page in range(1, self.pages + 1):
            payload = self.fetch_api_page(pid, page)
            fragments = payload.get("airdrops") if payload else None
            if isinstance(fragments, list):
                page_count = 0
                for offset, fragment in enumerate(fragments):
                    airdrop = parse_article_html(fragment, len(airdrops) + offset)
                    if airdrop and airdrop.title:
                        airdrops.append(airdrop)
                        page_count += 1
                logger.debug("Page %d/%d for pid %s: %d airdrops",
                             page, self.pages, pid, page_count)
            else:
                logger.debug("Page %d/%d for pid %s: no data", page, self.pages, pid)

            if page < self.pages:
                self.sleep(self.request_delay)

        logger.info("Fetched %d airdrops for pid %s", len(airdrops), pid)
        return airdrops


def parse_article_html(html_text: str, index: int) -> Optional[Airdrop]:
    """Parse the first <article> of an API HTML fragment."""
    soup = BeautifulSoup(html_text, "html.parser")
    article = soup.find("article")
    if article is None:
        return None
    return parse_article(article, index)


def parse_updated_airdrops(html_text: str) -> List[Airdrop]:
    """Extract airdrops listed in the homepage "updated" widget."""
    soup = BeautifulSoup(html_text, "html.parser")
    airdrops = []
    for index, article in enumerate(soup.select(UPDATED_WIDGET_SELECTOR)):
        airdrop = parse_article(article, index)
        if airdrop.title:
            airdrops.append(airdrop)
    logger.info("Updated airdrops found: %d", len(airdrops))
    return airdrops


def parse_article(article: Tag, index: int) -> Airdrop:
    classes = article.get("class") or []

    title_link = article.select_one(".air-content-front a")
    title_node = article.select_one(".air-content-front a h3")
    thumbnail_node = article.select_one(".air-thumbnail img")
    actions_node = article.select_one(".est-value span")
    claim_link = article.select_one(".air-buttons a")

    thumbnail = ""
    if thumbnail_node is not None:
        thumbnail = thumbnail_node.get("data-src") or thumbnail_node.get("src") or ""

    return Airdrop(
        id=article.get("id") or f"airdrop-{index}",
        title=title_node.get_text(strip=True) if title_node else "",
        url=_absolute_url(title_link.get("href") if title_link else ""),
        thumbnail=thumbnail,
        temperature=_parse_temperature(article.get("data-temperature")),
        published=article.get("data-published") or "",
        actions=actions_node.get_text(strip=True) if actions_node else "",
        categories=tuple(
            cls[len(CATEGORY_CLASS_PREFIX):]
            for cls in classes
            if cls.startswith(CATEGORY_CLASS_PREFIX)
        ),
        is_confirmed="confirmed" in classes,
        claim_url=_absolute_url(claim_link.get("href") if claim_link else ""),
        requirements={
            name: article.get(attribute) == "1"
            for name, attribute in REQUIREMENT_ATTRIBUTES.items()
        },
    )


def scrape_snapshot(client: AirdropsClient | None = None) -> Snapshot:
    """Collect all three categories into a new snapshot."""
    client = client or AirdropsClient()
    hottest = client.fetch_category(HOT_PID)
    latest = client.fetch_category(LATEST_PID)
    updated = parse_updated_airdrops(client.fetch_homepage())
    return Snapshot(
        scraped_at=dt.datetime.now(dt.timezone.utc).isoformat(),
        sections={
            Category.HOTTEST: tuple(hottest),
            Category.LATEST: tuple(latest),
            Category.UPDATED: tuple(updated),
        },
    )


def _parse_temperature(value: str | None) -> int:
    match = re.match(r"\s*(-?\d+)", value or "")
    return int(match.group(1)) if match else 0


def _absolute_url(href: str | None) -> str:
    if not href:
        return ""
    return urljoin(BASE_URL, href)
