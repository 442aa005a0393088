"""
Page Scanner
============

Extracts candidate feed URLs from an HTML page:

1. ``<link>`` elements advertising RSS or Atom documents
2. the WordPress REST discovery link, expanded into WP and ``feed/`` guesses
3. only when nothing was found above, anchors whose href mentions "rss"

The page favicon is reported separately so discovery can backfill feeds
without artwork. Candidates are not deduplicated.
"""

from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..models import FeedKind, ScanCandidate, ScanResult
from ..utils.logging import get_logger_for_component

logger = get_logger_for_component("page_scanner")

LINK_TYPES = (
    (FeedKind.RSS, "application/rss+xml"),
    (FeedKind.ATOM, "application/atom+xml"),
)

WP_API_REL = "https://api.w.org/"
WP_POSTS_PATH = "wp/v2/posts"
WP_FEED_PATH = "feed/"


class PageScanner:
    """Scans one HTML document for feed candidates."""

    def __init__(self, page_url: str, html: str, parser: str = "html.parser"):
        self.page_url = page_url
        self.soup = BeautifulSoup(html or "", parser)

    def scan(self) -> ScanResult:
        candidates = self.advertised_feeds()
        candidates.extend(self.wordpress_feeds(candidates))

        if not candidates:
            logger.debug(
                f"No advertised feeds on {self.page_url}, looking for rss links"
            )
            candidates = self.rss_anchors()

        favicon = self.favicon()
        logger.debug(
            f"Found {len(candidates)} feed candidates on {self.page_url}",
            extra={"favicon": favicon},
        )
        return ScanResult(candidates=candidates, favicon=favicon)

    def _resolve(self, href: str) -> str:
        return urljoin(self.page_url, href.strip())

    def advertised_feeds(self) -> List[ScanCandidate]:
        candidates = []
        for kind, link_type in LINK_TYPES:
            for element in self.soup.find_all("link", href=True):
                declared = (element.get("type") or "").strip().lower()
                if declared != link_type:
                    continue
                candidates.append(
                    ScanCandidate(url=self._resolve(element["href"]), kind=kind)
                )
        return candidates

    def wordpress_feeds(self, found: List[ScanCandidate]) -> List[ScanCandidate]:
        element = self.soup.find("link", rel=WP_API_REL, href=True)
        if element is None:
            return []

        api_base = self._resolve(element["href"])
        candidates = [
            ScanCandidate(url=urljoin(api_base, WP_POSTS_PATH), kind=FeedKind.WP),
            ScanCandidate(url=urljoin(self.page_url, WP_POSTS_PATH), kind=FeedKind.WP),
        ]

        if not any(candidate.url.endswith(WP_FEED_PATH) for candidate in found):
            candidates.extend(
                [
                    ScanCandidate(url=urljoin(api_base, WP_FEED_PATH), kind=FeedKind.RSS),
                    ScanCandidate(url=urljoin(self.page_url, WP_FEED_PATH), kind=FeedKind.RSS),
                ]
            )

        return candidates

    def rss_anchors(self) -> List[ScanCandidate]:
        return [
            ScanCandidate(url=self._resolve(element["href"]), kind=FeedKind.RSS)
            for element in self.soup.find_all("a", href=True)
            if "rss" in element["href"]
        ]

    def favicon(self) -> Optional[str]:
        element = self.soup.find("link", rel="icon", href=True)
        if element is None:
            return None
        return self._resolve(element["href"])


def scan_page(page_url: str, html: str) -> ScanResult:
    """Scan ``html`` served at ``page_url`` for feed candidates."""
    return PageScanner(page_url, html).scan()
