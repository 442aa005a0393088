"""
Kind Resolver
=============

Determines the format of a source whose kind was not declared by fetching it
once and running every format parser against the same text.
"""

from typing import List, Optional, Tuple

from ..models import Feed, FeedKind
from ..ingestion.fetcher import HttpFetcher
from ..ingestion.parsers import PARSERS, Parser
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedParseError, NoFeedFound
from .kind_cache import KindCache, NoOpKindCache


def select_feed(successes: List[Feed]) -> Optional[Feed]:
    """Tie-break between successful parses of one document.

    RSS wins when present, otherwise the first success in attempt order.
    """
    if not successes:
        return None

    for feed in successes:
        if feed.kind is FeedKind.RSS:
            return feed

    return successes[0]


class KindResolver:
    """Resolves unknown-kind sources to a feed and remembers the kind."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        cache: Optional[KindCache] = None,
        parsers: Tuple[Tuple[FeedKind, Parser], ...] = PARSERS,
    ):
        self.fetcher = fetcher
        self.cache = cache if cache is not None else NoOpKindCache()
        self.parsers = parsers
        self.logger = get_logger_for_component("kind_resolver")

    def parse_all(self, source_url: str, text: str) -> List[Feed]:
        """Run every parser on ``text``; failures are logged and dropped."""
        successes = []

        for kind, parser in self.parsers:
            try:
                successes.append(parser(source_url, text))
            except FeedParseError as e:
                self.logger.debug(
                    f"{kind.value} parser rejected {source_url}: {e.message}"
                )

        return successes

    async def resolve(self, source_url: str) -> Feed:
        """Fetch ``source_url`` and return the feed of whichever kind parses.

        Raises:
            NetworkError: If the document cannot be fetched
            NoFeedFound: If no parser accepts the document
        """
        text = await self.fetcher.fetch(source_url)
        feed = select_feed(self.parse_all(source_url, text))

        if feed is None:
            raise NoFeedFound(
                f"No feed format matched the document at {source_url}",
                feed_url=source_url,
            )

        self.logger.info(f"Resolved {source_url} as {feed.kind.value}")
        await self.remember(source_url, feed.kind)
        return feed

    async def remember(self, source_url: str, kind: FeedKind) -> None:
        """Store the resolved kind; failures are logged, never raised."""
        try:
            stored = await self.cache.set(source_url, kind)
        except Exception as e:
            self.logger.warning(f"Failed to cache kind for {source_url}: {e}")
            return

        if stored is False:
            self.logger.warning(f"Cache rejected kind {kind.value} for {source_url}")
