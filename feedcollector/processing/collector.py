"""
Collector Engine
================

Orchestrates fetching and parsing of feed sources:

- ``scrape_feed`` collects one source, dispatching on its declared kind,
  the kind cache or kind resolution
- ``run`` consumes batches of sources, fans each batch out concurrently and
  hands every outcome to a results handler before pulling the next batch
- ``detect_feeds`` discovers and resolves the feeds behind an HTML page

Fan-out is unbounded unless ``max_concurrent_fetches`` is configured.
"""

import asyncio
from typing import (
    AsyncIterable,
    Awaitable,
    Iterable,
    List,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from ..config.settings import get_settings
from ..models import CollectResult, Feed, FeedKind, ScanCandidate, Source
from ..ingestion.fetcher import HttpFetcher
from ..ingestion.page_scanner import scan_page
from ..ingestion.parsers import parser_for
from ..utils.logging import get_logger_for_component, PerformanceLogger
from ..utils.exceptions import (
    CollectorError,
    SourceKindUnsupported,
    handle_exception,
)
from ..utils.validators import URLValidator
from .kind_cache import KindCache, NoOpKindCache
from .kind_resolver import KindResolver

T = TypeVar("T")


@runtime_checkable
class ResultsHandler(Protocol):
    """Receives the outcome of every source processed by ``run``.

    ``process`` is awaited from many tasks of the same batch concurrently.
    """

    async def process(self, result: CollectResult) -> None:
        ...


class QueueResultsHandler:
    """Forwards results to an ``asyncio.Queue`` for a separate consumer."""

    def __init__(self, queue: Optional["asyncio.Queue[CollectResult]"] = None):
        self.queue: "asyncio.Queue[CollectResult]" = queue if queue is not None else asyncio.Queue()

    async def process(self, result: CollectResult) -> None:
        await self.queue.put(result)


class CollectorEngine:
    """Concurrent fetch/parse pipeline over feed sources."""

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        cache: Optional[KindCache] = None,
        max_concurrent_fetches: Optional[int] = None,
    ):
        """Initialize collector engine.

        Args:
            fetcher: Document fetcher (default: aiohttp fetcher from config)
            cache: Kind cache capability (default: always-miss stub)
            max_concurrent_fetches: Bound on in-flight sources per batch or
                discovery call (default from config, unset = unbounded)
        """
        self.fetcher = fetcher if fetcher is not None else HttpFetcher()
        self.cache = cache if cache is not None else NoOpKindCache()
        self.resolver = KindResolver(self.fetcher, self.cache)
        if max_concurrent_fetches is None:
            max_concurrent_fetches = get_settings().processing.max_concurrent_fetches
        self.max_concurrent_fetches = max_concurrent_fetches
        self.logger = get_logger_for_component("collector")

    async def __aenter__(self) -> "CollectorEngine":
        self._session_context = self.fetcher.open_session()
        await self._session_context.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._session_context.__aexit__(exc_type, exc_val, exc_tb)

    async def scrape_feed(self, kind: Optional[FeedKind], url: str) -> Feed:
        """Collect one source.

        Args:
            kind: Declared kind, or None to consult the cache / resolve
            url: Source URL

        Returns:
            Parsed feed

        Raises:
            UrlParseError: If the URL is malformed
            SourceKindUnsupported: If the kind is WP
            NetworkError: If the document cannot be fetched
            RssParseError, AtomParseError: If the document is not of the
                declared kind
            NoFeedFound: If an undeclared kind cannot be resolved
        """
        if kind is FeedKind.WP:
            raise SourceKindUnsupported(
                f"{kind.value} sources are not supported", feed_url=url
            )

        URLValidator.validate_source_url(url)

        if kind is None:
            kind = await self._cached_kind(url)
            if kind is None:
                return await self.resolver.resolve(url)

        parser = parser_for(kind)
        if parser is None:
            raise SourceKindUnsupported(
                f"{kind.value} sources are not supported", feed_url=url
            )

        text = await self.fetcher.fetch(url)
        return parser(url, text)

    async def _cached_kind(self, url: str) -> Optional[FeedKind]:
        try:
            kind = await self.cache.get(url)
        except Exception as e:
            self.logger.warning(f"Kind cache lookup failed for {url}: {e}")
            return None

        if kind is not None:
            self.logger.debug(f"Kind cache hit for {url}: {kind.value}")
        return kind

    async def collect(self, kind: Optional[FeedKind], url: str) -> CollectResult:
        """Collect one source and wrap the outcome instead of raising."""
        try:
            feed = await self.scrape_feed(kind, url)
        except CollectorError as e:
            self.logger.warning(f"Failed to collect {url}: {e}")
            return CollectResult.failure(e, url)
        except Exception as e:
            error = handle_exception(
                e, self.logger, "scrape_feed", {"feed_url": url}
            )
            return CollectResult.failure(error, url)

        self.logger.debug(f"Collected {len(feed.content)} items from {url}")
        return CollectResult.success(feed, kind or feed.kind, url)

    async def _collect_and_process(
        self, source: Source, results_handler: ResultsHandler
    ) -> CollectResult:
        kind, url = source
        self.logger.debug(f"Want to scrape: ({kind.value if kind else 'unknown'}) {url}")
        result = await self.collect(kind, url)

        try:
            await results_handler.process(result)
        except Exception as e:
            self.logger.error(
                f"Results handler failed for {url}: {e}", exc_info=True
            )

        return result

    async def process_batch(
        self, batch: Iterable[Source], results_handler: ResultsHandler
    ) -> List[CollectResult]:
        """Collect every source of one batch and wait for all of them."""
        sources = list(batch)
        self.logger.info(f"Found sources: {len(sources)}")

        with PerformanceLogger(self.logger, "batch", sources=len(sources)):
            results = await self._gather(
                self._collect_and_process(source, results_handler)
                for source in sources
            )

        successful = sum(1 for result in results if result.ok)
        self.logger.info(f"Batch complete: {successful}/{len(results)} sources collected")
        return results

    async def run(
        self,
        source_batches: AsyncIterable[Iterable[Source]],
        results_handler: ResultsHandler,
        stop_event: Optional[asyncio.Event] = None,
    ) -> int:
        """Process batches until the source is exhausted or stopped.

        Batches never overlap: the next batch is only pulled after every
        source of the current one has been handed to ``results_handler``.
        ``stop_event`` is checked before each batch is pulled, so a stop
        never consumes a batch it will not process.

        Returns:
            Number of batches processed
        """
        processed = 0

        async with self.fetcher.open_session():
            batches = aiter(source_batches)
            while stop_event is None or not stop_event.is_set():
                try:
                    batch = await anext(batches)
                except StopAsyncIteration:
                    break

                await self.process_batch(batch, results_handler)
                processed += 1

        self.logger.info(f"Collector stopped after {processed} batches")
        return processed

    async def detect_feeds(self, page_url: str) -> List[Feed]:
        """Discover every feed reachable from ``page_url``.

        The page itself is tried as a feed, then every candidate advertised
        on it is resolved concurrently. Candidate failures are logged and
        dropped; feeds resolved from candidates without artwork get the page
        favicon.

        Raises:
            UrlParseError: If the page URL is malformed
            NetworkError: If the page cannot be fetched
        """
        URLValidator.validate_source_url(page_url)

        async with self.fetcher.open_session():
            with PerformanceLogger(self.logger, "feed detection", page_url=page_url):
                body = await self.fetcher.fetch(page_url)

                feeds = self.resolver.parse_all(page_url, body)
                if feeds:
                    self.logger.info(f"Page {page_url} is itself a feed")

                scan = scan_page(page_url, body)
                resolved = await self._gather(
                    self._check_candidate(candidate) for candidate in scan.candidates
                )

        for feed in resolved:
            if feed is None:
                continue
            if feed.image is None and scan.favicon:
                feed = feed.with_image(scan.favicon)
            feeds.append(feed)

        self.logger.info(f"Detected {len(feeds)} feeds on {page_url}")
        return feeds

    async def _check_candidate(self, candidate: ScanCandidate) -> Optional[Feed]:
        self.logger.debug(f"Going to check ({candidate.kind.value}) {candidate.url}")
        try:
            return await self.scrape_feed(candidate.kind, candidate.url)
        except CollectorError as e:
            self.logger.error(f"Candidate {candidate.url} failed: {e}")
        except Exception as e:
            handle_exception(
                e, self.logger, "check_candidate", {"feed_url": candidate.url}
            )
        return None

    async def _gather(self, coroutines: Iterable[Awaitable[T]]) -> List[T]:
        if not self.max_concurrent_fetches:
            return await asyncio.gather(*coroutines)

        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def bounded(coroutine: Awaitable[T]) -> T:
            async with semaphore:
                return await coroutine

        return await asyncio.gather(*(bounded(c) for c in coroutines))
