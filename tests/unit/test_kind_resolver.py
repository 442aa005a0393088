"""
Unit Tests for Kind Resolution
==============================

Tests for parser tie-breaking and kind cache updates.
"""

from unittest.mock import AsyncMock

import pytest

from feedcollector.models import Feed, FeedKind
from feedcollector.processing.kind_cache import InMemoryKindCache, KindCache, NoOpKindCache
from feedcollector.processing.kind_resolver import KindResolver, select_feed
from feedcollector.utils.exceptions import NetworkError, NoFeedFound, RssParseError


URL = "https://example.com/unknown"


def feed_of(kind: FeedKind, name: str = "") -> Feed:
    return Feed(link=URL, kind=kind, name=name)


class TestSelectFeed:

    def test_no_success(self):
        assert select_feed([]) is None

    def test_single_success(self):
        atom = feed_of(FeedKind.ATOM)
        assert select_feed([atom]) is atom

    def test_rss_preferred(self):
        atom, rss = feed_of(FeedKind.ATOM), feed_of(FeedKind.RSS)
        assert select_feed([atom, rss]) is rss

    def test_first_success_without_rss(self):
        first, second = feed_of(FeedKind.ATOM, "first"), feed_of(FeedKind.ATOM, "second")
        assert select_feed([first, second]) is first


class TestKindCaches:

    @pytest.mark.asyncio
    async def test_noop_cache_always_misses(self):
        cache = NoOpKindCache()

        assert await cache.set(URL, FeedKind.RSS) is True
        assert await cache.get(URL) is None

    @pytest.mark.asyncio
    async def test_in_memory_cache(self):
        cache = InMemoryKindCache()

        assert await cache.get(URL) is None
        assert await cache.set(URL, FeedKind.ATOM) is True
        assert await cache.get(URL) is FeedKind.ATOM
        assert URL in cache
        assert len(cache) == 1

    def test_caches_satisfy_protocol(self):
        assert isinstance(NoOpKindCache(), KindCache)
        assert isinstance(InMemoryKindCache(), KindCache)


class TestKindResolver:

    @pytest.mark.asyncio
    async def test_resolves_rss_and_caches_kind(self, fetcher_factory, rss_text):
        fetcher = fetcher_factory({URL: rss_text})
        cache = InMemoryKindCache()
        resolver = KindResolver(fetcher, cache)

        feed = await resolver.resolve(URL)

        assert feed.kind is FeedKind.RSS
        assert feed.link == URL
        assert await cache.get(URL) is FeedKind.RSS
        assert fetcher.calls == [URL]

    @pytest.mark.asyncio
    async def test_resolves_atom(self, fetcher_factory, atom_text):
        cache = InMemoryKindCache()
        resolver = KindResolver(fetcher_factory({URL: atom_text}), cache)

        feed = await resolver.resolve(URL)

        assert feed.kind is FeedKind.ATOM
        assert await cache.get(URL) is FeedKind.ATOM

    @pytest.mark.asyncio
    async def test_no_parser_matches(self, fetcher_factory, html_page):
        cache = InMemoryKindCache()
        resolver = KindResolver(fetcher_factory({URL: html_page}), cache)

        with pytest.raises(NoFeedFound) as exc_info:
            await resolver.resolve(URL)

        assert exc_info.value.feed_url == URL
        assert URL not in cache

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, fetcher_factory):
        resolver = KindResolver(fetcher_factory({}))

        with pytest.raises(NetworkError):
            await resolver.resolve(URL)

    @pytest.mark.asyncio
    async def test_cache_write_failure_is_not_propagated(self, fetcher_factory, rss_text):
        cache = AsyncMock()
        cache.set.side_effect = RuntimeError("cache unavailable")
        resolver = KindResolver(fetcher_factory({URL: rss_text}), cache)

        feed = await resolver.resolve(URL)

        assert feed.kind is FeedKind.RSS
        cache.set.assert_awaited_once_with(URL, FeedKind.RSS)

    @pytest.mark.asyncio
    async def test_rejected_cache_write_is_not_propagated(self, fetcher_factory, rss_text):
        cache = AsyncMock()
        cache.set.return_value = False
        resolver = KindResolver(fetcher_factory({URL: rss_text}), cache)

        assert (await resolver.resolve(URL)).kind is FeedKind.RSS

    @pytest.mark.asyncio
    async def test_rss_wins_when_both_parsers_succeed(self, fetcher_factory):
        def as_atom(source_url, text):
            return Feed(link=source_url, kind=FeedKind.ATOM, name=text)

        def as_rss(source_url, text):
            return Feed(link=source_url, kind=FeedKind.RSS, name=text)

        fetcher = fetcher_factory({URL: "ambiguous"})
        resolver = KindResolver(
            fetcher,
            InMemoryKindCache(),
            parsers=((FeedKind.ATOM, as_atom), (FeedKind.RSS, as_rss)),
        )

        kinds = [(await resolver.resolve(URL)).kind for _ in range(3)]

        assert kinds == [FeedKind.RSS] * 3

    def test_parse_all_drops_failures(self, fetcher_factory, atom_text):
        def broken(source_url, text):
            raise RssParseError("nope", feed_url=source_url)

        def as_atom(source_url, text):
            return Feed(link=source_url, kind=FeedKind.ATOM)

        resolver = KindResolver(
            fetcher_factory(),
            parsers=((FeedKind.RSS, broken), (FeedKind.ATOM, as_atom)),
        )

        feeds = resolver.parse_all(URL, atom_text)

        assert [feed.kind for feed in feeds] == [FeedKind.ATOM]
