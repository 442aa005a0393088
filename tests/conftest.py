"""
PyTest Configuration and Fixtures
=================================

Shared documents and test doubles for FeedCollector tests.
"""

import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

os.environ.setdefault("FEEDCOLLECTOR_LOGGING__LEVEL", "DEBUG")


SAMPLE_RSS_FEED = '''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
    <channel>
        <title>Test RSS Feed</title>
        <link>http://example.com</link>
        <description>Test feed for unit testing</description>
        <image>
            <url>http://example.com/logo.png</url>
            <title>Test RSS Feed</title>
            <link>http://example.com</link>
        </image>
        <item>
            <title>Test Article 1</title>
            <link>http://example.com/article1</link>
            <description>&lt;p&gt;&lt;img src="http://example.com/a1.png"&gt;&lt;/p&gt;Summary one</description>
            <content:encoded>&lt;p&gt;Full body one&lt;/p&gt;</content:encoded>
            <pubDate>Thu, 05 Sep 2024 12:00:00 GMT</pubDate>
            <guid isPermaLink="false">article-1-guid</guid>
        </item>
        <item>
            <title>Test Article 2</title>
            <link>http://example.com/article2</link>
            <description>Another test article with some content</description>
            <pubDate>Wed, 04 Sep 2024 15:30:00 +0200</pubDate>
        </item>
    </channel>
</rss>'''

SAMPLE_ATOM_FEED = '''<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Test Atom Feed</title>
    <link href="http://example.com"/>
    <id>http://example.com/feed</id>
    <icon>http://example.com/icon.png</icon>
    <updated>2024-09-07T00:00:01Z</updated>
    <entry>
        <title>Atom Test Article</title>
        <link href="http://example.com/atom-article"/>
        <id>urn:uuid:atom-article-1</id>
        <updated>2024-09-06T08:00:00Z</updated>
        <published>2024-09-05T12:00:00Z</published>
        <summary type="html">&lt;img src="http://example.com/summary.png"&gt; Summary</summary>
        <content type="html">&lt;p&gt;Full content with &lt;em&gt;formatting&lt;/em&gt;&lt;/p&gt;</content>
    </entry>
    <entry>
        <title>Only Updated</title>
        <link href="http://example.com/updated-only"/>
        <id>urn:uuid:atom-article-2</id>
        <updated>2024-09-06T08:00:00Z</updated>
        <summary>Plain summary</summary>
    </entry>
</feed>'''

SAMPLE_HTML_PAGE = '''<!DOCTYPE html>
<html>
<head>
    <title>Example blog</title>
    <link rel="icon" href="/favicon.ico">
    <link rel="alternate" type="application/rss+xml" href="/feed.xml">
    <link rel="alternate" type="application/atom+xml" href="https://example.com/atom.xml">
</head>
<body><a href="/rss/all">All posts</a></body>
</html>'''


class FakeFetcher:
    """In-memory fetcher returning canned documents per URL.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None):
        self.pages: Dict[str, Union[str, Exception]] = dict(pages or {})
        self.calls: List[str] = []
        self.sessions_opened = 0

    @asynccontextmanager
    async def open_session(self):
        self.sessions_opened += 1
        yield self

    async def fetch(self, url: str) -> str:
        from feedcollector.utils.exceptions import NetworkError

        self.calls.append(url)
        if url not in self.pages:
            raise NetworkError("HTTP 404: Not Found", feed_url=url, status=404)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def rss_text():
    return SAMPLE_RSS_FEED


@pytest.fixture
def atom_text():
    return SAMPLE_ATOM_FEED


@pytest.fixture
def html_page():
    return SAMPLE_HTML_PAGE


@pytest.fixture
def fetcher_factory():
    """Build a FakeFetcher from a ``{url: body_or_exception}`` mapping."""
    return FakeFetcher
