"""
HTTP Fetcher
============

Single-GET document fetcher on top of aiohttp. Every transport failure is
reported as ``NetworkError``; there are no retries at this layer.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
import certifi

from ..config.settings import HttpSettings, get_settings
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import NetworkError, ErrorCode


class HttpFetcher:
    """Fetches source documents as text."""

    def __init__(self, http_settings: Optional[HttpSettings] = None):
        """Initialize fetcher.

        Args:
            http_settings: Transport configuration (default from config)
        """
        self.settings = http_settings or get_settings().http
        self.logger = get_logger_for_component("fetcher")
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_users = 0

        if self.settings.verify_ssl:
            self.ssl_context = ssl.create_default_context(cafile=certifi.where())
        else:
            self.ssl_context = False

    def _create_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            ssl=self.ssl_context,
            limit=self.settings.connection_limit,
            limit_per_host=self.settings.limit_per_host,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": self.settings.accept,
        }
        return aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        )

    @asynccontextmanager
    async def open_session(self) -> AsyncIterator["HttpFetcher"]:
        """Share one connection pool between fetches made inside the block.

        Overlapping blocks reuse the open session; it is closed when the
        last block exits.
        """
        if self._session is None:
            self._session = self._create_session()
        self._session_users += 1
        try:
            yield self
        finally:
            self._session_users -= 1
            if self._session_users == 0:
                session, self._session = self._session, None
                await session.close()

    async def fetch(self, url: str) -> str:
        """Perform one GET and return the body as text.

        Raises:
            NetworkError: On any transport failure, non-success status or
                undecodable body
        """
        if self._session is not None:
            return await self._get(self._session, url)

        async with self._create_session() as session:
            return await self._get(session, url)

    async def _get(self, session: aiohttp.ClientSession, url: str) -> str:
        self.logger.debug(f"Fetching {url}")

        try:
            async with session.get(url) as response:
                if response.status >= 400:
                    raise NetworkError(
                        f"HTTP {response.status}: {response.reason}",
                        feed_url=url,
                        status=response.status,
                    )
                text = await response.text()

        except NetworkError as e:
            self.logger.warning(f"Fetch failed for {url}: {e.message}")
            raise
        except asyncio.TimeoutError as e:
            self.logger.warning(f"Fetch timeout for {url}")
            raise NetworkError(
                f"Request timeout after {self.settings.request_timeout}s",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e
        except aiohttp.ClientError as e:
            self.logger.warning(f"Fetch failed for {url}: {e}")
            raise NetworkError(f"Can't get text: {e}", feed_url=url) from e
        except (UnicodeDecodeError, LookupError) as e:
            self.logger.warning(f"Body of {url} is not text: {e}")
            raise NetworkError(f"Can't decode body: {e}", feed_url=url) from e

        self.logger.debug(f"Fetched {len(text)} chars from {url}")
        return text
