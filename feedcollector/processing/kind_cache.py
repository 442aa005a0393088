"""
Feed Kind Cache
===============

Pluggable memory of which format a URL serves, consulted before running
kind resolution. The collector only depends on the ``KindCache`` protocol;
any object with matching ``get``/``set`` coroutines can be injected.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

from ..models import FeedKind


@runtime_checkable
class KindCache(Protocol):
    """Cache capability used by the collector engine.

    Implementations must tolerate concurrent calls from many tasks.
    """

    async def get(self, url: str) -> Optional[FeedKind]:
        ...

    async def set(self, url: str, kind: FeedKind) -> bool:
        ...


class NoOpKindCache:
    """Default cache: every lookup misses, every write is accepted."""

    async def get(self, url: str) -> Optional[FeedKind]:
        return None

    async def set(self, url: str, kind: FeedKind) -> bool:
        return True


class InMemoryKindCache:
    """Process-local cache for a single event loop.

    Reads and writes never await, so they are atomic with respect to other
    tasks on the same loop. Nothing is persisted.
    """

    def __init__(self, initial: Optional[Dict[str, FeedKind]] = None):
        self._kinds: Dict[str, FeedKind] = dict(initial or {})

    async def get(self, url: str) -> Optional[FeedKind]:
        return self._kinds.get(url)

    async def set(self, url: str, kind: FeedKind) -> bool:
        self._kinds[url] = kind
        return True

    def __len__(self) -> int:
        return len(self._kinds)

    def __contains__(self, url: str) -> bool:
        return url in self._kinds
