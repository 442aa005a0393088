"""
FeedCollector Processing Module
===============================

Orchestration components: kind cache, kind resolution and the collector
engine.
"""

from .kind_cache import KindCache, NoOpKindCache, InMemoryKindCache
from .kind_resolver import KindResolver, select_feed
from .collector import CollectorEngine, ResultsHandler, QueueResultsHandler

__all__ = [
    'KindCache',
    'NoOpKindCache',
    'InMemoryKindCache',
    'KindResolver',
    'select_feed',
    'CollectorEngine',
    'ResultsHandler',
    'QueueResultsHandler',
]
