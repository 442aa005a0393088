"""
FeedCollector - Feed Collection Engine
======================================

Concurrent RSS/Atom collection with feed-kind detection and page discovery.

Main Components:
- Ingestion: HTTP fetching, RSS/Atom normalization, HTML page scanning
- Processing: kind resolution with a pluggable cache, batch collector engine
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__description__ = "Concurrent RSS/Atom collector with feed discovery"

from .config.settings import get_settings
from .models import Feed, FeedItem, FeedKind, CollectResult
from .processing.collector import CollectorEngine, ResultsHandler, QueueResultsHandler
from .processing.kind_cache import KindCache, NoOpKindCache, InMemoryKindCache
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import CollectorError

__all__ = [
    "get_settings",
    "Feed",
    "FeedItem",
    "FeedKind",
    "CollectResult",
    "CollectorEngine",
    "ResultsHandler",
    "QueueResultsHandler",
    "KindCache",
    "NoOpKindCache",
    "InMemoryKindCache",
    "configure_application_logging",
    "get_logger_for_component",
    "CollectorError",
]
