"""
FeedCollector Data Models
=========================

Normalized representation shared by every feed format, plus the small
records exchanged between the page scanner, the collector engine and its
results handler.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.exceptions import CollectorError


class FeedKind(str, Enum):
    """Syndication format of a source."""
    RSS = "rss"
    ATOM = "atom"
    WP = "wp"  # WordPress REST, detected but never collected

    @classmethod
    def fetchable(cls) -> Tuple["FeedKind", ...]:
        return (cls.RSS, cls.ATOM)


class FeedItem(BaseModel):
    """One entry of a feed."""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(default=None, description="Entry title, absent upstream means None")
    content: str = Field(default="", description="Richest available body text")
    pub_date: datetime = Field(..., description="Publication instant in UTC")
    guid: str = Field(..., min_length=1, description="Stable entry identifier")
    image_link: Optional[str] = Field(default=None, description="First image in the entry markup")

    @field_validator("pub_date")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class Feed(BaseModel):
    """One parsed source."""
    model_config = ConfigDict(frozen=True)

    image: Optional[str] = Field(default=None, description="Feed-level artwork URL")
    link: str = Field(..., description="Source URL exactly as requested")
    kind: FeedKind = Field(..., description="Format the document was parsed as")
    name: str = Field(default="", description="Channel title verbatim")
    content: List[FeedItem] = Field(default_factory=list, description="Entries in document order")

    @field_validator("kind")
    @classmethod
    def kind_is_fetchable(cls, v: FeedKind) -> FeedKind:
        if v not in FeedKind.fetchable():
            raise ValueError(f"feed kind {v.value!r} cannot be collected")
        return v

    def with_image(self, image: Optional[str]) -> "Feed":
        """Return a copy carrying ``image`` as its artwork."""
        return self.model_copy(update={"image": image})

    def __str__(self) -> str:
        return f"Feed({self.kind.value}:{self.link}, {len(self.content)} items)"


Source = Tuple[Optional[FeedKind], str]


class ScanCandidate(BaseModel):
    """Feed URL discovered on a page, paired with its guessed kind."""
    model_config = ConfigDict(frozen=True)

    url: str
    kind: FeedKind


class ScanResult(BaseModel):
    """Everything the page scanner extracted from one HTML document."""
    candidates: List[ScanCandidate] = Field(default_factory=list)
    favicon: Optional[str] = None


class CollectResult(BaseModel):
    """Outcome of collecting one source, handed to a results handler."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    url: str = Field(..., description="Source URL as submitted")
    feed: Optional[Feed] = None
    kind: Optional[FeedKind] = Field(default=None, description="Kind the feed was collected as")
    error: Optional[CollectorError] = None
    collected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None and self.feed is not None

    @classmethod
    def success(cls, feed: Feed, kind: FeedKind, url: str) -> "CollectResult":
        return cls(url=url, feed=feed, kind=kind)

    @classmethod
    def failure(cls, error: CollectorError, url: str) -> "CollectResult":
        return cls(url=url, error=error)
