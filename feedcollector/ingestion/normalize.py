"""
Entry Normalization Helpers
===========================

Fallback rules that turn loosely populated feed entries into ``FeedItem``
fields: publication date with a UTC "now" default, first image found in the
entry markup, and the guid fallback chain.
"""

import time
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from typing import Any, Optional

from bs4 import BeautifulSoup

from ..utils.logging import get_logger_for_component

logger = get_logger_for_component("normalize")

HTML_PARSER = "html.parser"


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_pub_date(*date_tuples: Optional[time.struct_time]) -> datetime:
    """Convert the first usable feedparser ``*_parsed`` value to UTC.

    feedparser normalizes every recognized date format to a UTC
    ``struct_time``; ``None`` means the field was missing or unparseable.
    Falls back to the current UTC instant.
    """
    for date_tuple in date_tuples:
        if not date_tuple:
            continue
        try:
            return datetime(*date_tuple[:6], tzinfo=timezone.utc)
        except (ValueError, TypeError):
            continue

    return utc_now()


def parse_rfc2822_date(value: Optional[str]) -> datetime:
    """Parse an RSS ``pubDate``; other formats fall back to the current UTC instant."""
    if not value:
        return utc_now()

    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError, OverflowError):
        logger.debug(f"Unparseable RFC 2822 date: {value!r}")
        return utc_now()

    if parsed.tzinfo is None:
        # "-0000" means UTC with unknown local offset
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_first_image(markup: Optional[str]) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` in an HTML fragment."""
    if not markup:
        return None

    try:
        soup = BeautifulSoup(markup, HTML_PARSER)
    except Exception as e:
        logger.debug(f"Markup not parseable while looking for images: {e}")
        return None

    img = soup.find("img")
    if img is None:
        return None

    src = img.get("src")
    if isinstance(src, str) and src.strip():
        return src.strip()

    return None


def derive_guid(entry: Any) -> Optional[str]:
    """Explicit id/guid first, then the entry link; None when neither exists."""
    for field in ("id", "guid", "link"):
        value = entry.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()

    return None


def extract_description(entry: Any) -> str:
    """Description (RSS) or summary (Atom) text of an entry."""
    for field in ("summary", "description"):
        value = entry.get(field)
        if isinstance(value, str) and value:
            return value

    return ""


def extract_content(entry: Any) -> str:
    """Explicit content body if present, else description/summary."""
    contents = entry.get("content")
    if isinstance(contents, list):
        for part in contents:
            value = part.get("value") if isinstance(part, dict) else None
            if value:
                return value

    return extract_description(entry)


def extract_title(entry: Any) -> Optional[str]:
    """Entry title, or None when the upstream entry has none."""
    title = entry.get("title")
    if isinstance(title, str):
        return title

    return None
