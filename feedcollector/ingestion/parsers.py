"""
Feed Format Parsers
===================

RSS and Atom parsers producing the unified ``Feed`` model. XML handling is
delegated to feedparser; a parser accepts a document only when feedparser
identifies it as that parser's format.

Both parsers are pure apart from the current-time fallback for entries
without a usable date.
"""

import io
from typing import Any, Callable, List, Optional, Tuple, Type

import feedparser

from ..models import Feed, FeedItem, FeedKind
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import AtomParseError, FeedParseError, RssParseError
from .normalize import (
    derive_guid,
    extract_content,
    extract_description,
    extract_first_image,
    extract_title,
    parse_pub_date,
    parse_rfc2822_date,
)

logger = get_logger_for_component("parsers")

Parser = Callable[[str, str], Feed]

# Bozo reasons that do not make a document invalid
_BENIGN_BOZO = (feedparser.CharacterEncodingOverride,)


def _load(text: str) -> Any:
    # Text is already decoded; declare utf-8 so an encoding in the XML
    # declaration does not re-decode it. A stream keeps feedparser from
    # treating the text as a URL or file name. No base URI is given so ids
    # and guids are kept verbatim.
    return feedparser.parse(
        io.BytesIO(text.encode("utf-8")),
        response_headers={"content-type": "application/xml; charset=utf-8"},
    )


def _check_document(
    parsed: Any,
    source_url: str,
    version_prefix: str,
    error_cls: Type[FeedParseError],
) -> None:
    version = parsed.get("version") or ""
    if not version.startswith(version_prefix):
        raise error_cls(
            f"Document is not {version_prefix.upper()} (detected {version or 'unknown'})",
            feed_url=source_url,
        )

    bozo_exception = parsed.get("bozo_exception")
    if parsed.get("bozo") and not isinstance(bozo_exception, _BENIGN_BOZO):
        if not parsed.get("entries"):
            raise error_cls(
                f"Invalid {version_prefix.upper()} document: {bozo_exception}",
                feed_url=source_url,
            )
        logger.info(
            f"Feed has parse warnings but contains entries: {source_url}: {bozo_exception}"
        )


def _build_items(entries: List[Any], source_url: str, atom: bool) -> List[FeedItem]:
    items = []

    for position, entry in enumerate(entries):
        guid = derive_guid(entry)
        if guid is None:
            logger.warning(
                f"Can't get unique id for entry #{position} in {source_url}, skipping",
                extra={"entry_title": entry.get("title")},
            )
            continue

        content = extract_content(entry)
        image = extract_first_image(content)
        if image is None:
            description = extract_description(entry)
            if description and description != content:
                image = extract_first_image(description)

        if atom:
            pub_date = parse_pub_date(
                entry.get("published_parsed"), entry.get("updated_parsed")
            )
        else:
            pub_date = parse_rfc2822_date(entry.get("published"))

        items.append(
            FeedItem(
                title=extract_title(entry),
                content=content,
                pub_date=pub_date,
                guid=guid,
                image_link=image,
            )
        )

    return items


def parse_rss(source_url: str, text: str) -> Feed:
    """Parse an RSS document.

    Raises:
        RssParseError: If the text is not a valid RSS document
    """
    parsed = _load(text)
    _check_document(parsed, source_url, "rss", RssParseError)

    channel = parsed.get("feed", {})
    image: Optional[str] = None
    channel_image = channel.get("image")
    if isinstance(channel_image, dict):
        image = channel_image.get("href") or channel_image.get("url") or None

    items = _build_items(parsed.get("entries", []), source_url, atom=False)
    logger.debug(f"Parsed {len(items)} RSS items from {source_url}")

    return Feed(
        image=image,
        link=source_url,
        kind=FeedKind.RSS,
        name=channel.get("title", ""),
        content=items,
    )


def parse_atom(source_url: str, text: str) -> Feed:
    """Parse an Atom document.

    Raises:
        AtomParseError: If the text is not a valid Atom document
    """
    parsed = _load(text)
    _check_document(parsed, source_url, "atom", AtomParseError)

    channel = parsed.get("feed", {})
    items = _build_items(parsed.get("entries", []), source_url, atom=True)
    logger.debug(f"Parsed {len(items)} Atom entries from {source_url}")

    return Feed(
        image=channel.get("icon") or None,
        link=source_url,
        kind=FeedKind.ATOM,
        name=channel.get("title", ""),
        content=items,
    )


# Attempt order used for kind resolution and page bodies
PARSERS: Tuple[Tuple[FeedKind, Parser], ...] = (
    (FeedKind.RSS, parse_rss),
    (FeedKind.ATOM, parse_atom),
)


def parser_for(kind: FeedKind) -> Optional[Parser]:
    """Parser registered for ``kind``; None for kinds that cannot be parsed."""
    for parser_kind, parser in PARSERS:
        if parser_kind is kind:
            return parser
    return None
