"""
FeedCollector Input Validators
==============================

Validation of source URLs submitted to the collector.
"""

from urllib.parse import urlparse

from .exceptions import UrlParseError


class URLValidator:
    """URL validation utilities."""

    ALLOWED_SCHEMES = {'http', 'https'}

    @classmethod
    def validate_source_url(cls, url: str) -> str:
        """Check that ``url`` can be fetched.

        The URL is returned unchanged; sources keep the exact form they were
        submitted with.

        Raises:
            UrlParseError: If URL is malformed or not http(s)
        """
        if not url or not isinstance(url, str):
            raise UrlParseError("URL is required and must be a string", feed_url=url or None)

        try:
            parsed = urlparse(url.strip())
        except ValueError as e:
            raise UrlParseError(f"Invalid URL format: {e}", feed_url=url) from e

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise UrlParseError(
                f"URL scheme must be {' or '.join(sorted(cls.ALLOWED_SCHEMES))}",
                feed_url=url,
            )

        if not parsed.netloc:
            raise UrlParseError("URL must include a hostname", feed_url=url)

        return url

