"""
Unit Tests for the Error Taxonomy
=================================
"""

import logging
from unittest.mock import Mock

from feedcollector.utils.exceptions import (
    AtomParseError,
    CollectorError,
    ErrorCode,
    FeedError,
    FeedParseError,
    NetworkError,
    NoFeedFound,
    RssParseError,
    SourceKindUnsupported,
    UrlParseError,
    handle_exception,
    is_retryable_error,
)


class TestTaxonomy:

    def test_codes_and_recoverability(self):
        cases = [
            (NetworkError("x"), ErrorCode.FEED_NETWORK_ERROR, True),
            (RssParseError("x"), ErrorCode.FEED_PARSE_ERROR, False),
            (AtomParseError("x"), ErrorCode.FEED_PARSE_ERROR, False),
            (UrlParseError("x"), ErrorCode.FEED_INVALID_URL, False),
            (NoFeedFound("x"), ErrorCode.FEED_NOT_FOUND, False),
            (SourceKindUnsupported("x"), ErrorCode.FEED_KIND_UNSUPPORTED, False),
        ]

        for error, code, recoverable in cases:
            assert isinstance(error, FeedError)
            assert error.error_code is code
            assert error.recoverable is recoverable

    def test_parse_errors_record_format(self):
        error = AtomParseError("bad", feed_url="https://example.com/a")

        assert isinstance(error, FeedParseError)
        assert error.context == {"feed_url": "https://example.com/a", "feed_kind": "atom"}

    def test_str_and_to_dict(self):
        error = NetworkError("HTTP 500: Server Error", feed_url="https://example.com", status=500)

        assert str(error) == "[F004] HTTP 500: Server Error"
        assert error.to_dict() == {
            "error_type": "NetworkError",
            "error_code": "F004",
            "error_message": "HTTP 500: Server Error",
            "context": {"feed_url": "https://example.com", "status": 500},
            "recoverable": True,
        }


class TestHandleException:

    def setup_method(self):
        self.logger = Mock(spec=logging.Logger)

    def test_collector_errors_pass_through(self):
        original = NoFeedFound("nothing")

        assert handle_exception(original, self.logger, "resolve") is original
        self.logger.error.assert_called_once()

    def test_connection_error_becomes_network_error(self):
        error = handle_exception(
            ConnectionError("reset"), self.logger, "fetch", {"feed_url": "https://e.com"}
        )

        assert isinstance(error, NetworkError)
        assert error.feed_url == "https://e.com"
        assert error.context["operation"] == "fetch"

    def test_timeout_error(self):
        error = handle_exception(TimeoutError(), self.logger, "fetch")

        assert isinstance(error, NetworkError)
        assert error.error_code is ErrorCode.FEED_FETCH_TIMEOUT

    def test_unexpected_error(self):
        error = handle_exception(KeyError("k"), self.logger, "parse", {"feed_url": "u"})

        assert type(error) is CollectorError
        assert error.error_code is ErrorCode.UNEXPECTED
        assert error.context["original_exception_type"] == "KeyError"
        assert error.context["feed_url"] == "u"


def test_is_retryable_error():
    assert is_retryable_error(NetworkError("down"))
    assert not is_retryable_error(RssParseError("bad"))
    assert not is_retryable_error(SourceKindUnsupported("wp"))
    assert not is_retryable_error(CollectorError("x", error_code=ErrorCode.FEED_NETWORK_ERROR))
