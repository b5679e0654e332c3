"""
Unit tests for URL parsing, header normalization and timestamp helpers
"""

import time
from datetime import datetime, timedelta, timezone

import pytest

from kobas_sdk.signing.utils import (
    PerformanceTimer,
    coerce_timestamp,
    collapse_whitespace,
    derive_service,
    format_date_stamp,
    format_request_datetime,
    generate_timestamp,
    header_value_text,
    natural_sort_key,
    normalize_header_name,
    parse_url,
    validate_timestamp,
)
from kobas_sdk.exceptions import EncodingFailure, InvalidUrl, SigningError

NEW_YEAR_2024 = datetime(2024, 1, 1, tzinfo=timezone.utc)
NEW_YEAR_2024_EPOCH = 1704067200


class TestParseUrl:
    """Test URL parsing"""

    def test_parse_url(self):
        parsed = parse_url("https://api.kobas.co.uk/v2/orders?b=2&a=1")

        assert parsed.path == "/v2/orders"
        assert parsed.query == "b=2&a=1"
        assert parsed.service == "orders"

    def test_query_decoded_once(self):
        parsed = parse_url("https://api.kobas.co.uk/v2/orders?q=a%20b&r=%2541")
        assert parsed.query == "q=a b&r=%41"

    def test_no_query(self):
        parsed = parse_url("http://localhost:8080")

        assert parsed.path == ""
        assert parsed.query == ""
        assert parsed.service == ""

    def test_invalid_urls(self):
        """Relative, empty and non-HTTP URLs are rejected"""
        invalid = [
            "",
            "   ",
            None,
            "/v2/orders",
            "not a url",
            "ftp://api.kobas.co.uk/v2/orders",
            "https://[::1/v2/orders",
        ]
        for url in invalid:
            with pytest.raises(InvalidUrl) as exc_info:
                parse_url(url)

            assert exc_info.value.code == "INVALID_URL"


class TestDeriveService:
    """Test service name derivation"""

    def test_strips_version_and_slashes(self):
        assert derive_service("/v2/orders") == "orders"
        assert derive_service("/v2/orders/") == "orders"
        assert derive_service("/v2/orders/items") == "orders/items"
        assert derive_service("/orders") == "orders"

    def test_root(self):
        assert derive_service("/") == ""
        assert derive_service("") == ""
        assert derive_service("/v2") == ""

    def test_every_occurrence_removed(self):
        assert derive_service("/v2/orders/v2/items") == "orders/items"


class TestHeaderHelpers:
    """Test header name and value normalization"""

    def test_normalize_header_name(self):
        assert normalize_header_name("Content-Type") == "content-type"
        assert normalize_header_name(" X-Kbs-Date ") == "x-kbs-date"

    def test_normalize_header_name_invalid(self):
        with pytest.raises(EncodingFailure):
            normalize_header_name("")

        with pytest.raises(EncodingFailure):
            normalize_header_name(None)

    def test_header_value_text(self):
        assert header_value_text("X-A", "text") == "text"
        assert header_value_text("X-A", b"bytes") == "bytes"
        assert header_value_text("X-A", 42) == "42"

    def test_header_value_text_invalid(self):
        """Invalid UTF-8 and unsupported types fail"""
        for value in (b"\xff", "\ud800", None, True, ["a"]):
            with pytest.raises(EncodingFailure) as exc_info:
                header_value_text("X-A", value)

            assert exc_info.value.code == "ENCODING_FAILURE"

    def test_header_value_line_breaks_rejected(self):
        for value in ("a\r\nInjected: 1", "a\nb", "a\rb", "a\0b", b"a\r\nb"):
            with pytest.raises(EncodingFailure):
                header_value_text("X-A", value)

    def test_collapse_whitespace(self):
        assert collapse_whitespace("a   b") == "a b"
        assert collapse_whitespace("  a \t b\n c  ") == "a b c"
        assert collapse_whitespace("") == ""

    def test_natural_sort_key(self):
        names = ["x-part10", "X-Part2", "accept", "x-part1"]
        assert sorted(names, key=natural_sort_key) == ["accept", "x-part1", "X-Part2", "x-part10"]


class TestTimestamps:
    """Test timestamp coercion and formatting"""

    def test_generate_timestamp(self):
        timestamp = generate_timestamp()

        assert timestamp.tzinfo is not None
        assert abs(timestamp.timestamp() - time.time()) < 2

    def test_coerce_epoch(self):
        assert coerce_timestamp(NEW_YEAR_2024_EPOCH) == NEW_YEAR_2024
        assert coerce_timestamp(float(NEW_YEAR_2024_EPOCH)) == NEW_YEAR_2024

    def test_coerce_naive_is_utc(self):
        coerced = coerce_timestamp(datetime(2024, 1, 1))
        assert coerced == NEW_YEAR_2024
        assert coerced.utcoffset() == timedelta(0)

    def test_coerce_converts_to_utc(self):
        """An aware time in another zone is converted, not relabelled"""
        paris = timezone(timedelta(hours=1))
        coerced = coerce_timestamp(datetime(2024, 1, 1, 1, 0, tzinfo=paris))

        assert coerced == NEW_YEAR_2024
        assert format_request_datetime(coerced) == "20240101T000000Z"

    def test_coerce_invalid(self):
        for value in ("2024-01-01", True, None, datetime(1969, 12, 31), -1):
            with pytest.raises(SigningError) as exc_info:
                coerce_timestamp(value)

            assert exc_info.value.code == "INVALID_TIMESTAMP"

    def test_validate_timestamp(self):
        assert validate_timestamp(NEW_YEAR_2024)
        assert not validate_timestamp(datetime(1969, 1, 1))
        assert not validate_timestamp(NEW_YEAR_2024_EPOCH)

    def test_formats(self):
        moment = datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc)

        assert format_request_datetime(moment) == "20240305T070809Z"
        assert format_date_stamp(moment) == "20240305"

    def test_date_stamp_uses_utc_day(self):
        """Late evening west of UTC is already the next day"""
        new_york = timezone(timedelta(hours=-5))
        moment = datetime(2024, 1, 1, 22, 30, tzinfo=new_york)

        assert format_date_stamp(moment) == "20240102"

    def test_performance_timer(self):
        timer = PerformanceTimer()
        assert timer.elapsed_ms() >= 0

        timer.reset()
        assert timer.elapsed_ms() < 1000
