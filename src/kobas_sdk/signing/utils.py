"""
Utility functions for request signing

This module provides URL parsing and service derivation, header name and
value normalization, timestamp handling and timing helpers used by the
request normalizer and the signer.
"""

import re
import time
from datetime import datetime, timezone
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

from .codec import rfc3986_decode
from .types import (
    DATE_STAMP_FORMAT,
    REQUEST_DATETIME_FORMAT,
    ParsedUrl,
)
from ..exceptions import (
    EncodingFailure,
    InvalidUrl,
    SigningError,
    SigningErrorCodes,
)

SUPPORTED_SCHEMES = ('http', 'https')

# Path segment removed when deriving the service name
VERSION_PATH_SEGMENT = '/v2'

_WHITESPACE_RE = re.compile(r'\s+', re.ASCII)
_DIGITS_RE = re.compile(r'([0-9]+)')
_FORBIDDEN_HEADER_CHARS = frozenset('\r\n\0')


def parse_url(url: str) -> ParsedUrl:
    """
    Parse URL to extract the components needed for signing.

    The raw query is percent-decoded exactly once so that query strings
    which were encoded twice on their way here canonicalize the same as
    ones encoded once.

    Args:
        url: Absolute request URL

    Returns:
        ParsedUrl: Path, decoded query and derived service name

    Raises:
        InvalidUrl: If the URL is not an absolute http(s) URL
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl(
            "Request URL cannot be empty",
            {"url": repr(url)}
        )

    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidUrl(
            f"Failed to parse URL: {e}",
            {"url": url, "original_error": str(e)}
        ) from e

    if not parts.scheme or not parts.netloc:
        raise InvalidUrl(
            f"Invalid URL format: {url}",
            {"url": url}
        )

    # Only allow HTTP/HTTPS schemes for signing
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise InvalidUrl(
            f"Unsupported URL scheme: {parts.scheme}",
            {"url": url, "scheme": parts.scheme}
        )

    query = rfc3986_decode(parts.query) if parts.query else ''

    return ParsedUrl(
        path=parts.path,
        query=query,
        service=derive_service(parts.path)
    )


def derive_service(path: str) -> str:
    """
    Derive the logical service name from a request path.

    ``/v2`` is removed and surrounding slashes are trimmed, so
    ``/v2/orders`` becomes ``orders``.

    Args:
        path: URL path

    Returns:
        str: Service name (empty for the root path)
    """
    return path.replace(VERSION_PATH_SEGMENT, '').strip('/')


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name

    Raises:
        EncodingFailure: If the name is not a non-empty string
    """
    if not isinstance(name, str) or not name.strip():
        raise EncodingFailure(
            f"Invalid header name: {name!r}",
            {"name": repr(name)}
        )

    return name.lower().strip()


def header_value_text(name: str, value: Any) -> str:
    """
    Convert a header value to text.

    Args:
        name: Header name, used in error details
        value: str, UTF-8 bytes or a number

    Returns:
        str: Header value as text

    Raises:
        EncodingFailure: If the value cannot be represented as text or contains
            CR, LF or NUL
    """
    if isinstance(value, (bytes, bytearray)):
        try:
            return _check_header_text(name, bytes(value).decode('utf-8'))
        except UnicodeDecodeError as e:
            raise EncodingFailure(
                f"Header {name} is not valid UTF-8: {e.reason}",
                {"header": name}
            ) from e

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)

    if not isinstance(value, str):
        raise EncodingFailure(
            f"Header {name} has unsupported value type {type(value).__name__}",
            {"header": name, "value_type": type(value).__name__}
        )

    try:
        value.encode('utf-8')
    except UnicodeEncodeError as e:
        raise EncodingFailure(
            f"Header {name} is not valid text: {e.reason}",
            {"header": name}
        ) from e

    return _check_header_text(name, value)


def _check_header_text(name: str, value: str) -> str:
    # Line breaks would end the "Name: Value" line early
    if any(ch in _FORBIDDEN_HEADER_CHARS for ch in value):
        raise EncodingFailure(
            f"Header {name} contains a line break or NUL character",
            {"header": name}
        )
    return value


def collapse_whitespace(value: str) -> str:
    """
    Collapse runs of whitespace to a single space and trim the ends.

    Args:
        value: Header value

    Returns:
        str: Normalized value
    """
    return _WHITESPACE_RE.sub(' ', value).strip(' ')


def natural_sort_key(name: str) -> List[Union[str, int]]:
    """
    Case-insensitive natural-order sort key.

    Digit runs compare numerically, so ``x-part2`` sorts before ``x-part10``.

    Args:
        name: Header name

    Returns:
        list: Sort key alternating text and integer chunks
    """
    return [
        int(chunk) if index % 2 else chunk
        for index, chunk in enumerate(_DIGITS_RE.split(name.lower()))
    ]


def generate_timestamp() -> datetime:
    """
    Generate the current UTC time.

    Returns:
        datetime: Timezone-aware current time
    """
    return datetime.now(timezone.utc)


def coerce_timestamp(timestamp: Union[datetime, int, float]) -> datetime:
    """
    Convert a signing time to a timezone-aware UTC datetime.

    Args:
        timestamp: datetime (naive values are taken as UTC) or Unix seconds

    Returns:
        datetime: UTC datetime

    Raises:
        SigningError: If the timestamp is invalid
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            result = timestamp.replace(tzinfo=timezone.utc)
        else:
            result = timestamp.astimezone(timezone.utc)
    elif isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        try:
            result = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise SigningError(
                f"Invalid timestamp: {timestamp}",
                SigningErrorCodes.INVALID_TIMESTAMP,
                {"timestamp": timestamp, "original_error": str(e)}
            ) from e
    else:
        raise SigningError(
            f"Timestamp must be a datetime or Unix seconds, got {type(timestamp).__name__}",
            SigningErrorCodes.INVALID_TIMESTAMP,
            {"timestamp_type": type(timestamp).__name__}
        )

    if not validate_timestamp(result):
        raise SigningError(
            f"Timestamp out of range: {result.isoformat()}",
            SigningErrorCodes.INVALID_TIMESTAMP,
            {"timestamp": result.isoformat()}
        )

    return result


def validate_timestamp(timestamp: datetime) -> bool:
    """
    Validate timestamp (must format as a four-digit year on or after 1970).

    Args:
        timestamp: datetime to validate

    Returns:
        bool: True if timestamp is valid
    """
    if not isinstance(timestamp, datetime):
        return False

    return 1970 <= timestamp.year <= 9999


def format_request_datetime(timestamp: Optional[datetime] = None) -> str:
    """
    Format timestamp as ISO-8601 basic UTC (``YYYYMMDDTHHMMSSZ``).

    Args:
        timestamp: Signing time (uses current time if None)

    Returns:
        str: Formatted timestamp
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    return coerce_timestamp(timestamp).strftime(REQUEST_DATETIME_FORMAT)


def format_date_stamp(timestamp: Optional[datetime] = None) -> str:
    """
    Format timestamp as a UTC date stamp (``YYYYMMDD``).

    Args:
        timestamp: Signing time (uses current time if None)

    Returns:
        str: Formatted date
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    return coerce_timestamp(timestamp).strftime(DATE_STAMP_FORMAT)


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000

    def reset(self) -> None:
        """Reset the timer."""
        self.start_time = time.perf_counter()
