"""
Canonical request construction for Kobas request signatures

The canonical request is the byte-stable text that gets hashed into the
string-to-sign:

    METHOD
    CANONICAL_PATH
    CANONICAL_QUERY
    name:value            (one line per signed header)

    signed;header;names
    PAYLOAD_HASH

Query pairs and headers are sorted so that the result does not depend on
the order the caller supplied them in.
"""

from collections.abc import Mapping
from typing import AbstractSet, Any, Iterable, Optional, Tuple

from ..crypto.hashing import hex16, sha256
from ..exceptions import (
    SigningError,
    SigningErrorCodes,
    UnsupportedPayload,
)
from .codec import build_query, rfc3986_encode, sort_payload
from .types import (
    AUTHORIZATION_HEADER,
    NormalizedRequest,
    ParsedUrl,
)
from .utils import (
    collapse_whitespace,
    header_value_text,
    natural_sort_key,
    normalize_header_name,
)

HeaderPairs = Tuple[Tuple[str, str], ...]


class CanonicalRequestBuilder:
    """
    Normalizes one request into its canonical parts
    """

    def __init__(
        self,
        method: str,
        parsed_url: ParsedUrl,
        headers: Mapping,
        params: Any = None,
        signed_headers: Optional[AbstractSet[str]] = None,
        always_signed: Iterable[str] = ()
    ):
        """
        Initialize canonical request builder.

        Args:
            method: HTTP method in any case
            parsed_url: URL split by parse_url()
            headers: Headers to canonicalize, including the date header
            params: Payload (mapping, sequence, str, bytes or None)
            signed_headers: Lowercase names to restrict signing to
            always_signed: Lowercase names signed regardless of the restriction
        """
        self.method = method
        self.parsed_url = parsed_url
        self.headers = headers
        self.params = params
        self.signed_headers = signed_headers
        self.always_signed = frozenset(always_signed)

    def build(self) -> NormalizedRequest:
        """
        Build the normalized request.

        Returns:
            NormalizedRequest: Canonical parts of the request

        Raises:
            SigningError: If any part cannot be canonicalized
        """
        try:
            header_pairs = canonical_headers(
                self.headers,
                self.signed_headers,
                self.always_signed
            )

            return NormalizedRequest(
                method=self.method.upper(),
                path=canonical_uri(self.parsed_url.path),
                canonical_query=canonical_query_string(self.parsed_url.query),
                canonical_headers=header_pairs,
                signed_header_names=tuple(name for name, _ in header_pairs),
                payload_hash=payload_hash(self.params)
            )

        except Exception as e:
            if isinstance(e, SigningError):
                raise

            raise SigningError(
                f"Canonical request construction failed: {e}",
                SigningErrorCodes.CANONICAL_REQUEST_FAILED,
                {"original_error": str(e)}
            ) from e


def canonical_uri(path: str) -> str:
    """
    The request URI path, ``/`` when empty.

    Args:
        path: URL path

    Returns:
        str: Canonical path
    """
    if path:
        return path
    return '/'


def canonical_query_string(query: str) -> str:
    """
    Generate the canonical query string.

    Empty segments are dropped. The key is the text before the first ``=``
    and the value the text up to the next ``=``, so ``a=b=c`` signs as
    ``a=b``. Pairs are RFC 3986 encoded and sorted as whole ``key=value``
    strings.

    Args:
        query: Query string, already percent-decoded once

    Returns:
        str: Canonical query string
    """
    canonical = []

    for segment in query.split('&'):
        if segment == '':
            continue

        parts = segment.split('=')
        key = parts[0]
        value = parts[1] if len(parts) > 1 else ''
        canonical.append(f"{rfc3986_encode(key)}={rfc3986_encode(value)}")

    return '&'.join(sorted(canonical))


def canonical_headers(
    headers: Mapping,
    signed_headers: Optional[AbstractSet[str]] = None,
    always_signed: AbstractSet[str] = frozenset()
) -> HeaderPairs:
    """
    Select, normalize and order the headers to sign.

    The Authorization header is never signed. When ``signed_headers`` is
    given, only headers named in it (or in ``always_signed``) are kept.

    Args:
        headers: Request headers
        signed_headers: Lowercase names to restrict signing to
        always_signed: Lowercase names kept regardless of the restriction

    Returns:
        tuple: (lowercase name, collapsed value) pairs in natural case-insensitive order
    """
    excluded = AUTHORIZATION_HEADER.lower()
    entries = []

    for name, value in headers.items():
        lower_name = normalize_header_name(name)
        if lower_name == excluded:
            continue

        if signed_headers and lower_name not in signed_headers and lower_name not in always_signed:
            continue

        entries.append((lower_name, collapse_whitespace(header_value_text(name, value))))

    entries.sort(key=lambda entry: natural_sort_key(entry[0]))
    return tuple(entries)


def canonical_headers_block(header_pairs: HeaderPairs) -> str:
    """
    Render the headers block of the canonical request.

    Args:
        header_pairs: Output of canonical_headers()

    Returns:
        str: ``name:value`` lines, a blank line and the ``;``-joined names
    """
    lines = ''.join(f"{name}:{value}\n" for name, value in header_pairs)
    return lines + '\n' + ';'.join(name for name, _ in header_pairs)


def payload_hash(params: Any) -> str:
    """
    Hash of the request payload.

    Key-value payloads are key-sorted at every level and form-encoded
    first; strings and bytes are hashed as they are.

    Args:
        params: Mapping, sequence, str, bytes or None

    Returns:
        str: Hex SHA-256 digest

    Raises:
        UnsupportedPayload: If the payload type is not supported
    """
    if params is None:
        body = ''
    elif isinstance(params, (str, bytes, bytearray)):
        body = params
    elif isinstance(params, (Mapping, list, tuple)):
        body = build_query(sort_payload(params))
    else:
        raise UnsupportedPayload(
            f"Unsupported payload type: {type(params).__name__}",
            {"payload_type": type(params).__name__}
        )

    return hex16(sha256(body))


def build_canonical_request(normalized: NormalizedRequest) -> str:
    """
    Build the canonical request string.

    Args:
        normalized: Normalized request

    Returns:
        str: Canonical request (no trailing newline)
    """
    return '\n'.join([
        normalized.method,
        normalized.path,
        normalized.canonical_query,
        canonical_headers_block(normalized.canonical_headers),
        normalized.payload_hash,
    ])


def normalize_request(
    method: str,
    parsed_url: ParsedUrl,
    headers: Mapping,
    params: Any = None,
    signed_headers: Optional[AbstractSet[str]] = None,
    always_signed: Iterable[str] = ()
) -> NormalizedRequest:
    """
    Normalize a request for signing.

    Args:
        method: HTTP method
        parsed_url: URL split by parse_url()
        headers: Headers to canonicalize
        params: Payload
        signed_headers: Optional lowercase names to restrict signing to
        always_signed: Lowercase names signed regardless of the restriction

    Returns:
        NormalizedRequest: Canonical parts of the request
    """
    builder = CanonicalRequestBuilder(
        method,
        parsed_url,
        headers,
        params,
        signed_headers,
        always_signed
    )
    return builder.build()
