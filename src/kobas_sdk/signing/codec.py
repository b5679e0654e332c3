"""
Percent-encoding and payload serialization for request signing

RFC 3986 encode/decode primitives used by query canonicalization, plus the
pure key-sorting and form serialization applied to key-value payloads
before they are hashed.
"""

import re
from collections.abc import Mapping
from typing import Any, Iterator, List, Tuple
from urllib.parse import quote, quote_plus, unquote

from ..exceptions import EncodingFailure, UnsupportedPayload

# Keys stored as integers by form decoders on the server side
_INTEGER_KEY_RE = re.compile(r'-?[1-9][0-9]*|0')


def rfc3986_encode(value: str) -> str:
    """
    Encode the value according to RFC 3986.

    Every byte of the UTF-8 form is escaped except unreserved characters
    (``A-Z a-z 0-9 - _ . ~``).

    Args:
        value: Text to encode

    Returns:
        str: Percent-encoded text

    Raises:
        EncodingFailure: If the value is not valid text
    """
    if not isinstance(value, str):
        raise EncodingFailure(
            f"Cannot percent-encode {type(value).__name__}",
            {"value_type": type(value).__name__}
        )

    try:
        encoded = quote(value, safe='', encoding='utf-8', errors='strict')
    except UnicodeEncodeError as e:
        raise EncodingFailure(
            f"Value cannot be encoded as UTF-8: {e.reason}",
            {"position": e.start}
        ) from e

    return encoded.replace('%7E', '~')


def rfc3986_decode(value: str) -> str:
    """
    Decode the value according to RFC 3986.

    Literal tildes are escaped first so that text produced by an encoder
    that escaped ``~`` and text that kept it literal decode identically.
    ``+`` is left as-is.

    Args:
        value: Percent-encoded text

    Returns:
        str: Decoded text

    Raises:
        EncodingFailure: If the escapes do not decode to UTF-8 text
    """
    if not isinstance(value, str):
        raise EncodingFailure(
            f"Cannot percent-decode {type(value).__name__}",
            {"value_type": type(value).__name__}
        )

    value = value.replace('~', '%7E')
    try:
        return unquote(value, encoding='utf-8', errors='strict')
    except UnicodeDecodeError as e:
        raise EncodingFailure(
            f"Percent-encoded value is not valid UTF-8: {e.reason}",
            {"value": value}
        ) from e


def sort_payload(payload: Any) -> Any:
    """
    Return a copy of the payload with mapping keys sorted at every level.

    Integer-like keys (``7``, ``"10"``, ``"-3"``) sort numerically ahead of all
    other keys, which compare by their UTF-8 bytes. Sequences keep their
    order; scalars are returned unchanged. The input is never modified.

    Args:
        payload: Key-value structure

    Returns:
        A new, deterministically ordered structure
    """
    if isinstance(payload, Mapping):
        return {
            key: sort_payload(payload[key])
            for key in sorted(payload, key=_key_sort_key)
        }

    if isinstance(payload, (list, tuple)):
        return [sort_payload(item) for item in payload]

    return payload


def build_query(payload: Any) -> str:
    """
    Serialize a key-value structure as a form-encoded query string.

    Nested mappings become ``parent[child]=value``, sequence items
    ``parent[0]=value``. Keys and values are form-encoded (space as ``+``).
    ``None`` values are omitted and booleans render as ``1``/``0``.

    Args:
        payload: Mapping or sequence, usually the output of sort_payload()

    Returns:
        str: Serialized query string (empty for an empty payload)

    Raises:
        UnsupportedPayload: If the payload or one of its values cannot be serialized
        EncodingFailure: If a key or value is not valid text
    """
    if not isinstance(payload, (Mapping, list, tuple)):
        raise UnsupportedPayload(
            f"Cannot serialize payload of type {type(payload).__name__}",
            {"payload_type": type(payload).__name__}
        )

    pairs: List[Tuple[str, str]] = []
    for key, value in _iter_items(payload):
        _flatten(_key_text(key), value, pairs)

    return '&'.join(f"{_form_quote(key)}={_form_quote(value)}" for key, value in pairs)


def _iter_items(container: Any) -> Iterator[Tuple[Any, Any]]:
    if isinstance(container, Mapping):
        return iter(container.items())
    return enumerate(container)


def _flatten(prefix: str, value: Any, pairs: List[Tuple[str, str]]) -> None:
    if value is None:
        return

    if isinstance(value, (Mapping, list, tuple)):
        for key, item in _iter_items(value):
            _flatten(f"{prefix}[{_key_text(key)}]", item, pairs)
        return

    pairs.append((prefix, _scalar_text(value)))


def _key_text(key: Any) -> str:
    if key is None:
        return ''
    if isinstance(key, (str, int, float)):
        return _scalar_text(key)

    raise UnsupportedPayload(
        f"Unsupported payload key type: {type(key).__name__}",
        {"key_type": type(key).__name__}
    )


def _key_sort_key(key: Any) -> Tuple[int, int, bytes]:
    text = _key_text(key)
    if _INTEGER_KEY_RE.fullmatch(text):
        return (0, int(text), b'')
    return (1, 0, text.encode('utf-8', 'surrogatepass'))


def _scalar_text(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingFailure(
                f"Payload value is not valid UTF-8: {e.reason}",
                {"position": e.start}
            ) from e

    raise UnsupportedPayload(
        f"Unsupported payload value type: {type(value).__name__}",
        {"value_type": type(value).__name__}
    )


def _form_quote(text: str) -> str:
    try:
        return quote_plus(text, safe='', encoding='utf-8', errors='strict').replace('~', '%7E')
    except UnicodeEncodeError as e:
        raise EncodingFailure(
            f"Payload text cannot be encoded as UTF-8: {e.reason}",
            {"position": e.start}
        ) from e
