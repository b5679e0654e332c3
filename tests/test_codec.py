"""
Unit tests for percent-encoding and payload serialization
"""

import copy

import pytest

from kobas_sdk.signing.codec import (
    build_query,
    rfc3986_decode,
    rfc3986_encode,
    sort_payload,
)
from kobas_sdk.exceptions import EncodingFailure, UnsupportedPayload


class TestRfc3986:
    """Test RFC 3986 encode/decode"""

    def test_encode_reserved(self):
        assert rfc3986_encode("a b") == "a%20b"
        assert rfc3986_encode("a+b") == "a%2Bb"
        assert rfc3986_encode("a/b?c=d&e") == "a%2Fb%3Fc%3Dd%26e"

    def test_encode_unreserved(self):
        """Unreserved characters, including tilde, stay literal"""
        assert rfc3986_encode("AZaz09-_.~") == "AZaz09-_.~"

    def test_encode_utf8(self):
        assert rfc3986_encode("é") == "%C3%A9"

    def test_encode_invalid_text(self):
        with pytest.raises(EncodingFailure):
            rfc3986_encode("\ud800")

        with pytest.raises(EncodingFailure):
            rfc3986_encode(5)

    def test_decode(self):
        assert rfc3986_decode("a%20b") == "a b"
        assert rfc3986_decode("%C3%A9") == "é"

    def test_decode_keeps_plus(self):
        """Plus is not a space in RFC 3986"""
        assert rfc3986_decode("a+b") == "a+b"

    def test_decode_tilde(self):
        """Literal and escaped tildes decode to the same text"""
        assert rfc3986_decode("~user") == "~user"
        assert rfc3986_decode("%7Euser") == "~user"

    def test_decode_decodes_once(self):
        assert rfc3986_decode("a%2520b") == "a%20b"

    def test_decode_invalid_utf8(self):
        with pytest.raises(EncodingFailure):
            rfc3986_decode("%FF")

    def test_round_trip(self):
        """decode(encode(x)) == x for text without percent signs"""
        samples = [
            "",
            "plain",
            "with space",
            "a=b&c=d",
            "tilde~and+plus",
            "unicode é ü 日本",
            "slashes/and?questions#hash",
        ]
        for sample in samples:
            assert rfc3986_decode(rfc3986_encode(sample)) == sample


class TestSortPayload:
    """Test recursive key sorting"""

    def test_sorts_every_level(self):
        payload = {"b": {"z": 1, "y": 2}, "a": [{"d": 1, "c": 2}]}
        result = sort_payload(payload)

        assert list(result) == ["a", "b"]
        assert list(result["b"]) == ["y", "z"]
        assert list(result["a"][0]) == ["c", "d"]

    def test_does_not_mutate_input(self):
        payload = {"b": {"z": 1, "y": 2}, "a": 1}
        original = copy.deepcopy(payload)

        sort_payload(payload)

        assert payload == original
        assert list(payload) == ["b", "a"]
        assert list(payload["b"]) == ["z", "y"]

    def test_integer_keys_sort_numerically(self):
        """Integer-like keys compare as numbers, not text"""
        assert list(sort_payload({"10": "a", "2": "b"})) == ["2", "10"]
        assert list(sort_payload({10: "a", 9: "b", -1: "c"})) == [-1, 9, 10]

    def test_integer_keys_before_text_keys(self):
        payload = {"b": 1, "10": 2, "A": 3, "2": 4, "01": 5}
        assert list(sort_payload(payload)) == ["2", "10", "01", "A", "b"]

    def test_nested_integer_keys(self):
        result = sort_payload({"items": {10: "x", 9: "y"}})
        assert list(result["items"]) == [9, 10]

    def test_sequences_keep_order(self):
        assert sort_payload([3, 1, 2]) == [3, 1, 2]

    def test_scalars_unchanged(self):
        assert sort_payload("text") == "text"
        assert sort_payload(None) is None


class TestBuildQuery:
    """Test form serialization of key-value payloads"""

    def test_flat(self):
        assert build_query({"a": 1, "b": "x y"}) == "a=1&b=x+y"

    def test_empty(self):
        assert build_query({}) == ""
        assert build_query([]) == ""

    def test_nested_mapping(self):
        assert build_query({"order": {"id": 5}}) == "order%5Bid%5D=5"

    def test_nested_sequence(self):
        assert build_query({"ids": [1, 2]}) == "ids%5B0%5D=1&ids%5B1%5D=2"

    def test_top_level_sequence(self):
        assert build_query(["x", "y"]) == "0=x&1=y"

    def test_scalars(self):
        """Booleans render as 1/0, None is omitted, integral floats drop the fraction"""
        payload = {"t": True, "f": False, "n": None, "i": 1.0, "x": 1.5}
        assert build_query(payload) == "t=1&f=0&i=1&x=1.5"

    def test_form_encoding(self):
        """Tilde is escaped and space becomes plus"""
        assert build_query({"k": "~a b&c"}) == "k=%7Ea+b%26c"

    def test_bytes_value(self):
        assert build_query({"k": b"v"}) == "k=v"

        with pytest.raises(EncodingFailure):
            build_query({"k": b"\xff"})

    def test_unsupported_value(self):
        with pytest.raises(UnsupportedPayload):
            build_query({"k": object()})

        with pytest.raises(UnsupportedPayload):
            build_query({"k": {1, 2}})

    def test_unsupported_payload(self):
        with pytest.raises(UnsupportedPayload):
            build_query("a=1")

    def test_numeric_keys_serialize_in_numeric_order(self):
        assert build_query(sort_payload({"10": "a", "2": "b"})) == "2=b&10=a"
        assert build_query(sort_payload({"items": {10: "x", 9: "y"}})) == (
            "items%5B9%5D=y&items%5B10%5D=x"
        )

    def test_sorted_payloads_serialize_identically(self):
        first = {"b": {"y": 1, "x": 2}, "a": "1"}
        second = {"a": "1", "b": {"x": 2, "y": 1}}

        assert build_query(sort_payload(first)) == build_query(sort_payload(second))
        assert build_query(sort_payload(first)) == "a=1&b%5Bx%5D=2&b%5By%5D=1"
