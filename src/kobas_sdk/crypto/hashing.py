"""
Hashing helpers for request signing

SHA-256 digests and HMAC-SHA256 keyed hashes. Both return raw bytes;
hex16() renders them for inclusion in canonical text and headers.
"""

import hashlib
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from ..exceptions import EncodingFailure

SHA256_DIGEST_LENGTH = 32


def to_bytes(data: Union[str, bytes, bytearray]) -> bytes:
    """
    Convert text to UTF-8 bytes.
    
    Args:
        data: String or bytes-like value
        
    Returns:
        bytes: UTF-8 encoded data
        
    Raises:
        EncodingFailure: If the string cannot be encoded as UTF-8
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    
    if not isinstance(data, str):
        raise EncodingFailure(
            f"Expected text or bytes, got {type(data).__name__}",
            {"value_type": type(data).__name__}
        )
    
    try:
        return data.encode('utf-8')
    except UnicodeEncodeError as e:
        raise EncodingFailure(
            f"Value is not valid UTF-8 text: {e.reason}",
            {"position": e.start}
        ) from e


def sha256(data: Union[str, bytes, bytearray]) -> bytes:
    """
    SHA-256 hash the data.
    
    Args:
        data: Text (UTF-8 encoded before hashing) or bytes
        
    Returns:
        bytes: 32-byte raw digest
    """
    return hashlib.sha256(to_bytes(data)).digest()


def hmac256(key: Union[bytes, bytearray], message: Union[str, bytes]) -> bytes:
    """
    Apply HMAC-SHA256 to the message, keyed by ``key``.
    
    Args:
        key: Raw key bytes
        message: Text (UTF-8 encoded) or bytes to authenticate
        
    Returns:
        bytes: 32-byte raw MAC
    """
    mac = crypto_hmac.HMAC(bytes(key), hashes.SHA256())
    mac.update(to_bytes(message))
    return mac.finalize()


def hex16(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.
    
    Args:
        data: Bytes to convert
        
    Returns:
        str: Lowercase hex string
    """
    return data.hex().lower()
