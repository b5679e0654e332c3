"""
Cryptographic primitives for Kobas request signing

SHA-256 digests, HMAC-SHA256 keyed hashes and the date/region/service
key derivation chain used to produce request signatures.
"""

from .hashing import (
    sha256,
    hmac256,
    hex16,
    to_bytes,
    SHA256_DIGEST_LENGTH,
)
from .derivation import (
    DEFAULT_KEY_PREFIX,
    derive_signing_key,
    calculate_signature,
)

__all__ = [
    'sha256',
    'hmac256',
    'hex16',
    'to_bytes',
    'SHA256_DIGEST_LENGTH',
    'DEFAULT_KEY_PREFIX',
    'derive_signing_key',
    'calculate_signature',
]
