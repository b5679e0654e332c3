"""
Signing key derivation for Kobas request signatures

The long-lived secret never signs a request directly. It is folded through
a cascade of HMAC-SHA256 operations scoped to the request date, region,
service and terminator; the last key in the chain signs the string-to-sign.

    kDate        = HMAC("KBS3" + secret, date)
    kRegion      = HMAC(kDate, region)
    kService     = HMAC(kRegion, service)
    kCredentials = HMAC(kService, terminator)
    signature    = HMAC(kCredentials, string_to_sign)
"""

from typing import Union

from ..exceptions import MissingCredential, SigningError, SigningErrorCodes
from .hashing import hmac256, to_bytes

DEFAULT_KEY_PREFIX = "KBS3"


def derive_signing_key(secret: Union[bytes, bytearray],
                       date_stamp: str,
                       region: str,
                       service: str,
                       terminator: str,
                       key_prefix: str = DEFAULT_KEY_PREFIX) -> bytes:
    """
    Derive the per-request signing key (kCredentials).
    
    Args:
        secret: Long-lived secret key material
        date_stamp: Request date as YYYYMMDD (UTC)
        region: Region name, e.g. "uk-lon-1"
        service: Service name derived from the request path
        terminator: Credential scope terminator, e.g. "kbs_request"
        key_prefix: Literal prepended to the secret for the first step
        
    Returns:
        bytes: Raw 32-byte signing key
        
    Raises:
        MissingCredential: If the secret is empty
        SigningError: If the date stamp is not YYYYMMDD
    """
    if not isinstance(secret, (bytes, bytearray)) or len(secret) == 0:
        raise MissingCredential("Secret key is missing or empty")
    
    if len(date_stamp) != 8 or not date_stamp.isdigit():
        raise SigningError(
            f"Invalid date stamp: {date_stamp}",
            SigningErrorCodes.INVALID_TIMESTAMP,
            {"date_stamp": date_stamp}
        )
    
    k_date = hmac256(to_bytes(key_prefix) + bytes(secret), date_stamp)
    k_region = hmac256(k_date, region)
    k_service = hmac256(k_region, service)
    return hmac256(k_service, terminator)


def calculate_signature(signing_key: bytes, string_to_sign: str) -> bytes:
    """
    Sign the string-to-sign with a derived key.
    
    Args:
        signing_key: Key returned by derive_signing_key()
        string_to_sign: Exact text to sign
        
    Returns:
        bytes: Raw 32-byte signature
    """
    return hmac256(signing_key, string_to_sign)
