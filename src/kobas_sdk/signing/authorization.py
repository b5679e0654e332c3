"""
Authorization header assembly

Builds the string-to-sign from the canonical request and the credential
scope, and formats the final ``Authorization`` header value.
"""

from typing import Sequence

from ..crypto.hashing import hex16, sha256
from .types import SigningContext


def credential_scope(context: SigningContext) -> str:
    """
    Get the credential scope (``date/region/service/terminator``).

    Args:
        context: Per-call signing context

    Returns:
        str: Credential scope
    """
    return context.credential_scope


def build_string_to_sign(context: SigningContext, canonical_request: str) -> str:
    """
    Get the string to sign.

    Args:
        context: Per-call signing context
        canonical_request: Canonical request string

    Returns:
        str: Auth scheme, timestamp, credential scope and canonical request hash
    """
    return '\n'.join([
        context.auth_scheme,
        context.request_datetime,
        credential_scope(context),
        hex16(sha256(canonical_request)),
    ])


def build_authorization_header(
    context: SigningContext,
    credential_id: str,
    signed_headers: Sequence[str],
    signature: bytes
) -> str:
    """
    Generate the Authorization header value.

    Args:
        context: Per-call signing context
        credential_id: ``companyId-identifier``
        signed_headers: Lowercase names covered by the signature, in signing order
        signature: Raw signature bytes

    Returns:
        str: Authorization header value
    """
    return (
        f"{context.auth_scheme} "
        f"Credential={credential_id}/{credential_scope(context)},"
        f"SignedHeaders={';'.join(signed_headers)},"
        f"Signature={hex16(signature)}"
    )
