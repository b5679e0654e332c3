"""
HTTP client integration for request signing

This module connects the signer to the ``requests`` library so outbound
requests are signed just before they are sent. The raw request body is
used as the payload, so the signature covers exactly the bytes on the wire.

Signing failures propagate to the caller; a request is never sent with a
missing or partial Authorization header.
"""

import logging
from typing import Iterable, Optional

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest
from requests.structures import CaseInsensitiveDict

from .signer import KobasSigner
from .types import (
    KobasSignatureResult,
    SignableRequest,
    SigningOptions,
)

logger = logging.getLogger(__name__)


class KobasAuth(AuthBase):
    """
    requests authentication hook that signs each prepared request.

    Usage:
        session.auth = KobasAuth(signer)
        requests.get(url, auth=KobasAuth(signer))
    """

    def __init__(self, signer: KobasSigner, signed_headers: Optional[Iterable[str]] = None):
        """
        Initialize the auth hook.

        Args:
            signer: Signer holding the credentials
            signed_headers: Optional header names to restrict signing to
        """
        self.signer = signer
        self.signed_headers = list(signed_headers) if signed_headers is not None else None

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        options = SigningOptions(signed_headers=self.signed_headers)
        return sign_prepared_request(request, self.signer, options)


def sign_prepared_request(
    prepared_request: PreparedRequest,
    signer: KobasSigner,
    options: Optional[SigningOptions] = None
) -> PreparedRequest:
    """
    Sign a prepared request.

    Args:
        prepared_request: Prepared request to sign
        signer: Signer holding the credentials
        options: Optional signing options

    Returns:
        PreparedRequest: Request with the date and Authorization headers set

    Raises:
        SigningError: If signing fails
    """
    headers = dict(prepared_request.headers) if prepared_request.headers else {}
    # Streamed bodies (files, generators) are rejected as UnsupportedPayload
    body = prepared_request.body if prepared_request.body is not None else ''

    signable_request = SignableRequest(
        method=prepared_request.method,
        url=prepared_request.url,
        headers=headers,
        params=body
    )

    result: KobasSignatureResult = signer.sign_request(signable_request, options)

    if prepared_request.headers is None:
        prepared_request.headers = CaseInsensitiveDict()

    # CaseInsensitiveDict.update replaces any existing Authorization or date header
    prepared_request.headers.update(result.headers)

    logger.debug(f"Signed {prepared_request.method} request to {prepared_request.url}")
    return prepared_request


def create_signing_session(
    signer: KobasSigner,
    signed_headers: Optional[Iterable[str]] = None,
    session: Optional[requests.Session] = None
) -> requests.Session:
    """
    Create a requests session that signs every request.

    Args:
        signer: Signer holding the credentials
        signed_headers: Optional header names to restrict signing to
        session: Optional existing session to configure

    Returns:
        requests.Session: Session with KobasAuth installed
    """
    session = session or requests.Session()
    session.auth = KobasAuth(signer, signed_headers)

    logger.info(f"Configured request signing for credential: {signer.credentials.credential_id}")
    return session
