"""
Kobas request signer

This module provides the signer facade. A signer holds only long-lived
credentials and configuration; every call builds its own context,
normalized request and derived key, so one signer can be shared freely
between threads.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from ..crypto.derivation import calculate_signature, derive_signing_key
from ..crypto.hashing import hex16
from ..exceptions import SigningError, SigningErrorCodes
from .authorization import build_authorization_header, build_string_to_sign
from .canonical_request import build_canonical_request, normalize_request
from .signing_config import DEFAULT_SIGNER_CONFIG, validate_signer_config
from .types import (
    AUTHORIZATION_HEADER,
    Credentials,
    KobasSignatureResult,
    SignableRequest,
    SignerConfig,
    SigningContext,
    SigningOptions,
)
from .utils import (
    PerformanceTimer,
    coerce_timestamp,
    generate_timestamp,
    header_value_text,
    normalize_header_name,
    parse_url,
)

logger = logging.getLogger(__name__)


class KobasSigner:
    """
    Kobas request signer

    Produces the ``X-Kbs-Date`` and ``Authorization`` headers for outbound
    API requests.
    """

    def __init__(self, credentials: Credentials, config: Optional[SignerConfig] = None):
        """
        Initialize the signer.

        Args:
            credentials: Company id, identifier and secret
            config: Optional signer configuration (defaults apply if None)

        Raises:
            SigningError: If credentials or configuration are invalid
        """
        if not isinstance(credentials, Credentials):
            raise SigningError(
                "Credentials must be a Credentials instance",
                SigningErrorCodes.INVALID_CONFIG
            )

        config = config or DEFAULT_SIGNER_CONFIG
        validate_signer_config(config)

        self._credentials = credentials
        self.config = config

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def sign(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping] = None,
        params: Any = None,
        timestamp: Optional[Union[datetime, int, float]] = None,
        signed_headers: Optional[Iterable[str]] = None
    ) -> List[str]:
        """
        Sign a request and return the headers to send.

        Args:
            method: HTTP method in any case
            url: Absolute request URL
            headers: Request headers
            params: Payload (mapping, sequence, str, bytes or None)
            timestamp: Signing time; the configured clock is used if None
            signed_headers: Header names to restrict signing to

        Returns:
            list: ``"Name: Value"`` strings, caller headers first, then the
            date header and Authorization

        Raises:
            SigningError: If signing fails
        """
        request = SignableRequest(
            method=method,
            url=url,
            headers=headers if headers is not None else {},
            params=params
        )
        options = SigningOptions(timestamp=timestamp, signed_headers=signed_headers)
        return self.sign_request(request, options).header_lines()

    def sign_request(
        self,
        request: SignableRequest,
        options: Optional[SigningOptions] = None
    ) -> KobasSignatureResult:
        """
        Sign a request.

        Args:
            request: Request to sign
            options: Optional per-request timestamp and signed header restriction

        Returns:
            KobasSignatureResult: Headers plus the intermediate signing values

        Raises:
            SigningError: If signing fails
        """
        timer = PerformanceTimer()
        options = options or SigningOptions()

        try:
            self._credentials.validate()

            parsed_url = parse_url(request.url)
            context = SigningContext(
                region=self.config.region,
                service=parsed_url.service,
                terminator=self.config.terminator,
                auth_scheme=self.config.auth_scheme,
                request_timestamp=self._resolve_timestamp(options)
            )

            date_header = self.config.date_header
            headers = self._prepare_headers(request.headers, context.request_datetime)

            normalized = normalize_request(
                request.method,
                parsed_url,
                headers,
                request.params,
                options.signed_headers,
                always_signed=(normalize_header_name(date_header),)
            )

            canonical_request = build_canonical_request(normalized)
            string_to_sign = build_string_to_sign(context, canonical_request)

            signing_key = derive_signing_key(
                self._credentials.secret,
                context.date_stamp,
                context.region,
                context.service,
                context.terminator,
                self.config.key_prefix
            )
            signature = calculate_signature(signing_key, string_to_sign)

            authorization = build_authorization_header(
                context,
                self._credentials.credential_id,
                normalized.signed_header_names,
                signature
            )
            headers[AUTHORIZATION_HEADER] = authorization

        except Exception as e:
            if isinstance(e, SigningError):
                raise

            raise SigningError(
                f"Request signing failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            ) from e

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > self.config.slow_signing_threshold_ms:
            logger.warning(
                f"Signing operation took {elapsed_ms:.2f}ms "
                f"(target: <{self.config.slow_signing_threshold_ms}ms)"
            )

        logger.debug(
            f"Signed {normalized.method} request to {normalized.path} "
            f"for service '{context.service}' "
            f"(signed headers: {';'.join(normalized.signed_header_names)})"
        )
        if self.config.log_canonical_requests:
            logger.debug(f"Canonical request:\n{canonical_request}")
            logger.debug(f"String to sign:\n{string_to_sign}")

        return KobasSignatureResult(
            headers=headers,
            authorization=authorization,
            request_datetime=context.request_datetime,
            canonical_request=canonical_request,
            string_to_sign=string_to_sign,
            signature=hex16(signature),
            signed_headers=normalized.signed_header_names,
            service=context.service
        )

    def clear_credentials(self) -> None:
        """Wipe the secret held by this signer (best effort)."""
        self._credentials.clear()

    def _resolve_timestamp(self, options: SigningOptions) -> datetime:
        """
        Capture the signing time once for the whole call.

        Args:
            options: Signing options for this request

        Returns:
            datetime: UTC signing time
        """
        if options.timestamp is not None:
            return coerce_timestamp(options.timestamp)

        if self.config.timestamp_generator is not None:
            return coerce_timestamp(self.config.timestamp_generator())

        return generate_timestamp()

    def _prepare_headers(self, headers: Mapping, request_datetime: str) -> Dict[str, str]:
        """
        Copy caller headers and inject the date header.

        Caller-supplied Authorization and date headers (any case) are
        dropped; the date header is appended with the signing time.

        Args:
            headers: Caller headers
            request_datetime: Formatted signing time

        Returns:
            dict: Headers in output order with the caller's name casing
        """
        date_header = self.config.date_header
        replaced = {
            normalize_header_name(AUTHORIZATION_HEADER),
            normalize_header_name(date_header),
        }

        prepared: Dict[str, str] = {}
        for name, value in headers.items():
            if normalize_header_name(name) in replaced:
                continue
            prepared[name] = header_value_text(name, value)

        prepared[date_header] = request_datetime
        return prepared

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit; wipes the secret."""
        self.clear_credentials()


def create_signer(
    company_id: str,
    identifier: str,
    secret: Union[bytes, str],
    config: Optional[SignerConfig] = None
) -> KobasSigner:
    """
    Create a new Kobas signer.

    Args:
        company_id: Company identifier
        identifier: API client identifier
        secret: Secret key material
        config: Optional signer configuration

    Returns:
        KobasSigner: Configured signer instance
    """
    credentials = Credentials(company_id=company_id, identifier=identifier, secret=secret)
    return KobasSigner(credentials, config)


def sign_request(
    request: SignableRequest,
    credentials: Credentials,
    config: Optional[SignerConfig] = None,
    options: Optional[SigningOptions] = None
) -> KobasSignatureResult:
    """
    Sign a request with the given credentials.

    Args:
        request: Request to sign
        credentials: Signing credentials
        config: Optional signer configuration
        options: Optional signing options

    Returns:
        KobasSignatureResult: Signing result
    """
    signer = KobasSigner(credentials, config)
    return signer.sign_request(request, options)
