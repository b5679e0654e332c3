"""
Type definitions for request signing functionality

This module provides the data classes that flow through the signing
pipeline: long-lived credentials and configuration held by a signer, and
the per-call values (request, context, normalized request, result) that
are built fresh for every signing operation and never stored on the signer.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field

from ..crypto.derivation import DEFAULT_KEY_PREFIX
from ..exceptions import (
    EncodingFailure,
    MissingCredential,
    SigningError,
    SigningErrorCodes,
)

# Defaults for the Kobas signing scheme
DEFAULT_REGION = "uk-lon-1"
DEFAULT_TERMINATOR = "kbs_request"
DEFAULT_AUTH_SCHEME = "Bearer"
DEFAULT_DATE_HEADER = "X-Kbs-Date"
AUTHORIZATION_HEADER = "Authorization"

# UTC ISO-8601 basic format used for the date header and string-to-sign
REQUEST_DATETIME_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"


@dataclass(frozen=True, eq=False)
class Credentials:
    """
    Long-lived signing credentials

    Attributes:
        company_id: Company identifier issued by Kobas
        identifier: API client identifier within the company
        secret: Secret key material (str values are UTF-8 encoded)

    The secret is kept in a private bytearray so that clear() can wipe it
    in place. It is never included in repr() output.
    """
    company_id: str
    identifier: str
    secret: bytes = field(repr=False)

    def __post_init__(self):
        """Copy the secret into a wipeable buffer"""
        secret = self.secret
        if secret is None:
            secret = b""
        elif isinstance(secret, str):
            try:
                secret = secret.encode('utf-8')
            except UnicodeEncodeError as e:
                raise EncodingFailure("Secret is not valid UTF-8 text") from e
        elif not isinstance(secret, (bytes, bytearray)):
            raise SigningError(
                "Secret must be bytes or str",
                SigningErrorCodes.INVALID_CONFIG,
                {"secret_type": type(secret).__name__}
            )

        object.__setattr__(self, 'secret', bytearray(secret))

    @property
    def credential_id(self) -> str:
        """Credential prefix used in the Authorization header"""
        return f"{self.company_id}-{self.identifier}"

    def validate(self) -> None:
        """
        Check that every credential field is present.

        Raises:
            MissingCredential: If company id, identifier or secret is empty
        """
        missing = []
        if not isinstance(self.company_id, str) or not self.company_id.strip():
            missing.append("company_id")
        if not isinstance(self.identifier, str) or not self.identifier.strip():
            missing.append("identifier")
        if len(self.secret) == 0:
            missing.append("secret")

        if missing:
            raise MissingCredential(
                f"Missing credential fields: {', '.join(missing)}",
                {"missing": missing}
            )

    def clear(self) -> None:
        """
        Wipe the secret from memory (best effort).

        Note: copies made by the caller before the credentials were created
        are not affected. After clearing, signing raises MissingCredential.
        """
        for i in range(len(self.secret)):
            self.secret[i] = 0
        del self.secret[:]


@dataclass(frozen=True)
class SignerConfig:
    """
    Configuration for request signing

    Attributes:
        region: Region name in the credential scope
        terminator: Literal closing the credential scope
        auth_scheme: Scheme prefix of the Authorization header and string-to-sign
        key_prefix: Literal prepended to the secret for the first derivation step
        date_header: Name of the injected request timestamp header
        timestamp_generator: Optional clock returning the signing time
        log_canonical_requests: Log canonical requests at DEBUG level
        slow_signing_threshold_ms: Warn when signing takes longer than this
    """
    region: str = DEFAULT_REGION
    terminator: str = DEFAULT_TERMINATOR
    auth_scheme: str = DEFAULT_AUTH_SCHEME
    key_prefix: str = DEFAULT_KEY_PREFIX
    date_header: str = DEFAULT_DATE_HEADER
    timestamp_generator: Optional[Callable[[], Union[datetime, int, float]]] = None
    log_canonical_requests: bool = False
    slow_signing_threshold_ms: float = 10.0


@dataclass(frozen=True)
class SigningContext:
    """
    Per-call signing context

    Attributes:
        region: Region name
        service: Service name derived from the request path
        terminator: Credential scope terminator
        auth_scheme: Authorization scheme
        request_timestamp: Signing time (timezone-aware, UTC)
    """
    region: str
    service: str
    terminator: str
    auth_scheme: str
    request_timestamp: datetime

    @property
    def date_stamp(self) -> str:
        return self.request_timestamp.strftime(DATE_STAMP_FORMAT)

    @property
    def request_datetime(self) -> str:
        return self.request_timestamp.strftime(REQUEST_DATETIME_FORMAT)

    @property
    def credential_scope(self) -> str:
        return f"{self.date_stamp}/{self.region}/{self.service}/{self.terminator}"


@dataclass(frozen=True)
class ParsedUrl:
    """
    Request URL split for canonicalization

    Attributes:
        path: URL path, verbatim
        query: Raw query string, percent-decoded once
        service: Service name derived from the path
    """
    path: str
    query: str
    service: str


@dataclass
class SignableRequest:
    """
    Request to be signed

    Attributes:
        method: HTTP method in any case
        url: Absolute request URL
        headers: Request headers; names keep the caller's casing
        params: Payload as a key-value structure, raw str/bytes, or None
    """
    method: str
    url: str
    headers: Mapping = field(default_factory=dict)
    params: Any = None

    def __post_init__(self):
        """Validate request after initialization"""
        if not isinstance(self.method, str) or not self.method.strip():
            raise SigningError(
                "Request method cannot be empty",
                SigningErrorCodes.INVALID_METHOD,
                {"method": repr(self.method)}
            )

        if any(ch.isspace() for ch in self.method):
            raise SigningError(
                f"Invalid request method: {self.method!r}",
                SigningErrorCodes.INVALID_METHOD,
                {"method": self.method}
            )

        if self.headers is None:
            self.headers = {}

        if not isinstance(self.headers, Mapping):
            raise SigningError(
                "Headers must be a mapping of name to value",
                SigningErrorCodes.INVALID_HEADERS,
                {"headers_type": type(self.headers).__name__}
            )


@dataclass
class SigningOptions:
    """
    Signing options for individual requests

    Attributes:
        timestamp: Signing time for this request (datetime or epoch seconds)
        signed_headers: Header names to restrict signing to; None or empty
            signs every supplied header
    """
    timestamp: Optional[Union[datetime, int, float]] = None
    signed_headers: Optional[Iterable[str]] = None

    def __post_init__(self):
        """Normalize the signed header restriction to lowercase names"""
        if self.signed_headers is None:
            return

        if isinstance(self.signed_headers, str):
            names = [self.signed_headers]
        else:
            names = list(self.signed_headers)

        normalized = set()
        for name in names:
            if not isinstance(name, str):
                raise EncodingFailure(
                    f"Signed header names must be strings, got {type(name).__name__}",
                    {"name_type": type(name).__name__}
                )
            normalized.add(name.strip().lower())

        self.signed_headers = frozenset(normalized) or None


@dataclass(frozen=True)
class NormalizedRequest:
    """
    Canonical form of a single request

    Attributes:
        method: Uppercase HTTP method
        path: Canonical path
        canonical_query: Sorted, percent-encoded query string
        canonical_headers: (lowercase name, collapsed value) pairs in signing order
        signed_header_names: Lowercase header names in signing order
        payload_hash: Hex SHA-256 of the serialized payload
    """
    method: str
    path: str
    canonical_query: str
    canonical_headers: Tuple[Tuple[str, str], ...]
    signed_header_names: Tuple[str, ...]
    payload_hash: str


@dataclass
class KobasSignatureResult:
    """
    Generated signature result

    Attributes:
        headers: All request headers to send, in output order
        authorization: Authorization header value
        request_datetime: Value of the injected date header
        canonical_request: Canonical request that was hashed
        string_to_sign: Text signed by the final HMAC step
        signature: Hex signature
        signed_headers: Lowercase names covered by the signature
        service: Service name used in the credential scope
    """
    headers: Dict[str, str]
    authorization: str
    request_datetime: str
    canonical_request: str
    string_to_sign: str
    signature: str
    signed_headers: Tuple[str, ...]
    service: str

    def __post_init__(self):
        """Validate signature result"""
        if not self.authorization:
            raise ValueError("Authorization value cannot be empty")

        if not self.signature:
            raise ValueError("Signature cannot be empty")

        if not isinstance(self.headers, dict):
            raise ValueError("Headers must be a dictionary")

    def header_lines(self) -> List[str]:
        """Render headers as ``"Name: Value"`` strings"""
        return [f"{name}: {value}" for name, value in self.headers.items()]


# Type aliases for convenience
HeaderMap = Mapping
Payload = Union[Mapping, Sequence, str, bytes, None]
TimestampInput = Union[datetime, int, float]
TimestampGenerator = Callable[[], TimestampInput]
