"""
Kobas Python SDK - Request Signing Module

SigV4-style request signing for the Kobas API. Requests are reduced to a
canonical form, hashed, and signed with a key derived from the client
secret for the request's date, region and service.
"""

from .types import (
    Credentials,
    SignerConfig,
    SigningContext,
    SignableRequest,
    SigningOptions,
    ParsedUrl,
    NormalizedRequest,
    KobasSignatureResult,
    DEFAULT_REGION,
    DEFAULT_TERMINATOR,
    DEFAULT_AUTH_SCHEME,
    DEFAULT_DATE_HEADER,
)

from .signer import (
    KobasSigner,
    create_signer,
    sign_request,
)

from .signing_config import (
    SigningConfigBuilder,
    DEFAULT_SIGNER_CONFIG,
    create_signing_config,
    validate_signer_config,
)

from .codec import (
    rfc3986_encode,
    rfc3986_decode,
    sort_payload,
    build_query,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    canonical_uri,
    canonical_query_string,
    canonical_headers,
    canonical_headers_block,
    payload_hash,
    build_canonical_request,
    normalize_request,
)

from .authorization import (
    credential_scope,
    build_string_to_sign,
    build_authorization_header,
)

from .utils import (
    parse_url,
    derive_service,
    normalize_header_name,
    collapse_whitespace,
    generate_timestamp,
    format_request_datetime,
    format_date_stamp,
)

from .integration import (
    KobasAuth,
    sign_prepared_request,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'KobasSigner',
    'create_signer',
    'sign_request',
    # Types
    'Credentials',
    'SignerConfig',
    'SigningContext',
    'SignableRequest',
    'SigningOptions',
    'ParsedUrl',
    'NormalizedRequest',
    'KobasSignatureResult',
    'DEFAULT_REGION',
    'DEFAULT_TERMINATOR',
    'DEFAULT_AUTH_SCHEME',
    'DEFAULT_DATE_HEADER',
    # Configuration
    'SigningConfigBuilder',
    'DEFAULT_SIGNER_CONFIG',
    'create_signing_config',
    'validate_signer_config',
    # Codec
    'rfc3986_encode',
    'rfc3986_decode',
    'sort_payload',
    'build_query',
    # Canonicalization
    'CanonicalRequestBuilder',
    'canonical_uri',
    'canonical_query_string',
    'canonical_headers',
    'canonical_headers_block',
    'payload_hash',
    'build_canonical_request',
    'normalize_request',
    # Authorization
    'credential_scope',
    'build_string_to_sign',
    'build_authorization_header',
    # Utilities
    'parse_url',
    'derive_service',
    'normalize_header_name',
    'collapse_whitespace',
    'generate_timestamp',
    'format_request_datetime',
    'format_date_stamp',
    # HTTP Integration
    'KobasAuth',
    'sign_prepared_request',
    'create_signing_session',
]
