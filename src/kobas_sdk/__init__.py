"""
Kobas Python SDK
Request signing for the Kobas API
"""

from .version import __version__
from .exceptions import (
    KobasSDKError,
    SigningError,
    SigningErrorCodes,
    InvalidUrl,
    UnsupportedPayload,
    EncodingFailure,
    MissingCredential,
)
from .crypto import (
    sha256,
    hmac256,
    hex16,
    derive_signing_key,
    calculate_signature,
)
from .signing import (
    # Core signing functionality
    KobasSigner,
    create_signer,
    sign_request,
    # Types
    Credentials,
    SignerConfig,
    SigningContext,
    SignableRequest,
    SigningOptions,
    NormalizedRequest,
    KobasSignatureResult,
    # Configuration
    SigningConfigBuilder,
    create_signing_config,
    # Codec
    rfc3986_encode,
    rfc3986_decode,
    # HTTP Integration
    KobasAuth,
    sign_prepared_request,
    create_signing_session,
)

__all__ = [
    '__version__',
    # Errors
    'KobasSDKError',
    'SigningError',
    'SigningErrorCodes',
    'InvalidUrl',
    'UnsupportedPayload',
    'EncodingFailure',
    'MissingCredential',
    # Hashing and key derivation
    'sha256',
    'hmac256',
    'hex16',
    'derive_signing_key',
    'calculate_signature',
    # Signing
    'KobasSigner',
    'create_signer',
    'sign_request',
    'Credentials',
    'SignerConfig',
    'SigningContext',
    'SignableRequest',
    'SigningOptions',
    'NormalizedRequest',
    'KobasSignatureResult',
    'SigningConfigBuilder',
    'create_signing_config',
    'rfc3986_encode',
    'rfc3986_decode',
    'KobasAuth',
    'sign_prepared_request',
    'create_signing_session',
]
