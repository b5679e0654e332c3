"""
Configuration management for request signing

This module provides the default signer configuration, a fluent builder
and validation of the values that end up in the credential scope.
"""

from typing import Optional

from ..exceptions import SigningError, SigningErrorCodes
from .types import (
    DEFAULT_AUTH_SCHEME,
    DEFAULT_DATE_HEADER,
    DEFAULT_REGION,
    DEFAULT_TERMINATOR,
    AUTHORIZATION_HEADER,
    SignerConfig,
    TimestampGenerator,
)
from ..crypto.derivation import DEFAULT_KEY_PREFIX

DEFAULT_SIGNER_CONFIG = SignerConfig()


class SigningConfigBuilder:
    """
    Builder for creating signer configurations with fluent API
    """

    def __init__(self):
        self._region: str = DEFAULT_REGION
        self._terminator: str = DEFAULT_TERMINATOR
        self._auth_scheme: str = DEFAULT_AUTH_SCHEME
        self._key_prefix: str = DEFAULT_KEY_PREFIX
        self._date_header: str = DEFAULT_DATE_HEADER
        self._timestamp_generator: Optional[TimestampGenerator] = None
        self._log_canonical_requests: bool = False
        self._slow_signing_threshold_ms: float = 10.0

    def region(self, region: str) -> 'SigningConfigBuilder':
        """
        Set the region used in the credential scope.

        Args:
            region: Region name, e.g. "uk-lon-1"

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._region = region
        return self

    def terminator(self, terminator: str) -> 'SigningConfigBuilder':
        """
        Set the credential scope terminator.

        Args:
            terminator: Terminator literal, e.g. "kbs_request"

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._terminator = terminator
        return self

    def auth_scheme(self, auth_scheme: str) -> 'SigningConfigBuilder':
        """
        Set the Authorization scheme.

        Args:
            auth_scheme: Scheme name, e.g. "Bearer"

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._auth_scheme = auth_scheme
        return self

    def key_prefix(self, key_prefix: str) -> 'SigningConfigBuilder':
        """Set the literal prepended to the secret for key derivation."""
        self._key_prefix = key_prefix
        return self

    def date_header(self, date_header: str) -> 'SigningConfigBuilder':
        """Set the name of the injected request timestamp header."""
        self._date_header = date_header
        return self

    def timestamp_generator(self, generator: TimestampGenerator) -> 'SigningConfigBuilder':
        """
        Set custom timestamp generator.

        Args:
            generator: Function that returns a datetime or Unix seconds

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._timestamp_generator = generator
        return self

    def log_canonical_requests(self, enabled: bool = True) -> 'SigningConfigBuilder':
        """Log canonical requests and strings-to-sign at DEBUG level."""
        self._log_canonical_requests = enabled
        return self

    def slow_signing_threshold_ms(self, threshold_ms: float) -> 'SigningConfigBuilder':
        """Warn when a signing call takes longer than ``threshold_ms``."""
        self._slow_signing_threshold_ms = threshold_ms
        return self

    def build(self) -> SignerConfig:
        """
        Build the signer configuration.

        Returns:
            SignerConfig: Complete signer configuration

        Raises:
            SigningError: If configuration is invalid
        """
        config = SignerConfig(
            region=self._region,
            terminator=self._terminator,
            auth_scheme=self._auth_scheme,
            key_prefix=self._key_prefix,
            date_header=self._date_header,
            timestamp_generator=self._timestamp_generator,
            log_canonical_requests=self._log_canonical_requests,
            slow_signing_threshold_ms=self._slow_signing_threshold_ms
        )
        validate_signer_config(config)
        return config


def create_signing_config() -> SigningConfigBuilder:
    """
    Create a new signer configuration builder.

    Returns:
        SigningConfigBuilder: New configuration builder
    """
    return SigningConfigBuilder()


def validate_signer_config(config: SignerConfig) -> None:
    """
    Validate signer configuration.

    Region, terminator and auth scheme are embedded in slash- and
    space-delimited header text, so they may not contain ``/`` or
    whitespace.

    Args:
        config: Signer configuration to validate

    Raises:
        SigningError: If configuration is invalid
    """
    if not isinstance(config, SignerConfig):
        raise SigningError(
            "Configuration must be SignerConfig instance",
            SigningErrorCodes.INVALID_CONFIG
        )

    for field_name in ('region', 'terminator', 'auth_scheme'):
        value = getattr(config, field_name)
        if not isinstance(value, str) or not value:
            raise SigningError(
                f"{field_name} must be a non-empty string",
                SigningErrorCodes.INVALID_CONFIG,
                {"field": field_name}
            )

        if '/' in value or any(ch.isspace() for ch in value):
            raise SigningError(
                f"{field_name} may not contain '/' or whitespace: {value!r}",
                SigningErrorCodes.INVALID_CONFIG,
                {"field": field_name, "value": value}
            )

    if not isinstance(config.key_prefix, str) or not config.key_prefix:
        raise SigningError(
            "key_prefix must be a non-empty string",
            SigningErrorCodes.INVALID_CONFIG,
            {"field": "key_prefix"}
        )

    if not isinstance(config.date_header, str) or not config.date_header.strip():
        raise SigningError(
            "date_header must be a non-empty string",
            SigningErrorCodes.INVALID_CONFIG,
            {"field": "date_header"}
        )

    if config.date_header.strip().lower() == AUTHORIZATION_HEADER.lower():
        raise SigningError(
            "date_header cannot be the Authorization header",
            SigningErrorCodes.INVALID_CONFIG,
            {"field": "date_header"}
        )

    if config.timestamp_generator is not None and not callable(config.timestamp_generator):
        raise SigningError(
            "timestamp_generator must be callable",
            SigningErrorCodes.INVALID_CONFIG,
            {"field": "timestamp_generator"}
        )

    threshold = config.slow_signing_threshold_ms
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or threshold <= 0:
        raise SigningError(
            "slow_signing_threshold_ms must be positive",
            SigningErrorCodes.INVALID_CONFIG,
            {"field": "slow_signing_threshold_ms"}
        )
