"""
Exception classes for Kobas Python SDK
"""

from typing import Optional, Dict, Any


class KobasSDKError(Exception):
    """Base exception for all Kobas SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class SigningErrorCodes:
    """Standard error codes for signing operations"""
    
    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    
    # Request errors
    INVALID_URL = "INVALID_URL"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_HEADERS = "INVALID_HEADERS"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    UNSUPPORTED_PAYLOAD = "UNSUPPORTED_PAYLOAD"
    ENCODING_FAILURE = "ENCODING_FAILURE"
    
    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    CANONICAL_REQUEST_FAILED = "CANONICAL_REQUEST_FAILED"


class SigningError(KobasSDKError):
    """
    Error class for signing operations
    
    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """
    
    def __init__(
        self, 
        message: str, 
        code: str = SigningErrorCodes.SIGNING_FAILED, 
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code, details)
        self.code = code
        
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"
        
    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', code='{self.code}', details={self.details})"


class InvalidUrl(SigningError):
    """Raised when a request URL cannot be split into path and query"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, SigningErrorCodes.INVALID_URL, details)


class UnsupportedPayload(SigningError):
    """Raised when the payload is neither a key-value structure nor raw text"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, SigningErrorCodes.UNSUPPORTED_PAYLOAD, details)


class EncodingFailure(SigningError):
    """Raised when a header, query or payload value is not valid text"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, SigningErrorCodes.ENCODING_FAILURE, details)


class MissingCredential(SigningError):
    """Raised when company id, identifier or secret is empty at signing time"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, SigningErrorCodes.MISSING_CREDENTIAL, details)
