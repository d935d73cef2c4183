"""
Lib package for the Maker Update bot.

Contains shared utilities:
- exceptions.py: Exception hierarchy
- errors.py: Centralized error codes and response builder
- security.py: Request signature verification and security headers
- logging.py: structlog configuration
"""

from src.lib.errors import (
    AUTH_FAILED,
    BAD_REQUEST,
    DELIVERY_FAILED,
    INTERNAL_ERROR,
    MALFORMED_STATE,
    TOKEN_TOO_LARGE,
    VALIDATION_ERROR,
    build_error_response,
    code_for_exception,
    get_error_message,
)
from src.lib.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DeliveryError,
    MakerUpdateException,
    MalformedStateError,
    SlackApiError,
    TokenTooLargeError,
    ValidationError,
)
from src.lib.security import (
    SecurityEventLogger,
    SecurityHeaders,
    authenticate_request,
    compute_signature,
    hash_uid,
    is_valid_request,
)

__all__ = [
    # Errors
    "AUTH_FAILED",
    "BAD_REQUEST",
    "DELIVERY_FAILED",
    "INTERNAL_ERROR",
    "MALFORMED_STATE",
    "TOKEN_TOO_LARGE",
    "VALIDATION_ERROR",
    "build_error_response",
    "code_for_exception",
    "get_error_message",
    # Exceptions
    "MakerUpdateException",
    "ConfigurationError",
    "AuthenticationError",
    "MalformedStateError",
    "TokenTooLargeError",
    "ValidationError",
    "SlackApiError",
    "DeliveryError",
    # Security
    "SecurityEventLogger",
    "SecurityHeaders",
    "authenticate_request",
    "compute_signature",
    "hash_uid",
    "is_valid_request",
]
