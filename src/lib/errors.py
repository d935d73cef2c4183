"""
Centralized Error Response Builder for the Maker Update bot.

Provides consistent error codes and messages for use across the HTTP
layer and the wizard's error views.

Error codes are constants that map to user-facing message strings.
The builder returns structured error dicts for JSON responses.
"""

from __future__ import annotations

from typing import Any

from src.lib.exceptions import (
    AuthenticationError,
    DeliveryError,
    MalformedStateError,
    TokenTooLargeError,
    ValidationError,
)

# =============================================================================
# Error Code Constants
# =============================================================================

AUTH_FAILED = "AUTH_FAILED"
MALFORMED_STATE = "MALFORMED_STATE"
VALIDATION_ERROR = "VALIDATION_ERROR"
TOKEN_TOO_LARGE = "TOKEN_TOO_LARGE"
DELIVERY_FAILED = "DELIVERY_FAILED"
BAD_REQUEST = "BAD_REQUEST"
INTERNAL_ERROR = "INTERNAL_ERROR"

_ERROR_MESSAGES: dict[str, str] = {
    AUTH_FAILED: "Request could not be authenticated.",
    MALFORMED_STATE: (
        "This form has expired or was corrupted. "
        "Please start again with the slash command."
    ),
    VALIDATION_ERROR: "Some required fields are missing or invalid.",
    TOKEN_TOO_LARGE: (
        "Your update has too many or too large projects to fit in one form. "
        "Shorten some TL;DRs or split the update in two."
    ),
    DELIVERY_FAILED: (
        "Your update could not be posted to the selected channel. "
        "Check that the bot can access it and try again."
    ),
    BAD_REQUEST: "The request payload could not be understood.",
    INTERNAL_ERROR: "An internal error occurred. Please try again.",
}

_GENERIC_MESSAGE = "An error occurred."

# Exception type -> error code. Order matters only for subclasses.
_EXCEPTION_CODES: tuple[tuple[type[Exception], str], ...] = (
    (AuthenticationError, AUTH_FAILED),
    (MalformedStateError, MALFORMED_STATE),
    (ValidationError, VALIDATION_ERROR),
    (TokenTooLargeError, TOKEN_TOO_LARGE),
    (DeliveryError, DELIVERY_FAILED),
)


def get_error_message(code: str) -> str:
    """
    Get the user-facing message for an error code.

    Falls back to a generic message if the error code is unknown.
    """
    return _ERROR_MESSAGES.get(code, _GENERIC_MESSAGE)


def code_for_exception(exc: Exception) -> str:
    """Map an exception to its error code (INTERNAL_ERROR if unmapped)."""
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return INTERNAL_ERROR


def build_error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a structured error response dict.

    Args:
        code: Error code constant (e.g. AUTH_FAILED, MALFORMED_STATE)
        message: Optional override message (bypasses the registry)
        details: Optional additional error details

    Returns:
        Structured error dict: {"code": str, "message": str, "details": dict | None}
    """
    resolved_message = message if message is not None else get_error_message(code)
    error: dict[str, Any] = {
        "code": code,
        "message": resolved_message,
    }
    if details is not None:
        error["details"] = details
    return error


__all__ = [
    "AUTH_FAILED",
    "MALFORMED_STATE",
    "VALIDATION_ERROR",
    "TOKEN_TOO_LARGE",
    "DELIVERY_FAILED",
    "BAD_REQUEST",
    "INTERNAL_ERROR",
    "get_error_message",
    "code_for_exception",
    "build_error_response",
]
