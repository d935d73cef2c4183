"""
Request Security for the Maker Update bot.

Components:
- Request signature verification (HMAC-SHA256 over "v0:timestamp:body")
  with replay-window enforcement
- SecurityEventLogger: structured security event logging
- SecurityHeaders: HTTP security headers middleware

Signature verification runs before any wizard state is decoded or trusted.

Usage:
    from src.lib.security import authenticate_request, create_security_middleware

    authenticate_request(signature, timestamp, raw_body, secret)

    app = FastAPI()
    create_security_middleware(app)
"""

import hashlib
import hmac
import time
from typing import Any

import structlog

from src.lib.exceptions import AuthenticationError

logger = structlog.get_logger()

SIGNATURE_VERSION = "v0"

# Requests older or newer than this (seconds) are rejected as replays.
REPLAY_WINDOW_SECONDS = 300


def hash_uid(user_id: int | str) -> str:
    """Return a 12-char SHA-256 prefix for log-safe user identification."""
    return hashlib.sha256(str(user_id).encode()).hexdigest()[:12]


# ============================================
# Security Event Logger
# ============================================

class SecurityEventLogger:
    """Structured logging for security-relevant events (never logs secrets)."""

    @staticmethod
    def auth_failure(reason: str, detail: str | None = None) -> None:
        logger.warning("security_auth_failure", reason=reason, detail=detail)

    @staticmethod
    def malformed_state(reason: str, user_hash: str | None = None) -> None:
        logger.warning("security_malformed_state", reason=reason, user_hash=user_hash)


# ============================================
# Request Signature Verification
# ============================================

def compute_signature(timestamp: str, raw_body: str | bytes, secret: str) -> str:
    """
    Compute the expected signature header value for a request.

    Args:
        timestamp: Value of the request timestamp header
        raw_body: Raw request body exactly as received
        secret: Shared signing secret

    Returns:
        Signature string in the form "v0=<hex digest>"
    """
    body = raw_body.encode("utf-8") if isinstance(raw_body, str) else raw_body
    base_string = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), base_string, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def authenticate_request(
    signature: str | None,
    timestamp: str | None,
    raw_body: str | bytes,
    secret: str,
    now: float | None = None,
    tolerance_seconds: int = REPLAY_WINDOW_SECONDS,
) -> None:
    """
    Verify an inbound webhook request.

    The timestamp check is independent of the signature: a correctly signed
    request outside the replay window is still rejected.

    Args:
        signature: Value of the signature header
        timestamp: Value of the timestamp header (unix seconds)
        raw_body: Raw request body
        secret: Shared signing secret
        now: Current unix time (defaults to time.time())
        tolerance_seconds: Replay window

    Raises:
        AuthenticationError: If any check fails
    """
    if not secret:
        SecurityEventLogger.auth_failure("signing_secret_missing")
        raise AuthenticationError("Signing secret is not configured")

    if not signature or not timestamp:
        SecurityEventLogger.auth_failure("missing_headers")
        raise AuthenticationError("Missing signature or timestamp header")

    try:
        request_time = int(timestamp)
    except ValueError:
        SecurityEventLogger.auth_failure("invalid_timestamp")
        raise AuthenticationError("Timestamp header is not an integer") from None

    current_time = time.time() if now is None else now
    skew = abs(current_time - request_time)
    if skew > tolerance_seconds:
        SecurityEventLogger.auth_failure("stale_request", detail=f"skew={int(skew)}s")
        raise AuthenticationError("Request timestamp outside replay window")

    expected = compute_signature(timestamp, raw_body, secret)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        SecurityEventLogger.auth_failure("signature_mismatch")
        raise AuthenticationError("Signature mismatch")


def is_valid_request(
    signature: str | None,
    timestamp: str | None,
    raw_body: str | bytes,
    secret: str,
    now: float | None = None,
    tolerance_seconds: int = REPLAY_WINDOW_SECONDS,
) -> bool:
    """Boolean form of authenticate_request()."""
    try:
        authenticate_request(signature, timestamp, raw_body, secret, now, tolerance_seconds)
    except AuthenticationError:
        return False
    return True


# ============================================
# Security Headers Middleware
# ============================================

class SecurityHeaders:
    """
    Security headers added to every HTTP response.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Strict-Transport-Security: max-age=31536000; includeSubDomains
    - Referrer-Policy: no-referrer
    - Cache-Control: no-store
    """

    @classmethod
    def get_headers(cls) -> dict[str, str]:
        return {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
            "Referrer-Policy": "no-referrer",
            "Cache-Control": "no-store",
        }

    @classmethod
    def apply_to_response(cls, response: Any) -> Any:
        """Apply security headers to a Starlette response object."""
        for name, value in cls.get_headers().items():
            response.headers[name] = value
        return response


def create_security_middleware(app: Any) -> None:
    """
    Add security header middleware to a FastAPI application.

    Args:
        app: FastAPI application instance
    """
    from fastapi import Request
    from starlette.middleware.base import BaseHTTPMiddleware

    class SecurityHeadersMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next: Any) -> Any:
            response = await call_next(request)
            return SecurityHeaders.apply_to_response(response)

    app.add_middleware(SecurityHeadersMiddleware)

    logger.info("security_middleware_initialized")


__all__ = [
    "SIGNATURE_VERSION",
    "REPLAY_WINDOW_SECONDS",
    "hash_uid",
    "SecurityEventLogger",
    "compute_signature",
    "authenticate_request",
    "is_valid_request",
    "SecurityHeaders",
    "create_security_middleware",
]
