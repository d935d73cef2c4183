"""
State Token Codec.

Serializes ``WizardState`` into an opaque string carried in each rendered
view's ``private_metadata`` and recovers it from the next callback. No
wizard state is ever held server-side.

Format:
    "v1." + base64url(zlib(compact JSON)), padding stripped

The leading version tag is the serialization contract. A token with an
unknown tag is rejected rather than guessed at. The token is client
visible and is never trusted for authorization.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import zlib

from pydantic import ValidationError as PydanticValidationError

from src.config.settings import DEFAULT_STATE_TOKEN_MAX_CHARS
from src.lib.exceptions import MalformedStateError, TokenTooLargeError
from src.models.wizard_state import WizardState

logger = logging.getLogger(__name__)

TOKEN_VERSION = "v1"
_PREFIX = f"{TOKEN_VERSION}."

# Upper bound on the decompressed payload of a token.
MAX_PAYLOAD_BYTES = 256 * 1024


def _inflate(compressed: bytes) -> bytes:
    """Decompress a token body, refusing truncated or oversized streams."""
    decompressor = zlib.decompressobj()
    payload = decompressor.decompress(compressed, MAX_PAYLOAD_BYTES)
    if decompressor.unconsumed_tail:
        raise ValueError("decompressed payload exceeds limit")
    if not decompressor.eof or decompressor.unused_data:
        raise ValueError("incomplete or trailing compressed data")
    return payload


class StateTokenCodec:
    """Encode/decode wizard state tokens under a size limit.

    Args:
        max_chars: Hard transport limit for the encoded token
    """

    def __init__(self, max_chars: int = DEFAULT_STATE_TOKEN_MAX_CHARS) -> None:
        self.max_chars = max_chars

    def encode(self, state: WizardState) -> str:
        """
        Encode a state into a token.

        Raises:
            TokenTooLargeError: If the token would exceed max_chars
        """
        payload = state.model_dump_json(exclude_none=True).encode("utf-8")
        compressed = zlib.compress(payload, level=9)
        body = base64.urlsafe_b64encode(compressed).rstrip(b"=").decode("ascii")
        token = _PREFIX + body
        if len(token) > self.max_chars:
            logger.warning(
                "State token too large: %d chars (limit %d, %d entries)",
                len(token),
                self.max_chars,
                len(state.entries),
            )
            raise TokenTooLargeError(len(token), self.max_chars)
        return token

    def decode(self, token: str | None) -> WizardState:
        """
        Decode a token produced by encode().

        Raises:
            MalformedStateError: On any foreign, truncated or tampered input
        """
        if not token or not isinstance(token, str):
            raise MalformedStateError("State token is missing")
        if not token.startswith(_PREFIX):
            raise MalformedStateError("Unknown state token version")

        if len(token) > self.max_chars:
            raise MalformedStateError("State token exceeds the size limit")

        body = token[len(_PREFIX):]
        try:
            padded = body + "=" * (-len(body) % 4)
            compressed = base64.urlsafe_b64decode(padded.encode("ascii"))
            payload = _inflate(compressed)
            data = json.loads(payload)
        except (binascii.Error, UnicodeError, ValueError, RecursionError, zlib.error) as e:
            raise MalformedStateError(f"State token could not be decoded: {type(e).__name__}") from e

        if not isinstance(data, dict):
            raise MalformedStateError("State token payload is not an object")

        try:
            return WizardState.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedStateError(
                f"State token does not match the state schema ({e.error_count()} errors)"
            ) from e


_default_codec = StateTokenCodec()


def encode(state: WizardState) -> str:
    """Encode with the default size limit."""
    return _default_codec.encode(state)


def decode(token: str | None) -> WizardState:
    """Decode with the default codec."""
    return _default_codec.decode(token)


__all__ = ["MAX_PAYLOAD_BYTES", "TOKEN_VERSION", "StateTokenCodec", "encode", "decode"]
