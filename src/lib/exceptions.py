"""
Custom exception hierarchy for the Maker Biweekly Update bot.

All exceptions inherit from MakerUpdateException, enabling a catch-all
for bot-specific errors while keeping the ability to catch specific
error types at each layer:

- AuthenticationError: rejected before any wizard state is touched
- MalformedStateError: the state token cannot be trusted, restart
- ValidationError: re-render the same step with field messages
- TokenTooLargeError: accumulated state no longer fits the transport
- DeliveryError: the final post could not be delivered
"""

from __future__ import annotations


class MakerUpdateException(Exception):
    """Base exception for all Maker Update errors."""


class ConfigurationError(MakerUpdateException):
    """Missing environment variables, invalid config values, or startup failures."""


class AuthenticationError(MakerUpdateException):
    """Inbound request signature missing, invalid, or outside the replay window."""


class MalformedStateError(MakerUpdateException):
    """State token could not be decoded into a wizard state."""


class TokenTooLargeError(MakerUpdateException):
    """Encoded wizard state exceeds the transport payload limit."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"State token is {size} characters, limit is {limit}.")


class ValidationError(MakerUpdateException):
    """Required form fields missing or outside their catalog.

    Attributes:
        field_errors: Field identifier -> user-facing message
    """

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        super().__init__(
            "Invalid fields: " + ", ".join(sorted(self.field_errors))
        )


class SlackApiError(MakerUpdateException):
    """A Slack Web API call returned ok=false or failed at the transport level.

    Attributes:
        method: Web API method name (e.g. "chat.postMessage")
        code: Slack error code (e.g. "not_in_channel"), or a transport marker
    """

    def __init__(self, method: str, code: str) -> None:
        self.method = method
        self.code = code
        super().__init__(f"Slack API {method} failed: {code}")


class DeliveryError(MakerUpdateException):
    """The composed message could not be posted to its destination."""

    def __init__(self, destination: str, code: str) -> None:
        self.destination = destination
        self.code = code
        super().__init__(f"Delivery to {destination} failed: {code}")
