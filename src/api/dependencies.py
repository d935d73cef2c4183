"""
FastAPI Dependencies for request authentication and handler lookup.
"""

import logging

from fastapi import Request

from src.bot.webhook import SlackInteractionHandler
from src.config.settings import Settings
from src.lib.security import authenticate_request

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Slack-Signature"
TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"


def get_settings(request: Request) -> Settings:
    """Dependency returning the application settings."""
    settings: Settings = request.app.state.settings
    return settings


def get_handler(request: Request) -> SlackInteractionHandler:
    """Dependency returning the Slack interaction handler."""
    handler: SlackInteractionHandler = request.app.state.handler
    return handler


async def verified_body(request: Request) -> bytes:
    """
    Dependency returning the raw request body after signature verification.

    The signature covers the body bytes exactly as sent, so the body is read
    raw and parsed only after this check passes.

    Raises:
        AuthenticationError: If the signature or timestamp is invalid
            (mapped to 401 by the app's exception handler)
    """
    settings = get_settings(request)
    body = await request.body()
    authenticate_request(
        request.headers.get(SIGNATURE_HEADER),
        request.headers.get(TIMESTAMP_HEADER),
        body,
        settings.slack_signing_secret,
        tolerance_seconds=settings.signature_tolerance_seconds,
    )
    return body
