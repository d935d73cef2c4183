"""
Delivery of the composed update.

Posts the message to its destination. When Slack answers that the bot is
not in (or cannot see) the channel, the bot joins it and retries exactly
once. Every other failure is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.bot.composer import RenderedMessage
from src.lib.exceptions import DeliveryError, SlackApiError
from src.services.slack_client import SlackClient

logger = structlog.get_logger()

# Slack error codes that a conversations.join can fix.
JOINABLE_ERRORS: frozenset[str] = frozenset({"channel_not_found", "not_in_channel"})


@dataclass
class DeliveryResult:
    """Outcome of a successful delivery."""

    destination: str
    ts: str | None = None
    joined: bool = False


class Delivery:
    """Send composed messages with one join-then-retry path."""

    def __init__(self, client: SlackClient) -> None:
        self._client = client

    async def deliver(self, destination: str, message: RenderedMessage) -> DeliveryResult:
        """
        Post ``message`` to ``destination``.

        Raises:
            DeliveryError: If the post fails for a non-joinable reason, the
                join fails, or the retry after joining fails
        """
        try:
            response = await self._client.post_message(destination, message.blocks, message.text)
            logger.info("update_delivered", destination=destination, joined=False)
            return DeliveryResult(destination=destination, ts=response.get("ts"))
        except SlackApiError as e:
            if e.code not in JOINABLE_ERRORS:
                logger.error("delivery_failed", destination=destination, code=e.code)
                raise DeliveryError(destination, e.code) from e
            logger.info("delivery_joining_channel", destination=destination, code=e.code)

        try:
            await self._client.join_conversation(destination)
            response = await self._client.post_message(destination, message.blocks, message.text)
        except SlackApiError as e:
            logger.error(
                "delivery_failed_after_join",
                destination=destination,
                method=e.method,
                code=e.code,
            )
            raise DeliveryError(destination, e.code) from e

        logger.info("update_delivered", destination=destination, joined=True)
        return DeliveryResult(destination=destination, ts=response.get("ts"), joined=True)


__all__ = ["JOINABLE_ERRORS", "DeliveryResult", "Delivery"]
