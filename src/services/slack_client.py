"""Slack Web API client (httpx, async)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config.settings import DEFAULT_SLACK_API_BASE_URL, DEFAULT_SLACK_API_TIMEOUT
from src.lib.exceptions import SlackApiError

logger = logging.getLogger(__name__)


class SlackClient:
    """
    Minimal async client for the Slack Web API methods the bot uses.

    Every call has a bounded timeout. A response with ``ok: false`` raises
    SlackApiError carrying Slack's error code; transport failures raise
    SlackApiError with code "timeout" or "transport_error".

    Args:
        token: Bot token (xoxb-…)
        base_url: Web API base URL
        timeout: Per-call timeout in seconds
        http_client: Pre-built httpx client (tests inject a MockTransport)
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_SLACK_API_BASE_URL,
        timeout: float = DEFAULT_SLACK_API_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Call a Web API method with a JSON body.

        Args:
            method: Method name, e.g. "chat.postMessage"
            payload: JSON body

        Returns:
            Decoded response body (ok is always true)

        Raises:
            SlackApiError: On ok=false, non-2xx status, or transport failure
        """
        url = f"{self._base_url}/{method}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        try:
            response = await self._client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Slack API %s timed out", method)
            raise SlackApiError(method, "timeout") from e
        except httpx.HTTPError as e:
            logger.warning("Slack API %s transport error: %s", method, type(e).__name__)
            raise SlackApiError(method, "transport_error") from e

        if response.status_code == 429:
            raise SlackApiError(method, "ratelimited")
        if response.status_code >= 400:
            raise SlackApiError(method, f"http_{response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise SlackApiError(method, "invalid_response") from e
        if not isinstance(body, dict):
            raise SlackApiError(method, "invalid_response")

        if not body.get("ok"):
            code = str(body.get("error") or "unknown_error")
            logger.info("Slack API %s returned error %s", method, code)
            raise SlackApiError(method, code)
        return body

    async def post_message(
        self, channel: str, blocks: list[dict[str, Any]], text: str
    ) -> dict[str, Any]:
        return await self.call(
            "chat.postMessage", {"channel": channel, "blocks": blocks, "text": text}
        )

    async def join_conversation(self, channel: str) -> dict[str, Any]:
        return await self.call("conversations.join", {"channel": channel})

    async def open_view(self, trigger_id: str, view: dict[str, Any]) -> dict[str, Any]:
        return await self.call("views.open", {"trigger_id": trigger_id, "view": view})

    async def update_view(
        self, view_id: str, view: dict[str, Any], view_hash: str | None = None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"view_id": view_id, "view": view}
        if view_hash:
            payload["hash"] = view_hash
        return await self.call("views.update", payload)

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["SlackClient"]
