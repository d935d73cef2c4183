"""
Slack Webhook Handler for the Maker Update bot.

Routes authenticated Slack payloads to the wizard controller and turns
controller responses into Slack answers.

Flow:
    1. Request signature already verified (see src/api/dependencies.py)
    2. Slash command -> header modal via views.open
    3. view_submission -> answered in the HTTP response
       (push the next step, inline errors, or update to a terminal view)
    4. block_actions (Add another / Back / Done) -> views.update
    5. Unrecoverable wizard errors -> terminal error view, nothing posted

Action ids are checked against an allowlist before anything is decoded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.bot.views import ENTRY_CALLBACK_ID, HEADER_CALLBACK_ID, build_error_view
from src.bot.wizard import WizardController
from src.config.catalogs import EntryAction
from src.config.settings import DEFAULT_SLASH_COMMAND
from src.core.wizard_response import WizardResponse
from src.lib.errors import code_for_exception, get_error_message
from src.lib.exceptions import (
    DeliveryError,
    MalformedStateError,
    SlackApiError,
    TokenTooLargeError,
)
from src.lib.security import hash_uid
from src.services.slack_client import SlackClient

logger = logging.getLogger(__name__)

# Wizard errors that end the flow with an error view instead of a 500.
_TERMINAL_ERRORS = (MalformedStateError, TokenTooLargeError, DeliveryError)

ALLOWED_ACTIONS: frozenset[str] = frozenset(action.value for action in EntryAction)

OPEN_FAILED_TEXT = "Sorry, the update form could not be opened. Please try again."
UNKNOWN_COMMAND_TEXT = "Unknown command."


def _view_parts(view: Mapping[str, Any]) -> tuple[str | None, dict[str, Any]]:
    """Extract (state token, state values) from a Slack view payload."""
    token = view.get("private_metadata") or None
    state = view.get("state") or {}
    values = state.get("values") or {}
    return token, values


def _user_hash(payload: Mapping[str, Any]) -> str | None:
    user = payload.get("user") or {}
    user_id = user.get("id")
    return hash_uid(user_id) if user_id else None


def _error_view(exc: Exception) -> dict[str, Any]:
    return build_error_view(get_error_message(code_for_exception(exc))).to_slack_format()


class SlackInteractionHandler:
    """
    Main handler for Slack slash commands and interactivity payloads.

    Args:
        controller: Wizard controller
        slack_client: Web API client for views.open / views.update
        slash_command: The only command that opens the wizard
    """

    def __init__(
        self,
        controller: WizardController,
        slack_client: SlackClient,
        slash_command: str = DEFAULT_SLASH_COMMAND,
    ) -> None:
        self.controller = controller
        self.slack = slack_client
        self.slash_command = slash_command

    async def handle_command(self, form: Mapping[str, str]) -> dict[str, Any]:
        """
        Handle the slash command by opening the header modal.

        Returns:
            Response body for the command request (empty on success)
        """
        command = form.get("command")
        if command != self.slash_command:
            logger.warning("Unknown slash command rejected: %s", str(command)[:50])
            return {"response_type": "ephemeral", "text": UNKNOWN_COMMAND_TEXT}

        trigger_id = form.get("trigger_id")
        user_id = form.get("user_id") or None
        if not trigger_id:
            logger.warning("Slash command without trigger_id")
            return {"response_type": "ephemeral", "text": OPEN_FAILED_TEXT}

        response = await self.controller.open(user_id)
        try:
            await self.slack.open_view(trigger_id, response.view.to_slack_format())
        except SlackApiError as e:
            logger.error(
                "Failed to open wizard",
                extra={"code": e.code, "user_hash": hash_uid(user_id) if user_id else None},
            )
            return {"response_type": "ephemeral", "text": OPEN_FAILED_TEXT}
        return {}

    async def handle_interaction(self, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        """
        Handle an interactivity payload.

        Returns:
            Body to answer the request with, or None for an empty 200
        """
        payload_type = payload.get("type")
        if payload_type == "view_submission":
            return await self._handle_view_submission(payload)
        if payload_type == "block_actions":
            await self._handle_block_actions(payload)
            return None
        logger.debug("Ignoring interaction type %s", payload_type)
        return None

    async def _handle_view_submission(self, payload: Mapping[str, Any]) -> dict[str, Any] | None:
        view = payload.get("view") or {}
        callback_id = view.get("callback_id")
        token, values = _view_parts(view)

        try:
            if callback_id == HEADER_CALLBACK_ID:
                response = await self.controller.submit_header(values, token)
                return self._submission_answer(response, action="push")
            if callback_id == ENTRY_CALLBACK_ID:
                response = await self.controller.submit_entry(values, token)
                return self._submission_answer(response, action="update")
        except _TERMINAL_ERRORS as e:
            logger.warning(
                "Wizard ended with error",
                extra={"error": type(e).__name__, "user_hash": _user_hash(payload)},
            )
            return {"response_action": "update", "view": _error_view(e)}

        logger.debug("Ignoring view submission %s", callback_id)
        return None

    @staticmethod
    def _submission_answer(response: WizardResponse, action: str) -> dict[str, Any]:
        if response.has_errors:
            return {"response_action": "errors", "errors": response.errors}
        if response.is_end_of_flow:
            action = "update"
        return {"response_action": action, "view": response.view.to_slack_format()}

    async def _handle_block_actions(self, payload: Mapping[str, Any]) -> None:
        actions = payload.get("actions") or []
        if not actions:
            return
        action_id = actions[0].get("action_id")
        if action_id not in ALLOWED_ACTIONS:
            logger.warning(
                "Unknown action_id rejected: %s",
                str(action_id)[:50],
                extra={"user_hash": _user_hash(payload)},
            )
            return

        view = payload.get("view") or {}
        view_id = view.get("id")
        if not view_id:
            logger.warning("block_actions payload without a view id")
            return
        token, values = _view_parts(view)

        try:
            response = await self.controller.handle_action(EntryAction(action_id), values, token)
            rendered = response.view.to_slack_format()
            view_hash = view.get("hash")
        except _TERMINAL_ERRORS as e:
            logger.warning(
                "Wizard ended with error",
                extra={"error": type(e).__name__, "user_hash": _user_hash(payload)},
            )
            rendered = _error_view(e)
            view_hash = None

        try:
            await self.slack.update_view(view_id, rendered, view_hash)
        except SlackApiError as e:
            # hash_conflict means a newer update already replaced this view
            logger.warning("views.update failed", extra={"code": e.code})


__all__ = ["ALLOWED_ACTIONS", "SlackInteractionHandler"]
