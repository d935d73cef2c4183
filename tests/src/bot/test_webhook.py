"""
Tests for the Slack interaction handler.

Tests cover:
- Slash command opens the header modal
- view_submission answers (push, errors, update)
- block_actions via views.update
- Action id allowlist
- Wizard errors rendered as terminal error views
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bot.views import CONFIRMATION_CALLBACK_ID, ENTRY_CALLBACK_ID, ERROR_CALLBACK_ID
from src.bot.webhook import ALLOWED_ACTIONS, UNKNOWN_COMMAND_TEXT, SlackInteractionHandler
from src.lib.exceptions import DeliveryError, SlackApiError

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def slack_client():
    client = MagicMock()
    client.open_view = AsyncMock(return_value={"ok": True})
    client.update_view = AsyncMock(return_value={"ok": True})
    return client


@pytest.fixture
def handler(controller, slack_client):
    return SlackInteractionHandler(controller, slack_client)


def _command(command="/maker-biweekly-update", trigger_id="T1"):
    form = {"command": command, "user_id": "U123"}
    if trigger_id:
        form["trigger_id"] = trigger_id
    return form


def _submission(callback_id, token, values):
    return {
        "type": "view_submission",
        "user": {"id": "U123"},
        "view": {
            "id": "V1",
            "callback_id": callback_id,
            "private_metadata": token,
            "state": {"values": values},
        },
    }


def _block_action(action_id, token, values):
    return {
        "type": "block_actions",
        "user": {"id": "U123"},
        "actions": [{"action_id": action_id, "block_id": "next_action_0"}],
        "view": {
            "id": "V1",
            "hash": "h-1",
            "callback_id": ENTRY_CALLBACK_ID,
            "private_metadata": token,
            "state": {"values": values},
        },
    }


async def _entry_token(handler, slack_client, header_values):
    await handler.handle_command(_command())
    header_view = slack_client.open_view.await_args.args[1]
    answer = await handler.handle_interaction(
        _submission("header_submit", header_view["private_metadata"], header_values())
    )
    return answer["view"]["private_metadata"]


# =============================================================================
# Slash command
# =============================================================================


async def test_command_opens_header_modal(handler, slack_client):
    result = await handler.handle_command(_command())

    assert result == {}
    trigger_id, view = slack_client.open_view.await_args.args
    assert trigger_id == "T1"
    assert view["callback_id"] == "header_submit"
    assert view["private_metadata"].startswith("v1.")


async def test_command_without_trigger(handler, slack_client):
    result = await handler.handle_command(_command(trigger_id=None))
    assert result["response_type"] == "ephemeral"
    slack_client.open_view.assert_not_awaited()


async def test_command_open_failure(handler, slack_client):
    slack_client.open_view = AsyncMock(side_effect=SlackApiError("views.open", "expired_trigger_id"))
    result = await handler.handle_command(_command())
    assert result["response_type"] == "ephemeral"


async def test_other_command_is_rejected(handler, slack_client):
    result = await handler.handle_command(_command(command="/something-else"))
    assert result == {"response_type": "ephemeral", "text": UNKNOWN_COMMAND_TEXT}
    slack_client.open_view.assert_not_awaited()


async def test_configured_command_name(controller, slack_client):
    handler = SlackInteractionHandler(controller, slack_client, slash_command="/squad-update")
    assert await handler.handle_command(_command(command="/squad-update")) == {}
    assert (await handler.handle_command(_command()))["text"] == UNKNOWN_COMMAND_TEXT


# =============================================================================
# view_submission
# =============================================================================


async def test_header_submission_pushes_entry_step(handler, slack_client, header_values):
    await handler.handle_command(_command())
    token = slack_client.open_view.await_args.args[1]["private_metadata"]

    answer = await handler.handle_interaction(_submission("header_submit", token, header_values()))

    assert answer["response_action"] == "push"
    assert answer["view"]["callback_id"] == ENTRY_CALLBACK_ID


async def test_header_submission_errors(handler, slack_client, header_values):
    await handler.handle_command(_command())
    token = slack_client.open_view.await_args.args[1]["private_metadata"]

    answer = await handler.handle_interaction(
        _submission("header_submit", token, header_values(category=None))
    )
    assert answer == {"response_action": "errors", "errors": {"squad": "Pick a squad."}}


async def test_entry_submission_posts_and_confirms(
    handler, slack_client, fake_delivery, header_values, entry_values
):
    token = await _entry_token(handler, slack_client, header_values)
    answer = await handler.handle_interaction(_submission("project_submit", token, entry_values()))

    assert answer["response_action"] == "update"
    assert answer["view"]["callback_id"] == CONFIRMATION_CALLBACK_ID
    fake_delivery.deliver.assert_awaited_once()


async def test_malformed_token_shows_error_view(handler):
    answer = await handler.handle_interaction(_submission("project_submit", "v1.bogus", {}))
    assert answer["response_action"] == "update"
    assert answer["view"]["callback_id"] == ERROR_CALLBACK_ID
    assert "slash command" in answer["view"]["blocks"][0]["text"]["text"]


async def test_delivery_failure_shows_error_view(
    handler, slack_client, fake_delivery, header_values, entry_values
):
    token = await _entry_token(handler, slack_client, header_values)
    fake_delivery.deliver = AsyncMock(side_effect=DeliveryError("C1", "is_archived"))

    answer = await handler.handle_interaction(_submission("project_submit", token, entry_values()))
    assert answer["view"]["callback_id"] == ERROR_CALLBACK_ID


async def test_unknown_submission_is_acknowledged(handler):
    assert await handler.handle_interaction(_submission("other_modal", None, {})) is None
    assert await handler.handle_interaction({"type": "shortcut"}) is None


# =============================================================================
# block_actions
# =============================================================================


def test_allowed_actions():
    assert ALLOWED_ACTIONS == {"add_another", "back", "done"}


async def test_add_another_updates_view(handler, slack_client, header_values, entry_values):
    token = await _entry_token(handler, slack_client, header_values)

    result = await handler.handle_interaction(_block_action("add_another", token, entry_values()))

    assert result is None
    view_id, view, view_hash = slack_client.update_view.await_args.args
    assert view_id == "V1"
    assert view_hash == "h-1"
    assert view["title"]["text"] == "Project 2"


async def test_done_action_posts(handler, slack_client, fake_delivery, header_values, entry_values):
    token = await _entry_token(handler, slack_client, header_values)
    await handler.handle_interaction(_block_action("done", token, entry_values()))

    fake_delivery.deliver.assert_awaited_once()
    view = slack_client.update_view.await_args.args[1]
    assert view["callback_id"] == CONFIRMATION_CALLBACK_ID


async def test_unknown_action_is_ignored(handler, slack_client):
    await handler.handle_interaction(_block_action("drop_table", "v1.x", {}))
    slack_client.update_view.assert_not_awaited()


async def test_action_with_bad_token_shows_error_view(handler, slack_client):
    await handler.handle_interaction(_block_action("back", "v1.bogus", {}))
    view_id, view, view_hash = slack_client.update_view.await_args.args
    assert view["callback_id"] == ERROR_CALLBACK_ID
    assert view_hash is None


async def test_update_failure_is_logged_not_raised(handler, slack_client, header_values):
    token = await _entry_token(handler, slack_client, header_values)
    slack_client.update_view = AsyncMock(side_effect=SlackApiError("views.update", "hash_conflict"))

    assert await handler.handle_interaction(_block_action("back", token, {})) is None
