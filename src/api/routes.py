"""
Slack webhook routes for the Maker Update bot.

Endpoints (all under /slack prefix):
- /commands - slash command, opens the wizard
- /interactions - modal submissions and button clicks

Both endpoints verify the request signature before parsing the body.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from src.api.dependencies import get_handler, verified_body
from src.api.schemas import SlashCommand, error_response
from src.bot.webhook import SlackInteractionHandler
from src.lib.errors import BAD_REQUEST

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slack", tags=["slack"])


def _parse_form(body: bytes) -> dict[str, str]:
    return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))


@router.post("/commands")
async def slash_command(
    body: bytes = Depends(verified_body),
    handler: SlackInteractionHandler = Depends(get_handler),
) -> Any:
    """Open the wizard's header modal."""
    command = SlashCommand.model_validate(_parse_form(body))
    result = await handler.handle_command(command.model_dump())
    if not result:
        return Response(status_code=200)
    return JSONResponse(result)


@router.post("/interactions")
async def interactions(
    body: bytes = Depends(verified_body),
    handler: SlackInteractionHandler = Depends(get_handler),
) -> Any:
    """Handle view submissions and block actions."""
    raw_payload = _parse_form(body).get("payload")
    if not raw_payload:
        return JSONResponse(error_response(BAD_REQUEST), status_code=400)
    try:
        payload = json.loads(raw_payload)
    except json.JSONDecodeError:
        logger.warning("Interaction payload is not valid JSON")
        return JSONResponse(error_response(BAD_REQUEST), status_code=400)
    if not isinstance(payload, dict):
        return JSONResponse(error_response(BAD_REQUEST), status_code=400)

    result = await handler.handle_interaction(payload)
    if result is None:
        return Response(status_code=200)
    return JSONResponse(result)
