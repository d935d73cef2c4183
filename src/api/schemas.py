"""
Pydantic Schemas for the Maker Update webhook API.

Defines the inbound Slack form payloads and the response envelope.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from src.lib.errors import build_error_response

# =============================================================================
# Common Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: datetime


def error_response(code: str, message: str | None = None) -> dict[str, Any]:
    """Wrap an error code in the error envelope."""
    return {"ok": False, "error": build_error_response(code, message)}


# =============================================================================
# Slack Schemas
# =============================================================================


class SlashCommand(BaseModel):
    """Form fields of a slash command request (unknown fields ignored)."""

    model_config = ConfigDict(extra="ignore")

    command: str = ""
    text: str = ""
    user_id: str = ""
    channel_id: str = ""
    trigger_id: str = ""
