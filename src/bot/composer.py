"""
Message Composer.

Renders a finished ``WizardState`` into the message posted to the
destination channel: one header section, a divider, then one section per
project (insertion order) each followed by a divider.

Pure and deterministic: the same state always yields the same message.
Optional fields that are absent are left out entirely.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from src.config.catalogs import status_icon
from src.models.wizard_state import Entry, HeaderData, WizardState

MESSAGE_TITLE = "MAKER BIWEEKLY UPDATE"
FALLBACK_TEXT = "Maker Biweekly Update"
NONE_PROVIDED = "_(none provided)_"
UNKNOWN_SUBMITTER = "(unknown)"

FIRST_ENTRY_MARKER = "💥"
ENTRY_MARKER = "💡"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

DIVIDER: dict[str, Any] = {"type": "divider"}


@dataclass
class RenderedMessage:
    """Blocks plus the plain-text fallback shown in notifications."""

    blocks: list[dict[str, Any]] = field(default_factory=list)
    text: str = FALLBACK_TEXT


def as_link(url: str | None, label: str = "Link") -> str:
    """Format a URL or bare host as ``<https://…|label>``."""
    if not url:
        return ""
    target = url if _SCHEME_RE.match(url) else f"https://{url}"
    return f"<{target}|{label}>"


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _header_text(header: HeaderData, submitter: str | None) -> str:
    submitted_by = f"<@{submitter}>" if submitter else UNKNOWN_SUBMITTER
    squad_line = f"*Squad:* {header.category}"
    if header.tracker_link:
        squad_line += f"   *Roadmap:* {as_link(header.tracker_link)}"
    return (
        f"*{MESSAGE_TITLE}*\n"
        f"*Date:* {header.effective_date.isoformat()}   *Submitted by:* {submitted_by}\n"
        f"{squad_line}"
        f"\n\n\n*SUMMARY OF FOCUS AREAS THIS SPRINT*\n{header.focus or NONE_PROVIDED}"
        f"\n\n\n*PROJECT UPDATES*"
    )


def _entry_text(entry: Entry, position: int) -> str:
    marker = FIRST_ENTRY_MARKER if position == 0 else ENTRY_MARKER
    lines = [f"*{marker} {entry.name}*"]
    if entry.tracker_link:
        lines.append(f"*Jira:* {as_link(entry.tracker_link, 'Initiative')}")
    if entry.summary:
        lines.append(f"*TL;DR*\n{entry.summary}")

    icon = status_icon(entry.status)
    rag = f"{icon} {entry.status}" if icon else entry.status
    status_line = f"*RAG:* {rag}   *GTM:* {entry.stage}"
    if entry.target_period:
        status_line += f"   *Target launch:* {entry.target_period}"
    lines.append(status_line)
    lines.append(f"*Phase:* {entry.phase}")
    return "\n".join(lines)


def compose(state: WizardState) -> RenderedMessage:
    """
    Render the final message for a completed wizard.

    Raises:
        ValueError: If the header step was never completed
    """
    header = state.header
    if header is None:
        raise ValueError("Cannot compose an update without a header")

    blocks: list[dict[str, Any]] = [_section(_header_text(header, state.submitter)), dict(DIVIDER)]
    for position, entry in enumerate(state.entries):
        blocks.append(_section(_entry_text(entry, position)))
        blocks.append(dict(DIVIDER))

    return RenderedMessage(blocks=blocks, text=f"{FALLBACK_TEXT}: {header.category}")


__all__ = ["RenderedMessage", "as_link", "compose"]
