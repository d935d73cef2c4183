"""
Field identifiers and form value readers.

Each step's field identifiers are a typed record generated from the step
index, so the controller always knows exactly which block ids to read. Slack
returns the values of every visible input on each callback; suffixing entry
fields with their index keeps a previous step's values from shadowing the
current one.

Readers turn Slack's ``view.state.values`` into plain draft records. Rich
text is normalized on read, so drafts only hold strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from src.bot.rich_text import normalize
from src.core.blocks import DEFAULT_ACTION_ID

StateValues = Mapping[str, Mapping[str, Mapping[str, Any]]]


@dataclass(frozen=True)
class HeaderFieldIds:
    """Block ids on the header step."""

    destination: str = "post_channel"
    effective_date: str = "date"
    submitter: str = "name_user"
    category: str = "squad"
    tracker_link: str = "roadmap_link"
    focus: str = "focus_rich"


HEADER_FIELDS = HeaderFieldIds()


@dataclass(frozen=True)
class EntryFieldIds:
    """Block ids on entry step ``index``."""

    index: int
    name: str
    tracker_link: str
    summary: str
    status: str
    stage: str
    target_period: str
    phase: str
    actions: str

    @classmethod
    def for_index(cls, index: int) -> EntryFieldIds:
        if index < 0:
            raise ValueError("Entry index must be non-negative")
        return cls(
            index=index,
            name=f"p_name_{index}",
            tracker_link=f"p_jira_{index}",
            summary=f"p_tldr_{index}",
            status=f"p_rag_{index}",
            stage=f"p_gtm_{index}",
            target_period=f"p_launch_{index}",
            phase=f"p_phase_{index}",
            actions=f"next_action_{index}",
        )


@dataclass(frozen=True)
class HeaderDraft:
    """Raw header values as submitted (not yet validated)."""

    destination: str | None = None
    category: str | None = None
    effective_date: str | None = None
    submitter: str | None = None
    tracker_link: str | None = None
    focus: str = ""

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DraftEntry:
    """The entry currently on screen, not yet committed to the state."""

    name: str | None = None
    tracker_link: str | None = None
    summary: str | None = None
    status: str | None = None
    stage: str | None = None
    target_period: str | None = None
    phase: str | None = None

    @property
    def is_blank(self) -> bool:
        """An entry without a name is never appended."""
        return not (self.name and self.name.strip())

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Slack state value extraction
# =============================================================================


def _element(values: StateValues, block_id: str) -> Mapping[str, Any] | None:
    block = values.get(block_id)
    if not isinstance(block, Mapping):
        return None
    element = block.get(DEFAULT_ACTION_ID)
    return element if isinstance(element, Mapping) else None


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_text(values: StateValues, block_id: str) -> str | None:
    element = _element(values, block_id)
    return _clean(element.get("value")) if element else None


def read_selected_option(values: StateValues, block_id: str) -> str | None:
    element = _element(values, block_id)
    if not element:
        return None
    option = element.get("selected_option")
    if not isinstance(option, Mapping):
        return None
    return _clean(option.get("value"))


def read_date(values: StateValues, block_id: str) -> str | None:
    element = _element(values, block_id)
    return _clean(element.get("selected_date")) if element else None


def read_conversation(values: StateValues, block_id: str) -> str | None:
    element = _element(values, block_id)
    return _clean(element.get("selected_conversation")) if element else None


def read_user(values: StateValues, block_id: str) -> str | None:
    element = _element(values, block_id)
    return _clean(element.get("selected_user")) if element else None


def read_rich_text(values: StateValues, block_id: str) -> str:
    element = _element(values, block_id)
    if not element:
        return ""
    document = element.get("rich_text_value")
    return normalize(document if isinstance(document, Mapping) else None)


def read_header_draft(values: StateValues) -> HeaderDraft:
    """Read the header step's values."""
    ids = HEADER_FIELDS
    return HeaderDraft(
        destination=read_conversation(values, ids.destination),
        category=read_selected_option(values, ids.category),
        effective_date=read_date(values, ids.effective_date),
        submitter=read_user(values, ids.submitter),
        tracker_link=read_text(values, ids.tracker_link),
        focus=read_rich_text(values, ids.focus),
    )


def read_entry_draft(values: StateValues, ids: EntryFieldIds) -> DraftEntry:
    """
    Read the entry step identified by ``ids``.

    The target period may come from a select (launch quarter catalogs) or a
    date picker (free date catalogs); whichever is present is used.
    """
    summary = read_rich_text(values, ids.summary)
    return DraftEntry(
        name=read_text(values, ids.name),
        tracker_link=read_text(values, ids.tracker_link),
        summary=summary or None,
        status=read_selected_option(values, ids.status),
        stage=read_selected_option(values, ids.stage),
        target_period=(
            read_selected_option(values, ids.target_period)
            or read_date(values, ids.target_period)
        ),
        phase=read_selected_option(values, ids.phase),
    )


__all__ = [
    "StateValues",
    "HeaderFieldIds",
    "HEADER_FIELDS",
    "EntryFieldIds",
    "HeaderDraft",
    "DraftEntry",
    "read_text",
    "read_selected_option",
    "read_date",
    "read_conversation",
    "read_user",
    "read_rich_text",
    "read_header_draft",
    "read_entry_draft",
]
