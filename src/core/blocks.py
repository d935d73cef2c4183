"""
View schema types for the Maker Update bot.

A ``ViewSchema`` is the declarative description of one wizard step: an
ordered list of input fields (with identifiers, labels, option catalogs and
pre-filled values), an optional row of action buttons, and the opaque state
token. ``to_slack_format()`` renders it as a Slack modal view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Every input element uses the same action id; the block id carries meaning.
DEFAULT_ACTION_ID = "val"


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text}


def _mrkdwn_section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


class FieldKind(Enum):
    """Input element kinds supported by the wizard."""

    PLAIN_TEXT = "plain_text_input"
    RICH_TEXT = "rich_text_input"
    STATIC_SELECT = "static_select"
    DATEPICKER = "datepicker"
    CONVERSATIONS_SELECT = "conversations_select"
    USERS_SELECT = "users_select"


@dataclass
class SelectOption:
    """One option of a static select."""

    label: str
    value: str

    @classmethod
    def from_label(cls, label: str) -> SelectOption:
        return cls(label=label, value=label)

    def to_slack_format(self) -> dict[str, Any]:
        return {"text": _plain(self.label), "value": self.value}


@dataclass
class InputField:
    """A single input on a wizard step.

    Attributes:
        block_id: Field identifier, unique within the step
        label: Label shown above the input
        kind: Element kind
        optional: Whether the platform may submit it empty
        options: Option catalog (static selects only)
        initial_value: Pre-filled value; a rich text document for RICH_TEXT
        placeholder: Hint text for text inputs
        error: Inline validation message shown under the field
    """

    block_id: str
    label: str
    kind: FieldKind
    optional: bool = False
    options: list[SelectOption] = field(default_factory=list)
    initial_value: Any = None
    placeholder: str | None = None
    error: str | None = None
    action_id: str = DEFAULT_ACTION_ID

    def __post_init__(self) -> None:
        if self.kind == FieldKind.STATIC_SELECT and not self.options:
            raise ValueError(f"Select field {self.block_id} has no options")

    def _element(self) -> dict[str, Any]:
        element: dict[str, Any] = {"action_id": self.action_id}
        initial = self.initial_value

        if self.kind == FieldKind.PLAIN_TEXT:
            element["type"] = "plain_text_input"
            element["initial_value"] = initial or ""
        elif self.kind == FieldKind.RICH_TEXT:
            element["type"] = "rich_text_input"
            if initial:
                element["initial_value"] = initial
        elif self.kind == FieldKind.STATIC_SELECT:
            element["type"] = "static_select"
            element["options"] = [option.to_slack_format() for option in self.options]
            selected = next((o for o in self.options if o.value == initial), None)
            if selected is not None:
                element["initial_option"] = selected.to_slack_format()
        elif self.kind == FieldKind.DATEPICKER:
            element["type"] = "datepicker"
            if initial:
                element["initial_date"] = str(initial)
        elif self.kind == FieldKind.CONVERSATIONS_SELECT:
            element["type"] = "conversations_select"
            element["filter"] = {"include": ["public", "private"]}
            if initial:
                element["initial_conversation"] = initial
            else:
                element["default_to_current_conversation"] = True
        elif self.kind == FieldKind.USERS_SELECT:
            element["type"] = "users_select"
            if initial:
                element["initial_user"] = initial

        if self.placeholder and self.kind in (FieldKind.PLAIN_TEXT, FieldKind.STATIC_SELECT):
            element["placeholder"] = _plain(self.placeholder)
        return element

    def to_slack_format(self) -> list[dict[str, Any]]:
        """Render as an input block, followed by a warning line if invalid."""
        blocks: list[dict[str, Any]] = [
            {
                "type": "input",
                "block_id": self.block_id,
                "optional": self.optional,
                "label": _plain(self.label),
                "element": self._element(),
            }
        ]
        if self.error:
            blocks.append(
                {
                    "type": "context",
                    "block_id": f"{self.block_id}_error",
                    "elements": [{"type": "mrkdwn", "text": f":warning: {self.error}"}],
                }
            )
        return blocks


@dataclass
class ActionButton:
    """A button in the step's action row."""

    text: str
    action_id: str
    style: str | None = None

    def to_slack_format(self) -> dict[str, Any]:
        button: dict[str, Any] = {
            "type": "button",
            "text": _plain(self.text),
            "action_id": self.action_id,
        }
        if self.style:
            button["style"] = self.style
        return button


@dataclass
class ViewSchema:
    """Declarative description of one wizard step."""

    callback_id: str
    title: str
    fields: list[InputField] = field(default_factory=list)
    private_metadata: str = ""
    intro: str | None = None
    actions: list[ActionButton] = field(default_factory=list)
    actions_block_id: str | None = None
    submit_label: str | None = None
    close_label: str = "Cancel"

    def get_field(self, block_id: str) -> InputField:
        for input_field in self.fields:
            if input_field.block_id == block_id:
                return input_field
        raise KeyError(block_id)

    @property
    def field_ids(self) -> list[str]:
        return [input_field.block_id for input_field in self.fields]

    def apply_errors(self, errors: dict[str, str]) -> None:
        """Attach inline messages to the fields they refer to."""
        for input_field in self.fields:
            input_field.error = errors.get(input_field.block_id)

    def to_slack_format(self) -> dict[str, Any]:
        """Render as a Slack modal view payload."""
        blocks: list[dict[str, Any]] = []
        if self.intro:
            blocks.append(_mrkdwn_section(self.intro))
        for input_field in self.fields:
            blocks.extend(input_field.to_slack_format())
        if self.actions:
            actions_block: dict[str, Any] = {
                "type": "actions",
                "elements": [button.to_slack_format() for button in self.actions],
            }
            if self.actions_block_id:
                actions_block["block_id"] = self.actions_block_id
            blocks.append(actions_block)

        view: dict[str, Any] = {
            "type": "modal",
            "callback_id": self.callback_id,
            "title": _plain(self.title),
            "close": _plain(self.close_label),
            "blocks": blocks,
            "private_metadata": self.private_metadata,
        }
        if self.submit_label and self.fields:
            view["submit"] = _plain(self.submit_label)
        return view
