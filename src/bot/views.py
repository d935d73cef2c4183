"""
View Schema Builder.

Builds the declarative view for each wizard step from the current state:

- header step: destination, squad, roadmap link, focus summary
  (plus date and submitter pickers in the classic variant)
- entry step: project fields plus Back / Add another / Done
- terminal confirmation and error views

Every step view embeds the current ``WizardState`` as an encoded token in
``private_metadata``, so the next callback can recover it without any
server-side storage.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from src.bot.fields import HEADER_FIELDS, EntryFieldIds
from src.bot.rich_text import to_rich_text
from src.bot.state_token import StateTokenCodec
from src.config.catalogs import Catalog, EntryAction, FormVariant
from src.core.blocks import ActionButton, FieldKind, InputField, SelectOption, ViewSchema
from src.models.wizard_state import WizardState

HEADER_CALLBACK_ID = "header_submit"
ENTRY_CALLBACK_ID = "project_submit"
CONFIRMATION_CALLBACK_ID = "update_posted"
ERROR_CALLBACK_ID = "update_failed"

WIZARD_TITLE = "Maker Biweekly Update"

ENTRY_INTRO = "*Add one project, then click* *Add another*, *Back*, *or* *Done*."
EDITING_INTRO = "*Editing project {number}.* Change anything, then *Add another* or *Done*."


class EntryValues(Protocol):
    """Anything with entry-shaped attributes (a stored Entry or a draft)."""

    name: str | None
    tracker_link: str | None
    summary: str | None
    status: str | None
    stage: str | None
    target_period: str | None
    phase: str | None


def _options(labels: tuple[str, ...]) -> list[SelectOption]:
    return [SelectOption.from_label(label) for label in labels]


def build_header_view(
    state: WizardState,
    codec: StateTokenCodec,
    catalog: Catalog,
    variant: FormVariant,
    today: date | None = None,
    errors: dict[str, str] | None = None,
) -> ViewSchema:
    """
    Build the header step.

    Args:
        state: Initial state (carries the invoking user as submitter)
        codec: Token codec used to embed the state
        catalog: Option catalog for the squad select
        variant: Decides whether date and submitter pickers are shown
        today: Initial value for the date picker
        errors: Field id -> inline message

    Returns:
        ViewSchema for the header modal
    """
    ids = HEADER_FIELDS
    fields = [
        InputField(
            block_id=ids.destination,
            label="Post to channel",
            kind=FieldKind.CONVERSATIONS_SELECT,
        ),
    ]
    if variant.collect_date:
        fields.append(
            InputField(
                block_id=ids.effective_date,
                label="Date",
                kind=FieldKind.DATEPICKER,
                optional=True,
                initial_value=(today or date.today()).isoformat(),
            )
        )
    if variant.collect_submitter:
        fields.append(
            InputField(
                block_id=ids.submitter,
                label="Your Slack user",
                kind=FieldKind.USERS_SELECT,
                optional=True,
                initial_value=state.submitter,
            )
        )
    fields.extend(
        [
            InputField(
                block_id=ids.category,
                label="Squad",
                kind=FieldKind.STATIC_SELECT,
                options=_options(catalog.categories),
            ),
            InputField(
                block_id=ids.tracker_link,
                label="Link to roadmap or project tracker",
                kind=FieldKind.PLAIN_TEXT,
                placeholder="Paste the URL (e.g., https://…)",
            ),
            InputField(
                block_id=ids.focus,
                label="Summary of focus areas this sprint",
                kind=FieldKind.RICH_TEXT,
            ),
        ]
    )

    view = ViewSchema(
        callback_id=HEADER_CALLBACK_ID,
        title=WIZARD_TITLE,
        fields=fields,
        private_metadata=codec.encode(state),
        submit_label="Next →",
    )
    if errors:
        view.apply_errors(errors)
    return view


def build_entry_view(
    state: WizardState,
    codec: StateTokenCodec,
    catalog: Catalog,
    variant: FormVariant,
    prefill: EntryValues | None = None,
    errors: dict[str, str] | None = None,
) -> ViewSchema:
    """
    Build the entry step at index ``len(state.entries)``.

    Without ``prefill`` every field is empty (a fresh step). With it, every
    field is pre-populated, which is how "back" re-renders a popped entry
    and how a failed validation keeps what the user typed.

    Args:
        state: Current state; its entry count decides the step index
        codec: Token codec used to embed the state
        catalog: Option catalogs for the selects
        variant: Decides whether the TL;DR is required
        prefill: Values to pre-populate
        errors: Field id -> inline message

    Returns:
        ViewSchema for the entry modal
    """
    index = state.next_index
    ids = EntryFieldIds.for_index(index)

    def initial(attr: str) -> str | None:
        return getattr(prefill, attr, None) if prefill is not None else None

    if catalog.uses_free_target_date:
        target_field = InputField(
            block_id=ids.target_period,
            label="Target launch date",
            kind=FieldKind.DATEPICKER,
            optional=True,
            initial_value=initial("target_period"),
        )
    else:
        target_field = InputField(
            block_id=ids.target_period,
            label="Target launch quarter",
            kind=FieldKind.STATIC_SELECT,
            optional=True,
            options=_options(catalog.target_periods),
            initial_value=initial("target_period"),
        )

    fields = [
        InputField(
            block_id=ids.name,
            label="Project name",
            kind=FieldKind.PLAIN_TEXT,
            initial_value=initial("name"),
        ),
        InputField(
            block_id=ids.tracker_link,
            label="Jira Initiative Link",
            kind=FieldKind.PLAIN_TEXT,
            optional=True,
            initial_value=initial("tracker_link"),
        ),
        InputField(
            block_id=ids.summary,
            label="TL;DR (rich text)",
            kind=FieldKind.RICH_TEXT,
            optional=not variant.summary_required,
            initial_value=to_rich_text(initial("summary")),
        ),
        InputField(
            block_id=ids.status,
            label="RAG status",
            kind=FieldKind.STATIC_SELECT,
            options=_options(catalog.statuses),
            initial_value=initial("status"),
        ),
        InputField(
            block_id=ids.stage,
            label="GTM stage",
            kind=FieldKind.STATIC_SELECT,
            options=_options(catalog.stages),
            initial_value=initial("stage"),
        ),
        target_field,
        InputField(
            block_id=ids.phase,
            label="Phase",
            kind=FieldKind.STATIC_SELECT,
            options=_options(catalog.phases),
            initial_value=initial("phase"),
        ),
    ]

    intro = ENTRY_INTRO
    if state.editing_index is not None:
        intro = EDITING_INTRO.format(number=state.editing_index + 1)

    view = ViewSchema(
        callback_id=ENTRY_CALLBACK_ID,
        title=f"Project {index + 1}",
        fields=fields,
        private_metadata=codec.encode(state),
        intro=intro,
        actions=[
            ActionButton(text="◀︎ Back", action_id=EntryAction.BACK.value),
            ActionButton(text="➕ Add another", action_id=EntryAction.ADD_ANOTHER.value, style="primary"),
            ActionButton(text="✅ Done", action_id=EntryAction.DONE.value),
        ],
        actions_block_id=ids.actions,
        submit_label="Save & Post",
    )
    if errors:
        view.apply_errors(errors)
    return view


def build_confirmation_view() -> ViewSchema:
    """Terminal view shown after the update was posted."""
    return ViewSchema(
        callback_id=CONFIRMATION_CALLBACK_ID,
        title="Done",
        intro="✅ Your update was posted!",
        close_label="Close",
    )


def build_error_view(message: str) -> ViewSchema:
    """Terminal view for unrecoverable errors (no state is carried)."""
    return ViewSchema(
        callback_id=ERROR_CALLBACK_ID,
        title="Something went wrong",
        intro=f":warning: {message}",
        close_label="Close",
    )


__all__ = [
    "HEADER_CALLBACK_ID",
    "ENTRY_CALLBACK_ID",
    "CONFIRMATION_CALLBACK_ID",
    "ERROR_CALLBACK_ID",
    "WIZARD_TITLE",
    "build_header_view",
    "build_entry_view",
    "build_confirmation_view",
    "build_error_view",
]
