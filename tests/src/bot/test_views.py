"""
Tests for the view schema builder.

Covers:
- Header fields per form variant
- Entry fields, per-index ids, action buttons
- Pre-population after "back" and inline errors
- Embedded state token
"""

from datetime import date

from src.bot.fields import HEADER_FIELDS, EntryFieldIds
from src.bot.views import (
    CONFIRMATION_CALLBACK_ID,
    ENTRY_CALLBACK_ID,
    HEADER_CALLBACK_ID,
    build_confirmation_view,
    build_entry_view,
    build_error_view,
    build_header_view,
)
from src.config.catalogs import CATALOG_V2, CLASSIC_VARIANT, EXTENDED_VARIANT
from src.core.blocks import FieldKind
from src.models.wizard_state import WizardState


def test_classic_header_has_date_and_submitter(codec, catalog):
    state = WizardState(submitter="U1", catalog_version="v1")
    view = build_header_view(state, codec, catalog, CLASSIC_VARIANT, today=date(2025, 9, 15))

    assert view.callback_id == HEADER_CALLBACK_ID
    assert view.get_field(HEADER_FIELDS.effective_date).initial_value == "2025-09-15"
    assert view.get_field(HEADER_FIELDS.submitter).initial_value == "U1"
    assert codec.decode(view.private_metadata) == state


def test_extended_header_omits_date_and_submitter(codec):
    state = WizardState(submitter="U1")
    view = build_header_view(state, codec, CATALOG_V2, EXTENDED_VARIANT)

    assert HEADER_FIELDS.effective_date not in view.field_ids
    assert HEADER_FIELDS.submitter not in view.field_ids
    squad = view.get_field(HEADER_FIELDS.category)
    assert [option.value for option in squad.options] == list(CATALOG_V2.categories)


def test_header_destination_defaults_to_current_conversation(codec, catalog, variant):
    view = build_header_view(WizardState(catalog_version="v1"), codec, catalog, variant)
    blocks = view.to_slack_format()["blocks"]
    destination = next(b for b in blocks if b.get("block_id") == HEADER_FIELDS.destination)
    assert destination["element"]["default_to_current_conversation"] is True


def test_entry_view_fields_and_actions(codec, catalog, variant, header_state, sample_entry):
    state = header_state.with_entry(sample_entry)
    view = build_entry_view(state, codec, catalog, variant)
    ids = EntryFieldIds.for_index(1)

    assert view.callback_id == ENTRY_CALLBACK_ID
    assert view.title == "Project 2"
    assert view.field_ids == [
        ids.name,
        ids.tracker_link,
        ids.summary,
        ids.status,
        ids.stage,
        ids.target_period,
        ids.phase,
    ]
    assert [button.action_id for button in view.actions] == ["back", "add_another", "done"]
    assert view.get_field(ids.target_period).kind == FieldKind.DATEPICKER
    assert all(field.initial_value is None for field in view.fields)
    assert codec.decode(view.private_metadata) == state


def test_entry_view_quarter_select_for_v2(codec):
    state = WizardState(catalog_version="v2")
    view = build_entry_view(state, codec, CATALOG_V2, EXTENDED_VARIANT)
    target = view.get_field(EntryFieldIds.for_index(0).target_period)
    assert target.kind == FieldKind.STATIC_SELECT
    assert [option.value for option in target.options] == list(CATALOG_V2.target_periods)
    assert view.get_field(EntryFieldIds.for_index(0).summary).optional is False


def test_entry_view_prefilled_after_back(codec, catalog, variant, header_state, sample_entry):
    entry = sample_entry.model_copy(update={"summary": "Did things"})
    state, popped = header_state.with_entry(entry).without_last_entry()
    view = build_entry_view(state, codec, catalog, variant, prefill=popped)
    ids = EntryFieldIds.for_index(0)

    assert view.get_field(ids.name).initial_value == "Alpha"
    assert view.get_field(ids.status).initial_value == "Green"
    assert view.get_field(ids.summary).initial_value["type"] == "rich_text"
    assert "Editing project 1" in view.intro

    rendered = view.to_slack_format()
    status_block = next(b for b in rendered["blocks"] if b.get("block_id") == ids.status)
    assert status_block["element"]["initial_option"]["value"] == "Green"


def test_inline_errors_render_as_warning_lines(codec, catalog, variant, header_state):
    ids = EntryFieldIds.for_index(0)
    view = build_entry_view(
        header_state, codec, catalog, variant, errors={ids.name: "Enter a project name."}
    )
    blocks = view.to_slack_format()["blocks"]
    error_block = next(b for b in blocks if b.get("block_id") == f"{ids.name}_error")
    assert error_block["type"] == "context"
    assert "Enter a project name." in error_block["elements"][0]["text"]


def test_terminal_views_have_no_submit():
    confirmation = build_confirmation_view().to_slack_format()
    assert confirmation["callback_id"] == CONFIRMATION_CALLBACK_ID
    assert "submit" not in confirmation
    assert "posted" in confirmation["blocks"][0]["text"]["text"]

    error = build_error_view("Please restart.").to_slack_format()
    assert "Please restart." in error["blocks"][0]["text"]["text"]
    assert error["private_metadata"] == ""
