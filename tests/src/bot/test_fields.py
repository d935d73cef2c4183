"""
Tests for field identifiers and form value readers.
"""

import pytest

from src.bot.fields import (
    HEADER_FIELDS,
    DraftEntry,
    EntryFieldIds,
    read_entry_draft,
    read_header_draft,
    read_selected_option,
    read_text,
)


def test_entry_ids_are_derived_from_index():
    ids = EntryFieldIds.for_index(3)
    assert ids.name == "p_name_3"
    assert ids.summary == "p_tldr_3"
    assert ids.actions == "next_action_3"
    assert EntryFieldIds.for_index(3) == ids


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        EntryFieldIds.for_index(-1)


def test_read_header_draft(header_values):
    draft = read_header_draft(header_values(effective_date="2025-09-01", submitter="U9"))
    assert draft.destination == "C1"
    assert draft.category == "Payments"
    assert draft.tracker_link == "example.com/x"
    assert draft.focus == "Shipped X"
    assert draft.effective_date == "2025-09-01"
    assert draft.submitter == "U9"


def test_missing_header_fields_read_as_none():
    draft = read_header_draft({})
    assert draft.destination is None
    assert draft.category is None
    assert draft.focus == ""


def test_read_entry_draft_uses_index(entry_values):
    values = {**entry_values(index=0, name="Old"), **entry_values(index=1, name="New")}
    draft = read_entry_draft(values, EntryFieldIds.for_index(1))
    assert draft.name == "New"
    assert draft.status == "Green"


def test_read_entry_draft_target_date(entry_values, rich_text):
    values = entry_values(target_date="2025-12-01", summary=rich_text("Short ", bold="summary"))
    draft = read_entry_draft(values, EntryFieldIds.for_index(0))
    assert draft.target_period == "2025-12-01"
    assert draft.summary == "Short summary"


def test_blank_values_are_cleaned():
    values = {HEADER_FIELDS.tracker_link: {"val": {"value": "   "}}}
    assert read_text(values, HEADER_FIELDS.tracker_link) is None
    assert read_selected_option({"squad": {"val": {"selected_option": None}}}, "squad") is None


def test_draft_blankness():
    assert DraftEntry().is_blank
    assert DraftEntry(name="  ").is_blank
    assert not DraftEntry(name="Alpha").is_blank
