"""
Tests for the message composer.
"""

import pytest

from src.bot.composer import as_link, compose
from src.models.wizard_state import Entry, WizardState


def _texts(message):
    return [block["text"]["text"] for block in message.blocks if block["type"] == "section"]


def test_header_block(header_state):
    message = compose(header_state)
    header = _texts(message)[0]

    assert "*MAKER BIWEEKLY UPDATE*" in header
    assert "*Date:* 2025-09-15" in header
    assert "<@U123>" in header
    assert "*Squad:* Payments" in header
    assert "<https://example.com/x|Link>" in header
    assert "Shipped X" in header
    assert "*PROJECT UPDATES*" in header
    assert message.blocks[1] == {"type": "divider"}
    assert message.text == "Maker Biweekly Update: Payments"


def test_missing_submitter_and_focus(header_state):
    state = header_state.model_copy(
        update={"submitter": None, "header": header_state.header.model_copy(update={"focus": ""})}
    )
    header = _texts(compose(state))[0]
    assert "(unknown)" in header
    assert "_(none provided)_" in header


def test_entries_in_order_with_markers(header_state, sample_entry):
    second = Entry(
        name="Beta",
        tracker_link="jira.example.com/browse/X-1",
        summary="Did things",
        status="Red",
        stage="GA",
        target_period="2025-12-01",
        phase="QA",
    )
    message = compose(header_state.with_entry(sample_entry).with_entry(second))
    texts = _texts(message)

    assert len(message.blocks) == 6
    assert [block["type"] for block in message.blocks[1::2]] == ["divider"] * 3
    assert texts[1].startswith("*💥 Alpha*")
    assert "*RAG:* 🟢 Green" in texts[1]
    assert "*GTM:* Beta" in texts[1]
    assert "*Phase:* Build" in texts[1]
    assert "Jira" not in texts[1]
    assert "Target launch" not in texts[1]

    assert texts[2].startswith("*💡 Beta*")
    assert "<https://jira.example.com/browse/X-1|Initiative>" in texts[2]
    assert "Did things" in texts[2]
    assert "🔴 Red" in texts[2]
    assert "*Target launch:* 2025-12-01" in texts[2]


def test_compose_is_deterministic(header_state, sample_entry):
    state = header_state.with_entry(sample_entry)
    assert compose(state) == compose(state)


def test_compose_requires_header():
    with pytest.raises(ValueError):
        compose(WizardState())


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("example.com", "<https://example.com|Link>"),
        ("http://example.com", "<http://example.com|Link>"),
        ("HTTPS://example.com", "<HTTPS://example.com|Link>"),
        ("", ""),
        (None, ""),
    ],
)
def test_as_link(url, expected):
    assert as_link(url) == expected
