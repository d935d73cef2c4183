"""
Wizard State Models.

``WizardState`` is the single source of truth threaded through every
callback. It is never stored server-side: the state token codec serializes
it into each rendered view and recovers it from the next callback.

Models are frozen pydantic models so that a transition always produces a
new state and ``decode(encode(s)) == s`` can be checked with plain equality.
Rich text is stored only in its normalized markup form.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from src.config.catalogs import DEFAULT_CATALOG_VERSION, WizardPhase


class HeaderData(BaseModel):
    """Header step values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    destination: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    effective_date: date
    tracker_link: str = Field(..., min_length=1)
    focus: str = ""


class Entry(BaseModel):
    """One completed project update."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    tracker_link: str | None = None
    summary: str | None = None
    status: str = Field(..., min_length=1)
    stage: str = Field(..., min_length=1)
    target_period: str | None = None
    phase: str = Field(..., min_length=1)


class WizardState(BaseModel):
    """Accumulated wizard state.

    Attributes:
        header: Present once the header step is completed
        entries: Completed entries in insertion order
        submitter: Opaque user reference, captured when the wizard opens
        editing_index: Position being re-edited after "back", if any
        catalog_version: Catalog the option values were chosen from
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    header: HeaderData | None = None
    entries: tuple[Entry, ...] = ()
    submitter: str | None = None
    editing_index: int | None = Field(default=None, ge=0)
    catalog_version: str = DEFAULT_CATALOG_VERSION

    @property
    def phase(self) -> WizardPhase:
        """Current state machine state (TERMINAL is never encoded)."""
        if self.header is None:
            return WizardPhase.AWAITING_HEADER
        return WizardPhase.AWAITING_ENTRY

    @property
    def next_index(self) -> int:
        """Index of the entry step currently on screen."""
        return len(self.entries)

    def with_header(self, header: HeaderData) -> WizardState:
        return self.model_copy(update={"header": header, "entries": (), "editing_index": None})

    def with_entry(self, entry: Entry) -> WizardState:
        """Return a new state with ``entry`` appended."""
        return self.model_copy(
            update={"entries": (*self.entries, entry), "editing_index": None}
        )

    def without_last_entry(self) -> tuple[WizardState, Entry | None]:
        """
        Pop the last entry.

        Returns:
            (new state, popped entry) or (self, None) when there are no entries
        """
        if not self.entries:
            return self, None
        popped = self.entries[-1]
        state = self.model_copy(
            update={
                "entries": self.entries[:-1],
                "editing_index": len(self.entries) - 1,
            }
        )
        return state, popped


__all__ = ["HeaderData", "Entry", "WizardState"]
