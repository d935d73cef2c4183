"""
Wizard Response for the Maker Update bot.

The response object returned by every wizard transition. Contains the view
to show next, the state machine phase, the (decoded) state behind that view,
and inline validation errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.config.catalogs import WizardPhase
from src.core.blocks import ViewSchema
from src.models.wizard_state import WizardState


@dataclass
class WizardResponse:
    """Response returned by wizard controller transitions.

    Attributes:
        view: The view to render next
        phase: Phase the wizard is in after this transition
        state: State embedded in ``view`` (None for terminal views)
        errors: Field id -> message, when validation failed
        is_end_of_flow: True once the update was posted
        duplicate: True if a replayed "done" was recognized and skipped
    """

    view: ViewSchema
    phase: WizardPhase
    state: WizardState | None = None
    errors: dict[str, str] = field(default_factory=dict)
    is_end_of_flow: bool = False
    duplicate: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @classmethod
    def next_step(cls, view: ViewSchema, state: WizardState) -> WizardResponse:
        """Create a response that moves to (or re-renders) a step."""
        return cls(view=view, phase=state.phase, state=state)

    @classmethod
    def invalid(cls, view: ViewSchema, state: WizardState, errors: dict[str, str]) -> WizardResponse:
        """Create a response that keeps the current step and reports field errors."""
        return cls(view=view, phase=state.phase, state=state, errors=dict(errors))

    @classmethod
    def finished(cls, view: ViewSchema, duplicate: bool = False) -> WizardResponse:
        """Create a response that ends the flow."""
        return cls(
            view=view,
            phase=WizardPhase.TERMINAL,
            is_end_of_flow=True,
            duplicate=duplicate,
        )
