"""
Core view types for the Maker Update bot.

Exports:
    - ViewSchema, InputField, ActionButton, SelectOption, FieldKind: declarative views
    - WizardResponse: Response returned by wizard transitions
"""

from .blocks import (
    DEFAULT_ACTION_ID,
    ActionButton,
    FieldKind,
    InputField,
    SelectOption,
    ViewSchema,
)
from .wizard_response import WizardResponse

__all__ = [
    # Views
    "DEFAULT_ACTION_ID",
    "ActionButton",
    "FieldKind",
    "InputField",
    "SelectOption",
    "ViewSchema",
    # Responses
    "WizardResponse",
]
