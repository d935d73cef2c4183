"""
Data models for the Maker Update bot.

All wizard state lives in the client-held state token; these pydantic
models define its shape.
"""

from src.models.wizard_state import Entry, HeaderData, WizardState

__all__ = [
    "HeaderData",
    "Entry",
    "WizardState",
]
