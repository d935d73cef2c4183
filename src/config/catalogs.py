"""
Option Catalogs for the Maker Biweekly Update wizard.

Every selectable field in the wizard (squad, RAG status, GTM stage, phase,
target launch quarter) is restricted to a fixed, ordered set of labels.
Catalogs are immutable and versioned: a deployment picks one version at
startup and every membership check goes through that ``Catalog`` instance.

Catalog versions:
- v1: the first rollout (five squads, three RAG levels, free launch date)
- v2: current (extended RAG with Paused/Completed, launch quarters)

Form variants decide which optional header fields the wizard collects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from src.lib.exceptions import ConfigurationError


class WizardPhase(StrEnum):
    """Wizard state machine states."""

    AWAITING_HEADER = "awaiting_header"
    AWAITING_ENTRY = "awaiting_entry"
    TERMINAL = "terminal"


# Allowed transitions. TERMINAL has no successors.
VALID_TRANSITIONS: dict[WizardPhase, set[WizardPhase]] = {
    WizardPhase.AWAITING_HEADER: {WizardPhase.AWAITING_ENTRY},
    WizardPhase.AWAITING_ENTRY: {WizardPhase.AWAITING_ENTRY, WizardPhase.TERMINAL},
    WizardPhase.TERMINAL: set(),
}


class EntryAction(StrEnum):
    """Buttons shown on every entry step."""

    ADD_ANOTHER = "add_another"
    BACK = "back"
    DONE = "done"


# Status label -> icon. Every status in every catalog must have an icon.
STATUS_ICONS: dict[str, str] = {
    "Green": "🟢",
    "Yellow": "🟡",
    "Red": "🔴",
    "Paused": "⚫",
    "Completed": "🔵",
}


@dataclass(frozen=True)
class Catalog:
    """An immutable, versioned set of option lists.

    Attributes:
        version: Version tag, also recorded in every state token
        categories: Squad names for the header step
        statuses: RAG status labels
        stages: GTM stages, in progression order
        phases: Execution phases, in progression order
        target_periods: Launch quarters; empty means "free date picker"
    """

    version: str
    categories: tuple[str, ...]
    statuses: tuple[str, ...]
    stages: tuple[str, ...]
    phases: tuple[str, ...]
    target_periods: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        missing = [s for s in self.statuses if s not in STATUS_ICONS]
        if missing:
            raise ValueError(f"Statuses without icon: {missing}")

    @property
    def uses_free_target_date(self) -> bool:
        """True when the target period is a date rather than a catalog choice."""
        return not self.target_periods

    def is_category(self, value: str | None) -> bool:
        return value in self.categories

    def is_status(self, value: str | None) -> bool:
        return value in self.statuses

    def is_stage(self, value: str | None) -> bool:
        return value in self.stages

    def is_phase(self, value: str | None) -> bool:
        return value in self.phases

    def is_target_period(self, value: str | None) -> bool:
        return value in self.target_periods


def status_icon(status: str) -> str:
    """Return the icon for a status label, or an empty string if unknown."""
    return STATUS_ICONS.get(status, "")


CATALOG_V1 = Catalog(
    version="v1",
    categories=("Payments", "Platform", "Client Delight", "Data", "Staff Workflows"),
    statuses=("Green", "Yellow", "Red"),
    stages=("Discovery", "Alpha", "Beta", "GA"),
    phases=("Design", "Build", "QA", "Deploy"),
)

CATALOG_V2 = Catalog(
    version="v2",
    categories=(
        "Clarity",
        "Comms & Login",
        "Communications Platform",
        "Customer Delight",
        "Payment Differentiation",
        "Payment Workflows",
        "Payments Platform",
    ),
    statuses=("Green", "Yellow", "Red", "Paused", "Completed"),
    stages=("Pre-Alpha", "Alpha", "Beta", "GA", "Global"),
    phases=("Design", "Build/Development", "QA/UAT", "Deployment", "Hypercare"),
    target_periods=("Q3 2025", "Q4 2025", "Q1 2026", "Q2 2026", "Q3 2026", "Q4 2026"),
)

CATALOGS: dict[str, Catalog] = {
    CATALOG_V1.version: CATALOG_V1,
    CATALOG_V2.version: CATALOG_V2,
}

DEFAULT_CATALOG_VERSION = "v2"


@dataclass(frozen=True)
class FormVariant:
    """Which optional fields a deployment collects.

    Attributes:
        name: Variant name used in configuration
        collect_date: Header asks for an effective date (else submission day)
        collect_submitter: Header asks for the submitting user
        summary_required: Entry TL;DR must be filled in
    """

    name: str
    collect_date: bool
    collect_submitter: bool
    summary_required: bool


CLASSIC_VARIANT = FormVariant(
    name="classic",
    collect_date=True,
    collect_submitter=True,
    summary_required=False,
)

EXTENDED_VARIANT = FormVariant(
    name="extended",
    collect_date=False,
    collect_submitter=False,
    summary_required=True,
)

FORM_VARIANTS: dict[str, FormVariant] = {
    CLASSIC_VARIANT.name: CLASSIC_VARIANT,
    EXTENDED_VARIANT.name: EXTENDED_VARIANT,
}

DEFAULT_FORM_VARIANT = "extended"


def get_catalog(version: str) -> Catalog:
    """
    Look up a catalog by version tag.

    Raises:
        ConfigurationError: If the version is unknown
    """
    try:
        return CATALOGS[version]
    except KeyError:
        raise ConfigurationError(
            f"Unknown catalog version {version!r}; expected one of {sorted(CATALOGS)}"
        ) from None


def get_form_variant(name: str) -> FormVariant:
    """
    Look up a form variant by name.

    Raises:
        ConfigurationError: If the name is unknown
    """
    try:
        return FORM_VARIANTS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown form variant {name!r}; expected one of {sorted(FORM_VARIANTS)}"
        ) from None


__all__ = [
    "WizardPhase",
    "VALID_TRANSITIONS",
    "EntryAction",
    "STATUS_ICONS",
    "Catalog",
    "status_icon",
    "CATALOG_V1",
    "CATALOG_V2",
    "CATALOGS",
    "DEFAULT_CATALOG_VERSION",
    "FormVariant",
    "CLASSIC_VARIANT",
    "EXTENDED_VARIANT",
    "FORM_VARIANTS",
    "DEFAULT_FORM_VARIANT",
    "get_catalog",
    "get_form_variant",
]
