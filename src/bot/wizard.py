"""
Wizard Controller for the Maker Biweekly Update.

Flow States:
    1. AWAITING_HEADER - destination, squad, roadmap link, focus summary
    2. AWAITING_ENTRY - one project per step; Add another / Back / Done
    3. TERMINAL - the update was composed and delivered

Every transition is a stateless function of (state token, submitted values):
the token is decoded, the step's values are read by their per-index field
ids, validated against the catalog, and the next view is rendered with the
new state re-encoded. Nothing is stored server-side except the short-lived
idempotency key claimed before delivery.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date

from src.bot.composer import compose
from src.bot.delivery import Delivery
from src.bot.fields import (
    HEADER_FIELDS,
    DraftEntry,
    EntryFieldIds,
    HeaderDraft,
    StateValues,
    read_entry_draft,
    read_header_draft,
)
from src.bot.state_token import StateTokenCodec
from src.bot.views import (
    build_confirmation_view,
    build_entry_view,
    build_header_view,
)
from src.config.catalogs import (
    VALID_TRANSITIONS,
    Catalog,
    EntryAction,
    FormVariant,
    WizardPhase,
)
from src.core.wizard_response import WizardResponse
from src.lib.exceptions import MalformedStateError, ValidationError
from src.lib.security import SecurityEventLogger, hash_uid
from src.models.wizard_state import Entry, HeaderData, WizardState
from src.services.dedup_cache import IdempotencyCache, idempotency_key

logger = logging.getLogger(__name__)

# URL with scheme, or a bare host with at least one dot ("example.com/x").
_LINK_RE = re.compile(r"^(https?://)?[^\s/]+\.[^\s]+$", re.IGNORECASE)

# Same key for the "Done" button and the modal submit button.
_FINISH_ACTION = "finish"


def looks_like_link(value: str) -> bool:
    return bool(_LINK_RE.match(value.strip()))


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class WizardController:
    """
    Drives the header -> entries -> post state machine.

    Args:
        codec: State token codec (embeds state into views)
        catalog: Option catalog every selection is checked against
        variant: Form variant (which optional fields are collected/required)
        delivery: Posts the composed update
        dedup_cache: Idempotency cache for the terminal transition
        today: Clock for default dates (injectable for tests)
    """

    def __init__(
        self,
        codec: StateTokenCodec,
        catalog: Catalog,
        variant: FormVariant,
        delivery: Delivery,
        dedup_cache: IdempotencyCache,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._codec = codec
        self._catalog = catalog
        self._variant = variant
        self._delivery = delivery
        self._dedup = dedup_cache
        self._today = today

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    # -------------------------------------------------------------------------
    # State handling
    # -------------------------------------------------------------------------

    def _decode(self, token: str | None) -> WizardState:
        state = self._codec.decode(token)
        if state.catalog_version != self._catalog.version:
            SecurityEventLogger.malformed_state("catalog_mismatch")
            raise MalformedStateError(
                f"State was created with catalog {state.catalog_version}, "
                f"running {self._catalog.version}"
            )
        return state

    @staticmethod
    def _require_transition(state: WizardState, target: WizardPhase) -> None:
        """Reject callbacks that do not belong to the state's current step."""
        if target not in VALID_TRANSITIONS[state.phase]:
            SecurityEventLogger.malformed_state(f"invalid_transition:{state.phase}->{target}")
            raise MalformedStateError(f"Cannot move from {state.phase} to {target}")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate_header(self, draft: HeaderDraft) -> HeaderData:
        ids = HEADER_FIELDS
        errors: dict[str, str] = {}

        if not draft.destination:
            errors[ids.destination] = "Pick a channel to post to."
        if not self._catalog.is_category(draft.category):
            errors[ids.category] = "Pick a squad."
        if not draft.tracker_link:
            errors[ids.tracker_link] = "Add a link to the roadmap or project tracker."
        elif not looks_like_link(draft.tracker_link):
            errors[ids.tracker_link] = "That doesn't look like a link."
        if not draft.focus:
            errors[ids.focus] = "Summarize the focus areas for this sprint."

        effective_date = self._today()
        if draft.effective_date:
            parsed = _parse_date(draft.effective_date)
            if parsed is None:
                errors[ids.effective_date] = "Pick a valid date."
            else:
                effective_date = parsed

        if errors:
            raise ValidationError(errors)

        return HeaderData(
            destination=draft.destination or "",
            category=draft.category or "",
            effective_date=effective_date,
            tracker_link=(draft.tracker_link or "").strip(),
            focus=draft.focus,
        )

    def _validate_entry(self, draft: DraftEntry, ids: EntryFieldIds) -> Entry:
        catalog = self._catalog
        errors: dict[str, str] = {}

        if draft.is_blank:
            errors[ids.name] = "Enter a project name."
        if draft.tracker_link and not looks_like_link(draft.tracker_link):
            errors[ids.tracker_link] = "That doesn't look like a link."
        if self._variant.summary_required and not draft.summary:
            errors[ids.summary] = "Add a TL;DR."
        if not catalog.is_status(draft.status):
            errors[ids.status] = "Pick a RAG status."
        if not catalog.is_stage(draft.stage):
            errors[ids.stage] = "Pick a GTM stage."
        if not catalog.is_phase(draft.phase):
            errors[ids.phase] = "Pick a phase."
        if draft.target_period:
            if catalog.uses_free_target_date:
                if _parse_date(draft.target_period) is None:
                    errors[ids.target_period] = "Pick a valid date."
            elif not catalog.is_target_period(draft.target_period):
                errors[ids.target_period] = "Pick a launch quarter."

        if errors:
            raise ValidationError(errors)

        return Entry(
            name=(draft.name or "").strip(),
            tracker_link=draft.tracker_link,
            summary=draft.summary,
            status=draft.status or "",
            stage=draft.stage or "",
            target_period=draft.target_period,
            phase=draft.phase or "",
        )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _entry_step(
        self,
        state: WizardState,
        prefill: DraftEntry | Entry | None = None,
        errors: dict[str, str] | None = None,
    ) -> WizardResponse:
        view = build_entry_view(
            state, self._codec, self._catalog, self._variant, prefill=prefill, errors=errors
        )
        if errors:
            return WizardResponse.invalid(view, state, errors)
        return WizardResponse.next_step(view, state)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def open(self, submitter: str | None) -> WizardResponse:
        """
        Start a wizard for ``submitter`` (slash command).

        Returns:
            WizardResponse with the header view and an empty state
        """
        state = WizardState(submitter=submitter, catalog_version=self._catalog.version)
        view = build_header_view(
            state, self._codec, self._catalog, self._variant, today=self._today()
        )
        logger.info(
            "Wizard opened",
            extra={"user_hash": hash_uid(submitter) if submitter else None},
        )
        return WizardResponse.next_step(view, state)

    async def submit_header(self, values: StateValues, token: str | None) -> WizardResponse:
        """
        Validate the header step and render the first entry step.

        Raises:
            MalformedStateError: If the token is invalid or not a header step token
        """
        state = self._decode(token)
        self._require_transition(state, WizardPhase.AWAITING_ENTRY)
        if state.header is not None:
            raise MalformedStateError("Header already submitted")

        draft = read_header_draft(values)
        try:
            header = self._validate_header(draft)
        except ValidationError as e:
            view = build_header_view(
                state,
                self._codec,
                self._catalog,
                self._variant,
                today=self._today(),
                errors=e.field_errors,
            )
            return WizardResponse.invalid(view, state, e.field_errors)

        new_state = state.with_header(header)
        if self._variant.collect_submitter and draft.submitter:
            new_state = new_state.model_copy(update={"submitter": draft.submitter})
        return self._entry_step(new_state)

    async def add_another(self, values: StateValues, token: str | None) -> WizardResponse:
        """
        Commit the visible entry and render a fresh entry step.

        A replay of the same callback decodes the same token and recomputes
        the same state, so the entry is never appended twice.
        """
        state = self._decode(token)
        self._require_transition(state, WizardPhase.AWAITING_ENTRY)

        ids = EntryFieldIds.for_index(state.next_index)
        draft = read_entry_draft(values, ids)
        try:
            entry = self._validate_entry(draft, ids)
        except ValidationError as e:
            return self._entry_step(state, prefill=draft, errors=e.field_errors)

        return self._entry_step(state.with_entry(entry))

    async def go_back(self, token: str | None) -> WizardResponse:
        """
        Re-open the previous entry for editing.

        The last committed entry is removed from the state and used to
        pre-populate the step at its original index. Values typed into the
        visible step are discarded. With no entries this re-renders an
        empty first step.
        """
        state = self._decode(token)
        self._require_transition(state, WizardPhase.AWAITING_ENTRY)

        new_state, popped = state.without_last_entry()
        return self._entry_step(new_state, prefill=popped)

    async def finish(self, values: StateValues, token: str | None) -> WizardResponse:
        """
        Commit the visible entry (if named), then compose and deliver.

        Raises:
            MalformedStateError: If the token is invalid
            DeliveryError: If the update could not be posted
        """
        state = self._decode(token)
        self._require_transition(state, WizardPhase.TERMINAL)

        ids = EntryFieldIds.for_index(state.next_index)
        draft = read_entry_draft(values, ids)
        if not draft.is_blank:
            try:
                state = state.with_entry(self._validate_entry(draft, ids))
            except ValidationError as e:
                return self._entry_step(state, prefill=draft, errors=e.field_errors)

        key = idempotency_key(_FINISH_ACTION, token, draft.as_dict())
        if not await self._dedup.claim(key):
            logger.info("Duplicate finish callback skipped")
            return WizardResponse.finished(build_confirmation_view(), duplicate=True)

        header = state.header
        if header is None:
            raise MalformedStateError("Cannot finish without a header")
        try:
            await self._delivery.deliver(header.destination, compose(state))
        except Exception:
            await self._dedup.release(key)
            raise

        logger.info(
            "Update posted",
            extra={"entries": len(state.entries), "category": header.category},
        )
        return WizardResponse.finished(build_confirmation_view())

    async def submit_entry(self, values: StateValues, token: str | None) -> WizardResponse:
        """Modal submit button on an entry step (same as Done)."""
        return await self.finish(values, token)

    async def handle_action(
        self, action: EntryAction, values: StateValues, token: str | None
    ) -> WizardResponse:
        """Dispatch an entry step button."""
        if action == EntryAction.ADD_ANOTHER:
            return await self.add_another(values, token)
        if action == EntryAction.BACK:
            return await self.go_back(token)
        return await self.finish(values, token)

    async def close(self) -> None:
        await self._dedup.close()


__all__ = ["WizardController", "looks_like_link"]
