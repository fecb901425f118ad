"""
Match prediction page controller.

Holds the state of the community predictions page for one selected calendar
date and drives the pipeline::

    select_date -> matches -> all predictions -> consensus
                           +-> own predictions (signed-in viewers only)
    open_editor -> update_draft* -> submit -> upsert -> reload

Fetches are tagged with a generation number taken when the date is
selected; a response that comes back after the viewer moved to another
date is dropped (latest request wins).  Own-prediction fetches are also
tagged with the identity they were issued for.  There is no timeout: a
hung fetch leaves its panel loading until the next selection.

After a successful submit the whole page reloads instead of patching local
state, so what is shown always matches the backend.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from oddsflow.config import settings
from oddsflow.consensus import aggregate, group_by_match
from oddsflow.errors import SignInRequired, StoreError
from oddsflow.models import ConsensusSummary, DraftPrediction, Identity, Match, UserPrediction, Winner
from oddsflow.predictions import PredictionStore
from oddsflow.utils import date_options
from oddsflow.validation import Violation, validate_draft

log = logging.getLogger(__name__)

SUBMIT_FAILED = "Could not save your prediction. Please try again."


class CallToAction(str, Enum):
    SIGN_IN = "sign_in"
    MAKE_PREDICTION = "make_prediction"
    UPDATE_PREDICTION = "update_prediction"


@dataclass
class EditSession:
    match: Match
    draft: DraftPrediction
    violation: Optional[Violation] = None
    submit_error: Optional[str] = None
    submitting: bool = False


@dataclass(frozen=True)
class SubmitResult:
    saved: Optional[UserPrediction] = None
    violation: Optional[Violation] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.saved is not None


class PredictionPageController:
    def __init__(
        self,
        store: PredictionStore,
        identity: Optional[Identity] = None,
        *,
        today: Optional[dt.date] = None,
        include_implied_winners: Optional[bool] = None,
    ):
        self.store = store
        self.identity = identity
        self.today = today or dt.date.today()
        if include_implied_winners is None:
            include_implied_winners = settings().include_implied_winners
        self.include_implied_winners = include_implied_winners

        self.selected_date: dt.date = self.today
        self.matches: list[Match] = []
        self.predictions: dict[int, list[UserPrediction]] = {}
        self.consensus: dict[int, ConsensusSummary] = {}
        self.own_predictions: dict[int, Optional[UserPrediction]] = {}
        self.expanded: set[int] = set()
        self.editing: Optional[EditSession] = None
        self.loading_matches = False
        self.loading_predictions = False

        self._generation = 0
        self._identity_version = 0

    # ------------------------------------------------------------------ loading
    @property
    def match_ids(self) -> list[int]:
        return [m.match_id for m in self.matches]

    def date_options(self) -> list[dt.date]:
        return date_options(self.today, settings().date_strip_days)

    async def select_date(self, day: dt.date) -> None:
        self._generation += 1
        gen = self._generation
        self.selected_date = day
        self.loading_matches = True
        self.loading_predictions = True

        matches = await self.store.fetch_matches(day)
        if gen != self._generation:
            log.debug("[page] dropped stale matches for %s", day)
            return
        self.matches = matches
        self.loading_matches = False
        log.debug("[page] %d matches on %s", len(matches), day)

        ids = self.match_ids
        await asyncio.gather(self._load_predictions(gen, ids), self._load_own(gen, ids))

    async def reload(self) -> None:
        await self.select_date(self.selected_date)

    async def _load_predictions(self, gen: int, ids: list[int]) -> None:
        if gen != self._generation:
            return
        if not ids:
            self._set_predictions(ids, [])
            self.loading_predictions = False
            return
        rows = await self.store.fetch_for_matches(ids)
        if gen != self._generation:
            log.debug("[page] dropped stale predictions")
            return
        self._set_predictions(ids, rows)
        self.loading_predictions = False

    def _set_predictions(self, ids: list[int], rows: list[UserPrediction]) -> None:
        self.predictions = group_by_match(rows)
        self.consensus = aggregate(ids, rows, self.include_implied_winners)

    async def _load_own(self, gen: int, ids: list[int]) -> None:
        if gen != self._generation:
            return
        identity, version = self.identity, self._identity_version
        if identity is None or not ids:
            self.own_predictions = {}
            return
        lookup = await self.store.fetch_own(identity.user_id, ids)
        if (gen != self._generation or version != self._identity_version
                or ids != self.match_ids):
            log.debug("[page] dropped stale own predictions for %s", identity.user_id)
            return
        self.own_predictions = lookup

    async def on_identity_changed(self, identity: Optional[Identity]) -> None:
        """Sign-in, sign-out or account switch reported by the auth layer."""
        previous = self.identity.user_id if self.identity else None
        self.identity = identity
        self._identity_version += 1
        if identity is None or identity.user_id != previous:
            self.editing = None
        if self.loading_matches:
            # select_date loads own predictions for the new identity once matches arrive
            self.own_predictions = {}
            return
        await self._load_own(self._generation, self.match_ids)

    # ------------------------------------------------------------------ viewing
    def recent_predictions(self, match_id: int) -> list[UserPrediction]:
        """Predictions for *match_id*, newest first."""
        return self.predictions.get(match_id, [])

    def toggle_expanded(self, match_id: int) -> bool:
        if match_id in self.expanded:
            self.expanded.discard(match_id)
            return False
        self.expanded.add(match_id)
        return True

    def call_to_action(self, match_id: int) -> CallToAction:
        if self.identity is None:
            return CallToAction.SIGN_IN
        if self.own_predictions.get(match_id) is not None:
            return CallToAction.UPDATE_PREDICTION
        return CallToAction.MAKE_PREDICTION

    # ------------------------------------------------------------------ editing
    def open_editor(self, match_id: int) -> EditSession:
        """Start editing, seeded from the viewer's existing prediction if any.

        Raises:
            SignInRequired: nobody is signed in.
            KeyError: *match_id* is not on the selected date.
        """
        if self.identity is None:
            raise SignInRequired("sign in to make a prediction")
        match = next((m for m in self.matches if m.match_id == match_id), None)
        if match is None:
            raise KeyError(match_id)
        existing = self.own_predictions.get(match_id)
        draft = existing.to_draft() if existing else DraftPrediction()
        self.editing = EditSession(match, draft, validate_draft(draft))
        return self.editing

    def _session(self) -> EditSession:
        if self.editing is None:
            raise RuntimeError("no prediction is being edited")
        return self.editing

    def update_draft(self, **changes) -> Optional[Violation]:
        """Apply form changes and return the violation to show inline."""
        session = self._session()
        session.draft = replace(session.draft, **changes)
        session.violation = validate_draft(session.draft)
        return session.violation

    def toggle_winner(self, winner: Winner) -> Optional[Violation]:
        session = self._session()
        session.draft = session.draft.toggle_winner(winner)
        session.violation = validate_draft(session.draft)
        return session.violation

    def close_editor(self) -> None:
        self.editing = None

    async def submit(self) -> SubmitResult:
        """Validate, save, then reload the page.

        On a store failure the editor stays open with the draft intact.
        """
        session = self._session()
        if self.identity is None:
            raise SignInRequired("sign in to make a prediction")

        violation = validate_draft(session.draft)
        session.violation = violation
        if violation is not None:
            return SubmitResult(violation=violation)

        session.submitting = True
        session.submit_error = None
        try:
            saved = await self.store.upsert(self.identity, session.match, session.draft)
        except StoreError as exc:
            log.warning("[page] submit failed for match %s: %s", session.match.match_id, exc)
            session.submit_error = SUBMIT_FAILED
            return SubmitResult(error=SUBMIT_FAILED)
        finally:
            session.submitting = False

        self.editing = None
        await self.reload()
        return SubmitResult(saved=saved)
