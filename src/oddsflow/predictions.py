"""
Prediction store adapter.

``upsert`` replaces whatever the user previously submitted for a match; the
(user_id, match_id) primary key makes a second submission overwrite the
first, so double submits and retries are harmless.  The adapter never
validates: run ``oddsflow.validation.validate_draft`` first.

Reads degrade instead of raising.  A failed fetch is logged and returns an
empty result, so the page renders "no predictions yet" rather than an error.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Iterable

from oddsflow.backend import TableStore
from oddsflow.errors import FetchError
from oddsflow.models import DraftPrediction, Identity, Match, UserPrediction
from oddsflow.utils import day_window, display_name

log = logging.getLogger(__name__)


class PredictionStore:
    def __init__(self, backend: TableStore,
                 clock: Callable[[], dt.datetime] = dt.datetime.now):
        self.backend = backend
        self.clock = clock

    async def upsert(self, user: Identity, match: Match, draft: DraftPrediction) -> UserPrediction:
        """Write *draft* as *user*'s prediction for *match*.

        Raises:
            StoreError: the backend rejected or never received the write.
        """
        row = UserPrediction(
            user_id=user.user_id,
            match_id=match.match_id,
            home_score=draft.home_score,
            away_score=draft.away_score,
            winner=draft.winner,
            analysis=draft.analysis or None,
            user_name=display_name(user),
            user_avatar=user.avatar_url,
            home_team=match.home_team,
            away_team=match.away_team,
            league=match.league,
            match_date=match.kickoff,
            created_at=self.clock(),
        )
        await self.backend.upsert_prediction(row)
        log.info("[store] prediction saved: user=%s match=%s", user.user_id, match.match_id)
        return row

    async def fetch_matches(self, day: dt.date) -> list[Match]:
        start, end = day_window(day)
        try:
            return await self.backend.select_matches(start, end)
        except FetchError as exc:
            log.warning("[store] matches for %s unavailable: %s", day, exc)
            return []

    async def fetch_for_matches(self, match_ids: Iterable[int]) -> list[UserPrediction]:
        try:
            return await self.backend.select_predictions(match_ids)
        except FetchError as exc:
            log.warning("[store] predictions unavailable: %s", exc)
            return []

    async def fetch_own(self, user_id: str, match_ids: Iterable[int]) -> dict[int, UserPrediction | None]:
        """Per-match lookup of *user_id*'s prediction; every id gets a key."""
        ids = list(match_ids)
        lookup: dict[int, UserPrediction | None] = {mid: None for mid in ids}
        try:
            rows = await self.backend.select_user_predictions(user_id, ids)
        except FetchError as exc:
            log.warning("[store] own predictions for %s unavailable: %s", user_id, exc)
            return lookup
        for p in rows:
            lookup[p.match_id] = p
        return lookup
