"""
Async facade over the DuckDB table store.

Every query the prediction page and the team pages need lives here.  Each
call runs on a worker thread with its own cursor, so the event loop stays
free while a query is outstanding and concurrent calls do not share a
connection.  ``duckdb.Error`` never leaves this module: reads raise
``FetchError`` and writes raise ``StoreError``.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Iterable, Optional

import duckdb

from oddsflow.errors import FetchError, StoreError
from oddsflow.models import Match, PlayerStatistics, TeamStatistics, UserPrediction

log = logging.getLogger(__name__)

_PREDICTION_COLUMNS = (
    "user_id", "match_id", "home_team", "away_team", "league", "match_date",
    "home_score_prediction", "away_score_prediction", "winner_prediction",
    "analysis", "user_name", "user_avatar", "created_at",
)


def _placeholders(n: int) -> str:
    return ",".join("?" * n)


class TableStore:
    def __init__(self, con: duckdb.DuckDBPyConnection):
        self.con = con

    def _query(self, sql: str, params: list) -> list[dict]:
        cur = self.con.cursor()
        try:
            res = cur.execute(sql, params)
            cols = [d[0] for d in res.description]
            return [dict(zip(cols, r)) for r in res.fetchall()]
        finally:
            cur.close()

    async def _read(self, label: str, sql: str, params: list) -> list[dict]:
        try:
            return await asyncio.to_thread(self._query, sql, params)
        except duckdb.Error as exc:
            raise FetchError(f"{label} failed: {exc}") from exc

    # ------------------------------------------------------------------ matches
    async def select_matches(self, start: dt.datetime, end: dt.datetime) -> list[Match]:
        """Fixtures kicking off in [start, end], earliest first."""
        rows = await self._read("select_matches", """
            SELECT * FROM prematches
            WHERE start_date >= ? AND start_date <= ?
            ORDER BY start_date, fixture_id
        """, [start, end])
        return [Match.from_row(r) for r in rows]

    # -------------------------------------------------------------- predictions
    async def select_predictions(self, match_ids: Iterable[int]) -> list[UserPrediction]:
        """All predictions for *match_ids*, newest first."""
        ids = sorted(set(match_ids))
        if not ids:
            return []
        rows = await self._read("select_predictions", f"""
            SELECT * FROM user_match_predictions
            WHERE match_id IN ({_placeholders(len(ids))})
            ORDER BY created_at DESC
        """, ids)
        return [UserPrediction.from_row(r) for r in rows]

    async def select_user_predictions(self, user_id: str,
                                      match_ids: Iterable[int]) -> list[UserPrediction]:
        ids = sorted(set(match_ids))
        if not ids:
            return []
        rows = await self._read("select_user_predictions", f"""
            SELECT * FROM user_match_predictions
            WHERE user_id = ? AND match_id IN ({_placeholders(len(ids))})
        """, [user_id, *ids])
        return [UserPrediction.from_row(r) for r in rows]

    def _upsert(self, values: list) -> None:
        cur = self.con.cursor()
        try:
            cur.execute(f"""
                INSERT OR REPLACE INTO user_match_predictions
                ({", ".join(_PREDICTION_COLUMNS)})
                VALUES ({_placeholders(len(_PREDICTION_COLUMNS))})
            """, values)
        finally:
            cur.close()

    async def upsert_prediction(self, prediction: UserPrediction) -> None:
        """Insert or replace the row keyed by (user_id, match_id)."""
        values = [
            prediction.user_id,
            prediction.match_id,
            prediction.home_team,
            prediction.away_team,
            prediction.league,
            prediction.match_date,
            prediction.home_score,
            prediction.away_score,
            prediction.winner.value if prediction.winner else None,
            prediction.analysis,
            prediction.user_name,
            prediction.user_avatar,
            prediction.created_at or dt.datetime.now(),
        ]
        try:
            await asyncio.to_thread(self._upsert, values)
        except duckdb.Error as exc:
            raise StoreError(f"upsert_prediction failed: {exc}") from exc

    # ------------------------------------------------------------- team stats
    async def select_team_statistics(self, league_name: str,
                                     name_pattern: str) -> list[TeamStatistics]:
        """Teams in *league_name* whose name matches *name_pattern* (ILIKE).

        At most two rows come back; callers only need to tell one match from many.
        """
        rows = await self._read("select_team_statistics", """
            SELECT * FROM team_statistics
            WHERE league_name = ? AND team_name ILIKE ?
            ORDER BY id
            LIMIT 2
        """, [league_name, name_pattern])
        return [TeamStatistics.from_row(r) for r in rows]

    async def select_player_statistics(self, team_id: int,
                                       limit: int) -> list[PlayerStatistics]:
        rows = await self._read("select_player_statistics", f"""
            SELECT * FROM player_stats
            WHERE team_id = ?
            ORDER BY appearances DESC NULLS LAST, id
            LIMIT {int(limit)}
        """, [team_id])
        return [PlayerStatistics.from_row(r) for r in rows]

    async def select_league_players(self, league_name: str,
                                    limit: Optional[int] = None) -> list[PlayerStatistics]:
        sql = """
            SELECT * FROM player_stats
            WHERE league_name ILIKE ?
            ORDER BY rating DESC NULLS LAST, id
        """
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        rows = await self._read("select_league_players", sql, [league_name])
        return [PlayerStatistics.from_row(r) for r in rows]
