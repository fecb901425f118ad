"""Tests for the prediction store adapter and the table store queries."""
from __future__ import annotations

import asyncio
import datetime as dt

import duckdb
import pytest

from conftest import DAY, count_predictions
from oddsflow.backend import TableStore
from oddsflow.errors import FetchError, StoreError
from oddsflow.models import DraftPrediction, Identity, Match, Winner
from oddsflow.predictions import PredictionStore

USER = Identity(user_id="u1", full_name="Ana Silva", avatar_url="https://img/ana.png")
MATCH = Match(555, "Arsenal", "Chelsea", "Premier League", dt.datetime(2026, 3, 14, 15, 0))


class BrokenStore(TableStore):
    """Table store whose every query fails like a dropped connection."""

    def _query(self, sql, params):
        raise duckdb.IOException("connection reset")

    def _upsert(self, values):
        raise duckdb.IOException("connection reset")


class TestUpsert:
    def test_insert_then_read_back(self, store, seeded_con):
        asyncio.run(store.upsert(USER, MATCH, DraftPrediction(2, 1, Winner.HOME, "Home form")))
        row = seeded_con.execute(
            """SELECT home_score_prediction, away_score_prediction, winner_prediction,
                      analysis, user_name, user_avatar, home_team, away_team, league, match_date
               FROM user_match_predictions WHERE user_id='u1' AND match_id=555"""
        ).fetchone()
        assert row == (2, 1, "1", "Home form", "Ana Silva", "https://img/ana.png",
                       "Arsenal", "Chelsea", "Premier League", dt.datetime(2026, 3, 14, 15, 0))

    def test_same_content_twice_keeps_one_row(self, store, seeded_con):
        before = count_predictions(seeded_con, 555)
        draft = DraftPrediction(2, 1, Winner.HOME)
        asyncio.run(store.upsert(USER, MATCH, draft))
        asyncio.run(store.upsert(USER, MATCH, draft))
        assert count_predictions(seeded_con, 555) == before + 1

    def test_resubmission_overwrites(self, store, seeded_con):
        asyncio.run(store.upsert(USER, MATCH, DraftPrediction(2, 1, Winner.HOME)))
        asyncio.run(store.upsert(USER, MATCH, DraftPrediction(winner=Winner.DRAW)))
        rows = seeded_con.execute(
            """SELECT home_score_prediction, away_score_prediction, winner_prediction
               FROM user_match_predictions WHERE user_id='u1' AND match_id=555"""
        ).fetchall()
        assert rows == [(None, None, "X")]

    def test_resubmission_moves_to_top_of_recent(self, store, backend):
        asyncio.run(store.upsert(USER, MATCH, DraftPrediction(winner=Winner.AWAY)))
        recent = asyncio.run(backend.select_predictions([555]))
        assert recent[0].user_id == "u1"
        assert [p.user_id for p in recent[1:]] == ["u4", "u3", "u2"]

    def test_name_falls_back_to_email(self, store):
        saved = asyncio.run(store.upsert(Identity("u9", email="kim@example.com"), MATCH,
                                         DraftPrediction(winner=Winner.HOME)))
        assert saved.user_name == "kim"

    def test_backend_failure_raises_store_error(self, seeded_con):
        broken = PredictionStore(BrokenStore(seeded_con))
        with pytest.raises(StoreError):
            asyncio.run(broken.upsert(USER, MATCH, DraftPrediction(winner=Winner.HOME)))


class TestReads:
    def test_matches_use_local_day_bounds(self, store):
        matches = asyncio.run(store.fetch_matches(DAY))
        assert [m.match_id for m in matches] == [555, 556, 557]
        nxt = asyncio.run(store.fetch_matches(DAY + dt.timedelta(days=1)))
        assert [m.match_id for m in nxt] == [558]

    def test_predictions_newest_first(self, store):
        rows = asyncio.run(store.fetch_for_matches([555, 556, 999]))
        by_match = [p for p in rows if p.match_id == 555]
        assert [p.user_id for p in by_match] == ["u4", "u3", "u2"]
        assert {p.match_id for p in rows} == {555, 556}

    def test_empty_match_set_skips_query(self, seeded_con):
        broken = PredictionStore(BrokenStore(seeded_con))
        assert asyncio.run(broken.fetch_for_matches([])) == []

    def test_own_predictions_lookup(self, store):
        lookup = asyncio.run(store.fetch_own("u2", [555, 556, 557]))
        assert set(lookup) == {555, 556, 557}
        assert lookup[555].winner is Winner.HOME
        assert lookup[556].home_score == 2 and lookup[556].winner is None
        assert lookup[557] is None

    def test_reads_degrade_on_failure(self, seeded_con):
        broken = PredictionStore(BrokenStore(seeded_con))
        assert asyncio.run(broken.fetch_matches(DAY)) == []
        assert asyncio.run(broken.fetch_for_matches([555])) == []
        assert asyncio.run(broken.fetch_own("u2", [555, 556])) == {555: None, 556: None}

    def test_table_store_wraps_read_errors(self, seeded_con):
        with pytest.raises(FetchError):
            asyncio.run(BrokenStore(seeded_con).select_predictions([555]))
