"""
Shared fixtures for the OddsFlow community test suite.

Provides:
    - In-memory DuckDB connection with full schema
    - Seeded fixtures, predictions, team and player statistics
    - TableStore / PredictionStore wired to that connection
"""
from __future__ import annotations

import os
import datetime as dt

import duckdb
import pytest

# ---------------------------------------------------------------------------
# Environment BEFORE any oddsflow imports so settings() sees test values
# ---------------------------------------------------------------------------
os.environ.setdefault("DB_PATH", ":memory:")
os.environ.setdefault("TEAM_DATA_TTL_SECONDS", "300")
os.environ.setdefault("TEAM_PLAYER_LIMIT", "25")
os.environ.setdefault("INCLUDE_IMPLIED_WINNERS", "false")
os.environ.setdefault("COLUMNS", "200")  # wide Rich tables in CLI output

DAY = dt.date(2026, 3, 14)
T0 = dt.datetime(2026, 3, 14, 9, 0)


# ---------------------------------------------------------------------------
# In-memory DuckDB connection with full schema
# ---------------------------------------------------------------------------
@pytest.fixture()
def con():
    """Fresh in-memory DuckDB connection with full schema applied."""
    from oddsflow.db import SCHEMA_SQL

    c = duckdb.connect(":memory:")
    c.execute(SCHEMA_SQL)
    yield c
    c.close()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------
def insert_match(con, fixture_id, home, away, kickoff, league="Premier League"):
    con.execute(
        """INSERT INTO prematches(fixture_id, start_date, league_name, home_name, away_name, status_short)
           VALUES (?,?,?,?,?,'NS')""",
        [fixture_id, kickoff, league, home, away],
    )


def insert_prediction(con, user_id, match_id, winner=None, home=None, away=None,
                      created_at=T0, user_name=None):
    con.execute(
        """INSERT INTO user_match_predictions(user_id, match_id, home_score_prediction,
               away_score_prediction, winner_prediction, user_name, created_at)
           VALUES (?,?,?,?,?,?,?)""",
        [user_id, match_id, home, away, winner, user_name or user_id, created_at],
    )


def count_predictions(con, match_id=None) -> int:
    if match_id is None:
        return con.execute("SELECT COUNT(*) FROM user_match_predictions").fetchone()[0]
    return con.execute(
        "SELECT COUNT(*) FROM user_match_predictions WHERE match_id = ?", [match_id]
    ).fetchone()[0]


@pytest.fixture()
def seeded_con(con):
    """Connection pre-loaded with one matchday.

    Match 555 has three winner votes (two home, one away), 556 only has
    scoreline-only predictions, 557 has none.  558 kicks off just after
    midnight on the following day.
    """
    insert_match(con, 555, "Arsenal", "Chelsea", dt.datetime(2026, 3, 14, 15, 0))
    insert_match(con, 556, "Liverpool", "Everton", dt.datetime(2026, 3, 14, 17, 30))
    insert_match(con, 557, "Real Madrid", "Barcelona", dt.datetime(2026, 3, 14, 23, 45), league="La Liga")
    insert_match(con, 558, "Juventus", "Milan", dt.datetime(2026, 3, 15, 0, 15), league="Serie A")

    insert_prediction(con, "u2", 555, winner="1", home=1, away=0, created_at=T0)
    insert_prediction(con, "u3", 555, winner="1", created_at=T0 + dt.timedelta(minutes=5))
    insert_prediction(con, "u4", 555, winner="2", home=0, away=2, created_at=T0 + dt.timedelta(minutes=10))
    insert_prediction(con, "u2", 556, home=2, away=2, created_at=T0)
    insert_prediction(con, "u3", 556, home=3, away=1, created_at=T0)

    # Team and player statistics
    con.execute(
        """INSERT INTO team_statistics(id, team_id, team_name, league_name, season_year,
               total_played, total_wins, total_draws, total_loses, goals_for_total,
               goals_against_total, form)
           VALUES
           (1, 50, 'Manchester City', 'Premier League', '2025', 28, 18, 5, 5, 60, 28, 'WWDLW'),
           (2, 33, 'Manchester United', 'Premier League', '2025', 28, 12, 6, 10, 40, 38, 'LWDWL'),
           (3, 165, 'Borussia Dortmund', 'Bundesliga', '2025', 25, 14, 6, 5, 52, 30, 'WWWDW'),
           (4, 192, '1. FC Köln', 'Bundesliga', '2025', 25, 7, 8, 10, 30, 41, 'DLDLW'),
           (5, NULL, 'Brentford', 'Premier League', '2025', 28, 10, 7, 11, 41, 43, NULL)"""
    )
    for pid, team_id, team, name, apps, goals, assists, rating in [
        (1, 50, "Manchester City", "Erling Haaland", 27, 25, 4, 7.9),
        (2, 50, "Manchester City", "Phil Foden", 28, 9, 8, 7.4),
        (3, 50, "Manchester City", "Rodri", 12, 2, 3, 7.1),
        (4, 50, "Manchester City", "Bench Player", 3, 0, 0, None),
        (5, 33, "Manchester United", "Bruno Fernandes", 28, 8, 10, 7.5),
    ]:
        con.execute(
            """INSERT INTO player_stats(id, team_id, team_name, league_name, player_name,
                   appearances, goals, assists, rating)
               VALUES (?,?,?,?,?,?,?,?,?)""",
            [pid, team_id, team, "Premier League", name, apps, goals, assists, rating],
        )
    yield con


@pytest.fixture()
def backend(seeded_con):
    from oddsflow.backend import TableStore
    return TableStore(seeded_con)


@pytest.fixture()
def clock():
    """Controllable wall clock for created_at stamps."""
    class _Clock:
        def __init__(self):
            self.now = dt.datetime(2026, 3, 14, 12, 0)

        def __call__(self):
            self.now += dt.timedelta(seconds=1)
            return self.now
    return _Clock()


@pytest.fixture()
def store(backend, clock):
    from oddsflow.predictions import PredictionStore
    return PredictionStore(backend, clock=clock)
