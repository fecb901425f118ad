from __future__ import annotations
from pathlib import Path

import duckdb
from oddsflow.config import settings

SCHEMA_SQL = r"""
-- Reference fixtures, written by the odds ingestion job. Times are site-local wall clock.
CREATE TABLE IF NOT EXISTS prematches (
  fixture_id BIGINT PRIMARY KEY,
  start_date TIMESTAMP NOT NULL,
  league_name VARCHAR,
  league_logo VARCHAR,
  home_name VARCHAR NOT NULL,
  home_logo VARCHAR,
  away_name VARCHAR NOT NULL,
  away_logo VARCHAR,
  status_short VARCHAR,
  goals_home INT,
  goals_away INT
);

-- One row per (user, match); resubmitting replaces the row
CREATE TABLE IF NOT EXISTS user_match_predictions (
  user_id VARCHAR NOT NULL,
  match_id BIGINT NOT NULL,
  home_team VARCHAR,
  away_team VARCHAR,
  league VARCHAR,
  match_date TIMESTAMP,
  home_score_prediction INT,
  away_score_prediction INT,
  winner_prediction VARCHAR,  -- '1' home, 'X' draw, '2' away
  analysis VARCHAR,
  user_name VARCHAR,
  user_avatar VARCHAR,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  PRIMARY KEY(user_id, match_id)
);

CREATE TABLE IF NOT EXISTS team_statistics (
  id BIGINT PRIMARY KEY,
  team_id BIGINT,
  team_name VARCHAR,
  team_logo VARCHAR,
  league_name VARCHAR,
  season_year VARCHAR,
  total_played INT,
  total_wins INT,
  total_draws INT,
  total_loses INT,
  goals_for_total INT,
  goals_against_total INT,
  goals_for_average DOUBLE,
  goals_against_average DOUBLE,
  clean_sheets INT,
  failed_to_score INT,
  yellow_cards_total INT,
  red_cards_total INT,
  form VARCHAR
);

CREATE TABLE IF NOT EXISTS player_stats (
  id BIGINT PRIMARY KEY,
  team_id BIGINT,
  team_name VARCHAR,
  league_name VARCHAR,
  player_name VARCHAR,
  player_photo VARCHAR,
  position VARCHAR,
  nationality VARCHAR,
  age INT,
  appearances INT,
  minutes INT,
  goals INT,
  assists INT,
  rating DOUBLE
);

CREATE INDEX IF NOT EXISTS idx_prematches_start ON prematches(start_date);
CREATE INDEX IF NOT EXISTS idx_team_stats_league ON team_statistics(league_name);
CREATE INDEX IF NOT EXISTS idx_player_stats_team ON player_stats(team_id);
"""


def connect(db_path: str | None = None) -> duckdb.DuckDBPyConnection:
    path = db_path or settings().db_path
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    con = duckdb.connect(path)
    con.execute(SCHEMA_SQL)
    return con
