"""Record types shared by the prediction pipeline and the statistics cache."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Winner(str, Enum):
    """Winner choice, valued by the codes stored in ``winner_prediction``."""
    HOME = "1"
    DRAW = "X"
    AWAY = "2"

    @classmethod
    def parse(cls, value) -> Optional["Winner"]:
        """Accept a Winner, its code ('1'/'X'/'2') or its name; blank means no choice."""
        if value is None or isinstance(value, cls):
            return value
        s = str(value).strip()
        if not s:
            return None
        try:
            return cls(s.upper())
        except ValueError:
            pass
        try:
            return cls[s.upper()]
        except KeyError:
            raise ValueError(f"unknown winner choice: {value!r}") from None


@dataclass(frozen=True)
class Match:
    match_id: int
    home_team: str
    away_team: str
    league: Optional[str]
    kickoff: dt.datetime
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None
    league_logo: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Match":
        return cls(
            match_id=int(row["fixture_id"]),
            home_team=row["home_name"],
            away_team=row["away_name"],
            league=row.get("league_name"),
            kickoff=row["start_date"],
            home_logo=row.get("home_logo"),
            away_logo=row.get("away_logo"),
            league_logo=row.get("league_logo"),
        )


@dataclass(frozen=True)
class Identity:
    """The signed-in user as reported by the auth collaborator."""
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class DraftPrediction:
    """Unsaved form state for one match."""
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner: Optional[Winner] = None
    analysis: Optional[str] = None

    def has_score(self) -> bool:
        return self.home_score is not None or self.away_score is not None

    def toggle_winner(self, winner: Winner) -> "DraftPrediction":
        """Pick *winner*, or clear it if it is already picked."""
        return replace(self, winner=None if self.winner == winner else winner)


@dataclass(frozen=True)
class UserPrediction:
    user_id: str
    match_id: int
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner: Optional[Winner] = None
    analysis: Optional[str] = None
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    league: Optional[str] = None
    match_date: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "UserPrediction":
        return cls(
            user_id=row["user_id"],
            match_id=int(row["match_id"]),
            home_score=row.get("home_score_prediction"),
            away_score=row.get("away_score_prediction"),
            winner=Winner.parse(row.get("winner_prediction")),
            analysis=row.get("analysis"),
            user_name=row.get("user_name"),
            user_avatar=row.get("user_avatar"),
            home_team=row.get("home_team"),
            away_team=row.get("away_team"),
            league=row.get("league"),
            match_date=row.get("match_date"),
            created_at=row.get("created_at"),
        )

    def to_draft(self) -> DraftPrediction:
        return DraftPrediction(self.home_score, self.away_score, self.winner, self.analysis)


@dataclass(frozen=True)
class ConsensusSummary:
    home_percent: int
    draw_percent: int
    away_percent: int
    total_votes: int


@dataclass(frozen=True)
class TeamStatistics:
    id: int
    team_id: Optional[int]
    team_name: Optional[str]
    league_name: Optional[str]
    team_logo: Optional[str] = None
    season_year: Optional[str] = None
    total_played: Optional[int] = None
    total_wins: Optional[int] = None
    total_draws: Optional[int] = None
    total_loses: Optional[int] = None
    goals_for_total: Optional[int] = None
    goals_against_total: Optional[int] = None
    goals_for_average: Optional[float] = None
    goals_against_average: Optional[float] = None
    clean_sheets: Optional[int] = None
    failed_to_score: Optional[int] = None
    yellow_cards_total: Optional[int] = None
    red_cards_total: Optional[int] = None
    form: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "TeamStatistics":
        return cls(**{k: row.get(k) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class PlayerStatistics:
    id: int
    team_id: Optional[int]
    player_name: Optional[str]
    team_name: Optional[str] = None
    league_name: Optional[str] = None
    player_photo: Optional[str] = None
    position: Optional[str] = None
    nationality: Optional[str] = None
    age: Optional[int] = None
    appearances: Optional[int] = None
    minutes: Optional[int] = None
    goals: Optional[int] = None
    assists: Optional[int] = None
    rating: Optional[float] = None

    @classmethod
    def from_row(cls, row: dict) -> "PlayerStatistics":
        return cls(**{k: row.get(k) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class TeamData:
    """Team page payload. ``team`` is None when the team was not found."""
    team: Optional[TeamStatistics]
    players: tuple[PlayerStatistics, ...] = ()


@dataclass(frozen=True)
class LeaguePlayers:
    players: tuple[PlayerStatistics, ...] = ()
    top_scorers: tuple[PlayerStatistics, ...] = ()
    top_assists: tuple[PlayerStatistics, ...] = ()
    highest_rated: tuple[PlayerStatistics, ...] = ()
