"""
Read-through cache for team and league statistics pages.

Results are kept in memory per key for a fixed TTL (five minutes by
default).  Inside the window a key is answered without touching the
backend; the first request after expiry recomputes and refreshes it.
Nothing invalidates an entry early, so data is at most one TTL stale.
Expired entries are swept whenever a new value is stored.

Backend failures degrade to "no data": a None team with no players, or an
empty league.  That result is cached like any other.
"""
from __future__ import annotations

import logging
import re
import time
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import unquote

from oddsflow.backend import TableStore
from oddsflow.config import settings
from oddsflow.errors import FetchError
from oddsflow.models import LeaguePlayers, PlayerStatistics, TeamData, TeamStatistics

log = logging.getLogger(__name__)

# URL slug -> (display name, country, league name in the backend)
LEAGUES: dict[str, tuple[str, str, str]] = {
    "premier-league": ("Premier League", "England", "Premier League"),
    "bundesliga": ("Bundesliga", "Germany", "Bundesliga"),
    "serie-a": ("Serie A", "Italy", "Serie A"),
    "la-liga": ("La Liga", "Spain", "La Liga"),
    "ligue-1": ("Ligue 1", "France", "Ligue 1"),
    "champions-league": ("Champions League", "UEFA", "UEFA Champions League"),
}

# Club abbreviations written in capitals ("1. FC Köln", "RB Leipzig")
_UPPER_WORDS = {"fc", "sc", "sv", "vfb", "vfl", "fsv", "tsg", "rb", "bsc", "sg", "st"}

_LEADERBOARD_SIZE = 5


def league_db_name(league_slug: str) -> str:
    """Backend league name for a URL slug; unknown slugs are title-cased."""
    if league_slug in LEAGUES:
        return LEAGUES[league_slug][2]
    return slug_to_display_name(league_slug)


def slug_to_display_name(slug: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in slug.split("-"))


def slug_to_team_name(slug: str) -> str:
    """``"manchester-city"`` -> ``"Manchester City"``, ``"1-fc-koln"`` -> ``"1. FC Koln"``."""
    words = []
    for word in unquote(slug).split("-"):
        if word.lower() in _UPPER_WORDS:
            words.append(word.upper())
        else:
            words.append(word[:1].upper() + word[1:])
    name = " ".join(words)
    return re.sub(r"^(\d+)\s+(FC|SC|SV|FSV)", r"\1. \2", name, flags=re.IGNORECASE)


def search_pattern(slug: str) -> str:
    """Loose ILIKE pattern: every slug word, in order, anything in between."""
    return "".join(f"%{w}%" for w in unquote(slug).split("-") if w)


class TeamDataCache:
    """TTL cache in front of the team_statistics / player_stats tables."""

    def __init__(
        self,
        backend: TableStore,
        ttl_seconds: Optional[float] = None,
        player_limit: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        s = settings()
        self.backend = backend
        self.ttl = float(ttl_seconds if ttl_seconds is not None else s.team_data_ttl_seconds)
        self.player_limit = player_limit if player_limit is not None else s.team_player_limit
        self.clock = clock
        self._entries: dict[tuple, tuple[float, Any]] = {}
        self.hits = 0
        self.misses = 0

    async def _cached(self, key: tuple, compute: Callable[[], Awaitable[Any]]) -> Any:
        now = self.clock()
        entry = self._entries.get(key)
        if entry is not None and now < entry[0]:
            self.hits += 1
            log.debug("[cache] hit: %s", key)
            return entry[1]
        self.misses += 1
        value = await compute()
        now = self.clock()
        for stale in [k for k, (exp, _) in self._entries.items() if exp <= now]:
            del self._entries[stale]
        self._entries[key] = (now + self.ttl, value)
        log.debug("[cache] miss: %s, stored for %.0fs", key, self.ttl)
        return value

    async def get_team_data(self, team_slug: str, league_name: str) -> TeamData:
        """Team statistics and its most-used players, or ``TeamData(None)``."""
        return await self._cached(
            ("team", team_slug, league_name),
            lambda: self._load_team(team_slug, league_name),
        )

    async def get_league_players(self, league_name: str) -> LeaguePlayers:
        return await self._cached(
            ("league", league_name),
            lambda: self._load_league(league_name),
        )

    def get_stats(self) -> dict:
        now = self.clock()
        return {
            "entries": len(self._entries),
            "expired": sum(1 for exp, _ in self._entries.values() if exp <= now),
            "hits": self.hits,
            "misses": self.misses,
        }

    # ------------------------------------------------------------------ loaders
    async def _find_team(self, team_slug: str, league_name: str) -> Optional[TeamStatistics]:
        # exact (case-insensitive) name first, then the loose pattern;
        # a pattern hitting several teams is treated as not found
        for pattern in (slug_to_team_name(team_slug), search_pattern(team_slug)):
            try:
                rows = await self.backend.select_team_statistics(league_name, pattern)
            except FetchError as exc:
                log.warning("[cache] team lookup %r in %s failed: %s", pattern, league_name, exc)
                continue
            if len(rows) == 1:
                return rows[0]
        return None

    async def _load_team(self, team_slug: str, league_name: str) -> TeamData:
        team = await self._find_team(team_slug, league_name)
        if team is None:
            log.info("[cache] team not found: %s in %s", team_slug, league_name)
            return TeamData(None)
        if not team.team_id:
            return TeamData(team)
        try:
            players = await self.backend.select_player_statistics(team.team_id, self.player_limit)
        except FetchError as exc:
            log.warning("[cache] players of team %s unavailable: %s", team.team_id, exc)
            players = []
        return TeamData(team, tuple(players))

    async def _load_league(self, league_name: str) -> LeaguePlayers:
        try:
            players = await self.backend.select_league_players(league_name)
        except FetchError as exc:
            log.warning("[cache] league players for %s unavailable: %s", league_name, exc)
            return LeaguePlayers()
        return LeaguePlayers(
            players=tuple(players),
            top_scorers=_top(players, lambda p: p.goals),
            top_assists=_top(players, lambda p: p.assists),
            highest_rated=_top(players, lambda p: p.rating),
        )


def _top(players: list[PlayerStatistics], stat: Callable[[PlayerStatistics], Any]) -> tuple[PlayerStatistics, ...]:
    ranked = sorted(players, key=lambda p: stat(p) or 0, reverse=True)
    return tuple(ranked[:_LEADERBOARD_SIZE])

