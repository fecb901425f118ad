from __future__ import annotations
import functools
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")

def _get(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name, default)
    return v if v not in ("", None) else default

def _int(name: str, default: int) -> int:
    raw = _get(name, str(default)) or str(default)
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None

def _bool(name: str, default: bool) -> bool:
    raw = (_get(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise RuntimeError(f"{name} must be a boolean flag, got {raw!r}")

@dataclass(frozen=True)
class Settings:
    db_path: str
    team_data_ttl_seconds: int
    team_player_limit: int
    include_implied_winners: bool
    date_strip_days: int

@functools.lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings(
        db_path=_get("DB_PATH", "./data/oddsflow.duckdb") or "./data/oddsflow.duckdb",
        team_data_ttl_seconds=_int("TEAM_DATA_TTL_SECONDS", 300),
        team_player_limit=_int("TEAM_PLAYER_LIMIT", 25),
        include_implied_winners=_bool("INCLUDE_IMPLIED_WINNERS", False),
        date_strip_days=_int("DATE_STRIP_DAYS", 7),
    )
