"""
Consistency checks for a draft prediction.

The checks are pure, so the editor can run them on every change for inline
feedback and once more right before the draft is submitted.  Rules run in
order and the first violation wins:

1. range     -- every supplied score is an integer >= 0       (NegativeScore)
2. agreement -- scoreline agrees with the winner choice       (WinnerScoreMismatch)
3. emptiness -- at least a score or a winner choice is given  (EmptyPrediction)

For the agreement rule a missing score counts as 0 when the other score is
present, so ``home=2`` with winner AWAY is a mismatch.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from oddsflow.models import DraftPrediction, Winner


@dataclass(frozen=True)
class NegativeScore:
    side: str  # "home" or "away"
    value: object


@dataclass(frozen=True)
class WinnerScoreMismatch:
    """``expected`` is the side that should lead; DRAW means level scores."""
    expected: Winner
    home_score: int
    away_score: int


@dataclass(frozen=True)
class EmptyPrediction:
    pass


Violation = Union[NegativeScore, WinnerScoreMismatch, EmptyPrediction]


def _valid_score(v) -> bool:
    # bool is an int subclass but never a score
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def implied_winner(home_score: Optional[int], away_score: Optional[int]) -> Optional[Winner]:
    """Result implied by a scoreline, or None if no score was given."""
    if home_score is None and away_score is None:
        return None
    h, a = home_score or 0, away_score or 0
    if h > a:
        return Winner.HOME
    if h == a:
        return Winner.DRAW
    return Winner.AWAY


def validate_draft(draft: DraftPrediction) -> Optional[Violation]:
    """Return the first violation in *draft*, or None if it may be submitted."""
    for side, value in (("home", draft.home_score), ("away", draft.away_score)):
        if value is not None and not _valid_score(value):
            return NegativeScore(side, value)

    if draft.winner is not None and draft.has_score():
        if implied_winner(draft.home_score, draft.away_score) != draft.winner:
            return WinnerScoreMismatch(
                expected=draft.winner,
                home_score=draft.home_score or 0,
                away_score=draft.away_score or 0,
            )

    if draft.winner is None and not draft.has_score():
        return EmptyPrediction()

    return None


def describe(violation: Violation, home_team: str = "Home", away_team: str = "Away") -> str:
    """Short message for showing a violation next to the form."""
    if isinstance(violation, NegativeScore):
        return f"{violation.side.capitalize()} score must be a whole number of 0 or more"
    if isinstance(violation, WinnerScoreMismatch):
        if violation.expected is Winner.HOME:
            return f"Home win: {home_team} > {away_team}"
        if violation.expected is Winner.AWAY:
            return f"Away win: {away_team} > {home_team}"
        return f"Draw: {home_team} = {away_team}"
    return "Pick a winner or enter a score"
