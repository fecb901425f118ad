"""Community consensus: how the winner-choice votes split for each match."""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from oddsflow.models import ConsensusSummary, UserPrediction, Winner
from oddsflow.validation import implied_winner


def group_by_match(predictions: Iterable[UserPrediction]) -> dict[int, list[UserPrediction]]:
    """Group predictions by match id, keeping their incoming order."""
    groups: dict[int, list[UserPrediction]] = defaultdict(list)
    for p in predictions:
        groups[p.match_id].append(p)
    return dict(groups)


def _vote(p: UserPrediction, include_implied_winners: bool) -> Optional[Winner]:
    if p.winner is not None:
        return p.winner
    if include_implied_winners:
        return implied_winner(p.home_score, p.away_score)
    return None


def aggregate(
    match_ids: Iterable[int],
    predictions: Iterable[UserPrediction],
    include_implied_winners: bool = False,
) -> dict[int, ConsensusSummary]:
    """
    Recompute the vote split for every match in *match_ids*.

    Only predictions with a winner choice vote; a bare scoreline does not,
    unless *include_implied_winners* is set.  A match without votes has no
    entry at all.  Each percentage is rounded on its own, so the three need
    not add up to exactly 100.
    """
    wanted = set(match_ids)
    counts: dict[int, dict[Winner, int]] = {}
    for p in predictions:
        if p.match_id not in wanted:
            continue
        vote = _vote(p, include_implied_winners)
        if vote is None:
            continue
        counts.setdefault(p.match_id, dict.fromkeys(Winner, 0))[vote] += 1

    summaries: dict[int, ConsensusSummary] = {}
    for match_id, c in counts.items():
        n = sum(c.values())
        summaries[match_id] = ConsensusSummary(
            home_percent=_percent(c[Winner.HOME], n),
            draw_percent=_percent(c[Winner.DRAW], n),
            away_percent=_percent(c[Winner.AWAY], n),
            total_votes=n,
        )
    return summaries


def _percent(count: int, n: int) -> int:
    # half rounds up; round() would send 12.5 down to 12
    return (200 * count + n) // (2 * n)
