"""
Tournament lifecycle status derived from match activity.
"""
from typing import Iterable, Optional

from .models import COMPLETED, DRAFT, IN_PROGRESS, Match, status_rank


def has_activity(match: Match) -> bool:
    """A match shows activity once both teams are set, a score is recorded or a winner exists."""
    return (
        (match.team1_id is not None and match.team2_id is not None)
        or (match.score1 or 0) > 0
        or (match.score2 or 0) > 0
        or match.winner_id is not None
    )


def find_final_match(matches: Iterable[Match]) -> Optional[Match]:
    """Return the match with match_order 0 in the highest round."""
    matches = list(matches)
    if not matches:
        return None
    max_round = max(m.round for m in matches)
    for m in matches:
        if m.round == max_round and m.match_order == 0:
            return m
    return None


def derive_status(current: str, matches: Iterable[Match]) -> str:
    """
    Compute the tournament status from a snapshot of its matches.

    Status only moves forward (draft -> in_progress -> completed); whatever
    the snapshot shows, the result is never earlier than ``current``.
    """
    if current == COMPLETED:
        return COMPLETED

    matches = list(matches)
    derived = DRAFT
    if any(has_activity(m) for m in matches):
        derived = IN_PROGRESS

    final = find_final_match(matches)
    if final is not None and final.winner_id is not None:
        derived = COMPLETED

    if status_rank(derived) > status_rank(current):
        return derived
    return current or DRAFT
