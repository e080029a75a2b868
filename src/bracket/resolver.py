"""
Match result resolution.
"""
import logging
from typing import Optional

from .errors import InvalidTeamAssignment
from .models import Match, MatchUpdate, Resolution

logger = logging.getLogger(__name__)


def determine_winner(match: Match) -> Optional[int]:
    """
    Winner of a match from its scores.

    Returns None when a team slot is empty or the scores are tied.
    """
    if match.team1_id is None or match.team2_id is None:
        return None
    if match.score1 > match.score2:
        return match.team1_id
    if match.score2 > match.score1:
        return match.team2_id
    return None


def merge_update(current: Match, update: MatchUpdate) -> Match:
    """Apply the sent fields of update on top of current."""
    merged = current.copy(**update.changes())

    if merged.team1_id is not None and merged.team1_id == merged.team2_id:
        raise InvalidTeamAssignment(
            f"Team {merged.team1_id} cannot occupy both slots of match {current.id}"
        )
    if merged.winner_id is not None and merged.winner_id not in (merged.team1_id, merged.team2_id):
        raise InvalidTeamAssignment(
            f"Match {current.id} is already won by team {merged.winner_id}; "
            f"its slot cannot be reassigned"
        )
    return merged


def resolve_match(current: Match, update: MatchUpdate) -> Resolution:
    """
    Merge a partial update into a match and decide its winner if asked.

    A winner is only decided when ``update.finalize`` is set, both team
    slots are filled and the scores differ. A match that already has a
    winner keeps it. ``decided`` is True only when this call set the winner.
    """
    merged = merge_update(current, update)

    if not update.finalize or merged.winner_id is not None:
        return Resolution(merged, decided=False)

    winner = determine_winner(merged)
    if winner is None:
        if merged.team1_id is not None and merged.team2_id is not None:
            logger.debug(f"Match {merged.id} tied {merged.score1}-{merged.score2}; left undecided")
        return Resolution(merged, decided=False)

    merged.winner_id = winner
    return Resolution(merged, decided=True)
