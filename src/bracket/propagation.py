"""
Winner propagation to the next round.
"""
from typing import Iterable, Optional

from .errors import BracketIntegrityError
from .models import Match, Resolution, Slot, TEAM1, TEAM2


def target_slot(match: Match) -> Slot:
    """Downstream coordinate for the winner of match, whether or not it exists."""
    return Slot(
        round=match.round + 1,
        match_order=match.match_order // 2,
        slot=TEAM1 if match.match_order % 2 == 0 else TEAM2,
    )


def _find_match(matches: Iterable[Match], tournament_id, position) -> Optional[Match]:
    for m in matches:
        if m.tournament_id == tournament_id and m.position == position:
            return m
    return None


def next_slot(resolved: Resolution, matches: Iterable[Match]) -> Optional[Slot]:
    """
    Slot the winner of a freshly decided match moves into.

    Returns None when the match is the final. Raises BracketIntegrityError
    when the target slot is already filled: a different team there means
    the bracket is corrupted, the same team means the winner was already
    propagated.
    """
    match = resolved.match
    if match.winner_id is None:
        raise BracketIntegrityError(f"Match {match.id} has no winner to propagate")

    slot = target_slot(match)
    target = _find_match(matches, match.tournament_id, slot.position)
    if target is None:
        return None

    occupant = getattr(target, slot.field)
    if occupant is not None:
        if occupant == match.winner_id:
            raise BracketIntegrityError(
                f"Winner {match.winner_id} of match {match.id} was already propagated to match {target.id}"
            )
        raise BracketIntegrityError(
            f"Slot {slot.slot} of match {target.id} is held by team {occupant}; "
            f"refusing to replace it with team {match.winner_id}"
        )

    sibling = target.team2_id if slot.slot == TEAM1 else target.team1_id
    if sibling == match.winner_id:
        raise BracketIntegrityError(
            f"Team {match.winner_id} already holds the other slot of match {target.id}"
        )
    return slot


def advance_winner(resolved: Resolution, matches: Iterable[Match]) -> Optional[Match]:
    """
    Return the downstream match with the winner written into its slot.

    Returns None when the resolved match is the final.
    """
    matches = list(matches)
    slot = next_slot(resolved, matches)
    if slot is None:
        return None

    target = _find_match(matches, resolved.match.tournament_id, slot.position)
    return target.copy(**{slot.field: resolved.match.winner_id})
