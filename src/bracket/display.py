"""
Bracket view grouped by round, for API clients drawing the tree.
"""
from typing import Dict, List

from .builder import get_round_name
from .models import Match, Tournament
from .status import find_final_match


def get_bracket_display(tournament: Tournament, matches: List[Match]) -> Dict:
    """
    Group a tournament's matches by round.

    Returns dict with:
    - 'tournament': tournament record
    - 'rounds': list of {'round', 'name', 'matches'} ordered by round
    - 'total_rounds': number of rounds
    - 'champion': winner of the final, or None
    """
    by_round = {}
    for m in sorted(matches, key=lambda m: m.position):
        by_round.setdefault(m.round, []).append(m)

    rounds = []
    for round_num in sorted(by_round):
        round_matches = by_round[round_num]
        rounds.append({
            'round': round_num,
            'name': get_round_name(len(round_matches) * 2),
            'matches': [m.to_dict() for m in round_matches],
        })

    final = find_final_match(matches)
    return {
        'tournament': tournament.to_dict(),
        'rounds': rounds,
        'total_rounds': len(rounds),
        'champion': final.winner_id if final else None,
    }
