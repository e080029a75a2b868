"""
Single elimination bracket generation.
"""
import math
from typing import List

from .errors import InvalidBracketSize
from .models import Match


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def is_power_of_two(n) -> bool:
    """True for 1, 2, 4, 8, ... (bools are rejected)."""
    if isinstance(n, bool) or not isinstance(n, int):
        return False
    return n > 0 and (n & (n - 1)) == 0


def validate_team_count(team_count) -> int:
    """Return team_count if it is a power of two >= 2, else raise InvalidBracketSize."""
    if not is_power_of_two(team_count) or team_count < 2:
        raise InvalidBracketSize(
            f"Team count must be a power of two and at least 2, got {team_count!r}"
        )
    return team_count


def total_rounds(team_count: int) -> int:
    """Number of rounds for a bracket of team_count teams."""
    return int(math.log2(validate_team_count(team_count)))


def build_bracket(team_count: int) -> List[Match]:
    """
    Generate every match of a single elimination bracket.

    Matches are emitted round by round (round 1 first) and by match_order
    inside each round. All team slots are empty, scores are 0 and no winner
    is set. For N teams this yields N - 1 matches:

        4 teams -> (1, 0), (1, 1), (2, 0)

    The winner of (r, i) feeds (r + 1, i // 2), which is what the winner
    propagation relies on.
    """
    validate_team_count(team_count)

    matches = []
    round_num = 1
    matches_in_round = team_count // 2

    while matches_in_round >= 1:
        for match_order in range(matches_in_round):
            matches.append(Match(round=round_num, match_order=match_order))
        matches_in_round //= 2
        round_num += 1

    return matches
