"""
Unit tests for single elimination bracket generation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.builder import (
    get_round_name,
    is_power_of_two,
    validate_team_count,
    total_rounds,
    build_bracket,
)
from bracket.errors import InvalidBracketSize
from bracket.propagation import target_slot


class TestBracketHelpers:
    """Tests for bracket helper functions."""

    def test_get_round_name_final(self):
        """Test round name for 2 teams (Final)."""
        assert get_round_name(2) == "Final"

    def test_get_round_name_semifinal(self):
        """Test round name for 4 teams (Semifinal)."""
        assert get_round_name(4) == "Semifinal"

    def test_get_round_name_quarterfinal(self):
        """Test round name for 8 teams (Quarterfinal)."""
        assert get_round_name(8) == "Quarterfinal"

    def test_get_round_name_round_of_16(self):
        """Test round name for 16 teams."""
        assert get_round_name(16) == "Round of 16"

    def test_is_power_of_two(self):
        """Test power of two detection."""
        assert all(is_power_of_two(n) for n in (1, 2, 4, 8, 64, 1024))
        assert not any(is_power_of_two(n) for n in (0, -2, 3, 6, 12, 100))

    def test_is_power_of_two_rejects_non_ints(self):
        """Floats, strings and bools are not team counts."""
        assert not is_power_of_two(4.0)
        assert not is_power_of_two("4")
        assert not is_power_of_two(True)

    def test_total_rounds(self):
        """Test number of rounds for exact powers of 2."""
        assert total_rounds(2) == 1
        assert total_rounds(4) == 2
        assert total_rounds(8) == 3
        assert total_rounds(16) == 4


class TestInvalidSizes:
    """Tests for rejected team counts."""

    @pytest.mark.parametrize("team_count", [0, 1, 3, 5, 6, 7, 12, -4, None, "8", 8.0])
    def test_invalid_team_count_raises(self, team_count):
        """Anything but a power of two >= 2 is rejected."""
        with pytest.raises(InvalidBracketSize):
            build_bracket(team_count)

    def test_three_teams_rejected(self):
        """A 3-team tournament cannot be built."""
        with pytest.raises(InvalidBracketSize) as exc_info:
            validate_team_count(3)
        assert exc_info.value.kind == 'invalid_bracket_size'
        assert exc_info.value.status_code == 400


class TestBuildBracket:
    """Tests for full bracket generation."""

    def test_four_teams(self):
        """4 teams: two semifinals and a final."""
        matches = build_bracket(4)
        assert [m.position for m in matches] == [(1, 0), (1, 1), (2, 0)]

    def test_two_teams_is_just_a_final(self):
        """2 teams produce a single match."""
        matches = build_bracket(2)
        assert [m.position for m in matches] == [(1, 0)]

    @pytest.mark.parametrize("team_count", [2, 4, 8, 16, 32, 64])
    def test_match_count_is_n_minus_one(self, team_count):
        """A bracket of N teams has N - 1 matches."""
        assert len(build_bracket(team_count)) == team_count - 1

    @pytest.mark.parametrize("team_count", [2, 4, 8, 16, 32])
    def test_round_sizes_halve(self, team_count):
        """Round sizes are N/2, N/4, ..., 1."""
        matches = build_bracket(team_count)
        sizes = []
        for round_num in range(1, total_rounds(team_count) + 1):
            sizes.append(sum(1 for m in matches if m.round == round_num))
        expected = []
        size = team_count // 2
        while size >= 1:
            expected.append(size)
            size //= 2
        assert sizes == expected

    def test_all_slots_empty(self):
        """Generated matches carry no teams, scores or winners."""
        for m in build_bracket(8):
            assert m.team1_id is None and m.team2_id is None
            assert m.score1 == 0 and m.score2 == 0
            assert m.winner_id is None
            assert m.id is None and m.tournament_id is None

    def test_order_is_round_then_match_order(self):
        """Output is sorted by (round, match_order)."""
        positions = [m.position for m in build_bracket(16)]
        assert positions == sorted(positions)

    def test_deterministic(self):
        """Two builds of the same size are identical."""
        assert [m.position for m in build_bracket(32)] == [m.position for m in build_bracket(32)]

    @pytest.mark.parametrize("team_count", [4, 8, 16, 32])
    def test_every_non_final_feeds_an_existing_unique_slot(self, team_count):
        """Each non-final match targets a distinct slot of an existing match."""
        matches = build_bracket(team_count)
        positions = {m.position for m in matches}
        final_round = total_rounds(team_count)

        targets = set()
        for m in matches:
            if m.round == final_round:
                continue
            slot = target_slot(m)
            assert slot.position in positions
            targets.add((slot.position, slot.slot))

        assert len(targets) == len(matches) - 1

    def test_final_has_no_downstream_match(self):
        """The final's target coordinate is outside the bracket."""
        matches = build_bracket(8)
        final = matches[-1]
        positions = {m.position for m in matches}
        assert target_slot(final).position not in positions
