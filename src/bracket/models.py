"""
Records handled by the bracket engine and the store.

Each record converts to and from a plain dict so it can be written to YAML
and returned as JSON without extra mapping code.
"""
from typing import Dict, Optional

DRAFT = 'draft'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'

STATUSES = (DRAFT, IN_PROGRESS, COMPLETED)

TEAM1 = 'team1'
TEAM2 = 'team2'


class _Unset:
    """Marker for a field that was not sent in a partial update."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


class Player:
    def __init__(self, id, name, deleted=False):
        self.id = id
        self.name = name
        self.deleted = deleted

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'deleted': self.deleted}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Player':
        return cls(id=data['id'], name=data['name'], deleted=data.get('deleted', False))

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name}, deleted={self.deleted})"


class Team:
    def __init__(self, id, name, player1_id, player2_id, deleted=False):
        self.id = id
        self.name = name
        self.player1_id = player1_id
        self.player2_id = player2_id
        self.deleted = deleted

    def has_player(self, player_id: int) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'player1_id': self.player1_id,
            'player2_id': self.player2_id,
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Team':
        return cls(
            id=data['id'],
            name=data['name'],
            player1_id=data['player1_id'],
            player2_id=data['player2_id'],
            deleted=data.get('deleted', False),
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, players=({self.player1_id}, {self.player2_id}))"


class Tournament:
    def __init__(self, id, name, team_count, status=DRAFT):
        self.id = id
        self.name = name
        self.team_count = team_count
        self.status = status

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'team_count': self.team_count,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Tournament':
        return cls(
            id=data['id'],
            name=data['name'],
            team_count=data['team_count'],
            status=data.get('status', DRAFT),
        )

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, team_count={self.team_count}, status={self.status})"


class Match:
    """
    One slot of the bracket tree.

    ``id`` and ``tournament_id`` are None for a match spec that has not been
    persisted yet.
    """

    FIELDS = ('id', 'tournament_id', 'round', 'match_order',
              'team1_id', 'team2_id', 'score1', 'score2', 'winner_id')

    def __init__(self, round, match_order, id=None, tournament_id=None,
                 team1_id=None, team2_id=None, score1=0, score2=0, winner_id=None):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self.match_order = match_order
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.score1 = score1
        self.score2 = score2
        self.winner_id = winner_id

    @property
    def position(self):
        return (self.round, self.match_order)

    def copy(self, **changes) -> 'Match':
        data = self.to_dict()
        data.update(changes)
        return Match(**data)

    def to_dict(self) -> Dict:
        return {name: getattr(self, name) for name in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(**{name: data.get(name) for name in cls.FIELDS
                      if name not in ('score1', 'score2')},
                   score1=data.get('score1') or 0,
                   score2=data.get('score2') or 0)

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round}, match_order={self.match_order}, "
                f"teams=({self.team1_id}, {self.team2_id}), scores=({self.score1}, {self.score2}), "
                f"winner={self.winner_id})")


class MatchUpdate:
    """
    Partial update for a match result submission.

    Fields left at ``UNSET`` keep the current match value. A team slot sent
    as ``None`` clears that slot. ``finalize`` asks the resolver to decide a
    winner from the merged scores.
    """

    MERGEABLE = ('team1_id', 'team2_id', 'score1', 'score2')

    def __init__(self, team1_id=UNSET, team2_id=UNSET, score1=UNSET, score2=UNSET,
                 finalize: bool = False):
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.score1 = score1
        self.score2 = score2
        self.finalize = finalize

    def changes(self) -> Dict:
        """Return only the fields that were sent."""
        return {name: getattr(self, name) for name in self.MERGEABLE
                if getattr(self, name) is not UNSET}

    def __repr__(self):
        return f"MatchUpdate({self.changes()}, finalize={self.finalize})"


class Slot:
    """Downstream position a winner moves into."""

    def __init__(self, round: int, match_order: int, slot: str):
        self.round = round
        self.match_order = match_order
        self.slot = slot

    @property
    def position(self):
        return (self.round, self.match_order)

    @property
    def field(self) -> str:
        return f'{self.slot}_id'

    def __eq__(self, other):
        if not isinstance(other, Slot):
            return NotImplemented
        return (self.round, self.match_order, self.slot) == (other.round, other.match_order, other.slot)

    def __repr__(self):
        return f"Slot(round={self.round}, match_order={self.match_order}, slot={self.slot})"


class Resolution:
    """Outcome of resolving a match update."""

    def __init__(self, match: Match, decided: bool):
        self.match = match
        self.decided = decided

    def __repr__(self):
        return f"Resolution({self.match!r}, decided={self.decided})"


def status_rank(status: Optional[str]) -> int:
    """Position of a status in the draft -> in_progress -> completed order."""
    return STATUSES.index(status) if status in STATUSES else 0
