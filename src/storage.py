"""
YAML file store for players, teams, tournaments and matches.

All records live in one YAML document so that a match result submission
(merged match, propagated winner, tournament status) is written in a single
replace. Mutations hold a file lock for the whole read-compute-write cycle.
"""
import os
import logging
from contextlib import contextmanager
from typing import List, Optional, Tuple

import yaml
from filelock import FileLock, Timeout

from bracket.builder import build_bracket, validate_team_count
from bracket.errors import (
    InvalidTeamAssignment,
    MatchNotFound,
    NotFoundError,
    StoreBusy,
    TournamentNotFound,
    ValidationError,
)
from bracket.models import DRAFT, Match, MatchUpdate, Player, Resolution, Team, Tournament
from bracket.propagation import advance_winner
from bracket.resolver import resolve_match
from bracket.status import derive_status

logger = logging.getLogger(__name__)

DATA_FILE = 'bracket.yaml'
LOCK_FILE = '.lock'
SECTIONS = ('players', 'teams', 'tournaments', 'matches')


def _empty_data() -> dict:
    data = {section: [] for section in SECTIONS}
    data['next_ids'] = {section: 1 for section in SECTIONS}
    return data


class Store:
    def __init__(self, data_dir: str, lock_timeout: float = 10):
        self.data_dir = data_dir
        self.path = os.path.join(data_dir, DATA_FILE)
        os.makedirs(data_dir, exist_ok=True)
        self._lock = FileLock(os.path.join(data_dir, LOCK_FILE), timeout=lock_timeout)

    # --- raw file access ---

    def _load(self) -> dict:
        """Load the data file, filling in any missing section."""
        if not os.path.exists(self.path):
            return _empty_data()
        with open(self.path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not data:
            return _empty_data()
        defaults = _empty_data()
        for section in SECTIONS:
            if section not in data or data[section] is None:
                data[section] = []
        next_ids = data.get('next_ids') or {}
        for section in SECTIONS:
            if section not in next_ids:
                existing = [r['id'] for r in data[section]]
                next_ids[section] = max(existing) + 1 if existing else defaults['next_ids'][section]
        data['next_ids'] = next_ids
        return data

    def _save(self, data: dict):
        tmp_path = self.path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        os.replace(tmp_path, self.path)

    @contextmanager
    def transaction(self):
        """Yield the loaded data under the lock and write it back if no error was raised."""
        try:
            self._lock.acquire()
        except Timeout:
            raise StoreBusy(f'Timed out waiting for {self._lock.lock_file}')
        try:
            data = self._load()
            yield data
            self._save(data)
        finally:
            self._lock.release()

    @staticmethod
    def _allocate_id(data: dict, section: str) -> int:
        new_id = data['next_ids'][section]
        data['next_ids'][section] = new_id + 1
        return new_id

    # --- players ---

    def list_players(self, include_deleted: bool = False) -> List[Player]:
        players = [Player.from_dict(p) for p in self._load()['players']]
        if include_deleted:
            return players
        return [p for p in players if not p.deleted]

    def get_player(self, player_id: int) -> Optional[Player]:
        return _find_by_id(self.list_players(include_deleted=True), player_id)

    def create_player(self, name: str) -> Player:
        with self.transaction() as data:
            player = Player(id=self._allocate_id(data, 'players'), name=name)
            data['players'].append(player.to_dict())
        logger.info(f'Created player {player.id} ({player.name})')
        return player

    def soft_delete_player(self, player_id: int) -> Player:
        with self.transaction() as data:
            record = _find_record(data['players'], player_id)
            if record is None:
                raise NotFoundError(f'Player {player_id} not found')
            record['deleted'] = True
            return Player.from_dict(record)

    # --- teams ---

    def list_teams(self, include_deleted: bool = False) -> List[Team]:
        teams = [Team.from_dict(t) for t in self._load()['teams']]
        if include_deleted:
            return teams
        return [t for t in teams if not t.deleted]

    def get_team(self, team_id: int) -> Optional[Team]:
        return _find_by_id(self.list_teams(include_deleted=True), team_id)

    def is_player_used_in_any_team(self, player_id: int) -> bool:
        return any(t.has_player(player_id) for t in self.list_teams())

    def create_team(self, name: str, player1_id: int, player2_id: int) -> Team:
        """
        Create a team of two distinct, available players.

        A player is available when it is not deleted and not part of another
        non-deleted team.
        """
        if player1_id == player2_id:
            raise ValidationError('Players must be different')

        with self.transaction() as data:
            players = {p['id']: p for p in data['players']}
            active_teams = [Team.from_dict(t) for t in data['teams'] if not t.get('deleted')]
            for label, player_id in (('Player 1', player1_id), ('Player 2', player2_id)):
                player = players.get(player_id)
                if player is None or player.get('deleted'):
                    raise ValidationError(f'{label} ({player_id}) does not exist')
                if any(t.has_player(player_id) for t in active_teams):
                    raise ValidationError(f'{label} already used in another team')

            team = Team(id=self._allocate_id(data, 'teams'), name=name,
                        player1_id=player1_id, player2_id=player2_id)
            data['teams'].append(team.to_dict())
        logger.info(f'Created team {team.id} ({team.name})')
        return team

    def soft_delete_team(self, team_id: int) -> Team:
        with self.transaction() as data:
            record = _find_record(data['teams'], team_id)
            if record is None:
                raise NotFoundError(f'Team {team_id} not found')
            record['deleted'] = True
            return Team.from_dict(record)

    # --- tournaments ---

    def list_tournaments(self) -> List[Tournament]:
        tournaments = [Tournament.from_dict(t) for t in self._load()['tournaments']]
        return sorted(tournaments, key=lambda t: t.id)

    def get_tournament(self, tournament_id: int) -> Tournament:
        tournament = _find_by_id(self.list_tournaments(), tournament_id)
        if tournament is None:
            raise TournamentNotFound(f'Tournament {tournament_id} not found')
        return tournament

    def create_tournament(self, name: str, team_count: int) -> Tournament:
        """Create a draft tournament together with its full, empty bracket."""
        validate_team_count(team_count)
        specs = build_bracket(team_count)

        with self.transaction() as data:
            tournament = Tournament(id=self._allocate_id(data, 'tournaments'), name=name,
                                    team_count=team_count, status=DRAFT)
            data['tournaments'].append(tournament.to_dict())
            for spec in specs:
                spec.id = self._allocate_id(data, 'matches')
                spec.tournament_id = tournament.id
                data['matches'].append(spec.to_dict())
        logger.info(f'Created tournament {tournament.id} ({name}) with {len(specs)} matches')
        return tournament

    # --- matches ---

    def list_matches(self, tournament_id: int) -> List[Match]:
        """Matches of a tournament ordered by (round, match_order)."""
        data = self._load()
        if _find_record(data['tournaments'], tournament_id) is None:
            raise TournamentNotFound(f'Tournament {tournament_id} not found')
        return _tournament_matches(data, tournament_id)

    def get_match(self, match_id: int) -> Match:
        record = _find_record(self._load()['matches'], match_id)
        if record is None:
            raise MatchNotFound(f'Match {match_id} not found')
        return Match.from_dict(record)

    def submit_match_result(self, match_id: int, update: MatchUpdate) -> Tuple[Resolution, Tournament]:
        """
        Apply a match result as one atomic unit.

        Resolves the match, moves a newly decided winner into the next round
        and recomputes the tournament status. Everything is computed before
        the single write, so an error leaves the file untouched.
        """
        with self.transaction() as data:
            record = _find_record(data['matches'], match_id)
            if record is None:
                raise MatchNotFound(f'Match {match_id} not found')
            current = Match.from_dict(record)

            teams = {t['id']: t for t in data['teams']}
            for team_id in (update.team1_id, update.team2_id):
                if team_id and (team_id not in teams or teams[team_id].get('deleted')):
                    raise ValidationError(f'Team {team_id} does not exist')

            bracket = _tournament_matches(data, current.tournament_id)
            for team_id in (update.team1_id, update.team2_id):
                if not team_id:
                    continue
                for other in bracket:
                    if (other.id != match_id and other.round == current.round
                            and team_id in (other.team1_id, other.team2_id)):
                        raise InvalidTeamAssignment(
                            f'Team {team_id} is already placed in match {other.id} of round {current.round}'
                        )

            resolution = resolve_match(current, update)
            bracket = [resolution.match if m.id == match_id else m for m in bracket]
            changed = [resolution.match]

            if resolution.decided:
                advanced = advance_winner(resolution, bracket)
                if advanced is not None:
                    bracket = [advanced if m.id == advanced.id else m for m in bracket]
                    changed.append(advanced)
                    logger.info(f'Team {resolution.match.winner_id} advances from match {match_id} '
                                f'to match {advanced.id}')
                else:
                    logger.info(f'Final match {match_id} won by team {resolution.match.winner_id}')

            tournament_record = _find_record(data['tournaments'], current.tournament_id)
            if tournament_record is None:
                raise TournamentNotFound(f'Tournament {current.tournament_id} not found')
            tournament = Tournament.from_dict(tournament_record)
            new_status = derive_status(tournament.status, bracket)
            if new_status != tournament.status:
                logger.info(f'Tournament {tournament.id} status {tournament.status} -> {new_status}')
                tournament.status = new_status
                tournament_record['status'] = new_status

            for match in changed:
                _find_record(data['matches'], match.id).update(match.to_dict())

        return resolution, tournament


def _find_record(records: list, record_id) -> Optional[dict]:
    for record in records:
        if record['id'] == record_id:
            return record
    return None


def _find_by_id(items, item_id):
    return next((item for item in items if item.id == item_id), None)


def _tournament_matches(data: dict, tournament_id: int) -> List[Match]:
    matches = [Match.from_dict(m) for m in data['matches'] if m['tournament_id'] == tournament_id]
    return sorted(matches, key=lambda m: m.position)
