"""
Flask JSON API for the single elimination bracket service.
"""
import os
import re
import logging
from flask import Flask, request, jsonify, g
from bracket.display import get_bracket_display
from bracket.errors import BracketError, BracketIntegrityError, ValidationError
from bracket.models import UNSET, MatchUpdate
from storage import Store

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
app.config['DATA_DIR'] = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
app.config['LOCK_TIMEOUT'] = float(os.environ.get('BRACKET_LOCK_TIMEOUT', '10'))


def get_store() -> Store:
    """Return the store for the current request."""
    if 'store' not in g:
        g.store = Store(app.config['DATA_DIR'], lock_timeout=app.config['LOCK_TIMEOUT'])
    return g.store


@app.errorhandler(BracketError)
def handle_bracket_error(error):
    if isinstance(error, BracketIntegrityError):
        app.logger.error(f'Bracket integrity failure on {request.method} {request.path}: {error.message}')
    else:
        app.logger.info(f'{error.kind} on {request.method} {request.path}: {error.message}')
    return jsonify(error.to_dict()), error.status_code


# --- request parsing ---

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _require_name(data: dict) -> str:
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Name is required')
    return name.strip()


def _parse_int(data: dict, field: str, minimum: int = None, nullable: bool = False):
    """Read an integer field, or UNSET when the field was not sent."""
    if field not in data:
        return UNSET
    value = data[field]
    if value is None:
        if nullable:
            return None
        raise ValidationError(f'{field} must not be null')
    # Scores may arrive as numeric strings from form inputs
    if isinstance(value, str):
        if not re.fullmatch(r'-?[0-9]+', value.strip()):
            raise ValidationError(f'{field} must be an integer')
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{field} must be an integer')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    return value


def _require_int(data: dict, field: str, minimum: int = None) -> int:
    value = _parse_int(data, field, minimum=minimum)
    if value is UNSET:
        raise ValidationError(f'{field} is required')
    return value


def parse_match_update(data: dict) -> MatchUpdate:
    """Build a MatchUpdate from a PATCH body; absent keys stay UNSET."""
    finalize = data.get('finalize', data.get('advance_winner', False))
    if not isinstance(finalize, bool):
        raise ValidationError('finalize must be a boolean')
    return MatchUpdate(
        team1_id=_parse_int(data, 'team1_id', minimum=1, nullable=True),
        team2_id=_parse_int(data, 'team2_id', minimum=1, nullable=True),
        score1=_parse_int(data, 'score1', minimum=0),
        score2=_parse_int(data, 'score2', minimum=0),
        finalize=finalize,
    )


# --- serialization ---

def _team_with_players(team, players: dict) -> dict:
    result = team.to_dict()
    p1 = players.get(team.player1_id)
    p2 = players.get(team.player2_id)
    result['player1'] = p1.to_dict() if p1 else None
    result['player2'] = p2.to_dict() if p2 else None
    return result


def _match_with_teams(match, teams: dict) -> dict:
    result = match.to_dict()
    for field, team_id in (('team1', match.team1_id), ('team2', match.team2_id),
                           ('winner', match.winner_id)):
        team = teams.get(team_id)
        result[field] = team.to_dict() if team else None
    return result


# --- routes ---

@app.route('/api/health')
def api_health():
    return jsonify({'status': 'ok'})


@app.route('/api/players', methods=['GET'])
def api_list_players():
    include_deleted = request.args.get('include_deleted', '').lower() in ('1', 'true', 'yes')
    players = get_store().list_players(include_deleted=include_deleted)
    return jsonify([p.to_dict() for p in players])


@app.route('/api/players', methods=['POST'])
def api_create_player():
    name = _require_name(_json_body())
    player = get_store().create_player(name)
    return jsonify(player.to_dict()), 201


@app.route('/api/players/<int:player_id>', methods=['DELETE'])
def api_delete_player(player_id):
    """Soft-delete a player; existing teams keep referencing it."""
    player = get_store().soft_delete_player(player_id)
    return jsonify(player.to_dict())


@app.route('/api/teams', methods=['GET'])
def api_list_teams():
    store = get_store()
    include_deleted = request.args.get('include_deleted', '').lower() in ('1', 'true', 'yes')
    players = {p.id: p for p in store.list_players(include_deleted=True)}
    return jsonify([_team_with_players(t, players)
                    for t in store.list_teams(include_deleted=include_deleted)])


@app.route('/api/teams', methods=['POST'])
def api_create_team():
    data = _json_body()
    name = _require_name(data)
    player1_id = _require_int(data, 'player1_id', minimum=1)
    player2_id = _require_int(data, 'player2_id', minimum=1)
    team = get_store().create_team(name, player1_id, player2_id)
    return jsonify(team.to_dict()), 201


@app.route('/api/teams/<int:team_id>', methods=['DELETE'])
def api_delete_team(team_id):
    """Soft-delete a team, freeing its players for new teams."""
    team = get_store().soft_delete_team(team_id)
    return jsonify(team.to_dict())


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    return jsonify([t.to_dict() for t in get_store().list_tournaments()])


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a draft tournament and its empty bracket."""
    data = _json_body()
    name = _require_name(data)
    team_count = _require_int(data, 'team_count')
    tournament = get_store().create_tournament(name, team_count)
    return jsonify(tournament.to_dict()), 201


@app.route('/api/tournaments/<int:tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    return jsonify(get_store().get_tournament(tournament_id).to_dict())


@app.route('/api/tournaments/<int:tournament_id>/matches', methods=['GET'])
def api_tournament_matches(tournament_id):
    store = get_store()
    matches = store.list_matches(tournament_id)
    teams = {t.id: t for t in store.list_teams(include_deleted=True)}
    return jsonify([_match_with_teams(m, teams) for m in matches])


@app.route('/api/tournaments/<int:tournament_id>/bracket', methods=['GET'])
def api_tournament_bracket(tournament_id):
    store = get_store()
    tournament = store.get_tournament(tournament_id)
    return jsonify(get_bracket_display(tournament, store.list_matches(tournament_id)))


@app.route('/api/matches/<int:match_id>', methods=['PATCH'])
def api_update_match(match_id):
    """
    Record a match result.

    Body fields: team1_id, team2_id, score1, score2 (all optional) and
    finalize (or advance_winner) to decide the winner from the scores.
    """
    update = parse_match_update(_json_body())
    resolution, _ = get_store().submit_match_result(match_id, update)
    return jsonify(resolution.match.to_dict())


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, port=5000)
