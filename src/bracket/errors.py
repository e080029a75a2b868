"""
Errors raised by the bracket engine and the store.

Every error carries a stable ``kind`` tag and the HTTP status the API
returns for it.
"""


class BracketError(Exception):
    kind = 'error'
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.message, 'kind': self.kind}


class ValidationError(BracketError):
    kind = 'validation'
    status_code = 400


class InvalidBracketSize(ValidationError):
    kind = 'invalid_bracket_size'


class InvalidTeamAssignment(ValidationError):
    kind = 'invalid_team_assignment'


class NotFoundError(BracketError):
    kind = 'not_found'
    status_code = 404


class MatchNotFound(NotFoundError):
    kind = 'match_not_found'


class TournamentNotFound(NotFoundError):
    kind = 'tournament_not_found'


class BracketIntegrityError(BracketError):
    """Downstream slot is already occupied; the bracket must not be overwritten."""
    kind = 'bracket_integrity'
    status_code = 409


class StoreBusy(BracketError):
    kind = 'store_busy'
    status_code = 503
