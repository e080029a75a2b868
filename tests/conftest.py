"""
Shared pytest fixtures for bracket service tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.builder import build_bracket
from bracket.models import Match


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setitem(app_module.app.config, 'DATA_DIR', str(data_dir))
    monkeypatch.setitem(app_module.app.config, 'LOCK_TIMEOUT', 1.0)
    return data_dir


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def store(temp_data_dir):
    """A store writing into the temporary data directory."""
    from storage import Store
    return Store(str(temp_data_dir), lock_timeout=1.0)


@pytest.fixture
def four_team_bracket():
    """Persisted-looking 4-team bracket: ids 1..3, tournament 1."""
    matches = build_bracket(4)
    for i, m in enumerate(matches, start=1):
        m.id = i
        m.tournament_id = 1
    return matches


@pytest.fixture
def seeded_store(store):
    """Store with 8 players and 4 teams (ids 1..4)."""
    players = [store.create_player(f"Player {i}") for i in range(1, 9)]
    for i in range(4):
        store.create_team(f"Team {i + 1}", players[i * 2].id, players[i * 2 + 1].id)
    return store


@pytest.fixture
def make_match():
    """Factory for a round-1 match with id 1 in tournament 1, overridden by keyword fields."""
    def _make(**fields):
        defaults = {'id': 1, 'tournament_id': 1, 'round': 1, 'match_order': 0}
        defaults.update(fields)
        return Match(**defaults)
    return _make
