from datetime import datetime, timezone

import pytest

import config
from database.models import Game
from database.schema import init_db
from database.store import GameStore, WagerStore


@pytest.fixture(autouse=True)
def sqlite_only(monkeypatch):
    monkeypatch.setattr(config, "DB_URL", "")


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "wagers.db"
    init_db(path)
    return path


@pytest.fixture
def game_store(db_path):
    return GameStore(db_path)


@pytest.fixture
def wager_store(db_path):
    return WagerStore(db_path)


@pytest.fixture
def duke_unc(game_store):
    """DUKE hosting UNC, not yet played."""
    game = Game(
        id="game123",
        home_team="DUKE",
        away_team="UNC",
        start_time=datetime(2025, 7, 14, 18, 30, tzinfo=timezone.utc),
        neutral_site=True,
    )
    game_store.add_game(game)
    return game
