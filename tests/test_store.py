import sqlite3
from datetime import datetime, timezone

import pytest

from betting.ledger import track_wager
from betting.errors import InvalidOdds, InvalidStake, MalformedSelection
from betting.selection import TotalCondition, Direction
from database.cache import GameCache
from database.errors import StoreError
from database.models import BetResult, Final, Game, InProgress, NotPlayed, status_from_row

PLACED = datetime(2025, 7, 14, 12, tzinfo=timezone.utc)


def test_game_round_trip(game_store, duke_unc):
    game = game_store.get_game("game123")
    assert game == duke_unc
    assert isinstance(game.status, NotPlayed)
    assert game.neutral_site is True
    assert game_store.get_game("missing") is None


def test_finalize_game_only_once(game_store, duke_unc):
    assert game_store.finalize_game("game123", 72, 68) is True
    assert game_store.finalize_game("game123", 10, 0) is False
    assert game_store.get_game("game123").status == Final(72, 68)


def test_list_games_by_status(game_store, duke_unc):
    game_store.add_game(Game("g2", "KU", "UK", PLACED, status=InProgress()))
    game_store.finalize_game("game123", 72, 68)

    assert [g.id for g in game_store.list_games(status="final")] == ["game123"]
    assert [g.id for g in game_store.list_games(status="IP")] == ["g2"]
    assert len(game_store.list_games(limit=1)) == 1


def test_duplicate_game_raises_store_error(game_store, duke_unc):
    with pytest.raises(StoreError):
        game_store.add_game(duke_unc)


def test_status_from_row():
    assert status_from_row("FINAL", 1, 2) == Final(1, 2)
    assert isinstance(status_from_row("IP", None, None), InProgress)
    with pytest.raises(ValueError):
        status_from_row("FINAL", None, 2)
    with pytest.raises(ValueError):
        status_from_row("POSTPONED", None, None)


def test_track_wager_stores_condition(duke_unc, wager_store):
    wager = track_wager(wager_store, "u1", "game123", "total", " Under 145.5 ", -110, 25, PLACED)

    stored = wager_store.get_wager("u1", wager.id)
    assert stored == wager
    assert stored.selection == "Under 145.5"
    assert stored.condition == TotalCondition(Direction.UNDER, 145.5)
    assert stored.result is BetResult.PENDING


@pytest.mark.parametrize(
    "odds, stake, selection, error",
    [
        (0, 10, "DUKE ML", InvalidOdds),
        (-110, 0, "DUKE ML", InvalidStake),
        (-110, -5, "DUKE ML", InvalidStake),
        (-110, 10, "DUKE", MalformedSelection),
    ],
)
def test_track_wager_validates(duke_unc, wager_store, odds, stake, selection, error):
    with pytest.raises(error):
        track_wager(wager_store, "u1", "game123", "moneyline", selection, odds, stake, PLACED)
    assert wager_store.list_wagers("u1") == []


def test_wager_on_unknown_game_is_rejected(db_path, wager_store):
    with pytest.raises(StoreError):
        track_wager(wager_store, "u1", "nope", "moneyline", "DUKE ML", -110, 10, PLACED)


def test_results_only_move_forward(duke_unc, wager_store):
    wager = track_wager(wager_store, "u1", "game123", "moneyline", "DUKE ML", -110, 10, PLACED)

    with pytest.raises(ValueError):
        wager_store.update_wager_result("u1", wager.id, BetResult.PENDING)
    assert wager_store.update_wager_result("u1", wager.id, BetResult.WON) is True
    assert wager_store.update_wager_result("u1", wager.id, BetResult.LOST) is False
    assert wager_store.get_wager("u1", wager.id).result is BetResult.WON


def test_wagers_are_owned_per_user(duke_unc, wager_store):
    track_wager(wager_store, "u1", "game123", "moneyline", "DUKE ML", -110, 10, PLACED, wager_id="w1")
    track_wager(wager_store, "u2", "game123", "moneyline", "UNC ML", -110, 10, PLACED, wager_id="w1")

    assert wager_store.delete_wager("u2", "w1") is True
    assert wager_store.delete_wager("u2", "w1") is False
    assert [w.id for w in wager_store.list_wagers("u1")] == ["w1"]
    assert [w.user_id for w in wager_store.list_pending_wagers_for_game("game123")] == ["u1"]


def test_game_cache_reads_through_once(game_store, duke_unc):
    calls = []

    class CountingStore:
        def get_game(self, game_id):
            calls.append(game_id)
            return game_store.get_game(game_id)

    cache = GameCache(CountingStore())
    assert cache.get("game123") == duke_unc
    assert cache.get("game123") == duke_unc
    assert cache.get("missing") is None
    assert calls == ["game123", "missing"]
    assert "game123" in cache and len(cache) == 1

    cache.invalidate("game123")
    cache.get("game123")
    assert calls[-1] == "game123"

    cache.prime([Game("g2", "KU", "UK", PLACED)])
    cache.invalidate()
    assert len(cache) == 0


@pytest.mark.parametrize("stored", ["not json", '{"kind": "total", "threshold": 140}', "[]", "null"])
def test_unreadable_condition_reads_as_missing(duke_unc, wager_store, db_path, stored):
    track_wager(wager_store, "u1", "game123", "total", "Over 140", -110, 10, PLACED, wager_id="w1")
    conn = sqlite3.connect(str(db_path))
    conn.execute("UPDATE wagers SET condition_json = ? WHERE id = 'w1'", (stored,))
    conn.commit()
    conn.close()

    wager = wager_store.get_wager("u1", "w1")
    assert wager.condition is None
    assert wager.selection == "Over 140"
