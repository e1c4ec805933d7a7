"""Game and wager persistence."""
import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import List, Optional

from betting.selection import condition_from_dict
from database.db import get_connection
from database.errors import StoreError
from database.models import (
    BetKind, BetResult, Final, Game, Wager, parse_timestamp, status_from_row, to_utc, utcnow,
)

logger = logging.getLogger(__name__)


class _Store:
    def __init__(self, db_path=None):
        self.db_path = db_path

    @contextmanager
    def _session(self):
        """Connection that commits on success and surfaces driver errors as StoreError."""
        conn = get_connection(self.db_path)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        except StoreError:
            conn.rollback()
            raise
        finally:
            conn.close()


def _row_to_game(row) -> Game:
    return Game(
        id=row['id'],
        home_team=row['home_team'],
        away_team=row['away_team'],
        start_time=parse_timestamp(row['start_time']),
        neutral_site=bool(row['neutral_site']),
        status=status_from_row(row['state'], row['home_score'], row['away_score']),
    )


def _load_condition(row):
    """Stored condition, or None when absent or unreadable so the selection text is parsed."""
    if not row['condition_json']:
        return None
    try:
        return condition_from_dict(json.loads(row['condition_json']))
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Ignoring unreadable condition on wager %s: %s", row['id'], e)
        return None


def _row_to_wager(row) -> Wager:
    condition = _load_condition(row)
    return Wager(
        id=row['id'],
        user_id=row['user_id'],
        game_id=row['game_id'],
        kind=BetKind(row['kind']),
        selection=row['selection'],
        odds=float(row['odds']),
        stake=float(row['stake']),
        placed_at=parse_timestamp(row['placed_at']),
        result=BetResult(row['result']),
        condition=condition,
        settled_at=parse_timestamp(row['settled_at']) if row['settled_at'] else None,
    )


class GameStore(_Store):
    """Read/write access to game records."""

    def add_game(self, game: Game):
        home_score = away_score = None
        if isinstance(game.status, Final):
            home_score, away_score = game.status.home_score, game.status.away_score
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO games
                (id, home_team, away_team, start_time, neutral_site, state, home_score, away_score)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                game.id, game.home_team, game.away_team,
                to_utc(game.start_time).isoformat(), int(game.neutral_site),
                game.status.code, home_score, away_score,
            ))

    def get_game(self, game_id: str) -> Optional[Game]:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM games WHERE id = ?", (game_id,))
            row = cursor.fetchone()
        return _row_to_game(row) if row else None

    def list_games(self, status: Optional[str] = None, limit: Optional[int] = None) -> List[Game]:
        query = "SELECT * FROM games"
        params = []
        if status:
            query += " WHERE state = ?"
            params.append(status.upper())
        query += " ORDER BY start_time DESC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(query, tuple(params))
            rows = cursor.fetchall()
        return [_row_to_game(row) for row in rows]

    def finalize_game(self, game_id: str, home_score: int, away_score: int) -> bool:
        """
        Move a game to FINAL with the given score.

        Returns False when the game was already final (or does not exist);
        a final game is never rewritten.
        """
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE games
                SET state = 'FINAL', home_score = ?, away_score = ?
                WHERE id = ? AND state != 'FINAL'
            """, (home_score, away_score, game_id))
            return cursor.rowcount == 1


class WagerStore(_Store):
    """Read/write access to wagers, keyed by (user_id, wager_id)."""

    def add_wager(self, wager: Wager):
        condition_json = None
        if wager.condition is not None:
            condition_json = json.dumps(wager.condition.to_dict())
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO wagers
                (id, user_id, game_id, kind, selection, condition_json,
                 odds, stake, result, placed_at, settled_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                wager.id, wager.user_id, wager.game_id, wager.kind.value,
                wager.selection, condition_json, wager.odds, wager.stake,
                wager.result.value, to_utc(wager.placed_at).isoformat(),
                to_utc(wager.settled_at).isoformat() if wager.settled_at else None,
            ))

    def get_wager(self, user_id: str, wager_id: str) -> Optional[Wager]:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM wagers WHERE user_id = ? AND id = ?",
                (user_id, wager_id),
            )
            row = cursor.fetchone()
        return _row_to_wager(row) if row else None

    def delete_wager(self, user_id: str, wager_id: str) -> bool:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM wagers WHERE user_id = ? AND id = ?",
                (user_id, wager_id),
            )
            return cursor.rowcount == 1

    def list_wagers(self, user_id: str) -> List[Wager]:
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM wagers
                WHERE user_id = ?
                ORDER BY placed_at
            """, (user_id,))
            rows = cursor.fetchall()
        return [_row_to_wager(row) for row in rows]

    def list_pending_wagers_for_game(self, game_id: str) -> List[Wager]:
        """Pending wagers on a game across every user."""
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM wagers
                WHERE game_id = ? AND result = 'pending'
                ORDER BY user_id, id
            """, (game_id,))
            rows = cursor.fetchall()
        return [_row_to_wager(row) for row in rows]

    def update_wager_result(self, user_id: str, wager_id: str, result: BetResult) -> bool:
        """
        Record a settled result.

        Only a pending wager is updated; returns False when the wager is
        missing or already settled so results never move backwards.
        """
        if not BetResult(result).is_settled:
            raise ValueError("A wager can only be settled to won, lost or push")
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE wagers
                SET result = ?, settled_at = ?
                WHERE user_id = ? AND id = ? AND result = 'pending'
            """, (BetResult(result).value, utcnow().isoformat(), user_id, wager_id))
            return cursor.rowcount == 1
