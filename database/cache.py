"""Read-through cache over the game store."""
import logging
from typing import Dict, Iterable, Optional

from database.models import Game

logger = logging.getLogger(__name__)


class GameCache:
    """
    Game lookups memoised per caller.

    The cache is owned by whoever creates it (a CLI command, a settlement
    run) and is passed explicitly to the code that needs game info.
    Missing games are not cached so a later insert becomes visible.
    """

    def __init__(self, game_store):
        self.game_store = game_store
        self._games: Dict[str, Game] = {}

    def get(self, game_id: str) -> Optional[Game]:
        game = self._games.get(game_id)
        if game is not None:
            return game
        game = self.game_store.get_game(game_id)
        if game is None:
            logger.debug("game %s not found", game_id)
            return None
        self._games[game_id] = game
        return game

    def prime(self, games: Iterable[Game]):
        for game in games:
            self._games[game.id] = game

    def invalidate(self, game_id: Optional[str] = None):
        if game_id is None:
            self._games.clear()
        else:
            self._games.pop(game_id, None)

    def __contains__(self, game_id) -> bool:
        return game_id in self._games

    def __len__(self) -> int:
        return len(self._games)
