"""Settlement of every pending wager on a finished game."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Tuple

from betting.errors import (
    BettingError, GameNotFinal, GameNotFound, GradingFailure, ScoreMismatch,
)
from betting.grading import grade
from betting.selection import SettlementCondition, format_selection, parse_selection
from database.errors import StoreError
from database.models import BetResult, Final, Game, Wager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettledWager:
    user_id: str
    wager_id: str
    result: BetResult
    condition: SettlementCondition


@dataclass(frozen=True)
class WagerFailure:
    user_id: str
    wager_id: str
    error: str
    message: str


@dataclass(frozen=True)
class SettlementReport:
    """Outcome of one settlement run for a game."""
    game_id: str
    home_score: int
    away_score: int
    settled: Tuple[SettledWager, ...] = field(default_factory=tuple)
    failures: Tuple[WagerFailure, ...] = field(default_factory=tuple)
    # (user_id, wager_id) pairs that were no longer pending at write time
    skipped: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def settled_count(self) -> int:
        return len(self.settled)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def _count(self, result: BetResult) -> int:
        return sum(1 for s in self.settled if s.result is result)

    @property
    def won(self) -> int:
        return self._count(BetResult.WON)

    @property
    def lost(self) -> int:
        return self._count(BetResult.LOST)

    @property
    def pushed(self) -> int:
        return self._count(BetResult.PUSH)


class SettlementProcessor:
    """
    Grades all pending wagers on a game and persists their results.

    Only pending wagers are read, and the store only updates rows that are
    still pending, so a run can be repeated safely after a crash or after
    fixing a bad selection. One wager failing to parse, grade or save never
    stops the rest of the batch; failures are collected in the report.
    """

    def __init__(self, game_store, wager_store, game_cache=None,
                 max_workers: int = 1, push_on_spread_tie: bool = False):
        self.game_store = game_store
        self.wager_store = wager_store
        self.game_cache = game_cache
        self.max_workers = max(1, max_workers)
        self.push_on_spread_tie = push_on_spread_tie

    def _get_game(self, game_id: str) -> Game:
        if self.game_cache is not None:
            game = self.game_cache.get(game_id)
        else:
            game = self.game_store.get_game(game_id)
        if game is None:
            raise GameNotFound(game_id)
        return game

    def finalize_and_settle(self, game_id: str, home_score: int, away_score: int) -> SettlementReport:
        """Mark the game final with the given score, then settle its wagers."""
        game = self._get_game(game_id)
        if not game.is_final:
            self.game_store.finalize_game(game_id, home_score, away_score)
            logger.info("Finalized game %s (%s) at %s-%s",
                        game_id, game.matchup, home_score, away_score)
            if self.game_cache is not None:
                self.game_cache.invalidate(game_id)
        return self.settle_game(game_id, home_score, away_score)

    def settle_game(self, game_id: str, home_score: int, away_score: int) -> SettlementReport:
        game = self._get_game(game_id)
        if isinstance(game.status, Final):
            recorded = (game.status.home_score, game.status.away_score)
            if recorded != (home_score, away_score):
                raise ScoreMismatch(game_id, recorded, (home_score, away_score))
        else:
            raise GameNotFinal(game_id, game.status.code)

        pending = self.wager_store.list_pending_wagers_for_game(game_id)
        logger.info("Settling %d pending wager(s) for %s: %s %s @ %s %s",
                    len(pending), game_id, game.away_team, away_score,
                    game.home_team, home_score)

        def settle(wager: Wager):
            return self._settle_wager(wager, game, home_score, away_score)

        if self.max_workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(settle, pending))
        else:
            outcomes = [settle(wager) for wager in pending]

        settled: List[SettledWager] = []
        failures: List[WagerFailure] = []
        skipped: List[Tuple[str, str]] = []
        for outcome in outcomes:
            if isinstance(outcome, SettledWager):
                settled.append(outcome)
            elif isinstance(outcome, WagerFailure):
                failures.append(outcome)
            else:
                skipped.append(outcome)

        report = SettlementReport(
            game_id=game_id,
            home_score=home_score,
            away_score=away_score,
            settled=tuple(sorted(settled, key=lambda s: (s.user_id, s.wager_id))),
            failures=tuple(sorted(failures, key=lambda f: (f.user_id, f.wager_id))),
            skipped=tuple(sorted(skipped)),
        )
        logger.info("Settled %d wager(s) for %s (W: %d L: %d P: %d), %d failed, %d skipped",
                    report.settled_count, game_id, report.won, report.lost, report.pushed,
                    report.failed_count, len(report.skipped))
        return report

    def _condition_for(self, wager: Wager) -> SettlementCondition:
        if wager.condition is not None:
            return wager.condition
        return parse_selection(wager.selection, wager.kind)

    def _settle_wager(self, wager: Wager, game: Game, home_score: int, away_score: int):
        fields = {"game_id": game.id, "user_id": wager.user_id, "wager_id": wager.id}
        try:
            condition = self._condition_for(wager)
            result = grade(condition, wager.kind, game.home_team, game.away_team,
                           home_score, away_score,
                           push_on_spread_tie=self.push_on_spread_tie)
        except BettingError as e:
            # Report the underlying cause (MalformedSelection, UnresolvedTeamReference, ...)
            cause = e.__cause__ if isinstance(e, GradingFailure) and e.__cause__ else e
            logger.warning("Could not grade wager %s (%r): %s", wager.id, wager.selection, cause,
                           extra=dict(fields, event="settlement.failed", error=type(cause).__name__))
            return WagerFailure(wager.user_id, wager.id, type(cause).__name__, str(cause))

        try:
            updated = self.wager_store.update_wager_result(wager.user_id, wager.id, result)
        except StoreError as e:
            logger.error("Could not save result for wager %s: %s", wager.id, e,
                         extra=dict(fields, event="settlement.failed", error="StoreError"))
            return WagerFailure(wager.user_id, wager.id, "StoreError", str(e))

        if not updated:
            logger.info("Wager %s was already settled", wager.id,
                        extra=dict(fields, event="settlement.skipped"))
            return (wager.user_id, wager.id)

        logger.info("Graded wager %s: %s -> %s", wager.id, format_selection(condition), result.value,
                    extra=dict(fields, event="settlement.graded",
                               condition=condition.to_dict(), result=result.value))
        return SettledWager(wager.user_id, wager.id, result, condition)
