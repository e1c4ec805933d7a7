"""Grading of a single wager against a final score."""
import logging

from betting.errors import BettingError, GradingFailure, UnresolvedTeamReference
from betting.selection import (
    Direction, MoneylineCondition, SettlementCondition, SpreadCondition, TotalCondition,
    parse_selection,
)
from database.models import BetKind, BetResult

logger = logging.getLogger(__name__)


def _same_team(a: str, b: str) -> bool:
    return a.upper() == b.upper()


def grade_moneyline(condition: MoneylineCondition, home_team: str, away_team: str,
                    home_score: float, away_score: float) -> BetResult:
    if home_score > away_score:
        winner = home_team
    elif away_score > home_score:
        winner = away_team
    else:
        return BetResult.PUSH
    return BetResult.WON if _same_team(condition.team, winner) else BetResult.LOST


def grade_spread(condition: SpreadCondition, home_team: str, away_team: str,
                 home_score: float, away_score: float,
                 push_on_tie: bool = False) -> BetResult:
    """
    Add the line to the picked team's score and compare with the opponent.

    An exact tie on the adjusted score is a loss unless push_on_tie is set.
    """
    if _same_team(condition.team, home_team):
        own, opponent = home_score, away_score
    elif _same_team(condition.team, away_team):
        own, opponent = away_score, home_score
    else:
        raise UnresolvedTeamReference(condition.team, home_team, away_team)

    adjusted = own + condition.line
    if adjusted > opponent:
        return BetResult.WON
    if adjusted == opponent and push_on_tie:
        return BetResult.PUSH
    return BetResult.LOST


def grade_total(condition: TotalCondition, home_score: float, away_score: float) -> BetResult:
    game_total = home_score + away_score
    if game_total == condition.threshold:
        return BetResult.PUSH
    if condition.direction is Direction.OVER:
        won = game_total > condition.threshold
    else:
        won = game_total < condition.threshold
    return BetResult.WON if won else BetResult.LOST


def grade(condition: SettlementCondition, kind, home_team: str, away_team: str,
          home_score: float, away_score: float, push_on_spread_tie: bool = False) -> BetResult:
    """
    Decide won / lost / push for a parsed condition.

    Raises:
        GradingFailure: the condition does not belong to the bet kind.
        UnresolvedTeamReference: a spread team is neither home nor away.
    """
    kind = BetKind(kind)
    if getattr(condition, "kind", None) is not kind:
        raise GradingFailure(f"{type(condition).__name__} cannot grade a {kind.value} bet")

    if kind is BetKind.MONEYLINE:
        return grade_moneyline(condition, home_team, away_team, home_score, away_score)
    if kind is BetKind.SPREAD:
        return grade_spread(condition, home_team, away_team, home_score, away_score,
                            push_on_tie=push_on_spread_tie)
    return grade_total(condition, home_score, away_score)


def grade_selection(selection: str, kind, home_team: str, away_team: str,
                    home_score: float, away_score: float,
                    push_on_spread_tie: bool = False) -> BetResult:
    """Parse and grade in one step; any failure comes back as GradingFailure."""
    try:
        condition = parse_selection(selection, kind)
        return grade(condition, kind, home_team, away_team, home_score, away_score,
                     push_on_spread_tie=push_on_spread_tie)
    except GradingFailure:
        raise
    except BettingError as e:
        logger.debug("could not grade %r: %s", selection, e)
        raise GradingFailure(str(e)) from e
