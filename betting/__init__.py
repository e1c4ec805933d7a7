"""Betting module for grading and settling wagers."""
from betting.errors import (
    BettingError, InvalidOdds, InvalidStake, MalformedSelection, UnresolvedTeamReference,
    GradingFailure, SettlementError, GameNotFound, GameNotFinal, ScoreMismatch,
)
from betting.odds import profit, payout
from betting.selection import parse_selection, format_selection
from betting.grading import grade, grade_selection
from betting.settlement import SettlementProcessor, SettlementReport
from betting.ledger import track_wager

__all__ = [
    'BettingError', 'InvalidOdds', 'InvalidStake', 'MalformedSelection',
    'UnresolvedTeamReference', 'GradingFailure', 'SettlementError', 'GameNotFound',
    'GameNotFinal', 'ScoreMismatch', 'profit', 'payout', 'parse_selection', 'format_selection',
    'grade', 'grade_selection', 'SettlementProcessor', 'SettlementReport', 'track_wager',
]
