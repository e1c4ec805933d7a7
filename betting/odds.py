"""
American odds arithmetic.

Positive odds quote the profit on a 100 stake (+150 wins 150 on 100);
negative odds quote the stake needed to win 100 (-110 risks 110 to win 100).
"""
import math

from betting.errors import InvalidOdds


def _check_odds(american_odds: float) -> float:
    try:
        odds = float(american_odds)
    except (TypeError, ValueError):
        raise InvalidOdds(american_odds) from None
    if odds == 0 or not math.isfinite(odds):
        raise InvalidOdds(american_odds)
    return odds


def profit(stake: float, american_odds: float) -> float:
    """Net winnings on a winning bet, excluding the returned stake."""
    odds = _check_odds(american_odds)
    if odds > 0:
        return stake * (odds / 100)
    return stake * (100 / abs(odds))


def payout(stake: float, american_odds: float) -> float:
    """Total returned on a winning bet: stake plus profit."""
    return stake + profit(stake, american_odds)


def american_to_decimal(american_odds: float) -> float:
    odds = _check_odds(american_odds)
    if odds > 0:
        return (odds / 100) + 1
    return (100 / abs(odds)) + 1


def decimal_to_american(dec_odds: float) -> float:
    if dec_odds <= 1.0:
        raise InvalidOdds(dec_odds)
    if dec_odds >= 2.0:
        return (dec_odds - 1) * 100
    return -100 / (dec_odds - 1)


def format_american(american_odds: float) -> str:
    odds = _check_odds(american_odds)
    text = f"{odds:g}"
    return f"+{text}" if odds > 0 else text
