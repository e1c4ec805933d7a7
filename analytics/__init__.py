"""Portfolio analytics module."""
from analytics.portfolio import (
    Timeframe, EquityPoint, PortfolioSnapshot, summarize, summarize_timeframe,
    resolve_since, wager_profit, equity_frame, recent_activity,
)

__all__ = [
    'Timeframe', 'EquityPoint', 'PortfolioSnapshot', 'summarize', 'summarize_timeframe',
    'resolve_since', 'wager_profit', 'equity_frame', 'recent_activity',
]
