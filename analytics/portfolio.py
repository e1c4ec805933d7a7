"""
Portfolio performance over a user's settled wagers.

Produces the figures behind the home screen: total profit and loss, ROI,
win/loss/push record and the cumulative P&L curve for a lookback window.
Everything here works on a list of wagers handed in by the caller and does
no I/O of its own.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

import pandas as pd

from betting.odds import profit
from database.models import BetResult, Wager, to_utc, utcnow


class Timeframe(str, Enum):
    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    YEAR_TO_DATE = "YTD"
    ALL_TIME = "All"

    @classmethod
    def parse(cls, value: str) -> "Timeframe":
        for timeframe in cls:
            if timeframe.value.upper() == str(value).strip().upper():
                return timeframe
        raise ValueError(f"Unknown timeframe {value!r}; expected one of "
                         f"{', '.join(t.value for t in cls)}")


class EquityPoint(NamedTuple):
    timestamp: datetime
    pnl: float


@dataclass(frozen=True)
class PortfolioSnapshot:
    total_pnl: float
    total_staked: float
    roi: float
    equity: Tuple[EquityPoint, ...]
    since: datetime
    now: datetime
    settled: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.settled if self.settled > 0 else 0.0


def wager_profit(wager: Wager) -> float:
    """Signed profit of a settled wager; pending wagers count as 0."""
    if wager.result is BetResult.WON:
        return profit(wager.stake, wager.odds)
    if wager.result is BetResult.LOST:
        return -wager.stake
    return 0.0


def resolve_since(timeframe: Timeframe, wagers: Iterable[Wager] = (),
                  now: Optional[datetime] = None) -> datetime:
    """Start of the lookback window ending at now."""
    now = to_utc(now) if now else utcnow()
    timeframe = Timeframe(timeframe)

    if timeframe is Timeframe.ONE_DAY:
        return now - timedelta(days=1)
    if timeframe is Timeframe.ONE_WEEK:
        return now - timedelta(weeks=1)
    if timeframe in (Timeframe.ONE_MONTH, Timeframe.THREE_MONTHS):
        months = 1 if timeframe is Timeframe.ONE_MONTH else 3
        return (pd.Timestamp(now) - pd.DateOffset(months=months)).to_pydatetime()
    if timeframe is Timeframe.YEAR_TO_DATE:
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    placed = [to_utc(w.placed_at) for w in wagers]
    return min(placed) if placed else now


def summarize(wagers: Sequence[Wager], since: Optional[datetime] = None,
              now: Optional[datetime] = None) -> PortfolioSnapshot:
    """
    Aggregate settled wagers placed at or after since.

    With no since the window starts at the earliest wager. The equity curve
    always starts at (since, 0); it ends at (now, total) unless the last
    wager is already at or after now. With nothing settled in the window the
    curve is a flat zero line from since to now.
    """
    now = to_utc(now) if now else utcnow()
    since = to_utc(since) if since else resolve_since(Timeframe.ALL_TIME, wagers, now)

    filtered = sorted(
        (w for w in wagers if w.result.is_settled and to_utc(w.placed_at) >= since),
        key=lambda w: to_utc(w.placed_at),
    )

    if not filtered:
        return PortfolioSnapshot(
            total_pnl=0.0,
            total_staked=0.0,
            roi=0.0,
            equity=(EquityPoint(since, 0.0), EquityPoint(now, 0.0)),
            since=since,
            now=now,
        )

    total_staked = 0.0
    running = 0.0
    points: List[EquityPoint] = [EquityPoint(since, 0.0)]
    for wager in filtered:
        total_staked += wager.stake
        running += wager_profit(wager)
        points.append(EquityPoint(to_utc(wager.placed_at), running))

    if points[-1].timestamp < now:
        points.append(EquityPoint(now, running))

    return PortfolioSnapshot(
        total_pnl=running,
        total_staked=total_staked,
        roi=running / total_staked if total_staked > 0 else 0.0,
        equity=tuple(points),
        since=since,
        now=now,
        settled=len(filtered),
        wins=sum(1 for w in filtered if w.result is BetResult.WON),
        losses=sum(1 for w in filtered if w.result is BetResult.LOST),
        pushes=sum(1 for w in filtered if w.result is BetResult.PUSH),
    )


def summarize_timeframe(wagers: Sequence[Wager], timeframe,
                        now: Optional[datetime] = None) -> PortfolioSnapshot:
    now = to_utc(now) if now else utcnow()
    since = resolve_since(Timeframe(timeframe), wagers, now)
    return summarize(wagers, since=since, now=now)


def equity_frame(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    """Equity curve as a DataFrame with timestamp and pnl columns."""
    return pd.DataFrame(list(snapshot.equity), columns=["timestamp", "pnl"])


@dataclass(frozen=True)
class WagerView:
    """A wager joined with the matchup it was placed on."""
    wager: Wager
    home_team: str
    away_team: str
    game_date: datetime

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"


@dataclass(frozen=True)
class Activity:
    tracked: Tuple[WagerView, ...]
    recent: Tuple[WagerView, ...]


def _view(wager: Wager, game_cache) -> WagerView:
    game = game_cache.get(wager.game_id)
    if game is None:
        return WagerView(wager, "Unknown", "Unknown", wager.placed_at)
    return WagerView(wager, game.home_team, game.away_team, game.start_time)


def recent_activity(wagers: Iterable[Wager], game_cache, limit: int = 10) -> Activity:
    """Pending wagers plus the latest placed wagers, newest first."""
    newest_first = sorted(wagers, key=lambda w: to_utc(w.placed_at), reverse=True)
    return Activity(
        tracked=tuple(_view(w, game_cache) for w in newest_first if w.result is BetResult.PENDING),
        recent=tuple(_view(w, game_cache) for w in newest_first[:limit]),
    )
