"""Data models for the wager ledger."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from betting.selection import SettlementCondition


class BetKind(str, Enum):
    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class BetResult(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"

    @property
    def is_settled(self) -> bool:
        return self is not BetResult.PENDING


@dataclass(frozen=True)
class NotPlayed:
    code = "NP"


@dataclass(frozen=True)
class InProgress:
    code = "IP"


@dataclass(frozen=True)
class Final:
    home_score: int
    away_score: int
    code = "FINAL"


GameStatus = Union[NotPlayed, InProgress, Final]


def status_from_row(code: str, home_score: Optional[int], away_score: Optional[int]) -> GameStatus:
    """Decode the stored (state, homeScore, awayScore) triple."""
    code = (code or "NP").upper()
    if code == "FINAL":
        if home_score is None or away_score is None:
            raise ValueError("FINAL game status requires both scores")
        return Final(int(home_score), int(away_score))
    if code == "IP":
        return InProgress()
    if code == "NP":
        return NotPlayed()
    raise ValueError(f"Unknown game status code: {code!r}")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


@dataclass
class Game:
    id: str
    home_team: str
    away_team: str
    start_time: datetime
    neutral_site: bool = False
    status: GameStatus = field(default_factory=NotPlayed)

    @property
    def is_final(self) -> bool:
        return isinstance(self.status, Final)

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"

    @property
    def score_text(self) -> str:
        if isinstance(self.status, Final):
            return f"{self.status.home_score} - {self.status.away_score}"
        return self.status.code


@dataclass
class Wager:
    id: str
    user_id: str
    game_id: str
    kind: BetKind
    selection: str
    odds: float
    stake: float
    placed_at: datetime
    result: BetResult = BetResult.PENDING
    condition: Optional["SettlementCondition"] = None  # captured at tracking time
    settled_at: Optional[datetime] = None

