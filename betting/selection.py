"""
Selection text parsing.

A wager's selection string doubles as display text and as the description
of what has to happen for the bet to win:

    moneyline   "DUKE ML"       team to win outright
    spread      "UNC +3.5"      team score plus line must beat opponent
    total       "Over 145.5"    combined score against a threshold

Newly tracked wagers store the parsed condition next to the text; the
parser is still used for rows recorded before that.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Union

from betting.errors import MalformedSelection
from database.models import BetKind

MONEYLINE_SUFFIX = " ML"


class Direction(str, Enum):
    OVER = "over"
    UNDER = "under"


@dataclass(frozen=True)
class MoneylineCondition:
    team: str
    kind: ClassVar[BetKind] = BetKind.MONEYLINE

    def to_dict(self) -> Dict:
        return {"kind": self.kind.value, "team": self.team}


@dataclass(frozen=True)
class SpreadCondition:
    team: str
    line: float
    kind: ClassVar[BetKind] = BetKind.SPREAD

    def to_dict(self) -> Dict:
        return {"kind": self.kind.value, "team": self.team, "line": self.line}


@dataclass(frozen=True)
class TotalCondition:
    direction: Direction
    threshold: float
    kind: ClassVar[BetKind] = BetKind.TOTAL

    def to_dict(self) -> Dict:
        return {"kind": self.kind.value, "direction": self.direction.value, "threshold": self.threshold}


SettlementCondition = Union[MoneylineCondition, SpreadCondition, TotalCondition]


def _parse_number(token: str, selection: str, kind: BetKind) -> float:
    try:
        value = float(token)
    except ValueError:
        raise MalformedSelection(selection, kind.value, f"{token!r} is not a number") from None
    if not math.isfinite(value):
        raise MalformedSelection(selection, kind.value, f"{token!r} is not a finite number")
    return value


def parse_moneyline(selection: str) -> MoneylineCondition:
    text = selection.strip()
    if not text.endswith(MONEYLINE_SUFFIX):
        raise MalformedSelection(selection, BetKind.MONEYLINE.value, "missing ' ML' suffix")
    team = text[:-len(MONEYLINE_SUFFIX)].strip()
    if not team:
        raise MalformedSelection(selection, BetKind.MONEYLINE.value, "no team before ' ML'")
    return MoneylineCondition(team=team)


def parse_spread(selection: str) -> SpreadCondition:
    tokens = selection.split()
    if len(tokens) < 2:
        raise MalformedSelection(selection, BetKind.SPREAD.value, "expected '<TEAM> <LINE>'")
    line = _parse_number(tokens[1], selection, BetKind.SPREAD)
    return SpreadCondition(team=tokens[0], line=line)


def parse_total(selection: str) -> TotalCondition:
    tokens = selection.split()
    if len(tokens) < 2:
        raise MalformedSelection(selection, BetKind.TOTAL.value, "expected 'Over|Under <THRESHOLD>'")
    threshold = _parse_number(tokens[1], selection, BetKind.TOTAL)

    # Stored selections rely on substring detection, e.g. "Game Over 140.5"
    upper = selection.upper()
    if "OVER" in upper:
        direction = Direction.OVER
    elif "UNDER" in upper:
        direction = Direction.UNDER
    else:
        raise MalformedSelection(selection, BetKind.TOTAL.value, "no Over/Under direction")
    return TotalCondition(direction=direction, threshold=threshold)


_PARSERS = {
    BetKind.MONEYLINE: parse_moneyline,
    BetKind.SPREAD: parse_spread,
    BetKind.TOTAL: parse_total,
}


def parse_selection(selection: str, kind) -> SettlementCondition:
    """Decode a selection string for the given bet kind."""
    try:
        kind = BetKind(kind)
    except ValueError:
        raise MalformedSelection(selection, kind, "unknown bet kind") from None
    if not isinstance(selection, str):
        raise MalformedSelection(selection, kind.value, "selection is not text")
    return _PARSERS[kind](selection)


def format_selection(condition: SettlementCondition) -> str:
    """Canonical display text for a condition."""
    if isinstance(condition, MoneylineCondition):
        return f"{condition.team}{MONEYLINE_SUFFIX}"
    if isinstance(condition, SpreadCondition):
        return f"{condition.team} {condition.line:+g}"
    if isinstance(condition, TotalCondition):
        return f"{condition.direction.value.capitalize()} {condition.threshold:g}"
    raise TypeError(f"Not a settlement condition: {condition!r}")


def condition_from_dict(data: Dict) -> SettlementCondition:
    """Rebuild a condition stored with to_dict()."""
    kind = BetKind(data["kind"])
    if kind is BetKind.MONEYLINE:
        return MoneylineCondition(team=data["team"])
    if kind is BetKind.SPREAD:
        return SpreadCondition(team=data["team"], line=float(data["line"]))
    return TotalCondition(direction=Direction(data["direction"]), threshold=float(data["threshold"]))
