"""Tracking new wagers."""
import math
import uuid
from datetime import datetime
from typing import Optional

from betting.errors import InvalidStake
from betting.odds import payout
from betting.selection import parse_selection
from database.models import BetKind, BetResult, Wager, to_utc, utcnow


def track_wager(wager_store, user_id: str, game_id: str, kind, selection: str,
                odds: float, stake: float, placed_at: Optional[datetime] = None,
                wager_id: Optional[str] = None) -> Wager:
    """
    Validate a bet and add it to the user's ledger as pending.

    The selection is parsed here and the resulting condition is stored with
    the wager, so settlement does not depend on re-reading the display text.

    Raises:
        InvalidOdds: odds are zero.
        InvalidStake: stake is not a positive amount.
        MalformedSelection: selection does not fit the bet kind.
    """
    kind = BetKind(kind)
    if not isinstance(stake, (int, float)) or not math.isfinite(stake) or stake <= 0:
        raise InvalidStake(stake)
    # Validates the odds
    payout(stake, odds)
    condition = parse_selection(selection, kind)

    wager = Wager(
        id=wager_id or uuid.uuid4().hex,
        user_id=user_id,
        game_id=game_id,
        kind=kind,
        selection=selection.strip(),
        odds=float(odds),
        stake=float(stake),
        placed_at=to_utc(placed_at) if placed_at else utcnow(),
        result=BetResult.PENDING,
        condition=condition,
    )
    wager_store.add_wager(wager)
    return wager
