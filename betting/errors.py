"""Exceptions raised while tracking and settling wagers."""


class BettingError(Exception):
    """Base class for wager tracking and settlement errors."""


class InvalidOdds(BettingError, ValueError):
    """American odds of zero (or not a finite number) have no defined payout."""

    def __init__(self, odds):
        super().__init__(f"Invalid American odds: {odds!r}")
        self.odds = odds


class InvalidStake(BettingError, ValueError):
    def __init__(self, stake):
        super().__init__(f"Stake must be a positive amount, got {stake!r}")
        self.stake = stake


class MalformedSelection(BettingError, ValueError):
    """Selection text does not match the grammar for its bet kind."""

    def __init__(self, selection, kind, reason: str = ""):
        message = f"Malformed {kind} selection {selection!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.selection = selection
        self.kind = kind
        self.reason = reason


class UnresolvedTeamReference(BettingError):
    """A spread selection names a team that is neither home nor away."""

    def __init__(self, team: str, home_team: str, away_team: str):
        super().__init__(
            f"Team {team!r} matches neither home ({home_team!r}) nor away ({away_team!r})"
        )
        self.team = team
        self.home_team = home_team
        self.away_team = away_team


class GradingFailure(BettingError):
    """A wager could not be graded; the underlying error is chained as __cause__."""

    def __init__(self, message: str, wager_id=None):
        super().__init__(message)
        self.wager_id = wager_id


class SettlementError(BettingError):
    """A settlement batch could not start."""


class GameNotFound(SettlementError):
    def __init__(self, game_id):
        super().__init__(f"Game {game_id!r} not found")
        self.game_id = game_id


class ScoreMismatch(SettlementError):
    def __init__(self, game_id, recorded, supplied):
        super().__init__(
            f"Game {game_id!r} is final at {recorded[0]}-{recorded[1]}, "
            f"refusing to settle with {supplied[0]}-{supplied[1]}"
        )
        self.game_id = game_id
        self.recorded = recorded
        self.supplied = supplied


class GameNotFinal(SettlementError):
    def __init__(self, game_id, status_code):
        super().__init__(f"Game {game_id!r} is not final (status {status_code}); nothing was settled")
        self.game_id = game_id
        self.status_code = status_code
