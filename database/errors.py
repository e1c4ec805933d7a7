"""Store-level exceptions."""


class StoreError(Exception):
    """A read or write against the game/wager store failed."""
