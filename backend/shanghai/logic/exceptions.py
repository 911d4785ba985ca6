"""Typed domain exceptions for table rule violations.

All domain-level rule violations use subclasses of GameRuleError
rather than raw ValueError. Action handlers catch them at the command
boundary and convert them to rejected outcomes, so no exception ever
crosses the TableEngine surface.
"""


class GameRuleError(Exception):
    """Base exception for table rule violations.

    Raised by domain logic (turn.py, melds.py, table.py) when a seat's
    command violates the rules. Caught in action_handlers.py and converted
    to a rejected CommandOutcome with an ErrorEvent.
    """


class InvalidDiscardError(GameRuleError):
    """Discard index is out of range or not an integer."""


class InvalidMeldError(GameRuleError):
    """Meld cannot be formed (missing tiles, suit restriction, no such pung)."""


class InvalidWinError(GameRuleError):
    """Win declaration is not supported by the hand."""


class InvalidClaimError(GameRuleError):
    """Claim decision is not allowed (not eligible, already decided, stale window)."""


class InvalidActionError(GameRuleError):
    """Command is not valid in the current table state."""


class UnsupportedSettingsError(GameRuleError):
    """Game settings contain values the engine cannot honor."""


class ClaimConsistencyError(GameRuleError):
    """A claim could not be executed because the table no longer matches the window.

    Attributes:
        seat: The seat whose claim failed.
        reason: Human-readable explanation of the mismatch.

    """

    def __init__(self, *, seat: int, reason: str) -> None:
        self.seat = seat
        self.reason = reason
        super().__init__(f"claim by seat {seat} is inconsistent: {reason}")
