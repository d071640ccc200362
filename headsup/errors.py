"""Errors raised by the engine. All of them leave the hand state untouched."""

from __future__ import annotations


class ConfigError(ValueError):
    """Table configuration rejected at construction time."""


class ActionError(ValueError):
    code = "ACTION_REJECTED"

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class NoHandInProgress(ActionError):
    code = "NO_HAND"


class StaleAction(ActionError):
    code = "STALE_ACTION"


class HandAlreadyOver(ActionError):
    code = "HAND_OVER"


class NotYourTurn(ActionError):
    code = "OUT_OF_TURN"


class IllegalCheck(ActionError):
    code = "ILLEGAL_CHECK"


class IllegalCall(ActionError):
    code = "ILLEGAL_CALL"


class IllegalBet(ActionError):
    code = "ILLEGAL_BET"


class IllegalRaise(ActionError):
    code = "ILLEGAL_RAISE"


class BelowMinimumBet(ActionError):
    code = "BELOW_MIN_BET"


class BelowMinimumRaise(ActionError):
    code = "BELOW_MIN_RAISE"


class RaiseCapReached(ActionError):
    code = "RAISE_CAP"


class InvalidAmount(ActionError):
    code = "INVALID_AMOUNT"
