"""Rejections raised by the rules engine.

Every error is raised before any state is touched, so the host can report it
to the offending connection and carry on.
"""


class GameError(Exception):
    code = "GAME_ERROR"

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class ProtocolError(GameError):
    """Malformed input: missing fields, wrong types, bad indices."""

    code = "BAD_SCHEMA"


class TurnViolation(GameError):
    code = "OUT_OF_TURN"


class BettingViolation(GameError):
    """Insufficient chips, under-raise, or an illegal check/call."""

    code = "INVALID_ACTION"


class CapacityError(GameError):
    code = "ROOM_FULL"


class StateInconsistency(GameError):
    """Action is not valid for the room's current phase."""

    code = "WRONG_PHASE"
