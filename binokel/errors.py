"""Error codes reported to callers attempting an illegal action."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    INVALID_PLAYER = "INVALID_PLAYER"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"

    # Lobby
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_FULL = "SESSION_FULL"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    INVALID_TEAM = "INVALID_TEAM"

    # Bidding
    NOT_IN_BIDDING_PHASE = "NOT_IN_BIDDING_PHASE"
    NOT_YOUR_TURN_TO_BID = "NOT_YOUR_TURN_TO_BID"
    INVALID_BID_AMOUNT = "INVALID_BID_AMOUNT"
    FIRST_BIDDER_MUST_BID = "FIRST_BIDDER_MUST_BID"

    # Dabb
    NOT_IN_DABB_PHASE = "NOT_IN_DABB_PHASE"
    ONLY_BID_WINNER_CAN_TAKE_DABB = "ONLY_BID_WINNER_CAN_TAKE_DABB"
    DABB_ALREADY_TAKEN = "DABB_ALREADY_TAKEN"
    ONLY_BID_WINNER_CAN_DISCARD = "ONLY_BID_WINNER_CAN_DISCARD"
    MUST_TAKE_DABB_FIRST = "MUST_TAKE_DABB_FIRST"
    MUST_DISCARD_EXACT_COUNT = "MUST_DISCARD_EXACT_COUNT"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    ONLY_BID_WINNER_CAN_GO_OUT = "ONLY_BID_WINNER_CAN_GO_OUT"
    MUST_TAKE_DABB_BEFORE_GOING_OUT = "MUST_TAKE_DABB_BEFORE_GOING_OUT"

    # Trump and melds
    NOT_IN_TRUMP_PHASE = "NOT_IN_TRUMP_PHASE"
    ONLY_BID_WINNER_CAN_DECLARE_TRUMP = "ONLY_BID_WINNER_CAN_DECLARE_TRUMP"
    NOT_IN_MELDING_PHASE = "NOT_IN_MELDING_PHASE"
    CANNOT_MELD_WHEN_GOING_OUT = "CANNOT_MELD_WHEN_GOING_OUT"
    ALREADY_DECLARED_MELDS = "ALREADY_DECLARED_MELDS"
    INVALID_MELD = "INVALID_MELD"

    # Tricks
    NOT_IN_TRICKS_PHASE = "NOT_IN_TRICKS_PHASE"
    INVALID_PLAY = "INVALID_PLAY"

    CANNOT_TERMINATE_IN_CURRENT_PHASE = "CANNOT_TERMINATE_IN_CURRENT_PHASE"


class GameError(Exception):
    """An action was rejected; ``code`` is stable and safe to localize."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None, **params: Any) -> None:
        self.code = code
        self.message = message or code.value
        self.params = params
        super().__init__(f"[{code.value}] {self.message}")
