from __future__ import annotations

from enum import Enum


class RejectReason(str, Enum):
    """Why a move request was not applied."""

    MALFORMED_INPUT = "malformed_input"
    WRONG_TURN = "wrong_turn"
    EMPTY_ORIGIN = "empty_origin"
    OWN_PIECE = "own_piece"
    NULL_MOVE = "null_move"
    NOT_A_PIECE_MOVE = "not_a_piece_move"
    OBSTRUCTED = "obstructed"
    ILLEGAL_PAWN_MOVE = "illegal_pawn_move"
    CASTLING_NOT_ALLOWED = "castling_not_allowed"
    CASTLING_BLOCKED = "castling_blocked"
    CASTLING_THROUGH_CHECK = "castling_through_check"
    KING_IN_CHECK = "king_in_check"
    PROMOTION_PENDING = "promotion_pending"


class ChessRulesError(ValueError):
    """Base class for every error raised by the rules engine."""


class MalformedInputError(ChessRulesError):
    """A move string, square name or seed string could not be parsed."""


class IllegalMoveError(ChessRulesError):
    def __init__(self, reason: RejectReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value.replace("_", " "))


class EmptyHistoryError(ChessRulesError):
    def __init__(self) -> None:
        super().__init__("no moves to undo")


class InvalidPromotionChoice(ChessRulesError):
    """Raised by strict promotion parsing; the controller falls back to a queen."""
