from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple, Union

from ..errors import (
    EmptyHistoryError,
    IllegalMoveError,
    InvalidPromotionChoice,
    MalformedInputError,
    RejectReason,
)
from .board import Board
from .move import Move, parse_move_text, parse_promotion, square_to_str, str_to_square
from .pieces import Color, Piece, PieceKind
from .rules import try_move
from .state import GameState
from .status import GameStatus, classify, legal_moves, valid_destinations


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingPromotion:
    """A pawn of ``color`` sits on ``square`` and still needs a piece."""

    color: Color
    square: Tuple[int, int]

    @property
    def square_name(self) -> str:
        return square_to_str(self.square)


@dataclass(frozen=True)
class Applied:
    move: str
    status: GameStatus
    captured: Optional[str] = None
    pending_promotion: Optional[PendingPromotion] = None

    @property
    def applied(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    message: str

    @property
    def applied(self) -> bool:
        return False


MoveOutcome = Union[Applied, Rejected]


@dataclass(frozen=True)
class Snapshot:
    """Everything a renderer needs, read in one go.

    ``squares`` holds 64 tags from a8 to h1 (rank 8 first, files a to h),
    each ``""`` or colour plus piece letter such as ``"wK"``.
    """

    squares: Tuple[str, ...]
    status: GameStatus
    side_to_move: Color
    checked_king: Optional[str]
    pending_promotion: Optional[str]
    fen: str


@dataclass
class GameController:
    """Owns the live board, the current state and the undo history.

    Responsibility: turn move commands into committed positions, keep one
    GameState snapshot per committed move, answer board queries.
    """

    board: Board
    state: GameState
    history: List[GameState] = field(default_factory=list)
    move_stack: List[str] = field(default_factory=list)
    pending_promotion: Optional[PendingPromotion] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)
    _status: Optional[GameStatus] = field(default=None, repr=False, compare=False)

    @classmethod
    def new(cls) -> "GameController":
        state = GameState.startpos()
        return cls(board=state.board(), state=state)

    @classmethod
    def from_fen(cls, fen: str) -> "GameController":
        state = GameState.from_fen(fen)
        return cls(board=state.board(), state=state)

    def to_fen(self) -> str:
        return self.state.to_fen()

    # --- commands ---
    def apply_move(self, text: str) -> MoveOutcome:
        """Apply a move command like ``"e2e4"`` (or ``"e7e8n"``).

        The board and state are untouched unless the outcome is Applied.
        """
        try:
            from_sq, to_sq, promotion = parse_move_text(text)
        except MalformedInputError as e:
            logger.debug("rejected %r: %s", text, e)
            return Rejected(RejectReason.MALFORMED_INPUT, str(e))
        if self.pending_promotion is not None:
            return Rejected(
                RejectReason.PROMOTION_PENDING,
                f"promotion pending on {self.pending_promotion.square_name}",
            )

        move = Move.for_board(self.board, from_sq, to_sq, committed=True, promotion=promotion)
        if move is None:
            return Rejected(RejectReason.EMPTY_ORIGIN, f"no piece on {text[:2]}")
        try:
            result = try_move(self.board, self.state, move)
        except IllegalMoveError as e:
            logger.debug("rejected %s: %s", move.to_uci(), e.reason.value)
            return Rejected(e.reason, str(e))

        self.history.append(self.state)
        self.move_stack.append(move.to_uci())
        self.board = result.board
        self.state = result.state
        if result.promotion_square is not None:
            self.pending_promotion = PendingPromotion(move.color, result.promotion_square)
        status = self._refresh_status()
        logger.debug("applied %s -> %s", move.to_uci(), status.value)
        return Applied(
            move=move.to_uci(),
            status=status,
            captured=result.captured.tag if result.captured else None,
            pending_promotion=self.pending_promotion,
        )

    def promote(self, letter: Optional[str] = None) -> Optional[GameStatus]:
        """Resolve a pending promotion. Anything but Q, R, B or N gives a queen.

        Returns:
            Optional[GameStatus]: Status after promotion, or ``None`` when no
                promotion was pending.
        """
        pending = self.pending_promotion
        if pending is None:
            return None
        try:
            kind = parse_promotion(letter)  # type: ignore[arg-type]
        except InvalidPromotionChoice:
            logger.debug("promotion choice %r invalid, using queen", letter)
            kind = PieceKind.QUEEN
        self.board.place(pending.square, Piece(kind, pending.color))
        self.state = self.state.with_arrangement(self.board.arrangement())
        self.move_stack[-1] += kind.value.lower()
        self.pending_promotion = None
        return self._refresh_status()

    def undo(self) -> bool:
        """Step back one committed move. Returns False when there is nothing to undo."""
        if not self.history:
            return False
        self.state = self.history.pop()
        self.board = self.state.board()
        undone = self.move_stack.pop()
        self.pending_promotion = None
        self._refresh_status()
        logger.debug("undid %s", undone)
        return True

    def undo_move(self) -> None:
        if not self.undo():
            raise EmptyHistoryError()

    # --- queries ---
    def status(self) -> GameStatus:
        if self._status is None:
            return self._refresh_status()
        return self._status

    def legal_moves(self) -> List[Move]:
        if self.pending_promotion is not None:
            return []
        return legal_moves(self.board, self.state)

    def valid_destinations(self, square: str) -> Set[str]:
        from_sq = str_to_square(square)
        if self.pending_promotion is not None:
            return set()
        return {square_to_str(c) for c in valid_destinations(self.board, self.state, from_sq)}

    def is_square_empty(self, square: str) -> bool:
        """Unknown square names count as empty."""
        try:
            coord = str_to_square(square)
        except MalformedInputError:
            return True
        return self.board.piece_at(coord) is None

    def snapshot(self) -> Snapshot:
        tags = []
        for rank in range(7, -1, -1):
            for file in range(8):
                piece = self.board.piece_at((rank, file))
                tags.append(piece.tag if piece else "")
        status = self.status()
        checked_king = None
        if status in (GameStatus.CHECK, GameStatus.CHECKMATE):
            king = self.board.king_square(self.state.side_to_move)
            checked_king = square_to_str(king) if king is not None else None
        return Snapshot(
            squares=tuple(tags),
            status=status,
            side_to_move=self.state.side_to_move,
            checked_king=checked_king,
            pending_promotion=self.pending_promotion.square_name if self.pending_promotion else None,
            fen=self.to_fen(),
        )

    def in_check(self) -> bool:
        return self.status() in (GameStatus.CHECK, GameStatus.CHECKMATE)

    def checkmate(self) -> bool:
        return self.status() is GameStatus.CHECKMATE

    def stalemate(self) -> bool:
        return self.status() is GameStatus.STALEMATE

    def move_history_uci(self) -> List[str]:
        return list(self.move_stack)

    def _refresh_status(self) -> GameStatus:
        self._status = classify(self.board, self.state)
        return self._status


# Short name used by the protocol layer
Game = GameController
