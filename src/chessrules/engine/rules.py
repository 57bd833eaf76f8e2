from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple

from ..errors import IllegalMoveError, RejectReason
from .board import Board
from .move import Coord, Move
from .pieces import Color, Piece, PieceKind
from .state import CastlingRight, GameState


Vector = Tuple[int, int]  # (delta_rank, delta_file)

ORTHOGONAL: Tuple[Vector, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL: Tuple[Vector, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def _rays(directions: Iterable[Vector]) -> FrozenSet[Vector]:
    return frozenset((dr * n, df * n) for dr, df in directions for n in range(1, 8))


# Elementary movement tables: every displacement a piece may make on an empty board
KNIGHT_VECTORS = frozenset(
    ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
)
KING_VECTORS = frozenset(ORTHOGONAL + DIAGONAL)
ROOK_VECTORS = _rays(ORTHOGONAL)
BISHOP_VECTORS = _rays(DIAGONAL)
QUEEN_VECTORS = ROOK_VECTORS | BISHOP_VECTORS
PAWN_VECTORS: Dict[Color, FrozenSet[Vector]] = {
    Color.WHITE: frozenset(((1, 0), (2, 0), (1, 1), (1, -1))),
    Color.BLACK: frozenset(((-1, 0), (-2, 0), (-1, -1), (-1, 1))),
}

_PIECE_VECTORS: Dict[PieceKind, FrozenSet[Vector]] = {
    PieceKind.KNIGHT: KNIGHT_VECTORS,
    PieceKind.BISHOP: BISHOP_VECTORS,
    PieceKind.ROOK: ROOK_VECTORS,
    PieceKind.QUEEN: QUEEN_VECTORS,
    PieceKind.KING: KING_VECTORS,
}

# Corner squares and the castling right that dies when anything leaves or lands there
_CORNER_RIGHTS: Dict[Coord, CastlingRight] = {
    (0, 0): CastlingRight.WHITE_QUEENSIDE,
    (0, 7): CastlingRight.WHITE_KINGSIDE,
    (7, 0): CastlingRight.BLACK_QUEENSIDE,
    (7, 7): CastlingRight.BLACK_KINGSIDE,
}


def pawn_direction(color: Color) -> int:
    return 1 if color is Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 1 if color is Color.WHITE else 6


def last_rank(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


def home_rank(color: Color) -> int:
    return 0 if color is Color.WHITE else 7


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a legal move: fresh board and state, inputs untouched.

    Attributes:
        board (Board): Board after the move.
        state (GameState): State after the move, arrangement refreshed.
        move (Move): The move that was played.
        captured (Optional[Piece]): Piece removed from the board, if any.
        promotion_square (Optional[Coord]): Set when a pawn reached the last
            rank without a promotion choice and is waiting to be promoted.
    """

    board: Board
    state: GameState
    move: Move
    captured: Optional[Piece] = None
    promotion_square: Optional[Coord] = None


# --- elementary checks (shared with attack detection) ---
def is_elementary_move(kind: PieceKind, color: Color, vector: Vector) -> bool:
    """Return True if ``vector`` is in the movement table of the piece."""
    if kind is PieceKind.PAWN:
        return vector in PAWN_VECTORS[color]
    return vector in _PIECE_VECTORS[kind]


def is_unobstructed(board: Board, from_sq: Coord, to_sq: Coord, kind: PieceKind) -> bool:
    """Return True if every square strictly between the endpoints is empty.

    Knights, kings and pawns are never obstructed by this check.
    """
    if not kind.is_slider:
        return True
    dr = (to_sq[0] > from_sq[0]) - (to_sq[0] < from_sq[0])
    df = (to_sq[1] > from_sq[1]) - (to_sq[1] < from_sq[1])
    rank, file = from_sq[0] + dr, from_sq[1] + df
    while (rank, file) != to_sq:
        if board.grid[rank][file].occupant is not None:
            return False
        rank += dr
        file += df
    return True


def attacks(board: Board, from_sq: Coord, target: Coord) -> bool:
    """Return True if the piece on ``from_sq`` attacks ``target``.

    Uses the elementary tables and the obstruction walk only; pawns attack
    along their two forward diagonals. Castling and king safety are never
    consulted here.
    """
    piece = board.piece_at(from_sq)
    if piece is None or from_sq == target:
        return False
    vector = (target[0] - from_sq[0], target[1] - from_sq[1])
    if piece.kind is PieceKind.PAWN:
        return vector[0] == pawn_direction(piece.color) and abs(vector[1]) == 1
    return is_elementary_move(piece.kind, piece.color, vector) and is_unobstructed(
        board, from_sq, target, piece.kind
    )


def is_square_attacked(board: Board, coord: Coord, by_color: Color) -> bool:
    return any(attacks(board, origin, coord) for origin, _ in board.pieces(by_color))


def is_in_check(board: Board, color: Color) -> bool:
    """Return True if the king of ``color`` is attacked. No king, no check."""
    king = board.king_square(color)
    if king is None:
        return False
    return is_square_attacked(board, king, color.opponent)


# --- full legality ---
def is_legal(board: Board, state: GameState, move: Move) -> bool:
    try:
        try_move(board, state, move)
    except IllegalMoveError:
        return False
    return True


def try_move(board: Board, state: GameState, move: Move) -> MoveResult:
    """Validate ``move`` and return the position it leads to.

    Probing and committing share this path: nothing passed in is mutated,
    the caller keeps the result or drops it.

    Raises:
        IllegalMoveError: With the first rule the move breaks.
    """
    if move.color is not state.side_to_move:
        raise IllegalMoveError(RejectReason.WRONG_TURN)
    piece = board.piece_at(move.from_sq)
    if piece is None or piece != Piece(move.kind, move.color):
        raise IllegalMoveError(RejectReason.EMPTY_ORIGIN)
    if move.from_sq == move.to_sq:
        raise IllegalMoveError(RejectReason.NULL_MOVE)
    target = board.piece_at(move.to_sq)
    if target is not None and target.color is piece.color:
        raise IllegalMoveError(RejectReason.OWN_PIECE)
    if move.promotion is not None and piece.kind is not PieceKind.PAWN:
        raise IllegalMoveError(RejectReason.NOT_A_PIECE_MOVE, "only pawns can promote")

    if piece.kind is PieceKind.KING and move.delta_rank == 0 and abs(move.delta_file) == 2:
        return _try_castle(board, state, move)

    if not is_elementary_move(piece.kind, piece.color, move.vector):
        raise IllegalMoveError(RejectReason.NOT_A_PIECE_MOVE)
    if not is_unobstructed(board, move.from_sq, move.to_sq, piece.kind):
        raise IllegalMoveError(RejectReason.OBSTRUCTED)

    shadow = board.clone()
    captured = target
    en_passant: Optional[Coord] = None
    promotion_square: Optional[Coord] = None
    placed = piece

    if piece.kind is PieceKind.PAWN:
        forward = pawn_direction(piece.color)
        dr, df = move.vector
        if df == 0 and dr == forward:
            if target is not None:
                raise IllegalMoveError(RejectReason.ILLEGAL_PAWN_MOVE, "pawn cannot capture forward")
        elif df == 0 and dr == 2 * forward:
            skipped = (move.from_sq[0] + forward, move.from_sq[1])
            if (
                move.from_sq[0] != pawn_start_rank(piece.color)
                or target is not None
                or board.piece_at(skipped) is not None
            ):
                raise IllegalMoveError(RejectReason.ILLEGAL_PAWN_MOVE)
            en_passant = skipped
        elif target is None:
            # diagonal onto an empty square: only en passant
            victim_sq = (move.from_sq[0], move.to_sq[1])
            if state.en_passant != move.to_sq or board.piece_at(victim_sq) != Piece(
                PieceKind.PAWN, piece.color.opponent
            ):
                raise IllegalMoveError(RejectReason.ILLEGAL_PAWN_MOVE, "pawn can only move diagonally to capture")
            captured = shadow.remove(victim_sq)

        if move.to_sq[0] == last_rank(piece.color):
            if move.promotion is None:
                promotion_square = move.to_sq
            else:
                placed = Piece(move.promotion, piece.color)
        elif move.promotion is not None:
            raise IllegalMoveError(RejectReason.ILLEGAL_PAWN_MOVE, "promotion needs the last rank")

    shadow.remove(move.from_sq)
    shadow.place(move.to_sq, placed)
    if is_in_check(shadow, piece.color):
        raise IllegalMoveError(RejectReason.KING_IN_CHECK)

    stripped: Set[CastlingRight] = set()
    if piece.kind is PieceKind.KING:
        stripped |= CastlingRight.for_color(piece.color)
    for corner in (move.from_sq, move.to_sq):
        if corner in _CORNER_RIGHTS:
            stripped.add(_CORNER_RIGHTS[corner])

    new_state = _advance(
        state,
        shadow,
        stripped=stripped,
        en_passant=en_passant,
        reset_clock=piece.kind is PieceKind.PAWN or captured is not None,
    )
    return MoveResult(shadow, new_state, move, captured, promotion_square)


def _try_castle(board: Board, state: GameState, move: Move) -> MoveResult:
    color = move.color
    rank = home_rank(color)
    kingside = move.delta_file > 0
    if color is Color.WHITE:
        right = CastlingRight.WHITE_KINGSIDE if kingside else CastlingRight.WHITE_QUEENSIDE
    else:
        right = CastlingRight.BLACK_KINGSIDE if kingside else CastlingRight.BLACK_QUEENSIDE

    rook_from = (rank, 7 if kingside else 0)
    if (
        right not in state.castling
        or move.from_sq != (rank, 4)
        or board.piece_at(rook_from) != Piece(PieceKind.ROOK, color)
    ):
        raise IllegalMoveError(RejectReason.CASTLING_NOT_ALLOWED)

    between = range(5, 7) if kingside else range(1, 4)
    if any(board.piece_at((rank, f)) is not None for f in between):
        raise IllegalMoveError(RejectReason.CASTLING_BLOCKED)

    king_path = (4, 5, 6) if kingside else (4, 3, 2)
    if any(is_square_attacked(board, (rank, f), color.opponent) for f in king_path):
        raise IllegalMoveError(RejectReason.CASTLING_THROUGH_CHECK)

    shadow = board.clone()
    shadow.place(move.to_sq, shadow.remove(move.from_sq))
    shadow.place((rank, 5 if kingside else 3), shadow.remove(rook_from))

    new_state = _advance(
        state, shadow, stripped=CastlingRight.for_color(color), en_passant=None, reset_clock=False
    )
    return MoveResult(shadow, new_state, move)


def _advance(
    state: GameState,
    board: Board,
    *,
    stripped: Iterable[CastlingRight],
    en_passant: Optional[Coord],
    reset_clock: bool,
) -> GameState:
    new_state = state.without_castling_rights(stripped).with_en_passant_target(en_passant).advance_turn()
    if reset_clock:
        new_state = new_state.reset_halfmove_clock()
    return new_state.with_arrangement(board.arrangement())
