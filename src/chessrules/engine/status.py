from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Set

from .board import Board
from .move import Coord, Move
from .pieces import Color
from .rules import is_in_check, is_legal
from .state import GameState


class GameStatus(str, Enum):
    NORMAL = "normal"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


ALL_COORDS: List[Coord] = [(rank, file) for rank in range(8) for file in range(8)]


def iter_legal_moves(board: Board, state: GameState) -> Iterator[Move]:
    """Yield every legal probe move for the side to move.

    Tries each origin/destination pair against the legality engine; probes
    share nothing, so a pair is asked exactly once.
    """
    for from_sq in ALL_COORDS:
        piece = board.piece_at(from_sq)
        if piece is None or piece.color is not state.side_to_move:
            continue
        for to_sq in ALL_COORDS:
            move = Move(from_sq, to_sq, piece.kind, piece.color)
            if is_legal(board, state, move):
                yield move


def legal_moves(board: Board, state: GameState) -> List[Move]:
    return list(iter_legal_moves(board, state))


def has_legal_move(board: Board, state: GameState) -> bool:
    return next(iter_legal_moves(board, state), None) is not None


def valid_destinations(board: Board, state: GameState, from_sq: Coord) -> Set[Coord]:
    move = Move.for_board(board, from_sq, from_sq)
    if move is None:
        return set()
    return {
        to_sq
        for to_sq in ALL_COORDS
        if is_legal(board, state, Move(from_sq, to_sq, move.kind, move.color))
    }


def classify(board: Board, state: GameState, color: Optional[Color] = None) -> GameStatus:
    """Classify the position for ``color`` (default: the side to move).

    Returns:
        GameStatus: CHECKMATE when attacked with no legal move, STALEMATE when
            not attacked with no legal move, CHECK when attacked with a way
            out, NORMAL otherwise.
    """
    if color is None:
        color = state.side_to_move
    elif color is not state.side_to_move:
        # Ask on behalf of the other side; an en-passant target never belongs to it
        state = state.toggle_turn_only().with_en_passant_target(None)
    attacked = is_in_check(board, color)
    movable = has_legal_move(board, state)
    if attacked:
        return GameStatus.CHECK if movable else GameStatus.CHECKMATE
    return GameStatus.NORMAL if movable else GameStatus.STALEMATE
