from __future__ import annotations

from dataclasses import replace
from typing import Dict, List

from .board import Board
from .move import Move
from .pieces import PieceKind, PROMOTION_KINDS
from .rules import last_rank, try_move
from .state import GameState
from .status import legal_moves


def perft(board: Board, state: GameState, depth: int) -> int:
    """Compute perft node count for the position at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    A pawn reaching the last rank counts once per promotion piece, matching
    published perft tables.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    children: List[Move] = []
    for move in legal_moves(board, state):
        children.extend(_expand_promotions(move))
    if depth == 1:
        return len(children)

    nodes = 0
    for move in children:
        result = try_move(board, state, move.as_committed())
        nodes += perft(result.board, result.state, depth - 1)
    return nodes


def _expand_promotions(move: Move) -> List[Move]:
    if move.kind is PieceKind.PAWN and move.to_sq[0] == last_rank(move.color):
        return [replace(move, promotion=kind) for kind in PROMOTION_KINDS]
    return [move]


def perft_divide(board: Board, state: GameState, depth: int) -> Dict[str, int]:
    """Perft split by root move, keyed by move string (e.g. ``e7e8q``)."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for move in legal_moves(board, state):
        for child in _expand_promotions(move):
            result = try_move(board, state, child.as_committed())
            counts[child.to_uci()] = perft(result.board, result.state, depth - 1)
    return counts
