from __future__ import annotations

import pytest

from chessrules.engine.state import STARTPOS_FEN, GameState
from chessrules.engine.status import GameStatus, classify, legal_moves

chess = pytest.importorskip("chess")


POSITIONS = [
    STARTPOS_FEN,
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1",
    "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8",
    "4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1",
    "8/8/8/KPp4r/8/8/8/4k3 w - c6 0 1",
    "r1bqkb1r/pppp1Qpp/2n2n2/4p3/2B1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 0 4",
    "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1",
]


@pytest.mark.parametrize("fen", POSITIONS)
def test_legal_move_pairs_match_python_chess(fen: str) -> None:
    s = GameState.from_fen(fen)
    ours = {m.to_uci() for m in legal_moves(s.board(), s)}
    theirs = {m.uci()[:4] for m in chess.Board(fen).legal_moves}
    assert ours == theirs


@pytest.mark.parametrize("fen", POSITIONS)
def test_status_matches_python_chess(fen: str) -> None:
    s = GameState.from_fen(fen)
    ref = chess.Board(fen)
    if ref.is_checkmate():
        expected = GameStatus.CHECKMATE
    elif ref.is_stalemate():
        expected = GameStatus.STALEMATE
    elif ref.is_check():
        expected = GameStatus.CHECK
    else:
        expected = GameStatus.NORMAL
    assert classify(s.board(), s) is expected
