from __future__ import annotations

import pytest

from chessrules.engine.perft import perft, perft_divide
from chessrules.engine.state import STARTPOS_FEN, GameState


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POSITION_3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
POSITION_4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"
POSITION_5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"


def _perft(fen: str, depth: int) -> int:
    s = GameState.from_fen(fen)
    return perft(s.board(), s, depth)


@pytest.mark.parametrize(
    ("depth", "expected"),
    [
        (0, 1),
        (1, 20),
        (2, 400),
        (3, 8902),
    ],
)
def test_startpos_perft(depth: int, expected: int) -> None:
    assert _perft(STARTPOS_FEN, depth) == expected


@pytest.mark.parametrize(
    ("fen", "depth", "expected"),
    [
        (KIWIPETE, 1, 48),
        (KIWIPETE, 2, 2039),
        (POSITION_3, 1, 14),
        (POSITION_3, 2, 191),
        (POSITION_4, 1, 6),
        (POSITION_4, 2, 264),
        (POSITION_5, 1, 44),
    ],
)
def test_reference_positions(fen: str, depth: int, expected: int) -> None:
    assert _perft(fen, depth) == expected


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        _perft(STARTPOS_FEN, -1)


def test_divide_sums_to_perft_and_splits_promotions() -> None:
    s = GameState.from_fen(POSITION_4)
    split = perft_divide(s.board(), s, 2)
    assert sum(split.values()) == perft(s.board(), s, 2)

    promo = GameState.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    split = perft_divide(promo.board(), promo, 1)
    assert {"e7e8q", "e7e8r", "e7e8b", "e7e8n"} <= set(split)
    assert all(count == 1 for count in split.values())
