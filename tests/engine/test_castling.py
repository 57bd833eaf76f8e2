from __future__ import annotations

from chessrules.engine.game import Applied, GameController, Rejected
from chessrules.engine.state import CastlingRight
from chessrules.errors import RejectReason


def test_white_castling_available_when_clear_and_not_in_check() -> None:
    g = GameController.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    ds = g.valid_destinations("e1")
    assert "g1" in ds
    assert "c1" in ds


def test_white_castling_blocked_when_in_check() -> None:
    # A black rook on e8 gives check on e1
    g = GameController.from_fen("4r2r/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    for move in ("e1g1", "e1c1"):
        out = g.apply_move(move)
        assert isinstance(out, Rejected)
        assert out.reason is RejectReason.CASTLING_THROUGH_CHECK
    assert g.to_fen() == "4r2r/8/8/8/8/8/8/R3K2R w KQ - 0 1"


def test_castling_through_attacked_square_rejected() -> None:
    # Black rook on f8 covers f1, which the king would cross
    g = GameController.from_fen("r3kr2/8/8/8/8/8/8/R3K2R w KQq - 0 1")
    out = g.apply_move("e1g1")
    assert isinstance(out, Rejected)
    assert out.reason is RejectReason.CASTLING_THROUGH_CHECK
    # queenside path is safe
    assert isinstance(g.apply_move("e1c1"), Applied)


def test_castling_onto_attacked_square_rejected() -> None:
    g = GameController.from_fen("4k1r1/8/8/8/8/8/8/4K2R w K - 0 1")
    out = g.apply_move("e1g1")
    assert isinstance(out, Rejected)
    assert out.reason is RejectReason.CASTLING_THROUGH_CHECK


def test_queenside_castling_ignores_attack_on_b_file() -> None:
    # b1 is attacked but the king never crosses it
    g = GameController.from_fen("1r2k3/8/8/8/8/8/8/R3K3 w Q - 0 1")
    out = g.apply_move("e1c1")
    assert isinstance(out, Applied)
    assert g.to_fen().split()[0] == "1r2k3/8/8/8/8/8/8/2KR4"


def test_castling_blocked_by_piece_between() -> None:
    g = GameController.from_fen("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1")
    out = g.apply_move("e1c1")
    assert isinstance(out, Rejected)
    assert out.reason is RejectReason.CASTLING_BLOCKED


def test_castling_without_right_rejected() -> None:
    g = GameController.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Qkq - 0 1")
    out = g.apply_move("e1g1")
    assert isinstance(out, Rejected)
    assert out.reason is RejectReason.CASTLING_NOT_ALLOWED


def test_castling_moves_rook_and_strips_rights() -> None:
    g = GameController.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert isinstance(g.apply_move("e1g1"), Applied)
    assert g.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"
    assert g.state.castling == frozenset(
        (CastlingRight.BLACK_KINGSIDE, CastlingRight.BLACK_QUEENSIDE)
    )

    assert isinstance(g.apply_move("e8c8"), Applied)
    assert g.to_fen() == "2kr3r/8/8/8/8/8/8/R4RK1 w - - 2 2"
