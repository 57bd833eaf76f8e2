from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceKind(str, Enum):
    PAWN = "P"
    KNIGHT = "N"
    BISHOP = "B"
    ROOK = "R"
    QUEEN = "Q"
    KING = "K"

    @property
    def is_slider(self) -> bool:
        return self in (PieceKind.BISHOP, PieceKind.ROOK, PieceKind.QUEEN)


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)


@dataclass(frozen=True)
class Piece:
    """A piece identity. Pieces know nothing about squares or boards."""

    kind: PieceKind
    color: Color

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        """Build a piece from its FEN letter (uppercase white, lowercase black).

        Raises:
            ValueError: If ``ch`` is not one of ``PNBRQKpnbrqk``.
        """
        if len(ch) != 1 or ch.upper() not in "PNBRQK":
            raise ValueError(f"invalid piece letter: {ch!r}")
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(PieceKind(ch.upper()), color)

    def to_char(self) -> str:
        letter = self.kind.value
        return letter if self.color is Color.WHITE else letter.lower()

    @property
    def tag(self) -> str:
        """Two-character presentation tag such as ``"wK"`` or ``"bP"``."""
        return self.color.value + self.kind.value
