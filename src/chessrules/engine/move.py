from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from ..errors import InvalidPromotionChoice, MalformedInputError
from .pieces import Color, PieceKind, PROMOTION_KINDS

if TYPE_CHECKING:
    from .board import Board


# (rank, file), both 0..7; a1 == (0, 0), h8 == (7, 7)
Coord = Tuple[int, int]


@dataclass(frozen=True)
class Move:
    """A normalized move request.

    Attributes:
        from_sq (Coord): Origin as ``(rank, file)``.
        to_sq (Coord): Destination as ``(rank, file)``.
        kind (PieceKind): Kind of the moving piece.
        color (Color): Colour of the moving piece.
        committed (bool): ``False`` for a probe, ``True`` for a move the
            caller intends to keep.
        promotion (Optional[PieceKind]): Promotion choice, if one was given.
    """

    from_sq: Coord
    to_sq: Coord
    kind: PieceKind
    color: Color
    committed: bool = False
    promotion: Optional[PieceKind] = None

    @classmethod
    def for_board(
        cls,
        board: "Board",
        from_sq: Coord,
        to_sq: Coord,
        *,
        committed: bool = False,
        promotion: Optional[PieceKind] = None,
    ) -> Optional["Move"]:
        """Describe a move using the piece currently on ``from_sq``.

        Returns:
            Optional[Move]: ``None`` when the origin square is empty.
        """
        piece = board.piece_at(from_sq)
        if piece is None:
            return None
        return cls(from_sq, to_sq, piece.kind, piece.color, committed, promotion)

    @property
    def delta_rank(self) -> int:
        return self.to_sq[0] - self.from_sq[0]

    @property
    def delta_file(self) -> int:
        return self.to_sq[1] - self.from_sq[1]

    @property
    def vector(self) -> Tuple[int, int]:
        return (self.delta_rank, self.delta_file)

    def as_committed(self) -> "Move":
        if self.committed:
            return self
        return Move(self.from_sq, self.to_sq, self.kind, self.color, True, self.promotion)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form, e.g. ``"e7e8q"``."""
        promo = self.promotion.value.lower() if self.promotion else ""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + promo


def parse_move_text(text: str) -> Tuple[Coord, Coord, Optional[PieceKind]]:
    """Parse a move command such as ``"e2e4"`` or ``"e7e8n"``.

    Returns:
        Tuple[Coord, Coord, Optional[PieceKind]]: Origin, destination and the
            optional promotion choice.

    Raises:
        MalformedInputError: If the string has an invalid length, squares, or
            promotion letter.
    """
    if not isinstance(text, str):
        raise MalformedInputError(f"move must be a string, got {type(text).__name__}")
    text = text.strip()
    if len(text) not in (4, 5):
        raise MalformedInputError(f"invalid move length: {text!r}")
    from_sq = str_to_square(text[0:2])
    to_sq = str_to_square(text[2:4])
    promo: Optional[PieceKind] = None
    if len(text) == 5:
        try:
            promo = parse_promotion(text[4])
        except InvalidPromotionChoice as e:
            raise MalformedInputError(str(e)) from e
    return from_sq, to_sq, promo


def parse_promotion(letter: str) -> PieceKind:
    """Map a promotion letter (any case) to a piece kind.

    Raises:
        InvalidPromotionChoice: If ``letter`` is not one of ``q r b n``.
    """
    if isinstance(letter, str) and len(letter) == 1:
        for kind in PROMOTION_KINDS:
            if kind.value == letter.upper():
                return kind
    raise InvalidPromotionChoice(f"invalid promotion piece: {letter!r}")


def str_to_square(s: str) -> Coord:
    """Convert algebraic notation into a ``(rank, file)`` pair.

    Raises:
        MalformedInputError: If ``s`` is not a valid square.
    """
    if not isinstance(s, str) or len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise MalformedInputError(f"invalid square: {s!r}")
    return (int(s[1]) - 1, ord(s[0]) - ord("a"))


def square_to_str(coord: Coord) -> str:
    rank, file = coord
    if not (0 <= rank < 8 and 0 <= file < 8):
        raise MalformedInputError(f"invalid square coordinates: {coord}")
    return chr(ord("a") + file) + str(rank + 1)
