from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from ..errors import MalformedInputError
from .board import STARTPOS_ARRANGEMENT, Board
from .move import Coord, square_to_str, str_to_square
from .pieces import Color


STARTPOS_FEN = STARTPOS_ARRANGEMENT + " w KQkq - 0 1"


class CastlingRight(str, Enum):
    WHITE_KINGSIDE = "K"
    WHITE_QUEENSIDE = "Q"
    BLACK_KINGSIDE = "k"
    BLACK_QUEENSIDE = "q"

    @classmethod
    def for_color(cls, color: Color) -> FrozenSet["CastlingRight"]:
        if color is Color.WHITE:
            return frozenset((cls.WHITE_KINGSIDE, cls.WHITE_QUEENSIDE))
        return frozenset((cls.BLACK_KINGSIDE, cls.BLACK_QUEENSIDE))


# normalized FEN ordering
CASTLING_ORDER = (
    CastlingRight.WHITE_KINGSIDE,
    CastlingRight.WHITE_QUEENSIDE,
    CastlingRight.BLACK_KINGSIDE,
    CastlingRight.BLACK_QUEENSIDE,
)


@dataclass(frozen=True)
class GameState:
    """Everything about a position except the board itself, plus a snapshot
    of the arrangement so a board can be rebuilt from history.

    Every transition returns a new value; the receiver never changes, which
    is what lets the controller keep old states on its undo stack.
    """

    arrangement: str
    side_to_move: Color
    castling: FrozenSet[CastlingRight]
    en_passant: Optional[Coord]
    halfmove_clock: int
    fullmove_number: int

    @classmethod
    def startpos(cls) -> "GameState":
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "GameState":
        """Parse a position seed.

        Args:
            fen (str): Six fields separated by whitespace or underscores:
                placement, side to move, castling rights, en-passant target,
                halfmove clock and fullmove number.

        Returns:
            GameState: State for the seed; its ``arrangement`` is normalized
                through a board round trip.

        Raises:
            MalformedInputError: If a field cannot be used to seed a position.
        """
        if not fen or not isinstance(fen, str):
            raise MalformedInputError("FEN must be a non-empty string")
        parts = [p for p in re.split(r"[\s_]+", fen.strip()) if p]
        if len(parts) != 6:
            raise MalformedInputError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        board = Board.from_arrangement(placement)

        if stm not in ("w", "b"):
            raise MalformedInputError("side to move must be 'w' or 'b'")

        rights: set[CastlingRight] = set()
        if castling != "-":
            for ch in castling:
                if ch not in "KQkq":
                    raise MalformedInputError("invalid castling rights")
                rights.add(CastlingRight(ch))

        ep_square: Optional[Coord]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except MalformedInputError as e:
                raise MalformedInputError("invalid en passant square") from e
            # ep target can only sit on rank 3 or rank 6
            if ep_square[0] not in (2, 5):
                raise MalformedInputError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise MalformedInputError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise MalformedInputError("invalid move counters in FEN")

        return cls(
            arrangement=board.arrangement(),
            side_to_move=Color(stm),
            castling=frozenset(rights),
            en_passant=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def fields(self) -> Tuple[str, str, str, str, str, str]:
        castling = "".join(r.value for r in CASTLING_ORDER if r in self.castling) or "-"
        ep = square_to_str(self.en_passant) if self.en_passant is not None else "-"
        return (
            self.arrangement,
            self.side_to_move.value,
            castling,
            ep,
            str(self.halfmove_clock),
            str(self.fullmove_number),
        )

    def to_fen(self) -> str:
        return " ".join(self.fields())

    def to_seed(self) -> str:
        """Serialize with underscores, the form accepted by the original UI."""
        return "_".join(self.fields())

    def board(self) -> Board:
        return Board.from_arrangement(self.arrangement)

    # --- transitions ---
    def with_arrangement(self, arrangement: str) -> "GameState":
        return replace(self, arrangement=arrangement)

    def without_castling_rights(self, rights: Iterable[CastlingRight]) -> "GameState":
        return replace(self, castling=self.castling - frozenset(rights))

    def with_en_passant_target(self, coord: Optional[Coord]) -> "GameState":
        return replace(self, en_passant=coord)

    def advance_turn(self) -> "GameState":
        """Flip the side to move and tick the counters.

        The fullmove number only moves on after black has played.
        """
        return replace(
            self,
            side_to_move=self.side_to_move.opponent,
            halfmove_clock=self.halfmove_clock + 1,
            fullmove_number=self.fullmove_number + (1 if self.side_to_move is Color.BLACK else 0),
        )

    def toggle_turn_only(self) -> "GameState":
        return replace(self, side_to_move=self.side_to_move.opponent)

    def reset_halfmove_clock(self) -> "GameState":
        return replace(self, halfmove_clock=0)
