from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from ..errors import MalformedInputError
from .move import Coord, square_to_str
from .pieces import Color, Piece, PieceKind


STARTPOS_ARRANGEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Square:
    """One board cell. Coordinates are fixed; only the occupant changes."""

    rank: int
    file: int
    occupant: Optional[Piece] = None

    @property
    def coord(self) -> Coord:
        return (self.rank, self.file)

    @property
    def name(self) -> str:
        return square_to_str(self.coord)

    def is_empty(self) -> bool:
        return self.occupant is None

    def remove_occupant(self) -> Optional[Piece]:
        piece = self.occupant
        self.occupant = None
        return piece


@dataclass
class Board:
    """An 8x8 grid of squares addressed by ``(rank, file)``.

    Notes:
    - Rank 0 is white's back rank, file 0 is the a-file.
    - Holds occupancy only; attack maps and similar are always recomputed.
    """

    grid: List[List[Square]] = field(
        default_factory=lambda: [[Square(r, f) for f in range(8)] for r in range(8)]
    )

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def startpos(cls) -> "Board":
        return cls.from_arrangement(STARTPOS_ARRANGEMENT)

    @classmethod
    def from_arrangement(cls, placement: str) -> "Board":
        """Build a board from the piece-placement field of a FEN string.

        Args:
            placement (str): Ranks 8 to 1 separated by ``/``; digits count
                empty squares, uppercase letters are white pieces.

        Returns:
            Board: Board holding the described pieces.

        Raises:
            MalformedInputError: If the placement does not describe exactly
                eight ranks of eight squares with known piece letters.
        """
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise MalformedInputError("board must have 8 ranks")
        board = cls()
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise MalformedInputError("invalid empty count in rank")
                    file_idx += n
                else:
                    if file_idx >= 8:
                        raise MalformedInputError("too many squares in rank")
                    try:
                        piece = Piece.from_char(ch)
                    except ValueError as e:
                        raise MalformedInputError(str(e)) from e
                    board.grid[rank_idx][file_idx].occupant = piece
                    file_idx += 1
            if file_idx != 8:
                raise MalformedInputError("rank does not sum to 8 squares")
        return board

    def arrangement(self) -> str:
        """Serialize the occupancy into the FEN piece-placement field."""
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
            run = 0
            row = []
            for square in self.grid[rank_idx]:
                if square.occupant is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(square.occupant.to_char())
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        return "/".join(ranks_str)

    def clone(self) -> "Board":
        """Return an independent copy (a shadow board)."""
        copy = Board()
        for rank_idx in range(8):
            for file_idx in range(8):
                copy.grid[rank_idx][file_idx].occupant = self.grid[rank_idx][file_idx].occupant
        return copy

    def square(self, coord: Coord) -> Square:
        return self.grid[coord[0]][coord[1]]

    def piece_at(self, coord: Coord) -> Optional[Piece]:
        return self.grid[coord[0]][coord[1]].occupant

    def place(self, coord: Coord, piece: Optional[Piece]) -> None:
        self.grid[coord[0]][coord[1]].occupant = piece

    def remove(self, coord: Coord) -> Optional[Piece]:
        return self.grid[coord[0]][coord[1]].remove_occupant()

    def squares(self) -> Iterator[Square]:
        """Iterate squares from a1 to h8, rank by rank."""
        for row in self.grid:
            yield from row

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Coord, Piece]]:
        for square in self.squares():
            if square.occupant is not None and (color is None or square.occupant.color is color):
                yield square.coord, square.occupant

    def king_square(self, color: Color) -> Optional[Coord]:
        for coord, piece in self.pieces(color):
            if piece.kind is PieceKind.KING:
                return coord
        return None

    def piece_count(self) -> int:
        return sum(1 for _ in self.pieces())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.arrangement() == other.arrangement()
