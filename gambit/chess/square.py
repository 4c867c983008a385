"""Squares: 1-based (file, rank) pairs, a1 = (1, 1) and h8 = (8, 8)"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

# (files, ranks)
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]
RANK_NAMES = "".join(str(rank) for rank in range(1, BOARD_DIMENSIONS[1] + 1))


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        if not is_algebraic(sq):
            raise ValueError(f"Cannot interpret {sq!r} as a square name.")
        return cls(FILE_NAMES.index(sq[0]) + 1, int(sq[1]))

    def to_algebraic(self) -> str:
        return chr(ord("a") + self.file - 1) + str(self.rank)

    @classmethod
    def from_row_col(cls, row: int, col: int) -> Square:
        """Grid view used by presentation layers: row 0 is the 8th rank (black's back rank), col 0 the a-file."""
        return cls(file=col + 1, rank=BOARD_DIMENSIONS[1] - row)

    @property
    def row(self) -> int:
        return BOARD_DIMENSIONS[1] - self.rank

    @property
    def col(self) -> int:
        return self.file - 1

    def offset(self, df: int, dr: int) -> Square:
        """The square reached by stepping along a vector. Might fall off the board, check with `is_within_bounds()`."""
        return Square(self.file + df, self.rank + dr)

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def is_light(self) -> bool:
        """a1 is a dark square"""
        return (self.file + self.rank) % 2 == 1

    def __str__(self) -> str:
        return self.to_algebraic()


def is_algebraic(sq: str) -> bool:
    """File letter + rank digit (ASCII), both on the board"""
    if len(sq) != 2:
        return False
    return sq[0] in FILE_NAMES and sq[1] in RANK_NAMES


def all_squares() -> list[Square]:
    """Every square, from a8 to h1 (reading order of a FEN string)"""
    return [
        Square(file, rank)
        for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        for file in range(1, BOARD_DIMENSIONS[0] + 1)
    ]
