"""Castling geometry and castling rights, shared by the rules, FEN and game modules"""

from dataclasses import dataclass
from enum import Enum

from gambit.chess.square import Square
from gambit.core.shared_types import Color


class CastlingDirection(Enum):
    # value: letter in the castling field of a FEN string
    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value in ("K", "k")


# FEN writes rights in this order
CASTLING_ORDER: tuple[CastlingDirection, ...] = tuple(CastlingDirection)

CastlingRights = dict[CastlingDirection, bool]


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """Squares strictly between two squares of one rank, walking from `from_square` towards `to_square`."""
    if from_square.rank != to_square.rank:
        raise ValueError(f"{from_square} and {to_square} are not on the same rank.")

    step = 1 if to_square.file > from_square.file else -1
    return [
        Square(file, from_square.rank)
        for file in range(from_square.file + step, to_square.file, step)
    ]


@dataclass(frozen=True)
class CastlingSquares:
    """
    Where king and rook stand before and after castling.

    As long as a right is still held, both pieces are known to be on their `*_from` squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    def squares_between(self) -> list[Square]:
        """must all be empty"""
        return squares_between_on_rank(self.king_from, self.rook_from)

    def king_path(self) -> list[Square]:
        """must all be safe from attack (the king's own square is checked separately)"""
        return squares_between_on_rank(self.king_from, self.king_to) + [self.king_to]


def _castle(rank: int, rook_file: int) -> CastlingSquares:
    """King starts on the e-file and moves two files towards the rook, which jumps over it."""
    king_from = Square(5, rank)
    step = 1 if rook_file > king_from.file else -1
    return CastlingSquares(
        king_from=king_from,
        king_to=king_from.offset(2 * step, 0),
        rook_from=Square(rook_file, rank),
        rook_to=king_from.offset(step, 0),
    )


CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: _castle(rank=1, rook_file=8),
    CastlingDirection.WHITE_QUEEN_SIDE: _castle(rank=1, rook_file=1),
    CastlingDirection.BLACK_KING_SIDE: _castle(rank=8, rook_file=8),
    CastlingDirection.BLACK_QUEEN_SIDE: _castle(rank=8, rook_file=1),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


def castling_direction_for(king_from: Square, king_to: Square) -> CastlingDirection | None:
    """Which castle a king move stands for, if any."""
    for direction, squares in CASTLING_RULES.items():
        if (squares.king_from, squares.king_to) == (king_from, king_to):
            return direction
    return None


def all_castling_rights() -> CastlingRights:
    return dict.fromkeys(CASTLING_ORDER, True)


def castling_from_fen(castle_fen: str) -> CastlingRights:
    return {direction: direction.value in castle_fen for direction in CASTLING_ORDER}


def castling_to_fen(castling_rights: CastlingRights) -> str:
    held = "".join(d.value for d in CASTLING_ORDER if castling_rights.get(d, False))
    return held or "-"
