"""Pieces as values: a type and a color, plus their FEN letters and material worth"""

from dataclasses import dataclass
from typing import Self

from gambit.core.shared_types import Color, PieceType

# lower case letters, the case of a FEN character carries the color
PIECE_TO_FEN: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
FEN_TO_PIECE: dict[str, PieceType] = {letter: kind for kind, letter in PIECE_TO_FEN.items()}

# king is priced far above everything else, so material sums stay positive on simulated boards
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.type]

    @classmethod
    def from_fen(cls, character: str) -> Self:
        """'Q' is a white queen, 'q' a black one. Unknown letters raise KeyError."""
        color = Color.WHITE if character.isupper() else Color.BLACK
        return cls(FEN_TO_PIECE[character.lower()], color)

    def to_fen(self) -> str:
        letter = PIECE_TO_FEN[self.type]
        return letter.upper() if self.color == Color.WHITE else letter

    def promoted_to(self, new_type: PieceType) -> Self:
        return type(self)(new_type, self.color)
