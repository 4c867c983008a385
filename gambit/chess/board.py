"""Piece placement on the board, plus every query that depends on nothing but that placement"""

from dataclasses import dataclass, field
from itertools import groupby
from string import digits
from typing import Optional, Self

from gambit.chess.moves import ATTACK_RULES
from gambit.chess.pieces import FEN_TO_PIECE, Piece
from gambit.chess.square import BOARD_DIMENSIONS, Square, all_squares
from gambit.core.exceptions import InvalidFENError, MalformedPositionError
from gambit.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Board:
    """
    Mapping of squares onto pieces. An empty square is simply missing from the mapping.

    NOTE: Only `place_piece`, `remove_piece` and `move_piece` change a board. The engine only ever calls those on a
    private `copy()`, so a board handed out by a GameSession can be treated as a value.
    """

    position: dict[Square, Piece] = field(default_factory=dict)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """
        Read the placement field of a FEN: eight ranks separated by '/', rank 8 first.

        Within a rank files run a to h. Letters are pieces (upper case white), digits count empty squares.
        """
        if not is_valid_placement(fen_str):
            raise InvalidFENError(f"Cannot interpret {fen_str!r} as a piece placement.")

        position: dict[Square, Piece] = {}
        for rank, rank_fen in zip(range(BOARD_DIMENSIONS[1], 0, -1), fen_str.split("/")):
            file = 1
            for character in rank_fen:
                if character in digits:
                    file += int(character)
                    continue
                position[Square(file, rank)] = Piece.from_fen(character)
                file += 1
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def empty(cls) -> Self:
        return cls({})

    def to_fen(self) -> str:
        return "/".join(
            self._encode_rank(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _encode_rank(self, rank: int) -> str:
        """Runs of empty squares collapse into their length."""
        pieces = [self.piece_at(Square(file, rank)) for file in range(1, BOARD_DIMENSIONS[0] + 1)]
        encoded = ""
        for is_empty, run in groupby(pieces, key=lambda piece: piece is None):
            run_pieces = list(run)
            if is_empty:
                encoded += str(len(run_pieces))
            else:
                encoded += "".join(piece.to_fen() for piece in run_pieces if piece is not None)
        return encoded

    def copy(self) -> Self:
        """Full copy. Pieces and squares are frozen values, so copying the mapping is enough."""
        return type(self)(dict(self.position))

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_empty(self, square: Square) -> bool:
        return square not in self.position

    def pieces(self, color: Color) -> list[tuple[Square, Piece]]:
        """All pieces of one color, in FEN reading order (a8 ... h1)."""
        return [
            (square, self.position[square])
            for square in all_squares()
            if square in self.position and self.position[square].color == color
        ]

    def locate_pieces(self, piece: Piece) -> list[Square]:
        return [square for square, found in self.position.items() if found == piece]

    def find_king(self, color: Color) -> Optional[Square]:
        """Only returns None for malformed / test positions."""
        kings = self.locate_pieces(Piece(PieceType.KING, color))
        return kings[0] if kings else None

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(square in self.position for square in squares)

    def is_under_attack(self, square: Square, by_color: Color) -> bool:
        """Could any piece of `by_color` take on this square (ignoring pins)?"""
        return any(
            is_attacked(square, by_color, self) for is_attacked in ATTACK_RULES.values()
        )

    def is_any_under_attack(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_under_attack(square, by_color) for square in squares)

    def is_check(self, color: Color) -> bool:
        """Is the king of `color` attacked? A board without that king is never in check."""
        king_square = self.find_king(color)
        if king_square is None:
            return False
        return self.is_under_attack(king_square, color.opponent)

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board (kings excluded)"""
        return {
            color: sum(
                piece.value
                for _, piece in self.pieces(color)
                if piece.type != PieceType.KING
            )
            for color in Color
        }

    # --- UPDATES (only on private copies) ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Move whatever stands on `from_square`. Returns the piece that got taken on `to_square` (if any)."""
        moving_piece = self.position.pop(from_square)
        captured = self.position.get(to_square)
        self.position[to_square] = moving_piece
        return captured

    # --- VALIDATION ---
    def validate(self) -> None:
        """
        A playable position has exactly one king per color, and no pawns on the first or last rank.
        Raise MalformedPositionError otherwise.
        """
        for color in Color:
            kings = self.locate_pieces(Piece(PieceType.KING, color))
            if len(kings) != 1:
                raise MalformedPositionError(
                    f"Position must contain exactly one {color} king, found {len(kings)}."
                )

        for square, piece in self.position.items():
            if piece.type == PieceType.PAWN and square.rank in (1, BOARD_DIMENSIONS[1]):
                raise MalformedPositionError(
                    f"Pawn cannot stand on the first or last rank: {square.to_algebraic()}"
                )


def is_valid_placement(placement: str) -> bool:
    """Syntax of the placement field only: eight ranks, each adding up to exactly eight files."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = placement.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        if any(c not in digits and c.lower() not in FEN_TO_PIECE for c in rank_fen):
            return False
        if sum(int(c) if c in digits else 1 for c in rank_fen) != num_files:
            return False
    return True
