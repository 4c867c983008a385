"""
Representation of a single position: everything that decides which moves are legal next.
The same information a FEN string encodes.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from gambit.chess.board import Board
from gambit.chess.castling import CastlingRights, all_castling_rights, castling_to_fen
from gambit.chess.moves import LastMove, Move, pawn_direction
from gambit.chess.pieces import Piece
from gambit.chess.rules import all_legal_moves, has_legal_move, king_in_check, legal_moves
from gambit.chess.square import Square
from gambit.core.shared_types import Color, PieceType


@dataclass(frozen=True)
class Position:
    """
    Snapshot of the game between two plies.
    ----

    * board: placement of the pieces
    * color_to_move: the side that plays next
    * castling_rights: which castling directions have not been revoked yet
    * last_move: the previous ply (if known). Only used to decide en passant.
    * half_move_clock: plies since the last pawn move or capture (fifty-move rule)
    * full_move_number: starts at 1 and increments after every move black makes.

    Treated as a value: a move produces a new Position, it never changes this one.
    """

    board: Board
    color_to_move: Color = Color.WHITE
    castling_rights: CastlingRights = field(default_factory=all_castling_rights)
    last_move: Optional[LastMove] = None
    half_move_clock: int = 0
    full_move_number: int = 1

    @classmethod
    def starting_position(cls) -> Self:
        return cls(Board.starting_position())

    @property
    def en_passant_square(self) -> Optional[Square]:
        """The square a pawn skipped over in the last ply (FEN en passant target)."""
        if self.last_move is None or not self.last_move.was_two_square_pawn_move:
            return None
        from_square = self.last_move.from_square
        return from_square.offset(0, pawn_direction(self.last_move.piece.color))

    def legal_moves_from(self, square: Square) -> list[Square]:
        """Empty if there is no piece on the square, or if it belongs to the side not to move."""
        piece = self.board.piece_at(square)
        if piece is None or piece.color != self.color_to_move:
            return []
        return legal_moves(
            piece, square, self.board, self.last_move, self.castling_rights
        )

    def all_legal_moves(self, expand_promotions: bool = False) -> list[Move]:
        return all_legal_moves(
            self.board,
            self.color_to_move,
            self.last_move,
            self.castling_rights,
            expand_promotions=expand_promotions,
        )

    def has_legal_move(self) -> bool:
        return has_legal_move(
            self.board, self.color_to_move, self.last_move, self.castling_rights
        )

    def in_check(self) -> bool:
        return king_in_check(self.board, self.color_to_move)

    def can_capture_en_passant(self) -> bool:
        """A pawn of the side to move can legally take on the en passant target right now."""
        target = self.en_passant_square
        if target is None:
            return False
        pawn = Piece(PieceType.PAWN, self.color_to_move)
        return any(
            move.to_square == target and self.board.piece_at(move.from_square) == pawn
            for move in self.all_legal_moves()
        )

    def repetition_key(self) -> str:
        """
        Two positions are 'the same' for the repetition rule if placement, turn and castling rights match,
        and the same en passant capture is available. A target nobody can take on does not count.
        """
        en_passant = self.en_passant_square if self.can_capture_en_passant() else None
        return " ".join(
            [
                self.board.to_fen(),
                "w" if self.color_to_move == Color.WHITE else "b",
                castling_to_fen(self.castling_rights),
                en_passant.to_algebraic() if en_passant else "-",
            ]
        )
