"""
Legal move generation.
----

Two tiers:
1. `raw_moves()` (moves.py) gives the pseudo-legal destinations of a piece: geometry + occupancy only.
2. `legal_moves()` plays every one of those on a copy of the board and throws away the ones that leave
   the mover's own king in check. This is the only place king safety is enforced.

Castling is generated here, as it depends on castling rights and on attacked squares.
"""

from dataclasses import dataclass
from typing import Optional

from gambit.chess.board import Board
from gambit.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_direction_for,
    castling_directions,
)
from gambit.chess.moves import (
    LastMove,
    Move,
    en_passant_capture_square,
    is_promotion_move,
    raw_moves,
)
from gambit.chess.pieces import PROMOTION_OPTIONS, Piece
from gambit.chess.square import Square
from gambit.core.shared_types import Color, PieceType


@dataclass(frozen=True)
class SimulatedMove:
    """Outcome of playing a move on a private copy of a board."""

    board: Board
    moving_piece: Piece
    placed_piece: Piece
    captured: Optional[Piece] = None
    captured_square: Optional[Square] = None
    is_en_passant: bool = False
    castling: Optional[CastlingDirection] = None


def is_en_passant_move(
    board: Board, move: Move, last_move: Optional[LastMove]
) -> bool:
    """A pawn moving diagonally onto an empty square can only be taking en passant."""
    piece = board.piece_at(move.from_square)
    if piece is None or piece.type != PieceType.PAWN:
        return False
    if move.from_square.file == move.to_square.file or not board.is_empty(
        move.to_square
    ):
        return False
    taken_square = en_passant_capture_square(move.from_square, piece.color, last_move)
    return taken_square is not None and taken_square.file == move.to_square.file


def castling_direction_of(board: Board, move: Move) -> Optional[CastlingDirection]:
    piece = board.piece_at(move.from_square)
    if piece is None or piece.type != PieceType.KING:
        return None
    return castling_direction_for(move.from_square, move.to_square)


def play_on_board(
    board: Board, move: Move, last_move: Optional[LastMove] = None
) -> SimulatedMove:
    """
    Play the move on a copy of the board. The board passed in is never touched.
    ----

    * en passant: the taken pawn stands beside the mover, not on the destination.
    * castling: the rook jumps over the king.
    * promotion: the pawn gets replaced (if a promotion piece is given).

    NOTE: no legality checks here. Callers make sure the move comes out of `legal_moves()`.
    """
    moving_piece = board.piece_at(move.from_square)
    if moving_piece is None:
        raise ValueError(f"No piece to move on {move.from_square.to_algebraic()}")

    new_board = board.copy()
    en_passant = is_en_passant_move(board, move, last_move)
    castling = castling_direction_of(board, move)

    captured = new_board.move_piece(move.from_square, move.to_square)
    captured_square = move.to_square if captured is not None else None

    if en_passant:
        # for the typechecker: en passant implies a last move
        assert last_move is not None
        captured_square = last_move.to_square
        captured = new_board.remove_piece(captured_square)

    if castling is not None:
        squares = CASTLING_RULES[castling]
        new_board.move_piece(squares.rook_from, squares.rook_to)

    placed_piece = moving_piece
    if move.promotion is not None and is_promotion_move(moving_piece, move.to_square):
        placed_piece = moving_piece.promoted_to(move.promotion)
        new_board.place_piece(placed_piece, move.to_square)

    return SimulatedMove(
        board=new_board,
        moving_piece=moving_piece,
        placed_piece=placed_piece,
        captured=captured,
        captured_square=captured_square,
        is_en_passant=en_passant,
        castling=castling,
    )


def king_in_check(board: Board, color: Color) -> bool:
    return board.is_check(color)


def castling_destinations(
    board: Board, color: Color, castling_rights: Optional[CastlingRights]
) -> list[Square]:
    """
    Destinations of the king for every castling direction `color` may use right now
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (and king + rook still stand on their starting squares).
    * All squares in between king and rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through / land on a square that is under attack.
    """
    if not castling_rights:
        return []

    destinations: list[Square] = []
    opponent = color.opponent
    for direction in castling_directions(color):
        if not castling_rights.get(direction, False):
            continue

        squares = CASTLING_RULES[direction]
        if board.piece_at(squares.king_from) != Piece(PieceType.KING, color):
            continue
        if board.piece_at(squares.rook_from) != Piece(PieceType.ROOK, color):
            continue
        if board.is_any_occupied(squares.squares_between()):
            continue
        if board.is_check(color):
            return []
        if board.is_any_under_attack(squares.king_path(), opponent):
            continue

        destinations.append(squares.king_to)
    return destinations


def legal_moves(
    piece: Piece,
    square: Square,
    board: Board,
    last_move: Optional[LastMove] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Square]:
    """
    Legal destinations of `piece` on `square`.
    ----

    For every pseudo-legal destination, build the board after the move and drop the destination if the mover's
    king is in check on that board.
    """
    destinations = raw_moves(piece, square, board, last_move)
    if piece.type == PieceType.KING:
        destinations.extend(castling_destinations(board, piece.color, castling_rights))

    return [
        destination
        for destination in destinations
        if not _leaves_king_in_check(board, Move(square, destination), last_move)
    ]


def _leaves_king_in_check(
    board: Board, move: Move, last_move: Optional[LastMove]
) -> bool:
    simulated = play_on_board(board, move, last_move)
    return king_in_check(simulated.board, simulated.moving_piece.color)


def all_legal_moves(
    board: Board,
    color: Color,
    last_move: Optional[LastMove] = None,
    castling_rights: Optional[CastlingRights] = None,
    expand_promotions: bool = False,
) -> list[Move]:
    """
    Every legal move for `color`.

    With `expand_promotions`, a pawn move onto the last rank turns into one move per piece to promote into.
    Without it, that pawn move is listed once (promotion left open).
    """
    moves: list[Move] = []
    for square, piece in board.pieces(color):
        for destination in legal_moves(
            piece, square, board, last_move, castling_rights
        ):
            if expand_promotions and is_promotion_move(piece, destination):
                moves.extend(
                    Move(square, destination, promotion)
                    for promotion in PROMOTION_OPTIONS
                )
            else:
                moves.append(Move(square, destination))
    return moves


def has_legal_move(
    board: Board,
    color: Color,
    last_move: Optional[LastMove] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """Stops at the first legal move found."""
    return any(
        legal_moves(piece, square, board, last_move, castling_rights)
        for square, piece in board.pieces(color)
    )
