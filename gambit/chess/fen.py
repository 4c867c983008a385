"""
Reading and writing positions in Forsyth-Edwards Notation.

A FEN has six space-separated fields:

    <placement> <side to move> <castling> <en passant target> <halfmove clock> <fullmove number>

e.g. the initial position: rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1

Placement syntax lives with the Board. The en passant target is the square a pawn skipped on the previous ply,
the halfmove clock counts plies since the last capture or pawn move, and the fullmove number goes up after
every black move.
"""

import re

from gambit.chess.board import Board, is_valid_placement
from gambit.chess.castling import castling_from_fen, castling_to_fen
from gambit.chess.moves import LastMove, pawn_direction
from gambit.chess.pieces import Piece
from gambit.chess.position import Position
from gambit.chess.square import Square, is_algebraic
from gambit.core.exceptions import InvalidFENError, MalformedPositionError
from gambit.core.shared_types import Color, PieceType

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
# KQkq with letters dropped as rights are lost, "-" once none remain
CASTLING_PATTERN = re.compile(r"^(-|K?Q?k?q?)$")
# ASCII digits only
COUNTER_PATTERN = re.compile(r"[0-9]+")


def is_valid_fen(fen: str) -> bool:
    """Syntax check only. Whether the position can actually be played is decided by `parse_fen()`."""
    fields = fen.split(" ")
    if len(fields) != 6:
        return False

    placement, side, castling, en_passant, half_moves, full_moves = fields
    return (
        is_valid_placement(placement)
        and side in ("w", "b")
        and castling != ""
        and CASTLING_PATTERN.match(castling) is not None
        and (en_passant == "-" or is_algebraic(en_passant))
        and COUNTER_PATTERN.fullmatch(half_moves) is not None
        and COUNTER_PATTERN.fullmatch(full_moves) is not None
    )


def parse_fen(fen: str) -> Position:
    """
    Raises InvalidFENError for malformed syntax and MalformedPositionError for positions that cannot be played.
    """
    if not is_valid_fen(fen):
        raise InvalidFENError(f"Not a FEN string: {fen!r}")

    placement, side, castling, en_passant, half_moves, full_moves = fen.split(" ")

    board = Board.from_fen(placement)
    board.validate()

    to_move = Color.WHITE if side == "w" else Color.BLACK
    if board.is_check(to_move.opponent):
        raise MalformedPositionError(
            f"The side not to move ({to_move.opponent}) cannot be in check: {fen}"
        )

    last_move = None
    if en_passant != "-":
        last_move = _last_move_from_en_passant(
            Square.from_algebraic(en_passant), to_move, board
        )

    return Position(
        board=board,
        color_to_move=to_move,
        castling_rights=castling_from_fen(castling),
        last_move=last_move,
        half_move_clock=int(half_moves),
        full_move_number=max(int(full_moves), 1),
    )


def _last_move_from_en_passant(
    en_passant_square: Square, color_to_move: Color, board: Board
) -> LastMove:
    """
    FEN only stores the skipped square. Rebuild the two-square pawn push that produced it
    (that is all en passant needs to know).
    """
    pushed_by = color_to_move.opponent
    direction = pawn_direction(pushed_by)
    from_square = en_passant_square.offset(0, -direction)
    to_square = en_passant_square.offset(0, direction)
    pawn = Piece(PieceType.PAWN, pushed_by)

    expected_rank = 3 if pushed_by == Color.WHITE else 6
    if en_passant_square.rank != expected_rank or board.piece_at(to_square) != pawn:
        raise MalformedPositionError(
            f"En passant square {en_passant_square.to_algebraic()} does not match a {pushed_by} pawn that just moved two squares."
        )
    return LastMove(
        from_square=from_square,
        to_square=to_square,
        piece=pawn,
        was_two_square_pawn_move=True,
    )


def to_fen(position: Position) -> str:
    ep_square = position.en_passant_square
    fields = [
        position.board.to_fen(),
        "w" if position.color_to_move == Color.WHITE else "b",
        castling_to_fen(position.castling_rights),
        ep_square.to_algebraic() if ep_square is not None else "-",
        str(position.half_move_clock),
        str(position.full_move_number),
    ]
    return " ".join(fields)


def starting_position() -> Position:
    return parse_fen(STARTING_FEN)
