"""
Game state machine
----

Status is always derived for the side about to move (never for the side that just moved):

| legal moves | in check | status    |
|-------------|----------|-----------|
| 0           | yes      | checkmate |
| 0           | no       | stalemate |
| > 0         | yes      | check     |
| > 0         | no       | playing   |

On top of that a game still in play can end in a draw (fifty-move rule, threefold repetition, insufficient material).
"""

from collections import Counter
from typing import Optional

from gambit.chess.board import Board
from gambit.chess.position import Position
from gambit.core.shared_types import Color, DrawReason, PieceType, Status

FIFTY_MOVE_RULE_PLIES = 100
REPETITION_LIMIT = 3


def derive_status(in_check: bool, has_legal_move: bool) -> Status:
    if not has_legal_move:
        return Status.CHECKMATE if in_check else Status.STALEMATE
    return Status.CHECK if in_check else Status.PLAYING


def position_status(position: Position) -> Status:
    """Status for the side to move, without any draw rule."""
    return derive_status(position.in_check(), position.has_legal_move())


def draw_reason(
    position: Position, repetitions: Optional[Counter[str]] = None
) -> Optional[DrawReason]:
    """Which draw rule (if any) ends the game in this position."""
    if is_insufficient_material(position.board):
        return DrawReason.INSUFFICIENT_MATERIAL

    if position.half_move_clock >= FIFTY_MOVE_RULE_PLIES:
        return DrawReason.FIFTY_MOVE_RULE

    if repetitions and repetitions[position.repetition_key()] >= REPETITION_LIMIT:
        return DrawReason.THREEFOLD_REPETITION

    return None


def game_status(
    position: Position, repetitions: Optional[Counter[str]] = None
) -> tuple[Status, Optional[DrawReason]]:
    """
    Full transition: checkmate and stalemate take precedence over the draw rules.
    """
    status = position_status(position)
    if status in (Status.CHECKMATE, Status.STALEMATE):
        return status, None

    reason = draw_reason(position, repetitions)
    if reason is not None:
        return Status.DRAW, reason
    return status, None


def is_insufficient_material(board: Board) -> bool:
    """
    Neither side can ever deliver mate:
    * king vs king
    * king + single bishop/knight vs king
    * king + bishop vs king + bishop, bishops on the same square color
    """
    minor_pieces: dict[Color, list] = {Color.WHITE: [], Color.BLACK: []}
    for color in Color:
        for square, piece in board.pieces(color):
            if piece.type == PieceType.KING:
                continue
            if piece.type not in (PieceType.BISHOP, PieceType.KNIGHT):
                # any pawn, rook, or queen can still mate
                return False
            minor_pieces[color].append((square, piece))

    white, black = minor_pieces[Color.WHITE], minor_pieces[Color.BLACK]
    total = len(white) + len(black)
    if total <= 1:
        return True

    if len(white) == 1 and len(black) == 1:
        (white_square, white_piece), (black_square, black_piece) = white[0], black[0]
        both_bishops = white_piece.type == black_piece.type == PieceType.BISHOP
        return both_bishops and white_square.is_light() == black_square.is_light()

    return False
