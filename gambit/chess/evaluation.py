"""Position evaluation: material plus a couple of cheap positional terms.

Pure and side-effect free. Scores are in pawns, from the point of view of the color asked for.
"""

from gambit.chess.board import Board
from gambit.chess.pieces import Piece
from gambit.chess.square import Square
from gambit.core.shared_types import Color, PieceType

POSITIONAL_WEIGHT = 0.1
# (row, col) of the middle of the board, between the 4 center squares
BOARD_CENTER = (3.5, 3.5)
MAX_CENTER_DISTANCE = 7


def pawn_advancement(square: Square, color: Color) -> int:
    """Ranks a pawn has advanced from its starting rank."""
    return square.rank - 2 if color == Color.WHITE else 7 - square.rank


def center_distance(square: Square) -> float:
    """Manhattan distance to the middle of the board (1 for the 4 center squares, 7 for the corners)"""
    center_row, center_col = BOARD_CENTER
    return abs(center_row - square.row) + abs(center_col - square.col)


def positional_bonus(piece: Piece, square: Square) -> float:
    if piece.type == PieceType.PAWN:
        return pawn_advancement(square, piece.color) * POSITIONAL_WEIGHT
    if piece.type in (PieceType.KNIGHT, PieceType.BISHOP):
        return (MAX_CENTER_DISTANCE - center_distance(square)) * POSITIONAL_WEIGHT
    return 0.0


def evaluate(board: Board, color: Color) -> float:
    """
    Score the board for `color`.
    ----

    * own material is added, opponent material subtracted (P 1, N 3, B 3, R 5, Q 9, K 100)
    * own pawns get a bonus for every rank advanced, own knights / bishops for standing close to the center
    * the opponent's pawn advancement is subtracted, but NOT the opponent's knight / bishop centralization
    """
    score = 0.0
    for square, piece in board.position.items():
        if piece.color == color:
            score += piece.value + positional_bonus(piece, square)
        else:
            score -= piece.value
            # NOTE: only pawns carry a positional penalty for the opponent
            if piece.type == PieceType.PAWN:
                score -= positional_bonus(piece, square)
    return score
