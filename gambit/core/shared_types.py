"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class DrawReason(StrEnum):
    FIFTY_MOVE_RULE = "fifty-move rule"
    THREEFOLD_REPETITION = "threefold repetition"
    INSUFFICIENT_MATERIAL = "insufficient material"


# Terminal states: no more moves are accepted once the game reaches one of these.
GAME_OVER: frozenset[Status] = frozenset(
    {Status.CHECKMATE, Status.STALEMATE, Status.DRAW}
)


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Difficulty(StrEnum):
    """Difficulty tiers of the AI. A tier is a randomness profile, not a search depth."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"
