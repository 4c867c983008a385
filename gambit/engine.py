"""
Contract towards a presentation layer (board UI, AI opponent loop, ...).

Squares cross this boundary in algebraic notation ("e4"). Errors never escape: operations that can be rejected
return an `Outcome` holding either the value or the error.
"""

import random
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from gambit.chess.ai import select_move
from gambit.chess.game import GameSession, MoveRecord
from gambit.chess.moves import Move
from gambit.chess.square import Square, is_algebraic
from gambit.core.exceptions import (
    GameError,
    IllegalMoveError,
    MalformedPositionError,
    PromotionRequiredError,
)
from gambit.core.shared_types import Color, Difficulty, PieceType, Status

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the error explaining why there is none."""

    value: Optional[T] = None
    error: Optional[GameError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def new_game() -> GameSession:
    return GameSession.new_game()


def load_game(fen: str) -> Outcome[GameSession]:
    try:
        return Outcome(value=GameSession.from_fen(fen))
    except MalformedPositionError as exc:
        return Outcome(error=exc)


def save_game(session: GameSession) -> str:
    return session.to_fen()


def legal_moves(session: GameSession, square: str) -> list[str]:
    """Empty if the square holds no piece, or a piece of the side not to move."""
    if not is_algebraic(square):
        return []
    return [
        destination.to_algebraic()
        for destination in session.legal_moves(Square.from_algebraic(square))
    ]


def apply_move(
    session: GameSession,
    from_square: str,
    to_square: str,
    promotion: Optional[PieceType | str] = None,
) -> Outcome[MoveRecord]:
    """All-or-nothing: on error the session is exactly as before."""
    try:
        move = _build_move(from_square, to_square, promotion)
        return Outcome(value=session.apply_move(move))
    except (IllegalMoveError, PromotionRequiredError) as exc:
        return Outcome(error=exc)


def _build_move(
    from_square: str, to_square: str, promotion: Optional[PieceType | str]
) -> Move:
    if not (is_algebraic(from_square) and is_algebraic(to_square)):
        raise IllegalMoveError(
            f"Cannot interpret {from_square!r}-{to_square!r} as a move between two squares."
        )
    try:
        promote_to = PieceType(promotion) if promotion is not None else None
    except ValueError as exc:
        raise IllegalMoveError(f"Unknown piece to promote into: {promotion!r}") from exc
    return Move(
        Square.from_algebraic(from_square), Square.from_algebraic(to_square), promote_to
    )


def status(session: GameSession) -> Status:
    return session.status


def side_to_move(session: GameSession) -> Color:
    return session.side_to_move


def history(session: GameSession) -> list[MoveRecord]:
    return list(session.history)


def undo_move(session: GameSession) -> Optional[MoveRecord]:
    return session.undo()


def reset_game(session: GameSession) -> None:
    session.reset()


def ai_move(
    session: GameSession,
    difficulty: Difficulty | str,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """
    Pure computation: the session is not changed. The caller decides whether (and when) to apply the move.
    None if the game is over.
    """
    if session.is_over:
        return None
    return select_move(
        session.board,
        session.side_to_move,
        Difficulty(difficulty),
        last_move=session.last_move,
        castling_rights=session.castling_rights,
        rng=rng,
    )
