"""
Exceptions raised by the domain layer.

The domain raises, the boundary (`gambit.engine` and the service layer) turns these into explicit results.
"""

from typing import Optional


class GameError(Exception):
    """Base class for everything the engine can reject."""


class IllegalMoveError(GameError):
    """Origin empty, wrong side's piece, destination not legal, or the game is already over. State is unchanged."""


class PromotionRequiredError(GameError):
    """A pawn reached the last rank but no piece to promote into was supplied. State is unchanged."""

    def __init__(self, from_square: str, to_square: str) -> None:
        super().__init__(
            f"Pawn move {from_square}-{to_square} reaches the last rank. Choose a piece to promote into."
        )
        self.from_square = from_square
        self.to_square = to_square


class MalformedPositionError(GameError):
    """Position loaded from outside cannot be played (missing king, pawns on the back rank, ...)."""


class InvalidFENError(MalformedPositionError):
    """String is not even shaped like a FEN record."""


class GameStateError(GameError):
    """Operation not allowed in the current state of the game."""


class RepositoryError(GameError):
    """Persistence layer could not find / store a game."""

    def __init__(self, message: str, game_id: Optional[object] = None) -> None:
        super().__init__(message)
        self.game_id = game_id


class InvalidRequestError(ValueError):
    """Request models failed validation.

    NOTE: subclass of ValueError so pydantic wraps it into a ValidationError when raised inside a validator.
    """
