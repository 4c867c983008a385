"""Pydantic models at the service boundary: what callers send in, and what they get back"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from gambit.chess.square import is_algebraic
from gambit.core.exceptions import InvalidRequestError
from gambit.core.shared_types import Color, Difficulty, DrawReason, PieceType, Status


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    starting_fen: Optional[str] = None
    # falls back to the configured default difficulty
    difficulty: Optional[Difficulty] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        """Only the shape. Whether the position is playable gets decided by the domain layer."""
        if value is None:
            return value

        if len(value.split()) != 6:
            raise InvalidRequestError("A FEN needs 6 space-separated parts.")
        return value.strip()


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class UndoMoveRequest(BaseModel):
    game_id: UUID


class ResetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.KING, PieceType.PAWN):
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


class AIMoveRequest(BaseModel):
    game_id: UUID
    # falls back to the difficulty the game was created with
    difficulty: Optional[Difficulty] = None
    apply: bool = False


def _validate_square_name(value: str) -> str:
    if not is_algebraic(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    side_to_move: Color
    status: Status
    in_check: bool
    draw_reason: Optional[DrawReason] = None
    winner: Optional[Color] = None
    move_history: list[str]
    moves_uci: list[str]
    difficulty: Difficulty


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: str
    legal_moves: list[str]


class MoveRecordResponse(BaseModel):
    from_square: str
    to_square: str
    piece: PieceType
    color: Color
    captured: Optional[PieceType] = None
    promotion: Optional[PieceType] = None
    is_en_passant: bool = False
    castling: Optional[str] = None
    gives_check: bool = False
    notation: str


class ErrorResponse(BaseModel):
    kind: str
    message: str


class MoveResponse(BaseModel):
    """Explicit result: either `move` or `error` is set."""

    game_id: UUID
    accepted: bool
    move: Optional[MoveRecordResponse] = None
    error: Optional[ErrorResponse] = None
    game: GameResponse


class AIMoveResponse(BaseModel):
    game_id: UUID
    move: Optional[str] = None
    applied: bool = False
    game: GameResponse
