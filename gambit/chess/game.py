"""
The GameSession is the aggregate root of the domain layer.
It owns the current position, the move history and the derived status, and is only ever changed by `apply_move()`
(plus `undo()` / `reset()` / `load_fen()`, which replace the state wholesale).
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Self

from gambit.chess.board import Board
from gambit.chess.castling import (
    CASTLING_ORDER,
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
)
from gambit.chess.fen import STARTING_FEN, parse_fen, to_fen
from gambit.chess.moves import (
    LastMove,
    Move,
    is_promotion_move,
    is_two_square_pawn_move,
)
from gambit.chess.pieces import PIECE_TO_FEN, PROMOTION_OPTIONS, Piece
from gambit.chess.position import Position
from gambit.chess.rules import SimulatedMove, play_on_board
from gambit.chess.square import Square
from gambit.chess.status import game_status
from gambit.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    PromotionRequiredError,
)
from gambit.core.models import GameModel
from gambit.core.shared_types import (
    GAME_OVER,
    Color,
    Difficulty,
    DrawReason,
    PieceType,
    Status,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveRecord:
    """One entry of the move history. Snapshot of what happened, taken when the move got applied."""

    from_square: Square
    to_square: Square
    piece: Piece
    captured: Optional[Piece] = None
    promotion: Optional[PieceType] = None
    is_en_passant: bool = False
    castling: Optional[CastlingDirection] = None
    was_two_square_pawn_move: bool = False
    gives_check: bool = False
    notation: str = ""

    @property
    def move(self) -> Move:
        return Move(self.from_square, self.to_square, self.promotion)

    def to_uci(self) -> str:
        return self.move.to_uci()

    def as_last_move(self) -> LastMove:
        return LastMove(
            from_square=self.from_square,
            to_square=self.to_square,
            piece=self.piece,
            was_two_square_pawn_move=self.was_two_square_pawn_move,
        )


@dataclass(frozen=True)
class _Snapshot:
    """Everything needed to take a move back."""

    position: Position
    status: Status
    draw_reason: Optional[DrawReason]
    in_check: bool
    repetitions: Counter[str]


@dataclass
class GameSession:
    position: Position
    start_fen: str = STARTING_FEN
    history: list[MoveRecord] = field(default_factory=list)
    status: Status = Status.PLAYING
    draw_reason: Optional[DrawReason] = None
    in_check: bool = False
    _repetitions: Counter[str] = field(default_factory=Counter, repr=False)
    _undo_stack: list[_Snapshot] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if not self._repetitions:
            self._repetitions[self.position.repetition_key()] += 1
        self.status, self.draw_reason = game_status(self.position, self._repetitions)
        self.in_check = self.position.in_check()

    # --- CREATION ---
    @classmethod
    def new_game(cls) -> Self:
        """Standard starting position, white to move, all castling rights, no en passant target."""
        return cls(Position.starting_position())

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Raises MalformedPositionError (or its subclass InvalidFENError) if the position cannot be played."""
        return cls(parse_fen(fen), start_fen=fen)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a GameSession from the information the Service layer actually has: replay the moves"""
        session = cls.from_fen(model.start_fen)
        for uci in model.moves_uci:
            try:
                session.apply_move(Move.from_uci(uci))
            except (ValueError, IllegalMoveError, PromotionRequiredError) as exc:
                raise GameStateError(
                    f"Stored move {uci!r} cannot be replayed from {model.start_fen!r}"
                ) from exc
        return session

    def to_model(self, difficulty: Difficulty = Difficulty.MEDIUM) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            start_fen=self.start_fen,
            current_fen=self.to_fen(),
            moves_uci=[record.to_uci() for record in self.history],
            history=[record.notation for record in self.history],
            status=self.status.value,
            difficulty=Difficulty(difficulty).value,
        )

    def load_fen(self, fen: str) -> None:
        """Replace this session by the given position. If parsing fails, the current game is untouched."""
        loaded = type(self).from_fen(fen)
        self._replace_with(loaded)

    def reset(self) -> None:
        """Throw away everything and start over from the standard position."""
        self._replace_with(type(self).new_game())
        logger.debug("Game reset to the starting position")

    def _replace_with(self, other: "GameSession") -> None:
        self.position = other.position
        self.start_fen = other.start_fen
        self.history = other.history
        self.status = other.status
        self.draw_reason = other.draw_reason
        self.in_check = other.in_check
        self._repetitions = other._repetitions
        self._undo_stack = other._undo_stack

    # --- READ ACCESSORS ---
    @property
    def board(self) -> Board:
        return self.position.board

    @property
    def side_to_move(self) -> Color:
        return self.position.color_to_move

    @property
    def last_move(self) -> Optional[LastMove]:
        return self.position.last_move

    @property
    def castling_rights(self) -> CastlingRights:
        return dict(self.position.castling_rights)

    @property
    def is_over(self) -> bool:
        return self.status in GAME_OVER

    @property
    def winner(self) -> Optional[Color]:
        """Only a checkmate has a winner: the side that is NOT to move delivered it."""
        if self.status != Status.CHECKMATE:
            return None
        return self.side_to_move.opponent

    def to_fen(self) -> str:
        return to_fen(self.position)

    def legal_moves(self, square: Square) -> list[Square]:
        """Legal destinations of the piece on `square`. Empty for empty squares, the side not to move, or a finished game."""
        if self.is_over:
            return []
        return self.position.legal_moves_from(square)

    def all_legal_moves(self, expand_promotions: bool = False) -> list[Move]:
        if self.is_over:
            return []
        return self.position.all_legal_moves(expand_promotions=expand_promotions)

    # --- MOVE EXECUTOR ---
    def apply_move(self, move: Move) -> MoveRecord:
        """
        Apply a move
        -----

        1. resolve the moving piece (must belong to the side to move) and check the destination is legal
        2. promotion needs a piece to promote into --> PromotionRequiredError if missing
        3. play the move on a copy of the board (captures, en passant, castling rook, promotion)
        4. build the next position: castling rights, en passant info (last move), move counters, side to move
        5. recompute status / check for the side that is about to move
        6. commit everything at once, append to history

        Raises IllegalMoveError / PromotionRequiredError without changing anything.
        """
        piece = self._validate(move)

        simulated = play_on_board(self.board, move, self.last_move)
        next_position = self._next_position(move, simulated)

        repetitions = Counter(self._repetitions)
        repetitions[next_position.repetition_key()] += 1
        status, reason = game_status(next_position, repetitions)
        in_check = next_position.in_check()

        record = MoveRecord(
            from_square=move.from_square,
            to_square=move.to_square,
            piece=piece,
            captured=simulated.captured,
            promotion=move.promotion,
            is_en_passant=simulated.is_en_passant,
            castling=simulated.castling,
            was_two_square_pawn_move=is_two_square_pawn_move(
                piece, move.from_square, move.to_square
            ),
            gives_check=in_check,
            notation=long_algebraic(move, simulated, in_check, status),
        )

        # commit
        self._undo_stack.append(
            _Snapshot(
                self.position, self.status, self.draw_reason, self.in_check, self._repetitions
            )
        )
        self.position = next_position
        self._repetitions = repetitions
        self.status = status
        self.draw_reason = reason
        self.in_check = in_check
        self.history.append(record)

        logger.debug("Applied %s (%s)", record.notation, record.to_uci())
        if self.is_over:
            logger.info(
                "Game over after %d plies: %s%s",
                len(self.history),
                self.status,
                f" ({self.draw_reason})" if self.draw_reason else "",
            )
        return record

    def undo(self) -> Optional[MoveRecord]:
        """Take back the last move. Returns the record taken back (None if nothing to undo)."""
        if not self._undo_stack:
            return None
        snapshot = self._undo_stack.pop()
        record = self.history.pop()
        self.position = snapshot.position
        self.status = snapshot.status
        self.draw_reason = snapshot.draw_reason
        self.in_check = snapshot.in_check
        self._repetitions = snapshot.repetitions
        logger.debug("Took back %s", record.notation)
        return record

    # -- PRIVATE HELPERS ---
    def _validate(self, move: Move) -> Piece:
        from_alg = move.from_square.to_algebraic()
        to_alg = move.to_square.to_algebraic()
        if self.is_over:
            raise IllegalMoveError(f"Game is over. status: {self.status}")

        piece = self.board.piece_at(move.from_square)
        if piece is None:
            raise IllegalMoveError(f"No piece on {from_alg}.")
        if piece.color != self.side_to_move:
            raise IllegalMoveError(
                f"The piece on {from_alg} is {piece.color}, but it is {self.side_to_move} to move."
            )
        if move.to_square not in self.legal_moves(move.from_square):
            raise IllegalMoveError(f"Move not allowed: {from_alg}-{to_alg}")

        if is_promotion_move(piece, move.to_square):
            if move.promotion is None:
                raise PromotionRequiredError(from_alg, to_alg)
            if move.promotion not in PROMOTION_OPTIONS:
                raise IllegalMoveError(f"A pawn cannot promote into a {move.promotion}.")
        elif move.promotion is not None:
            raise IllegalMoveError(
                f"{from_alg}-{to_alg} does not reach the last rank. Cannot promote."
            )
        return piece

    def _next_position(self, move: Move, simulated: SimulatedMove) -> Position:
        mover = simulated.moving_piece
        resets_clock = mover.type == PieceType.PAWN or simulated.captured is not None
        return Position(
            board=simulated.board,
            color_to_move=mover.color.opponent,
            castling_rights=revoke_castling_rights(self.position.castling_rights, move),
            last_move=LastMove(
                from_square=move.from_square,
                to_square=move.to_square,
                piece=mover,
                was_two_square_pawn_move=is_two_square_pawn_move(
                    mover, move.from_square, move.to_square
                ),
            ),
            half_move_clock=0 if resets_clock else self.position.half_move_clock + 1,
            full_move_number=self.position.full_move_number
            + (1 if mover.color == Color.BLACK else 0),
        )


def revoke_castling_rights(rights: CastlingRights, move: Move) -> CastlingRights:
    """
    Checks which rights should get revoked
    ----

    1. If the king leaves its starting square (castling included) --> revoke both directions of that color
    2. If a rook leaves its starting square --> revoke the direction of that rook
    3. If anything lands on a rook's starting square (taking it) --> revoke the direction of that rook
    """
    touched = {move.from_square, move.to_square}
    new_rights = dict(rights)
    for direction in CASTLING_ORDER:
        squares = CASTLING_RULES[direction]
        if move.from_square == squares.king_from or squares.rook_from in touched:
            new_rights[direction] = False
    return new_rights


def long_algebraic(
    move: Move, simulated: SimulatedMove, in_check: bool, status: Status
) -> str:
    """
    Long algebraic notation, ex.
    * "e2-e4", "Ng1-f3", "Qd1xd7+", "e7-e8=Q", "e5xd6 e.p.", "O-O", "Qh5xf7#"
    """
    if simulated.castling is not None:
        notation = "O-O" if simulated.castling.is_king_side else "O-O-O"
    else:
        piece_type = simulated.moving_piece.type
        letter = "" if piece_type == PieceType.PAWN else PIECE_TO_FEN[piece_type].upper()
        separator = "x" if simulated.captured is not None else "-"
        notation = f"{letter}{move.from_square.to_algebraic()}{separator}{move.to_square.to_algebraic()}"
        if simulated.placed_piece != simulated.moving_piece:
            notation += f"={PIECE_TO_FEN[simulated.placed_piece.type].upper()}"

    if status == Status.CHECKMATE:
        notation += "#"
    elif in_check:
        notation += "+"

    if simulated.is_en_passant:
        notation += " e.p."
    return notation
