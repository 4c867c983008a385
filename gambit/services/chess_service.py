"""Orchestration of communication from the presentation layer to business logic and persistence layers (and the reverse direction)."""

import logging
import random
import threading
from typing import Optional
from uuid import UUID

from gambit import engine
from gambit.api.models import (
    AIMoveRequest,
    AIMoveResponse,
    CreateGameRequest,
    DeleteGameRequest,
    ErrorResponse,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRecordResponse,
    MoveRequest,
    MoveResponse,
    ResetGameRequest,
    UndoMoveRequest,
)
from gambit.chess.game import GameSession, MoveRecord
from gambit.core.config import Settings, get_settings
from gambit.core.exceptions import GameStateError, RepositoryError
from gambit.core.models import GameModel
from gambit.core.shared_types import Difficulty
from gambit.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game.

    Every repository access runs under a single lock, which is held from read to write for requests that change a
    game (make a move, let the AI move, undo, ...). An AI move is never computed on a position a concurrent request
    already changed, and the shared database session is never used by two threads at once.
    """

    def __init__(
        self,
        repository: GameRepository,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.ai_seed)
        self._lock = threading.RLock()

    # -- Routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Start a game from the standard position, or from the supplied FEN."""
        session = (
            GameSession.from_fen(request.starting_fen)
            if request.starting_fen
            else GameSession.new_game()
        )
        difficulty = request.difficulty or self.settings.default_difficulty
        created_game_data = session.to_model(difficulty)

        with self._lock:
            _, game_id = self.repo.create_game(created_game_data)

        logger.info("Created game %s (difficulty: %s)", game_id, difficulty)
        return self._create_game_response(game_id, session, difficulty)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by a frontend for instance.
        """
        with self._lock:
            session, model = self._load_session(request.game_id)
        return self._create_game_response(request.game_id, session, model.difficulty)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Destinations to highlight once a piece got selected."""
        with self._lock:
            session, _ = self._load_session(request.game_id)
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=engine.legal_moves(session, request.square),
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        Make a move attempt.

        A rejected move is not an exception here: the response says why, and nothing gets stored.
        """
        with self._lock:
            session, model = self._load_session(request.game_id)
            outcome = engine.apply_move(
                session, request.from_square, request.to_square, request.promote_to
            )
            if outcome.ok:
                self._store(request.game_id, session, model.difficulty)

        game = self._create_game_response(request.game_id, session, model.difficulty)
        if outcome.error is not None:
            logger.info(
                "Rejected move %s-%s in game %s: %s",
                request.from_square,
                request.to_square,
                request.game_id,
                outcome.error,
            )
            return MoveResponse(
                game_id=request.game_id,
                accepted=False,
                error=ErrorResponse(
                    kind=type(outcome.error).__name__, message=str(outcome.error)
                ),
                game=game,
            )

        # for the type checker: ok outcome carries a value
        assert outcome.value is not None
        return MoveResponse(
            game_id=request.game_id,
            accepted=True,
            move=self._create_move_record_response(outcome.value),
            game=game,
        )

    def ai_move(self, request: AIMoveRequest) -> AIMoveResponse:
        """Let the AI pick a move. Only applied (and stored) when the request asks for it."""
        with self._lock:
            session, model = self._load_session(request.game_id)
            difficulty = Difficulty(request.difficulty or model.difficulty)
            move = engine.ai_move(session, difficulty, rng=self.rng)

            applied = False
            if move is not None and request.apply:
                session.apply_move(move)
                self._store(request.game_id, session, model.difficulty)
                applied = True

        return AIMoveResponse(
            game_id=request.game_id,
            move=move.to_uci() if move else None,
            applied=applied,
            game=self._create_game_response(request.game_id, session, model.difficulty),
        )

    def undo_move(self, request: UndoMoveRequest) -> GameResponse:
        with self._lock:
            session, model = self._load_session(request.game_id)
            if engine.undo_move(session) is None:
                raise GameStateError("No moves to take back.")
            self._store(request.game_id, session, model.difficulty)
        return self._create_game_response(request.game_id, session, model.difficulty)

    def reset_game(self, request: ResetGameRequest) -> GameResponse:
        """Back to the standard starting position (difficulty is kept)."""
        with self._lock:
            session, model = self._load_session(request.game_id)
            engine.reset_game(session)
            self._store(request.game_id, session, model.difficulty)
        return self._create_game_response(request.game_id, session, model.difficulty)

    def list_games(self) -> list[UUID]:
        """Show all recorded games."""
        with self._lock:
            return self.repo.list_game_ids()

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        with self._lock:
            deleted = self.repo.delete_game(request.game_id)
        if deleted is None:
            raise RepositoryError(f"Game with {request.game_id} not found.", request.game_id)
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _load_session(self, game_id: UUID) -> tuple[GameSession, GameModel]:
        """Find the game in the repository and replay it."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id} not found.", game_id)
        return GameSession.from_model(game_model), game_model

    def _store(self, game_id: UUID, session: GameSession, difficulty: str) -> None:
        stored = self.repo.update_game(game_id, session.to_model(Difficulty(difficulty)))
        if stored is None:
            raise RepositoryError(f"Game with {game_id} not found.", game_id)

    def _create_game_response(
        self, game_id: UUID, session: GameSession, difficulty: str
    ) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            fen_state=session.to_fen(),
            starting_state=session.start_fen,
            side_to_move=engine.side_to_move(session),
            status=engine.status(session),
            in_check=session.in_check,
            draw_reason=session.draw_reason,
            winner=session.winner,
            move_history=[record.notation for record in engine.history(session)],
            moves_uci=[record.to_uci() for record in engine.history(session)],
            difficulty=Difficulty(difficulty),
        )

    def _create_move_record_response(self, record: MoveRecord) -> MoveRecordResponse:
        return MoveRecordResponse(
            from_square=record.from_square.to_algebraic(),
            to_square=record.to_square.to_algebraic(),
            piece=record.piece.type,
            color=record.piece.color,
            captured=record.captured.type if record.captured else None,
            promotion=record.promotion,
            is_en_passant=record.is_en_passant,
            castling=record.castling.value if record.castling else None,
            gives_check=record.gives_check,
            notation=record.notation,
        )
