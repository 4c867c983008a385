"""Unit tests for gambit/services/chess_service.py"""

import random
import threading
from uuid import UUID, uuid4

import pytest

from gambit.api.models import (
    AIMoveRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    MoveRequest,
    ResetGameRequest,
    UndoMoveRequest,
)
from gambit.chess.fen import STARTING_FEN
from gambit.core.config import Settings
from gambit.core.exceptions import (
    GameError,
    GameStateError,
    MalformedPositionError,
    RepositoryError,
)
from gambit.core.models import GameModel
from gambit.core.shared_types import Color, Difficulty, PieceType, Status
from gambit.services.chess_service import ChessService

PROMOTION_FEN = "4k3/P7/8/8/8/8/8/4K3 w - - 0 1"
MATE_IN_ONE_FEN = "4k3/8/4K3/8/8/8/8/Q7 w - - 0 1"


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """In-memory stand-in for GameRepository"""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        game_id = uuid4()
        self._games[game_id] = game
        return game, game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        return game

    def delete_game(self, game_id: UUID) -> GameModel | None:
        return self._games.pop(game_id, None)

    def list_game_ids(self) -> list[UUID]:
        return list(self._games)


@pytest.fixture
def mock_repository() -> MockRepository:
    return MockRepository()


@pytest.fixture
def service(mock_repository: MockRepository, rng: random.Random) -> ChessService:
    return ChessService(mock_repository, Settings(), rng=rng)


def _create(service: ChessService, fen: str | None = None, **kwargs) -> UUID:
    return service.create_new_game(CreateGameRequest(starting_fen=fen, **kwargs)).game_id


# --- SERVICE - CREATE NEW GAME ----
def test_create_a_new_game(service: ChessService, mock_repository: MockRepository) -> None:
    """Check that new game is created, persisted in repo, and return has the appropriate information."""
    response = service.create_new_game(CreateGameRequest())

    # Check response structure
    assert isinstance(response, GameResponse)
    assert isinstance(response.game_id, UUID)

    # Check response data
    assert response.fen_state == STARTING_FEN
    assert response.starting_state == STARTING_FEN
    assert response.side_to_move == Color.WHITE
    assert response.status == Status.PLAYING
    assert response.move_history == []
    assert response.difficulty == Difficulty.MEDIUM

    # Check persisted data
    stored_game = mock_repository.get_game(response.game_id)
    assert stored_game is not None
    assert stored_game.current_fen == STARTING_FEN
    assert stored_game.moves_uci == []
    assert stored_game.status == "playing"


def test_create_from_fen(service: ChessService) -> None:
    response = service.create_new_game(
        CreateGameRequest(starting_fen=PROMOTION_FEN, difficulty=Difficulty.EXPERT)
    )
    assert response.fen_state == PROMOTION_FEN
    assert response.starting_state == PROMOTION_FEN
    assert response.difficulty == Difficulty.EXPERT


def test_default_difficulty_from_settings(mock_repository: MockRepository) -> None:
    service = ChessService(mock_repository, Settings(default_difficulty=Difficulty.EASY))
    response = service.create_new_game(CreateGameRequest())
    assert response.difficulty == Difficulty.EASY


def test_create_with_invalid_fen(service: ChessService) -> None:
    """Make sure service propagates the exceptions."""
    # Test any top-level custom exception is raised (specific exception types are responsibility of other layers)
    with pytest.raises(GameError):
        _ = service.create_new_game(CreateGameRequest(starting_fen=" ".join(["mock"] * 6)))


def test_create_with_unplayable_fen_stores_nothing(
    service: ChessService, mock_repository: MockRepository
) -> None:
    """No black king: the error reaches the caller and no record is created."""
    with pytest.raises(MalformedPositionError):
        _ = service.create_new_game(CreateGameRequest(starting_fen="8/8/8/8/8/8/8/4K3 w - - 0 1"))
    assert mock_repository.list_game_ids() == []


# --- SERVICE - GET GAME ----
def test_get_game_state(service: ChessService) -> None:
    game_id = _create(service)
    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.game_id == game_id
    assert response.fen_state == STARTING_FEN


def test_get_unknown_game(service: ChessService) -> None:
    with pytest.raises(RepositoryError):
        _ = service.get_game_state(GetGameRequest(game_id=uuid4()))


# --- SERVICE - LEGAL MOVES ----
def test_legal_moves(service: ChessService) -> None:
    game_id = _create(service)
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="b1"))
    assert sorted(response.legal_moves) == ["a3", "c3"]

    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="b8"))
    assert response.legal_moves == []


# --- SERVICE - MAKE MOVE ----
def test_make_move(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service)
    response = service.make_move(MoveRequest(game_id=game_id, from_square="e2", to_square="e4"))

    assert response.accepted
    assert response.error is None
    assert response.move is not None
    assert response.move.notation == "e2-e4"
    assert response.move.piece == PieceType.PAWN
    assert response.move.color == Color.WHITE
    assert response.game.side_to_move == Color.BLACK
    assert response.game.move_history == ["e2-e4"]

    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.moves_uci == ["e2e4"]
    assert stored_game.current_fen == response.game.fen_state


def test_rejected_move_is_not_stored(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service)
    response = service.make_move(MoveRequest(game_id=game_id, from_square="e2", to_square="e5"))

    assert not response.accepted
    assert response.move is None
    assert response.error is not None
    assert response.error.kind == "IllegalMoveError"
    assert response.game.fen_state == STARTING_FEN

    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.moves_uci == []


def test_promotion_required(service: ChessService) -> None:
    game_id = _create(service, PROMOTION_FEN)
    response = service.make_move(MoveRequest(game_id=game_id, from_square="a7", to_square="a8"))
    assert not response.accepted
    assert response.error is not None
    assert response.error.kind == "PromotionRequiredError"

    response = service.make_move(
        MoveRequest(game_id=game_id, from_square="a7", to_square="a8", promote_to=PieceType.QUEEN)
    )
    assert response.accepted
    assert response.move is not None
    assert response.move.promotion == PieceType.QUEEN
    assert response.game.fen_state == "Q3k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_checkmate_ends_game(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service, MATE_IN_ONE_FEN)
    response = service.make_move(MoveRequest(game_id=game_id, from_square="a1", to_square="a8"))
    assert response.game.status == Status.CHECKMATE
    assert response.game.winner == Color.WHITE
    assert response.game.in_check

    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.status == "checkmate"

    response = service.make_move(MoveRequest(game_id=game_id, from_square="e8", to_square="d8"))
    assert not response.accepted


def test_moves_are_replayed_across_requests(service: ChessService) -> None:
    """Each request restores the game from the repository: en passant has to survive that."""
    game_id = _create(service)
    for from_square, to_square in [("e2", "e4"), ("a7", "a6"), ("e4", "e5"), ("d7", "d5")]:
        _ = service.make_move(MoveRequest(game_id=game_id, from_square=from_square, to_square=to_square))

    response = service.make_move(MoveRequest(game_id=game_id, from_square="e5", to_square="d6"))
    assert response.accepted
    assert response.move is not None
    assert response.move.is_en_passant


# --- SERVICE - AI MOVE ----
def test_ai_move_suggestion_only(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service)
    response = service.ai_move(AIMoveRequest(game_id=game_id))
    assert response.move is not None
    assert not response.applied
    assert response.game.fen_state == STARTING_FEN

    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.moves_uci == []


def test_ai_move_applied(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service)
    _ = service.make_move(MoveRequest(game_id=game_id, from_square="e2", to_square="e4"))
    response = service.ai_move(AIMoveRequest(game_id=game_id, difficulty=Difficulty.EXPERT, apply=True))

    assert response.applied
    assert response.move is not None
    assert response.game.side_to_move == Color.WHITE
    assert response.game.moves_uci == ["e2e4", response.move]

    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.moves_uci == ["e2e4", response.move]


def test_ai_move_on_finished_game(service: ChessService) -> None:
    game_id = _create(service, "k7/1Q6/1K6/8/8/8/8/8 b - - 0 1")
    response = service.ai_move(AIMoveRequest(game_id=game_id, apply=True))
    assert response.move is None
    assert not response.applied


# --- SERVICE - UNDO / RESET ----
def test_undo_move(service: ChessService, mock_repository: MockRepository) -> None:
    game_id = _create(service)
    _ = service.make_move(MoveRequest(game_id=game_id, from_square="e2", to_square="e4"))
    response = service.undo_move(UndoMoveRequest(game_id=game_id))

    assert response.fen_state == STARTING_FEN
    assert response.move_history == []
    stored_game = mock_repository.get_game(game_id)
    assert stored_game is not None
    assert stored_game.moves_uci == []


def test_undo_without_moves(service: ChessService) -> None:
    game_id = _create(service)
    with pytest.raises(GameStateError):
        _ = service.undo_move(UndoMoveRequest(game_id=game_id))


def test_reset_game(service: ChessService) -> None:
    game_id = _create(service, PROMOTION_FEN, difficulty=Difficulty.HARD)
    response = service.reset_game(ResetGameRequest(game_id=game_id))
    assert response.fen_state == STARTING_FEN
    assert response.starting_state == STARTING_FEN
    assert response.difficulty == Difficulty.HARD


# --- SERVICE - LIST / DELETE ----
def test_list_and_delete_games(service: ChessService) -> None:
    first = _create(service)
    second = _create(service)
    assert set(service.list_games()) == {first, second}

    service.delete_game(DeleteGameRequest(game_id=first))
    assert service.list_games() == [second]

    with pytest.raises(RepositoryError):
        service.delete_game(DeleteGameRequest(game_id=first))


# --- SERVICE - LOCKING ----
class TrackingLock:
    """RLock that knows whether it is currently held."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.depth = 0

    def __enter__(self) -> "TrackingLock":
        self._lock.acquire()
        self.depth += 1
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.depth -= 1
        self._lock.release()


class LockCheckingRepository(MockRepository):
    """Records, per repository call, whether the service held its lock."""

    def __init__(self, lock: TrackingLock) -> None:
        super().__init__()
        self.lock = lock
        self.unlocked_calls: list[str] = []

    def _check(self, name: str) -> None:
        if self.lock.depth == 0:
            self.unlocked_calls.append(name)

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        self._check("create_game")
        return super().create_game(game)

    def get_game(self, game_id: UUID) -> GameModel | None:
        self._check("get_game")
        return super().get_game(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        self._check("update_game")
        return super().update_game(game_id, game)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        self._check("delete_game")
        return super().delete_game(game_id)

    def list_game_ids(self) -> list[UUID]:
        self._check("list_game_ids")
        return super().list_game_ids()


def test_every_repository_access_holds_the_lock(rng: random.Random) -> None:
    """Reads share the database session with writes, so they are serialised too."""
    lock = TrackingLock()
    repository = LockCheckingRepository(lock)
    service = ChessService(repository, Settings(), rng=rng)
    service._lock = lock

    game_id = _create(service)
    service.get_game_state(GetGameRequest(game_id=game_id))
    service.legal_moves(LegalMovesRequest(game_id=game_id, square="e2"))
    service.list_games()
    service.make_move(MoveRequest(game_id=game_id, from_square="e2", to_square="e4"))
    service.ai_move(AIMoveRequest(game_id=game_id, apply=True))
    service.undo_move(UndoMoveRequest(game_id=game_id))
    service.reset_game(ResetGameRequest(game_id=game_id))
    service.delete_game(DeleteGameRequest(game_id=game_id))

    assert repository.unlocked_calls == []
    assert lock.depth == 0
