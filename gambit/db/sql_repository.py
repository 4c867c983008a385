"""SQLAlchemy-backed game storage (one row per game in the `games` table)"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from gambit.core.models import GameModel
from gambit.db.schema import DBGame


def _copy_into(row: DBGame, game: GameModel) -> None:
    row.start_fen = game.start_fen
    row.current_fen = game.current_fen
    # fresh lists: in-place edits of a JSON column are not detected on commit
    row.moves_uci = list(game.moves_uci)
    row.history = list(game.history)
    row.status = game.status
    row.difficulty = game.difficulty


def _as_model(row: DBGame) -> GameModel:
    return GameModel(
        start_fen=row.start_fen,
        current_fen=row.current_fen,
        moves_uci=list(row.moves_uci),
        history=list(row.history),
        status=row.status,
        difficulty=row.difficulty,
    )


class SQLGameRepository:
    """Every write commits immediately; reads hand back detached `GameModel`s."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        row = self._row(game_id)
        return _as_model(row) if row is not None else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        row = DBGame(id=uuid4())
        _copy_into(row, game)
        self.db.add(row)
        self._commit(row)
        return _as_model(row), row.id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        row = self._row(game_id)
        if row is None:
            return None
        _copy_into(row, game)
        self._commit(row)
        return _as_model(row)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Returns the game as it was stored right before removal."""
        row = self._row(game_id)
        if row is None:
            return None
        removed = _as_model(row)
        self.db.delete(row)
        self.db.commit()
        return removed

    def list_game_ids(self) -> list[UUID]:
        """Newest game first"""
        return list(self.db.scalars(select(DBGame.id).order_by(DBGame.created_at.desc())))

    def _row(self, game_id: UUID) -> DBGame | None:
        return self.db.scalar(select(DBGame).where(DBGame.id == game_id))

    def _commit(self, row: DBGame) -> None:
        self.db.commit()
        self.db.refresh(row)
