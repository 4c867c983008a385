"""
What the service layer needs from storage.

`SQLGameRepository` is the real thing; the service tests plug in a dict-based stand-in.
"""

from typing import Protocol
from uuid import UUID

from gambit.core.models import GameModel


class GameRepository(Protocol):
    """Games are stored as `GameModel` snapshots under a generated UUID. Unknown IDs give None, never an error."""

    def get_game(self, game_id: UUID) -> GameModel | None: ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Returns the stored snapshot together with its freshly generated ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Replaces the stored snapshot as a whole."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None: ...

    def list_game_ids(self) -> list[UUID]: ...
