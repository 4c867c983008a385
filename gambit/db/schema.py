"""Table definitions. A game is stored as its start FEN plus the UCI moves played from it."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gambit.core.shared_types import Difficulty, Status


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"

    id: Mapped[UUID] = mapped_column(primary_key=True)
    start_fen: Mapped[str]
    moves_uci: Mapped[list[str]] = mapped_column(JSON, default=list)

    # derived from the two columns above, kept so rows can be read without replaying
    current_fen: Mapped[str]
    history: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(default=Status.PLAYING.value)

    difficulty: Mapped[str] = mapped_column(default=Difficulty.MEDIUM.value)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
