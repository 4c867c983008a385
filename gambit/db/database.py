"""Generate database session"""

from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from gambit.core.config import get_settings
from gambit.db.schema import Base


@lru_cache
def get_engine(database_url: Optional[str] = None) -> Engine:
    """One engine per URL. Tables get created the first time the engine is requested."""
    engine = create_engine(database_url or get_settings().database_url)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(database_url: Optional[str] = None) -> Generator[Session, None, None]:
    session_factory = sessionmaker(bind=get_engine(database_url))
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
