"""Runtime configuration, read from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Self

from gambit.core.shared_types import Difficulty

ENV_PREFIX = "GAMBIT_"
DEFAULT_DATABASE_URL = "sqlite:///gambit.db"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    default_difficulty: Difficulty = Difficulty.MEDIUM
    ai_seed: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Variables: GAMBIT_DATABASE_URL, GAMBIT_LOG_LEVEL, GAMBIT_DEFAULT_DIFFICULTY, GAMBIT_AI_SEED"""
        env = os.environ if environ is None else environ

        difficulty_name = env.get(f"{ENV_PREFIX}DEFAULT_DIFFICULTY", Difficulty.MEDIUM)
        try:
            difficulty = Difficulty(difficulty_name.lower())
        except ValueError as exc:
            raise ValueError(
                f"Unknown difficulty {difficulty_name!r}. Pick one from {', '.join(d.value for d in Difficulty)}"
            ) from exc

        seed = env.get(f"{ENV_PREFIX}AI_SEED")
        return cls(
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", DEFAULT_DATABASE_URL),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            default_difficulty=difficulty,
            ai_seed=int(seed) if seed else None,
        )


def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Opt-in: the library itself never touches the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
