"""Unit tests for /gambit/core/config.py"""

import logging

import pytest

from gambit.core.config import DEFAULT_DATABASE_URL, Settings, configure_logging
from gambit.core.shared_types import Difficulty


def test_defaults_with_empty_environment() -> None:
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.log_level == "WARNING"
    assert settings.default_difficulty == Difficulty.MEDIUM
    assert settings.ai_seed is None


def test_read_from_environment() -> None:
    settings = Settings.from_env(
        {
            "GAMBIT_DATABASE_URL": "sqlite:///:memory:",
            "GAMBIT_LOG_LEVEL": "debug",
            "GAMBIT_DEFAULT_DIFFICULTY": "Expert",
            "GAMBIT_AI_SEED": "42",
        }
    )
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.log_level == "DEBUG"
    assert settings.default_difficulty == Difficulty.EXPERT
    assert settings.ai_seed == 42


def test_os_environment_is_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GAMBIT_DEFAULT_DIFFICULTY", "hard")
    assert Settings.from_env().default_difficulty == Difficulty.HARD


def test_unknown_difficulty() -> None:
    with pytest.raises(ValueError):
        _ = Settings.from_env({"GAMBIT_DEFAULT_DIFFICULTY": "grandmaster"})


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging(Settings(log_level="INFO"))
    assert len(calls) == 1
    assert calls[0]["level"] == "INFO"
