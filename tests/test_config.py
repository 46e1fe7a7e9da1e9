import logging
from pathlib import Path

import pytest

from code_maze.config import Difficulty, Settings, configure_logging
from code_maze.errors import ConfigError

ENV_KEYS = (
    "CODE_MAZE_DATA_DIR",
    "CODE_MAZE_SEED",
    "CODE_MAZE_LOG_LEVEL",
    "CODE_MAZE_STRICT",
    "CODE_MAZE_QUESTION_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.data_dir == Path("~/.code_maze").expanduser()
    assert settings.store_path.name == "progress.json"
    assert settings.seed is None
    assert settings.log_level == "INFO"
    assert settings.strict is False
    assert settings.question_timeout == 30.0


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CODE_MAZE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CODE_MAZE_SEED", " 42 ")
    monkeypatch.setenv("CODE_MAZE_LOG_LEVEL", "debug")
    monkeypatch.setenv("CODE_MAZE_STRICT", "1")
    monkeypatch.setenv("CODE_MAZE_QUESTION_TIMEOUT", "12.5")

    settings = Settings.from_env()
    assert settings.store_path == tmp_path / "progress.json"
    assert settings.seed == 42
    assert settings.log_level == "DEBUG"
    assert settings.strict is True
    assert settings.question_timeout == 12.5


@pytest.mark.parametrize("key, value", [
    ("CODE_MAZE_SEED", "abc"),
    ("CODE_MAZE_LOG_LEVEL", "LOUD"),
    ("CODE_MAZE_QUESTION_TIMEOUT", "soon"),
    ("CODE_MAZE_QUESTION_TIMEOUT", "0"),
])
def test_bad_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_difficulty_parse():
    assert Difficulty.parse(" Hard ") is Difficulty.HARD
    assert Difficulty.parse(Difficulty.EASY) is Difficulty.EASY
    with pytest.raises(ConfigError):
        Difficulty.parse("nightmare")


def test_configure_logging_uses_requested_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging("WARNING")
    assert calls[0]["level"] == "WARNING"
    assert logging.getLogger("code_maze").level == logging.WARNING
    logging.getLogger("code_maze").setLevel(logging.NOTSET)
