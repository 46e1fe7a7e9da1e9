import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import ConfigError


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigError(f"Unknown difficulty: {value!r}") from None


# ---------------------- maze ----------------------
MAZE_SIZES = {
    Difficulty.EASY: 5,
    Difficulty.MEDIUM: 7,
    Difficulty.HARD: 9,
}
COINS_PER_SIZE = {5: 2, 7: 3, 9: 4}
MAX_DEAD_ENDS = 8

# ---------------------- coins ----------------------
CORRECT_ANSWER = 10
WRONG_ANSWER = -5
DEAD_END = -2
COIN_PICKUP = 5
OVERRIDE_COST = 5
DEBT_LIMIT = -50
COMPLETION_BONUS = 50
ALL_TIERS_BONUS = 200

# ---------------------- questions ----------------------
QUESTION_TIMEOUT = 30.0

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def env(key, default=""):
    v = os.getenv(key)
    return v if v is not None else default


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    seed: Optional[int] = None
    log_level: str = "INFO"
    strict: bool = False
    question_timeout: float = QUESTION_TIMEOUT

    @property
    def store_path(self):
        return self.data_dir / "progress.json"

    @classmethod
    def from_env(cls):
        data_dir = Path(env("CODE_MAZE_DATA_DIR", "~/.code_maze")).expanduser()

        raw_seed = env("CODE_MAZE_SEED").strip()
        seed = None
        if raw_seed:
            try:
                seed = int(raw_seed)
            except ValueError:
                raise ConfigError(f"CODE_MAZE_SEED must be an integer: {raw_seed!r}") from None

        log_level = env("CODE_MAZE_LOG_LEVEL", "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown log level: {log_level!r}")

        raw_timeout = env("CODE_MAZE_QUESTION_TIMEOUT", str(QUESTION_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"CODE_MAZE_QUESTION_TIMEOUT must be a number: {raw_timeout!r}") from None
        if timeout <= 0:
            raise ConfigError("CODE_MAZE_QUESTION_TIMEOUT must be > 0")

        return cls(
            data_dir=data_dir,
            seed=seed,
            log_level=log_level,
            strict=env("CODE_MAZE_STRICT", "0") == "1",
            question_timeout=timeout,
        )


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("code_maze").setLevel(level)
