"""Code Maze: answer programming questions to walk a generated maze."""
from .config import Difficulty, Settings, configure_logging
from .errors import CodeMazeError, ConfigError, MazeConsistencyError, StorageError
from .maze import Cell, Level, build_level, generate_maze
from .pathing import shortest_distance, shortest_path, validate_maze
from .questions import Question, select_dead_end_pool, select_pool
from .session import GameSession, MoveResult, Phase
from .storage import JsonStorage, MemoryStorage, Storage
from .timers import FrameScheduler

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "CodeMazeError",
    "ConfigError",
    "Difficulty",
    "FrameScheduler",
    "GameSession",
    "JsonStorage",
    "Level",
    "MazeConsistencyError",
    "MemoryStorage",
    "MoveResult",
    "Phase",
    "Question",
    "Settings",
    "Storage",
    "StorageError",
    "build_level",
    "configure_logging",
    "generate_maze",
    "select_dead_end_pool",
    "select_pool",
    "shortest_distance",
    "shortest_path",
    "validate_maze",
]
