class CodeMazeError(Exception):
    """Base class for errors raised by the game core."""


class ConfigError(CodeMazeError, ValueError):
    pass


class MazeConsistencyError(CodeMazeError):
    """The maze graph broke an invariant (no route to the exit, cycles, islands)."""


class StorageError(CodeMazeError):
    pass
