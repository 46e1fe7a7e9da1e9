import os
import random

# pygame must never open a real window or audio device under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from code_maze import FrameScheduler, GameSession, MemoryStorage
from code_maze.maze import Cell, Level


def make_corridor(coins=(), branch=False):
    """5x5 level: open along the top row and down the right column.

    The origin is a dead end and the exit is 8 steps away. With ``branch`` a
    dead end hangs below (2, 0).
    """
    grid = [[Cell.WALL] * 5 for _ in range(5)]
    for x in range(5):
        grid[0][x] = Cell.PATH
    for y in range(5):
        grid[y][4] = Cell.PATH
    grid[0][0] = Cell.DEAD_END
    dead_ends = []
    if branch:
        grid[1][2] = Cell.DEAD_END
        dead_ends.append((2, 1))
    for x, y in coins:
        grid[y][x] = Cell.COIN
    return Level(size=5, grid=grid, dead_ends=dead_ends, coins=set(coins))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def make_session(storage, scheduler):
    def factory(difficulty="easy", **level_kwargs):
        return GameSession(
            difficulty,
            storage,
            scheduler,
            rng=random.Random(7),
            level_builder=lambda size, rng: make_corridor(**level_kwargs),
        )
    return factory


@pytest.fixture
def corridor():
    return make_corridor
