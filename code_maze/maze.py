"""Maze generation: brick-wall recursive backtracker plus level dressing.

    from code_maze.maze import build_level

    level = build_level(7, random.Random(42))
    level.grid[y][x]   # Cell
"""
import logging
import random
from dataclasses import dataclass, field
from enum import IntEnum

from .config import COINS_PER_SIZE, MAX_DEAD_ENDS

logger = logging.getLogger(__name__)


class Cell(IntEnum):
    PATH = 0
    WALL = 1
    CORRECT_PATH = 2
    DEAD_END = 3
    COIN = 4


ORIGIN = (0, 0)

# up, right, down, left; shuffled per cell while carving
CARVE_DIRECTIONS = ((0, -1), (1, 0), (0, 1), (-1, 0))


@dataclass
class Level:
    size: int
    grid: list
    dead_ends: list = field(default_factory=list)
    coins: set = field(default_factory=set)

    @property
    def exit(self):
        return (self.size - 1, self.size - 1)


def exit_of(grid):
    return (len(grid[0]) - 1, len(grid) - 1)


# ---------------------- generation ----------------------
def generate_maze(size, rng=None):
    """Carve a perfect maze on a size x size grid starting from (0, 0).

    Cells two steps apart are joined by carving the cell between them, so
    passages are one cell wide. The walk keeps its own stack instead of
    recursing; each cell shuffles its directions when it is entered, which
    keeps the random draws in the same order as the recursive version.
    """
    if size < 1:
        raise ValueError("size must be >= 1")
    rng = rng or random.Random()

    maze = [[Cell.WALL] * size for _ in range(size)]
    visited = bytearray(size * size)

    def enter(x, y):
        maze[y][x] = Cell.PATH
        visited[y * size + x] = 1
        dirs = list(CARVE_DIRECTIONS)
        rng.shuffle(dirs)
        return [x, y, dirs, 0]

    stack = [enter(0, 0)]
    while stack:
        frame = stack[-1]
        x, y, dirs, i = frame
        if i == len(dirs):
            stack.pop()
            continue
        frame[3] = i + 1
        dx, dy = dirs[i]
        nx, ny = x + dx * 2, y + dy * 2
        if 0 <= nx < size and 0 <= ny < size and not visited[ny * size + nx]:
            maze[y + dy][x + dx] = Cell.PATH
            stack.append(enter(nx, ny))

    maze[size - 1][size - 1] = Cell.PATH
    return maze


def count_open_neighbors(maze, x, y):
    count = 0
    for dx, dy in CARVE_DIRECTIONS:
        nx, ny = x + dx, y + dy
        if 0 <= ny < len(maze) and 0 <= nx < len(maze[0]) and maze[ny][nx] != Cell.WALL:
            count += 1
    return count


def has_adjacent_dead_end(maze, x, y):
    for dx, dy in CARVE_DIRECTIONS:
        nx, ny = x + dx, y + dy
        if 0 <= ny < len(maze) and 0 <= nx < len(maze[0]) and maze[ny][nx] == Cell.DEAD_END:
            return True
    return False


def add_dead_ends(maze, rng, limit=None):
    size = len(maze)
    if limit is None:
        limit = min(MAX_DEAD_ENDS, int(size * 1.5))
    forbidden = {ORIGIN, (1, 0), (0, 1), (size - 1, size - 1)}
    added = []

    def try_mark(x, y):
        if (x, y) in forbidden or maze[y][x] != Cell.PATH:
            return False
        if has_adjacent_dead_end(maze, x, y) or count_open_neighbors(maze, x, y) != 1:
            return False
        maze[y][x] = Cell.DEAD_END
        added.append((x, y))
        return True

    # cells next to the exit first
    for x, y in ((size - 2, size - 1), (size - 1, size - 2)):
        if len(added) < limit and x >= 0 and y >= 0:
            try_mark(x, y)

    attempts = 0
    while len(added) < limit and attempts < 100:
        attempts += 1
        try_mark(rng.randrange(size), rng.randrange(size))
    return added


def place_coins(maze, rng, count):
    size = len(maze)
    excluded = {ORIGIN, (1, 0), (0, 1), (size - 1, size - 1)}
    available = [(x, y) for y in range(size) for x in range(size)
                 if maze[y][x] == Cell.PATH and (x, y) not in excluded]
    chosen = rng.sample(available, min(count, len(available)))
    for x, y in chosen:
        maze[y][x] = Cell.COIN
    return set(chosen)


def build_level(size, rng=None):
    rng = rng or random.Random()
    maze = generate_maze(size, rng)

    # origin is a dead end of its own; keep the first step open
    maze[0][0] = Cell.DEAD_END
    if size > 1:
        maze[0][1] = Cell.PATH
        maze[1][0] = Cell.PATH

    dead_ends = add_dead_ends(maze, rng)
    coins = place_coins(maze, rng, COINS_PER_SIZE.get(size, size // 2))
    logger.info("Built %dx%d level: %d dead ends, %d coins", size, size, len(dead_ends), len(coins))
    return Level(size=size, grid=maze, dead_ends=dead_ends, coins=coins)
