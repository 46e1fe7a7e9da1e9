"""Breadth-first queries over the walkable cells of a maze grid.

Positions are ``(x, y)`` pairs and grids are indexed ``grid[y][x]``.
"""
import logging
from collections import deque

from .errors import MazeConsistencyError
from .maze import ORIGIN, Cell, exit_of

logger = logging.getLogger(__name__)

# right, down, left, up
DIRECTIONS = ((1, 0), (0, 1), (-1, 0), (0, -1))


def in_bounds(grid, x, y):
    return 0 <= y < len(grid) and 0 <= x < len(grid[0])


def walkable(grid, x, y):
    return in_bounds(grid, x, y) and grid[y][x] != Cell.WALL


def neighbors(grid, x, y):
    for dx, dy in DIRECTIONS:
        nx, ny = x + dx, y + dy
        if walkable(grid, nx, ny):
            yield (nx, ny)


def _bfs(grid, start, goal=None):
    prev = {start: None}
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        if cur == goal:
            break
        for nxt in neighbors(grid, *cur):
            if nxt in prev:
                continue
            prev[nxt] = cur
            queue.append(nxt)
    return prev


def shortest_path(grid, start, goal):
    """Return the cells from start to goal inclusive, or None if unreachable."""
    if start == goal:
        return [start]
    prev = _bfs(grid, start, goal)
    if goal not in prev:
        return None
    path = [goal]
    while path[-1] != start:
        path.append(prev[path[-1]])
    path.reverse()
    return path


def shortest_distance(grid, start, goal, strict=False):
    """Number of steps from start to goal.

    An unreachable goal means the generator produced a broken maze. It is
    logged and reported as 0 so the game can still finish, unless ``strict``
    is set, in which case MazeConsistencyError is raised.
    """
    if start == goal:
        return 0
    path = shortest_path(grid, start, goal)
    if path is None:
        if strict:
            raise MazeConsistencyError(f"No path from {start} to {goal}")
        logger.error("Consistency violation: no path from %s to %s, treating distance as 0", start, goal)
        return 0
    return len(path) - 1


def reachable_cells(grid, start):
    return set(_bfs(grid, start))


def count_edges(grid):
    edges = 0
    for y, row in enumerate(grid):
        for x, cell in enumerate(row):
            if cell == Cell.WALL:
                continue
            # right and down only, so every edge is counted once
            if walkable(grid, x + 1, y):
                edges += 1
            if walkable(grid, x, y + 1):
                edges += 1
    return edges


def validate_maze(grid, perfect=True):
    """Raise MazeConsistencyError unless every open cell hangs off the origin.

    With ``perfect`` the open cells must also form a tree.
    """
    if not grid or not grid[0]:
        raise MazeConsistencyError("empty grid")
    goal = exit_of(grid)
    for x, y in (ORIGIN, goal):
        if grid[y][x] == Cell.WALL:
            raise MazeConsistencyError(f"{(x, y)} is a wall")

    reachable = reachable_cells(grid, ORIGIN)
    if goal not in reachable:
        raise MazeConsistencyError("exit is unreachable")
    total_open = sum(1 for row in grid for cell in row if cell != Cell.WALL)
    if len(reachable) != total_open:
        raise MazeConsistencyError("disconnected cells exist")
    if perfect and count_edges(grid) != total_open - 1:
        raise MazeConsistencyError("maze contains loops")
