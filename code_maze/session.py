import logging
import random
from enum import Enum

from .config import (
    ALL_TIERS_BONUS,
    COIN_PICKUP,
    COMPLETION_BONUS,
    CORRECT_ANSWER,
    DEAD_END,
    DEBT_LIMIT,
    MAZE_SIZES,
    OVERRIDE_COST,
    QUESTION_TIMEOUT,
    WRONG_ANSWER,
    Difficulty,
)
from .errors import StorageError
from .maze import ORIGIN, Cell, build_level
from .pathing import shortest_distance, validate_maze, walkable
from .questions import select_dead_end_pool, select_pool

logger = logging.getLogger(__name__)

UNIT_VECTORS = frozenset({(0, 1), (0, -1), (1, 0), (-1, 0)})

EVENTS = (
    "question",
    "correct_answer",
    "wrong_answer",
    "coin_collect",
    "dead_end",
    "coins",
    "moved",
    "warning",
    "timeout",
    "override_offer",
    "debt_relief",
    "complete",
    "regenerated",
)


class Phase(Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    AWAITING_OVERRIDE = "awaiting_override"


class MoveResult(Enum):
    IGNORED = "ignored"
    BLOCKED = "blocked"
    MOVED = "moved"
    QUESTION = "question"


class GameSession:
    """One run through a maze at a fixed difficulty.

    Movement is gated behind questions. ``move`` issues a question and locks
    input; ``submit_answer`` (and ``resolve_override`` after a wrong answer
    the player can pay for) finishes the round and unlocks. A safety timer on
    the injected scheduler unlocks a round nobody answers.

    Listeners registered with ``on`` are called synchronously; their errors
    are logged and swallowed so a broken renderer or sound hook cannot stop
    the game.
    """

    def __init__(self, difficulty, storage, scheduler, rng=None, level_builder=build_level, settings=None):
        self.difficulty = Difficulty.parse(difficulty)
        self.size = MAZE_SIZES[self.difficulty]
        self.storage = storage
        self.scheduler = scheduler
        if rng is None:
            rng = random.Random(settings.seed if settings is not None else None)
        self.rng = rng
        self.level_builder = level_builder
        self.strict = settings.strict if settings is not None else False
        self.question_timeout = settings.question_timeout if settings is not None else QUESTION_TIMEOUT

        self._listeners = {}
        self._timeout = None
        self.coins = 0
        self.phase = Phase.IDLE
        self.current_question = None
        self.pending_move = None
        self.debt_relief_pending = False

        self.pool = select_pool(self.difficulty, storage.load_custom_questions(), storage.load_disabled_ids())
        self.dead_end_pool = select_dead_end_pool(self.difficulty)
        self.consumed_dead_end_questions = []

        self._build()

    # ---------------------- state ----------------------
    @property
    def locked(self):
        return self.phase != Phase.IDLE

    @property
    def exit(self):
        return (len(self.grid[0]) - 1, len(self.grid) - 1)

    def cell_at(self, pos):
        x, y = pos
        return self.grid[y][x]

    def snapshot(self):
        return tuple(tuple(row) for row in self.grid), self.player

    def refresh_remaining(self):
        self.remaining = shortest_distance(self.grid, self.player, self.exit, strict=self.strict)
        return self.remaining

    def _build(self):
        level = self.level_builder(self.size, self.rng)
        if self.strict:
            validate_maze(level.grid, perfect=False)
        self.grid = level.grid
        self.dead_ends = list(level.dead_ends)
        self.coin_cells = set(level.coins)
        self.last_dead_end = self.dead_ends[-1] if self.dead_ends else None
        self.player = ORIGIN
        self.first_move = True
        self.completed = False
        self.in_dead_end = self.cell_at(ORIGIN) == Cell.DEAD_END
        self.refresh_remaining()
        logger.debug("Level ready, %d questions to the exit", self.remaining)

    # ---------------------- events ----------------------
    def on(self, event, callback):
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event!r}")
        self._listeners.setdefault(event, []).append(callback)
        return callback

    def _emit(self, event, **payload):
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(**payload)
            except Exception:
                logger.exception("Listener for %r failed", event)

    # ---------------------- input ----------------------
    def move(self, dx, dy):
        if self.locked:
            logger.debug("Input (%d, %d) dropped, question pending", dx, dy)
            return MoveResult.IGNORED
        if (dx, dy) not in UNIT_VECTORS or self.completed:
            return MoveResult.IGNORED
        x, y = self.player
        target = (x + dx, y + dy)
        if not walkable(self.grid, *target):
            return MoveResult.IGNORED

        if self.remaining == 0:
            if self.cell_at(target) == Cell.DEAD_END:
                self._emit("warning", message="That way is a dead end.")
                return MoveResult.BLOCKED
            self._commit(target)
            return MoveResult.MOVED

        question = self._draw_question()
        if question is None:
            logger.info("Question pool exhausted, moving to %s without a question", target)
            self._commit(target)
            return MoveResult.MOVED

        self.current_question = question
        self.pending_move = target
        self.phase = Phase.AWAITING_ANSWER
        self._timeout = self.scheduler.call_later(self.question_timeout, self._on_timeout)
        logger.debug("Asked %s for move to %s", question.id, target)
        self._emit("question", question=question)
        return MoveResult.QUESTION

    def _draw_question(self):
        # the origin starts as a dead end but asks from the main pool
        if self.in_dead_end and self.player != ORIGIN and self.dead_end_pool:
            question = self.dead_end_pool.pop(self.rng.randrange(len(self.dead_end_pool)))
            self.consumed_dead_end_questions.append(question)
            return question
        if not self.pool:
            return None
        return self.pool.pop(self.rng.randrange(len(self.pool)))

    def submit_answer(self, raw):
        """Return True/False for a graded answer, None if no question is open."""
        if self.phase != Phase.AWAITING_ANSWER:
            return None
        question = self.current_question
        if question.check(raw):
            self._add_coins(CORRECT_ANSWER)
            self._emit("correct_answer", question=question)
            self._commit(self.pending_move, mark_correct=True)
            self._finish()
            return True

        self._add_coins(WRONG_ANSWER)
        self._emit("wrong_answer", question=question)
        if self.coins >= OVERRIDE_COST:
            self.phase = Phase.AWAITING_OVERRIDE
            self._emit("override_offer", cost=OVERRIDE_COST, balance=self.coins)
            return False
        self._retreat()
        self._finish()
        return False

    def resolve_override(self, accept):
        if self.phase != Phase.AWAITING_OVERRIDE:
            return
        if accept:
            self._add_coins(-OVERRIDE_COST)
            self._commit(self.pending_move, paid=True)
        else:
            self._retreat()
        self._finish()

    def resolve_debt_relief(self, accept):
        if not self.debt_relief_pending:
            return
        self.debt_relief_pending = False
        if accept and self.coins <= DEBT_LIMIT:
            delta = -self.coins
            self.coins = 0
            logger.info("Debt of %d cleared", -delta)
            self._emit("coins", balance=self.coins, delta=delta)

    def regenerate(self):
        if self.locked:
            logger.debug("Dropping open question %s for regeneration", self.current_question.id)
            self._finish()
        self.coins = 0
        self.debt_relief_pending = False
        self._build()
        self._emit("regenerated")

    # ---------------------- transitions ----------------------
    def _finish(self):
        if self._timeout is not None:
            self._timeout.cancel()
            self._timeout = None
        self.phase = Phase.IDLE
        self.current_question = None
        self.pending_move = None

    def _on_timeout(self):
        self._timeout = None
        if self.phase == Phase.AWAITING_ANSWER:
            logger.warning("No answer to %s within %ss, unlocking", self.current_question.id, self.question_timeout)
            self._finish()
        elif self.phase == Phase.AWAITING_OVERRIDE:
            logger.warning("Override offer timed out, treating as declined")
            self._retreat()
            self._finish()
        else:
            return
        self._emit("timeout")

    def _add_coins(self, amount):
        self.coins += amount
        self._emit("coins", balance=self.coins, delta=amount)
        if self.debt_relief_pending and self.coins > DEBT_LIMIT:
            logger.debug("Balance back above %d, debt relief withdrawn", DEBT_LIMIT)
            self.debt_relief_pending = False
        if amount < 0 and self.coins <= DEBT_LIMIT and not self.debt_relief_pending:
            self.debt_relief_pending = True
            self._emit("debt_relief", balance=self.coins)

    def _collect_coin(self, pos):
        if pos not in self.coin_cells:
            return
        self.coin_cells.discard(pos)
        x, y = pos
        self.grid[y][x] = Cell.PATH
        self._add_coins(COIN_PICKUP)
        self._emit("coin_collect", position=pos)

    def _commit(self, target, paid=False, mark_correct=False):
        owed = self.remaining
        self.player = target
        self.first_move = False
        self._collect_coin(target)
        x, y = target
        if mark_correct and self.grid[y][x] == Cell.PATH:
            self.grid[y][x] = Cell.CORRECT_PATH
        self.in_dead_end = self.grid[y][x] == Cell.DEAD_END
        if self.in_dead_end:
            self._add_coins(DEAD_END)
            self._emit("dead_end", position=target)
        self.refresh_remaining()
        self._emit("moved", position=target)
        if target == self.exit:
            # a bought step onto the exit does not pay off questions still owed
            self._check_exit(owed if paid else self.remaining)

    def _retreat(self):
        if self.first_move or self.last_dead_end is None:
            target = ORIGIN
        else:
            target = self.last_dead_end
        logger.debug("Retreating to %s", target)
        self.player = target
        self.first_move = False
        self.in_dead_end = self.cell_at(target) == Cell.DEAD_END
        self._add_coins(DEAD_END)
        self._emit("dead_end", position=target)
        self.refresh_remaining()
        self._emit("moved", position=target)

    def _check_exit(self, owed):
        if owed > 0:
            logger.warning("False exit with %d questions left, back to the start", owed)
            self._emit("warning", message="Not so fast! Answer your way to the exit.")
            self.player = ORIGIN
            self.in_dead_end = self.cell_at(ORIGIN) == Cell.DEAD_END
            self.refresh_remaining()
            self._emit("moved", position=ORIGIN)
            return
        self._complete()

    def _complete(self):
        self.completed = True
        bonus = COMPLETION_BONUS
        total = None
        try:
            before = set(self.storage.load_completed_difficulties())
            self.storage.save_completed_difficulty(self.difficulty)
            everything = set(Difficulty)
            if before != everything and before | {self.difficulty} == everything:
                bonus += ALL_TIERS_BONUS
            total = self.storage.load_total_coins() + self.coins + bonus
            self.storage.save_total_coins(total)
        except (OSError, StorageError):
            logger.exception("Could not record completion of %s", self.difficulty.value)
        logger.info("Completed %s with %d coins (+%d bonus)", self.difficulty.value, self.coins, bonus)
        self._emit("complete", difficulty=self.difficulty, coins=self.coins, bonus=bonus, total=total)
