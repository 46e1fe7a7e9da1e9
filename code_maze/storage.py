import json
import logging
from pathlib import Path
from typing import Protocol

from .config import Difficulty
from .errors import StorageError
from .questions import question_from_dict

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def load_custom_questions(self): ...

    def load_disabled_ids(self): ...

    def load_completed_difficulties(self): ...

    def save_completed_difficulty(self, difficulty): ...

    def load_total_coins(self): ...

    def save_total_coins(self, total): ...


class MemoryStorage:
    def __init__(self, custom_questions=(), disabled_ids=(), completed=(), total_coins=0):
        self.custom_questions = list(custom_questions)
        self.disabled_ids = list(disabled_ids)
        self.completed = [Difficulty.parse(d) for d in completed]
        self.total_coins = total_coins

    def load_custom_questions(self):
        return list(self.custom_questions)

    def load_disabled_ids(self):
        return list(self.disabled_ids)

    def load_completed_difficulties(self):
        return list(self.completed)

    def save_completed_difficulty(self, difficulty):
        difficulty = Difficulty.parse(difficulty)
        if difficulty not in self.completed:
            self.completed.append(difficulty)

    def load_total_coins(self):
        return self.total_coins

    def save_total_coins(self, total):
        self.total_coins = int(total)


class JsonStorage:
    """One JSON document on disk. Missing files read as an empty store."""

    def __init__(self, path):
        self.path = Path(path)
        self._data = None

    def _load(self):
        if self._data is not None:
            return self._data
        data = {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("No store at %s, starting fresh", self.path)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        data.setdefault("custom_questions", [])
        data.setdefault("disabled_ids", [])
        data.setdefault("completed", [])
        data.setdefault("total_coins", 0)
        self._data = data
        return data

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(f"{self.path.suffix}.tmp")
        tmp_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def load_custom_questions(self):
        return [question_from_dict(d) for d in self._load()["custom_questions"]]

    def load_disabled_ids(self):
        return [str(i) for i in self._load()["disabled_ids"]]

    def load_completed_difficulties(self):
        return [Difficulty.parse(d) for d in self._load()["completed"]]

    def save_completed_difficulty(self, difficulty):
        data = self._load()
        value = Difficulty.parse(difficulty).value
        if value not in data["completed"]:
            data["completed"].append(value)
            self._save()

    def load_total_coins(self):
        return int(self._load()["total_coins"])

    def save_total_coins(self, total):
        self._load()["total_coins"] = int(total)
        self._save()
