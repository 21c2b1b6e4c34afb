import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from .logger import RunLogger


def _same(a: Any, b: Any) -> bool:
    # JSON keeps true and 1 apart; Python's == does not.
    return type(a) is type(b) and a == b


class SeenValueStore:
    """
    Persisted set of feature-flag values the runner has already exercised.

    Stored on disk as an ordered JSON list. A missing or malformed file loads
    as an empty set; every accepted value is flushed immediately.
    """

    def __init__(self, path: Path, logger: Optional[RunLogger] = None):
        self.path = Path(path)
        self.logger = logger
        self._values: List[Any] = []

    @classmethod
    def load(cls, path: Path, logger: Optional[RunLogger] = None) -> "SeenValueStore":
        store = cls(path, logger)
        store._values = store._read()
        return store

    def _read(self) -> List[Any]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            if self.logger:
                self.logger.warn(f"Seen-value file {self.path} unreadable ({e}), starting empty")
            return []

        if not isinstance(data, list):
            if self.logger:
                self.logger.warn(f"Seen-value file {self.path} is not a list, starting empty")
            return []

        values: List[Any] = []
        for item in data:
            if isinstance(item, (dict, list)):
                continue
            if not any(_same(item, v) for v in values):
                values.append(item)
        return values

    def __contains__(self, value: Any) -> bool:
        return any(_same(value, v) for v in self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    def add(self, value: Any) -> bool:
        """
        Insert a value and flush to disk.

        Returns:
            True if the value was new, False if it was already present
        """
        if value in self:
            return False
        self._values.append(value)
        self.save()
        return True

    def save(self):
        """Rewrite the file atomically (temp file in the same directory, then replace)."""
        directory = self.path.parent if str(self.path.parent) else Path(".")
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._values, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
