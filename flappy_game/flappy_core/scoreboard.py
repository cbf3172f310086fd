"""
Scoreboard Store
================

Persists the best final scores on local disk.

Storage is a small JSON file of string keys to string values, the same
shape as a browser's localStorage. The scoreboard lives under one key as a
JSON array of {"score": int, "time": "DD-MM-YYYY HH:MM:SS"} objects, sorted
by score, highest first.

Example:
    storage = ScoreStorage("~/.flappy_game/storage.json")
    board = Scoreboard(storage)
    board.record(12)
    for entry in board.entries:
        print(entry.score, entry.time)
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from flappy_game.flappy_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class ScoreEntry:
    """One finished session."""
    score: int
    time: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "time": self.time}

    @staticmethod
    def from_dict(data: Any) -> Optional["ScoreEntry"]:
        """Parse a stored entry. Returns None if it is malformed."""
        if not isinstance(data, dict):
            return None
        score = data.get("score")
        time = data.get("time")
        # bool is an int subclass; reject it explicitly
        if not isinstance(score, int) or isinstance(score, bool) or score < 0:
            return None
        if not isinstance(time, str):
            return None
        return ScoreEntry(score=score, time=time)


class ScoreStorage:
    """JSON-file key/value store."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(os.path.expanduser(str(path)))

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self._path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under key.

        Raises:
            OSError: If the file exists but cannot be read.
            ValueError: If the file is not a JSON object.
        """
        value = self._read_all().get(key)
        if value is None:
            return None
        return str(value)

    def set_item(self, key: str, value: str) -> None:
        """
        Store value under key, rewriting the file atomically.

        An unreadable existing file is replaced rather than merged.
        """
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        data[key] = value

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=self._path.name, suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class Scoreboard:
    """
    Bounded, ranked history of final scores.

    Entries are kept sorted by score descending. Equal scores keep their
    insertion order, so an earlier run outranks a later tie.
    """

    def __init__(
        self,
        storage: Optional[ScoreStorage] = None,
        config: Optional[GameConfig] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize scoreboard and load persisted entries.

        Args:
            storage: Backing store. Uses the configured file if None.
            config: Game configuration. Uses default if None.
            clock: Returns the current time. Uses datetime.now if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._storage = storage if storage is not None else ScoreStorage(
            config.scoreboard.storage_path
        )
        self._key = config.scoreboard.storage_key
        self._max_entries = config.scoreboard.max_entries
        self._time_format = config.scoreboard.time_format
        self._clock = clock or datetime.now
        self._entries: List[ScoreEntry] = self.load()

    @property
    def entries(self) -> List[ScoreEntry]:
        """Current entries, best first."""
        return list(self._entries)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def best(self) -> Optional[ScoreEntry]:
        return self._entries[0] if self._entries else None

    def load(self) -> List[ScoreEntry]:
        """
        Read the persisted entries.

        Never raises: a missing key, an unreadable file or a value that is
        not a JSON array all yield an empty list. Malformed entries inside an
        otherwise valid array are skipped.
        """
        try:
            raw = self._storage.get_item(self._key)
            if raw is None:
                return []
            data = json.loads(raw)
        except (OSError, ValueError):
            return []

        if not isinstance(data, list):
            return []

        entries = []
        for item in data:
            entry = ScoreEntry.from_dict(item)
            if entry is not None:
                entries.append(entry)
        return self._rank(entries)

    def record(self, score: int) -> List[ScoreEntry]:
        """
        Add a final score to the stored entries, re-rank, truncate and persist.

        Args:
            score: Final session score.

        Returns:
            The updated entries, best first.

        Raises:
            OSError: If the storage file cannot be written. The in-memory
                entries are updated regardless.
        """
        entry = ScoreEntry(score=int(score), time=self._clock().strftime(self._time_format))
        self._entries = self._rank(self.load() + [entry])
        self._storage.set_item(
            self._key,
            json.dumps([e.to_dict() for e in self._entries])
        )
        return self.entries

    def _rank(self, entries: List[ScoreEntry]) -> List[ScoreEntry]:
        # sorted() is stable, reverse=True included
        ranked = sorted(entries, key=lambda e: e.score, reverse=True)
        return ranked[:self._max_entries]
