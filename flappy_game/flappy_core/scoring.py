"""
Scoring System
==============

Counts obstacles passed during a session.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    tick: int
    total: int

    def __repr__(self) -> str:
        return f"ScoreEvent(+{self.points} at tick {self.tick}, total={self.total})"


class ScoreTracker:
    """Tracks the session score. One point per obstacle passed."""

    POINTS_PER_PASS = 1

    def __init__(self):
        self._score: int = 0
        self._passes: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def passes(self) -> int:
        """Number of obstacles passed."""
        return self._passes

    def apply_pass(self, tick: int) -> ScoreEvent:
        """
        Award points for one obstacle passed.

        Args:
            tick: Session tick on which the pass happened.

        Returns:
            ScoreEvent describing the points awarded.
        """
        self._score += self.POINTS_PER_PASS
        self._passes += 1
        return ScoreEvent(points=self.POINTS_PER_PASS, tick=tick, total=self._score)

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._passes = 0
