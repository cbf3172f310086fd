"""
Entities
========

Player and obstacle records shared by physics, rules and rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from flappy_game.flappy_core.config_loader import GameConfig


@dataclass
class Player:
    """
    The player sprite.

    x is fixed after construction; only y and velocity change during play.
    """
    x: float
    y: float
    width: float
    height: float
    velocity: float = 0.0

    @classmethod
    def from_config(cls, config: GameConfig) -> "Player":
        """Create a player at the spawn position with zero velocity."""
        return cls(
            x=config.player.x,
            y=config.spawn_y,
            width=config.player.width,
            height=config.player.height,
        )

    @property
    def right(self) -> float:
        """Right edge of the sprite."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "w": self.width,
            "h": self.height,
            "velocity": self.velocity,
        }


@dataclass
class Obstacle:
    """A pipe pair with a passable gap between gap_top and gap_bottom."""
    x: float
    width: float
    gap_top: float
    gap_bottom: float
    passed: bool = False

    @property
    def right(self) -> float:
        """Trailing edge (right side, obstacles scroll left)."""
        return self.x + self.width

    @property
    def gap_center(self) -> float:
        return (self.gap_top + self.gap_bottom) / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "width": self.width,
            "top": self.gap_top,
            "bottom": self.gap_bottom,
            "passed": self.passed,
        }
