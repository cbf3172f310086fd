"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.entities import Obstacle, Player


@dataclass
class GameSnapshot:
    """
    Game state snapshot.

    Obstacle arrays are fixed-size with a mask for the live count, ordered
    left to right.
    """
    # Core state
    player_y: float
    player_velocity: float
    score: int
    tick: int
    obstacles_count: int

    # Playfield info (for normalization)
    width: float
    height: float

    # Derived features for the nearest obstacle not yet passed
    next_obstacle_dx: float           # Obstacle x minus player right edge
    next_gap_top: float
    next_gap_bottom: float
    next_gap_offset: float            # Gap center minus player center (positive = gap below)

    # Obstacle arrays (fixed size, padded)
    obs_x: np.ndarray                 # (MAX_OBS,) float32
    obs_gap_top: np.ndarray           # (MAX_OBS,) float32
    obs_gap_bottom: np.ndarray        # (MAX_OBS,) float32
    obs_passed: np.ndarray            # (MAX_OBS,) bool
    obs_mask: np.ndarray              # (MAX_OBS,) bool

    # Optional image
    board_rgb: Optional[np.ndarray] = None

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        obs = {
            "player_y": np.array(self.player_y, dtype=np.float32),
            "player_velocity": np.array(self.player_velocity, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "tick": np.array(self.tick, dtype=np.int64),
            "obstacles_count": np.array(self.obstacles_count, dtype=np.int32),

            "next_obstacle_dx": np.array(self.next_obstacle_dx, dtype=np.float32),
            "next_gap_top": np.array(self.next_gap_top, dtype=np.float32),
            "next_gap_bottom": np.array(self.next_gap_bottom, dtype=np.float32),
            "next_gap_offset": np.array(self.next_gap_offset, dtype=np.float32),

            "obs_x": self.obs_x,
            "obs_gap_top": self.obs_gap_top,
            "obs_gap_bottom": self.obs_gap_bottom,
            "obs_passed": self.obs_passed.astype(np.int8),
            "obs_mask": self.obs_mask.astype(np.int8),
        }

        if self.board_rgb is not None:
            obs["board_rgb"] = self.board_rgb

        return obs


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_obstacles = config.observation.max_obstacles
        self._width = float(config.playfield.width)
        self._height = float(config.playfield.height)

        # Pre-allocate arrays
        self._obs_x = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_gap_top = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_gap_bottom = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_passed = np.zeros(self._max_obstacles, dtype=bool)
        self._obs_mask = np.zeros(self._max_obstacles, dtype=bool)

    @property
    def max_obstacles(self) -> int:
        return self._max_obstacles

    def build(
        self,
        player: Player,
        obstacles: List[Obstacle],
        score: int,
        tick: int,
        board_rgb: Optional[np.ndarray] = None
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        self._obs_x.fill(0)
        self._obs_gap_top.fill(0)
        self._obs_gap_bottom.fill(0)
        self._obs_passed.fill(False)
        self._obs_mask.fill(False)

        count = min(len(obstacles), self._max_obstacles)
        for i, obstacle in enumerate(obstacles[:count]):
            self._obs_x[i] = obstacle.x
            self._obs_gap_top[i] = obstacle.gap_top
            self._obs_gap_bottom[i] = obstacle.gap_bottom
            self._obs_passed[i] = obstacle.passed
            self._obs_mask[i] = True

        # Nearest obstacle the player still has to clear. With none on screen,
        # pretend a centered gap sits at the right edge.
        upcoming = [o for o in obstacles if o.right >= player.x]
        if upcoming:
            target = upcoming[0]
            next_dx = target.x - player.right
            next_top = target.gap_top
            next_bottom = target.gap_bottom
        else:
            next_dx = self._width - player.right
            half_gap = self._config.obstacles.gap_height / 2
            next_top = self._height / 2 - half_gap
            next_bottom = self._height / 2 + half_gap

        player_center = player.y + player.height / 2
        next_offset = (next_top + next_bottom) / 2 - player_center

        return GameSnapshot(
            player_y=player.y,
            player_velocity=player.velocity,
            score=score,
            tick=tick,
            obstacles_count=count,
            width=self._width,
            height=self._height,
            next_obstacle_dx=next_dx,
            next_gap_top=next_top,
            next_gap_bottom=next_bottom,
            next_gap_offset=next_offset,
            obs_x=self._obs_x.copy(),
            obs_gap_top=self._obs_gap_top.copy(),
            obs_gap_bottom=self._obs_gap_bottom.copy(),
            obs_passed=self._obs_passed.copy(),
            obs_mask=self._obs_mask.copy(),
            board_rgb=board_rgb
        )
