"""
RNG - Obstacle Generator
========================

Provides deterministic obstacle spawning. Gap placement is drawn from a
seedable random.Random so that a seed fully determines the course.
"""

from __future__ import annotations

import random
from typing import List, Optional

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.entities import Obstacle


class ObstacleGenerator:
    """
    Spawns one obstacle every spawn_interval_ticks ticks.

    The gap top is uniform over the integers in [gap_top_min, gap_top_max);
    the gap bottom is the top plus the configured gap height.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._spawned: int = 0

    @property
    def spawned(self) -> int:
        """Number of obstacles created since the last reset."""
        return self._spawned

    def should_spawn(self, tick: int) -> bool:
        """True on ticks that are a multiple of the spawn interval."""
        return tick % self._config.obstacles.spawn_interval_ticks == 0

    def make_obstacle(self, x: Optional[float] = None) -> Obstacle:
        """
        Create an obstacle with a random gap.

        Args:
            x: Spawn X coordinate. Defaults to just beyond the right edge.

        Returns:
            The new obstacle (not yet added to any collection).
        """
        cfg = self._config.obstacles
        if x is None:
            x = self._config.obstacle_spawn_x

        gap_top = self._rng.randrange(cfg.gap_top_min, cfg.gap_top_max)
        self._spawned += 1
        return Obstacle(
            x=float(x),
            width=cfg.width,
            gap_top=float(gap_top),
            gap_bottom=float(gap_top + cfg.gap_height),
        )

    def step(self, tick: int, obstacles: List[Obstacle]) -> Optional[Obstacle]:
        """
        Append a new obstacle to the live collection if this tick spawns one.

        Args:
            tick: Current session tick counter.
            obstacles: Live obstacle collection (mutated).

        Returns:
            The spawned obstacle, or None.
        """
        if not self.should_spawn(tick):
            return None
        obstacle = self.make_obstacle()
        obstacles.append(obstacle)
        return obstacle

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator with optional new seed.

        Args:
            seed: New random seed. Keeps current stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._spawned = 0
