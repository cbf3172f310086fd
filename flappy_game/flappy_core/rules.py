"""
Game Rules
==========

Handles obstacle scrolling, pass detection, culling and collision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.entities import Obstacle, Player
from flappy_game.flappy_core.scoring import ScoreEvent, ScoreTracker


def overlaps_horizontally(player: Player, obstacle: Obstacle) -> bool:
    """True if the player's horizontal span intersects the obstacle's."""
    return player.x < obstacle.right and player.right > obstacle.x


def collides(player: Player, obstacle: Obstacle) -> bool:
    """
    Collision predicate.

    The player collides when it overlaps the obstacle horizontally and sticks
    out of the gap at either the top or the bottom.
    """
    if not overlaps_horizontally(player, obstacle):
        return False
    return player.y < obstacle.gap_top or player.bottom > obstacle.gap_bottom


@dataclass
class EvaluationResult:
    """Result of evaluating one tick of obstacles against the player."""
    score_events: List[ScoreEvent] = field(default_factory=list)
    collisions: List[Obstacle] = field(default_factory=list)
    removed: int = 0

    @property
    def collided(self) -> bool:
        return len(self.collisions) > 0


class CollisionRules:
    """
    Scroll, scoring, culling and collision for the live obstacle collection.

    - Scroll: every obstacle moves left by scroll_speed
    - Scoring: trailing edge left of the player's x marks the obstacle passed
    - Culling: trailing edge at or beyond despawn_threshold is dropped
    - Collision: see collides()
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize collision rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scroll_speed = config.obstacles.scroll_speed
        self._despawn_threshold = config.obstacles.despawn_threshold

    @property
    def scroll_speed(self) -> float:
        return self._scroll_speed

    @property
    def despawn_threshold(self) -> float:
        return self._despawn_threshold

    def scroll_and_score(
        self,
        player: Player,
        obstacles: List[Obstacle],
        scorer: ScoreTracker,
        tick: int
    ) -> List[ScoreEvent]:
        """Move every obstacle left and award newly passed ones."""
        events = []
        for obstacle in obstacles:
            obstacle.x -= self._scroll_speed
            if not obstacle.passed and obstacle.right < player.x:
                obstacle.passed = True
                events.append(scorer.apply_pass(tick))
        return events

    def cull(self, obstacles: List[Obstacle]) -> int:
        """
        Drop obstacles that have scrolled off the left edge, in place.

        Returns:
            Number of obstacles removed.
        """
        before = len(obstacles)
        obstacles[:] = [o for o in obstacles if o.right > self._despawn_threshold]
        return before - len(obstacles)

    def find_collisions(self, player: Player, obstacles: List[Obstacle]) -> List[Obstacle]:
        """All live obstacles the player currently collides with."""
        return [o for o in obstacles if collides(player, o)]

    def evaluate(
        self,
        player: Player,
        obstacles: List[Obstacle],
        scorer: ScoreTracker,
        tick: int
    ) -> EvaluationResult:
        """
        Run one tick of obstacle rules.

        Args:
            player: The player (read only).
            obstacles: Live obstacle collection (mutated).
            scorer: Score tracker to credit passes to.
            tick: Current session tick.

        Returns:
            EvaluationResult with score events and colliding obstacles.
        """
        score_events = self.scroll_and_score(player, obstacles, scorer, tick)
        removed = self.cull(obstacles)
        collisions = self.find_collisions(player, obstacles)
        return EvaluationResult(
            score_events=score_events,
            collisions=collisions,
            removed=removed
        )
