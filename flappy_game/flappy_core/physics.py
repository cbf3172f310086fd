"""
Physics Integrator
==================

Per-tick vertical motion of the player. Units are playfield units per tick,
so one call advances exactly one frame regardless of wall-clock time.
"""

from __future__ import annotations

from typing import Optional

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.entities import Player


class PhysicsIntegrator:
    """
    Gravity, flap impulse and playfield edge clamps.

    Velocity is updated before position on every step.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.player.gravity
        self._settle_gravity = config.player.settle_gravity
        self._flap_impulse = config.player.flap_impulse
        self._floor_y = float(config.playfield.height)

    @property
    def gravity(self) -> float:
        return self._gravity

    @property
    def settle_gravity(self) -> float:
        return self._settle_gravity

    @property
    def flap_impulse(self) -> float:
        return self._flap_impulse

    @property
    def floor_y(self) -> float:
        """Y coordinate of the floor line (playfield bottom)."""
        return self._floor_y

    def step(self, player: Player) -> None:
        """Advance the player one playing tick."""
        player.velocity += self._gravity
        player.y += player.velocity

    def settle_step(self, player: Player) -> None:
        """
        Advance the player one game-over tick.

        Uses the much weaker settle gravity so the sprite drifts down behind
        the overlay, and never goes below the floor.
        """
        player.velocity += self._settle_gravity
        player.y += player.velocity
        if player.bottom > self._floor_y:
            player.y = self._floor_y - player.height

    def flap(self, player: Player) -> None:
        """Replace the current velocity with the flap impulse."""
        player.velocity = self._flap_impulse

    def apply_bounds(self, player: Player) -> bool:
        """
        Clamp the player to the playfield.

        Floor contact clamps and is reported as lethal. Ceiling contact clamps
        and absorbs the upward velocity but is harmless.

        Returns:
            True if the player touched the floor.
        """
        hit_floor = False
        if player.bottom >= self._floor_y:
            player.y = self._floor_y - player.height
            hit_floor = True
        if player.y < 0:
            player.y = 0.0
            player.velocity = 0.0
        return hit_floor
