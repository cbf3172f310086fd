"""
Tests for player physics.
"""

import pytest

from flappy_game.flappy_core.config_loader import load_config
from flappy_game.flappy_core.entities import Player
from flappy_game.flappy_core.physics import PhysicsIntegrator


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def physics(config):
    return PhysicsIntegrator(config)


@pytest.fixture
def player(config):
    return Player.from_config(config)


class TestIntegration:
    """Gravity integration while playing."""

    def test_player_spawns_at_rest(self, player, config):
        """The player spawns at the configured position with no velocity."""
        assert player.x == config.player.x
        assert player.y == config.spawn_y
        assert player.velocity == 0.0

    def test_velocity_updates_before_position(self, physics, player):
        """y_after = y_before + velocity_after."""
        player.velocity = 1.5
        y_before = player.y

        physics.step(player)

        assert player.velocity == pytest.approx(1.5 + physics.gravity)
        assert player.y == pytest.approx(y_before + player.velocity)

    def test_many_steps_follow_recurrence(self, physics, player):
        """Repeated steps follow the same recurrence."""
        for _ in range(30):
            v_before, y_before = player.velocity, player.y
            physics.step(player)
            assert player.velocity == pytest.approx(v_before + physics.gravity)
            assert player.y == pytest.approx(y_before + v_before + physics.gravity)

    def test_x_never_changes(self, physics, player):
        """Horizontal position is fixed."""
        x = player.x
        for _ in range(10):
            physics.step(player)
            physics.flap(player)
            physics.apply_bounds(player)
        assert player.x == x


class TestFlap:
    """Flap replaces velocity."""

    def test_flap_sets_exact_impulse(self, physics, player):
        """Flap replaces downward velocity with the impulse."""
        player.velocity = 7.3
        physics.flap(player)
        assert player.velocity == physics.flap_impulse

    def test_flap_overrides_upward_velocity(self, physics, player):
        """Flap replaces upward velocity too, it does not add."""
        player.velocity = -10.0
        physics.flap(player)
        assert player.velocity == pytest.approx(-3.8)


class TestBounds:
    """Floor is lethal, ceiling is not."""

    def test_floor_contact_clamps_and_reports(self, physics, player, config):
        """Crossing the floor clamps and reports a hit."""
        player.y = config.playfield.height
        assert physics.apply_bounds(player) is True
        assert player.y == config.playfield.height - player.height

    def test_touching_floor_exactly_is_lethal(self, physics, player, config):
        """Touching the floor exactly counts as a hit."""
        player.y = config.playfield.height - player.height
        assert physics.apply_bounds(player) is True

    def test_above_floor_is_safe(self, physics, player, config):
        """Just above the floor is safe."""
        player.y = config.playfield.height - player.height - 0.5
        assert physics.apply_bounds(player) is False

    def test_ceiling_clamps_and_absorbs_velocity(self, physics, player):
        """The ceiling clamps and stops upward motion."""
        player.y = -5.0
        player.velocity = -3.8
        assert physics.apply_bounds(player) is False
        assert player.y == 0.0
        assert player.velocity == 0.0


class TestSettle:
    """Game-over drift."""

    def test_settle_uses_reduced_gravity(self, physics, player):
        """Settle gravity is much weaker than play gravity."""
        player.velocity = 0.0
        y_before = player.y
        physics.settle_step(player)
        assert player.velocity == pytest.approx(physics.settle_gravity)
        assert player.y == pytest.approx(y_before + physics.settle_gravity)
        assert physics.settle_gravity < physics.gravity

    def test_settle_never_goes_below_floor(self, physics, player, config):
        """Settling stops at the floor."""
        player.y = config.playfield.height - player.height - 1
        player.velocity = 5.0
        for _ in range(50):
            physics.settle_step(player)
            assert player.bottom <= config.playfield.height
        assert player.y == config.playfield.height - player.height
