"""
Tests for configuration loading and validation.
"""

import os

import pytest
import yaml

from flappy_game.flappy_core.config_loader import load_config


DEFAULT_CONFIG = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "flappy_game",
    "game_config.yaml"
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG, "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaults:
    """Default configuration values."""

    def test_player_constants(self, config):
        """Player defaults match the original game."""
        assert config.player.x == 80
        assert config.player.width == 36
        assert config.player.height == 28
        assert config.player.gravity == pytest.approx(0.10)
        assert config.player.flap_impulse == pytest.approx(-3.8)
        assert config.player.settle_gravity == pytest.approx(0.005)

    def test_obstacle_constants(self, config):
        """Obstacle defaults match the original game."""
        obstacles = config.obstacles
        assert obstacles.width == 60
        assert obstacles.gap_height == 140
        assert obstacles.spawn_interval_ticks == 165
        assert obstacles.scroll_speed == pytest.approx(1.2)
        assert (obstacles.gap_top_min, obstacles.gap_top_max) == (50, 250)
        assert obstacles.despawn_threshold == -50

    def test_timing_and_scoreboard(self, config):
        """Timer and scoreboard defaults."""
        assert config.timing.countdown_start == 3
        assert config.timing.countdown_interval_ms == 1000
        assert config.timing.restart_cooldown_ms == 4000
        assert config.scoreboard.storage_key == "highScores"
        assert config.scoreboard.max_entries == 5

    def test_derived_positions(self, config):
        """Spawn positions are derived from the playfield."""
        assert config.spawn_y == config.playfield.height / 2 - 20
        assert config.obstacle_spawn_x == config.playfield.width + 10

    def test_config_is_frozen(self, config):
        """Config sections are immutable."""
        with pytest.raises(Exception):
            config.player.gravity = 1.0


class TestValidation:
    """Invalid configurations are rejected at load time."""

    def test_missing_file(self, tmp_path):
        """A missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_round_trip_of_default_file(self, tmp_path, raw_config, config):
        """Dumping and reloading the default file gives the same config."""
        assert load_config(write_config(tmp_path, raw_config)) == config

    def test_empty_gap_range(self, tmp_path, raw_config):
        """An empty gap-top range is rejected."""
        raw_config["obstacles"]["gap_top_min"] = 250
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_gap_must_fit_playfield(self, tmp_path, raw_config):
        """A gap that can extend past the floor is rejected."""
        raw_config["obstacles"]["gap_top_max"] = 400
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_settle_gravity_must_be_weaker(self, tmp_path, raw_config):
        """Settle gravity must be weaker than play gravity."""
        raw_config["player"]["settle_gravity"] = 0.2
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_spawn_interval_positive(self, tmp_path, raw_config):
        """A zero spawn interval is rejected."""
        raw_config["obstacles"]["spawn_interval_ticks"] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_max_entries_positive(self, tmp_path, raw_config):
        """A scoreboard of size zero is rejected."""
        raw_config["scoreboard"]["max_entries"] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_observation_section_optional(self, tmp_path, raw_config):
        """The observation section falls back to defaults."""
        del raw_config["observation"]
        config = load_config(write_config(tmp_path, raw_config))
        assert config.observation.max_obstacles == 6
