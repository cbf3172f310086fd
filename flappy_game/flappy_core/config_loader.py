"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class PlayfieldConfig:
    """Playfield geometry."""
    width: int                   # Playfield width in units
    height: int                  # Playfield height in units (floor line)


@dataclass(frozen=True)
class PlayerConfig:
    """Player sprite geometry and physics constants."""
    x: float                     # Fixed X coordinate of the player's left edge
    width: float
    height: float
    spawn_offset_y: float        # Spawn at playfield height / 2 - offset
    gravity: float               # Velocity added per playing tick
    flap_impulse: float          # Velocity set on flap (negative is up)
    settle_gravity: float        # Velocity added per tick after game over


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle (pipe) generation and scrolling parameters."""
    width: float
    gap_height: float
    spawn_interval_ticks: int
    scroll_speed: float
    spawn_margin: float          # Spawn at playfield width + margin
    gap_top_min: int             # Inclusive
    gap_top_max: int             # Exclusive
    despawn_threshold: float     # Drop once trailing edge <= this X


@dataclass(frozen=True)
class TimingConfig:
    """Countdown, cooldown and frame pacing."""
    countdown_start: int
    countdown_interval_ms: float
    restart_cooldown_ms: float
    target_fps: int

    @property
    def frame_ms(self) -> float:
        """Milliseconds per tick at the target frame rate."""
        return 1000.0 / self.target_fps


@dataclass(frozen=True)
class ScoreboardConfig:
    """High-score persistence parameters."""
    storage_file: str
    storage_key: str
    max_entries: int
    time_format: str

    @property
    def storage_path(self) -> Path:
        """Storage file with ~ expanded."""
        return Path(os.path.expanduser(self.storage_file))


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters for the Gymnasium wrapper."""
    max_obstacles: int
    max_ticks: int
    image_width: int
    image_height: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    playfield: PlayfieldConfig
    player: PlayerConfig
    obstacles: ObstacleConfig
    timing: TimingConfig
    scoreboard: ScoreboardConfig
    observation: ObservationConfig

    @property
    def spawn_y(self) -> float:
        """Player Y at the start of each session."""
        return self.playfield.height / 2 - self.player.spawn_offset_y

    @property
    def obstacle_spawn_x(self) -> float:
        """X coordinate where new obstacles appear."""
        return self.playfield.width + self.obstacles.spawn_margin


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    playfield = config.playfield
    player = config.player
    obstacles = config.obstacles

    if playfield.width <= 0 or playfield.height <= 0:
        raise ValueError(
            f"Playfield must have positive size, got {playfield.width}x{playfield.height}"
        )

    if player.width <= 0 or player.height <= 0:
        raise ValueError(f"Player must have positive size, got {player.width}x{player.height}")

    if not 0 <= player.x < playfield.width:
        raise ValueError(f"Player x ({player.x}) must lie inside the playfield")

    if player.settle_gravity >= player.gravity:
        raise ValueError(
            f"settle_gravity ({player.settle_gravity}) must be smaller than "
            f"gravity ({player.gravity})"
        )

    if obstacles.width <= 0 or obstacles.gap_height <= 0:
        raise ValueError("Obstacle width and gap_height must be positive")

    if obstacles.spawn_interval_ticks <= 0:
        raise ValueError(
            f"spawn_interval_ticks must be positive, got {obstacles.spawn_interval_ticks}"
        )

    if obstacles.gap_top_min >= obstacles.gap_top_max:
        raise ValueError(
            f"Empty gap range [{obstacles.gap_top_min}, {obstacles.gap_top_max})"
        )

    # Lowest possible gap must still end above the floor
    if obstacles.gap_top_min < 0 or obstacles.gap_top_max - 1 + obstacles.gap_height > playfield.height:
        raise ValueError(
            f"Gap range [{obstacles.gap_top_min}, {obstacles.gap_top_max}) with height "
            f"{obstacles.gap_height} does not fit a playfield of height {playfield.height}"
        )

    timing = config.timing
    if timing.countdown_start < 0:
        raise ValueError(f"countdown_start must be >= 0, got {timing.countdown_start}")
    if timing.countdown_interval_ms <= 0 or timing.target_fps <= 0:
        raise ValueError("countdown_interval_ms and target_fps must be positive")
    if timing.restart_cooldown_ms < 0:
        raise ValueError(f"restart_cooldown_ms must be >= 0, got {timing.restart_cooldown_ms}")

    if config.scoreboard.max_entries <= 0:
        raise ValueError(f"max_entries must be positive, got {config.scoreboard.max_entries}")

    if config.observation.max_obstacles <= 0:
        raise ValueError(
            f"observation.max_obstacles must be positive, got {config.observation.max_obstacles}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    playfield_data = raw["playfield"]
    playfield = PlayfieldConfig(
        width=int(playfield_data["width"]),
        height=int(playfield_data["height"])
    )

    player_data = raw["player"]
    player = PlayerConfig(
        x=float(player_data["x"]),
        width=float(player_data["width"]),
        height=float(player_data["height"]),
        spawn_offset_y=float(player_data.get("spawn_offset_y", 0.0)),
        gravity=float(player_data["gravity"]),
        flap_impulse=float(player_data["flap_impulse"]),
        settle_gravity=float(player_data["settle_gravity"])
    )

    obstacle_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width=float(obstacle_data["width"]),
        gap_height=float(obstacle_data["gap_height"]),
        spawn_interval_ticks=int(obstacle_data["spawn_interval_ticks"]),
        scroll_speed=float(obstacle_data["scroll_speed"]),
        spawn_margin=float(obstacle_data.get("spawn_margin", 10.0)),
        gap_top_min=int(obstacle_data["gap_top_min"]),
        gap_top_max=int(obstacle_data["gap_top_max"]),
        despawn_threshold=float(obstacle_data.get("despawn_threshold", -50.0))
    )

    timing_data = raw["timing"]
    timing = TimingConfig(
        countdown_start=int(timing_data.get("countdown_start", 3)),
        countdown_interval_ms=float(timing_data.get("countdown_interval_ms", 1000.0)),
        restart_cooldown_ms=float(timing_data.get("restart_cooldown_ms", 4000.0)),
        target_fps=int(timing_data.get("target_fps", 60))
    )

    scoreboard_data = raw["scoreboard"]
    scoreboard = ScoreboardConfig(
        storage_file=str(scoreboard_data["storage_file"]),
        storage_key=str(scoreboard_data.get("storage_key", "highScores")),
        max_entries=int(scoreboard_data.get("max_entries", 5)),
        time_format=str(scoreboard_data.get("time_format", "%d-%m-%Y %H:%M:%S"))
    )

    # Observation section is optional
    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_obstacles=int(obs_data.get("max_obstacles", 6)),
        max_ticks=int(obs_data.get("max_ticks", 100000)),
        image_width=int(obs_data.get("image_width", 180)),
        image_height=int(obs_data.get("image_height", 120))
    )

    config = GameConfig(
        playfield=playfield,
        player=player,
        obstacles=obstacles,
        timing=timing,
        scoreboard=scoreboard,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
