"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Flappy game.
Reward is the number of obstacles passed during the step.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from flappy_game.flappy_core.config_loader import GameConfig, load_config
from flappy_game.flappy_core.game import CoreGame, GameState
from flappy_game.flappy_core.state_snapshot import GameSnapshot


class FlappyEnv(gym.Env):
    """
    Flappy game as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = glide, 1 = flap.

    Observation Space:
        Dict containing player state, the next gap, padded obstacle arrays
        and an optional RGB image.

    Reward:
        Score delta of the step (1.0 when an obstacle is passed, else 0.0).

    Episodes start in the playing state: the countdown is fast-forwarded on
    reset. Scores are not written to the scoreboard.
    """

    metadata = {
        "render_modes": ["human", "rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        render_style: str = "solid",
        image_obs: bool = False,
        image_width: Optional[int] = None,
        image_height: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize Flappy environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "human" for window, "rgb_array" for numpy, None for headless.
            render_style: "solid" for flat hitboxes, "full" for the pygame look.
            image_obs: If True, include board_rgb in observations.
            image_width: Override observation image width.
            image_height: Override observation image height.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._render_style = render_style
        self._image_obs = image_obs
        self._debug = debug

        self._img_width = image_width or self._config.observation.image_width
        self._img_height = image_height or self._config.observation.image_height
        self._frame_ms = 1000.0 / self.metadata["render_fps"]
        self._max_ticks = self._config.observation.max_ticks

        self._game = CoreGame(config=self._config)
        self._steps = 0

        # Initialize renderer (lazy)
        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] FlappyEnv initialized")
            print(f"[DEBUG]   Playfield: {self._config.playfield.width}x{self._config.playfield.height}")
            print(f"[DEBUG]   Spawn interval: {self._config.obstacles.spawn_interval_ticks} ticks")
            print(f"[DEBUG]   Max obstacles: {self._config.observation.max_obstacles}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obs = self._config.observation.max_obstacles
        height = float(self._config.playfield.height)

        obs_dict = {
            "player_y": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "player_velocity": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "tick": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "obstacles_count": spaces.Box(low=0, high=max_obs, shape=(), dtype=np.int32),

            "next_obstacle_dx": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "next_gap_top": spaces.Box(low=0, high=height, shape=(), dtype=np.float32),
            "next_gap_bottom": spaces.Box(low=0, high=height, shape=(), dtype=np.float32),
            "next_gap_offset": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),

            "obs_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obs,), dtype=np.float32),
            "obs_gap_top": spaces.Box(low=0, high=height, shape=(max_obs,), dtype=np.float32),
            "obs_gap_bottom": spaces.Box(low=0, high=height, shape=(max_obs,), dtype=np.float32),
            "obs_passed": spaces.MultiBinary(max_obs),
            "obs_mask": spaces.MultiBinary(max_obs),
        }

        if self._image_obs:
            obs_dict["board_rgb"] = spaces.Box(
                low=0,
                high=255,
                shape=(self._img_height, self._img_width, 3),
                dtype=np.uint8
            )

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        # Unseeded resets continue the stream seeded by the last reset(seed=...)
        if seed is None:
            seed = int(self.np_random.integers(2**31))

        # Fresh game per episode, mirroring a relaunch
        self._game = CoreGame(config=self._config, seed=seed)
        self._game.start()
        interval = self._config.timing.countdown_interval_ms
        while self._game.state == GameState.COUNTDOWN:
            self._game.tick(interval)
        self._steps = 0

        obs = self._snapshot_to_obs(self._game.build_snapshot())
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: 1 to flap before this tick, 0 to glide.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])

        flapped = False
        if int(action) == 1:
            flapped = self._game.flap()

        result = self._game.tick(self._frame_ms)
        self._steps += 1

        obs = self._snapshot_to_obs(self._game.build_snapshot())
        reward = float(result.delta_score)
        terminated = result.state == GameState.GAMEOVER
        truncated = not terminated and self._steps >= self._max_ticks

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["flapped"] = flapped
        info["events"] = [e.type.value for e in result.events]

        if self._debug:
            print(f"[DEBUG] Step: action={action}, y={self._game.player.y:.1f}, "
                  f"v={self._game.player.velocity:.2f}, score={self._game.score}")
            if terminated:
                print(f"[DEBUG] TERMINATED at tick {self._game.tick_count} with score {self._game.score}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = snapshot.to_obs_dict()

        if self._image_obs:
            obs["board_rgb"] = self._render_to_array()

        return obs

    def _render_to_array(self) -> np.ndarray:
        """Render board to RGB array."""
        if self._renderer is None:
            self._init_renderer()

        render_data = self._game.get_render_data()
        return self._renderer.render(
            render_data,
            self._img_width,
            self._img_height
        )

    def _init_renderer(self) -> None:
        """Initialize renderer based on style."""
        if self._render_style == "full" or self.render_mode == "human":
            from flappy_game.flappy_core.render_full_pygame import PygameRenderer
            self._renderer = PygameRenderer(self._config)
        else:
            from flappy_game.flappy_core.render_solid import SolidRenderer
            self._renderer = SolidRenderer(self._config)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode == "rgb_array":
            return self._render_to_array()

        if self.render_mode == "human":
            if self._renderer is None:
                self._init_renderer()

            render_data = self._game.get_render_data()
            self._renderer.render_to_screen(render_data)
            return None

        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
