"""
Solid Renderer
==============

Fast numpy-based renderer that draws the playfield as flat-colored
rectangles: sky, pipes, floor line and the player's hitbox.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from flappy_game.flappy_core.config_loader import GameConfig, get_config


class SolidRenderer:
    """
    Renders the game state as solid-color hitboxes.

    Uses numpy for fast CPU-based rendering without pygame. Playfield and
    image share orientation (y grows downward), so only scaling is applied.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._sky_color = np.array([112, 197, 206], dtype=np.uint8)
        self._pipe_color = np.array([83, 160, 45], dtype=np.uint8)
        self._pipe_passed_color = np.array([60, 120, 35], dtype=np.uint8)
        self._player_color = np.array([250, 210, 50], dtype=np.uint8)
        self._player_dead_color = np.array([210, 80, 60], dtype=np.uint8)
        self._floor_color = np.array([222, 216, 149], dtype=np.uint8)

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = self._sky_color

        scale_x = width / render_data["width"]
        scale_y = height / render_data["height"]

        for obstacle in render_data["obstacles"]:
            color = self._pipe_passed_color if obstacle["passed"] else self._pipe_color
            x0 = obstacle["x"] * scale_x
            x1 = (obstacle["x"] + obstacle["width"]) * scale_x
            # Top pipe
            self._fill_rect(img, x0, 0, x1, obstacle["top"] * scale_y, color)
            # Bottom pipe
            self._fill_rect(img, x0, obstacle["bottom"] * scale_y, x1, height, color)

        # Floor line
        img[max(0, height - 2):height, :] = self._floor_color

        player = render_data["player"]
        color = self._player_dead_color if render_data["state"] == "gameover" else self._player_color
        self._fill_rect(
            img,
            player["x"] * scale_x,
            player["y"] * scale_y,
            (player["x"] + player["w"]) * scale_x,
            (player["y"] + player["h"]) * scale_y,
            color
        )

        return img

    def _fill_rect(
        self,
        img: np.ndarray,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        color: np.ndarray
    ) -> None:
        """Fill [x0, x1) x [y0, y1), clipped to the image."""
        height, width = img.shape[:2]
        left = max(0, int(round(x0)))
        right = min(width, int(round(x1)))
        top = max(0, int(round(y0)))
        bottom = min(height, int(round(y1)))
        if left >= right or top >= bottom:
            return
        img[top:bottom, left:right] = color

    def render_to_screen(self, render_data: Dict[str, Any]) -> None:
        """
        Render to screen (no-op for solid renderer).

        Use PygameRenderer for screen display.
        """
        pass

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
