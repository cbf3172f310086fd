"""
Full Pygame Renderer
====================

Pretty renderer using pygame for the Flappy game.
Supports both display mode (human play) and headless RGB output, and owns
the overlays (countdown, game-over panel, restart button) and sound cues.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.events import EventType, GameEvent


DEFAULT_SOUNDS = {
    EventType.FLAP: "flap.wav",
    EventType.GAME_OVER: "hit.wav",
}


class SoundCues:
    """
    Plays a short sound for selected game events.

    Missing files, an unavailable mixer or a failed playback leave the game
    silent; they never interrupt play.
    """

    def __init__(self, asset_dir: Optional[str] = None):
        if asset_dir is None:
            asset_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "assets")

        self._sounds: Dict[EventType, Any] = {}
        if not PYGAME_AVAILABLE:
            return

        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
        except pygame.error:
            return

        for event_type, filename in DEFAULT_SOUNDS.items():
            path = os.path.join(asset_dir, filename)
            if not os.path.exists(path):
                continue
            try:
                self._sounds[event_type] = pygame.mixer.Sound(path)
            except pygame.error:
                pass

    @property
    def loaded(self) -> int:
        """Number of sounds available."""
        return len(self._sounds)

    def __call__(self, event: GameEvent) -> None:
        sound = self._sounds.get(event.type)
        if sound is None:
            return
        try:
            # Restart from the beginning if still playing
            sound.stop()
            sound.play()
        except pygame.error:
            pass


class PygameRenderer:
    """
    Full-featured renderer using pygame.

    Supports:
    - Pipes with caps, bird with eye and wing
    - Score overlay, countdown overlay, game-over panel with high scores
    - Restart button, dimmed until the cooldown has elapsed
    - Screen display for human mode
    - RGB array output for agents
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration.
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None
        self._screen_size: Optional[Tuple[int, int]] = None

        # Fonts
        pygame.font.init()
        self._font = pygame.font.Font(None, 28)
        self._font_large = pygame.font.Font(None, 48)
        self._font_huge = pygame.font.Font(None, 120)

        # Colors
        self._sky_color = (112, 197, 206)
        self._pipe_color = (83, 160, 45)
        self._pipe_cap_color = (98, 182, 56)
        self._pipe_outline = (40, 80, 20)
        self._bird_color = (250, 210, 50)
        self._bird_outline = (120, 90, 20)
        self._ground_color = (222, 216, 149)
        self._text_color = (255, 255, 255)
        self._text_shadow = (40, 40, 50)
        self._panel_color = (250, 240, 210)
        self._panel_text = (80, 60, 40)
        self._button_color = (230, 120, 60)

        # Last drawn restart button, in screen coordinates
        self._restart_button: Optional[pygame.Rect] = None

    @property
    def restart_button(self) -> Optional["pygame.Rect"]:
        """Screen rect of the restart button, if the game-over panel is shown."""
        return self._restart_button

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render to RGB array (for agent observation).

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        surface = pygame.Surface((width, height))
        self._render_to_surface(surface, render_data)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def render_to_screen(
        self,
        render_data: Dict[str, Any],
        window_width: Optional[int] = None,
        window_height: Optional[int] = None
    ) -> None:
        """
        Render to pygame window.

        Args:
            render_data: Data from CoreGame.get_render_data().
            window_width: Window width. Defaults to the playfield width.
            window_height: Window height. Defaults to the playfield height.
        """
        window_width = window_width or render_data["width"]
        window_height = window_height or render_data["height"]
        if self._screen is None or self._screen_size != (window_width, window_height):
            self._screen = pygame.display.set_mode((window_width, window_height))
            self._screen_size = (window_width, window_height)
            pygame.display.set_caption("Flappy")

        self._render_to_surface(self._screen, render_data)
        pygame.display.flip()

    def _render_to_surface(
        self,
        surface: pygame.Surface,
        render_data: Dict[str, Any]
    ) -> None:
        """Render game state to a pygame surface."""
        width, height = surface.get_size()
        scale_x = width / render_data["width"]
        scale_y = height / render_data["height"]

        surface.fill(self._sky_color)

        for obstacle in render_data["obstacles"]:
            self._draw_obstacle(surface, obstacle, scale_x, scale_y, height)

        pygame.draw.rect(surface, self._ground_color, pygame.Rect(0, height - 3, width, 3))

        self._draw_player(surface, render_data["player"], scale_x, scale_y)

        self._draw_text(surface, str(render_data["score"]), self._font_large, (18, 18))

        state = render_data["state"]
        self._restart_button = None
        if state == "countdown":
            self._draw_countdown(surface, render_data["countdown"])
        elif state == "gameover":
            self._draw_game_over(surface, render_data)

    def _draw_obstacle(
        self,
        surface: pygame.Surface,
        obstacle: Dict[str, Any],
        scale_x: float,
        scale_y: float,
        height: int
    ) -> None:
        """Draw a pipe pair with caps at the gap edges."""
        x = int(obstacle["x"] * scale_x)
        w = int(obstacle["width"] * scale_x)
        top = int(obstacle["top"] * scale_y)
        bottom = int(obstacle["bottom"] * scale_y)
        cap_h = max(4, int(18 * scale_y))
        cap_overhang = max(2, int(4 * scale_x))

        for body in (pygame.Rect(x, 0, w, top), pygame.Rect(x, bottom, w, height - bottom)):
            if body.height <= 0:
                continue
            pygame.draw.rect(surface, self._pipe_color, body)
            pygame.draw.rect(surface, self._pipe_outline, body, 2)

        top_cap = pygame.Rect(x - cap_overhang, top - cap_h, w + 2 * cap_overhang, cap_h)
        bottom_cap = pygame.Rect(x - cap_overhang, bottom, w + 2 * cap_overhang, cap_h)
        for cap in (top_cap, bottom_cap):
            pygame.draw.rect(surface, self._pipe_cap_color, cap)
            pygame.draw.rect(surface, self._pipe_outline, cap, 2)

    def _draw_player(
        self,
        surface: pygame.Surface,
        player: Dict[str, Any],
        scale_x: float,
        scale_y: float
    ) -> None:
        """Draw the bird as an ellipse filling its hitbox."""
        rect = pygame.Rect(
            int(player["x"] * scale_x),
            int(player["y"] * scale_y),
            max(2, int(player["w"] * scale_x)),
            max(2, int(player["h"] * scale_y))
        )
        pygame.draw.ellipse(surface, self._bird_color, rect)
        pygame.draw.ellipse(surface, self._bird_outline, rect, 2)

        # Eye
        eye_r = max(2, rect.height // 6)
        eye_center = (rect.right - rect.width // 4, rect.top + rect.height // 3)
        pygame.draw.circle(surface, (255, 255, 255), eye_center, eye_r + 1)
        pygame.draw.circle(surface, (20, 20, 20), eye_center, max(1, eye_r // 2))

        # Wing tilts with velocity
        wing_dy = -rect.height // 6 if player["velocity"] < 0 else rect.height // 8
        wing = pygame.Rect(rect.left + rect.width // 6, rect.centery + wing_dy - rect.height // 8,
                           rect.width // 2, rect.height // 3)
        pygame.draw.ellipse(surface, (240, 240, 230), wing)

    def _draw_text(
        self,
        surface: pygame.Surface,
        text: str,
        font: "pygame.font.Font",
        pos: Tuple[int, int],
        center: bool = False
    ) -> None:
        """Draw text with a drop shadow."""
        shadow = font.render(text, True, self._text_shadow)
        label = font.render(text, True, self._text_color)
        if center:
            rect = label.get_rect(center=pos)
            pos = rect.topleft
        surface.blit(shadow, (pos[0] + 2, pos[1] + 2))
        surface.blit(label, pos)

    def _draw_countdown(self, surface: pygame.Surface, count: int) -> None:
        """Dim the field and show the countdown number."""
        width, height = surface.get_size()
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 90))
        surface.blit(overlay, (0, 0))
        if count > 0:
            self._draw_text(surface, str(count), self._font_huge, (width // 2, height // 2), center=True)

    def _draw_game_over(self, surface: pygame.Surface, render_data: Dict[str, Any]) -> None:
        """Draw the game-over panel with high scores and a restart button."""
        width, height = surface.get_size()
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 120))
        surface.blit(overlay, (0, 0))

        panel_w = min(width - 40, 360)
        panel_h = min(height - 40, 320)
        panel = pygame.Rect((width - panel_w) // 2, (height - panel_h) // 2, panel_w, panel_h)
        pygame.draw.rect(surface, self._panel_color, panel, border_radius=10)
        pygame.draw.rect(surface, self._panel_text, panel, 3, border_radius=10)

        title = self._font_large.render("Game Over", True, self._panel_text)
        surface.blit(title, title.get_rect(midtop=(panel.centerx, panel.top + 14)))

        score = self._font.render(f"Score: {render_data['score']}", True, self._panel_text)
        surface.blit(score, score.get_rect(midtop=(panel.centerx, panel.top + 58)))

        y = panel.top + 96
        for rank, entry in enumerate(render_data["high_scores"], start=1):
            line = self._font.render(f"{rank}. {entry['score']} - {entry['time']}", True, self._panel_text)
            surface.blit(line, (panel.left + 24, y))
            y += 26

        button = pygame.Rect(0, 0, 160, 44)
        button.midbottom = (panel.centerx, panel.bottom - 14)
        enabled = render_data["restart_enabled"]
        button_surface = pygame.Surface(button.size, pygame.SRCALPHA)
        # Dimmed until the restart cooldown has elapsed
        button_surface.fill((*self._button_color, 255 if enabled else 100))
        surface.blit(button_surface, button.topleft)
        label = self._font.render("Restart", True, self._text_color)
        surface.blit(label, label.get_rect(center=button.center))
        self._restart_button = button

    def close(self) -> None:
        """Clean up pygame resources."""
        self._restart_button = None
        self._screen = None
