"""
Human Play Mode
================

Play Flappy interactively in a pygame window.

Controls:
    - Space / tap / left click: Flap
    - Restart button, Enter or R: Restart (after game over, once enabled)
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--scale SCALE] [--storage PATH]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from flappy_game.flappy_core.config_loader import load_config, GameConfig
from flappy_game.flappy_core.events import EventType, GameEvent
from flappy_game.flappy_core.game import CoreGame, GameState
from flappy_game.flappy_core.render_full_pygame import PygameRenderer, SoundCues
from flappy_game.flappy_core.scoreboard import ScoreStorage, Scoreboard


class HumanPlayer:
    """
    Human-playable Flappy game.

    Restarting is a full relaunch: the game, scoreboard and listeners are all
    rebuilt from the config and the storage file, nothing is carried over.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scale: float = 1.0,
        storage_path: Optional[str] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._storage_path = storage_path or str(config.scoreboard.storage_path)
        self._window_width = int(config.playfield.width * scale)
        self._window_height = int(config.playfield.height * scale)
        self._target_fps = config.timing.target_fps

        pygame.init()
        self._clock = pygame.time.Clock()
        self._renderer = PygameRenderer(config)
        self._sounds = SoundCues()

        self._running = True
        self._sessions = 0
        self._game = self._launch()

    def _launch(self) -> CoreGame:
        """Build a brand new game, as if the program had just started."""
        scoreboard = Scoreboard(ScoreStorage(self._storage_path), self._config)
        game = CoreGame(config=self._config, seed=self._seed, scoreboard=scoreboard)
        game.subscribe(self._sounds)
        game.subscribe(self._on_event)
        game.start()
        self._sessions += 1
        return game

    def _on_event(self, event: GameEvent) -> None:
        if event.type == EventType.PLAY_STARTED:
            print("Go!")
        elif event.type == EventType.GAME_OVER:
            print(f"\nGAME OVER - Score: {event.data['score']}")
            if not event.data["saved"]:
                print("Warning: high scores could not be saved")
            for rank, entry in enumerate(event.data["high_scores"], start=1):
                print(f"  {rank}. {entry['score']} - {entry['time']}")
        elif event.type == EventType.RESTART_ENABLED:
            print("Press Enter to play again")

    def run(self) -> int:
        """Run the game loop. Returns the last session's score."""
        print("=== Flappy ===")
        print("Space, tap or click to flap")
        print("ESC to quit")
        print()

        elapsed_ms = 0.0
        while self._running:
            self._handle_events()
            if not self._running:
                break

            self._game.tick(elapsed_ms)
            self._renderer.render_to_screen(
                self._game.get_render_data(),
                self._window_width,
                self._window_height
            )
            elapsed_ms = self._clock.tick(self._target_fps)

        score = self._game.score
        self._renderer.close()
        pygame.quit()
        return score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            self._handle_event(event)

    def _handle_event(self, event: "pygame.event.Event") -> None:
        if event.type == pygame.QUIT:
            self._running = False

        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._running = False
            elif event.key == pygame.K_SPACE:
                self._game.flap()
            elif event.key in (pygame.K_RETURN, pygame.K_r):
                self._restart()

        elif event.type == pygame.FINGERDOWN:
            self._game.flap()

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._game.state == GameState.GAMEOVER:
                button = self._renderer.restart_button
                if button is not None and button.collidepoint(event.pos):
                    self._restart()
            elif not getattr(event, "touch", False):
                # Taps also arrive as FINGERDOWN, which already flapped
                self._game.flap()

    def _restart(self) -> None:
        """Relaunch if the game-over cooldown has elapsed."""
        if not self._game.request_restart():
            return
        self._game.unsubscribe(self._sounds)
        self._game.unsubscribe(self._on_event)
        self._game = self._launch()
        print("\n=== Game Restarted ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Flappy interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale (default: 1.0)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--storage", type=str, default=None, help="High-score storage file")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            scale=args.scale,
            storage_path=args.storage
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
