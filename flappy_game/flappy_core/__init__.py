"""
Flappy Core - The heart of the game.

This module provides the core game simulation, the scoreboard store, a
Gymnasium environment wrapper and all supporting systems (physics,
obstacle generation, collision, scoring).

Main exports:
- CoreGame: Countdown / playing / game-over simulation driven by tick()
- FlappyEnv: Gymnasium environment for agent training
- Scoreboard: Persistent top-5 high scores
- GameConfig: Configuration loaded from game_config.yaml
"""

from flappy_game.flappy_core.config_loader import GameConfig, load_config
from flappy_game.flappy_core.entities import Obstacle, Player
from flappy_game.flappy_core.events import EventType, GameEvent
from flappy_game.flappy_core.game import CoreGame, GameState, TickResult
from flappy_game.flappy_core.scoreboard import ScoreEntry, ScoreStorage, Scoreboard
from flappy_game.flappy_core.env_gym import FlappyEnv

__all__ = [
    "GameConfig",
    "load_config",
    "Obstacle",
    "Player",
    "EventType",
    "GameEvent",
    "CoreGame",
    "GameState",
    "TickResult",
    "ScoreEntry",
    "ScoreStorage",
    "Scoreboard",
    "FlappyEnv",
]
