"""
Core Game
=========

Main game orchestrator combining physics, obstacles, scoring and the
countdown / playing / game-over state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from flappy_game.flappy_core.config_loader import GameConfig, get_config
from flappy_game.flappy_core.entities import Obstacle, Player
from flappy_game.flappy_core.events import EventDispatcher, EventType, GameEvent, Listener
from flappy_game.flappy_core.physics import PhysicsIntegrator
from flappy_game.flappy_core.rng import ObstacleGenerator
from flappy_game.flappy_core.rules import CollisionRules
from flappy_game.flappy_core.scoreboard import ScoreEntry, Scoreboard
from flappy_game.flappy_core.scoring import ScoreEvent, ScoreTracker
from flappy_game.flappy_core.state_snapshot import GameSnapshot, SnapshotBuilder


class GameState(str, Enum):
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    GAMEOVER = "gameover"


@dataclass
class Session:
    """All mutable simulation state for one countdown-to-game-over run."""
    player: Player
    obstacles: List[Obstacle] = field(default_factory=list)
    scorer: ScoreTracker = field(default_factory=ScoreTracker)
    tick: int = 0

    @property
    def score(self) -> int:
        return self.scorer.score


@dataclass
class TickResult:
    """Result of a single game tick."""
    state: GameState
    delta_score: int
    score_events: List[ScoreEvent]
    events: List[GameEvent]
    game_over: bool


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Countdown and restart cooldown timers
    - Physics integration
    - Obstacle generation
    - Scroll, scoring and collision rules
    - Scoreboard persistence on game over
    - Event emission for presentation layers

    One tick = one frame. Timers advance by the elapsed milliseconds passed
    to tick(); physics always advances by exactly one step.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scoreboard: Optional[Scoreboard] = None
    ):
        """
        Initialize game in the countdown state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for obstacle placement.
            scoreboard: Where final scores are recorded. Scores are not
                persisted if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._scoreboard = scoreboard

        # Subsystems
        self._physics = PhysicsIntegrator(config)
        self._generator = ObstacleGenerator(config, seed)
        self._rules = CollisionRules(config)
        self._events = EventDispatcher()
        self._snapshot_builder = SnapshotBuilder(config)

        self._session = Session(player=Player.from_config(config))
        self._state = GameState.COUNTDOWN
        self._countdown: int = config.timing.countdown_start
        self._countdown_remaining_ms: Optional[float] = config.timing.countdown_interval_ms
        self._cooldown_remaining_ms: Optional[float] = None
        self._restart_enabled: bool = False
        self._started: bool = False

        # Events emitted since the last tick() or start() returned
        self._recorded: List[GameEvent] = []

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def session(self) -> Session:
        """Current session state (read only for callers)."""
        return self._session

    @property
    def player(self) -> Player:
        return self._session.player

    @property
    def obstacles(self) -> List[Obstacle]:
        return self._session.obstacles

    @property
    def score(self) -> int:
        """Current score."""
        return self._session.score

    @property
    def tick_count(self) -> int:
        return self._session.tick

    @property
    def countdown(self) -> int:
        """Value shown on the countdown overlay."""
        return self._countdown

    @property
    def is_over(self) -> bool:
        """True if game has ended."""
        return self._state == GameState.GAMEOVER

    @property
    def can_restart(self) -> bool:
        """True once the game-over cooldown has elapsed."""
        return self.is_over and self._restart_enabled

    @property
    def scoreboard(self) -> Optional[Scoreboard]:
        return self._scoreboard

    @property
    def high_scores(self) -> List[ScoreEntry]:
        if self._scoreboard is None:
            return []
        return self._scoreboard.entries

    @property
    def physics(self) -> PhysicsIntegrator:
        return self._physics

    @property
    def generator(self) -> ObstacleGenerator:
        return self._generator

    @property
    def rules(self) -> CollisionRules:
        return self._rules

    def subscribe(self, listener: Listener) -> Listener:
        """Register a callback for every GameEvent."""
        return self._events.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._events.unsubscribe(listener)

    def start(self) -> List[GameEvent]:
        """
        Announce the initial countdown value.

        Call once after subscribing listeners. Has no effect afterwards.
        """
        if self._started:
            return []
        self._started = True
        if self._countdown <= 0:
            self._begin_play()
        else:
            self._emit(EventType.COUNTDOWN_TICK, count=self._countdown)
        return self._take_recorded()

    def tick(self, elapsed_ms: Optional[float] = None) -> TickResult:
        """
        Advance the game by one frame.

        Args:
            elapsed_ms: Wall-clock time since the previous tick, used only for
                the countdown and restart timers. Defaults to one frame at the
                target frame rate.

        Returns:
            TickResult with the state after the tick and the events emitted.
        """
        if elapsed_ms is None:
            elapsed_ms = self._config.timing.frame_ms

        # Events from between ticks (flap, external game over) are reported here
        events = self.start() + self._take_recorded()

        score_before = self._session.score
        score_events: List[ScoreEvent] = []
        game_over_before = self.is_over

        if self._state == GameState.COUNTDOWN:
            self._tick_countdown(elapsed_ms)
        elif self._state == GameState.PLAYING:
            score_events = self._tick_playing()
        else:
            self._tick_gameover(elapsed_ms)

        return TickResult(
            state=self._state,
            delta_score=self._session.score - score_before,
            score_events=score_events,
            events=events + self._take_recorded(),
            game_over=self.is_over and not game_over_before
        )

    def flap(self) -> bool:
        """
        Apply the flap action.

        Returns:
            True if applied. Ignored outside the playing state.
        """
        if self._state != GameState.PLAYING:
            return False
        self._physics.flap(self._session.player)
        self._emit(EventType.FLAP)
        return True

    def request_restart(self) -> bool:
        """
        Ask to restart after game over.

        The game object itself is never reused: on True the caller must build
        a fresh CoreGame (and reload the scoreboard) as a full relaunch.

        Returns:
            True if the cooldown has elapsed and a restart may proceed.
        """
        return self.can_restart

    def trigger_game_over(self, reason: str = "collision") -> bool:
        """
        Enter the game-over state.

        Idempotent: a second trigger (e.g. floor and pipe in the same tick)
        does nothing and does not record the score twice.

        Returns:
            True if this call performed the transition.
        """
        if self._state == GameState.GAMEOVER:
            return False

        self._state = GameState.GAMEOVER
        self._countdown_remaining_ms = None

        self._cooldown_remaining_ms = self._config.timing.restart_cooldown_ms
        self._restart_enabled = False

        final_score = self._session.score
        saved = self._scoreboard is not None
        if saved:
            try:
                self._scoreboard.record(final_score)
            except OSError:
                # Ranking is kept in memory; only persistence is lost
                saved = False

        self._emit(
            EventType.GAME_OVER,
            score=final_score,
            reason=reason,
            saved=saved,
            high_scores=[e.to_dict() for e in self.high_scores],
        )
        return True

    def _tick_countdown(self, elapsed_ms: float) -> None:
        interval = self._config.timing.countdown_interval_ms
        self._countdown_remaining_ms -= elapsed_ms
        while self._state == GameState.COUNTDOWN and self._countdown_remaining_ms <= 0:
            self._countdown -= 1
            if self._countdown > 0:
                self._countdown_remaining_ms += interval
                self._emit(EventType.COUNTDOWN_TICK, count=self._countdown)
            else:
                self._begin_play()

    def _begin_play(self) -> None:
        """Transition to playing with a fresh session."""
        self._countdown = 0
        self._countdown_remaining_ms = None
        self._state = GameState.PLAYING

        session = self._session
        session.obstacles.clear()
        session.scorer.reset()
        session.player.y = self._config.spawn_y
        session.player.velocity = 0.0
        session.tick = 1

        self._emit(EventType.PLAY_STARTED)

    def _tick_playing(self) -> List[ScoreEvent]:
        session = self._session
        player = session.player

        self._physics.step(player)
        self._generator.step(session.tick, session.obstacles)

        result = self._rules.evaluate(player, session.obstacles, session.scorer, session.tick)
        for _ in result.collisions:
            self.trigger_game_over("collision")

        if self._physics.apply_bounds(player):
            self.trigger_game_over("floor")

        session.tick += 1
        return result.score_events

    def _tick_gameover(self, elapsed_ms: float) -> None:
        self._physics.settle_step(self._session.player)

        if self._cooldown_remaining_ms is not None:
            self._cooldown_remaining_ms -= elapsed_ms
            if self._cooldown_remaining_ms <= 0:
                self._cooldown_remaining_ms = None
                self._restart_enabled = True
                self._emit(EventType.RESTART_ENABLED)

    def _emit(self, event_type: EventType, **data: Any) -> None:
        """Deliver an event to listeners right away and record it."""
        event = GameEvent(type=event_type, tick=self._session.tick, data=data)
        self._recorded.append(event)
        self._events.emit(event)

    def _take_recorded(self) -> List[GameEvent]:
        events, self._recorded = self._recorded, []
        return events

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "state": self._state.value,
            "score": self._session.score,
            "tick": self._session.tick,
            "obstacles": len(self._session.obstacles),
            "obstacles_spawned": self._generator.spawned,
        }

    def build_snapshot(self, board_rgb: Optional[np.ndarray] = None) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            player=self._session.player,
            obstacles=self._session.obstacles,
            score=self._session.score,
            tick=self._session.tick,
            board_rgb=board_rgb
        )

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with playfield size, entities, score and overlay state.
        """
        return {
            "width": self._config.playfield.width,
            "height": self._config.playfield.height,
            "state": self._state.value,
            "countdown": self._countdown,
            "player": self._session.player.to_dict(),
            "obstacles": [o.to_dict() for o in self._session.obstacles],
            "score": self._session.score,
            "high_scores": [e.to_dict() for e in self.high_scores],
            "restart_enabled": self.can_restart,
        }
