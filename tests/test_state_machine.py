"""
Tests for the countdown / playing / game-over state machine.
"""

import json

import pytest

from flappy_game.flappy_core.config_loader import load_config
from flappy_game.flappy_core.entities import Obstacle
from flappy_game.flappy_core.events import EventType
from flappy_game.flappy_core.game import CoreGame, GameState
from flappy_game.flappy_core.scoreboard import ScoreStorage, Scoreboard


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=42)


@pytest.fixture
def scoreboard(config, tmp_path):
    return Scoreboard(ScoreStorage(tmp_path / "storage.json"), config)


@pytest.fixture
def recorder():
    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

        def types(self):
            return [e.type for e in self.events]

    return Recorder()


def play(game):
    """Run the countdown to completion."""
    game.start()
    while game.state == GameState.COUNTDOWN:
        game.tick(1000)
    return game


class TestCountdown:
    """3, 2, 1, go."""

    def test_initial_state(self, game):
        """A new game waits in the countdown state."""
        assert game.state == GameState.COUNTDOWN
        assert game.countdown == 3
        assert game.obstacles == []

    def test_start_announces_initial_count(self, game, recorder):
        """Start emits the first countdown tick."""
        game.subscribe(recorder)
        events = game.start()
        assert [e.data["count"] for e in events] == [3]
        assert recorder.types() == [EventType.COUNTDOWN_TICK]

    def test_start_only_once(self, game):
        """A second start does nothing."""
        game.start()
        assert game.start() == []

    def test_three_intervals_reach_playing(self, game, recorder):
        """Three timer firings lead to a fresh playing session."""
        game.subscribe(recorder)
        game.start()

        assert game.tick(1000).state == GameState.COUNTDOWN
        assert game.countdown == 2
        assert game.tick(1000).state == GameState.COUNTDOWN
        assert game.countdown == 1
        result = game.tick(1000)

        assert result.state == GameState.PLAYING
        assert game.obstacles == []
        assert game.score == 0
        assert game.tick_count == 1
        assert game.player.y == game.config.spawn_y
        assert game.player.velocity == 0.0

        counts = [e.data.get("count") for e in recorder.events
                  if e.type == EventType.COUNTDOWN_TICK]
        assert counts == [3, 2, 1]
        assert recorder.types()[-1] == EventType.PLAY_STARTED

    def test_partial_interval_does_not_fire(self, game):
        """The countdown waits for a full interval."""
        game.start()
        game.tick(999)
        assert game.countdown == 3
        game.tick(1)
        assert game.countdown == 2

    def test_long_frame_catches_up(self, game):
        """A long frame fires every missed countdown step in order."""
        game.start()
        result = game.tick(3000)
        assert result.state == GameState.PLAYING
        assert [e.type for e in result.events] == [
            EventType.COUNTDOWN_TICK,
            EventType.COUNTDOWN_TICK,
            EventType.PLAY_STARTED,
        ]

    def test_no_physics_during_countdown(self, game):
        """The player does not move during the countdown."""
        game.start()
        y = game.player.y
        for _ in range(10):
            game.tick(100)
        assert game.player.y == y
        assert game.tick_count == 0

    def test_flap_ignored_during_countdown(self, game, recorder):
        """Flap is ignored before play starts."""
        game.subscribe(recorder)
        game.start()
        assert game.flap() is False
        assert game.player.velocity == 0.0
        assert EventType.FLAP not in recorder.types()

    def test_countdown_cannot_fire_after_play(self, game):
        """The countdown timer is dead once play starts."""
        play(game)
        result = game.tick(5000)
        assert all(e.type != EventType.COUNTDOWN_TICK for e in result.events)
        assert game.countdown == 0
        assert game.state != GameState.COUNTDOWN

    def test_tick_without_start_starts(self, game):
        """The first tick starts the countdown if start was not called."""
        result = game.tick(0)
        assert result.events[0].type == EventType.COUNTDOWN_TICK
        assert result.events[0].data["count"] == 3


class TestPlaying:
    """Per-frame simulation."""

    def test_gravity_applied_per_tick(self, game):
        """Each playing tick applies gravity once."""
        play(game)
        game.tick()
        assert game.player.velocity == pytest.approx(0.1)
        assert game.player.y == pytest.approx(game.config.spawn_y + 0.1)
        assert game.tick_count == 2

    def test_flap_sets_velocity(self, game, recorder):
        """Flap sets the impulse and emits a flap event."""
        play(game)
        game.subscribe(recorder)
        game.tick()
        assert game.flap() is True
        assert game.player.velocity == pytest.approx(-3.8)
        assert recorder.types() == [EventType.FLAP]

    def test_flap_between_ticks_applies_on_next_tick(self, game):
        """A flap between ticks is integrated on the next tick."""
        play(game)
        game.flap()
        game.tick()
        assert game.player.velocity == pytest.approx(-3.8 + 0.1)

    def test_first_obstacle_spawns_at_interval(self, game):
        """The first obstacle appears on tick 165."""
        play(game)
        while game.tick_count < 165:
            if game.player.y > 300:
                game.flap()
            game.tick()
            assert game.obstacles == []
        game.tick()
        assert len(game.obstacles) == 1

    def test_pass_increments_score(self, game):
        """Clearing an obstacle scores one point."""
        play(game)
        game.obstacles.append(Obstacle(x=21.0, width=60, gap_top=100.0, gap_bottom=240.0))
        result = game.tick()
        assert result.delta_score == 1
        assert game.score == 1
        assert len(result.score_events) == 1
        assert game.obstacles[0].passed

    def test_ceiling_is_not_lethal(self, game):
        """Flying into the ceiling does not end the game."""
        play(game)
        for _ in range(100):
            game.flap()
            game.tick()
        assert game.state == GameState.PLAYING
        assert game.player.y >= 0.0


class TestGameOver:
    """Game-over entry, scoreboard recording and restart cooldown."""

    def test_floor_ends_game(self, config, scoreboard, recorder):
        """Falling to the floor ends the game and records the score."""
        game = CoreGame(config=config, seed=1, scoreboard=scoreboard)
        game.subscribe(recorder)
        play(game)

        for _ in range(200):
            if game.tick().game_over:
                break

        assert game.state == GameState.GAMEOVER
        assert game.player.bottom == config.playfield.height
        over = [e for e in recorder.events if e.type == EventType.GAME_OVER]
        assert len(over) == 1
        assert over[0].data["reason"] == "floor"
        assert over[0].data["score"] == 0
        assert len(scoreboard.entries) == 1

    def test_floor_and_pipe_same_tick_record_once(self, config, scoreboard, recorder, tmp_path):
        """Two hits in one tick record the score once."""
        game = CoreGame(config=config, seed=1, scoreboard=scoreboard)
        game.subscribe(recorder)
        play(game)

        game.player.y = 470.0
        game.obstacles.append(Obstacle(x=80.0, width=60, gap_top=50.0, gap_bottom=190.0))
        result = game.tick()

        assert result.game_over
        assert recorder.types().count(EventType.GAME_OVER) == 1
        assert [e.type for e in result.events].count(EventType.GAME_OVER) == 1
        assert len(scoreboard.entries) == 1

        stored = json.loads(json.loads((tmp_path / "storage.json").read_text())["highScores"])
        assert len(stored) == 1

    def test_trigger_is_idempotent(self, game):
        """Only the first game-over trigger takes effect."""
        play(game)
        assert game.trigger_game_over("collision") is True
        assert game.trigger_game_over("floor") is False

    def test_flap_ignored_after_game_over(self, game):
        """Flap is ignored after game over."""
        play(game)
        game.trigger_game_over()
        velocity = game.player.velocity
        assert game.flap() is False
        assert game.player.velocity == velocity

    def test_settle_gravity_after_game_over(self, game):
        """After game over the player drifts under settle gravity."""
        play(game)
        game.trigger_game_over()
        before = game.player.velocity
        game.tick()
        assert game.player.velocity == pytest.approx(before + 0.005)

    def test_world_frozen_after_game_over(self, game):
        """Obstacles and tick counter stop after game over."""
        play(game)
        game.obstacles.append(Obstacle(x=400.0, width=60, gap_top=100.0, gap_bottom=240.0))
        game.trigger_game_over()
        tick = game.tick_count
        for _ in range(10):
            game.tick()
        assert game.obstacles[0].x == 400.0
        assert game.tick_count == tick

    def test_restart_refused_during_cooldown(self, game, recorder):
        """Restart is refused until the cooldown elapses."""
        game.subscribe(recorder)
        play(game)
        game.trigger_game_over()

        for _ in range(3):
            game.tick(1000)
            assert game.request_restart() is False
            assert game.get_render_data()["restart_enabled"] is False

        result = game.tick(1000)
        assert game.request_restart() is True
        assert [e.type for e in result.events] == [EventType.RESTART_ENABLED]
        assert recorder.types().count(EventType.RESTART_ENABLED) == 1

        game.tick(1000)
        assert recorder.types().count(EventType.RESTART_ENABLED) == 1

    def test_restart_refused_while_playing(self, game):
        """Restart is refused during play."""
        play(game)
        assert game.request_restart() is False

    def test_game_over_event_carries_high_scores(self, config, scoreboard, recorder):
        """The game-over event lists the updated high scores."""
        scoreboard.record(7)
        game = CoreGame(config=config, seed=1, scoreboard=scoreboard)
        game.subscribe(recorder)
        play(game)
        game.trigger_game_over()

        event = recorder.events[-1]
        assert event.type == EventType.GAME_OVER
        assert [e["score"] for e in event.data["high_scores"]] == [7, 0]

    def test_without_scoreboard_nothing_persisted(self, game):
        """Without a scoreboard, nothing is recorded."""
        play(game)
        game.trigger_game_over()
        assert game.high_scores == []
        assert game.scoreboard is None

    def test_unwritable_storage_still_ends_game(self, config, tmp_path, recorder):
        """A failed scoreboard write still ends the game and unlocks restart."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        scoreboard = Scoreboard(ScoreStorage(blocker / "storage.json"), config)
        game = CoreGame(config=config, seed=1, scoreboard=scoreboard)
        game.subscribe(recorder)
        play(game)

        assert game.trigger_game_over() is True
        over = [e for e in recorder.events if e.type == EventType.GAME_OVER]
        assert len(over) == 1
        assert over[0].data["saved"] is False
        assert [e["score"] for e in over[0].data["high_scores"]] == [0]

        for _ in range(10):
            game.tick(1000)
        assert game.state == GameState.GAMEOVER
        assert game.can_restart

    def test_saved_flag_on_success(self, config, scoreboard, recorder):
        """A successful write is reported on the game-over event."""
        game = CoreGame(config=config, seed=1, scoreboard=scoreboard)
        game.subscribe(recorder)
        play(game)
        game.trigger_game_over()
        assert recorder.events[-1].data["saved"] is True


class TestListeners:
    """Event dispatch to presentation layers."""

    def test_unsubscribe_stops_delivery(self, game, recorder):
        """Unsubscribed listeners receive nothing further."""
        game.subscribe(recorder)
        game.start()
        game.unsubscribe(recorder)
        game.tick(1000)
        assert len(recorder.events) == 1

    def test_event_to_dict(self, game):
        """Events serialize to plain dicts."""
        event = game.start()[0]
        assert event.to_dict() == {"type": "countdown-tick", "tick": 0, "data": {"count": 3}}


class TestRenderData:
    """Presentation view of the game."""

    def test_render_data_keys(self, game):
        """Render data has every key the renderers read."""
        data = game.get_render_data()
        assert set(data) == {
            "width", "height", "state", "countdown", "player", "obstacles",
            "score", "high_scores", "restart_enabled",
        }
        assert data["state"] == "countdown"
        assert data["countdown"] == 3

    def test_info(self, game):
        """Info reports state, score and obstacle count."""
        play(game)
        info = game.get_info()
        assert info["state"] == "playing"
        assert info["score"] == 0
        assert info["obstacles"] == 0
