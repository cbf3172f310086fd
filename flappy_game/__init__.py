"""
flappy_game Package
===================

Core simulation, persistence and presentation for the Flappy arcade game:

- Obstacle generation and scrolling
- Player physics
- Collision detection and scoring
- Countdown / playing / game-over state machine
- Local top-5 scoreboard

All tunable parameters are in game_config.yaml.
"""
