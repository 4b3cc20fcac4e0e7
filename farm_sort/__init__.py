"""
Farm Sort Package
=================

Core simulation for the farm sorting arcade game. Sheep and lambs walk
along a path and the player swings a gate to send each animal into the
right pen.

- sorter_core: frame-driven simulation (spawning, routing, motion,
  scoring, pause/game-over state machine)
- game_config.yaml: all tunable numbers (world geometry, speeds, timings)

Rendering and input binding live in tools/play_human.py.
"""
