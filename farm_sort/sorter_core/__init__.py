"""
Sorter Core - The heart of the sorting game.

This module provides the frame-driven simulation and all supporting
systems (spawning, routing, motion, scoring, session state).

Main exports:
- CoreGame: Frame driver; call frame(timestamp_ms) once per display refresh
- Session: Session aggregate and phase transitions
- GameConfig: Configuration loaded from game_config.yaml
- TogglePause / Restart / SetGate: Input intents for CoreGame.submit()
"""

from farm_sort.sorter_core.config_loader import GameConfig, load_config, get_config
from farm_sort.sorter_core.entities import (
    AnimalType,
    Entity,
    GamePhase,
    GatePosition,
    NotRemoving,
    Poofing,
    SortPath,
)
from farm_sort.sorter_core.factory import EntityFactory
from farm_sort.sorter_core.spawner import SpawnScheduler
from farm_sort.sorter_core.routing import RoutingResolver, resolve
from farm_sort.sorter_core.scoring import ScoreEvent, ScoreTracker
from farm_sort.sorter_core.motion import MotionEngine
from farm_sort.sorter_core.rules import SessionRules, TerminationResult
from farm_sort.sorter_core.session import Session
from farm_sort.sorter_core.intents import IntentQueue, Restart, SetGate, TogglePause
from farm_sort.sorter_core.state_snapshot import GameSnapshot, SnapshotBuilder
from farm_sort.sorter_core.game import CoreGame, FrameResult

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "AnimalType",
    "Entity",
    "GamePhase",
    "GatePosition",
    "NotRemoving",
    "Poofing",
    "SortPath",
    "EntityFactory",
    "SpawnScheduler",
    "RoutingResolver",
    "resolve",
    "ScoreEvent",
    "ScoreTracker",
    "MotionEngine",
    "SessionRules",
    "TerminationResult",
    "Session",
    "IntentQueue",
    "Restart",
    "SetGate",
    "TogglePause",
    "GameSnapshot",
    "SnapshotBuilder",
    "CoreGame",
    "FrameResult",
]
