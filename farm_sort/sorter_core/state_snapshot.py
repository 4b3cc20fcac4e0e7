"""
State Snapshot
==============

Packs session state into fixed-size numpy arrays for renderers and
headless inspection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING

import numpy as np

from farm_sort.sorter_core.config_loader import GameConfig, get_config
from farm_sort.sorter_core.entities import AnimalType, GamePhase, GatePosition, SortPath

if TYPE_CHECKING:
    from farm_sort.sorter_core.session import Session

# Slots in the per-entity arrays
MAX_OBJECTS = 64

ANIMAL_CODES = {AnimalType.JUVENILE: 0, AnimalType.ADULT: 1}
PATH_CODES = {
    SortPath.UNASSIGNED: 0,
    SortPath.ROUTE_A: 1,
    SortPath.ROUTE_B: 2,
    SortPath.WRONG: 3,
}
PHASE_CODES = {GamePhase.RUNNING: 0, GamePhase.PAUSED: 1, GamePhase.GAME_OVER: 2}
GATE_CODES = {GatePosition.ROUTE_A: 0, GatePosition.ROUTE_B: 1}


@dataclass
class GameSnapshot:
    """
    Point-in-time copy of a session.

    Entity arrays are fixed-size with a mask for occupied slots. Slots
    follow spawn order; entities beyond MAX_OBJECTS are counted in
    `objects_count` but not packed.
    """
    # Core state
    score: int
    missed: int
    phase: int
    gate: int
    objects_count: int

    # World info (for normalization)
    world_width: float
    world_height: float
    gate_x: float

    # Object arrays (fixed size, padded)
    obj_uid: np.ndarray               # (MAX_OBJ,) int32, -1 when empty
    obj_type: np.ndarray              # (MAX_OBJ,) int8, 0 juvenile / 1 adult / -1
    obj_x: np.ndarray                 # (MAX_OBJ,) float32
    obj_y: np.ndarray                 # (MAX_OBJ,) float32
    obj_speed: np.ndarray             # (MAX_OBJ,) float32
    obj_path: np.ndarray              # (MAX_OBJ,) int8, see PATH_CODES
    obj_poof: np.ndarray              # (MAX_OBJ,) float32 poof progress in [0, 1]
    obj_mask: np.ndarray              # (MAX_OBJ,) bool

    @property
    def positions(self) -> np.ndarray:
        """(n, 2) float32 positions of occupied slots."""
        return np.stack([self.obj_x[self.obj_mask], self.obj_y[self.obj_mask]], axis=1)

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Convert to a flat dictionary of arrays."""
        return {
            "score": np.array(self.score, dtype=np.int32),
            "missed": np.array(self.missed, dtype=np.int32),
            "phase": np.array(self.phase, dtype=np.int8),
            "gate": np.array(self.gate, dtype=np.int8),
            "objects_count": np.array(self.objects_count, dtype=np.int32),
            "world_width": np.array(self.world_width, dtype=np.float32),
            "world_height": np.array(self.world_height, dtype=np.float32),
            "gate_x": np.array(self.gate_x, dtype=np.float32),
            "obj_uid": self.obj_uid,
            "obj_type": self.obj_type,
            "obj_x": self.obj_x,
            "obj_y": self.obj_y,
            "obj_speed": self.obj_speed,
            "obj_path": self.obj_path,
            "obj_poof": self.obj_poof,
            "obj_mask": self.obj_mask,
        }


class SnapshotBuilder:
    """Builds session snapshots."""

    def __init__(self, config: Optional[GameConfig] = None, max_objects: int = MAX_OBJECTS):
        if config is None:
            config = get_config()

        self._max_objects = max_objects
        self._world_width = float(config.world.width)
        self._world_height = float(config.world.height)
        self._gate_x = float(config.gate_x)

    @property
    def max_objects(self) -> int:
        return self._max_objects

    def build(self, session: "Session", poof_duration: float) -> GameSnapshot:
        """Build a snapshot from a session. Arrays are freshly allocated."""
        n = self._max_objects
        obj_uid = np.full(n, -1, dtype=np.int32)
        obj_type = np.full(n, -1, dtype=np.int8)
        obj_x = np.zeros(n, dtype=np.float32)
        obj_y = np.zeros(n, dtype=np.float32)
        obj_speed = np.zeros(n, dtype=np.float32)
        obj_path = np.zeros(n, dtype=np.int8)
        obj_poof = np.zeros(n, dtype=np.float32)
        obj_mask = np.zeros(n, dtype=bool)

        entities = session.entities
        count = min(len(entities), n)
        for i, entity in enumerate(entities[:count]):
            obj_uid[i] = entity.uid
            obj_type[i] = ANIMAL_CODES[entity.animal_type]
            obj_x[i] = entity.x
            obj_y[i] = entity.y
            obj_speed[i] = entity.speed
            obj_path[i] = PATH_CODES[entity.sort_path]
            obj_poof[i] = entity.poof_progress(poof_duration)
            obj_mask[i] = True

        return GameSnapshot(
            score=session.score,
            missed=session.missed,
            phase=PHASE_CODES[session.phase],
            gate=GATE_CODES[session.gate],
            objects_count=len(entities),
            world_width=self._world_width,
            world_height=self._world_height,
            gate_x=self._gate_x,
            obj_uid=obj_uid,
            obj_type=obj_type,
            obj_x=obj_x,
            obj_y=obj_y,
            obj_speed=obj_speed,
            obj_path=obj_path,
            obj_poof=obj_poof,
            obj_mask=obj_mask,
        )
