"""
Entities
========

Animal entities and the small enums/variants that describe their state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union


class AnimalType(Enum):
    """Kind of animal. Fixed at creation."""
    JUVENILE = "juvenile"   # lamb
    ADULT = "adult"         # sheep


class GatePosition(Enum):
    """Where the gate currently sends animals."""
    ROUTE_A = "route_a"     # straight through to the sheep pen
    ROUTE_B = "route_b"     # diverted up the branch to the lamb pen


class SortPath(Enum):
    """Path an entity follows after the gate."""
    UNASSIGNED = "unassigned"
    ROUTE_A = "route_a"
    ROUTE_B = "route_b"
    WRONG = "wrong"


class GamePhase(Enum):
    """Session phase."""
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class NotRemoving:
    """Entity is not being removed."""

    def __repr__(self) -> str:
        return "NotRemoving()"


@dataclass(frozen=True)
class Poofing:
    """Entity is playing its removal animation; `elapsed` is in seconds."""
    elapsed: float = 0.0

    def advanced(self, dt: float) -> "Poofing":
        return Poofing(self.elapsed + dt)


RemovalState = Union[NotRemoving, Poofing]

NOT_REMOVING = NotRemoving()


@dataclass
class Entity:
    """
    One animal on screen.

    Position is in screen coordinates (y grows downward). Speed is in
    pixels per reference frame.
    """
    uid: int
    x: float
    y: float
    animal_type: AnimalType
    speed: float
    sort_path: SortPath = SortPath.UNASSIGNED
    removal: RemovalState = field(default=NOT_REMOVING)
    resolved: bool = False

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def is_poofing(self) -> bool:
        return isinstance(self.removal, Poofing)

    @property
    def is_adult(self) -> bool:
        return self.animal_type is AnimalType.ADULT

    def assign_path(self, path: SortPath) -> None:
        """
        Assign the post-gate path.

        Raises:
            ValueError: If a path was already assigned or `path` is UNASSIGNED.
        """
        if path is SortPath.UNASSIGNED:
            raise ValueError("Cannot assign UNASSIGNED as a sort path")
        if self.sort_path is not SortPath.UNASSIGNED:
            raise ValueError(
                f"Entity {self.uid} already has sort path {self.sort_path.value}"
            )
        self.sort_path = path

    def poof_progress(self, duration: float) -> float:
        """Removal animation progress in [0, 1]; 0 when not poofing."""
        removal = self.removal
        if isinstance(removal, Poofing):
            return min(removal.elapsed / duration, 1.0)
        if isinstance(removal, NotRemoving):
            return 0.0
        raise TypeError(f"Unknown removal state: {removal!r}")

    def __repr__(self) -> str:
        return (
            f"Entity({self.uid}: {self.animal_type.value} at ({self.x:.1f}, {self.y:.1f}), "
            f"path={self.sort_path.value}, removal={self.removal!r}, resolved={self.resolved})"
        )
