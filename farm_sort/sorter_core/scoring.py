"""
Scoring System
==============

Tracks correct sorts and misses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from farm_sort.sorter_core.entities import AnimalType, Entity, SortPath

logger = logging.getLogger(__name__)

# Miss reasons
WRONG_ROUTE = "wrong_route"
OUT_OF_BOUNDS = "out_of_bounds"


@dataclass(frozen=True)
class ScoreEvent:
    """Record of a single score or miss increment."""
    uid: int
    animal_type: AnimalType
    sort_path: SortPath
    is_miss: bool
    reason: str = ""

    def __repr__(self) -> str:
        if self.is_miss:
            return f"ScoreEvent(miss={self.uid}, {self.animal_type.value}, reason={self.reason})"
        return f"ScoreEvent(sorted={self.uid}, {self.animal_type.value} via {self.sort_path.value})"


class ScoreTracker:
    """
    Holds the session's `score` and `missed` counters.

    Both counters only ever grow. Every increment produces a ScoreEvent;
    events collect until the frame driver drains them.
    """

    def __init__(self):
        self._score: int = 0
        self._missed: int = 0
        self._pending: List[ScoreEvent] = []

    @property
    def score(self) -> int:
        """Animals sorted into the right pen."""
        return self._score

    @property
    def missed(self) -> int:
        """Animals routed wrong or lost off the edge."""
        return self._missed

    @property
    def total(self) -> int:
        return self._score + self._missed

    def record_sort(self, entity: Entity) -> ScoreEvent:
        """Count a correct sort."""
        self._score += 1
        event = ScoreEvent(
            uid=entity.uid,
            animal_type=entity.animal_type,
            sort_path=entity.sort_path,
            is_miss=False
        )
        self._pending.append(event)
        logger.debug("Sorted %s #%d (score=%d)", entity.animal_type.value, entity.uid, self._score)
        return event

    def record_miss(self, entity: Entity, reason: str) -> ScoreEvent:
        """Count a miss."""
        self._missed += 1
        event = ScoreEvent(
            uid=entity.uid,
            animal_type=entity.animal_type,
            sort_path=entity.sort_path,
            is_miss=True,
            reason=reason
        )
        self._pending.append(event)
        logger.debug(
            "Missed %s #%d: %s (missed=%d)",
            entity.animal_type.value, entity.uid, reason, self._missed
        )
        return event

    def drain_events(self) -> List[ScoreEvent]:
        """Return and clear events recorded since the last drain."""
        events = self._pending
        self._pending = []
        return events

    def reset(self) -> None:
        """Reset counters to zero."""
        self._score = 0
        self._missed = 0
        self._pending = []
