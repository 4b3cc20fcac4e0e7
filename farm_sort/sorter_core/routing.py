"""
Routing Resolver
================

Decides where an animal goes once it reaches the gate.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from farm_sort.sorter_core.entities import (
    AnimalType,
    Entity,
    GatePosition,
    Poofing,
    SortPath,
)
from farm_sort.sorter_core.scoring import WRONG_ROUTE, ScoreTracker

logger = logging.getLogger(__name__)

# (gate, animal) -> path. Sheep belong straight through, lambs up the branch.
ROUTING_TABLE: Dict[Tuple[GatePosition, AnimalType], SortPath] = {
    (GatePosition.ROUTE_A, AnimalType.ADULT): SortPath.ROUTE_A,
    (GatePosition.ROUTE_B, AnimalType.JUVENILE): SortPath.ROUTE_B,
    (GatePosition.ROUTE_A, AnimalType.JUVENILE): SortPath.WRONG,
    (GatePosition.ROUTE_B, AnimalType.ADULT): SortPath.WRONG,
}


def resolve(animal_type: AnimalType, gate: GatePosition) -> SortPath:
    """
    Look up the path for an animal at the gate.

    Args:
        animal_type: Type of the arriving animal.
        gate: Current gate position.

    Returns:
        ROUTE_A, ROUTE_B or WRONG.
    """
    return ROUTING_TABLE[(gate, animal_type)]


class RoutingResolver:
    """
    Applies the routing decision to an entity.

    A WRONG result counts as a miss right away and starts the poof
    animation; the entity is never evaluated again.
    """

    def __init__(self, scorer: ScoreTracker):
        self._scorer = scorer

    def assign(self, entity: Entity, gate: GatePosition) -> SortPath:
        """
        Route an entity that has just crossed the gate.

        Args:
            entity: Entity with an UNASSIGNED sort path.
            gate: Current gate position.

        Returns:
            The assigned path.
        """
        path = resolve(entity.animal_type, gate)
        entity.assign_path(path)
        logger.debug("Entity %d (%s) routed %s", entity.uid, entity.animal_type.value, path.value)

        if path is SortPath.WRONG:
            self._scorer.record_miss(entity, WRONG_ROUTE)
            entity.removal = Poofing(0.0)
        return path
