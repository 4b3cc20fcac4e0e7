"""
Motion & Lifecycle
==================

Per-tick movement of every animal, arrival and exit detection, the poof
timer, and removal of finished entities.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config
from farm_sort.sorter_core.entities import (
    NOT_REMOVING,
    Entity,
    GatePosition,
    NotRemoving,
    Poofing,
    SortPath,
)
from farm_sort.sorter_core.routing import RoutingResolver
from farm_sort.sorter_core.scoring import OUT_OF_BOUNDS, ScoreTracker

logger = logging.getLogger(__name__)


class MotionEngine:
    """
    Advances entities and owns every resolution decision.

    Distances scale with elapsed time: a tick lasting exactly one reference
    frame moves an animal by its `speed`, and a zero-length tick moves
    nothing.

    Per tick, for each unresolved entity:
    - Poofing: count down the animation, then resolve. Never moves.
    - Walking: step forward, route at the gate, follow the route and
      score on reaching its pen.
    - Fallback: leaving the world without being sorted is a miss.
    """

    def __init__(
        self,
        scorer: ScoreTracker,
        config: Optional[GameConfig] = None,
        resolver: Optional[RoutingResolver] = None
    ):
        """
        Initialize motion engine.

        Args:
            scorer: Counter updated on sorts and misses.
            config: Game configuration. Uses default if None.
            resolver: Routing resolver. Built on `scorer` if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scorer = scorer
        self._resolver = resolver if resolver is not None else RoutingResolver(scorer)

        motion = config.motion
        self._reference_fps = motion.reference_fps
        self._route_a_multiplier = motion.route_a_speed_multiplier
        self._route_b_rise = motion.route_b_rise
        self._route_b_drift = motion.route_b_drift
        self._poof_duration = motion.poof_duration

        self._gate_x = config.gate_x
        self._route_a_finish_x = config.pens.route_a.x + config.pens.route_a.entry_depth
        self._route_b_pen = config.pens.route_b
        self._exit_x = config.world.width + config.world.exit_margin

    @property
    def gate_x(self) -> float:
        return self._gate_x

    @property
    def poof_duration(self) -> float:
        return self._poof_duration

    def advance(self, entity: Entity, delta_seconds: float, gate: GatePosition) -> None:
        """
        Advance a single entity by one tick.

        Args:
            entity: Unresolved entity.
            delta_seconds: Tick length in seconds.
            gate: Gate position used if the entity reaches the gate this tick.
        """
        if entity.resolved:
            return

        removal = entity.removal
        if isinstance(removal, Poofing):
            self._advance_poof(entity, removal, delta_seconds)
            return
        if not isinstance(removal, NotRemoving):
            raise TypeError(f"Unknown removal state: {removal!r}")

        scale = delta_seconds * self._reference_fps
        entity.x += entity.speed * scale

        if entity.x > self._gate_x and entity.sort_path is SortPath.UNASSIGNED:
            if self._resolver.assign(entity, gate) is SortPath.WRONG:
                return

        path = entity.sort_path
        if path is SortPath.ROUTE_A:
            self._follow_route_a(entity, scale)
        elif path is SortPath.ROUTE_B:
            self._follow_route_b(entity, scale)

        if not entity.resolved and self._is_out_of_bounds(entity):
            entity.resolved = True
            self._scorer.record_miss(entity, OUT_OF_BOUNDS)

    def _advance_poof(self, entity: Entity, removal: Poofing, delta_seconds: float) -> None:
        removal = removal.advanced(delta_seconds)
        if removal.elapsed > self._poof_duration:
            entity.resolved = True
            entity.removal = NOT_REMOVING
            logger.debug("Entity %d finished poofing", entity.uid)
        else:
            entity.removal = removal

    def _follow_route_a(self, entity: Entity, scale: float) -> None:
        """Straight run into the sheep pen at an accelerated pace."""
        entity.x += entity.speed * self._route_a_multiplier * scale
        if entity.x > self._route_a_finish_x:
            entity.resolved = True
            self._scorer.record_sort(entity)

    def _follow_route_b(self, entity: Entity, scale: float) -> None:
        """Diagonal climb up the branch into the lamb pen."""
        entity.y -= self._route_b_rise * scale
        entity.x += self._route_b_drift * scale
        if self._route_b_pen.contains_inset(entity.x, entity.y):
            entity.resolved = True
            self._scorer.record_sort(entity)

    def _is_out_of_bounds(self, entity: Entity) -> bool:
        return entity.x > self._exit_x or entity.y < 0

    @staticmethod
    def sweep(entities: List[Entity]) -> List[Entity]:
        """Drop resolved entities, keeping spawn order."""
        return [entity for entity in entities if not entity.resolved]

    def update(
        self,
        entities: List[Entity],
        delta_seconds: float,
        gate: GatePosition
    ) -> List[Entity]:
        """
        Advance every entity, then sweep.

        Args:
            entities: Active collection.
            delta_seconds: Tick length in seconds.
            gate: Current gate position.

        Returns:
            Entities still active after this tick.
        """
        for entity in entities:
            self.advance(entity, delta_seconds, gate)
        return self.sweep(entities)
