"""
Entity Factory
==============

Creates animals at the path entry with a randomized type, lane offset
and speed.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config, speed_range
from farm_sort.sorter_core.entities import AnimalType, Entity

logger = logging.getLogger(__name__)


class EntityFactory:
    """
    Builds new entities.

    Adults are drawn with probability `spawn.adult_probability`; each type
    samples its speed uniformly from its own range, so sheep walk roughly
    twice as fast as lambs. Animals start at the entry edge of the path with
    a small random lateral offset so they do not overlap exactly.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize factory.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._next_uid: int = 0

        self._adult_probability = config.spawn.adult_probability
        self._entry_x = config.spawn.entry_x
        self._lane_jitter = config.spawn.lane_jitter
        self._lane_y = config.world.path_center_y

    def _choose_type(self) -> AnimalType:
        if self._rng.random() < self._adult_probability:
            return AnimalType.ADULT
        return AnimalType.JUVENILE

    def create(self, animal_type: Optional[AnimalType] = None) -> Entity:
        """
        Create a new entity at the path entry.

        Args:
            animal_type: Force a type instead of sampling one.

        Returns:
            A fresh, unrouted entity.
        """
        if animal_type is None:
            animal_type = self._choose_type()

        low, high = speed_range(self._config, animal_type)
        entity = Entity(
            uid=self._next_uid,
            x=self._entry_x,
            y=self._lane_y - self._lane_jitter + self._rng.random() * self._lane_jitter,
            animal_type=animal_type,
            speed=self._rng.uniform(low, high)
        )
        self._next_uid += 1

        logger.debug("Spawned %r", entity)
        return entity

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Restart uid numbering, optionally reseeding.

        Args:
            seed: New random seed. Keeps current RNG if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._next_uid = 0
