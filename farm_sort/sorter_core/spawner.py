"""
Spawn Scheduler
===============

Fixed-interval spawn timer driven by accumulated frame time.
"""

from __future__ import annotations

from typing import Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config


class SpawnScheduler:
    """
    Accumulates elapsed milliseconds and fires once the total passes the
    configured interval, then starts over from zero.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._interval_ms = config.spawn.interval_ms
        self._accumulated_ms: float = 0.0

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def accumulated_ms(self) -> float:
        """Time collected towards the next spawn."""
        return self._accumulated_ms

    def tick(self, delta_ms: float) -> bool:
        """
        Add a frame's elapsed time.

        Args:
            delta_ms: Milliseconds since the previous running frame.

        Returns:
            True if exactly one entity should be spawned this tick.
        """
        self._accumulated_ms += max(0.0, delta_ms)
        if self._accumulated_ms > self._interval_ms:
            self._accumulated_ms = 0.0
            return True
        return False

    def reset(self) -> None:
        """Clear accumulated time."""
        self._accumulated_ms = 0.0
