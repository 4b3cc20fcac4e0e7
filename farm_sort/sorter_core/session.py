"""
Session
=======

The session aggregate (animals, counters, gate, phase) and its phase
transitions.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config
from farm_sort.sorter_core.entities import Entity, GamePhase, GatePosition
from farm_sort.sorter_core.scoring import ScoreTracker

logger = logging.getLogger(__name__)


class Session:
    """
    All mutable state of one game session.

    Phase transitions:
    - RUNNING <-> PAUSED via toggle_pause()
    - RUNNING -> GAME_OVER via finish()
    - GAME_OVER -> RUNNING via restart()

    Requests that do not match a transition are ignored and return False.
    The gate can only be moved while RUNNING.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize an empty running session.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._default_gate = config.gate.default
        self._scorer = ScoreTracker()
        self._entities: List[Entity] = []
        self._gate: GatePosition = self._default_gate
        self._phase: GamePhase = GamePhase.RUNNING
        self._termination_reason: str = ""

    @property
    def scorer(self) -> ScoreTracker:
        return self._scorer

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def missed(self) -> int:
        return self._scorer.missed

    @property
    def entities(self) -> List[Entity]:
        """Active entities in spawn order."""
        return self._entities

    @property
    def gate(self) -> GatePosition:
        return self._gate

    @property
    def default_gate(self) -> GatePosition:
        return self._default_gate

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is GamePhase.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._phase is GamePhase.PAUSED

    @property
    def is_over(self) -> bool:
        return self._phase is GamePhase.GAME_OVER

    @property
    def termination_reason(self) -> str:
        """Reason for game over, or empty string."""
        return self._termination_reason

    def add_entity(self, entity: Entity) -> None:
        self._entities.append(entity)

    def replace_entities(self, entities: List[Entity]) -> None:
        self._entities = entities

    def begin(self, first_entity: Entity) -> None:
        """
        Start from a clean slate in any phase.

        Resets counters, clears entities, puts the gate in its default
        position and adds the starting entity.
        """
        self._scorer.reset()
        self._entities = [first_entity]
        self._gate = self._default_gate
        self._phase = GamePhase.RUNNING
        self._termination_reason = ""

    def toggle_pause(self) -> bool:
        """Flip between RUNNING and PAUSED."""
        if self._phase is GamePhase.RUNNING:
            self._phase = GamePhase.PAUSED
        elif self._phase is GamePhase.PAUSED:
            self._phase = GamePhase.RUNNING
        else:
            logger.debug("Pause toggle ignored during %s", self._phase.value)
            return False
        logger.debug("Session %s", self._phase.value)
        return True

    def set_gate(self, gate: GatePosition) -> bool:
        """Move the gate. Only allowed while RUNNING."""
        if self._phase is not GamePhase.RUNNING:
            logger.debug("Gate change ignored during %s", self._phase.value)
            return False
        if gate is not self._gate:
            logger.debug("Gate moved to %s", gate.value)
        self._gate = gate
        return True

    def finish(self, reason: str) -> bool:
        """End a running session."""
        if self._phase is not GamePhase.RUNNING:
            return False
        self._phase = GamePhase.GAME_OVER
        self._termination_reason = reason
        logger.info(
            "Game over (%s): score=%d missed=%d", reason, self.score, self.missed
        )
        return True

    def restart(self, first_entity: Entity) -> bool:
        """Leave GAME_OVER and start a fresh session."""
        if self._phase is not GamePhase.GAME_OVER:
            logger.debug("Restart ignored during %s", self._phase.value)
            return False
        self.begin(first_entity)
        logger.info("Session restarted")
        return True
