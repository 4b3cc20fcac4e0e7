"""
Core Game
=========

Frame driver combining spawning, motion, scoring, rules and the session
state machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config
from farm_sort.sorter_core.entities import Entity, GamePhase, GatePosition
from farm_sort.sorter_core.factory import EntityFactory
from farm_sort.sorter_core.intents import IntentQueue, Restart, SetGate, TogglePause
from farm_sort.sorter_core.motion import MotionEngine
from farm_sort.sorter_core.rules import SessionRules
from farm_sort.sorter_core.scoring import ScoreEvent
from farm_sort.sorter_core.session import Session
from farm_sort.sorter_core.spawner import SpawnScheduler
from farm_sort.sorter_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Result of a single frame."""
    phase: GamePhase
    delta_ms: float
    simulated: bool
    spawned_uid: Optional[int] = None
    delta_score: int = 0
    delta_missed: int = 0
    events: List[ScoreEvent] = field(default_factory=list)
    terminated: bool = False
    termination_reason: str = ""


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Spawn scheduler and entity factory
    - Motion & lifecycle (routing, scoring, poof, removal)
    - Session rules (win threshold)
    - Session phase (running / paused / game over)

    One frame = apply staged intents, then one simulation step if running.
    Input handlers only call submit(); everything else happens in frame().
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize game and start the first session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Initialize subsystems
        self._factory = EntityFactory(config, seed)
        self._spawner = SpawnScheduler(config)
        self._session = Session(config)
        self._motion = MotionEngine(self._session.scorer, config)
        self._rules = SessionRules(config)
        self._intents = IntentQueue()
        self._snapshot_builder = SnapshotBuilder(config)

        # Frame state
        self._max_delta_ms = config.motion.max_frame_delta_ms
        self._last_timestamp: Optional[float] = None
        self._frame_requested: bool = True
        self._frames: int = 0
        self._last_result: Optional[FrameResult] = None

        self._session.begin(self._factory.create())
        logger.info("Game started (seed=%s)", seed)

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def session(self) -> Session:
        """Current session (read it, don't mutate it)."""
        return self._session

    @property
    def motion(self) -> MotionEngine:
        return self._motion

    @property
    def rules(self) -> SessionRules:
        return self._rules

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def missed(self) -> int:
        return self._session.missed

    @property
    def phase(self) -> GamePhase:
        return self._session.phase

    @property
    def gate(self) -> GatePosition:
        return self._session.gate

    @property
    def entities(self) -> List[Entity]:
        return self._session.entities

    @property
    def is_over(self) -> bool:
        """True if the session has ended."""
        return self._session.is_over

    @property
    def frame_requested(self) -> bool:
        """False while the frame chain is halted at game over."""
        return self._frame_requested

    @property
    def frames(self) -> int:
        """Number of frame() calls since the last reset."""
        return self._frames

    @property
    def last_result(self) -> Optional[FrameResult]:
        return self._last_result

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Start a fresh session regardless of phase.

        Args:
            seed: New random seed. Keeps the current RNG if None.
        """
        if seed is not None:
            self._seed = seed
        self._factory.reset(seed)
        self._spawner.reset()
        self._intents.clear()
        self._session.begin(self._factory.create())

        self._last_timestamp = None
        self._frame_requested = True
        self._frames = 0
        self._last_result = None

    def submit(self, intent: object) -> bool:
        """
        Stage an input intent for the next frame.

        A Restart submitted after game over re-arms the frame chain.

        Returns:
            False if the intent was malformed and dropped.
        """
        staged = self._intents.stage(intent)
        if staged and isinstance(intent, Restart) and self._session.is_over:
            self._frame_requested = True
        return staged

    def _consume_delta(self, timestamp_ms: float) -> float:
        """Milliseconds since the previous frame; 0 on the first frame."""
        previous = self._last_timestamp
        self._last_timestamp = timestamp_ms
        if previous is None:
            return 0.0
        return min(max(0.0, timestamp_ms - previous), self._max_delta_ms)

    def _apply_intents(self) -> bool:
        """
        Apply staged intents in arrival order.

        Returns:
            True if the clock should be rebased (resume or restart).
        """
        rebase = False
        for intent in self._intents.drain():
            if isinstance(intent, TogglePause):
                was_paused = self._session.is_paused
                if self._session.toggle_pause() and was_paused:
                    rebase = True
            elif isinstance(intent, Restart):
                if self._session.is_over:
                    self._restart()
                    rebase = True
                else:
                    logger.debug("Restart ignored during %s", self._session.phase.value)
            elif isinstance(intent, SetGate):
                self._session.set_gate(intent.route)
        return rebase

    def _restart(self) -> None:
        self._factory.reset()
        self._spawner.reset()
        self._session.restart(self._factory.create())

    def frame(self, timestamp_ms: float) -> bool:
        """
        Run one frame.

        Args:
            timestamp_ms: Monotonic timestamp in milliseconds.

        Returns:
            True if another frame should be scheduled.
        """
        self._frames += 1
        delta_ms = self._consume_delta(timestamp_ms)
        if self._apply_intents():
            delta_ms = 0.0

        session = self._session
        if session.is_paused:
            self._last_result = FrameResult(session.phase, delta_ms, simulated=False)
            self._frame_requested = True
            return True

        if session.is_over:
            self._last_result = FrameResult(
                session.phase, delta_ms, simulated=False,
                terminated=True, termination_reason=session.termination_reason
            )
            self._frame_requested = False
            return False

        score_before = session.score
        missed_before = session.missed

        # Spawn
        spawned_uid = None
        if self._spawner.tick(delta_ms):
            entity = self._factory.create()
            session.add_entity(entity)
            spawned_uid = entity.uid

        # Move, route, score, prune
        survivors = self._motion.update(session.entities, delta_ms / 1000.0, session.gate)
        session.replace_entities(survivors)

        # Win threshold
        term_result = self._rules.check_termination(session.score)
        if term_result.terminated:
            session.finish(term_result.reason)

        self._last_result = FrameResult(
            phase=session.phase,
            delta_ms=delta_ms,
            simulated=True,
            spawned_uid=spawned_uid,
            delta_score=session.score - score_before,
            delta_missed=session.missed - missed_before,
            events=session.scorer.drain_events(),
            terminated=session.is_over,
            termination_reason=session.termination_reason
        )

        self._frame_requested = not session.is_over
        return self._frame_requested

    def snapshot(self) -> GameSnapshot:
        """Build a numpy snapshot of the current state."""
        return self._snapshot_builder.build(self._session, self._motion.poof_duration)

    def get_info(self) -> Dict[str, Any]:
        """Summary counters for status lines."""
        return {
            "score": self._session.score,
            "missed": self._session.missed,
            "phase": self._session.phase.value,
            "gate": self._session.gate.value,
            "entity_count": len(self._session.entities),
            "frames": self._frames,
            "terminated_reason": self._session.termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with entity positions/types/poof progress and board info.
        """
        poof_duration = self._motion.poof_duration
        entities_data = []
        for entity in self._session.entities:
            entities_data.append({
                "uid": entity.uid,
                "animal_type": entity.animal_type.value,
                "x": entity.x,
                "y": entity.y,
                "sort_path": entity.sort_path.value,
                "poofing": entity.is_poofing,
                "poof_progress": entity.poof_progress(poof_duration),
            })

        world = self._config.world
        return {
            "world_width": world.width,
            "world_height": world.height,
            "path_y": world.path_y,
            "path_width": world.path_width,
            "gate_x": self._motion.gate_x,
            "gate": self._session.gate.value,
            "pen_a": self._config.pens.route_a,
            "pen_b": self._config.pens.route_b,
            "entities": entities_data,
            "score": self._session.score,
            "missed": self._session.missed,
            "win_score": self._rules.win_score,
            "phase": self._session.phase.value,
        }
