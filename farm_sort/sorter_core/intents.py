"""
Input Intents
=============

Player intents staged by input handlers and consumed by the frame driver
at the next frame boundary. Handlers never touch the session directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Union

from farm_sort.sorter_core.entities import GatePosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TogglePause:
    """Pause a running session or resume a paused one."""


@dataclass(frozen=True)
class Restart:
    """Start a new session after game over."""


@dataclass(frozen=True)
class SetGate:
    """Swing the gate to a route."""
    route: GatePosition


Intent = Union[TogglePause, Restart, SetGate]


def is_valid_intent(intent: object) -> bool:
    """True if `intent` is a recognised intent with in-range values."""
    if isinstance(intent, (TogglePause, Restart)):
        return True
    if isinstance(intent, SetGate):
        return isinstance(intent.route, GatePosition)
    return False


class IntentQueue:
    """
    FIFO of intents waiting for the next frame.

    Unrecognised or out-of-range intents are dropped on arrival.
    """

    def __init__(self):
        self._pending: List[Intent] = []

    def __len__(self) -> int:
        return len(self._pending)

    def stage(self, intent: object) -> bool:
        """
        Queue an intent.

        Returns:
            False if the intent was malformed and ignored.
        """
        if not is_valid_intent(intent):
            logger.debug("Ignoring malformed intent %r", intent)
            return False
        self._pending.append(intent)
        return True

    def drain(self) -> List[Intent]:
        """Return and clear all staged intents, oldest first."""
        intents = self._pending
        self._pending = []
        return intents

    def clear(self) -> None:
        self._pending = []
