"""
Game Rules
==========

Handles the end-of-session condition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from farm_sort.sorter_core.config_loader import GameConfig, get_config

# Termination reasons
WIN_SCORE = "win_score"


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class SessionRules:
    """
    Session termination conditions.

    - Win score: the session ends once `score` reaches the threshold.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize session rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._win_score = config.session.win_score

    @property
    def win_score(self) -> int:
        """Score that ends the session."""
        return self._win_score

    def check_termination(self, score: int) -> TerminationResult:
        """
        Check all termination conditions.

        Args:
            score: Current score.

        Returns:
            TerminationResult indicating game state.
        """
        if score >= self._win_score:
            return TerminationResult.game_over(WIN_SCORE)
        return TerminationResult.none()
