"""
Tests for session phase transitions and win rules.
"""

import pytest

from farm_sort.sorter_core.config_loader import load_config
from farm_sort.sorter_core.entities import AnimalType, Entity, GamePhase, GatePosition
from farm_sort.sorter_core.rules import WIN_SCORE, SessionRules
from farm_sort.sorter_core.session import Session


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def session(config):
    session = Session(config)
    session.begin(make_entity(0))
    return session


def make_entity(uid):
    return Entity(uid=uid, x=0.0, y=240.0, animal_type=AnimalType.ADULT, speed=5.0)


class TestPause:
    """Test RUNNING <-> PAUSED."""

    def test_toggle_round_trip(self, session):
        assert session.toggle_pause()
        assert session.phase is GamePhase.PAUSED

        assert session.toggle_pause()
        assert session.phase is GamePhase.RUNNING

    def test_no_pause_after_game_over(self, session):
        """GAME_OVER never goes to PAUSED."""
        session.finish(WIN_SCORE)

        assert not session.toggle_pause()
        assert session.phase is GamePhase.GAME_OVER

    def test_no_game_over_while_paused(self, session):
        """PAUSED never goes straight to GAME_OVER."""
        session.toggle_pause()

        assert not session.finish(WIN_SCORE)
        assert session.phase is GamePhase.PAUSED


class TestGate:
    """Test gate changes."""

    def test_default_gate(self, session, config):
        assert session.gate is config.gate.default

    def test_gate_moves_while_running(self, session):
        assert session.set_gate(GatePosition.ROUTE_B)
        assert session.gate is GatePosition.ROUTE_B

    @pytest.mark.parametrize("to_phase", ["paused", "game_over"])
    def test_gate_locked_outside_running(self, session, to_phase):
        if to_phase == "paused":
            session.toggle_pause()
        else:
            session.finish(WIN_SCORE)

        assert not session.set_gate(GatePosition.ROUTE_B)
        assert session.gate is GatePosition.ROUTE_A


class TestRestart:
    """Test GAME_OVER -> RUNNING."""

    def test_restart_only_from_game_over(self, session):
        assert not session.restart(make_entity(1))
        assert [e.uid for e in session.entities] == [0]

    def test_restart_resets_everything(self, session):
        """Counters, entities and gate return to their start values."""
        session.set_gate(GatePosition.ROUTE_B)
        session.add_entity(make_entity(1))
        session.scorer.record_sort(session.entities[0])
        session.scorer.record_miss(session.entities[1], "wrong_route")
        session.finish(WIN_SCORE)

        assert session.restart(make_entity(7))

        assert session.phase is GamePhase.RUNNING
        assert session.score == 0
        assert session.missed == 0
        assert [e.uid for e in session.entities] == [7]
        assert session.gate is session.default_gate
        assert session.termination_reason == ""


class TestSessionRules:
    """Test the win threshold."""

    def test_below_threshold(self, config):
        rules = SessionRules(config)

        assert not rules.check_termination(config.session.win_score - 1).terminated

    def test_at_threshold(self, config):
        rules = SessionRules(config)

        result = rules.check_termination(config.session.win_score)

        assert result.terminated
        assert result.reason == WIN_SCORE

    def test_default_threshold_is_twenty(self, config):
        assert SessionRules(config).win_score == 20
