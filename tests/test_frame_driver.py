"""
Tests for the frame driver (CoreGame).
"""

from collections import Counter
from dataclasses import replace

import pytest

from farm_sort.sorter_core.config_loader import load_config
from farm_sort.sorter_core.entities import (
    AnimalType,
    Entity,
    GamePhase,
    GatePosition,
    SortPath,
)
from farm_sort.sorter_core.game import CoreGame
from farm_sort.sorter_core.intents import Restart, SetGate, TogglePause

FRAME_MS = 1000.0 / 60


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def quiet_config(config):
    """Config whose spawn timer never fires, for single-animal scenarios."""
    return replace(config, spawn=replace(config.spawn, interval_ms=1e12))


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=42)


@pytest.fixture
def quiet_game(quiet_config):
    return CoreGame(config=quiet_config, seed=42)


class FrameClock:
    """Feeds evenly spaced timestamps to a game."""

    def __init__(self, game, start=0.0, step=FRAME_MS):
        self.game = game
        self.now = start
        self.step = step
        self.started = False

    def tick(self):
        if self.started:
            self.now += self.step
        self.started = True
        return self.game.frame(self.now)


def place(game, *entities):
    game.session.replace_entities(list(entities))


def autopilot(game):
    """Swing the gate for the unrouted animal furthest along the path."""
    waiting = [e for e in game.entities if e.sort_path is SortPath.UNASSIGNED]
    if waiting:
        lead = max(waiting, key=lambda e: e.x)
        route = GatePosition.ROUTE_A if lead.is_adult else GatePosition.ROUTE_B
        game.submit(SetGate(route))


class TestStart:
    """Test session start and the first frame."""

    def test_starts_running_with_one_entity(self, game, config):
        assert game.phase is GamePhase.RUNNING
        assert len(game.entities) == 1
        assert game.score == 0
        assert game.missed == 0
        assert game.gate is config.gate.default
        assert game.frame_requested

    def test_first_frame_has_zero_delta(self, game):
        """The first frame never jumps, whatever the clock's epoch."""
        before = [e.position for e in game.entities]

        assert game.frame(123456.0)

        assert game.last_result.delta_ms == 0.0
        assert [e.position for e in game.entities] == before

    def test_delta_is_clamped(self, game, config):
        game.frame(0.0)
        game.frame(5000.0)

        assert game.last_result.delta_ms == config.motion.max_frame_delta_ms

    def test_backwards_clock_is_zero_delta(self, game):
        game.frame(1000.0)
        game.frame(900.0)

        assert game.last_result.delta_ms == 0.0

    def test_spawns_about_once_a_second(self, game):
        clock = FrameClock(game)
        spawned = []
        for _ in range(int(3.5 * 60)):
            clock.tick()
            if game.last_result.spawned_uid is not None:
                spawned.append(game.last_result.spawned_uid)

        assert len(spawned) == 3
        assert spawned == sorted(spawned)

    def test_reset(self, game):
        clock = FrameClock(game)
        for _ in range(200):
            clock.tick()

        game.reset(seed=5)

        assert game.frames == 0
        assert len(game.entities) == 1
        assert game.score == 0 and game.missed == 0


class TestScenarios:
    """End-to-end sorting scenarios."""

    def test_adult_through_straight_gate_scores(self, quiet_game):
        """Adult with the gate on ROUTE_A scores once and leaves."""
        sheep = Entity(uid=100, x=0.0, y=240.0, animal_type=AnimalType.ADULT, speed=5.0)
        place(quiet_game, sheep)
        clock = FrameClock(quiet_game)

        for _ in range(1000):
            clock.tick()
            if sheep.resolved:
                break

        result = quiet_game.last_result
        assert quiet_game.score == 1
        assert quiet_game.missed == 0
        assert result.delta_score == 1
        assert [e.uid for e in result.events] == [100]
        assert sheep not in quiet_game.entities

    def test_lamb_through_straight_gate_poofs(self, quiet_game):
        """Lamb with the gate on ROUTE_A: miss at crossing, removed after the poof."""
        lamb = Entity(uid=7, x=0.0, y=240.0, animal_type=AnimalType.JUVENILE, speed=3.0)
        place(quiet_game, lamb)
        clock = FrameClock(quiet_game)

        for _ in range(1000):
            clock.tick()
            if lamb.sort_path is not SortPath.UNASSIGNED:
                break

        assert lamb.sort_path is SortPath.WRONG
        assert lamb.is_poofing
        assert quiet_game.missed == 1
        assert quiet_game.last_result.delta_missed == 1
        assert lamb in quiet_game.entities

        crossed_at = clock.now
        frozen = lamb.position
        while lamb in quiet_game.entities:
            clock.tick()
            assert lamb.position == frozen

        poof_ms = clock.now - crossed_at
        assert 400.0 - FRAME_MS < poof_ms <= 400.0 + 2 * FRAME_MS
        assert quiet_game.missed == 1
        assert quiet_game.score == 0

    def test_lamb_through_diverted_gate_scores(self, quiet_game):
        lamb = Entity(uid=3, x=0.0, y=240.0, animal_type=AnimalType.JUVENILE, speed=2.5)
        place(quiet_game, lamb)
        quiet_game.submit(SetGate(GatePosition.ROUTE_B))
        clock = FrameClock(quiet_game)

        for _ in range(2000):
            clock.tick()
            if lamb.resolved:
                break

        assert lamb.sort_path is SortPath.ROUTE_B
        assert quiet_game.score == 1
        assert quiet_game.missed == 0

    def test_win_on_the_scoring_tick(self, quiet_game):
        """Reaching the win score ends the game on that same tick."""
        scorer = quiet_game.session.scorer
        filler = Entity(uid=999, x=0.0, y=0.0, animal_type=AnimalType.ADULT, speed=1.0)
        for _ in range(quiet_game.rules.win_score - 1):
            scorer.record_sort(filler)
        scorer.drain_events()

        finisher = Entity(uid=1, x=705.0, y=240.0, animal_type=AnimalType.ADULT, speed=5.0)
        finisher.assign_path(SortPath.ROUTE_A)
        walker = Entity(uid=2, x=100.0, y=240.0, animal_type=AnimalType.ADULT, speed=5.0)
        place(quiet_game, finisher, walker)
        clock = FrameClock(quiet_game)

        assert clock.tick()
        assert not clock.tick()

        result = quiet_game.last_result
        assert quiet_game.score == 20
        assert quiet_game.phase is GamePhase.GAME_OVER
        assert result.terminated
        assert result.termination_reason == "win_score"
        assert not quiet_game.frame_requested

        # Nothing moves or spawns afterwards
        walker_position = walker.position
        for _ in range(300):
            assert not clock.tick()
        assert [e.uid for e in quiet_game.entities] == [2]
        assert walker.position == walker_position
        assert quiet_game.score == 20

    def test_restart_round_trip(self, game):
        """Restart from GAME_OVER resets counters, entities and gate."""
        clock = FrameClock(game)
        game.submit(SetGate(GatePosition.ROUTE_B))
        for _ in range(120):
            clock.tick()
        assert game.gate is GatePosition.ROUTE_B

        game.session.finish("win_score")
        assert not clock.tick()

        # Pause does not re-arm the frame chain; restart does
        game.submit(TogglePause())
        assert not game.frame_requested
        game.submit(Restart())
        assert game.frame_requested

        assert clock.tick()
        assert game.phase is GamePhase.RUNNING
        assert game.score == 0
        assert game.missed == 0
        assert len(game.entities) == 1
        assert game.entities[0].uid == 0
        assert game.entities[0].sort_path is SortPath.UNASSIGNED
        assert game.gate is GatePosition.ROUTE_A
        assert game.last_result.delta_ms == 0.0

    def test_restart_ignored_while_running(self, game):
        clock = FrameClock(game)
        for _ in range(90):
            clock.tick()
        frames = game.frames

        game.submit(Restart())
        clock.tick()

        assert game.phase is GamePhase.RUNNING
        assert game.frames == frames + 1
        assert game.last_result.delta_ms == pytest.approx(FRAME_MS)


class TestPause:
    """Test pausing through the frame driver."""

    def test_pause_resume_without_elapsed_time_changes_nothing(self, game):
        clock = FrameClock(game)
        for _ in range(30):
            clock.tick()
        before = [(e.uid, e.position) for e in game.entities]
        counters = (game.score, game.missed)

        game.submit(TogglePause())
        assert game.frame(clock.now)
        assert game.phase is GamePhase.PAUSED
        game.submit(TogglePause())
        assert game.frame(clock.now)

        assert game.phase is GamePhase.RUNNING
        assert [(e.uid, e.position) for e in game.entities] == before
        assert (game.score, game.missed) == counters

    def test_paused_frames_do_nothing(self, game):
        clock = FrameClock(game)
        for _ in range(30):
            clock.tick()
        game.submit(TogglePause())

        before = [(e.uid, e.position) for e in game.entities]
        for _ in range(600):
            assert clock.tick()
            assert not game.last_result.simulated

        assert [(e.uid, e.position) for e in game.entities] == before

    def test_paused_time_is_not_simulated(self, game):
        """Resuming after a long pause does not produce a big delta."""
        clock = FrameClock(game)
        for _ in range(30):
            clock.tick()
        game.submit(TogglePause())
        clock.tick()

        game.frame(clock.now + 60000.0)
        clock.now += 60000.0
        game.submit(TogglePause())
        clock.tick()
        assert game.last_result.delta_ms == 0.0

        clock.tick()
        assert game.last_result.delta_ms == pytest.approx(FRAME_MS)

    def test_gate_locked_while_paused(self, game):
        clock = FrameClock(game)
        clock.tick()
        game.submit(TogglePause())
        game.submit(SetGate(GatePosition.ROUTE_B))
        clock.tick()

        assert game.gate is GatePosition.ROUTE_A


class TestIntents:
    """Test malformed input handling."""

    @pytest.mark.parametrize("intent", [
        "left",
        None,
        42,
        SetGate("route_b"),
        SetGate(None),
    ])
    def test_malformed_intents_ignored(self, game, intent):
        assert not game.submit(intent)

        game.frame(0.0)
        assert game.gate is GatePosition.ROUTE_A
        assert game.phase is GamePhase.RUNNING

    def test_intents_apply_in_order(self, game):
        game.submit(SetGate(GatePosition.ROUTE_B))
        game.submit(SetGate(GatePosition.ROUTE_A))
        game.submit(SetGate(GatePosition.ROUTE_B))
        game.frame(0.0)

        assert game.gate is GatePosition.ROUTE_B

    def test_intents_wait_for_frame(self, game):
        """Submitting never mutates the session by itself."""
        game.submit(SetGate(GatePosition.ROUTE_B))
        game.submit(TogglePause())

        assert game.gate is GatePosition.ROUTE_A
        assert game.phase is GamePhase.RUNNING


class TestInvariants:
    """Properties that hold across a whole played session."""

    def test_full_session(self, config):
        game = CoreGame(config=config, seed=2024)
        clock = FrameClock(game)

        paths = {}
        poof_positions = {}
        seen = set()
        event_counts = Counter()
        previous_total = 0

        for _ in range(60 * 300):
            autopilot(game)
            running = clock.tick()
            result = game.last_result

            total = game.score + game.missed
            assert total >= previous_total
            assert total - previous_total == len(result.events)
            assert result.delta_score + result.delta_missed == len(result.events)
            previous_total = total

            for event in result.events:
                event_counts[event.uid] += 1

            for entity in game.entities:
                seen.add(entity.uid)
                if entity.sort_path is not SortPath.UNASSIGNED:
                    assert paths.setdefault(entity.uid, entity.sort_path) is entity.sort_path
                if entity.is_poofing:
                    assert poof_positions.setdefault(entity.uid, entity.position) == entity.position

            if not running:
                break

        assert game.phase is GamePhase.GAME_OVER
        assert game.score == config.session.win_score

        # Exactly one score-or-miss per entity, and every removed one got it
        assert all(count == 1 for count in event_counts.values())
        removed = seen - {e.uid for e in game.entities}
        assert removed <= set(event_counts)
