"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from farm_sort.sorter_core.entities import AnimalType, GatePosition


@dataclass(frozen=True)
class WorldConfig:
    """World geometry."""
    width: int           # World width in pixels
    height: int          # World height in pixels
    path_y: float        # Top edge of the walking path
    path_width: float    # Height of the path band
    exit_margin: float   # Pixels beyond width before an animal counts as gone

    @property
    def path_center_y(self) -> float:
        return self.path_y + self.path_width / 2


@dataclass(frozen=True)
class GateConfig:
    """Gate threshold and start position."""
    x_fraction: float
    default: GatePosition


@dataclass(frozen=True)
class PenConfig:
    """A rectangular pen with entry margins."""
    x: float
    y: float
    width: float
    height: float
    entry_depth: float = 0.0   # Route A: how far past pen.x counts as inside
    inset_x: float = 0.0       # Route B: horizontal margin on both sides
    inset_bottom: float = 0.0  # Route B: margin above the bottom edge

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains_inset(self, x: float, y: float) -> bool:
        """True if (x, y) is strictly inside the pen shrunk by its insets."""
        return (
            self.y < y < self.bottom - self.inset_bottom
            and self.x + self.inset_x < x < self.right - self.inset_x
        )


@dataclass(frozen=True)
class PensConfig:
    """Both target pens."""
    route_a: PenConfig
    route_b: PenConfig


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn timing and entry placement."""
    interval_ms: float
    adult_probability: float
    entry_x: float
    lane_jitter: float


@dataclass(frozen=True)
class AnimalConfig:
    """Speed range for one animal type (pixels per reference frame)."""
    speed_min: float
    speed_max: float


@dataclass(frozen=True)
class MotionConfig:
    """Movement and animation parameters."""
    reference_fps: float
    route_a_speed_multiplier: float
    route_b_rise: float
    route_b_drift: float
    poof_duration: float        # Seconds a wrongly routed animal stays on screen
    max_frame_delta_ms: float   # Clamp on a single frame's elapsed time


@dataclass(frozen=True)
class SessionConfig:
    """Session limits."""
    win_score: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    world: WorldConfig
    gate: GateConfig
    pens: PensConfig
    spawn: SpawnConfig
    adult: AnimalConfig
    juvenile: AnimalConfig
    motion: MotionConfig
    session: SessionConfig

    @property
    def gate_x(self) -> float:
        """X coordinate of the gate threshold."""
        return self.world.width * self.gate.x_fraction

    def get_animal(self, animal_type: AnimalType) -> AnimalConfig:
        """Get speed config for an animal type."""
        if animal_type is AnimalType.ADULT:
            return self.adult
        if animal_type is AnimalType.JUVENILE:
            return self.juvenile
        raise ValueError(f"Invalid animal type: {animal_type!r}")


def _parse_pen(pen_data: dict) -> PenConfig:
    """Parse a single pen rectangle from YAML."""
    return PenConfig(
        x=float(pen_data["x"]),
        y=float(pen_data["y"]),
        width=float(pen_data["width"]),
        height=float(pen_data["height"]),
        entry_depth=float(pen_data.get("entry_depth", 0.0)),
        inset_x=float(pen_data.get("inset_x", 0.0)),
        inset_bottom=float(pen_data.get("inset_bottom", 0.0))
    )


def _parse_animal(animal_data: dict) -> AnimalConfig:
    """Parse an animal speed range from YAML."""
    return AnimalConfig(
        speed_min=float(animal_data["speed_min"]),
        speed_max=float(animal_data["speed_max"])
    )


def _parse_gate_position(value: str) -> GatePosition:
    """Parse a gate position name."""
    try:
        return GatePosition(str(value))
    except ValueError:
        valid = ", ".join(p.value for p in GatePosition)
        raise ValueError(f"gate.default must be one of [{valid}], got '{value}'") from None


def _validate_range(name: str, animal: AnimalConfig) -> None:
    if animal.speed_min <= 0:
        raise ValueError(f"animals.{name}.speed_min must be positive, got {animal.speed_min}")
    if animal.speed_min > animal.speed_max:
        raise ValueError(
            f"animals.{name}.speed_min ({animal.speed_min}) exceeds "
            f"speed_max ({animal.speed_max})"
        )


def _validate_pen(name: str, pen: PenConfig, world: WorldConfig) -> None:
    if pen.width <= 0 or pen.height <= 0:
        raise ValueError(f"pens.{name} must have positive size, got {pen.width}x{pen.height}")
    if pen.x < 0 or pen.right > world.width:
        raise ValueError(
            f"pens.{name} spans x=[{pen.x}, {pen.right}] outside world width {world.width}"
        )
    if 2 * pen.inset_x >= pen.width or pen.inset_bottom >= pen.height:
        raise ValueError(f"pens.{name} insets leave no room to enter")


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    world = config.world
    if world.width <= 0 or world.height <= 0:
        raise ValueError(f"World size must be positive, got {world.width}x{world.height}")
    if not (0 <= world.path_y and world.path_y + world.path_width <= world.height):
        raise ValueError("Path band must lie inside the world")

    if not (0.0 < config.gate.x_fraction < 1.0):
        raise ValueError(f"gate.x_fraction must be in (0, 1), got {config.gate.x_fraction}")

    _validate_pen("route_a", config.pens.route_a, world)
    _validate_pen("route_b", config.pens.route_b, world)

    spawn = config.spawn
    if spawn.interval_ms <= 0:
        raise ValueError(f"spawn.interval_ms must be positive, got {spawn.interval_ms}")
    if not (0.0 <= spawn.adult_probability <= 1.0):
        raise ValueError(
            f"spawn.adult_probability must be in [0, 1], got {spawn.adult_probability}"
        )
    if spawn.lane_jitter < 0:
        raise ValueError(f"spawn.lane_jitter must be non-negative, got {spawn.lane_jitter}")

    _validate_range("adult", config.adult)
    _validate_range("juvenile", config.juvenile)

    motion = config.motion
    if motion.reference_fps <= 0:
        raise ValueError(f"motion.reference_fps must be positive, got {motion.reference_fps}")
    if motion.poof_duration <= 0:
        raise ValueError(f"motion.poof_duration must be positive, got {motion.poof_duration}")
    if motion.max_frame_delta_ms <= 0:
        raise ValueError(
            f"motion.max_frame_delta_ms must be positive, got {motion.max_frame_delta_ms}"
        )

    if config.session.win_score <= 0:
        raise ValueError(f"session.win_score must be positive, got {config.session.win_score}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    world_data = raw["world"]
    world = WorldConfig(
        width=int(world_data["width"]),
        height=int(world_data["height"]),
        path_y=float(world_data["path_y"]),
        path_width=float(world_data["path_width"]),
        exit_margin=float(world_data.get("exit_margin", 50.0))
    )

    gate_data = raw.get("gate", {})
    gate = GateConfig(
        x_fraction=float(gate_data.get("x_fraction", 0.5)),
        default=_parse_gate_position(gate_data.get("default", GatePosition.ROUTE_A.value))
    )

    pens_data = raw["pens"]
    pens = PensConfig(
        route_a=_parse_pen(pens_data["route_a"]),
        route_b=_parse_pen(pens_data["route_b"])
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        interval_ms=float(spawn_data["interval_ms"]),
        adult_probability=float(spawn_data.get("adult_probability", 0.6)),
        entry_x=float(spawn_data.get("entry_x", 0.0)),
        lane_jitter=float(spawn_data.get("lane_jitter", 20.0))
    )

    animals_data = raw["animals"]
    adult = _parse_animal(animals_data["adult"])
    juvenile = _parse_animal(animals_data["juvenile"])

    motion_data = raw["motion"]
    motion = MotionConfig(
        reference_fps=float(motion_data.get("reference_fps", 60)),
        route_a_speed_multiplier=float(motion_data.get("route_a_speed_multiplier", 2.0)),
        route_b_rise=float(motion_data["route_b_rise"]),
        route_b_drift=float(motion_data["route_b_drift"]),
        poof_duration=float(motion_data.get("poof_duration", 0.4)),
        max_frame_delta_ms=float(motion_data.get("max_frame_delta_ms", 100.0))
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        win_score=int(session_data.get("win_score", 20))
    )

    config = GameConfig(
        world=world,
        gate=gate,
        pens=pens,
        spawn=spawn,
        adult=adult,
        juvenile=juvenile,
        motion=motion,
        session=session
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config


def speed_range(config: GameConfig, animal_type: AnimalType) -> Tuple[float, float]:
    """(min, max) speed for an animal type."""
    animal = config.get_animal(animal_type)
    return (animal.speed_min, animal.speed_max)
