"""
Human Play Mode
================

Play Farm Sort interactively: sheep and lambs walk along the path and you
swing the gate to send each one into the right pen.

Controls:
    - LEFT: Swing gate to the lamb branch
    - RIGHT: Gate straight through to the sheep pen
    - Click/Space: Pause / resume (restart after game over)
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--fps FPS] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import logging
import math
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

# Add project root to path for direct script execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from farm_sort.sorter_core.config_loader import GameConfig, PenConfig, load_config
from farm_sort.sorter_core.entities import AnimalType, GatePosition
from farm_sort.sorter_core.game import CoreGame
from farm_sort.sorter_core.intents import Restart, SetGate, TogglePause

logger = logging.getLogger(__name__)

GRASS_COLORS = ["#7ec850", "#5fa83c", "#a2e06e"]
DIRT_BASE = "#b08a5a"
DIRT_PATCHES = ["#a07a4a", "#c09a6a", "#8c6a3a", "#d2b48c"]
PATH_COLOR = "#c9b07a"
FENCE_POST = "#a97c50"
FENCE_RAIL = "#e2c48a"
PEN_A_OUTLINE = "#2c54b5"
PEN_B_OUTLINE = "#e75480"
GATE_POST = "#8b5c2a"
GATE_SLAT = "#e2c48a"

GATE_WIDTH = 24
GATE_HEIGHT = 60
BRANCH_WIDTH = 32

# Sprite surface size and the animal's centre inside it
SPRITE_SIZE = (96, 72)
SPRITE_CENTER = (44, 34)

# body, head, legs, fluff count, fluff radius, body colour, fluff colour
SPRITE_SHAPES = {
    AnimalType.ADULT.value: ((48, 32), (20, 24), (8, 12), 16, 20, "#ffffff", "#ffffff"),
    AnimalType.JUVENILE.value: ((24, 16), (10, 12), (4, 6), 8, 10, "#d3d3d3", "#e5e5e5"),
}


class FarmRenderer:
    """
    Pixel-art farm renderer for human play mode.

    Reads CoreGame.get_render_data() and never touches the game itself.
    """

    def __init__(self, config: GameConfig, seed: int = 0):
        """Initialize renderer and pre-render the static farm."""
        self._config = config
        self._width = config.world.width
        self._height = config.world.height

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 38)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 24)

        self._rng = random.Random(seed)
        self._bg_surface = self._create_background()
        self._sprites: Dict[str, pygame.Surface] = {
            name: self._create_sprite(name) for name in SPRITE_SHAPES
        }

    def _create_background(self) -> pygame.Surface:
        """Grass, pens, path and branch. Everything that never moves."""
        world = self._config.world
        pens = self._config.pens
        surface = pygame.Surface((self._width, self._height))
        surface.fill(pygame.Color(GRASS_COLORS[0]))

        path_rect = pygame.Rect(0, int(world.path_y), self._width, int(world.path_width))
        pen_rects = [self._pen_rect(pens.route_a), self._pen_rect(pens.route_b)]

        # Blocky grass everywhere outside the playable areas
        cell = 10
        for x in range(0, self._width, cell):
            for y in range(0, self._height, cell):
                if path_rect.collidepoint(x, y) or any(r.collidepoint(x, y) for r in pen_rects):
                    continue
                color = pygame.Color(GRASS_COLORS[((x + y) // cell) % 3])
                pygame.draw.rect(surface, color, (x, y, 8, 8))
                if (x + y) % 20 < 7:
                    pygame.draw.rect(surface, color, (x + 2, y + 4, 4, 4))

        self._draw_pen(surface, pens.route_b, PEN_B_OUTLINE)

        pygame.draw.rect(surface, pygame.Color(PATH_COLOR), path_rect)
        self._draw_branch(surface)

        self._draw_pen(surface, pens.route_a, PEN_A_OUTLINE)
        return surface

    def _pen_rect(self, pen: PenConfig) -> pygame.Rect:
        return pygame.Rect(int(pen.x), int(pen.y), int(pen.width), int(pen.height))

    def _draw_pen(self, surface: pygame.Surface, pen: PenConfig, outline: str) -> None:
        """Dirt floor, wooden fence and coloured outline."""
        rect = self._pen_rect(pen)
        pygame.draw.rect(surface, pygame.Color(DIRT_BASE), rect)
        for _ in range(rect.width * rect.height // 120):
            px = rect.x + self._rng.randrange(rect.width)
            py = rect.y + self._rng.randrange(rect.height)
            pygame.draw.rect(surface, pygame.Color(self._rng.choice(DIRT_PATCHES)), (px, py, 8, 4))

        # Rails
        rail = pygame.Color(FENCE_RAIL)
        pygame.draw.rect(surface, rail, (rect.x, rect.y + 4, rect.width, 4))
        pygame.draw.rect(surface, rail, (rect.x, rect.bottom - 8, rect.width, 4))

        # Posts
        post = pygame.Color(FENCE_POST)
        for px in range(rect.x, rect.right + 1, 24):
            pygame.draw.rect(surface, post, (px, rect.y, 4, rect.height))
        pygame.draw.rect(surface, post, (rect.x, rect.y, 4, rect.height))
        pygame.draw.rect(surface, post, (rect.right - 4, rect.y, 4, rect.height))

        pygame.draw.rect(surface, pygame.Color(outline), rect, 2)

    def _draw_branch(self, surface: pygame.Surface) -> None:
        """45 degree side path from the gate up to the lamb pen."""
        gate_x = self._config.gate_x
        path_y = self._config.world.path_y
        top_y = self._config.pens.route_b.bottom
        rise = path_y - top_y
        half = BRANCH_WIDTH / 2 / math.sqrt(2)

        start = (gate_x, path_y)
        end = (gate_x + rise, top_y)
        points = [
            (start[0] - half, start[1] - half),
            (end[0] - half, end[1] - half),
            (end[0] + half, end[1] + half),
            (start[0] + half, start[1] + half),
        ]
        pygame.draw.polygon(surface, pygame.Color(PATH_COLOR), points)

    def _create_sprite(self, name: str) -> pygame.Surface:
        """Blocky sheep or lamb on a transparent surface."""
        (body_w, body_h), (head_w, head_h), (leg_w, leg_h), fluff_count, fluff_r, body, fluff = (
            SPRITE_SHAPES[name]
        )
        surface = pygame.Surface(SPRITE_SIZE, pygame.SRCALPHA)
        cx, cy = SPRITE_CENTER

        for i in range(fluff_count):
            angle = 2 * math.pi * i / fluff_count
            fx = round(cx + math.cos(angle) * fluff_r)
            fy = round(cy + math.sin(angle) * fluff_r * 0.7)
            pygame.draw.rect(surface, pygame.Color(fluff), (fx - 4, fy - 3, 8, 6))

        pygame.draw.rect(surface, pygame.Color(body), (cx - body_w // 2, cy - body_h // 2, body_w, body_h))
        head_x = cx + body_w // 2 - 4
        pygame.draw.rect(surface, pygame.Color("#b5a27a"), (head_x, cy - head_h // 2 + 2, head_w, head_h))

        for i in range(4):
            leg_x = cx - body_w // 2 + 4 + i * (body_w - 12) // 3
            pygame.draw.rect(surface, pygame.Color("#444444"), (leg_x, cy + body_h // 2 - 1, leg_w, leg_h))

        eye_x = cx + body_w // 2
        for dx in (2, 6):
            pygame.draw.rect(surface, pygame.Color("#ffffff"), (eye_x + dx, cy - 2, 3, 3))
            pygame.draw.rect(surface, pygame.Color("#222222"), (eye_x + dx + 1, cy - 1, 1, 1))
        return surface

    def render(self, screen: pygame.Surface, render_data: dict) -> None:
        """Render the complete scene."""
        screen.blit(self._bg_surface, (0, 0))

        self._draw_gate(screen, render_data)
        self._draw_examples(screen)

        for entity in render_data["entities"]:
            if entity["poofing"]:
                self._draw_poof(screen, entity)
            else:
                self._blit_sprite(screen, self._sprites[entity["animal_type"]], entity["x"], entity["y"])

        self._draw_score(screen, render_data)

        phase = render_data["phase"]
        if phase == "paused":
            self._draw_overlay(screen, 178, [
                (self._font_huge, "Paused", 0),
                (self._font_medium, "Press SPACE to resume", 50),
            ])
        elif phase == "game_over":
            self._draw_overlay(screen, 204, [
                (self._font_huge, "Game Over!", -30),
                (self._font_large, f"Final Score: {render_data['score']}", 20),
                (self._font_medium, "Press SPACE to restart", 60),
            ])

    def _draw_gate(self, screen: pygame.Surface, render_data: dict) -> None:
        """Wooden gate: upright when straight, swung 45 degrees toward the branch."""
        door = pygame.Surface((GATE_WIDTH, GATE_HEIGHT), pygame.SRCALPHA)
        post = pygame.Color(GATE_POST)
        pygame.draw.rect(door, post, (0, 0, 4, GATE_HEIGHT))
        pygame.draw.rect(door, post, (GATE_WIDTH - 4, 0, 4, GATE_HEIGHT))
        for i in range(3):
            slat_y = 8 + i * (GATE_HEIGHT - 16) // 2
            pygame.draw.rect(door, pygame.Color(GATE_SLAT), (2, slat_y, GATE_WIDTH - 4, 6))

        pivot = pygame.math.Vector2(
            render_data["gate_x"],
            render_data["path_y"] + render_data["path_width"] / 2 - 30,
        )
        if render_data["gate"] == GatePosition.ROUTE_A.value:
            screen.blit(door, (int(pivot.x), int(pivot.y)))
            return

        # Rotate about the top-left corner
        angle = 45
        rotated = pygame.transform.rotate(door, angle)
        offset = pygame.math.Vector2(GATE_WIDTH / 2, GATE_HEIGHT / 2).rotate(-angle)
        screen.blit(rotated, rotated.get_rect(center=pivot + offset))

    def _draw_examples(self, screen: pygame.Surface) -> None:
        """One example animal in each pen."""
        pens = self._config.pens
        pen_b, pen_a = pens.route_b, pens.route_a
        self._blit_sprite(
            screen, self._sprites[AnimalType.JUVENILE.value],
            pen_b.x + pen_b.width / 2, pen_b.y + pen_b.height / 2
        )
        self._blit_sprite(
            screen, self._sprites[AnimalType.ADULT.value],
            pen_a.x + pen_a.width / 2, pen_a.y + pen_a.height / 2
        )

    def _blit_sprite(self, screen: pygame.Surface, sprite: pygame.Surface, x: float, y: float) -> None:
        screen.blit(sprite, (round(x) - SPRITE_CENTER[0], round(y) - SPRITE_CENTER[1]))

    def _draw_poof(self, screen: pygame.Surface, entity: dict) -> None:
        """Shrinking, fading animal inside a white cloud."""
        progress = entity["poof_progress"]
        scale = 1.0 - progress
        x, y = round(entity["x"]), round(entity["y"])

        radius = int(18 * scale + 8)
        cloud = pygame.Surface((radius * 2 + 4, radius * 2 + 4), pygame.SRCALPHA)
        center = (radius + 2, radius + 2)
        pygame.draw.circle(cloud, (255, 255, 255, int(204 * scale)), center, radius)
        pygame.draw.circle(cloud, (221, 221, 221, int(255 * scale)), center, radius, 2)
        screen.blit(cloud, (x - center[0], y - center[1]))

        if scale <= 0:
            return
        sprite = self._sprites[entity["animal_type"]]
        w, h = SPRITE_SIZE
        small = pygame.transform.scale(sprite, (max(1, int(w * scale)), max(1, int(h * scale))))
        small.set_alpha(int(255 * scale))
        screen.blit(small, (x - int(SPRITE_CENTER[0] * scale), y - int(SPRITE_CENTER[1] * scale)))

    def _draw_score(self, screen: pygame.Surface, render_data: dict) -> None:
        """Score and missed counters in the top-left corner."""
        box = pygame.Rect(12, 12, 140, 54)
        panel = pygame.Surface(box.size, pygame.SRCALPHA)
        panel.fill((255, 255, 255, 217))
        screen.blit(panel, box.topleft)
        pygame.draw.rect(screen, pygame.Color("#bbbbbb"), box, 2)

        score = self._font_small.render(f"Score: {render_data['score']}", True, pygame.Color("#4a7c2c"))
        missed = self._font_small.render(f"Missed: {render_data['missed']}", True, pygame.Color("#b52c2c"))
        screen.blit(score, (box.x + 12, box.y + 10))
        screen.blit(missed, (box.x + 12, box.y + 30))

    def _draw_overlay(
        self,
        screen: pygame.Surface,
        alpha: int,
        lines: List[Tuple["pygame.font.Font", str, int]]
    ) -> None:
        """Dim the scene and print centred lines (font, text, y offset)."""
        overlay = pygame.Surface((self._width, self._height), pygame.SRCALPHA)
        overlay.fill((34, 34, 34, alpha))
        screen.blit(overlay, (0, 0))

        for font, text, dy in lines:
            surface = font.render(text, True, (255, 255, 255))
            rect = surface.get_rect(center=(self._width // 2, self._height // 2 + dy))
            screen.blit(surface, rect)


class HumanPlayer:
    """
    Human-playable Farm Sort.

    Input handlers only submit intents; the game applies them at the start of
    its next frame. Frames are driven from pygame's millisecond clock and stop
    at game over until a restart is submitted.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        # Initialize game
        self._game = CoreGame(config=config, seed=seed)

        # Initialize pygame
        pygame.init()
        self._screen = pygame.display.set_mode((config.world.width, config.world.height))
        pygame.display.set_caption("Farm Sort")
        self._clock = pygame.time.Clock()

        self._renderer = FarmRenderer(config, seed or 0)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Farm Sort ===")
        print("Sheep go straight, lambs go up the branch.")
        print("LEFT/RIGHT to swing the gate, Space or click to pause, ESC to quit")
        print()

        while self._running:
            self._handle_events()

            if self._game.frame_requested:
                self._game.frame(pygame.time.get_ticks())
                self._report(self._game.last_result)

            self._render()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Translate pygame events into intents."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_SPACE:
                    self._pause_or_restart()
                elif event.key == pygame.K_LEFT:
                    self._game.submit(SetGate(GatePosition.ROUTE_B))
                elif event.key == pygame.K_RIGHT:
                    self._game.submit(SetGate(GatePosition.ROUTE_A))

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self._pause_or_restart()

    def _pause_or_restart(self) -> None:
        if self._game.is_over:
            logger.debug("Restart requested")
            self._game.submit(Restart())
        else:
            self._game.submit(TogglePause())

    def _report(self, result) -> None:
        """Print score changes from the last frame."""
        if result is None:
            return
        for event in result.events:
            name = "sheep" if event.animal_type is AnimalType.ADULT else "lamb"
            if event.is_miss:
                print(f"  missed a {name} ({event.reason})  Missed: {self._game.missed}")
            else:
                print(f"  +1 {name}  (Score: {self._game.score})")
        if result.terminated and result.simulated:
            print(f"\nGAME OVER - Score: {self._game.score}, Missed: {self._game.missed}")

    def _render(self) -> None:
        """Render the game."""
        self._renderer.render(self._screen, self._game.get_render_data())
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Farm Sort interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for the game core (default: WARNING)"
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
