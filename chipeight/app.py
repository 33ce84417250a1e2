"""Window, keyboard mapping and command-line entry point for the emulator."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from .machine import FRAME_HZ, Machine  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 10

USAGE = "Please pass a Chip 8 program on the command line\n\nUsage: chip-8 <program_file>"

# Keyboard keys for keypad keys 0x0 to 0xF, in keypad order.
KEY_BINDINGS: tuple[int, ...] = (
    pygame.K_x,
    pygame.K_1,
    pygame.K_2,
    pygame.K_3,
    pygame.K_q,
    pygame.K_w,
    pygame.K_e,
    pygame.K_a,
    pygame.K_s,
    pygame.K_d,
    pygame.K_z,
    pygame.K_c,
    pygame.K_4,
    pygame.K_r,
    pygame.K_f,
    pygame.K_v,
)

BLACK = pygame.Color(0, 0, 0)
WHITE = pygame.Color(255, 255, 255)


def pressed_keys(key_state) -> tuple[bool, ...]:
    """Map a keyboard state indexed by key code to the sixteen keypad states."""
    return tuple(bool(key_state[key]) for key in KEY_BINDINGS)


def render(machine: Machine, surface: pygame.Surface) -> None:
    """Paint the machine's frame buffer onto a surface, scaled to fill it."""
    display = machine.display
    canvas = pygame.Surface((display.width, display.height))
    canvas.fill(BLACK)
    for x, column in enumerate(display.pixels):
        for y, pixel in enumerate(column):
            if pixel == 1:
                canvas.set_at((x, y), WHITE)

    if surface.get_size() == canvas.get_size():
        surface.blit(canvas, (0, 0))
    else:
        pygame.transform.scale(canvas, surface.get_size(), surface)


def run(machine: Machine, scale: int = DEFAULT_SCALE) -> None:
    """Open a window and run the machine frame by frame until it is closed."""
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")
    pygame.init()
    try:
        screen = pygame.display.set_mode(
            (machine.display.width * scale, machine.display.height * scale)
        )
        pygame.display.set_caption("CHIP-8")
        clock = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
            if not running:
                break
            machine.run_frame(pressed_keys(pygame.key.get_pressed()))
            render(machine, screen)
            pygame.display.flip()
            clock.tick(FRAME_HZ)
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Load the program named on the command line and run it in a window."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE)
        return 0

    logging.basicConfig(level=logging.INFO)
    logger.info("Starting machine")
    machine = Machine()
    machine.load_program(args[0])
    run(machine)
    return 0


if __name__ == "__main__":
    sys.exit(main())