"""Register file, call stack and timers of the CHIP-8 processor."""

from __future__ import annotations

from dataclasses import dataclass, field

REGISTER_COUNT = 16
STACK_DEPTH = 16


@dataclass
class Cpu:
    """Processor state: program counter, index register, V registers, stack and timers."""

    pc: int = 0
    i: int = 0
    v: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    stack: list[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    sp: int = 0
    delay_timer: int = 0
    sound_timer: int = 0

    def tick_timers(self) -> None:
        """Count both timers down by one, stopping at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1