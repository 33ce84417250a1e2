"""The CHIP-8 virtual machine: memory, instruction fetch and the instruction set."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from os import PathLike
from pathlib import Path
from typing import NamedTuple

from .cpu import Cpu
from .display import Display
from .keypad import KEY_COUNT, Keypad

logger = logging.getLogger(__name__)

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
FONT_GLYPH_SIZE = 5

CHIP8_HZ = 700
FRAME_HZ = 60
CYCLES_PER_FRAME = CHIP8_HZ // FRAME_HZ

FONT = bytes(
    (
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    )
)


class ProgramTooLargeError(ValueError):
    """Raised when a program does not fit into memory after the program start."""


class _Operands(NamedTuple):
    word: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    @classmethod
    def decode(cls, word: int) -> _Operands:
        return cls(
            word=word,
            x=(word >> 8) & 0xF,
            y=(word >> 4) & 0xF,
            n=word & 0xF,
            nn=word & 0xFF,
            nnn=word & 0xFFF,
        )


_Handler = Callable[[_Operands], None]


class Machine:
    """A CHIP-8 machine with 4 KiB of memory, a CPU, a display and a keypad.

    ``original`` selects the behaviour of the original interpreter for the
    shift, jump-with-offset and register load/store instructions.
    """

    def __init__(self, original: bool = False, debug: bool = False) -> None:
        self.memory = bytearray(MEMORY_SIZE)
        self.memory[: len(FONT)] = FONT
        self.cpu = Cpu(pc=PROGRAM_START)
        self.display = Display()
        self.keypad = Keypad()
        self.original = original
        self.debug = debug
        self.rng = random.Random()

        self._groups: dict[int, _Handler] = {
            0x1: self._jump,
            0x2: self._call,
            0x3: self._skip_if_equal_value,
            0x4: self._skip_if_not_equal_value,
            0x5: self._skip_if_equal_register,
            0x6: self._set_value,
            0x7: self._add_value,
            0x8: self._arithmetic,
            0x9: self._skip_if_not_equal_register,
            0xA: self._set_index,
            0xB: self._jump_with_offset,
            0xC: self._random,
            0xD: self._draw,
            0xE: self._key_skip,
            0xF: self._misc,
        }
        self._arithmetic_ops: dict[int, _Handler] = {
            0x0: self._copy,
            0x1: self._or,
            0x2: self._and,
            0x3: self._xor,
            0x4: self._add_register,
            0x5: self._subtract,
            0x6: self._shift_right,
            0x7: self._subtract_reversed,
            0xE: self._shift_left,
        }
        self._key_ops: dict[int, _Handler] = {
            0x9E: self._skip_if_pressed,
            0xA1: self._skip_if_not_pressed,
        }
        self._misc_ops: dict[int, _Handler] = {
            0x07: self._read_delay_timer,
            0x0A: self._wait_for_key,
            0x15: self._set_delay_timer,
            0x18: self._set_sound_timer,
            0x1E: self._add_to_index,
            0x29: self._font_character,
            0x33: self._binary_coded_decimal,
            0x55: self._store_registers,
            0x65: self._load_registers,
        }

    # Loading and running

    def load_program(self, path: str | PathLike[str]) -> None:
        """Read a program file and place it in memory at the program start."""
        self.load_bytes(Path(path).read_bytes())

    def load_bytes(self, data: bytes | bytearray | Iterable[int]) -> None:
        """Place program bytes in memory at the program start."""
        program = bytes(data)
        if len(program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLargeError(
                f"program of {len(program)} bytes does not fit into memory; "
                f"at most {MAX_PROGRAM_SIZE} bytes are available"
            )
        self.memory[PROGRAM_START : PROGRAM_START + len(program)] = program

    def fetch(self) -> int:
        """Read the two-byte instruction at the program counter and advance past it."""
        pc = self.cpu.pc
        instruction = (self.memory[pc] << 8) | self.memory[pc + 1]
        self.cpu.pc = (pc + 2) & 0xFFFF
        return instruction

    def cycle(self) -> None:
        """Tick the timers, then fetch and execute one instruction unless waiting for a key."""
        self.cpu.tick_timers()
        if self.keypad.waiting:
            return
        self.execute(self.fetch())

    def run_frame(self, pressed: Iterable[bool]) -> None:
        """Take the keypad state for one frame and run that frame's cycles."""
        self.keypad.set_pressed(pressed)
        for _ in range(CYCLES_PER_FRAME):
            self.cycle()

    # Decoding

    def execute(self, instruction: int) -> None:
        """Decode one instruction and carry it out."""
        instruction &= 0xFFFF
        if instruction == 0:
            return
        if instruction == 0x00E0:
            self._trace("Clear screen")
            self.display.clear()
            return
        if instruction == 0x00EE:
            self._trace("Return from subroutine")
            self.cpu.pc = self.cpu.stack[self.cpu.sp]
            self.cpu.sp = (self.cpu.sp - 1) & 0xFF
            return
        self._dispatch(self._groups, instruction >> 12, _Operands.decode(instruction))

    def _dispatch(self, table: dict[int, _Handler], key: int, op: _Operands) -> None:
        handler = table.get(key)
        if handler is None:
            logger.warning("Instruction not implemented: 0x%04X", op.word)
            return
        handler(op)

    def _trace(self, message: str) -> None:
        if self.debug:
            logger.debug(message)

    def _address(self, offset: int) -> int:
        return (self.cpu.i + offset) & 0xFFFF

    def _skip(self) -> None:
        self.cpu.pc = (self.cpu.pc + 2) & 0xFFFF

    # Flow control

    def _jump(self, op: _Operands) -> None:
        self._trace(f"Jump to {op.nnn:#05x}")
        self.cpu.pc = op.nnn

    def _call(self, op: _Operands) -> None:
        self._trace(f"Call subroutine at {op.nnn:#05x}")
        sp = (self.cpu.sp + 1) & 0xFF
        if sp >= len(self.cpu.stack):
            raise IndexError("call stack overflow")
        self.cpu.sp = sp
        self.cpu.stack[sp] = self.cpu.pc
        self.cpu.pc = op.nnn

    def _skip_if_equal_value(self, op: _Operands) -> None:
        self._trace("Skip if V[x] == nn")
        if self.cpu.v[op.x] == op.nn:
            self._skip()

    def _skip_if_not_equal_value(self, op: _Operands) -> None:
        self._trace("Skip if V[x] != nn")
        if self.cpu.v[op.x] != op.nn:
            self._skip()

    def _skip_if_equal_register(self, op: _Operands) -> None:
        self._trace("Skip if V[x] == V[y]")
        if self.cpu.v[op.x] == self.cpu.v[op.y]:
            self._skip()

    def _skip_if_not_equal_register(self, op: _Operands) -> None:
        self._trace("Skip if V[x] != V[y]")
        if self.cpu.v[op.x] != self.cpu.v[op.y]:
            self._skip()

    def _jump_with_offset(self, op: _Operands) -> None:
        self._trace("Jump with offset")
        register = 0 if self.original else op.x
        self.cpu.pc = (op.nnn + self.cpu.v[register]) & 0xFFFF

    # Registers

    def _set_value(self, op: _Operands) -> None:
        self._trace("Set V[x] to nn")
        self.cpu.v[op.x] = op.nn

    def _add_value(self, op: _Operands) -> None:
        self._trace("Add nn to V[x]")
        self.cpu.v[op.x] = (self.cpu.v[op.x] + op.nn) & 0xFF

    def _set_index(self, op: _Operands) -> None:
        self._trace("Set index register")
        self.cpu.i = op.nnn

    def _random(self, op: _Operands) -> None:
        self._trace("Random number AND nn into V[x]")
        self.cpu.v[op.x] = self.rng.randrange(255) & op.nn

    # Arithmetic and logic

    def _arithmetic(self, op: _Operands) -> None:
        self._dispatch(self._arithmetic_ops, op.n, op)

    def _copy(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[y]")
        self.cpu.v[op.x] = self.cpu.v[op.y]

    def _or(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[x] OR V[y]")
        self.cpu.v[op.x] |= self.cpu.v[op.y]

    def _and(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[x] AND V[y]")
        self.cpu.v[op.x] &= self.cpu.v[op.y]

    def _xor(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[x] XOR V[y]")
        self.cpu.v[op.x] ^= self.cpu.v[op.y]

    def _add_register(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[x] + V[y]")
        v = self.cpu.v
        result = v[op.x] + v[op.y]
        # The flag is only raised past sixteen bits, so byte sums never set it.
        v[0xF] = 1 if result > 0xFFFF else 0
        v[op.x] = result & 0xFF

    def _subtract(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[x] - V[y]")
        v = self.cpu.v
        v[0xF] = 1
        minuend, subtrahend = v[op.x], v[op.y]
        if subtrahend > minuend:
            v[0xF] = 0
        v[op.x] = (minuend - subtrahend) & 0xFF

    def _subtract_reversed(self, op: _Operands) -> None:
        self._trace("Set V[x] to V[y] - V[x]")
        v = self.cpu.v
        v[0xF] = 1
        minuend, subtrahend = v[op.y], v[op.x]
        if subtrahend > minuend:
            v[0xF] = 0
        v[op.x] = (minuend - subtrahend) & 0xFF

    def _shift_right(self, op: _Operands) -> None:
        self._trace("Shift V[x] right")
        v = self.cpu.v
        if self.original:
            v[op.x] = v[op.y]
        v[0xF] = v[op.x] & 0xF
        v[op.x] >>= 1

    def _shift_left(self, op: _Operands) -> None:
        self._trace("Shift V[x] left")
        v = self.cpu.v
        if self.original:
            v[op.x] = v[op.y]
        v[0xF] = v[op.x] >> 7
        v[op.x] = (v[op.x] << 1) & 0xFF

    # Display

    def _draw(self, op: _Operands) -> None:
        self._trace("Draw sprite")
        v = self.cpu.v
        x_value, y_value = v[op.x], v[op.y]
        v[0xF] = 0
        for offset in range(op.n):
            row = self.memory[self._address(offset)]
            if self.display.draw_sprite(x_value, (y_value + offset) & 0xFF, row):
                v[0xF] = 1

    # Keys

    def _key_skip(self, op: _Operands) -> None:
        self._dispatch(self._key_ops, op.nn, op)

    def _skip_if_pressed(self, op: _Operands) -> None:
        self._trace("Skip if key V[x] is pressed")
        if self.keypad.is_pressed(self.cpu.v[op.x]):
            self._skip()

    def _skip_if_not_pressed(self, op: _Operands) -> None:
        self._trace("Skip if key V[x] is not pressed")
        if not self.keypad.is_pressed(self.cpu.v[op.x]):
            self._skip()

    def _wait_for_key(self, op: _Operands) -> None:
        self._trace("Wait for a key press")
        pressed = [key for key in range(KEY_COUNT) if self.keypad.is_pressed(key)]
        if pressed:
            self.cpu.v[op.x] = pressed[-1]
        else:
            self.keypad.enable_wait(True)

    # Timers, index and memory

    def _misc(self, op: _Operands) -> None:
        self._dispatch(self._misc_ops, op.nn, op)

    def _read_delay_timer(self, op: _Operands) -> None:
        self._trace("Set V[x] to the delay timer")
        self.cpu.v[op.x] = self.cpu.delay_timer

    def _set_delay_timer(self, op: _Operands) -> None:
        self._trace("Set the delay timer to V[x]")
        self.cpu.delay_timer = self.cpu.v[op.x]

    def _set_sound_timer(self, op: _Operands) -> None:
        self._trace("Set the sound timer to V[x]")
        self.cpu.sound_timer = self.cpu.v[op.x]

    def _add_to_index(self, op: _Operands) -> None:
        self._trace("Add V[x] to the index register")
        self.cpu.i = (self.cpu.i + self.cpu.v[op.x]) & 0xFFFF
        if self.cpu.i > 1000:
            self.cpu.v[0xF] = 1

    def _font_character(self, op: _Operands) -> None:
        self._trace("Point the index register at the glyph for V[x]")
        self.cpu.i = (self.cpu.v[op.x] * FONT_GLYPH_SIZE) & 0xFF

    def _binary_coded_decimal(self, op: _Operands) -> None:
        self._trace("Binary coded decimal conversion")
        value = self.cpu.v[op.x]
        self.memory[self._address(0)] = value // 100
        self.memory[self._address(1)] = (value // 10) % 10
        self.memory[self._address(2)] = value % 10

    def _store_registers(self, op: _Operands) -> None:
        self._trace("Copy V registers to memory")
        for index in range(op.x):
            self.memory[self._address(index)] = self.cpu.v[index]
            if self.original:
                self.cpu.i = (self.cpu.i + 1) & 0xFFFF

    def _load_registers(self, op: _Operands) -> None:
        self._trace("Copy memory to V registers")
        for index in range(op.x):
            self.cpu.v[index] = self.memory[self._address(index)]
            if self.original:
                self.cpu.i = (self.cpu.i + 1) & 0xFFFF