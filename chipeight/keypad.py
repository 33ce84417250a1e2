"""State of the sixteen-key hexadecimal keypad."""

from __future__ import annotations

from collections.abc import Iterable

KEY_COUNT = 16


class Keypad:
    """Pressed state of keys 0x0-0xF, plus a flag for waiting on a key press."""

    def __init__(self) -> None:
        self.pressed: tuple[bool, ...] = (False,) * KEY_COUNT
        self.waiting = False

    def set_pressed(self, pressed: Iterable[bool]) -> None:
        """Replace the state of all sixteen keys at once."""
        states = tuple(bool(state) for state in pressed)
        if len(states) != KEY_COUNT:
            raise ValueError(f"expected {KEY_COUNT} key states, got {len(states)}")
        self.pressed = states

    def is_pressed(self, key: int) -> bool:
        """Return whether the given key is held down."""
        if not 0 <= key < KEY_COUNT:
            raise IndexError(f"no key {key}; keys run from 0 to {KEY_COUNT - 1}")
        return self.pressed[key]

    def enable_wait(self, enabled: bool) -> None:
        """Turn waiting for a key press on or off."""
        self.waiting = enabled