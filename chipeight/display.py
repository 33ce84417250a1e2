"""Monochrome 64x32 frame buffer with XOR sprite drawing."""

from __future__ import annotations

WIDTH = 64
HEIGHT = 32


class Display:
    """Frame buffer indexed as ``pixels[x][y]``, each pixel 0 or 1."""

    width = WIDTH
    height = HEIGHT

    def __init__(self) -> None:
        self.pixels: list[list[int]] = [[0] * HEIGHT for _ in range(WIDTH)]

    def clear(self) -> None:
        """Turn every pixel off."""
        for column in self.pixels:
            column[:] = [0] * HEIGHT

    def draw_sprite(self, x: int, y: int, row: int) -> bool:
        """XOR one 8-pixel sprite row onto the screen at (x, y).

        Coordinates are bytes and wrap around the screen edges. As with 8-bit
        arithmetic, a row starting at x >= 248 draws nothing. Returns True when
        any lit pixel was turned off.
        """
        x &= 0xFF
        y &= 0xFF
        row &= 0xFF
        end = (x + 8) & 0xFF
        y_index = y % HEIGHT
        erased = False

        for position in range(x, end):
            column = self.pixels[position % WIDTH]
            bit = (row >> (7 - (position - x))) & 1
            was_set = column[y_index] == 1
            column[y_index] ^= bit
            if was_set and column[y_index] == 0:
                erased = True

        return erased

    def is_lit(self, x: int, y: int) -> bool:
        """Return whether the pixel at (x, y) is on."""
        if not (0 <= x < WIDTH and 0 <= y < HEIGHT):
            raise IndexError(f"pixel ({x}, {y}) is outside the {WIDTH}x{HEIGHT} screen")
        return self.pixels[x][y] == 1