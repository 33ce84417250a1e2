from collections import defaultdict

import pygame
import pytest

from chipeight.app import KEY_BINDINGS, main, pressed_keys, render
from chipeight.machine import MAX_PROGRAM_SIZE, Machine, ProgramTooLargeError

WHITE = pygame.Color(255, 255, 255)
BLACK = pygame.Color(0, 0, 0)


def _state(*down):
    state = defaultdict(bool)
    for key in down:
        state[key] = True
    return state


def test_no_keys_pressed():
    assert pressed_keys(_state()) == (False,) * 16


@pytest.mark.parametrize(
    "key, index",
    [(pygame.K_x, 0x0), (pygame.K_1, 0x1), (pygame.K_4, 0xC), (pygame.K_v, 0xF), (pygame.K_z, 0xA)],
)
def test_key_maps_to_keypad_index(key, index):
    result = pressed_keys(_state(key))
    assert result[index] is True
    assert sum(result) == 1


def test_every_binding_maps_to_a_distinct_keypad_index():
    indices = []
    for key in KEY_BINDINGS:
        result = pressed_keys(_state(key))
        assert sum(result) == 1
        indices.append(result.index(True))
    assert sorted(indices) == list(range(16))


def test_pressed_keys_feed_machine_keypad():
    machine = Machine()
    machine.keypad.set_pressed(pressed_keys(_state(pygame.K_q, pygame.K_f)))
    assert machine.keypad.is_pressed(0x4)
    assert machine.keypad.is_pressed(0xE)
    assert not machine.keypad.is_pressed(0x0)


def test_render_native_size():
    machine = Machine()
    machine.display.draw_sprite(0, 0, 0x80)
    surface = pygame.Surface((64, 32))
    surface.fill(WHITE)
    render(machine, surface)
    assert surface.get_at((0, 0)) == WHITE
    assert surface.get_at((1, 0)) == BLACK
    assert surface.get_at((63, 31)) == BLACK


def test_render_scaled():
    machine = Machine()
    machine.display.draw_sprite(0, 0, 0x80)
    surface = pygame.Surface((640, 320))
    render(machine, surface)
    assert surface.get_at((5, 5)) == WHITE
    assert surface.get_at((15, 5)) == BLACK
    assert surface.get_at((5, 15)) == BLACK


def test_render_after_clear_is_black():
    machine = Machine()
    machine.display.draw_sprite(10, 10, 0xFF)
    machine.display.clear()
    surface = pygame.Surface((64, 32))
    render(machine, surface)
    assert surface.get_at((12, 10)) == BLACK


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 0
    assert "Usage: chip-8 <program_file>" in capsys.readouterr().out


def test_main_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        main([str(tmp_path / "absent.ch8")])


def test_main_program_too_large(tmp_path):
    program = tmp_path / "big.ch8"
    program.write_bytes(bytes(MAX_PROGRAM_SIZE + 1))
    with pytest.raises(ProgramTooLargeError):
        main([str(program)])