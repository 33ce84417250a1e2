# chipeight

A CHIP-8 virtual machine. It runs CHIP-8 program files in a pygame window
that shows the 64×32 monochrome screen scaled up ten times. Each frame runs
at 60 Hz and executes 11 instructions.

## Installing

```
pip install .
```

This installs pygame, which draws the window and reads the keyboard. For the
tests, install the `test` extra (`pip install .[test]`) and run `pytest`.

## Running a program

```
chipeight path/to/program.ch8
```

If you run it without a program file, it prints a short usage message and
exits. Close the window to stop the machine.

## Keyboard

The 16-key CHIP-8 keypad is laid out on the left side of a QWERTY keyboard:

```
CHIP-8 keypad      Keyboard
1 2 3 C            1 2 3 4
4 5 6 D            Q W E R
7 8 9 E            A S D F
A 0 B F            Z X C V
```

## Using the machine from Python

The machine does not need a window. It can be driven directly, for example
in tests or when building another front end:

```python
from chipeight.machine import Machine

machine = Machine()
machine.load_bytes(bytes([0x60, 0x2A]))   # V0 = 0x2A
machine.cycle()
assert machine.cpu.v[0] == 0x2A
```

- `Machine.load_program(path)` and `Machine.load_bytes(data)` place a program
  at address `0x200`. A program longer than the 3584 bytes left in the 4 KiB
  memory raises `ProgramTooLargeError`.
- `Machine.fetch()` reads the next two-byte instruction and advances the
  program counter; `Machine.execute(instruction)` carries it out.
- `Machine.cycle()` counts down the delay and sound timers, then fetches and
  executes one instruction, unless the machine is waiting for a key press.
- `Machine.run_frame(pressed)` takes sixteen booleans, one per keypad key
  from 0x0 to 0xF, and runs that frame's 11 cycles.

Pass `original=True` to `Machine` to follow the original interpreter for the
shift, jump-with-offset and register load/store instructions. Pass
`debug=True` to log each instruction at DEBUG level on the
`chipeight.machine` logger. Unknown instructions are logged as warnings and
skipped.

The processor state is `machine.cpu` (a `Cpu` with `pc`, `i`, `v`, `stack`,
`sp`, `delay_timer` and `sound_timer`), the keypad is `machine.keypad` (a
`Keypad`), and the screen is `machine.display` (a `Display`);
`Display.is_lit(x, y)` reports whether a pixel is on.

The front end lives in `chipeight.app`: `pressed_keys(key_state)` maps a
pygame keyboard state to the sixteen keypad states, `render(machine, surface)`
draws the screen onto a pygame surface, and `run(machine, scale)` opens a
window and runs the machine until it is closed.

## What it does not do

- There is no sound: the sound timer counts down, but nothing is played.
- The `chipeight` command takes only a program file. It has no options for
  the original-interpreter behaviour, for debug logging or for the window
  scale; use `Machine` and `run` from Python for those.