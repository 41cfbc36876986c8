# n64emu

Components of a Nintendo 64 emulator, in plain Python:

- **RSP vector unit** — register state (`n64emu.vu_state.VectorState`)
  and the lane-wise instructions: multiplies (`n64emu.vu_multiply`),
  multiply-accumulates and rounding (`n64emu.vu_accumulate`), add,
  subtract, compare, clip, merge and logic (`n64emu.vu_arith`), and
  reciprocal, inverse square root, move and no-op (`n64emu.vu_divide`).
  A reserved opcode raises `ReservedInstructionError`.
- **TLB** — `n64emu.tlb.Tlb` reads, writes and probes entries through
  `Cop0Registers`, keeps read and write page tables, and translates
  addresses with `physical_address`, raising `TlbMiss` when no mapping
  exists.
- **Cartridge save memory** — `n64emu.flashram.SaveMemory` models SRAM
  or FlashRAM: bus reads and writes, the flash command set, and DMA to
  and from an RDRAM `bytearray`. Unsupported accesses raise
  `FlashramError`.
- **Unmapped bus** — `n64emu.unmapped.read_mem` returns the open-bus
  value; `write_mem` discards the write.
- **Video interface timing** — `n64emu.vi.VideoInterface` picks the
  PAL or NTSC clock, derives the frame delay and scanline length, tracks
  the current line and interlace field; `FrameLimiter` paces frames.
- **Input** — `n64emu.input.InputProfile` holds keyboard, game
  controller and joystick bindings; `default_profile()` gives the
  built-in one, and `read_keys()` turns pressed scancodes and any object
  with `axis`/`button`/`hat` methods into a 32-bit pad word.
- **Configuration** — `n64emu.config.Config` stores input profiles,
  per-port profile bindings and controller assignments as JSON
  (`load`, `save`, `default_config_path()`).
- **Save files** — `n64emu.storage.save_types_for(game_id)` tells which
  save type a game uses; `SavePaths.for_game` names its `.eep`, `.sra`,
  `.fla`, `.mpk` and `.romsave` files and `Saves` loads them and writes
  back those marked dirty.

## Installation

```
pip install .
```

The `test` extra installs pytest for the test suite:

```
pip install ".[test]"
```

## Command line

The `n64emu` command edits the configuration file in the user's config
directory:

```
n64emu --clear-input-bindings
n64emu --bind-input-profile myprofile --port 2
n64emu --list-controllers
```

Ports are numbered 1 to 4; `--bind-input-profile` and
`--assign-controller` both need `--port`. Errors are printed to standard
error and the command exits with status 1. Run with no arguments, it
prints its help.

## Using the library

Vector registers are lists of eight 16-bit lanes, element 0 first.
`pack_vector` and `unpack_vector` convert to and from a 128-bit integer.

```python
from n64emu.vu_state import VectorState
from n64emu.vu_arith import vadd

state = VectorState()
state.vpr[1] = [1, 2, 3, 4, 5, 6, 7, 8]
state.vpr[2] = [10] * 8
# vadd vd=3, vs=1, vt=2, element selector 0
vadd(state, (2 << 16) | (1 << 11) | (3 << 6) | 0x10)
print(state.vpr[3])  # [11, 12, 13, 14, 15, 16, 17, 18]
```

```python
from n64emu.storage import save_types_for

print(save_types_for("NZS"))  # [<SaveType.FLASH: 4>]
```

## What this package does not do

There is no emulator core here: no main CPU, RDP, audio or display, so
games cannot be run; the command reports this when given a ROM. No
joystick backend is bundled, so `--list-controllers` always reports that
no controllers are connected and `--assign-controller` has nothing to
assign. Interactive input profile creation (`--configure-input-profile`)
needs a display and is not available; profiles can be built in code with
`InputProfile` and stored with `Config.save`.