"""Register state of the RSP vector unit and helpers for decoding its operands."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

LANES = 8
_LANE_MASK = 0xFFFF


def vt(opcode: int) -> int:
    """Index of the vt register."""
    return (opcode >> 16) & 0x1F


def ve(opcode: int) -> int:
    """Element selector applied to vt."""
    return (opcode >> 21) & 0xF


def vs(opcode: int) -> int:
    """Index of the vs register."""
    return (opcode >> 11) & 0x1F


def vd(opcode: int) -> int:
    """Index of the destination register."""
    return (opcode >> 6) & 0x1F


def de(opcode: int) -> int:
    """Destination element for single-lane instructions."""
    return (opcode >> 11) & 0x7


def clamp_signed(value: int) -> int:
    """Saturate an integer to the signed 16-bit range."""
    return max(-32768, min(32767, value))


def count_leading_zeros(value: int) -> int:
    """Leading zero bits of a 32-bit value; 32 for zero."""
    return 32 - (value & 0xFFFFFFFF).bit_length()


def s_clip(x: int, bits: int) -> int:
    """Sign-extend the low ``bits`` bits of ``x``."""
    if bits < 1:
        raise ValueError("bits must be at least 1")
    top = 1 << (bits - 1)
    mask = (top << 1) - 1
    return ((x & mask) ^ top) - top


def pack_vector(lanes: Iterable[int]) -> int:
    """Combine eight 16-bit lanes into a 128-bit value, element 0 uppermost."""
    values = list(lanes)
    if len(values) != LANES:
        raise ValueError(f"a vector has {LANES} lanes, got {len(values)}")
    result = 0
    for lane in values:
        result = (result << 16) | (lane & _LANE_MASK)
    return result


def unpack_vector(value: int) -> list[int]:
    """Split a 128-bit value into eight 16-bit lanes, element 0 first."""
    return [(value >> (16 * (LANES - 1 - element))) & _LANE_MASK for element in range(LANES)]


def _element_pattern(index: int) -> tuple[int, ...]:
    if index < 2:
        return tuple(range(LANES))
    if index < 4:
        select = index - 2
        return tuple((element & ~1) | select for element in range(LANES))
    if index < 8:
        select = index - 4
        return tuple((element & ~3) | select for element in range(LANES))
    return (index - 8,) * LANES


_ELEMENT_PATTERNS = tuple(_element_pattern(index) for index in range(16))


def _reciprocal_table() -> tuple[int, ...]:
    table = []
    for index in range(512):
        value = (((1 << 27) // (512 + index)) + 1) >> 1
        table.append(min(value - 0x10000, 0xFFFF))
    return tuple(table)


def _inverse_square_root_table() -> tuple[int, ...]:
    table = []
    for index in range(512):
        mantissa = (512 + (index & 0x1FE)) / 512
        scale = 1 if index & 1 else 2
        value = round((1 << 17) / math.sqrt(scale * mantissa)) - 0x10000
        table.append(max(0, min(value, 0xFFFF)))
    return tuple(table)


_RECIPROCALS = _reciprocal_table()
_INVERSE_SQUARE_ROOTS = _inverse_square_root_table()


def _zero_lanes() -> list[int]:
    return [0] * LANES


@dataclass
class VectorState:
    """Vector registers, accumulator, flags and divide state of the RSP."""

    vpr: list[list[int]] = field(default_factory=lambda: [_zero_lanes() for _ in range(32)])
    acch: list[int] = field(default_factory=_zero_lanes)
    accm: list[int] = field(default_factory=_zero_lanes)
    accl: list[int] = field(default_factory=_zero_lanes)
    vcol: list[int] = field(default_factory=_zero_lanes)
    vcoh: list[int] = field(default_factory=_zero_lanes)
    vccl: list[int] = field(default_factory=_zero_lanes)
    vcch: list[int] = field(default_factory=_zero_lanes)
    vce: list[int] = field(default_factory=_zero_lanes)
    divdp: bool = False
    divin: int = 0
    divout: int = 0
    reciprocals: tuple[int, ...] = _RECIPROCALS
    inverse_square_roots: tuple[int, ...] = _INVERSE_SQUARE_ROOTS

    def element_vector(self, vt: int, index: int) -> list[int]:
        """Lanes of register ``vt`` rearranged by the element selector ``index``."""
        register = self.vpr[vt]
        return [register[element] for element in _ELEMENT_PATTERNS[index & 0xF]]