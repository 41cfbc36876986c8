"""RSP vector multiply instructions that set the accumulator."""

from __future__ import annotations

from collections.abc import Callable

from .vu_state import VectorState, clamp_signed, s_clip, vd, ve, vs, vt

_Lane = tuple[int, int, int, int]


def _s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _sign_mask(value: int) -> int:
    """Spread bit 15 of a lane across all 16 bits."""
    return (-((value >> 15) & 1)) & 0xFFFF


def _apply(state: VectorState, opcode: int, lane: Callable[[int, int], _Lane]) -> None:
    source = state.vpr[vs(opcode)]
    element = state.element_vector(vt(opcode), ve(opcode))
    rows = [lane(a, b) for a, b in zip(source, element)]
    acch, accm, accl, result = (list(column) for column in zip(*rows))
    state.acch, state.accm, state.accl = acch, accm, accl
    state.vpr[vd(opcode)] = result


def _fraction(a: int, b: int) -> tuple[int, int]:
    acc = _s16(a) * _s16(b) * 2 + 0x8000
    return acc & 0xFFFF, (acc >> 16) & 0xFFFF


def _vmulf_lane(a: int, b: int) -> _Lane:
    low, mid = _fraction(a, b)
    negative = _sign_mask(mid)
    equal = a == b
    high = 0 if equal else negative
    result = (mid + (negative if equal else 0)) & 0xFFFF
    return high, mid, low, result


def _vmulu_lane(a: int, b: int) -> _Lane:
    low, mid = _fraction(a, b)
    negative = _sign_mask(mid)
    high = 0 if a == b else negative
    result = 0 if high else mid | negative
    return high, mid, low, result


def _vmulq_lane(a: int, b: int) -> _Lane:
    product = _s16(a) * _s16(b)
    if product < 0:
        product += 31
    result = (clamp_signed(product >> 1) & ~15) & 0xFFFF
    return (product >> 16) & 0xFFFF, product & 0xFFFF, 0, result


def _vmudl_lane(a: int, b: int) -> _Lane:
    low = ((a & 0xFFFF) * (b & 0xFFFF)) >> 16
    return 0, 0, low, low


def _mixed(product: int) -> tuple[int, int, int]:
    low = product & 0xFFFF
    mid = (product >> 16) & 0xFFFF
    return _sign_mask(mid), mid, low


def _vmudm_lane(a: int, b: int) -> _Lane:
    high, mid, low = _mixed(_s16(a) * (b & 0xFFFF))
    return high, mid, low, mid


def _vmudn_lane(a: int, b: int) -> _Lane:
    high, mid, low = _mixed((a & 0xFFFF) * _s16(b))
    return high, mid, low, low


def _vmudh_lane(a: int, b: int) -> _Lane:
    product = _s16(a) * _s16(b)
    return (product >> 16) & 0xFFFF, product & 0xFFFF, 0, clamp_signed(product) & 0xFFFF


def vmulf(state: VectorState, opcode: int) -> None:
    """Signed fractional multiply with rounding."""
    _apply(state, opcode, _vmulf_lane)


def vmulu(state: VectorState, opcode: int) -> None:
    """Fractional multiply with unsigned clamping of the result."""
    _apply(state, opcode, _vmulu_lane)


def vrndp(state: VectorState, opcode: int) -> None:
    """Round the accumulator towards positive when it is not negative."""
    element = state.element_vector(vt(opcode), ve(opcode))
    shift = 16 if vs(opcode) & 1 else 0
    rows = []
    for b, high, mid, low in zip(element, state.acch, state.accm, state.accl):
        acc = s_clip((high << 32) | (mid << 16) | low, 48)
        if acc >= 0:
            acc = s_clip(acc + (_s16(b) << shift), 48)
        rows.append(
            (
                (acc >> 32) & 0xFFFF,
                (acc >> 16) & 0xFFFF,
                acc & 0xFFFF,
                clamp_signed(acc >> 16) & 0xFFFF,
            )
        )
    acch, accm, accl, result = (list(column) for column in zip(*rows))
    state.acch, state.accm, state.accl = acch, accm, accl
    state.vpr[vd(opcode)] = result


def vmulq(state: VectorState, opcode: int) -> None:
    """Integer multiply used for MPEG quantisation."""
    _apply(state, opcode, _vmulq_lane)


def vmudl(state: VectorState, opcode: int) -> None:
    """Unsigned low-part multiply."""
    _apply(state, opcode, _vmudl_lane)


def vmudm(state: VectorState, opcode: int) -> None:
    """Signed vs times unsigned vt, keeping the middle part."""
    _apply(state, opcode, _vmudm_lane)


def vmudn(state: VectorState, opcode: int) -> None:
    """Unsigned vs times signed vt, keeping the low part."""
    _apply(state, opcode, _vmudn_lane)


def vmudh(state: VectorState, opcode: int) -> None:
    """Signed high-part multiply with saturation."""
    _apply(state, opcode, _vmudh_lane)