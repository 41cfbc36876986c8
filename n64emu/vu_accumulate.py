"""RSP vector multiply-accumulate and rounding instructions."""

from __future__ import annotations

from collections.abc import Callable

from .vu_state import VectorState, clamp_signed, s_clip, vd, ve, vs, vt

_Lane = tuple[int, int, int, int]
_LaneOp = Callable[[int, int, int, int, int], _Lane]


def _s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _s32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _sign_mask(value: int) -> int:
    """Spread bit 15 of a lane across all 16 bits."""
    return (-((value >> 15) & 1)) & 0xFFFF


def _add16(x: int, y: int) -> tuple[int, int]:
    """Add two 16-bit lanes, returning the wrapped sum and the carry out."""
    total = (x & 0xFFFF) + (y & 0xFFFF)
    return total & 0xFFFF, total >> 16


def _clamp_high(high: int, mid: int) -> int:
    """Saturate the upper 32 bits of the accumulator to a signed 16-bit lane."""
    return clamp_signed(_s32((high << 16) | mid)) & 0xFFFF


def _clamp_low(high: int, mid: int, low: int) -> int:
    """Return the low lane when the accumulator fits, otherwise saturate it."""
    sign = _sign_mask(high)
    if sign == high and sign == _sign_mask(mid):
        return low
    return 0 if sign else 0xFFFF


def _apply(state: VectorState, opcode: int, lane: _LaneOp) -> None:
    source = state.vpr[vs(opcode)]
    element = state.element_vector(vt(opcode), ve(opcode))
    rows = [
        lane(a, b, high, mid, low)
        for a, b, high, mid, low in zip(source, element, state.acch, state.accm, state.accl)
    ]
    acch, accm, accl, result = (list(column) for column in zip(*rows))
    state.acch, state.accm, state.accl = acch, accm, accl
    state.vpr[vd(opcode)] = result


def _fraction_accumulate(a: int, b: int, high: int, mid: int, low: int) -> tuple[int, int, int]:
    product = _s16(a) * _s16(b)
    plo = product & 0xFFFF
    phi = (product >> 16) & 0xFFFF
    md = ((phi << 1) & 0xFFFF) | (plo >> 15)
    hs = _sign_mask(phi)
    low, carry = _add16(low, (plo << 1) & 0xFFFF)
    md = (md + carry) & 0xFFFF
    if carry and md == 0:
        hs = (hs + 1) & 0xFFFF
    mid, carry = _add16(mid, md)
    high = (high + hs + carry) & 0xFFFF
    return high, mid, low


def _vmacf_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    high, mid, low = _fraction_accumulate(a, b, high, mid, low)
    return high, mid, low, _clamp_high(high, mid)


def _vmacu_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    high, mid, low = _fraction_accumulate(a, b, high, mid, low)
    if high & 0x8000:
        result = 0
    elif high:
        result = 0xFFFF
    else:
        result = 0xFFFF if mid & 0x8000 else mid
    return high, mid, low, result


def _vmadl_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    part = ((a & 0xFFFF) * (b & 0xFFFF)) >> 16
    low, carry = _add16(low, part)
    mid, carry = _add16(mid, carry)
    high = (high + carry) & 0xFFFF
    return high, mid, low, _clamp_low(high, mid, low)


def _mixed_accumulate(
    a: int, b: int, high: int, mid: int, low: int, signed_a: bool
) -> tuple[int, int, int]:
    ua, ub = a & 0xFFFF, b & 0xFFFF
    plo = (ua * ub) & 0xFFFF
    phi = (ua * ub) >> 16
    if signed_a and ua & 0x8000:
        phi -= ub
    elif not signed_a and ub & 0x8000:
        phi -= ua
    phi &= 0xFFFF
    low, carry = _add16(low, plo)
    phi = (phi + carry) & 0xFFFF
    mid, carry = _add16(mid, phi)
    high = (high + _sign_mask(phi) + carry) & 0xFFFF
    return high, mid, low


def _vmadm_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    high, mid, low = _mixed_accumulate(a, b, high, mid, low, signed_a=True)
    return high, mid, low, _clamp_high(high, mid)


def _vmadn_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    high, mid, low = _mixed_accumulate(a, b, high, mid, low, signed_a=False)
    return high, mid, low, _clamp_low(high, mid, low)


def _vmadh_lane(a: int, b: int, high: int, mid: int, low: int) -> _Lane:
    product = _s16(a) * _s16(b)
    plo = product & 0xFFFF
    phi = (product >> 16) & 0xFFFF
    mid, carry = _add16(mid, plo)
    high = (high + phi + carry) & 0xFFFF
    return high, mid, low, _clamp_high(high, mid)


def vmacf(state: VectorState, opcode: int) -> None:
    """Signed fractional multiply added to the accumulator."""
    _apply(state, opcode, _vmacf_lane)


def vmacu(state: VectorState, opcode: int) -> None:
    """Fractional multiply-accumulate with unsigned clamping of the result."""
    _apply(state, opcode, _vmacu_lane)


def vrndn(state: VectorState, opcode: int) -> None:
    """Round the accumulator towards negative when it is negative."""
    element = state.element_vector(vt(opcode), ve(opcode))
    shift = 16 if vs(opcode) & 1 else 0
    rows = []
    for b, high, mid, low in zip(element, state.acch, state.accm, state.accl):
        acc = s_clip((high << 32) | (mid << 16) | low, 48)
        if acc < 0:
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


def vmacq(state: VectorState, opcode: int) -> None:
    """Oddify the upper accumulator for MPEG dequantisation."""
    acch, accm, result = [], [], []
    for high, mid in zip(state.acch, state.accm):
        product = _s32((high << 16) | mid)
        if not product & 0x20:
            if product < 0:
                product += 32
            elif product >= 32:
                product -= 32
        acch.append((product >> 16) & 0xFFFF)
        accm.append(product & 0xFFFF)
        result.append((clamp_signed(product >> 1) & ~15) & 0xFFFF)
    state.acch, state.accm = acch, accm
    state.vpr[vd(opcode)] = result


def vmadl(state: VectorState, opcode: int) -> None:
    """Unsigned low-part multiply added to the accumulator."""
    _apply(state, opcode, _vmadl_lane)


def vmadm(state: VectorState, opcode: int) -> None:
    """Signed vs times unsigned vt added to the accumulator."""
    _apply(state, opcode, _vmadm_lane)


def vmadn(state: VectorState, opcode: int) -> None:
    """Unsigned vs times signed vt added to the accumulator."""
    _apply(state, opcode, _vmadn_lane)


def vmadh(state: VectorState, opcode: int) -> None:
    """Signed high-part multiply added to the accumulator."""
    _apply(state, opcode, _vmadh_lane)