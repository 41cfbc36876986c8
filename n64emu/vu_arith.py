"""RSP vector add, compare, clip, select and logical instructions."""

from __future__ import annotations

from collections.abc import Callable

from .vu_state import VectorState, clamp_signed, vd, ve, vs, vt

_MASK = 0xFFFF


def _s16(value: int) -> int:
    value &= _MASK
    return value - 0x10000 if value & 0x8000 else value


def _flag(condition: bool) -> int:
    return _MASK if condition else 0


def _zeros() -> list[int]:
    return [0] * 8


def _operands(state: VectorState, opcode: int) -> tuple[list[int], list[int]]:
    return list(state.vpr[vs(opcode)]), state.element_vector(vt(opcode), ve(opcode))


def _store(state: VectorState, opcode: int, result: list[int]) -> None:
    state.accl = list(result)
    state.vpr[vd(opcode)] = list(result)


def vadd(state: VectorState, opcode: int) -> None:
    """Signed add with carry in from VCO, saturating the result."""
    source, element = _operands(state, opcode)
    accl, result = [], []
    for a, b, c in zip(source, element, state.vcol):
        carry = -_s16(c)
        sa, sb = _s16(a), _s16(b)
        accl.append((a + b + carry) & _MASK)
        low = clamp_signed(min(sa, sb) + carry)
        result.append(clamp_signed(low + max(sa, sb)) & _MASK)
    state.accl = accl
    state.vpr[vd(opcode)] = result
    state.vcol = _zeros()
    state.vcoh = _zeros()


def vsub(state: VectorState, opcode: int) -> None:
    """Signed subtract with borrow in from VCO, saturating the result."""
    source, element = _operands(state, opcode)
    accl, result = [], []
    for a, b, c in zip(source, element, state.vcol):
        carry = -_s16(c)
        udiff = (b + carry) & _MASK
        sdiff = clamp_signed(_s16(b) + carry)
        accl.append((a - udiff) & _MASK)
        overflow = -1 if sdiff > _s16(udiff) else 0
        result.append(clamp_signed(clamp_signed(_s16(a) - sdiff) + overflow) & _MASK)
    state.accl = accl
    state.vpr[vd(opcode)] = result
    state.vcol = _zeros()
    state.vcoh = _zeros()


def vzero(state: VectorState, opcode: int) -> None:
    """Store the wrapped sum in the accumulator and clear the destination."""
    source, element = _operands(state, opcode)
    state.accl = [(a + b) & _MASK for a, b in zip(source, element)]
    state.vpr[vd(opcode)] = _zeros()


def vabs(state: VectorState, opcode: int) -> None:
    """Apply the sign of vs to vt: negate, zero or keep."""
    source, element = _operands(state, opcode)
    accl, result = [], []
    for a, b in zip(source, element):
        negative = _flag(bool(a & 0x8000))
        value = (0 if a == 0 else b) ^ negative
        accl.append((value - _s16(negative)) & _MASK)
        result.append(clamp_signed(_s16(value) - _s16(negative)) & _MASK)
    state.accl = accl
    state.vpr[vd(opcode)] = result


def vaddc(state: VectorState, opcode: int) -> None:
    """Unsigned add that records the carry out in VCO."""
    source, element = _operands(state, opcode)
    total = [(a + b) & _MASK for a, b in zip(source, element)]
    state.vcol = [_flag(a + b > _MASK) for a, b in zip(source, element)]
    state.vcoh = _zeros()
    _store(state, opcode, total)


def vsubc(state: VectorState, opcode: int) -> None:
    """Unsigned subtract that records borrow and inequality in VCO."""
    source, element = _operands(state, opcode)
    state.vcoh = [_flag(a != b) for a, b in zip(source, element)]
    state.vcol = [_flag(a != b and a < b) for a, b in zip(source, element)]
    _store(state, opcode, [(a - b) & _MASK for a, b in zip(source, element)])


def vsar(state: VectorState, opcode: int) -> None:
    """Read one slice of the accumulator into the destination."""
    slices = {0x8: state.acch, 0x9: state.accm, 0xA: state.accl}
    chosen = slices.get(ve(opcode))
    state.vpr[vd(opcode)] = list(chosen) if chosen is not None else _zeros()


def _select(
    state: VectorState, opcode: int, condition: Callable[[int, int, int, int], bool]
) -> None:
    source, element = _operands(state, opcode)
    vccl = [
        _flag(condition(a, b, h, c))
        for a, b, h, c in zip(source, element, state.vcoh, state.vcol)
    ]
    state.vccl = vccl
    result = [a if flag else b for a, b, flag in zip(source, element, vccl)]
    state.vcch = _zeros()
    state.vcoh = _zeros()
    state.vcol = _zeros()
    _store(state, opcode, result)


def vlt(state: VectorState, opcode: int) -> None:
    """Select the smaller signed lane, recording the comparison in VCC."""
    _select(
        state,
        opcode,
        lambda a, b, h, c: _s16(a) < _s16(b) or (a == b and bool(h) and bool(c)),
    )


def veq(state: VectorState, opcode: int) -> None:
    """Mark equal lanes in VCC."""
    _select(state, opcode, lambda a, b, h, c: a == b and not h)


def vne(state: VectorState, opcode: int) -> None:
    """Mark unequal lanes in VCC."""
    _select(state, opcode, lambda a, b, h, c: a != b or bool(h))


def vge(state: VectorState, opcode: int) -> None:
    """Select the larger signed lane, recording the comparison in VCC."""
    _select(
        state,
        opcode,
        lambda a, b, h, c: _s16(a) > _s16(b) or (a == b and not (h and c)),
    )


def vcl(state: VectorState, opcode: int) -> None:
    """Low half of a clip test, continuing from a preceding VCH."""
    source, element = _operands(state, opcode)
    result, vcch, vccl = [], [], []
    lanes = zip(source, element, state.vcol, state.vcoh, state.vce, state.vccl, state.vcch)
    for a, b, col, coh, ce, ccl, cch in lanes:
        nvt = ((b ^ col) - _s16(col)) & _MASK
        diff = (a - nvt) & _MASK
        ncarry = diff == min(a + b, _MASK)
        diff0 = diff == 0
        leeq = (diff0 and ncarry and not ce) or (bool(ce) and (diff0 or ncarry))
        geeq = b <= a
        le = _flag(leeq) if (col and not coh) else ccl
        ge = cch if (col or coh) else _flag(geeq)
        mask = le if col else ge
        result.append(nvt if mask else a)
        vcch.append(ge)
        vccl.append(le)
    state.vcch = vcch
    state.vccl = vccl
    state.vcoh = _zeros()
    state.vcol = _zeros()
    state.vce = _zeros()
    _store(state, opcode, result)


def vch(state: VectorState, opcode: int) -> None:
    """High half of a clip test; clamps vs to plus or minus vt."""
    source, element = _operands(state, opcode)
    result, vcol, vcoh, vccl, vcch, vce = [], [], [], [], [], []
    for a, b in zip(source, element):
        differ = bool((a ^ b) & 0x8000)
        nvt = (-b) & _MASK if differ else b
        diff = (a - nvt) & _MASK
        diff0 = diff == 0
        vt_negative = bool(b & 0x8000)
        gez = _s16(diff) >= 0
        lez = _s16(diff) <= 0
        high = vt_negative if differ else gez
        low = lez if differ else vt_negative
        equal = differ and diff == _MASK
        mask = low if differ else high
        result.append(nvt if mask else a)
        vcol.append(_flag(differ))
        vcch.append(_flag(high))
        vccl.append(_flag(low))
        vce.append(_flag(equal))
        vcoh.append(_flag(not (diff0 or equal)))
    state.vcol = vcol
    state.vcoh = vcoh
    state.vccl = vccl
    state.vcch = vcch
    state.vce = vce
    _store(state, opcode, result)


def vcr(state: VectorState, opcode: int) -> None:
    """Clip test using one's complement negation."""
    source, element = _operands(state, opcode)
    result, vccl, vcch = [], [], []
    for a, b in zip(source, element):
        sign = _flag(bool((a ^ b) & 0x8000))
        low = bool(((a & sign) + b) & 0x8000)
        high = min(_s16(a | sign), _s16(b)) == _s16(b)
        nvt = b ^ sign
        mask = low if sign else high
        result.append(nvt if mask else a)
        vccl.append(_flag(low))
        vcch.append(_flag(high))
    state.vccl = vccl
    state.vcch = vcch
    _store(state, opcode, result)
    state.vcol = _zeros()
    state.vcoh = _zeros()
    state.vce = _zeros()


def vmrg(state: VectorState, opcode: int) -> None:
    """Select vs where VCC low is set, otherwise vt."""
    source, element = _operands(state, opcode)
    result = [a if flag else b for a, b, flag in zip(source, element, state.vccl)]
    state.vcoh = _zeros()
    state.vcol = _zeros()
    _store(state, opcode, result)


def _logical(state: VectorState, opcode: int, op: Callable[[int, int], int]) -> None:
    source, element = _operands(state, opcode)
    _store(state, opcode, [op(a, b) & _MASK for a, b in zip(source, element)])


def vand(state: VectorState, opcode: int) -> None:
    """Bitwise and."""
    _logical(state, opcode, lambda a, b: a & b)


def vnand(state: VectorState, opcode: int) -> None:
    """Bitwise not-and."""
    _logical(state, opcode, lambda a, b: ~(a & b))


def vor(state: VectorState, opcode: int) -> None:
    """Bitwise or."""
    _logical(state, opcode, lambda a, b: a | b)


def vnor(state: VectorState, opcode: int) -> None:
    """Bitwise not-or."""
    _logical(state, opcode, lambda a, b: ~(a | b))


def vxor(state: VectorState, opcode: int) -> None:
    """Bitwise exclusive or."""
    _logical(state, opcode, lambda a, b: a ^ b)


def vnxor(state: VectorState, opcode: int) -> None:
    """Bitwise not-exclusive-or."""
    _logical(state, opcode, lambda a, b: ~(a ^ b))