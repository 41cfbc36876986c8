"""RSP vector reciprocal, square-root, move and no-op instructions."""

from __future__ import annotations

from .vu_state import VectorState, count_leading_zeros, de, vd, ve, vt

_U32 = 0xFFFFFFFF


class ReservedInstructionError(RuntimeError):
    """A reserved vector opcode was executed."""

    def __init__(self, opcode: int) -> None:
        super().__init__(f"reserved RSP vector instruction {opcode:#010x}")
        self.opcode = opcode


def _s16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _s32(value: int) -> int:
    value &= _U32
    return value - 0x100000000 if value & 0x80000000 else value


def _source_element(state: VectorState, opcode: int) -> int:
    return state.vpr[vt(opcode)][ve(opcode) & 7]


def _input(state: VectorState, opcode: int, double: bool) -> int:
    element = _source_element(state, opcode)
    if double and state.divdp:
        return _s32((state.divin << 16) | element)
    return _s16(element)


def _lookup(state: VectorState, value: int, square_root: bool) -> int:
    mask = -1 if value < 0 else 0
    data = value ^ mask
    if value > -32768:
        data -= mask
    if data == 0:
        return 0x7FFFFFFF
    if value == -32768:
        return 0xFFFF0000
    shift = count_leading_zeros(data)
    index = ((data << shift) & 0x7FC00000) >> 22
    if square_root:
        entry = state.inverse_square_roots[(index & 0x1FE) | (shift & 1)]
        result = ((0x10000 | entry) << 14) >> ((31 - shift) >> 1)
    else:
        entry = state.reciprocals[index]
        result = ((0x10000 | entry) << 14) >> (31 - shift)
    return (result ^ mask) & _U32


def _finish(state: VectorState, opcode: int, result: int) -> None:
    accl = state.element_vector(vt(opcode), ve(opcode))
    state.divdp = False
    state.divout = _s16(result >> 16)
    state.accl = accl
    target = list(state.vpr[vd(opcode)])
    target[de(opcode)] = result & 0xFFFF
    state.vpr[vd(opcode)] = target


def _high(state: VectorState, opcode: int) -> None:
    accl = state.element_vector(vt(opcode), ve(opcode))
    state.accl = accl
    state.divdp = True
    state.divin = _s16(_source_element(state, opcode))
    target = list(state.vpr[vd(opcode)])
    target[de(opcode)] = state.divout & 0xFFFF
    state.vpr[vd(opcode)] = target


def vrcp(state: VectorState, opcode: int) -> None:
    """Single-precision reciprocal."""
    _finish(state, opcode, _lookup(state, _input(state, opcode, False), False))


def vrcpl(state: VectorState, opcode: int) -> None:
    """Reciprocal of the low half, using a pending VRCPH high half."""
    _finish(state, opcode, _lookup(state, _input(state, opcode, True), False))


def vrcph(state: VectorState, opcode: int) -> None:
    """Load the high half of a double-precision reciprocal input."""
    _high(state, opcode)


def vmov(state: VectorState, opcode: int) -> None:
    """Copy one element of vt into the destination."""
    element = state.element_vector(vt(opcode), ve(opcode))
    target = list(state.vpr[vd(opcode)])
    target[de(opcode)] = element[de(opcode)]
    state.vpr[vd(opcode)] = target
    state.accl = element


def vrsq(state: VectorState, opcode: int) -> None:
    """Single-precision inverse square root."""
    _finish(state, opcode, _lookup(state, _input(state, opcode, False), True))


def vrsql(state: VectorState, opcode: int) -> None:
    """Inverse square root of the low half, using a pending VRSQH high half."""
    _finish(state, opcode, _lookup(state, _input(state, opcode, True), True))


def vrsqh(state: VectorState, opcode: int) -> None:
    """Load the high half of a double-precision inverse square root input."""
    _high(state, opcode)


def vnop(state: VectorState, opcode: int) -> None:
    """Leave the vector state untouched; only a 32-bit opcode is accepted."""
    if not 0 <= opcode <= _U32:
        raise ValueError(f"opcode out of range: {opcode}")


def reserved(state: VectorState, opcode: int) -> None:
    """Reject a reserved opcode."""
    raise ReservedInstructionError(opcode)