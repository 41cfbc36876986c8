import pytest

from n64emu.vu_multiply import vmudh, vmudl, vmudm, vmudn, vmulf, vmulq, vmulu, vrndp
from n64emu.vu_state import VectorState


def _opcode(d, s, t, e=0):
    return (e << 21) | (t << 16) | (s << 11) | (d << 6)


def _state(source, element):
    state = VectorState()
    state.vpr[1] = list(source)
    state.vpr[2] = list(element)
    return state


SOURCE = [0x0001, 0x7FFF, 0x8000, 0xFFFF, 0x1234, 0xFEDC, 0x4000, 0x0000]
SIGN = [0xFFFF if v & 0x8000 else 0 for v in SOURCE]


def test_vmudh_identity():
    state = _state(SOURCE, [1] * 8)
    vmudh(state, _opcode(3, 1, 2))
    assert state.vpr[3] == SOURCE
    assert state.accm == SOURCE
    assert state.acch == SIGN
    assert state.accl == [0] * 8


def test_vmudh_saturates():
    state = _state([0x7FFF] * 8, [0x7FFF] * 8)
    vmudh(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0x7FFF] * 8


def test_vmudh_broadcast_and_alias():
    state = _state([1] * 8, [5, 6, 7, 8, 9, 10, 11, 12])
    vmudh(state, _opcode(1, 1, 2, 8 + 2))
    assert state.vpr[1] == [7] * 8


def test_vmulf_min_times_min_clamps():
    state = _state([0x8000] * 8, [0x8000] * 8)
    vmulf(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0x7FFF] * 8
    assert state.acch == [0] * 8
    assert state.accm == [0x8000] * 8


def test_vmulf_by_zero_leaves_rounding_bit():
    state = _state(SOURCE, [0] * 8)
    vmulf(state, _opcode(3, 1, 2))
    assert state.accl == [0x8000] * 8
    assert state.accm == [0] * 8
    assert state.vpr[3] == [0] * 8


def test_vmulu_negative_clamps_to_zero():
    state = _state([0x8000] * 8, [0x4000] * 8)
    vmulu(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0] * 8
    assert state.acch == [0xFFFF] * 8


def test_vmulu_min_times_min_saturates():
    state = _state([0x8000] * 8, [0x8000] * 8)
    vmulu(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0xFFFF] * 8


def test_vmulf_and_vmulu_share_accumulator():
    first = _state(SOURCE, SOURCE[::-1])
    second = _state(SOURCE, SOURCE[::-1])
    vmulf(first, _opcode(3, 1, 2))
    vmulu(second, _opcode(3, 1, 2))
    assert first.accl == second.accl
    assert first.accm == second.accm
    assert first.acch == second.acch


@pytest.mark.parametrize("element", [[1] * 8, [0x7FFF] * 8, [0x8000] * 8, SOURCE[::-1]])
def test_vmulq_low_bits_cleared(element):
    state = _state(SOURCE, element)
    vmulq(state, _opcode(3, 1, 2))
    assert all(v & 15 == 0 for v in state.vpr[3])
    assert state.accl == [0] * 8


def test_vmulq_zero():
    state = _state([0] * 8, [0] * 8)
    vmulq(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0] * 8
    assert state.accm == [0] * 8
    assert state.acch == [0] * 8


def test_vmudl_by_zero_and_invariants():
    state = _state(SOURCE, [0] * 8)
    state.accm = [5] * 8
    vmudl(state, _opcode(3, 1, 2))
    assert state.vpr[3] == [0] * 8
    assert state.accm == [0] * 8
    assert state.acch == [0] * 8


def test_vmudl_result_mirrors_accumulator():
    state = _state(SOURCE, SOURCE[::-1])
    vmudl(state, _opcode(3, 1, 2))
    assert state.vpr[3] == state.accl


def test_vmudn_identity():
    state = _state(SOURCE, [1] * 8)
    vmudn(state, _opcode(3, 1, 2))
    assert state.vpr[3] == SOURCE
    assert state.accl == SOURCE
    assert state.accm == [0] * 8
    assert state.acch == [0] * 8


def test_vmudm_identity():
    state = _state(SOURCE, [1] * 8)
    vmudm(state, _opcode(3, 1, 2))
    assert state.accl == SOURCE
    assert state.accm == SIGN
    assert state.acch == SIGN
    assert state.vpr[3] == SIGN


def test_vrndp_high_shift_adds_element():
    state = _state([0] * 8, SOURCE)
    vrndp(state, _opcode(3, 1, 2))
    assert state.vpr[3] == SOURCE
    assert state.accm == SOURCE
    assert state.accl == [0] * 8


def test_vrndp_low_adds_into_accl():
    state = _state([0] * 8, [0x1234] * 8)
    vrndp(state, _opcode(3, 0, 2))
    assert state.accl == [0x1234] * 8
    assert state.vpr[3] == [0] * 8


def test_vrndp_leaves_negative_accumulator():
    state = _state([0] * 8, SOURCE)
    state.acch = [0xFFFF] * 8
    state.accm = [0xFFF0] * 8
    state.accl = [0x1111] * 8
    vrndp(state, _opcode(3, 1, 2))
    assert state.acch == [0xFFFF] * 8
    assert state.accm == [0xFFF0] * 8
    assert state.accl == [0x1111] * 8
    assert state.vpr[3] == [0xFFF0] * 8