import copy

import pytest

from n64emu import vu_divide
from n64emu.vu_state import VectorState


def _op(vd, de, vt, e=0):
    return (e << 21) | (vt << 16) | (de << 11) | (vd << 6)


def _full(state, vd, de):
    return ((state.divout & 0xFFFF) << 16) | state.vpr[vd][de]


def _run(instruction, value, de=0, e=8):
    state = VectorState()
    state.vpr[2] = [value & 0xFFFF] * 8
    instruction(state, _op(3, de, 2, e))
    return state, _full(state, 3, de)


@pytest.mark.parametrize("instruction", [vu_divide.vrcp, vu_divide.vrsq])
def test_zero_input_gives_maximum(instruction):
    state, result = _run(instruction, 0)
    assert result == 0x7FFFFFFF
    assert state.divdp is False


@pytest.mark.parametrize("instruction", [vu_divide.vrcp, vu_divide.vrsq])
def test_most_negative_input(instruction):
    state, result = _run(instruction, -32768)
    assert result == 0xFFFF0000
    assert state.divout == -1


@pytest.mark.parametrize("instruction", [vu_divide.vrcp, vu_divide.vrsq])
@pytest.mark.parametrize("value", [1, 3, 100, 12345])
def test_negative_input_complements_result(instruction, value):
    _, positive = _run(instruction, value)
    _, negative = _run(instruction, -value)
    assert negative == positive ^ 0xFFFFFFFF


def test_reciprocal_halves_when_input_doubles():
    _, one = _run(vu_divide.vrcp, 1)
    _, two = _run(vu_divide.vrcp, 2)
    assert two == one >> 1


def test_inverse_square_root_halves_when_input_quadruples():
    _, one = _run(vu_divide.vrsq, 1)
    _, four = _run(vu_divide.vrsq, 4)
    assert four == one >> 1


def test_result_written_only_to_destination_element():
    state = VectorState()
    state.vpr[2] = [5] * 8
    state.vpr[3] = [0x1234] * 8
    vu_divide.vrcp(state, _op(3, 5, 2, 8))
    others = [lane for i, lane in enumerate(state.vpr[3]) if i != 5]
    assert others == [0x1234] * 7
    assert state.accl == [5] * 8


@pytest.mark.parametrize(
    "high,low", [(vu_divide.vrcph, vu_divide.vrcpl), (vu_divide.vrsqh, vu_divide.vrsql)]
)
def test_double_precision_with_zero_high_matches_single(high, low):
    single = VectorState()
    single.vpr[2] = [7] * 8
    low(single, _op(3, 0, 2, 8))

    state = VectorState()
    state.divout = -2
    state.vpr[2] = [0] * 8
    high(state, _op(4, 1, 2, 8))
    assert state.divdp is True
    assert state.divin == 0
    assert state.vpr[4][1] == 0xFFFE
    state.vpr[2] = [7] * 8
    low(state, _op(3, 0, 2, 8))
    assert state.divdp is False
    assert _full(state, 3, 0) == _full(single, 3, 0)


def test_vmov_copies_selected_element():
    state = VectorState()
    state.vpr[2] = list(range(10, 18))
    state.vpr[3] = [0] * 8
    vu_divide.vmov(state, _op(3, 4, 2, 0))
    assert state.vpr[3] == [0, 0, 0, 0, 14, 0, 0, 0]
    assert state.accl == list(range(10, 18))


def test_vnop_leaves_state_unchanged():
    state = VectorState()
    state.vpr[1] = [9] * 8
    before = copy.deepcopy(state)
    vu_divide.vnop(state, 0xFFFFFFFF)
    assert state == before


def test_reserved_raises():
    with pytest.raises(vu_divide.ReservedInstructionError) as info:
        vu_divide.reserved(VectorState(), 0x4B00003F)
    assert info.value.opcode == 0x4B00003F