import pytest

from n64emu.vu_state import (
    VectorState,
    clamp_signed,
    count_leading_zeros,
    de,
    pack_vector,
    s_clip,
    unpack_vector,
    vd,
    ve,
    vs,
    vt,
)


def _opcode(d, s, t, e):
    return (e << 21) | (t << 16) | (s << 11) | (d << 6)


@pytest.mark.parametrize("d,s,t,e", [(0, 0, 0, 0), (31, 30, 29, 15), (5, 17, 9, 8)])
def test_field_decoders(d, s, t, e):
    op = _opcode(d, s, t, e)
    assert vd(op) == d
    assert vs(op) == s
    assert vt(op) == t
    assert ve(op) == e
    assert de(op) == s & 7


def test_clamp_signed():
    assert clamp_signed(40000) == 32767
    assert clamp_signed(-40000) == -32768
    assert clamp_signed(123) == 123
    assert clamp_signed(-32768) == -32768


def test_count_leading_zeros_zero():
    assert count_leading_zeros(0) == 32


@pytest.mark.parametrize("value", [1, 2, 3, 0x1234, 0x00FF0000, 0x7FFFFFFF, 0x80000000])
def test_count_leading_zeros_normalises(value):
    shifted = value << count_leading_zeros(value)
    assert shifted < (1 << 32)
    assert shifted >> 31 == 1


def test_s_clip_sign_extends():
    assert s_clip(0xFFFF, 16) == -1
    assert s_clip(0x7FFF, 16) == 0x7FFF
    assert s_clip(-5 & ((1 << 48) - 1), 48) == -5
    assert s_clip(123, 48) == 123


def test_s_clip_rejects_zero_bits():
    with pytest.raises(ValueError):
        s_clip(1, 0)


def test_pack_unpack_round_trip():
    lanes = [0x1234, 0xFFFF, 0, 0x8000, 0x7FFF, 1, 0xABCD, 0x0F0F]
    packed = pack_vector(lanes)
    assert unpack_vector(packed) == lanes
    assert packed >> 112 == 0x1234
    assert packed & 0xFFFF == 0x0F0F


def test_pack_rejects_wrong_length():
    with pytest.raises(ValueError):
        pack_vector([1, 2, 3])


def test_element_vector_selectors():
    state = VectorState()
    state.vpr[3] = [10, 11, 12, 13, 14, 15, 16, 17]
    assert state.element_vector(3, 0) == [10, 11, 12, 13, 14, 15, 16, 17]
    assert state.element_vector(3, 1) == [10, 11, 12, 13, 14, 15, 16, 17]
    assert state.element_vector(3, 2) == [10, 10, 12, 12, 14, 14, 16, 16]
    assert state.element_vector(3, 3) == [11, 11, 13, 13, 15, 15, 17, 17]
    assert state.element_vector(3, 5) == [11] * 4 + [15] * 4
    for k in range(8):
        assert state.element_vector(3, 8 + k) == [10 + k] * 8


def test_default_state_is_zero_and_independent():
    first = VectorState()
    second = VectorState()
    first.vpr[0][0] = 5
    first.accl[0] = 7
    assert second.vpr[0] == [0] * 8
    assert second.accl == [0] * 8
    assert len(first.vpr) == 32


def test_lookup_tables():
    state = VectorState()
    assert len(state.reciprocals) == 512
    assert len(state.inverse_square_roots) == 512
    assert state.reciprocals[0] == 0xFFFF
    assert all(0 <= v <= 0xFFFF for v in state.reciprocals)
    assert all(0 <= v <= 0xFFFF for v in state.inverse_square_roots)
    assert list(state.reciprocals) == sorted(state.reciprocals, reverse=True)
    odd = list(state.inverse_square_roots[1::2])
    assert odd == sorted(odd, reverse=True)