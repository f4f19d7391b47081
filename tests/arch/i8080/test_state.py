# tests/arch/i8080/test_state.py
"""
i8080_tracer.arch.i8080.stateモジュールの単体テスト。
"""
import pytest

from i8080_tracer.arch.i8080.state import (
    I8080CpuState, FlagPolicy, AuxCarryMode,
    S_FLAG, Z_FLAG, AC_FLAG, P_FLAG, CY_FLAG
)

# @intent:test_suite 8080のレジスタ・フラグ・ペアアクセスを検証します。

class TestI8080CpuState:
    def test_initial_state_is_zeroed(self):
        state = I8080CpuState()
        assert (state.a, state.b, state.c, state.d, state.e, state.h, state.l) == (0,) * 7
        assert state.f == 0
        assert state.pc == 0 and state.sp == 0
        assert state.int_enable is False
        assert state.policy == FlagPolicy()

    @pytest.mark.parametrize("attr, mask", [
        ("flag_s", S_FLAG), ("flag_z", Z_FLAG), ("flag_ac", AC_FLAG),
        ("flag_p", P_FLAG), ("flag_cy", CY_FLAG),
    ])
    def test_flag_accessors_touch_only_their_bit(self, attr, mask):
        state = I8080CpuState()
        setattr(state, attr, True)
        assert state.f == mask
        assert getattr(state, attr) is True
        setattr(state, attr, False)
        assert state.f == 0

    # @intent:test_case_psw PUSH PSWの1バイト表現はビット1が常に1で、未使用ビットはPOPで捨てられます。
    def test_psw_layout(self):
        state = I8080CpuState()
        assert state.psw == 0x02
        state.flag_s = True
        state.flag_cy = True
        assert state.psw == 0x83

        state.psw = 0xFF
        assert state.f == S_FLAG | Z_FLAG | AC_FLAG | P_FLAG | CY_FLAG
        assert state.psw == 0xD7

    def test_register_pairs_are_views(self):
        state = I8080CpuState(b=0x12, c=0x34)
        assert state.bc == 0x1234
        state.de = 0xABCD
        assert (state.d, state.e) == (0xAB, 0xCD)
        state.hl = 0x1_0001
        assert (state.h, state.l) == (0x00, 0x01)

    def test_policy_is_not_part_of_equality(self):
        a = I8080CpuState(policy=FlagPolicy(inverted_sign=False))
        b = I8080CpuState()
        assert a == b


class TestFlagPolicy:
    def test_defaults(self):
        policy = FlagPolicy()
        assert policy.inverted_sign is True
        assert policy.odd_parity is True
        assert policy.aux_carry is AuxCarryMode.NIBBLE

    def test_is_frozen(self):
        with pytest.raises(AttributeError):
            FlagPolicy().odd_parity = False
