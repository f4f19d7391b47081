"""
8080 フラグエンジン。

演算結果から Zero/Sign/Parity/Carry/Auxiliary-Carry を個別に計算する純粋関数と、
命令ごとに許可されたフラグだけを更新する選択的更新を提供します。

Sign と Parity は反転した向き（Sign はビット7が0のときセット、Parity は
1のビット数が奇数のときセット）を既定としています。向きは FlagPolicy で切り替えられます。
"""
from i8080_tracer.arch.i8080.state import I8080CpuState, AuxCarryMode

# 命令が更新してよいフラグの選択マスク
SET_Z = 1 << 7
SET_S = 1 << 6
SET_P = 1 << 5
SET_CY = 1 << 4
SET_AC = 1 << 3
ALL_FLAGS = SET_Z | SET_S | SET_P | SET_CY | SET_AC
NO_CARRY = SET_Z | SET_S | SET_P | SET_AC  # INR/DCR


def zero(result: int) -> bool:
    return (result & 0xFF) == 0

def sign(result: int, inverted: bool = True) -> bool:
    high_bit = (result & 0x80) != 0
    return not high_bit if inverted else high_bit

def sign16(result: int, inverted: bool = True) -> bool:
    high_bit = (result & 0x8000) != 0
    return not high_bit if inverted else high_bit

# @intent:responsibility 下位8ビットの1の数からパリティを計算します。
def parity(result: int, odd: bool = True) -> bool:
    """odd=Trueなら1の数が奇数のときTrue、Falseなら偶数のときTrue。"""
    is_odd = bin(result & 0xFF).count("1") & 1 == 1
    return is_odd if odd else not is_odd

def carry(result: int) -> bool:
    return not 0 <= result <= 0xFF

def carry16(result: int) -> bool:
    return not 0 <= result <= 0xFFFF

# @intent:responsibility 旧方式の補助キャリー式（5ビットにマスクして0xFFと比較）です。
# @intent:rationale マスク後の値は0x1Fを超えないため、この式は常にFalseになります。
def aux_carry_legacy(result: int) -> bool:
    cleaned = result & 0xFF & 0b00011111
    return cleaned > 0xFF

# @intent:responsibility ビット3からビット4へのキャリーを下位ニブル同士の和で判定します。
def aux_carry_add(val1: int, val2: int, carry_in: int = 0) -> bool:
    return ((val1 & 0x0F) + (val2 & 0x0F) + carry_in) > 0x0F


# @intent:responsibility maskで選ばれたフラグだけを8ビット結果から更新します。
# @intent:pre-condition aux_carryはニブル方式で計算済みの補助キャリーです。
def set_flags(state: I8080CpuState, result: int, mask: int, aux_carry: bool = False) -> None:
    """
    選択されなかったフラグは以前の値を保持します。
    """
    policy = state.policy
    if mask & SET_Z:
        state.flag_z = zero(result)
    if mask & SET_S:
        state.flag_s = sign(result, policy.inverted_sign)
    if mask & SET_P:
        state.flag_p = parity(result, policy.odd_parity)
    if mask & SET_CY:
        state.flag_cy = carry(result)
    if mask & SET_AC:
        if policy.aux_carry is AuxCarryMode.LEGACY:
            state.flag_ac = aux_carry_legacy(result)
        else:
            state.flag_ac = aux_carry

# @intent:responsibility 16ビット同士の演算結果（最大32ビット）からフラグを更新します。
def set_flags16(state: I8080CpuState, result: int, mask: int, aux_carry: bool = False) -> None:
    """
    結果を上位16ビットと下位16ビットに分け、
    Zeroは両方がゼロ判定のときだけ1、Parityは両者のパリティが一致するとき1とします。
    """
    policy = state.policy
    upper = (result >> 16) & 0xFFFF
    lower = result & 0xFFFF
    if mask & SET_Z:
        state.flag_z = zero(upper) and zero(lower)
    if mask & SET_S:
        state.flag_s = sign16(result, policy.inverted_sign)
    if mask & SET_P:
        state.flag_p = parity(upper, policy.odd_parity) == parity(lower, policy.odd_parity)
    if mask & SET_CY:
        state.flag_cy = carry16(result)
    if mask & SET_AC:
        if policy.aux_carry is AuxCarryMode.LEGACY:
            state.flag_ac = aux_carry_legacy(lower)
        else:
            state.flag_ac = aux_carry


# --- 命令種別ごとのフラグ更新 ---

# @intent:responsibility ADD/ADC/ADI/ACI（およびDAAの補正）のフラグを更新します。
def update_flags_add8(state: I8080CpuState, val1: int, val2: int, result: int,
                      carry_in: int = 0, mask: int = ALL_FLAGS) -> None:
    set_flags(state, result, mask, aux_carry_add(val1, val2, carry_in))

# @intent:responsibility SUB/SBB/SUI/SBI/CMP/CPIのフラグを更新します。
# @intent:rationale 8080の減算は2の補数の加算として実行されるため、
#                   補助キャリーは val1 + ~val2 + (1 - borrow) の下位ニブルから求めます。
def update_flags_sub8(state: I8080CpuState, val1: int, val2: int, result: int,
                      borrow_in: int = 0, mask: int = ALL_FLAGS) -> None:
    set_flags(state, result, mask, aux_carry_add(val1, ~val2, 1 - borrow_in))

# @intent:responsibility ANA/XRA/ORA（および即値版）のフラグを更新します。キャリーは常に0になります。
def update_flags_logic8(state: I8080CpuState, val1: int, val2: int, result: int, is_and: bool) -> None:
    aux = ((val1 | val2) & 0x08) != 0 if is_and else False
    set_flags(state, result, ALL_FLAGS, aux)

# @intent:responsibility INR/DCRのフラグを更新します（CYは変化しません）。
def update_flags_inc_dec8(state: I8080CpuState, val: int, result: int, is_inc: bool) -> None:
    if is_inc:
        aux = (val & 0x0F) == 0x0F
    else:
        aux = (val & 0x0F) != 0x00
    set_flags(state, result, NO_CARRY, aux)

# @intent:responsibility DADのフラグを更新します。変化するのはCYのみです。
def update_flags_add16(state: I8080CpuState, result: int) -> None:
    set_flags16(state, result, SET_CY)
