# i8080_tracer/arch/i8080/state.py
"""
8080 CPU固有の状態定義。

このモジュールは、8080 CPUのレジスタ、フラグ、割り込み許可フラグを保持するデータ構造と、
フラグ計算の方針（FlagPolicy）を定義します。
"""
from dataclasses import dataclass, field
from enum import Enum

from i8080_tracer.core.state import CpuState
from i8080_tracer.arch.i8080.pairs import combine16, split16

# 8080フラグビットマスク（PUSH PSWで積まれるバイトと同じ配置）
# @intent:constant フラグレジスタ内の各フラグビットの位置を定義します。
S_FLAG = 0b10000000   # Sign (符号)
Z_FLAG = 0b01000000   # Zero (ゼロ)
AC_FLAG = 0b00010000  # Auxiliary Carry (補助キャリー)
P_FLAG = 0b00000100   # Parity (パリティ)
CY_FLAG = 0b00000001  # Carry (キャリー)
FLAG_MASK = S_FLAG | Z_FLAG | AC_FLAG | P_FLAG | CY_FLAG
PSW_FIXED_BITS = 0b00000010  # PUSH PSW時に常に1となるビット


# @intent:responsibility 補助キャリーの計算方式を定義します。
class AuxCarryMode(Enum):
    NIBBLE = "nibble"  # ビット3からビット4へのキャリー（実機の動作）
    LEGACY = "legacy"  # 結果を5ビットでマスクして0xFFと比較する旧方式（常に0）


# @intent:responsibility フラグの計算方針を保持します。
# @intent:rationale Sign/Parityは反転した向き（Signはビット7が0でセット、Parityは奇数でセット）を既定とし、
#                   一般的な規約へ切り替えられるようにします。
@dataclass(frozen=True)
class FlagPolicy:
    inverted_sign: bool = True
    odd_parity: bool = True
    aux_carry: AuxCarryMode = AuxCarryMode.NIBBLE


# @intent:responsibility 8080 CPUの全てのレジスタとフラグの状態を保持します。
@dataclass
class I8080CpuState(CpuState):
    """
    8080 CPUのレジスタ状態を保持するデータクラス。
    CpuStateを拡張し、7本の8ビットレジスタ、フラグ、割り込み許可フラグを含みます。
    """
    a: int = 0x00
    b: int = 0x00
    c: int = 0x00
    d: int = 0x00
    e: int = 0x00
    h: int = 0x00
    l: int = 0x00
    f: int = 0x00  # Flag register (S Z 0 AC 0 P 0 CY)

    int_enable: bool = False  # EI/DIで変化するのみ（割り込み配送は未実装）

    policy: FlagPolicy = field(default_factory=FlagPolicy, compare=False, repr=False)

    # @intent:accessor Fレジスタの各フラグビットにアクセスするためのプロパティを提供します。
    def _get_flag(self, mask: int) -> bool:
        return (self.f & mask) != 0

    def _set_flag(self, mask: int, value: bool) -> None:
        if value:
            self.f |= mask
        else:
            self.f &= ~mask & 0xFF

    @property
    def flag_s(self) -> bool:
        return self._get_flag(S_FLAG)

    @flag_s.setter
    def flag_s(self, value: bool) -> None:
        self._set_flag(S_FLAG, value)

    @property
    def flag_z(self) -> bool:
        return self._get_flag(Z_FLAG)

    @flag_z.setter
    def flag_z(self, value: bool) -> None:
        self._set_flag(Z_FLAG, value)

    @property
    def flag_ac(self) -> bool:
        return self._get_flag(AC_FLAG)

    @flag_ac.setter
    def flag_ac(self, value: bool) -> None:
        self._set_flag(AC_FLAG, value)

    @property
    def flag_p(self) -> bool:
        return self._get_flag(P_FLAG)

    @flag_p.setter
    def flag_p(self, value: bool) -> None:
        self._set_flag(P_FLAG, value)

    @property
    def flag_cy(self) -> bool:
        return self._get_flag(CY_FLAG)

    @flag_cy.setter
    def flag_cy(self, value: bool) -> None:
        self._set_flag(CY_FLAG, value)

    # PUSH PSW / POP PSW 用の1バイト表現
    @property
    def psw(self) -> int:
        return (self.f & FLAG_MASK) | PSW_FIXED_BITS

    @psw.setter
    def psw(self, value: int) -> None:
        self.f = value & FLAG_MASK

    # 16-bit register pairs（アクセスの瞬間にだけ組み立てる）
    @property
    def bc(self) -> int:
        return combine16(self.b, self.c)

    @bc.setter
    def bc(self, value: int) -> None:
        self.b, self.c = split16(value)

    @property
    def de(self) -> int:
        return combine16(self.d, self.e)

    @de.setter
    def de(self, value: int) -> None:
        self.d, self.e = split16(value)

    @property
    def hl(self) -> int:
        return combine16(self.h, self.l)

    @hl.setter
    def hl(self, value: int) -> None:
        self.h, self.l = split16(value)
