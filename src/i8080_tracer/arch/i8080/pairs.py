"""
8080 レジスタペア演算ユーティリティ。

BC/DE/HLは永続的な16ビットレジスタとしては保持されず、常に2つの独立した8ビットレジスタです。
ここでの関数は、使用する瞬間にだけ (high << 8) | low として解釈します。
"""
from typing import Tuple

from i8080_tracer.core.state import CpuState

# レジスタペア名 -> (上位レジスタ, 下位レジスタ)
REGISTER_PAIRS = {
    "BC": ("b", "c"),
    "DE": ("d", "e"),
    "HL": ("h", "l"),
}

# @intent:utility_function 2つの8ビット値を16ビット値にまとめます。
def combine16(high: int, low: int) -> int:
    return ((high & 0xFF) << 8) | (low & 0xFF)

# @intent:utility_function 16ビット値を (上位, 下位) の8ビット値に分割します。
def split16(value: int) -> Tuple[int, int]:
    return (value >> 8) & 0xFF, value & 0xFF

def pair_value(state: CpuState, high: str, low: str) -> int:
    return combine16(getattr(state, high), getattr(state, low))

# @intent:responsibility 2つのレジスタ名からメモリアドレスを組み立てます。
# @intent:rationale レジスタペアをアドレスとして使う全ての命令はここを通り、
#                   実際の境界チェックはBusが行います。
def pair_address(state: CpuState, high: str, low: str) -> int:
    return pair_value(state, high, low)

def set_pair(state: CpuState, high: str, low: str, value: int) -> None:
    high_byte, low_byte = split16(value)
    setattr(state, high, high_byte)
    setattr(state, low, low_byte)

# @intent:responsibility レジスタペアに符号付きの値を加算し、切り捨て前の和を返します。
# @intent:post-condition ペアには下位16ビットだけが書き戻されます。
def pair_add(state: CpuState, high: str, low: str, delta: int) -> int:
    """
    ペアを16ビット値として読み、deltaを加算して2つのレジスタに書き戻します。
    戻り値は切り捨て前の和で、呼び出し側はここからキャリーを導出できます
    （0xFFFFを超えればキャリー、負なら借り）。
    """
    result = pair_value(state, high, low) + delta
    set_pair(state, high, low, result & 0xFFFF)
    return result
