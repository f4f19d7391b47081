"""
8080命令セット実装のための共通ヘルパー関数と定数。
"""
from typing import List, Tuple

from i8080_tracer.arch.i8080.state import I8080CpuState
from i8080_tracer.arch.i8080.pairs import REGISTER_PAIRS, pair_address, combine16
from i8080_tracer.transport.bus import Bus

# オペコード中の3ビットのレジスタ指定 (DDD/SSS)
REGISTER_CODES = {
    0b000: "B", 0b001: "C", 0b010: "D", 0b011: "E",
    0b100: "H", 0b101: "L", 0b110: "M", 0b111: "A"
}

# オペコード中の2ビットのレジスタペア指定 (RP)
PAIR_CODES = {0b00: "B", 0b01: "D", 0b10: "H", 0b11: "SP"}
PUSH_POP_CODES = {0b00: "B", 0b01: "D", 0b10: "H", 0b11: "PSW"}

# ニーモニック上のペア名 -> (上位レジスタ, 下位レジスタ)
PAIR_REGISTERS = {"B": REGISTER_PAIRS["BC"], "D": REGISTER_PAIRS["DE"], "H": REGISTER_PAIRS["HL"]}

# 条件コード (CCC)
CONDITION_CODES = {
    0b000: "NZ", 0b001: "Z", 0b010: "NC", 0b011: "C",
    0b100: "PO", 0b101: "PE", 0b110: "P", 0b111: "M"
}

# @intent:utility_function 指定されたコードに対応するレジスタ名を返します。
def get_register_name(code: int) -> str:
    return REGISTER_CODES[code & 0b111]

# @intent:utility_function レジスタ名（またはHLが指すメモリ M）の現在値を取得します。
def get_register_value(state: I8080CpuState, bus: Bus, reg_name: str) -> int:
    if reg_name == "M":
        return bus.read(pair_address(state, "h", "l"))
    return getattr(state, reg_name.lower())

# @intent:utility_function レジスタ名（またはHLが指すメモリ M）に値を設定します。
def set_register_value(state: I8080CpuState, bus: Bus, reg_name: str, value: int) -> None:
    if reg_name == "M":
        bus.write(pair_address(state, "h", "l"), value & 0xFF)
    else:
        setattr(state, reg_name.lower(), value & 0xFF)

# @intent:utility_function 条件コードを格納済みのフラグビットで評価します。
# @intent:rationale フラグがどの向きで計算されたかに関わらず、ビットの値そのものを判定に使います。
def condition_met(state: I8080CpuState, cc_code: int) -> bool:
    name = CONDITION_CODES[cc_code & 0b111]
    if name == "NZ": return not state.flag_z
    if name == "Z": return state.flag_z
    if name == "NC": return not state.flag_cy
    if name == "C": return state.flag_cy
    if name == "PO": return not state.flag_p
    if name == "PE": return state.flag_p
    if name == "P": return not state.flag_s
    return state.flag_s # M

# @intent:utility_function 命令に続く即値バイトを読み出します。
def read_operands(bus: Bus, pc: int, count: int) -> List[int]:
    return [bus.read((pc + i) & 0xFFFF) for i in range(1, count + 1)]

# @intent:utility_function リトルエンディアンの2バイトを16ビット値にします。
def word_from(operand_bytes: List[int]) -> int:
    low, high = operand_bytes
    return combine16(high, low)

# @intent:utility_function 16ビット値をスタックに積みます（上位バイトが先）。
def push_word(state: I8080CpuState, bus: Bus, value: int) -> None:
    state.sp = (state.sp - 1) & 0xFFFF
    bus.write(state.sp, (value >> 8) & 0xFF)
    state.sp = (state.sp - 1) & 0xFFFF
    bus.write(state.sp, value & 0xFF)

# @intent:utility_function スタックから16ビット値を取り出します。
def pop_word(state: I8080CpuState, bus: Bus) -> int:
    low = bus.read(state.sp)
    state.sp = (state.sp + 1) & 0xFFFF
    high = bus.read(state.sp)
    state.sp = (state.sp + 1) & 0xFFFF
    return combine16(high, low)

def split_opcode(opcode: int) -> Tuple[int, int]:
    """(DDD, SSS) のフィールドを返します。"""
    return (opcode >> 3) & 0b111, opcode & 0b111
