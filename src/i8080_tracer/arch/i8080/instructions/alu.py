"""
8080 算術論理演算 (ALU) 命令の実装。
"""
from i8080_tracer.arch.i8080.state import I8080CpuState
from i8080_tracer.arch.i8080.pairs import pair_add, pair_value
from i8080_tracer.arch.i8080.flags import (
    update_flags_add8, update_flags_sub8, update_flags_logic8,
    update_flags_inc_dec8, update_flags_add16, set_flags, ALL_FLAGS
)
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from .base import (
    get_register_name, get_register_value, set_register_value, read_operands,
    PAIR_CODES, PAIR_REGISTERS
)

ALU_MNEMONICS = ["ADD", "ADC", "SUB", "SBB", "ANA", "XRA", "ORA", "CMP"]
ALU_IMMEDIATE_MNEMONICS = ["ADI", "ACI", "SUI", "SBI", "ANI", "XRI", "ORI", "CPI"]
_ACCUMULATOR_MNEMONICS = {
    0x07: "RLC", 0x0F: "RRC", 0x17: "RAL", 0x1F: "RAR",
    0x27: "DAA", 0x2F: "CMA", 0x37: "STC", 0x3F: "CMC",
}

# @intent:responsibility アキュムレータとvalueの間で8種類のALU演算を行い、フラグを更新します。
# @intent:rationale CMPは結果を格納せずフラグのみ更新します。
def apply_alu(state: I8080CpuState, op_type: int, value: int) -> None:
    a = state.a
    if op_type == 0: # ADD
        result = a + value
        update_flags_add8(state, a, value, result)
    elif op_type == 1: # ADC
        carry = 1 if state.flag_cy else 0
        result = a + value + carry
        update_flags_add8(state, a, value, result, carry_in=carry)
    elif op_type == 2: # SUB
        result = a - value
        update_flags_sub8(state, a, value, result)
    elif op_type == 3: # SBB
        borrow = 1 if state.flag_cy else 0
        result = a - value - borrow
        update_flags_sub8(state, a, value, result, borrow_in=borrow)
    elif op_type == 4: # ANA
        result = a & value
        update_flags_logic8(state, a, value, result, is_and=True)
    elif op_type == 5: # XRA
        result = a ^ value
        update_flags_logic8(state, a, value, result, is_and=False)
    elif op_type == 6: # ORA
        result = a | value
        update_flags_logic8(state, a, value, result, is_and=False)
    else: # CMP
        update_flags_sub8(state, a, value, a - value)
        return
    state.a = result & 0xFF

# --- Decoding Functions ---

# @intent:responsibility ALU r (0x80-0xBF) 形式の命令をデコードします。
def decode_alu_r(opcode: int, bus: Bus, pc: int) -> Operation:
    op_type = (opcode >> 3) & 0b111
    src_name = get_register_name(opcode & 0b111)
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=f"{ALU_MNEMONICS[op_type]} {src_name}", length=1)

# @intent:responsibility ALU即値 (ADI/ACI/SUI/SBI/ANI/XRI/ORI/CPI) をデコードします。
def decode_alu_immediate(opcode: int, bus: Bus, pc: int) -> Operation:
    operand_bytes = read_operands(bus, pc, 1)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=ALU_IMMEDIATE_MNEMONICS[(opcode >> 3) & 0b111],
        operands=[f"${operand_bytes[0]:02X}"],
        operand_bytes=operand_bytes,
        length=2
    )

# @intent:responsibility INR r / DCR r 形式の命令をデコードします。
def decode_inr_dcr(opcode: int, bus: Bus, pc: int) -> Operation:
    reg_name = get_register_name((opcode >> 3) & 0b111)
    is_inc = (opcode & 1) == 0
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=f"{'INR' if is_inc else 'DCR'} {reg_name}", length=1)

# @intent:responsibility INX/DCX/DAD rp 形式の命令をデコードします。
def decode_pair_op(opcode: int, bus: Bus, pc: int) -> Operation:
    rp_name = PAIR_CODES[(opcode >> 4) & 0b11]
    low_nibble = opcode & 0x0F
    op_name = {0x03: "INX", 0x0B: "DCX", 0x09: "DAD"}[low_nibble]
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=f"{op_name} {rp_name}", length=1)

# @intent:responsibility ローテート・DAA・CMA・STC・CMCをデコードします。
def decode_accumulator(opcode: int, bus: Bus, pc: int) -> Operation:
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=_ACCUMULATOR_MNEMONICS[opcode], length=1)

# --- Execution Functions ---

def execute_alu_r(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    val = get_register_value(state, bus, get_register_name(opcode & 0b111))
    apply_alu(state, (opcode >> 3) & 0b111, val)

def execute_alu_immediate(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    apply_alu(state, (opcode >> 3) & 0b111, operation.operand_bytes[0])

def execute_inr_dcr(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    reg_name = get_register_name((opcode >> 3) & 0b111)
    is_inc = (opcode & 1) == 0
    val = get_register_value(state, bus, reg_name)
    result = (val + 1) if is_inc else (val - 1)
    update_flags_inc_dec8(state, val, result, is_inc)
    set_register_value(state, bus, reg_name, result & 0xFF)

# @intent:responsibility INX/DCX（フラグ不変）と DAD（CYのみ）を実行します。
def execute_pair_op(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    rp_name = PAIR_CODES[(opcode >> 4) & 0b11]
    low_nibble = opcode & 0x0F

    if low_nibble == 0x09: # DAD
        if rp_name == "SP":
            addend = state.sp
        else:
            addend = pair_value(state, *PAIR_REGISTERS[rp_name])
        result = pair_add(state, "h", "l", addend)
        update_flags_add16(state, result)
        return

    delta = 1 if low_nibble == 0x03 else -1
    if rp_name == "SP":
        state.sp = (state.sp + delta) & 0xFFFF
    else:
        # 16ビットのINX/DCXはフラグに影響しないため、桁あふれは破棄する
        pair_add(state, *PAIR_REGISTERS[rp_name], delta)

# @intent:responsibility DAA: アキュムレータを2桁のBCDに補正します。
def decimal_adjust(state: I8080CpuState) -> None:
    """
    1. 下位ニブルが9より大きいかACがセットされていれば6を加算し、その中間結果でフラグを更新する。
    2. 上位ニブルが9より大きいかCYがセットされていれば上位ニブルに6を加算する。
    最後に両ニブルを組み合わせた値で全フラグを更新する。
    """
    if (state.a & 0x0F) > 9 or state.flag_ac:
        result = state.a + 6
        update_flags_add8(state, state.a, 6, result)
        state.a = result & 0xFF

    low = state.a & 0x0F
    high = state.a >> 4
    if high > 9 or state.flag_cy:
        high += 6
    result = (high << 4) | low
    set_flags(state, result, ALL_FLAGS, state.flag_ac)
    state.a = result & 0xFF

def execute_accumulator(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    a = state.a
    if opcode == 0x07: # RLC
        leftmost = a >> 7
        state.flag_cy = leftmost == 1
        state.a = ((a << 1) | leftmost) & 0xFF
    elif opcode == 0x0F: # RRC
        rightmost = a & 1
        state.flag_cy = rightmost == 1
        state.a = (a >> 1) | (rightmost << 7)
    elif opcode == 0x17: # RAL
        prev_cy = 1 if state.flag_cy else 0
        state.flag_cy = (a >> 7) == 1
        state.a = ((a << 1) | prev_cy) & 0xFF
    elif opcode == 0x1F: # RAR
        prev_cy = 1 if state.flag_cy else 0
        state.flag_cy = (a & 1) == 1
        state.a = (a >> 1) | (prev_cy << 7)
    elif opcode == 0x27: # DAA
        decimal_adjust(state)
    elif opcode == 0x2F: # CMA
        state.a = ~a & 0xFF
    elif opcode == 0x37: # STC
        state.flag_cy = True
    else: # CMC
        state.flag_cy = not state.flag_cy
