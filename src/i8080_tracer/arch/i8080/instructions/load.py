"""
8080 データ転送命令（レジスタ/メモリ転送、即値ロード、直接アドレス、スタック）の実装。
"""
from i8080_tracer.arch.i8080.state import I8080CpuState
from i8080_tracer.arch.i8080.pairs import pair_address, set_pair, combine16
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from .base import (
    get_register_name, get_register_value, set_register_value, split_opcode,
    read_operands, word_from, push_word, pop_word,
    PAIR_CODES, PUSH_POP_CODES, PAIR_REGISTERS
)

# --- Decoding Functions ---

# @intent:responsibility LXI rp,d16 形式の命令をデコードします。
def decode_lxi(opcode: int, bus: Bus, pc: int) -> Operation:
    """LXI rp,d16命令をデコードします。"""
    rp_name = PAIR_CODES[(opcode >> 4) & 0b11]
    operand_bytes = read_operands(bus, pc, 2)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"LXI {rp_name}",
        operands=[f"${word_from(operand_bytes):04X}"],
        operand_bytes=operand_bytes,
        length=3
    )

# @intent:responsibility MVI r,d8 形式の命令をデコードします。
def decode_mvi(opcode: int, bus: Bus, pc: int) -> Operation:
    """MVI r,d8命令をデコードします。"""
    reg_name = get_register_name((opcode >> 3) & 0b111)
    operand_bytes = read_operands(bus, pc, 1)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"MVI {reg_name}",
        operands=[f"${operand_bytes[0]:02X}"],
        operand_bytes=operand_bytes,
        length=2
    )

# @intent:responsibility MOV r1,r2 形式の命令をデコードします。
def decode_mov(opcode: int, bus: Bus, pc: int) -> Operation:
    """MOV r1,r2命令をデコードします（0x76はHLTのため対象外）。"""
    dest_code, src_code = split_opcode(opcode)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"MOV {get_register_name(dest_code)},{get_register_name(src_code)}",
        length=1
    )

# @intent:responsibility STAX/LDAX (BC/DE間接のアキュムレータ転送) をデコードします。
def decode_stax_ldax(opcode: int, bus: Bus, pc: int) -> Operation:
    rp_name = PAIR_CODES[(opcode >> 4) & 0b11]
    is_load = (opcode & 0x08) != 0
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'LDAX' if is_load else 'STAX'} {rp_name}",
        length=1
    )

_DIRECT_MNEMONICS = {0x22: "SHLD", 0x2A: "LHLD", 0x32: "STA", 0x3A: "LDA"}

# @intent:responsibility 16ビット直接アドレスを持つ転送命令 (SHLD/LHLD/STA/LDA) をデコードします。
def decode_direct(opcode: int, bus: Bus, pc: int) -> Operation:
    operand_bytes = read_operands(bus, pc, 2)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=_DIRECT_MNEMONICS[opcode],
        operands=[f"(${word_from(operand_bytes):04X})"],
        operand_bytes=operand_bytes,
        length=3
    )

def decode_push_pop(opcode: int, bus: Bus, pc: int) -> Operation:
    """PUSH/POP命令をデコードします。"""
    reg_name = PUSH_POP_CODES[(opcode >> 4) & 0b11]
    is_push = (opcode & 0x0F) == 0x05
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=f"{'PUSH' if is_push else 'POP'} {reg_name}",
        length=1
    )

_EXCHANGE_MNEMONICS = {0xE3: "XTHL", 0xEB: "XCHG", 0xF9: "SPHL"}

def decode_exchange(opcode: int, bus: Bus, pc: int) -> Operation:
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=_EXCHANGE_MNEMONICS[opcode], length=1)

# --- Execution Functions ---

def execute_lxi(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    rp_name = PAIR_CODES[(opcode >> 4) & 0b11]
    value = word_from(operation.operand_bytes)
    if rp_name == "SP":
        state.sp = value
    else:
        set_pair(state, *PAIR_REGISTERS[rp_name], value)

def execute_mvi(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    reg_name = get_register_name((opcode >> 3) & 0b111)
    set_register_value(state, bus, reg_name, operation.operand_bytes[0])

def execute_mov(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    dest_code, src_code = split_opcode(opcode)
    val = get_register_value(state, bus, get_register_name(src_code))
    set_register_value(state, bus, get_register_name(dest_code), val)

def execute_stax_ldax(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    high, low = PAIR_REGISTERS[PAIR_CODES[(opcode >> 4) & 0b11]]
    addr = pair_address(state, high, low)
    if opcode & 0x08:
        state.a = bus.read(addr)
    else:
        bus.write(addr, state.a)

def execute_direct(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    """SHLD/LHLD/STA/LDAを実行します。SHLDはLをaddrに、Hをaddr+1に書き込みます。"""
    opcode = int(operation.opcode_hex, 16)
    addr = word_from(operation.operand_bytes)
    if opcode == 0x22: # SHLD
        bus.write(addr, state.l)
        bus.write((addr + 1) & 0xFFFF, state.h)
    elif opcode == 0x2A: # LHLD
        state.l = bus.read(addr)
        state.h = bus.read((addr + 1) & 0xFFFF)
    elif opcode == 0x32: # STA
        bus.write(addr, state.a)
    else: # LDA
        state.a = bus.read(addr)

def execute_push_pop(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    reg_name = PUSH_POP_CODES[(opcode >> 4) & 0b11]
    is_push = (opcode & 0x0F) == 0x05

    if is_push:
        if reg_name == "PSW":
            value = combine16(state.a, state.psw)
        else:
            value = combine16(*(getattr(state, r) for r in PAIR_REGISTERS[reg_name]))
        push_word(state, bus, value)
    else:
        value = pop_word(state, bus)
        if reg_name == "PSW":
            state.a = (value >> 8) & 0xFF
            state.psw = value & 0xFF
        else:
            set_pair(state, *PAIR_REGISTERS[reg_name], value)

def execute_exchange(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    if opcode == 0xEB: # XCHG
        state.d, state.h = state.h, state.d
        state.e, state.l = state.l, state.e
    elif opcode == 0xF9: # SPHL
        state.sp = state.hl
    else: # XTHL
        low = bus.read(state.sp)
        high = bus.read((state.sp + 1) & 0xFFFF)
        bus.write(state.sp, state.l)
        bus.write((state.sp + 1) & 0xFFFF, state.h)
        state.l, state.h = low, high
