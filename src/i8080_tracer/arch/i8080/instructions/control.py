"""
8080 制御命令（分岐、サブルーチン、リスタート、I/O、割り込み許可）の実装。

PCは実行前に命令長分進められているため、分岐する命令は最終的な飛び先をそのまま書き込みます。
"""
from i8080_tracer.arch.i8080.state import I8080CpuState
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from .base import (
    CONDITION_CODES, condition_met, read_operands, word_from, push_word, pop_word
)

# --- Decoding Functions ---

def decode_nop(opcode: int, bus: Bus, pc: int) -> Operation:
    """NOP命令をデコードします。"""
    return Operation(opcode_hex="00", mnemonic="NOP", length=1)

# @intent:responsibility JMP/CALL とその条件付き版 (Jcc/Ccc) をデコードします。
def decode_jump_call(opcode: int, bus: Bus, pc: int) -> Operation:
    """
    JMP a16, Jcc a16, CALL a16, Ccc a16 をデコードします。
    オペランドはリトルエンディアンの16ビットアドレスです。
    """
    operand_bytes = read_operands(bus, pc, 2)
    if opcode == 0xC3:
        mnemonic = "JMP"
    elif opcode == 0xCD:
        mnemonic = "CALL"
    else:
        cc = CONDITION_CODES[(opcode >> 3) & 0b111]
        mnemonic = f"J{cc}" if (opcode & 0x07) == 0x02 else f"C{cc}"
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=mnemonic,
        operands=[f"${word_from(operand_bytes):04X}"],
        operand_bytes=operand_bytes,
        length=3
    )

# @intent:responsibility RET とその条件付き版 (Rcc) をデコードします。
def decode_return(opcode: int, bus: Bus, pc: int) -> Operation:
    if opcode == 0xC9:
        mnemonic = "RET"
    else:
        mnemonic = f"R{CONDITION_CODES[(opcode >> 3) & 0b111]}"
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=mnemonic, length=1)

# @intent:responsibility RST n (n=0..7) をデコードします。
def decode_rst(opcode: int, bus: Bus, pc: int) -> Operation:
    vector = (opcode >> 3) & 0b111
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic=f"RST {vector}", length=1)

def decode_pchl(opcode: int, bus: Bus, pc: int) -> Operation:
    return Operation(opcode_hex="E9", mnemonic="PCHL", length=1)

# @intent:responsibility EI/DIをデコードします。
def decode_interrupt_enable(opcode: int, bus: Bus, pc: int) -> Operation:
    return Operation(opcode_hex=f"{opcode:02X}", mnemonic="EI" if opcode == 0xFB else "DI", length=1)

# @intent:responsibility IN d8 / OUT d8 をデコードします。
def decode_io(opcode: int, bus: Bus, pc: int) -> Operation:
    """IN/OUT命令をデコードします。オペランドはポート番号です。"""
    operand_bytes = read_operands(bus, pc, 1)
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic="IN" if opcode == 0xDB else "OUT",
        operands=[f"${operand_bytes[0]:02X}"],
        operand_bytes=operand_bytes,
        length=2
    )

# --- Execution Functions ---

def execute_nop(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pass

# @intent:responsibility JMP/Jcc/CALL/Cccを実行します。
# @intent:pre-condition state.pcは次の命令を指しています（CALLの戻り先）。
def execute_jump_call(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    target = word_from(operation.operand_bytes)
    is_call = opcode == 0xCD or (opcode & 0x07) == 0x04
    unconditional = opcode in (0xC3, 0xCD)

    if not unconditional and not condition_met(state, (opcode >> 3) & 0b111):
        return # 不成立: PCは既にオペランドの次を指している

    if is_call:
        push_word(state, bus, state.pc)
    state.pc = target

def execute_return(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    if opcode == 0xC9 or condition_met(state, (opcode >> 3) & 0b111):
        state.pc = pop_word(state, bus)

# @intent:responsibility 戻り先を積み、固定ベクタ n*8 へ分岐します。
def execute_rst(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = int(operation.opcode_hex, 16)
    push_word(state, bus, state.pc)
    state.pc = opcode & 0x38

def execute_pchl(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.pc = state.hl

def execute_interrupt_enable(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    # 割り込みの配送は行わず、許可フラグのみを記録する
    state.int_enable = int(operation.opcode_hex, 16) == 0xFB

# @intent:responsibility ポート空間とアキュムレータの間で1バイトを転送します。
def execute_io(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    port = operation.operand_bytes[0]
    if int(operation.opcode_hex, 16) == 0xDB:
        state.a = bus.read_io(port)
    else:
        bus.write_io(port, state.a)
