"""
8080命令セット実装パッケージ。
"""
from typing import Optional, Type

from i8080_tracer.errors import (
    FatalOpcodeError, HaltError, ReservedOpcodeError, UnimplementedInstructionError
)
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from i8080_tracer.arch.i8080.state import I8080CpuState
from .maps import DECODE_MAP, EXECUTE_MAP, RESERVED_OPCODES, HLT_OPCODE

# @intent:responsibility 実行できないオペコードに対応する例外クラスを返します。実行可能ならNoneを返します。
def fatal_error_for(opcode: int) -> Optional[Type[FatalOpcodeError]]:
    if opcode in RESERVED_OPCODES:
        return ReservedOpcodeError
    if opcode == HLT_OPCODE:
        return HaltError
    if opcode not in DECODE_MAP or opcode not in EXECUTE_MAP:
        return UnimplementedInstructionError
    return None

# @intent:responsibility 与えられたオペコードを8080の命令としてデコードします。
# @intent:pre-condition `pc`はデコードするオペコードの先頭アドレスを指している必要があります。
def decode_opcode(opcode: int, bus: Bus, pc: int) -> Operation:
    """
    8080のオペコードをデコードし、Operationオブジェクトを返します。
    実行できないオペコードの場合はFatalOpcodeErrorのサブクラスを送出します。
    """
    error_cls = fatal_error_for(opcode)
    if error_cls is not None:
        raise error_cls(opcode, pc)
    return DECODE_MAP[opcode](opcode, bus, pc)

# @intent:responsibility デコードされた8080命令を実行し、CPUの状態を変更します。
# @intent:pre-condition `operation`はdecode_opcodeが返したOperationである必要があります。
def execute_instruction(operation: Operation, state: I8080CpuState, bus: Bus) -> None:
    opcode = int(operation.opcode_hex, 16)
    executor = EXECUTE_MAP.get(opcode)
    if executor is None:
        raise UnimplementedInstructionError(opcode, state.pc)
    executor(state, bus, operation)
