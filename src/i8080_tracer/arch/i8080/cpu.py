# i8080_tracer/arch/i8080/cpu.py
"""
8080 CPUエミュレーションの中心モジュール。

このモジュールは8080 CPUの具体的な実装を提供し、
AbstractCpuインターフェースを実装します。
"""
import logging
from typing import Dict, Optional

from i8080_tracer.core.cpu import AbstractCpu
from i8080_tracer.core.snapshot import Operation, Snapshot, RegisterDump
from i8080_tracer.arch.i8080.state import I8080CpuState, FlagPolicy
from i8080_tracer.arch.i8080.instructions import decode_opcode, execute_instruction
from i8080_tracer.errors import FatalOpcodeError
from i8080_tracer.transport.bus import Bus

logger = logging.getLogger(__name__)


# @intent:responsibility 8080 CPUの具体的なエミュレーションロジックを提供します。
class I8080Cpu(AbstractCpu):
    """
    8080 CPUをエミュレートするクラス。
    AbstractCpuを継承し、8080固有の動作を実装します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus, flag_policy: Optional[FlagPolicy] = None):
        self._flag_policy = flag_policy or FlagPolicy()
        super().__init__(bus)

    @property
    def flag_policy(self) -> FlagPolicy:
        return self._flag_policy

    # @intent:responsibility 全レジスタ・フラグが0、割り込み禁止の初期状態を生成します。
    def _create_initial_state(self) -> I8080CpuState:
        return I8080CpuState(policy=self._flag_policy)

    # @intent:responsibility 現在のPCからオペコードをフェッチします。PCの更新はstep内で行います。
    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    # @intent:responsibility フェッチしたオペコードをデコードし、Operationオブジェクトを返します。
    # @intent:post-condition 致命的なオペコードはPC更新の前に例外となるため、状態は変化しません。
    def _decode(self, opcode: int) -> Operation:
        try:
            return decode_opcode(opcode, self._bus, self._state.pc)
        except FatalOpcodeError as e:
            logger.debug("Fatal opcode: %s", e)
            raise

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    def step(self) -> Snapshot:
        snapshot = super().step()
        if logger.isEnabledFor(logging.DEBUG):
            op = snapshot.operation
            text = op.mnemonic + (" " + ",".join(op.operands) if op.operands else "")
            logger.debug("%04X  %-4s %s", snapshot.metadata.address, op.opcode_hex, text)
        return snapshot

    # @intent:responsibility プログラムイメージをoffsetからメモリへ書き込みます。
    # @intent:pre-condition イメージ全体がメモリに収まる必要があります。収まらない場合は1バイトも書き込みません。
    def load_image(self, data: bytes, offset: int = 0) -> None:
        self._bus.load(offset, bytes(data))
        logger.info("Loaded %d bytes at %#06x", len(data), offset)

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        return {
            "A": s.a, "F": s.f, "B": s.b, "C": s.c, "D": s.d, "E": s.e, "H": s.h, "L": s.l,
            "BC": s.bc, "DE": s.de, "HL": s.hl, "SP": s.sp, "PC": s.pc,
        }

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {
            "S": s.flag_s,
            "Z": s.flag_z,
            "AC": s.flag_ac,
            "P": s.flag_p,
            "CY": s.flag_cy,
        }

    def dump(self) -> RegisterDump:
        s = self._state
        return RegisterDump(
            a=s.a, b=s.b, c=s.c, d=s.d, e=s.e, h=s.h, l=s.l,
            sp=s.sp, pc=s.pc,
            z=int(s.flag_z), s=int(s.flag_s), p=int(s.flag_p),
            cy=int(s.flag_cy), ac=int(s.flag_ac),
            int_enable=int(s.int_enable),
        )
