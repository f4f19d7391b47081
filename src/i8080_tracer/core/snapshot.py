# i8080_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令の実行結果とCPUの状態を記録した不変のデータ構造を定義します。
表示形式には依存せず、ドライバやテストへの情報提供に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import Dict, List

from i8080_tracer.core.state import CpuState
from i8080_tracer.transport.bus import BusAccessType, BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド、バイト長）を記録するデータクラス。
    """
    opcode_hex: str # 例: "C3"
    mnemonic: str # 例: "JMP"
    operands: List[str] = field(default_factory=list) # 例: ["$1234"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト（リトルエンディアン順）
    length: int = 1 # 命令のバイト長（オペコード自身を含む）

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    累計実行命令数と、命令を実行したアドレス。
    """
    instruction_count: int
    address: int = 0x0000

# @intent:responsibility ある一時点におけるCPUの状態と、その命令のバスアクセスを不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    state: CpuState # 実行後の状態のコピー
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

# @intent:responsibility レジスタ・フラグ・PC・SPの読み取り専用の射影を提供します。
# @intent:rationale 表示形式を持たず、フラグは0/1の整数で保持します。
@dataclass(frozen=True)
class RegisterDump:
    a: int
    b: int
    c: int
    d: int
    e: int
    h: int
    l: int
    sp: int
    pc: int
    z: int
    s: int
    p: int
    cy: int
    ac: int
    int_enable: int

    def registers(self) -> Dict[str, int]:
        return {"A": self.a, "B": self.b, "C": self.c, "D": self.d, "E": self.e,
                "H": self.h, "L": self.l, "SP": self.sp, "PC": self.pc}

    def flags(self) -> Dict[str, int]:
        return {"Z": self.z, "S": self.s, "P": self.p, "CY": self.cy, "AC": self.ac}
