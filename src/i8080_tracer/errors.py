# i8080_tracer/errors.py
"""
エミュレーションで発生する例外の階層を定義するモジュール。

EmulationError (base)
├── FatalOpcodeError - 実行できないオペコード（致命的、実行を中断）
│   ├── UnimplementedInstructionError - ISAに存在するが実行関数が無い
│   ├── ReservedOpcodeError - ISA上の未定義スロット
│   └── HaltError - HLT命令
├── MemoryBoundsError - メモリ範囲外アクセス (IndexErrorでもある)
└── ConfigError - 構成ファイルの内容が不正 (ValueErrorでもある)

全ての例外は致命的であり、コア内部で回復処理は行いません。
呼び出し元（ランナー）が報告と終了を担当します。
"""


class EmulationError(Exception):
    """
    i8080_tracerが送出する全ての例外の基底クラス。
    """
    pass


# @intent:responsibility 致命的オペコードの共通情報（オペコード値とPC）を保持します。
class FatalOpcodeError(EmulationError):
    """
    オペコードが実行できないことを示す例外の基底クラス。
    """
    kind = "fatal opcode"

    def __init__(self, opcode: int, pc: int):
        self.opcode = opcode
        self.pc = pc
        super().__init__(f"{self.kind} 0x{opcode:02X} at PC=0x{pc:04X}")


class UnimplementedInstructionError(FatalOpcodeError):
    kind = "unimplemented instruction"


class ReservedOpcodeError(FatalOpcodeError):
    kind = "reserved opcode"


# @intent:rationale 割り込み配送を持たないため、HLTから復帰する手段は存在しない。
class HaltError(FatalOpcodeError):
    kind = "halt"


# @intent:responsibility メモリの有効範囲外へのアクセスを通知します。
# @intent:rationale IndexErrorも継承し、Busの従来の境界エラーとして捕捉できるようにします。
class MemoryBoundsError(EmulationError, IndexError):
    def __init__(self, address: int, size: int):
        self.address = address
        self.size = size
        super().__init__(f"Address {address:#06x} out of bounds for memory of size {size:#06x}.")


class ConfigError(EmulationError, ValueError):
    pass
