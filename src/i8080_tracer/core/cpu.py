# i8080_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict

from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Snapshot, Operation, Metadata, RegisterDump
from i8080_tracer.core.state import CpuState

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._instruction_count: int = 0
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。メモリの内容は保持されます。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._instruction_count = 0

    def get_state(self) -> CpuState:
        return self._state

    def get_bus(self) -> Bus:
        return self._bus

    @property
    def instruction_count(self) -> int:
        return self._instruction_count

    # @intent:responsibility 現在のPCからオペコードを読み出します。PCは変更しません。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチしたオペコードを解析し、Operationオブジェクトに変換します。
    # @intent:post-condition 実行不能なオペコードの場合は例外を送出し、状態を一切変更しません。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ログクリア→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        """
        CPUを1命令サイクル進め、その時点でのCPUとバスの状態を含むSnapshotオブジェクトを返します。
        """
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        opcode = self._fetch()
        operation = self._decode(opcode)

        # 実行前にPCを命令長分進める。分岐命令は実行時にPCを上書きするため、
        # 分岐先に後から加算されることはない。
        self._update_pc(operation)
        self._execute(operation)

        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility 命令実行前にPCを命令長分進めます。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._instruction_count += 1
        # 状態はコピーして保持し、以後の命令実行で書き換わらないようにする
        return Snapshot(
            state=replace(self._state),
            operation=operation,
            metadata=Metadata(instruction_count=self._instruction_count, address=initial_pc),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグの各ビットの状態を辞書形式で返す。
        """
        pass

    @abstractmethod
    def dump(self) -> RegisterDump:
        """
        レジスタ・フラグ・PC・SPの読み取り専用の射影を返す。
        """
        pass
