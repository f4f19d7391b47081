"""
i8080_tracer: 8080 CPUの命令実行コア。

コアを利用する側のための最小限のインターフェース（create, load_image, step, dump）を提供します。
"""
from typing import Optional

__version__ = "0.1.0"

from i8080_tracer.arch.i8080.cpu import I8080Cpu
from i8080_tracer.arch.i8080.state import FlagPolicy, AuxCarryMode
from i8080_tracer.config.builder import SystemBuilder
from i8080_tracer.config.models import SystemConfig, DEFAULT_MEMORY_SIZE
from i8080_tracer.core.snapshot import Snapshot, RegisterDump
from i8080_tracer.errors import (
    EmulationError, FatalOpcodeError, UnimplementedInstructionError,
    ReservedOpcodeError, HaltError, MemoryBoundsError, ConfigError
)

# @intent:responsibility 0で初期化されたメモリとレジスタを持つCPUを生成します。
def create(memory_size: int = DEFAULT_MEMORY_SIZE, config: Optional[SystemConfig] = None) -> I8080Cpu:
    """
    configを省略した場合はmemory_sizeバイトのRAMを0番地に配置します。
    configを渡した場合はmemory_sizeは無視され、構成の値が使われます。
    """
    if config is None:
        config = SystemConfig(memory_size=memory_size)
    cpu, _ = SystemBuilder().build_system(config)
    return cpu

def load_image(cpu: I8080Cpu, data: bytes, offset: int = 0) -> None:
    cpu.load_image(data, offset)

def step(cpu: I8080Cpu) -> Snapshot:
    return cpu.step()

def dump(cpu: I8080Cpu) -> RegisterDump:
    return cpu.dump()

__all__ = [
    "create", "load_image", "step", "dump",
    "I8080Cpu", "FlagPolicy", "AuxCarryMode", "SystemConfig", "Snapshot", "RegisterDump",
    "EmulationError", "FatalOpcodeError", "UnimplementedInstructionError",
    "ReservedOpcodeError", "HaltError", "MemoryBoundsError", "ConfigError",
]
