import logging
from typing import Tuple

from i8080_tracer.errors import ConfigError
from i8080_tracer.transport.bus import Bus, RAM
from i8080_tracer.arch.i8080.cpu import I8080Cpu
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

_REGISTER_NAMES = ("a", "b", "c", "d", "e", "h", "l", "f")

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[I8080Cpu, Bus]:
        bus = Bus(address_policy=config.address_policy)
        try:
            bus.register_device(0x0000, config.memory_size - 1, RAM(config.memory_size))
            for region in config.io_map:
                # I/Oポートは書き込んだ値を保持する単純なラッチとして扱う
                bus.register_io_device(region.start, region.end, RAM(region.end - region.start + 1))
        except ValueError as e:
            raise ConfigError(str(e)) from e

        cpu = I8080Cpu(bus, flag_policy=config.flags)
        self.apply_initial_state(cpu, config.initial_state)
        logger.debug("Built system: memory=%#06x policy=%s io_regions=%d",
                     config.memory_size, config.address_policy.value, len(config.io_map))
        return cpu, bus

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: I8080Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()
        state.pc = config_state.pc & 0xFFFF
        state.sp = config_state.sp & 0xFFFF
        for reg_name, value in config_state.registers.items():
            if reg_name not in _REGISTER_NAMES:
                raise ConfigError(f"Unknown register in initial_state: {reg_name}")
            setattr(state, reg_name, value & 0xFF)
