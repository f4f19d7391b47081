from dataclasses import dataclass, field
from typing import List

from i8080_tracer.arch.i8080.state import FlagPolicy
from i8080_tracer.transport.bus import AddressPolicy

DEFAULT_MEMORY_SIZE = 0x8000
DEFAULT_MAX_STEPS = 100000

@dataclass
class IoRegion:
    start: int
    end: int
    label: str = ""

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0x0000
    registers: dict = field(default_factory=dict)

@dataclass
class SystemConfig:
    memory_size: int = DEFAULT_MEMORY_SIZE
    address_policy: AddressPolicy = AddressPolicy.FAULT
    flags: FlagPolicy = field(default_factory=FlagPolicy)
    io_map: List[IoRegion] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    max_steps: int = DEFAULT_MAX_STEPS
