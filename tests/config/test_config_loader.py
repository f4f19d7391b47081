# tests/config/test_config_loader.py
"""
YAML構成の読み込みとシステム構築のテスト。
"""
import textwrap

import pytest

from i8080_tracer.arch.i8080.state import AuxCarryMode, FlagPolicy
from i8080_tracer.config.builder import SystemBuilder
from i8080_tracer.config.loader import ConfigLoader
from i8080_tracer.config.models import SystemConfig, CpuInitialState, IoRegion
from i8080_tracer.errors import ConfigError, MemoryBoundsError
from i8080_tracer.transport.bus import AddressPolicy

FULL_CONFIG = """
memory_size: 0x1000
address_policy: wrap
flags:
  aux_carry: legacy
  inverted_sign: false
  odd_parity: false
io_map:
  - {start: 0x00, end: 0x0F, label: console}
initial_state:
  pc: "0x0100"
  sp: 0x0F00
  registers: {A: 0x12, h: "0x34"}
max_steps: 500
"""


class TestConfigLoader:
    def test_load_full_file(self, tmp_path):
        path = tmp_path / "system.yaml"
        path.write_text(textwrap.dedent(FULL_CONFIG))

        config = ConfigLoader().load_from_file(str(path))

        assert config.memory_size == 0x1000
        assert config.address_policy is AddressPolicy.WRAP
        assert config.flags == FlagPolicy(inverted_sign=False, odd_parity=False, aux_carry=AuxCarryMode.LEGACY)
        assert config.io_map == [IoRegion(start=0x00, end=0x0F, label="console")]
        assert config.initial_state == CpuInitialState(pc=0x0100, sp=0x0F00, registers={"a": 0x12, "h": 0x34})
        assert config.max_steps == 500

    def test_empty_document_gives_defaults(self):
        config = ConfigLoader().parse(None)
        assert config == SystemConfig()
        assert config.memory_size == 0x8000
        assert config.max_steps == 100000

    @pytest.mark.parametrize("data, message", [
        ({"address_policy": "clamp"}, "Invalid address_policy"),
        ({"flags": {"aux_carry": "half"}}, "Invalid flags.aux_carry"),
        ({"memory_size": "big"}, "Invalid integer format"),
        ({"max_steps": True}, "Invalid integer format"),
        ({"flags": {"inverted_sign": "false"}}, "Invalid flags.inverted_sign"),
        ({"flags": {"odd_parity": 0}}, "Invalid flags.odd_parity"),
        ({"flags": ["x"]}, "flags must be a mapping"),
        ({"io_map": [5]}, "io_map entry must be a mapping"),
        ({"initial_state": [1]}, "initial_state must be a mapping"),
        ({"initial_state": {"registers": [1]}}, "initial_state.registers must be a mapping"),
    ])
    def test_invalid_values_raise_config_error(self, data, message):
        with pytest.raises(ConfigError, match=message):
            ConfigLoader().parse(data)

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError):
            ConfigLoader().parse([1, 2, 3])


class TestSystemBuilder:
    def test_build_applies_config(self):
        config = ConfigLoader().parse({
            "memory_size": 0x100,
            "address_policy": "wrap",
            "io_map": [{"start": 0x10, "end": 0x11}],
            "initial_state": {"pc": 0x20, "sp": 0xF0, "registers": {"b": 7}},
        })
        cpu, bus = SystemBuilder().build_system(config)

        assert bus.get_memory_size() == 0x100
        assert bus.address_policy is AddressPolicy.WRAP
        assert cpu.get_state().pc == 0x20
        assert cpu.get_state().sp == 0xF0
        assert cpu.get_state().b == 7
        bus.write_io(0x11, 0x5A)
        assert bus.read_io(0x11) == 0x5A

    def test_flag_policy_reaches_state(self):
        policy = FlagPolicy(aux_carry=AuxCarryMode.LEGACY)
        cpu, _ = SystemBuilder().build_system(SystemConfig(flags=policy))
        assert cpu.get_state().policy is policy
        assert cpu.flag_policy is policy

    def test_fault_policy_by_default(self):
        cpu, bus = SystemBuilder().build_system(SystemConfig(memory_size=0x10))
        with pytest.raises(MemoryBoundsError):
            bus.read(0x10)

    def test_unknown_register_rejected(self):
        config = SystemConfig(initial_state=CpuInitialState(registers={"ix": 1}))
        with pytest.raises(ConfigError, match="Unknown register"):
            SystemBuilder().build_system(config)

    def test_invalid_memory_size_rejected(self):
        with pytest.raises(ConfigError):
            SystemBuilder().build_system(SystemConfig(memory_size=0))

    def test_io_region_beyond_port_space_rejected(self):
        with pytest.raises(ConfigError):
            SystemBuilder().build_system(SystemConfig(io_map=[IoRegion(start=0xF0, end=0x100)]))
