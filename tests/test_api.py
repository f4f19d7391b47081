# tests/test_api.py
"""
i8080_tracerパッケージの最小インターフェース（create, load_image, step, dump）のテスト。
"""
import pytest

import i8080_tracer
from i8080_tracer import create, load_image, step, dump
from i8080_tracer.config.models import SystemConfig
from i8080_tracer.transport.bus import AddressPolicy


def test_create_zeroes_everything():
    cpu = create()
    d = dump(cpu)
    assert all(v == 0 for v in d.registers().values())
    assert all(v == 0 for v in d.flags().values())
    assert d.int_enable == 0
    assert cpu.get_bus().get_memory_size() == 0x8000
    assert cpu.get_bus().peek(0x7FFF) == 0


def test_load_and_step():
    cpu = create(memory_size=0x100)
    load_image(cpu, bytes([0x06, 0x2A, 0x48])) # MVI B,0x2A; MOV C,B
    step(cpu)
    snapshot = step(cpu)
    assert snapshot.operation.mnemonic == "MOV C,B"
    assert dump(cpu).c == 0x2A
    assert dump(cpu).pc == 0x0003


def test_load_image_that_does_not_fit():
    cpu = create(memory_size=0x10)
    with pytest.raises(i8080_tracer.MemoryBoundsError):
        load_image(cpu, bytes(0x11))


# @intent:test_case_wrap WRAPポリシーではHL間接アクセスがメモリサイズで折り返されます。
def test_wrap_policy_via_config():
    cpu = create(config=SystemConfig(memory_size=0x100, address_policy=AddressPolicy.WRAP))
    load_image(cpu, bytes([0x21, 0x05, 0x01, 0x36, 0x99])) # LXI H,0x0105; MVI M,0x99
    step(cpu)
    step(cpu)
    assert cpu.get_bus().peek(0x0005) == 0x99


def test_exceptions_share_a_base():
    for exc in (i8080_tracer.HaltError, i8080_tracer.ReservedOpcodeError,
                i8080_tracer.UnimplementedInstructionError, i8080_tracer.MemoryBoundsError,
                i8080_tracer.ConfigError):
        assert issubclass(exc, i8080_tracer.EmulationError)
