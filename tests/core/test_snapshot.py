# tests/core/test_snapshot.py
"""
i8080_tracer.core.snapshotモジュールの単体テスト。
"""
import pytest

from i8080_tracer.core.state import CpuState
from i8080_tracer.core.snapshot import (
    BusAccessType,
    BusAccess,
    Operation,
    Metadata,
    Snapshot,
    RegisterDump,
)

# @intent:test_suite 実行結果を記録する不変データ構造の検証。

class TestOperation:
    def test_operation_defaults(self):
        op = Operation(opcode_hex="00", mnemonic="NOP")
        assert op.operands == []
        assert op.operand_bytes == []
        assert op.length == 1

    def test_operation_immutability(self):
        op = Operation(opcode_hex="C3", mnemonic="JMP", operands=["$1234"], operand_bytes=[0x34, 0x12], length=3)
        with pytest.raises(AttributeError):
            op.mnemonic = "CALL"


class TestSnapshot:
    def test_snapshot_init(self):
        state = CpuState(pc=0x0003)
        op = Operation(opcode_hex="C3", mnemonic="JMP", length=3)
        access = BusAccess(address=0x0000, data=0xC3, access_type=BusAccessType.READ)
        snapshot = Snapshot(state=state, operation=op, metadata=Metadata(instruction_count=1), bus_activity=[access])

        assert snapshot.state.pc == 0x0003
        assert snapshot.metadata.address == 0x0000
        assert snapshot.bus_activity == [access]
        with pytest.raises(AttributeError):
            snapshot.operation = op


class TestRegisterDump:
    @pytest.fixture
    def dump(self):
        return RegisterDump(a=0x01, b=0x02, c=0x03, d=0x04, e=0x05, h=0x06, l=0x07,
                            sp=0x1234, pc=0x0100, z=1, s=0, p=1, cy=0, ac=1, int_enable=0)

    def test_registers_projection(self, dump):
        assert dump.registers() == {
            "A": 0x01, "B": 0x02, "C": 0x03, "D": 0x04, "E": 0x05, "H": 0x06, "L": 0x07,
            "SP": 0x1234, "PC": 0x0100,
        }

    def test_flags_projection(self, dump):
        assert dump.flags() == {"Z": 1, "S": 0, "P": 1, "CY": 0, "AC": 1}

    def test_dump_is_read_only(self, dump):
        with pytest.raises(AttributeError):
            dump.a = 0xFF
