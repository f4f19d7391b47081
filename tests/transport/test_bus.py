# tests/transport/test_bus.py
"""
i8080_tracer.transport.busモジュールの単体テスト。
"""
import pytest

from i8080_tracer.errors import MemoryBoundsError
from i8080_tracer.transport.bus import Bus, Device, RAM, AddressPolicy, BusAccess, BusAccessType

# @intent:test_suite 共通バスとデバイスの基本的な機能と境界チェックを検証します。

class TestRAM:
    """
    RAMデバイスの単体テスト。
    """
    # @intent:test_case_init RAMクラスが正しいサイズで0初期化されることを検証します。
    def test_ram_init_valid_size(self):
        ram = RAM(16)
        assert ram.get_size() == 16
        assert all(ram.read(i) == 0 for i in range(16))

    # @intent:test_case_init 無効なサイズでRAMを初期化するとValueErrorが発生することを検証します。
    @pytest.mark.parametrize("size", [0, -1, 1.5, True])
    def test_ram_init_invalid_size(self, size):
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(size)

    def test_ram_read_write_within_bounds(self):
        ram = RAM(4)
        for i, value in enumerate([0x12, 0x34, 0x56, 0x78]):
            ram.write(i, value)
        assert [ram.read(i) for i in range(4)] == [0x12, 0x34, 0x56, 0x78]

    # @intent:test_case_oob 境界外アドレスへのアクセスはMemoryBoundsError（IndexErrorでもある）になります。
    def test_ram_read_write_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(MemoryBoundsError):
            ram.read(4)
        with pytest.raises(IndexError):
            ram.write(-1, 0x00)

    def test_ram_write_invalid_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
            ram.write(0, 0x100)
        with pytest.raises(ValueError, match="Data -1 is not an 8-bit value."):
            ram.write(0, -1)

    def test_ram_load_bytes_rejects_overflow_without_writing(self):
        ram = RAM(4)
        with pytest.raises(MemoryBoundsError):
            ram.load_bytes(2, b"\x01\x02\x03")
        assert [ram.read(i) for i in range(4)] == [0, 0, 0, 0]


class TestBus:
    """
    Busの単体テスト。
    """
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x0000, 0x00FF, RAM(0x100))
        return bus

    # @intent:test_case_register デバイスがバスに正しく登録され、オフセット付きでアクセスできることを検証します。
    def test_bus_register_and_access_device(self):
        bus = Bus()
        ram1 = RAM(16)
        ram2 = RAM(16)
        bus.register_device(0x0000, 0x000F, ram1)
        bus.register_device(0x0010, 0x001F, ram2)

        bus.write(0x0005, 0xAA)
        bus.write(0x001A, 0xBB)

        assert bus.read(0x0005) == 0xAA
        assert ram1.read(5) == 0xAA
        assert ram2.read(0x0A) == 0xBB
        assert bus.get_memory_size() == 0x20

    def test_bus_register_invalid_address_range(self):
        bus = Bus()
        with pytest.raises(ValueError, match="Invalid address range"):
            bus.register_device(0x0010, 0x000F, RAM(16))
        with pytest.raises(ValueError, match="Invalid address range"):
            bus.register_device(-1, 0x000F, RAM(16))

    def test_bus_register_ram_size_mismatch(self):
        bus = Bus()
        with pytest.raises(ValueError, match=r"size \(10 bytes\) does not match"):
            bus.register_device(0x0000, 0x000F, RAM(10))

    def test_bus_register_invalid_device_type(self):
        bus = Bus()
        class NotADevice: pass
        with pytest.raises(TypeError, match="Device must be an instance"):
            bus.register_device(0x0000, 0x000F, NotADevice())

    # @intent:test_case_oob 既定のFAULTポリシーではメモリサイズ以上のアドレスが例外になります。
    def test_fault_policy_rejects_out_of_range(self, bus):
        with pytest.raises(MemoryBoundsError, match="Address 0x0100 out of bounds for memory of size 0x0100."):
            bus.read(0x0100)
        with pytest.raises(MemoryBoundsError) as excinfo:
            bus.write(0xFFFF, 0x01)
        assert excinfo.value.address == 0xFFFF
        assert excinfo.value.size == 0x100

    # @intent:test_case_wrap WRAPポリシーではアドレスがメモリサイズで折り返されます。
    def test_wrap_policy_reduces_address(self):
        bus = Bus(address_policy=AddressPolicy.WRAP)
        bus.register_device(0x0000, 0x00FF, RAM(0x100))
        bus.write(0x0105, 0x42)
        assert bus.read(0x0005) == 0x42
        assert bus.read(0xFF05) == 0x42
        assert bus.address_policy is AddressPolicy.WRAP

    # @intent:test_case_wrap 折り返されたアクセスはログに実効アドレスで記録されます。
    def test_wrap_policy_logs_effective_address(self):
        bus = Bus(address_policy=AddressPolicy.WRAP)
        bus.register_device(0x0000, 0x00FF, RAM(0x100))
        bus.write(0x0105, 0x42)
        bus.read(0xFF05)
        assert bus.get_and_clear_activity_log() == [
            BusAccess(address=0x0005, data=0x42, access_type=BusAccessType.WRITE),
            BusAccess(address=0x0005, data=0x42, access_type=BusAccessType.READ),
        ]

    # @intent:test_case_log 読み書きはログに記録され、取得時にクリアされることを検証します。
    def test_activity_log(self, bus):
        bus.write(0x10, 0x99)
        bus.read(0x10)
        log = bus.get_and_clear_activity_log()
        assert log == [
            BusAccess(address=0x10, data=0x99, access_type=BusAccessType.WRITE),
            BusAccess(address=0x10, data=0x99, access_type=BusAccessType.READ),
        ]
        assert bus.get_and_clear_activity_log() == []

    def test_peek_is_not_logged(self, bus):
        bus.write(0x20, 0x07)
        bus.get_and_clear_activity_log()
        assert bus.peek(0x20) == 0x07
        assert bus.get_and_clear_activity_log() == []

    # @intent:test_case_load イメージロードは逐語的なコピーで、ログに残りません。
    def test_load_copies_verbatim_without_logging(self, bus):
        bus.load(0x10, bytes([0x76, 0x08, 0xFF]))
        assert [bus.peek(a) for a in (0x10, 0x11, 0x12)] == [0x76, 0x08, 0xFF]
        assert bus.get_and_clear_activity_log() == []

    def test_load_that_does_not_fit_writes_nothing(self, bus):
        with pytest.raises(MemoryBoundsError):
            bus.load(0xFE, b"\x01\x02\x03")
        assert bus.peek(0xFE) == 0
        assert bus.peek(0xFF) == 0

    def test_load_empty_image_is_noop(self, bus):
        bus.load(0x00, b"")
        assert bus.peek(0x00) == 0


class TestBusIo:
    """
    I/Oポート空間のテスト。
    """
    def test_unmapped_port_reads_zero_and_is_logged(self):
        bus = Bus()
        assert bus.read_io(0x10) == 0x00
        bus.write_io(0x11, 0x55)
        assert bus.get_and_clear_activity_log() == [
            BusAccess(address=0x10, data=0x00, access_type=BusAccessType.IO_READ),
            BusAccess(address=0x11, data=0x55, access_type=BusAccessType.IO_WRITE),
        ]

    def test_mapped_port_latches_value(self):
        bus = Bus()
        bus.register_io_device(0x00, 0x0F, RAM(16))
        bus.write_io(0x03, 0xA5)
        assert bus.read_io(0x03) == 0xA5

    def test_io_range_must_fit_port_space(self):
        bus = Bus()
        with pytest.raises(ValueError, match="exceeds the 8-bit port space"):
            bus.register_io_device(0xF0, 0x10F, RAM(0x20))

    def test_custom_device(self):
        class Echo(Device):
            def __init__(self):
                self.written = []
            def read(self, address):
                return address
            def write(self, address, data):
                self.written.append((address, data))

        bus = Bus()
        echo = Echo()
        bus.register_io_device(0x80, 0x8F, echo)
        assert bus.read_io(0x85) == 0x05
        bus.write_io(0x81, 0x3C)
        assert echo.written == [(0x01, 0x3C)]
