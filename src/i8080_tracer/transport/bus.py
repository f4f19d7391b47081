# i8080_tracer/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、メモリアドレス空間とI/Oポート空間を抽象化し、
読み書きアクセスを適切なデバイスに委譲する責務を負います。
全てのメモリアクセス経路（HL間接、BC/DE間接、直接アドレス、スタック）はここを通るため、
境界チェックの唯一の関所でもあります。
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import logging

from i8080_tracer.errors import MemoryBoundsError

logger = logging.getLogger(__name__)

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"
    IO_READ = "IO_READ"
    IO_WRITE = "IO_WRITE"

# @intent:responsibility 範囲外アドレスの扱い方を定義します。
class AddressPolicy(Enum):
    FAULT = "fault"  # MemoryBoundsErrorを送出
    WRAP = "wrap"    # メモリサイズで剰余を取る

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    アドレスはデバイス内でのオフセットとして渡されます。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

# @intent:responsibility ゼロ初期化された固定サイズのRAMデバイスを提供します。
class RAM(Device):
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise MemoryBoundsError(address, self._size)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise MemoryBoundsError(address, self._size)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    # @intent:responsibility 連続したバイト列をそのままコピーします（イメージロード用）。
    def load_bytes(self, address: int, data: bytes) -> None:
        end = address + len(data)
        if address < 0 or end > self._size:
            raise MemoryBoundsError(address if address < 0 else end - 1, self._size)
        self._memory[address:end] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility メモリ空間とI/Oポート空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    メモリアドレス空間とI/Oポート空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
    バス上で行われた全てのメモリ/IOアクセスを記録する機能を提供します。
    """
    def __init__(self, address_policy: AddressPolicy = AddressPolicy.FAULT):
        # (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._io_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []
        self._address_policy = address_policy

    @property
    def address_policy(self) -> AddressPolicy:
        return self._address_policy

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    @staticmethod
    def _validate_range(start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address):
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")
        if isinstance(device, RAM):
            expected_size = end_address - start_address + 1
            if device.get_size() != expected_size:
                raise ValueError(
                    f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                    f"the specified address range size ({expected_size} bytes)."
                )

    # @intent:responsibility 指定されたアドレス範囲にメモリデバイスを登録します。
    # @intent:rationale アドレス範囲の重複チェックは行いません。呼び出し元が責任を持ちます。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        self._validate_range(start_address, end_address, device)
        self._memory_map.append((start_address, end_address, device))

    # @intent:responsibility 指定されたポート範囲にI/Oデバイスを登録します。
    def register_io_device(self, start_port: int, end_port: int, device: Device) -> None:
        self._validate_range(start_port, end_port, device)
        if end_port > 0xFF:
            raise ValueError(f"I/O port range {start_port:#04x}-{end_port:#04x} exceeds the 8-bit port space.")
        self._io_map.append((start_port, end_port, device))

    # @intent:responsibility マップされたメモリ空間の大きさ（最上位アドレス+1）を返します。
    def get_memory_size(self) -> int:
        return max((end + 1 for _, end, _ in self._memory_map), default=0)

    # @intent:responsibility WRAPポリシーの場合、範囲外のアドレスをメモリサイズで折り返した実効アドレスを返します。
    def _effective_address(self, address: int) -> int:
        size = self.get_memory_size()
        if self._address_policy is AddressPolicy.WRAP and size and not 0 <= address < size:
            wrapped = address % size
            logger.debug("address %#06x wrapped to %#06x", address, wrapped)
            return wrapped
        return address

    # @intent:responsibility アドレスポリシーを適用し、対応するデバイスとオフセットを検索します。
    # @intent:post-condition デバイスが見つからなかった場合、MemoryBoundsErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        address = self._effective_address(address)
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise MemoryBoundsError(address, self.get_memory_size())

    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。アクセスはログには実効アドレスで記録されます。
        """
        address = self._effective_address(address)
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに読み出します（ダンプや検査用）。
    def peek(self, address: int) -> int:
        device, offset = self._find_device(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに8bitのデータを書き込みます。アクセスはログには実効アドレスで記録されます。
        """
        address = self._effective_address(address)
        device, offset = self._find_device(address)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

    # @intent:responsibility プログラムイメージをログに残さずにメモリへコピーします。
    # @intent:pre-condition イメージ全体が単一のRAMデバイスに収まる必要があります。
    def load(self, address: int, data: bytes) -> None:
        """
        バイト列を指定アドレスから逐語的にコピーします。デコードは行いません。
        イメージが収まらない場合、1バイトも書き込まずにMemoryBoundsErrorを送出します。
        """
        if not data:
            return
        device, offset = self._find_device(address)
        if not isinstance(device, RAM):
            raise TypeError(f"Cannot load an image into {type(device).__name__}.")
        if offset + len(data) > device.get_size():
            raise MemoryBoundsError(address + len(data) - 1, self.get_memory_size())
        device.load_bytes(offset, bytes(data))

    def _find_io_device(self, port: int) -> Optional[Tuple[Device, int]]:
        for start, end, device in self._io_map:
            if start <= port <= end:
                return device, port - start
        return None

    # @intent:responsibility 指定されたI/Oポートから8bitのデータを読み出します。
    def read_io(self, port: int) -> int:
        """
        未マップのポートは常に0を返し、ログのみ記録します。
        """
        found = self._find_io_device(port)
        data = found[0].read(found[1]) if found else 0x00
        self._log_access(port, data, BusAccessType.IO_READ)
        return data

    # @intent:responsibility 指定されたI/Oポートに8bitのデータを書き込みます。
    def write_io(self, port: int, data: int) -> None:
        """
        未マップのポートへの書き込みはログのみ記録します。
        """
        found = self._find_io_device(port)
        if found:
            found[0].write(found[1], data)
        self._log_access(port, data, BusAccessType.IO_WRITE)
