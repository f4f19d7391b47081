import yaml
from typing import Dict, Any, Optional

from i8080_tracer.errors import ConfigError
from i8080_tracer.arch.i8080.state import FlagPolicy, AuxCarryMode
from i8080_tracer.transport.bus import AddressPolicy
from .models import SystemConfig, IoRegion, CpuInitialState, DEFAULT_MEMORY_SIZE, DEFAULT_MAX_STEPS

# @intent:responsibility YAMLのシステム構成ファイルを読み込み、SystemConfigに変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self.parse(data)

    def parse(self, data: Optional[Dict[str, Any]]) -> SystemConfig:
        if data is None:
            return SystemConfig()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping, got {type(data).__name__}")

        io_map = []
        for region_data in data.get("io_map", []) or []:
            self._require_mapping(region_data, "io_map entry")
            io_map.append(IoRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                label=region_data.get("label", "")
            ))

        initial_state_data = data.get("initial_state", {}) or {}
        self._require_mapping(initial_state_data, "initial_state")
        registers_data = initial_state_data.get("registers", {}) or {}
        self._require_mapping(registers_data, "initial_state.registers")
        registers = {
            str(name).lower(): self._parse_int(value)
            for name, value in registers_data.items()
        }
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0)),
            registers=registers
        )

        return SystemConfig(
            memory_size=self._parse_int(data.get("memory_size", DEFAULT_MEMORY_SIZE)),
            address_policy=self._parse_enum(AddressPolicy, data.get("address_policy", "fault"), "address_policy"),
            flags=self._parse_flags(data.get("flags", {}) or {}),
            io_map=io_map,
            initial_state=initial_state,
            max_steps=self._parse_int(data.get("max_steps", DEFAULT_MAX_STEPS))
        )

    def _parse_flags(self, data: Dict[str, Any]) -> FlagPolicy:
        self._require_mapping(data, "flags")
        defaults = FlagPolicy()
        return FlagPolicy(
            inverted_sign=self._parse_bool(data.get("inverted_sign", defaults.inverted_sign), "flags.inverted_sign"),
            odd_parity=self._parse_bool(data.get("odd_parity", defaults.odd_parity), "flags.odd_parity"),
            aux_carry=self._parse_enum(AuxCarryMode, data.get("aux_carry", defaults.aux_carry.value), "flags.aux_carry")
        )

    def _require_mapping(self, value: Any, key: str) -> None:
        if not isinstance(value, dict):
            raise ConfigError(f"{key} must be a mapping, got {type(value).__name__}")

    # 文字列の "false" などは受け付けず、YAMLの真偽値だけを許可する
    def _parse_bool(self, value: Any, key: str) -> bool:
        if not isinstance(value, bool):
            raise ConfigError(f"Invalid {key}: {value!r} (expected true or false)")
        return value

    def _parse_enum(self, enum_cls, value: Any, key: str):
        try:
            return enum_cls(str(value).lower())
        except ValueError:
            choices = ", ".join(m.value for m in enum_cls)
            raise ConfigError(f"Invalid {key}: {value!r} (expected one of: {choices})") from None

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format: {value}")
