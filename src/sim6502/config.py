"""Runtime configuration for the simulator front-ends."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


class ConfigError(ValueError):
    """Raised for malformed configuration files or values."""


@dataclass(frozen=True)
class Config:
    """Options shared by the runner and the screen front-end.

    ``trace_address`` of ``None`` traces from the first instruction once
    ``debug`` is on; ``boot_address`` of ``None`` boots through the reset
    vector.
    """

    debug: bool = False
    program_index: int = 0
    load_address: int = 0x0000
    boot_address: Optional[int] = None
    trace_address: Optional[int] = None
    filename: str = ""
    max_instructions: Optional[int] = None
    breakpoint_address: Optional[int] = None
    breakpoint_registers: Optional[Tuple[int, int, int]] = None

    def merged(self, **overrides: Any) -> "Config":
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(changes) - {item.name for item in fields(self)}
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
        return replace(self, **changes)


_ADDRESS_KEYS = ("load_address", "boot_address", "trace_address", "breakpoint_address")


def _parse_int(key: str, value: Any, *, limit: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected an integer, got {value!r}")
    if isinstance(value, str):
        try:
            number = int(value, 0)
        except ValueError as exc:
            raise ConfigError(f"{key}: invalid number {value!r}") from exc
    elif isinstance(value, int):
        number = value
    else:
        raise ConfigError(f"{key}: expected an integer, got {value!r}")
    if number < 0 or (limit is not None and number > limit):
        raise ConfigError(f"{key}: value out of range: {value!r}")
    return number


def config_from_mapping(data: Dict[str, Any]) -> Config:
    known = {item.name for item in fields(Config)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"unknown configuration keys: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            values[key] = None
        elif key in _ADDRESS_KEYS:
            values[key] = _parse_int(key, value, limit=0xFFFF)
        elif key in ("program_index", "max_instructions"):
            values[key] = _parse_int(key, value)
        elif key == "debug":
            if not isinstance(value, bool):
                raise ConfigError(f"debug: expected true/false, got {value!r}")
            values[key] = value
        elif key == "filename":
            values[key] = str(value)
        elif key == "breakpoint_registers":
            if not isinstance(value, (list, tuple)) or len(value) != 3:
                raise ConfigError("breakpoint_registers: expected [A, X, Y]")
            values[key] = tuple(_parse_int(key, item, limit=0xFF) for item in value)
    return Config(**values)


def load_config(path: str | Path) -> Config:
    """Read a JSON configuration file.

    Numbers may be given as integers or strings such as ``"0x1000"``.
    """

    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{file_path}: invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{file_path}: top-level value must be an object")
    return config_from_mapping(data)
