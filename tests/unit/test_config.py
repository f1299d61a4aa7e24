from __future__ import annotations

import json

import pytest

from sim6502.config import Config, ConfigError, config_from_mapping, load_config


def test_defaults() -> None:
    config = Config()
    assert config.debug is False
    assert config.program_index == 0
    assert config.load_address == 0x0000
    assert config.boot_address is None
    assert config.max_instructions is None


def test_merged_ignores_none_values() -> None:
    config = Config(program_index=3).merged(program_index=None, debug=True, boot_address=0x2000)
    assert config.program_index == 3
    assert config.debug is True
    assert config.boot_address == 0x2000


def test_merged_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigError):
        Config().merged(colour="blue")


def test_mapping_accepts_hex_strings_and_integers() -> None:
    config = config_from_mapping(
        {
            "debug": True,
            "program_index": 5,
            "load_address": "0xC000",
            "boot_address": 4096,
            "trace_address": "0x1000",
            "filename": "kernal.bin",
            "max_instructions": "1000",
            "breakpoint_registers": ["0x00", 10, 0],
        }
    )
    assert config.load_address == 0xC000
    assert config.boot_address == 0x1000
    assert config.trace_address == 0x1000
    assert config.max_instructions == 1000
    assert config.breakpoint_registers == (0, 10, 0)


@pytest.mark.parametrize(
    "data",
    [
        {"unknown": 1},
        {"load_address": "0x10000"},
        {"load_address": -1},
        {"boot_address": "nope"},
        {"program_index": True},
        {"debug": "yes"},
        {"breakpoint_registers": [1, 2]},
        {"breakpoint_registers": [1, 2, 0x100]},
        {"max_instructions": 1.5},
    ],
)
def test_mapping_rejects_invalid_values(data) -> None:
    with pytest.raises(ConfigError):
        config_from_mapping(data)


def test_load_config_reads_json(tmp_path) -> None:
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"program_index": 2, "boot_address": "0x1000"}), encoding="utf-8")

    config = load_config(path)

    assert config.program_index == 2
    assert config.boot_address == 0x1000


def test_load_config_errors(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)

    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(listing)
