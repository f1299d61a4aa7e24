from __future__ import annotations

import pytest

from sim6502.loader import ProgramLoadError, Snippet, load_binary, load_snippets
from sim6502.memory import AddressSpace


def test_load_snippets_places_code_and_data() -> None:
    memory = AddressSpace()
    snippets = [
        Snippet(0x0020, [0xCD, 0xAB], "data"),
        Snippet(0x1000, bytes([0xEA, 0xEA, 0xEA]), "main"),
        Snippet(0x3000, b"", "empty"),
    ]

    info = load_snippets(memory, snippets, name="demo")

    assert memory.dump(0x0020, 2) == b"\xCD\xAB"
    assert memory.dump(0x1000, 3) == b"\xEA\xEA\xEA"
    assert info.name == "demo"
    assert [(r.start, r.end, r.comment) for r in info.address_regions] == [
        (0x0020, 0x0021, "data"),
        (0x1000, 0x1002, "main"),
    ]
    assert info.size == 5


def test_snippet_coerces_data_to_bytes() -> None:
    snippet = Snippet(0x2000, [1, 2, 3])
    assert snippet.data == b"\x01\x02\x03"
    assert snippet.end == 0x2002


def test_snippet_past_top_of_memory_fails() -> None:
    with pytest.raises(ProgramLoadError):
        load_snippets(AddressSpace(), [Snippet(0xFFFF, b"\x01\x02", "tail")])


def test_load_binary_read_only(tmp_path) -> None:
    rom = tmp_path / "kernal.bin"
    rom.write_bytes(bytes([0x4C, 0x00, 0xE0]))
    memory = AddressSpace()

    info = load_binary(memory, rom, 0xE000, read_only=True)

    assert memory.dump(0xE000, 3) == bytes([0x4C, 0x00, 0xE0])
    memory.write_byte(0xE000, 0x00)
    assert memory.read_byte(0xE000) == 0x4C
    assert info.name == "kernal"
    region = info.address_regions[0]
    assert (region.start, region.end, region.comment, region.read_only) == (0xE000, 0xE002, "kernal.bin", True)


def test_load_binary_appends_to_existing_info(tmp_path) -> None:
    first = tmp_path / "a.bin"
    second = tmp_path / "b.bin"
    first.write_bytes(b"\x01")
    second.write_bytes(b"\x02\x03")
    memory = AddressSpace()

    info = load_binary(memory, first, 0x8000)
    same = load_binary(memory, second, 0xA000, info=info)

    assert same is info
    assert len(info.address_regions) == 2
    assert memory.is_read_only(0xA000) is False


def test_load_binary_missing_file(tmp_path) -> None:
    with pytest.raises(ProgramLoadError):
        load_binary(AddressSpace(), tmp_path / "missing.bin", 0x0000)


def test_load_binary_empty_file(tmp_path) -> None:
    empty = tmp_path / "empty.bin"
    empty.write_bytes(b"")
    with pytest.raises(ProgramLoadError):
        load_binary(AddressSpace(), empty, 0x0000)


def test_load_binary_too_large_for_address(tmp_path) -> None:
    image = tmp_path / "big.bin"
    image.write_bytes(bytes(0x2000))
    with pytest.raises(ProgramLoadError):
        load_binary(AddressSpace(), image, 0xF000)
