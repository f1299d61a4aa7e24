from __future__ import annotations

import json
import logging

import pytest

from sim6502 import debug_runner


def test_runs_builtin_program_and_dumps_its_data(capsys) -> None:
    exit_code = debug_runner.main(["--program", "4"])

    captured = capsys.readouterr()
    assert exit_code == debug_runner.EXIT_OK
    lines = [line for line in captured.out.splitlines() if line]
    assert lines[0].startswith("A=44 ")
    assert lines[0].endswith("PC=100E instructions=8")
    assert lines[1].startswith("ADDR")
    assert lines[2].startswith("0020 CD AB 76 98 43 44")


def test_list_programs(capsys) -> None:
    assert debug_runner.main(["--list-programs"]) == debug_runner.EXIT_OK
    assert "sieve_of_eratosthenes" in capsys.readouterr().out


def test_unknown_program_is_a_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        debug_runner.main(["--program", "99"])
    assert excinfo.value.code == 2
    assert "no program with index 99" in capsys.readouterr().err


def test_binary_hits_instruction_limit(tmp_path, capsys) -> None:
    image = tmp_path / "loop.bin"
    image.write_bytes(bytes([0x4C, 0x00, 0x03]))

    exit_code = debug_runner.main(
        ["--binary", str(image), "--load", "0x0300", "--count", "50", "--dump-range", "0300:0302"]
    )

    captured = capsys.readouterr()
    assert exit_code == debug_runner.EXIT_BUDGET_EXHAUSTED
    assert "instructions=50" in captured.out
    assert "0300 4C 00 03" in captured.out
    assert "instruction limit reached" in captured.err


def test_binary_stops_on_illegal_opcode(tmp_path, capsys) -> None:
    image = tmp_path / "bad.bin"
    image.write_bytes(bytes([0xEA, 0x02]))

    exit_code = debug_runner.main(["--binary", str(image), "--load", "$0300"])

    captured = capsys.readouterr()
    assert exit_code == debug_runner.EXIT_OK
    assert "PC=0301 instructions=1" in captured.out
    assert "illegal opcode at 0x0301" in captured.err


def test_missing_binary_reports_load_failure(tmp_path, capsys) -> None:
    exit_code = debug_runner.main(["--binary", str(tmp_path / "missing.bin")])

    assert exit_code == debug_runner.EXIT_LOAD_FAILED
    assert "Failed to load program" in capsys.readouterr().err


def test_start_address_overrides_entry(tmp_path, capsys) -> None:
    program = tmp_path / "program.bin"
    program.write_bytes(bytes([0xA9, 0x07, 0x02]))

    exit_code = debug_runner.main(
        ["--binary", str(program), "--load", "2000", "--start", "2000", "--count", "5"]
    )
    assert exit_code == debug_runner.EXIT_OK
    assert capsys.readouterr().out.startswith("A=07 ")


def test_register_breakpoint(capsys) -> None:
    exit_code = debug_runner.main(["--program", "1", "--no-stop", "--break-regs", "00,00,05"])

    captured = capsys.readouterr()
    assert exit_code == debug_runner.EXIT_OK
    assert "Y=05" in captured.out
    assert "PC=1005" in captured.out


def test_break_pc_before_program_end(capsys) -> None:
    exit_code = debug_runner.main(["--program", "0", "--break-pc", "0x1004"])

    assert exit_code == debug_runner.EXIT_OK
    assert "PC=1004 instructions=2" in capsys.readouterr().out


def test_disassemble_before_running(capsys) -> None:
    debug_runner.main(["--program", "0", "--disassemble", "1000:1003"])

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "1000  A2 22     LDX #$22"
    assert out[1] == "1002  A0 44     LDY #$44"


def test_config_file_selects_program(tmp_path, capsys) -> None:
    config = tmp_path / "weekday.json"
    config.write_text(json.dumps({"program_index": 7, "max_instructions": 10000}), encoding="utf-8")

    exit_code = debug_runner.main(["--config", str(config)])

    assert exit_code == debug_runner.EXIT_OK
    assert capsys.readouterr().out.startswith("A=02 ")


def test_invalid_config_is_a_usage_error(tmp_path) -> None:
    config = tmp_path / "bad.json"
    config.write_text('{"program_index": "x"}', encoding="utf-8")

    with pytest.raises(SystemExit):
        debug_runner.main(["--config", str(config)])


def test_trace_from_address(capsys, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="sim6502.trace"):
        exit_code = debug_runner.main(["--program", "0", "--trace", "0x100B"])

    assert exit_code == debug_runner.EXIT_OK
    traced = [record.getMessage() for record in caplog.records if record.name == "sim6502.trace"]
    assert len(traced) == 2
    assert traced[0].startswith("100B  CA        DEX")
    assert traced[1].startswith("100C  EA        NOP")


def test_binary_dump_to_file(tmp_path, capsys) -> None:
    target = tmp_path / "memory.bin"

    exit_code = debug_runner.main(
        ["--program", "4", "--dump", str(target), "--dump-range", "0024:0025", "--dump-format", "bin"]
    )

    assert exit_code == debug_runner.EXIT_OK
    assert target.read_bytes() == b"\x43\x44"


def test_boot_through_reset_vector(tmp_path, capsys) -> None:
    vectors = tmp_path / "vectors.bin"
    # Reset and IRQ vectors both point at zeroed memory, which decodes as BRK.
    vectors.write_bytes(bytes([0x00, 0x30, 0x00, 0x30]))

    exit_code = debug_runner.main(
        ["--binary", str(vectors), "--load", "FFFC", "--reset-vector", "--count", "3"]
    )

    assert exit_code == debug_runner.EXIT_BUDGET_EXHAUSTED
    out = capsys.readouterr().out
    assert "S=F6" in out
    assert "PC=3000 instructions=3" in out
