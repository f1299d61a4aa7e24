from __future__ import annotations

import logging

from sim6502.cpu.core import CPURegisters
from sim6502.cpu.flags import StatusFlags
from sim6502.debug.breakpoints import Breakpoints
from sim6502.debug.trace import Tracer, disassemble, disassemble_range, format_registers
from sim6502.memory import AddressSpace


def test_breakpoints_disabled_by_default() -> None:
    breakpoints = Breakpoints()
    assert breakpoints.enabled is False
    assert breakpoints.matches(CPURegisters(pc=0x1000)) is False


def test_address_breakpoint_matches_exact_pc() -> None:
    breakpoints = Breakpoints()
    breakpoints.add_address(0x11000)

    assert breakpoints.addresses == {0x1000}
    assert breakpoints.matches(CPURegisters(pc=0x1000))
    assert not breakpoints.matches(CPURegisters(pc=0x1001))


def test_register_breakpoint_alone() -> None:
    breakpoints = Breakpoints()
    breakpoints.set_registers(0x00, 0x0A, 0x100)

    assert breakpoints.registers == (0x00, 0x0A, 0x00)
    assert breakpoints.matches(CPURegisters(a=0x00, x=0x0A, y=0x00, pc=0x1234))
    assert not breakpoints.matches(CPURegisters(a=0x01, x=0x0A, y=0x00))


def test_address_and_registers_must_both_match() -> None:
    breakpoints = Breakpoints()
    breakpoints.add_address(0x2000)
    breakpoints.set_registers(1, 2, 3)

    assert breakpoints.matches(CPURegisters(a=1, x=2, y=3, pc=0x2000))
    assert not breakpoints.matches(CPURegisters(a=1, x=2, y=3, pc=0x2001))
    assert not breakpoints.matches(CPURegisters(a=0, x=2, y=3, pc=0x2000))

    breakpoints.clear()
    assert breakpoints.enabled is False


def make_memory(program: bytes, address: int = 0x1000) -> AddressSpace:
    memory = AddressSpace()
    memory.load(address, program)
    return memory


def test_disassemble_formats_each_mode() -> None:
    memory = make_memory(
        bytes([
            0xA9, 0x42,        # LDA #$42
            0x0A,              # ASL A
            0xB5, 0x10,        # LDA $10,X
            0x6C, 0x00, 0x20,  # JMP ($2000)
            0xB1, 0x30,        # LDA ($30),Y
            0xD0, 0xFE,        # BNE $100A
            0xEA,              # NOP
        ])
    )

    lines = list(disassemble_range(memory, 0x1000, 0x100C))

    assert lines == [
        "1000  A9 42     LDA #$42",
        "1002  0A        ASL A",
        "1003  B5 10     LDA $10,X",
        "1005  6C 00 20  JMP ($2000)",
        "1008  B1 30     LDA ($30),Y",
        "100A  D0 FE     BNE $100A",
        "100C  EA        NOP",
    ]


def test_disassemble_unknown_opcode() -> None:
    memory = make_memory(bytes([0xFF]))
    assert disassemble(memory, 0x1000) == ("1000  FF        .byte $FF", 1)


def test_format_registers() -> None:
    registers = CPURegisters(a=0x01, x=0x22, y=0x44, s=0xFD, pc=0x1000)
    flags = StatusFlags(zero=True, carry=True)
    assert format_registers(registers, flags) == "A=01 X=22 Y=44 S=FD P=nv-bdiZC"


def test_tracer_waits_for_start_address() -> None:
    memory = make_memory(bytes([0xEA, 0xEA, 0xEA]))
    tracer = Tracer(memory, start_address=0x1001, sink=lambda line: None)
    registers = CPURegisters(pc=0x1000)
    flags = StatusFlags()

    assert tracer.record(0x1000, registers, flags) is None
    assert tracer.active is False
    line = tracer.record(0x1001, registers, flags)
    assert line is not None and line.startswith("1001  EA        NOP")
    assert tracer.record(0x1002, registers, flags) is not None
    assert len(tracer.lines()) == 2


def test_tracer_history_is_bounded() -> None:
    memory = make_memory(bytes([0xEA]))
    tracer = Tracer(memory, history_length=3, sink=lambda line: None)
    for _ in range(5):
        tracer.record(0x1000, CPURegisters(), StatusFlags())
    assert len(tracer.lines()) == 3


def test_tracer_logs_without_sink(caplog) -> None:
    memory = make_memory(bytes([0xA2, 0x22]))
    tracer = Tracer(memory)

    with caplog.at_level(logging.INFO, logger="sim6502.trace"):
        tracer.record(0x1000, CPURegisters(), StatusFlags())

    assert "LDX #$22" in caplog.text
    assert "A=00 X=00 Y=00 S=FF P=nv-bdizc" in caplog.text
