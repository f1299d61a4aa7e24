from __future__ import annotations

import pytest

from sim6502.cpu.core import CPU6502
from sim6502.cpu.opcodes import (
    OP_DEC_ZP,
    OP_DEX_IMP,
    OP_INC_ABS,
    OP_INX_IMP,
    OP_INY_IMP,
    OP_LDA_ABX,
    OP_LDA_IMM,
    OP_LDA_IZX,
    OP_LDA_IZY,
    OP_LDA_ZP,
    OP_LDX_IMM,
    OP_LDX_ZPY,
    OP_LDY_IMM,
    OP_STA_ABS,
    OP_STA_ZPX,
    OP_STX_ZP,
    OP_STY_ABS,
    OP_TAX_IMP,
    OP_TSX_IMP,
    OP_TXA_IMP,
    OP_TXS_IMP,
)
from sim6502.memory import AddressSpace


def make_cpu(program: bytes, address: int = 0x1000) -> CPU6502:
    memory = AddressSpace()
    memory.reset()
    memory.load(address, program)
    cpu = CPU6502(memory)
    cpu.reset(address)
    return cpu


@pytest.mark.parametrize(
    ("opcode", "register"),
    [(OP_LDA_IMM, "a"), (OP_LDX_IMM, "x"), (OP_LDY_IMM, "y")],
)
@pytest.mark.parametrize(
    ("value", "zero", "negative"),
    [(0x00, True, False), (0x42, False, False), (0x80, False, True)],
)
def test_load_immediate_sets_only_zero_and_negative(
    opcode: int, register: str, value: int, zero: bool, negative: bool
) -> None:
    cpu = make_cpu(bytes([opcode, value]))
    cpu.flags.carry = True
    cpu.flags.overflow = True
    cpu.flags.decimal = True
    cpu.flags.interrupt_disable = True

    assert cpu.step() is True

    assert getattr(cpu.registers, register) == value
    assert cpu.flags.zero is zero
    assert cpu.flags.negative is negative
    assert cpu.flags.carry is True
    assert cpu.flags.overflow is True
    assert cpu.flags.decimal is True
    assert cpu.flags.interrupt_disable is True
    assert cpu.registers.pc == 0x1002


def test_load_from_zero_page_and_absolute_indexed() -> None:
    cpu = make_cpu(bytes([OP_LDX_IMM, 0x03, OP_LDA_ZP, 0x10, OP_LDA_ABX, 0x00, 0x20]))
    cpu.memory.write_byte(0x0010, 0x11)
    cpu.memory.write_byte(0x2003, 0x22)

    cpu.step()
    cpu.step()
    assert cpu.registers.a == 0x11
    cpu.step()
    assert cpu.registers.a == 0x22


def test_ldx_zero_page_y_wraps() -> None:
    cpu = make_cpu(bytes([OP_LDY_IMM, 0x20, OP_LDX_ZPY, 0xF0]))
    cpu.memory.write_byte(0x0010, 0x77)

    cpu.run(2)

    assert cpu.registers.x == 0x77


def test_indexed_indirect_and_indirect_indexed_loads() -> None:
    cpu = make_cpu(bytes([OP_LDX_IMM, 0x04, OP_LDA_IZX, 0x20, OP_LDY_IMM, 0x02, OP_LDA_IZY, 0x30]))
    cpu.memory.write_word(0x0024, 0x4000)
    cpu.memory.write_byte(0x4000, 0xAA)
    cpu.memory.write_word(0x0030, 0x5000)
    cpu.memory.write_byte(0x5002, 0xBB)

    cpu.run(2)
    assert cpu.registers.a == 0xAA
    cpu.run(2)
    assert cpu.registers.a == 0xBB


def test_stores_write_memory_without_touching_flags() -> None:
    cpu = make_cpu(
        bytes([
            OP_LDA_IMM, 0x5A,
            OP_LDX_IMM, 0x81,
            OP_LDY_IMM, 0x7F,
            OP_STA_ABS, 0x00, 0x30,
            OP_STX_ZP, 0x40,
            OP_STY_ABS, 0x01, 0x30,
            OP_STA_ZPX, 0x80,
        ])
    )

    cpu.run(3)
    flags_before = cpu.flags.to_byte()
    cpu.run(4)

    assert cpu.memory.read_byte(0x3000) == 0x5A
    assert cpu.memory.read_byte(0x0040) == 0x81
    assert cpu.memory.read_byte(0x3001) == 0x7F
    assert cpu.memory.read_byte(0x0001) == 0x5A
    assert cpu.flags.to_byte() == flags_before


def test_increment_and_decrement_wrap() -> None:
    cpu = make_cpu(bytes([OP_LDX_IMM, 0xFF, OP_INX_IMP, OP_DEX_IMP, OP_INY_IMP]))

    cpu.run(2)
    assert cpu.registers.x == 0x00
    assert cpu.flags.zero is True
    cpu.step()
    assert cpu.registers.x == 0xFF
    assert cpu.flags.negative is True
    cpu.step()
    assert cpu.registers.y == 0x01


def test_memory_increment_and_decrement() -> None:
    cpu = make_cpu(bytes([OP_INC_ABS, 0x00, 0x20, OP_DEC_ZP, 0x10]))
    cpu.memory.write_byte(0x2000, 0x7F)
    cpu.memory.write_byte(0x0010, 0x01)

    cpu.step()
    assert cpu.memory.read_byte(0x2000) == 0x80
    assert cpu.flags.negative is True
    cpu.step()
    assert cpu.memory.read_byte(0x0010) == 0x00
    assert cpu.flags.zero is True


def test_transfers_update_flags_except_txs() -> None:
    cpu = make_cpu(bytes([OP_LDA_IMM, 0x80, OP_TAX_IMP, OP_LDX_IMM, 0x00, OP_TXS_IMP, OP_TSX_IMP, OP_TXA_IMP]))

    cpu.run(2)
    assert cpu.registers.x == 0x80
    assert cpu.flags.negative is True

    cpu.step()
    assert cpu.flags.zero is True
    cpu.flags.zero = False
    cpu.step()
    assert cpu.registers.s == 0x00
    assert cpu.flags.zero is False

    cpu.step()
    assert cpu.registers.x == 0x00
    assert cpu.flags.zero is True
    cpu.step()
    assert cpu.registers.a == 0x00
