"""Opcode table for the NMOS 6502 instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


class OpcodeTableError(ValueError):
    """Raised when an opcode table definition is inconsistent."""


class AddressMode(Enum):
    IMPLIED = "imp"
    ACCUMULATOR = "acc"
    IMMEDIATE = "imm"
    ZERO_PAGE = "zp"
    ZERO_PAGE_X = "zpx"
    ZERO_PAGE_Y = "zpy"
    RELATIVE = "rel"
    ABSOLUTE = "abs"
    ABSOLUTE_X = "abx"
    ABSOLUTE_Y = "aby"
    INDIRECT = "ind"
    INDEXED_INDIRECT = "izx"
    INDIRECT_INDEXED = "izy"


INSTRUCTION_SIZES: Dict[AddressMode, int] = {
    AddressMode.IMPLIED: 1,
    AddressMode.ACCUMULATOR: 1,
    AddressMode.IMMEDIATE: 2,
    AddressMode.ZERO_PAGE: 2,
    AddressMode.ZERO_PAGE_X: 2,
    AddressMode.ZERO_PAGE_Y: 2,
    AddressMode.RELATIVE: 2,
    AddressMode.INDEXED_INDIRECT: 2,
    AddressMode.INDIRECT_INDEXED: 2,
    AddressMode.ABSOLUTE: 3,
    AddressMode.ABSOLUTE_X: 3,
    AddressMode.ABSOLUTE_Y: 3,
    AddressMode.INDIRECT: 3,
}


class RegisterEffect(Enum):
    """Shared register/memory update applied by simple opcodes.

    ``LOAD`` copies the operand into the target register, ``TRANSFER`` copies
    the source register, ``INCREMENT``/``DECREMENT`` adjust the target
    register (or the operand memory cell when no register is named). All of
    them set Zero/Negative from the stored value, except a transfer into the
    stack pointer.
    """

    NONE = "none"
    LOAD = "load"
    TRANSFER = "transfer"
    INCREMENT = "increment"
    DECREMENT = "decrement"


@dataclass(frozen=True)
class OpcodeDescriptor:
    opcode: int
    mnemonic: str
    mode: AddressMode
    effect: RegisterEffect = RegisterEffect.NONE
    register: Optional[str] = None
    source: Optional[str] = None

    @property
    def size(self) -> int:
        return INSTRUCTION_SIZES[self.mode]

    @property
    def legal(self) -> bool:
        return self.mnemonic != ILLEGAL_MNEMONIC


ILLEGAL_MNEMONIC = "???"
ILLEGAL_OPCODE = OpcodeDescriptor(-1, ILLEGAL_MNEMONIC, AddressMode.IMPLIED)


OP_ADC_IMM = 0x69
OP_ADC_ZP = 0x65
OP_ADC_ZPX = 0x75
OP_ADC_ABS = 0x6D
OP_ADC_ABX = 0x7D
OP_ADC_ABY = 0x79
OP_ADC_IZX = 0x61
OP_ADC_IZY = 0x71
OP_AND_IMM = 0x29
OP_AND_ZP = 0x25
OP_AND_ZPX = 0x35
OP_AND_ABS = 0x2D
OP_AND_ABX = 0x3D
OP_AND_ABY = 0x39
OP_AND_IZX = 0x21
OP_AND_IZY = 0x31
OP_ASL_ACC = 0x0A
OP_ASL_ZP = 0x06
OP_ASL_ZPX = 0x16
OP_ASL_ABS = 0x0E
OP_ASL_ABX = 0x1E
OP_BCC_REL = 0x90
OP_BCS_REL = 0xB0
OP_BEQ_REL = 0xF0
OP_BMI_REL = 0x30
OP_BNE_REL = 0xD0
OP_BPL_REL = 0x10
OP_BVC_REL = 0x50
OP_BVS_REL = 0x70
OP_BIT_ZP = 0x24
OP_BIT_ABS = 0x2C
OP_BRK_IMP = 0x00
OP_CLC_IMP = 0x18
OP_CLD_IMP = 0xD8
OP_CLI_IMP = 0x58
OP_CLV_IMP = 0xB8
OP_CMP_IMM = 0xC9
OP_CMP_ZP = 0xC5
OP_CMP_ZPX = 0xD5
OP_CMP_ABS = 0xCD
OP_CMP_ABX = 0xDD
OP_CMP_ABY = 0xD9
OP_CMP_IZX = 0xC1
OP_CMP_IZY = 0xD1
OP_CPX_IMM = 0xE0
OP_CPX_ZP = 0xE4
OP_CPX_ABS = 0xEC
OP_CPY_IMM = 0xC0
OP_CPY_ZP = 0xC4
OP_CPY_ABS = 0xCC
OP_DEC_ZP = 0xC6
OP_DEC_ZPX = 0xD6
OP_DEC_ABS = 0xCE
OP_DEC_ABX = 0xDE
OP_DEX_IMP = 0xCA
OP_DEY_IMP = 0x88
OP_EOR_IMM = 0x49
OP_EOR_ZP = 0x45
OP_EOR_ZPX = 0x55
OP_EOR_ABS = 0x4D
OP_EOR_ABX = 0x5D
OP_EOR_ABY = 0x59
OP_EOR_IZX = 0x41
OP_EOR_IZY = 0x51
OP_INC_ZP = 0xE6
OP_INC_ZPX = 0xF6
OP_INC_ABS = 0xEE
OP_INC_ABX = 0xFE
OP_INX_IMP = 0xE8
OP_INY_IMP = 0xC8
OP_JMP_ABS = 0x4C
OP_JMP_IND = 0x6C
OP_JSR_ABS = 0x20
OP_LDA_IMM = 0xA9
OP_LDA_ZP = 0xA5
OP_LDA_ZPX = 0xB5
OP_LDA_ABS = 0xAD
OP_LDA_ABX = 0xBD
OP_LDA_ABY = 0xB9
OP_LDA_IZX = 0xA1
OP_LDA_IZY = 0xB1
OP_LDX_IMM = 0xA2
OP_LDX_ZP = 0xA6
OP_LDX_ZPY = 0xB6
OP_LDX_ABS = 0xAE
OP_LDX_ABY = 0xBE
OP_LDY_IMM = 0xA0
OP_LDY_ZP = 0xA4
OP_LDY_ZPX = 0xB4
OP_LDY_ABS = 0xAC
OP_LDY_ABX = 0xBC
OP_LSR_ACC = 0x4A
OP_LSR_ZP = 0x46
OP_LSR_ZPX = 0x56
OP_LSR_ABS = 0x4E
OP_LSR_ABX = 0x5E
OP_NOP_IMP = 0xEA
OP_ORA_IMM = 0x09
OP_ORA_ZP = 0x05
OP_ORA_ZPX = 0x15
OP_ORA_ABS = 0x0D
OP_ORA_ABX = 0x1D
OP_ORA_ABY = 0x19
OP_ORA_IZX = 0x01
OP_ORA_IZY = 0x11
OP_PHA_IMP = 0x48
OP_PHP_IMP = 0x08
OP_PLA_IMP = 0x68
OP_PLP_IMP = 0x28
OP_ROL_ACC = 0x2A
OP_ROL_ZP = 0x26
OP_ROL_ZPX = 0x36
OP_ROL_ABS = 0x2E
OP_ROL_ABX = 0x3E
OP_ROR_ACC = 0x6A
OP_ROR_ZP = 0x66
OP_ROR_ZPX = 0x76
OP_ROR_ABS = 0x6E
OP_ROR_ABX = 0x7E
OP_RTI_IMP = 0x40
OP_RTS_IMP = 0x60
OP_SBC_IMM = 0xE9
OP_SBC_ZP = 0xE5
OP_SBC_ZPX = 0xF5
OP_SBC_ABS = 0xED
OP_SBC_ABX = 0xFD
OP_SBC_ABY = 0xF9
OP_SBC_IZX = 0xE1
OP_SBC_IZY = 0xF1
OP_SEC_IMP = 0x38
OP_SED_IMP = 0xF8
OP_SEI_IMP = 0x78
OP_STA_ZP = 0x85
OP_STA_ZPX = 0x95
OP_STA_ABS = 0x8D
OP_STA_ABX = 0x9D
OP_STA_ABY = 0x99
OP_STA_IZX = 0x81
OP_STA_IZY = 0x91
OP_STX_ZP = 0x86
OP_STX_ZPY = 0x96
OP_STX_ABS = 0x8E
OP_STY_ZP = 0x84
OP_STY_ZPX = 0x94
OP_STY_ABS = 0x8C
OP_TAX_IMP = 0xAA
OP_TAY_IMP = 0xA8
OP_TSX_IMP = 0xBA
OP_TXA_IMP = 0x8A
OP_TXS_IMP = 0x9A
OP_TYA_IMP = 0x98


_M = AddressMode
_E = RegisterEffect

# (opcode, mnemonic, mode[, effect, register[, source]])
NMOS_DEFINITIONS: Tuple[tuple, ...] = (
    (OP_ADC_IMM, "ADC", _M.IMMEDIATE),
    (OP_ADC_ZP, "ADC", _M.ZERO_PAGE),
    (OP_ADC_ZPX, "ADC", _M.ZERO_PAGE_X),
    (OP_ADC_ABS, "ADC", _M.ABSOLUTE),
    (OP_ADC_ABX, "ADC", _M.ABSOLUTE_X),
    (OP_ADC_ABY, "ADC", _M.ABSOLUTE_Y),
    (OP_ADC_IZX, "ADC", _M.INDEXED_INDIRECT),
    (OP_ADC_IZY, "ADC", _M.INDIRECT_INDEXED),
    (OP_AND_IMM, "AND", _M.IMMEDIATE),
    (OP_AND_ZP, "AND", _M.ZERO_PAGE),
    (OP_AND_ZPX, "AND", _M.ZERO_PAGE_X),
    (OP_AND_ABS, "AND", _M.ABSOLUTE),
    (OP_AND_ABX, "AND", _M.ABSOLUTE_X),
    (OP_AND_ABY, "AND", _M.ABSOLUTE_Y),
    (OP_AND_IZX, "AND", _M.INDEXED_INDIRECT),
    (OP_AND_IZY, "AND", _M.INDIRECT_INDEXED),
    (OP_ASL_ACC, "ASL", _M.ACCUMULATOR),
    (OP_ASL_ZP, "ASL", _M.ZERO_PAGE),
    (OP_ASL_ZPX, "ASL", _M.ZERO_PAGE_X),
    (OP_ASL_ABS, "ASL", _M.ABSOLUTE),
    (OP_ASL_ABX, "ASL", _M.ABSOLUTE_X),
    (OP_BCC_REL, "BCC", _M.RELATIVE),
    (OP_BCS_REL, "BCS", _M.RELATIVE),
    (OP_BEQ_REL, "BEQ", _M.RELATIVE),
    (OP_BMI_REL, "BMI", _M.RELATIVE),
    (OP_BNE_REL, "BNE", _M.RELATIVE),
    (OP_BPL_REL, "BPL", _M.RELATIVE),
    (OP_BVC_REL, "BVC", _M.RELATIVE),
    (OP_BVS_REL, "BVS", _M.RELATIVE),
    (OP_BIT_ZP, "BIT", _M.ZERO_PAGE),
    (OP_BIT_ABS, "BIT", _M.ABSOLUTE),
    (OP_BRK_IMP, "BRK", _M.IMPLIED),
    (OP_CLC_IMP, "CLC", _M.IMPLIED),
    (OP_CLD_IMP, "CLD", _M.IMPLIED),
    (OP_CLI_IMP, "CLI", _M.IMPLIED),
    (OP_CLV_IMP, "CLV", _M.IMPLIED),
    (OP_CMP_IMM, "CMP", _M.IMMEDIATE),
    (OP_CMP_ZP, "CMP", _M.ZERO_PAGE),
    (OP_CMP_ZPX, "CMP", _M.ZERO_PAGE_X),
    (OP_CMP_ABS, "CMP", _M.ABSOLUTE),
    (OP_CMP_ABX, "CMP", _M.ABSOLUTE_X),
    (OP_CMP_ABY, "CMP", _M.ABSOLUTE_Y),
    (OP_CMP_IZX, "CMP", _M.INDEXED_INDIRECT),
    (OP_CMP_IZY, "CMP", _M.INDIRECT_INDEXED),
    (OP_CPX_IMM, "CPX", _M.IMMEDIATE),
    (OP_CPX_ZP, "CPX", _M.ZERO_PAGE),
    (OP_CPX_ABS, "CPX", _M.ABSOLUTE),
    (OP_CPY_IMM, "CPY", _M.IMMEDIATE),
    (OP_CPY_ZP, "CPY", _M.ZERO_PAGE),
    (OP_CPY_ABS, "CPY", _M.ABSOLUTE),
    (OP_DEC_ZP, "DEC", _M.ZERO_PAGE, _E.DECREMENT),
    (OP_DEC_ZPX, "DEC", _M.ZERO_PAGE_X, _E.DECREMENT),
    (OP_DEC_ABS, "DEC", _M.ABSOLUTE, _E.DECREMENT),
    (OP_DEC_ABX, "DEC", _M.ABSOLUTE_X, _E.DECREMENT),
    (OP_DEX_IMP, "DEX", _M.IMPLIED, _E.DECREMENT, "x"),
    (OP_DEY_IMP, "DEY", _M.IMPLIED, _E.DECREMENT, "y"),
    (OP_EOR_IMM, "EOR", _M.IMMEDIATE),
    (OP_EOR_ZP, "EOR", _M.ZERO_PAGE),
    (OP_EOR_ZPX, "EOR", _M.ZERO_PAGE_X),
    (OP_EOR_ABS, "EOR", _M.ABSOLUTE),
    (OP_EOR_ABX, "EOR", _M.ABSOLUTE_X),
    (OP_EOR_ABY, "EOR", _M.ABSOLUTE_Y),
    (OP_EOR_IZX, "EOR", _M.INDEXED_INDIRECT),
    (OP_EOR_IZY, "EOR", _M.INDIRECT_INDEXED),
    (OP_INC_ZP, "INC", _M.ZERO_PAGE, _E.INCREMENT),
    (OP_INC_ZPX, "INC", _M.ZERO_PAGE_X, _E.INCREMENT),
    (OP_INC_ABS, "INC", _M.ABSOLUTE, _E.INCREMENT),
    (OP_INC_ABX, "INC", _M.ABSOLUTE_X, _E.INCREMENT),
    (OP_INX_IMP, "INX", _M.IMPLIED, _E.INCREMENT, "x"),
    (OP_INY_IMP, "INY", _M.IMPLIED, _E.INCREMENT, "y"),
    (OP_JMP_ABS, "JMP", _M.ABSOLUTE),
    (OP_JMP_IND, "JMP", _M.INDIRECT),
    (OP_JSR_ABS, "JSR", _M.ABSOLUTE),
    (OP_LDA_IMM, "LDA", _M.IMMEDIATE, _E.LOAD, "a"),
    (OP_LDA_ZP, "LDA", _M.ZERO_PAGE, _E.LOAD, "a"),
    (OP_LDA_ZPX, "LDA", _M.ZERO_PAGE_X, _E.LOAD, "a"),
    (OP_LDA_ABS, "LDA", _M.ABSOLUTE, _E.LOAD, "a"),
    (OP_LDA_ABX, "LDA", _M.ABSOLUTE_X, _E.LOAD, "a"),
    (OP_LDA_ABY, "LDA", _M.ABSOLUTE_Y, _E.LOAD, "a"),
    (OP_LDA_IZX, "LDA", _M.INDEXED_INDIRECT, _E.LOAD, "a"),
    (OP_LDA_IZY, "LDA", _M.INDIRECT_INDEXED, _E.LOAD, "a"),
    (OP_LDX_IMM, "LDX", _M.IMMEDIATE, _E.LOAD, "x"),
    (OP_LDX_ZP, "LDX", _M.ZERO_PAGE, _E.LOAD, "x"),
    (OP_LDX_ZPY, "LDX", _M.ZERO_PAGE_Y, _E.LOAD, "x"),
    (OP_LDX_ABS, "LDX", _M.ABSOLUTE, _E.LOAD, "x"),
    (OP_LDX_ABY, "LDX", _M.ABSOLUTE_Y, _E.LOAD, "x"),
    (OP_LDY_IMM, "LDY", _M.IMMEDIATE, _E.LOAD, "y"),
    (OP_LDY_ZP, "LDY", _M.ZERO_PAGE, _E.LOAD, "y"),
    (OP_LDY_ZPX, "LDY", _M.ZERO_PAGE_X, _E.LOAD, "y"),
    (OP_LDY_ABS, "LDY", _M.ABSOLUTE, _E.LOAD, "y"),
    (OP_LDY_ABX, "LDY", _M.ABSOLUTE_X, _E.LOAD, "y"),
    (OP_LSR_ACC, "LSR", _M.ACCUMULATOR),
    (OP_LSR_ZP, "LSR", _M.ZERO_PAGE),
    (OP_LSR_ZPX, "LSR", _M.ZERO_PAGE_X),
    (OP_LSR_ABS, "LSR", _M.ABSOLUTE),
    (OP_LSR_ABX, "LSR", _M.ABSOLUTE_X),
    (OP_NOP_IMP, "NOP", _M.IMPLIED),
    (OP_ORA_IMM, "ORA", _M.IMMEDIATE),
    (OP_ORA_ZP, "ORA", _M.ZERO_PAGE),
    (OP_ORA_ZPX, "ORA", _M.ZERO_PAGE_X),
    (OP_ORA_ABS, "ORA", _M.ABSOLUTE),
    (OP_ORA_ABX, "ORA", _M.ABSOLUTE_X),
    (OP_ORA_ABY, "ORA", _M.ABSOLUTE_Y),
    (OP_ORA_IZX, "ORA", _M.INDEXED_INDIRECT),
    (OP_ORA_IZY, "ORA", _M.INDIRECT_INDEXED),
    (OP_PHA_IMP, "PHA", _M.IMPLIED),
    (OP_PHP_IMP, "PHP", _M.IMPLIED),
    (OP_PLA_IMP, "PLA", _M.IMPLIED),
    (OP_PLP_IMP, "PLP", _M.IMPLIED),
    (OP_ROL_ACC, "ROL", _M.ACCUMULATOR),
    (OP_ROL_ZP, "ROL", _M.ZERO_PAGE),
    (OP_ROL_ZPX, "ROL", _M.ZERO_PAGE_X),
    (OP_ROL_ABS, "ROL", _M.ABSOLUTE),
    (OP_ROL_ABX, "ROL", _M.ABSOLUTE_X),
    (OP_ROR_ACC, "ROR", _M.ACCUMULATOR),
    (OP_ROR_ZP, "ROR", _M.ZERO_PAGE),
    (OP_ROR_ZPX, "ROR", _M.ZERO_PAGE_X),
    (OP_ROR_ABS, "ROR", _M.ABSOLUTE),
    (OP_ROR_ABX, "ROR", _M.ABSOLUTE_X),
    (OP_RTI_IMP, "RTI", _M.IMPLIED),
    (OP_RTS_IMP, "RTS", _M.IMPLIED),
    (OP_SBC_IMM, "SBC", _M.IMMEDIATE),
    (OP_SBC_ZP, "SBC", _M.ZERO_PAGE),
    (OP_SBC_ZPX, "SBC", _M.ZERO_PAGE_X),
    (OP_SBC_ABS, "SBC", _M.ABSOLUTE),
    (OP_SBC_ABX, "SBC", _M.ABSOLUTE_X),
    (OP_SBC_ABY, "SBC", _M.ABSOLUTE_Y),
    (OP_SBC_IZX, "SBC", _M.INDEXED_INDIRECT),
    (OP_SBC_IZY, "SBC", _M.INDIRECT_INDEXED),
    (OP_SEC_IMP, "SEC", _M.IMPLIED),
    (OP_SED_IMP, "SED", _M.IMPLIED),
    (OP_SEI_IMP, "SEI", _M.IMPLIED),
    (OP_STA_ZP, "STA", _M.ZERO_PAGE),
    (OP_STA_ZPX, "STA", _M.ZERO_PAGE_X),
    (OP_STA_ABS, "STA", _M.ABSOLUTE),
    (OP_STA_ABX, "STA", _M.ABSOLUTE_X),
    (OP_STA_ABY, "STA", _M.ABSOLUTE_Y),
    (OP_STA_IZX, "STA", _M.INDEXED_INDIRECT),
    (OP_STA_IZY, "STA", _M.INDIRECT_INDEXED),
    (OP_STX_ZP, "STX", _M.ZERO_PAGE),
    (OP_STX_ZPY, "STX", _M.ZERO_PAGE_Y),
    (OP_STX_ABS, "STX", _M.ABSOLUTE),
    (OP_STY_ZP, "STY", _M.ZERO_PAGE),
    (OP_STY_ZPX, "STY", _M.ZERO_PAGE_X),
    (OP_STY_ABS, "STY", _M.ABSOLUTE),
    (OP_TAX_IMP, "TAX", _M.IMPLIED, _E.TRANSFER, "x", "a"),
    (OP_TAY_IMP, "TAY", _M.IMPLIED, _E.TRANSFER, "y", "a"),
    (OP_TSX_IMP, "TSX", _M.IMPLIED, _E.TRANSFER, "x", "s"),
    (OP_TXA_IMP, "TXA", _M.IMPLIED, _E.TRANSFER, "a", "x"),
    (OP_TXS_IMP, "TXS", _M.IMPLIED, _E.TRANSFER, "s", "x"),
    (OP_TYA_IMP, "TYA", _M.IMPLIED, _E.TRANSFER, "a", "y"),
)


class OpcodeTable:
    """Total mapping from opcode byte to :class:`OpcodeDescriptor`."""

    def __init__(self, definitions: Iterable[Sequence]) -> None:
        self._entries: List[OpcodeDescriptor] = [ILLEGAL_OPCODE] * 256
        self._count = 0
        for definition in definitions:
            self._register(OpcodeDescriptor(*definition))

    def _register(self, descriptor: OpcodeDescriptor) -> None:
        opcode = descriptor.opcode
        if not 0 <= opcode <= 0xFF:
            raise OpcodeTableError(f"opcode out of range: {opcode!r}")
        existing = self._entries[opcode]
        if existing is not ILLEGAL_OPCODE:
            raise OpcodeTableError(
                f"duplicate opcode 0x{opcode:02X}: {existing.mnemonic} and {descriptor.mnemonic}"
            )
        self._entries[opcode] = descriptor
        self._count += 1

    def lookup(self, opcode: int) -> OpcodeDescriptor:
        return self._entries[opcode & 0xFF]

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[OpcodeDescriptor]:
        return (entry for entry in self._entries if entry is not ILLEGAL_OPCODE)

    def mnemonics(self) -> List[str]:
        return sorted({entry.mnemonic for entry in self})


OPCODE_TABLE = OpcodeTable(NMOS_DEFINITIONS)


__all__ = [
    "AddressMode",
    "INSTRUCTION_SIZES",
    "ILLEGAL_OPCODE",
    "NMOS_DEFINITIONS",
    "OPCODE_TABLE",
    "OpcodeDescriptor",
    "OpcodeTable",
    "OpcodeTableError",
    "RegisterEffect",
]
