"""Built-in 6502 demo programs.

Each program is a list of snippets (code and data) with its entry point at
0x1000. ``stop_address`` is the address just past the final instruction;
the runner uses it as a breakpoint so execution does not fall through into
zeroed memory (which decodes as BRK).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from sim6502.cpu.opcodes import (
    OP_ADC_IMM,
    OP_ADC_ZP,
    OP_ADC_ZPX,
    OP_BCC_REL,
    OP_BCS_REL,
    OP_BEQ_REL,
    OP_BMI_REL,
    OP_BNE_REL,
    OP_CLC_IMP,
    OP_CMP_ABS,
    OP_CMP_IMM,
    OP_CMP_ZP,
    OP_CPX_ABS,
    OP_CPX_IMM,
    OP_CPX_ZP,
    OP_CPY_ABS,
    OP_CPY_IMM,
    OP_CPY_ZP,
    OP_DEX_IMP,
    OP_DEY_IMP,
    OP_EOR_IMM,
    OP_INX_IMP,
    OP_INY_IMP,
    OP_JMP_ABS,
    OP_JSR_ABS,
    OP_LDA_ABX,
    OP_LDA_IMM,
    OP_LDA_ZP,
    OP_LDX_IMM,
    OP_LDY_IMM,
    OP_LSR_ACC,
    OP_NOP_IMP,
    OP_RTS_IMP,
    OP_SBC_ZP,
    OP_STA_ABX,
    OP_STA_ABY,
    OP_STA_ZP,
    OP_STX_ZP,
    OP_STY_ZP,
    OP_TAY_IMP,
    OP_TYA_IMP,
)
from sim6502.loader import Snippet

ENTRY_POINT = 0x1000


@dataclass(frozen=True)
class Program:
    name: str
    description: str
    snippets: Tuple[Snippet, ...]
    stop_address: int
    entry_point: int = ENTRY_POINT
    dump_ranges: Tuple[Tuple[int, int], ...] = field(default_factory=tuple)


LDXYI_AND_DEC = Program(
    name="ldxyi_and_dec",
    description="Load X/Y immediate, increment and decrement them back",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDX_IMM, 0x22,
            OP_LDY_IMM, 0x44,
            OP_INX_IMP,
            OP_INX_IMP,
            OP_INY_IMP,
            OP_INY_IMP,
            OP_DEY_IMP,
            OP_DEY_IMP,
            OP_DEX_IMP,
            OP_DEX_IMP,
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x100D,
)

COUNTDOWN_Y_FROM_10 = Program(
    name="countdown_y_from_10",
    description="Count Y down from 10 with BNE, then bump X twice",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDX_IMM, 0x00,
            OP_LDY_IMM, 0x0A,
            OP_DEY_IMP,              # 0x1004
            OP_BNE_REL, 0xFD,        # -> 0x1004
            OP_INX_IMP,
            OP_INX_IMP,
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x100A,
)

INC_STOPIF_GREATEREQ = Program(
    name="inc_stopif_greatereq",
    description="Add increasing step values until the sum carries, for Y = 2..255",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDX_IMM, 0xFF,
            OP_STX_ZP, 0xD0,
            OP_LDY_IMM, 0x02,
            OP_CLC_IMP,              # 0x1006
            OP_STY_ZP, 0xD1,
            OP_LDA_IMM, 0x00,
            OP_ADC_ZP, 0xD1,         # 0x100B
            OP_BCC_REL, 0xFC,        # -> 0x100B
            OP_INY_IMP,
            OP_BEQ_REL, 0x03,        # -> 0x1015
            OP_JMP_ABS, 0x06, 0x10,
            OP_NOP_IMP,              # 0x1015
        ]), "main"),
    ),
    stop_address=0x1016,
)

COMPARE = Program(
    name="compare",
    description="CMP/CPX/CPY in immediate, zero page and absolute modes",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDA_IMM, 0x00,
            OP_LDX_IMM, 0x00,
            OP_LDY_IMM, 0x00,
            OP_CPX_IMM, 0xFF,
            OP_CPX_ZP, 0x10,
            OP_CPX_ABS, 0x00, 0x20,
            OP_CPY_IMM, 0xFF,
            OP_CPY_ZP, 0x10,
            OP_CPY_ABS, 0x00, 0x20,
            OP_CMP_IMM, 0xFF,
            OP_CMP_ZP, 0x10,
            OP_CMP_ABS, 0x00, 0x20,
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x101C,
)

ADD_TWO_16_BIT_NUMBERS = Program(
    name="add_two_16_bit_numbers",
    description="0xABCD + 0x9876 with the sum stored at 0x24/0x25",
    snippets=(
        Snippet(0x0020, bytes([0xCD, 0xAB, 0x76, 0x98]), "operands"),
        Snippet(0x1000, bytes([
            OP_CLC_IMP,
            OP_LDA_ZP, 0x20,
            OP_ADC_ZP, 0x22,
            OP_STA_ZP, 0x24,
            OP_LDA_ZP, 0x21,
            OP_ADC_ZP, 0x23,
            OP_STA_ZP, 0x25,
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x100E,
    dump_ranges=((0x0020, 0x0025),),
)

FIBONACCI = Program(
    name="fibonacci",
    description="First ten Fibonacci numbers stored at 0x2000, F(10) left in 0xF0",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDA_IMM, 0x00,
            OP_STA_ZP, 0xF0,         # lower number
            OP_LDA_IMM, 0x01,
            OP_STA_ZP, 0xF1,         # higher number
            OP_LDX_IMM, 0x00,
            OP_LDA_ZP, 0xF1,         # 0x100A loop
            OP_STA_ABX, 0x00, 0x20,
            OP_STA_ZP, 0xF2,         # old higher number
            OP_ADC_ZP, 0xF0,
            OP_STA_ZP, 0xF1,         # new higher number
            OP_LDA_ZP, 0xF2,
            OP_STA_ZP, 0xF0,         # new lower number
            OP_INX_IMP,
            OP_CPX_IMM, 0x0A,        # stop at F(10)
            OP_BMI_REL, 0xEC,        # -> 0x100A
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x101F,
    dump_ranges=((0x00F0, 0x00F2), (0x2000, 0x200F)),
)

SIEVE_OF_ERATOSTHENES = Program(
    name="sieve_of_eratosthenes",
    description="Primes below 255 copied to 0x3000, count left in A",
    snippets=(
        Snippet(0x1000, bytes([
            OP_LDA_IMM, 0xFF,
            OP_STA_ZP, 0xD0,         # n
            OP_LDA_IMM, 0x00,
            OP_LDX_IMM, 0x00,
            OP_STA_ABX, 0x00, 0x20,  # 0x1008 setup: table[x] = x
            OP_ADC_IMM, 0x01,
            OP_INX_IMP,
            OP_CPX_ZP, 0xD0,
            OP_BEQ_REL, 0x03,        # -> 0x1015
            OP_JMP_ABS, 0x08, 0x10,
            OP_LDX_IMM, 0x02,        # 0x1015
            OP_LDA_ABX, 0x00, 0x20,  # 0x1017 sieve: next non-zero entry
            OP_INX_IMP,
            OP_CPX_ZP, 0xD0,
            OP_BEQ_REL, 0x15,        # -> 0x1034
            OP_CMP_IMM, 0x00,
            OP_BEQ_REL, 0xF4,        # -> 0x1017
            OP_STA_ZP, 0xD1,         # current prime
            OP_CLC_IMP,              # 0x1025 mark multiples
            OP_ADC_ZP, 0xD1,
            OP_BCS_REL, 0xED,        # past the table -> 0x1017
            OP_TAY_IMP,
            OP_LDA_IMM, 0x00,
            OP_STA_ABY, 0x00, 0x20,
            OP_TYA_IMP,
            OP_JMP_ABS, 0x25, 0x10,
            OP_LDX_IMM, 0x01,        # 0x1034 sieved
            OP_LDY_IMM, 0x00,
            OP_INX_IMP,              # 0x1038 copy primes
            OP_CPX_ZP, 0xD0,
            OP_BEQ_REL, 0x0E,        # -> 0x104B
            OP_LDA_ABX, 0x00, 0x20,
            OP_CMP_IMM, 0x00,
            OP_BEQ_REL, 0xF4,        # -> 0x1038
            OP_STA_ABY, 0x00, 0x30,
            OP_INY_IMP,
            OP_JMP_ABS, 0x38, 0x10,
            OP_TYA_IMP,              # 0x104B number of primes
            OP_NOP_IMP,
        ]), "main"),
    ),
    stop_address=0x104D,
    dump_ranges=((0x3000, 0x303F),),
)

WEEKDAY = Program(
    name="weekday",
    description="Day of the week for 1967-05-02 (0 = Sunday) left in A",
    snippets=(
        Snippet(0x0020, bytes([6, 1, 5, 6, 3, 1, 5, 3, 0, 4, 2, 6, 4]), "month table"),
        Snippet(0x1000, bytes([
            OP_LDY_IMM, 1967 - 1900,
            OP_LDX_IMM, 5,           # month
            OP_LDA_IMM, 2,           # day
            OP_JSR_ABS, 0x00, 0x15,
            OP_NOP_IMP,
        ]), "main"),
        Snippet(0x1500, bytes([
            OP_CPX_IMM, 3,           # year starts in March
            OP_BCS_REL, 0x01,        # -> 0x1505
            OP_DEY_IMP,
            OP_EOR_IMM, 0x7F,        # 0x1505
            OP_CPY_IMM, 200,         # carry set in the 22nd century
            OP_ADC_ZPX, 0x20,        # day + month offset
            OP_STA_ZP, 0x20,
            OP_TYA_IMP,
            OP_JSR_ABS, 0x00, 0x20,  # mod 7
            OP_SBC_ZP, 0x20,
            OP_STA_ZP, 0x20,
            OP_TYA_IMP,
            OP_LSR_ACC,
            OP_LSR_ACC,
            OP_CLC_IMP,
            OP_ADC_ZP, 0x20,
            OP_JSR_ABS, 0x00, 0x20,
            OP_RTS_IMP,
        ]), "weekday"),
        Snippet(0x2000, bytes([
            OP_ADC_IMM, 7,           # returns (A + 3) mod 7
            OP_BCC_REL, 0xFC,        # -> 0x2000
            OP_RTS_IMP,
        ]), "mod7"),
    ),
    stop_address=0x100A,
)

PROGRAMS: List[Program] = [
    LDXYI_AND_DEC,
    COUNTDOWN_Y_FROM_10,
    INC_STOPIF_GREATEREQ,
    COMPARE,
    ADD_TWO_16_BIT_NUMBERS,
    FIBONACCI,
    SIEVE_OF_ERATOSTHENES,
    WEEKDAY,
]


def get_program(key: int | str) -> Program:
    """Look a program up by index in :data:`PROGRAMS` or by name."""

    if isinstance(key, int):
        if not 0 <= key < len(PROGRAMS):
            raise KeyError(f"no program with index {key}")
        return PROGRAMS[key]
    for program in PROGRAMS:
        if program.name == key:
            return program
    raise KeyError(f"unknown program: {key}")
