"""Operand resolution for the 6502 addressing modes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sim6502.cpu.opcodes import INSTRUCTION_SIZES, AddressMode
from sim6502.memory import ADDRESS_MASK, Addressable


@dataclass(frozen=True)
class Operand:
    """Decoded operand of a single instruction.

    ``byte`` and ``word`` are the raw bytes following the opcode and are
    always read, whatever the mode. ``address`` is the effective address,
    or ``None`` for implied, accumulator and immediate modes.
    """

    byte: int
    word: int
    address: Optional[int]
    size: int


def to_signed8(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


class AddressModeResolver:
    def __init__(self, memory: Addressable) -> None:
        self.memory = memory

    def _zero_page_word(self, pointer: int) -> int:
        lo = self.memory.read_byte(pointer & 0xFF)
        hi = self.memory.read_byte((pointer + 1) & 0xFF)
        return (hi << 8) | lo

    def resolve(self, pc: int, mode: AddressMode, x: int = 0, y: int = 0) -> Operand:
        pc &= ADDRESS_MASK
        byte = self.memory.read_byte((pc + 1) & ADDRESS_MASK)
        hi = self.memory.read_byte((pc + 2) & ADDRESS_MASK)
        word = (hi << 8) | byte
        size = INSTRUCTION_SIZES[mode]

        address: Optional[int]
        if mode in (AddressMode.IMPLIED, AddressMode.ACCUMULATOR, AddressMode.IMMEDIATE):
            address = None
        elif mode is AddressMode.ZERO_PAGE:
            address = byte
        elif mode is AddressMode.ZERO_PAGE_X:
            address = (byte + x) & 0xFF
        elif mode is AddressMode.ZERO_PAGE_Y:
            address = (byte + y) & 0xFF
        elif mode is AddressMode.ABSOLUTE:
            address = word
        elif mode is AddressMode.ABSOLUTE_X:
            address = (word + x) & ADDRESS_MASK
        elif mode is AddressMode.ABSOLUTE_Y:
            address = (word + y) & ADDRESS_MASK
        elif mode is AddressMode.INDIRECT:
            address = self.memory.read_word(word)
        elif mode is AddressMode.INDEXED_INDIRECT:
            address = self._zero_page_word(byte + x)
        elif mode is AddressMode.INDIRECT_INDEXED:
            address = (self._zero_page_word(byte) + y) & ADDRESS_MASK
        elif mode is AddressMode.RELATIVE:
            address = (pc + size + to_signed8(byte)) & ADDRESS_MASK
        else:  # pragma: no cover - enum is closed
            raise ValueError(f"unsupported addressing mode: {mode}")

        return Operand(byte=byte, word=word, address=address, size=size)
