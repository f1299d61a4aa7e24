"""6502 processor status register."""

from __future__ import annotations

from dataclasses import dataclass

FLAG_CARRY = 0x01
FLAG_ZERO = 0x02
FLAG_INTERRUPT = 0x04
FLAG_DECIMAL = 0x08
FLAG_BREAK = 0x10
FLAG_RESERVED = 0x20
FLAG_OVERFLOW = 0x40
FLAG_NEGATIVE = 0x80


@dataclass
class StatusFlags:
    """Status register kept as named booleans.

    Most instructions touch individual flags; PHP/PLP/BRK/RTI work on the
    packed byte, so :meth:`to_byte` and :meth:`from_byte` use the hardware
    bit order (C, Z, I, D, B, unused, V, N from bit 0 upwards).
    """

    carry: bool = False
    zero: bool = False
    interrupt_disable: bool = False
    decimal: bool = False
    break_: bool = False
    reserved: bool = False
    overflow: bool = False
    negative: bool = False

    def to_byte(self) -> int:
        value = 0x00
        if self.carry:
            value |= FLAG_CARRY
        if self.zero:
            value |= FLAG_ZERO
        if self.interrupt_disable:
            value |= FLAG_INTERRUPT
        if self.decimal:
            value |= FLAG_DECIMAL
        if self.break_:
            value |= FLAG_BREAK
        if self.reserved:
            value |= FLAG_RESERVED
        if self.overflow:
            value |= FLAG_OVERFLOW
        if self.negative:
            value |= FLAG_NEGATIVE
        return value

    def load_byte(self, value: int) -> None:
        """Overwrite every flag from a packed status byte."""

        self.carry = bool(value & FLAG_CARRY)
        self.zero = bool(value & FLAG_ZERO)
        self.interrupt_disable = bool(value & FLAG_INTERRUPT)
        self.decimal = bool(value & FLAG_DECIMAL)
        self.break_ = bool(value & FLAG_BREAK)
        self.reserved = bool(value & FLAG_RESERVED)
        self.overflow = bool(value & FLAG_OVERFLOW)
        self.negative = bool(value & FLAG_NEGATIVE)

    @classmethod
    def from_byte(cls, value: int) -> "StatusFlags":
        flags = cls()
        flags.load_byte(value)
        return flags

    def update_zero_negative(self, value: int) -> int:
        value &= 0xFF
        self.zero = value == 0
        self.negative = value & 0x80 != 0
        return value

    def clear(self) -> None:
        self.load_byte(0x00)

    def describe(self) -> str:
        """Return ``NV-BDIZC`` letters, lower case for clear flags."""

        packed = self.to_byte()
        letters = []
        for mask, name in (
            (FLAG_NEGATIVE, "N"),
            (FLAG_OVERFLOW, "V"),
            (FLAG_RESERVED, "-"),
            (FLAG_BREAK, "B"),
            (FLAG_DECIMAL, "D"),
            (FLAG_INTERRUPT, "I"),
            (FLAG_ZERO, "Z"),
            (FLAG_CARRY, "C"),
        ):
            letters.append(name if packed & mask else name.lower())
        return "".join(letters)
