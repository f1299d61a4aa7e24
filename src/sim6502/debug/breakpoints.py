"""Breakpoint conditions checked after each executed instruction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple


@dataclass
class Breakpoints:
    """Address and register-value halt conditions.

    When both an address set and a register triple are configured the
    breakpoint fires only if both match.
    """

    addresses: Set[int] = field(default_factory=set)
    registers: Optional[Tuple[int, int, int]] = None

    def add_address(self, address: int) -> None:
        self.addresses.add(address & 0xFFFF)

    def set_registers(self, a: int, x: int, y: int) -> None:
        self.registers = (a & 0xFF, x & 0xFF, y & 0xFF)

    def clear(self) -> None:
        self.addresses.clear()
        self.registers = None

    @property
    def enabled(self) -> bool:
        return bool(self.addresses) or self.registers is not None

    def matches(self, registers) -> bool:
        if not self.enabled:
            return False
        if self.addresses and (registers.pc & 0xFFFF) not in self.addresses:
            return False
        if self.registers is not None:
            return (registers.a, registers.x, registers.y) == self.registers
        return True
