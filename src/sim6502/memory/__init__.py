"""Flat 64K address space used by the 6502 core."""

from __future__ import annotations

import logging
from typing import Iterable, List, Protocol, Tuple

logger = logging.getLogger(__name__)

ADDRESS_MASK = 0xFFFF


class Addressable(Protocol):
    """Byte/word access contract consumed by the CPU."""

    def read_byte(self, address: int) -> int:
        ...

    def write_byte(self, address: int, value: int) -> None:
        ...

    def read_word(self, address: int) -> int:
        ...

    def write_word(self, address: int, value: int) -> None:
        ...


class AddressSpace:
    """65,536 bytes of RAM with optional read-only regions.

    Writes that land inside a protected region are dropped without error,
    which is how ROM images behave on the real machines. :meth:`load` is the
    privileged path used to place images and bypasses the protection.
    """

    SIZE = 0x10000
    RESET_VECTOR = 0xFFFC
    IRQ_VECTOR = 0xFFFE
    DEFAULT_ENTRY_POINT = 0x1000

    def __init__(self) -> None:
        self.data = bytearray(self.SIZE)
        self._read_only: List[Tuple[int, int]] = []
        self._debug = False

    def clear(self) -> None:
        self.data[:] = bytes(self.SIZE)

    def reset(self) -> None:
        """Zero memory and point the reset vector at the default entry point."""

        self.clear()
        self.data[self.RESET_VECTOR] = self.DEFAULT_ENTRY_POINT & 0xFF
        self.data[self.RESET_VECTOR + 1] = (self.DEFAULT_ENTRY_POINT >> 8) & 0xFF

    def protect(self, start: int, end: int) -> None:
        """Mark ``start``..``end`` (inclusive) as read-only."""

        start &= ADDRESS_MASK
        end &= ADDRESS_MASK
        if end < start:
            raise ValueError("protected range end must be >= start")
        self._read_only.append((start, end))

    def unprotect_all(self) -> None:
        self._read_only.clear()

    def is_read_only(self, address: int) -> bool:
        address &= ADDRESS_MASK
        return any(start <= address <= end for start, end in self._read_only)

    @property
    def read_only_regions(self) -> List[Tuple[int, int]]:
        return list(self._read_only)

    def read_byte(self, address: int) -> int:
        addr = address & ADDRESS_MASK
        value = self.data[addr]
        if self._debug:
            logger.debug("read_byte: addr=%04X val=%02X", addr, value)
        return value

    def write_byte(self, address: int, value: int) -> None:
        addr = address & ADDRESS_MASK
        if self._debug:
            logger.debug("write_byte: addr=%04X val=%02X", addr, value & 0xFF)
        if self._read_only and self.is_read_only(addr):
            return
        self.data[addr] = value & 0xFF

    def read_word(self, address: int) -> int:
        lo = self.read_byte(address)
        hi = self.read_byte((address + 1) & ADDRESS_MASK)
        return ((hi << 8) | lo) & ADDRESS_MASK

    def write_word(self, address: int, value: int) -> None:
        self.write_byte(address, value & 0xFF)
        self.write_byte((address + 1) & ADDRESS_MASK, (value >> 8) & 0xFF)

    def load(self, address: int, data: Iterable[int]) -> int:
        """Copy ``data`` into memory starting at ``address``.

        Returns the number of bytes written. The image must fit below the
        top of the address space.
        """

        payload = bytes(data)
        start = address & ADDRESS_MASK
        end = start + len(payload)
        if end > self.SIZE:
            raise ValueError(
                f"image of {len(payload)} bytes at 0x{start:04X} exceeds the 64K address space"
            )
        self.data[start:end] = payload
        return len(payload)

    def dump(self, address: int, length: int) -> bytes:
        start = address & ADDRESS_MASK
        return bytes(self.data[(start + offset) & ADDRESS_MASK] for offset in range(length))

    def enable_debug(self, enabled: bool) -> None:
        self._debug = enabled


__all__ = [
    "ADDRESS_MASK",
    "Addressable",
    "AddressSpace",
]
