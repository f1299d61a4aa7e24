"""Disassembly and instruction trace output."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterator, List, Optional, Tuple

from sim6502.cpu.addressing import to_signed8
from sim6502.cpu.opcodes import OPCODE_TABLE, AddressMode, OpcodeTable
from sim6502.memory import ADDRESS_MASK, Addressable

logger = logging.getLogger("sim6502.trace")

_OPERAND_FORMATS = {
    AddressMode.IMPLIED: "",
    AddressMode.ACCUMULATOR: "A",
    AddressMode.IMMEDIATE: "#${byte:02X}",
    AddressMode.ZERO_PAGE: "${byte:02X}",
    AddressMode.ZERO_PAGE_X: "${byte:02X},X",
    AddressMode.ZERO_PAGE_Y: "${byte:02X},Y",
    AddressMode.RELATIVE: "${target:04X}",
    AddressMode.ABSOLUTE: "${word:04X}",
    AddressMode.ABSOLUTE_X: "${word:04X},X",
    AddressMode.ABSOLUTE_Y: "${word:04X},Y",
    AddressMode.INDIRECT: "(${word:04X})",
    AddressMode.INDEXED_INDIRECT: "(${byte:02X},X)",
    AddressMode.INDIRECT_INDEXED: "(${byte:02X}),Y",
}


def disassemble(
    memory: Addressable, pc: int, table: OpcodeTable = OPCODE_TABLE
) -> Tuple[str, int]:
    """Disassemble the instruction at ``pc``.

    Returns the formatted line (``"1000  A2 22     LDX #$22"``) and the size
    of the instruction in bytes. Unknown opcodes render as ``.byte``.
    """

    pc &= ADDRESS_MASK
    opcode = memory.read_byte(pc)
    descriptor = table.lookup(opcode)
    if not descriptor.legal:
        return f"{pc:04X}  {opcode:02X}        .byte ${opcode:02X}", 1

    size = descriptor.size
    raw = [memory.read_byte((pc + offset) & ADDRESS_MASK) for offset in range(size)]
    byte = raw[1] if size > 1 else 0
    word = (raw[2] << 8) | byte if size > 2 else byte
    target = (pc + 2 + to_signed8(byte)) & ADDRESS_MASK
    operand = _OPERAND_FORMATS[descriptor.mode].format(byte=byte, word=word, target=target)
    text = " ".join(f"{value:02X}" for value in raw)
    line = f"{pc:04X}  {text:<8}  {descriptor.mnemonic}"
    if operand:
        line += f" {operand}"
    return line, size


def disassemble_range(memory: Addressable, start: int, end: int) -> Iterator[str]:
    address = start & ADDRESS_MASK
    while address <= end:
        line, size = disassemble(memory, address)
        yield line
        address += size


def format_registers(registers, flags) -> str:
    return (
        f"A={registers.a:02X} X={registers.x:02X} Y={registers.y:02X} "
        f"S={registers.s:02X} P={flags.describe()}"
    )


class Tracer:
    """Per-instruction trace with a bounded history.

    With a ``start_address`` the tracer stays quiet until the program
    counter first reaches that address.
    """

    HISTORY_LENGTH = 256
    LINE_WIDTH = 30

    def __init__(
        self,
        memory: Addressable,
        *,
        start_address: Optional[int] = None,
        history_length: int = HISTORY_LENGTH,
        sink: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.memory = memory
        self.start_address = None if start_address is None else start_address & ADDRESS_MASK
        self.active = start_address is None
        self.history: deque[str] = deque(maxlen=history_length)
        self._sink = sink

    def record(self, pc: int, registers, flags) -> Optional[str]:
        if not self.active:
            if (pc & ADDRESS_MASK) != self.start_address:
                return None
            self.active = True
        text, _ = disassemble(self.memory, pc)
        line = f"{text:<{self.LINE_WIDTH}}{format_registers(registers, flags)}"
        self.history.append(line)
        if self._sink is not None:
            self._sink(line)
        else:
            logger.info(line)
        return line

    def lines(self) -> List[str]:
        return list(self.history)
