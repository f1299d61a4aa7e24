"""Keyboard input injected through the KERNAL keyboard buffer."""

from __future__ import annotations

from typing import Optional

from sim6502.memory import Addressable

KEY_ESCAPE = 27
KEY_NEWLINE = 10
KEY_BACKSPACE = 8
KEY_DELETE = 127

PETSCII_RETURN = 13
PETSCII_DELETE = 0x14


def translate_key(code: int) -> int:
    """Map a host key code to the PETSCII value the KERNAL expects."""

    if code == KEY_NEWLINE:
        return PETSCII_RETURN
    if code in (KEY_BACKSPACE, KEY_DELETE):
        return PETSCII_DELETE
    if ord("a") <= code <= ord("z"):
        return code - 0x20
    return code & 0xFF


class KeyboardBuffer:
    """Places one key at a time into the keyboard queue.

    The KERNAL reads pending keys from the buffer at ``buffer_address`` and
    the number of queued keys from ``count_address``.
    """

    def __init__(
        self,
        memory: Addressable,
        *,
        buffer_address: int = 0x0277,
        count_address: int = 0x00C6,
    ) -> None:
        self.memory = memory
        self.buffer_address = buffer_address
        self.count_address = count_address
        self.last_key: Optional[int] = None

    def inject(self, value: int) -> None:
        self.memory.write_byte(self.buffer_address, value & 0xFF)
        self.memory.write_byte(self.count_address, 1)
        self.last_key = value & 0xFF

    def pending(self) -> int:
        return self.memory.read_byte(self.count_address)

    def handle_key(self, code: int) -> bool:
        """Queue ``code``; return ``True`` when the key asks to quit."""

        if code == KEY_ESCAPE:
            return True
        self.inject(translate_key(code))
        return False
