"""Character-cell screen rendering for Commodore style machines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from sim6502.memory import ADDRESS_MASK, Addressable

_PUNCTUATION = {
    0x00: "@",
    0x1B: "[",
    0x1C: "$",  # pound sign
    0x1D: "]",
    0x1E: "|",  # up arrow
    0x1F: "-",  # left arrow
}


def screen_code_to_ascii(code: int) -> str:
    """Map a CBM screen code to a printable ASCII character."""

    code &= 0xFF
    if 0x01 <= code <= 0x1A:
        return chr(ord("A") + code - 0x01)
    if code in _PUNCTUATION:
        return _PUNCTUATION[code]
    if 0x20 <= code <= 0x3F:
        return chr(code)
    return "."


@dataclass(frozen=True)
class ScreenLayout:
    width: int
    height: int
    base_address: int
    cursor_row_address: int = 0xD6
    cursor_column_address: int = 0xD3

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("screen dimensions must be positive")
        if self.base_address + self.width * self.height > ADDRESS_MASK + 1:
            raise ValueError("screen memory does not fit in the address space")


class ScreenDisplay:
    """Reads screen memory and renders it as text or a pygame surface."""

    FOREGROUND = (0xA0, 0xA0, 0xFF)
    BACKGROUND = (0x40, 0x30, 0xC0)
    FONT_NAME = "Courier"
    FONT_SIZE = 16

    def __init__(self, memory: Addressable, layout: ScreenLayout) -> None:
        self.memory = memory
        self.layout = layout

    def render_text(self) -> List[str]:
        layout = self.layout
        rows: List[str] = []
        for row in range(layout.height):
            base = layout.base_address + row * layout.width
            rows.append(
                "".join(
                    screen_code_to_ascii(self.memory.read_byte((base + column) & ADDRESS_MASK))
                    for column in range(layout.width)
                )
            )
        return rows

    def cursor(self) -> Tuple[int, int]:
        """Cursor position (row, column) clamped to the visible screen."""

        row = self.memory.read_byte(self.layout.cursor_row_address)
        column = self.memory.read_byte(self.layout.cursor_column_address)
        return min(row, self.layout.height - 1), min(column, self.layout.width - 1)

    def render_pygame_surface(self, font=None, *, show_cursor: bool = True):
        """Render the screen into a pygame Surface.

        Parameters
        ----------
        font:
            ``pygame.font.Font`` used for the glyphs. A monospaced system
            font is created when omitted.
        show_cursor:
            Draw an inverse block at the cursor position.

        Returns
        -------
        pygame.Surface
            Surface sized ``width`` x ``height`` character cells.

        Raises
        ------
        RuntimeError
            If pygame is not available.
        """

        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required for render_pygame_surface") from exc

        if font is None:
            pygame.font.init()
            font = pygame.font.SysFont(self.FONT_NAME, self.FONT_SIZE)
        cell_width, cell_height = font.size("M")
        surface = pygame.Surface((self.layout.width * cell_width, self.layout.height * cell_height))
        surface.fill(self.BACKGROUND)
        for row, text in enumerate(self.render_text()):
            if not text.strip():
                continue
            rendered = font.render(text, True, self.FOREGROUND, self.BACKGROUND)
            surface.blit(rendered, (0, row * cell_height))
        if show_cursor:
            row, column = self.cursor()
            rect = (column * cell_width, row * cell_height, cell_width, cell_height)
            surface.fill(self.FOREGROUND, rect)
        return surface

