"""pygame dependent tests for ScreenDisplay."""

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
pygame = pytest.importorskip("pygame")

from sim6502.frontend.screen import ScreenDisplay, ScreenLayout
from sim6502.memory import AddressSpace


def test_render_pygame_surface_size_and_background():
    pygame.font.init()
    font = pygame.font.Font(None, 16)
    cell_width, cell_height = font.size("M")
    memory = AddressSpace()
    memory.load(0x0400, bytes([0x20] * 8))
    display = ScreenDisplay(memory, ScreenLayout(width=4, height=2, base_address=0x0400))

    surface = display.render_pygame_surface(font, show_cursor=False)

    assert surface.get_width() == 4 * cell_width
    assert surface.get_height() == 2 * cell_height
    assert tuple(surface.get_at((0, 0)))[:3] == ScreenDisplay.BACKGROUND


def test_render_pygame_surface_draws_cursor():
    pygame.font.init()
    font = pygame.font.Font(None, 16)
    memory = AddressSpace()
    memory.load(0x0400, bytes([0x20] * 8))
    display = ScreenDisplay(memory, ScreenLayout(width=4, height=2, base_address=0x0400))

    surface = display.render_pygame_surface(font)

    assert tuple(surface.get_at((0, 0)))[:3] == ScreenDisplay.FOREGROUND
