"""pygame front-end booting a Commodore ROM set on the 6502 core."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Iterable, Optional

from sim6502.cpu.core import CPU6502
from sim6502.frontend.keyboard import KEY_BACKSPACE, KEY_ESCAPE, KEY_NEWLINE, KeyboardBuffer
from sim6502.frontend.screen import ScreenDisplay
from sim6502.loader import ProgramLoadError
from sim6502.machines import PRESETS, MachinePreset, boot_machine, run_frame

BASE_CAPTION = "sim6502"


def key_code_from_event(event) -> Optional[int]:
    """Return the host key code for a pygame KEYDOWN event, if it has one."""

    import pygame  # type: ignore

    if event.key == pygame.K_ESCAPE:
        return KEY_ESCAPE
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        return KEY_NEWLINE
    if event.key == pygame.K_BACKSPACE:
        return KEY_BACKSPACE
    text = getattr(event, "unicode", "")
    if text and len(text) == 1 and ord(text) < 0x80:
        return ord(text)
    return None


def _pygame_loop(preset: MachinePreset, cpu: CPU6502, *, fps: int, font_size: int) -> None:
    import pygame  # type: ignore

    pygame.init()
    display = ScreenDisplay(cpu.memory, preset.layout)
    font = pygame.font.SysFont(ScreenDisplay.FONT_NAME, font_size)
    surface = display.render_pygame_surface(font)
    screen = pygame.display.set_mode(surface.get_size())
    base_caption = f"{BASE_CAPTION} | {preset.name}"
    pygame.display.set_caption(base_caption)
    clock = pygame.time.Clock()
    keyboard = KeyboardBuffer(cpu.memory)
    halted_reported = False

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue
            if event.type == pygame.KEYDOWN:
                code = key_code_from_event(event)
                if code is not None and keyboard.handle_key(code):
                    running = False

        run_frame(cpu, preset)
        if cpu.halted and not halted_reported:
            halted_reported = True
            pygame.display.set_caption(f"{base_caption} | halted at {cpu.registers.pc:04X}")

        screen.blit(display.render_pygame_surface(font), (0, 0))
        pygame.display.flip()
        clock.tick(fps)

    pygame.quit()


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="6502 character-screen front-end")
    parser.add_argument("--machine", choices=sorted(PRESETS), default="vic20", help="Machine preset to boot")
    parser.add_argument("--rom-dir", default="roms", help="Directory holding the ROM images (default: roms)")
    parser.add_argument("--fps", type=int, default=30, help="Target frames per second")
    parser.add_argument("--font-size", type=int, default=16, help="Font size in points")
    parser.add_argument(
        "--instructions",
        type=int,
        default=None,
        help="Instructions executed per frame (defaults to the preset value)",
    )
    parser.add_argument("--trace", type=str, default=None, help="Trace from the given hex address")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.fps <= 0:
        raise SystemExit("fps must be positive")
    if args.font_size <= 0:
        raise SystemExit("font size must be positive")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    preset = PRESETS[args.machine]
    if args.instructions is not None:
        if args.instructions <= 0:
            raise SystemExit("instructions per frame must be positive")
        preset = replace(preset, instructions_per_frame=args.instructions)

    try:
        _memory, cpu, _info = boot_machine(preset, args.rom_dir)
    except ProgramLoadError as exc:
        print(f"Failed to load ROM: {exc}", file=sys.stderr)
        return 1

    if args.trace is not None:
        try:
            cpu.enable_trace(int(args.trace, 16))
        except ValueError:
            parser.error(f"invalid trace address: {args.trace}")

    _pygame_loop(preset, cpu, fps=args.fps, font_size=args.font_size)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
