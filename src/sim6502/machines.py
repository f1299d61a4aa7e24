"""Presets for the Commodore machines the screen front-end can boot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from sim6502.cpu.core import CPU6502
from sim6502.frontend.screen import ScreenLayout
from sim6502.loader import ProgramInfo, load_binary
from sim6502.memory import AddressSpace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RomImage:
    filename: str
    address: int
    read_only: bool = True


@dataclass(frozen=True)
class MachinePreset:
    name: str
    description: str
    roms: Tuple[RomImage, ...]
    layout: ScreenLayout
    instructions_per_frame: int = 100_000
    frame_pokes: Tuple[Tuple[int, int], ...] = ()


PRESETS: Dict[str, MachinePreset] = {
    "vic20": MachinePreset(
        name="vic20",
        description="VIC-20 from a single 32K image at 0x8000",
        # The combined image spans the I/O block, so it stays writable.
        roms=(RomImage("vic20rom.bin", 0x8000, read_only=False),),
        layout=ScreenLayout(width=22, height=23, base_address=0x1000),
    ),
    "vic20-split": MachinePreset(
        name="vic20-split",
        description="VIC-20 from separate character, BASIC and KERNAL ROMs",
        roms=(
            RomImage("characters.bin", 0x8000),
            RomImage("basic.bin", 0xC000),
            RomImage("kernal.bin", 0xE000),
        ),
        layout=ScreenLayout(width=22, height=23, base_address=0x1000),
    ),
    "c64": MachinePreset(
        name="c64",
        description="C64 BASIC/KERNAL image at 0xA000",
        roms=(RomImage("c64.bin", 0xA000, read_only=False),),
        layout=ScreenLayout(width=40, height=25, base_address=0x0400),
        # Raster line register; the KERNAL waits for it during start-up.
        frame_pokes=((0xD012, 0x00),),
    ),
}


def get_preset(name: str) -> MachinePreset:
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown machine: {name}") from None


def boot_machine(preset: MachinePreset, rom_dir: str | Path) -> Tuple[AddressSpace, CPU6502, ProgramInfo]:
    """Load the preset's ROMs and reset the CPU through the reset vector."""

    memory = AddressSpace()
    memory.reset()
    directory = Path(rom_dir)
    info = ProgramInfo(memory=memory, name=preset.name, path=directory)
    for rom in preset.roms:
        load_binary(memory, directory / rom.filename, rom.address, read_only=rom.read_only, info=info)
    cpu = CPU6502(memory)
    cpu.reset()
    logger.info("%s booting at 0x%04X", preset.name, cpu.registers.pc)
    return memory, cpu, info


def run_frame(cpu: CPU6502, preset: MachinePreset) -> int:
    """Run one frame's worth of instructions, then apply the preset pokes."""

    cpu.clear_instruction_count()
    executed = cpu.run(preset.instructions_per_frame)
    for address, value in preset.frame_pokes:
        cpu.memory.write_byte(address, value)
    return executed
