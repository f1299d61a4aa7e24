"""Loading code snippets and binary images into the address space."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from sim6502.memory import AddressSpace

logger = logging.getLogger(__name__)


class ProgramLoadError(RuntimeError):
    """Raised when a program or ROM image cannot be placed in memory."""


@dataclass(frozen=True)
class Snippet:
    """A block of bytes destined for a fixed address."""

    address: int
    data: bytes
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def end(self) -> int:
        return self.address + len(self.data) - 1


@dataclass
class AddressRegion:
    start: int
    end: int
    comment: str = ""
    read_only: bool = False


@dataclass
class ProgramInfo:
    memory: AddressSpace
    name: str = ""
    address_regions: List[AddressRegion] = field(default_factory=list)
    path: Optional[Path] = None

    def add_region(self, start: int, end: int, comment: str = "", *, read_only: bool = False) -> None:
        self.address_regions.append(AddressRegion(start, end, comment, read_only))

    @property
    def size(self) -> int:
        return sum(region.end - region.start + 1 for region in self.address_regions)


def _place(memory: AddressSpace, address: int, data: bytes, label: str) -> None:
    try:
        memory.load(address, data)
    except ValueError as exc:
        raise ProgramLoadError(f"{label}: {exc}") from exc


def load_snippets(
    memory: AddressSpace, snippets: Iterable[Snippet], *, name: str = ""
) -> ProgramInfo:
    """Copy every snippet into memory and describe the regions written."""

    info = ProgramInfo(memory=memory, name=name)
    for snippet in snippets:
        if not snippet.data:
            continue
        logger.info(
            "Loading %5d bytes @ 0x%04X - %s", len(snippet.data), snippet.address, snippet.name
        )
        _place(memory, snippet.address, snippet.data, snippet.name or f"snippet@{snippet.address:04X}")
        info.add_region(snippet.address, snippet.end, snippet.name)
    return info


def load_binary(
    memory: AddressSpace,
    path: str | Path,
    address: int,
    *,
    read_only: bool = False,
    info: Optional[ProgramInfo] = None,
) -> ProgramInfo:
    """Load a raw binary file at ``address``.

    With ``read_only`` the loaded range is protected so that later writes
    from running code are ignored, as they are for ROM on the real hardware.
    """

    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise ProgramLoadError(f"cannot read {file_path}: {exc}") from exc
    if not data:
        raise ProgramLoadError(f"{file_path} is empty")

    _place(memory, address, data, str(file_path))
    end = address + len(data) - 1
    if read_only:
        memory.protect(address, end)
    logger.info("Loaded %d bytes from %s @ 0x%04X", len(data), file_path, address)

    if info is None:
        info = ProgramInfo(memory=memory, name=file_path.stem, path=file_path)
    info.add_region(address, end, file_path.name, read_only=read_only)
    return info

