"""Program and ROM image loading helpers."""

from sim6502.loader.program import (
    AddressRegion,
    ProgramInfo,
    ProgramLoadError,
    Snippet,
    load_binary,
    load_snippets,
)

__all__ = [
    "AddressRegion",
    "ProgramInfo",
    "ProgramLoadError",
    "Snippet",
    "load_binary",
    "load_snippets",
]
