"""Headless runner for 6502 programs and diagnostics."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from sim6502.config import Config, ConfigError, load_config
from sim6502.cpu.core import CPU6502
from sim6502.debug.trace import disassemble_range, format_registers
from sim6502.loader import ProgramLoadError, load_binary, load_snippets
from sim6502.memory import AddressSpace
from sim6502.programs import PROGRAMS, Program, get_program

DEFAULT_MAX_INSTRUCTIONS = 1_000_000
ADDRESS_MASK = 0xFFFF

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_BUDGET_EXHAUSTED = 2


@dataclass(frozen=True)
class DumpRange:
    """Inclusive memory range used for dumping."""

    start: int
    end: int

    def iter_addresses(self) -> Iterable[int]:
        for address in range(self.start, self.end + 1):
            yield address & ADDRESS_MASK


def _parse_hex(value: str) -> int:
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    elif text.startswith("$"):
        text = text[1:]
    if not text:
        raise ValueError("empty hexadecimal value")
    result = int(text, 16)
    if not (0 <= result <= ADDRESS_MASK):
        raise ValueError("hex value out of range")
    return result


def _parse_range(spec: str) -> DumpRange:
    start_str, sep, end_str = spec.partition(":")
    if not sep:
        raise ValueError("range specification must contain ':'")
    start = _parse_hex(start_str)
    end = _parse_hex(end_str)
    if end < start:
        raise ValueError("range end must be >= start")
    return DumpRange(start, end)


def _parse_registers(spec: str) -> Tuple[int, int, int]:
    parts = spec.split(",")
    if len(parts) != 3:
        raise ValueError("register breakpoint must be A,X,Y")
    a, x, y = (_parse_hex(part) for part in parts)
    if max(a, x, y) > 0xFF:
        raise ValueError("register values must fit in 8 bits")
    return a, x, y


def _merge_ranges(ranges: Sequence[DumpRange]) -> List[DumpRange]:
    if not ranges:
        return [DumpRange(0x0000, ADDRESS_MASK)]
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    merged: List[DumpRange] = []
    for current in ordered:
        if not merged:
            merged.append(current)
            continue
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = DumpRange(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def _format_hex_dump(memory, dump_ranges: Sequence[DumpRange]) -> str:
    lines: List[str] = []
    header = "ADDR " + " ".join(f"+{offset:X}" for offset in range(16))
    for index, dump_range in enumerate(dump_ranges):
        if index:
            lines.append("")
        lines.append(header)
        start_line = dump_range.start & ~0x0F
        end_line = dump_range.end | 0x0F
        for base in range(start_line, end_line + 1, 16):
            row = [f"{base & ADDRESS_MASK:04X}"]
            for offset in range(16):
                address = (base + offset) & ADDRESS_MASK
                row.append(f"{memory.read_byte(address):02X}")
            lines.append(" ".join(row))
    return "\n".join(lines)


def _write_dump(memory, dump_ranges: Sequence[DumpRange], *, target: Path | None, fmt: str) -> None:
    ranges = _merge_ranges(dump_ranges)
    if fmt == "bin":
        data = bytearray()
        for dump_range in ranges:
            for address in dump_range.iter_addresses():
                data.append(memory.read_byte(address))
        if target is None:
            sys.stdout.buffer.write(bytes(data))
            return
        target.write_bytes(bytes(data))
        return

    text = _format_hex_dump(memory, ranges)
    if target is None:
        print(text)
    else:
        target.write_text(text + "\n")


def _list_programs() -> str:
    return "\n".join(
        f"{index:2d}  {program.name:<24} {program.description}"
        for index, program in enumerate(PROGRAMS)
    )


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not debug:
        # Trace lines are INFO records; keep them visible when tracing without --debug.
        logging.getLogger("sim6502.trace").setLevel(logging.INFO)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sim6502-run",
        description="Headless 6502 runner for built-in programs and binary images.",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON configuration file")
    parser.add_argument("--program", type=int, default=None, help="Index of the built-in program to run")
    parser.add_argument("--list-programs", action="store_true", help="List the built-in programs and exit")
    parser.add_argument("--binary", type=str, default=None, help="Raw binary image to load instead of a built-in program")
    parser.add_argument("--load", type=str, default=None, help="Hex load address for --binary (default 0x0000)")
    parser.add_argument("--rom", action="store_true", help="Mark the --binary image read-only")
    parser.add_argument("--start", type=str, default=None, help="Hex start address for PC")
    parser.add_argument(
        "--reset-vector",
        action="store_true",
        help="Boot through the reset vector at 0xFFFC instead of the load address",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help=f"Maximum instructions to execute (default {DEFAULT_MAX_INSTRUCTIONS}; 0 or negative disables the limit)",
    )
    parser.add_argument(
        "--break-pc",
        action="append",
        default=[],
        help="Break when PC reaches the given hex address (repeatable)",
    )
    parser.add_argument("--break-regs", type=str, default=None, help="Break when A,X,Y match (hex, e.g. 00,0A,00)")
    parser.add_argument(
        "--no-stop",
        action="store_true",
        help="Do not break at the end address of a built-in program",
    )
    parser.add_argument(
        "--trace",
        nargs="?",
        const="",
        default=None,
        help="Trace executed instructions, optionally starting at a hex address",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging and tracing")
    parser.add_argument("--trace-memory", action="store_true", help="Log every memory access (very slow)")
    parser.add_argument(
        "--disassemble",
        action="append",
        default=[],
        help="Print a disassembly of START:END before running (repeatable)",
    )
    parser.add_argument(
        "--dump",
        type=str,
        default=None,
        help="File path for memory dump (defaults to stdout)",
    )
    parser.add_argument(
        "--dump-range",
        action="append",
        default=[],
        help="Memory range to dump in START:END hex form (inclusive). Repeat to add multiple ranges.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("hex", "bin"),
        default="hex",
        help="Dump format (hex table or raw binary)",
    )
    return parser


def _resolve_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> Config:
    config = Config()
    if args.config is not None:
        try:
            config = load_config(args.config)
        except ConfigError as exc:
            parser.error(str(exc))

    overrides = {
        "debug": args.debug,
        "program_index": args.program,
        "filename": args.binary,
        "max_instructions": args.count,
    }
    try:
        if args.load is not None:
            overrides["load_address"] = _parse_hex(args.load)
        if args.start is not None:
            overrides["boot_address"] = _parse_hex(args.start)
        if args.trace:
            overrides["trace_address"] = _parse_hex(args.trace)
        if args.break_regs is not None:
            overrides["breakpoint_registers"] = _parse_registers(args.break_regs)
    except ValueError as exc:
        parser.error(f"invalid address: {exc}")
    return config.merged(**overrides)


def _load_image(
    memory: AddressSpace, config: Config, *, read_only: bool
) -> Tuple[Optional[Program], int]:
    if config.filename:
        load_binary(memory, config.filename, config.load_address, read_only=read_only)
        return None, config.load_address
    program = get_program(config.program_index)
    load_snippets(memory, program.snippets, name=program.name)
    return program, program.entry_point


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    if args.list_programs:
        print(_list_programs())
        return EXIT_OK

    config = _resolve_config(parser, args)
    _configure_logging(config.debug)

    breakpoints: List[int] = []
    for spec in args.break_pc:
        try:
            breakpoints.append(_parse_hex(spec))
        except ValueError as exc:
            parser.error(f"invalid breakpoint address '{spec}': {exc}")

    dump_ranges: List[DumpRange] = []
    for spec in args.dump_range:
        try:
            dump_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid dump range '{spec}': {exc}")

    listing_ranges: List[DumpRange] = []
    for spec in args.disassemble:
        try:
            listing_ranges.append(_parse_range(spec))
        except ValueError as exc:
            parser.error(f"invalid disassembly range '{spec}': {exc}")

    memory = AddressSpace()
    memory.reset()
    try:
        program, entry_point = _load_image(memory, config, read_only=args.rom)
    except KeyError as exc:
        parser.error(str(exc.args[0]))
    except ProgramLoadError as exc:
        print(f"Failed to load program: {exc}", file=sys.stderr)
        return EXIT_LOAD_FAILED
    if args.trace_memory:
        logging.getLogger("sim6502.memory").setLevel(logging.DEBUG)
        memory.enable_debug(True)

    for listing in listing_ranges:
        print("\n".join(disassemble_range(memory, listing.start, listing.end)))

    cpu = CPU6502(memory)
    if config.boot_address is not None:
        cpu.reset(config.boot_address)
    elif args.reset_vector:
        cpu.reset()
    else:
        cpu.reset(entry_point)

    if program is not None and not args.no_stop:
        cpu.set_breakpoint_address(program.stop_address)
    if config.breakpoint_address is not None:
        cpu.set_breakpoint_address(config.breakpoint_address)
    for address in breakpoints:
        cpu.set_breakpoint_address(address)
    if config.breakpoint_registers is not None:
        cpu.set_breakpoint_registers(*config.breakpoint_registers)
    if config.debug or args.trace is not None:
        cpu.enable_trace(config.trace_address)

    limit = DEFAULT_MAX_INSTRUCTIONS if config.max_instructions is None else config.max_instructions
    budget = limit if limit > 0 else None
    executed = cpu.run(budget)

    print(f"{format_registers(cpu.registers, cpu.flags)} PC={cpu.registers.pc:04X} instructions={executed}")

    if not dump_ranges and args.dump is None and program is not None:
        dump_ranges = [DumpRange(start, end) for start, end in program.dump_ranges]
    if dump_ranges or args.dump is not None:
        dump_target = Path(args.dump) if args.dump is not None else None
        _write_dump(memory, dump_ranges, target=dump_target, fmt=args.dump_format)

    if cpu.breakpoint_hit:
        return EXIT_OK
    if cpu.halted:
        print(
            f"Execution stopped: illegal opcode at 0x{cpu.registers.pc:04X}",
            file=sys.stderr,
        )
        return EXIT_OK
    if budget is not None and executed >= budget:
        print("Execution stopped: instruction limit reached", file=sys.stderr)
        return EXIT_BUDGET_EXHAUSTED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
