"""MOS 6502 execution engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from sim6502.cpu.addressing import AddressModeResolver, Operand
from sim6502.cpu.flags import FLAG_BREAK, FLAG_RESERVED, StatusFlags
from sim6502.cpu.opcodes import (
    OPCODE_TABLE,
    AddressMode,
    OpcodeDescriptor,
    OpcodeTable,
    OpcodeTableError,
    RegisterEffect,
)
from sim6502.debug.breakpoints import Breakpoints
from sim6502.debug.trace import Tracer
from sim6502.memory import ADDRESS_MASK, Addressable

logger = logging.getLogger(__name__)

Handler = Callable[[OpcodeDescriptor, Operand], None]


@dataclass
class CPURegisters:
    """Programmer-visible registers. ``s`` is an offset into page one."""

    a: int = 0
    x: int = 0
    y: int = 0
    s: int = 0xFF
    pc: int = 0


_BRANCH_CONDITIONS: Dict[str, Tuple[str, bool]] = {
    "BCC": ("carry", False),
    "BCS": ("carry", True),
    "BNE": ("zero", False),
    "BEQ": ("zero", True),
    "BPL": ("negative", False),
    "BMI": ("negative", True),
    "BVC": ("overflow", False),
    "BVS": ("overflow", True),
}

_FLAG_OPERATIONS: Dict[str, Tuple[str, bool]] = {
    "CLC": ("carry", False),
    "SEC": ("carry", True),
    "CLD": ("decimal", False),
    "SED": ("decimal", True),
    "CLI": ("interrupt_disable", False),
    "SEI": ("interrupt_disable", True),
    "CLV": ("overflow", False),
}

_COMPARE_REGISTERS = {"CMP": "a", "CPX": "x", "CPY": "y"}
_STORE_REGISTERS = {"STA": "a", "STX": "x", "STY": "y"}


class CPU6502:
    """NMOS 6502 core operating on an :class:`~sim6502.memory.Addressable`.

    Each call to :meth:`step` executes one instruction: the opcode is looked
    up, operands are resolved, the program counter is advanced past the
    instruction and the handler registered for the opcode runs. Handlers
    that change control flow overwrite the already advanced PC.
    """

    STACK_BASE = 0x0100
    VECTOR_RESET = 0xFFFC
    VECTOR_IRQ = 0xFFFE
    RESET_STACK_POINTER = 0xFF

    def __init__(self, memory: Addressable, *, table: OpcodeTable = OPCODE_TABLE) -> None:
        self.memory = memory
        self.table = table
        self.registers = CPURegisters()
        self.flags = StatusFlags()
        self.resolver = AddressModeResolver(memory)
        self.breakpoints = Breakpoints()
        self.tracer: Optional[Tracer] = None
        self.halted = False
        self.breakpoint_hit = False
        self.instruction_count = 0
        self._handlers: List[Optional[Handler]] = [None] * 256
        self._init_opcode_table()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def reset(self, boot_address: Optional[int] = None) -> None:
        """Clear registers and flags and load the program counter.

        The PC comes from ``boot_address`` when given, otherwise from the
        reset vector.
        """

        self.registers = CPURegisters(s=self.RESET_STACK_POINTER)
        self.flags.clear()
        if boot_address is None:
            self.registers.pc = self.memory.read_word(self.VECTOR_RESET)
        else:
            self.registers.pc = boot_address & ADDRESS_MASK
        self.halted = False
        self.breakpoint_hit = False
        self.instruction_count = 0
        if self.tracer is not None:
            self.tracer.active = self.tracer.start_address is None

    def step(self) -> bool:
        """Execute one instruction. Returns ``False`` once the CPU is halted."""

        if self.halted:
            return False
        pc = self.registers.pc
        opcode = self.memory.read_byte(pc)
        handler = self._handlers[opcode]
        if handler is None:
            self.halted = True
            logger.warning("illegal opcode 0x%02X at 0x%04X, halting", opcode, pc)
            return False

        descriptor = self.table.lookup(opcode)
        if self.tracer is not None:
            self.tracer.record(pc, self.registers, self.flags)
        operand = self.resolver.resolve(pc, descriptor.mode, self.registers.x, self.registers.y)
        self.registers.pc = (pc + operand.size) & ADDRESS_MASK
        handler(descriptor, operand)
        self.instruction_count += 1
        return True

    def run(self, max_instructions: Optional[int] = None) -> int:
        """Step until the budget is spent, the CPU halts or a breakpoint fires.

        ``None`` or a negative budget means no limit. Returns the number of
        instructions executed by this call.
        """

        self.breakpoint_hit = False
        unlimited = max_instructions is None or max_instructions < 0
        executed = 0
        while unlimited or executed < max_instructions:
            if not self.step():
                break
            executed += 1
            if self.breakpoints.matches(self.registers):
                self.breakpoint_hit = True
                logger.info(
                    "breakpoint hit at 0x%04X after %d instructions",
                    self.registers.pc,
                    executed,
                )
                break
        return executed

    def set_breakpoint_address(self, address: int) -> None:
        self.breakpoints.add_address(address)

    def set_breakpoint_registers(self, a: int, x: int, y: int) -> None:
        self.breakpoints.set_registers(a, x, y)

    def clear_breakpoints(self) -> None:
        self.breakpoints.clear()

    def enable_trace(
        self,
        start_address: Optional[int] = None,
        *,
        sink: Optional[Callable[[str], None]] = None,
    ) -> Tracer:
        self.tracer = Tracer(self.memory, start_address=start_address, sink=sink)
        return self.tracer

    def disable_trace(self) -> None:
        self.tracer = None

    def clear_instruction_count(self) -> None:
        self.instruction_count = 0

    @property
    def stack_address(self) -> int:
        return self.STACK_BASE | (self.registers.s & 0xFF)

    # ------------------------------------------------------------------
    # Dispatch table
    # ------------------------------------------------------------------
    def _init_opcode_table(self) -> None:
        self._shift_operations: Dict[str, Callable[[int], int]] = {
            "ASL": self._asl,
            "LSR": self._lsr,
            "ROL": self._rol,
            "ROR": self._ror,
        }
        handlers: Dict[str, Handler] = {
            "ADC": self._op_adc,
            "SBC": self._op_sbc,
            "AND": self._op_logic,
            "ORA": self._op_logic,
            "EOR": self._op_logic,
            "BIT": self._op_bit,
            "ASL": self._op_shift,
            "LSR": self._op_shift,
            "ROL": self._op_shift,
            "ROR": self._op_shift,
            "JMP": self._op_jmp,
            "JSR": self._op_jsr,
            "RTS": self._op_rts,
            "BRK": self._op_brk,
            "RTI": self._op_rti,
            "PHA": self._op_pha,
            "PLA": self._op_pla,
            "PHP": self._op_php,
            "PLP": self._op_plp,
            "NOP": self._op_nop,
        }
        for mnemonic in _BRANCH_CONDITIONS:
            handlers[mnemonic] = self._op_branch
        for mnemonic in _FLAG_OPERATIONS:
            handlers[mnemonic] = self._op_flag
        for mnemonic in _COMPARE_REGISTERS:
            handlers[mnemonic] = self._op_compare
        for mnemonic in _STORE_REGISTERS:
            handlers[mnemonic] = self._op_store

        self._handlers = [None] * 256
        for descriptor in self.table:
            if descriptor.effect is not RegisterEffect.NONE:
                handler = self._op_register_effect
            else:
                handler = handlers.get(descriptor.mnemonic)
            if handler is None:
                raise OpcodeTableError(
                    f"no handler for {descriptor.mnemonic} (0x{descriptor.opcode:02X})"
                )
            self._register_opcode(descriptor.opcode, handler)

    def _register_opcode(self, opcode: int, handler: Handler) -> None:
        self._handlers[opcode & 0xFF] = handler

    # ------------------------------------------------------------------
    # Operand helpers
    # ------------------------------------------------------------------
    def _read_operand(self, descriptor: OpcodeDescriptor, operand: Operand) -> int:
        if descriptor.mode is AddressMode.IMMEDIATE:
            return operand.byte
        if descriptor.mode is AddressMode.ACCUMULATOR:
            return self.registers.a
        return self.memory.read_byte(operand.address)

    def _modify(
        self, descriptor: OpcodeDescriptor, operand: Operand, func: Callable[[int], int]
    ) -> None:
        if descriptor.mode is AddressMode.ACCUMULATOR:
            self.registers.a = func(self.registers.a)
            return
        value = self.memory.read_byte(operand.address)
        self.memory.write_byte(operand.address, func(value))

    def _push(self, value: int) -> None:
        self.memory.write_byte(self.STACK_BASE | self.registers.s, value & 0xFF)
        self.registers.s = (self.registers.s - 1) & 0xFF

    def _pop(self) -> int:
        self.registers.s = (self.registers.s + 1) & 0xFF
        return self.memory.read_byte(self.STACK_BASE | self.registers.s)

    def _push_word(self, value: int) -> None:
        self._push((value >> 8) & 0xFF)
        self._push(value & 0xFF)

    def _pop_word(self) -> int:
        lo = self._pop()
        hi = self._pop()
        return (hi << 8) | lo

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def _adc(self, a: int, m: int) -> int:
        carry = 1 if self.flags.carry else 0
        if self.flags.decimal:
            lo = (a & 0x0F) + (m & 0x0F) + carry
            if lo > 0x09:
                lo = ((lo + 0x06) & 0x0F) + 0x10
            total = (a & 0xF0) + (m & 0xF0) + lo
            if total > 0x99:
                total += 0x60
        else:
            total = a + m + carry
        result = total & 0xFF
        self.flags.carry = total > 0xFF
        self.flags.overflow = bool(~(a ^ m) & (a ^ result) & 0x80)
        return self.flags.update_zero_negative(result)

    def _sbc(self, a: int, m: int) -> int:
        borrow = 0 if self.flags.carry else 1
        difference = a - m - borrow
        result = difference & 0xFF
        if self.flags.decimal:
            lo = (a & 0x0F) - (m & 0x0F) - borrow
            hi = (a & 0xF0) - (m & 0xF0)
            if lo < 0:
                lo -= 0x06
                hi -= 0x10
            if hi < 0:
                hi -= 0x60
            result = (hi + (lo & 0x0F)) & 0xFF
        self.flags.carry = difference >= 0
        self.flags.overflow = bool((a ^ m) & (a ^ result) & 0x80)
        return self.flags.update_zero_negative(result)

    def _compare(self, register: int, value: int) -> None:
        self.flags.carry = register >= value
        self.flags.zero = register == value
        self.flags.negative = (register - value) & 0x80 != 0

    def _asl(self, value: int) -> int:
        self.flags.carry = value & 0x80 != 0
        return self.flags.update_zero_negative(value << 1)

    def _lsr(self, value: int) -> int:
        self.flags.carry = value & 0x01 != 0
        return self.flags.update_zero_negative(value >> 1)

    def _rol(self, value: int) -> int:
        carry_in = 0x01 if self.flags.carry else 0x00
        self.flags.carry = value & 0x80 != 0
        return self.flags.update_zero_negative((value << 1) | carry_in)

    def _ror(self, value: int) -> int:
        carry_in = 0x80 if self.flags.carry else 0x00
        self.flags.carry = value & 0x01 != 0
        return self.flags.update_zero_negative((value >> 1) | carry_in)

    # ------------------------------------------------------------------
    # Opcode handlers
    # ------------------------------------------------------------------
    def _op_register_effect(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        effect = descriptor.effect
        target = descriptor.register
        if effect is RegisterEffect.LOAD:
            value = self._read_operand(descriptor, operand)
        elif effect is RegisterEffect.TRANSFER:
            value = getattr(self.registers, descriptor.source)
        else:
            if target is None:
                current = self.memory.read_byte(operand.address)
            else:
                current = getattr(self.registers, target)
            step = 1 if effect is RegisterEffect.INCREMENT else -1
            value = (current + step) & 0xFF

        if target is None:
            self.memory.write_byte(operand.address, value)
        else:
            setattr(self.registers, target, value)
        # TXS is the only register write that leaves the flags alone.
        if target != "s":
            self.flags.update_zero_negative(value)

    def _op_store(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        value = getattr(self.registers, _STORE_REGISTERS[descriptor.mnemonic])
        self.memory.write_byte(operand.address, value)

    def _op_adc(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.registers.a = self._adc(self.registers.a, self._read_operand(descriptor, operand))

    def _op_sbc(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.registers.a = self._sbc(self.registers.a, self._read_operand(descriptor, operand))

    def _op_logic(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        value = self._read_operand(descriptor, operand)
        if descriptor.mnemonic == "AND":
            result = self.registers.a & value
        elif descriptor.mnemonic == "ORA":
            result = self.registers.a | value
        else:
            result = self.registers.a ^ value
        self.registers.a = self.flags.update_zero_negative(result)

    def _op_bit(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        value = self._read_operand(descriptor, operand)
        self.flags.zero = self.registers.a & value == 0
        self.flags.negative = value & 0x80 != 0
        self.flags.overflow = value & 0x40 != 0

    def _op_compare(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        register = getattr(self.registers, _COMPARE_REGISTERS[descriptor.mnemonic])
        self._compare(register, self._read_operand(descriptor, operand))

    def _op_shift(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self._modify(descriptor, operand, self._shift_operations[descriptor.mnemonic])

    def _op_branch(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        flag, expected = _BRANCH_CONDITIONS[descriptor.mnemonic]
        if bool(getattr(self.flags, flag)) == expected:
            self.registers.pc = operand.address

    def _op_flag(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        flag, value = _FLAG_OPERATIONS[descriptor.mnemonic]
        setattr(self.flags, flag, value)

    def _op_jmp(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.registers.pc = operand.address

    def _op_jsr(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self._push_word((self.registers.pc - 1) & ADDRESS_MASK)
        self.registers.pc = operand.address

    def _op_rts(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.registers.pc = (self._pop_word() + 1) & ADDRESS_MASK

    def _op_brk(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        # The return address skips the padding byte that follows BRK.
        self._push_word((self.registers.pc + 1) & ADDRESS_MASK)
        self._push(self.flags.to_byte() | FLAG_BREAK | FLAG_RESERVED)
        self.flags.interrupt_disable = True
        self.registers.pc = self.memory.read_word(self.VECTOR_IRQ)

    def _op_rti(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.flags.load_byte(self._pop())
        self.registers.pc = self._pop_word()

    def _op_pha(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self._push(self.registers.a)

    def _op_pla(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.registers.a = self.flags.update_zero_negative(self._pop())

    def _op_php(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self._push(self.flags.to_byte() | FLAG_BREAK | FLAG_RESERVED)

    def _op_plp(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        self.flags.load_byte(self._pop())

    def _op_nop(self, descriptor: OpcodeDescriptor, operand: Operand) -> None:
        return
