"""
ARM Emulator — Main Emulator Class

Integrates:
  - CPU registers + CPSR (cpu/regs.py)
  - Flat memory (mem/memory.py)
  - Instruction classifier + condition evaluator (cpu/decoder.py)
  - Barrel shifter (cpu/shifter.py)
  - Data processing ALU (cpu/alu.py)
  - GPIO window (periph/gpio.py)

Execution model (two-stage prefetch):
  1. PC += 4
  2. Fetch the word at PC - 8, so the executing instruction sees
     PC = its own address + 8
  3. All-zero word → HALT
  4. Condition check → skip if it fails
  5. Classify → run one executor

Termination reasons:
  - HALT:   all-zero sentinel word fetched
  - FATAL:  EmulatorError raised by a decoder or executor (see emu.error)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .config import PC, PIPELINE_OFFSET, WORD_SIZE, WORD_MASK
from .cpu.regs import Registers
from .cpu import alu
from .cpu.decoder import (
    InstructionType, Opcode, COMPARE_OPCODES,
    classify, condition_passed, get_bit, get_bits, sign_extend,
)
from .cpu.shifter import resolve_operand2
from .errors import EmulatorError, ErrorKind
from .mem.memory import Memory
from .periph.gpio import GPIOPeripheral

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'HALT'
    FATAL = 'FATAL'


class ARMEmulator:
    """ARM subset emulator.

    Usage:
        emu = ARMEmulator()
        emu.load_binary('add01.bin')
        reason = emu.run()
        print(emu.dump_state())
    """

    def __init__(self):
        self.regs = Registers()
        self.mem = Memory()
        self.gpio = GPIOPeripheral()

        # Set when step() returns StopReason.FATAL
        self.error: Optional[EmulatorError] = None

        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = {
            InstructionType.BRANCH: self._op_branch,
            InstructionType.SINGLE_TRANSFER: self._op_single_transfer,
            InstructionType.MULTIPLY: self._op_multiply,
            InstructionType.DATA_PROCESSING: self._op_data_processing,
        }

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_binary(self, path_or_data: Union[str, Path, bytes, bytearray]):
        """Load a flat binary file (or raw bytes) at address 0.

        Raises LoadError if the file is unreadable or too large.
        """
        if isinstance(path_or_data, (str, Path)):
            size = self.mem.load_file(path_or_data)
            log.debug("Loaded %d bytes from %s", size, path_or_data)
        else:
            self.mem.load_binary(bytes(path_or_data))

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns a StopReason if stopped, else None."""
        self.regs.PC += WORD_SIZE
        addr = (self.regs.PC - PIPELINE_OFFSET) & WORD_MASK
        if addr + WORD_SIZE > self.mem.size:
            self.error = EmulatorError(ErrorKind.DECODE,
                                       f"Instruction fetch outside memory at 0x{addr:08x}")
            return StopReason.FATAL
        instruction = self.mem.read_word(addr)
        self.regs.steps += 1

        if instruction == 0:
            log.debug("Halt word at 0x%08x", addr)
            return StopReason.HALT

        if not condition_passed(instruction, self.regs):
            if self._trace:
                self._record_trace(addr, instruction, 'SKIP')
            return None

        try:
            kind = classify(instruction)
            if self._trace:
                self._record_trace(addr, instruction, kind.value)
            self._dispatch[kind](instruction)
        except EmulatorError as e:
            self.error = e
            log.debug("Fatal %s error at 0x%08x", e.kind.value, addr)
            return StopReason.FATAL

        return None

    def run(self) -> StopReason:
        """Run until the halt word or a fatal error."""
        while True:
            reason = self.step()
            if reason is not None:
                return reason

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _op_data_processing(self, instruction: int):
        opcode = Opcode.from_field(get_bits(instruction, 21, 4), instruction)
        set_flags = get_bit(instruction, 20)
        rn = get_bits(instruction, 16, 4)
        rd = get_bits(instruction, 12, 4)

        op2, shifter_carry = resolve_operand2(
            instruction, self.regs, immediate=get_bit(instruction, 25))
        result, carry = alu.execute(opcode, self.regs.read(rn), op2, shifter_carry)

        if opcode not in COMPARE_OPCODES:
            self.regs.write(rd, result)
        if set_flags:
            self.regs.set_NZC(result, carry)

    def _op_multiply(self, instruction: int):
        accumulate = get_bit(instruction, 21)
        set_flags = get_bit(instruction, 20)
        rd = get_bits(instruction, 16, 4)
        rn = get_bits(instruction, 12, 4)
        rs = get_bits(instruction, 8, 4)
        rm = get_bits(instruction, 0, 4)

        if rd == rm:
            raise EmulatorError(ErrorKind.OPERAND,
                                "Multiply instruction uses the same register as Rd and Rm",
                                instruction)
        if PC in (rd, rm, rs, rn):
            raise EmulatorError(ErrorKind.OPERAND,
                                "Multiply instruction uses PC as an operand", instruction)

        result = self.regs.read(rm) * self.regs.read(rs)
        if accumulate:
            result += self.regs.read(rn)
        result &= WORD_MASK

        self.regs.write(rd, result)
        if set_flags:
            self.regs.set_NZ(result)

    def _op_single_transfer(self, instruction: int):
        register_offset = get_bit(instruction, 25)
        pre_index = get_bit(instruction, 24)
        up = get_bit(instruction, 23)
        load = get_bit(instruction, 20)
        rn = get_bits(instruction, 16, 4)
        rd = get_bits(instruction, 12, 4)

        if rd == PC:
            raise EmulatorError(ErrorKind.OPERAND,
                                "Data transfer instruction uses PC as Rd", instruction)

        if register_offset:
            if pre_index and get_bits(instruction, 0, 4) == rd:
                raise EmulatorError(ErrorKind.OPERAND,
                                    "Data transfer instruction uses the same register as Rd and Rm",
                                    instruction)
            offset, _ = resolve_operand2(instruction, self.regs,
                                         immediate=False, register_shift=False)
        else:
            offset = get_bits(instruction, 0, 12)
        if not up:
            offset = -offset

        base = self.regs.read(rn)
        indexed = (base + offset) & WORD_MASK
        addr = indexed if pre_index else base

        if self.gpio.handles(addr, load):
            value = self.gpio.access(addr, load)
            if load:
                self.regs.write(rd, value)
        elif self.mem.in_bounds(addr):
            if load:
                self.regs.write(rd, self.mem.read_word(addr))
            else:
                self.mem.write_word(addr, self.regs.read(rd))
        else:
            log.warning("Error: Out of bounds memory access at address 0x%08x", addr)
            return

        if not pre_index:
            self.regs.write(rn, indexed)

    def _op_branch(self, instruction: int):
        offset = sign_extend(get_bits(instruction, 0, 24), 24) << 2
        target = self.regs.PC + offset
        # The next step() advances PC by one word before fetching at PC - 8
        self.regs.PC = target + WORD_SIZE

    # ══════════════════════════════════════════════
    # Debug / inspection
    # ══════════════════════════════════════════════

    def _record_trace(self, addr: int, instruction: int, kind: str):
        line = f"{addr:08X}: {instruction:08X} {kind:<15s} {self.regs.trace_line()}"
        self._trace_output.append(line)
        log.debug(line)

    def enable_trace(self, enable: bool = True):
        """Enable/disable per-instruction trace output."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output = []

    def dump_state(self) -> str:
        """Registers, CPSR and non-zero memory in the reference dump format."""
        return f"{self.regs.display()}\n{self.mem.display()}"

    def reset(self):
        """Return to power-on state (memory cleared)."""
        self.regs.reset()
        self.mem.reset()
        self.gpio.reset()
        self.error = None
        self._trace_output = []
