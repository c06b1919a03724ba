"""
ARM Emulator — Register File + CPSR Flag Management

Register model:
  r0–r12  — general purpose (32-bit)
  r13     — SP by convention, no special behaviour here
  r14     — LR by convention, no special behaviour here
  r15     — PC (byte address; reads as instruction address + 8)
  CPSR    — condition flags packed into bits 15–12: N Z C V
        bit 15: N (Negative — bit 31 of result)
        bit 14: Z (Zero — result is zero)
        bit 13: C (Carry — carry out / no borrow / shifter carry)
        bit 12: V (Overflow — never written by this instruction subset)
"""

from typing import List

from ..config import (
    NUM_REGISTERS, NUM_GENERAL_REGISTERS, PC, INITIAL_PC, WORD_MASK,
    CPSR_N, CPSR_Z, CPSR_C, CPSR_V,
)


class Registers:
    """ARM register file and condition flags."""

    __slots__ = ('r', 'CPSR', 'steps')

    def __init__(self):
        self.r: List[int] = [0] * NUM_REGISTERS
        self.CPSR: int = 0
        self.steps: int = 0    # instructions fetched (halt word included)
        self.PC = INITIAL_PC

    # --- Register access ---

    def read(self, n: int) -> int:
        return self.r[n]

    def write(self, n: int, value: int):
        self.r[n] = value & WORD_MASK

    @property
    def PC(self) -> int:
        return self.r[PC]

    @PC.setter
    def PC(self, value: int):
        self.r[PC] = value & WORD_MASK

    # --- CPSR flag access ---

    def set_NZ(self, result: int):
        """Set N and Z from a 32-bit result. Preserves C, V."""
        flags = 0
        if result & 0x80000000:
            flags |= CPSR_N
        if not (result & WORD_MASK):
            flags |= CPSR_Z
        self.CPSR = (self.CPSR & ~(CPSR_N | CPSR_Z)) | flags

    def set_C(self, carry: bool):
        """Set C flag only."""
        self.CPSR = (self.CPSR & ~CPSR_C) | (CPSR_C if carry else 0)

    def set_NZC(self, result: int, carry):
        """Set N, Z from result and C from carry. ``carry=None`` leaves C."""
        self.set_NZ(result)
        if carry is not None:
            self.set_C(carry)

    def set_flags(self, n: bool = False, z: bool = False,
                  c: bool = False, v: bool = False):
        """Overwrite all four flags (test / debugger helper)."""
        self.CPSR = ((CPSR_N if n else 0) | (CPSR_Z if z else 0)
                     | (CPSR_C if c else 0) | (CPSR_V if v else 0))

    @property
    def negative(self) -> bool:
        return bool(self.CPSR & CPSR_N)

    @property
    def zero(self) -> bool:
        return bool(self.CPSR & CPSR_Z)

    @property
    def carry(self) -> bool:
        return bool(self.CPSR & CPSR_C)

    @property
    def overflow(self) -> bool:
        return bool(self.CPSR & CPSR_V)

    # --- Display ---

    def display(self) -> str:
        """Format register state for the halt / abort dump."""
        lines = ["Registers:"]
        for n in range(NUM_GENERAL_REGISTERS):
            label = f"${n}"
            lines.append(f"{label:<4}: {self.r[n]:10d} (0x{self.r[n]:08x})")
        lines.append(f"{'PC':<4}: {self.PC:10d} (0x{self.PC:08x})")
        lines.append(f"CPSR: {self.CPSR:10d} (0x{self.CPSR:08x})")
        return '\n'.join(lines)

    def trace_line(self) -> str:
        """One-line summary used by the instruction trace."""
        flags = ''.join(c if self.CPSR & m else '.'
                        for c, m in zip('NZCV', (CPSR_N, CPSR_Z, CPSR_C, CPSR_V)))
        regs = ' '.join(f"r{n}={self.r[n]:08X}" for n in range(4))
        return f"PC={self.PC:08X} {regs} [{flags}]"

    def reset(self):
        """Reset to power-on state."""
        self.r = [0] * NUM_REGISTERS
        self.CPSR = 0
        self.steps = 0
        self.PC = INITIAL_PC
