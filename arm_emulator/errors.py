"""
ARM Emulator — Error Taxonomy

Fatal conditions are raised as EmulatorError with the offending
instruction word attached. ARMEmulator.step() turns them into
StopReason.FATAL and keeps the exception on ``emu.error`` so the
caller can report it and dump state.

Out-of-bounds memory accesses are NOT errors: they are logged and the
instruction becomes a no-op.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    LOAD = 'LOAD'          # image unreadable or too large
    DECODE = 'DECODE'      # bit pattern matches no instruction shape
    OPERAND = 'OPERAND'    # PC or aliased register where disallowed, bad shift bits
    OPCODE = 'OPCODE'      # data-processing opcode outside the subset


class EmulatorError(Exception):
    """A fatal condition that stops the machine."""

    def __init__(self, kind: ErrorKind, message: str,
                 instruction: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.instruction = instruction
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.instruction is None:
            return f"Error: {self.message}"
        return f"Error: {self.message}: 0x{self.instruction:08x}"


class LoadError(EmulatorError):
    """Raised when a binary image cannot be placed in memory."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.LOAD, message)
