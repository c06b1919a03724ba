"""
ARM Emulator — Instruction Classifier / Field Tables

Maps a 32-bit instruction word to one of the four supported instruction
shapes and provides the closed enumerations for its fields.

Instruction shapes (bits 27–20 and 7–4 are what tell them apart):

  Branch              cond 1010 ----offset(24)-----------------------
  Single transfer     cond 01IP U00L Rn   Rd   ---offset(12)--------
  Multiply            cond 0000 00AS Rd   Rn   Rs   1001 Rm
  Data processing     cond 00I  opcd S Rn   Rd   ---operand2(12)------

Classification order matters: multiply is a special case of the data
processing pattern, so it is tested first.
"""

from enum import Enum, IntEnum
from typing import Optional

from ..errors import EmulatorError, ErrorKind


# ──────────────────────────────────────────────
# Bit field helpers
# ──────────────────────────────────────────────

def get_bits(word: int, start: int, n: int) -> int:
    """Return ``n`` bits of ``word`` starting at bit ``start`` (inclusive)."""
    return (word >> start) & ((1 << n) - 1)


def get_bit(word: int, n: int) -> bool:
    return bool((word >> n) & 1)


def sign_extend(value: int, bits: int) -> int:
    """Interpret the low ``bits`` of ``value`` as two's complement."""
    sign = 1 << (bits - 1)
    return (value & (sign - 1)) - (value & sign)


# ──────────────────────────────────────────────
# Field enumerations
# ──────────────────────────────────────────────

class Condition(IntEnum):
    """Condition field (bits 31–28). Values outside the enum never execute."""
    EQ = 0x0
    NE = 0x1
    GE = 0xA
    LT = 0xB
    GT = 0xC
    LE = 0xD
    AL = 0xE

    @classmethod
    def from_field(cls, field: int) -> Optional['Condition']:
        try:
            return cls(field)
        except ValueError:
            return None


class Opcode(IntEnum):
    """Data processing opcode field (bits 24–21). Unknown values are fatal."""
    AND = 0x0
    EOR = 0x1
    SUB = 0x2
    RSB = 0x3
    ADD = 0x4
    TST = 0x8
    TEQ = 0x9
    CMP = 0xA
    ORR = 0xC
    MOV = 0xD

    @classmethod
    def from_field(cls, field: int, instruction: int) -> 'Opcode':
        try:
            return cls(field)
        except ValueError:
            raise EmulatorError(
                ErrorKind.OPCODE,
                f"Unsupported data processing opcode {field:#x}",
                instruction) from None


class ShiftType(IntEnum):
    LSL = 0
    LSR = 1
    ASR = 2
    ROR = 3


class InstructionType(Enum):
    BRANCH = 'BRANCH'
    SINGLE_TRANSFER = 'SINGLE_TRANSFER'
    MULTIPLY = 'MULTIPLY'
    DATA_PROCESSING = 'DATA_PROCESSING'


# Opcodes that compute a result only for the flags
COMPARE_OPCODES = frozenset({Opcode.TST, Opcode.TEQ, Opcode.CMP})

# Opcodes whose C flag comes from the shifter
LOGICAL_OPCODES = frozenset({Opcode.AND, Opcode.EOR, Opcode.ORR,
                             Opcode.TEQ, Opcode.TST, Opcode.MOV})


# ──────────────────────────────────────────────
# Condition evaluation
# ──────────────────────────────────────────────

def condition_passed(instruction: int, regs) -> bool:
    """Decide whether ``instruction`` executes under the current flags."""
    cond = Condition.from_field(get_bits(instruction, 28, 4))
    if cond is None:
        return False

    n, z, v = regs.negative, regs.zero, regs.overflow
    if cond is Condition.EQ:
        return z
    if cond is Condition.NE:
        return not z
    if cond is Condition.GE:
        return n == v
    if cond is Condition.LT:
        return n != v
    if cond is Condition.GT:
        return not z and n == v
    if cond is Condition.LE:
        return z or n != v
    return True  # AL


# ──────────────────────────────────────────────
# Classification
# ──────────────────────────────────────────────

def classify(instruction: int) -> InstructionType:
    """Return the instruction shape or raise a fatal decode error."""
    if get_bits(instruction, 24, 4) == 0b1010:
        return InstructionType.BRANCH
    if get_bits(instruction, 26, 2) == 0b01:
        return InstructionType.SINGLE_TRANSFER
    if get_bits(instruction, 22, 6) == 0 and get_bits(instruction, 4, 4) == 0b1001:
        return InstructionType.MULTIPLY
    if get_bits(instruction, 26, 2) == 0b00:
        return InstructionType.DATA_PROCESSING
    raise EmulatorError(ErrorKind.DECODE, "Unrecognised instruction", instruction)
