"""
ARM Emulator — Data Processing ALU

Each function returns ``(result, carry)``. N and Z always come from the
32-bit result and are applied by the caller; V is never produced by
this instruction subset and must be left untouched.

Carry rules per opcode class:
  logical  (AND EOR ORR TEQ TST MOV)  C = shifter carry out (None = keep)
  additive (ADD RSB)                  C = (Rn31 | Op2_31) & ~R31
  subtract (SUB CMP)                  C = Op2 <= Rn  (no borrow)

The additive rule is a sign-bit approximation of carry out of bit 31:
it reports no carry when both operands and the result are negative.
"""

from typing import Callable, Dict, Optional, Tuple

from ..config import WORD_MASK
from .decoder import Opcode

AluResult = Tuple[int, Optional[bool]]


def _sign(value: int) -> bool:
    return bool(value & 0x80000000)


def additive_carry(rn: int, op2: int, result: int) -> bool:
    return (_sign(rn) or _sign(op2)) and not _sign(result)


# ══════════════════════════════════════════════
# Logical class
# ══════════════════════════════════════════════

def and32(rn: int, op2: int, shifter_carry: Optional[bool]) -> AluResult:
    return rn & op2, shifter_carry


def eor32(rn: int, op2: int, shifter_carry: Optional[bool]) -> AluResult:
    return rn ^ op2, shifter_carry


def orr32(rn: int, op2: int, shifter_carry: Optional[bool]) -> AluResult:
    return rn | op2, shifter_carry


def mov32(rn: int, op2: int, shifter_carry: Optional[bool]) -> AluResult:
    """MOV ignores Rn."""
    return op2, shifter_carry


# ══════════════════════════════════════════════
# Arithmetic class
# ══════════════════════════════════════════════

def add32(rn: int, op2: int, shifter_carry: Optional[bool] = None) -> AluResult:
    result = (rn + op2) & WORD_MASK
    return result, additive_carry(rn, op2, result)


def rsb32(rn: int, op2: int, shifter_carry: Optional[bool] = None) -> AluResult:
    """Reverse subtract: op2 - Rn."""
    result = (op2 - rn) & WORD_MASK
    return result, additive_carry(rn, op2, result)


def sub32(rn: int, op2: int, shifter_carry: Optional[bool] = None) -> AluResult:
    result = (rn - op2) & WORD_MASK
    return result, op2 <= rn


OPERATIONS: Dict[Opcode, Callable[[int, int, Optional[bool]], AluResult]] = {
    Opcode.AND: and32,
    Opcode.EOR: eor32,
    Opcode.SUB: sub32,
    Opcode.RSB: rsb32,
    Opcode.ADD: add32,
    Opcode.TST: and32,
    Opcode.TEQ: eor32,
    Opcode.CMP: sub32,
    Opcode.ORR: orr32,
    Opcode.MOV: mov32,
}


def execute(opcode: Opcode, rn: int, op2: int,
            shifter_carry: Optional[bool]) -> AluResult:
    """Run one data processing operation on 32-bit unsigned inputs."""
    return OPERATIONS[opcode](rn & WORD_MASK, op2 & WORD_MASK, shifter_carry)
