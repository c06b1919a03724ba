"""
ARM Emulator — Barrel Shifter / Operand 2 Resolver

Every function here returns ``(value, carry)``. ``carry`` is ``None``
when the shifter does not produce a carry out (shift by zero, rotate of
zero); callers must then leave the C flag as it was. ``None`` and
``False`` are NOT interchangeable.

Operand 2 encodings:

  Immediate   rotate(4) imm(8)               value = imm ROR (2 * rotate)
  Register    amount(5) type(2) 0 Rm(4)      shift by immediate amount
              Rs(4)   0 type(2) 1 Rm(4)      shift by low byte of Rs
"""

from typing import Optional, Tuple

from ..config import PC, WORD_MASK
from ..errors import EmulatorError, ErrorKind
from .decoder import ShiftType, get_bit, get_bits

ShiftResult = Tuple[int, Optional[bool]]


def ror32(value: int, amount: int) -> int:
    amount %= 32
    value &= WORD_MASK
    return ((value >> amount) | (value << (32 - amount))) & WORD_MASK


def shift(value: int, shift_type: ShiftType, amount: int) -> ShiftResult:
    """Apply one barrel shifter operation to a 32-bit value.

    Amounts above 31 can only come from a register; they follow the
    usual ARM rules (everything shifted out, sign fill for ASR, ROR
    modulo 32).
    """
    value &= WORD_MASK
    if amount == 0:
        return value, None

    if shift_type == ShiftType.LSL:
        if amount > 32:
            return 0, False
        return (value << amount) & WORD_MASK, get_bit(value, 32 - amount)

    if shift_type == ShiftType.LSR:
        if amount > 32:
            return 0, False
        return value >> amount, get_bit(value, amount - 1)

    if shift_type == ShiftType.ASR:
        if amount >= 32:
            fill = WORD_MASK if value & 0x80000000 else 0
            return fill, get_bit(value, 31)
        result = value >> amount
        if value & 0x80000000:
            result |= (WORD_MASK << (32 - amount)) & WORD_MASK
        return result, get_bit(value, amount - 1)

    # ROR
    amount %= 32
    if amount == 0:
        return value, get_bit(value, 31)
    return ror32(value, amount), get_bit(value, amount - 1)


def rotate_immediate(instruction: int) -> ShiftResult:
    """Decode the 8-bit immediate + 4-bit rotate form of operand 2."""
    imm = get_bits(instruction, 0, 8)
    rotate = get_bits(instruction, 8, 4) * 2
    if rotate == 0:
        return imm, None
    value = ror32(imm, rotate)
    return value, get_bit(value, 31)


def shifted_register(instruction: int, regs, register_shift: bool = True) -> ShiftResult:
    """Decode the shifted-register form of operand 2.

    ``register_shift=False`` restricts the encoding to an immediate shift
    amount (single data transfer offsets).
    """
    rm = get_bits(instruction, 0, 4)
    if rm == PC:
        raise EmulatorError(ErrorKind.OPERAND,
                            "Shift operation uses PC as Rm", instruction)

    shift_type = ShiftType(get_bits(instruction, 5, 2))

    if not get_bit(instruction, 4):
        amount = get_bits(instruction, 7, 5)
    elif register_shift and not get_bit(instruction, 7):
        rs = get_bits(instruction, 8, 4)
        if rs == PC:
            raise EmulatorError(ErrorKind.OPERAND,
                                "Shift operation uses PC as Rs", instruction)
        amount = regs.read(rs) & 0xFF
    else:
        raise EmulatorError(ErrorKind.OPERAND,
                            "Malformed shift encoding", instruction)

    return shift(regs.read(rm), shift_type, amount)


def resolve_operand2(instruction: int, regs, immediate: bool,
                     register_shift: bool = True) -> ShiftResult:
    """Resolve operand 2 to ``(value, carry)``."""
    if immediate:
        return rotate_immediate(instruction)
    return shifted_register(instruction, regs, register_shift)
