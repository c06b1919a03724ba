"""
ARM Emulator — Data Processing Tests

Flag behaviour per opcode class:
  logical  → C from the shifter (unchanged when the shifter gives none)
  ADD/RSB  → C from the sign-bit carry rule
  SUB/CMP  → C = no borrow
  all      → V untouched
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import struct

import pytest

from arm_emulator.emu import ARMEmulator, StopReason
from arm_emulator.cpu import alu
from arm_emulator.cpu.decoder import Opcode
from arm_emulator.errors import ErrorKind


def _emu(*words, **regs) -> ARMEmulator:
    """Emulator with ``words`` at address 0 and registers preset (r0=..., r1=...)."""
    emu = ARMEmulator()
    emu.load_binary(b''.join(struct.pack('<I', w) for w in words))
    for name, value in regs.items():
        emu.regs.write(int(name[1:]), value)
    return emu


class TestAluFunctions:

    def test_add_wraps(self):
        assert alu.execute(Opcode.ADD, 0xFFFFFFFF, 2, None) == (1, True)

    def test_sub_no_borrow(self):
        assert alu.execute(Opcode.SUB, 5, 3, None) == (2, True)
        assert alu.execute(Opcode.SUB, 3, 5, None) == (0xFFFFFFFE, False)
        assert alu.execute(Opcode.CMP, 7, 7, None) == (0, True)

    def test_rsb_reverses_operands(self):
        result, _ = alu.execute(Opcode.RSB, 3, 10, None)
        assert result == 7

    def test_logical_passes_shifter_carry(self):
        assert alu.execute(Opcode.AND, 0xF0, 0x3C, True) == (0x30, True)
        assert alu.execute(Opcode.EOR, 0xF0, 0x3C, False) == (0xCC, False)
        assert alu.execute(Opcode.ORR, 0xF0, 0x0F, None) == (0xFF, None)
        assert alu.execute(Opcode.MOV, 0x1234, 0x42, None) == (0x42, None)

    def test_additive_carry_rule(self):
        assert alu.additive_carry(0x80000000, 0x80000000, 0)
        assert alu.additive_carry(0x00000001, 0xFFFFFFFF, 0)
        assert not alu.additive_carry(1, 2, 3)
        # Both signs set with the result sign set: the rule reports no carry
        assert not alu.additive_carry(0xFFFFFFFF, 0x80000001, 0x80000000)


class TestDataProcessing:

    def test_mov_immediate(self):
        """MOV r0, #5"""
        emu = _emu(0xE3A00005)
        emu.step()
        assert emu.regs.read(0) == 5
        assert emu.regs.CPSR == 0

    def test_add_register(self):
        """ADD r2, r0, r1"""
        emu = _emu(0xE0802001, r0=40, r1=2)
        emu.step()
        assert emu.regs.read(2) == 42

    def test_sub_and_rsb(self):
        """SUB r2, r0, r1; RSB r3, r0, r1"""
        emu = _emu(0xE0402001, 0xE0603001, r0=10, r1=3)
        emu.step()
        emu.step()
        assert emu.regs.read(2) == 7
        assert emu.regs.read(3) == 0xFFFFFFF9

    def test_logical_ops(self):
        """AND r2, r0, r1; EOR r3, r0, r1; ORR r4, r0, r1"""
        emu = _emu(0xE0002001, 0xE0203001, 0xE1804001, r0=0xFF00, r1=0x0FF0)
        for _ in range(3):
            emu.step()
        assert emu.regs.read(2) == 0x0F00
        assert emu.regs.read(3) == 0xF0F0
        assert emu.regs.read(4) == 0xFFF0

    def test_no_flags_without_s_bit(self):
        """SUB r2, r0, r1 giving zero leaves CPSR alone"""
        emu = _emu(0xE0402001, r0=4, r1=4)
        emu.step()
        assert emu.regs.read(2) == 0
        assert emu.regs.CPSR == 0

    def test_unknown_opcode_is_fatal(self):
        """ADC r2, r0, r1 is not in the subset"""
        emu = _emu(0xE0A02001)
        assert emu.step() is StopReason.FATAL
        assert emu.error.kind is ErrorKind.OPCODE
        assert emu.error.instruction == 0xE0A02001


class TestCompareOpcodes:

    def test_tst_does_not_write(self):
        """TST r0, r1 → Z set, r0 unchanged"""
        emu = _emu(0xE1100001, r0=0xF0, r1=0x0F)
        emu.step()
        assert emu.regs.read(0) == 0xF0
        assert emu.regs.zero

    def test_teq_does_not_write(self):
        """TEQ r0, r1 with equal values → Z"""
        emu = _emu(0xE1300001, r0=0x55, r1=0x55)
        emu.step()
        assert emu.regs.read(0) == 0x55
        assert emu.regs.zero

    def test_cmp_sets_n_and_clears_c(self):
        """CMP r0, r1 with r0 < r1"""
        emu = _emu(0xE1500001, r0=3, r1=5)
        emu.step()
        assert emu.regs.read(0) == 3
        assert emu.regs.negative
        assert not emu.regs.carry
        assert not emu.regs.zero

    def test_cmp_equal(self):
        emu = _emu(0xE1500001, r0=5, r1=5)
        emu.step()
        assert emu.regs.zero
        assert emu.regs.carry


class TestCarryClasses:

    def test_adds_unsigned_overflow(self):
        """ADDS r2, r0, r1 : 0xFFFFFFFF + 1"""
        emu = _emu(0xE0902001, r0=0xFFFFFFFF, r1=1)
        emu.step()
        assert emu.regs.read(2) == 0
        assert emu.regs.carry
        assert emu.regs.zero
        assert not emu.regs.negative

    def test_adds_no_carry(self):
        emu = _emu(0xE0902001, r0=1, r1=2)
        emu.regs.set_flags(c=True)
        emu.step()
        assert not emu.regs.carry

    def test_rsbs_carry_uses_sign_rule(self):
        """RSBS r2, r0, r1 : 0x80000001 - 0x80000000"""
        emu = _emu(0xE0702001, r0=0x80000000, r1=0x80000001)
        emu.step()
        assert emu.regs.read(2) == 1
        assert emu.regs.carry

    def test_subs_no_borrow(self):
        """SUBS r2, r0, r1"""
        emu = _emu(0xE0502001, r0=5, r1=3)
        emu.step()
        assert emu.regs.carry
        emu = _emu(0xE0502001, r0=3, r1=5)
        emu.step()
        assert not emu.regs.carry
        assert emu.regs.negative

    def test_ands_takes_rotate_carry(self):
        """ANDS r2, r0, #0xFF000000 → C from the immediate rotate"""
        emu = _emu(0xE21024FF, r0=0xFFFFFFFF)
        emu.step()
        assert emu.regs.read(2) == 0xFF000000
        assert emu.regs.carry
        assert emu.regs.negative

    def test_movs_takes_shift_carry(self):
        """MOVS r1, r0, LSL #1 with bit 31 set"""
        emu = _emu(0xE1B01080, r0=0x80000001)
        emu.step()
        assert emu.regs.read(1) == 2
        assert emu.regs.carry

    @pytest.mark.parametrize("initial", [False, True])
    def test_shift_by_zero_preserves_carry(self, initial):
        """MOVS r1, r0 (LSL #0) leaves C as it was"""
        emu = _emu(0xE1B01000, r0=5)
        emu.regs.set_flags(c=initial)
        emu.step()
        assert emu.regs.read(1) == 5
        assert emu.regs.carry == initial

    @pytest.mark.parametrize("initial", [False, True])
    def test_immediate_without_rotate_preserves_carry(self, initial):
        """MOVS r0, #0 → Z set, C untouched"""
        emu = _emu(0xE3B00000)
        emu.regs.set_flags(c=initial)
        emu.step()
        assert emu.regs.zero
        assert emu.regs.carry == initial

    @pytest.mark.parametrize("word", [
        0xE0902001,  # ADDS
        0xE0502001,  # SUBS
        0xE0702001,  # RSBS
        0xE1500001,  # CMP
        0xE0102001,  # ANDS
        0xE1B01000,  # MOVS
    ])
    @pytest.mark.parametrize("initial", [False, True])
    def test_v_never_changes(self, word, initial):
        emu = _emu(word, r0=0x7FFFFFFF, r1=0x80000001)
        emu.regs.set_flags(v=initial)
        emu.step()
        assert emu.regs.overflow == initial
