"""
ARM Emulator — Machine Constants
================================

Fixed parameters of the emulated machine. Nothing here is tunable at
run time: memory never grows and the GPIO window is hard-wired.

Memory map:
  $00000000–$00007FFF  Main memory (32 KiB, little-endian words)
  $20200000–$20200008  GPIO function select registers (3 words)
  $2020001C            GPIO pin set register   (store only)
  $20200028            GPIO pin clear register (store only)
"""

# =============================================================================
#  MEMORY
# =============================================================================
MEMORY_SIZE = 0x8000       # 32 KiB
WORD_SIZE = 4
WORD_MASK = 0xFFFFFFFF

# =============================================================================
#  REGISTERS
# =============================================================================
NUM_REGISTERS = 16
NUM_GENERAL_REGISTERS = 13  # r0–r12 appear in the state dump
PC = 15

# Two-stage prefetch: an executing instruction reads PC as its own address + 8
PIPELINE_OFFSET = 8
INITIAL_PC = 4

# =============================================================================
#  CPSR FLAG MASKS (packed layout used by the state dump)
# =============================================================================
CPSR_N = 0x8000
CPSR_Z = 0x4000
CPSR_C = 0x2000
CPSR_V = 0x1000

# =============================================================================
#  GPIO
# =============================================================================
GPIO_FUNCTION_SELECT = (0x20200000, 0x20200004, 0x20200008)
GPIO_PINS_PER_SELECT = 10
GPIO_SET = 0x2020001C
GPIO_CLEAR = 0x20200028
