"""
ARM Emulator
============
Emulator for a subset of the 32-bit ARM instruction set: data
processing, multiply, single data transfer and branch, with condition
codes and a small GPIO window.

    ┌─────────┐    ┌──────────┐    ┌───────────┐    ┌──────────┐
    │  Fetch  │───>│ Condition│───>│ Classifier│───>│ Executor │
    │ PC - 8  │    │  check   │    │ (decoder) │    │ (emu.py) │
    └─────────┘    └──────────┘    └───────────┘    └────┬─────┘
                                                         │
                                    shifter.py / alu.py <┘
"""

__version__ = "0.1.0"

from .emu import ARMEmulator, StopReason
from .errors import EmulatorError, ErrorKind, LoadError
