"""
ARM Emulator — GPIO Peripheral

Emulates the handful of Raspberry Pi style GPIO registers the test
programs poke. There is no backing store: accesses are reported on the
``arm_emulator.periph.gpio`` logger and recorded in ``history``.

Register map:
  $20200000  GPFSEL0  — function select, pins 0–9
  $20200004  GPFSEL1  — function select, pins 10–19
  $20200008  GPFSEL2  — function select, pins 20–29
  $2020001C  GPSET0   — store turns the pin on
  $20200028  GPCLR0   — store turns the pin off

Loads from a function select register return the register's own
address. Loads from GPSET0/GPCLR0 are not special and fall through to
ordinary memory handling (where they are out of bounds).

Event callbacks let a test harness watch pin activity:
  gpio.on_event(lambda event, addr: print(event, hex(addr)))
"""

import logging
from typing import Callable, List, Optional, Tuple

from ..config import (
    GPIO_FUNCTION_SELECT, GPIO_PINS_PER_SELECT, GPIO_SET, GPIO_CLEAR,
)

log = logging.getLogger(__name__)

ACCESS = 'ACCESS'
PIN_ON = 'PIN_ON'
PIN_OFF = 'PIN_OFF'


class GPIOPeripheral:
    """GPIO register window."""

    def __init__(self):
        self.history: List[Tuple[str, int]] = []
        self.pins_on = 0
        self.pins_off = 0
        self._callbacks: List[Callable[[str, int], None]] = []

    def handles(self, addr: int, is_load: bool) -> bool:
        """True if the access at ``addr`` is claimed by the GPIO window."""
        if addr in GPIO_FUNCTION_SELECT:
            return True
        return not is_load and addr in (GPIO_SET, GPIO_CLEAR)

    def access(self, addr: int, is_load: bool) -> Optional[int]:
        """Perform a claimed access. Returns the value for a load."""
        if addr in GPIO_FUNCTION_SELECT:
            first = ((addr & 0xF) >> 2) * GPIO_PINS_PER_SELECT
            log.info("One GPIO pin from %d to %d has been accessed",
                     first, first + GPIO_PINS_PER_SELECT - 1)
            self._record(ACCESS, addr)
            return addr if is_load else None

        if addr == GPIO_SET:
            log.info("PIN ON")
            self.pins_on += 1
            self._record(PIN_ON, addr)
        else:
            log.info("PIN OFF")
            self.pins_off += 1
            self._record(PIN_OFF, addr)
        return None

    def _record(self, event: str, addr: int):
        self.history.append((event, addr))
        for cb in self._callbacks:
            cb(event, addr)

    # --- External API ---

    def on_event(self, callback: Callable[[str, int], None]):
        """Register ``callback(event, addr)`` for every GPIO access."""
        self._callbacks.append(callback)

    def reset(self):
        self.history.clear()
        self.pins_on = 0
        self.pins_off = 0
