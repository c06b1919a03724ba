"""
ARM Emulator — 32 KiB Flat Memory

Memory is a zero-initialised bytearray whose length never changes.
Words are stored little-endian.

This layer does NO bounds or alignment checking: ``read_word`` past the
end raises ``struct.error`` and misaligned word accesses simply work.
The executors check ``in_bounds()`` before touching memory and treat
anything outside as a logged no-op.
"""

import struct
from pathlib import Path
from typing import Iterator, Tuple, Union

from ..config import MEMORY_SIZE, WORD_SIZE, WORD_MASK
from ..errors import LoadError

_WORD = struct.Struct('<I')


class Memory:
    """Byte-addressable main memory with 32-bit word accessors."""

    def __init__(self, size: int = MEMORY_SIZE):
        self._mem = bytearray(size)

    @property
    def size(self) -> int:
        return len(self._mem)

    # --- Core read/write ---

    def read8(self, addr: int) -> int:
        return self._mem[addr]

    def read_word(self, addr: int) -> int:
        return _WORD.unpack_from(self._mem, addr)[0]

    def write_word(self, addr: int, value: int):
        _WORD.pack_into(self._mem, addr, value & WORD_MASK)

    def in_bounds(self, addr: int) -> bool:
        """Executor-level check: the last word slot is treated as out of range."""
        return 0 <= addr < self.size - WORD_SIZE

    # --- Bulk load ---

    def load_binary(self, data: bytes, base_addr: int = 0):
        """Copy an image into memory at ``base_addr``.

        Raises LoadError if the image reaches the end of memory.
        """
        if base_addr + len(data) >= self.size:
            raise LoadError(
                f"Binary image of {len(data)} bytes is too large for "
                f"{self.size} bytes of memory")
        self._mem[base_addr:base_addr + len(data)] = data

    def load_file(self, path: Union[str, Path]) -> int:
        """Load a flat binary file at offset 0. Returns the byte count."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise LoadError(f"Could not read file {path}: {e.strerror or e}") from e
        self.load_binary(data)
        return len(data)

    # --- Inspection ---

    def nonzero_words(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(address, word)`` for every non-zero aligned word."""
        for addr in range(0, self.size - WORD_SIZE + 1, WORD_SIZE):
            word = _WORD.unpack_from(self._mem, addr)[0]
            if word:
                yield addr, word

    def display(self) -> str:
        """Non-zero memory section of the state dump."""
        lines = ["Non-zero memory:"]
        for addr, word in self.nonzero_words():
            lines.append(f"0x{addr:08x}: 0x{word:08x}")
        return '\n'.join(lines)

    def hexdump(self, start: int, length: int = 256) -> str:
        """Produce a hex dump of memory for debugging."""
        lines = []
        end = min(start + length, self.size)
        for addr in range(start, end, 16):
            chunk = self._mem[addr:min(addr + 16, end)]
            hex_bytes = ' '.join(f'{b:02X}' for b in chunk)
            ascii_bytes = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in chunk)
            lines.append(f'{addr:08X}  {hex_bytes:<47}  {ascii_bytes}')
        return '\n'.join(lines)

    def reset(self):
        self._mem[:] = bytes(self.size)
