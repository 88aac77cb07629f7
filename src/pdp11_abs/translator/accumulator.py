"""
Block Accumulator
=================

Holds the bytes of the block currently being built together with the
running program counter. Words are stored little-endian, low byte first,
as the PDP-11 keeps them in memory.
"""

from typing import Optional

from pdp11_abs.errors import CapacityError, SourceLocation, ValueRangeError
from pdp11_abs.absfmt.records import ADDRESS_SPACE, MAX_BLOCK_DATA


class BlockAccumulator:
    """
    Pending block data plus the pc and origin.

    The pc advances by 2 per word and 1 per byte. It may reach 0200000
    after the top word of memory is filled but no data can be written
    there.

    Attributes:
        origin: Load address of the first byte in the pending block
        pc: Address the next byte will be written to
    """

    def __init__(self, origin: int = 0):
        self.origin = origin
        self.pc = origin
        self._data = bytearray()
        self._have_block = False

    @property
    def has_data(self) -> bool:
        """True once anything has been appended since the last take()."""
        return self._have_block

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def set_origin(self, address: int) -> None:
        """Start a new block at address; the pending block must be empty."""
        if self._have_block:
            raise RuntimeError("set_origin() called with a pending block")
        self.origin = address
        self.pc = address

    def append_word(self, value: int, location: Optional[SourceLocation] = None) -> None:
        """Append a 16-bit word, low byte first."""
        self._reserve(2, location)
        self._data.append(value & 0xFF)
        self._data.append((value >> 8) & 0xFF)
        self.pc += 2
        self._have_block = True

    def append_byte(self, value: int, location: Optional[SourceLocation] = None) -> None:
        """Append a single byte."""
        self._reserve(1, location)
        self._data.append(value & 0xFF)
        self.pc += 1
        self._have_block = True

    def take(self) -> tuple[int, bytes]:
        """
        Hand over the pending block and start the next one at pc.

        Returns:
            Tuple of (origin, data) of the block just finished
        """
        block = (self.origin, bytes(self._data))
        self._data.clear()
        self._have_block = False
        self.origin = self.pc
        return block

    def _reserve(self, count: int, location: Optional[SourceLocation]) -> None:
        if self.pc + count > ADDRESS_SPACE:
            raise ValueRangeError(
                f"write past end of address space at pc={self.pc:06o}",
                location,
            )
        if len(self._data) + count > MAX_BLOCK_DATA:
            raise CapacityError(
                f"block at {self.origin:06o} exceeds {MAX_BLOCK_DATA} data bytes",
                location,
                hint="insert an '=' or '::' line to start a new block",
            )
