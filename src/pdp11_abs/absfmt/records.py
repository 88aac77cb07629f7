"""
Absolute Format Block Records
=============================

This module defines the data structure for one block of a PDP-11
absolute-format load image, together with the format constants.

Block Layout
------------
All multi-byte fields are little-endian:

    offset 0: signature   (2 bytes, value 1)
    offset 2: length      (2 bytes, data length + 6)
    offset 4: address     (2 bytes, load address of the first data byte)
    offset 6: data        (length - 6 bytes)
    offset N: checksum    (1 byte)

A block with no data ends the load. If its address is odd it is a halt
block and the loader stops; an even address is a start address the loader
jumps to. Images produced by txt2abs are a run of data blocks terminated
by exactly one halt block.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
import struct

from pdp11_abs.errors import AbsFormatError, ChecksumError
from pdp11_abs.absfmt.checksum import calculate_block_checksum


# =============================================================================
# Format Constants
# =============================================================================

ABS_SIGNATURE = 1          # First header word of every block
HEADER_LENGTH = 6          # signature + length + address
CHECKSUM_LENGTH = 1
HALT_ADDRESS = 1           # Any odd address halts the loader; 1 by convention

MAX_ADDRESS = 0o177777     # Top of the 16-bit address space
MAX_BYTE = 0o377
ADDRESS_SPACE = MAX_ADDRESS + 1

# The length field is 16 bits and counts the header as well
MAX_BLOCK_DATA = 0xFFFF - HEADER_LENGTH

HEADER_FORMAT = "<HHH"


class BlockKind(Enum):
    """Kinds of block the emitter can produce."""
    DATA = auto()   # Loadable data at an even or odd origin
    HALT = auto()   # End-of-load marker (odd address, no data)


# =============================================================================
# Block Record
# =============================================================================

@dataclass
class AbsBlock:
    """
    One absolute-format block.

    Attributes:
        address: Load address of the first data byte (0..0177777)
        data: Raw data bytes carried by the block

    Example:
        >>> block = AbsBlock(address=0o1000, data=bytes([0o345, 0o24]))
        >>> block.to_bytes().hex()
        '010008000002e514fc'
    """
    address: int
    data: bytes = field(default_factory=bytes)

    def __post_init__(self) -> None:
        """Validate the address and data size."""
        self.data = bytes(self.data)
        if not 0 <= self.address <= MAX_ADDRESS:
            raise AbsFormatError(f"block address {self.address:o} out of range")
        if len(self.data) > MAX_BLOCK_DATA:
            raise AbsFormatError(
                f"block data too long: {len(self.data)} bytes "
                f"(maximum {MAX_BLOCK_DATA})"
            )

    @classmethod
    def halt(cls) -> "AbsBlock":
        """Create the conventional terminating halt block."""
        return cls(address=HALT_ADDRESS)

    @property
    def is_transfer(self) -> bool:
        """True for a block with no data, which ends the load."""
        return not self.data

    @property
    def is_halt(self) -> bool:
        """True if the loader halts at this block (no data, odd address)."""
        return self.is_transfer and bool(self.address & 1)

    @property
    def length(self) -> int:
        """Value of the length field: data length plus header."""
        return len(self.data) + HEADER_LENGTH

    @property
    def end_address(self) -> int:
        """Address one past the last data byte."""
        return self.address + len(self.data)

    def header_bytes(self) -> bytes:
        """Serialize the 6-byte block header."""
        return struct.pack(HEADER_FORMAT, ABS_SIGNATURE, self.length, self.address)

    @property
    def checksum(self) -> int:
        """Checksum byte making the whole block sum to 0 mod 256."""
        return calculate_block_checksum(self.header_bytes() + self.data)

    def to_bytes(self) -> bytes:
        """Serialize the block, checksum included."""
        body = self.header_bytes() + self.data
        return body + bytes([calculate_block_checksum(body)])

    def get_size(self) -> int:
        """Total size of the serialized block in bytes."""
        return self.length + CHECKSUM_LENGTH

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> tuple["AbsBlock", int]:
        """
        Parse one block starting at offset.

        Args:
            data: Buffer containing the block
            offset: Position of the signature word

        Returns:
            Tuple of (block, offset just past the checksum byte)

        Raises:
            AbsFormatError: If the header is malformed or the block is truncated
            ChecksumError: If the checksum byte does not verify
        """
        if offset + HEADER_LENGTH > len(data):
            raise AbsFormatError(f"truncated block header at offset {offset}")

        signature, length, address = struct.unpack_from(HEADER_FORMAT, data, offset)
        if signature != ABS_SIGNATURE:
            raise AbsFormatError(
                f"bad block signature {signature:#06x} at offset {offset}"
            )
        if length < HEADER_LENGTH:
            raise AbsFormatError(
                f"block length {length} at offset {offset} is shorter than the header"
            )

        end = offset + length
        if end + CHECKSUM_LENGTH > len(data):
            raise AbsFormatError(
                f"truncated block at offset {offset}: need {length + CHECKSUM_LENGTH} "
                f"bytes, {len(data) - offset} available"
            )

        body = data[offset:end]
        stored = data[end]
        expected = calculate_block_checksum(body)
        if stored != expected:
            raise ChecksumError(address, expected, stored)

        return cls(address=address, data=data[offset + HEADER_LENGTH:end]), end + CHECKSUM_LENGTH
