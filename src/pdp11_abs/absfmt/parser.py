"""
Absolute Format Parser
======================

This module reads PDP-11 absolute-format load images back into blocks.
It is the inverse of the block emitter and is used by the `absdump` tool
and by anyone who wants to check a generated image against a known-good
binary.

Parsing follows what the absolute loader does with a paper tape:

1. Null bytes between blocks (tape leader and trailer) are skipped.
2. Each block must start with the signature word 1.
3. Every block checksum must verify.
4. Loading stops at the first block without data: an odd address halts,
   an even one is the start address the loader jumps to.

Reference
---------
- Absolute loader format: https://www.pcjs.org/apps/pdp11/tapes/absloader/
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Union
import logging

from pdp11_abs.errors import AbsFormatError
from pdp11_abs.absfmt.records import AbsBlock, ADDRESS_SPACE

# Logger for this module
logger = logging.getLogger(__name__)


def _skip_leader(data: bytes, offset: int) -> int:
    """Return the offset of the next non-null byte."""
    while offset < len(data) and data[offset] == 0:
        offset += 1
    return offset


def iter_blocks(data: bytes) -> Iterator[AbsBlock]:
    """
    Yield blocks from an image up to and including the final transfer block.

    Args:
        data: Raw image bytes

    Raises:
        AbsFormatError: On a malformed block or a missing final block
        ChecksumError: On a block whose checksum does not verify
    """
    offset = _skip_leader(data, 0)
    while offset < len(data):
        block, offset = AbsBlock.from_bytes(data, offset)
        logger.debug(
            f"block at {block.address:06o}: {len(block.data)} data bytes, "
            f"checksum {block.checksum:03o}"
        )
        yield block
        if block.is_transfer:
            trailer = data[offset:]
            if any(trailer):
                raise AbsFormatError(
                    f"{len(trailer)} unexpected byte(s) after final block at offset {offset}"
                )
            return
        offset = _skip_leader(data, offset)

    raise AbsFormatError("image ends without a halt or start block")


# =============================================================================
# Image Parser
# =============================================================================

@dataclass
class AbsParser:
    """
    Parser for absolute-format load images.

    Attributes:
        data: The raw image bytes
        blocks: Parsed blocks, transfer block last

    Example:
        >>> parser = AbsParser.from_file("CQKC.abs")
        >>> for block in parser.data_blocks:
        ...     print(f"{block.address:06o} {len(block.data)}")
    """
    # Raw image data (not exposed in repr)
    data: bytes = field(repr=False)

    blocks: list[AbsBlock] = field(default_factory=list)

    # Loaded memory, built on first read_word()
    _memory: Optional[bytes] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Parse the image after initialization."""
        try:
            self.blocks = list(iter_blocks(self.data))
        except AbsFormatError as e:
            logger.error(f"Failed to parse absolute image: {e}")
            raise

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "AbsParser":
        """
        Create an AbsParser from a file path.

        Raises:
            FileNotFoundError: If the file doesn't exist
            AbsFormatError: If the file cannot be parsed
        """
        return cls(data=Path(filepath).read_bytes())

    @classmethod
    def from_bytes(cls, data: bytes) -> "AbsParser":
        """Create an AbsParser from raw bytes."""
        return cls(data=data)

    @property
    def data_blocks(self) -> list[AbsBlock]:
        """All blocks that carry data."""
        return [b for b in self.blocks if not b.is_transfer]

    @property
    def halt_block(self) -> Optional[AbsBlock]:
        """The terminating halt block."""
        if self.blocks and self.blocks[-1].is_halt:
            return self.blocks[-1]
        return None

    @property
    def start_address(self) -> Optional[int]:
        """Address the loader jumps to, None if the image halts instead."""
        if self.blocks and self.blocks[-1].is_transfer and not self.blocks[-1].is_halt:
            return self.blocks[-1].address
        return None

    def data_size(self) -> int:
        """Total number of data bytes across all data blocks."""
        return sum(len(b.data) for b in self.data_blocks)

    def memory_image(self, fill: int = 0) -> bytearray:
        """
        Load every data block into a 64 KB memory image.

        Later blocks overwrite earlier ones where they overlap, as the
        absolute loader would.

        Args:
            fill: Value of bytes not covered by any block

        Returns:
            A 65536-byte bytearray indexed by address
        """
        memory = bytearray([fill & 0xFF]) * ADDRESS_SPACE
        for block in self.data_blocks:
            end = block.address + len(block.data)
            if end > ADDRESS_SPACE:
                raise AbsFormatError(
                    f"block at {block.address:06o} runs past the end of memory"
                )
            memory[block.address:end] = block.data
        return memory

    def read_word(self, address: int) -> int:
        """Return the little-endian word loaded at an even address."""
        if address & 1:
            raise ValueError(f"odd word address {address:06o}")
        if self._memory is None:
            self._memory = bytes(self.memory_image())
        memory = self._memory
        return memory[address] | (memory[address + 1] << 8)


def parse_abs_image(data: bytes) -> list[AbsBlock]:
    """
    Parse an absolute-format image into its blocks.

    Args:
        data: The raw image bytes

    Returns:
        List of blocks, transfer block last

    Raises:
        AbsFormatError: If the image is malformed
    """
    return AbsParser(data=data).blocks


def read_abs_file(filepath: Union[str, Path]) -> list[AbsBlock]:
    """Read and parse an absolute-format image from disk."""
    return AbsParser.from_file(filepath).blocks
