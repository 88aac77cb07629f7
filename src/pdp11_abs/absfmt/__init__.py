"""
PDP-11 Absolute Format Support
==============================

This module provides the block structure of the PDP-11 "absolute format"
load image, as read by the absolute loader from paper tape, together with
a reader that parses and verifies such images.

Quick Start
-----------
Building a block by hand:

    >>> from pdp11_abs.absfmt import AbsBlock
    >>> block = AbsBlock(address=0o1000, data=bytes([0o345, 0o24]))
    >>> raw = block.to_bytes()

Reading an image:

    >>> from pdp11_abs.absfmt import AbsParser
    >>> parser = AbsParser.from_file("CQKC.abs")
    >>> for block in parser.data_blocks:
    ...     print(f"{block.address:06o}: {len(block.data)} bytes")

Reference
---------
- Absolute loader format: https://www.pcjs.org/apps/pdp11/tapes/absloader/
"""

from pdp11_abs.absfmt.records import (
    AbsBlock,
    BlockKind,
    ABS_SIGNATURE,
    HEADER_LENGTH,
    CHECKSUM_LENGTH,
    HALT_ADDRESS,
    MAX_ADDRESS,
    MAX_BYTE,
    MAX_BLOCK_DATA,
    ADDRESS_SPACE,
)
from pdp11_abs.absfmt.checksum import (
    calculate_block_checksum,
    verify_block_checksum,
)
from pdp11_abs.absfmt.parser import (
    AbsParser,
    iter_blocks,
    parse_abs_image,
    read_abs_file,
)

__all__ = [
    # Records
    "AbsBlock",
    "BlockKind",
    # Constants
    "ABS_SIGNATURE",
    "HEADER_LENGTH",
    "CHECKSUM_LENGTH",
    "HALT_ADDRESS",
    "MAX_ADDRESS",
    "MAX_BYTE",
    "MAX_BLOCK_DATA",
    "ADDRESS_SPACE",
    # Checksum
    "calculate_block_checksum",
    "verify_block_checksum",
    # Parser
    "AbsParser",
    "iter_blocks",
    "parse_abs_image",
    "read_abs_file",
]
