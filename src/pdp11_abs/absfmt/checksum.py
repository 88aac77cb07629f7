"""
Absolute Format Checksum Calculations
=====================================

Every absolute-format block ends with a single checksum byte. The loader
adds up every byte of the block, header and checksum included, and expects
the low 8 bits of the total to be zero.

Block Checksum
--------------
- Algorithm: two's complement of the low byte of the byte sum
- Covered bytes: signature, length, address and data
- Check: (sum of all block bytes + checksum) & 0xFF == 0

Reference
---------
- Absolute loader format: https://www.pcjs.org/apps/pdp11/tapes/absloader/
"""


def calculate_block_checksum(block_bytes: bytes) -> int:
    """
    Calculate the checksum byte for a block.

    Args:
        block_bytes: Header and data bytes of the block (no checksum)

    Returns:
        Checksum byte (0x00 - 0xFF)

    Example:
        >>> calculate_block_checksum(bytes([1, 0, 6, 0, 1, 0]))
        248
    """
    total = sum(block_bytes) & 0xFF
    return (0x100 - total) & 0xFF


def verify_block_checksum(block_bytes: bytes) -> bool:
    """
    Verify a complete block, trailing checksum byte included.

    Args:
        block_bytes: The whole serialized block

    Returns:
        True if the byte sum is 0 mod 256
    """
    if not block_bytes:
        return False
    return (sum(block_bytes) & 0xFF) == 0
