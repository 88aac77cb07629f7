"""
Absolute Format Unit Tests
==========================

Tests for absolute-format block serialization, checksums and the image
parser.

Test Categories
---------------
1. Checksum: calculation and verification
2. Records: block layout and halt blocks
3. Parser: reading images, leader handling, error detection
"""

import struct

import pytest

from pdp11_abs.absfmt import (
    AbsBlock,
    AbsParser,
    ABS_SIGNATURE,
    HEADER_LENGTH,
    HALT_ADDRESS,
    MAX_BLOCK_DATA,
    calculate_block_checksum,
    verify_block_checksum,
    parse_abs_image,
    read_abs_file,
)
from pdp11_abs.errors import AbsFormatError, ChecksumError


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def word_block() -> AbsBlock:
    """Block holding the single word 012345 at 001000."""
    return AbsBlock(address=0o1000, data=bytes([0o345, 0o24]))


@pytest.fixture
def sample_image(word_block: AbsBlock) -> bytes:
    """One data block followed by the halt block."""
    return word_block.to_bytes() + AbsBlock.halt().to_bytes()


# =============================================================================
# Checksum Tests
# =============================================================================

class TestChecksum:
    """Tests for block checksum calculation."""

    def test_halt_block_checksum(self):
        """Header 1, 6, 1 sums to 8, so the checksum is 0x100 - 8."""
        assert calculate_block_checksum(bytes([1, 0, 6, 0, 1, 0])) == 0xF8

    def test_zero_sum(self):
        """A byte sum that is already 0 mod 256 gives checksum 0."""
        assert calculate_block_checksum(bytes([0x80, 0x80])) == 0

    def test_verify_complete_block(self, word_block: AbsBlock):
        """Serialized blocks verify."""
        assert verify_block_checksum(word_block.to_bytes())

    def test_verify_detects_corruption(self, word_block: AbsBlock):
        """Flipping a data bit breaks verification."""
        raw = bytearray(word_block.to_bytes())
        raw[6] ^= 0x01
        assert not verify_block_checksum(bytes(raw))

    def test_verify_empty(self):
        """Empty input is not a valid block."""
        assert not verify_block_checksum(b"")


# =============================================================================
# Block Record Tests
# =============================================================================

class TestAbsBlock:
    """Tests for AbsBlock serialization."""

    def test_layout(self, word_block: AbsBlock):
        """Signature, length, address, data, checksum in little-endian order."""
        raw = word_block.to_bytes()
        signature, length, address = struct.unpack_from("<HHH", raw)
        assert signature == ABS_SIGNATURE
        assert length == 2 + HEADER_LENGTH
        assert address == 0o1000
        assert raw[6:8] == bytes([0xE5, 0x14])
        assert raw[8] == 0xFC
        assert len(raw) == word_block.get_size() == 9

    def test_byte_sum_is_zero(self, word_block: AbsBlock):
        """All block bytes including the checksum sum to 0 mod 256."""
        assert sum(word_block.to_bytes()) % 256 == 0

    def test_length_field(self):
        """Length field is data length plus the 6-byte header."""
        block = AbsBlock(address=0o2000, data=bytes(range(100)))
        assert block.length == 106
        assert struct.unpack_from("<H", block.to_bytes(), 2)[0] == 106

    def test_halt_block(self):
        """The halt block has an odd address and no data."""
        halt = AbsBlock.halt()
        assert halt.address == HALT_ADDRESS
        assert halt.address & 1
        assert halt.data == b""
        assert halt.is_halt
        assert halt.to_bytes() == bytes([1, 0, 6, 0, 1, 0, 0xF8])

    def test_odd_address_with_data_is_not_halt(self):
        """Data at an odd address is loaded, not a halt request."""
        block = AbsBlock(address=0o1001, data=b"\x05")
        assert not block.is_halt
        assert not block.is_transfer

    def test_even_transfer_block(self):
        """An empty block at an even address is a start block, not a halt."""
        block = AbsBlock(address=0o1000)
        assert block.is_transfer
        assert not block.is_halt

    def test_address_out_of_range(self):
        """Addresses must fit in 16 bits."""
        with pytest.raises(AbsFormatError):
            AbsBlock(address=0o200000)

    def test_data_too_long(self):
        """Data must fit the 16-bit length field."""
        with pytest.raises(AbsFormatError):
            AbsBlock(address=0, data=bytes(MAX_BLOCK_DATA + 1))

    def test_from_bytes(self, word_block: AbsBlock):
        """from_bytes returns the block and the offset past its checksum."""
        raw = word_block.to_bytes() + b"\x00\x00"
        block, offset = AbsBlock.from_bytes(raw)
        assert block == word_block
        assert offset == 9

    def test_from_bytes_bad_checksum(self, word_block: AbsBlock):
        """A corrupted checksum raises ChecksumError."""
        raw = bytearray(word_block.to_bytes())
        raw[-1] ^= 0xFF
        with pytest.raises(ChecksumError) as exc_info:
            AbsBlock.from_bytes(bytes(raw))
        assert exc_info.value.address == 0o1000

    def test_from_bytes_bad_signature(self, word_block: AbsBlock):
        """A block must start with signature 1."""
        raw = bytearray(word_block.to_bytes())
        raw[0] = 2
        with pytest.raises(AbsFormatError, match="signature"):
            AbsBlock.from_bytes(bytes(raw))

    def test_from_bytes_truncated(self, word_block: AbsBlock):
        """A block cut short raises AbsFormatError."""
        with pytest.raises(AbsFormatError, match="truncated"):
            AbsBlock.from_bytes(word_block.to_bytes()[:-2])


# =============================================================================
# Parser Tests
# =============================================================================

class TestAbsParser:
    """Tests for reading complete images."""

    def test_parse_sample(self, sample_image: bytes):
        """Parses a data block and the halt block."""
        blocks = parse_abs_image(sample_image)
        assert len(blocks) == 2
        assert blocks[0].address == 0o1000
        assert blocks[1].is_halt

    def test_leader_and_trailer(self, sample_image: bytes):
        """Null tape leader and trailer bytes are skipped."""
        parser = AbsParser.from_bytes(bytes(16) + sample_image + bytes(16))
        assert len(parser.data_blocks) == 1
        assert parser.halt_block is not None

    def test_missing_halt(self, word_block: AbsBlock):
        """An image without a final block is rejected."""
        with pytest.raises(AbsFormatError, match="without a halt"):
            parse_abs_image(word_block.to_bytes())

    def test_junk_after_halt(self, sample_image: bytes):
        """Non-null bytes after the halt block are rejected."""
        with pytest.raises(AbsFormatError, match="after final block"):
            parse_abs_image(sample_image + b"\x42")

    def test_start_address(self, word_block: AbsBlock):
        """An even empty final block gives a start address."""
        parser = AbsParser.from_bytes(word_block.to_bytes() + AbsBlock(address=0o1000).to_bytes())
        assert parser.start_address == 0o1000
        assert parser.halt_block is None

    def test_memory_image(self, sample_image: bytes):
        """Data blocks are loaded at their addresses."""
        parser = AbsParser.from_bytes(sample_image)
        memory = parser.memory_image()
        assert len(memory) == 0o200000
        assert memory[0o1000] == 0xE5
        assert memory[0o1001] == 0x14
        assert parser.read_word(0o1000) == 0o12345

    def test_read_word_loads_memory_once(self, sample_image: bytes, monkeypatch):
        """Repeated word reads reuse one loaded memory image."""
        parser = AbsParser.from_bytes(sample_image)
        calls = []
        load = parser.memory_image

        def counting_load(fill: int = 0) -> bytearray:
            calls.append(fill)
            return load(fill)

        monkeypatch.setattr(parser, "memory_image", counting_load)
        assert parser.read_word(0o1000) == 0o12345
        assert parser.read_word(0o1002) == 0
        assert parser.read_word(0o1000) == 0o12345
        assert len(calls) == 1

    def test_later_blocks_overwrite(self):
        """Overlapping blocks load in order."""
        image = (
            AbsBlock(address=0o1000, data=b"\x01\x02").to_bytes()
            + AbsBlock(address=0o1001, data=b"\x09").to_bytes()
            + AbsBlock.halt().to_bytes()
        )
        memory = AbsParser.from_bytes(image).memory_image()
        assert memory[0o1000:0o1002] == b"\x01\x09"

    def test_read_abs_file(self, tmp_path, sample_image: bytes):
        """Images can be read from disk."""
        path = tmp_path / "test.abs"
        path.write_bytes(sample_image)
        assert len(read_abs_file(path)) == 2
        assert AbsParser.from_file(path).data_size() == 2
