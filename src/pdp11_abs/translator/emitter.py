"""
Block Emitter
=============

Serializes the accumulator's pending block into an absolute-format block
and writes it to the output stream. After each flush the next block starts
at the current pc, so consecutive blocks are contiguous unless an origin
line moves the pc.
"""

from typing import BinaryIO, Optional
import logging

from pdp11_abs.absfmt.records import AbsBlock, BlockKind, HALT_ADDRESS
from pdp11_abs.translator.accumulator import BlockAccumulator
from pdp11_abs.translator.diagnostics import Diagnostics

# Logger for this module
logger = logging.getLogger(__name__)


class BlockEmitter:
    """
    Writes blocks from an accumulator to a binary stream.

    Attributes:
        sink: Binary stream receiving the serialized blocks
        blocks: Every block written so far, in order
        listing: Report each written block at INFO instead of DEBUG
    """

    def __init__(self, sink: BinaryIO, diagnostics: Diagnostics, listing: bool = False):
        self.sink = sink
        self.diagnostics = diagnostics
        self.listing = listing
        self.blocks: list[AbsBlock] = []

    def flush(self, accumulator: BlockAccumulator, kind: BlockKind = BlockKind.DATA) -> Optional[AbsBlock]:
        """
        Emit the pending block.

        A DATA flush with nothing pending writes nothing. A HALT flush
        always writes a block with the odd halt address.

        Returns:
            The block written, or None
        """
        if kind is BlockKind.DATA and not accumulator.has_data:
            return None

        origin, data = accumulator.take()
        if kind is BlockKind.HALT:
            origin = HALT_ADDRESS

        block = AbsBlock(address=origin, data=data)
        self._write(block)
        self.blocks.append(block)

        logger.log(
            logging.INFO if self.listing else logging.DEBUG,
            "wrote %s org %06o len %06o cksum %04o(0x%02x)",
            "BLK" if kind is BlockKind.DATA else "HALT",
            block.address, len(block.data), block.checksum, block.checksum,
        )
        return block

    def _write(self, block: AbsBlock) -> None:
        raw = block.to_bytes()
        try:
            written = self.sink.write(raw)
        except OSError as e:
            self.diagnostics.io_error(f"block at {block.address:06o}: {e}")
            return
        if written is not None and written != len(raw):
            self.diagnostics.io_error(
                f"block at {block.address:06o}: wrote {written} of {len(raw)} bytes"
            )
