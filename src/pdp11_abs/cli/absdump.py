"""
absdump - Absolute Format Image Inspector
=========================================

This module implements a command-line tool that reads an absolute-format
image, verifies every block checksum and lists the blocks. It can also
dump the data as octal words, or turn the image back into a transcription
that txt2abs accepts.

Usage Examples
--------------
List blocks:
    $ absdump CQKC.abs

Octal dump of the data:
    $ absdump CQKC.abs --data

Recreate a transcription:
    $ absdump CQKC.abs --text -o CQKC.txt
"""

from pathlib import Path
from typing import Optional

import click

from pdp11_abs import __version__
from pdp11_abs.absfmt import AbsBlock, AbsParser
from pdp11_abs.cli import setup_logging
from pdp11_abs.cli.errors import handle_cli_exception

WORDS_PER_DUMP_LINE = 8


def _split_block(block: AbsBlock) -> tuple[list[int], list[int], list[int]]:
    """Split block data into leading odd byte, words, and trailing byte."""
    data = block.data
    head: list[int] = []
    if block.address & 1 and data:
        head = [data[0]]
        data = data[1:]
    words = [data[i] | (data[i + 1] << 8) for i in range(0, len(data) - 1, 2)]
    tail = [data[-1]] if len(data) % 2 else []
    return head, words, tail


def format_block_listing(parser: AbsParser) -> list[str]:
    """One line per block: index, address, data length, checksum, kind."""
    lines = ["block  address  length  cksum"]
    for index, block in enumerate(parser.blocks):
        if block.is_halt:
            kind = "HALT"
        elif block.is_transfer:
            kind = "START"
        else:
            kind = ""
        lines.append(
            f"{index:5d}  {block.address:06o}   {len(block.data):6d}  "
            f"{block.checksum:03o}  {kind}".rstrip()
        )
    return lines


def format_octal_dump(block: AbsBlock) -> list[str]:
    """Octal word dump of one block, WORDS_PER_DUMP_LINE words per line."""
    lines = []
    head, words, tail = _split_block(block)
    address = block.address
    if head:
        lines.append(f"{address:06o}: {head[0]:03o}")
        address += 1
    for i in range(0, len(words), WORDS_PER_DUMP_LINE):
        chunk = words[i:i + WORDS_PER_DUMP_LINE]
        lines.append(f"{address:06o}: " + " ".join(f"{w:06o}" for w in chunk))
        address += 2 * len(chunk)
    if tail:
        lines.append(f"{address:06o}: {tail[0]:03o}")
    return lines


def format_transcription(parser: AbsParser) -> list[str]:
    """
    Rebuild a transcription that translates back to the same data blocks.

    Each data block starts with an origin line and ends with a '::' check
    of the address following its last byte.
    """
    lines = []
    for block in parser.data_blocks:
        head, words, tail = _split_block(block)
        lines.append(f"= {block.address:06o}")
        lines.extend(f"b {b:03o}" for b in head)
        lines.extend(f"{w:06o}" for w in words)
        lines.extend(f"b {b:03o}" for b in tail)
        lines.append(f":: {block.end_address:06o}")
    return lines


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-d", "--data",
    is_flag=True,
    help="Dump block data as octal words",
)
@click.option(
    "-t", "--text",
    is_flag=True,
    help="Write the image back as a txt2abs transcription",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="absdump")
def main(
    input_file: Path,
    data: bool,
    text: bool,
    output: Optional[Path],
    verbose: bool,
) -> None:
    """
    List and verify a PDP-11 absolute-format image.

    INPUT_FILE is the .abs image. Every block checksum is verified; a bad
    checksum or malformed block exits with status 1.
    """
    setup_logging(verbose)

    try:
        parser = AbsParser.from_file(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Image")

    if text:
        lines = format_transcription(parser)
    else:
        lines = format_block_listing(parser)
        if data:
            for block in parser.data_blocks:
                lines.append("")
                lines.extend(format_octal_dump(block))
        lines.append("")
        lines.append(
            f"{len(parser.data_blocks)} data blocks, {parser.data_size()} bytes, "
            f"checksums ok"
        )

    report = "\n".join(lines) + "\n"
    if output:
        output.write_text(report)
        if verbose:
            click.echo(f"Wrote {output}")
    else:
        click.echo(report, nl=False)


if __name__ == "__main__":
    main()
