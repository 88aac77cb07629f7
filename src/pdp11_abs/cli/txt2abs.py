"""
txt2abs - Octal Transcription to Absolute Format
================================================

This module implements the command-line interface of the translator. It
converts a text file describing PDP-11 binary data into a binary file in
absolute format (.abs) suitable for the absolute loader.

Usage Examples
--------------
Basic translation:
    $ txt2abs CQKC_D_34_40_45.txt CQKC_D_34_40_45.abs

Select a revision-specific variant:
    $ txt2abs --def 11/34 CQKC_D_34_40_45.txt CQKC_D_34_40_45.abs

Original option style:
    $ txt2abs --def 11/34 --in CQKC_D_34_40_45.txt --out CQKC_D_34_40_45.abs

Listing (pc trace of every line and every block written):
    $ txt2abs --list CQKC_D_34_40_45.txt
"""

import sys
from pathlib import Path
from typing import Optional

import click

from pdp11_abs import __version__
from pdp11_abs.cli import setup_logging
from pdp11_abs.cli.errors import ExitCode, handle_cli_exception
from pdp11_abs.translator import translate_file


def resolve_paths(
    input_file: Optional[Path],
    output_file: Optional[Path],
    in_option: Optional[Path],
    out_option: Optional[Path],
) -> tuple[Path, Path]:
    """
    Combine positional and --in/--out paths.

    Raises:
        click.UsageError: If a path is given twice or the input is missing
    """
    if input_file is not None and in_option is not None:
        raise click.UsageError("input given both as argument and with --in")
    if output_file is not None and out_option is not None:
        raise click.UsageError("output given both as argument and with --out")

    source = input_file if input_file is not None else in_option
    if source is None:
        raise click.UsageError("missing input file")

    target = output_file if output_file is not None else out_option
    if target is None:
        target = source.with_suffix(".abs")
    if target.resolve() == source.resolve():
        raise click.UsageError("output file would overwrite the input file")
    return source, target


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--in", "in_option",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Input transcription (alternative to INPUT_FILE)",
)
@click.option(
    "--out", "out_option",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output image (alternative to OUTPUT_FILE)",
)
@click.option(
    "-d", "--def", "defines",
    multiple=True,
    metavar="SYMBOL",
    help="Define symbol for #ifdef (can be repeated)",
)
@click.option(
    "-l", "--list", "listing",
    is_flag=True,
    help="List every line with its pc and every block written",
)
@click.version_option(version=__version__, prog_name="txt2abs")
def main(
    input_file: Optional[Path],
    output_file: Optional[Path],
    in_option: Optional[Path],
    out_option: Optional[Path],
    defines: tuple[str, ...],
    listing: bool,
) -> None:
    """
    Translate an octal transcription into PDP-11 absolute format.

    INPUT_FILE is the text transcription; OUTPUT_FILE defaults to the
    input name with an .abs suffix.

    \b
    Transcription syntax:
        = nnnnnn                 set origin and pc
        nnnnnn [nnnnnn [nnnnnn]] one to three 16-bit octal words
        b nnn                    single byte, pc incremented by 1
        : nnnnnn                 check: pc of the previous word
        :: nnnnnn                check: pc of the next word
        #define / #ifdef / #if 0 / #if 1 / #else / #endif
        #warning text / #error text
        // comment

    The output file is only written if no errors were found.
    """
    source, target = resolve_paths(input_file, output_file, in_option, out_option)
    setup_logging(listing)

    try:
        result = translate_file(source, target, defines=defines, listing=listing)
    except Exception as e:
        handle_cli_exception(e, verbose=listing, error_type="Translation")

    if listing or result.failed:
        click.echo(result.summary())
    if result.io_errors:
        click.echo(f"{len(result.io_errors)} write error(s)", err=True)

    if result.failed:
        sys.exit(ExitCode.BUILD_ERROR)

    if listing:
        click.echo(f"Wrote {len(result.image)} bytes in {len(result.blocks)} blocks to {target}")


if __name__ == "__main__":
    main()
