"""
pdp11-abs - Octal Transcription to PDP-11 Absolute Loader Format
================================================================

This package regenerates PDP-11 binaries from printed program listings.
A listing is transcribed as octal words in a small text format; the
translator turns the transcription into an "absolute format" load image
that the PDP-11 absolute loader (and emulators that mimic it) can load.

Revision-specific variants of a program are selected with a subset of C
conditional compilation (#define, #ifdef, #if 0/1, #else, #endif), and
consistency-check lines catch dropped or duplicated words by comparing
the running address with the addresses printed in the listing.

Main Components
---------------
- **translator**: Text transcription to absolute image (txt2abs)
- **absfmt**: Absolute-format blocks, checksums and image reader (absdump)

Quick Start
-----------
Translate a transcription:
    >>> from pdp11_abs import translate_file
    >>> result = translate_file("CQKC.txt", "CQKC.abs", defines=["11/34"])
    >>> result.error_count
    0

Inspect an image:
    >>> from pdp11_abs import AbsParser
    >>> parser = AbsParser.from_file("CQKC.abs")
    >>> parser.data_size()
    8192

Or use the command-line tools:
    $ txt2abs --def 11/34 CQKC.txt CQKC.abs
    $ absdump CQKC.abs

Reference Documentation
-----------------------
- Absolute loader format: https://www.pcjs.org/apps/pdp11/tapes/absloader/
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from pdp11_abs.errors import (
    Pdp11AbsError,
    SourceLocation,
    TranslationError,
    ValueRangeError,
    ParityError,
    ConsistencyError,
    NestingError,
    SourceSyntaxError,
    DirectiveError,
    CapacityError,
    AbsFormatError,
    ChecksumError,
)
from pdp11_abs.absfmt import (
    AbsBlock,
    BlockKind,
    AbsParser,
    parse_abs_image,
    read_abs_file,
    calculate_block_checksum,
    verify_block_checksum,
)
from pdp11_abs.translator import (
    Translator,
    TranslationResult,
    translate_string,
    translate_file,
)

__all__ = [
    "__version__",
    # Translator
    "Translator",
    "TranslationResult",
    "translate_string",
    "translate_file",
    # Absolute format
    "AbsBlock",
    "BlockKind",
    "AbsParser",
    "parse_abs_image",
    "read_abs_file",
    "calculate_block_checksum",
    "verify_block_checksum",
    # Exception hierarchy
    "Pdp11AbsError",
    "SourceLocation",
    "TranslationError",
    "ValueRangeError",
    "ParityError",
    "ConsistencyError",
    "NestingError",
    "SourceSyntaxError",
    "DirectiveError",
    "CapacityError",
    "AbsFormatError",
    "ChecksumError",
]
