"""
PDP-11 Absolute Format Error Hierarchy
======================================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Pdp11AbsError, allowing callers to catch all
package-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
Pdp11AbsError (base)
├── TranslationError (text transcription problems, reported per line)
│   ├── ValueRangeError - octal value or address outside its bounds
│   ├── ParityError - word written at an odd pc
│   ├── ConsistencyError - declared pc does not match the computed pc
│   ├── NestingError - unbalanced #if/#ifdef/#else/#endif
│   ├── SourceSyntaxError - line matches no recognized form
│   ├── DirectiveError - explicit #error directive
│   └── CapacityError - block larger than the format can describe (fatal)
└── AbsFormatError (reading absolute-format images)
    └── ChecksumError - block checksum does not verify

Translation errors are collected rather than raised to the caller: the
translator keeps going after a bad line so that one run reports every
problem in the transcription. CapacityError is the exception, it stops the
run because the block being built can no longer be represented.

Error messages follow this format:
    filename:line: error: description
        source line text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Pdp11AbsError(Exception):
    """
    Base exception for all pdp11_abs errors.

        try:
            translate_file("CQKC.txt", "CQKC.abs")
        except Pdp11AbsError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a line in a transcription file for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Translation Exceptions
# =============================================================================

class TranslationError(Pdp11AbsError):
    """
    Base exception for problems found in a text transcription.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> int:
        """Line number of the error, 0 when unknown."""
        return self.location.line if self.location else 0

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            CQKC.txt:212: error: consistency check, expecting pc=001004 but ":: 001006" specified
                :: 001006
            hint: a word may be missing before this line
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line.strip()}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ValueRangeError(TranslationError):
    """
    Octal value outside its allowed range.

    Words and addresses must fit in 16 bits (0..0177777), single bytes in
    8 bits (0..0377). Also raised when data would be written past the top
    of the 16-bit address space.
    """
    pass


class ParityError(TranslationError):
    """
    Word written at an odd address.

    PDP-11 words live on even addresses; a word line reached with an odd
    pc usually means a stray `b` line or a wrong origin.
    """

    def __init__(
        self,
        pc: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.pc = pc
        super().__init__(
            f"odd pc={pc:06o}",
            location=location,
            hint="words must start on an even address",
            source_line=source_line,
        )


class ConsistencyError(TranslationError):
    """
    Declared address does not match the computed pc.

    Raised for `::` and `:` check lines. The translation continues; the
    check exists to catch dropped or duplicated words in a transcription.
    """

    def __init__(
        self,
        expected: int,
        declared: int,
        marker: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.declared = declared
        self.marker = marker

        what = "pc" if marker == "::" else "(pc-2)"
        delta = declared - expected
        if delta > 0:
            hint = f"{delta} byte(s) appear to be missing before this line"
        else:
            hint = f"{-delta} byte(s) appear to be extra before this line"

        super().__init__(
            f'consistency check, expecting {what}={expected:06o} '
            f'but "{marker} {declared:06o}" specified',
            location=location,
            hint=hint,
            source_line=source_line,
        )


class NestingError(TranslationError):
    """
    Unbalanced conditional directives.

    Raised for #else or #endif with no open #if/#ifdef, and for
    conditionals still open at the end of the input.
    """
    pass


class SourceSyntaxError(TranslationError):
    """
    Line matches none of the recognized directive or data forms.

    Examples:
        - Non-octal digits (8, 9) in a value
        - More than three words on one line
        - Unknown directive such as #ifndef
    """
    pass


class DirectiveError(TranslationError):
    """Error raised explicitly by an #error line in the transcription."""
    pass


class CapacityError(TranslationError):
    """
    Block data exceeds what one absolute-format block can hold.

    The length field of a block is 16 bits wide and includes the 6-byte
    header, so a single block carries at most 0xFFFF - 6 data bytes.
    """
    pass


# =============================================================================
# Absolute Format Exceptions
# =============================================================================

class AbsFormatError(Pdp11AbsError):
    """
    Invalid absolute-format image.

    Raised when reading an image that has:
    - A bad block signature
    - A length field shorter than the header
    - A truncated block
    - No terminating halt block
    """
    pass


class ChecksumError(AbsFormatError):
    """
    Block checksum verification failed.

    The byte sum of a whole block, checksum included, must be 0 mod 256.
    """

    def __init__(self, address: int, expected: int, actual: int, message: str = ""):
        self.address = address
        self.expected = expected
        self.actual = actual
        if not message:
            message = (
                f"checksum mismatch in block at {address:06o}: "
                f"expected {expected:03o}, got {actual:03o}"
            )
        super().__init__(message)
