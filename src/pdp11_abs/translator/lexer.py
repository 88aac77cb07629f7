"""
Transcription Line Classifier
=============================

This module turns one physical line of an octal transcription into a
Statement. It only recognizes the shape of the line and converts octal
digits to integers; range, parity and consistency checks belong to the
translator, which knows the current pc.

Line Forms
----------
    = 001000                set origin and pc
    :: 001004               assert pc == 001004, then flush the block
    : 001002                assert pc-2 == 001002, then flush the block
    b 377                   one byte
    012737 000100 177776    one to three words
    #define NAME
    #ifdef NAME / #if 1 / #if 0 / #else / #endif
    #error text / #warning text
    // comment

Blank lines and lines starting with `//` yield no statement. A trailing
`// comment` is allowed after any other form except #error and #warning,
whose whole text is the message.

Example
-------
>>> classify_line("  :: 001004   // end of test 3", line=12)
Statement(CHECK_PC, [0o1004], line 12)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional
import re

from pdp11_abs.errors import SourceLocation, SourceSyntaxError


# =============================================================================
# Statement Kinds
# =============================================================================

class StatementKind(Enum):
    """Kinds of line recognized in a transcription."""

    # Conditional directives (evaluated even while suppressed)
    IF_LITERAL = auto()      # #if 0 / #if 1
    IFDEF = auto()           # #ifdef NAME
    ELSE = auto()            # #else
    ENDIF = auto()           # #endif

    # Other directives
    DEFINE = auto()          # #define NAME
    ERROR = auto()           # #error text
    WARNING = auto()         # #warning text

    # Address directives
    ORIGIN = auto()          # = addr
    CHECK_PC = auto()        # :: addr
    CHECK_PREVIOUS = auto()  # : addr

    # Data
    BYTE = auto()            # b value
    WORDS = auto()           # w0 [w1 [w2]]


CONDITIONAL_KINDS = frozenset({
    StatementKind.IF_LITERAL,
    StatementKind.IFDEF,
    StatementKind.ELSE,
    StatementKind.ENDIF,
})

COMMENT_MARKER = "//"

# Directives that open a conditional frame
CONDITIONAL_OPENERS = frozenset({"#if", "#ifdef"})

# Marker -> statement kind. Markers are tried longest first so that "::"
# is never read as ":" followed by an operand starting with ':'.
ADDRESS_MARKERS = {
    "=": StatementKind.ORIGIN,
    "::": StatementKind.CHECK_PC,
    ":": StatementKind.CHECK_PREVIOUS,
    "b": StatementKind.BYTE,
}
_MARKERS_LONGEST_FIRST = sorted(ADDRESS_MARKERS, key=len, reverse=True)

MAX_WORDS_PER_LINE = 3

OCTAL_PATTERN = re.compile(r"[0-7]+")


# =============================================================================
# Statement Data Class
# =============================================================================

@dataclass(frozen=True)
class Statement:
    """
    One classified transcription line.

    Attributes:
        kind: The StatementKind classification
        line: Line number in source (1-indexed)
        text: The source line with surrounding whitespace removed
        values: Octal operands converted to integers (not range checked)
        symbol: Symbol name for #define and #ifdef
        message: Message text for #error and #warning
        filename: Name of the source file
    """
    kind: StatementKind
    line: int
    text: str
    values: tuple[int, ...] = ()
    symbol: Optional[str] = None
    message: str = ""
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.values:
            operands = ", ".join(f"0o{v:o}" for v in self.values)
            return f"Statement({self.kind.name}, [{operands}], line {self.line})"
        if self.symbol is not None:
            return f"Statement({self.kind.name}, {self.symbol!r}, line {self.line})"
        return f"Statement({self.kind.name}, line {self.line})"

    @property
    def value(self) -> int:
        """The first (usually only) operand."""
        return self.values[0]

    @property
    def marker(self) -> str:
        """The address marker for ORIGIN/CHECK statements, '' otherwise."""
        for marker, kind in ADDRESS_MARKERS.items():
            if kind is self.kind:
                return marker
        return ""

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line)


# =============================================================================
# Helpers
# =============================================================================

def strip_comment(text: str) -> str:
    """Remove a trailing `// comment` and surrounding whitespace."""
    index = text.find(COMMENT_MARKER)
    if index >= 0:
        text = text[:index]
    return text.strip()


def is_blank_or_comment(text: str) -> bool:
    """True for lines that are ignored everywhere."""
    stripped = text.strip()
    return not stripped or stripped.startswith(COMMENT_MARKER)


def opens_conditional(text: str) -> bool:
    """True if the line starts with #if or #ifdef, well-formed or not."""
    words = text.split(None, 1)
    return bool(words) and words[0] in CONDITIONAL_OPENERS


def parse_octal(token: str, location: SourceLocation, source_line: str) -> int:
    """
    Convert an octal digit string to an integer.

    Raises:
        SourceSyntaxError: If the token contains anything but digits 0-7
    """
    if not OCTAL_PATTERN.fullmatch(token):
        raise SourceSyntaxError(
            f"invalid octal value '{token}'",
            location,
            hint="values are written in octal, digits 0-7 only",
            source_line=source_line,
        )
    return int(token, 8)


def _syntax_error(text: str, location: SourceLocation, hint: Optional[str] = None) -> SourceSyntaxError:
    return SourceSyntaxError(f'syntax error "{text}"', location, hint=hint, source_line=text)


# =============================================================================
# Classification
# =============================================================================

def classify_line(text: str, line: int = 0, filename: str = "<input>") -> Optional[Statement]:
    """
    Classify one physical line.

    Args:
        text: The raw line (newline may still be attached)
        line: Line number for error reporting
        filename: Source filename for error reporting

    Returns:
        A Statement, or None for blank and comment lines

    Raises:
        SourceSyntaxError: If the line matches no recognized form
    """
    if is_blank_or_comment(text):
        return None

    stripped = text.strip()
    location = SourceLocation(filename, line)

    if stripped.startswith("#"):
        return _classify_directive(stripped, line, filename, location)

    body = strip_comment(stripped)

    for marker in _MARKERS_LONGEST_FIRST:
        if body.startswith(marker):
            operands = body[len(marker):].split()
            if len(operands) != 1:
                raise _syntax_error(
                    stripped, location,
                    hint=f"'{marker}' takes exactly one octal value",
                )
            return Statement(
                kind=ADDRESS_MARKERS[marker],
                line=line,
                text=stripped,
                values=(parse_octal(operands[0], location, stripped),),
                filename=filename,
            )

    words = body.split()
    if len(words) > MAX_WORDS_PER_LINE:
        raise _syntax_error(
            stripped, location,
            hint=f"at most {MAX_WORDS_PER_LINE} words per line",
        )
    return Statement(
        kind=StatementKind.WORDS,
        line=line,
        text=stripped,
        values=tuple(parse_octal(w, location, stripped) for w in words),
        filename=filename,
    )


def _classify_directive(
    stripped: str, line: int, filename: str, location: SourceLocation
) -> Statement:
    """Classify a line starting with '#'."""
    parts = stripped.split(None, 1)
    directive = parts[0]
    rest = parts[1] if len(parts) > 1 else ""

    # Message directives keep their text verbatim, comment markers included
    if directive == "#error":
        return Statement(StatementKind.ERROR, line, stripped, message=rest.strip(), filename=filename)
    if directive == "#warning":
        return Statement(StatementKind.WARNING, line, stripped, message=rest.strip(), filename=filename)

    operands = strip_comment(rest).split()

    if directive in ("#define", "#ifdef"):
        if len(operands) != 1:
            raise _syntax_error(stripped, location, hint=f"{directive} takes one symbol name")
        kind = StatementKind.DEFINE if directive == "#define" else StatementKind.IFDEF
        return Statement(kind, line, stripped, symbol=operands[0], filename=filename)

    if directive == "#if":
        if operands not in (["0"], ["1"]):
            raise _syntax_error(stripped, location, hint="only '#if 0' and '#if 1' are supported")
        return Statement(StatementKind.IF_LITERAL, line, stripped, values=(int(operands[0]),), filename=filename)

    if directive in ("#else", "#endif"):
        if operands:
            raise _syntax_error(stripped, location, hint=f"{directive} takes no operands")
        kind = StatementKind.ELSE if directive == "#else" else StatementKind.ENDIF
        return Statement(kind, line, stripped, filename=filename)

    raise _syntax_error(stripped, location, hint=f"unknown directive '{directive}'")
