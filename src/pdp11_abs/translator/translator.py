"""
Transcription Translator - Main Interface
=========================================

This module provides the Translator class, which drives one translation
of an octal text transcription into an absolute-format load image. It
owns every piece of state for the run: line counter, define set,
conditional stack, block accumulator and diagnostics.

Example Usage
-------------
>>> from pdp11_abs.translator import translate_string
>>> result = translate_string('''
... = 1000
... 012737 000100 177776
... ''')
>>> result.error_count
0
>>> len(result.blocks)   # one data block plus the halt block
2

Output Policy
-------------
The block stream is built in memory. translate_file() opens the output
file before translating, so an unwritable path fails before any work is
done, but only writes the image if the run finished without errors. A run
with errors leaves no output file behind.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional, Union
import io
import logging

from pdp11_abs.errors import (
    CapacityError,
    ConsistencyError,
    DirectiveError,
    NestingError,
    ParityError,
    SourceLocation,
    TranslationError,
    ValueRangeError,
)
from pdp11_abs.absfmt.records import AbsBlock, BlockKind, MAX_ADDRESS, MAX_BYTE
from pdp11_abs.translator.accumulator import BlockAccumulator
from pdp11_abs.translator.conditionals import ConditionalStack, DefineSet
from pdp11_abs.translator.diagnostics import Diagnostics
from pdp11_abs.translator.emitter import BlockEmitter
from pdp11_abs.translator.lexer import (
    CONDITIONAL_KINDS,
    Statement,
    StatementKind,
    classify_line,
    opens_conditional,
)

# Logger for this module
logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """
    Outcome of a translation run.

    Attributes:
        blocks: Every block emitted, halt block last
        errors: Collected translation errors
        notes: #warning notes
        io_errors: Output write problems
        defines: Final define set, in definition order
        pc: Program counter at end of input
        image: The serialized load image (translate_string only)
        output_path: File the image was written to, None if not written
    """
    blocks: list[AbsBlock]
    errors: list[TranslationError]
    notes: list[str]
    io_errors: list[str]
    defines: list[str]
    pc: int
    image: bytes = field(default=b"", repr=False)
    output_path: Optional[Path] = None

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def failed(self) -> bool:
        """True if the image must not be used."""
        return bool(self.errors or self.io_errors)

    def summary(self) -> str:
        count = len(self.errors)
        return f"{count} error{'' if count == 1 else 's'}"


class Translator:
    """
    Translates an octal transcription, one line at a time.

    Lines go through the conditional stack first; conditional directives
    are evaluated even while suppressed so the nesting depth stays right.
    Every other line is skipped while any enclosing conditional is false.
    Origin and consistency-check lines flush the pending block; data lines
    append to it. finish() flushes the last block and writes the halt block.

    Attributes:
        filename: Source name used in diagnostics
        listing: Log a pc trace of every line and every block written
        defines: The define set
        conditionals: The conditional nesting state
        accumulator: Pending block data and pc
        diagnostics: Error and note collector
    """

    def __init__(
        self,
        defines: Iterable[str] = (),
        filename: str = "<input>",
        listing: bool = False,
        on_first_error: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the translator.

        Args:
            defines: Symbols defined before the first line (from --def)
            filename: Source name used in diagnostics
            listing: Log a pc trace of every line and every block written
            on_first_error: Called once, when the first error is recorded
        """
        self.filename = filename
        self.listing = listing
        self.defines = DefineSet()
        for symbol in defines:
            self.defines.add(symbol)
            logger.info(f"--def {symbol}")

        self.conditionals = ConditionalStack()
        self.accumulator = BlockAccumulator()
        self.diagnostics = Diagnostics(filename, on_first_error)
        self.line_number = 0
        self._emitter: Optional[BlockEmitter] = None

    @property
    def pc(self) -> int:
        return self.accumulator.pc

    @property
    def origin(self) -> int:
        return self.accumulator.origin

    # =========================================================================
    # Driving
    # =========================================================================

    def run(self, lines: Iterable[str], sink: BinaryIO) -> TranslationResult:
        """
        Translate every line and write the blocks to sink.

        Args:
            lines: Source lines (a text file object works)
            sink: Binary stream receiving the load image

        Returns:
            The TranslationResult

        Raises:
            CapacityError: If a block outgrows the absolute format
        """
        self._emitter = BlockEmitter(sink, self.diagnostics, listing=self.listing)
        for line in lines:
            self.feed(line)
        self.finish()

        return TranslationResult(
            blocks=list(self._emitter.blocks),
            errors=list(self.diagnostics.errors),
            notes=list(self.diagnostics.notes),
            io_errors=list(self.diagnostics.io_errors),
            defines=list(self.defines),
            pc=self.pc,
        )

    def feed(self, raw_line: str) -> None:
        """Process one physical line."""
        self.line_number += 1
        text = raw_line.rstrip("\r\n")

        if self.listing:
            logger.info(f"line #{self.line_number:04d}: {self.pc:06o} | {text}")

        suppressed = self.conditionals.is_suppressed()
        try:
            statement = classify_line(text, self.line_number, self.filename)
        except TranslationError as e:
            if opens_conditional(text):
                # A bad #if/#ifdef still opens a frame so its #endif has a
                # partner; the frame excludes everything up to that #endif.
                self.conditionals.push_literal(False)
                self.diagnostics.add(e)
            elif not suppressed:
                self.diagnostics.add(e)
            return

        if statement is None:
            return

        try:
            if statement.kind in CONDITIONAL_KINDS:
                self._evaluate_conditional(statement)
            elif not suppressed:
                self._execute(statement)
        except CapacityError:
            raise
        except TranslationError as e:
            self.diagnostics.add(e)

    def finish(self) -> None:
        """Report open conditionals, flush the last block and write the halt block."""
        if self.conditionals.depth:
            self.diagnostics.add(NestingError(
                f"{self.conditionals.depth} unterminated #if/#ifdef at end of input",
                SourceLocation(self.filename, self.line_number),
            ))
        self._flush(BlockKind.DATA)
        self._flush(BlockKind.HALT)

    # =========================================================================
    # Statement Handling
    # =========================================================================

    def _evaluate_conditional(self, statement: Statement) -> None:
        kind = statement.kind
        if kind is StatementKind.IF_LITERAL:
            self.conditionals.push_literal(bool(statement.value))
        elif kind is StatementKind.IFDEF:
            self.conditionals.push_ifdef(statement.symbol, self.defines)
        elif kind is StatementKind.ELSE:
            self.conditionals.toggle_else(statement.location)
        else:
            self.conditionals.pop(statement.location)

    def _execute(self, statement: Statement) -> None:
        kind = statement.kind

        if kind is StatementKind.DEFINE:
            self.defines.add(statement.symbol)
            logger.info(f"#define {statement.symbol}")

        elif kind is StatementKind.ERROR:
            self._error(statement, f'#error "{statement.message}"', DirectiveError)

        elif kind is StatementKind.WARNING:
            self.diagnostics.note(statement.line, f'#warning "{statement.message}"')

        elif kind is StatementKind.ORIGIN:
            self._set_origin(statement)

        elif kind in (StatementKind.CHECK_PC, StatementKind.CHECK_PREVIOUS):
            self._check_pc(statement)

        elif kind is StatementKind.BYTE:
            self._append_byte(statement)

        elif kind is StatementKind.WORDS:
            self._append_words(statement)

    def _set_origin(self, statement: Statement) -> None:
        self._flush(BlockKind.DATA)
        address = statement.value
        if address > MAX_ADDRESS:
            self._error(statement, f"range org={address:06o}", ValueRangeError)
            return
        self.accumulator.set_origin(address)

    def _check_pc(self, statement: Statement) -> None:
        declared = statement.value
        marker = statement.marker
        if declared > MAX_ADDRESS:
            self._error(statement, f"'{marker}' range chk={declared:06o}", ValueRangeError)
        else:
            expected = self.pc if statement.kind is StatementKind.CHECK_PC else self.pc - 2
            if expected != declared:
                self.diagnostics.add(ConsistencyError(
                    expected, declared, marker,
                    location=statement.location,
                    source_line=statement.text,
                ))
        self._flush(BlockKind.DATA)

    def _append_byte(self, statement: Statement) -> None:
        value = statement.value
        if value > MAX_BYTE:
            self._error(statement, f"range b={value:04o}", ValueRangeError)
        self.accumulator.append_byte(value, statement.location)

    def _append_words(self, statement: Statement) -> None:
        for index, value in enumerate(statement.values):
            if value > MAX_ADDRESS:
                self._error(statement, f"range w{index}={value:06o}", ValueRangeError)
        if self.pc & 1:
            self.diagnostics.add(ParityError(self.pc, statement.location, statement.text))
        for value in statement.values:
            self.accumulator.append_word(value, statement.location)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _flush(self, kind: BlockKind) -> None:
        if self._emitter is None:
            raise RuntimeError("flush outside run()")
        self._emitter.flush(self.accumulator, kind)

    def _error(self, statement: Statement, message: str, error_class: type[TranslationError]) -> None:
        self.diagnostics.error(statement.line, message, error_class, source_line=statement.text)


# =============================================================================
# Convenience Functions
# =============================================================================

def translate_string(
    source: str,
    defines: Iterable[str] = (),
    filename: str = "<input>",
    listing: bool = False,
) -> TranslationResult:
    """
    Translate transcription text held in memory.

    The image is returned in result.image even when errors were found;
    check result.failed before using it.
    """
    buffer = io.BytesIO()
    translator = Translator(defines, filename=filename, listing=listing)
    # Split like file iteration does: form feeds stay inside their line
    result = translator.run(io.StringIO(source), buffer)
    result.image = buffer.getvalue()
    return result


def translate_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path, None] = None,
    defines: Iterable[str] = (),
    listing: bool = False,
) -> TranslationResult:
    """
    Translate a transcription file into an absolute-format file.

    Args:
        input_path: Text transcription to read
        output_path: Image to write (default: input with .abs suffix)
        defines: Symbols defined before the first line
        listing: Log a pc trace of every line and every block written

    Returns:
        The TranslationResult; output_path is set only if the file was written

    Raises:
        ValueError: If the output path is the input file
        FileNotFoundError, PermissionError: If either file cannot be opened
        CapacityError: If a block outgrows the absolute format
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path is not None else input_path.with_suffix(".abs")
    if output_path.resolve() == input_path.resolve():
        raise ValueError(f"output file {output_path} would overwrite the input file")

    def discard_output() -> None:
        logger.info(f"errors found, {output_path} will not be written")

    translator = Translator(
        defines,
        filename=str(input_path),
        listing=listing,
        on_first_error=discard_output,
    )
    buffer = io.BytesIO()

    with open(input_path, "r", encoding="utf-8", errors="replace") as source:
        # Opened up front so an unwritable path fails before translating
        output = open(output_path, "wb")
        persisted = False
        try:
            with output:
                result = translator.run(source, buffer)
                result.image = buffer.getvalue()
                if not result.failed:
                    output.write(result.image)
                    result.output_path = output_path
                    persisted = True
        finally:
            if not persisted:
                output_path.unlink(missing_ok=True)

    return result
