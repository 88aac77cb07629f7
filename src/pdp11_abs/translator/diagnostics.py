"""
Translation Diagnostics
=======================

Collects errors, notes and I/O problems for one translation run so that
every problem in a transcription is reported in a single pass.

Messages are logged through the standard logging module as they arrive
and kept for the final report:

    CQKC.txt:212: error: odd pc=001003
    CQKC.txt:300: note: #warning "11/04 variant untested"

    2 errors
"""

from typing import Callable, Optional
import logging

from pdp11_abs.errors import SourceLocation, TranslationError

# Logger for this module
logger = logging.getLogger(__name__)


class Diagnostics:
    """
    Error and note collector for a translation run.

    The error counter is the only failure signal of a run. The optional
    on_first_error callback fires exactly once, on the first error, so the
    caller can discard its output artifact.

    Example:
        diagnostics = Diagnostics("CQKC.txt")
        diagnostics.error(12, "range b=0400")
        if diagnostics.has_errors():
            print(diagnostics.report())
    """

    def __init__(
        self,
        filename: str = "<input>",
        on_first_error: Optional[Callable[[], None]] = None,
    ):
        self.filename = filename
        self.errors: list[TranslationError] = []
        self.notes: list[str] = []
        self.io_errors: list[str] = []
        self._on_first_error = on_first_error
        self._first_error_handled = False

    def add(self, error: TranslationError) -> None:
        """Record an error raised elsewhere."""
        self.errors.append(error)
        logger.error(str(error))

        if not self._first_error_handled:
            self._first_error_handled = True
            if self._on_first_error is not None:
                self._on_first_error()

    def error(
        self,
        line: int,
        message: str,
        error_class: type[TranslationError] = TranslationError,
        source_line: Optional[str] = None,
    ) -> TranslationError:
        """
        Record a line-tagged error.

        Returns:
            The recorded error instance
        """
        error = error_class(
            message,
            SourceLocation(self.filename, line),
            source_line=source_line,
        )
        self.add(error)
        return error

    def note(self, line: int, message: str) -> None:
        """Record a non-fatal note; never counted as an error."""
        text = f"{SourceLocation(self.filename, line)}: note: {message}"
        self.notes.append(text)
        logger.warning(text)

    def io_error(self, message: str) -> None:
        """Record an output problem that does not stop the translation."""
        self.io_errors.append(message)
        logger.error(f"write error: {message}")

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def summary(self) -> str:
        """One-line error count, e.g. '1 error' or '3 errors'."""
        count = len(self.errors)
        return f"{count} error{'' if count == 1 else 's'}"

    def report(self) -> str:
        """Format all errors, notes and the summary line for display."""
        lines = [str(error) for error in self.errors]
        lines.extend(self.notes)
        lines.extend(f"write error: {message}" for message in self.io_errors)
        lines.append(self.summary())
        return "\n".join(lines)
