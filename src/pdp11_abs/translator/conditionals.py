"""
Conditional Inclusion
=====================

This module implements the small subset of C-style conditional compilation
used by transcriptions to select revision-specific variants of a program:

    #define NAME            - Add NAME to the define set
    #ifdef NAME             - Include following lines if NAME is defined
    #if 1 / #if 0           - Always / never include following lines
    #else                   - Invert the innermost conditional
    #endif                  - Close the innermost conditional

There is no macro expansion and no expression evaluation; a symbol is
either in the define set or it is not.

Conditional directives are evaluated even inside suppressed regions so
that the nesting depth stays correct; the translator asks
`is_suppressed()` before acting on any other line.
"""

from typing import Iterable, Iterator, Optional

from pdp11_abs.errors import NestingError, SourceLocation


class DefineSet:
    """
    Ordered set of defined symbol names.

    Seeded from command-line `--def` values and grown by `#define` lines.
    Symbols are never removed during a run; membership is an exact,
    case-sensitive string match.
    """

    def __init__(self, symbols: Iterable[str] = ()):
        self._symbols: list[str] = []
        for symbol in symbols:
            self.add(symbol)

    def add(self, symbol: str) -> bool:
        """
        Define a symbol.

        Returns:
            True if the symbol was new, False if it was already defined
        """
        if symbol in self._symbols:
            return False
        self._symbols.append(symbol)
        return True

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._symbols

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"DefineSet({self._symbols!r})"


class ConditionalStack:
    """
    Nesting state of #if/#ifdef/#else/#endif.

    Each open frame holds a single flag: True while the frame is in its
    suppressed branch. A line is visible only when no open frame is
    suppressed, so a false outer #ifdef hides everything nested inside it
    whatever the inner conditions say.

    Example:
        >>> stack = ConditionalStack()
        >>> stack.push_ifdef("11/34", DefineSet(["11/34"]))
        >>> stack.is_suppressed()
        False
        >>> stack.toggle_else()
        >>> stack.is_suppressed()
        True
        >>> stack.pop()
        >>> stack.depth
        0
    """

    def __init__(self) -> None:
        # One suppression flag per open frame, innermost last
        self._frames: list[bool] = []

    @property
    def depth(self) -> int:
        """Number of open conditional frames."""
        return len(self._frames)

    def push_literal(self, active: bool) -> None:
        """Open a frame for `#if 1` (active) or `#if 0` (inactive)."""
        self._frames.append(not active)

    def push_ifdef(self, symbol: str, defines: DefineSet) -> None:
        """Open a frame for `#ifdef SYMBOL`."""
        self._frames.append(symbol not in defines)

    def toggle_else(self, location: Optional[SourceLocation] = None) -> None:
        """
        Flip the innermost frame for `#else`.

        Raises:
            NestingError: If no frame is open (the stack is left unchanged)
        """
        if not self._frames:
            raise NestingError("#else not inside #if", location)
        self._frames[-1] = not self._frames[-1]

    def pop(self, location: Optional[SourceLocation] = None) -> None:
        """
        Close the innermost frame for `#endif`.

        Raises:
            NestingError: If no frame is open (the stack is left unchanged)
        """
        if not self._frames:
            raise NestingError("#endif without corresponding #if", location)
        self._frames.pop()

    def is_suppressed(self) -> bool:
        """True if any open frame is in its suppressed branch."""
        return any(self._frames)
