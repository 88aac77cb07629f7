"""
pdp11-abs Command-Line Interface
================================

This package provides the command-line tools:

- **txt2abs**: Octal transcription to absolute-format image
- **absdump**: Absolute-format image listing and verification

Each tool is implemented as a Click-based CLI application.
"""

import logging

__all__ = ["txt2abs", "absdump", "setup_logging"]


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )
