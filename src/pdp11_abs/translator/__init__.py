"""
Octal Transcription Translator
==============================

This module converts a text transcription of a PDP-11 program, written as
octal words with a few address directives, into an absolute-format load
image.

Main Components
---------------
- **Translator**: Drives a run and owns all of its state
- **classify_line**: Recognizes the form of one line (lexer)
- **ConditionalStack / DefineSet**: #ifdef/#if/#else/#endif handling
- **BlockAccumulator**: Pending block bytes and the running pc
- **BlockEmitter**: Serializes and writes blocks
- **Diagnostics**: Collects line-tagged errors and notes

Translation Process
-------------------
Each line passes through the conditional stack first. Lines that survive
are either origin/consistency directives, which flush the pending block,
or data, which is appended to it. At end of input the last block is
flushed and a halt block is written.

Example Usage
-------------
>>> from pdp11_abs.translator import translate_file
>>> result = translate_file("CQKC_D_34_40_45.txt", "CQKC_D_34_40_45.abs",
...                         defines=["11/34"])
>>> print(result.summary())
0 errors
"""

from pdp11_abs.translator.translator import (
    Translator,
    TranslationResult,
    translate_string,
    translate_file,
)
from pdp11_abs.translator.lexer import (
    Statement,
    StatementKind,
    CONDITIONAL_KINDS,
    classify_line,
    opens_conditional,
    parse_octal,
    strip_comment,
)
from pdp11_abs.translator.conditionals import ConditionalStack, DefineSet
from pdp11_abs.translator.accumulator import BlockAccumulator
from pdp11_abs.translator.emitter import BlockEmitter
from pdp11_abs.translator.diagnostics import Diagnostics

__all__ = [
    # Main class and functions
    "Translator",
    "TranslationResult",
    "translate_string",
    "translate_file",
    # Lexer
    "Statement",
    "StatementKind",
    "CONDITIONAL_KINDS",
    "classify_line",
    "opens_conditional",
    "parse_octal",
    "strip_comment",
    # Conditionals
    "ConditionalStack",
    "DefineSet",
    # Blocks
    "BlockAccumulator",
    "BlockEmitter",
    # Diagnostics
    "Diagnostics",
]
