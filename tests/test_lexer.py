# =============================================================================
# test_lexer.py - Line Classifier Unit Tests
# =============================================================================
# Tests for the transcription line classifier.
#
# Test coverage includes:
#   - Blank and comment lines
#   - Address directives (=, ::, :) and byte lines
#   - One to three data words
#   - Preprocessor directives
#   - Trailing comments
#   - Error conditions
# =============================================================================

import pytest

from pdp11_abs.translator.lexer import (
    StatementKind,
    classify_line,
    opens_conditional,
    parse_octal,
    strip_comment,
)
from pdp11_abs.errors import SourceLocation, SourceSyntaxError


# =============================================================================
# Helper Function
# =============================================================================

def classify(text: str):
    """Classify a line at line 1 of '<test>'."""
    return classify_line(text, 1, "<test>")


# =============================================================================
# Ignored Lines
# =============================================================================

class TestIgnoredLines:
    """Lines that never produce a statement."""

    def test_empty_line(self):
        assert classify("") is None

    def test_whitespace_only(self):
        assert classify("   \t  ") is None

    def test_comment_line(self):
        assert classify("// test 3: MOV instructions") is None

    def test_indented_comment_line(self):
        assert classify("    // indented") is None

    def test_newline_is_ignored(self):
        """A trailing newline does not change classification."""
        assert classify("012345\n").values == (0o12345,)


# =============================================================================
# Address Directives
# =============================================================================

class TestAddressDirectives:
    """Tests for '=', '::', ':' and 'b' lines."""

    def test_origin(self):
        stmt = classify("= 001000")
        assert stmt.kind == StatementKind.ORIGIN
        assert stmt.value == 0o1000
        assert stmt.marker == "="

    def test_origin_without_space(self):
        """sscanf-style parsing allowed '=1000' and so do we."""
        assert classify("=1000").value == 0o1000

    def test_strict_check(self):
        stmt = classify(":: 001004")
        assert stmt.kind == StatementKind.CHECK_PC
        assert stmt.marker == "::"

    def test_lagging_check(self):
        stmt = classify(": 001002")
        assert stmt.kind == StatementKind.CHECK_PREVIOUS
        assert stmt.value == 0o1002
        assert stmt.marker == ":"

    def test_double_colon_never_lagging(self):
        """'::' without space is still the strict check."""
        stmt = classify("::1004")
        assert stmt.kind == StatementKind.CHECK_PC
        assert stmt.value == 0o1004

    def test_byte(self):
        stmt = classify("b 377")
        assert stmt.kind == StatementKind.BYTE
        assert stmt.value == 0o377

    def test_values_not_range_checked(self):
        """Range checks happen in the translator, not the lexer."""
        assert classify("b 1000").value == 0o1000
        assert classify("= 200000").value == 0o200000

    def test_missing_operand(self):
        with pytest.raises(SourceSyntaxError):
            classify("=")

    def test_extra_operand(self):
        with pytest.raises(SourceSyntaxError, match="syntax error"):
            classify(":: 001000 001002")

    def test_non_octal_operand(self):
        with pytest.raises(SourceSyntaxError, match="invalid octal value '1009'"):
            classify("= 1009")


# =============================================================================
# Data Words
# =============================================================================

class TestDataWords:
    """Tests for lines of one to three octal words."""

    def test_single_word(self):
        stmt = classify("012345")
        assert stmt.kind == StatementKind.WORDS
        assert stmt.values == (0o12345,)

    def test_three_words(self):
        stmt = classify("  012737 000100 177776")
        assert stmt.values == (0o12737, 0o100, 0o177776)

    def test_tabs_between_words(self):
        assert classify("005000\t005001").values == (0o5000, 0o5001)

    def test_four_words_rejected(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            classify("000001 000002 000003 000004")
        assert "at most 3 words" in str(exc_info.value)

    def test_decimal_digit_rejected(self):
        with pytest.raises(SourceSyntaxError):
            classify("000009")

    def test_garbage_rejected(self):
        with pytest.raises(SourceSyntaxError):
            classify("MOV R0,R1")

    def test_error_location(self):
        """Syntax errors carry file and line."""
        with pytest.raises(SourceSyntaxError) as exc_info:
            classify_line("xyz", 42, "prog.txt")
        assert exc_info.value.location == SourceLocation("prog.txt", 42)
        assert str(exc_info.value).startswith("prog.txt:42: error:")


# =============================================================================
# Preprocessor Directives
# =============================================================================

class TestDirectives:
    """Tests for '#' lines."""

    def test_define(self):
        stmt = classify("#define 11/34")
        assert stmt.kind == StatementKind.DEFINE
        assert stmt.symbol == "11/34"

    def test_ifdef(self):
        stmt = classify("#ifdef FOO")
        assert stmt.kind == StatementKind.IFDEF
        assert stmt.symbol == "FOO"

    def test_if_literals(self):
        assert classify("#if 1").kind == StatementKind.IF_LITERAL
        assert classify("#if 1").value == 1
        assert classify("#if 0").value == 0

    def test_if_expression_rejected(self):
        with pytest.raises(SourceSyntaxError, match="syntax error"):
            classify("#if 2")

    def test_else_endif(self):
        assert classify("#else").kind == StatementKind.ELSE
        assert classify("  #endif").kind == StatementKind.ENDIF

    def test_endif_with_operand_rejected(self):
        with pytest.raises(SourceSyntaxError):
            classify("#endif FOO")

    def test_error_message(self):
        stmt = classify("#error 11/04 not supported")
        assert stmt.kind == StatementKind.ERROR
        assert stmt.message == "11/04 not supported"

    def test_warning_keeps_comment_marker(self):
        """#warning text is kept verbatim."""
        stmt = classify("#warning see http://example.org")
        assert stmt.kind == StatementKind.WARNING
        assert stmt.message == "see http://example.org"

    def test_unknown_directive(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            classify("#ifndef FOO")
        assert exc_info.value.hint == "unknown directive '#ifndef'"

    def test_opens_conditional(self):
        """Malformed openers are still recognized as openers."""
        assert opens_conditional("#ifdef A B")
        assert opens_conditional("  #if 0 old rev")
        assert not opens_conditional("#ifdefine X")
        assert not opens_conditional("#endif")
        assert not opens_conditional("")

    def test_define_without_symbol(self):
        with pytest.raises(SourceSyntaxError):
            classify("#define")


# =============================================================================
# Trailing Comments
# =============================================================================

class TestTrailingComments:
    """A trailing '// comment' is allowed after data and directives."""

    def test_after_words(self):
        assert classify("012737 000100 // MOV #100,...").values == (0o12737, 0o100)

    def test_after_check(self):
        assert classify(":: 001004   // end of test 3").value == 0o1004

    def test_after_endif(self):
        assert classify("#endif // FOO").kind == StatementKind.ENDIF

    def test_strip_comment(self):
        assert strip_comment("  012345 // x // y ") == "012345"
        assert strip_comment("012345") == "012345"


# =============================================================================
# Octal Parsing
# =============================================================================

class TestParseOctal:
    """Tests for parse_octal()."""

    def test_values(self):
        location = SourceLocation("<test>", 1)
        assert parse_octal("0", location, "0") == 0
        assert parse_octal("177777", location, "177777") == 0xFFFF
        assert parse_octal("0377", location, "0377") == 0xFF

    def test_rejects_sign(self):
        location = SourceLocation("<test>", 1)
        with pytest.raises(SourceSyntaxError):
            parse_octal("-1", location, "-1")
