"""
Conditional Inclusion Unit Tests
================================

Tests for DefineSet and ConditionalStack.
"""

import pytest

from pdp11_abs.translator.conditionals import ConditionalStack, DefineSet
from pdp11_abs.errors import NestingError, SourceLocation


# =============================================================================
# Define Set Tests
# =============================================================================

class TestDefineSet:
    """Tests for the define set."""

    def test_seeded(self):
        defines = DefineSet(["11/34", "11/40"])
        assert "11/34" in defines
        assert "11/45" not in defines
        assert len(defines) == 2

    def test_order_preserved(self):
        defines = DefineSet(["B", "A"])
        defines.add("C")
        assert list(defines) == ["B", "A", "C"]

    def test_add_reports_new(self):
        defines = DefineSet()
        assert defines.add("FOO") is True
        assert defines.add("FOO") is False
        assert len(defines) == 1

    def test_case_sensitive(self):
        assert "foo" not in DefineSet(["FOO"])


# =============================================================================
# Conditional Stack Tests
# =============================================================================

class TestConditionalStack:
    """Tests for nesting and suppression."""

    def test_top_level_active(self):
        stack = ConditionalStack()
        assert stack.depth == 0
        assert not stack.is_suppressed()

    def test_if_literals(self):
        stack = ConditionalStack()
        stack.push_literal(True)
        assert not stack.is_suppressed()
        stack.pop()
        stack.push_literal(False)
        assert stack.is_suppressed()

    def test_ifdef_defined(self):
        stack = ConditionalStack()
        stack.push_ifdef("FOO", DefineSet(["FOO"]))
        assert not stack.is_suppressed()

    def test_ifdef_undefined(self):
        stack = ConditionalStack()
        stack.push_ifdef("FOO", DefineSet())
        assert stack.is_suppressed()

    def test_else_inverts_innermost(self):
        stack = ConditionalStack()
        stack.push_literal(True)
        stack.push_literal(False)
        stack.toggle_else()
        assert not stack.is_suppressed()
        stack.toggle_else()
        assert stack.is_suppressed()
        assert stack.depth == 2

    def test_outer_false_hides_inner(self):
        """A suppressed outer frame wins over an active inner one."""
        stack = ConditionalStack()
        stack.push_literal(False)
        stack.push_literal(True)
        assert stack.is_suppressed()
        stack.toggle_else()
        assert stack.is_suppressed()

    def test_matched_pairs_restore_depth(self):
        stack = ConditionalStack()
        stack.push_literal(True)
        before = stack.depth
        stack.push_ifdef("X", DefineSet())
        stack.push_literal(False)
        stack.pop()
        stack.pop()
        assert stack.depth == before
        assert not stack.is_suppressed()

    def test_deep_nesting(self):
        """No artificial depth limit."""
        stack = ConditionalStack()
        for _ in range(100):
            stack.push_literal(True)
        assert stack.depth == 100
        assert not stack.is_suppressed()

    def test_endif_without_if(self):
        stack = ConditionalStack()
        with pytest.raises(NestingError, match="#endif without corresponding #if"):
            stack.pop(SourceLocation("<test>", 3))
        assert stack.depth == 0

    def test_else_without_if(self):
        stack = ConditionalStack()
        with pytest.raises(NestingError) as exc_info:
            stack.toggle_else(SourceLocation("<test>", 7))
        assert exc_info.value.line == 7
        assert stack.depth == 0
        assert not stack.is_suppressed()
