# =============================================================================
# test_expressions.py - Expression Evaluator Unit Tests
# =============================================================================
# Tests for the operand expression evaluator.
#
# Test coverage includes:
#   - Decimal and hexadecimal literals
#   - Operator precedence and associativity
#   - Truncating division and modulo
#   - Unresolved symbols propagating as None
#   - Malformed expressions and division by zero
# =============================================================================

import pytest

from romasm.assembler.expressions import (
    ExprTokenType,
    ExpressionEvaluator,
    tokenize_expression,
    truncating_divide,
    truncating_modulo,
)
from romasm.errors import DivisionByZeroError, ExpressionError, UndefinedSymbolError


# =============================================================================
# Helper Functions
# =============================================================================

def evaluate(text: str, symbols: dict = None, address: int = 0):
    """
    Evaluate text with a resolver backed by a dict.

    Names mapped to None are known but unbound; names missing from the
    dict are undefined.
    """
    symbols = symbols or {}

    def resolver(name, anchor):
        if name not in symbols:
            raise UndefinedSymbolError(name)
        return symbols[name]

    return ExpressionEvaluator().evaluate(text, address, resolver)


# =============================================================================
# Literal Tests
# =============================================================================

class TestLiterals:
    """Test number literals."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("42", 42),
        ("65535", 65535),
        ("$FF", 255),
        ("$ff", 255),
        ("0x1F", 31),
        ("0X10", 16),
        ("$1234", 0x1234),
    ])
    def test_literal_value(self, text, value):
        assert evaluate(text) == value

    def test_invalid_number(self):
        """Digits run into letters."""
        with pytest.raises(ExpressionError):
            evaluate("12AB")

    def test_dollar_without_digits(self):
        with pytest.raises(ExpressionError):
            evaluate("$")


# =============================================================================
# Operator Tests
# =============================================================================

class TestOperators:
    """Test arithmetic, bitwise and logical operators."""

    def test_precedence(self):
        assert evaluate("3+4*2") == 11

    def test_parentheses(self):
        assert evaluate("(3+4)*2") == 14

    def test_left_associative_subtraction(self):
        assert evaluate("10-3-2") == 5

    def test_shift_below_addition(self):
        assert evaluate("1<<2+1") == 8

    def test_bitwise(self):
        assert evaluate("$F0|$0F") == 0xFF
        assert evaluate("$FF&$0F") == 0x0F
        assert evaluate("$FF^$0F") == 0xF0

    def test_and_binds_tighter_than_or(self):
        assert evaluate("1|2&0") == 1

    def test_logical(self):
        assert evaluate("2&&3") == 1
        assert evaluate("0||0") == 0
        assert evaluate("0||5") == 1

    def test_unary(self):
        assert evaluate("-5") == -5
        assert evaluate("+5") == 5
        assert evaluate("~0") == -1
        assert evaluate("-(2+3)*2") == -10

    def test_truncating_division(self):
        assert evaluate("7/2") == 3
        assert evaluate("-7/2") == -3
        assert truncating_divide(7, -2) == -3

    def test_modulo_sign_follows_dividend(self):
        assert evaluate("7%3") == 1
        assert truncating_modulo(-7, 3) == -1


# =============================================================================
# Symbol Tests
# =============================================================================

class TestSymbols:
    """Test symbol resolution."""

    def test_symbol_value(self):
        assert evaluate("Table+2", {"Table": 0x8000}) == 0x8002

    def test_dotted_path_passed_whole(self):
        seen = []

        def resolver(name, anchor):
            seen.append((name, anchor))
            return 4

        assert ExpressionEvaluator().evaluate("Player.pos.x*2", 0x100, resolver) == 8
        assert seen == [("Player.pos.x", 0x100)]

    def test_unresolved_symbol_is_none(self):
        assert evaluate("Later+1", {"Later": None}) is None

    def test_unresolved_inside_parentheses(self):
        assert evaluate("(Later<<1)&$FF", {"Later": None}) is None

    def test_undefined_symbol_raises(self):
        with pytest.raises(UndefinedSymbolError):
            evaluate("Missing")


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test malformed expressions."""

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            evaluate("10/0")

    def test_division_by_zero_is_fatal(self):
        with pytest.raises(DivisionByZeroError) as info:
            evaluate("10%0")
        assert info.value.fatal

    def test_division_by_zero_with_unresolved_dividend(self):
        with pytest.raises(DivisionByZeroError):
            evaluate("Later/0", {"Later": None})

    def test_empty_expression(self):
        with pytest.raises(ExpressionError):
            evaluate("")

    def test_missing_paren(self):
        with pytest.raises(ExpressionError):
            evaluate("(1+2")

    def test_trailing_operand(self):
        with pytest.raises(ExpressionError):
            evaluate("1 2")

    def test_unexpected_character(self):
        with pytest.raises(ExpressionError):
            evaluate("1 @ 2")


class TestTokenizer:
    """Test expression tokenization."""

    def test_longest_operator_first(self):
        tokens = tokenize_expression("1<<2")
        assert [t.value for t in tokens] == [1, "<<", 2]

    def test_symbol_with_digits(self):
        tokens = tokenize_expression("loop2+1")
        assert tokens[0].type == ExprTokenType.SYMBOL
        assert tokens[0].value == "loop2"
