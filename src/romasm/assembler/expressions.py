"""
Assembly Expression Evaluator
=============================

Evaluates the integer expressions that appear in operands and directive
arguments. A symbol that is known to exist but has no address yet makes
the whole expression *unresolved*: ``evaluate`` returns None and the
caller retries on the fixup pass.

Supported Operations
--------------------
**Arithmetic:** ``+ - * / %`` (division and modulo truncate toward zero)

**Bitwise:** ``& | ^ << >>``, unary ``~``

**Logical:** ``&& ||`` (result is 0 or 1)

**Unary:** ``+ -``

Precedence (highest first)
--------------------------
    8   unary + - ~         (right-associative)
    7   * / %
    6   + -
    5   << >>
    4   &
    3   ^
    2   |
    1   &&
    0   ||

Binary operators are left-associative. Parentheses group.

Literals and Symbols
--------------------
- ``$1F`` and ``0x1F`` are hexadecimal, ``31`` is decimal
- Symbols start with a letter, ``_``, ``.`` or ``#`` and may contain
  digits after the first character
- Dotted paths such as ``Player.pos.x`` are a single symbol and are passed
  to the resolver whole

Example Usage
-------------
>>> evaluator = ExpressionEvaluator()
>>> evaluator.evaluate("(3+4)*2", 0, lambda name, address: None)
14
>>> evaluator.evaluate("Table+2", 0x8000, lambda name, address: None) is None
True
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from romasm.errors import DivisionByZeroError, ExpressionError


# Resolves a symbol or dotted path at an address. Returns None while the
# symbol has no value yet; raises UndefinedSymbolError for unknown names.
SymbolResolver = Callable[[str, int], Optional[int]]


# =============================================================================
# Expression Tokens
# =============================================================================

class ExprTokenType(Enum):
    """Kinds of expression tokens."""
    NUMBER = auto()
    SYMBOL = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()


@dataclass(frozen=True)
class ExprToken:
    type: ExprTokenType
    value: int | str
    column: int


# Longest operators first so '<<' is not read as two '<'
OPERATORS = ("&&", "||", "<<", ">>", "*", "/", "%", "+", "-", "&", "^", "|", "~")

BINARY_PRECEDENCE = {
    "*": 7, "/": 7, "%": 7,
    "+": 6, "-": 6,
    "<<": 5, ">>": 5,
    "&": 4,
    "^": 3,
    "|": 2,
    "&&": 1,
    "||": 0,
}

UNARY_OPERATORS = ("+", "-", "~")
UNARY_PRECEDENCE = 8

HEX_DIGITS = "0123456789abcdefABCDEF"


def is_symbol_start(char: str) -> bool:
    return char.isalpha() or char in "_.#"


def is_symbol_char(char: str) -> bool:
    return char.isalnum() or char in "_.#"


def tokenize_expression(text: str) -> list[ExprToken]:
    """
    Split expression text into tokens.

    Raises:
        ExpressionError: On a character that starts no token
    """
    tokens: list[ExprToken] = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char in " \t":
            pos += 1
            continue

        # Numbers are matched before symbols
        if char == "$" or char.isdigit():
            start = pos
            if char == "$":
                pos += 1
                base = 16
            elif text[pos:pos + 2].lower() == "0x":
                pos += 2
                base = 16
            else:
                base = 10
            digits_start = pos
            valid = HEX_DIGITS if base == 16 else "0123456789"
            while pos < length and text[pos] in valid:
                pos += 1
            digits = text[digits_start:pos]
            if not digits or (pos < length and is_symbol_char(text[pos])):
                end = pos
                while end < length and is_symbol_char(text[end]):
                    end += 1
                raise ExpressionError(f"invalid number '{text[start:max(end, pos)]}'")
            tokens.append(ExprToken(ExprTokenType.NUMBER, int(digits, base), start + 1))
            continue

        if is_symbol_start(char):
            start = pos
            while pos < length and is_symbol_char(text[pos]):
                pos += 1
            tokens.append(ExprToken(ExprTokenType.SYMBOL, text[start:pos], start + 1))
            continue

        if char == "(":
            tokens.append(ExprToken(ExprTokenType.LPAREN, char, pos + 1))
            pos += 1
            continue

        if char == ")":
            tokens.append(ExprToken(ExprTokenType.RPAREN, char, pos + 1))
            pos += 1
            continue

        for operator in OPERATORS:
            if text.startswith(operator, pos):
                tokens.append(ExprToken(ExprTokenType.OPERATOR, operator, pos + 1))
                pos += len(operator)
                break
        else:
            raise ExpressionError(f"unexpected character '{char}' in expression '{text}'")

    return tokens


# =============================================================================
# Arithmetic Helpers
# =============================================================================

def truncating_divide(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def truncating_modulo(left: int, right: int) -> int:
    """Remainder with the sign of the dividend."""
    return left - right * truncating_divide(left, right)


def apply_binary(operator: str, left: Optional[int], right: Optional[int]) -> Optional[int]:
    """
    Apply a binary operator to two possibly-unresolved operands.

    Division by zero is reported even when the dividend is unresolved.
    """
    if operator in ("/", "%") and right == 0:
        raise DivisionByZeroError(operator)
    if left is None or right is None:
        return None

    if operator == "*":
        return left * right
    if operator == "/":
        return truncating_divide(left, right)
    if operator == "%":
        return truncating_modulo(left, right)
    if operator == "+":
        return left + right
    if operator == "-":
        return left - right
    if operator == "<<":
        return left << right if right >= 0 else left >> -right
    if operator == ">>":
        return left >> right if right >= 0 else left << -right
    if operator == "&":
        return left & right
    if operator == "^":
        return left ^ right
    if operator == "|":
        return left | right
    if operator == "&&":
        return 1 if left and right else 0
    if operator == "||":
        return 1 if left or right else 0
    raise ExpressionError(f"unknown operator '{operator}'")


# =============================================================================
# Expression Evaluator
# =============================================================================

class ExpressionEvaluator:
    """
    Precedence-climbing evaluator.

    The evaluator is stateless apart from a cache of tokenized expressions,
    so one instance serves the whole assembly. Symbol values come from the
    resolver passed to each ``evaluate`` call.
    """

    def __init__(self):
        self._token_cache: dict[str, list[ExprToken]] = {}

    # =========================================================================
    # Main Evaluation Interface
    # =========================================================================

    def evaluate(self, text: str, address: int, resolver: SymbolResolver) -> Optional[int]:
        """
        Evaluate expression text.

        Args:
            text: Expression source
            address: Address of the instruction being assembled; passed to
                     the resolver to pick the nearest of same-named labels
            resolver: Symbol lookup callback

        Returns:
            The integer value, or None if a referenced symbol is unresolved

        Raises:
            ExpressionError: If the expression is malformed
            DivisionByZeroError: On division or modulo by zero
            UndefinedSymbolError: Propagated from the resolver
        """
        tokens = self._token_cache.get(text)
        if tokens is None:
            tokens = tokenize_expression(text)
            self._token_cache[text] = tokens
        if not tokens:
            raise ExpressionError("empty expression")

        self._text = text
        self._tokens = tokens
        self._pos = 0
        self._address = address
        self._resolver = resolver

        result = self._parse_expression(0)

        if self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            raise ExpressionError(
                f"unexpected '{token.value}' at column {token.column} in expression '{text}'"
            )
        return result

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Optional[ExprToken]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> ExprToken:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    # =========================================================================
    # Precedence Climbing
    # =========================================================================

    def _parse_expression(self, min_precedence: int) -> Optional[int]:
        left = self._parse_unary()

        while True:
            token = self._current()
            if token is None or token.type != ExprTokenType.OPERATOR:
                break
            precedence = BINARY_PRECEDENCE.get(token.value)
            if precedence is None or precedence < min_precedence:
                break
            self._advance()
            right = self._parse_expression(precedence + 1)
            left = apply_binary(token.value, left, right)

        return left

    def _parse_unary(self) -> Optional[int]:
        token = self._current()
        if (
            token is not None
            and token.type == ExprTokenType.OPERATOR
            and token.value in UNARY_OPERATORS
        ):
            self._advance()
            operand = self._parse_unary()
            if operand is None:
                return None
            if token.value == "-":
                return -operand
            if token.value == "~":
                return ~operand
            return operand
        return self._parse_primary()

    def _parse_primary(self) -> Optional[int]:
        token = self._current()
        if token is None:
            raise ExpressionError(f"unexpected end of expression '{self._text}'")

        if token.type == ExprTokenType.NUMBER:
            self._advance()
            return token.value

        if token.type == ExprTokenType.SYMBOL:
            self._advance()
            return self._resolver(token.value, self._address)

        if token.type == ExprTokenType.LPAREN:
            self._advance()
            result = self._parse_expression(0)
            closing = self._current()
            if closing is None or closing.type != ExprTokenType.RPAREN:
                raise ExpressionError(f"expected ')' in expression '{self._text}'")
            self._advance()
            return result

        raise ExpressionError(
            f"expected value, got '{token.value}' at column {token.column} "
            f"in expression '{self._text}'"
        )
