"""
Assembly Source Tokenizer
=========================

Splits assembly source into ``Line`` records of up to three fields: label,
opcode and operand. Operands are not tokenized further here; the CPU
encoders and the expression evaluator interpret the operand text.

Token Types
-----------
- SYMBOL: letters, ``_``, ``.`` or ``#`` first, digits allowed after
- DELIMITER: ``:`` (as in ``Loop:``)
- WHITESPACE: spaces, tabs
- COMMENT: ``;`` to end of line
- LINE_CONTINUE: ``\\`` joins the next physical line to this statement
- MISC: any other run of text up to a comment or continuation; a quoted
  string inside it may contain ``;`` and ``\\``

Field Rules
-----------
- A symbol starting in column 1 is the label.
- The next symbol is the opcode.
- The first token after the opcode starts the operand, which then runs to
  the end of the statement (whitespace included). Tabs become spaces and
  the operand is trimmed.
- A statement with no fields (blank or comment-only) produces no line.

Example
-------
>>> lines = Lexer("Loop:  ldx  #Table+2 ; point at table", "demo.asm").get_lines()
>>> lines[0].label_text, lines[0].opcode_text, lines[0].operand_text
('Loop', 'ldx', '#Table+2')
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from romasm.errors import SourceLocation
from romasm.lines import Line, SourceField


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token categories of the line tokenizer."""
    MISC = auto()
    SYMBOL = auto()
    DELIMITER = auto()
    LINE_CONTINUE = auto()
    WHITESPACE = auto()
    COMMENT = auto()
    LINE_END = auto()


@dataclass(frozen=True)
class Token:
    """
    One token of a physical source line.

    Attributes:
        type: The TokenType classification
        text: Token text
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        filename: Source file name
    """
    type: TokenType
    text: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Character Classes
# =============================================================================

COMMENT_CHAR = ";"
LINE_CONTINUATION = "\\"
DELIMITER_CHAR = ":"
WHITESPACE = " \t\r\n"


def is_symbol_char(char: str, first: bool) -> bool:
    if char.isalpha() or char in "_.#":
        return True
    return not first and char.isdigit()


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes assembly source into lines.

    Usage:
        lexer = Lexer(source_text, filename)
        lines = lexer.get_lines()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self._physical_lines = source.splitlines()

    # =========================================================================
    # Token Stream
    # =========================================================================

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens for every physical line, each followed by LINE_END.
        """
        for number, text in enumerate(self._physical_lines, start=1):
            pos = 0
            while pos < len(text):
                token_type, length = self._match(text, pos)
                yield Token(token_type, text[pos:pos + length], number, pos + 1, self.filename)
                pos += length
            yield Token(TokenType.LINE_END, "", number, len(text) + 1, self.filename)

    def _match(self, text: str, pos: int) -> tuple[TokenType, int]:
        """Classify the token starting at ``pos`` and return its length."""
        char = text[pos]

        if char in WHITESPACE:
            end = pos
            while end < len(text) and text[end] in WHITESPACE:
                end += 1
            return TokenType.WHITESPACE, end - pos

        if char == LINE_CONTINUATION:
            return TokenType.LINE_CONTINUE, 1

        if char == DELIMITER_CHAR:
            return TokenType.DELIMITER, 1

        if char == COMMENT_CHAR:
            return TokenType.COMMENT, len(text) - pos

        if is_symbol_char(char, first=True):
            end = pos + 1
            while end < len(text) and is_symbol_char(text[end], first=False):
                end += 1
            return TokenType.SYMBOL, end - pos

        # Anything else runs to a comment or continuation outside quotes
        end = pos
        in_string = False
        while end < len(text):
            current = text[end]
            if current == '"':
                in_string = not in_string
            elif not in_string and current in (COMMENT_CHAR, LINE_CONTINUATION):
                break
            end += 1
        return TokenType.MISC, max(end - pos, 1)

    # =========================================================================
    # Line Assembly
    # =========================================================================

    def get_lines(self) -> list[Line]:
        """
        Build ``Line`` records from the token stream.

        Returns:
            One line per statement that has at least one field
        """
        lines: list[Line] = []
        tokens: list[Token] = []
        continued = False

        for token in self.tokenize():
            if token.type == TokenType.COMMENT:
                continue
            if token.type == TokenType.LINE_CONTINUE:
                continued = True
                continue
            if token.type == TokenType.LINE_END:
                if not continued:
                    self._add_line(tokens, lines)
                    tokens = []
                continued = False
                continue
            tokens.append(token)

        if tokens:
            self._add_line(tokens, lines)

        return lines

    def _add_line(self, tokens: list[Token], lines: list[Line]) -> None:
        if not tokens:
            return
        first_line = tokens[0].line

        label: Optional[Token] = None
        opcode: Optional[Token] = None
        operand: Optional[Token] = None
        operand_parts: list[str] = []

        for token in tokens:
            if token.type == TokenType.SYMBOL:
                if token.column == 1 and token.line == first_line and label is None:
                    label = token
                elif opcode is None:
                    opcode = token
                else:
                    if operand is None:
                        operand = token
                    operand_parts.append(token.text)
            elif token.type == TokenType.WHITESPACE:
                if operand is not None:
                    operand_parts.append(token.text)
            elif opcode is not None:
                # Delimiters and misc text before the opcode are ignored
                if operand is None:
                    operand = token
                operand_parts.append(token.text)

        if label is None and opcode is None and operand is None:
            return

        last_line = tokens[-1].line
        source = " ".join(
            self._physical_lines[number - 1].rstrip()
            for number in range(first_line, last_line + 1)
        )
        lines.append(
            Line(
                label=self._field(label),
                opcode=self._field(opcode),
                operand=self._field(operand, normalize("".join(operand_parts))),
                source=source,
            )
        )

    @staticmethod
    def _field(token: Optional[Token], text: Optional[str] = None) -> Optional[SourceField]:
        if token is None:
            return None
        return SourceField(
            token.text if text is None else text,
            token.line,
            token.column,
            token.filename,
        )


def normalize(operand_text: str) -> str:
    """Expand tabs to spaces and trim."""
    return operand_text.replace("\t", " ").strip(WHITESPACE)


def tokenize_source(source: str, filename: str = "<input>") -> list[Line]:
    """Convenience wrapper: source text to lines."""
    return Lexer(source, filename).get_lines()
