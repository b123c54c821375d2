"""
romasm Error Hierarchy
======================

This module defines the exception hierarchy and diagnostic collection for
romasm. All exceptions inherit from RomasmError, allowing callers to catch
every assembler-related failure with a single except clause.

Exception Hierarchy
-------------------
RomasmError (base)
├── AssemblerError (assembler-related)
│   ├── AssemblySyntaxError - malformed source or operand text
│   ├── UndefinedSymbolError - reference to an unknown label/struct/field
│   ├── DuplicateSymbolError - label or struct that cannot be bound
│   ├── AddressingModeError - instruction has no form for the operand mode
│   ├── BranchRangeError - short branch target too far
│   ├── ExpressionError - malformed expression
│   │   └── DivisionByZeroError - division or modulo by zero (fatal)
│   ├── DirectiveError - bad .org/.setdp/.rom operand
│   ├── StructError - struct declaration problems
│   ├── PreprocessorError - #ifdef/#endif imbalance (fatal)
│   ├── ConsistencyError - post-assembly invariant violations
│   └── TooManyErrors - error limit reached
└── RomError - ROM splitting and reference validation

Fatal Errors
------------
Most assembler errors affect only the line they were raised for; the driver
records them and moves on. Errors whose class (or instance) has ``fatal`` set
halt the whole assembly immediately.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class RomasmError(Exception):
    """
    Base exception for all romasm errors.

        try:
            assembler.assemble_file("robotron.asm")
        except RomasmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a source file, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(RomasmError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
        fatal: If True the driver stops the assembly instead of continuing
               with the next line
    """

    fatal = False

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            robotron.asm:15:9: error: undefined symbol 'PlayrX'
                    ldx     PlayrX
                            ^
            hint: did you mean 'PlayerX'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def attach(
        self,
        location: Optional[SourceLocation],
        source_line: Optional[str] = None,
    ) -> "AssemblerError":
        """
        Fill in a missing location and source text after the fact.

        Errors raised deep inside the evaluator or encoders do not know
        which line they belong to; the driver attaches it on the way out.
        """
        changed = False
        if self.location is None and location is not None:
            self.location = location
            changed = True
        if self.source_line is None and source_line is not None:
            self.source_line = source_line
            changed = True
        if changed:
            self.args = (self._format_message(),)
        return self


class AssemblySyntaxError(AssemblerError):
    """
    Malformed source or operand text.

    Examples:
        - Unmatched brackets in an indexed operand
        - Register list that is not a list of registers
        - Indexed form that matches none of the known post-byte layouts
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a name that no label or struct declares.

    Every label is registered before the first pass, so an unknown name can
    never become a forward reference. The assembler suggests similar names
    to help catch typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    A label or struct name that cannot be bound.

    Same-named labels are allowed (they are disambiguated by distance), but
    binding fails when every instance already holds a different address.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            message or f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class AddressingModeError(AssemblerError):
    """
    Instruction has no encoding for the classified addressing mode.

    Example:
        sta #$41   ; Error: STA has no immediate form
    """

    def __init__(
        self,
        mnemonic: str,
        mode: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_modes: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.mode = mode
        self.valid_modes = valid_modes or []

        hint = None
        if self.valid_modes:
            modes_str = ", ".join(self.valid_modes)
            hint = f"{mnemonic} supports: {modes_str}"

        super().__init__(
            f"illegal operand mode: '{mnemonic}' does not support {mode} addressing",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class BranchRangeError(AssemblerError):
    """
    Short branch displacement does not fit in a signed byte.

    Short branches reach -128 to +127 bytes from the instruction that
    follows them. On the 6809 the long form (LBRA, LBEQ, ...) reaches
    the whole address space.
    """

    def __init__(
        self,
        target: str,
        offset: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        self.offset = offset

        direction = "forward" if offset > 0 else "backward"
        hint = (
            f"branch offset is {offset}, but range is -128 to +127; "
            f"use the long form for {direction} references"
        )

        super().__init__(
            f"operand {offset} out of 8 bit target range for '{target}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class ExpressionError(AssemblerError):
    """
    Malformed expression.

    Raised for unknown tokens, unmatched parentheses, trailing tokens and
    empty expressions. A forward reference is *not* an ExpressionError: the
    evaluator reports it by returning None.
    """
    pass


class DivisionByZeroError(ExpressionError):
    """Division or modulo by zero. Halts the assembly."""

    fatal = True

    def __init__(
        self,
        operator: str = "/",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        kind = "modulo" if operator == "%" else "division"
        super().__init__(f"{kind} by zero", location=location, source_line=source_line)


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Examples:
        - .org operand that cannot be evaluated
        - .rom line without four fields
    """
    pass


class StructError(AssemblerError):
    """
    Struct declaration or instance problem.

    Unclosed and cyclic structs are fatal; the other cases (missing label,
    empty struct, operand count mismatch) are reported per line.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        fatal: bool = False,
    ):
        super().__init__(message, location=location, hint=hint, source_line=source_line)
        self.fatal = fatal


class PreprocessorError(AssemblerError):
    """Unbalanced #ifdef/#endif. Halts the assembly."""

    fatal = True


class ConsistencyError(AssemblerError):
    """
    Post-assembly invariant violation.

    Raised for lines that were never placed, lines whose byte count does
    not match their length, and lines that could not be fixed up.
    """
    pass


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.

    This prevents runaway error output when there are fundamental problems
    with the source code.
    """

    fatal = True

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)


# =============================================================================
# ROM Tooling Exceptions
# =============================================================================

class RomError(RomasmError):
    """
    Error splitting an image or validating it against reference ROMs.

    Examples:
        - Reference file has the wrong size
        - Reference file SHA-1 does not match its .rom declaration
        - .rom region lies outside the assembled image
    """
    pass


# =============================================================================
# Diagnostics
# =============================================================================

class Severity(Enum):
    """Severity of a diagnostic message."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Diagnostic:
    """
    One entry of the diagnostic stream.

    Attributes:
        severity: info, warning or error
        message: Human readable text
        location: Source position, when the message concerns a line
    """
    severity: Severity
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.severity}: {self.message}"
        return f"{self.severity}: {self.message}"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors, warnings and informational messages for batch reporting.

    The driver uses this to continue processing after a line fails,
    collecting every problem before reporting them together. Each entry is
    also forwarded to the module logger.

    Example:
        collector = ErrorCollector(max_errors=100)

        try:
            collector.add(UndefinedSymbolError("loop"))
        except TooManyErrors:
            pass

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[Diagnostic] = []
        self.diagnostics: list[Diagnostic] = []
        self.max_errors = max_errors

    def _record(self, diagnostic: Diagnostic) -> Diagnostic:
        self.diagnostics.append(diagnostic)
        logger.log(_LOG_LEVELS[diagnostic.severity], str(diagnostic))
        return diagnostic

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Args:
            error: The error to add

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        self._record(Diagnostic(Severity.ERROR, error.message, error.location))
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"Too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        self.warnings.append(self._record(Diagnostic(Severity.WARNING, message, location)))

    def add_info(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add an informational message."""
        self._record(Diagnostic(Severity.INFO, message, location))

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors and warnings
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected messages."""
        self.errors.clear()
        self.warnings.clear()
        self.diagnostics.clear()
