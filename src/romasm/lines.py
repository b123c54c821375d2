"""
Assembly Line Records
=====================

The assembler core works on a flat list of ``Line`` records, one per
statement. The tokenizer creates them once; every later stage (preprocessor,
struct extraction, both passes, ROM materialization) mutates the same
objects in place and never replaces them.

Each line carries up to three text fields:

    label    opcode  operand
    Loop:    ldx     #Table+2     ; comment stripped by the tokenizer

plus the encoding state filled in by the driver: start address, length,
emitted bytes, the fixup flag and the addressing mode that was chosen.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from romasm.errors import SourceLocation

if TYPE_CHECKING:
    from romasm.cpu.base import AddressingMode


# Sentinels for fields that are not yet known
UNASSIGNED = -1
UNKNOWN = -1


@dataclass
class SourceField:
    """
    One text field of a source line.

    Attributes:
        text: Field text (operands are tab-expanded and trimmed)
        line: Line number (1-indexed)
        column: Column where the field starts (1-indexed)
        filename: Source file name
    """
    text: str
    line: int = 0
    column: int = 1
    filename: str = "<input>"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)

    def __str__(self) -> str:
        return self.text


@dataclass(eq=False)
class Line:
    """
    One assembly statement and its encoding state.

    Lines compare by identity: two statements with the same text at
    different places are different lines.

    Attributes:
        label: Label field (symbol in column 0)
        opcode: Mnemonic, pseudo-op, directive or struct name
        operand: Remaining text
        source: Original source text (for listings and error context)
        address: Start address, UNASSIGNED until placed
        length: Byte length, UNKNOWN until encoded
        data: Emitted bytes
        needs_fixup: Operand could not be evaluated on the current pass
        mode: Addressing mode chosen by the CPU encoder
        wide_offset: Pin a variable-width offset to its 16-bit form
    """
    label: Optional[SourceField] = None
    opcode: Optional[SourceField] = None
    operand: Optional[SourceField] = None
    source: str = ""
    address: int = UNASSIGNED
    length: int = UNKNOWN
    data: bytearray = field(default_factory=bytearray)
    needs_fixup: bool = False
    mode: Optional["AddressingMode"] = None
    wide_offset: bool = False

    # =========================================================================
    # Text Accessors
    # =========================================================================

    @property
    def label_text(self) -> str:
        return self.label.text if self.label else ""

    @property
    def opcode_text(self) -> str:
        return self.opcode.text if self.opcode else ""

    @property
    def operand_text(self) -> str:
        return self.operand.text if self.operand else ""

    @property
    def mnemonic(self) -> str:
        """Lower-cased opcode text."""
        return self.opcode_text.lower()

    @property
    def location(self) -> Optional[SourceLocation]:
        """Location of the first field present on the line."""
        for source_field in (self.label, self.opcode, self.operand):
            if source_field is not None:
                return source_field.location
        return None

    def location_of(self, source_field: Optional[SourceField]) -> Optional[SourceLocation]:
        """Location of a specific field, falling back to the line itself."""
        if source_field is not None:
            return source_field.location
        return self.location

    # =========================================================================
    # Byte Emission
    # =========================================================================

    def add_value(self, value: int, count: int) -> None:
        """
        Append a value to the line's bytes, big-endian.

        Args:
            value: Integer to append (negative values use two's complement)
            count: Number of bytes. 0 means one byte if the value fits in a
                   signed byte and two otherwise.
        """
        if count == 1 or (count == 0 and -128 <= value <= 127):
            self.data.append(value & 0xFF)
        elif count == 4:
            self.data.extend((value & 0xFFFFFFFF).to_bytes(4, "big"))
        else:
            self.data.append((value >> 8) & 0xFF)
            self.data.append(value & 0xFF)

    def add_opcode(self, opcode: int) -> int:
        """
        Append an opcode, emitting its page prefix byte first if it has one.

        Returns the number of bytes appended.
        """
        if opcode > 0xFF:
            self.data.append(opcode >> 8)
            self.data.append(opcode & 0xFF)
            return 2
        self.data.append(opcode)
        return 1

    def __str__(self) -> str:
        return f"{self.label_text} {self.opcode_text} {self.operand_text}"
