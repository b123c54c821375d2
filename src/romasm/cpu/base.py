"""
CPU Instruction Model - Common Definitions
==========================================

Shared types for the per-CPU instruction models: addressing modes, opcode
table entries, the encoding context threaded through every encode call, and
the ``Cpu`` base class that the 6800 and 6809/6309 models derive from.

Encoding Contract
-----------------
``Cpu.encode(line, context)`` classifies the operand, looks up the opcode
for the resulting addressing mode and writes the complete byte sequence
into ``line.data``. It always sets ``line.length`` to the final length of
the instruction, even when an operand value is not yet known:

- A resolved value is emitted immediately.
- An unresolved value (forward reference) leaves the operand bytes out and
  sets ``line.needs_fixup``; the driver re-encodes the line on the fixup pass.
- Malformed operands raise an ``AssemblerError`` subclass.

Opcode Values
-------------
Opcodes above $FF carry a page prefix byte in their high byte, so $10DF is
emitted as $10 $DF. Sizes are the complete instruction length; for indexed
forms the size includes the post-byte and the encoder adds any offset bytes.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from romasm.errors import AddressingModeError, AssemblySyntaxError, BranchRangeError
from romasm.lines import Line


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    Operand addressing modes across the supported CPUs.

    Each mode determines how the operand text is interpreted and which
    opcode table entry is used.
    """
    INHERENT = auto()   # No operand (NOP, RTS, ABX)
    IMMEDIATE = auto()  # #value
    DIRECT = auto()     # Direct-page address (<addr)
    EXTENDED = auto()   # Full 16-bit address
    INDEXED = auto()    # Post-byte indexed forms (n,X  [,Y++]  A,U ...)
    RELATIVE = auto()   # Branch displacement
    REGISTER = auto()   # Register list (PSHS, TFR, EXG, inter-register ops)

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return self.name.lower()


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    One opcode table entry.

    Attributes:
        opcode: Opcode byte, or prefix and opcode byte for paged opcodes
        size: Total instruction size in bytes (indexed: including post-byte)
    """
    opcode: int
    size: int

    @property
    def opcode_size(self) -> int:
        """Number of bytes taken by the opcode (1, or 2 with a page prefix)."""
        return 2 if self.opcode > 0xFF else 1

    @property
    def operand_size(self) -> int:
        """Number of bytes following the opcode in the fixed-size form."""
        return self.size - self.opcode_size

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=${self.opcode:02X}, size={self.size})"


# =============================================================================
# Value Width Classification
# =============================================================================

def bits_required(value: int) -> int:
    """
    Return 5, 8 or 16: the narrowest signed encoding for a 16-bit value.

    The value is first truncated to a signed 16-bit quantity, so $FFFF
    counts as -1 and fits in 5 bits.
    """
    value &= 0xFFFF
    if value >= 0x8000:
        value -= 0x10000
    if -16 <= value <= 15:
        return 5
    if -128 <= value <= 127:
        return 8
    return 16


def fits_unsigned_or_signed(value: int, size: int) -> bool:
    """Check that a value can be emitted in ``size`` bytes without losing bits."""
    bits = 8 * size
    return -(1 << (bits - 1)) <= value < (1 << bits)


def add_checked_value(line: Line, value: int, size: int, warn: Callable[[str], None]) -> None:
    """Append a value to a line, warning when it does not fit in ``size`` bytes."""
    if not fits_unsigned_or_signed(value, size):
        warn(f"value ${value & 0xFFFFFFFF:X} truncated to {size * 8} bits")
    line.add_value(value, size)


# =============================================================================
# Encoding Context
# =============================================================================

def _ignore_warning(message: str) -> None:
    pass


@dataclass
class EncodeContext:
    """
    Assembly state passed explicitly into each encode call.

    Attributes:
        address: Address the line is being assembled at
        evaluate: Callback evaluating expression text at ``address``;
                  returns None while a referenced symbol is unknown
        pass_number: 1 for the first pass, 2 for the fixup pass
        final_pass: No further pass will retry this line
        dp_register: Value set by the last .setdp directive
        strict_direct_page: Direct-page mismatch is an error, not a warning
        warn: Callback receiving warning text for the current line
    """
    address: int
    evaluate: Callable[[str], Optional[int]]
    pass_number: int = 1
    final_pass: bool = False
    dp_register: int = 0
    strict_direct_page: bool = False
    warn: Callable[[str], None] = _ignore_warning


# =============================================================================
# CPU Base Class
# =============================================================================

class Cpu:
    """
    Base class for the CPU instruction models.

    Subclasses provide the opcode table and the operand classifier; the
    base class holds the table lookups and the operand encoders shared by
    every 6800-family CPU (immediate, direct, extended, relative).

    Attributes:
        name: CPU name as used by the .cpu directive
        opcode_table: (mnemonic, mode) -> InstructionInfo
        aliases: Alternative spellings mapped to table mnemonics
        branches: Short branch mnemonics
    """

    name = ""

    def __init__(
        self,
        opcode_table: dict[tuple[str, AddressingMode], InstructionInfo],
        aliases: dict[str, str],
        branches: frozenset[str],
    ):
        self.opcode_table = opcode_table
        self.aliases = aliases
        self.branches = branches
        self._mnemonics = frozenset(mnemonic for mnemonic, _ in opcode_table)

    # =========================================================================
    # Table Lookups
    # =========================================================================

    def find_opcode(self, mnemonic: str) -> bool:
        """Return True if the mnemonic is an instruction of this CPU."""
        return mnemonic.lower() in self._mnemonics

    def normalize_mnemonic(self, text: str) -> str:
        """
        Map an opcode field to the table mnemonic.

        Instructions are returned lower-cased with aliases applied; anything
        else (struct names, directives, pseudo-ops) is returned unchanged.
        """
        mnemonic = text.lower()
        mnemonic = self.aliases.get(mnemonic, mnemonic)
        if self.find_opcode(mnemonic):
            return mnemonic
        return text

    def get_instruction_info(
        self, mnemonic: str, mode: AddressingMode
    ) -> Optional[InstructionInfo]:
        return self.opcode_table.get((mnemonic.lower(), mode))

    def get_valid_modes(self, mnemonic: str) -> list[AddressingMode]:
        """Return the addressing modes the mnemonic can be encoded with."""
        mnemonic = mnemonic.lower()
        return [mode for (name, mode) in self.opcode_table if name == mnemonic]

    def is_branch(self, mnemonic: str) -> bool:
        """True for short branches (and long branches on CPUs that have them)."""
        return mnemonic.lower() in self.branches

    def requires_extended(self, mnemonic: str) -> bool:
        """True if the mnemonic exists only on a CPU extension not enabled."""
        return False

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode(self, line: Line, context: EncodeContext) -> None:
        """
        Classify and encode one instruction line.

        Raises:
            AssemblerError: If the operand is malformed or the mode illegal
        """
        raise NotImplementedError

    def _begin(self, line: Line, mode: AddressingMode, opcode: Optional[int] = None) -> InstructionInfo:
        """
        Look up the table entry for a mode and emit the opcode bytes.

        Resets any bytes from an earlier encoding of the same line, so
        re-encoding is idempotent.
        """
        mnemonic = line.mnemonic
        info = self.get_instruction_info(mnemonic, mode)
        if info is None:
            raise AddressingModeError(
                mnemonic,
                str(mode),
                line.location_of(line.operand),
                valid_modes=[str(m) for m in self.get_valid_modes(mnemonic)],
            )
        line.mode = mode
        line.data.clear()
        line.needs_fixup = False
        line.length = info.size
        line.add_opcode(info.opcode if opcode is None else opcode)
        return info

    def _emit_value(
        self, line: Line, value: Optional[int], size: int, context: EncodeContext
    ) -> bool:
        """
        Emit an evaluated operand, or flag the line when it is unresolved.

        Returns True if the value was emitted.
        """
        if value is None:
            line.needs_fixup = True
            return False
        add_checked_value(line, value, size, context.warn)
        return True

    def _encode_immediate(
        self, line: Line, text: str, info: InstructionInfo, context: EncodeContext
    ) -> None:
        """#value: width is the table size minus the opcode bytes."""
        self._emit_value(line, context.evaluate(text), info.operand_size, context)

    def _encode_extended(self, line: Line, text: str, context: EncodeContext) -> None:
        self._emit_value(line, context.evaluate(text), 2, context)

    def _encode_direct(self, line: Line, text: str, context: EncodeContext) -> None:
        """
        Direct-page address: only the low byte is emitted.

        The high byte must match the direct-page register, which is what
        the CPU supplies at run time.
        """
        value = context.evaluate(text)
        if value is None:
            line.needs_fixup = True
            return
        page = (value >> 8) & 0xFF
        if page != (context.dp_register & 0xFF):
            message = (
                f"direct address ${value & 0xFFFF:04X} is outside direct page "
                f"${context.dp_register & 0xFF:02X}"
            )
            if context.strict_direct_page:
                raise AssemblySyntaxError(message, line.location_of(line.operand))
            context.warn(message)
        line.add_value(value, 1)

    def _encode_relative(
        self, line: Line, text: str, long_branch: bool, context: EncodeContext
    ) -> None:
        """
        Branch displacement relative to the end of the instruction.

        A short branch out of range is retried on the fixup pass and is an
        error once no further pass remains.
        """
        target = context.evaluate(text)
        if target is None:
            line.needs_fixup = True
            return
        relative = target - (context.address + line.length)
        if long_branch:
            line.add_value(relative, 2)
        elif bits_required(relative) <= 8:
            line.add_value(relative, 1)
        elif context.final_pass:
            raise BranchRangeError(text, _signed16(relative), line.location_of(line.operand))
        else:
            line.needs_fixup = True


def _signed16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value >= 0x8000 else value
