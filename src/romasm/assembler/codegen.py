"""
Two-Pass Assembler Driver
=========================

Turns the tokenized lines of one compilation unit into a ROM image.

Pre-pass
--------
1. Select the CPU (the last ``.cpu`` line wins over the configured CPU)
2. Normalize mnemonics (lower case, aliases)
3. Apply ``#ifdef`` conditional assembly
4. Extract ``struc``/``ends`` blocks and compute struct layouts
5. Register every label, so unknown names are errors and never forward
   references

Pass 1
------
Each line is bound to the address cursor and encoded. A line that refers
to a label not yet bound is flagged ``needs_fixup``; its length is still
exact, because no instruction width depends on an unresolved value (table
sizes, item counts, struct sizes and pinned 16-bit offsets).

Pass 2 (fixup)
--------------
Only flagged lines are re-encoded, at their recorded address. All labels
are bound by now, so a line that is still unresolved can never be fixed
and the pass stops with "cannot fix line".

Finalize
--------
Reports same-named labels that are suspiciously close, checks that every
line was placed and emitted exactly ``length`` bytes, and lays the lines
out into the ROM image. Gaps are zero-filled and reported.

Dispatch Order
--------------
CPU instruction, struct instance, pseudo-op (fcb fdb fcc end), directive
(.org .setdp .rom .cpu .meta). Anything else is "could not assemble line".
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from romasm.assembler.expressions import ExpressionEvaluator
from romasm.assembler.preprocessor import Preprocessor
from romasm.assembler.symbols import Struct, StructField, SymbolTable
from romasm.config import AssemblerConfig
from romasm.cpu import Cpu, EncodeContext, add_checked_value, make_cpu
from romasm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    ConsistencyError,
    DirectiveError,
    DuplicateSymbolError,
    ErrorCollector,
    StructError,
    TooManyErrors,
)
from romasm.lines import UNASSIGNED, UNKNOWN, Line
from romasm.rom import RomDefinition

logger = logging.getLogger(__name__)


PSEUDO_OPS = ("fcb", "fdb", "fcc", "end")
DIRECTIVES = (".org", ".setdp", ".rom", ".cpu", ".meta")

# Bytes shown per listing row
LISTING_BYTES_PER_ROW = 4


# =============================================================================
# Assembly Result
# =============================================================================

@dataclass
class AssemblyResult:
    """
    Everything one assembly run produced.

    Attributes:
        image: ROM image, from address 0 to the highest byte emitted
        lines: The assembled lines with address, length and data
        symbols: Labels and structs
        rom_definitions: ROMs declared by ``.rom`` directives
        diagnostics: Errors, warnings and info messages
        cpu: Name of the CPU the source was assembled for
        end_address: One past the highest address emitted
    """
    image: bytes
    lines: list[Line]
    symbols: SymbolTable
    rom_definitions: list[RomDefinition]
    diagnostics: ErrorCollector
    cpu: str = ""
    end_address: int = 0

    @property
    def success(self) -> bool:
        return not self.diagnostics.has_errors()

    def line_data(self) -> list[tuple[int, int, bytes]]:
        """(address, length, data) for every placed line."""
        return [
            (line.address, line.length, bytes(line.data))
            for line in self.lines
            if line.address != UNASSIGNED
        ]


# =============================================================================
# String Operands
# =============================================================================

def strings_to_numbers(text: str) -> str:
    """
    Replace each double-quoted string with its comma-separated character codes.

    Example:
        >>> strings_to_numbers('"AB",0')
        '65,66,0'
    """
    parts = []
    pos = 0
    while True:
        start = text.find('"', pos)
        if start < 0:
            parts.append(text[pos:])
            break
        end = text.find('"', start + 1)
        if end < 0:
            raise AssemblySyntaxError(f"unterminated string in '{text}'")
        parts.append(text[pos:start])
        parts.append(",".join(str(ord(char)) for char in text[start + 1:end]))
        pos = end + 1
    return "".join(parts)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Assembles a list of lines into a ROM image.

    Usage:
        codegen = CodeGenerator(AssemblerConfig(cpu="6809"))
        result = codegen.generate(Lexer(source, "game.asm").get_lines())
        if result.success:
            rom = result.image
    """

    def __init__(self, config: Optional[AssemblerConfig] = None, defines: Optional[set[str]] = None):
        self.config = config or AssemblerConfig()
        self.defines: set[str] = set(defines or ())
        self._reset()

    def _reset(self) -> None:
        self._errors = ErrorCollector(self.config.max_errors)
        self._symbols = SymbolTable()
        self._evaluator = ExpressionEvaluator()
        self._cpu: Cpu = make_cpu(self.config.cpu)
        self._lines: list[Line] = []
        self._rom_definitions: list[RomDefinition] = []
        self._address = self.config.origin
        self._dp_register = 0
        self._dp_at: dict[Line, int] = {}
        self._failed: set[Line] = set()
        self._image = b""
        self._end_address = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, lines: list[Line]) -> AssemblyResult:
        """
        Assemble lines into a ROM image.

        Errors are collected rather than raised; check ``result.success``.
        Fatal errors (unbalanced conditionals, unclosed or cyclic structs,
        division by zero, too many errors) stop the assembly early.

        Args:
            lines: Tokenized lines; they are updated in place

        Returns:
            The AssemblyResult
        """
        self._reset()
        logger.info(f"{len(lines)} lines tokenized")

        try:
            self._select_cpu(lines)
            self._normalize_mnemonics(lines)
            lines = Preprocessor(self.defines).process(lines)
            lines = self._extract_structs(lines)
            self._symbols.resolve_struct_layouts()
            self._register_labels(lines)
            self._lines = lines

            self._pass1(lines)
            self._fixup_pass(lines)
            self._finalize(lines)
            self._image = self._create_rom(lines)
        except TooManyErrors as e:
            logger.error(str(e))
        except AssemblerError as e:
            self._record(e)

        self._lines = lines
        return self.get_result()

    def get_result(self) -> AssemblyResult:
        return AssemblyResult(
            image=self._image,
            lines=self._lines,
            symbols=self._symbols,
            rom_definitions=list(self._rom_definitions),
            diagnostics=self._errors,
            cpu=self._cpu.name,
            end_address=self._end_address,
        )

    def get_code(self) -> bytes:
        return self._image

    def get_symbols(self) -> dict[str, int]:
        """Bound labels by name; for repeated names, the first instance."""
        symbols: dict[str, int] = {}
        for label in self._symbols.bound_labels():
            symbols.setdefault(label.name, label.address)
        return symbols

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        return self._errors.report()

    # =========================================================================
    # Error Recording
    # =========================================================================

    def _record(self, error: AssemblerError) -> None:
        """Collect a non-fatal error; the error limit still applies."""
        try:
            self._errors.add(error)
        except TooManyErrors:
            if not error.fatal:
                raise

    def _warn(self, message: str, line: Optional[Line] = None) -> None:
        self._errors.add_warning(message, line.location if line else None)

    # =========================================================================
    # Pre-pass
    # =========================================================================

    def _select_cpu(self, lines: list[Line]) -> None:
        name = None
        cpu_line = None
        for line in lines:
            if line.mnemonic == ".cpu":
                name = line.operand_text.strip()
                cpu_line = line

        if name is None:
            self._errors.add_info(
                f"CPU not detected, assuming {self.config.cpu}. Use '.cpu' directive to set."
            )
            return

        try:
            self._cpu = make_cpu(name)
        except ValueError as e:
            self._record(DirectiveError(
                str(e),
                cpu_line.location_of(cpu_line.operand),
                hint="supported CPUs are 6800, 6809 and 6309",
                source_line=cpu_line.source,
            ))
            return
        logger.info(f"Assembling for the {self._cpu.name}")

    def _normalize_mnemonics(self, lines: list[Line]) -> None:
        for line in lines:
            if line.opcode is not None:
                line.opcode.text = self._cpu.normalize_mnemonic(line.opcode.text)

    def _extract_structs(self, lines: list[Line]) -> list[Line]:
        """
        Move ``Name struc`` ... ``ends`` blocks into the struct arena and
        return the remaining lines.

        Raises:
            StructError: If a block has no ``ends`` (fatal)
        """
        kept: list[Line] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            if line.mnemonic != "struc":
                kept.append(line)
                index += 1
                continue

            end = next(
                (i for i in range(index + 1, len(lines)) if lines[i].mnemonic == "ends"),
                None,
            )
            if end is None:
                raise StructError(
                    f"struct {line.label_text} not closed",
                    line.location,
                    hint="add a matching 'ends' line",
                    source_line=line.source,
                    fatal=True,
                )
            try:
                self._declare_struct(line, lines[index + 1:end])
            except AssemblerError as e:
                self._record(e.attach(line.location, line.source))
            index = end + 1

        logger.info(f"{len(self._symbols.structs)} structs declared")
        return kept

    def _declare_struct(self, header: Line, body: list[Line]) -> None:
        if header.label is None:
            raise StructError("missing struct label", header.location)
        if not body:
            raise StructError(
                f"struct {header.label_text} has no fields", header.location_of(header.label)
            )

        struct = Struct(header.label_text, header)
        for line in body:
            if line.opcode is None:
                raise StructError(
                    f"missing field type in struct {struct.name}",
                    line.location,
                    source_line=line.source,
                )
            struct.fields.append(
                StructField(
                    line.label_text,
                    line,
                    line.opcode_text,
                    count=self._count_dups(struct, line),
                )
            )
        self._symbols.add_struct(struct)

    @staticmethod
    def _count_dups(struct: Struct, line: Line) -> int:
        """``?`` is one element, ``n dup(?)`` is n."""
        text = line.operand_text
        if text == "?":
            return 1
        words = text.split()
        if words:
            try:
                return int(words[0])
            except ValueError:
                pass
        raise StructError(
            f"missing operand for struct field in {struct}",
            line.location_of(line.operand),
            hint="use '?' or 'n dup(?)'",
            source_line=line.source,
        )

    def _register_labels(self, lines: list[Line]) -> None:
        for line in lines:
            if line.label is not None:
                self._symbols.add_label(line)
        logger.info(f"{len(self._symbols)} labels parsed")

    # =========================================================================
    # Passes
    # =========================================================================

    def _pass1(self, lines: list[Line]) -> None:
        self._address = self.config.origin
        self._dp_register = 0
        for line in lines:
            self._dp_at[line] = self._dp_register
            if line.label is not None and not self._symbols.bind_label_address(line, self._address):
                first = self._symbols.get_labels(line.label_text)[0]
                self._record(DuplicateSymbolError(
                    line.label_text,
                    line.location_of(line.label),
                    original_location=first.line.location_of(first.line.label),
                    source_line=line.source,
                    message=f"cannot set label address for '{line.label_text}'",
                ))
            self._assemble_line(line, pass_number=1, final_pass=False)
            if line.length >= 0:
                self._address += line.length

    def _fixup_pass(self, lines: list[Line]) -> None:
        pending = [line for line in lines if line.needs_fixup]
        fixed = 0
        for line in pending:
            self._address = line.address
            expected_length = line.length
            logger.debug(f"Fixing up ${line.address:04X}: {line}")
            self._assemble_line(line, pass_number=2, final_pass=True)
            if line in self._failed:
                continue

            if line.needs_fixup:
                self._record(ConsistencyError(
                    "cannot fix line", line.location, source_line=line.source,
                    hint="an operand still refers to a label without an address",
                ))
                self._failed.add(line)
                self._log_fixup_failure(line)
                break

            if line.length != expected_length:
                self._record(ConsistencyError(
                    f"line length changed from {expected_length} to {line.length} during fixup",
                    line.location,
                    source_line=line.source,
                ))
                self._failed.add(line)
            fixed += 1
        logger.info(f"Fixed up {fixed} of {len(pending)} lines")

    def _log_fixup_failure(self, line: Line) -> None:
        """Re-run the failing line with the evaluator traced to the log."""
        def trace(path: str, anchor: int) -> Optional[int]:
            value = self._symbols.lookup(path, anchor)
            logger.debug(f"  {path} at ${anchor:04X} -> {value}")
            return value

        try:
            self._encode(line, 2, True, lookup=trace)
        except AssemblerError as e:
            logger.debug(f"  re-run failed: {e}")

    def _assemble_line(self, line: Line, pass_number: int, final_pass: bool) -> None:
        """Encode one line, collecting its errors."""
        try:
            self._encode(line, pass_number, final_pass)
        except AssemblerError as e:
            e.attach(line.location, line.source)
            line.needs_fixup = False
            self._failed.add(line)
            if e.fatal:
                raise
            self._record(e)

    def _encode(
        self,
        line: Line,
        pass_number: int,
        final_pass: bool,
        lookup: Optional[Callable[[str, int], Optional[int]]] = None,
    ) -> None:
        line.needs_fixup = False
        line.address = self._address
        warnings: list[str] = []
        resolver = lookup or self._symbols.lookup

        def evaluate(text: str) -> Optional[int]:
            return self._evaluator.evaluate(text, line.address, resolver)

        context = EncodeContext(
            address=self._address,
            evaluate=evaluate,
            pass_number=pass_number,
            final_pass=final_pass,
            dp_register=self._dp_at.get(line, self._dp_register),
            strict_direct_page=self.config.strict_direct_page,
            warn=warnings.append,
        )
        self._dispatch(line, context)

        # Warnings of an incomplete encoding are repeated by the fixup pass
        if not line.needs_fixup or final_pass:
            for message in warnings:
                self._warn(message, line)

    def _dispatch(self, line: Line, context: EncodeContext) -> None:
        opcode = line.opcode_text
        if not opcode:
            line.length = 0
            line.data.clear()
            return

        if self._cpu.find_opcode(opcode):
            self._cpu.encode(line, context)
            return

        struct = self._symbols.get_struct(opcode)
        if struct is not None:
            self._encode_struct(line, struct, context)
            return

        name = opcode.lower()
        if name in PSEUDO_OPS:
            self._encode_pseudo_op(line, name, context)
            return

        if name in DIRECTIVES:
            self._encode_directive(line, name, context)
            return

        hint = None
        if self._cpu.requires_extended(opcode):
            hint = f"'{opcode}' is a 6309 instruction; use '.cpu 6309'"
        raise AssemblySyntaxError(
            f"could not assemble line: unknown opcode '{opcode}'",
            line.location_of(line.opcode),
            hint=hint,
        )

    # =========================================================================
    # Struct Instances
    # =========================================================================

    def _encode_struct(self, line: Line, struct: Struct, context: EncodeContext) -> None:
        """
        ``Name <v1, <v2, v3>>``: one value per flattened struct element.

        The nesting brackets are decoration; ``0`` alone zero-fills.
        """
        line.mode = None
        line.data.clear()
        line.length = struct.byte_length
        operand = line.operand_text
        if not operand:
            raise StructError("empty struct operand", line.location_of(line.opcode))

        cleaned = strings_to_numbers(operand)
        for char in "<> \t":
            cleaned = cleaned.replace(char, "")
        zero_fill = cleaned == "0"
        items = cleaned.split(",")
        if not zero_fill and len(items) != len(struct.byte_lengths):
            raise StructError(
                f"struct def has {len(struct.byte_lengths)} fields, operand has {len(items)}",
                line.location_of(line.operand),
            )

        for index, size in enumerate(struct.byte_lengths):
            value = 0 if zero_fill else context.evaluate(items[index])
            if value is None:
                line.needs_fixup = True
                line.data.clear()
                return
            add_checked_value(line, value, size, context.warn)

    # =========================================================================
    # Pseudo-ops
    # =========================================================================

    def _encode_pseudo_op(self, line: Line, name: str, context: EncodeContext) -> None:
        line.mode = None
        line.data.clear()
        if name == "end":
            line.length = 0
        elif name == "fcb":
            self._write_data(line, line.operand_text, 1, context)
        elif name == "fdb":
            self._write_data(line, line.operand_text, 2, context)
        else:
            self._write_data(line, strings_to_numbers(line.operand_text), 1, context)

    @staticmethod
    def _write_data(line: Line, text: str, item_length: int, context: EncodeContext) -> None:
        if not text.strip():
            raise AssemblySyntaxError(
                f"missing operand for {line.mnemonic}", line.location_of(line.opcode)
            )
        items = [item.strip() for item in text.split(",")]
        line.length = item_length * len(items)
        for item in items:
            value = context.evaluate(item)
            if value is None:
                line.data.clear()
                line.needs_fixup = True
                return
            add_checked_value(line, value, item_length, context.warn)

    # =========================================================================
    # Directives
    # =========================================================================

    def _encode_directive(self, line: Line, name: str, context: EncodeContext) -> None:
        line.mode = None
        line.data.clear()
        line.length = 0
        location = line.location_of(line.operand)

        if name == ".org":
            value = self._evaluate_directive(line, context)
            if value is None:
                raise DirectiveError("cannot evaluate address", location)
            self._address = value

        elif name == ".setdp":
            value = self._evaluate_directive(line, context)
            if value is None:
                raise DirectiveError("cannot evaluate DP", location)
            self._dp_register = value

        elif name == ".rom":
            if context.pass_number == 1:
                try:
                    definition = RomDefinition.parse(line.operand_text)
                except ValueError as e:
                    raise DirectiveError(
                        "cannot parse .ROM directive",
                        location,
                        hint=f"expected 'filename size sha1 hexoffset' ({e})",
                    ) from e
                self._rom_definitions.append(definition)

        # .cpu was applied by the pre-pass; .meta is a comment

    @staticmethod
    def _evaluate_directive(line: Line, context: EncodeContext) -> Optional[int]:
        if not line.operand_text:
            return None
        return context.evaluate(line.operand_text)

    # =========================================================================
    # Finalize
    # =========================================================================

    def _finalize(self, lines: list[Line]) -> None:
        self._end_address = max(
            (line.address + line.length for line in lines
             if line.address != UNASSIGNED and line.length != UNKNOWN),
            default=self.config.origin,
        )
        logger.info(f"Final address ${self._end_address:04X}")

        if self.config.label_distance > 0:
            for first, second in self._symbols.find_close_labels(self.config.label_distance):
                self._warn(
                    f"labels too close: '{first.name}' at ${first.address:04X} "
                    f"and ${second.address:04X}",
                    second.line,
                )

        for line in lines:
            if line in self._failed:
                continue
            if line.address == UNASSIGNED and line.opcode is not None:
                self._record(ConsistencyError(
                    "unassembled opcode", line.location, source_line=line.source
                ))
            elif line.length != UNKNOWN and line.length != len(line.data):
                self._record(ConsistencyError(
                    f"line length {line.length}, byte length {len(line.data)}",
                    line.location,
                    source_line=line.source,
                ))

    def _create_rom(self, lines: list[Line]) -> bytes:
        """Lay placed lines out by address; unclaimed bytes stay zero."""
        placed = sorted(
            (line for line in lines if line.address != UNASSIGNED and line.length > 0),
            key=lambda line: line.address,
        )
        if not placed:
            return b""

        image = bytearray(max(line.address + line.length for line in placed))
        cursor = placed[0].address
        for line in placed:
            if line.address != cursor:
                self._warn(f"Address 0x{cursor:04X} not accounted for in ROM", line)
                cursor = line.address
            data = bytes(line.data[:line.length])
            image[line.address:line.address + len(data)] = data
            cursor += line.length
        return bytes(image)

    # =========================================================================
    # Output
    # =========================================================================

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, generated bytes, and source lines,
            followed by the symbol table.
        """
        rows = []
        rows.append(f"romasm Listing ({self._cpu.name})")
        rows.append("=" * 60)
        rows.append("")
        rows.append("Addr  Code          Line  Source")
        rows.append("-" * 60)
        for line in self._lines:
            number = line.location.line if line.location else 0
            source = line.source.rstrip()
            if line.address == UNASSIGNED:
                rows.append(f"{'':18s}  {number:4d}  {source}")
                continue
            data = bytes(line.data)
            chunks = [
                data[i:i + LISTING_BYTES_PER_ROW]
                for i in range(0, len(data), LISTING_BYTES_PER_ROW)
            ] or [b""]
            for index, chunk in enumerate(chunks):
                hex_str = " ".join(f"{b:02X}" for b in chunk)
                address = line.address + index * LISTING_BYTES_PER_ROW
                if index == 0:
                    rows.append(f"${address:04X}  {hex_str:12s}  {number:4d}  {source}")
                else:
                    rows.append(f"${address:04X}  {hex_str:12s}")
        rows.append("")
        rows.append("Symbol Table")
        rows.append("-" * 30)
        for label in sorted(self._symbols.bound_labels(), key=lambda label: (label.name, label.address)):
            rows.append(f"{label.name:20s} = ${label.address:04X}")
        return "\n".join(rows)

    def write_listing(self, filepath: str | Path) -> None:
        with open(filepath, "w") as f:
            f.write(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, repeated names once per instance)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by romasm\n")
            for label in sorted(self._symbols.bound_labels(), key=lambda label: (label.name, label.address)):
                f.write(f"{label.name} ${label.address:04X}\n")
