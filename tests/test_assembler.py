# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the complete pipeline: source text through the
# tokenizer, preprocessor, struct extraction and both passes to the ROM
# image.
#
# Test coverage includes:
#   - Forward and backward references
#   - Pseudo-ops, directives and struct instances
#   - CPU selection
#   - Gap detection in the ROM image
#   - Error collection, fatal errors and the error limit
#   - Listing and symbol outputs
# =============================================================================

import pytest

from romasm.assembler import Assembler, CodeGenerator, strings_to_numbers, tokenize_source
from romasm.config import AssemblerConfig
from romasm.errors import AssemblerError, Severity


# =============================================================================
# Helper Functions
# =============================================================================

def assemble(source: str, **config) -> bytes:
    """Assemble source and return the image; fails the test on errors."""
    return Assembler(AssemblerConfig(**config)).assemble_string(source, "test.asm")


def generate(source: str, **config):
    """Run the driver directly and return the AssemblyResult."""
    codegen = CodeGenerator(AssemblerConfig(**config))
    return codegen.generate(tokenize_source(source, "test.asm"))


def messages(result, severity: Severity) -> list[str]:
    return [d.message for d in result.diagnostics.diagnostics if d.severity == severity]


def error_text(result) -> str:
    return "\n".join(str(error) for error in result.diagnostics.errors)


class PassOneRecorder(CodeGenerator):
    """CodeGenerator that records each line's bytes and fixup flag after pass 1."""

    def _fixup_pass(self, lines):
        self.after_pass1 = {
            line.source.strip(): (bytes(line.data), line.needs_fixup) for line in lines
        }
        super()._fixup_pass(lines)


def after_pass1(source: str):
    """Return (source text -> (bytes, needs_fixup) after pass 1, result)."""
    codegen = PassOneRecorder(AssemblerConfig())
    result = codegen.generate(tokenize_source(source, "test.asm"))
    return codegen.after_pass1, result


# =============================================================================
# Full Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test complete programs."""

    def test_label_then_jump(self):
        """LABEL: NOP / JMP LABEL at origin 0."""
        assert assemble("LABEL: NOP\n JMP LABEL\n") == bytes([0x12, 0x7E, 0x00, 0x00])

    def test_line_triples(self):
        result = generate("LABEL: NOP\n JMP LABEL\n")
        assert result.success
        assert result.line_data() == [(0, 1, b"\x12"), (1, 3, b"\x7e\x00\x00")]
        assert result.end_address == 4

    def test_forward_reference(self):
        assert assemble(" jmp Fwd\nFwd nop") == bytes([0x7E, 0x00, 0x03, 0x12])

    def test_forward_equals_backward(self):
        """A label referenced before its line resolves to the same value."""
        forward = generate(" ldx #Data\n nop\nData fcb 1")
        backward = generate(" .org 4\nData fcb 1\n .org 0\n ldx #Data\n nop")
        assert forward.success and backward.success
        assert forward.image == bytes([0x8E, 0x00, 0x04, 0x12, 0x01])
        assert forward.image == backward.image
        assert not forward.lines[0].needs_fixup

    def test_forward_branch(self):
        assert assemble(" bra Fwd\n nop\nFwd nop") == bytes([0x20, 0x01, 0x12, 0x12])

    def test_backward_branch_128(self):
        image = assemble("Back nop\n .org $7E\n bra Back")
        assert image[0x7E:] == bytes([0x20, 0x80])

    def test_backward_branch_129_fails(self):
        result = generate("Back nop\n .org $7F\n bra Back")
        assert not result.success
        assert "out of 8 bit target range" in error_text(result)

    def test_forward_branch_out_of_range(self):
        result = generate(" bra Far\n .org $200\nFar nop")
        assert not result.success
        assert result.diagnostics.error_count() == 1

    def test_same_named_labels(self):
        source = "loop nop\n bra loop\n .org $400\nloop nop\n bra loop"
        image = assemble(source)
        assert image[1:3] == bytes([0x20, 0xFD])
        assert image[0x401:0x403] == bytes([0x20, 0xFD])

    def test_reassembly_is_deterministic(self):
        source = " jmp Fwd\n fcb 1,2\nFwd fdb Fwd"
        assert assemble(source) == assemble(source)


# =============================================================================
# Pseudo-op Tests
# =============================================================================

class TestPseudoOps:
    """Test fcb, fdb, fcc and end."""

    def test_data(self):
        source = ' fcb 1,$FF,-1\n fdb $1234,Label\nLabel fcc "AB",0'
        assert assemble(source) == bytes(
            [0x01, 0xFF, 0xFF, 0x12, 0x34, 0x00, 0x07, 0x41, 0x42, 0x00]
        )

    def test_forward_item_rolls_back(self):
        states, result = after_pass1(" fcb 1,Fwd\n fdb 2,Fwd\nFwd nop")
        assert states["fcb 1,Fwd"] == (b"", True)
        assert states["fdb 2,Fwd"] == (b"", True)
        assert result.success
        assert result.image == bytes([0x01, 0x06, 0x00, 0x02, 0x00, 0x06, 0x12])

    def test_truncated_items_warn(self):
        result = generate(" fcb 300\n fdb $12345\n lda #300")
        assert result.image == bytes([0x2C, 0x23, 0x45, 0x86, 0x2C])
        assert messages(result, Severity.WARNING) == [
            "value $12C truncated to 8 bits",
            "value $12345 truncated to 16 bits",
            "value $12C truncated to 8 bits",
        ]

    def test_signed_items_do_not_warn(self):
        result = generate(" fcb -128,255\n fdb -1")
        assert result.image == bytes([0x80, 0xFF, 0xFF, 0xFF])
        assert messages(result, Severity.WARNING) == []

    def test_end_has_no_bytes(self):
        assert assemble(" nop\n end") == b"\x12"

    def test_missing_operand(self):
        result = generate(" fcb")
        assert not result.success

    def test_strings_to_numbers(self):
        assert strings_to_numbers('"AB",0') == "65,66,0"
        assert strings_to_numbers("1,2") == "1,2"


# =============================================================================
# Directive Tests
# =============================================================================

class TestDirectives:
    """Test .org, .setdp, .rom, .cpu and .meta."""

    def test_org(self):
        image = assemble(" .org $100\n nop")
        assert len(image) == 0x101
        assert image[0x100] == 0x12

    def test_org_unresolved(self):
        result = generate(" .org Later\nLater nop")
        assert "cannot evaluate address" in error_text(result)

    def test_setdp(self):
        result = generate(" .setdp $D0\n lda <$D010")
        assert result.success
        assert result.image == bytes([0x96, 0x10])
        assert messages(result, Severity.WARNING) == []

    def test_direct_page_mismatch_warns(self):
        result = generate(" lda <$1234")
        assert result.success
        assert len(messages(result, Severity.WARNING)) == 1

    def test_direct_page_mismatch_strict(self):
        result = generate(" lda <$1234", strict_direct_page=True)
        assert not result.success

    def test_rom_definition(self):
        result = generate(" .rom game.bin 4096 abcdef 1000\n nop")
        assert result.success
        definition = result.rom_definitions[0]
        assert definition.filename == "game.bin"
        assert definition.size == 4096
        assert definition.offset == 0x1000
        assert definition.sha1 == "ABCDEF"

    def test_bad_rom_definition(self):
        result = generate(" .rom game.bin 4096")
        assert "cannot parse .ROM directive" in error_text(result)

    def test_meta_is_ignored(self):
        assert assemble(" .meta reconstructed by hand\n nop") == b"\x12"


class TestCpuSelection:
    """Test the .cpu directive and the configured default."""

    def test_default_reported(self):
        result = generate(" nop")
        assert result.cpu == "6809"
        assert any("CPU not detected" in m for m in messages(result, Severity.INFO))

    def test_cpu_directive(self):
        result = generate(" .cpu 6800\n ldaa #1")
        assert result.cpu == "6800"
        assert result.image == bytes([0x86, 0x01])

    def test_last_cpu_directive_wins(self):
        result = generate(" .cpu 6800\n .cpu 6309\n ldq #1")
        assert result.cpu == "6309"
        assert result.image == bytes([0xCD, 0x00, 0x00, 0x00, 0x01])

    def test_configured_cpu(self):
        assert assemble(" ldaa #1", cpu="6800") == bytes([0x86, 0x01])

    def test_unknown_cpu(self):
        result = generate(" .cpu 6502\n nop")
        assert not result.success

    def test_6309_hint(self):
        result = generate(" ldq #1")
        assert not result.success
        assert "6309" in error_text(result)


# =============================================================================
# Struct Tests
# =============================================================================

POINT = """\
Point   struc
x       fdb ?
y       fdb ?
Point   ends
"""


class TestStructs:
    """Test struct declarations and instances."""

    def test_instance(self):
        image = assemble(POINT + "Origin Point <1,2>\n ldd Origin.y")
        assert image == bytes([0x00, 0x01, 0x00, 0x02, 0xFC, 0x00, 0x02])

    def test_zero_fill(self):
        assert assemble(POINT + "Origin Point 0") == bytes(4)

    def test_nested_instance(self):
        source = POINT + "Line struc\nfrom Point ?\nto Point ?\nLine ends\n" \
            "Edge Line <<1,2>,<3,4>>\n ldx #Line.to.y"
        image = assemble(source)
        assert image[:8] == bytes([0, 1, 0, 2, 0, 3, 0, 4])
        assert image[8:] == bytes([0x8E, 0x00, 0x06])

    def test_string_fields(self):
        source = "Tag struc\nc fcb 2 dup(?)\nTag ends\nT Tag <\"AB\">"
        assert assemble(source) == b"AB"

    def test_field_count_mismatch(self):
        result = generate(POINT + "Origin Point <1>")
        assert "struct def has 2 fields, operand has 1" in error_text(result)

    def test_forward_value_in_instance(self):
        image = assemble(POINT + "P Point <End,0>\nEnd nop")
        assert image == bytes([0x00, 0x04, 0x00, 0x00, 0x12])

    def test_forward_value_in_later_field_rolls_back(self):
        states, result = after_pass1(POINT + "P Point <1,End>\nEnd nop")
        assert states["P Point <1,End>"] == (b"", True)
        assert result.success
        assert result.image == bytes([0x00, 0x01, 0x00, 0x04, 0x12])

    def test_truncated_field_warns(self):
        result = generate("Cell struc\nv fcb ?\nCell ends\nX Cell <300>")
        assert result.image == b"\x2c"
        assert messages(result, Severity.WARNING) == ["value $12C truncated to 8 bits"]

    def test_struct_not_closed_is_fatal(self):
        result = generate("S struc\nx fcb ?\n nop\n foo")
        assert result.diagnostics.error_count() == 1
        assert "not closed" in error_text(result)

    def test_empty_struct(self):
        result = generate("S struc\nS ends")
        assert "has no fields" in error_text(result)

    def test_missing_field_operand(self):
        result = generate("S struc\nx fcb\nS ends")
        assert "missing operand for struct field" in error_text(result)


# =============================================================================
# ROM Image Tests
# =============================================================================

class TestRomImage:
    """Test laying lines out into the image."""

    def test_gap_warning_and_zero_fill(self):
        result = generate(" .org $10\n nop\n .org $20\n nop")
        gaps = [m for m in messages(result, Severity.WARNING) if "not accounted for" in m]
        assert gaps == ["Address 0x0011 not accounted for in ROM"]
        assert result.image[0x11:0x20] == bytes(0x0F)
        assert result.image[0x10] == 0x12
        assert result.image[0x20] == 0x12

    def test_close_labels_warning(self):
        result = generate("loop nop\nloop nop")
        assert result.success
        assert any("labels too close" in m for m in messages(result, Severity.WARNING))

    def test_close_labels_disabled(self):
        result = generate("loop nop\nloop nop", label_distance=0)
        assert messages(result, Severity.WARNING) == []


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrors:
    """Test error collection and reporting."""

    def test_unknown_opcode(self):
        with pytest.raises(AssemblerError) as info:
            assemble(" foo")
        assert "could not assemble line" in str(info.value)
        assert "Assembly failed with 1 errors" in str(info.value)

    def test_error_location(self):
        result = generate(" nop\n jmp Nowhere")
        error = result.diagnostics.errors[0]
        assert error.location.filename == "test.asm"
        assert error.location.line == 2
        assert "undefined symbol 'Nowhere'" in str(error)

    def test_errors_are_collected(self):
        result = generate(" foo\n bar\n nop")
        assert result.diagnostics.error_count() == 2

    def test_division_by_zero_halts(self):
        result = generate(" fcb 1/0\n foo")
        assert result.diagnostics.error_count() == 1
        assert "division by zero" in error_text(result)

    def test_preprocessor_error_halts(self):
        result = generate(" nop\n#endif\n foo")
        assert result.diagnostics.error_count() == 1

    def test_error_limit(self):
        result = generate("\n".join(" foo" for _ in range(10)), max_errors=3)
        assert result.diagnostics.error_count() == 3

    def test_warnings_do_not_fail(self):
        asm = Assembler()
        asm.assemble_string(" lda <$1234")
        assert not asm.has_errors()
        assert "1 warning" in asm.get_error_report()


# =============================================================================
# Preprocessor Integration Tests
# =============================================================================

class TestConditionalAssembly:
    """Test #ifdef through the assembler."""

    def test_define_in_source(self):
        assert assemble("#define FAST\n#ifdef FAST\n nop\n#else\n rts\n#endif") == b"\x12"

    def test_define_from_caller(self):
        asm = Assembler()
        asm.define("FAST")
        assert asm.assemble_string("#ifdef FAST\n nop\n#else\n rts\n#endif") == b"\x12"


# =============================================================================
# Output Tests
# =============================================================================

class TestOutputs:
    """Test listing, symbol and image files."""

    def test_listing(self):
        asm = Assembler()
        asm.assemble_string("LABEL: NOP\n JMP LABEL\n", "demo.asm")
        listing = asm.get_listing()
        assert "romasm Listing (6809)" in listing
        assert "$0000  12" in listing
        assert "$0001  7E 00 00" in listing
        assert "Symbol Table" in listing
        assert "= $0000" in listing

    def test_listing_wraps_long_data(self):
        asm = Assembler()
        asm.assemble_string(" fcb 1,2,3,4,5,6")
        assert "$0004  05 06" in asm.get_listing()

    def test_write_files(self, tmp_path):
        asm = Assembler()
        asm.assemble_string("Start nop\n bra Start\n")
        asm.write_rom(tmp_path / "out.bin")
        asm.write_symbols(tmp_path / "out.sym")
        asm.write_listing(tmp_path / "out.lst")
        assert (tmp_path / "out.bin").read_bytes() == bytes([0x12, 0x20, 0xFD])
        assert "Start $0000" in (tmp_path / "out.sym").read_text()
        assert (tmp_path / "out.lst").read_text() == asm.get_listing()

    def test_get_symbols(self):
        asm = Assembler()
        asm.assemble_string("Start nop\nEnd nop\n")
        assert asm.get_symbols() == {"Start": 0, "End": 1}

    def test_assemble_file(self, tmp_path):
        path = tmp_path / "prog.asm"
        path.write_text(" nop\n")
        assert Assembler().assemble_file(path) == b"\x12"
