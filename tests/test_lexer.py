# =============================================================================
# test_lexer.py - Source Tokenizer and Preprocessor Tests
# =============================================================================
# Tests for splitting source into label/opcode/operand lines and for the
# #define/#ifdef conditional assembly pass.
#
# Test coverage includes:
#   - Field assignment by column
#   - Comments, continuation lines and quoted text
#   - Source locations
#   - #define, #undef, #ifdef, #else, #endif
#   - Unbalanced conditionals
# =============================================================================

import pytest

from romasm.assembler.lexer import Lexer, TokenType, tokenize_source
from romasm.assembler.preprocessor import Preprocessor
from romasm.errors import PreprocessorError


# =============================================================================
# Helper Functions
# =============================================================================

def fields(source: str) -> list[tuple[str, str, str]]:
    """(label, opcode, operand) text of every line."""
    return [
        (line.label_text, line.opcode_text, line.operand_text)
        for line in tokenize_source(source, "test.asm")
    ]


def preprocess(source: str, defines: set = None) -> list[str]:
    """Opcodes of the lines that survive conditional assembly."""
    lines = tokenize_source(source, "test.asm")
    return [line.opcode_text for line in Preprocessor(defines).process(lines)]


# =============================================================================
# Field Tests
# =============================================================================

class TestFields:
    """Test label, opcode and operand assignment."""

    def test_full_line(self):
        assert fields("Loop:  ldx  #Table+2 ; point at table") == [
            ("Loop", "ldx", "#Table+2"),
        ]

    def test_label_without_colon(self):
        assert fields("Start nop") == [("Start", "nop", "")]

    def test_indented_opcode_is_not_label(self):
        assert fields("   nop") == [("", "nop", "")]

    def test_label_only(self):
        assert fields("Alone:") == [("Alone", "", "")]

    def test_operand_keeps_inner_spaces(self):
        assert fields(" fcb 1, 2,\t3") == [("", "fcb", "1, 2, 3")]

    def test_indexed_operand(self):
        assert fields(" lda ,x+") == [("", "lda", ",x+")]

    def test_directive_opcode(self):
        assert fields(" .org $8000") == [("", ".org", "$8000")]

    def test_blank_and_comment_lines_dropped(self):
        assert fields("\n; only a comment\n   \n nop\n") == [("", "nop", "")]

    def test_semicolon_inside_string(self):
        assert fields(' fcc "a;b"') == [("", "fcc", '"a;b"')]

    def test_backslash_inside_string(self):
        assert fields(' fcc "a\\b"') == [("", "fcc", '"a\\b"')]


class TestContinuation:
    """Test backslash line continuation."""

    def test_operand_continues(self):
        lines = tokenize_source(" fcb 1,2,\\\n 3,4\n nop", "test.asm")
        assert len(lines) == 2
        assert lines[0].operand_text == "1,2, 3,4"
        assert lines[1].opcode_text == "nop"

    def test_continued_line_has_no_label(self):
        lines = tokenize_source(" fcb 1,\\\nNotLabel", "test.asm")
        assert lines[0].label_text == ""


class TestLocations:
    """Test source locations of fields."""

    def test_field_columns(self):
        line = tokenize_source("\n\nLoop: ldx #1", "game.asm")[0]
        assert line.location_of(line.label).line == 3
        assert line.location_of(line.label).column == 1
        assert line.location_of(line.opcode).column == 7
        assert line.location_of(line.operand).column == 11
        assert str(line.location) == "game.asm:3:1"

    def test_source_text_kept(self):
        line = tokenize_source("Loop: ldx #1 ; comment")[0]
        assert line.source == "Loop: ldx #1 ; comment"

    def test_token_stream_ends_each_line(self):
        tokens = list(Lexer("nop\nrts").tokenize())
        assert [t.type for t in tokens].count(TokenType.LINE_END) == 2


# =============================================================================
# Preprocessor Tests
# =============================================================================

class TestPreprocessor:
    """Test conditional assembly."""

    def test_ifdef_defined(self):
        source = "#define DEBUG\n#ifdef DEBUG\n jsr\n#else\n nop\n#endif\n rts"
        assert preprocess(source) == ["jsr", "rts"]

    def test_ifdef_undefined(self):
        source = "#ifdef DEBUG\n jsr\n#else\n nop\n#endif"
        assert preprocess(source) == ["nop"]

    def test_seeded_define(self):
        assert preprocess("#ifdef FAST\n mul\n#endif", {"FAST"}) == ["mul"]

    def test_undef(self):
        source = "#define A\n#undef A\n#ifdef A\n nop\n#endif"
        assert preprocess(source) == []

    def test_define_inside_inactive_region_ignored(self):
        source = "#ifdef X\n#define Y\n#endif\n#ifdef Y\n nop\n#endif"
        assert preprocess(source) == []

    def test_else_in_inactive_outer_stays_inactive(self):
        source = "#ifdef X\n#ifdef Y\n nop\n#else\n rts\n#endif\n#endif\n clra"
        assert preprocess(source) == ["clra"]

    def test_nested(self):
        source = "#define X\n#ifdef X\n#ifdef Y\n nop\n#else\n rts\n#endif\n#endif"
        assert preprocess(source) == ["rts"]

    def test_unmatched_endif_is_fatal(self):
        with pytest.raises(PreprocessorError) as info:
            preprocess(" nop\n#endif")
        assert info.value.fatal

    def test_missing_endif_is_fatal(self):
        with pytest.raises(PreprocessorError) as info:
            preprocess("#ifdef X\n nop")
        assert "missing #endif" in info.value.message
