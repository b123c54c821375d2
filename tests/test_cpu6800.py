# =============================================================================
# test_cpu6800.py - 6800 Encoder Tests
# =============================================================================
# Tests for the 6800 instruction model.
#
# Test coverage includes:
#   - Inherent, immediate, direct, extended and indexed forms
#   - The unsigned 8-bit n,X offset
#   - Relative branches
#   - Mnemonic aliases
#   - Modes and registers the 6800 does not have
# =============================================================================

import pytest

from romasm.assembler.expressions import ExpressionEvaluator
from romasm.assembler.lexer import tokenize_source
from romasm.cpu import Cpu6800, EncodeContext
from romasm.errors import AddressingModeError, AssemblySyntaxError, BranchRangeError


# =============================================================================
# Helper Functions
# =============================================================================

def encode(source: str, address: int = 0, symbols: dict = None, final_pass: bool = True):
    """Encode one line on a 6800 and return the Line."""
    cpu = Cpu6800()
    symbols = symbols or {}
    line = tokenize_source(source, "test.asm")[0]
    line.opcode.text = cpu.normalize_mnemonic(line.opcode.text)
    line.address = address
    evaluator = ExpressionEvaluator()
    context = EncodeContext(
        address=address,
        evaluate=lambda text: evaluator.evaluate(text, address, lambda name, anchor: symbols[name]),
        final_pass=final_pass,
    )
    cpu.encode(line, context)
    return line


def code(source: str, **kwargs) -> str:
    """Encoded bytes as an uppercase hex string with spaces."""
    line = encode(source, **kwargs)
    assert line.length == len(line.data)
    return " ".join(f"{b:02X}" for b in line.data)


# =============================================================================
# Encoding Tests
# =============================================================================

class TestModes:
    """Test each addressing mode."""

    def test_inherent(self):
        assert code(" psha") == "36"
        assert code(" swi") == "3F"

    def test_immediate(self):
        assert code(" ldaa #$41") == "86 41"
        assert code(" ldx #$1234") == "CE 12 34"

    def test_direct(self):
        assert code(" staa <$80") == "97 80"

    def test_extended(self):
        assert code(" staa $1234") == "B7 12 34"
        assert code(" jmp >$10") == "7E 00 10"

    def test_indexed(self):
        assert code(" ldaa 5,x") == "A6 05"
        assert code(" ldaa 200,X") == "A6 C8"

    def test_indexed_empty_offset(self):
        assert code(" jmp ,x") == "6E 00"

    def test_indexed_offset_out_of_range(self):
        with pytest.raises(AssemblySyntaxError):
            encode(" ldaa 300,x")
        with pytest.raises(AssemblySyntaxError):
            encode(" ldaa -1,x")

    def test_only_x_register(self):
        with pytest.raises(AssemblySyntaxError):
            encode(" ldaa 5,y")

    def test_unresolved_indexed_offset(self):
        line = encode(" ldaa Field,x", symbols={"Field": None}, final_pass=False)
        assert line.needs_fixup
        assert line.length == 2

    def test_no_immediate_store(self):
        with pytest.raises(AddressingModeError):
            encode(" staa #1")


class TestBranches:
    """Test relative branches."""

    def test_forward(self):
        assert code(" bra $10") == "20 0E"

    def test_out_of_range(self):
        with pytest.raises(BranchRangeError):
            encode(" bra $200")

    def test_no_long_branches(self):
        cpu = Cpu6800()
        assert not cpu.find_opcode("lbra")


class TestAliases:
    """Test alternative mnemonic spellings."""

    def test_lsl_is_asl(self):
        assert code(" lsla") == "48"

    def test_bhs_is_bcc(self):
        assert code(" bhs $10") == "24 0E"

    def test_6809_mnemonic_unknown(self):
        cpu = Cpu6800()
        assert not cpu.find_opcode("lda")
        assert cpu.normalize_mnemonic("LDAA") == "ldaa"
