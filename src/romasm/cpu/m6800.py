"""
Motorola 6800 Instruction Model
===============================

Opcode table and operand encoder for the original 6800. The 6800 has a
single index register and only the ``n,X`` indexed form, with an unsigned
8-bit offset; everything else is immediate, direct, extended, relative or
inherent.

Operand Forms
-------------
    #expr       immediate (8 or 16 bits from the table size)
    <expr       direct page ($00xx)
    expr        extended
    n,X  ,X     indexed
"""

from romasm.cpu.base import (
    AddressingMode,
    Cpu,
    EncodeContext,
    InstructionInfo,
)
from romasm.errors import AssemblySyntaxError
from romasm.lines import Line


# =============================================================================
# Opcode Table
# =============================================================================
# Key: (mnemonic, mode), Value: InstructionInfo(opcode, size).
# Indexed sizes include the offset byte.

OPCODE_TABLE: dict[tuple[str, AddressingMode], InstructionInfo] = {
    ("adda", AddressingMode.IMMEDIATE): InstructionInfo(0x8B, 2),
    ("adda", AddressingMode.DIRECT): InstructionInfo(0x9B, 2),
    ("adda", AddressingMode.INDEXED): InstructionInfo(0xAB, 2),
    ("adda", AddressingMode.EXTENDED): InstructionInfo(0xBB, 3),
    ("addb", AddressingMode.IMMEDIATE): InstructionInfo(0xCB, 2),
    ("addb", AddressingMode.DIRECT): InstructionInfo(0xDB, 2),
    ("addb", AddressingMode.INDEXED): InstructionInfo(0xEB, 2),
    ("addb", AddressingMode.EXTENDED): InstructionInfo(0xFB, 3),
    ("aba", AddressingMode.INHERENT): InstructionInfo(0x1B, 1),
    ("adca", AddressingMode.IMMEDIATE): InstructionInfo(0x89, 2),
    ("adca", AddressingMode.DIRECT): InstructionInfo(0x99, 2),
    ("adca", AddressingMode.INDEXED): InstructionInfo(0xA9, 2),
    ("adca", AddressingMode.EXTENDED): InstructionInfo(0xB9, 3),
    ("adcb", AddressingMode.IMMEDIATE): InstructionInfo(0xC9, 2),
    ("adcb", AddressingMode.DIRECT): InstructionInfo(0xD9, 2),
    ("adcb", AddressingMode.INDEXED): InstructionInfo(0xE9, 2),
    ("adcb", AddressingMode.EXTENDED): InstructionInfo(0xF9, 3),
    ("anda", AddressingMode.IMMEDIATE): InstructionInfo(0x84, 2),
    ("anda", AddressingMode.DIRECT): InstructionInfo(0x94, 2),
    ("anda", AddressingMode.INDEXED): InstructionInfo(0xA4, 2),
    ("anda", AddressingMode.EXTENDED): InstructionInfo(0xB4, 3),
    ("andb", AddressingMode.IMMEDIATE): InstructionInfo(0xC4, 2),
    ("andb", AddressingMode.DIRECT): InstructionInfo(0xD4, 2),
    ("andb", AddressingMode.INDEXED): InstructionInfo(0xE4, 2),
    ("andb", AddressingMode.EXTENDED): InstructionInfo(0xF4, 3),
    ("bita", AddressingMode.IMMEDIATE): InstructionInfo(0x85, 2),
    ("bita", AddressingMode.DIRECT): InstructionInfo(0x95, 2),
    ("bita", AddressingMode.INDEXED): InstructionInfo(0xA5, 2),
    ("bita", AddressingMode.EXTENDED): InstructionInfo(0xB5, 3),
    ("bitb", AddressingMode.IMMEDIATE): InstructionInfo(0xC5, 2),
    ("bitb", AddressingMode.DIRECT): InstructionInfo(0xD5, 2),
    ("bitb", AddressingMode.INDEXED): InstructionInfo(0xE5, 2),
    ("bitb", AddressingMode.EXTENDED): InstructionInfo(0xF5, 3),
    ("clr", AddressingMode.INDEXED): InstructionInfo(0x6F, 2),
    ("clr", AddressingMode.EXTENDED): InstructionInfo(0x7F, 3),
    ("clra", AddressingMode.INHERENT): InstructionInfo(0x4F, 1),
    ("clrb", AddressingMode.INHERENT): InstructionInfo(0x5F, 1),
    ("cmpa", AddressingMode.IMMEDIATE): InstructionInfo(0x81, 2),
    ("cmpa", AddressingMode.DIRECT): InstructionInfo(0x91, 2),
    ("cmpa", AddressingMode.INDEXED): InstructionInfo(0xA1, 2),
    ("cmpa", AddressingMode.EXTENDED): InstructionInfo(0xB1, 3),
    ("cmpb", AddressingMode.IMMEDIATE): InstructionInfo(0xC1, 2),
    ("cmpb", AddressingMode.DIRECT): InstructionInfo(0xD1, 2),
    ("cmpb", AddressingMode.INDEXED): InstructionInfo(0xE1, 2),
    ("cmpb", AddressingMode.EXTENDED): InstructionInfo(0xF1, 3),
    ("cba", AddressingMode.INHERENT): InstructionInfo(0x11, 1),
    ("com", AddressingMode.INDEXED): InstructionInfo(0x63, 2),
    ("com", AddressingMode.EXTENDED): InstructionInfo(0x73, 3),
    ("coma", AddressingMode.INHERENT): InstructionInfo(0x43, 1),
    ("comb", AddressingMode.INHERENT): InstructionInfo(0x53, 1),
    ("neg", AddressingMode.INDEXED): InstructionInfo(0x60, 2),
    ("neg", AddressingMode.EXTENDED): InstructionInfo(0x70, 3),
    ("nega", AddressingMode.INHERENT): InstructionInfo(0x40, 1),
    ("negb", AddressingMode.INHERENT): InstructionInfo(0x50, 1),
    ("daa", AddressingMode.INHERENT): InstructionInfo(0x19, 1),
    ("dec", AddressingMode.INDEXED): InstructionInfo(0x6A, 2),
    ("dec", AddressingMode.EXTENDED): InstructionInfo(0x7A, 3),
    ("deca", AddressingMode.INHERENT): InstructionInfo(0x4A, 1),
    ("decb", AddressingMode.INHERENT): InstructionInfo(0x5A, 1),
    ("eora", AddressingMode.IMMEDIATE): InstructionInfo(0x88, 2),
    ("eora", AddressingMode.DIRECT): InstructionInfo(0x98, 2),
    ("eora", AddressingMode.INDEXED): InstructionInfo(0xA8, 2),
    ("eora", AddressingMode.EXTENDED): InstructionInfo(0xB8, 3),
    ("eorb", AddressingMode.IMMEDIATE): InstructionInfo(0xC8, 2),
    ("eorb", AddressingMode.DIRECT): InstructionInfo(0xD8, 2),
    ("eorb", AddressingMode.INDEXED): InstructionInfo(0xE8, 2),
    ("eorb", AddressingMode.EXTENDED): InstructionInfo(0xF8, 3),
    ("inc", AddressingMode.INDEXED): InstructionInfo(0x6C, 2),
    ("inc", AddressingMode.EXTENDED): InstructionInfo(0x7C, 3),
    ("inca", AddressingMode.INHERENT): InstructionInfo(0x4C, 1),
    ("incb", AddressingMode.INHERENT): InstructionInfo(0x5C, 1),
    ("ldaa", AddressingMode.IMMEDIATE): InstructionInfo(0x86, 2),
    ("ldaa", AddressingMode.DIRECT): InstructionInfo(0x96, 2),
    ("ldaa", AddressingMode.INDEXED): InstructionInfo(0xA6, 2),
    ("ldaa", AddressingMode.EXTENDED): InstructionInfo(0xB6, 3),
    ("ldab", AddressingMode.IMMEDIATE): InstructionInfo(0xC6, 2),
    ("ldab", AddressingMode.DIRECT): InstructionInfo(0xD6, 2),
    ("ldab", AddressingMode.INDEXED): InstructionInfo(0xE6, 2),
    ("ldab", AddressingMode.EXTENDED): InstructionInfo(0xF6, 3),
    ("oraa", AddressingMode.IMMEDIATE): InstructionInfo(0x8A, 2),
    ("oraa", AddressingMode.DIRECT): InstructionInfo(0x9A, 2),
    ("oraa", AddressingMode.INDEXED): InstructionInfo(0xAA, 2),
    ("oraa", AddressingMode.EXTENDED): InstructionInfo(0xBA, 3),
    ("orab", AddressingMode.IMMEDIATE): InstructionInfo(0xCA, 2),
    ("orab", AddressingMode.DIRECT): InstructionInfo(0xDA, 2),
    ("orab", AddressingMode.INDEXED): InstructionInfo(0xEA, 2),
    ("orab", AddressingMode.EXTENDED): InstructionInfo(0xFA, 3),
    ("psha", AddressingMode.INHERENT): InstructionInfo(0x36, 1),
    ("pshb", AddressingMode.INHERENT): InstructionInfo(0x37, 1),
    ("pula", AddressingMode.INHERENT): InstructionInfo(0x32, 1),
    ("pulb", AddressingMode.INHERENT): InstructionInfo(0x33, 1),
    ("rol", AddressingMode.INDEXED): InstructionInfo(0x69, 2),
    ("rol", AddressingMode.EXTENDED): InstructionInfo(0x79, 3),
    ("rola", AddressingMode.INHERENT): InstructionInfo(0x49, 1),
    ("rolb", AddressingMode.INHERENT): InstructionInfo(0x59, 1),
    ("ror", AddressingMode.INDEXED): InstructionInfo(0x66, 2),
    ("ror", AddressingMode.EXTENDED): InstructionInfo(0x76, 3),
    ("rora", AddressingMode.INHERENT): InstructionInfo(0x46, 1),
    ("rorb", AddressingMode.INHERENT): InstructionInfo(0x56, 1),
    ("asl", AddressingMode.INDEXED): InstructionInfo(0x68, 2),
    ("asl", AddressingMode.EXTENDED): InstructionInfo(0x78, 3),
    ("asla", AddressingMode.INHERENT): InstructionInfo(0x48, 1),
    ("aslb", AddressingMode.INHERENT): InstructionInfo(0x58, 1),
    ("asr", AddressingMode.INDEXED): InstructionInfo(0x67, 2),
    ("asr", AddressingMode.EXTENDED): InstructionInfo(0x77, 3),
    ("asra", AddressingMode.INHERENT): InstructionInfo(0x47, 1),
    ("asrb", AddressingMode.INHERENT): InstructionInfo(0x57, 1),
    ("lsr", AddressingMode.INDEXED): InstructionInfo(0x64, 2),
    ("lsr", AddressingMode.EXTENDED): InstructionInfo(0x74, 3),
    ("lsra", AddressingMode.INHERENT): InstructionInfo(0x44, 1),
    ("lsrb", AddressingMode.INHERENT): InstructionInfo(0x54, 1),
    ("staa", AddressingMode.DIRECT): InstructionInfo(0x97, 2),
    ("staa", AddressingMode.INDEXED): InstructionInfo(0xA7, 2),
    ("staa", AddressingMode.EXTENDED): InstructionInfo(0xB7, 3),
    ("stab", AddressingMode.DIRECT): InstructionInfo(0xD7, 2),
    ("stab", AddressingMode.INDEXED): InstructionInfo(0xE7, 2),
    ("stab", AddressingMode.EXTENDED): InstructionInfo(0xF7, 3),
    ("suba", AddressingMode.IMMEDIATE): InstructionInfo(0x80, 2),
    ("suba", AddressingMode.DIRECT): InstructionInfo(0x90, 2),
    ("suba", AddressingMode.INDEXED): InstructionInfo(0xA0, 2),
    ("suba", AddressingMode.EXTENDED): InstructionInfo(0xB0, 3),
    ("subb", AddressingMode.IMMEDIATE): InstructionInfo(0xC0, 2),
    ("subb", AddressingMode.DIRECT): InstructionInfo(0xD0, 2),
    ("subb", AddressingMode.INDEXED): InstructionInfo(0xE0, 2),
    ("subb", AddressingMode.EXTENDED): InstructionInfo(0xF0, 3),
    ("sba", AddressingMode.INHERENT): InstructionInfo(0x10, 1),
    ("sbca", AddressingMode.IMMEDIATE): InstructionInfo(0x82, 2),
    ("sbca", AddressingMode.DIRECT): InstructionInfo(0x92, 2),
    ("sbca", AddressingMode.INDEXED): InstructionInfo(0xA2, 2),
    ("sbca", AddressingMode.EXTENDED): InstructionInfo(0xB2, 3),
    ("sbcb", AddressingMode.IMMEDIATE): InstructionInfo(0xC2, 2),
    ("sbcb", AddressingMode.DIRECT): InstructionInfo(0xD2, 2),
    ("sbcb", AddressingMode.INDEXED): InstructionInfo(0xE2, 2),
    ("sbcb", AddressingMode.EXTENDED): InstructionInfo(0xF2, 3),
    ("tab", AddressingMode.INHERENT): InstructionInfo(0x16, 1),
    ("tba", AddressingMode.INHERENT): InstructionInfo(0x17, 1),
    ("tst", AddressingMode.INDEXED): InstructionInfo(0x6D, 2),
    ("tst", AddressingMode.EXTENDED): InstructionInfo(0x7D, 3),
    ("tsta", AddressingMode.INHERENT): InstructionInfo(0x4D, 1),
    ("tstb", AddressingMode.INHERENT): InstructionInfo(0x5D, 1),
    ("cpx", AddressingMode.IMMEDIATE): InstructionInfo(0x8C, 3),
    ("cpx", AddressingMode.DIRECT): InstructionInfo(0x9C, 2),
    ("cpx", AddressingMode.INDEXED): InstructionInfo(0xAC, 2),
    ("cpx", AddressingMode.EXTENDED): InstructionInfo(0xBC, 3),
    ("dex", AddressingMode.INHERENT): InstructionInfo(0x09, 1),
    ("des", AddressingMode.INHERENT): InstructionInfo(0x34, 1),
    ("inx", AddressingMode.INHERENT): InstructionInfo(0x08, 1),
    ("ins", AddressingMode.INHERENT): InstructionInfo(0x31, 1),
    ("ldx", AddressingMode.IMMEDIATE): InstructionInfo(0xCE, 3),
    ("ldx", AddressingMode.DIRECT): InstructionInfo(0xDE, 2),
    ("ldx", AddressingMode.INDEXED): InstructionInfo(0xEE, 2),
    ("ldx", AddressingMode.EXTENDED): InstructionInfo(0xFE, 3),
    ("lds", AddressingMode.IMMEDIATE): InstructionInfo(0x8E, 3),
    ("lds", AddressingMode.DIRECT): InstructionInfo(0x9E, 2),
    ("lds", AddressingMode.INDEXED): InstructionInfo(0xAE, 2),
    ("lds", AddressingMode.EXTENDED): InstructionInfo(0xBE, 3),
    ("stx", AddressingMode.DIRECT): InstructionInfo(0xDF, 2),
    ("stx", AddressingMode.INDEXED): InstructionInfo(0xEF, 2),
    ("stx", AddressingMode.EXTENDED): InstructionInfo(0xFF, 3),
    ("sts", AddressingMode.DIRECT): InstructionInfo(0x9F, 2),
    ("sts", AddressingMode.INDEXED): InstructionInfo(0xAF, 2),
    ("sts", AddressingMode.EXTENDED): InstructionInfo(0xBF, 3),
    ("txs", AddressingMode.INHERENT): InstructionInfo(0x35, 1),
    ("tsx", AddressingMode.INHERENT): InstructionInfo(0x30, 1),
    ("bra", AddressingMode.RELATIVE): InstructionInfo(0x20, 2),
    ("bcc", AddressingMode.RELATIVE): InstructionInfo(0x24, 2),
    ("bcs", AddressingMode.RELATIVE): InstructionInfo(0x25, 2),
    ("beq", AddressingMode.RELATIVE): InstructionInfo(0x27, 2),
    ("bge", AddressingMode.RELATIVE): InstructionInfo(0x2C, 2),
    ("bgt", AddressingMode.RELATIVE): InstructionInfo(0x2E, 2),
    ("bhi", AddressingMode.RELATIVE): InstructionInfo(0x22, 2),
    ("ble", AddressingMode.RELATIVE): InstructionInfo(0x2F, 2),
    ("bls", AddressingMode.RELATIVE): InstructionInfo(0x23, 2),
    ("blt", AddressingMode.RELATIVE): InstructionInfo(0x2D, 2),
    ("bmi", AddressingMode.RELATIVE): InstructionInfo(0x2B, 2),
    ("bne", AddressingMode.RELATIVE): InstructionInfo(0x26, 2),
    ("bvc", AddressingMode.RELATIVE): InstructionInfo(0x28, 2),
    ("bvs", AddressingMode.RELATIVE): InstructionInfo(0x29, 2),
    ("bpl", AddressingMode.RELATIVE): InstructionInfo(0x2A, 2),
    ("bsr", AddressingMode.RELATIVE): InstructionInfo(0x8D, 2),
    ("jmp", AddressingMode.INDEXED): InstructionInfo(0x6E, 2),
    ("jmp", AddressingMode.EXTENDED): InstructionInfo(0x7E, 3),
    ("jsr", AddressingMode.INDEXED): InstructionInfo(0xAD, 2),
    ("jsr", AddressingMode.EXTENDED): InstructionInfo(0xBD, 3),
    ("nop", AddressingMode.INHERENT): InstructionInfo(0x01, 1),
    ("rti", AddressingMode.INHERENT): InstructionInfo(0x3B, 1),
    ("rts", AddressingMode.INHERENT): InstructionInfo(0x39, 1),
    ("swi", AddressingMode.INHERENT): InstructionInfo(0x3F, 1),
    ("wai", AddressingMode.INHERENT): InstructionInfo(0x3E, 1),
    ("clc", AddressingMode.INHERENT): InstructionInfo(0x0C, 1),
    ("cli", AddressingMode.INHERENT): InstructionInfo(0x0E, 1),
    ("clv", AddressingMode.INHERENT): InstructionInfo(0x0A, 1),
    ("sec", AddressingMode.INHERENT): InstructionInfo(0x0D, 1),
    ("sei", AddressingMode.INHERENT): InstructionInfo(0x0F, 1),
    ("sev", AddressingMode.INHERENT): InstructionInfo(0x0B, 1),
    ("tap", AddressingMode.INHERENT): InstructionInfo(0x06, 1),
    ("tpa", AddressingMode.INHERENT): InstructionInfo(0x07, 1),
}

BRANCHES = frozenset(
    mnemonic for (mnemonic, mode) in OPCODE_TABLE if mode == AddressingMode.RELATIVE
)

ALIASES: dict[str, str] = {
    "lsl": "asl",
    "lsla": "asla",
    "lslb": "aslb",
    "bhs": "bcc",
    "blo": "bcs",
}


# =============================================================================
# CPU Model
# =============================================================================

class Cpu6800(Cpu):
    """Encoder for the 6800 instruction set."""

    name = "6800"

    def __init__(self):
        super().__init__(OPCODE_TABLE, ALIASES, BRANCHES)

    def encode(self, line: Line, context: EncodeContext) -> None:
        mnemonic = line.mnemonic
        text = line.operand_text.strip()

        if not text:
            self._begin(line, AddressingMode.INHERENT)
            return

        if text.startswith("#"):
            info = self._begin(line, AddressingMode.IMMEDIATE)
            self._encode_immediate(line, text[1:], info, context)
            return

        if mnemonic in self.branches:
            self._begin(line, AddressingMode.RELATIVE)
            self._encode_relative(line, text, False, context)
            return

        if "," in text:
            self._begin(line, AddressingMode.INDEXED)
            self._encode_indexed(line, text, context)
            return

        if text.startswith("<"):
            self._begin(line, AddressingMode.DIRECT)
            self._encode_direct(line, text[1:], context)
            return

        if text.startswith(">"):
            text = text[1:]
        self._begin(line, AddressingMode.EXTENDED)
        self._encode_extended(line, text, context)

    def _encode_indexed(self, line: Line, text: str, context: EncodeContext) -> None:
        """n,X with an unsigned 8-bit offset; an empty offset means 0."""
        offset_text, _, register = text.rpartition(",")
        if register.strip().lower() != "x" or "," in offset_text:
            raise AssemblySyntaxError(
                f"illegal indexed operand '{text}'",
                line.location_of(line.operand),
                hint="the 6800 only supports n,X",
            )
        if not offset_text.strip():
            line.add_value(0, 1)
            return
        offset = context.evaluate(offset_text)
        if offset is None:
            line.needs_fixup = True
            return
        if not 0 <= offset <= 0xFF:
            raise AssemblySyntaxError(
                f"index offset {offset} out of range 0..255",
                line.location_of(line.operand),
            )
        line.add_value(offset, 1)
