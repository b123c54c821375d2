"""
Motorola 6809 / Hitachi 6309 Instruction Model
==============================================

Operand classification and encoding for the 6809, and for the 6309 when
the model is created with ``extended=True``. The 6309 adds the E, F, W and
V registers, the zero register, inter-register arithmetic, TFM block moves,
direct-page bit operations and the memory-immediate AIM/OIM/EIM/TIM group.

Classification Order
--------------------
1. empty operand            inherent
2. ``#expr``                immediate
3. branch mnemonic          relative
4. register-list mnemonic   register list or register pair
5. ``[...]`` or a comma     indexed
6. ``<expr``                direct
7. anything else            extended (a leading ``>`` is stripped)

Indexed Post-Byte Summary
-------------------------
    ,R+  ,R++  ,-R  ,--R        $80 $81 $82 $83 | R
    ,R                          $84 | R
    A,R  B,R  D,R               $86 $85 $8B | R
    n,R                         5-bit, $88 + byte or $89 + word
    n,PCR                       $8C + byte or $8D + word
    [expr]                      $9F + word

R is $00 for X, $20 for Y, $40 for U and $60 for S; the indirect forms
``[...]`` set bit $10.
"""

from romasm.cpu.base import (
    AddressingMode,
    Cpu,
    EncodeContext,
    bits_required,
)
from romasm.cpu.m6809_opcodes import (
    ALIASES,
    BIT_MNEMONICS,
    BRANCHES,
    HD6309_ONLY,
    LONG_BRANCHES,
    MEMORY_IMMEDIATE_MNEMONICS,
    REGISTER_OPERAND_MNEMONICS,
    STACK_MNEMONICS,
    build_table,
)
from romasm.errors import AssemblySyntaxError
from romasm.lines import Line


# =============================================================================
# Register Encodings
# =============================================================================

INDEX_REGISTERS = {"x": 0x00, "y": 0x20, "u": 0x40, "s": 0x60}

ACCUMULATOR_OFFSETS = {
    "a": 0b0110,
    "b": 0b0101,
    "e": 0b0111,
    "f": 0b1010,
    "d": 0b1011,
    "w": 0b1110,
}

STACK_BITS = {
    "cc": 0x01, "ccr": 0x01,
    "a": 0x02,
    "b": 0x04,
    "d": 0x06,
    "dp": 0x08, "dpr": 0x08,
    "x": 0x10,
    "y": 0x20,
    "pc": 0x80,
}

TRANSFER_CODES = {
    "d": 0x0, "x": 0x1, "y": 0x2, "u": 0x3,
    "s": 0x4, "pc": 0x5, "w": 0x6, "v": 0x7,
    "a": 0x8, "b": 0x9, "cc": 0xA, "dp": 0xB,
    "0": 0xC, "z": 0xC, "e": 0xE, "f": 0xF,
}

HD6309_REGISTERS = frozenset({"e", "f", "w", "v", "0", "z"})

# Source/destination forms of TFM, offset from $1138
TFM_FORMS = {
    ("+", "+"): 0,
    ("-", "-"): 1,
    ("+", ""): 2,
    ("", "+"): 3,
}

BIT_REGISTERS = {"cc": 0, "a": 1, "b": 2}


# =============================================================================
# Operand Classification
# =============================================================================

def classify_operand(text: str) -> tuple[AddressingMode, str]:
    """
    Classify a general operand and return the mode and the operand text with
    any mode prefix removed.

    Raises:
        AssemblySyntaxError: If the operand has an unmatched bracket
    """
    text = text.strip()
    if not text:
        return AddressingMode.INHERENT, ""
    if text.startswith("#"):
        return AddressingMode.IMMEDIATE, text[1:]
    if text.startswith("[") or text.endswith("]"):
        if not (text.startswith("[") and text.endswith("]")):
            raise AssemblySyntaxError(f"unmatched bracket in operand '{text}'")
        return AddressingMode.INDEXED, text
    if "," in text:
        return AddressingMode.INDEXED, text
    if text.startswith("<"):
        return AddressingMode.DIRECT, text[1:]
    if text.startswith(">"):
        return AddressingMode.EXTENDED, text[1:]
    return AddressingMode.EXTENDED, text


def _split_auto(register: str) -> tuple[str, int, int]:
    """Split ',--X' style register text into (name, increment, decrement)."""
    increment = decrement = 0
    if register.endswith("++"):
        increment, register = 2, register[:-2]
    elif register.endswith("+"):
        increment, register = 1, register[:-1]
    if register.startswith("--"):
        decrement, register = 2, register[2:]
    elif register.startswith("-"):
        decrement, register = 1, register[1:]
    return register.strip().lower(), increment, decrement


# =============================================================================
# CPU Model
# =============================================================================

class Cpu6809(Cpu):
    """
    Encoder for the 6809, or the 6309 when ``extended`` is set.

    Example:
        >>> cpu = Cpu6809(extended=True)
        >>> cpu.find_opcode("ldq")
        True
    """

    def __init__(self, extended: bool = False):
        super().__init__(build_table(extended), ALIASES, BRANCHES)
        self.extended = extended
        self.name = "6309" if extended else "6809"

    def requires_extended(self, mnemonic: str) -> bool:
        mnemonic = mnemonic.lower()
        mnemonic = self.aliases.get(mnemonic, mnemonic)
        return not self.extended and mnemonic in HD6309_ONLY

    def encode(self, line: Line, context: EncodeContext) -> None:
        mnemonic = line.mnemonic
        text = line.operand_text.strip()

        if mnemonic in BIT_MNEMONICS:
            self._encode_bit_operation(line, text, context)
            return

        if mnemonic in MEMORY_IMMEDIATE_MNEMONICS:
            self._encode_memory_immediate(line, text, context)
            return

        if not text:
            self._begin(line, AddressingMode.INHERENT)
            return

        if text.startswith("#"):
            info = self._begin(line, AddressingMode.IMMEDIATE)
            self._encode_immediate(line, text[1:], info, context)
            return

        if mnemonic in self.branches:
            self._begin(line, AddressingMode.RELATIVE)
            self._encode_relative(line, text, mnemonic in LONG_BRANCHES, context)
            return

        if mnemonic in REGISTER_OPERAND_MNEMONICS:
            self._encode_register_operand(line, mnemonic, text, context)
            return

        mode, text = self._classify(line, text)
        self._begin(line, mode)
        self._encode_memory_operand(line, mode, text, context)

    # =========================================================================
    # Memory Operands
    # =========================================================================

    def _classify(self, line: Line, text: str) -> tuple[AddressingMode, str]:
        try:
            return classify_operand(text)
        except AssemblySyntaxError as e:
            raise e.attach(line.location_of(line.operand))

    def _encode_memory_operand(
        self, line: Line, mode: AddressingMode, text: str, context: EncodeContext
    ) -> None:
        if mode == AddressingMode.INDEXED:
            self._encode_indexed(line, text, context)
        elif mode == AddressingMode.DIRECT:
            self._encode_direct(line, text, context)
        else:
            self._encode_extended(line, text, context)

    def _encode_memory_immediate(self, line: Line, text: str, context: EncodeContext) -> None:
        """AIM/OIM/EIM/TIM #mask,address: mask byte, then the address operand."""
        mask, _, target = text.partition(",")
        if not mask.startswith("#") or not target.strip():
            raise AssemblySyntaxError(
                f"expected '#mask,address', got '{text}'",
                line.location_of(line.operand),
            )
        mode, target = self._classify(line, target)
        if mode not in (AddressingMode.DIRECT, AddressingMode.INDEXED, AddressingMode.EXTENDED):
            raise AssemblySyntaxError(
                f"illegal target '{target}' for {line.mnemonic}",
                line.location_of(line.operand),
            )
        self._begin(line, mode)
        self._emit_value(line, context.evaluate(mask[1:]), 1, context)
        self._encode_memory_operand(line, mode, target, context)

    def _encode_bit_operation(self, line: Line, text: str, context: EncodeContext) -> None:
        """BAND..STBT reg,source_bit,dest_bit,address."""
        self._begin(line, AddressingMode.DIRECT)
        parts = [part.strip() for part in text.split(",")]
        register = parts[0].lower() if parts else ""
        if len(parts) != 4 or register not in BIT_REGISTERS:
            raise AssemblySyntaxError(
                f"expected 'reg,bit,bit,address', got '{text}'",
                line.location_of(line.operand),
                hint="reg is CC, A or B",
            )
        source = context.evaluate(parts[1])
        dest = context.evaluate(parts[2])
        if source is None or dest is None:
            line.needs_fixup = True
        else:
            for bit in (source, dest):
                if not 0 <= bit <= 7:
                    raise AssemblySyntaxError(
                        f"bit number {bit} out of range 0..7",
                        line.location_of(line.operand),
                    )
            line.data.append(BIT_REGISTERS[register] << 6 | source << 3 | dest)
        address = parts[3][1:] if parts[3].startswith("<") else parts[3]
        self._encode_direct(line, address, context)

    # =========================================================================
    # Indexed Addressing
    # =========================================================================

    def _encode_indexed(self, line: Line, text: str, context: EncodeContext) -> None:
        """Append the post-byte and any offset bytes; grows ``line.length``."""
        location = line.location_of(line.operand)
        indirect = text.startswith("[")
        body = text[1:-1].strip() if indirect else text
        ind = 0x10 if indirect else 0x00

        parts = [part.strip() for part in body.split(",")]
        if len(parts) > 2:
            raise AssemblySyntaxError(f"illegal operand '{text}'", location)

        if len(parts) == 1:
            if not indirect:
                raise AssemblySyntaxError(f"illegal operand format '{text}'", location)
            line.data.append(0x9F)
            line.length += 2
            self._emit_value(line, context.evaluate(parts[0]), 2, context)
            return

        offset_text, register_text = parts
        register, increment, decrement = _split_auto(register_text)

        if register == "w":
            self._encode_w_indexed(line, text, offset_text, increment, decrement, indirect, context)
            return

        if register in ("pc", "pcr"):
            if increment or decrement:
                raise AssemblySyntaxError(f"illegal operand format '{text}'", location)
            self._encode_pc_indexed(line, offset_text, register == "pcr", ind, context)
            return

        if register not in INDEX_REGISTERS:
            raise AssemblySyntaxError(
                f"illegal operand format '{text}'",
                location,
                hint="index register must be X, Y, U, S or PCR",
            )
        reg = INDEX_REGISTERS[register]

        if increment or decrement:
            if increment and decrement:
                raise AssemblySyntaxError(
                    f"cannot both increment and decrement in '{text}'", location
                )
            if offset_text:
                raise AssemblySyntaxError(
                    f"auto increment/decrement takes no offset in '{text}'", location
                )
            if indirect and (increment == 1 or decrement == 1):
                raise AssemblySyntaxError(
                    f"single-step auto increment/decrement cannot be indirect in '{text}'",
                    location,
                )
            if increment:
                post = 0x80 if increment == 1 else 0x81
            else:
                post = 0x82 if decrement == 1 else 0x83
            line.data.append(post | reg | ind)
            return

        accumulator = offset_text.lower()
        if accumulator in ACCUMULATOR_OFFSETS:
            if accumulator in HD6309_REGISTERS and not self.extended:
                raise AssemblySyntaxError(
                    f"register '{offset_text}' requires the 6309", location
                )
            line.data.append(0x80 | ACCUMULATOR_OFFSETS[accumulator] | reg | ind)
            return

        if not offset_text:
            line.data.append(0x84 | reg | ind)
            return

        value = context.evaluate(offset_text)
        if value is None:
            line.wide_offset = True
        if line.wide_offset:
            size = 16
        else:
            size = bits_required(value)
        if size == 5 and not indirect:
            line.data.append((value & 0x1F) | reg)
        elif size <= 8:
            line.data.append(0x88 | reg | ind)
            line.length += 1
            line.add_value(value, 1)
        else:
            line.data.append(0x89 | reg | ind)
            line.length += 2
            self._emit_value(line, value, 2, context)

    def _encode_pc_indexed(
        self,
        line: Line,
        offset_text: str,
        relative: bool,
        ind: int,
        context: EncodeContext,
    ) -> None:
        """
        n,PC uses the offset as written; n,PCR converts a target address into
        an offset from the end of the instruction.
        """
        value = context.evaluate(offset_text) if offset_text else 0
        if value is None:
            line.wide_offset = True

        if not line.wide_offset:
            offset = value - (context.address + line.length + 1) if relative else value
            if bits_required(offset) <= 8:
                line.data.append(0x8C | ind)
                line.length += 1
                line.add_value(offset, 1)
                return

        line.data.append(0x8D | ind)
        line.length += 2
        if value is None:
            line.needs_fixup = True
            return
        offset = value - (context.address + line.length) if relative else value
        line.add_value(offset, 2)

    def _encode_w_indexed(
        self,
        line: Line,
        text: str,
        offset_text: str,
        increment: int,
        decrement: int,
        indirect: bool,
        context: EncodeContext,
    ) -> None:
        """6309 W-register forms: ,W  n,W  ,W++  ,--W."""
        location = line.location_of(line.operand)
        if not self.extended:
            raise AssemblySyntaxError(
                f"invalid operand '{text}'", location, hint="W indexing requires the 6309"
            )
        m = 0x10 if indirect else 0x0F
        if not offset_text and not increment and not decrement:
            line.data.append(0x80 | m)
        elif offset_text and not increment and not decrement:
            line.data.append(0xA0 | m)
            line.length += 2
            self._emit_value(line, context.evaluate(offset_text), 2, context)
        elif not offset_text and increment == 2 and not decrement:
            line.data.append(0xC0 | m)
        elif not offset_text and decrement == 2 and not increment:
            line.data.append(0xE0 | m)
        else:
            raise AssemblySyntaxError(f"invalid operand '{text}'", location)

    # =========================================================================
    # Register Operands
    # =========================================================================

    def _encode_register_operand(
        self, line: Line, mnemonic: str, text: str, context: EncodeContext
    ) -> None:
        if mnemonic in STACK_MNEMONICS:
            self._begin(line, AddressingMode.REGISTER)
            line.data.append(self._stack_mask(line, mnemonic, text))
        elif mnemonic == "tfm":
            self._encode_tfm(line, text)
        else:
            self._begin(line, AddressingMode.REGISTER)
            source, dest = self._register_pair(line, text)
            if (source < 8) != (dest < 8) and 0xC not in (source, dest):
                context.warn(f"transfer between registers of different sizes in '{text}'")
            line.data.append(source << 4 | dest)

    def _stack_mask(self, line: Line, mnemonic: str, text: str) -> int:
        """PSHS/PULS/PSHU/PULU register list to post-byte."""
        other = "u" if mnemonic in ("pshs", "puls") else "s"
        mask = 0
        for name in (part.strip().lower() for part in text.split(",")):
            if name == other:
                mask |= 0x40
            elif name in STACK_BITS:
                mask |= STACK_BITS[name]
            else:
                raise AssemblySyntaxError(
                    f"illegal register '{name}' in register list '{text}'",
                    line.location_of(line.operand),
                )
        return mask

    def _register_code(self, line: Line, name: str, text: str) -> int:
        name = name.strip().lower()
        if name not in TRANSFER_CODES:
            raise AssemblySyntaxError(
                f"illegal register '{name}' in '{text}'", line.location_of(line.operand)
            )
        if name in HD6309_REGISTERS and not self.extended:
            raise AssemblySyntaxError(
                f"register '{name}' requires the 6309", line.location_of(line.operand)
            )
        return TRANSFER_CODES[name]

    def _register_pair(self, line: Line, text: str) -> tuple[int, int]:
        parts = text.split(",")
        if len(parts) != 2:
            raise AssemblySyntaxError(
                f"expected two registers, got '{text}'", line.location_of(line.operand)
            )
        return (
            self._register_code(line, parts[0], text),
            self._register_code(line, parts[1], text),
        )

    def _encode_tfm(self, line: Line, text: str) -> None:
        """TFM r+,r+ / r-,r- / r+,r / r,r+ select $1138..$113B."""
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 2:
            raise AssemblySyntaxError(
                f"expected two registers, got '{text}'", line.location_of(line.operand)
            )
        names = []
        steps = []
        for part in parts:
            step = part[-1] if part[-1:] in ("+", "-") else ""
            names.append(part[:-1] if step else part)
            steps.append(step)
        form = TFM_FORMS.get(tuple(steps))
        if form is None:
            raise AssemblySyntaxError(
                f"illegal TFM form '{text}'",
                line.location_of(line.operand),
                hint="use r+,r+  r-,r-  r+,r  or  r,r+",
            )
        source = self._register_code(line, names[0], text)
        dest = self._register_code(line, names[1], text)
        if source > 4 or dest > 4:
            raise AssemblySyntaxError(
                f"TFM registers must be D, X, Y, U or S in '{text}'",
                line.location_of(line.operand),
            )
        self._begin(line, AddressingMode.REGISTER, opcode=0x1138 + form)
        line.data.append(source << 4 | dest)

