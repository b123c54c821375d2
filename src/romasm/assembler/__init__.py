"""
6800-Family Assembler Core
==========================

Assembles 6800, 6809 and HD6309 source into ROM images, one compilation
unit at a time.

Main Components
---------------
- **Assembler**: Facade that tokenizes, assembles and writes outputs
- **Lexer**: Splits source into label/opcode/operand lines
- **Preprocessor**: ``#define``/``#ifdef`` conditional assembly
- **SymbolTable**: Labels (same names allowed) and structs
- **ExpressionEvaluator**: Operand and directive expressions
- **CodeGenerator**: Two-pass driver producing an ``AssemblyResult``

Assembly Process
----------------
1. Tokenize the source into lines
2. Pre-pass: CPU selection, preprocessor, structs, label registration
3. Pass 1: place and encode every line, flagging unresolved ones
4. Pass 2: re-encode the flagged lines at their recorded addresses
5. Lay the lines out into the ROM image

Example Usage
-------------
>>> from romasm.assembler import Assembler
>>> asm = Assembler()
>>> rom = asm.assemble_string("LABEL: NOP\\n JMP LABEL\\n")
>>> rom.hex()
'127e0000'
"""

from romasm.assembler.assembler import Assembler, assemble, assemble_file
from romasm.assembler.codegen import AssemblyResult, CodeGenerator, strings_to_numbers
from romasm.assembler.expressions import ExpressionEvaluator
from romasm.assembler.lexer import Lexer, tokenize_source
from romasm.assembler.preprocessor import Preprocessor
from romasm.assembler.symbols import Label, Struct, StructField, SymbolTable

__all__ = [
    "Assembler",
    "AssemblyResult",
    "CodeGenerator",
    "ExpressionEvaluator",
    "Label",
    "Lexer",
    "Preprocessor",
    "Struct",
    "StructField",
    "SymbolTable",
    "assemble",
    "assemble_file",
    "strings_to_numbers",
    "tokenize_source",
]
