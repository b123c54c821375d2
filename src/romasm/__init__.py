"""
romasm - Retargetable 6800-Family Cross-Assembler
=================================================

Reassembles ROM images for the Motorola 6800, Motorola 6809 and Hitachi
HD6309 from annotated disassembly source, and checks the result byte for
byte against reference dumps.

Main Components
---------------
- **assembler**: Tokenizer, preprocessor, symbols and the two-pass driver
- **cpu**: Instruction models and operand encoders per CPU
- **rom**: ``.rom`` definitions, ROM splitting and reference validation
- **cli**: The ``romasm`` command

Quick Start
-----------
    >>> from romasm import Assembler, AssemblerConfig
    >>> asm = Assembler(AssemblerConfig(cpu="6800"))
    >>> asm.assemble_string(" ldaa #$10\\n")
    b'\\x86\\x10'

Or from the command line:
    $ romasm game.asm -o game.bin --split out/ --roms dumps/ --check lines
"""

__version__ = "0.1.0"

from romasm.assembler import Assembler, AssemblyResult, CodeGenerator
from romasm.config import AssemblerConfig
from romasm.errors import AssemblerError, RomasmError, RomError

__all__ = [
    "Assembler",
    "AssemblerConfig",
    "AssemblerError",
    "AssemblyResult",
    "CodeGenerator",
    "RomError",
    "RomasmError",
    "__version__",
]
