"""
romasm Assembler - Main Interface
=================================

The Assembler class ties the tokenizer and the two-pass driver together
and writes the outputs of a run (ROM image, split ROM files, listing,
symbol table).

Example Usage
-------------
>>> from romasm.assembler import Assembler
>>> from romasm.config import AssemblerConfig
>>>
>>> asm = Assembler(AssemblerConfig(cpu="6809"))
>>> asm.assemble_string('''
... Start:  lda   #$41
...         bra   Start
... ''')
b'\\x86A \\xfc'
>>> asm.get_symbols()
{'Start': 0}
>>> asm.write_listing("game.lst")

Command-Line Usage
------------------
    $ romasm game.asm -o game.bin -l game.lst -s game.sym --split roms/
"""

import logging
from pathlib import Path
from typing import Optional

from romasm.assembler.codegen import AssemblyResult, CodeGenerator
from romasm.assembler.lexer import Lexer
from romasm.config import AssemblerConfig
from romasm.errors import AssemblerError
from romasm.rom import RomValidator, ValidationMode, split_rom

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main assembler class.

    One instance can assemble several sources in turn; each call replaces
    the previous result.

    Attributes:
        config: Settings for every run of this instance
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()
        self._defines: set[str] = set()
        self._codegen = CodeGenerator(self.config)
        self._result: Optional[AssemblyResult] = None

    def define(self, name: str) -> None:
        """Define a preprocessor name, as if by ``#define`` at the top of the source."""
        self._defines.add(name)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Name used in diagnostics

        Returns:
            The ROM image

        Raises:
            AssemblerError: If any error was collected
        """
        lines = Lexer(source, filename).get_lines()
        self._codegen = CodeGenerator(self.config, self._defines)
        self._result = self._codegen.generate(lines)

        if not self._result.success:
            count = self._result.diagnostics.error_count()
            raise AssemblerError(
                f"Assembly failed with {count} errors:\n\n{self.get_error_report()}"
            )

        logger.info(f"Generated {len(self._result.image)} bytes for the {self._result.cpu}")
        return self._result.image

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If any error was collected
            FileNotFoundError: If the source file does not exist
        """
        filepath = Path(filepath)
        logger.info(f"Assembling {filepath}")
        source = filepath.read_text(encoding="latin-1")
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def get_result(self) -> Optional[AssemblyResult]:
        """The full result of the last run, or None before the first."""
        return self._result

    def get_code(self) -> bytes:
        return self._codegen.get_code()

    def get_symbols(self) -> dict[str, int]:
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        return self._codegen.get_listing()

    def has_errors(self) -> bool:
        return self._codegen.has_errors()

    def get_error_report(self) -> str:
        return self._codegen.get_error_report()

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_rom(self, filepath: str | Path) -> None:
        """Write the raw ROM image."""
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.info(f"Wrote {len(code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing shows addresses, generated bytes and source lines,
        followed by the symbol table.
        """
        self._codegen.write_listing(filepath)
        logger.info(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        self._codegen.write_symbols(filepath)
        logger.info(f"Wrote symbols to {filepath}")

    def split(self, output_dir: str | Path) -> list[Path]:
        """
        Write one file per ``.rom`` definition of the last run.

        Returns:
            Paths of the files written
        """
        definitions = self._result.rom_definitions if self._result else []
        return split_rom(self.get_code(), definitions, Path(output_dir))

    def validate(
        self,
        rom_dir: str | Path,
        mode: ValidationMode = ValidationMode.LINES,
        max_mismatches: int = 10,
    ) -> list[str]:
        """
        Compare the last run with the reference ROMs in ``rom_dir``.

        Returns:
            Mismatch messages; empty when the assembly matches

        Raises:
            RomError: If a reference ROM is missing or fails its size or
                      SHA-1 check
        """
        if self._result is None:
            return []
        validator = RomValidator(self._result.rom_definitions, max_mismatches)
        return validator.validate(Path(rom_dir), self._result.image, self._result.lines, mode)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", cpu: str = "6809") -> bytes:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(AssemblerConfig(cpu=cpu)).assemble_string(source, filename)


def assemble_file(filepath: str | Path, cpu: str = "6809") -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(AssemblerConfig(cpu=cpu)).assemble_file(filepath)
