"""
ROM Definitions, Splitting and Validation
=========================================

A reconstructed program usually corresponds to several physical ROM chips.
Each ``.rom`` directive in the source declares one of them:

    .rom  robotron.sb1  4096  FE9A1B26C8A4D8BA9C0A04D0E4CCD3CF97F1EF29  0

giving the chip file name, its size in decimal, the SHA-1 of the reference
dump, and its offset in the assembled image in hex.

``split_rom`` cuts the assembled image into one file per definition.
``RomValidator`` loads the reference dumps, verifies their size and SHA-1,
and compares them against the assembly, either line by line (every byte
emitted by every placed line) or as a whole image.
"""

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from romasm.errors import RomError
from romasm.lines import UNASSIGNED, Line

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".out"
ADDRESS_SPACE = 0x10000


# =============================================================================
# ROM Definitions
# =============================================================================

@dataclass(frozen=True)
class RomDefinition:
    """
    One physical ROM declared by a ``.rom`` directive.

    Attributes:
        filename: Reference dump file name
        size: Size in bytes
        offset: Offset of the ROM in the assembled image
        sha1: Expected SHA-1 of the reference dump (uppercase hex)
    """
    filename: str
    size: int
    offset: int
    sha1: str

    @classmethod
    def parse(cls, text: str) -> "RomDefinition":
        """
        Parse ``filename size sha1 hexoffset``.

        Raises:
            ValueError: If the text does not have four well-formed fields
        """
        fields = text.split()
        if len(fields) != 4:
            raise ValueError(f"expected 4 fields, got {len(fields)}")
        filename, size, sha1, offset = fields
        return cls(filename, int(size, 10), int(offset, 16), sha1.upper())

    @property
    def end(self) -> int:
        return self.offset + self.size

    def __str__(self) -> str:
        return f"{self.filename} ({self.size} bytes at ${self.offset:04X})"


def sha1_hex(data: bytes) -> str:
    """Uppercase hex SHA-1 of data."""
    return hashlib.sha1(data).hexdigest().upper()


# =============================================================================
# Splitting
# =============================================================================

def split_rom(
    image: bytes,
    definitions: Iterable[RomDefinition],
    output_dir: Path,
    suffix: str = OUTPUT_SUFFIX,
) -> list[Path]:
    """
    Write each defined ROM's slice of the image to ``output_dir``.

    Slices running past the end of the image are zero-padded.

    Returns:
        Paths of the files written

    Raises:
        RomError: If the output directory cannot be created
    """
    definitions = list(definitions)
    logger.info(f"Splitting ROM into {len(definitions)} output files")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RomError(f"cannot create output directory {output_dir}: {e}") from e

    written = []
    for definition in definitions:
        data = bytes(image[definition.offset:definition.end])
        data = data.ljust(definition.size, b"\x00")
        path = output_dir / (definition.filename + suffix)
        path.write_bytes(data)
        logger.info(f"File {path} created")
        written.append(path)
    return written


# =============================================================================
# Validation
# =============================================================================

class ValidationMode(Enum):
    """How assembled output is compared with the reference dumps."""
    LINES = "lines"
    IMAGE = "image"

    def __str__(self) -> str:
        return self.value


class RomValidator:
    """
    Compares assembled output with reference ROM dumps.

    Usage:
        validator = RomValidator(result.rom_definitions)
        reference = validator.load_reference(Path("roms"))
        mismatches = validator.check_lines(reference, result.lines)

    Attributes:
        definitions: ROMs to load
        max_mismatches: Mismatches reported before the comparison stops
    """

    def __init__(self, definitions: Iterable[RomDefinition], max_mismatches: int = 10):
        self.definitions = list(definitions)
        self.max_mismatches = max_mismatches

    def load_reference(self, rom_dir: Path) -> bytearray:
        """
        Read every defined ROM into a 64K reference image.

        Raises:
            RomError: If a file is missing, or its size or SHA-1 is wrong
        """
        reference = bytearray(ADDRESS_SPACE)
        for definition in self.definitions:
            path = rom_dir / definition.filename
            logger.info(f"Reading rom file {path}")
            try:
                data = path.read_bytes()
            except OSError as e:
                raise RomError(f"cannot read rom {path}: {e}") from e

            if len(data) != definition.size:
                raise RomError(
                    f"rom {definition.filename} is the wrong size: "
                    f"should be {definition.size}, was {len(data)}"
                )
            digest = sha1_hex(data)
            if digest != definition.sha1:
                raise RomError(
                    f"file {definition.filename} SHA-1 of {digest} should be {definition.sha1}"
                )
            if definition.end > len(reference):
                reference.extend(bytes(definition.end - len(reference)))
            reference[definition.offset:definition.end] = data

        logger.info("All roms read for validation")
        return reference

    def check_lines(self, reference: bytes, lines: Iterable[Line]) -> list[str]:
        """
        Compare the bytes of every placed line with the reference.

        Returns:
            One message per mismatching line (at most ``max_mismatches``)
        """
        mismatches: list[str] = []
        total = 0
        for line in lines:
            if line.address == UNASSIGNED or not line.data:
                continue
            expected = bytes(reference[line.address:line.address + len(line.data)])
            if expected == bytes(line.data):
                continue
            total += 1
            if len(mismatches) < self.max_mismatches:
                pairs = " ".join(
                    f"({correct:02X},{ours:02X})" for correct, ours in zip(expected, line.data)
                )
                mismatches.append(
                    f"Data mismatch at address 0x{line.address:04X} {line}\n"
                    f"   (correct,ours): {pairs}"
                )
        if total:
            logger.info(f"{total} total mismatching lines")
        return mismatches

    def check_image(self, reference: bytes, image: bytes) -> list[str]:
        """
        Compare the assembled image with the reference over each defined ROM.

        Returns:
            One message per differing address (at most ``max_mismatches``)
        """
        logger.info("Direct ROM comparison")
        mismatches: list[str] = []
        for definition in self.definitions:
            for address in range(definition.offset, definition.end):
                ours = image[address] if address < len(image) else None
                if ours != reference[address]:
                    mismatches.append(f"ROM images differ at address 0x{address:04X}")
                    if len(mismatches) >= self.max_mismatches:
                        return mismatches
        return mismatches

    def validate(
        self,
        rom_dir: Path,
        image: bytes,
        lines: Iterable[Line],
        mode: ValidationMode = ValidationMode.LINES,
    ) -> list[str]:
        """Load the references and run the selected comparison."""
        reference = self.load_reference(rom_dir)
        if mode == ValidationMode.IMAGE:
            return self.check_image(reference, image)
        return self.check_lines(reference, lines)
