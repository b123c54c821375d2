# =============================================================================
# test_rom.py - ROM Definition, Splitting and Validation Tests
# =============================================================================
# Tests for the .rom directive model, splitting an image into per-chip
# files and comparing assembled output with reference dumps.
#
# Test coverage includes:
#   - Parsing .rom operands
#   - Split output files and zero padding
#   - Reference size and SHA-1 checks
#   - Per-line and whole-image comparison
# =============================================================================

import pytest

from romasm.assembler import Assembler
from romasm.errors import RomError
from romasm.rom import RomDefinition, RomValidator, ValidationMode, sha1_hex, split_rom


# =============================================================================
# Helper Functions
# =============================================================================

def write_reference(directory, name: str, data: bytes) -> RomDefinition:
    """Write a reference dump and return a matching definition at offset 0."""
    (directory / name).write_bytes(data)
    return RomDefinition(name, len(data), 0, sha1_hex(data))


def rom_source(data: bytes, name: str = "game.bin") -> str:
    """Source declaring one ROM at offset 0 holding ``data`` as fcb bytes."""
    items = ",".join(str(b) for b in data)
    return f" .rom {name} {len(data)} {sha1_hex(data)} 0\n fcb {items}\n"


# =============================================================================
# Definition Tests
# =============================================================================

class TestRomDefinition:
    """Test parsing .rom operands."""

    def test_parse(self):
        definition = RomDefinition.parse("robotron.sb1 4096 fe9a 1000")
        assert definition.filename == "robotron.sb1"
        assert definition.size == 4096
        assert definition.offset == 0x1000
        assert definition.sha1 == "FE9A"
        assert definition.end == 0x2000

    def test_wrong_field_count(self):
        with pytest.raises(ValueError):
            RomDefinition.parse("robotron.sb1 4096")

    def test_bad_number(self):
        with pytest.raises(ValueError):
            RomDefinition.parse("robotron.sb1 4K fe9a 0")

    def test_sha1_uppercase(self):
        assert sha1_hex(b"") == "DA39A3EE5E6B4B0D3255BFEF95601890AFD80709"


# =============================================================================
# Split Tests
# =============================================================================

class TestSplit:
    """Test writing per-ROM files."""

    def test_split(self, tmp_path):
        definitions = [
            RomDefinition("a.bin", 2, 0, ""),
            RomDefinition("b.bin", 2, 2, ""),
        ]
        paths = split_rom(bytes([1, 2, 3, 4]), definitions, tmp_path / "out")
        assert [p.name for p in paths] == ["a.bin.out", "b.bin.out"]
        assert (tmp_path / "out" / "a.bin.out").read_bytes() == bytes([1, 2])
        assert (tmp_path / "out" / "b.bin.out").read_bytes() == bytes([3, 4])

    def test_split_pads_short_image(self, tmp_path):
        paths = split_rom(b"\x01", [RomDefinition("a.bin", 4, 0, "")], tmp_path)
        assert paths[0].read_bytes() == bytes([1, 0, 0, 0])

    def test_assembler_split(self, tmp_path):
        source = " .rom lo.bin 2 00 0\n .rom hi.bin 2 00 2\n fcb 1,2,3,4"
        asm = Assembler()
        asm.assemble_string(source)
        paths = asm.split(tmp_path)
        assert len(paths) == 2
        assert (tmp_path / "hi.bin.out").read_bytes() == bytes([3, 4])


# =============================================================================
# Validation Tests
# =============================================================================

class TestValidation:
    """Test comparison with reference dumps."""

    def test_load_reference(self, tmp_path):
        definition = write_reference(tmp_path, "game.bin", bytes([0x12, 0x39]))
        reference = RomValidator([definition]).load_reference(tmp_path)
        assert reference[:2] == bytes([0x12, 0x39])

    def test_missing_reference(self, tmp_path):
        definition = RomDefinition("missing.bin", 2, 0, "")
        with pytest.raises(RomError):
            RomValidator([definition]).load_reference(tmp_path)

    def test_wrong_size(self, tmp_path):
        (tmp_path / "game.bin").write_bytes(b"\x12")
        definition = RomDefinition("game.bin", 2, 0, sha1_hex(b"\x12"))
        with pytest.raises(RomError) as info:
            RomValidator([definition]).load_reference(tmp_path)
        assert "wrong size" in str(info.value)

    def test_wrong_sha1(self, tmp_path):
        (tmp_path / "game.bin").write_bytes(b"\x12\x39")
        definition = RomDefinition("game.bin", 2, 0, "0" * 40)
        with pytest.raises(RomError) as info:
            RomValidator([definition]).load_reference(tmp_path)
        assert "SHA-1" in str(info.value)

    def test_lines_match(self, tmp_path):
        data = bytes([0x12, 0x39, 0x7E])
        write_reference(tmp_path, "game.bin", data)
        asm = Assembler()
        asm.assemble_string(rom_source(data))
        assert asm.validate(tmp_path, ValidationMode.LINES) == []
        assert asm.validate(tmp_path, ValidationMode.IMAGE) == []

    def test_lines_mismatch(self, tmp_path):
        reference = bytes([0x12, 0x39])
        write_reference(tmp_path, "game.bin", reference)
        asm = Assembler()
        asm.assemble_string(f" .rom game.bin 2 {sha1_hex(reference)} 0\n nop\n nop")
        mismatches = asm.validate(tmp_path, ValidationMode.LINES)
        assert len(mismatches) == 1
        assert mismatches[0].startswith("Data mismatch at address 0x0001")

    def test_image_mismatch(self, tmp_path):
        reference = bytes([0x12, 0x39])
        write_reference(tmp_path, "game.bin", reference)
        asm = Assembler()
        asm.assemble_string(f" .rom game.bin 2 {sha1_hex(reference)} 0\n nop\n nop")
        assert asm.validate(tmp_path, ValidationMode.IMAGE) == [
            "ROM images differ at address 0x0001"
        ]

    def test_image_shorter_than_rom(self, tmp_path):
        reference = bytes([0x12, 0x00])
        write_reference(tmp_path, "game.bin", reference)
        asm = Assembler()
        asm.assemble_string(f" .rom game.bin 2 {sha1_hex(reference)} 0\n nop")
        assert asm.validate(tmp_path, ValidationMode.IMAGE) == [
            "ROM images differ at address 0x0001"
        ]

    def test_mismatch_cap(self, tmp_path):
        reference = bytes(8)
        write_reference(tmp_path, "game.bin", reference)
        validator = RomValidator([RomDefinition("game.bin", 8, 0, sha1_hex(reference))], 3)
        mismatches = validator.check_image(validator.load_reference(tmp_path), bytes([1] * 8))
        assert len(mismatches) == 3
