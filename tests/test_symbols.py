# =============================================================================
# test_symbols.py - Symbol and Struct Table Tests
# =============================================================================
# Tests for label binding, nearest-label lookup and struct layouts.
#
# Test coverage includes:
#   - Same-named labels resolved by distance
#   - Unbound labels as unresolved lookups
#   - Struct layouts, nested structs and dotted field paths
#   - Cyclic struct detection
#   - "Did you mean" suggestions
# =============================================================================

import pytest

from romasm.assembler.lexer import tokenize_source
from romasm.assembler.symbols import Struct, StructField, SymbolTable, edit_distance
from romasm.errors import StructError, UndefinedSymbolError


# =============================================================================
# Helper Functions
# =============================================================================

def label_line(name: str, opcode: str = "nop"):
    """A one-line source with a label in column 1."""
    return tokenize_source(f"{name} {opcode}")[0]


def make_struct(name: str, *fields: tuple) -> Struct:
    """Build a struct from (field name, type name, count) tuples."""
    header = tokenize_source(f"{name} struc")[0]
    struct = Struct(name, header)
    for field_name, type_name, count in fields:
        field_line = tokenize_source(f"{field_name} {type_name} ?")[0]
        struct.fields.append(StructField(field_name, field_line, type_name, count))
    return struct


# =============================================================================
# Label Tests
# =============================================================================

class TestLabels:
    """Test label registration and binding."""

    def test_bind_and_lookup(self):
        table = SymbolTable()
        line = label_line("Start")
        table.add_label(line)
        assert table.bind_label_address(line, 0x8000)
        assert table.lookup("Start", 0) == 0x8000

    def test_unbound_label_is_unresolved(self):
        table = SymbolTable()
        table.add_label(label_line("Later"))
        assert table.lookup("Later", 0) is None

    def test_nearest_same_named_label(self):
        table = SymbolTable()
        first = label_line("loop")
        second = label_line("loop")
        table.add_label(first)
        table.add_label(second)
        table.bind_label_address(first, 0x1000)
        table.bind_label_address(second, 0x2000)
        assert table.lookup("loop", 0x1010) == 0x1000
        assert table.lookup("loop", 0x1FF0) == 0x2000

    def test_one_unbound_instance_makes_lookup_unresolved(self):
        table = SymbolTable()
        first = label_line("loop")
        table.add_label(first)
        table.add_label(label_line("loop"))
        table.bind_label_address(first, 0x1000)
        assert table.lookup("loop", 0x1000) is None

    def test_rebinding_same_address_succeeds(self):
        table = SymbolTable()
        line = label_line("Start")
        table.add_label(line)
        assert table.bind_label_address(line, 0x10)
        assert table.bind_label_address(line, 0x10)

    def test_conflicting_bind_fails(self):
        table = SymbolTable()
        line = label_line("Start")
        table.add_label(line)
        table.bind_label_address(line, 0x10)
        assert not table.bind_label_address(line, 0x20)

    def test_undefined_name_suggests_similar(self):
        table = SymbolTable()
        line = label_line("PlayerX")
        table.add_label(line)
        table.bind_label_address(line, 0)
        with pytest.raises(UndefinedSymbolError) as info:
            table.lookup("PlayrX", 0)
        assert "PlayerX" in info.value.similar_symbols

    def test_find_close_labels(self):
        table = SymbolTable()
        first = label_line("loop")
        second = label_line("loop")
        table.add_label(first)
        table.add_label(second)
        table.bind_label_address(first, 0x100)
        table.bind_label_address(second, 0x180)
        assert len(list(table.find_close_labels(512))) == 1
        assert list(table.find_close_labels(0x80)) == []

    def test_len_counts_instances(self):
        table = SymbolTable()
        table.add_label(label_line("a"))
        table.add_label(label_line("a"))
        table.add_label(label_line("b"))
        assert len(table) == 3
        assert table.label_names() == ["a", "b"]


# =============================================================================
# Struct Tests
# =============================================================================

class TestStructs:
    """Test struct layouts and field paths."""

    def test_byte_and_word_fields(self):
        table = SymbolTable()
        table.add_struct(make_struct("Pair", ("lo", "fcb", 1), ("hi", "fdb", 1)))
        table.resolve_struct_layouts()
        struct = table.get_struct("Pair")
        assert struct.byte_lengths == [1, 2]
        assert struct.byte_length == 3

    def test_field_offsets(self):
        table = SymbolTable()
        table.add_struct(make_struct("Pair", ("lo", "fcb", 1), ("hi", "fdb", 1)))
        table.resolve_struct_layouts()
        assert table.lookup("Pair.lo", 0) == 0
        assert table.lookup("Pair.hi", 0) == 1

    def test_repeat_count(self):
        table = SymbolTable()
        table.add_struct(make_struct("Buf", ("data", "fcb", 4), ("end", "fdb", 2)))
        table.resolve_struct_layouts()
        struct = table.get_struct("Buf")
        assert struct.byte_lengths == [1, 1, 1, 1, 2, 2]
        assert table.lookup("Buf.end", 0) == 4

    def test_nested_struct_path(self):
        table = SymbolTable()
        table.add_struct(make_struct("Player", ("id", "fcb", 1), ("pos", "Point", 1)))
        table.add_struct(make_struct("Point", ("x", "fdb", 1), ("y", "fdb", 1)))
        table.resolve_struct_layouts()
        assert table.get_struct("Player").byte_length == 5
        assert table.lookup("Player.pos.y", 0) == 3

    def test_instance_label_path(self):
        table = SymbolTable()
        table.add_struct(make_struct("Point", ("x", "fdb", 1), ("y", "fdb", 1)))
        table.resolve_struct_layouts()
        line = label_line("Origin", "Point")
        table.add_label(line)
        table.bind_label_address(line, 0x4000)
        assert table.lookup("Origin.y", 0) == 0x4002

    def test_missing_field(self):
        table = SymbolTable()
        table.add_struct(make_struct("Point", ("x", "fdb", 1)))
        table.resolve_struct_layouts()
        with pytest.raises(UndefinedSymbolError) as info:
            table.lookup("Point.z", 0)
        assert "no field 'z'" in info.value.hint

    def test_duplicate_struct_name(self):
        table = SymbolTable()
        table.add_struct(make_struct("Point", ("x", "fdb", 1)))
        with pytest.raises(StructError):
            table.add_struct(make_struct("Point", ("y", "fdb", 1)))

    def test_unknown_field_type(self):
        table = SymbolTable()
        table.add_struct(make_struct("Bad", ("x", "fcw", 1)))
        with pytest.raises(StructError) as info:
            table.resolve_struct_layouts()
        assert not info.value.fatal

    def test_cyclic_struct_is_fatal(self):
        table = SymbolTable()
        table.add_struct(make_struct("A", ("b", "B", 1)))
        table.add_struct(make_struct("B", ("a", "A", 1)))
        with pytest.raises(StructError) as info:
            table.resolve_struct_layouts()
        assert info.value.fatal
        assert "contains itself" in info.value.message


class TestEditDistance:
    """Test the Levenshtein helper."""

    @pytest.mark.parametrize("a,b,distance", [
        ("", "", 0),
        ("abc", "abc", 0),
        ("abc", "abd", 1),
        ("PlayrX", "PlayerX", 1),
        ("kitten", "sitting", 3),
    ])
    def test_distance(self, a, b, distance):
        assert edit_distance(a, b) == distance
