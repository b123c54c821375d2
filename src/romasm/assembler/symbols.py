"""
Symbol and Struct Tables
========================

Labels and struct declarations for one compilation unit.

Labels
------
Several labels may share a name (reconstructed ROMs reuse local names such
as ``loop`` all over the place). A reference resolves to the instance
nearest the address of the referencing instruction. Every label line is
registered before the first pass, so an unknown name is always an error
and never a forward reference; a known label without an address yet makes
the lookup unresolved.

Structs
-------
Structs live in an arena (a list indexed by struct id). Field layouts are
computed once by ``resolve_struct_layouts``, which memoizes per struct and
rejects structs that contain themselves.

Dotted paths walk struct fields:

    Player   struc
    x        fcb ?
    pos      Point ?
    Player   ends

    Player.pos.y       offset of y within pos within Player
    P1.pos             address of label P1 (a Player instance) + offset of pos
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from romasm.errors import StructError, UndefinedSymbolError
from romasm.lines import Line

logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Types
# =============================================================================

@dataclass(eq=False)
class Label:
    """
    A named address.

    Attributes:
        name: Label text (case-sensitive)
        line: Defining line
        address: Bound address, None until pass 1 reaches the line
    """
    name: str
    line: Line
    address: Optional[int] = None

    def __str__(self) -> str:
        if self.address is None:
            return f"{self.name} = ????"
        return f"{self.name} = {self.address:04X}"


@dataclass(eq=False)
class StructField:
    """
    One field of a struct declaration.

    Attributes:
        name: Field name (the label column of the field line)
        line: Declaring line
        type_name: "fcb", "fdb" or the name of a nested struct
        count: Repeat count (``?`` is 1, ``n dup(?)`` is n)
        offset: Byte offset within the struct, None until resolved
        struct_id: Arena index of the nested struct, if any
    """
    name: str
    line: Line
    type_name: str
    count: int = 1
    offset: Optional[int] = None
    struct_id: Optional[int] = None


@dataclass(eq=False)
class Struct:
    """
    A struct declaration.

    Attributes:
        name: Struct name
        line: The ``struc`` line
        fields: Fields in declaration order
        struct_id: Index in the symbol table's arena
        byte_length: Total size, None until resolved
        byte_lengths: Flattened element sizes (1 or 2 per element)
    """
    name: str
    line: Line
    fields: list[StructField] = field(default_factory=list)
    struct_id: int = -1
    byte_length: Optional[int] = None
    byte_lengths: list[int] = field(default_factory=list)

    def find_field(self, name: str) -> Optional[StructField]:
        for struct_field in self.fields:
            if struct_field.name == name and struct_field.offset is not None:
                return struct_field
        return None

    def __str__(self) -> str:
        return f"struct {self.name}"


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Insertion-ordered labels plus the struct arena.

    Example:
        >>> table = SymbolTable()
        >>> label = table.add_label(line)
        >>> table.bind_label_address(line, 0x8000)
        True
        >>> table.lookup(label.name, 0x8000)
        32768
    """

    def __init__(self):
        self._labels: dict[str, list[Label]] = {}
        self._structs: list[Struct] = []
        self._struct_ids: dict[str, int] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def add_label(self, line: Line) -> Label:
        """Register a label line. Same-named labels are kept side by side."""
        label = Label(line.label_text, line)
        self._labels.setdefault(label.name, []).append(label)
        return label

    def add_struct(self, struct: Struct) -> int:
        """
        Add a struct to the arena.

        Returns:
            The struct id

        Raises:
            StructError: If a struct of the same name exists
        """
        if struct.name in self._struct_ids:
            raise StructError(
                f"struct name '{struct.name}' cannot be duplicated",
                struct.line.location_of(struct.line.label),
            )
        struct.struct_id = len(self._structs)
        self._structs.append(struct)
        self._struct_ids[struct.name] = struct.struct_id
        return struct.struct_id

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def structs(self) -> list[Struct]:
        return list(self._structs)

    def get_struct(self, name: str) -> Optional[Struct]:
        struct_id = self._struct_ids.get(name)
        return None if struct_id is None else self._structs[struct_id]

    def get_labels(self, name: Optional[str] = None) -> list[Label]:
        """All labels in definition order, or the instances of one name."""
        if name is not None:
            return list(self._labels.get(name, []))
        return [label for group in self._labels.values() for label in group]

    def label_names(self) -> list[str]:
        return list(self._labels)

    def bound_labels(self) -> Iterator[Label]:
        for label in self.get_labels():
            if label.address is not None:
                yield label

    def __len__(self) -> int:
        return sum(len(group) for group in self._labels.values())

    # =========================================================================
    # Label Binding
    # =========================================================================

    def bind_label_address(self, line: Line, address: int) -> bool:
        """
        Bind the label of a line to an address.

        Returns:
            True if a same-named label already holds the address or an
            unbound instance was filled in; False if every instance is bound
            elsewhere (a conflicting duplicate)
        """
        instances = self._labels.get(line.label_text, [])
        for label in instances:
            if label.address == address:
                return True
        for label in instances:
            if label.address is None:
                label.address = address
                return True
        return False

    # =========================================================================
    # Lookup
    # =========================================================================

    def lookup(self, path: str, anchor: int) -> Optional[int]:
        """
        Resolve a label, struct or dotted field path.

        Args:
            path: Name or dotted path
            anchor: Address of the referencing instruction; selects among
                    same-named labels

        Returns:
            The value, or None if a same-named label is not yet bound

        Raises:
            UndefinedSymbolError: If the base name or a field does not exist
        """
        words = [word.strip() for word in path.split(".") if word.strip()]
        if not words:
            raise UndefinedSymbolError(path)

        base = words[0]
        offset = 0
        labels = self._labels.get(base)
        if labels:
            if any(label.address is None for label in labels):
                return None
            best = min(labels, key=lambda label: abs(label.address - anchor))
            if len(words) == 1:
                return best.address
            offset = best.address
            struct = self.get_struct(best.line.opcode_text)
            if struct is None:
                raise UndefinedSymbolError(
                    path,
                    hint=f"label '{base}' is not a struct instance",
                )
        else:
            struct = self.get_struct(base)
            if struct is None:
                raise UndefinedSymbolError(
                    base, similar_symbols=self.find_similar_names(base)
                )

        for word in words[1:]:
            struct_field = struct.find_field(word) if struct is not None else None
            if struct_field is None:
                owner = struct.name if struct is not None else words[0]
                raise UndefinedSymbolError(
                    path,
                    hint=f"'{owner}' has no field '{word}'",
                )
            offset += struct_field.offset
            struct = (
                self._structs[struct_field.struct_id]
                if struct_field.struct_id is not None
                else None
            )
        return offset

    def find_similar_names(self, name: str) -> list[str]:
        """
        Find label and struct names close to a misspelled one.

        Uses a simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []
        for candidate in list(self._labels) + list(self._struct_ids):
            candidate_lower = candidate.lower()
            if candidate_lower == name_lower or (
                abs(len(candidate) - len(name)) <= 1
                and edit_distance(name_lower, candidate_lower) <= 2
            ):
                if candidate not in similar:
                    similar.append(candidate)
        return similar[:3]

    # =========================================================================
    # Struct Layout
    # =========================================================================

    def resolve_struct_layouts(self) -> None:
        """
        Compute offsets and sizes for every struct, once each.

        Raises:
            StructError: If a field type is unknown, or (fatal) if a struct
                         contains itself directly or transitively
        """
        for struct in self._structs:
            self._layout(struct.struct_id, [])
        logger.info(f"Resolved {len(self._structs)} struct layouts")

    def _layout(self, struct_id: int, visiting: list[int]) -> Struct:
        struct = self._structs[struct_id]
        if struct.byte_length is not None:
            return struct
        if struct_id in visiting:
            chain = " -> ".join(self._structs[i].name for i in visiting + [struct_id])
            raise StructError(
                f"struct '{struct.name}' contains itself ({chain})",
                struct.line.location_of(struct.line.label),
                fatal=True,
            )
        visiting.append(struct_id)

        offset = 0
        byte_lengths: list[int] = []
        for struct_field in struct.fields:
            struct_field.offset = offset
            type_name = struct_field.type_name.lower()
            if type_name == "fcb":
                element_sizes = [1]
            elif type_name == "fdb":
                element_sizes = [2]
            else:
                nested_id = self._struct_ids.get(struct_field.type_name)
                if nested_id is None:
                    raise StructError(
                        f"cannot understand size of field '{struct_field.name}' "
                        f"of type '{struct_field.type_name}' in {struct}",
                        struct_field.line.location_of(struct_field.line.opcode),
                    )
                struct_field.struct_id = nested_id
                element_sizes = self._layout(nested_id, visiting).byte_lengths
            field_sizes = element_sizes * struct_field.count
            byte_lengths.extend(field_sizes)
            offset += sum(field_sizes)

        visiting.pop()
        struct.byte_lengths = byte_lengths
        struct.byte_length = sum(byte_lengths)
        logger.debug(f"{struct} has {len(byte_lengths)} elements, {struct.byte_length} bytes")
        return struct

    # =========================================================================
    # Diagnostics Helpers
    # =========================================================================

    def find_close_labels(self, distance: int) -> Iterator[tuple[Label, Label]]:
        """Yield pairs of same-named labels bound less than ``distance`` apart."""
        for group in self._labels.values():
            bound = [label for label in group if label.address is not None]
            for i, first in enumerate(bound):
                for second in bound[i + 1:]:
                    if abs(first.address - second.address) < distance:
                        yield first, second


def edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1],
                )))
        distances = new_distances

    return distances[-1]
