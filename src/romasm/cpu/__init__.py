"""
CPU Instruction Models
======================

One model per supported CPU variant. ``make_cpu`` maps the names used by
the ``.cpu`` directive and the command line to a model instance.
"""

from romasm.cpu.base import (
    AddressingMode,
    Cpu,
    EncodeContext,
    InstructionInfo,
    add_checked_value,
    bits_required,
)
from romasm.cpu.m6800 import Cpu6800
from romasm.cpu.m6809 import Cpu6809


def make_cpu(name: str) -> Cpu:
    """
    Create the CPU model for a variant name.

    Args:
        name: "6800", "6809" or "6309" (case-insensitive, surrounding
              whitespace ignored)

    Raises:
        ValueError: If the name is not a supported CPU
    """
    key = name.strip().lower()
    if key == "6800":
        return Cpu6800()
    if key == "6809":
        return Cpu6809()
    if key == "6309":
        return Cpu6809(extended=True)
    raise ValueError(f"unsupported cpu '{name}'")


__all__ = [
    "AddressingMode",
    "Cpu",
    "Cpu6800",
    "Cpu6809",
    "EncodeContext",
    "InstructionInfo",
    "add_checked_value",
    "bits_required",
    "make_cpu",
]
