"""
romasm Command-Line Interface
=============================

- **romasm**: assemble a source file, write the ROM image, listing and
  symbol table, split it into per-chip files and check it against
  reference dumps

The tool is a Click application; ``errors`` maps exceptions to exit codes.
"""

__all__ = ["romasm"]
