"""
Conditional Assembly Preprocessor
=================================

Handles the ``#define``, ``#undef``, ``#ifdef``, ``#else`` and ``#endif``
lines. The directive sits in the label column and the macro name in the
opcode column:

    #define DEBUG
    #ifdef  DEBUG
            jsr   Trace
    #else
            nop
    #endif

Macros have no values and are never substituted into the text; they only
select which lines are assembled. Directive lines and the lines of inactive
regions are removed from the line list.
"""

import logging

from romasm.errors import PreprocessorError
from romasm.lines import Line

logger = logging.getLogger(__name__)


DIRECTIVES = ("#define", "#undef", "#ifdef", "#else", "#endif")


class Preprocessor:
    """
    Applies conditional assembly to a list of lines.

    Attributes:
        defines: Names currently defined; may be seeded before ``process``
    """

    def __init__(self, defines: set[str] | None = None):
        self.defines: set[str] = set(defines or ())

    def process(self, lines: list[Line]) -> list[Line]:
        """
        Return the lines that survive conditional assembly.

        Raises:
            PreprocessorError: On an unmatched ``#endif`` or a missing
                               ``#endif`` (both fatal)
        """
        active = True
        # (macro name, active state of the enclosing region)
        stack: list[tuple[str, bool]] = []
        kept: list[Line] = []
        removed = 0

        for line in lines:
            directive = line.label_text
            if directive not in DIRECTIVES:
                if active:
                    kept.append(line)
                else:
                    removed += 1
                continue

            removed += 1
            name = line.opcode_text

            if directive == "#define":
                if active:
                    self.defines.add(name)
            elif directive == "#undef":
                if active:
                    self.defines.discard(name)
            elif directive == "#ifdef":
                stack.append((name, active))
                if active:
                    active = name in self.defines
            elif directive == "#else":
                if not stack:
                    raise PreprocessorError(
                        "#else without #ifdef", line.location_of(line.label), source_line=line.source
                    )
                if stack[-1][1]:
                    active = not active
            else:
                if not stack:
                    raise PreprocessorError(
                        "unmatched #endif", line.location_of(line.label), source_line=line.source
                    )
                _, active = stack.pop()

            logger.debug(f"{directive} {name} -> {'active' if active else 'inactive'}")

        if stack:
            raise PreprocessorError(
                f"missing #endif for #ifdef {stack[-1][0]}",
                hint=f"{len(stack)} conditional block(s) left open",
            )

        logger.info(f"Removing {removed} lines due to preprocessor")
        return kept
