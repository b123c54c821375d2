"""
romasm Configuration
====================

Assembler settings. Configuration can come from:
- Default values (defined here)
- Environment variables (``AssemblerConfig.from_env``)
- Command-line options (applied by the CLI on top of either)

A ``.cpu`` directive inside the source overrides the configured CPU.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUPPORTED_CPUS = ("6800", "6809", "6309")


@dataclass
class AssemblerConfig:
    """
    Settings for one assembly run.

    Attributes:
        cpu: Default CPU variant ("6800", "6809" or "6309")
        label_distance: Same-named labels closer than this many bytes are
                        reported as "labels too close"
        origin: Address the first line is assembled at
        max_errors: Errors collected before the assembly gives up
        strict_direct_page: Treat a direct-page operand whose high byte does
                            not match the .setdp value as an error
    """

    cpu: str = "6809"
    label_distance: int = 512
    origin: int = 0
    max_errors: int = 100
    strict_direct_page: bool = False

    def __post_init__(self) -> None:
        self.cpu = str(self.cpu).strip()
        if self.cpu not in SUPPORTED_CPUS:
            raise ValueError(
                f"unsupported cpu '{self.cpu}', expected one of {', '.join(SUPPORTED_CPUS)}"
            )
        if self.label_distance < 0:
            raise ValueError("label_distance must not be negative")
        if self.max_errors < 1:
            raise ValueError("max_errors must be at least 1")

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            ROMASM_CPU: CPU variant ("6800", "6809", "6309")
            ROMASM_LABEL_DISTANCE: Too-close label distance in bytes
            ROMASM_ORIGIN: Start address (decimal, $hex or 0xhex)
            ROMASM_MAX_ERRORS: Error limit

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if cpu := os.environ.get("ROMASM_CPU"):
            if cpu.strip() in SUPPORTED_CPUS:
                config.cpu = cpu.strip()
            else:
                logger.warning(f"ignoring ROMASM_CPU={cpu!r}")

        if distance := os.environ.get("ROMASM_LABEL_DISTANCE"):
            try:
                config.label_distance = int(distance)
            except ValueError:
                logger.warning(f"ignoring ROMASM_LABEL_DISTANCE={distance!r}")

        if origin := os.environ.get("ROMASM_ORIGIN"):
            try:
                config.origin = parse_number(origin)
            except ValueError:
                logger.warning(f"ignoring ROMASM_ORIGIN={origin!r}")

        if max_errors := os.environ.get("ROMASM_MAX_ERRORS"):
            try:
                config.max_errors = max(1, int(max_errors))
            except ValueError:
                logger.warning(f"ignoring ROMASM_MAX_ERRORS={max_errors!r}")

        return config


def parse_number(text: str) -> int:
    """
    Parse a decimal, $hex or 0xhex number.

    Raises:
        ValueError: If the text is not a number
    """
    text = text.strip()
    if text.startswith("$"):
        return int(text[1:], 16)
    if text.lower().startswith("0x"):
        return int(text[2:], 16)
    return int(text)
