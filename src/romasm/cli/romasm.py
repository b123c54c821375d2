"""
romasm - Command-Line Interface
===============================

Assembles one source file into a ROM image.

Usage Examples
--------------
Basic assembly (writes game.bin):
    $ romasm game.asm

Generate all output files:
    $ romasm game.asm -o game.bin -l game.lst -s game.sym

Split into the chips declared by .rom directives:
    $ romasm game.asm --split out/

Check every assembled line against the reference dumps:
    $ romasm game.asm --roms dumps/ --check lines
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from romasm import __version__
from romasm.assembler import Assembler
from romasm.cli.errors import ExitCode, handle_cli_exception
from romasm.config import SUPPORTED_CPUS, AssemblerConfig
from romasm.rom import ValidationMode


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output ROM image (default: input.bin)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--split",
    type=click.Path(file_okay=False, path_type=Path),
    help="Write one file per .rom definition into this directory",
)
@click.option(
    "--roms",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding the reference ROM dumps",
)
@click.option(
    "--check",
    type=click.Choice([mode.value for mode in ValidationMode]),
    default=None,
    help="Compare with the reference dumps per line or as a whole image (needs --roms)",
)
@click.option(
    "--cpu",
    type=click.Choice(SUPPORTED_CPUS),
    default=None,
    help="CPU assumed when the source has no .cpu directive",
)
@click.option(
    "--label-distance",
    type=click.IntRange(min=0),
    default=None,
    help="Warn about same-named labels closer than this many bytes (0 disables)",
)
@click.option(
    "-D", "--define",
    multiple=True,
    help="Define a preprocessor name for #ifdef (can be repeated)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="romasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    split: Optional[Path],
    roms: Optional[Path],
    check: Optional[str],
    cpu: Optional[str],
    label_distance: Optional[int],
    define: tuple[str, ...],
    verbose: bool,
) -> None:
    """
    Assemble 6800, 6809 or HD6309 source into a ROM image.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        romasm game.asm                        # Outputs game.bin
        romasm game.asm --cpu 6309 -l game.lst # Listing, 6309 by default
        romasm game.asm --roms dumps/ --check image
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if check is not None and roms is None:
        click.echo("Error: --check requires --roms", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    config = AssemblerConfig.from_env()
    if cpu is not None:
        config.cpu = cpu
    if label_distance is not None:
        config.label_distance = label_distance

    output_file = output if output is not None else input_file.with_suffix(".bin")

    asm = Assembler(config)
    for name in define:
        asm.define(name.strip())

    try:
        if verbose:
            click.echo(f"Assembling {input_file} (default CPU {config.cpu})...")

        asm.assemble_file(input_file)

        asm.write_rom(output_file)
        if verbose:
            click.echo(f"Wrote {len(asm.get_code())} bytes to {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if split:
            for path in asm.split(split):
                if verbose:
                    click.echo(f"Wrote {path}")

        if roms is not None:
            mode = ValidationMode(check or ValidationMode.LINES.value)
            mismatches = asm.validate(roms, mode)
            if mismatches:
                for message in mismatches:
                    click.echo(message, err=True)
                click.echo(f"Validation failed against {roms}", err=True)
                sys.exit(ExitCode.BUILD_ERROR)
            click.echo(f"Validated against {roms} ({mode} comparison)")

        result = asm.get_result()
        warnings = result.diagnostics.warning_count() if result else 0
        if verbose or warnings:
            click.echo(
                f"Assembly complete: {len(asm.get_code())} bytes, "
                f"{len(asm.get_symbols())} symbols, {warnings} warnings"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
