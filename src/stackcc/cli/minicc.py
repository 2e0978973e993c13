"""
minicc - Mini Compiler Command-Line Interface
=============================================

This module implements the command-line interface for the Mini compiler.

Usage Examples
--------------
Basic compilation:
    $ minicc prog.mini

With output file:
    $ minicc prog.mini -o out.asm

Compile, assemble and link:
    $ minicc --build prog.mini && ./prog

Debug dumps:
    $ minicc --tokens prog.mini
    $ minicc --ast prog.mini
"""

import logging
from pathlib import Path
from typing import Optional

import click

from stackcc import __version__
from stackcc.lang import Compiler, ASTPrinter
from stackcc.toolchain import BuildOptions, build_executable
from stackcc.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


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
    help="Output assembly file (default: input.asm)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token list and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-b", "--build",
    is_flag=True,
    help="Assemble with nasm and link with ld after compiling",
)
@click.option(
    "-k", "--keep",
    is_flag=True,
    help="Keep the intermediate object file when building",
)
@click.option(
    "--nasm",
    default="nasm",
    show_default=True,
    help="Assembler executable used by --build",
)
@click.option(
    "--ld",
    default="ld",
    show_default=True,
    help="Linker executable used by --build",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="minicc")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    build: bool,
    keep: bool,
    nasm: str,
    ld: str,
    verbose: bool,
) -> None:
    """
    Compile Mini source code to x86-64 NASM assembly.

    INPUT_FILE is the Mini source file to compile.

    \b
    Examples:
        minicc prog.mini               # Outputs prog.asm
        minicc prog.mini -o out.asm    # Specify output file
        minicc --build prog.mini       # Also produce ./prog
        minicc --ast prog.mini         # Dump the syntax tree

    \b
    Language:
        let x = 1;  x = x + 1;  { ... }
        if (x < 10) ... else ...
        while (x > 0) ...
        operators: + - * / == < >
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".asm")
        if output == input_file:
            output = input_file.with_name(f"{input_file.stem}.out.asm")
    elif output.resolve() == input_file.resolve():
        raise click.BadParameter(
            "output file would overwrite the input file",
            param_hint="'-o' / '--output'",
        )

    try:
        result = Compiler().compile_file(str(input_file))

        if tokens:
            for token in result.tokens:
                click.echo(repr(token))
            return

        if ast:
            click.echo(ASTPrinter().print(result.ast))
            return

        output.write_text(result.assembly, encoding="utf-8")
        logger.info("Wrote %d bytes to %s", len(result.assembly), output)
        click.echo(f"Compiled {input_file} -> {output}")

        if build:
            options = BuildOptions(nasm=nasm, ld=ld, keep_intermediate=keep)
            executable = input_file.with_suffix("")
            if executable == input_file:
                executable = input_file.with_suffix(".out")
            executable = build_executable(output, executable, options)
            click.echo(f"Executable created: {executable}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
