"""
External Toolchain Driver
=========================

Turns generated assembly into a Linux executable by running the external
NASM assembler and the GNU linker:

    prog.asm ──nasm -f elf64──▶ prog.o ──ld──▶ prog

This is driver glue only. The compiler never depends on it, and its
output is not part of the compiler's contract.

Usage
-----
>>> from stackcc.toolchain import BuildOptions, build_executable
>>> build_executable(Path("prog.asm"), Path("prog"), BuildOptions())
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from stackcc.errors import ToolchainError

logger = logging.getLogger(__name__)


@dataclass
class BuildOptions:
    """
    Configuration for the assemble/link steps.

    Attributes:
        nasm: Assembler executable (name on PATH or full path)
        ld: Linker executable (name on PATH or full path)
        object_format: NASM output format
        keep_intermediate: Keep the object file after linking
    """
    nasm: str = "nasm"
    ld: str = "ld"
    object_format: str = "elf64"
    keep_intermediate: bool = False


def _run(tool: str, command: list[str]) -> None:
    """Run one toolchain command, raising ToolchainError on failure."""
    if shutil.which(command[0]) is None:
        raise ToolchainError(tool, f"'{command[0]}' not found on PATH")

    logger.info("Running: %s", " ".join(command))
    result = subprocess.run(command, capture_output=True, text=True)

    if result.returncode != 0:
        raise ToolchainError(
            tool,
            f"exited with status {result.returncode}",
            returncode=result.returncode,
            output=result.stderr or result.stdout,
        )


def assemble(asm_path: Path, object_path: Path, options: BuildOptions) -> Path:
    """Assemble a .asm file into an object file."""
    _run("nasm", [options.nasm, "-f", options.object_format, str(asm_path), "-o", str(object_path)])
    return object_path


def link(object_path: Path, executable_path: Path, options: BuildOptions) -> Path:
    """Link an object file into a static executable."""
    _run("ld", [options.ld, str(object_path), "-o", str(executable_path)])
    return executable_path


def build_executable(asm_path: Path, executable_path: Path, options: BuildOptions) -> Path:
    """
    Assemble and link in one step.

    The intermediate object file sits next to the assembly file and is
    removed after a successful link unless keep_intermediate is set.

    Raises:
        ToolchainError: If either tool is missing or fails
    """
    object_path = asm_path.with_suffix(".o")

    assemble(asm_path, object_path, options)
    link(object_path, executable_path, options)

    if not options.keep_intermediate:
        object_path.unlink(missing_ok=True)
        logger.debug("Removed %s", object_path)

    logger.info("Executable created: %s", executable_path)
    return executable_path
