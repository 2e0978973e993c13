"""
stackcc - Stack-Machine Compiler for the Mini Language
======================================================

This package compiles Mini, a minimal imperative language, into x86-64
NASM assembly that evaluates every expression on an explicit stack.

Main Components
---------------
- **lang**: the compiler proper
    Lexer, recursive descent parser, AST and code generator

- **toolchain**: external build driver
    Runs nasm and ld on generated assembly

- **cli**: command-line tools
    `minicc` compiles (and optionally builds) a source file

Quick Start
-----------
Compile a program to assembly text:
    >>> from stackcc import compile_source
    >>> asm = compile_source("let x = 6 * 7;")

Or use the command-line tool:
    $ minicc prog.mini -o prog.asm
    $ minicc --build prog.mini
"""

__version__ = "1.0.0"

from stackcc.errors import StackCCError, SourceLocation, SourceEncodingError, ToolchainError
from stackcc.lang import (
    Compiler,
    CompilerResult,
    compile_source,
    compile_file,
    LangError,
    LangSyntaxError,
    UndefinedVariableError,
    UnsupportedOperatorError,
)

__all__ = [
    "__version__",
    "StackCCError",
    "SourceLocation",
    "ToolchainError",
    "SourceEncodingError",
    "Compiler",
    "CompilerResult",
    "compile_source",
    "compile_file",
    "LangError",
    "LangSyntaxError",
    "UndefinedVariableError",
    "UnsupportedOperatorError",
]
