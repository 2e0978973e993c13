"""
stackcc Error Hierarchy
=======================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from StackCCError, allowing callers to catch all
package-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
StackCCError (base)
├── LangError (Mini language front end, see stackcc.lang.errors)
│   ├── LangSyntaxError - lexer/parser errors
│   └── LangCodeGenError - code generation errors
├── ToolchainError - external assembler/linker failures
└── SourceEncodingError - source file is not valid UTF-8

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. This allows for detailed error messages that help users
quickly locate and fix issues in their source code.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class StackCCError(Exception):
    """
    Base exception for all stackcc errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch all compiler-related errors with a single except clause:

        try:
            compile_source("let x = 1;")
        except StackCCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens and AST nodes carry one of these so that errors raised at any
    stage of the pipeline can point back at the source text.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Toolchain Exceptions
# =============================================================================

class ToolchainError(StackCCError):
    """
    Error running the external assembler or linker.

    Raised by the build driver when nasm or ld cannot be found or
    exits with a non-zero status.

    Attributes:
        tool: Name of the tool that failed
        returncode: Process exit status (None if the tool never ran)
        output: Captured stderr/stdout of the failed process
    """

    def __init__(
        self,
        tool: str,
        message: str,
        returncode: Optional[int] = None,
        output: str = "",
    ):
        self.tool = tool
        self.returncode = returncode
        self.output = output
        text = f"{tool}: {message}"
        if output:
            text += f"\n{output.rstrip()}"
        super().__init__(text)


# =============================================================================
# Source File Exceptions
# =============================================================================

class SourceEncodingError(StackCCError):
    """
    Source file is not valid UTF-8.

    Attributes:
        filename: Path of the source file
        offset: Byte offset of the first undecodable byte
    """

    def __init__(self, filename: str, offset: int, reason: str):
        self.filename = filename
        self.offset = offset
        super().__init__(f"{filename}: not valid UTF-8 at byte {offset} ({reason})")
