"""
Mini Compiler Main Module
=========================

This module provides the main compiler interface for Mini.
It orchestrates the complete compilation process:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ minicc prog.mini -o prog.asm

Programmatic:
    >>> from stackcc.lang import compile_source
    >>> asm = compile_source('let x = 1;')

Each stage fully materialises its output before the next one starts, and
nothing is shared between compilations. The first error of any stage
aborts the whole compilation; no partial assembly is ever returned.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from stackcc.lang.lexer import Lexer, Token
from stackcc.lang.parser import Parser
from stackcc.lang.codegen import CodeGenerator
from stackcc.lang.ast import Statement
from stackcc.errors import SourceEncodingError

logger = logging.getLogger(__name__)


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source filename
        assembly: Generated assembly text
        tokens: Token list produced by the lexer
        ast: Top-level statements produced by the parser
        variables: Name to slot table built during generation
        label_count: Number of control flow labels emitted
    """
    filename: str = "<input>"
    assembly: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: list[Statement] = field(default_factory=list)
    variables: dict[str, int] = field(default_factory=dict)
    label_count: int = 0

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class Compiler:
    """
    Mini compiler front to back.

    Example:
        compiler = Compiler()
        result = compiler.compile_source("let x = 1;", "prog.mini")
        print(result.assembly)
    """

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile Mini source code to assembly.

        Args:
            source: Mini source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the assembly and intermediate products

        Raises:
            LangError: If any stage fails
        """
        source_lines = source.splitlines()

        tokens = self._lex(source, filename)
        logger.debug("%s: %d tokens", filename, len(tokens))

        ast = self._parse(tokens, filename, source_lines)
        logger.debug("%s: %d top-level statements", filename, len(ast))

        generator = CodeGenerator(source_lines)
        assembly = generator.generate(ast)
        logger.debug(
            "%s: %d variables, %d labels, %d assembly lines",
            filename,
            len(generator.variables),
            generator.label_count,
            assembly.count("\n"),
        )

        return CompilerResult(
            filename=filename,
            assembly=assembly,
            tokens=tokens,
            ast=ast,
            variables=generator.variables,
            label_count=generator.label_count,
        )

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a Mini source file.

        Raises:
            LangError: If compilation fails
            FileNotFoundError: If the source file does not exist
            SourceEncodingError: If the source file is not valid UTF-8
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        try:
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise SourceEncodingError(str(filepath), e.start, e.reason) from e

        return self.compile_source(source, str(filepath))

    def _lex(self, source: str, filename: str) -> list[Token]:
        return list(Lexer(source, filename).tokenize())

    def _parse(self, tokens: list[Token], filename: str, source_lines: list[str]) -> list[Statement]:
        return Parser(tokens, filename, source_lines).parse()


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(source: str, filename: str = "<input>") -> str:
    """
    Compile Mini source code to x86-64 assembly text.

    This is the primary high-level interface; the output depends only on
    the source text.

    Raises:
        LangError: If compilation fails
    """
    return Compiler().compile_source(source, filename).assembly


def compile_file(filepath: str, output_path: Optional[str] = None) -> str:
    """
    Compile a Mini source file to assembly text.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the assembly to

    Raises:
        LangError: If compilation fails
        FileNotFoundError: If the source file does not exist
    """
    result = Compiler().compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.assembly, encoding="utf-8")
        logger.info("Wrote %s", output_path)

    return result.assembly
