"""
Mini Language Error Hierarchy
=============================

This module defines the exception hierarchy for the Mini compiler.
All exceptions inherit from LangError, which itself inherits from
the base StackCCError for consistent error handling across the package.

Exception Hierarchy
-------------------
LangError (base for all Mini errors)
├── LangSyntaxError - parser errors
│   ├── UnexpectedTokenError - token does not fit the grammar
│   └── MissingTokenError - required token not present
└── LangCodeGenError - code generation errors
    ├── UndefinedVariableError - reference to an unbound name
    └── UnsupportedOperatorError - operator the generator cannot lower

Malformed characters are not raised by the lexer; they become INVALID
tokens and surface as an UnexpectedTokenError from the parser.

Error Message Format
--------------------
All errors include source location information and follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    prog.mini:2:1: error: expected ';'
        let y = 2;
        ^
    hint: the previous statement is not terminated
"""

from typing import Optional

from stackcc.errors import StackCCError, SourceLocation


# =============================================================================
# Base Mini Exception
# =============================================================================

class LangError(StackCCError):
    """
    Base exception for all Mini compiler errors.

    This class provides common functionality for error messages including
    source location tracking, source line context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Line number of the error, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            prog.mini:1:5: error: undefined variable 'y'
                let y = y + 1;
                        ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Syntax Errors (Parser)
# =============================================================================

class LangSyntaxError(LangError):
    """
    Syntax error in Mini source code.

    Raised when the parser meets a token sequence the grammar does not
    accept. The location is always that of the offending lookahead token.

    Examples:
        - Missing semicolon after a let binding
        - Mismatched parentheses or braces
        - Invalid character in source
        - Integer literal too large for a machine word
    """
    pass


class UnexpectedTokenError(LangSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        message = f"unexpected token '{found}'"
        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(LangSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like ';' or ')') is not found
    where expected.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class LangCodeGenError(LangError):
    """
    Error during code generation.

    Raised when the code generator meets a construct it cannot lower.
    """
    pass


class UndefinedVariableError(LangCodeGenError):
    """
    Reference to a variable that has no binding.

    Raised when an identifier is read or assigned before any `let`
    has introduced it. The check is static: a reference inside a branch
    that never runs still fails compilation.
    """

    def __init__(
        self,
        identifier: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"undefined variable '{identifier}'",
            location=location,
            hint=f"introduce it first with 'let {identifier} = ...;'",
            source_line=source_line,
        )


class UnsupportedOperatorError(LangCodeGenError):
    """
    Binary operator outside the set the generator can lower.

    Unreachable through the grammar; guards against hand-built ASTs.
    """

    def __init__(
        self,
        operator: object,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unsupported binary operator {operator!r}",
            location=location,
        )
