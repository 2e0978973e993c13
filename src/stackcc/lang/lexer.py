"""
Mini Lexer (Tokenizer)
======================

This module implements the lexer for the Mini language.
It converts source text into a list of tokens for the parser.

Token Categories
----------------
- Keywords: let, if, else, while, return
- Identifiers: variable names ([A-Za-z_][A-Za-z0-9_]*)
- Numbers: decimal digit runs (kept as text, converted by the parser)
- Operators: + - * / = == < >
- Delimiters: ( ) { } ; ,

Anything else becomes an INVALID token holding the offending character.
The lexer never raises; a bad character only shows up later as a parse
error, since no grammar rule accepts INVALID.

Example Usage
-------------
>>> from stackcc.lang.lexer import Lexer
>>> for token in Lexer("let x = 42;").tokenize():
...     print(token)
Token(LET, 'let', 1:1)
Token(IDENTIFIER, 'x', 1:5)
Token(ASSIGN, '=', 1:7)
Token(NUMBER, '42', 1:9)
Token(SEMICOLON, ';', 1:11)
Token(END_OF_FILE, '', 1:12)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import string

from stackcc.errors import SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds of the Mini language."""

    # === Keywords ===
    LET = auto()            # let
    IF = auto()             # if
    ELSE = auto()           # else
    WHILE = auto()          # while
    RETURN = auto()         # return (reserved, no grammar rule)

    # === Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    MULTIPLY = auto()       # *
    DIVIDE = auto()         # /
    ASSIGN = auto()         # =
    EQUAL = auto()          # ==
    LESS = auto()           # <
    GREATER = auto()        # >

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    SEMICOLON = auto()      # ;
    COMMA = auto()          # ,

    # === Literals ===
    IDENTIFIER = auto()
    NUMBER = auto()

    # === Special ===
    END_OF_FILE = auto()
    INVALID = auto()


KEYWORDS: dict[str, TokenType] = {
    "let": TokenType.LET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "return": TokenType.RETURN,
}

# Characters that map one-to-one to a token kind
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "<": TokenType.LESS,
    ">": TokenType.GREATER,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical element.

    Attributes:
        type: The TokenType classification
        value: The literal source text ('' for END_OF_FILE)
        line: Line of the token's first character (1-indexed)
        column: Column of the token's first character (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Mini source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    WHITESPACE = " \t\n\r\v\f"
    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects in source order, always ending with exactly
            one END_OF_FILE token
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()

        yield self._make_token(TokenType.END_OF_FILE, "", self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or '' past the end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume the current character, updating line/column tracking."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _make_token(self, token_type: TokenType, value: str, line: int, column: int) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            filename=self.filename,
        )

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan one token starting at the current (non-whitespace) character."""
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        self._advance()

        if char == "=":
            if self._peek() == "=":
                self._advance()
                return self._make_token(TokenType.EQUAL, "==", start_line, start_column)
            return self._make_token(TokenType.ASSIGN, "=", start_line, start_column)

        if char in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start_line, start_column)

        return self._make_token(TokenType.INVALID, char, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """Scan a maximal run of decimal digits."""
        start = self._pos
        while not self._at_end() and self._peek() in string.digits:
            self._advance()
        text = self.source[start:self._pos]
        return self._make_token(TokenType.NUMBER, text, start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """Scan an identifier or keyword."""
        start = self._pos
        while not self._at_end() and self._peek() in self.IDENT_CHARS:
            self._advance()
        text = self.source[start:self._pos]
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
        return self._make_token(token_type, text, start_line, start_column)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source text into a list ending with END_OF_FILE."""
    return list(Lexer(source, filename).tokenize())
