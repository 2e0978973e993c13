"""
Mini Recursive Descent Parser
=============================

This module implements a recursive descent parser for the Mini language.
It takes the token list from the lexer and builds a list of top-level
statements (the AST).

Grammar (EBNF)
--------------
program     ::= statement*
statement   ::= let_stmt | if_stmt | while_stmt | block | expr_stmt
let_stmt    ::= 'let' IDENTIFIER '=' expression ';'
if_stmt     ::= 'if' '(' expression ')' statement ('else' statement)?
while_stmt  ::= 'while' '(' expression ')' statement
block       ::= '{' statement* '}'
expr_stmt   ::= expression ('=' expression ';' | ';'?)

expression  ::= equality
equality    ::= comparison ('==' comparison)*
comparison  ::= term (('<' | '>') term)*
term        ::= factor (('+' | '-') factor)*
factor      ::= primary (('*' | '/') primary)*
primary     ::= NUMBER | IDENTIFIER | '(' expression ')'

Every binary level is left-associative. The grammar is LL(1): one token
of lookahead picks each alternative and the parser never backtracks.
An `else` is consumed by the innermost `if` still being parsed, so a
dangling `else` binds to the nearest unmatched `if`.

The assignment form of expr_stmt is recognised after the fact: the left
side is parsed as an ordinary expression, and if it turns out to be a
bare identifier followed by '=', the statement becomes an Assignment.

Error Handling
--------------
The first mismatch raises a LangSyntaxError located at the offending
lookahead token. There is no recovery and no partial result.

Example Usage
-------------
>>> from stackcc.lang.parser import parse_source
>>> statements = parse_source('let x = 1 + 2 * 3;')
>>> statements[0].value.operator
<BinaryOperator.ADD: '+'>
"""

from typing import Callable, Optional

from stackcc.lang.lexer import Lexer, Token, TokenType
from stackcc.lang.ast import (
    Statement,
    Expression,
    LetBinding,
    Assignment,
    ExpressionStatement,
    Block,
    IfStatement,
    WhileStatement,
    BinaryOp,
    BinaryOperator,
    Identifier,
    NumberLiteral,
)
from stackcc.lang.errors import (
    LangSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
)


# Largest integer literal that fits a signed 64-bit machine word
MAX_LITERAL = 2**63 - 1

# Deepest nesting of blocks, if/while statements and parentheses
MAX_NESTING_DEPTH = 64

# Token kinds that open a nested statement
NESTING_STATEMENTS = (TokenType.IF, TokenType.WHILE, TokenType.LBRACE)


class Parser:
    """
    Recursive descent parser for Mini.

    Attributes:
        tokens: List of tokens to parse (must end with END_OF_FILE)
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        self._pos = 0
        self._depth = 0

    def parse(self) -> list[Statement]:
        """
        Parse the token list into top-level statements.

        Returns:
            One Statement per top-level construct

        Raises:
            LangSyntaxError: On the first syntax error
        """
        statements = []
        while not self._at_end():
            statements.append(self._parse_statement())
        return statements

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.END_OF_FILE

    def _peek(self) -> Token:
        if self._pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        """Consume and return the current token (END_OF_FILE is never consumed)."""
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        """Consume the current token if it is one of the given types."""
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the lookahead is of another type
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        raise MissingTokenError(
            message,
            current.location,
            self._get_source_line(current.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.END_OF_FILE:
            return "end of input"
        return token.value

    def _enter_nesting(self, token: Token, what: str) -> None:
        """
        Open one nesting level at token.

        Raises:
            LangSyntaxError: If the nesting exceeds MAX_NESTING_DEPTH
        """
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise LangSyntaxError(
                f"{what} nested too deeply",
                token.location,
                hint=f"at most {MAX_NESTING_DEPTH} levels of blocks, "
                     f"if/while statements and parentheses are supported",
                source_line=self._get_source_line(token.line),
            )

    def _leave_nesting(self) -> None:
        self._depth -= 1

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse any statement; the lookahead picks the rule."""
        token = self._peek()

        if token.type == TokenType.LET:
            return self._parse_let_statement()
        if token.type not in NESTING_STATEMENTS:
            return self._parse_expression_statement()

        self._enter_nesting(token, "statement")
        if token.type == TokenType.IF:
            stmt = self._parse_if_statement()
        elif token.type == TokenType.WHILE:
            stmt = self._parse_while_statement()
        else:
            stmt = self._parse_block()
        self._leave_nesting()

        return stmt

    def _parse_let_statement(self) -> LetBinding:
        location = self._advance().location
        name = self._expect(TokenType.IDENTIFIER, "identifier after 'let'")
        self._expect(TokenType.ASSIGN, "'=' after identifier")
        value = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "';' after value")
        return LetBinding(location=location, name=name.value, value=value)

    def _parse_if_statement(self) -> IfStatement:
        location = self._advance().location
        self._expect(TokenType.LPAREN, "'(' after 'if'")
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "')' after condition")

        then_branch = self._parse_statement()

        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_statement()

        return IfStatement(
            location=location,
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _parse_while_statement(self) -> WhileStatement:
        location = self._advance().location
        self._expect(TokenType.LPAREN, "'(' after 'while'")
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "')' after condition")

        body = self._parse_statement()

        return WhileStatement(location=location, condition=condition, body=body)

    def _parse_block(self) -> Block:
        location = self._advance().location

        statements = []
        while not self._check(TokenType.RBRACE) and not self._at_end():
            statements.append(self._parse_statement())

        self._expect(TokenType.RBRACE, "'}' after block")

        return Block(location=location, statements=statements)

    def _parse_expression_statement(self) -> Statement:
        expr = self._parse_expression()

        if self._check(TokenType.ASSIGN):
            if not isinstance(expr, Identifier):
                token = self._peek()
                raise LangSyntaxError(
                    "invalid assignment target",
                    token.location,
                    hint="only a variable name can appear left of '='",
                    source_line=self._get_source_line(token.line),
                )
            self._advance()
            value = self._parse_expression()
            self._expect(TokenType.SEMICOLON, "';' after value")
            return Assignment(location=expr.location, name=expr.name, value=value)

        self._match(TokenType.SEMICOLON)
        return ExpressionStatement(location=expr.location, expression=expr)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        return self._parse_equality()

    def _parse_equality(self) -> Expression:
        """Parse equality expression (==)."""
        return self._parse_binary(
            self._parse_comparison,
            {TokenType.EQUAL: BinaryOperator.EQUAL},
        )

    def _parse_comparison(self) -> Expression:
        """Parse relational expression (< >)."""
        return self._parse_binary(
            self._parse_term,
            {
                TokenType.LESS: BinaryOperator.LESS,
                TokenType.GREATER: BinaryOperator.GREATER,
            },
        )

    def _parse_term(self) -> Expression:
        """Parse additive expression (+ -)."""
        return self._parse_binary(
            self._parse_factor,
            {
                TokenType.PLUS: BinaryOperator.ADD,
                TokenType.MINUS: BinaryOperator.SUBTRACT,
            },
        )

    def _parse_factor(self) -> Expression:
        """Parse multiplicative expression (* /)."""
        return self._parse_binary(
            self._parse_primary,
            {
                TokenType.MULTIPLY: BinaryOperator.MULTIPLY,
                TokenType.DIVIDE: BinaryOperator.DIVIDE,
            },
        )

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[TokenType, BinaryOperator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Parser for the next-higher precedence level
            operators: Map of token types to binary operators at this level
        """
        expr = operand_parser()

        while self._peek().type in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = BinaryOp(
                location=expr.location,
                operator=operators[op_token.type],
                left=expr,
                right=right,
            )

        return expr

    def _parse_primary(self) -> Expression:
        """Parse primary expression (number, identifier, parenthesized)."""
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            digits = token.value.lstrip("0") or "0"
            # Length first: int() rejects very long digit strings
            if len(digits) > len(str(MAX_LITERAL)) or int(digits) > MAX_LITERAL:
                shown = token.value if len(token.value) <= 32 else token.value[:29] + "..."
                raise LangSyntaxError(
                    f"integer literal '{shown}' out of range",
                    token.location,
                    hint=f"literals must not exceed {MAX_LITERAL}",
                    source_line=self._get_source_line(token.line),
                )
            return NumberLiteral(location=token.location, value=int(digits))

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(location=token.location, name=token.value)

        if token.type == TokenType.LPAREN:
            self._enter_nesting(token, "expression")
            self._advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "')' after expression")
            self._leave_nesting()
            return expr

        raise UnexpectedTokenError(
            self._describe(token),
            expected="expression",
            location=token.location,
            source_line=self._get_source_line(token.line),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: list[Token]) -> list[Statement]:
    """Parse a token list into top-level statements."""
    filename = tokens[-1].filename if tokens else "<input>"
    return Parser(tokens, filename).parse()


def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """
    Parse Mini source code into top-level statements.

    This is a convenience function that combines lexing and parsing.

    Raises:
        LangSyntaxError: If parsing fails
    """
    tokens = list(Lexer(source, filename).tokenize())
    return Parser(tokens, filename, source.splitlines()).parse()
