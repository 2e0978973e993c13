"""
Mini Language Compiler
======================

This package compiles Mini, a tiny imperative language, to x86-64 NASM
assembly for Linux.

Mini provides:

- Integer literals and variables (untyped 64-bit words)
- Binary operators: + - * / == < >
- `let` bindings, plain re-assignment, blocks
- `if`/`else` and `while`

Pipeline
--------

    Source → Lexer → Parser → AST → Code Generator → Assembly

The generated assembly can be assembled with `nasm -f elf64` and linked
with `ld`; `minicc --build` does both.

Usage
-----
>>> from stackcc.lang import compile_source
>>> asm = compile_source('''
... let i = 0;
... while (i < 10) { i = i + 1; }
... ''')
"""

from stackcc.lang.compiler import Compiler, CompilerResult, compile_source, compile_file
from stackcc.lang.errors import (
    LangError,
    LangSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    LangCodeGenError,
    UndefinedVariableError,
    UnsupportedOperatorError,
)
from stackcc.lang.lexer import Lexer, Token, TokenType, tokenize
from stackcc.lang.parser import Parser, parse, parse_source
from stackcc.lang.codegen import CodeGenerator
from stackcc.lang.ast import (
    ASTNode,
    Expression,
    Statement,
    NumberLiteral,
    Identifier,
    BinaryOp,
    BinaryOperator,
    LetBinding,
    Assignment,
    ExpressionStatement,
    Block,
    IfStatement,
    WhileStatement,
    ASTVisitor,
    ASTPrinter,
)

__all__ = [
    # Main API
    "Compiler",
    "CompilerResult",
    "compile_source",
    "compile_file",
    # Errors
    "LangError",
    "LangSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "LangCodeGenError",
    "UndefinedVariableError",
    "UnsupportedOperatorError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    # Code Generator
    "CodeGenerator",
    # AST Nodes
    "ASTNode",
    "Expression",
    "Statement",
    "NumberLiteral",
    "Identifier",
    "BinaryOp",
    "BinaryOperator",
    "LetBinding",
    "Assignment",
    "ExpressionStatement",
    "Block",
    "IfStatement",
    "WhileStatement",
    "ASTVisitor",
    "ASTPrinter",
]
