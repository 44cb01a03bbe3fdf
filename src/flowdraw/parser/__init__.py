# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and parser for diagram-definition text."""

from flowdraw.parser.lexer import LexerError, Token, TokenType, tokenize
from flowdraw.parser.parser import ParseError, parse, parse_source

__all__ = [
    "tokenize",
    "Token",
    "TokenType",
    "LexerError",
    "parse",
    "parse_source",
    "ParseError",
]
