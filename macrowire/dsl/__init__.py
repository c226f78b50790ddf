"""macrowire DSL: lexer, invocation/head parser, and reference resolver.

Usage:
    from macrowire.dsl import Lexer, Parser, resolve_reference

    tokens = Lexer(source).tokenize()
    invocations = Parser(tokens).parse()
"""

from macrowire.dsl.lexer import Lexer, LexerError
from macrowire.dsl.parser import INVOCATION_RULES, HeadParser, InvocationNode, ParseError, Parser
from macrowire.dsl.reference import (
    REFERENCE_SHAPES,
    ReferenceShape,
    parse_reference,
    resolve_reference,
)

__all__ = [
    "INVOCATION_RULES",
    "REFERENCE_SHAPES",
    "HeadParser",
    "InvocationNode",
    "Lexer",
    "LexerError",
    "ParseError",
    "Parser",
    "ReferenceShape",
    "parse_reference",
    "resolve_reference",
]
