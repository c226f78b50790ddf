"""Sequence processor: compiles a comma-separated directive list.

Strips one directive unit at a time off the front of the token list (a unit
ends at a top-level comma or at the end of input), compiles it, and carries on
with the remainder. All units of one list share a NamespaceLedger.
"""

from __future__ import annotations

import logging

from macrowire.compiler.directive import DirectiveCompiler, NamespaceLedger
from macrowire.core.errors import GrammarError
from macrowire.core.types import BindingDescriptor, MacroKind
from macrowire.dsl.tokens import Token, TokenKind, render_fragment

logger = logging.getLogger(__name__)


def take_unit(tokens: list[Token]) -> tuple[list[Token], list[Token]]:
    """Split off the leading directive unit.

    Returns (unit, rest). Commas nested in parentheses, such as those of an
    `attributes(a, b)` clause, stay inside the unit. The separating comma is
    dropped from `rest`.
    """
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind == TokenKind.LPAREN:
            depth += 1
        elif token.kind == TokenKind.RPAREN:
            depth -= 1
            if depth < 0:
                raise GrammarError(
                    "Unbalanced ')' in directive",
                    render_fragment(tokens[: index + 1]),
                    token.line,
                    token.column,
                )
        elif token.kind == TokenKind.COMMA and depth == 0:
            return tokens[:index], tokens[index + 1 :]
    if depth > 0:
        raise GrammarError("Unclosed '(' in directive", render_fragment(tokens), tokens[0].line)
    return list(tokens), []


class SequenceProcessor:
    """Compile a whole directive list into ordered BindingDescriptors.

    Usage:
        processor = SequenceProcessor()
        bindings = processor.process(tokens)
    """

    def __init__(self, allowed_kinds: frozenset[MacroKind] | None = None, rule: str = "macros") -> None:
        self._allowed = allowed_kinds
        self._rule = rule

    def process(self, tokens: list[Token]) -> list[BindingDescriptor]:
        """Compile every directive in `tokens`, front to back.

        A fresh NamespaceLedger is used per call, so separate lists never see
        each other's names or modules.
        """
        compiler = DirectiveCompiler(NamespaceLedger(), self._allowed, self._rule)
        remaining = [t for t in tokens if t.kind != TokenKind.EOF]
        bindings: list[BindingDescriptor] = []

        while remaining:
            separator = remaining[0]
            unit, rest = take_unit(remaining)
            if not unit:
                raise GrammarError(
                    "Empty directive between commas",
                    render_fragment(remaining[:2]),
                    separator.line,
                    separator.column,
                )
            bindings.append(compiler.compile(unit))
            remaining = rest

        logger.debug("Compiled %d directive(s) for %s!", len(bindings), self._rule)
        return bindings
