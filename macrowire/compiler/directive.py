"""Directive compiler: turns one directive into a BindingDescriptor.

Combines the parsed head (kind, exposed name, helper attributes) with the
resolved Reference, then claims the exposed name and any declared module in
the invocation's NamespaceLedger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from macrowire.core.errors import (
    GrammarError,
    MissingNameError,
    ModuleCollisionError,
    NameCollisionError,
)
from macrowire.core.types import BindingDescriptor, DirectiveHead, MacroKind, Reference
from macrowire.dsl.parser import HeadParser
from macrowire.dsl.reference import resolve_reference
from macrowire.dsl.tokens import Token, TokenKind, render_fragment

logger = logging.getLogger(__name__)


@dataclass
class NamespaceLedger:
    """Names and modules claimed so far in one top-level invocation."""

    exposed_names: dict[str, str] = field(default_factory=dict)
    modules: dict[str, str] = field(default_factory=dict)

    def claim_name(self, name: str, fragment: str = "", line: int = 0) -> None:
        if name in self.exposed_names:
            raise NameCollisionError(name, fragment, line)
        self.exposed_names[name] = fragment

    def claim_module(self, module: str, fragment: str = "", line: int = 0) -> None:
        if module in self.modules:
            raise ModuleCollisionError(module, fragment, line)
        self.modules[module] = fragment


class DirectiveCompiler:
    """Compile single directives against a shared NamespaceLedger.

    Usage:
        compiler = DirectiveCompiler()
        binding = compiler.compile(tokens)
    """

    def __init__(
        self,
        ledger: NamespaceLedger | None = None,
        allowed_kinds: frozenset[MacroKind] | None = None,
        rule: str = "macros",
    ) -> None:
        self.ledger = ledger if ledger is not None else NamespaceLedger()
        self._allowed = allowed_kinds if allowed_kinds is not None else frozenset(MacroKind)
        self._rule = rule

    def compile(self, tokens: list[Token]) -> BindingDescriptor:
        """Compile the tokens of one `head -> reference` directive."""
        tokens = [t for t in tokens if t.kind != TokenKind.EOF]
        fragment = render_fragment(tokens)
        line = tokens[0].line if tokens else 0

        arrow = _find_arrow(tokens)
        if arrow is None:
            raise GrammarError("Expected '->' between directive head and reference", fragment, line)

        head = HeadParser(tokens[:arrow], fragment).parse()
        reference = resolve_reference(tokens[arrow + 1 :], fragment)
        return self.build(head, reference, fragment, line)

    def build(
        self,
        head: DirectiveHead,
        reference: Reference,
        fragment: str = "",
        line: int = 0,
    ) -> BindingDescriptor:
        """Combine an already parsed head and reference into a binding."""
        if head.kind not in self._allowed:
            raise GrammarError(
                f"{self._rule}! does not accept {head.kind.value} directives", fragment, line
            )
        if head.kind is MacroKind.DERIVE and not head.exposed_name:
            raise MissingNameError(
                "Derive directives must name the derived trait, e.g. `derive(Name)`",
                fragment,
                line,
            )
        if head.helper_attributes and head.kind is not MacroKind.DERIVE:
            raise GrammarError("Only derive directives may declare helper attributes", fragment, line)

        binding = BindingDescriptor(
            exposed_name=head.exposed_name or reference.leaf_symbol,
            kind=head.kind,
            reference=reference,
            helper_attributes=head.helper_attributes,
            fragment=fragment,
            line=line,
        )

        self.ledger.claim_name(binding.exposed_name, fragment, line)
        if binding.declared_module is not None:
            self.ledger.claim_module(binding.declared_module, fragment, line)
        if binding.synthetic_module is not None:
            self.ledger.claim_module(binding.synthetic_module, fragment, line)

        logger.debug(
            "Bound %s '%s' -> %s", binding.kind.value, binding.exposed_name, "::".join(binding.call_path)
        )
        return binding


def _find_arrow(tokens: list[Token]) -> int | None:
    """Index of the first `->` outside parentheses."""
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind == TokenKind.LPAREN:
            depth += 1
        elif token.kind == TokenKind.RPAREN:
            depth -= 1
        elif token.kind == TokenKind.ARROW and depth == 0:
            return index
    return None
