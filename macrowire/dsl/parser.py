"""Hand-written recursive descent parser for macrowire sources.

Two jobs:

* split a registration source into top-level invocations
  (`macros!(...)`, `proc_macro!(...)`, ...), each holding its raw directive
  tokens;
* parse the head of a single directive (`function(name)`,
  `derive(Name, attributes(a, b))`, ...) into a DirectiveHead.

Reference parsing lives in macrowire.dsl.reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from macrowire.core.errors import GrammarError, MissingNameError
from macrowire.core.types import DirectiveHead, MacroKind
from macrowire.dsl.tokens import Token, TokenKind, render_fragment


# Invocation rule name -> macro kinds its directives may use
INVOCATION_RULES: dict[str, frozenset[MacroKind]] = {
    "macros": frozenset(MacroKind),
    "proc_macro": frozenset({MacroKind.FUNCTION}),
    "attr_macro": frozenset({MacroKind.ATTRIBUTE}),
    "derive_macro": frozenset({MacroKind.DERIVE}),
}

DEFAULT_RULE = "macros"

_HEAD_KINDS: dict[TokenKind, MacroKind] = {
    TokenKind.FUNCTION: MacroKind.FUNCTION,
    TokenKind.ATTRIBUTE: MacroKind.ATTRIBUTE,
    TokenKind.DERIVE: MacroKind.DERIVE,
}


class ParseError(GrammarError):
    """Raised when the parser encounters an unexpected token."""

    def __init__(self, message: str, token: Token, fragment: str = "") -> None:
        self.token = token
        super().__init__(message, fragment, token.line, token.column)


@dataclass
class InvocationNode:
    """A top-level invocation and the raw tokens of its directive list."""

    rule: str
    tokens: list[Token] = field(default_factory=list)
    line: int = 0


# ---------------------------------------------------------------------------
# Source parser
# ---------------------------------------------------------------------------


class Parser:
    """Split a macrowire token stream into invocations.

    A source is either a sequence of `rule!( ... );` invocations or a bare
    directive list, which is treated as one `macros!` invocation.

    Usage:
        parser = Parser(tokens)
        invocations = parser.parse()
    """

    def __init__(self, tokens: list[Token], rules: dict[str, frozenset[MacroKind]] | None = None) -> None:
        self._tokens = tokens
        self._rules = INVOCATION_RULES if rules is None else rules
        self._pos = 0

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def parse(self) -> list[InvocationNode]:
        """Parse the full token stream into InvocationNodes."""
        if not self._starts_invocation():
            body = [t for t in self._tokens if t.kind != TokenKind.EOF]
            line = body[0].line if body else 0
            return [InvocationNode(rule=DEFAULT_RULE, tokens=body, line=line)]

        invocations: list[InvocationNode] = []
        while not self._at_end():
            invocations.append(self._parse_invocation())
        return invocations

    # ------------------------------------------------------------------
    # Invocations
    # ------------------------------------------------------------------

    def _starts_invocation(self) -> bool:
        """True when the stream opens with `[path::]name!`."""
        pos = 0
        while True:
            if pos >= len(self._tokens) or not self._tokens[pos].is_name:
                return False
            nxt = self._tokens[pos + 1] if pos + 1 < len(self._tokens) else None
            if nxt is None:
                return False
            if nxt.kind == TokenKind.BANG:
                return True
            if nxt.kind != TokenKind.PATH_SEP:
                return False
            pos += 2

    def _parse_invocation(self) -> InvocationNode:
        start = self._current()
        # Optional crate/module qualification: include_proc_macro::macros!
        rule = self._consume_name("Expected invocation name").value
        while self._check(TokenKind.PATH_SEP):
            self._advance()
            rule = self._consume_name("Expected identifier after '::'").value

        if rule not in self._rules:
            known = ", ".join(f"{name}!" for name in self._rules)
            raise ParseError(f"Unknown invocation '{rule}!' (expected one of {known})", start)

        self._consume(TokenKind.BANG, f"Expected '!' after '{rule}'")
        body = self._parse_group()

        if self._check(TokenKind.SEMICOLON):
            self._advance()

        return InvocationNode(rule=rule, tokens=body, line=start.line)

    def _parse_group(self) -> list[Token]:
        """Consume `( ... )` and return the tokens inside, nesting preserved."""
        opener = self._consume(TokenKind.LPAREN, "Expected '(' to open invocation body")
        body: list[Token] = []
        depth = 1
        while not self._at_end():
            token = self._advance()
            if token.kind == TokenKind.LPAREN:
                depth += 1
            elif token.kind == TokenKind.RPAREN:
                depth -= 1
                if depth == 0:
                    return body
            body.append(token)
        raise ParseError("Unclosed '(' in invocation body", opener)

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            return Token(TokenKind.EOF, "", 0, 0)
        return self._tokens[self._pos]

    def _at_end(self) -> bool:
        return self._current().kind == TokenKind.EOF

    def _check(self, kind: TokenKind) -> bool:
        return self._current().kind == kind

    def _advance(self) -> Token:
        token = self._current()
        if not self._at_end():
            self._pos += 1
        return token

    def _consume(self, kind: TokenKind, message: str) -> Token:
        if self._check(kind):
            return self._advance()
        raise ParseError(
            f"{message} (got {self._current().kind.name}: {self._current().value!r})",
            self._current(),
        )

    def _consume_name(self, message: str) -> Token:
        if self._current().is_name:
            return self._advance()
        raise ParseError(
            f"{message} (got {self._current().kind.name}: {self._current().value!r})",
            self._current(),
        )


# ---------------------------------------------------------------------------
# Directive heads
# ---------------------------------------------------------------------------


class HeadParser:
    """Parse the tokens left of `->` into a DirectiveHead.

    Usage:
        head = HeadParser(head_tokens, fragment).parse()
    """

    def __init__(self, tokens: list[Token], fragment: str = "") -> None:
        self._tokens = [t for t in tokens if t.kind != TokenKind.EOF]
        self._fragment = fragment or render_fragment(self._tokens)
        self._pos = 0

    def parse(self) -> DirectiveHead:
        if not self._tokens:
            raise GrammarError("Missing directive head before '->'", self._fragment)

        keyword = self._advance()
        kind = _HEAD_KINDS.get(keyword.kind)
        if kind is None:
            raise self._error(
                f"Expected 'function', 'attribute' or 'derive', got {keyword.value!r}", keyword
            )

        if kind is MacroKind.DERIVE:
            head = self._parse_derive(keyword)
        else:
            head = DirectiveHead(kind=kind, exposed_name=self._parse_optional_name())

        if self._pos < len(self._tokens):
            raise self._error(
                f"Unexpected {self._tokens[self._pos].value!r} after directive head",
                self._tokens[self._pos],
            )
        return head

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def _parse_optional_name(self) -> str | None:
        """Parse `( name )` after function/attribute, if present."""
        if not self._check(TokenKind.LPAREN):
            return None
        self._advance()
        name = self._consume_name("Expected exposed name")
        if self._check(TokenKind.COMMA):
            comma = self._current()
            if self._peek_kind(1) == TokenKind.ATTRIBUTES:
                raise self._error("Only derive directives may declare helper attributes", comma)
            raise self._error("Expected a single exposed name", comma)
        self._consume(TokenKind.RPAREN, "Expected ')' after exposed name")
        return name.value

    def _parse_derive(self, keyword: Token) -> DirectiveHead:
        missing = MissingNameError(
            "Derive directives must name the derived trait, e.g. `derive(Name)`",
            self._fragment,
            keyword.line,
            keyword.column,
        )
        if not self._check(TokenKind.LPAREN):
            raise missing
        self._advance()
        if self._check(TokenKind.RPAREN) or self._check(TokenKind.ATTRIBUTES):
            raise missing

        name = self._consume_name("Expected derive name")
        helpers: tuple[str, ...] = ()
        if self._check(TokenKind.COMMA):
            self._advance()
            helpers = self._parse_attributes_clause()
        self._consume(TokenKind.RPAREN, "Expected ')' to close derive(...)")
        return DirectiveHead(kind=MacroKind.DERIVE, exposed_name=name.value, helper_attributes=helpers)

    def _parse_attributes_clause(self) -> tuple[str, ...]:
        """Parse `attributes(a, b, ...)`; the list must be non-empty and unique."""
        clause = self._consume(TokenKind.ATTRIBUTES, "Expected 'attributes(...)' after ','")
        self._consume(TokenKind.LPAREN, "Expected '(' after 'attributes'")
        if self._check(TokenKind.RPAREN):
            raise self._error("attributes(...) must list at least one helper attribute", clause)

        names = [self._consume_name("Expected helper attribute name").value]
        while self._check(TokenKind.COMMA):
            self._advance()
            names.append(self._consume_name("Expected helper attribute name").value)
        self._consume(TokenKind.RPAREN, "Expected ')' to close attributes(...)")

        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise self._error(f"Duplicate helper attribute(s): {', '.join(duplicates)}", clause)
        return tuple(names)

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            last = self._tokens[-1]
            return Token(TokenKind.EOF, "", last.line, last.column)
        return self._tokens[self._pos]

    def _peek_kind(self, offset: int) -> TokenKind:
        index = self._pos + offset
        return self._tokens[index].kind if index < len(self._tokens) else TokenKind.EOF

    def _check(self, kind: TokenKind) -> bool:
        return self._current().kind == kind

    def _advance(self) -> Token:
        token = self._current()
        if token.kind != TokenKind.EOF:
            self._pos += 1
        return token

    def _consume(self, kind: TokenKind, message: str) -> Token:
        if self._check(kind):
            return self._advance()
        raise self._error(f"{message} (got {self._current().value!r})", self._current())

    def _consume_name(self, message: str) -> Token:
        if self._current().is_name:
            return self._advance()
        raise self._error(f"{message} (got {self._current().value!r})", self._current())

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(message, token, self._fragment)
