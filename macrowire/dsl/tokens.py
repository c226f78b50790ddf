"""Token types for the macrowire directive lexer.

Defines all token kinds and the Token dataclass used by the lexer and parsers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    """All token types recognized by the macrowire lexer."""

    # Literals
    STRING = auto()  # "quoted/path.rs"
    IDENTIFIER = auto()  # unquoted name

    # Head keywords (soft: also valid as path segments)
    FUNCTION = auto()  # function
    ATTRIBUTE = auto()  # attribute
    DERIVE = auto()  # derive
    ATTRIBUTES = auto()  # attributes

    # Reference keywords (reserved)
    USE = auto()  # use
    MOD = auto()  # mod

    # Punctuation
    PATH_SEP = auto()  # ::
    ARROW = auto()  # ->
    AT = auto()  # @
    BANG = auto()  # !
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    COMMA = auto()  # ,
    SEMICOLON = auto()  # ;
    SLASH = auto()  # /
    EQUALS = auto()  # =

    # Special
    EOF = auto()


# Map keyword strings to token kinds
KEYWORDS: dict[str, TokenKind] = {
    "function": TokenKind.FUNCTION,
    "attribute": TokenKind.ATTRIBUTE,
    "derive": TokenKind.DERIVE,
    "attributes": TokenKind.ATTRIBUTES,
    "use": TokenKind.USE,
    "mod": TokenKind.MOD,
}

# Keywords that may still name a module or a function
SOFT_KEYWORDS: frozenset[TokenKind] = frozenset(
    {TokenKind.FUNCTION, TokenKind.ATTRIBUTE, TokenKind.DERIVE, TokenKind.ATTRIBUTES}
)

NAME_KINDS: frozenset[TokenKind] = SOFT_KEYWORDS | {TokenKind.IDENTIFIER}


@dataclass(frozen=True)
class Token:
    """A single token produced by the lexer."""

    kind: TokenKind
    value: str
    line: int
    column: int

    @property
    def is_name(self) -> bool:
        return self.kind in NAME_KINDS

    @property
    def text(self) -> str:
        """Source spelling of the token, used to rebuild directive fragments."""
        if self.kind == TokenKind.STRING:
            escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return self.value

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.value!r}, L{self.line}:{self.column})"


def render_fragment(tokens: list[Token] | tuple[Token, ...]) -> str:
    """Rebuild readable directive text from a token slice."""
    text = ""
    previous: Token | None = None
    for token in tokens:
        if token.kind == TokenKind.EOF:
            break
        if previous is not None and _needs_space(previous, token):
            text += " "
        text += token.text
        previous = token
    return text


_TIGHT_AFTER = {TokenKind.PATH_SEP, TokenKind.AT, TokenKind.LPAREN, TokenKind.SLASH}
_TIGHT_BEFORE = {
    TokenKind.PATH_SEP,
    TokenKind.RPAREN,
    TokenKind.LPAREN,
    TokenKind.COMMA,
    TokenKind.SEMICOLON,
    TokenKind.BANG,
    TokenKind.SLASH,
}


def _needs_space(previous: Token, token: Token) -> bool:
    return previous.kind not in _TIGHT_AFTER and token.kind not in _TIGHT_BEFORE
