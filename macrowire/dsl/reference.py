"""Reference resolver for macrowire directives.

Turns the tokens on the right-hand side of `->` into a Reference. The accepted
shapes are tried in the fixed order of REFERENCE_SHAPES, most specific first;
the first shape that matches the whole token slice wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PureWindowsPath
from typing import Callable, Sequence

from macrowire.core.errors import GrammarError
from macrowire.core.types import Anchor, DeclarationMode, Reference
from macrowire.dsl.lexer import Lexer
from macrowire.dsl.tokens import Token, TokenKind, render_fragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceShape:
    """One alternative of the reference grammar."""

    name: str
    pattern: str
    match: Callable[[Sequence[Token]], Reference | None]


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def _split_path(tokens: Sequence[Token]) -> list[str] | None:
    """Match `name (:: name)*` over the whole slice and return the names."""
    if not tokens or len(tokens) % 2 == 0:
        return None
    names: list[str] = []
    for index, token in enumerate(tokens):
        if index % 2 == 0:
            if not token.is_name:
                return None
            names.append(token.value)
        elif token.kind != TokenKind.PATH_SEP:
            return None
    return names


def _qualified(tokens: Sequence[Token]) -> tuple[tuple[str, ...], str] | None:
    """Match a path with at least one module segment before the leaf."""
    names = _split_path(tokens)
    if names is None or len(names) < 2:
        return None
    return tuple(names[:-1]), names[-1]


def _file_leaf(tokens: Sequence[Token]) -> tuple[str, str] | None:
    """Match `"path" :: leaf`."""
    if len(tokens) != 3:
        return None
    literal, sep, leaf = tokens
    if literal.kind != TokenKind.STRING or sep.kind != TokenKind.PATH_SEP or not leaf.is_name:
        return None
    return literal.value, leaf.value


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------


def _match_use_path(tokens: Sequence[Token]) -> Reference | None:
    if not tokens or tokens[0].kind != TokenKind.USE:
        return None
    path = _qualified(tokens[1:])
    if path is None:
        return None
    return Reference(
        leaf_symbol=path[1],
        path_segments=path[0],
        declaration_mode=DeclarationMode.ALREADY_DECLARED,
    )


def _match_use_leaf(tokens: Sequence[Token]) -> Reference | None:
    if len(tokens) != 2 or tokens[0].kind != TokenKind.USE or not tokens[1].is_name:
        return None
    return Reference(leaf_symbol=tokens[1].value)


def _match_mod_path(tokens: Sequence[Token]) -> Reference | None:
    if not tokens or tokens[0].kind != TokenKind.MOD:
        return None
    path = _qualified(tokens[1:])
    if path is None:
        return None
    return Reference(
        leaf_symbol=path[1],
        path_segments=path[0],
        declaration_mode=DeclarationMode.DECLARE_HERE,
    )


def _match_root_file(tokens: Sequence[Token]) -> Reference | None:
    if not tokens or tokens[0].kind != TokenKind.AT:
        return None
    found = _file_leaf(tokens[1:])
    if found is None:
        return None
    return Reference(
        leaf_symbol=found[1],
        anchor=Anchor.PROJECT_ROOT_RELATIVE,
        literal_path=found[0],
    )


def _match_local_file(tokens: Sequence[Token]) -> Reference | None:
    found = _file_leaf(tokens)
    if found is None:
        return None
    return Reference(
        leaf_symbol=found[1],
        anchor=Anchor.CURRENT_FILE_RELATIVE,
        literal_path=found[0],
    )


def _match_implicit_path(tokens: Sequence[Token]) -> Reference | None:
    path = _qualified(tokens)
    if path is None:
        return None
    return Reference(
        leaf_symbol=path[1],
        path_segments=path[0],
        declaration_mode=DeclarationMode.IMPLICIT_DECLARE,
    )


def _match_bare_leaf(tokens: Sequence[Token]) -> Reference | None:
    if len(tokens) != 1 or not tokens[0].is_name:
        return None
    return Reference(leaf_symbol=tokens[0].value)


# Precedence order: first match wins.
REFERENCE_SHAPES: tuple[ReferenceShape, ...] = (
    ReferenceShape("use_path", "use a::b::leaf", _match_use_path),
    ReferenceShape("use_leaf", "use leaf", _match_use_leaf),
    ReferenceShape("mod_path", "mod a::b::leaf", _match_mod_path),
    ReferenceShape("root_file", '@"path"::leaf', _match_root_file),
    ReferenceShape("local_file", '"path"::leaf', _match_local_file),
    ReferenceShape("implicit_path", "a::b::leaf", _match_implicit_path),
    ReferenceShape("bare_leaf", "leaf", _match_bare_leaf),
)


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def match_shape(tokens: Sequence[Token]) -> tuple[ReferenceShape, Reference] | None:
    """Return the first shape matching the token slice, with its Reference."""
    for shape in REFERENCE_SHAPES:
        reference = shape.match(tokens)
        if reference is not None:
            return shape, reference
    return None


def resolve_reference(tokens: Sequence[Token], fragment: str | None = None) -> Reference:
    """Resolve the tokens following `->` into a Reference.

    Args:
        tokens: The reference tokens, without the arrow and without EOF.
        fragment: Directive text for diagnostics; defaults to the rendered tokens.

    Raises:
        GrammarError: If no shape matches, or a file path literal is empty
            or absolute.
    """
    tokens = [t for t in tokens if t.kind != TokenKind.EOF]
    if fragment is None:
        fragment = render_fragment(tokens)
    line = tokens[0].line if tokens else 0
    column = tokens[0].column if tokens else 0

    if not tokens:
        raise GrammarError("Missing reference after '->'", fragment, line, column)

    found = match_shape(tokens)
    if found is None:
        raise GrammarError(_diagnose(tokens), fragment, line, column)

    shape, reference = found
    if reference.anchor.is_file and not reference.literal_path:
        raise GrammarError("File path literal must not be empty", fragment, line, column)
    if reference.anchor.is_file and _is_absolute(reference.literal_path):
        raise GrammarError("File path literal must be relative to its anchor", fragment, line, column)

    logger.debug("Resolved reference %r with shape %s", fragment, shape.name)
    return reference


def parse_reference(text: str) -> Reference:
    """Lex and resolve a reference written as text, e.g. `mod foo::bar`."""
    return resolve_reference(Lexer(text).tokenize())


def _is_absolute(literal: str) -> bool:
    return literal.startswith(("/", "\\")) or PureWindowsPath(literal).is_absolute()


def _diagnose(tokens: Sequence[Token]) -> str:
    first = tokens[0]
    if first.kind == TokenKind.MOD and len(tokens) == 2 and tokens[1].is_name:
        return "`mod` needs a module path before the function, e.g. `mod module::function`"
    if first.kind in (TokenKind.USE, TokenKind.MOD) and len(tokens) == 1:
        return f"`{first.value}` must be followed by a path"
    if any(t.kind == TokenKind.STRING for t in tokens):
        return 'File references must look like `"path"::function` or `@"path"::function`'
    expected = ", ".join(f"`{shape.pattern}`" for shape in REFERENCE_SHAPES)
    return f"Unrecognized reference shape (expected one of {expected})"
