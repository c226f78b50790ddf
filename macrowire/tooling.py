"""Debug-only file inclusion for editor tooling.

Splices implementation files into the module tree when debug assertions are
on, so editors and analyzers see them as ordinary modules. Entries:

    sample                  -> module `sample`, file `sample.<ext>`
    tests/hello             -> module `hello`, file `tests/hello.<ext>`
    a/b/c                   -> module `c`, file `a/b/c.<ext>`
    my_module = "tests/x"   -> module `my_module`, file `tests/x.<ext>`

Paths are relative to the project root. Sources may wrap the list in
`include_proc_macro!(...)` or its alias `named!(...)`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from macrowire.core.config import MacroWireConfig, get_config
from macrowire.core.errors import GrammarError, ModuleCollisionError
from macrowire.dsl.lexer import Lexer
from macrowire.dsl.parser import Parser
from macrowire.dsl.tokens import Token, TokenKind, render_fragment

logger = logging.getLogger(__name__)

INCLUDE_RULES = {"include_proc_macro": frozenset(), "named": frozenset()}

_LITERAL_ONLY = (
    "A bare path literal is not accepted: either name the module explicitly "
    '(module_name = "dir/path") or write the path without quotes (dir/path)'
)


@dataclass(frozen=True)
class IncludeEntry:
    """One file to splice into the module tree."""

    module: str
    path: str


def parse_includes(source: str) -> list[IncludeEntry]:
    """Parse an include list, optionally wrapped in `include_proc_macro!(...)`."""
    entries: list[IncludeEntry] = []
    seen: set[str] = set()

    for node in Parser(Lexer(source).tokenize(), rules=INCLUDE_RULES).parse():
        for unit in _split(node.tokens):
            entry = _parse_entry(unit)
            if entry.module in seen:
                raise ModuleCollisionError(entry.module, render_fragment(unit), unit[0].line)
            seen.add(entry.module)
            entries.append(entry)

    return entries


def render_includes(
    entries: list[IncludeEntry],
    backend: str | None = None,
    config: MacroWireConfig | None = None,
) -> str:
    """Render include glue for the given backend."""
    config = config or get_config()
    backend = backend or config.backend
    if backend not in config.include_extensions:
        raise ValueError(f"Unknown backend '{backend}'")
    extension = config.include_extensions[backend]

    if backend == "rust":
        blocks = [_render_rust(entry, extension) for entry in entries]
    else:
        root = Path(config.project_root).resolve()
        blocks = ["import macrowire.runtime as __macrowire__"]
        blocks += [_render_python(entry, root, extension) for entry in entries]

    logger.info("Rendered %d include(s) for %s", len(entries), backend)
    return "\n\n".join(blocks) + "\n"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _split(tokens: list[Token]) -> list[list[Token]]:
    units: list[list[Token]] = []
    current: list[Token] = []
    for token in tokens:
        if token.kind == TokenKind.EOF:
            break
        if token.kind == TokenKind.COMMA:
            if not current:
                raise GrammarError("Empty include entry", line=token.line, column=token.column)
            units.append(current)
            current = []
        else:
            current.append(token)
    if current:
        units.append(current)
    return units


def _parse_entry(unit: list[Token]) -> IncludeEntry:
    fragment = render_fragment(unit)
    first = unit[0]

    if first.kind == TokenKind.STRING:
        raise GrammarError(_LITERAL_ONLY, fragment, first.line, first.column)

    if len(unit) == 3 and first.is_name and unit[1].kind == TokenKind.EQUALS:
        if unit[2].kind != TokenKind.STRING or not unit[2].value:
            raise GrammarError("Expected a path literal after '='", fragment, first.line)
        return IncludeEntry(module=first.value, path=unit[2].value.strip("/"))

    names: list[str] = []
    for index, token in enumerate(unit):
        if index % 2 == 0 and token.is_name:
            names.append(token.value)
        elif index % 2 == 1 and token.kind == TokenKind.SLASH:
            continue
        else:
            raise GrammarError(
                "Expected `module`, `dir/module` or `name = \"path\"`", fragment, token.line, token.column
            )
    if len(unit) % 2 == 0:
        raise GrammarError("Include path must end with a module name", fragment, first.line)
    return IncludeEntry(module=names[-1], path="/".join(names))


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _render_rust(entry: IncludeEntry, extension: str) -> str:
    return "\n".join(
        [
            "#[cfg(debug_assertions)]",
            f"pub mod {entry.module} {{",
            f'    include!(concat!(env!("CARGO_MANIFEST_DIR"), "/", "{entry.path}", "{extension}"));',
            "}",
        ]
    )


def _render_python(entry: IncludeEntry, root: Path, extension: str) -> str:
    target = (root / f"{entry.path}{extension}").as_posix()
    return "\n".join(
        [
            "if __debug__:",
            f"    {entry.module} = __macrowire__.include_file({entry.module!r}, {target!r})",
        ]
    )
