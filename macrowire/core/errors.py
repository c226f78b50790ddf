"""Error taxonomy for macrowire.

Every failure raised while reading, compiling, or emitting a directive list
derives from MacroWireError and carries the raw fragment that caused it, so
the CLI can point at the exact directive.
"""

from __future__ import annotations


class MacroWireError(Exception):
    """Base class for all directive compilation failures."""

    def __init__(self, message: str, fragment: str = "", line: int = 0, column: int = 0) -> None:
        self.message = message
        self.fragment = fragment
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.line:
            text = f"L{self.line}:{self.column}: {text}"
        if self.fragment:
            text = f"{text} (in `{self.fragment}`)"
        return text


class GrammarError(MacroWireError):
    """Directive text matches no known shape, or a clause is malformed."""


class MissingNameError(MacroWireError):
    """A derive directive did not supply its exposed name."""


class NameCollisionError(MacroWireError):
    """Two directives in one invocation expose the same name."""

    def __init__(self, name: str, fragment: str = "", line: int = 0, column: int = 0) -> None:
        self.name = name
        super().__init__(f"Exposed name '{name}' is already registered", fragment, line, column)


class ModuleCollisionError(MacroWireError):
    """Two directives in one invocation declare the same module."""

    def __init__(self, module: str, fragment: str = "", line: int = 0, column: int = 0) -> None:
        self.module = module
        super().__init__(
            f"Module '{module}' is already declared in this invocation; "
            f"reference it with `use {module}::...` instead",
            fragment,
            line,
            column,
        )


class UnresolvedPathError(MacroWireError):
    """A file-backed reference points at a file that does not exist."""

    def __init__(self, path: str, anchor: str, fragment: str = "") -> None:
        self.path = path
        self.anchor = anchor
        super().__init__(f"Cannot locate '{path}' ({anchor})", fragment)
