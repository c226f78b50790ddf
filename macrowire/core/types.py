"""Core data types for macrowire.

Shared dataclasses used by the resolver, the directive compiler, the emitters,
and the serializer. Every descriptor type round-trips through its
to_dict/from_dict methods.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class MacroKind(str, Enum):
    """The three kinds of macro entry points a directive can expose."""

    FUNCTION = "function"
    ATTRIBUTE = "attribute"
    DERIVE = "derive"

    @property
    def arity(self) -> int:
        """Number of payloads the entry point receives."""
        return 2 if self is MacroKind.ATTRIBUTE else 1


class Anchor(str, Enum):
    """How the implementation symbol of a reference is located."""

    IN_SCOPE = "in_scope"
    CURRENT_FILE_RELATIVE = "current_file_relative"
    PROJECT_ROOT_RELATIVE = "project_root_relative"

    @property
    def is_file(self) -> bool:
        return self is not Anchor.IN_SCOPE


class DeclarationMode(str, Enum):
    """Whether the first path segment must be declared as a module."""

    ALREADY_DECLARED = "already_declared"
    DECLARE_HERE = "declare_here"
    IMPLICIT_DECLARE = "implicit_declare"

    @property
    def declares_module(self) -> bool:
        return self is not DeclarationMode.ALREADY_DECLARED


# ---------------------------------------------------------------------------
# Resolution types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Reference:
    """Where an implementation symbol lives."""

    leaf_symbol: str
    path_segments: tuple[str, ...] = ()
    anchor: Anchor = Anchor.IN_SCOPE
    declaration_mode: DeclarationMode = DeclarationMode.ALREADY_DECLARED
    literal_path: str | None = None

    @property
    def root_module(self) -> str | None:
        """First path segment, or None for bare and file-backed references."""
        return self.path_segments[0] if self.path_segments else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaf_symbol": self.leaf_symbol,
            "path_segments": list(self.path_segments),
            "anchor": self.anchor.value,
            "declaration_mode": self.declaration_mode.value,
            "literal_path": self.literal_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reference:
        return cls(
            leaf_symbol=data["leaf_symbol"],
            path_segments=tuple(data.get("path_segments", [])),
            anchor=Anchor(data.get("anchor", "in_scope")),
            declaration_mode=DeclarationMode(data.get("declaration_mode", "already_declared")),
            literal_path=data.get("literal_path"),
        )


@dataclass(frozen=True)
class DirectiveHead:
    """The left-hand side of a directive: kind, optional name, helper attributes."""

    kind: MacroKind
    exposed_name: str | None = None
    helper_attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class BindingDescriptor:
    """Emission-ready unit produced by the directive compiler."""

    exposed_name: str
    kind: MacroKind
    reference: Reference
    helper_attributes: tuple[str, ...] = ()
    fragment: str = ""
    line: int = 0

    @property
    def anchor(self) -> Anchor:
        return self.reference.anchor

    @property
    def module_declaration_needed(self) -> bool:
        return (
            self.reference.anchor is Anchor.IN_SCOPE
            and self.reference.declaration_mode.declares_module
            and bool(self.reference.path_segments)
        )

    @property
    def declared_module(self) -> str | None:
        """Module this binding declares, if any."""
        return self.reference.root_module if self.module_declaration_needed else None

    @property
    def call_path(self) -> tuple[str, ...]:
        """Path segments followed by the leaf symbol."""
        return (*self.reference.path_segments, self.reference.leaf_symbol)

    @property
    def synthetic_module(self) -> str | None:
        """Private module scoping a file-backed reference.

        Derived from the exposed name, which is unique per invocation, so two
        file-backed bindings never share a module.
        """
        if not self.reference.anchor.is_file:
            return None
        return f"__include_{self.exposed_name}"

    @property
    def target_path(self) -> tuple[str, ...]:
        """Fully qualified call target as seen from the generated scope."""
        if self.synthetic_module is not None:
            return (self.synthetic_module, *self.call_path)
        return self.call_path

    def to_dict(self) -> dict[str, Any]:
        return {
            "exposed_name": self.exposed_name,
            "kind": self.kind.value,
            "helper_attributes": list(self.helper_attributes),
            "module_declaration_needed": self.module_declaration_needed,
            "call_path": list(self.call_path),
            "anchor": self.anchor.value,
            "reference": self.reference.to_dict(),
            "fragment": self.fragment,
            "line": self.line,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BindingDescriptor:
        return cls(
            exposed_name=data["exposed_name"],
            kind=MacroKind(data["kind"]),
            reference=Reference.from_dict(data["reference"]),
            helper_attributes=tuple(data.get("helper_attributes", [])),
            fragment=data.get("fragment", ""),
            line=data.get("line", 0),
        )


# ---------------------------------------------------------------------------
# Invocation / compilation results
# ---------------------------------------------------------------------------


@dataclass
class Invocation:
    """One top-level directive list (`macros!(...)` and friends)."""

    rule: str
    bindings: list[BindingDescriptor] = field(default_factory=list)
    line: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "line": self.line,
            "bindings": [b.to_dict() for b in self.bindings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Invocation:
        return cls(
            rule=data["rule"],
            line=data.get("line", 0),
            bindings=[BindingDescriptor.from_dict(b) for b in data.get("bindings", [])],
        )


@dataclass
class CompilationResult:
    """Output of compiling one registration source."""

    source_name: str
    backend: str
    invocations: list[Invocation] = field(default_factory=list)
    code: str = ""

    @property
    def bindings(self) -> list[BindingDescriptor]:
        return [b for inv in self.invocations for b in inv.bindings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_name": self.source_name,
            "backend": self.backend,
            "invocations": [inv.to_dict() for inv in self.invocations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompilationResult:
        return cls(
            source_name=data.get("source_name", ""),
            backend=data.get("backend", "python"),
            invocations=[Invocation.from_dict(inv) for inv in data.get("invocations", [])],
        )


# ---------------------------------------------------------------------------
# Protocols (structural typing interfaces)
# ---------------------------------------------------------------------------


class MacroImplementation(Protocol):
    """An implementation function wired up by a directive.

    Takes one opaque payload (two for attribute macros) and returns an opaque
    payload of the same representation. Nothing in macrowire looks inside.
    """

    def __call__(self, *payloads: Any) -> Any:
        ...
