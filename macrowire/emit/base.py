"""Shared emission machinery.

An Emitter turns compiled invocations into generated source text. For each
binding it writes, in order: the module declaration (if needed), the private
file-backed module (for file references), and the exported entry point.
Backends only supply the concrete syntax for those three pieces.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from macrowire.core.errors import UnresolvedPathError
from macrowire.core.types import Anchor, BindingDescriptor, Invocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmitContext:
    """Where file references are resolved from."""

    current_dir: Path
    project_root: Path
    encoding: str = "utf-8"
    source_name: str = "<memory>"

    def resolve_path(self, binding: BindingDescriptor) -> Path:
        """Absolute location of the file a file-backed binding points at."""
        literal = binding.reference.literal_path or ""
        if binding.anchor is Anchor.PROJECT_ROOT_RELATIVE:
            return self.project_root / literal
        return self.current_dir / literal

    def read_included(self, binding: BindingDescriptor) -> str:
        """Read the whole file behind a file-backed binding.

        Raises:
            UnresolvedPathError: If the file cannot be found or read.
        """
        path = self.resolve_path(binding)
        literal = binding.reference.literal_path or ""
        if not path.is_file():
            raise UnresolvedPathError(literal, binding.anchor.value, binding.fragment)
        try:
            text = path.read_text(encoding=self.encoding)
        except OSError as exc:
            raise UnresolvedPathError(literal, binding.anchor.value, binding.fragment) from exc
        logger.debug("Included %s (%d chars) for '%s'", path, len(text), binding.exposed_name)
        return text


class Emitter(ABC):
    """Base class for code emission backends."""

    name: str = ""
    comment_prefix: str = "#"

    def __init__(self, context: EmitContext) -> None:
        self.context = context

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def render(self, invocations: list[Invocation]) -> str:
        """Render every invocation into one source text."""
        parts = [self.header(invocations)]
        for invocation in invocations:
            parts.append(f"{self.comment_prefix} --- {invocation.rule}! (line {invocation.line}) ---")
            for binding in invocation.bindings:
                parts.append(self.emit_binding(binding))
        footer = self.footer(invocations)
        if footer:
            parts.append(footer)
        return "\n\n".join(parts) + "\n"

    def emit_binding(self, binding: BindingDescriptor) -> str:
        """Render one binding: declaration, file module, entry point."""
        pieces: list[str] = []
        if binding.declared_module is not None:
            pieces.append(self.declare_module(binding.declared_module))
        if binding.synthetic_module is not None:
            text = self.context.read_included(binding)
            origin = self._origin(binding)
            pieces.append(self.file_module(binding.synthetic_module, text, origin))
        pieces.append(self.entry(binding))
        return "\n\n".join(pieces)

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def header(self, invocations: list[Invocation]) -> str:
        ...

    @abstractmethod
    def declare_module(self, module: str) -> str:
        ...

    @abstractmethod
    def file_module(self, module: str, text: str, origin: str) -> str:
        ...

    @abstractmethod
    def entry(self, binding: BindingDescriptor) -> str:
        ...

    def footer(self, invocations: list[Invocation]) -> str:
        return ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _origin(binding: BindingDescriptor) -> str:
        literal = binding.reference.literal_path or ""
        return f"@{literal}" if binding.anchor is Anchor.PROJECT_ROOT_RELATIVE else literal
