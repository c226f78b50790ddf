"""Export table for generated Python glue.

Generated modules create one ExportTable named `__exports__` and register each
entry point through its decorators. The table is the exported namespace: it
maps exposed names to EntryPoint objects that forward their payloads to the
implementation callables unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from macrowire.core.errors import NameCollisionError
from macrowire.core.types import MacroKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryPoint:
    """An exported macro entry point."""

    name: str
    kind: MacroKind
    func: Callable[..., Any]
    helper_attributes: tuple[str, ...] = ()

    def __call__(self, *payloads: Any) -> Any:
        if len(payloads) != self.kind.arity:
            raise TypeError(
                f"{self.kind.value} macro '{self.name}' takes {self.kind.arity} "
                f"payload(s), got {len(payloads)}"
            )
        return self.func(*payloads)

    def recognizes(self, attribute: str) -> bool:
        """Whether `attribute` is a helper annotation this derive tolerates."""
        return attribute in self.helper_attributes


class ExportTable:
    """Registry of entry points exported by one generated module.

    Usage:
        __exports__ = ExportTable()

        @__exports__.function("greet")
        def __entry_greet(*__payloads):
            return hello.hello(*__payloads)

        __exports__["greet"]("World")
    """

    def __init__(self) -> None:
        self._entries: dict[str, EntryPoint] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        kind: MacroKind,
        name: str,
        func: Callable[..., Any],
        helper_attributes: tuple[str, ...] = (),
    ) -> EntryPoint:
        if name in self._entries:
            raise NameCollisionError(name)
        entry = EntryPoint(name=name, kind=kind, func=func, helper_attributes=tuple(helper_attributes))
        self._entries[name] = entry
        logger.debug("Registered %s macro '%s'", kind.value, name)
        return entry

    def function(self, name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        return self._decorator(MacroKind.FUNCTION, name)

    def attribute(self, name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        return self._decorator(MacroKind.ATTRIBUTE, name)

    def derive(
        self, name: str, attributes: tuple[str, ...] = ()
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        return self._decorator(MacroKind.DERIVE, name, attributes)

    def _decorator(
        self, kind: MacroKind, name: str, attributes: tuple[str, ...] = ()
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def wrap(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(kind, name, func, attributes)
            return func

        return wrap

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def invoke(self, name: str, *payloads: Any) -> Any:
        """Call the entry point exported as `name`."""
        return self[name](*payloads)

    def names(self) -> list[str]:
        return list(self._entries)

    def of_kind(self, kind: MacroKind) -> list[EntryPoint]:
        return [e for e in self._entries.values() if e.kind is kind]

    def recognized_attributes(self) -> set[str]:
        """All helper annotations declared by derive entries."""
        return {a for e in self._entries.values() for a in e.helper_attributes}

    def __getitem__(self, name: str) -> EntryPoint:
        return self._entries[name]

    def __getattr__(self, name: str) -> EntryPoint:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._entries[name]
        except KeyError:
            raise AttributeError(f"No macro exported as '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[EntryPoint]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ExportTable({', '.join(self._entries)})"
