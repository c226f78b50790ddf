"""Python emission backend.

Generates an importable Python module. Entry points are registered in the
module's `__exports__` table under their exposed names; the Python-level
function objects use private `__entry_<name>` names so an exposed name can
never shadow a module or symbol the entry forwards to.

Every name the generated module introduces for itself starts with `__`
(`__macrowire__`, `__exports__`, `__unit_dir__`, `__payloads`, ...), and
references may not use such names, so implementation modules and symbols
never collide with the glue.
"""

from __future__ import annotations

import keyword

from macrowire.core.errors import GrammarError
from macrowire.core.types import BindingDescriptor, Invocation, MacroKind
from macrowire.emit.base import Emitter

RUNTIME_ALIAS = "__macrowire__"
RESERVED_PREFIX = "__"


class PythonEmitter(Emitter):
    """Emit a Python module wiring entry points to implementation callables."""

    name = "python"
    comment_prefix = "#"

    def header(self, invocations: list[Invocation]) -> str:
        unit_dir = self.context.current_dir.as_posix()
        return "\n".join(
            [
                f"# Generated by macrowire from {self.context.source_name}. Do not edit.",
                f"import macrowire.runtime as {RUNTIME_ALIAS}",
                "",
                f"__exports__ = {RUNTIME_ALIAS}.ExportTable()",
                f"__unit_dir__ = {unit_dir!r}",
            ]
        )

    def declare_module(self, module: str) -> str:
        _check_identifier(module, f"module {module}")
        return f"{module} = {RUNTIME_ALIAS}.declare_module({module!r}, __unit_dir__)"

    def file_module(self, module: str, text: str, origin: str) -> str:
        return "\n".join(
            [
                f"{module} = {RUNTIME_ALIAS}.include_source(",
                f"    {module!r},",
                f"    {text!r},",
                f"    origin={origin!r},",
                ")",
            ]
        )

    def entry(self, binding: BindingDescriptor) -> str:
        for segment in binding.call_path:
            _check_identifier(segment, binding.fragment)

        target = ".".join(binding.target_path)
        if binding.kind is MacroKind.DERIVE:
            attrs = tuple(binding.helper_attributes)
            decorator = f"@__exports__.derive({binding.exposed_name!r}, attributes={attrs!r})"
        else:
            decorator = f"@__exports__.{binding.kind.value}({binding.exposed_name!r})"

        # Payload count is enforced by EntryPoint for the binding's kind.
        return "\n".join(
            [
                decorator,
                f"def __entry_{binding.exposed_name}(*__payloads):",
                f"    return {target}(*__payloads)",
            ]
        )

    def footer(self, invocations: list[Invocation]) -> str:
        names = [b.exposed_name for inv in invocations for b in inv.bindings]
        exported = ", ".join(repr(n) for n in names)
        return "\n".join(
            [
                f"__all__ = [{exported}]",
                "",
                "",
                "def __getattr__(name):",
                "    try:",
                "        return __exports__[name]",
                "    except KeyError:",
                "        raise AttributeError(f\"module {__name__!r} has no attribute {name!r}\") from None",
            ]
        )


def _check_identifier(name: str, fragment: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise GrammarError(f"'{name}' is not usable as a Python identifier", fragment)
    if name.startswith(RESERVED_PREFIX):
        raise GrammarError(
            f"'{name}' starts with '{RESERVED_PREFIX}', which is reserved for generated names",
            fragment,
        )
