"""Rust emission backend.

Generates the glue of a proc-macro crate: `mod` declarations, inline private
modules holding included files, and `#[proc_macro]`,
`#[proc_macro_attribute]` and `#[proc_macro_derive]` entry functions that
forward their token streams unchanged.
"""

from __future__ import annotations

from macrowire.core.types import BindingDescriptor, Invocation, MacroKind
from macrowire.emit.base import Emitter

_STREAM = "::proc_macro::TokenStream"


class RustEmitter(Emitter):
    """Emit proc-macro crate glue."""

    name = "rust"
    comment_prefix = "//"

    def header(self, invocations: list[Invocation]) -> str:
        return f"// Generated by macrowire from {self.context.source_name}. Do not edit."

    def declare_module(self, module: str) -> str:
        return f"mod {module};"

    def file_module(self, module: str, text: str, origin: str) -> str:
        body = text if text.endswith("\n") else text + "\n"
        return f"// included from {origin}\n#[allow(dead_code)]\nmod {module} {{\n{body}}}"

    def entry(self, binding: BindingDescriptor) -> str:
        target = "::".join(binding.target_path)

        if binding.kind is MacroKind.FUNCTION:
            attribute = "#[proc_macro]"
            params = f"input: {_STREAM}"
            args = "input"
        elif binding.kind is MacroKind.ATTRIBUTE:
            attribute = "#[proc_macro_attribute]"
            params = f"attr: {_STREAM}, item: {_STREAM}"
            args = "attr, item"
        else:
            helpers = ""
            if binding.helper_attributes:
                helpers = f", attributes({', '.join(binding.helper_attributes)})"
            attribute = f"#[proc_macro_derive({binding.exposed_name}{helpers})]\n#[allow(non_snake_case)]"
            params = f"input: {_STREAM}"
            args = "input"

        return "\n".join(
            [
                attribute,
                f"pub fn {binding.exposed_name}({params}) -> {_STREAM} {{",
                f"    {target}({args})",
                "}",
            ]
        )
