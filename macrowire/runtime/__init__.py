"""macrowire runtime: what generated Python glue imports and runs against.

Usage:
    from macrowire.runtime import compile_and_load

    table = compile_and_load('function(fizz) -> use fizzbuzz', scope={"fizzbuzz": fizzbuzz})
    table.fizz("15")
"""

from macrowire.runtime.exports import EntryPoint, ExportTable
from macrowire.runtime.loader import compile_and_load, load_table
from macrowire.runtime.modules import (
    ModuleRegistry,
    declare_module,
    get_registry,
    include_file,
    include_source,
)

__all__ = [
    "EntryPoint",
    "ExportTable",
    "ModuleRegistry",
    "compile_and_load",
    "declare_module",
    "get_registry",
    "include_file",
    "include_source",
    "load_table",
]
