"""macrowire: registration compiler for macro entry points.

Reads lists of `kind -> reference` directives and emits the glue that exposes
implementation functions as function-like, attribute-like, or derive-like
macro entry points.

    from macrowire import MacroWireCompiler

    result = MacroWireCompiler(project_root=".").compile_source(
        "function -> foo::bar, derive(Validate, attributes(required)) -> checks::validate"
    )
    print(result.code)
"""

__version__ = "0.1.0"

from macrowire.compiler.compiler import MacroWireCompiler
from macrowire.core.errors import (
    GrammarError,
    MacroWireError,
    MissingNameError,
    ModuleCollisionError,
    NameCollisionError,
    UnresolvedPathError,
)
from macrowire.core.types import Anchor, BindingDescriptor, DeclarationMode, MacroKind, Reference

__all__ = [
    "Anchor",
    "BindingDescriptor",
    "DeclarationMode",
    "GrammarError",
    "MacroKind",
    "MacroWireCompiler",
    "MacroWireError",
    "MissingNameError",
    "ModuleCollisionError",
    "NameCollisionError",
    "Reference",
    "UnresolvedPathError",
    "__version__",
]
