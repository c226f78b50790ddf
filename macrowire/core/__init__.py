"""macrowire core: shared types, errors, and configuration.

Import the most commonly used types from here for convenience:

    from macrowire.core import BindingDescriptor, MacroKind, Reference
"""

from macrowire.core.config import MacroWireConfig, get_config, set_config
from macrowire.core.errors import (
    GrammarError,
    MacroWireError,
    MissingNameError,
    ModuleCollisionError,
    NameCollisionError,
    UnresolvedPathError,
)
from macrowire.core.types import (
    Anchor,
    BindingDescriptor,
    CompilationResult,
    DeclarationMode,
    DirectiveHead,
    Invocation,
    MacroImplementation,
    MacroKind,
    Reference,
)

__all__ = [
    "Anchor",
    "BindingDescriptor",
    "CompilationResult",
    "DeclarationMode",
    "DirectiveHead",
    "GrammarError",
    "Invocation",
    "MacroImplementation",
    "MacroKind",
    "MacroWireConfig",
    "MacroWireError",
    "MissingNameError",
    "ModuleCollisionError",
    "NameCollisionError",
    "Reference",
    "UnresolvedPathError",
    "get_config",
    "set_config",
]
