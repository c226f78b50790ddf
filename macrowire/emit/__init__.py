"""Code emission backends.

Usage:
    from macrowire.emit import EmitContext, get_emitter

    emitter = get_emitter("python", context)
    code = emitter.render(invocations)
"""

from macrowire.emit.base import EmitContext, Emitter
from macrowire.emit.python import PythonEmitter
from macrowire.emit.rust import RustEmitter

EMITTERS: dict[str, type[Emitter]] = {
    PythonEmitter.name: PythonEmitter,
    RustEmitter.name: RustEmitter,
}


def get_emitter(backend: str, context: EmitContext) -> Emitter:
    """Instantiate the emitter registered for `backend`."""
    try:
        emitter_cls = EMITTERS[backend]
    except KeyError:
        raise ValueError(f"Unknown backend '{backend}' (expected one of {sorted(EMITTERS)})") from None
    return emitter_cls(context)


__all__ = [
    "EMITTERS",
    "EmitContext",
    "Emitter",
    "PythonEmitter",
    "RustEmitter",
    "get_emitter",
]
