"""macrowire compiler: directive lists to entry-point glue.

Usage:
    from macrowire.compiler import MacroWireCompiler
    from macrowire.compiler.serializer import serialize_to_json

    compiler = MacroWireCompiler(project_root=".")
    result = compiler.compile_source(source, current_file="src/lib.macros")
    json_str = serialize_to_json(result)
"""

from macrowire.compiler.compiler import MacroWireCompiler
from macrowire.compiler.directive import DirectiveCompiler, NamespaceLedger
from macrowire.compiler.sequence import SequenceProcessor, take_unit
from macrowire.compiler.serializer import MANIFEST_VERSION, deserialize_from_json, serialize_to_json

__all__ = [
    "MANIFEST_VERSION",
    "DirectiveCompiler",
    "MacroWireCompiler",
    "NamespaceLedger",
    "SequenceProcessor",
    "deserialize_from_json",
    "serialize_to_json",
    "take_unit",
]
