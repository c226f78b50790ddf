import json

import pytest

from macrowire.compiler import MacroWireCompiler
from macrowire.compiler.serializer import MANIFEST_VERSION, deserialize_from_json, serialize_to_json
from macrowire.core.types import Anchor, DeclarationMode


SOURCE = """
macros!(
    function -> foo::bar,
    derive(Validate, attributes(required, length)) -> use checks::validate,
);
attr_macro!(attribute(debug) -> @"test/inner.py"::attr_derive_debug);
"""


def test_manifest_layout(config):
    result = MacroWireCompiler().compile_source(SOURCE, source_name="lib.macros")
    data = json.loads(serialize_to_json(result))

    assert data["manifest_version"] == MANIFEST_VERSION
    assert data["source_name"] == "lib.macros"
    assert data["backend"] == "python"
    assert [inv["rule"] for inv in data["invocations"]] == ["macros", "attr_macro"]

    bar, validate = data["invocations"][0]["bindings"]
    assert bar["exposed_name"] == "bar"
    assert bar["module_declaration_needed"] is True
    assert bar["call_path"] == ["foo", "bar"]
    assert validate["helper_attributes"] == ["required", "length"]
    assert validate["reference"]["declaration_mode"] == "already_declared"

    debug = data["invocations"][1]["bindings"][0]
    assert debug["anchor"] == "project_root_relative"
    assert debug["reference"]["literal_path"] == "test/inner.py"


def test_json_restores_bindings(config):
    result = MacroWireCompiler().compile_source(SOURCE)
    restored = deserialize_from_json(serialize_to_json(result))

    assert restored.bindings == result.bindings
    assert restored.code == ""
    debug = restored.invocations[1].bindings[0]
    assert debug.anchor is Anchor.PROJECT_ROOT_RELATIVE
    assert restored.bindings[0].reference.declaration_mode is DeclarationMode.IMPLICIT_DECLARE


def test_unversioned_manifest_is_accepted(config):
    result = MacroWireCompiler().compile_source("function -> fizzbuzz")
    data = json.loads(serialize_to_json(result))
    del data["manifest_version"]

    restored = deserialize_from_json(json.dumps(data))
    assert restored.bindings[0].call_path == ("fizzbuzz",)


def test_newer_manifest_is_rejected(config):
    result = MacroWireCompiler().compile_source("function -> fizzbuzz")
    data = json.loads(serialize_to_json(result))
    data["manifest_version"] = MANIFEST_VERSION + 1

    with pytest.raises(ValueError, match="newer than supported"):
        deserialize_from_json(json.dumps(data))
