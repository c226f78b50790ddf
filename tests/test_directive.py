import re

import pytest

from macrowire.compiler.directive import DirectiveCompiler
from macrowire.core.errors import GrammarError, MissingNameError
from macrowire.core.types import Anchor, DirectiveHead, MacroKind
from macrowire.dsl.lexer import Lexer
from macrowire.dsl.reference import parse_reference


def compile_one(text: str, compiler: DirectiveCompiler | None = None):
    compiler = compiler or DirectiveCompiler()
    return compiler.compile(Lexer(text).tokenize())


def test_default_name_is_the_leaf_symbol():
    binding = compile_one("function -> foo::bar")
    assert binding.exposed_name == "bar"
    assert binding.kind is MacroKind.FUNCTION
    assert binding.call_path == ("foo", "bar")
    assert binding.module_declaration_needed
    assert binding.declared_module == "foo"


def test_explicit_name_is_used_verbatim():
    binding = compile_one("attribute(generate_documentation) -> mod attr_impl::gen_doc")
    assert binding.exposed_name == "generate_documentation"
    assert binding.kind is MacroKind.ATTRIBUTE
    assert binding.declared_module == "attr_impl"


def test_use_reference_declares_nothing():
    binding = compile_one("function(ofo) -> use foo::baz")
    assert not binding.module_declaration_needed
    assert binding.declared_module is None
    assert binding.call_path == ("foo", "baz")


def test_derive_with_name():
    binding = compile_one("derive(DefaultImpl) -> mod derive_impl::impl_default")
    assert binding.exposed_name == "DefaultImpl"
    assert binding.kind is MacroKind.DERIVE
    assert binding.helper_attributes == ()


@pytest.mark.parametrize(
    "text",
    [
        "derive -> mod derive_impl::impl_default",
        "derive() -> derive_impl::impl_default",
        "derive(attributes(a)) -> derive_impl::impl_default",
    ],
)
def test_derive_requires_a_name(text):
    with pytest.raises(MissingNameError):
        compile_one(text)


def test_derive_helper_attributes_keep_their_order():
    binding = compile_one(
        "derive(Validate, attributes(required, length, range)) -> derive_multiple_attrs::generate_validation"
    )
    assert binding.exposed_name == "Validate"
    assert binding.helper_attributes == ("required", "length", "range")


def test_empty_attributes_clause():
    with pytest.raises(GrammarError, match="at least one helper attribute"):
        compile_one("derive(Validate, attributes()) -> v::gen")


def test_duplicate_helper_attribute():
    with pytest.raises(GrammarError, match="Duplicate helper attribute"):
        compile_one("derive(Validate, attributes(required, required)) -> v::gen")


def test_helper_attributes_only_on_derive():
    with pytest.raises(GrammarError, match="Only derive"):
        compile_one("function(f, attributes(a)) -> v::gen")


@pytest.mark.parametrize(
    "text, message",
    [
        ("function foo::bar", "Expected '->'"),
        ("macro -> foo::bar", "Expected 'function', 'attribute' or 'derive'"),
        ("function(a, b) -> foo::bar", "single exposed name"),
        ("function(a) extra -> foo::bar", "after directive head"),
        ("-> foo::bar", "Missing directive head"),
        ("attribute(x y) -> foo::bar", "Expected ')'"),
    ],
)
def test_malformed_heads(text, message):
    with pytest.raises(GrammarError, match=re.escape(message)):
        compile_one(text)


def test_file_reference_gets_a_private_module():
    binding = compile_one('function(greet) -> "hello/mod.py"::hello')
    assert binding.anchor is Anchor.CURRENT_FILE_RELATIVE
    assert binding.call_path == ("hello",)
    assert binding.synthetic_module == "__include_greet"
    assert binding.target_path == ("__include_greet", "hello")
    assert not binding.module_declaration_needed


def test_restricted_rule_rejects_other_kinds():
    compiler = DirectiveCompiler(allowed_kinds=frozenset({MacroKind.FUNCTION}), rule="proc_macro")
    assert compile_one("function -> f", compiler).exposed_name == "f"
    with pytest.raises(GrammarError, match="proc_macro! does not accept attribute"):
        compile_one("attribute -> g", compiler)


def test_build_from_parts():
    compiler = DirectiveCompiler()
    head = DirectiveHead(kind=MacroKind.FUNCTION, exposed_name="fizz")
    binding = compiler.build(head, parse_reference("fizzbuzz"), "function(fizz) -> fizzbuzz")
    assert binding.exposed_name == "fizz"
    assert binding.fragment == "function(fizz) -> fizzbuzz"
    assert compiler.ledger.exposed_names == {"fizz": "function(fizz) -> fizzbuzz"}


def test_build_rejects_nameless_derive():
    head = DirectiveHead(kind=MacroKind.DERIVE)
    with pytest.raises(MissingNameError):
        DirectiveCompiler().build(head, parse_reference("m::f"))


def test_binding_round_trips_through_dict():
    binding = compile_one("derive(Validate, attributes(required)) -> use checks::validate")
    data = binding.to_dict()
    assert data["call_path"] == ["checks", "validate"]
    assert data["module_declaration_needed"] is False
    assert type(binding).from_dict(data) == binding
