import re

import pytest

from macrowire.core.errors import GrammarError
from macrowire.core.types import Anchor, DeclarationMode, Reference
from macrowire.dsl.lexer import Lexer
from macrowire.dsl.reference import REFERENCE_SHAPES, match_shape, parse_reference


def shape_of(text: str) -> str:
    tokens = Lexer(text).tokenize()[:-1]
    found = match_shape(tokens)
    assert found is not None
    return found[0].name


def test_shape_precedence_order():
    assert [shape.name for shape in REFERENCE_SHAPES] == [
        "use_path",
        "use_leaf",
        "mod_path",
        "root_file",
        "local_file",
        "implicit_path",
        "bare_leaf",
    ]


@pytest.mark.parametrize(
    "text, shape",
    [
        ("use foo::bar", "use_path"),
        ("use fizzbuzz", "use_leaf"),
        ("mod attr_impl::gen_doc", "mod_path"),
        ('@"test/inner.py"::handler', "root_file"),
        ('"hello/mod.py"::hello', "local_file"),
        ("foo::bar", "implicit_path"),
        ("fizzbuzz", "bare_leaf"),
    ],
)
def test_each_form_selects_its_shape(text, shape):
    assert shape_of(text) == shape


def test_use_path_is_already_declared():
    ref = parse_reference("use foo::baz")
    assert ref == Reference(
        leaf_symbol="baz",
        path_segments=("foo",),
        declaration_mode=DeclarationMode.ALREADY_DECLARED,
    )


def test_mod_path_declares_here():
    ref = parse_reference("mod outer::inner::func")
    assert ref.path_segments == ("outer", "inner")
    assert ref.leaf_symbol == "func"
    assert ref.declaration_mode is DeclarationMode.DECLARE_HERE
    assert ref.anchor is Anchor.IN_SCOPE


def test_implicit_path_defaults_to_implicit_declare():
    ref = parse_reference("foo::bar")
    assert ref.declaration_mode is DeclarationMode.IMPLICIT_DECLARE
    assert ref.root_module == "foo"


def test_bare_leaf_and_use_leaf_resolve_alike():
    assert parse_reference("fizzbuzz") == parse_reference("use fizzbuzz")
    ref = parse_reference("fizzbuzz")
    assert ref.path_segments == ()
    assert ref.declaration_mode is DeclarationMode.ALREADY_DECLARED


def test_project_root_anchor():
    ref = parse_reference('@"test/subdir/subdir.py"::generate_display_impl')
    assert ref.anchor is Anchor.PROJECT_ROOT_RELATIVE
    assert ref.literal_path == "test/subdir/subdir.py"
    assert ref.path_segments == ()
    assert ref.leaf_symbol == "generate_display_impl"


def test_current_file_anchor():
    ref = parse_reference('"hello/mod.py"::hello')
    assert ref.anchor is Anchor.CURRENT_FILE_RELATIVE
    assert ref.literal_path == "hello/mod.py"
    assert ref.path_segments == ()


def test_head_keywords_can_name_modules_and_functions():
    ref = parse_reference("function::derive")
    assert ref.path_segments == ("function",)
    assert ref.leaf_symbol == "derive"


def test_resolution_is_idempotent():
    first = parse_reference('mod a::b::c')
    second = parse_reference('mod a::b::c')
    assert first == second
    assert hash(first) == hash(second)


@pytest.mark.parametrize(
    "text, message",
    [
        ("mod leaf", "`mod` needs a module path"),
        ("use", "must be followed by a path"),
        ('"only/a/path.py"', "File references must look like"),
        ('@foo::bar', "Unrecognized reference shape"),
        ("foo::", "Unrecognized reference shape"),
        ("::foo", "Unrecognized reference shape"),
        ("use use::x", "Unrecognized reference shape"),
        ('""::x', "must not be empty"),
        ('@"/etc/x.py"::f', "must be relative"),
        ('"/abs.py"::f', "must be relative"),
        ('"C:/src/x.py"::f', "must be relative"),
    ],
)
def test_malformed_references(text, message):
    with pytest.raises(GrammarError, match=re.escape(message)) as excinfo:
        parse_reference(text)
    assert excinfo.value.fragment


def test_missing_reference():
    with pytest.raises(GrammarError, match="Missing reference"):
        parse_reference("")
