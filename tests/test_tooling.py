import pytest

from macrowire.core.config import MacroWireConfig
from macrowire.core.errors import GrammarError, ModuleCollisionError
from macrowire.runtime import get_registry
from macrowire.tooling import IncludeEntry, parse_includes, render_includes


def test_entry_forms():
    entries = parse_includes('sample, tests/hello, a/b/c, my_module = "tests/x"')
    assert entries == [
        IncludeEntry(module="sample", path="sample"),
        IncludeEntry(module="hello", path="tests/hello"),
        IncludeEntry(module="c", path="a/b/c"),
        IncludeEntry(module="my_module", path="tests/x"),
    ]


@pytest.mark.parametrize("wrapper", ["include_proc_macro", "named"])
def test_wrapped_list(wrapper):
    entries = parse_includes(f"{wrapper}!(tests/hello, sample,);")
    assert [e.module for e in entries] == ["hello", "sample"]


def test_bare_literal_is_rejected():
    with pytest.raises(GrammarError, match="name the module explicitly"):
        parse_includes('"tests/hello"')


def test_duplicate_module():
    with pytest.raises(ModuleCollisionError, match="'hello'"):
        parse_includes("tests/hello, other/hello")


@pytest.mark.parametrize("text", ["a/, b", "tests hello", "m = other", ", a"])
def test_malformed_entries(text):
    with pytest.raises(GrammarError):
        parse_includes(text)


def test_render_rust(tmp_path):
    config = MacroWireConfig(project_root=tmp_path)
    code = render_includes([IncludeEntry("hello", "tests/hello")], backend="rust", config=config)
    assert code == (
        "#[cfg(debug_assertions)]\n"
        "pub mod hello {\n"
        '    include!(concat!(env!("CARGO_MANIFEST_DIR"), "/", "tests/hello", ".rs"));\n'
        "}\n"
    )


def test_render_python_runs(project):
    config = MacroWireConfig(project_root=project)
    entries = parse_includes('inner = "test/inner", test/subdir/subdir')
    code = render_includes(entries, config=config)

    assert code.startswith("import macrowire.runtime as __macrowire__\n")
    assert f"    inner = __macrowire__.include_file('inner', {(project.resolve() / 'test/inner.py').as_posix()!r})" in code

    # Included files are private modules, not declared ones.
    namespace = {}
    exec(code, namespace)
    assert namespace["inner"].attr_derive_debug("", "x") == "@debug x"
    assert len(get_registry()) == 0


def test_render_unknown_backend(tmp_path):
    config = MacroWireConfig(project_root=tmp_path)
    with pytest.raises(ValueError, match="Unknown backend"):
        render_includes([], backend="go", config=config)
