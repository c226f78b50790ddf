import json

import pytest
from rich.console import Console

from macrowire import __version__, cli
from macrowire.cli import create_parser, main

from conftest import write


SOURCE = """
macros!(
    function -> foo::bar,
    function(greet) -> "hello/mod.py"::hello,
    attribute(debug) -> @"test/inner.py"::attr_derive_debug,
);
derive_macro!(derive(Validate, attributes(required)) -> use checks::validate);
"""


@pytest.fixture
def source_file(project):
    return write(project / "src" / "lib.macros", SOURCE)


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: macrowire" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit):
        create_parser().parse_args(["--version"])
    assert __version__ in capsys.readouterr().out


def test_compile_to_stdout(source_file, project, capsys):
    assert main(["compile", str(source_file), "--project-root", str(project)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("# Generated by macrowire from lib.macros")
    assert "@__exports__.derive('Validate', attributes=('required',))" in out


def test_compile_rust_to_file(source_file, project, tmp_path, capsys):
    target = tmp_path / "glue.rs"
    code = main(
        ["compile", str(source_file), "-b", "rust", "--project-root", str(project), "-o", str(target)]
    )
    assert code == 0
    assert "#[proc_macro_derive(Validate, attributes(required))]" in target.read_text(encoding="utf-8")
    assert "Compiled 4 macro(s)" in capsys.readouterr().err


def test_check(source_file, project, capsys):
    assert main(["check", str(source_file), "--project-root", str(project)]) == 0
    assert "OK lib.macros: 2 invocation(s), 4 macro(s)" in capsys.readouterr().out


def test_check_reports_errors(project, capsys):
    path = write(project / "src" / "bad.macros", "function -> foo::bar, function -> foo::baz")
    assert main(["check", str(path), "--project-root", str(project)]) == 1
    assert "ModuleCollisionError" in capsys.readouterr().err


def test_missing_source(tmp_path, capsys):
    assert main(["check", str(tmp_path / "absent.macros")]) == 1
    assert "Source file not found" in capsys.readouterr().err


def test_inspect_json(source_file, capsys):
    assert main(["inspect", str(source_file), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    names = [b["exposed_name"] for inv in data["invocations"] for b in inv["bindings"]]
    assert names == ["bar", "greet", "debug", "Validate"]


def test_inspect_table(source_file, capsys, monkeypatch):
    monkeypatch.setattr(cli, "console", Console(width=200))
    assert main(["inspect", str(source_file)]) == 0
    out = capsys.readouterr().out
    assert "Bindings in lib.macros" in out
    assert "Validate" in out


def test_include(capsys):
    assert main(["include", "tests/hello", "--backend", "rust"]) == 0
    assert "pub mod hello {" in capsys.readouterr().out


def test_include_rejects_bare_literal(capsys):
    assert main(["include", '"tests/hello"']) == 1
    assert "GrammarError" in capsys.readouterr().err


def test_unreadable_source_is_reported(project, capsys):
    assert main(["check", str(project / "src"), "--project-root", str(project)]) == 1
    assert "IsADirectoryError" in capsys.readouterr().err


def test_undecodable_source_is_reported(project, capsys):
    path = project / "src" / "bad.macros"
    path.write_bytes(b"function -> \xff\xfe")
    assert main(["check", str(path), "--project-root", str(project)]) == 1
    assert "UnicodeDecodeError" in capsys.readouterr().err


def test_inspect_uses_configured_encoding(project, capsys, monkeypatch):
    monkeypatch.setenv("MACROWIRE_ENCODING", "latin-1")
    path = project / "src" / "lib.macros"
    path.write_bytes('function(greet) -> "caf\xe9/mod.py"::hello'.encode("latin-1"))

    assert main(["inspect", str(path), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["invocations"][0]["bindings"][0]["reference"]["literal_path"] == "caf\xe9/mod.py"


def test_compile_output_uses_configured_encoding(project, tmp_path, monkeypatch):
    monkeypatch.setenv("MACROWIRE_ENCODING", "latin-1")
    path = project / "src" / "caf\xe9.macros"
    path.write_bytes(b"function -> foo::bar")
    target = tmp_path / "glue.py"

    assert main(["compile", str(path), "--project-root", str(project), "-o", str(target)]) == 0
    assert target.read_bytes().startswith(b"# Generated by macrowire from caf\xe9.macros.")
