from pathlib import Path
from textwrap import dedent

import pytest

from macrowire.core.config import MacroWireConfig, set_config
from macrowire.runtime import get_registry


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dedent(text).lstrip("\n"), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch):
    """Every test starts with a fresh config and an empty module registry."""
    monkeypatch.delenv("MACROWIRE_PROJECT_ROOT", raising=False)
    monkeypatch.delenv("MACROWIRE_BACKEND", raising=False)
    monkeypatch.delenv("MACROWIRE_ENCODING", raising=False)
    monkeypatch.delenv("CARGO_MANIFEST_DIR", raising=False)
    set_config(None)
    get_registry().clear()
    yield
    set_config(None)
    get_registry().clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project with implementation functions laid out like a macro crate."""
    root = tmp_path / "project"
    src = root / "src"

    write(src / "foo.py", """
        def bar(payload):
            return "baz"


        def baz(payload):
            return "ofo"
    """)
    write(src / "existing_mod.py", """
        def fizzbuzz(payload):
            n = int(str(payload).strip() or 0)
            if n % 15 == 0:
                return "FizzBuzz"
            if n % 3 == 0:
                return "Fizz"
            if n % 5 == 0:
                return "Buzz"
            return str(n)
    """)
    write(src / "attr_impl.py", """
        def gen_doc(attr, item):
            return f"# {attr}\\n{item}"
    """)
    write(src / "derive_multiple_attrs.py", """
        SEEN = []


        def generate_validation(item):
            SEEN.append(item)
            return item
    """)
    write(src / "hello" / "mod.py", """
        def hello(payload):
            return "Hello, " + str(payload).strip('"')
    """)
    write(src / "pkg" / "__init__.py", """
        from . import inner
    """)
    write(src / "pkg" / "inner.py", """
        def shout(payload):
            return str(payload).upper()
    """)
    write(root / "test" / "inner.py", """
        def attr_derive_debug(attr, item):
            return "@debug " + str(item)
    """)
    write(root / "test" / "subdir" / "subdir.py", """
        def generate_display_impl(item):
            return "This is a " + str(item)
    """)
    return root


@pytest.fixture
def config(project: Path) -> MacroWireConfig:
    cfg = MacroWireConfig(project_root=project)
    set_config(cfg)
    return cfg
