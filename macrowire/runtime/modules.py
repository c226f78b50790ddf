"""Module declaration and file inclusion for generated Python glue.

`declare_module(name, unit_dir)` is the Python counterpart of `mod name;`: it
makes `unit_dir/name.py` (or the package `unit_dir/name/`) available to the
generated code. Loaded modules live in a process-scoped ModuleRegistry, so a
module is executed once per (unit directory, name) however many generated
modules declare it.

`include_source(name, text, origin)` builds a private module whose body is
the verbatim text of an included file.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

logger = logging.getLogger(__name__)


def _digest(*parts: str) -> str:
    return hashlib.sha1("\0".join(parts).encode("utf-8")).hexdigest()[:10]


class ModuleRegistry:
    """Process-scoped cache of declared modules, keyed by (unit_dir, name)."""

    def __init__(self) -> None:
        self._modules: dict[tuple[str, str], ModuleType] = {}

    def declare(self, name: str, unit_dir: str | Path) -> ModuleType:
        """Load (once) and return module `name` rooted at `unit_dir`.

        Raises:
            ModuleNotFoundError: If neither `name.py` nor `name/__init__.py`
                exists under `unit_dir`.
        """
        root = Path(unit_dir).resolve()
        key = (root.as_posix(), name)
        if key in self._modules:
            return self._modules[key]

        module_file = root / f"{name}.py"
        package_init = root / name / "__init__.py"
        if module_file.is_file():
            spec = importlib.util.spec_from_file_location(self._qualname(key), module_file)
        elif package_init.is_file():
            spec = importlib.util.spec_from_file_location(
                self._qualname(key),
                package_init,
                submodule_search_locations=[str(package_init.parent)],
            )
        else:
            raise ModuleNotFoundError(
                f"Declared module '{name}' not found in {root} "
                f"(looked for {module_file.name} and {name}/__init__.py)",
                name=name,
            )

        if spec is None or spec.loader is None:
            raise ModuleNotFoundError(f"Cannot load declared module '{name}' from {root}", name=name)

        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise

        self._modules[key] = module
        logger.debug("Declared module %s from %s", name, spec.origin)
        return module

    def clear(self) -> None:
        """Forget every declared module (useful in tests)."""
        for module in self._modules.values():
            sys.modules.pop(module.__name__, None)
        self._modules.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    @staticmethod
    def _qualname(key: tuple[str, str]) -> str:
        return f"_macrowire_unit_{_digest(key[0])}_{key[1]}"


_registry = ModuleRegistry()


def get_registry() -> ModuleRegistry:
    """Return the process-wide module registry."""
    return _registry


def declare_module(name: str, unit_dir: str | Path) -> ModuleType:
    """Make module `name` under `unit_dir` reachable from generated code."""
    return _registry.declare(name, unit_dir)


def include_source(name: str, text: str, origin: str = "") -> ModuleType:
    """Execute verbatim file text as the body of a private module."""
    qualname = f"_macrowire_include_{_digest(origin, text)}_{name}"
    module = ModuleType(qualname)
    module.__file__ = origin or None
    sys.modules[qualname] = module
    try:
        exec(compile(text, origin or f"<{name}>", "exec"), module.__dict__)
    except BaseException:
        sys.modules.pop(qualname, None)
        raise
    logger.debug("Included %s as private module %s", origin or "<text>", name)
    return module


def include_file(name: str, path: str | Path, encoding: str = "utf-8") -> ModuleType:
    """Read `path` and include it as private module `name`."""
    path = Path(path)
    return include_source(name, path.read_text(encoding=encoding), origin=path.as_posix())
