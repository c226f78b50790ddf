"""Load generated Python glue and hand back its export table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from macrowire.compiler.compiler import MacroWireCompiler
from macrowire.core.config import MacroWireConfig
from macrowire.runtime.exports import ExportTable

logger = logging.getLogger(__name__)


def load_table(
    source: str,
    scope: Mapping[str, Any] | None = None,
    filename: str = "<macrowire>",
    module_name: str = "macrowire_generated",
) -> ExportTable:
    """Execute generated Python source and return its `__exports__` table.

    Args:
        source: Code produced by the python backend.
        scope: Names already reachable in the generated scope, e.g. the
            implementation functions referenced with `use leaf` or a bare leaf.
        filename: Name used in tracebacks.
        module_name: `__name__` given to the generated namespace.
    """
    namespace: dict[str, Any] = dict(scope or {})
    namespace["__name__"] = module_name
    namespace["__file__"] = filename
    exec(compile(source, filename, "exec"), namespace)

    table = namespace.get("__exports__")
    if not isinstance(table, ExportTable):
        raise ValueError(f"{filename} does not define an __exports__ table")
    logger.debug("Loaded %d macro(s) from %s", len(table), filename)
    return table


def compile_and_load(
    source: str,
    scope: Mapping[str, Any] | None = None,
    current_file: str | Path | None = None,
    project_root: str | Path | None = None,
    config: MacroWireConfig | None = None,
) -> ExportTable:
    """Compile a registration source with the python backend and load it."""
    compiler = MacroWireCompiler(config=config, project_root=project_root, backend="python")
    result = compiler.compile_source(source, current_file=current_file)
    return load_table(result.code, scope, filename=f"<macrowire:{result.source_name}>")
