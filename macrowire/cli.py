"""macrowire CLI: compile macro registration lists into entry-point glue.

Usage:
    macrowire compile <source> [--backend python|rust] [--project-root <dir>] [--output <path>]
    macrowire check <source> [--project-root <dir>]
    macrowire inspect <source> [--json]
    macrowire include <entries> [--backend python|rust] [--project-root <dir>]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from macrowire import __version__
from macrowire.core.config import BACKENDS, MacroWireConfig, get_config
from macrowire.core.errors import MacroWireError

console = Console()
err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="macrowire",
        description="macrowire: registration compiler for macro entry points",
        epilog="Write `kind -> reference`, get the glue.",
    )
    parser.add_argument("--version", action="version", version=f"macrowire {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- compile ---
    compile_parser = subparsers.add_parser("compile", help="Compile a registration source")
    compile_parser.add_argument("source", type=str, help="Path to registration source")
    compile_parser.add_argument(
        "--backend", "-b", choices=BACKENDS, default=None, help="Emission backend"
    )
    compile_parser.add_argument(
        "--project-root", type=str, default=None, help="Root for @\"...\" references"
    )
    compile_parser.add_argument(
        "--output", "-o", type=str, default=None, help="Output path (default: stdout)"
    )

    # --- check ---
    check_parser = subparsers.add_parser("check", help="Compile without writing output")
    check_parser.add_argument("source", type=str, help="Path to registration source")
    check_parser.add_argument(
        "--project-root", type=str, default=None, help="Root for @\"...\" references"
    )

    # --- inspect ---
    inspect_parser = subparsers.add_parser("inspect", help="Show resolved bindings")
    inspect_parser.add_argument("source", type=str, help="Path to registration source")
    inspect_parser.add_argument("--json", action="store_true", help="Print a JSON manifest")

    # --- include ---
    include_parser = subparsers.add_parser("include", help="Render debug-only include glue")
    include_parser.add_argument("entries", type=str, help="Include list, e.g. 'tests/hello, m = \"x\"'")
    include_parser.add_argument("--backend", "-b", choices=BACKENDS, default=None)
    include_parser.add_argument("--project-root", type=str, default=None)

    return parser


def _config_for(args: argparse.Namespace) -> MacroWireConfig:
    base = get_config()
    root = getattr(args, "project_root", None)
    backend = getattr(args, "backend", None)
    return MacroWireConfig(
        project_root=Path(root) if root else base.project_root,
        backend=backend or base.backend,
        encoding=base.encoding,
        include_extensions=dict(base.include_extensions),
    )


def _source_exists(path: Path) -> bool:
    if not path.exists():
        err_console.print(f"[red]Error:[/red] Source file not found: {path}")
        return False
    return True


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a registration source and write the generated glue."""
    from macrowire.compiler.compiler import MacroWireCompiler

    source_path = Path(args.source)
    if not _source_exists(source_path):
        return 1

    config = _config_for(args)
    result = MacroWireCompiler(config=config).compile_file(source_path)

    if args.output:
        Path(args.output).write_text(result.code, encoding=config.encoding)
        err_console.print(
            f"Compiled {len(result.bindings)} macro(s) from {source_path.name} "
            f"({result.backend}) -> {args.output}"
        )
    else:
        sys.stdout.write(result.code)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Compile a registration source and report, without writing output."""
    from macrowire.compiler.compiler import MacroWireCompiler

    source_path = Path(args.source)
    if not _source_exists(source_path):
        return 1

    result = MacroWireCompiler(config=_config_for(args)).compile_file(source_path)
    console.print(
        f"[green]OK[/green] {source_path.name}: {len(result.invocations)} invocation(s), "
        f"{len(result.bindings)} macro(s)"
    )
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Show how every directive in a source resolved."""
    from macrowire.compiler.compiler import MacroWireCompiler
    from macrowire.compiler.serializer import serialize_to_json
    from macrowire.core.types import CompilationResult

    source_path = Path(args.source)
    if not _source_exists(source_path):
        return 1

    config = _config_for(args)
    source = source_path.read_text(encoding=config.encoding)
    compiler = MacroWireCompiler(config=config)
    result = CompilationResult(
        source_name=source_path.name,
        backend=compiler.backend,
        invocations=compiler.resolve(source),
    )

    if args.json:
        sys.stdout.write(serialize_to_json(result) + "\n")
        return 0

    table = Table(title=f"Bindings in {source_path.name}")
    table.add_column("Invocation")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Target")
    table.add_column("Anchor")
    table.add_column("Declares")
    table.add_column("Helpers")

    for invocation in result.invocations:
        for binding in invocation.bindings:
            target = "::".join(binding.call_path)
            if binding.reference.literal_path:
                target = f'"{binding.reference.literal_path}"::{target}'
            table.add_row(
                f"{invocation.rule}!",
                binding.exposed_name,
                binding.kind.value,
                target,
                binding.anchor.value,
                binding.declared_module or "-",
                ", ".join(binding.helper_attributes) or "-",
            )

    console.print(table)
    return 0


def cmd_include(args: argparse.Namespace) -> int:
    """Render debug-only include glue for tooling."""
    from macrowire.tooling import parse_includes, render_includes

    config = _config_for(args)
    entries = parse_includes(args.entries)
    sys.stdout.write(render_includes(entries, config.backend, config))
    return 0


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    dispatch = {
        "compile": cmd_compile,
        "check": cmd_check,
        "inspect": cmd_inspect,
        "include": cmd_include,
    }

    if args.command not in dispatch:
        parser.print_help()
        return 0

    try:
        return dispatch[args.command](args)
    except (MacroWireError, OSError, UnicodeDecodeError) as exc:
        err_console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}", highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
