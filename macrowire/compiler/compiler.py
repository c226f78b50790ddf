"""macrowire compiler: registration source in, generated glue out.

Lexes and splits a registration source into invocations, runs each through its
own SequenceProcessor, and hands the resulting bindings to an emission
backend.
"""

from __future__ import annotations

import logging
from pathlib import Path

from macrowire.compiler.sequence import SequenceProcessor
from macrowire.core.config import MacroWireConfig, get_config
from macrowire.core.types import CompilationResult, Invocation
from macrowire.dsl.lexer import Lexer
from macrowire.dsl.parser import INVOCATION_RULES, Parser
from macrowire.emit import EmitContext, get_emitter

logger = logging.getLogger(__name__)


class MacroWireCompiler:
    """Compile registration sources into generated entry-point glue.

    Usage:
        compiler = MacroWireCompiler(project_root="path/to/project")
        result = compiler.compile_file("src/registrations.macros")
        print(result.code)
    """

    def __init__(
        self,
        config: MacroWireConfig | None = None,
        project_root: str | Path | None = None,
        backend: str | None = None,
    ) -> None:
        config = config or get_config()
        self._project_root = Path(project_root) if project_root is not None else config.project_root
        self._backend = backend or config.backend
        self._encoding = config.encoding

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def project_root(self) -> Path:
        return self._project_root

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def resolve(self, source: str) -> list[Invocation]:
        """Parse and compile every invocation in `source`, without emitting."""
        tokens = Lexer(source).tokenize()
        invocations: list[Invocation] = []

        for node in Parser(tokens).parse():
            processor = SequenceProcessor(INVOCATION_RULES[node.rule], node.rule)
            bindings = processor.process(node.tokens)
            if not bindings:
                logger.warning("%s! at line %d registers no macros", node.rule, node.line)
            invocations.append(Invocation(rule=node.rule, bindings=bindings, line=node.line))

        return invocations

    def compile_source(
        self,
        source: str,
        current_file: str | Path | None = None,
        source_name: str | None = None,
    ) -> CompilationResult:
        """Compile registration text into generated code.

        Args:
            source: The registration source text.
            current_file: File the directives are written in; `"path"::leaf`
                references resolve against its directory. Defaults to the
                working directory when omitted.
            source_name: Name shown in the generated header.
        """
        if current_file is not None:
            current_dir = Path(current_file).resolve().parent
            name = source_name or Path(current_file).name
        else:
            current_dir = Path.cwd()
            name = source_name or "<memory>"

        invocations = self.resolve(source)
        context = EmitContext(
            current_dir=current_dir,
            project_root=self._project_root.resolve(),
            encoding=self._encoding,
            source_name=name,
        )
        code = get_emitter(self._backend, context).render(invocations)

        result = CompilationResult(
            source_name=name,
            backend=self._backend,
            invocations=invocations,
            code=code,
        )
        logger.info(
            "Compiled %s: %d invocation(s), %d binding(s) [%s]",
            name,
            len(invocations),
            len(result.bindings),
            self._backend,
        )
        return result

    def compile_file(self, path: str | Path) -> CompilationResult:
        """Read and compile a registration file."""
        path = Path(path)
        source = path.read_text(encoding=self._encoding)
        return self.compile_source(source, current_file=path)
