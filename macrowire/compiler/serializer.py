"""JSON manifests for compiled registration sources.

A manifest records the resolved bindings of each invocation, without the
generated code, so `macrowire inspect --json` output can be diffed or fed
back into tooling. Manifests carry a `manifest_version`; readers refuse
manifests written by a newer layout.
"""

from __future__ import annotations

import json

from macrowire.core.types import CompilationResult

MANIFEST_VERSION = 1


def serialize_to_json(result: CompilationResult, indent: int = 2) -> str:
    return json.dumps({"manifest_version": MANIFEST_VERSION, **result.to_dict()}, indent=indent)


def deserialize_from_json(json_str: str) -> CompilationResult:
    """Rebuild a CompilationResult from a manifest.

    Manifests without a version are read as version 1.

    Raises:
        ValueError: If the manifest was written by a newer macrowire.
    """
    data = json.loads(json_str)
    version = data.pop("manifest_version", 1)
    if version > MANIFEST_VERSION:
        raise ValueError(
            f"Manifest version {version} is newer than supported version {MANIFEST_VERSION}"
        )
    return CompilationResult.from_dict(data)
