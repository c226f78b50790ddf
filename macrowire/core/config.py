"""Global configuration for macrowire.

Holds the process-wide project root used by `@"..."` references, plus emitter
defaults. Settings can be overridden via environment variables or explicit
configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


BACKENDS = ("python", "rust")


@dataclass
class MacroWireConfig:
    """Top-level configuration for macrowire."""

    # Root for project-root-relative references (`@"path"::leaf`)
    project_root: Path = field(default_factory=Path.cwd)

    # Emission
    backend: str = "python"
    encoding: str = "utf-8"

    # Extension appended by the tooling include helper, per backend
    include_extensions: dict[str, str] = field(
        default_factory=lambda: {"python": ".py", "rust": ".rs"}
    )

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root)
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}' (expected one of {BACKENDS})")

    @classmethod
    def from_env(cls) -> MacroWireConfig:
        """Build config from environment variables, falling back to defaults.

        MACROWIRE_PROJECT_ROOT wins over CARGO_MANIFEST_DIR, which wins over
        the working directory.
        """
        config = cls()

        if val := os.environ.get("MACROWIRE_PROJECT_ROOT"):
            config.project_root = Path(val)
        elif val := os.environ.get("CARGO_MANIFEST_DIR"):
            config.project_root = Path(val)
        if val := os.environ.get("MACROWIRE_BACKEND"):
            if val not in BACKENDS:
                raise ValueError(f"MACROWIRE_BACKEND must be one of {BACKENDS}, got '{val}'")
            config.backend = val
        if val := os.environ.get("MACROWIRE_ENCODING"):
            config.encoding = val

        return config


# Module-level singleton
_config: MacroWireConfig | None = None


def get_config() -> MacroWireConfig:
    """Return the global macrowire config, lazily initialized from env."""
    global _config
    if _config is None:
        _config = MacroWireConfig.from_env()
    return _config


def set_config(config: MacroWireConfig | None) -> None:
    """Override the global config (useful in tests). None resets it."""
    global _config
    _config = config
