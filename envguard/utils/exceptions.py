"""EnvGuard exception hierarchy.

Small tree used to signal recoverable per-file failures inside the scanner and
collectors, plus the few conditions the CLI reports as fatal.
"""
from __future__ import annotations

from pathlib import Path


class EnvGuardError(Exception):
    """Base class for all EnvGuard exceptions."""


class ConfigError(EnvGuardError):
    """Malformed user configuration (bad JSON, wrong value types)."""


class SourceReadError(EnvGuardError):
    """A source, declaration or manifest file could not be read."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"cannot read {self.path}: {reason}")


class ManifestParseError(EnvGuardError):
    """Manifest document is not valid YAML or not a mapping."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"cannot parse {self.path}: {reason}")


class HookError(EnvGuardError):
    """Git hook install/uninstall failure."""


__all__ = [
    "EnvGuardError",
    "ConfigError",
    "SourceReadError",
    "ManifestParseError",
    "HookError",
]
