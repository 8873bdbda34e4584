"""EnvGuard configuration loading.

Responsibilities:
  * Find the config file, searching from the start directory up to the
    filesystem root (first of CONFIG_FILE_NAMES wins).
  * Fall back to the ``envguard`` key of ``package.json`` in the start dir.
  * Validate against CONFIG_SCHEMA (jsonschema draft-07); a malformed file
    falls back to defaults with a warning.
  * Merge CLI overrides into a new frozen config (the core never mutates it).

Recognised keys:
  ignoreVars       list[str]   names treated like known runtime variables
  exclude          list[str]   extra exclusion patterns (names or globs)
  strict           bool        report allowlisted variables too
  detectFallbacks  bool        grade guarded usages as warnings

Public API:
  load_config(start_dir) -> ConfigLoadResult
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema

from envguard.scanner.files import DEFAULT_EXCLUDE
from envguard.utils.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES: tuple[str, ...] = (
    '.envguardrc.json',
    '.envguardrc',
    'envguard.config.json',
)
PACKAGE_JSON_KEY = 'envguard'

# Unknown keys are allowed; null lists read as empty.
CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "ignoreVars": {"type": ["array", "null"], "items": {"type": "string"}},
        "exclude": {"type": ["array", "null"], "items": {"type": "string"}},
        "strict": {"type": "boolean"},
        "detectFallbacks": {"type": "boolean"},
    },
    "additionalProperties": True,
}


@dataclass(frozen=True)
class EnvGuardConfig:
    ignore_vars: frozenset[str] = frozenset()
    exclude: tuple[str, ...] = ()
    strict: bool = False
    detect_fallbacks: bool = True

    @property
    def scan_exclude(self) -> tuple[str, ...]:
        """Default exclusions followed by the configured ones, de-duplicated."""
        out: list[str] = []
        for p in (*DEFAULT_EXCLUDE, *self.exclude):
            if p not in out:
                out.append(p)
        return tuple(out)

    def with_overrides(
        self,
        *,
        strict: bool | None = None,
        detect_fallbacks: bool | None = None,
        exclude: Iterable[str] = (),
        ignore_vars: Iterable[str] = (),
    ) -> EnvGuardConfig:
        merged_exclude = list(self.exclude)
        for p in exclude:
            if p and p not in merged_exclude:
                merged_exclude.append(p)
        return replace(
            self,
            strict=self.strict if strict is None else strict,
            detect_fallbacks=self.detect_fallbacks if detect_fallbacks is None else detect_fallbacks,
            exclude=tuple(merged_exclude),
            ignore_vars=self.ignore_vars | {v for v in ignore_vars if v},
        )


DEFAULT_CONFIG = EnvGuardConfig()


@dataclass
class ConfigLoadResult:
    config: EnvGuardConfig
    path: Path | None = None
    warnings: list[str] = field(default_factory=list)


def _validate_jsonschema(raw: Any) -> None:
    try:
        jsonschema.validate(instance=raw, schema=CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        where = '/'.join(str(p) for p in e.path) or '<root>'
        raise ConfigError(f'{e.message} (path: {where})') from e


def config_from_mapping(raw: Any) -> EnvGuardConfig:
    _validate_jsonschema(raw)
    return EnvGuardConfig(
        ignore_vars=frozenset(raw.get('ignoreVars') or ()),
        exclude=tuple(raw.get('exclude') or ()),
        strict=raw.get('strict', DEFAULT_CONFIG.strict),
        detect_fallbacks=raw.get('detectFallbacks', DEFAULT_CONFIG.detect_fallbacks),
    )


def find_config_file(start_dir: str | Path) -> Path | None:
    cur = Path(start_dir).resolve()
    for d in (cur, *cur.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = d / name
            if candidate.is_file():
                return candidate
    return None


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f'cannot load {path}: {e}') from e


def load_config(start_dir: str | Path) -> ConfigLoadResult:
    """Never raises for malformed configuration; see module docstring."""
    path = find_config_file(start_dir)
    if path is not None:
        try:
            return ConfigLoadResult(config_from_mapping(_read_json(path)), path)
        except ConfigError as e:
            msg = f'Failed to parse config file {path}: {e}; using defaults'
            logger.warning(msg)
            return ConfigLoadResult(DEFAULT_CONFIG, path, [msg])

    pkg = Path(start_dir) / 'package.json'
    if pkg.is_file():
        try:
            data = _read_json(pkg)
        except ConfigError as e:
            logger.debug('ignoring unreadable package.json: %s', e)
            return ConfigLoadResult(DEFAULT_CONFIG)
        section = data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
        if section is not None:
            try:
                return ConfigLoadResult(config_from_mapping(section), pkg)
            except ConfigError as e:
                msg = f"Invalid '{PACKAGE_JSON_KEY}' section in {pkg}: {e}; using defaults"
                logger.warning(msg)
                return ConfigLoadResult(DEFAULT_CONFIG, pkg, [msg])

    return ConfigLoadResult(DEFAULT_CONFIG)


__all__ = [
    'CONFIG_FILE_NAMES',
    'CONFIG_SCHEMA',
    'EnvGuardConfig',
    'DEFAULT_CONFIG',
    'ConfigLoadResult',
    'config_from_mapping',
    'find_config_file',
    'load_config',
]
