"""Environment flag helpers for EnvGuard's own switches.

Interprets environment variables as boolean flags using the canonical truthy
set {"1","true","yes","on"} (case-insensitive).

Usage:
    from envguard.utils.env_flags import is_truthy_env
    if is_truthy_env('ENVGUARD_VERBOSE_CONSOLE'):
        ...
"""
from __future__ import annotations

import os

TRUTHY_SET: set[str] = {"1", "true", "yes", "on"}


def is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUTHY_SET


def is_truthy_env(name: str, default: str | None = None) -> bool:
    return is_truthy(os.getenv(name, default or ''))


def get_int_env(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        val = int(raw.strip())
    except ValueError:
        return default
    return val if val >= minimum else default


__all__ = [
    'TRUTHY_SET',
    'is_truthy',
    'is_truthy_env',
    'get_int_env',
]
