"""Logging setup for the EnvGuard CLI."""
from __future__ import annotations

import logging
import os
import sys

from .env_flags import is_truthy_env

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# Minimal console format used for cleaner terminal output next to the report.
MINIMAL_CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging.

    Console handler writes to stderr so the report on stdout stays clean. It
    uses the minimal format unless ENVGUARD_VERBOSE_CONSOLE is truthy or an
    explicit ``fmt`` is passed. The optional file handler always uses the full
    DEFAULT_FORMAT.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    # Remove existing handlers to avoid duplication on re-init
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if fmt != DEFAULT_FORMAT:
        console_fmt = fmt
    elif is_truthy_env('ENVGUARD_VERBOSE_CONSOLE'):
        console_fmt = DEFAULT_FORMAT
    else:
        console_fmt = MINIMAL_CONSOLE_FORMAT

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(console_fmt))
    root.addHandler(console)

    if log_file:
        try:
            parent = os.path.dirname(log_file)
            if parent:
                os.makedirs(parent, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            root.error("Failed to create log file handler: %s", e)
        else:
            fh.setLevel(log_level)
            fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root.addHandler(fh)

    return root


__all__ = ["setup_logging", "DEFAULT_FORMAT", "MINIMAL_CONSOLE_FORMAT"]
