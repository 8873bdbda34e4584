"""Flat ``NAME=value`` declaration files (.env) and their templates (.env.example).

Three readers:
  * load_env_file / parse_env_file   -> declared variables with line numbers
  * parse_example_names              -> documented names only (absent file -> empty set)
  * read_template_lines              -> positional line model used by regeneration

``load_*`` helpers raise SourceReadError; ``parse_*`` helpers log and return an
empty contribution instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from envguard.models import DeclaredVariable, is_valid_var_name
from envguard.utils.exceptions import SourceReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateLine:
    """One physical line of a template file.

    ``name`` is set for ``NAME=value`` (or bare ``NAME``) entries and None for
    comments, blanks and anything unparseable, which are kept verbatim.
    """

    text: str
    name: str | None = None

    @property
    def is_comment(self) -> bool:
        return self.text.lstrip().startswith('#')


def _unquote(value: str) -> str:
    if value[:1] in ('"', "'"):
        # quoted: text up to the closing quote; anything after it (a ' # comment') is dropped
        end = value.find(value[0], 1)
        if end != -1:
            return value[1:end]
    # unquoted values may carry a trailing ' # comment'
    idx = value.find(' #')
    if idx != -1:
        value = value[:idx]
    return value.rstrip()


def parse_env_line(line: str, *, value_required: bool = True) -> tuple[str, str] | None:
    """Split one line into ``(name, value)``; None for comments, blanks and invalid names."""
    stripped = line.strip()
    if not stripped or stripped.startswith('#'):
        return None
    if stripped.startswith('export '):
        stripped = stripped[len('export '):].lstrip()
    name, sep, value = stripped.partition('=')
    if not sep and value_required:
        return None
    name = name.strip()
    if not is_valid_var_name(name):
        return None
    return name, _unquote(value.strip())


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(path, str(e)) from e


def load_env_file(path: str | Path) -> dict[str, DeclaredVariable]:
    p = Path(path)
    out: dict[str, DeclaredVariable] = {}
    for lineno, line in enumerate(_read_text(p).splitlines(), start=1):
        parsed = parse_env_line(line)
        if parsed is None:
            continue
        name, value = parsed
        if name in out:
            continue  # first declaration wins
        out[name] = DeclaredVariable(
            name=name,
            raw_value=value,
            source=str(p),
            line_number=lineno,
            is_external_reference=False,
        )
    return out


def parse_env_file(path: str | Path) -> dict[str, DeclaredVariable]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        return load_env_file(p)
    except SourceReadError as e:
        logger.warning("%s", e)
        return {}


def load_example_names(path: str | Path) -> set[str]:
    p = Path(path)
    if not p.exists():
        return set()
    names: set[str] = set()
    for line in _read_text(p).splitlines():
        parsed = parse_env_line(line, value_required=False)
        if parsed:
            names.add(parsed[0])
    return names


def parse_example_names(path: str | Path) -> set[str]:
    try:
        return load_example_names(path)
    except SourceReadError as e:
        logger.warning("%s", e)
        return set()


def read_template_lines(path: str | Path) -> list[TemplateLine]:
    """Positional model of an existing template; absent file -> []."""
    p = Path(path)
    if not p.exists():
        return []
    lines: list[TemplateLine] = []
    for line in _read_text(p).splitlines():
        parsed = parse_env_line(line, value_required=False)
        lines.append(TemplateLine(line, parsed[0] if parsed else None))
    return lines


__all__ = [
    'TemplateLine',
    'parse_env_line',
    'load_env_file',
    'parse_env_file',
    'load_example_names',
    'parse_example_names',
    'read_template_lines',
]
