"""Regeneration of .env.example content.

Text merge over the existing template, line by line:
  * comments, blanks and unparseable lines are kept verbatim in place
  * ``NAME=value`` lines are kept verbatim while NAME is still used
  * lines for names no longer used are dropped
  * names not yet documented are appended, sorted, as ``NAME=``

Running it again over its own output with the same used names is a no-op.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from envguard.parser.dotenv import TemplateLine

HEADER = (
    '# Environment variables used by this project',
    '# Generated by envguard; fill in values in .env',
    '',
)


def generate_example_content(used_vars: Iterable[str], existing: Sequence[TemplateLine] = ()) -> str:
    used = set(used_vars)
    out: list[str] = []
    documented: set[str] = set()

    if existing:
        for line in existing:
            if line.name is None:
                out.append(line.text)
                continue
            if line.name in used and line.name not in documented:
                out.append(line.text)
                documented.add(line.name)
    else:
        out.extend(HEADER)

    new_names = sorted(used - documented)
    if new_names and existing and out and out[-1].strip():
        out.append('')
    out.extend(f'{name}=' for name in new_names)

    if not out:
        return ''
    return '\n'.join(out) + '\n'


__all__ = ['HEADER', 'generate_example_content']
