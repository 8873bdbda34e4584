"""Pattern-based extraction of environment variable references.

Scans JavaScript/TypeScript source text for reads of ``process.env`` and
classifies every referenced name as *guarded* (a fallback, default,
optional chain or conditional check tolerates absence) or *bare*.

Rules run in order. The guarded rules come first; the catch-all bare rules
run last. Results are folded with a logical OR so a name flagged guarded by
any occurrence in the file stays guarded.

Public API:
  extract_references(text) -> dict[str, bool]
  scan_file(path) -> dict[str, bool]
  read_source(path) -> str   (raises SourceReadError)
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from envguard.models import VariableReference, is_valid_var_name
from envguard.utils.exceptions import SourceReadError

logger = logging.getLogger(__name__)

_NAME = r"([A-Z_][A-Z0-9_]*)(?![A-Za-z0-9_$])"
_FALLBACK_OP = r"\s*(?:\|\||&&|\?\?|\?)"

_DOT_ACCESS = r"process\.env\." + _NAME
_OPTIONAL_ACCESS = r"process\.env\?\.(?:" + _NAME + r"|\[\s*['\"`]" + _NAME + r"['\"`]\s*\])"
_BRACKET_ACCESS = r"process\.env\[\s*['\"`]" + _NAME + r"['\"`]\s*\]"
_ANY_ACCESS = r"process\.env(?:\??\." + _NAME + r"|(?:\?\.)?\[\s*['\"`]" + _NAME + r"['\"`]\s*\])"

# Destructuring source must be process.env itself, not a property of it.
DESTRUCTURE_RE = re.compile(
    r"\b(?:const|let|var)\s*\{([^}]*)\}\s*=\s*process\.env(?![\w$]|\s*(?:\??\.|\[))"
)


@dataclass(frozen=True)
class PatternRule:
    """Every match of ``pattern`` is a reference with the rule's fixed guardedness."""

    name: str
    pattern: re.Pattern[str]
    guarded: bool

    def find(self, text: str) -> Iterator[VariableReference]:
        for m in self.pattern.finditer(text):
            name = next((g for g in m.groups() if g), None)
            if name:
                yield VariableReference(name, self.guarded)


@dataclass(frozen=True)
class MatcherRule:
    """Rule whose matcher decides guardedness per reference."""

    name: str
    matcher: Callable[[str], Iterator[VariableReference]]

    def find(self, text: str) -> Iterator[VariableReference]:
        yield from self.matcher(text)


Rule = PatternRule | MatcherRule


def _split_pattern_entries(body: str) -> list[str]:
    """Split a destructuring body on top-level commas.

    Quotes and brackets are respected; ``//`` and ``/* */`` comments outside
    quotes are dropped.
    """
    entries: list[str] = []
    depth = 0
    quote: str | None = None
    cur: list[str] = []
    i, n = 0, len(body)
    while i < n:
        ch = body[i]
        if quote:
            cur.append(ch)
            if ch == quote:
                quote = None
            i += 1
            continue
        if body.startswith("//", i):
            end = body.find("\n", i)
            i = n if end == -1 else end
            continue
        if body.startswith("/*", i):
            end = body.find("*/", i + 2)
            i = n if end == -1 else end + 2
            cur.append(" ")
            continue
        if ch in "'\"`":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            entries.append("".join(cur))
            cur = []
            i += 1
            continue
        cur.append(ch)
        i += 1
    entries.append("".join(cur))
    return [e.strip() for e in entries if e.strip()]


def _destructuring_matches(text: str) -> Iterator[VariableReference]:
    for m in DESTRUCTURE_RE.finditer(text):
        for entry in _split_pattern_entries(m.group(1)):
            if entry.startswith("..."):
                continue
            target, sep, _default = entry.partition("=")
            name = target.split(":", 1)[0].strip()
            if is_valid_var_name(name):
                yield VariableReference(name, bool(sep))


RULES: list[Rule] = [
    PatternRule("dot-fallback", re.compile(_DOT_ACCESS + _FALLBACK_OP), guarded=True),
    PatternRule("conditional", re.compile(r"\bif\s*\(\s*!?\s*" + _ANY_ACCESS + r"\s*\)"), guarded=True),
    PatternRule("optional-chain", re.compile(_OPTIONAL_ACCESS), guarded=True),
    PatternRule("bracket-fallback", re.compile(_BRACKET_ACCESS + _FALLBACK_OP), guarded=True),
    MatcherRule("destructuring", _destructuring_matches),
    PatternRule("dot-bare", re.compile(_DOT_ACCESS), guarded=False),
    PatternRule("bracket-bare", re.compile(_BRACKET_ACCESS), guarded=False),
]


def extract_references(text: str) -> dict[str, bool]:
    """Return ``name -> guarded`` for every variable referenced in ``text``."""
    found: dict[str, bool] = {}
    for rule in RULES:
        for ref in rule.find(text):
            if not is_valid_var_name(ref.name):
                continue
            found[ref.name] = found.get(ref.name, False) or ref.guarded
    return found


def read_source(path: str | Path) -> str:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(p, str(e)) from e


def scan_file(path: str | Path) -> dict[str, bool]:
    """Extract references from one file; unreadable files contribute nothing."""
    try:
        text = read_source(path)
    except SourceReadError as e:
        logger.warning("%s", e)
        return {}
    return extract_references(text)


__all__ = [
    "Rule",
    "PatternRule",
    "MatcherRule",
    "RULES",
    "extract_references",
    "read_source",
    "scan_file",
]
