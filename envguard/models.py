"""Data model for environment variable audits.

All records live for a single run only. Scanning builds them from source text
and declaration files; the analyzer turns them into ``Issue`` entries which
the console layer renders.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

VAR_NAME_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")
# Manifest keys are accepted regardless of case.
MANIFEST_KEY_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$", re.IGNORECASE)


def is_valid_var_name(name: str, *, case_insensitive: bool = False) -> bool:
    pat = MANIFEST_KEY_RE if case_insensitive else VAR_NAME_RE
    return bool(pat.match(name))


class IssueKind(str, Enum):
    MISSING = "missing"
    UNUSED = "unused"
    UNDOCUMENTED = "undocumented"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class SourceKind(str, Enum):
    FLAT = "flat"
    MANIFEST = "manifest"
    TEMPLATE = "template"


@dataclass(frozen=True, slots=True)
class VariableReference:
    name: str
    guarded: bool


@dataclass(slots=True)
class UsageRecord:
    """Usage of one variable aggregated over the files of a scope."""

    name: str
    locations: list[str] = field(default_factory=list)
    has_fallback: bool = False

    def add(self, location: str, guarded: bool) -> None:
        self.locations.append(location)
        self.has_fallback = self.has_fallback or guarded

    def merged(self, other: UsageRecord) -> UsageRecord:
        if other.name != self.name:
            raise ValueError(f"cannot merge usage of {other.name} into {self.name}")
        return UsageRecord(
            name=self.name,
            locations=[*self.locations, *other.locations],
            has_fallback=self.has_fallback or other.has_fallback,
        )


@dataclass(frozen=True, slots=True)
class DeclaredVariable:
    name: str
    raw_value: str
    source: str
    line_number: int | None = None
    is_external_reference: bool = False


@dataclass(frozen=True, slots=True)
class DeclarationSource:
    """Tagged declaration source; ``kind`` selects the collector."""

    kind: SourceKind
    path: Path

    @property
    def directory(self) -> Path:
        return self.path.parent


@dataclass(frozen=True, slots=True)
class Issue:
    kind: IssueKind
    severity: Severity
    var_name: str
    detail: str
    locations: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {
            "type": self.kind.value,
            "severity": self.severity.value,
            "varName": self.var_name,
            "details": self.detail,
            "locations": list(self.locations),
        }


@dataclass(frozen=True, slots=True)
class SkippedVariable:
    """A used-but-undeclared name suppressed by the allowlist."""

    var_name: str
    category: str


@dataclass(slots=True)
class Scope:
    source: DeclarationSource
    directory: Path
    usage: dict[str, UsageRecord] = field(default_factory=dict)
    declared: dict[str, DeclaredVariable] = field(default_factory=dict)
    # None when the scope has no template check (manifest scopes)
    example_names: set[str] | None = None


@dataclass(slots=True)
class ScopeReport:
    scope: Scope
    label: str
    issues: list[Issue] = field(default_factory=list)
    skipped: list[SkippedVariable] = field(default_factory=list)

    def skipped_by_category(self) -> dict[str, list[str]]:
        return group_skipped(self.skipped)


@dataclass(slots=True)
class ScanResult:
    success: bool
    reports: list[ScopeReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def issues(self) -> list[Issue]:
        out: list[Issue] = []
        for r in self.reports:
            out.extend(r.issues)
        return out

    def as_dict(self) -> dict[str, object]:
        return {"success": self.success, "issues": [i.as_dict() for i in self.issues]}


def group_skipped(skipped: Iterable[SkippedVariable]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for s in skipped:
        grouped.setdefault(s.category, []).append(s.var_name)
    return grouped


__all__ = [
    "VAR_NAME_RE",
    "MANIFEST_KEY_RE",
    "is_valid_var_name",
    "IssueKind",
    "Severity",
    "SourceKind",
    "VariableReference",
    "UsageRecord",
    "DeclaredVariable",
    "DeclarationSource",
    "Issue",
    "SkippedVariable",
    "Scope",
    "ScopeReport",
    "ScanResult",
    "group_skipped",
]
