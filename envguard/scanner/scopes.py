"""Scope resolution and usage aggregation.

One scope per declaration source:
  * flat file ``D/.env``              -> source files at or below D, template ``D/.env.example``
  * manifest ``M/serverless.yml``     -> source files at or below M, no template

A directory holding both a ``.env`` and a manifest produces two independent
scopes over the same subtree.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from envguard.models import DeclarationSource, SourceKind, UsageRecord

from .files import EXAMPLE_FILE_NAME, ProjectFiles


@dataclass
class ScopePlan:
    source: DeclarationSource
    code_files: list[Path] = field(default_factory=list)

    @property
    def directory(self) -> Path:
        return self.source.directory

    @property
    def template(self) -> DeclarationSource | None:
        if self.source.kind is not SourceKind.FLAT:
            return None
        return DeclarationSource(SourceKind.TEMPLATE, self.directory / EXAMPLE_FILE_NAME)


def files_under(directory: Path, files: Iterable[Path]) -> list[Path]:
    return [f for f in files if f.is_relative_to(directory)]


def resolve_scopes(project: ProjectFiles) -> list[ScopePlan]:
    """Manifest scopes first, then flat-file scopes; each group in path order."""
    plans: list[ScopePlan] = []
    for path in project.manifest_files:
        src = DeclarationSource(SourceKind.MANIFEST, path)
        plans.append(ScopePlan(src, files_under(src.directory, project.code_files)))
    for path in project.env_files:
        src = DeclarationSource(SourceKind.FLAT, path)
        plans.append(ScopePlan(src, files_under(src.directory, project.code_files)))
    return plans


def merge_usage(usage: dict[str, UsageRecord], location: str, refs: Mapping[str, bool]) -> None:
    """Fold one file's references into ``usage`` in place."""
    for name, guarded in refs.items():
        rec = usage.get(name)
        if rec is None:
            rec = usage[name] = UsageRecord(name)
        rec.add(location, guarded)


def collect_usage(
    files: Iterable[Path],
    refs_by_file: Mapping[Path, Mapping[str, bool]],
    project: ProjectFiles,
) -> dict[str, UsageRecord]:
    """Aggregate per-file references over ``files`` in the given (sorted) order."""
    usage: dict[str, UsageRecord] = {}
    for f in files:
        merge_usage(usage, project.relative(f), refs_by_file.get(f, {}))
    return usage


__all__ = [
    'ScopePlan',
    'files_under',
    'resolve_scopes',
    'merge_usage',
    'collect_usage',
]
