"""Scan and fix orchestration.

Flow for one run:
  1. list project files once (exclusions applied)
  2. resolve scopes (one per .env file, one per serverless manifest)
  3. read source files and declaration sources on a thread pool
  4. fold results in sorted path order, reconcile each scope

File reads finish in any order; every merge walks the pre-sorted lists, so
first-wins de-duplication and location order do not depend on timing.

Recoverable failures (unreadable files, malformed manifests) are logged and
collected in ``ScanResult.warnings``; the affected file contributes nothing.

Environment:
  ENVGUARD_MAX_WORKERS   thread pool size (default 8)
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from envguard.analyzer.engine import allowlist_category, reconcile
from envguard.analyzer.example_gen import generate_example_content
from envguard.config.loader import EnvGuardConfig
from envguard.models import DeclaredVariable, ScanResult, Scope, ScopeReport, SourceKind
from envguard.parser.dotenv import load_env_file, load_example_names, read_template_lines
from envguard.parser.manifest import load_manifest
from envguard.scanner.extractor import extract_references, read_source
from envguard.scanner.files import ProjectFiles, list_project_files
from envguard.scanner.scopes import ScopePlan, collect_usage, resolve_scopes
from envguard.utils.env_flags import get_int_env
from envguard.utils.exceptions import EnvGuardError, ManifestParseError, SourceReadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
NO_SOURCES_MESSAGE = 'No .env or serverless.yml files found in the project'


@dataclass
class _Outcome:
    value: object
    warning: str | None = None


def _max_workers() -> int:
    return get_int_env('ENVGUARD_MAX_WORKERS', DEFAULT_MAX_WORKERS)


def _scan_source(path: Path) -> _Outcome:
    try:
        return _Outcome(extract_references(read_source(path)))
    except SourceReadError as e:
        logger.warning("%s", e)
        return _Outcome({}, str(e))


def _load_declarations(plan: ScopePlan) -> _Outcome:
    path = plan.source.path
    try:
        if plan.source.kind is SourceKind.MANIFEST:
            return _Outcome(load_manifest(path))
        return _Outcome(load_env_file(path))
    except (SourceReadError, ManifestParseError) as e:
        logger.warning("%s", e)
        return _Outcome({}, str(e))


def _load_example(plan: ScopePlan) -> _Outcome:
    template = plan.template
    if template is None:
        return _Outcome(None)
    try:
        return _Outcome(load_example_names(template.path))
    except SourceReadError as e:
        logger.warning("%s", e)
        return _Outcome(set(), str(e))


def scope_label(plan: ScopePlan, project: ProjectFiles) -> str:
    if plan.source.kind is SourceKind.MANIFEST:
        return project.relative(plan.source.path)
    rel = project.relative(plan.directory) if plan.directory != project.root else '.'
    return f'{rel}/'


@dataclass
class _Collected:
    project: ProjectFiles
    plans: list[ScopePlan]
    scopes: list[Scope] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _collect(root: Path, config: EnvGuardConfig, *, with_examples: bool = True) -> _Collected:
    project = list_project_files(root, config.scan_exclude)
    plans = resolve_scopes(project)
    out = _Collected(project, plans)
    if not plans:
        return out

    code_files = sorted({f for p in plans for f in p.code_files}, key=project.relative)
    with ThreadPoolExecutor(max_workers=_max_workers()) as pool:
        # map() yields in submission order regardless of completion order
        scanned = list(pool.map(_scan_source, code_files))
        declared = list(pool.map(_load_declarations, plans))
        examples = list(pool.map(_load_example, plans)) if with_examples else [_Outcome(None)] * len(plans)

    refs_by_file: dict[Path, dict[str, bool]] = {}
    for path, outcome in zip(code_files, scanned, strict=True):
        refs_by_file[path] = outcome.value  # type: ignore[assignment]
        if outcome.warning:
            out.warnings.append(outcome.warning)

    for plan, decl, ex in zip(plans, declared, examples, strict=True):
        for o in (decl, ex):
            if o.warning:
                out.warnings.append(o.warning)
        scope = Scope(
            source=plan.source,
            directory=plan.directory,
            usage=collect_usage(plan.code_files, refs_by_file, project),
            declared=decl.value,  # type: ignore[arg-type]
            example_names=ex.value,  # type: ignore[arg-type]
        )
        logger.debug(
            "scope %s: %d used, %d declared",
            scope_label(plan, project), len(scope.usage), len(scope.declared),
        )
        out.scopes.append(scope)
    return out


def run_scan(root: str | Path, config: EnvGuardConfig) -> ScanResult:
    """Reconcile every scope under ``root``."""
    base = Path(root).resolve()
    collected = _collect(base, config)
    if not collected.plans:
        return ScanResult(success=False, warnings=[NO_SOURCES_MESSAGE])

    result = ScanResult(success=True, warnings=list(collected.warnings))
    for plan, scope in zip(collected.plans, collected.scopes, strict=True):
        rec = reconcile(scope, config)
        result.reports.append(ScopeReport(
            scope=scope,
            label=scope_label(plan, collected.project),
            issues=rec.issues,
            skipped=rec.skipped,
        ))
    result.success = not result.issues
    return result


@dataclass
class FixEntry:
    example_path: Path
    label: str
    used_vars: list[str]
    missing_from_env: list[str]
    content: str
    written: bool = False


@dataclass
class FixResult:
    success: bool
    entries: list[FixEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_vars(self) -> int:
        return sum(len(e.used_vars) for e in self.entries)


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding='utf-8')
    except OSError as e:
        raise EnvGuardError(f'cannot write {path}: {e}') from e


def run_fix(root: str | Path, config: EnvGuardConfig, *, write: bool = True) -> FixResult:
    """Regenerate ``.env.example`` beside every ``.env`` file.

    Allowlisted names (known runtime vars and the ignore list) never go into
    the template, whatever the strict setting.
    """
    base = Path(root).resolve()
    collected = _collect(base, config, with_examples=False)
    flat = [
        (plan, scope)
        for plan, scope in zip(collected.plans, collected.scopes, strict=True)
        if plan.source.kind is SourceKind.FLAT
    ]
    result = FixResult(success=bool(flat), warnings=list(collected.warnings))
    if not flat:
        result.warnings.append('No .env files found in the project')
        return result

    for plan, scope in flat:
        used = [n for n in scope.usage if allowlist_category(n, config) is None]
        template = plan.template
        assert template is not None
        try:
            existing = read_template_lines(template.path)
        except SourceReadError as e:
            logger.warning("%s", e)
            result.warnings.append(str(e))
            continue
        declared: dict[str, DeclaredVariable] = scope.declared
        entry = FixEntry(
            example_path=template.path,
            label=scope_label(plan, collected.project),
            used_vars=used,
            missing_from_env=[n for n in used if n not in declared],
            content=generate_example_content(used, existing),
        )
        if write and used:
            _write_text(template.path, entry.content)
            entry.written = True
        result.entries.append(entry)
    return result


__all__ = [
    'NO_SOURCES_MESSAGE',
    'run_scan',
    'run_fix',
    'FixEntry',
    'FixResult',
    'scope_label',
]
