"""Reconciliation of variable usage against declarations.

``analyze`` is pure: it takes the usage and declaration maps of one scope and
returns the issue list in a fixed order (missing, unused, undocumented; each
group in map insertion order). ``reconcile`` wraps it with the allowlist
(known runtime variables plus configured ignore list) and the strict switch.

Severity table:
  missing       error, or warning when fallback detection is on and the usage is guarded
  unused        info
  undocumented  warning, or info when fallback detection is on and the usage is guarded
"""
from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

from envguard.config.loader import EnvGuardConfig
from envguard.known_vars import CUSTOM_CATEGORY, get_runtime_var_category
from envguard.models import (
    DeclaredVariable,
    Issue,
    IssueKind,
    Scope,
    Severity,
    SkippedVariable,
    SourceKind,
    UsageRecord,
)


@dataclass
class Reconciliation:
    issues: list[Issue] = field(default_factory=list)
    skipped: list[SkippedVariable] = field(default_factory=list)


def allowlist_category(name: str, config: EnvGuardConfig) -> str | None:
    """Category label when ``name`` is allowlisted, else None. Config ignore list wins."""
    if name in config.ignore_vars:
        return CUSTOM_CATEGORY
    return get_runtime_var_category(name)


def analyze(
    usage: Mapping[str, UsageRecord],
    declared: Mapping[str, DeclaredVariable],
    example_names: Collection[str] | None,
    detect_fallbacks: bool = True,
    *,
    suppressed: Collection[str] = (),
    declared_label: str = '.env',
    example_label: str = '.env.example',
) -> list[Issue]:
    """Diff one scope.

    ``suppressed`` names count as used (so their declarations are not
    "unused") but are never reported missing or undocumented. With
    ``example_names`` None the template check is skipped entirely.
    """
    issues: list[Issue] = []

    for name, rec in usage.items():
        if name in declared or name in suppressed:
            continue
        guarded = detect_fallbacks and rec.has_fallback
        detail = f'Used in code but not defined in {declared_label}'
        if guarded:
            detail += ' (has a fallback at the usage site)'
        issues.append(Issue(
            IssueKind.MISSING,
            Severity.WARNING if guarded else Severity.ERROR,
            name,
            detail,
            tuple(rec.locations),
        ))

    for name, decl in declared.items():
        if name in usage:
            continue
        issues.append(Issue(
            IssueKind.UNUSED,
            Severity.INFO,
            name,
            f'Defined in {declared_label} but never used in code',
            (decl.source,),
        ))

    if example_names is not None:
        for name, rec in usage.items():
            if name not in declared or name in suppressed or name in example_names:
                continue
            guarded = detect_fallbacks and rec.has_fallback
            issues.append(Issue(
                IssueKind.UNDOCUMENTED,
                Severity.INFO if guarded else Severity.WARNING,
                name,
                f'Defined in {declared_label} but not documented in {example_label}',
                tuple(rec.locations),
            ))

    return issues


def reconcile(scope: Scope, config: EnvGuardConfig) -> Reconciliation:
    """Apply the allowlist (non-strict mode only) and analyze one scope."""
    suppressed: list[str] = []
    skipped: list[SkippedVariable] = []
    if not config.strict:
        for name in scope.usage:
            category = allowlist_category(name, config)
            if category is None:
                continue
            suppressed.append(name)
            if name not in scope.declared:
                skipped.append(SkippedVariable(name, category))

    declared_label = scope.source.path.name
    if scope.source.kind is SourceKind.FLAT:
        example_label = f'{declared_label}.example'
    else:
        example_label = ''
    issues = analyze(
        scope.usage,
        scope.declared,
        scope.example_names,
        config.detect_fallbacks,
        suppressed=frozenset(suppressed),
        declared_label=declared_label,
        example_label=example_label,
    )
    return Reconciliation(issues=issues, skipped=skipped)


__all__ = [
    'Reconciliation',
    'allowlist_category',
    'analyze',
    'reconcile',
]
