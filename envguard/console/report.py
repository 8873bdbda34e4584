"""Rich rendering of scan and fix results.

Rendering only; nothing here influences the result objects. Colors are
disabled when ENVGUARD_NO_COLOR (or the conventional NO_COLOR) is set.
"""
from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envguard.models import Issue, IssueKind, ScanResult, ScopeReport, SourceKind
from envguard.pipeline import FixResult
from envguard.utils.env_flags import is_truthy_env

MAX_LOCATIONS_SHOWN = 2

_GROUPS: list[tuple[IssueKind, str, str]] = [
    (IssueKind.MISSING, 'Missing from {declared}', 'red'),
    (IssueKind.UNUSED, 'Unused variables in {declared}', 'yellow'),
    (IssueKind.UNDOCUMENTED, 'Missing from {declared}.example', 'blue'),
]

_SEVERITY_STYLE = {'error': 'red', 'warning': 'yellow', 'info': 'dim'}


def make_console(*, stderr: bool = False) -> Console:
    no_color = is_truthy_env('ENVGUARD_NO_COLOR') or is_truthy_env('NO_COLOR')
    return Console(stderr=stderr, no_color=no_color, highlight=False)


def _render_group(console: Console, title: str, style: str, issues: Sequence[Issue]) -> None:
    console.print(f'   [bold {style}]{escape(title)}:[/]')
    for idx, issue in enumerate(issues, start=1):
        sev = issue.severity.value
        console.print(
            f'      [{style}]{idx}. {escape(issue.var_name)}[/] '
            f'[{_SEVERITY_STYLE[sev]}]({sev})[/]'
        )
        if issue.kind is not IssueKind.UNUSED and issue.locations:
            shown = ', '.join(issue.locations[:MAX_LOCATIONS_SHOWN])
            console.print(f'         [dim]Used in: {escape(shown)}[/]')
    console.print()


def render_scope(console: Console, report: ScopeReport, *, strict: bool) -> None:
    scope = report.scope
    console.print(f'[cyan]Checking {escape(report.label)}[/]')
    console.print(
        f'   [dim]Found {len(scope.usage)} variable(s) used in this scope, '
        f'{len(scope.declared)} declared in {escape(scope.source.path.name)}[/]'
    )
    if scope.source.kind is SourceKind.FLAT and scope.example_names is not None:
        console.print(f'   [dim]Found {len(scope.example_names)} variable(s) in .env.example[/]')
    console.print()

    declared = scope.source.path.name
    for kind, title, style in _GROUPS:
        group = [i for i in report.issues if i.kind is kind]
        if group:
            _render_group(console, title.format(declared=declared), style, group)

    if not report.issues:
        console.print('   [green]No issues in this scope[/]\n')

    grouped = report.skipped_by_category()
    if not strict and grouped:
        console.print('   [dim]Skipped known runtime variables (use --strict to show):[/]')
        for category, names in grouped.items():
            console.print(f'      [dim]{escape(category)}: {escape(", ".join(names))}[/]')
        console.print()


def render_scan(console: Console, result: ScanResult, *, strict: bool = False, ci: bool = False) -> None:
    if not result.reports:
        for w in result.warnings:
            console.print(f'[yellow]{escape(w)}[/]')
        return

    manifests = sum(1 for r in result.reports if r.scope.source.kind is SourceKind.MANIFEST)
    flats = len(result.reports) - manifests
    console.print(f'[green]Found {flats} .env file(s) and {manifests} serverless manifest(s)[/]\n')

    for report in result.reports:
        render_scope(console, report, strict=strict)

    if result.warnings:
        console.print('[yellow]Warnings:[/]')
        for w in result.warnings:
            console.print(f'   [yellow]{escape(w)}[/]')
        console.print()

    console.rule(style='dim')
    issues = result.issues
    if not issues:
        console.print('\n[green]No issues found! All environment variables are in sync.[/]\n')
        return
    console.print(f'\n[yellow]Total: {len(issues)} issue(s) across {len(result.reports)} scope(s)[/]\n')
    if ci:
        console.print('[red]Issues found. Exiting with error code 1.[/]\n')
    else:
        console.print('[cyan]Run `envguard fix` to regenerate .env.example files[/]\n')


def render_summary_table(console: Console, result: ScanResult) -> None:
    table = Table(title='Environment variable issues')
    table.add_column('Scope')
    table.add_column('Variable')
    table.add_column('Type')
    table.add_column('Severity')
    table.add_column('Details')
    for report in result.reports:
        for issue in report.issues:
            table.add_row(
                report.label,
                issue.var_name,
                issue.kind.value,
                issue.severity.value,
                issue.detail,
            )
    console.print(table)


def render_fix(console: Console, result: FixResult) -> None:
    for w in result.warnings:
        console.print(f'[yellow]{escape(w)}[/]')
    if not result.entries:
        return
    for entry in result.entries:
        console.print(f'[dim]Processing {escape(entry.label)}[/]')
        if not entry.used_vars:
            console.print('   [dim]No environment variables found in code[/]\n')
            continue
        console.print(f'   Found {len(entry.used_vars)} variable(s) used in this directory')
        if entry.written:
            console.print(f'   Generated {escape(str(entry.example_path))}')
        if entry.missing_from_env:
            console.print(f'   [yellow]Missing from .env: {escape(", ".join(entry.missing_from_env))}[/]')
        console.print()
    console.print(
        f'Generated {sum(1 for e in result.entries if e.written)} .env.example file(s) '
        f'with {result.total_vars} total variables\n'
    )


__all__ = [
    'make_console',
    'render_scope',
    'render_scan',
    'render_summary_table',
    'render_fix',
]
