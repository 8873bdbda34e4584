#!/usr/bin/env python3
"""EnvGuard command line interface.

Subcommands:
  scan            Compare code usage with .env / serverless.yml declarations
  check           Same as ``scan --ci``
  fix             Regenerate .env.example files from code usage
  install-hook    Install a git hook running ``envguard scan --ci``
  uninstall-hook  Remove the envguard git hook
  version         Show version

Exit codes:
  0  no issues (or issues outside CI mode)
  1  issues found in CI mode, hook failure, or inaccessible project root
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from envguard.config.loader import EnvGuardConfig, load_config
from envguard.console.report import make_console, render_fix, render_scan, render_summary_table
from envguard.hooks import DEFAULT_HOOK_TYPE, HOOK_TYPES, install_hook, uninstall_hook
from envguard.pipeline import run_fix, run_scan
from envguard.utils.exceptions import EnvGuardError
from envguard.utils.logging_utils import setup_logging
from envguard.version import get_version

logger = logging.getLogger('envguard.cli')


def _csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(',') if v.strip()]


def _root(args: argparse.Namespace) -> Path | None:
    root = Path(args.root).resolve()
    if not root.is_dir():
        make_console(stderr=True).print(f'[red]Project root is not accessible: {root}[/]')
        return None
    return root


def _config(args: argparse.Namespace, root: Path) -> tuple[EnvGuardConfig, list[str]]:
    loaded = load_config(root)
    cfg = loaded.config.with_overrides(
        strict=True if getattr(args, 'strict', False) else None,
        detect_fallbacks=getattr(args, 'detect_fallbacks', None),
        exclude=_csv(getattr(args, 'exclude', None)),
        ignore_vars=_csv(getattr(args, 'ignore_vars', None)),
    )
    return cfg, loaded.warnings


def cmd_scan(args: argparse.Namespace) -> int:
    root = _root(args)
    if root is None:
        return 1
    cfg, cfg_warnings = _config(args, root)
    result = run_scan(root, cfg)
    result.warnings[:0] = cfg_warnings
    if args.json:
        print(json.dumps(result.as_dict(), indent=2))
    else:
        console = make_console()
        console.print('[blue]Scanning codebase for environment variables...[/]\n')
        render_scan(console, result, strict=cfg.strict, ci=args.ci)
        if args.table and result.issues:
            render_summary_table(console, result)
    if args.ci and result.issues:
        return 1
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    args.ci = True
    return cmd_scan(args)


def cmd_fix(args: argparse.Namespace) -> int:
    root = _root(args)
    if root is None:
        return 1
    cfg, cfg_warnings = _config(args, root)
    try:
        result = run_fix(root, cfg, write=not args.dry_run)
    except EnvGuardError as e:
        make_console(stderr=True).print(f'[red]{e}[/]')
        return 1
    result.warnings[:0] = cfg_warnings
    console = make_console()
    render_fix(console, result)
    if args.dry_run:
        for entry in result.entries:
            console.rule(str(entry.example_path), style='dim')
            console.print(entry.content, markup=False, end='')
    return 0


def cmd_install_hook(args: argparse.Namespace) -> int:
    root = _root(args)
    if root is None:
        return 1
    console = make_console()
    try:
        path = install_hook(root, args.type, force=args.force)
    except EnvGuardError as e:
        console.print(f'[red]{e}[/]')
        return 1
    action = 'commit' if args.type == 'pre-commit' else 'push'
    console.print(f'Installed {args.type} hook at {path}')
    console.print(f'   [dim]The hook runs `envguard scan --ci` before each {action}[/]')
    console.print(f'   [dim]To bypass the hook, use: git {action} --no-verify[/]')
    return 0


def cmd_uninstall_hook(args: argparse.Namespace) -> int:
    root = _root(args)
    if root is None:
        return 1
    console = make_console()
    try:
        removed = uninstall_hook(root, args.type)
    except EnvGuardError as e:
        console.print(f'[red]{e}[/]')
        return 1
    if removed:
        console.print(f'Removed {args.type} hook')
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    print(get_version())
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument('--root', default='.', help='Project root (default: current directory)')


def _add_filters(p: argparse.ArgumentParser) -> None:
    p.add_argument('--exclude', help='Comma-separated patterns to exclude (merged with config exclude)')
    p.add_argument('--ignore-vars', dest='ignore_vars',
                   help='Comma-separated variables to ignore (merged with ignoreVars from config)')


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='envguard', description='Keep environment variables in sync with your codebase')
    p.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    p.add_argument('--log-file', help='Also write logs to this file')
    sub = p.add_subparsers(dest='cmd')

    scan = sub.add_parser('scan', help='Scan codebase and compare with .env files')
    _add_common(scan)
    _add_filters(scan)
    scan.add_argument('--ci', action='store_true', help='Exit with code 1 if issues are found')
    scan.add_argument('--strict', action='store_true',
                      help='Report all variables including known runtime variables (AWS_REGION, NODE_ENV, ...)')
    scan.add_argument('--no-detect-fallbacks', dest='detect_fallbacks', action='store_false', default=None,
                      help='Treat all missing variables as errors, ignoring fallback detection')
    scan.add_argument('--json', action='store_true', help='Print the result as JSON')
    scan.add_argument('--table', action='store_true', help='Append a summary table of all issues')
    scan.set_defaults(func=cmd_scan)

    check = sub.add_parser('check', help='Scan in CI mode (same as scan --ci)')
    _add_common(check)
    _add_filters(check)
    check.set_defaults(func=cmd_check, json=False, table=False, strict=False, detect_fallbacks=None)

    fix = sub.add_parser('fix', help='Regenerate .env.example from codebase')
    _add_common(fix)
    _add_filters(fix)
    fix.add_argument('--dry-run', action='store_true', help='Print generated content without writing')
    fix.set_defaults(func=cmd_fix)

    ih = sub.add_parser('install-hook', help='Install a git hook to run envguard automatically')
    _add_common(ih)
    ih.add_argument('--type', choices=HOOK_TYPES, default=DEFAULT_HOOK_TYPE, help='Hook type')
    ih.add_argument('--force', action='store_true', help='Overwrite existing hook if present')
    ih.set_defaults(func=cmd_install_hook)

    uh = sub.add_parser('uninstall-hook', help='Remove the envguard git hook')
    _add_common(uh)
    uh.add_argument('--type', choices=HOOK_TYPES, default=DEFAULT_HOOK_TYPE, help='Hook type')
    uh.set_defaults(func=cmd_uninstall_hook)

    ver = sub.add_parser('version', help='Show version')
    ver.set_defaults(func=cmd_version)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging('DEBUG' if args.verbose else 'WARNING', log_file=args.log_file)
    if not getattr(args, 'cmd', None):
        parser.print_help()
        return 0
    return args.func(args)  # type: ignore[no-any-return]


if __name__ == '__main__':  # pragma: no cover
    raise SystemExit(main())
