"""Git hook installation.

Writes a small POSIX shell hook that runs ``envguard scan --ci`` before a
commit or push. Uninstall only removes hooks carrying the envguard marker.
"""
from __future__ import annotations

import logging
from pathlib import Path

from envguard.utils.exceptions import HookError

logger = logging.getLogger(__name__)

HOOK_TYPES: tuple[str, ...] = ('pre-commit', 'pre-push')
DEFAULT_HOOK_TYPE = 'pre-commit'
HOOK_COMMAND = 'envguard scan --ci'
_MARKERS = (HOOK_COMMAND, 'envguard check')


def _action(hook_type: str) -> str:
    return 'commit' if hook_type == 'pre-commit' else 'push'


def generate_hook_script(hook_type: str) -> str:
    action = _action(hook_type)
    return f"""#!/bin/sh
# EnvGuard {hook_type} hook
# Checks environment variables before each {action}.
# To bypass this hook, use: git {action} --no-verify

echo "Running EnvGuard environment variable check..."

{HOOK_COMMAND}
EXIT_CODE=$?

if [ $EXIT_CODE -ne 0 ]; then
  echo ""
  echo "EnvGuard check failed. Fix the issues above before you {action}."
  echo "Or run: git {action} --no-verify to bypass this check."
  echo ""
  exit 1
fi

echo "EnvGuard check passed."
exit 0
"""


def _validate(hook_type: str) -> None:
    if hook_type not in HOOK_TYPES:
        raise HookError(f"unknown hook type '{hook_type}' (expected one of: {', '.join(HOOK_TYPES)})")


def hook_path(root: str | Path, hook_type: str = DEFAULT_HOOK_TYPE) -> Path:
    return Path(root) / '.git' / 'hooks' / hook_type


def install_hook(root: str | Path, hook_type: str = DEFAULT_HOOK_TYPE, *, force: bool = False) -> Path:
    _validate(hook_type)
    git_dir = Path(root) / '.git'
    if not git_dir.is_dir():
        raise HookError('Not a git repository. Run this command in a git repository.')
    path = hook_path(root, hook_type)
    if path.exists() and not force:
        raise HookError(f'{hook_type} hook already exists. Use --force to overwrite it.')
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(generate_hook_script(hook_type), encoding='utf-8')
        path.chmod(0o755)
    except OSError as e:
        raise HookError(f'Failed to install hook: {e}') from e
    logger.debug("installed %s hook at %s", hook_type, path)
    return path


def uninstall_hook(root: str | Path, hook_type: str = DEFAULT_HOOK_TYPE) -> bool:
    """Remove the hook; False when there is nothing of ours to remove."""
    _validate(hook_type)
    path = hook_path(root, hook_type)
    if not path.exists():
        logger.warning("No %s hook found.", hook_type)
        return False
    try:
        content = path.read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        raise HookError(f'Failed to read hook: {e}') from e
    if not any(m in content for m in _MARKERS):
        logger.warning("The %s hook exists but was not created by envguard; remove it manually.", hook_type)
        return False
    try:
        path.unlink()
    except OSError as e:
        raise HookError(f'Failed to remove hook: {e}') from e
    return True


__all__ = [
    'HOOK_TYPES',
    'DEFAULT_HOOK_TYPE',
    'HOOK_COMMAND',
    'generate_hook_script',
    'hook_path',
    'install_hook',
    'uninstall_hook',
]
