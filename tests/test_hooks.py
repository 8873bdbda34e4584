import os
import stat

import pytest

from envguard.hooks import HOOK_COMMAND, generate_hook_script, hook_path, install_hook, uninstall_hook
from envguard.utils.exceptions import HookError


def test_install_requires_git_repo(tmp_path):
    with pytest.raises(HookError, match='Not a git repository'):
        install_hook(tmp_path)


def test_install_creates_executable_hook(tmp_path):
    (tmp_path / '.git').mkdir()
    path = install_hook(tmp_path)
    assert path == hook_path(tmp_path, 'pre-commit')
    content = path.read_text(encoding='utf-8')
    assert content.startswith('#!/bin/sh')
    assert HOOK_COMMAND in content
    if os.name == 'posix':
        assert path.stat().st_mode & stat.S_IXUSR


def test_install_refuses_overwrite_without_force(tmp_path):
    (tmp_path / '.git' / 'hooks').mkdir(parents=True)
    existing = tmp_path / '.git' / 'hooks' / 'pre-push'
    existing.write_text('#!/bin/sh\necho mine\n', encoding='utf-8')
    with pytest.raises(HookError, match='already exists'):
        install_hook(tmp_path, 'pre-push')
    install_hook(tmp_path, 'pre-push', force=True)
    assert HOOK_COMMAND in existing.read_text(encoding='utf-8')


def test_unknown_hook_type(tmp_path):
    (tmp_path / '.git').mkdir()
    with pytest.raises(HookError, match='unknown hook type'):
        install_hook(tmp_path, 'post-merge')


def test_uninstall_only_removes_our_hook(tmp_path):
    hooks = tmp_path / '.git' / 'hooks'
    hooks.mkdir(parents=True)
    assert uninstall_hook(tmp_path) is False

    foreign = hooks / 'pre-commit'
    foreign.write_text('#!/bin/sh\nmake lint\n', encoding='utf-8')
    assert uninstall_hook(tmp_path) is False
    assert foreign.exists()

    foreign.unlink()
    install_hook(tmp_path)
    assert uninstall_hook(tmp_path) is True
    assert not (hooks / 'pre-commit').exists()


def test_hook_script_mentions_action():
    assert 'git push --no-verify' in generate_hook_script('pre-push')
    assert 'git commit --no-verify' in generate_hook_script('pre-commit')
