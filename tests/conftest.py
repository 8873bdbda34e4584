"""Shared fixtures for EnvGuard tests.

``make_tree`` writes a dict of relative path -> text into tmp_path and
returns the root, so each test can describe a small project inline.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pytest


@pytest.fixture()
def make_tree(tmp_path: Path):
    def _make(files: dict[str, str]) -> Path:
        for rel, text in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(text, encoding='utf-8')
        return tmp_path

    return _make


@pytest.fixture(autouse=True)
def _no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('ENVGUARD_NO_COLOR', '1')
    monkeypatch.delenv('ENVGUARD_VERBOSE_CONSOLE', raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # main() reconfigures the root logger; put it back so later tests see pytest's handlers
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
