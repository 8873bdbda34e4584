"""File listing for the scanner.

Walks the project tree once, pruning excluded directories, and partitions the
result into source files, flat declaration files and manifests.

Exclusion patterns:
  * plain name  -> excludes that name as a path segment anywhere in the tree
  * plain path  -> ('src/generated') excludes that run of segments anywhere in the tree
  * wildcard    -> fnmatch pattern against the root-relative posix path

``.git`` and ``node_modules`` are always excluded.
"""
from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

ALWAYS_EXCLUDE: tuple[str, ...] = ('.git', 'node_modules')
DEFAULT_EXCLUDE: tuple[str, ...] = ('dist', 'build')

CODE_EXTENSIONS: frozenset[str] = frozenset({'.js', '.ts', '.jsx', '.tsx', '.mjs', '.cjs'})
ENV_FILE_NAME = '.env'
EXAMPLE_FILE_NAME = '.env.example'
MANIFEST_FILE_NAMES: frozenset[str] = frozenset({'serverless.yml', 'serverless.yaml'})


def _has_wildcard(pattern: str) -> bool:
    return any(c in pattern for c in '*?[')


class ExcludeMatcher:
    def __init__(self, patterns: Iterable[str] = ()) -> None:
        names: set[str] = set(ALWAYS_EXCLUDE)
        runs: list[tuple[str, ...]] = []
        globs: list[str] = []
        for raw in patterns:
            p = raw.strip().replace('\\', '/').strip('/')
            if not p:
                continue
            if _has_wildcard(p):
                if p not in globs:
                    globs.append(p)
            elif '/' in p:
                run = tuple(s for s in p.split('/') if s)
                if run not in runs:
                    runs.append(run)
            else:
                names.add(p)
        self.names = frozenset(names)
        self.runs = tuple(runs)
        self.globs = tuple(globs)

    def _run_hit(self, parts: list[str]) -> bool:
        for run in self.runs:
            n = len(run)
            if any(tuple(parts[i:i + n]) == run for i in range(len(parts) - n + 1)):
                return True
        return False

    def _glob_hit(self, rel: str) -> bool:
        for g in self.globs:
            # '**/x/**' must also match at the root ('x/...')
            candidates = [g, g[3:]] if g.startswith('**/') else [g]
            for c in candidates:
                if fnmatch.fnmatchcase(rel, c):
                    return True
                # a directory pattern like 'tmp/**' excludes 'tmp' itself
                if c.endswith('/**') and fnmatch.fnmatchcase(rel + '/', c[:-2]):
                    return True
        return False

    def excludes(self, rel_path: str) -> bool:
        rel = rel_path.replace('\\', '/').strip('/')
        if not rel or rel == '.':
            return False
        parts = rel.split('/')
        if any(part in self.names for part in parts):
            return True
        if self._run_hit(parts):
            return True
        return self._glob_hit(rel)


@dataclass
class ProjectFiles:
    root: Path
    code_files: list[Path] = field(default_factory=list)
    env_files: list[Path] = field(default_factory=list)
    manifest_files: list[Path] = field(default_factory=list)

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()


def list_project_files(root: str | Path, exclude: Iterable[str] = DEFAULT_EXCLUDE) -> ProjectFiles:
    """Walk ``root`` once; every list in the result is sorted by relative path."""
    base = Path(root).resolve()
    matcher = ExcludeMatcher(exclude)
    out = ProjectFiles(root=base)
    for dirpath, dirnames, filenames in os.walk(base):
        cur = Path(dirpath)
        rel_dir = cur.relative_to(base).as_posix()
        kept = []
        for d in dirnames:
            rel = d if rel_dir == '.' else f'{rel_dir}/{d}'
            if not matcher.excludes(rel):
                kept.append(d)
        dirnames[:] = sorted(kept)
        for fn in filenames:
            rel = fn if rel_dir == '.' else f'{rel_dir}/{fn}'
            if matcher.excludes(rel):
                continue
            p = cur / fn
            if fn == ENV_FILE_NAME:
                out.env_files.append(p)
            elif fn in MANIFEST_FILE_NAMES:
                out.manifest_files.append(p)
            elif p.suffix.lower() in CODE_EXTENSIONS:
                out.code_files.append(p)
    for lst in (out.code_files, out.env_files, out.manifest_files):
        lst.sort(key=out.relative)
    return out


__all__ = [
    'ALWAYS_EXCLUDE',
    'DEFAULT_EXCLUDE',
    'CODE_EXTENSIONS',
    'ENV_FILE_NAME',
    'EXAMPLE_FILE_NAME',
    'MANIFEST_FILE_NAMES',
    'ExcludeMatcher',
    'ProjectFiles',
    'list_project_files',
]
