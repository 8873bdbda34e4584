"""Serverless manifest (serverless.yml) declaration collector.

Reads ``provider.environment`` first, then ``functions.<name>.environment`` in
document order. A name already collected is never overwritten (first wins),
so a provider-level value beats any function-level override.

The document is loaded with a BaseLoader subclass: every scalar stays a
string exactly as written, and CloudFormation short-form intrinsics
(``!Ref``, ``!GetAtt``, ``!Sub`` ...) are kept as ``Intrinsic`` values that
render back to their literal text.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from envguard.models import DeclaredVariable, is_valid_var_name
from envguard.utils.exceptions import ManifestParseError, SourceReadError

logger = logging.getLogger(__name__)

CF_TAGS: dict[str, str] = {
    '!Ref': 'Ref',
    '!GetAtt': 'Fn::GetAtt',
    '!Join': 'Fn::Join',
    '!Sub': 'Fn::Sub',
    '!ImportValue': 'Fn::ImportValue',
    '!Select': 'Fn::Select',
    '!Split': 'Fn::Split',
    '!FindInMap': 'Fn::FindInMap',
    '!GetAZs': 'Fn::GetAZs',
    '!Base64': 'Fn::Base64',
    '!Cidr': 'Fn::Cidr',
    '!Equals': 'Fn::Equals',
    '!Not': 'Fn::Not',
    '!And': 'Fn::And',
    '!Or': 'Fn::Or',
    '!If': 'Fn::If',
    '!Condition': 'Condition',
}

# Values resolved by serverless at deploy time rather than literals.
EXTERNAL_REFERENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'\$\{ssm:'),             # SSM Parameter Store
    re.compile(r'\$\{aws:reference'),    # Secrets Manager via SSM reference
    re.compile(r'\$\{file\('),           # external file
    re.compile(r'\$\{self:custom\.'),    # custom variables
    re.compile(r'\$\{opt:'),             # CLI options
    re.compile(r'\$\{env:'),             # environment passthrough
    re.compile(r'\$\{cf:'),              # CloudFormation stack outputs
)


@dataclass(frozen=True)
class Intrinsic:
    tag: str
    value: Any

    @property
    def function(self) -> str:
        return CF_TAGS[self.tag]

    def __str__(self) -> str:
        return f'{self.tag} {render_value(self.value)}'


def render_value(value: Any) -> str:
    """Stringify a loaded YAML value in flow style."""
    if isinstance(value, str):
        return value
    if isinstance(value, Intrinsic):
        return str(value)
    if isinstance(value, list):
        return '[' + ', '.join(render_value(v) for v in value) + ']'
    if isinstance(value, dict):
        return '{' + ', '.join(f'{render_value(k)}: {render_value(v)}' for k, v in value.items()) + '}'
    if value is None:
        return ''
    return str(value)


class ManifestLoader(yaml.BaseLoader):
    """BaseLoader (all scalars are strings) plus CloudFormation short-form tags."""


def _construct_intrinsic(loader: ManifestLoader, node: yaml.Node) -> Intrinsic:
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return Intrinsic(node.tag, value)


for _tag in CF_TAGS:
    ManifestLoader.add_constructor(_tag, _construct_intrinsic)


def is_external_reference(value: str) -> bool:
    return any(p.search(value) for p in EXTERNAL_REFERENCE_PATTERNS)


def load_manifest_document(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    try:
        text = p.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(p, str(e)) from e
    try:
        doc = yaml.load(text, Loader=ManifestLoader)  # noqa: S506 - BaseLoader subclass, no object construction
    except yaml.YAMLError as e:
        raise ManifestParseError(p, str(e)) from e
    if doc is None or doc == '':
        return {}
    if not isinstance(doc, dict):
        raise ManifestParseError(p, f'top-level document is {type(doc).__name__}, expected mapping')
    return doc


def _collect_block(out: dict[str, DeclaredVariable], env: Any, source: str) -> None:
    if not isinstance(env, dict):
        return
    for key, value in env.items():
        if not isinstance(key, str) or not is_valid_var_name(key, case_insensitive=True):
            continue
        if key in out:
            continue
        raw = render_value(value)
        out[key] = DeclaredVariable(
            name=key,
            raw_value=raw,
            source=source,
            line_number=None,
            is_external_reference=is_external_reference(raw),
        )


def collect_declarations(doc: dict[str, Any], source: str) -> dict[str, DeclaredVariable]:
    out: dict[str, DeclaredVariable] = {}
    provider = doc.get('provider')
    if isinstance(provider, dict):
        _collect_block(out, provider.get('environment'), source)
    functions = doc.get('functions')
    if isinstance(functions, dict):
        for fname, fconf in functions.items():
            if isinstance(fconf, dict):
                _collect_block(out, fconf.get('environment'), f'{source} (function: {fname})')
    return out


def load_manifest(path: str | Path) -> dict[str, DeclaredVariable]:
    doc = load_manifest_document(path)
    return collect_declarations(doc, str(path))


def parse_manifest(path: str | Path) -> dict[str, DeclaredVariable]:
    """Lenient variant: missing, unreadable or malformed manifests yield {}."""
    p = Path(path)
    if not p.exists():
        return {}
    try:
        return load_manifest(p)
    except (SourceReadError, ManifestParseError) as e:
        logger.warning("%s", e)
        return {}


__all__ = [
    'CF_TAGS',
    'EXTERNAL_REFERENCE_PATTERNS',
    'Intrinsic',
    'ManifestLoader',
    'render_value',
    'is_external_reference',
    'load_manifest_document',
    'collect_declarations',
    'load_manifest',
    'parse_manifest',
]
