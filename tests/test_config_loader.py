import json

import pytest

from envguard.config.loader import DEFAULT_CONFIG, EnvGuardConfig, config_from_mapping, find_config_file, load_config
from envguard.utils.exceptions import ConfigError


def test_defaults_when_no_config(tmp_path):
    res = load_config(tmp_path)
    assert res.config == DEFAULT_CONFIG
    assert res.path is None
    assert res.warnings == []
    assert DEFAULT_CONFIG.detect_fallbacks is True
    assert DEFAULT_CONFIG.strict is False


def test_loads_rc_file(tmp_path):
    (tmp_path / '.envguardrc.json').write_text(json.dumps({
        'ignoreVars': ['MY_VAR'],
        'exclude': ['coverage'],
        'strict': True,
        'detectFallbacks': False,
    }), encoding='utf-8')
    res = load_config(tmp_path)
    assert res.config == EnvGuardConfig(
        ignore_vars=frozenset({'MY_VAR'}),
        exclude=('coverage',),
        strict=True,
        detect_fallbacks=False,
    )
    assert res.path == tmp_path / '.envguardrc.json'


def test_searches_parent_directories(tmp_path):
    (tmp_path / 'envguard.config.json').write_text('{"strict": true}', encoding='utf-8')
    nested = tmp_path / 'a' / 'b'
    nested.mkdir(parents=True)
    assert find_config_file(nested) == tmp_path / 'envguard.config.json'
    assert load_config(nested).config.strict is True


def test_file_name_priority(tmp_path):
    (tmp_path / '.envguardrc').write_text('{"strict": false}', encoding='utf-8')
    (tmp_path / '.envguardrc.json').write_text('{"strict": true}', encoding='utf-8')
    assert load_config(tmp_path).config.strict is True


def test_package_json_section(tmp_path):
    (tmp_path / 'package.json').write_text(json.dumps({
        'name': 'demo',
        'envguard': {'ignoreVars': ['SENTRY_DSN']},
    }), encoding='utf-8')
    res = load_config(tmp_path)
    assert res.config.ignore_vars == frozenset({'SENTRY_DSN'})
    assert res.path == tmp_path / 'package.json'


def test_package_json_without_section(tmp_path):
    (tmp_path / 'package.json').write_text('{"name": "demo"}', encoding='utf-8')
    assert load_config(tmp_path).config == DEFAULT_CONFIG


def test_malformed_config_falls_back_with_warning(tmp_path, caplog):
    (tmp_path / '.envguardrc.json').write_text('{not json', encoding='utf-8')
    res = load_config(tmp_path)
    assert res.config == DEFAULT_CONFIG
    assert len(res.warnings) == 1
    assert 'using defaults' in res.warnings[0]
    assert any('Failed to parse config file' in r.message for r in caplog.records)


def test_wrong_types_fall_back(tmp_path):
    (tmp_path / '.envguardrc.json').write_text('{"ignoreVars": "NOT_A_LIST"}', encoding='utf-8')
    res = load_config(tmp_path)
    assert res.config == DEFAULT_CONFIG
    assert res.warnings


def test_overrides_merge_and_do_not_mutate():
    base = EnvGuardConfig(ignore_vars=frozenset({'A'}), exclude=('tmp',))
    merged = base.with_overrides(strict=True, exclude=['tmp', 'out'], ignore_vars=['B'])
    assert merged.strict is True
    assert merged.detect_fallbacks is True
    assert merged.exclude == ('tmp', 'out')
    assert merged.ignore_vars == frozenset({'A', 'B'})
    assert base.exclude == ('tmp',)
    assert base.with_overrides(detect_fallbacks=False).detect_fallbacks is False
    assert base.with_overrides().strict is False


def test_scan_exclude_includes_defaults():
    assert EnvGuardConfig(exclude=('coverage', 'dist')).scan_exclude == ('dist', 'build', 'coverage')


@pytest.mark.parametrize('raw,where', [
    ({'ignoreVars': ['OK', 3]}, 'ignoreVars/1'),
    ({'exclude': 'coverage'}, 'exclude'),
    ({'strict': 'yes'}, 'strict'),
    ({'detectFallbacks': 1}, 'detectFallbacks'),
    (['strict'], '<root>'),
])
def test_schema_violations_raise_config_error(raw, where):
    with pytest.raises(ConfigError, match=f'path: {where}'):
        config_from_mapping(raw)


def test_schema_allows_unknown_keys_and_null_lists():
    cfg = config_from_mapping({'ignoreVars': None, 'futureOption': {'x': 1}, 'strict': True})
    assert cfg == EnvGuardConfig(strict=True)


def test_package_json_schema_violation_falls_back(tmp_path):
    (tmp_path / 'package.json').write_text(json.dumps({
        'envguard': {'detectFallbacks': 'no'},
    }), encoding='utf-8')
    res = load_config(tmp_path)
    assert res.config == DEFAULT_CONFIG
    assert res.path == tmp_path / 'package.json'
    assert 'detectFallbacks' in res.warnings[0]
