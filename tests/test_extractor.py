import re

from envguard.scanner.extractor import RULES, MatcherRule, PatternRule, extract_references, scan_file


def test_dot_access_with_fallback_operators_is_guarded():
    text = """
const a = process.env.FOO || 'x';
const b = process.env.BAR ?? 'y';
const c = process.env.BAZ && start();
const d = process.env.QUX ? 1 : 2;
"""
    assert extract_references(text) == {'FOO': True, 'BAR': True, 'BAZ': True, 'QUX': True}


def test_plain_dot_access_is_bare():
    assert extract_references("const url = process.env.DATABASE_URL;") == {'DATABASE_URL': False}


def test_conditional_check_is_guarded():
    text = """
if (process.env.DEBUG) { log(); }
if ( !process.env.FEATURE_X ) { return; }
"""
    assert extract_references(text) == {'DEBUG': True, 'FEATURE_X': True}


def test_optional_chaining_is_guarded():
    refs = extract_references("const x = process.env?.API_KEY; const y = process.env?.['TOKEN'];")
    assert refs == {'API_KEY': True, 'TOKEN': True}


def test_destructuring_defaults():
    text = "const { STRIPE_SECRET_KEY, REGION = 'us-east-1', PORT: port = 3000 } = process.env;"
    assert extract_references(text) == {
        'STRIPE_SECRET_KEY': False,
        'REGION': True,
        'PORT': True,
    }


def test_destructuring_default_with_comma_in_string():
    text = "const { LIST = 'a,b', OTHER } = process.env;"
    assert extract_references(text) == {'LIST': True, 'OTHER': False}


def test_bracket_access():
    text = """
const a = process.env['SECRET'];
const b = process.env["WITH_DEFAULT"] || 'x';
"""
    assert extract_references(text) == {'SECRET': False, 'WITH_DEFAULT': True}


def test_guarded_never_downgraded_by_later_bare_use():
    text = """
const port = process.env.PORT || 3000;
console.log(process.env.PORT);
const { PORT } = process.env;
"""
    assert extract_references(text) == {'PORT': True}


def test_guarded_upgrade_after_bare_use():
    text = """
console.log(process.env.PORT);
const port = process.env.PORT || 3000;
"""
    assert extract_references(text) == {'PORT': True}


def test_invalid_names_are_discarded():
    text = """
const a = process.env.lowercase;
const b = process.env.MixedCase;
const c = process.env['not-valid'];
const d = process.env[name];
"""
    assert extract_references(text) == {}


def test_extraction_is_idempotent():
    text = "const a = process.env.A || 1; const { B } = process.env; if (process.env.C) {}"
    assert extract_references(text) == extract_references(text)


def test_empty_and_unrelated_text():
    assert extract_references('') == {}
    assert extract_references('const env = { FOO: 1 };') == {}


def test_scan_file_unreadable_returns_empty(tmp_path):
    missing = tmp_path / 'gone.js'
    assert scan_file(missing) == {}

    binary = tmp_path / 'bad.js'
    binary.write_bytes(b'\xff\xfe\x00process.env.FOO')
    assert scan_file(binary) == {}


def test_scan_file_reads_text(tmp_path):
    f = tmp_path / 'handler.js'
    f.write_text("exports.h = () => process.env.TABLE_NAME;\n", encoding='utf-8')
    assert scan_file(f) == {'TABLE_NAME': False}


def test_conditional_check_on_bracket_and_optional_access():
    text = """
if (!process.env['FEATURE_FLAG']) { return; }
if (process.env?.SENTRY_DSN) { init(); }
if ( process.env?.["REGION_OVERRIDE"] ) { use(); }
"""
    assert extract_references(text) == {
        'FEATURE_FLAG': True,
        'SENTRY_DSN': True,
        'REGION_OVERRIDE': True,
    }


def test_destructuring_ignores_comments():
    text = """
const {
  A, // first
  B,
  /* legacy */ C = 'http://localhost', // keeps the url
} = process.env;
"""
    assert extract_references(text) == {'A': False, 'B': False, 'C': True}


def test_destructuring_from_env_property_is_not_a_reference():
    text = "const { length } = process.env.X; const { FOO } = process.env.CONFIG; const { BAR } = process.env['CFG'];"
    refs = extract_references(text)
    assert 'FOO' not in refs
    assert 'BAR' not in refs
    assert refs == {'X': False, 'CONFIG': False, 'CFG': False}


def test_destructuring_with_fallback_object():
    assert extract_references("const { TOKEN } = process.env ?? {};") == {'TOKEN': False}


def test_rule_table_shapes():
    names = [r.name for r in RULES]
    assert names[:4] == ['dot-fallback', 'conditional', 'optional-chain', 'bracket-fallback']
    assert names[-2:] == ['dot-bare', 'bracket-bare']
    for rule in RULES:
        if isinstance(rule, PatternRule):
            assert isinstance(rule.pattern, re.Pattern)
        else:
            assert isinstance(rule, MatcherRule)
            assert rule.name == 'destructuring'
    assert list(PatternRule('x', re.compile(r'process\.env\.([A-Z]+)'), True).find('process.env.AB'))[0].guarded
