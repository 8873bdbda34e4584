import pytest

from envguard.parser.dotenv import (
    load_env_file,
    parse_env_file,
    parse_env_line,
    parse_example_names,
    read_template_lines,
)
from envguard.utils.exceptions import SourceReadError


def test_parse_env_file_line_numbers_and_first_wins(tmp_path):
    p = tmp_path / '.env'
    p.write_text(
        "# database\n"
        "DATABASE_URL=postgres://localhost/db\n"
        "\n"
        "API_KEY='abc 123'\n"
        "export PORT=3000\n"
        "API_KEY=second\n"
        "not a line\n"
        "lower_case=1\n",
        encoding='utf-8',
    )
    out = parse_env_file(p)
    assert list(out) == ['DATABASE_URL', 'API_KEY', 'PORT']
    assert out['DATABASE_URL'].line_number == 2
    assert out['API_KEY'].raw_value == 'abc 123'
    assert out['API_KEY'].line_number == 4
    assert out['PORT'].raw_value == '3000'
    assert all(not v.is_external_reference for v in out.values())
    assert out['PORT'].source == str(p)


def test_inline_comment_stripped_from_unquoted_value():
    assert parse_env_line('FOO=bar # note') == ('FOO', 'bar')
    assert parse_env_line('FOO="bar # kept"') == ('FOO', 'bar # kept')
    assert parse_env_line('FOO=') == ('FOO', '')


def test_quoted_value_followed_by_inline_comment():
    assert parse_env_line('KEY="abc" # note') == ('KEY', 'abc')
    assert parse_env_line("KEY='a # b'   # trailing") == ('KEY', 'a # b')
    assert parse_env_line('KEY="unterminated # x') == ('KEY', '"unterminated')


def test_comment_blank_and_invalid_lines():
    assert parse_env_line('# FOO=bar') is None
    assert parse_env_line('   ') is None
    assert parse_env_line('FOO') is None
    assert parse_env_line('FOO', value_required=False) == ('FOO', '')
    assert parse_env_line('1FOO=x') is None


def test_missing_env_file_is_empty(tmp_path):
    assert parse_env_file(tmp_path / '.env') == {}


def test_load_env_file_raises_on_unreadable(tmp_path):
    with pytest.raises(SourceReadError):
        load_env_file(tmp_path / 'missing' / '.env')


def test_parse_example_names_tolerates_absence(tmp_path):
    assert parse_example_names(tmp_path / '.env.example') == set()


def test_parse_example_names_values_optional(tmp_path):
    p = tmp_path / '.env.example'
    p.write_text("# doc\nFOO=\nBAR=default\nBAZ\n", encoding='utf-8')
    assert parse_example_names(p) == {'FOO', 'BAR', 'BAZ'}


def test_read_template_lines_keeps_positions(tmp_path):
    p = tmp_path / '.env.example'
    p.write_text("# header\nFOO=1\n\n# about bar\nBAR=\n", encoding='utf-8')
    lines = read_template_lines(p)
    assert [ln.text for ln in lines] == ['# header', 'FOO=1', '', '# about bar', 'BAR=']
    assert [ln.name for ln in lines] == [None, 'FOO', None, None, 'BAR']
    assert lines[0].is_comment and not lines[1].is_comment
