from envguard.analyzer.example_gen import HEADER, generate_example_content
from envguard.parser.dotenv import parse_example_names, read_template_lines


def _lines(tmp_path, text):
    p = tmp_path / '.env.example'
    p.write_text(text, encoding='utf-8')
    return read_template_lines(p)


def test_fresh_template_round_trip(tmp_path):
    used = ['DATABASE_URL', 'API_KEY', 'PORT']
    content = generate_example_content(used, [])
    assert content.startswith(HEADER[0] + '\n')
    p = tmp_path / '.env.example'
    p.write_text(content, encoding='utf-8')
    assert parse_example_names(p) == set(used)

    again = generate_example_content(used, read_template_lines(p))
    assert again == content


def test_preserves_comments_and_values_and_drops_stale(tmp_path):
    existing = _lines(
        tmp_path,
        "# Service config\n"
        "API_KEY=changeme\n"
        "# legacy flag\n"
        "OLD_FLAG=1\n"
        "\n"
        "# port\n"
        "PORT=3000\n",
    )
    out = generate_example_content(['PORT', 'API_KEY', 'NEW_VAR'], existing)
    assert out == (
        "# Service config\n"
        "API_KEY=changeme\n"
        "# legacy flag\n"
        "\n"
        "# port\n"
        "PORT=3000\n"
        "\n"
        "NEW_VAR=\n"
    )


def test_second_pass_over_merged_output_is_noop(tmp_path):
    existing = _lines(tmp_path, "# keep me\nA=1\n")
    first = generate_example_content(['A', 'B', 'C'], existing)
    second = generate_example_content(['A', 'B', 'C'], _lines(tmp_path, first))
    assert first == second


def test_new_names_sorted_and_byte_stable():
    a = generate_example_content(['ZED', 'ALPHA', 'MID'], [])
    b = generate_example_content(['MID', 'ZED', 'ALPHA'], [])
    assert a == b
    assert a.splitlines()[-3:] == ['ALPHA=', 'MID=', 'ZED=']


def test_duplicate_documented_entries_keep_first(tmp_path):
    existing = _lines(tmp_path, "A=first\nA=second\n")
    assert generate_example_content(['A'], existing) == "A=first\n"


def test_nothing_used_and_nothing_existing():
    assert generate_example_content([], []) == '\n'.join(HEADER) + '\n'
