import pytest

from configtree.node import NodeType
from configtree.toml import TomlParser


def parse(text):
    return TomlParser().parse(text)


def child(node, key):
    return next(c for c in node.children if c.key == key)


def test_scalar_types_and_values():
    result = parse('title = "demo"\nport = 8080\nratio = 3.14\nenabled = true\n')
    assert result.ok and not result.has_parse_error
    assert [c.key for c in result.root.children] == ["title", "port", "ratio", "enabled"]
    assert [c.type for c in result.root.children] == [
        NodeType.STRING,
        NodeType.INTEGER,
        NodeType.FLOAT,
        NodeType.BOOL,
    ]
    assert child(result.root, "title").scalar == "demo"
    assert child(result.root, "port").scalar == "8080"
    assert child(result.root, "ratio").scalar == "3.140000"
    assert child(result.root, "enabled").scalar == "true"


@pytest.mark.parametrize(
    "literal",
    ["1979-05-27T07:32:00Z", "1979-05-27T00:32:00-07:00", "1979-05-27", "07:32:00"],
)
def test_dates_and_times_keep_their_text(literal):
    node = parse(f"when = {literal}\n").root.children[0]
    assert node.type is NodeType.STRING
    assert node.scalar == literal


def test_source_lines_of_keys_and_tables():
    result = parse("name = 1\n\n[server]\nhost = 2\nport = 3\n")
    root = result.root
    assert root.source_line == 1
    assert child(root, "name").source_line == 1
    server = child(root, "server")
    assert server.type is NodeType.OBJECT
    assert server.source_line == 3
    assert [c.source_line for c in server.children] == [4, 5]


def test_array_of_tables():
    result = parse("[[p]]\nn = 1\n[[p]]\nn = 2\n")
    items = child(result.root, "p")
    assert items.type is NodeType.ARRAY
    assert [c.source_line for c in items.children] == [1, 3]
    assert [c.children[0].scalar for c in items.children] == ["1", "2"]
    assert [c.children[0].source_line for c in items.children] == [2, 4]


def test_sub_table_of_array_of_tables():
    result = parse("[[p]]\nn = 1\n[p.extra]\nk = 2\n")
    first = child(result.root, "p").children[0]
    extra = child(first, "extra")
    assert extra.source_line == 3
    assert child(extra, "k").source_line == 4


def test_multiline_array_elements_have_own_lines():
    arr = parse("arr = [1, 2,\n  3]\n").root.children[0]
    assert [c.scalar for c in arr.children] == ["1", "2", "3"]
    assert [c.source_line for c in arr.children] == [1, 1, 2]


def test_multiline_string_does_not_shift_lines():
    result = parse('s = """\nline\n"""\nn = 1\n')
    assert child(result.root, "s").scalar == "line\n"
    assert child(result.root, "n").source_line == 4


def test_quoted_and_dotted_keys():
    result = parse('"a.b" = 1\nsite."x y" = 2\n')
    assert [c.key for c in result.root.children] == ["a.b", "site"]
    site = child(result.root, "site")
    assert site.children[0].key == "x y"
    assert site.children[0].source_line == 2


def test_inline_table():
    point = parse("point = { x = 1, y = 2 }\n").root.children[0]
    assert point.type is NodeType.OBJECT
    assert [(c.key, c.scalar, c.source_line) for c in point.children] == [
        ("x", "1", 1),
        ("y", "2", 1),
    ]


def test_objects_are_sorted_by_source_line():
    result = parse("[a.b]\nx = 1\n[c]\ny = 2\n[a]\nz = 3\n")

    def check(node):
        if node.type is NodeType.OBJECT:
            lines = [c.source_line for c in node.children]
            assert lines == sorted(lines)
        for c in node.children:
            check(c)

    check(result.root)
    assert {c.key for c in result.root.children} == {"a", "c"}


def test_leading_and_inline_comments_are_attached():
    result = parse("# about port\nport = 8080\nhost = \"h\" # the host\n")
    assert child(result.root, "port").comment == "about port"
    assert child(result.root, "host").comment == "the host"


def test_syntax_error_reports_line():
    result = parse("ok = 1\nbroken = \n")
    assert result.ok
    assert result.has_parse_error
    assert result.err_line == 2
    assert "(at line" not in result.error
    error_node = result.root.children[0]
    assert error_node.key == "PARSE ERROR"
    assert child(error_node, "Line/Byte").scalar == "2"
    assert child(error_node, "Message").scalar == result.error


def test_invalid_utf8_bytes_are_an_error():
    result = TomlParser().parse(b"a = \"\xff\"\n")
    assert result.has_parse_error
    assert result.root.children[0].key == "PARSE ERROR"


def test_bytes_input_matches_text_input():
    text = "[t]\nv = [1, 2]\n"
    from_bytes = TomlParser().parse(text.encode("utf-8"))
    assert from_bytes.root == parse(text).root