import pytest

from configtree.jsonc import JsoncParser, estimate_error_line, strip_comments
from configtree.node import NodeType


def test_strip_line_comment_keeps_length():
    src = '{"a": 1} // x'
    clean = strip_comments(src)
    assert clean == '{"a": 1}' + " " * 4
    assert len(clean) == len(src)


def test_strip_block_comment_keeps_newlines():
    src = '{\n/* one\ntwo */ "a": 1\n}'
    clean = strip_comments(src)
    assert len(clean) == len(src)
    assert clean.count("\n") == src.count("\n")
    assert "one" not in clean and "two" not in clean
    assert '"a": 1' in clean


def test_strip_leaves_strings_alone():
    src = '{"url": "http://host/#frag", "q": "say \\"hi\\" // no"}'
    assert strip_comments(src) == src


def test_strip_hash_comment():
    clean = strip_comments('{"a": 1} # note')
    assert "note" not in clean
    assert clean.startswith('{"a": 1}')


def test_estimate_error_line_trailing_comma():
    assert estimate_error_line('{\n"a": 1,\n}') == 3


def test_estimate_error_line_defaults_to_last_line():
    data = '{\n"a" 1\n}'
    assert estimate_error_line(data) == data.count("\n") + 1


def test_parse_keeps_key_order_and_types():
    result = JsoncParser().parse('{"z": 1, "a": 2.5, "m": "s", "b": true, "n": null, "l": [1]}')
    assert result.ok and not result.has_parse_error
    root = result.root
    assert root.type is NodeType.OBJECT
    assert [c.key for c in root.children] == ["z", "a", "m", "b", "n", "l"]
    assert [c.type for c in root.children] == [
        NodeType.INTEGER,
        NodeType.FLOAT,
        NodeType.STRING,
        NodeType.BOOL,
        NodeType.NULL,
        NodeType.ARRAY,
    ]
    assert root.children[0].scalar == "1"
    assert root.children[2].scalar == "s"
    assert root.children[3].scalar == "true"


def test_parse_attaches_leading_and_inline_comments():
    data = '{\n  // the name\n  "name": "x",\n  "port": 80 // tcp\n}'
    root = JsoncParser().parse(data).root
    comments = {c.key: c.comment for c in root.children}
    assert comments == {"name": "the name", "port": "tcp"}


def test_parse_block_comment_before_key():
    data = '{\n  /* multi\n     line */\n  "a": 1\n}'
    root = JsoncParser().parse(data).root
    assert root.children[0].key == "a"
    assert root.children[0].comment.startswith("multi")
    assert root.children[0].comment.endswith("line")


def test_parse_array_element_comment():
    data = '{"items": [\n  1, // one\n  2\n]}'
    root = JsoncParser().parse(data).root
    items = root.children[0]
    assert items.key == "items"
    assert items.children[0].comment == "one"
    assert items.children[1].comment == ""


def test_parse_hash_comments():
    data = '# header\n{"a": 1}'
    result = JsoncParser().parse(data)
    assert not result.has_parse_error
    assert result.root.children[0].scalar == "1"


def test_parse_bytes_input():
    result = JsoncParser().parse('{"k": "v"}'.encode())
    assert result.root.children[0].scalar == "v"


def test_invalid_syntax_gives_error_tree():
    result = JsoncParser().parse('{"a": 1,}')
    assert result.ok
    assert result.has_parse_error
    assert result.error == "Invalid JSONC syntax"
    assert result.err_line == 1
    error_node = result.root.children[0]
    assert error_node.key == "PARSE ERROR"
    assert error_node.children[0].scalar == "Invalid JSONC syntax"


@pytest.mark.parametrize("data", ["", '{"a": NaN}', "[Infinity]", '{"a": 1'])
def test_rejected_documents(data):
    result = JsoncParser().parse(data)
    assert result.has_parse_error
    assert result.error == "Invalid JSONC syntax"


def test_duplicate_keys_keep_last_value():
    root = JsoncParser().parse('{"a": 1, "b": 2, "a": 3}').root
    assert [(c.key, c.scalar) for c in root.children] == [("a", "3"), ("b", "2")]