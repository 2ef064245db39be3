from configtree.node import NodeType
from configtree.plist import PlistParser

SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
  <key>Name</key>
  <string>Demo</string>
  <key>Count</key>
  <integer>3</integer>
  <key>Ratio</key>
  <real>0.5</real>
  <key>Enabled</key>
  <true/>
  <key>Hidden</key>
  <false/>
  <key>Created</key>
  <date>2024-01-02T03:04:05Z</date>
  <key>Blob</key>
  <data>AAEC</data>
  <key>Items</key>
  <array>
    <string>a</string>
    <integer>1</integer>
  </array>
  <key>Nested</key>
  <dict>
    <key>Inner</key>
    <string>x</string>
  </dict>
</dict>
</plist>
"""


def parse(data):
    return PlistParser().parse(data)


def test_sample_document_keys_and_types():
    result = parse(SAMPLE)
    assert result.ok
    assert not result.has_parse_error
    assert result.error_count == 0
    root = result.root
    assert root.type is NodeType.OBJECT
    assert [c.key for c in root.children] == [
        "Name", "Count", "Ratio", "Enabled", "Hidden", "Created", "Blob", "Items", "Nested",
    ]
    types = [c.type for c in root.children]
    assert types == [
        NodeType.STRING, NodeType.INTEGER, NodeType.FLOAT, NodeType.BOOL, NodeType.BOOL,
        NodeType.STRING, NodeType.STRING, NodeType.ARRAY, NodeType.OBJECT,
    ]


def test_sample_document_scalars():
    root = parse(SAMPLE).root
    scalars = {c.key: c.scalar for c in root.children if c.is_leaf()}
    assert scalars == {
        "Name": "Demo",
        "Count": "3",
        "Ratio": "0.5",
        "Enabled": "true",
        "Hidden": "false",
        "Created": "2024-01-02T03:04:05Z",
        "Blob": "AAEC",
    }
    items = root.children[7]
    assert [(c.type, c.scalar) for c in items.children] == [
        (NodeType.STRING, "a"),
        (NodeType.INTEGER, "1"),
    ]
    nested = root.children[8]
    assert [(c.key, c.scalar) for c in nested.children] == [("Inner", "x")]


def test_root_comment_records_version():
    assert parse(SAMPLE).root.comment == 'plist version="1.0"'
    bare = parse("<plist><string>v</string></plist>")
    assert bare.root.comment == 'plist version=""'
    assert bare.root.scalar == "v"


def test_bytes_input_matches_text():
    assert parse(SAMPLE.encode("utf-8")).root == parse(SAMPLE).root


def test_binary_plist_is_reported():
    result = parse(b"bplist00\x00\x01\x02")
    assert result.ok
    assert result.has_parse_error
    assert result.error == "Binary plist is not supported"
    message = result.root.children[0].children[0]
    assert message.key == "Message"
    assert message.scalar.startswith("Binary plist is not supported. Convert with:")


def test_missing_plist_element_is_empty():
    result = parse("<root/>")
    assert result.has_parse_error
    assert result.error == "Empty plist"


def test_plist_without_value_is_empty():
    result = parse('<plist version="1.0"></plist>')
    assert result.has_parse_error
    assert result.error == "Empty plist"
    assert result.root.children[0].key == "PARSE ERROR"


def test_missing_value_for_key():
    text = "<plist>\n<dict>\n  <key>orphan</key>\n</dict>\n</plist>"
    result = parse(text)
    assert result.ok
    assert result.has_parse_error
    assert result.error_count == 1
    assert result.error == 'Missing value for key "orphan"'
    assert result.err_line == 3
    node = result.root.children[0]
    assert node.key == "orphan"
    assert node.children[0].key == "PARSE ERROR"


def test_unpaired_value_element():
    result = parse("<plist><dict><string>lonely</string></dict></plist>")
    assert result.error == "Value element without preceding <key>"
    assert result.root.children[0].key == "<unpaired>"
    assert result.err_line == 1


def test_unsupported_element():
    result = parse("<plist><dict><key>k</key><foo/></dict></plist>")
    node = result.root.children[0]
    assert (node.key, node.type, node.scalar) == ("k", NodeType.STRING, "foo (unsupported)")
    assert result.has_parse_error
    assert result.error == "Unsupported plist element: foo"
    assert result.err_line == -1


def test_errors_are_counted_and_first_is_kept():
    result = parse(
        "<plist><dict><string>lonely</string><key>k</key><foo/></dict></plist>"
    )
    assert result.error_count == 2
    assert result.error == "Value element without preceding <key>"


def test_comments_are_ignored():
    result = parse("<plist><dict><!-- c --><key>a</key><string>b</string></dict></plist>")
    assert [(c.key, c.scalar) for c in result.root.children] == [("a", "b")]


def test_malformed_xml_reports_line():
    result = parse("<plist>\n<dict>\n</plist>")
    assert result.has_parse_error
    assert result.err_line == 3
    assert result.root.children[0].children[0].scalar == result.error